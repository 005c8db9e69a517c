"""
ui — Terminal UI primitives for projectseed.

Colours, the coloured log formatter, prompts and pickers.
"""

import logging
import sys

# ── Colour constants ─────────────────────────────────────────────────────

CYAN    = "\033[36m"
BOLD    = "\033[1m"
DIM     = "\033[2m"
GREEN   = "\033[32m"
YELLOW  = "\033[33m"
RED     = "\033[31m"
RESET   = "\033[0m"

BACK = "__BACK__"
QUIT = "__QUIT__"


# ── Screen helpers ───────────────────────────────────────────────────────

def banner():
    print(f"""
{BOLD}{CYAN}  ┌──────────────────────────────────────────────┐
  │             🌱  projectseed                   │
  │     Repository + Project board from a CSV     │
  └──────────────────────────────────────────────┘{RESET}
""")


def rule(colour=GREEN, width=41):
    print(f"{colour}{'=' * width}{RESET}")


# ── Logging ──────────────────────────────────────────────────────────────

class ColourFormatter(logging.Formatter):
    """Paint records the way the console messages look.

    Records logged with ``extra={"ok": True}`` are success lines (green).
    """

    _LEVEL_COLOURS = {
        logging.DEBUG: DIM,
        logging.WARNING: YELLOW,
        logging.ERROR: RED,
        logging.CRITICAL: RED,
    }
    _ICONS = {logging.WARNING: "⚠ ", logging.ERROR: "❌ ", logging.CRITICAL: "❌ "}

    def __init__(self, colour=True):
        super().__init__("%(message)s")
        self.colour = colour

    def format(self, record):
        msg = super().format(record)
        if getattr(record, "ok", False):
            icon, colour = "✅ ", GREEN
        else:
            icon = self._ICONS.get(record.levelno, "")
            colour = self._LEVEL_COLOURS.get(record.levelno, "")
        if not self.colour or not colour:
            return f"  {icon}{msg}"
        return f"  {colour}{icon}{msg}{RESET}"


def setup_logging(verbose=False, stream=None):
    stream = stream or sys.stderr
    handler = logging.StreamHandler(stream)
    handler.setFormatter(ColourFormatter(colour=getattr(stream, "isatty", lambda: False)()))
    logger = logging.getLogger("projectseed")
    logger.handlers[:] = [handler]
    logger.setLevel(logging.DEBUG if verbose else logging.INFO)
    logger.propagate = False
    return logger


# ── Input primitives ─────────────────────────────────────────────────────

def prompt(text, default=None):
    """Prompt for text input. Returns BACK on 'b', QUIT on 'q'."""
    suffix = f" {DIM}[{default}]{RESET}" if default else ""
    try:
        raw = input(f"  {CYAN}▸{RESET} {text}{suffix}: ").strip()
    except (EOFError, KeyboardInterrupt):
        return QUIT
    if raw.lower() == "q":
        return QUIT
    if raw.lower() == "b":
        return BACK
    return raw if raw else default


def pick_one(title, options):
    """
    Display numbered options and return the chosen one, or QUIT.
    A name prefix is accepted as well as a number.
    """
    keys = list(options)
    print(f"  {BOLD}{title}{RESET}\n")
    for i, k in enumerate(keys, 1):
        print(f"    {CYAN}{i:>2}{RESET}  {k}")
    print()

    while True:
        raw = prompt("Choose")
        if raw == QUIT:
            return QUIT
        try:
            idx = int(raw) - 1
            if 0 <= idx < len(keys):
                return keys[idx]
        except (ValueError, TypeError):
            if raw and raw != BACK:
                lower = raw.lower()
                for k in keys:
                    if k.lower().startswith(lower):
                        return k
        print(f"    {DIM}Enter a number (1-{len(keys)}) or name prefix{RESET}")
