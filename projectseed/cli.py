"""
cli — Argparse entry point, exit codes and the completion summary.
"""

import argparse
import logging
import sys
import textwrap

from .config import load_settings
from .conflicts import STRATEGIES
from .errors import Cancelled, GhError, ImportAborted, PreconditionError
from .runner import Seeder
from .ui import GREEN, YELLOW, RESET, banner, rule, setup_logging

log = logging.getLogger("projectseed")

EXIT_OK = 0
EXIT_FAILED = 1
EXIT_CANCELLED = 3


def build_parser():
    parser = argparse.ArgumentParser(
        prog="projectseed",
        description="Create a GitHub repository and Projects board, then import issues from a CSV.",
        formatter_class=argparse.RawDescriptionHelpFormatter,
        epilog=textwrap.dedent("""\
            Flags override .projectseed/config.json, which overrides the defaults.

            Example:
              projectseed --repo demo-board --project "Demo Board" \\
                --csv issues.csv --scope org --org my-org --on-conflict reuse
        """),
    )
    parser.add_argument("--repo", help="repository name (without owner)")
    parser.add_argument("--project", help="project board title")
    parser.add_argument("--csv", help="CSV file with Title and Description columns")
    parser.add_argument("--scope", choices=["user", "org"])
    parser.add_argument("--org", help="organisation login (required with --scope org)")
    parser.add_argument("--visibility", choices=["public", "private", "internal"])
    parser.add_argument("--description", help="repository description")
    parser.add_argument("--on-conflict", choices=list(STRATEGIES),
                        help="what to do when the repository or project exists "
                             "(default: ask on a terminal, otherwise cancel)")
    parser.add_argument("--config", help="path to a JSON config file")
    parser.add_argument("-v", "--verbose", action="store_true", help="show gh commands")
    return parser


def print_summary(report):
    rule()
    print(f"{GREEN}Import complete.{RESET}")
    rule()
    print(f"{YELLOW}Project: {report.project_url}{RESET}")
    print(f"{YELLOW}Repository: {report.repo_url}{RESET}")
    if report.fields_created:
        print(f"Fields created: {', '.join(sorted(report.fields_created))}")
    print(f"Issues imported: {len(report.results)} "
          f"({len(report.succeeded)} complete, {len(report.partial)} with field errors)")
    for r in report.partial:
        print(f"  {YELLOW}#{r.issue.number} {r.title}: {', '.join(r.failed)}{RESET}")
    rule()


def main(argv=None):
    args = build_parser().parse_args(argv)
    setup_logging(args.verbose)

    overrides = {
        "repo": args.repo,
        "project": args.project,
        "csv": args.csv,
        "scope": args.scope,
        "org": args.org,
        "visibility": args.visibility,
        "description": args.description,
    }
    mode = args.on_conflict or ("ask" if sys.stdin.isatty() else "cancel")

    try:
        settings = load_settings(overrides, config_path=args.config)
        if mode == "ask":
            banner()
        report = Seeder(settings, strategy=STRATEGIES[mode]()).run()
    except PreconditionError as exc:
        log.error("Error: %s", exc)
        return EXIT_FAILED
    except Cancelled as exc:
        log.warning("%s Cancelled.", exc)
        return EXIT_CANCELLED
    except ImportAborted as exc:
        log.error("Import aborted: %s", exc)
        return EXIT_FAILED
    except GhError as exc:
        log.error("gh error: %s", exc)
        return EXIT_FAILED

    print_summary(report)
    return EXIT_OK
