"""
conflicts — What to do when the repository or project already exists.

A strategy is asked once per conflict and answers reuse, rename or cancel.
"""

import enum
from dataclasses import dataclass

from .ui import BOLD, RESET, YELLOW, BACK, QUIT, pick_one, prompt


class Choice(enum.Enum):
    REUSE = "reuse"
    RENAME = "rename"
    CANCEL = "cancel"


@dataclass(frozen=True)
class Decision:
    choice: Choice
    new_name: str = ""


class ConflictStrategy:
    def resolve(self, kind, name):
        """`kind` is "repository" or "project"; returns a Decision."""
        raise NotImplementedError


class AutoAccept(ConflictStrategy):
    def resolve(self, kind, name):
        return Decision(Choice.REUSE)


class AutoReject(ConflictStrategy):
    def resolve(self, kind, name):
        return Decision(Choice.CANCEL)


class Interactive(ConflictStrategy):
    _LABELS = {
        "Reuse it": Choice.REUSE,
        "Use a different name": Choice.RENAME,
        "Cancel": Choice.CANCEL,
    }

    def resolve(self, kind, name):
        print(f"\n  {YELLOW}The {kind} '{name}' already exists.{RESET}\n")
        picked = pick_one(f"{BOLD}What should happen?{RESET}", self._LABELS)
        if picked == QUIT:
            return Decision(Choice.CANCEL)
        choice = self._LABELS[picked]
        if choice is not Choice.RENAME:
            return Decision(choice)

        while True:
            raw = prompt(f"New {kind} name")
            if raw == QUIT:
                return Decision(Choice.CANCEL)
            if raw and raw != BACK and raw.strip() != name:
                return Decision(Choice.RENAME, raw.strip())


STRATEGIES = {
    "ask": Interactive,
    "reuse": AutoAccept,
    "cancel": AutoReject,
}
