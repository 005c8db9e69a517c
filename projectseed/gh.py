"""
gh — GitHub CLI runner and the typed clients built on it.

RepoClient talks to repositories and issues, ProjectClient to a Projects (v2)
board.  Both hand gh an argv list (no shell) and either return structured
data or raise GhError.
"""

import json
import logging
import re
import subprocess
from dataclasses import dataclass

from .catalog import FieldKind
from .errors import GhError

log = logging.getLogger(__name__)


# ── Low-level gh CLI ─────────────────────────────────────────────────────

def gh(*args, json_output=False):
    cmd = ["gh"] + [str(a) for a in args]
    log.debug("$ %s", " ".join(cmd))
    try:
        r = subprocess.run(cmd, capture_output=True, text=True)
    except OSError as exc:
        raise GhError(args, 127, str(exc)) from exc
    if r.returncode != 0:
        raise GhError(args, r.returncode, r.stderr)
    if json_output:
        try:
            return json.loads(r.stdout)
        except ValueError as exc:
            raise GhError(args, r.returncode, f"unparseable JSON output: {exc}") from exc
    return r.stdout.strip()


def gh_succeeds(*args):
    """True when the gh command exits 0; output is discarded."""
    try:
        gh(*args)
    except GhError as exc:
        log.debug("%s", exc)
        return False
    return True


# ── Result types ─────────────────────────────────────────────────────────

@dataclass(frozen=True)
class Issue:
    number: int
    url: str


@dataclass(frozen=True)
class Project:
    number: int
    id: str
    title: str = ""
    url: str = ""

    @classmethod
    def from_json(cls, data):
        return cls(
            number=int(data["number"]),
            id=data.get("id") or "",
            title=data.get("title") or "",
            url=data.get("url") or "",
        )


_ISSUE_URL = re.compile(r"(https://\S+/issues/(\d+))\s*$")


# ── Source control / issues ──────────────────────────────────────────────

class RepoClient:
    def __init__(self, run=gh, succeeds=gh_succeeds):
        self._gh = run
        self._ok = succeeds

    def current_user(self):
        login = self._gh("api", "user", "--jq", ".login")
        if not login:
            raise GhError(("api", "user"), 0, "empty login")
        return login

    def repo_exists(self, full_name):
        return self._ok("repo", "view", full_name, "--json", "name")

    def create_repo(self, full_name, visibility="public", description=""):
        args = ["repo", "create", full_name, f"--{visibility}"]
        if description:
            args += ["--description", description]
        return self._gh(*args)

    def create_issue(self, full_name, title, body):
        out = self._gh("issue", "create", "--repo", full_name,
                       "--title", title, "--body", body or " ")
        m = _ISSUE_URL.search(out or "")
        if not m:
            raise GhError(("issue", "create"), 0, f"no issue URL in output: {out!r}")
        return Issue(number=int(m.group(2)), url=m.group(1))


# ── Project board ────────────────────────────────────────────────────────

_EDIT_FLAGS = {
    FieldKind.SINGLE_SELECT: "--single-select-option-id",
    FieldKind.NUMBER: "--number",
    FieldKind.DATE: "--date",
    FieldKind.TEXT: "--text",
}


class ProjectClient:
    """Project commands for one owner (an org login, or ``@me``)."""

    def __init__(self, owner, run=gh):
        self.owner = owner
        self._gh = run

    def create_project(self, title):
        data = self._gh("project", "create", "--owner", self.owner,
                        "--title", title, "--format", "json", json_output=True)
        return Project.from_json(data)

    def list_projects(self):
        data = self._gh("project", "list", "--owner", self.owner,
                        "--limit", "100", "--format", "json", json_output=True)
        if isinstance(data, dict):
            data = data.get("projects") or []
        return [Project.from_json(p) for p in data if isinstance(p, dict) and "number" in p]

    def view_project(self, number):
        data = self._gh("project", "view", str(number), "--owner", self.owner,
                        "--format", "json", json_output=True)
        return Project.from_json(data)

    def list_fields(self, number):
        """Raw field-list payload; shape is left to schema.normalize."""
        return self._gh("project", "field-list", str(number), "--owner", self.owner,
                        "--format", "json", json_output=True)

    def create_field(self, number, name, kind, options=()):
        args = ["project", "field-create", str(number), "--owner", self.owner,
                "--name", name, "--data-type", str(kind)]
        if kind == FieldKind.SINGLE_SELECT and options:
            args += ["--single-select-options", ",".join(options)]
        return self._gh(*args)

    def add_item(self, number, url):
        data = self._gh("project", "item-add", str(number), "--owner", self.owner,
                        "--url", url, "--format", "json", json_output=True)
        item_id = data.get("id") if isinstance(data, dict) else None
        if not item_id:
            raise GhError(("project", "item-add"), 0, f"no item id in {data!r}")
        return item_id

    def edit_item(self, project_id, item_id, field_id, kind, value):
        flag = _EDIT_FLAGS.get(kind)
        if flag is None:
            raise ValueError(f"cannot write a {kind} field")
        return self._gh("project", "item-edit", "--id", item_id,
                        "--project-id", project_id, "--field-id", field_id,
                        flag, str(value))
