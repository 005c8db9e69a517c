"""
Shared fakes for the projectseed tests.

FakeRepos / FakeProjects stand in for RepoClient / ProjectClient and record
every call, so tests can assert on what would have been sent to gh.
"""

import itertools
import logging

import pytest

from projectseed.catalog import FieldKind
from projectseed.errors import GhError
from projectseed.gh import Issue, Project


class FakeRepos:
    def __init__(self, existing=(), login="octocat", fail_issue_titles=()):
        self.existing = set(existing)
        self.login = login
        self.fail_issue_titles = set(fail_issue_titles)
        self.created_repos = []
        self.issues = []
        self._numbers = itertools.count(1)

    def current_user(self):
        return self.login

    def repo_exists(self, full_name):
        return full_name in self.existing

    def create_repo(self, full_name, visibility="public", description=""):
        self.created_repos.append((full_name, visibility, description))
        self.existing.add(full_name)
        return f"https://github.com/{full_name}"

    def create_issue(self, full_name, title, body):
        if title in self.fail_issue_titles:
            raise GhError(("issue", "create"), 1, "HTTP 422")
        number = next(self._numbers)
        self.issues.append((full_name, title, body))
        return Issue(number=number, url=f"https://github.com/{full_name}/issues/{number}")


class FakeProjects:
    """A project board that remembers fields created on it."""

    def __init__(self, fields=None, projects=(), fail_fields=(), fail_add=False,
                 fail_edit_fields=(), payload=None):
        self.fields = list(fields or [])
        self.projects = list(projects)
        self.fail_fields = set(fail_fields)
        self.fail_add = fail_add
        self.fail_edit_fields = set(fail_edit_fields)
        self.payload = payload
        self.created_fields = []
        self.created_projects = []
        self.items = []
        self.edits = []
        self._ids = itertools.count(1)

    def create_project(self, title):
        project = Project(number=len(self.projects) + 1, id=f"PVT_{title[:3]}", title=title)
        self.projects.append(project)
        self.created_projects.append(title)
        return project

    def list_projects(self):
        return list(self.projects)

    def view_project(self, number):
        for p in self.projects:
            if p.number == number:
                return Project(number=p.number, id=p.id or f"PVT_{number}", title=p.title)
        raise GhError(("project", "view"), 1, "not found")

    def list_fields(self, number):
        if self.payload is not None:
            return self.payload
        return {"fields": list(self.fields), "totalCount": len(self.fields)}

    def create_field(self, number, name, kind, options=()):
        if name in self.fail_fields:
            raise GhError(("project", "field-create"), 1, "name already taken")
        self.created_fields.append((name, kind, tuple(options)))
        descriptor = {"id": f"PVTF_{name}", "name": name,
                      "type": "ProjectV2SingleSelectField" if kind == FieldKind.SINGLE_SELECT
                      else "ProjectV2Field"}
        if options:
            descriptor["options"] = [{"id": f"opt_{o.lower()}", "name": o} for o in options]
        self.fields.append(descriptor)
        self.payload = None

    def add_item(self, number, url):
        if self.fail_add:
            raise GhError(("project", "item-add"), 1, "forbidden")
        item_id = f"PVTI_{next(self._ids)}"
        self.items.append((number, url, item_id))
        return item_id

    def edit_item(self, project_id, item_id, field_id, kind, value):
        if field_id in self.fail_edit_fields:
            raise GhError(("project", "item-edit"), 1, "boom")
        self.edits.append((item_id, field_id, str(kind), value))


def descriptor(name, type_="ProjectV2Field", options=None, id_=None):
    d = {"id": id_ or f"PVTF_{name}", "name": name, "type": type_}
    if options is not None:
        d["options"] = [{"id": f"opt_{o.lower()}", "name": o} for o in options]
    return d


def no_sleep(_seconds):
    pass


@pytest.fixture(autouse=True)
def _reset_logger():
    """cli.main() detaches the package logger from root; undo that for caplog."""
    yield
    logger = logging.getLogger("projectseed")
    logger.handlers[:] = []
    logger.setLevel(logging.NOTSET)
    logger.propagate = True


@pytest.fixture
def repos():
    return FakeRepos()


@pytest.fixture
def projects():
    return FakeProjects()


@pytest.fixture
def project():
    return Project(number=7, id="PVT_kw7", title="Board")
