"""
Tests for projectseed.runner: preflight and the whole seeding sequence.
"""

import pytest

from projectseed.catalog import CATALOG, FieldKind
from projectseed.config import Settings
from projectseed.conflicts import AutoAccept, ConflictStrategy, Choice, Decision
from projectseed.errors import Cancelled, CsvError, GhError, ImportAborted, PreconditionError
from projectseed.gh import Project
from projectseed.runner import Seeder, preflight

from conftest import FakeProjects, FakeRepos, descriptor, no_sleep

CSV = (
    "Title,Description,Priority,Status,EstimatedHours,DueDate,Team\n"
    '"Fix bug","desc","High","Todo",8,"2025-09-01","Backend"\n'
)


@pytest.fixture
def csv_path(tmp_path):
    path = tmp_path / "issues.csv"
    path.write_text(CSV, encoding="utf-8")
    return str(path)


def _settings(csv_path, **kw):
    base = dict(repo="demo", project="Board", csv=csv_path, repo_delay=0,
                field_delay=0, row_delay=0)
    base.update(kw)
    return Settings(**base)


def _seeder(settings, repos=None, projects=None, strategy=None):
    return Seeder(settings, repos=repos or FakeRepos(), projects=projects or FakeProjects(),
                  strategy=strategy, sleep=no_sleep,
                  which=lambda name: f"/usr/bin/{name}", succeeds=lambda *a: True)


class Scripted(ConflictStrategy):
    def __init__(self, *decisions):
        self.decisions = list(decisions)
        self.asked = []

    def resolve(self, kind, name):
        self.asked.append((kind, name))
        return self.decisions.pop(0)


# ─────────────────────────────────────────────────────────────────────────────
# 1. preflight
# ─────────────────────────────────────────────────────────────────────────────

class TestPreflight:
    def test_missing_gh(self, csv_path):
        with pytest.raises(PreconditionError, match="not installed"):
            preflight(_settings(csv_path), which=lambda name: None)

    def test_not_authenticated(self, csv_path):
        with pytest.raises(PreconditionError, match="gh auth login"):
            preflight(_settings(csv_path), which=lambda n: n, succeeds=lambda *a: False)

    def test_missing_csv(self, tmp_path):
        with pytest.raises(CsvError):
            preflight(_settings(str(tmp_path / "x.csv")), which=lambda n: n,
                      succeeds=lambda *a: True)

    def test_returns_rows(self, csv_path):
        headers, rows = preflight(_settings(csv_path), which=lambda n: n,
                                  succeeds=lambda *a: True)
        assert "Team" in headers and len(rows) == 1

    def test_nothing_remote_happens_before_preflight_passes(self, tmp_path):
        repos, projects = FakeRepos(), FakeProjects()
        seeder = _seeder(_settings(str(tmp_path / "missing.csv")), repos, projects)
        with pytest.raises(CsvError):
            seeder.run()
        assert repos.created_repos == [] and projects.created_projects == []


# ─────────────────────────────────────────────────────────────────────────────
# 2. Provisioning
# ─────────────────────────────────────────────────────────────────────────────

class TestEnsureRepository:
    def test_creates_under_user(self, csv_path):
        repos = FakeRepos()
        seeder = _seeder(_settings(csv_path, visibility="private"), repos)
        assert seeder.ensure_repository(seeder.resolve_owner()) == "octocat/demo"
        assert repos.created_repos == [("octocat/demo", "private", "")]

    def test_org_owner(self, csv_path):
        seeder = _seeder(_settings(csv_path, scope="org", org="acme"))
        assert seeder.resolve_owner() == "acme"

    def test_existing_cancel_by_default(self, csv_path):
        seeder = _seeder(_settings(csv_path), FakeRepos(existing={"octocat/demo"}))
        with pytest.raises(Cancelled):
            seeder.ensure_repository("octocat")

    def test_existing_reuse(self, csv_path):
        repos = FakeRepos(existing={"octocat/demo"})
        seeder = _seeder(_settings(csv_path), repos, strategy=AutoAccept())
        assert seeder.ensure_repository("octocat") == "octocat/demo"
        assert repos.created_repos == []

    def test_rename_rechecks(self, csv_path):
        repos = FakeRepos(existing={"octocat/demo", "octocat/demo2"})
        strategy = Scripted(Decision(Choice.RENAME, "demo2"), Decision(Choice.RENAME, "demo3"))
        seeder = _seeder(_settings(csv_path), repos, strategy=strategy)
        assert seeder.ensure_repository("octocat") == "octocat/demo3"
        assert [n for _, n in strategy.asked] == ["octocat/demo", "octocat/demo2"]


class TestEnsureProject:
    def test_creates(self, csv_path):
        projects = FakeProjects()
        project = _seeder(_settings(csv_path), projects=projects).ensure_project()
        assert projects.created_projects == ["Board"]
        assert project.id

    def test_reuse_resolves_missing_id(self, csv_path):
        projects = FakeProjects(projects=[Project(number=4, id="", title="Board")])
        project = _seeder(_settings(csv_path), projects=projects,
                          strategy=AutoAccept()).ensure_project()
        assert (project.number, project.id) == (4, "PVT_4")
        assert projects.created_projects == []

    def test_rename_creates_new_title(self, csv_path):
        projects = FakeProjects(projects=[Project(number=1, id="P1", title="Board")])
        strategy = Scripted(Decision(Choice.RENAME, "Board 2"))
        _seeder(_settings(csv_path), projects=projects, strategy=strategy).ensure_project()
        assert projects.created_projects == ["Board 2"]

    def test_cancel(self, csv_path):
        projects = FakeProjects(projects=[Project(number=1, id="P1", title="Board")])
        with pytest.raises(Cancelled):
            _seeder(_settings(csv_path), projects=projects).ensure_project()

    def test_project_url_fallback(self, csv_path):
        seeder = _seeder(_settings(csv_path, scope="org", org="acme"))
        assert seeder.project_url("acme", Project(2, "P")) == \
            "https://github.com/orgs/acme/projects/2"


# ─────────────────────────────────────────────────────────────────────────────
# 3. run
# ─────────────────────────────────────────────────────────────────────────────

class TestRun:
    def test_end_to_end(self, csv_path):
        repos, projects = FakeRepos(), FakeProjects()
        report = _seeder(_settings(csv_path), repos, projects).run()

        assert report.repository == "octocat/demo"
        assert report.fields_created == {s.name for s in CATALOG}
        assert len(repos.issues) == 1
        assert len(projects.items) == 1
        assert len(projects.edits) == 5
        assert report.results[0].updated == {
            "Priority": "High", "WorkflowState": "Todo", "Team": "Backend",
            "EstimatedHours": "8", "DueDate": "2025-09-01",
        }
        assert len(report.succeeded) == 1 and report.partial == []
        assert report.project_url == "https://github.com/users/octocat/projects/1"

    def test_existing_fields_not_recreated(self, csv_path):
        fields = [descriptor("Priority", "ProjectV2SingleSelectField", ["High", "Medium", "Low"])]
        projects = FakeProjects(fields=fields)
        report = _seeder(_settings(csv_path), projects=projects).run()
        assert "Priority" not in report.fields_created
        assert "Priority" in report.results[0].updated

    def test_fatal_row_propagates(self, csv_path):
        repos = FakeRepos(fail_issue_titles={"Fix bug"})
        with pytest.raises(ImportAborted):
            _seeder(_settings(csv_path), repos).run()

    def test_schema_reread_after_failed_first_read(self, csv_path):
        class FlakyRead(FakeProjects):
            reads = 0

            def list_fields(self, number):
                self.reads += 1
                if self.reads == 1:
                    raise GhError(("project", "field-list"), 1, "HTTP 502")
                return super().list_fields(number)

        fields = [
            descriptor(s.name,
                       "ProjectV2SingleSelectField" if s.kind is FieldKind.SINGLE_SELECT
                       else "ProjectV2Field",
                       list(s.options) or None)
            for s in CATALOG
        ]
        projects = FlakyRead(fields=fields, fail_fields={s.name for s in CATALOG})
        report = _seeder(_settings(csv_path), projects=projects).run()

        assert projects.reads == 2
        assert report.fields_created == set()
        assert report.results[0].updated == {
            "Priority": "High", "WorkflowState": "Todo", "Team": "Backend",
            "EstimatedHours": "8", "DueDate": "2025-09-01",
        }
        assert report.partial == []
