"""
runner — Preflight checks and the end-to-end seeding sequence.

repository -> project -> fields -> issues, each step blocking on the last.
Nothing here is transactional: an interrupted run leaves whatever was
already created in place.
"""

import logging
import shutil
import time
from dataclasses import dataclass, field

from .conflicts import AutoReject, Choice
from .errors import Cancelled, PreconditionError
from .gh import ProjectClient, RepoClient, gh_succeeds
from .importer import Importer, RowStatus, read_rows
from .schema import fetch_schema, reconcile

log = logging.getLogger(__name__)


@dataclass
class RunReport:
    repository: str
    repo_url: str
    project: object
    project_url: str
    fields_created: set = field(default_factory=set)
    results: list = field(default_factory=list)

    @property
    def succeeded(self):
        return [r for r in self.results if r.status is RowStatus.SUCCESS]

    @property
    def partial(self):
        return [r for r in self.results if r.status is RowStatus.PARTIAL_FAILURE]


def preflight(settings, which=shutil.which, succeeds=gh_succeeds):
    """Fail fast on anything that would stop the run; returns (headers, rows)."""
    if which("gh") is None:
        raise PreconditionError(
            "GitHub CLI (gh) is not installed. Install it from: https://cli.github.com/"
        )
    if not succeeds("auth", "status"):
        raise PreconditionError("Not authenticated with GitHub CLI. Run: gh auth login")
    return read_rows(settings.csv)


class Seeder:
    def __init__(self, settings, repos=None, projects=None, strategy=None,
                 sleep=time.sleep, which=shutil.which, succeeds=gh_succeeds):
        self.settings = settings
        self.repos = repos or RepoClient()
        self.projects = projects or ProjectClient(settings.owner_flag)
        self.strategy = strategy or AutoReject()
        self.sleep = sleep
        self.which = which
        self.succeeds = succeeds

    # ── Steps ────────────────────────────────────────────────────────────

    def resolve_owner(self):
        if self.settings.scope == "org":
            return self.settings.org
        return self.repos.current_user()

    def ensure_repository(self, owner):
        """Create owner/<repo>, or settle an existing one with the strategy."""
        name = self.settings.repo
        while True:
            full_name = f"{owner}/{name}"
            if not self.repos.repo_exists(full_name):
                break
            decision = self.strategy.resolve("repository", full_name)
            if decision.choice is Choice.REUSE:
                log.info("Reusing repository %s", full_name)
                return full_name
            if decision.choice is Choice.CANCEL:
                raise Cancelled(f"Repository '{full_name}' already exists.")
            name = decision.new_name.split("/")[-1]

        log.info("Creating repository %s...", full_name)
        self.repos.create_repo(full_name, self.settings.visibility, self.settings.description)
        log.info("Repository created", extra={"ok": True})
        self.sleep(self.settings.repo_delay)
        return full_name

    def ensure_project(self):
        title = self.settings.project
        while True:
            existing = next((p for p in self.projects.list_projects() if p.title == title), None)
            if existing is None:
                log.info("Creating project: %s", title)
                project = self.projects.create_project(title)
                log.info("Project created with number: %d", project.number, extra={"ok": True})
                break
            decision = self.strategy.resolve("project", title)
            if decision.choice is Choice.REUSE:
                log.info("Reusing project #%d: %s", existing.number, title)
                project = existing
                break
            if decision.choice is Choice.CANCEL:
                raise Cancelled(f"Project '{title}' already exists.")
            title = decision.new_name

        if not project.id:
            project = self.projects.view_project(project.number)
        return project

    def project_url(self, owner, project):
        if project.url:
            return project.url
        kind = "orgs" if self.settings.scope == "org" else "users"
        return f"https://github.com/{kind}/{owner}/projects/{project.number}"

    # ── Whole run ────────────────────────────────────────────────────────

    def run(self):
        _, rows = preflight(self.settings, self.which, self.succeeds)
        s = self.settings
        log.info("Repository: %s", s.repo)
        log.info("Project: %s", s.project)
        log.info("Scope: %s", s.scope)

        owner = self.resolve_owner()
        repository = self.ensure_repository(owner)
        project = self.ensure_project()

        schema = fetch_schema(self.projects, project)
        created = reconcile(self.projects, project, schema,
                            delay=s.field_delay, sleep=self.sleep)
        # creation responses lack option ids, and a failed first read looks empty
        schema = fetch_schema(self.projects, project)

        log.info("Importing issues...")
        importer = Importer(self.repos, self.projects, repository, project, schema,
                            row_delay=s.row_delay, sleep=self.sleep)
        results = importer.run(rows)

        return RunReport(
            repository=repository,
            repo_url=f"https://github.com/{repository}",
            project=project,
            project_url=self.project_url(owner, project),
            fields_created=created,
            results=results,
        )
