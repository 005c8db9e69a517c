"""
importer — Turn CSV rows into issues on the board.

For every row: create the issue, add it to the project, then write each
populated custom-field column.  Losing the issue or the project item stops
the run; a bad field value only costs that one field.
"""

import csv
import datetime
import decimal
import enum
import logging
import os
import re
import time
from dataclasses import dataclass, field

from .catalog import ISSUE_COLUMNS, UPDATE_ORDER, FieldKind, field_name, spec_for_column
from .errors import CsvError, GhError, ImportAborted

log = logging.getLogger(__name__)

_ISO_DATE = re.compile(r"^\d{4}-\d{2}-\d{2}$")


# ── CSV input ────────────────────────────────────────────────────────────

def read_rows(path):
    """Return (headers, rows) from a CSV file with Title and Description columns."""
    if not os.path.isfile(path):
        raise CsvError(f"CSV file '{path}' not found.")
    try:
        with open(path, "r", encoding="utf-8-sig", newline="") as f:
            reader = csv.DictReader(f)
            headers = [h.strip() for h in (reader.fieldnames or [])]
            reader.fieldnames = headers
            rows = [dict(row) for row in reader]
    except (OSError, UnicodeDecodeError, csv.Error) as exc:
        raise CsvError(f"Could not read CSV file '{path}': {exc}") from exc
    if not headers:
        raise CsvError(f"CSV file '{path}' has no header row.")
    missing = [c for c in ISSUE_COLUMNS if c not in headers]
    if missing:
        raise CsvError(f"CSV file '{path}' is missing required column(s): {', '.join(missing)}")
    return headers, rows


def ordered_columns(row):
    """Field columns of a row, catalog fields first in UPDATE_ORDER."""
    columns = [c for c in row if c not in ISSUE_COLUMNS]
    rank = {name: i for i, name in enumerate(UPDATE_ORDER)}
    return sorted(columns, key=lambda c: rank.get(field_name(c), len(rank)))


# ── Value coercion ───────────────────────────────────────────────────────

class Rejected(ValueError):
    """A CSV value that can't be written to its field."""


def coerce_number(value):
    try:
        number = decimal.Decimal(value.strip())
    except decimal.InvalidOperation:
        raise Rejected(f"{value!r} is not a number") from None
    if not number.is_finite():
        raise Rejected(f"{value!r} is not a finite number")
    return str(number)


def coerce_date(value):
    text = value.strip()
    if not _ISO_DATE.match(text):
        raise Rejected(f"{value!r} is not a YYYY-MM-DD date")
    try:
        return datetime.date.fromisoformat(text).isoformat()
    except ValueError:
        raise Rejected(f"{value!r} is not a valid calendar date") from None


def coerce_value(remote, value):
    """(value for gh, value as recorded) for `remote`, or raise Rejected."""
    kind = remote.resolved_kind
    if kind == FieldKind.SINGLE_SELECT:
        label = remote.match_option(value)
        if label is None:
            raise Rejected(f"{value!r} is not one of {', '.join(remote.options) or 'no options'}")
        return remote.options[label], label
    if kind == FieldKind.NUMBER:
        number = coerce_number(value)
        return number, number
    if kind == FieldKind.DATE:
        day = coerce_date(value)
        return day, day
    if kind == FieldKind.TEXT:
        return value, value
    raise Rejected(f"{kind} fields are not supported")


# ═════════════════════════════════════════════════════════════════════════════
# ROW IMPORT
# ═════════════════════════════════════════════════════════════════════════════

class RowStatus(enum.Enum):
    SUCCESS = "success"
    PARTIAL_FAILURE = "partial_failure"


@dataclass
class RowResult:
    title: str
    issue: object = None
    item_id: str = ""
    updated: dict = field(default_factory=dict)  # field name -> value written
    failed: dict = field(default_factory=dict)   # field name -> reason

    @property
    def status(self):
        return RowStatus.PARTIAL_FAILURE if self.failed else RowStatus.SUCCESS


class Importer:
    def __init__(self, repos, projects, repository, project, schema,
                 row_delay=1.0, sleep=time.sleep):
        self.repos = repos
        self.projects = projects
        self.repository = repository  # "owner/name"
        self.project = project
        self.schema = schema
        self.row_delay = row_delay
        self.sleep = sleep

    def run(self, rows):
        results = []
        total = len(rows)
        for i, row in enumerate(rows, 1):
            log.info("Processing issue %d/%d: %s", i, total, row.get("Title", ""))
            results.append(self.import_row(row))
        return results

    def import_row(self, row):
        title = (row.get("Title") or "").strip()
        result = RowResult(title=title)

        try:
            result.issue = self.repos.create_issue(self.repository, title, row.get("Description") or "")
        except GhError as exc:
            raise ImportAborted(f"Could not create issue '{title}': {exc.stderr or exc}") from exc
        log.debug("Created %s", result.issue.url)

        try:
            result.item_id = self.projects.add_item(self.project.number, result.issue.url)
        except GhError as exc:
            raise ImportAborted(
                f"Could not add issue #{result.issue.number} to the project: {exc.stderr or exc}"
            ) from exc

        for column in ordered_columns(row):
            value = row.get(column)
            # DictReader puts overflow cells under a None key as a list
            if not isinstance(value, str) or not value.strip():
                continue
            self._update_field(result, column, value)

        self.sleep(self.row_delay)
        return result

    def _update_field(self, result, column, value):
        if spec_for_column(column) is None:
            log.debug("Column %s has no custom field; ignoring", column)
            return
        name = field_name(column)
        remote = self.schema.get(name)
        if remote is None:
            log.warning("Field %s not found in project; skipping", name)
            result.failed[name] = "field not found"
            return

        try:
            payload, written = coerce_value(remote, value)
        except Rejected as exc:
            log.warning("%s: %s; skipping", name, exc)
            result.failed[name] = str(exc)
            return

        try:
            self.projects.edit_item(self.project.id, result.item_id, remote.id,
                                    remote.resolved_kind, payload)
        except GhError as exc:
            log.warning("Could not set %s: %s", name, exc.stderr or exc)
            result.failed[name] = str(exc)
            return
        result.updated[name] = written
