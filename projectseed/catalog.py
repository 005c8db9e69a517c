"""
catalog — The custom fields projectseed knows how to create and fill.

Each entry names the remote field, the CSV column that feeds it, its kind
and, for single-select fields, the ordered option labels.
"""

import enum
from dataclasses import dataclass


class FieldKind(str, enum.Enum):
    SINGLE_SELECT = "SINGLE_SELECT"
    NUMBER = "NUMBER"
    DATE = "DATE"
    TEXT = "TEXT"

    def __str__(self):
        return self.value


@dataclass(frozen=True)
class FieldSpec:
    name: str
    kind: FieldKind
    options: tuple = ()
    column: str = ""

    def __post_init__(self):
        if not self.column:
            object.__setattr__(self, "column", self.name)
        if self.options and self.kind is not FieldKind.SINGLE_SELECT:
            raise ValueError(f"{self.name}: only single-select fields carry options")
        if len(set(self.options)) != len(self.options):
            raise ValueError(f"{self.name}: duplicate options")


# ── Built-in project fields ──────────────────────────────────────────────

# Names GitHub owns on every Projects (v2) board; a custom field can't use them.
RESERVED_NAMES = frozenset(n.lower() for n in (
    "Title", "Assignees", "Status", "Labels", "Linked pull requests",
    "Milestone", "Repository", "Reviewers", "Parent issue",
    "Sub-issues progress", "Type",
))

# CSV column -> remote field name, for columns that collide with a built-in.
RENAMES = {"Status": "WorkflowState"}

# Columns consumed by issue creation, never treated as field values.
ISSUE_COLUMNS = ("Title", "Description")


# ── Catalog ──────────────────────────────────────────────────────────────

CATALOG = (
    FieldSpec("Priority", FieldKind.SINGLE_SELECT, ("High", "Medium", "Low")),
    FieldSpec("WorkflowState", FieldKind.SINGLE_SELECT,
              ("Todo", "In Progress", "Done", "Blocked"), column="Status"),
    FieldSpec("EstimatedHours", FieldKind.NUMBER),
    FieldSpec("DueDate", FieldKind.DATE),
    FieldSpec("Team", FieldKind.SINGLE_SELECT, (
        "Frontend", "Backend", "API", "Database",
        "Documentation", "Security", "DevOps", "Testing",
    )),
)

_BY_NAME = {spec.name: spec for spec in CATALOG}

# Order in which a row's fields are written; other columns follow in CSV order.
UPDATE_ORDER = ("Priority", "WorkflowState", "Team", "EstimatedHours", "DueDate")


def is_reserved(name):
    return name.strip().lower() in RESERVED_NAMES


def field_name(column):
    """Remote field name for a CSV column (applies the Status rename)."""
    return RENAMES.get(column, column)


def lookup(name):
    return _BY_NAME.get(name)


def spec_for_column(column):
    """Catalog entry fed by `column`, or None for columns we don't model."""
    return _BY_NAME.get(field_name(column))
