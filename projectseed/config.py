"""
config — Run configuration for projectseed.

Configuration can be provided with a JSON file and overridden with CLI flags.
File search order:
1) $PROJECTSEED_CONFIG (explicit path)
2) ./.projectseed/config.json
3) ~/.projectseed/config.json

If no config file exists, built-in defaults are used.  The merged result is
validated into a frozen Settings model before anything touches GitHub.
"""

import json
import os
from typing import Literal, Optional

from pydantic import BaseModel, ConfigDict, Field, ValidationError, field_validator, model_validator

from .errors import ConfigError


_DEFAULT_CONFIG = {
    "repo": "test-project-demo",
    "project": "Project Management Board",
    "csv": "test-issues.csv",
    "scope": "user",
    "org": "",
    "visibility": "public",
    "description": "Test project with custom fields",
    "repo_delay": 2.0,
    "field_delay": 1.0,
    "row_delay": 1.0,
}


class Settings(BaseModel):
    model_config = ConfigDict(frozen=True, extra="forbid")

    repo: str
    project: str
    csv: str
    scope: Literal["user", "org"] = "user"
    org: str = ""
    visibility: Literal["public", "private", "internal"] = "public"
    description: str = ""
    repo_delay: float = Field(default=2.0, ge=0)
    field_delay: float = Field(default=1.0, ge=0)
    row_delay: float = Field(default=1.0, ge=0)

    @field_validator("repo", "project", "csv")
    @classmethod
    def _not_blank(cls, value):
        value = value.strip()
        if not value:
            raise ValueError("must not be blank")
        return value

    @field_validator("org")
    @classmethod
    def _strip_org(cls, value):
        return value.strip()

    @model_validator(mode="after")
    def _org_matches_scope(self):
        if self.scope == "org" and not self.org:
            raise ValueError("org must be set when scope is 'org'")
        return self

    @property
    def owner_flag(self):
        """Value for gh's --owner on project commands."""
        return self.org if self.scope == "org" else "@me"


def candidate_paths(explicit=None):
    return [
        explicit,
        os.getenv("PROJECTSEED_CONFIG"),
        os.path.join(os.getcwd(), ".projectseed", "config.json"),
        os.path.expanduser("~/.projectseed/config.json"),
    ]


def load_file(explicit=None):
    """Return the first config file's contents, or {} if there is none."""
    for path in candidate_paths(explicit):
        if not path:
            continue
        if not os.path.isfile(path):
            if path == explicit:
                raise ConfigError(f"Config file not found: {path}")
            continue
        try:
            with open(path, "r", encoding="utf-8") as f:
                data = json.load(f)
        except (OSError, ValueError) as exc:
            raise ConfigError(f"Failed to load config at {path}: {exc}") from exc
        if not isinstance(data, dict):
            raise ConfigError(f"Config root must be a JSON object ({path})")
        return data
    return {}


def load_settings(overrides=None, config_path: Optional[str] = None) -> Settings:
    """Merge defaults, the config file and `overrides` (None values ignored)."""
    merged = dict(_DEFAULT_CONFIG)
    merged.update(load_file(config_path))
    merged.update({k: v for k, v in (overrides or {}).items() if v is not None})
    try:
        return Settings(**merged)
    except ValidationError as exc:
        problems = "; ".join(
            f"{'.'.join(str(p) for p in err['loc']) or 'config'}: {err['msg']}"
            for err in exc.errors()
        )
        raise ConfigError(f"Invalid configuration: {problems}") from exc
