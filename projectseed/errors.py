"""
errors — Exception hierarchy for projectseed.
"""


class SeedError(Exception):
    """Base class for every error projectseed raises on purpose."""


class PreconditionError(SeedError):
    """Something required is missing; raised before any remote mutation."""


class ConfigError(PreconditionError):
    pass


class CsvError(PreconditionError):
    pass


class GhError(SeedError):
    """A `gh` invocation exited non-zero or printed unusable output."""

    def __init__(self, args, returncode, stderr):
        self.cmd = list(args)
        self.returncode = returncode
        self.stderr = (stderr or "").strip()
        super().__init__(f"gh {' '.join(self.cmd)} failed ({returncode}): {self.stderr}")


class ImportAborted(SeedError):
    """A row could not get an issue or a project item; the run stops."""


class Cancelled(SeedError):
    """The user picked cancel when asked how to resolve a conflict."""
