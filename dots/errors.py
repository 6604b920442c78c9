"""Typed errors raised by the record store.

Low-level filesystem failures are not wrapped: they surface as OSError.
"""


class StorageError(Exception):
    """Base class for store errors."""


class IssueNotFound(StorageError):
    """No record with the given ID (or prefix)."""


class IssueAlreadyExists(StorageError):
    """A record with the given ID already exists."""


class AmbiguousId(StorageError):
    """A short ID prefix matches more than one record."""

    def __init__(self, prefix: str, matches: list[str]) -> None:
        super().__init__(f"ambiguous id {prefix!r}: {', '.join(sorted(matches))}")
        self.prefix = prefix
        self.matches = sorted(matches)


class DependencyNotFound(StorageError):
    """The dependency target does not exist."""


class DependencyCycle(StorageError):
    """Adding the edge would create a cycle in the blocks graph."""


class ChildrenNotClosed(StorageError):
    """A parent cannot close while any child is still open or active."""


class InvalidFrontmatter(StorageError):
    """Malformed header or missing required header field."""


class InvalidStatus(StorageError):
    """Unknown status value."""


class InvalidId(StorageError):
    """ID is unsafe for use as a path component or header value."""
