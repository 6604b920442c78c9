"""Record status and dependency kinds."""

from enum import Enum

from dots.errors import InvalidStatus


class Status(str, Enum):
    """Lifecycle state of a record."""

    OPEN = "open"
    ACTIVE = "active"
    CLOSED = "closed"

    @classmethod
    def parse(cls, value: str) -> "Status":
        """Map header text to a Status; ``done`` is accepted for ``closed``."""
        status = STATUS_NAMES.get(value.strip())
        if status is None:
            raise InvalidStatus(f"unknown status: {value!r}")
        return status


STATUS_NAMES = {
    "open": Status.OPEN,
    "active": Status.ACTIVE,
    "closed": Status.CLOSED,
    "done": Status.CLOSED,
}


class DependencyKind(str, Enum):
    """Kind of edge between two records.

    BLOCKS is stored in the dependent's header and checked for cycles.
    PARENT_CHILD is expressed only by file location.
    """

    BLOCKS = "blocks"
    PARENT_CHILD = "parent-child"
