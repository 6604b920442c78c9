"""The blocks graph: cycle prevention and readiness.

Readiness is recomputed on every query; a blocker missing from the known set
counts as not blocking (it has been archived away or deleted).
"""

from collections import deque
from typing import Callable, Iterable, List, Mapping

from dots.store.schemas import IssueFile, Status

BLOCKING_STATUSES = frozenset({Status.OPEN, Status.ACTIVE})


def would_create_cycle(
    from_id: str,
    to_id: str,
    get_blocks: Callable[[str], List[str] | None],
) -> bool:
    """True if adding "from_id is blocked by to_id" closes a cycle.

    Breadth-first from to_id along existing blocks edges; get_blocks returns
    a record's blocker list or None if the record does not exist.
    """
    queue = deque([to_id])
    visited: set[str] = set()
    while queue:
        current = queue.popleft()
        if current == from_id:
            return True
        if current in visited:
            continue
        visited.add(current)
        for blocker in get_blocks(current) or []:
            if blocker not in visited:
                queue.append(blocker)
    return False


def is_blocked(issue: IssueFile, known: Mapping[str, IssueFile]) -> bool:
    """True if any known blocker of issue is still open or active."""
    for blocker_id in issue.blocks:
        blocker = known.get(blocker_id)
        if blocker is not None and blocker.status in BLOCKING_STATUSES:
            return True
    return False


def compute_ready(
    issues: Iterable[IssueFile],
    known: Mapping[str, IssueFile] | None = None,
) -> List[IssueFile]:
    """Open records none of whose blockers is open or active.

    known defaults to the given records themselves.
    """
    issues = list(issues)
    if known is None:
        known = {issue.id: issue for issue in issues}
    return [i for i in issues if i.status == Status.OPEN and not is_blocked(i, known)]


def without_references(blocks: Iterable[str], removed: Iterable[str]) -> List[str]:
    drop = set(removed)
    return [b for b in blocks if b not in drop]


def renamed_references(blocks: Iterable[str], old_id: str, new_id: str) -> List[str]:
    """Blocker list with old_id replaced by new_id, keeping order and dropping a duplicate."""
    out: List[str] = []
    for b in blocks:
        b = new_id if b == old_id else b
        if b not in out:
            out.append(b)
    return out
