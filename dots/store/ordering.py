"""Fractional sort keys among siblings.

A new record gets a key between its neighbours so no other record is
rewritten. Repeated bisection at one spot eventually runs out of float
precision; keys are not renumbered.
"""

from typing import Sequence

from dots.errors import IssueNotFound
from dots.store.schemas import IssueFile

BASELINE = 0.0


def compute_order_key(
    siblings: Sequence[IssueFile],
    after: str | None = None,
    before: str | None = None,
) -> float:
    """Key for a new sibling placed after one record, before one, or at the end.

    siblings must be sorted by key. Raises IssueNotFound if the anchor is not
    among them.
    """
    keys = [s.peer_index for s in siblings]
    ids = [s.id for s in siblings]
    if after is not None:
        if after not in ids:
            raise IssueNotFound(f"{after} is not a sibling")
        i = ids.index(after)
        if i == len(keys) - 1:
            return keys[i] + 1
        return (keys[i] + keys[i + 1]) / 2
    if before is not None:
        if before not in ids:
            raise IssueNotFound(f"{before} is not a sibling")
        i = ids.index(before)
        if i == 0:
            return keys[i] - 1
        return (keys[i - 1] + keys[i]) / 2
    if not keys:
        return BASELINE
    return max(keys) + 1
