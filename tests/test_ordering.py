"""Tests for dots.store.ordering."""

import pytest

from dots.errors import IssueNotFound
from dots.store.ordering import BASELINE, compute_order_key


class TestComputeOrderKey:
    def test_first_sibling(self) -> None:
        assert compute_order_key([]) == BASELINE

    def test_append(self, make_issue) -> None:
        siblings = [make_issue("a", peer_index=0.0), make_issue("b", peer_index=3.0)]
        assert compute_order_key(siblings) == 4.0

    def test_between(self, make_issue) -> None:
        siblings = [make_issue("a", peer_index=0.0), make_issue("b", peer_index=1.0)]
        assert compute_order_key(siblings, after="a") == 0.5
        assert compute_order_key(siblings, before="b") == 0.5

    def test_ends(self, make_issue) -> None:
        siblings = [make_issue("a", peer_index=0.0), make_issue("b", peer_index=1.0)]
        assert compute_order_key(siblings, after="b") == 2.0
        assert compute_order_key(siblings, before="a") == -1.0

    def test_repeated_insert_after_stays_ordered(self, make_issue) -> None:
        """Inserting right after the same record keeps every key strictly between neighbours."""
        siblings = [make_issue("a", peer_index=0.0), make_issue("z", peer_index=1.0)]
        for n in range(20):
            key = compute_order_key(siblings, after="a")
            assert siblings[0].peer_index < key < siblings[1].peer_index
            siblings.insert(1, make_issue(f"n{n}", peer_index=key))

    def test_repeated_insert_before(self, make_issue) -> None:
        siblings = [make_issue("a", peer_index=0.0)]
        for n in range(5):
            key = compute_order_key(siblings, before=siblings[0].id)
            assert key < siblings[0].peer_index
            siblings.insert(0, make_issue(f"n{n}", peer_index=key))

    def test_unknown_anchor(self, make_issue) -> None:
        with pytest.raises(IssueNotFound):
            compute_order_key([make_issue("a")], after="b")
        with pytest.raises(IssueNotFound):
            compute_order_key([], before="b")
