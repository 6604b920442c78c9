"""Tests for dots.store.graph (cycles and readiness)."""

from dots.store.graph import (
    compute_ready,
    is_blocked,
    renamed_references,
    without_references,
    would_create_cycle,
)
from dots.store.schemas import Status


def _lookup(edges: dict):
    return lambda issue_id: edges.get(issue_id)


class TestWouldCreateCycle:
    def test_self_edge(self) -> None:
        assert would_create_cycle("a", "a", _lookup({"a": []}))

    def test_direct_cycle(self) -> None:
        """b is blocked by a; a blocked by b closes the loop."""
        assert would_create_cycle("a", "b", _lookup({"a": [], "b": ["a"]}))

    def test_transitive_cycle(self) -> None:
        edges = {"a": [], "b": ["c"], "c": ["a"]}
        assert would_create_cycle("a", "b", _lookup(edges))

    def test_no_cycle(self) -> None:
        edges = {"a": ["b"], "b": ["c"], "c": []}
        assert not would_create_cycle("c", "d", _lookup({**edges, "d": []}))
        assert not would_create_cycle("a", "c", _lookup(edges))

    def test_diamond_terminates(self) -> None:
        edges = {"x": [], "a": ["b", "c"], "b": ["d"], "c": ["d"], "d": []}
        assert not would_create_cycle("x", "a", _lookup(edges))

    def test_missing_records_treated_as_leaves(self) -> None:
        assert not would_create_cycle("a", "b", _lookup({"b": ["gone"]}))


class TestReadiness:
    def test_chain(self, make_issue) -> None:
        """A blocked by B blocked by C, all open: only C is ready."""
        a = make_issue("a", blocks=["b"])
        b = make_issue("b", blocks=["c"])
        c = make_issue("c")
        assert [i.id for i in compute_ready([a, b, c])] == ["c"]

    def test_closed_blocker_releases(self, make_issue) -> None:
        a = make_issue("a", blocks=["b"])
        b = make_issue("b", Status.CLOSED)
        assert [i.id for i in compute_ready([a, b])] == ["a"]

    def test_active_blocker_blocks(self, make_issue) -> None:
        a = make_issue("a", blocks=["b"])
        b = make_issue("b", Status.ACTIVE)
        assert compute_ready([a, b]) == []
        assert is_blocked(a, {"b": b})

    def test_unknown_blocker_not_blocking(self, make_issue) -> None:
        a = make_issue("a", blocks=["gone"])
        assert not is_blocked(a, {})
        assert [i.id for i in compute_ready([a])] == ["a"]

    def test_only_open_records_ready(self, make_issue) -> None:
        issues = [make_issue("a", Status.ACTIVE), make_issue("b", Status.CLOSED), make_issue("c")]
        assert [i.id for i in compute_ready(issues)] == ["c"]

    def test_known_set_separate(self, make_issue) -> None:
        a = make_issue("a", blocks=["z"])
        z = make_issue("z")
        assert compute_ready([a], {"z": z}) == []


class TestReferenceRewrites:
    def test_without(self) -> None:
        assert without_references(["a", "b", "c"], {"a", "c"}) == ["b"]

    def test_renamed_dedupes(self) -> None:
        assert renamed_references(["a", "old", "new"], "old", "new") == ["a", "new"]
        assert renamed_references(["old", "b"], "old", "x") == ["x", "b"]
