"""Tests for dots.store.hierarchy (parent folders and orphan repair)."""

from pathlib import Path

import pytest

from dots.errors import IssueAlreadyExists
from dots.store.hierarchy import (
    FixResult,
    child_issues,
    child_paths,
    ensure_parent_folder,
    fix_orphans,
    list_orphan_parents,
)
from dots.store.schemas import Status


class TestEnsureParentFolder:
    def test_moves_root_file_into_folder(self, dots_dir: Path, put_issue) -> None:
        put_issue("p.md")
        folder = ensure_parent_folder(dots_dir, "p")
        assert folder == dots_dir / "p"
        assert (dots_dir / "p" / "p.md").is_file()
        assert not (dots_dir / "p.md").exists()

    def test_existing_folder_untouched(self, dots_dir: Path, put_issue) -> None:
        put_issue("p/p.md")
        put_issue("p/c.md")
        assert ensure_parent_folder(dots_dir, "p") == dots_dir / "p"
        assert sorted(e.name for e in (dots_dir / "p").iterdir()) == ["c.md", "p.md"]

    def test_nested_child_becomes_parent(self, dots_dir: Path, put_issue) -> None:
        put_issue("p/p.md")
        put_issue("p/c.md")
        folder = ensure_parent_folder(dots_dir, "c")
        assert folder == dots_dir / "p" / "c"
        assert (folder / "c.md").is_file()
        assert not (dots_dir / "p" / "c.md").exists()

    def test_unknown_parent_gets_root_folder(self, dots_dir: Path) -> None:
        folder = ensure_parent_folder(dots_dir, "ghost")
        assert folder == dots_dir / "ghost"
        assert folder.is_dir()
        assert list(folder.iterdir()) == []

    def test_archived_parent_left_in_archive(self, dots_dir: Path, put_issue) -> None:
        archived = put_issue("archive/old.md", Status.CLOSED)
        folder = ensure_parent_folder(dots_dir, "old")
        assert folder == dots_dir / "old"
        assert archived.is_file()


class TestOrphans:
    def test_list_orphans(self, dots_dir: Path, put_issue) -> None:
        put_issue("x/a.md")
        put_issue("p/p.md")
        put_issue("p/q/b.md")
        (dots_dir / "bad").mkdir()
        (dots_dir / "bad" / "bad.md").write_text("no header", encoding="utf-8")
        put_issue("archive/z/y.md")
        orphans = list_orphan_parents(dots_dir)
        assert orphans[0] == dots_dir / "p" / "q"
        assert sorted(orphans[1:]) == [dots_dir / "bad", dots_dir / "x"]

    def test_no_orphans(self, dots_dir: Path, put_issue) -> None:
        put_issue("p/p.md")
        put_issue("p/c.md")
        assert list_orphan_parents(dots_dir) == []

    def test_fix_promotes_contents(self, dots_dir: Path, put_issue) -> None:
        put_issue("x/a.md")
        put_issue("x/sub/sub.md")
        put_issue("x/sub/kid.md")
        (dots_dir / "x" / "a.md.0badf00d.tmp").write_text("partial", encoding="utf-8")
        result = fix_orphans(dots_dir)
        assert result == FixResult(folders=1, files=2)
        assert not (dots_dir / "x").exists()
        assert (dots_dir / "a.md").is_file()
        assert (dots_dir / "sub" / "kid.md").is_file()

    def test_fix_nested_orphan(self, dots_dir: Path, put_issue) -> None:
        put_issue("p/p.md")
        put_issue("p/q/c.md")
        assert fix_orphans(dots_dir) == FixResult(folders=1, files=1)
        assert (dots_dir / "p" / "c.md").is_file()
        assert not (dots_dir / "p" / "q").exists()

    def test_fix_unreadable_parent_file(self, dots_dir: Path, put_issue) -> None:
        (dots_dir / "bad").mkdir()
        (dots_dir / "bad" / "bad.md").write_text("no header", encoding="utf-8")
        put_issue("bad/c.md")
        assert fix_orphans(dots_dir) == FixResult(folders=1, files=2)
        assert (dots_dir / "bad.md").is_file()
        assert (dots_dir / "c.md").is_file()

    def test_fix_collision_moves_nothing(self, dots_dir: Path, put_issue) -> None:
        put_issue("a.md")
        put_issue("x/a.md")
        put_issue("x/b.md")
        with pytest.raises(IssueAlreadyExists):
            fix_orphans(dots_dir)
        assert (dots_dir / "x" / "a.md").is_file()
        assert (dots_dir / "x" / "b.md").is_file()
        assert not (dots_dir / "b.md").exists()

    def test_fix_stray_file_moves_nothing(self, dots_dir: Path, put_issue) -> None:
        """A non-record file blocks the repair before any record leaves the folder."""
        put_issue("x/a.md")
        put_issue("x/sub/sub.md")
        (dots_dir / "x" / ".DS_Store").write_bytes(b"\x00")
        with pytest.raises(OSError, match=".DS_Store"):
            fix_orphans(dots_dir)
        assert (dots_dir / "x" / "a.md").is_file()
        assert (dots_dir / "x" / "sub" / "sub.md").is_file()
        assert not (dots_dir / "a.md").exists()
        assert not (dots_dir / "sub").exists()

    def test_fix_nothing(self, dots_dir: Path) -> None:
        assert fix_orphans(dots_dir) == FixResult(folders=0, files=0)


class TestChildren:
    def test_child_paths(self, dots_dir: Path, put_issue) -> None:
        parent = put_issue("p/p.md")
        a = put_issue("p/a.md")
        q = put_issue("p/q/q.md")
        put_issue("p/q/deep.md")
        (dots_dir / "p" / "r").mkdir()
        assert child_paths(dots_dir, parent) == [a, q]

    def test_leaf_has_no_children(self, dots_dir: Path, put_issue) -> None:
        assert child_paths(dots_dir, put_issue("a.md")) == []

    def test_child_issues_skip_malformed(self, dots_dir: Path, put_issue) -> None:
        parent = put_issue("p/p.md")
        put_issue("p/a.md")
        (dots_dir / "p" / "broken.md").write_text("---\ntitle: x\n", encoding="utf-8")
        children = child_issues(dots_dir, parent)
        assert [c.id for c in children] == ["a"]
        assert children[0].parent == "p"
