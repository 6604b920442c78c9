"""Tests for dots.store.store_config (the store's key=value file)."""

from pathlib import Path

import pytest

from dots.store import init_storage
from dots.store.store_config import (
    DEFAULT_PREFIX,
    get_config,
    get_or_create_prefix,
    read_config,
    set_config,
)


class TestConfigFile:
    def test_missing_file(self, dots_dir: Path) -> None:
        assert read_config(dots_dir) == {}
        assert get_config(dots_dir, "prefix") is None

    def test_set_keeps_other_keys_in_order(self, dots_dir: Path) -> None:
        set_config(dots_dir, "prefix", "app")
        set_config(dots_dir, "editor", "vim")
        set_config(dots_dir, "prefix", "web")
        assert (dots_dir / "config").read_text(encoding="utf-8") == "prefix=web\neditor=vim\n"
        assert read_config(dots_dir) == {"prefix": "web", "editor": "vim"}

    def test_value_may_contain_equals(self, dots_dir: Path) -> None:
        set_config(dots_dir, "query", "a=b")
        assert get_config(dots_dir, "query") == "a=b"

    @pytest.mark.parametrize("value", ["a\rb", "a\u2028b", "a\x0bb\x0cc\x1cd\x85e\u2029f", "trailing\r"])
    def test_line_separator_lookalikes_survive(self, dots_dir: Path, value: str) -> None:
        """Only a newline ends an entry; other separators stay in the value across rewrites."""
        set_config(dots_dir, "k", value)
        set_config(dots_dir, "other", "x")
        assert get_config(dots_dir, "k") == value
        assert read_config(dots_dir) == {"k": value, "other": "x"}

    def test_junk_lines_ignored(self, dots_dir: Path) -> None:
        (dots_dir / "config").write_text("# comment\nprefix=x\n\n", encoding="utf-8")
        assert read_config(dots_dir) == {"prefix": "x"}

    @pytest.mark.parametrize("key,value", [("a=b", "v"), ("a\nb", "v"), ("k", "two\nlines")])
    def test_rejects_unwritable_entries(self, dots_dir: Path, key: str, value: str) -> None:
        with pytest.raises(ValueError):
            set_config(dots_dir, key, value)
        assert not (dots_dir / "config").exists()


class TestPrefix:
    def test_derived_from_project_dir(self, tmp_path: Path) -> None:
        dots_dir = init_storage(tmp_path / "my-project--" / ".dots")
        assert get_or_create_prefix(dots_dir) == "my-project"
        assert get_config(dots_dir, "prefix") == "my-project"

    def test_existing_prefix_wins(self, dots_dir: Path) -> None:
        set_config(dots_dir, "prefix", "custom")
        assert get_or_create_prefix(dots_dir) == "custom"

    def test_default_when_name_empty(self, tmp_path: Path) -> None:
        dots_dir = init_storage(tmp_path / "---" / ".dots")
        assert get_or_create_prefix(dots_dir) == DEFAULT_PREFIX
