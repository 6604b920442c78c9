"""Shared fixtures: an initialized store and a record factory."""

import logging
from pathlib import Path
from typing import Callable

import pytest

from dots.store import IssueFile, Status, init_storage
from dots.store.records import write_issue_at

FIXED_TS = "2024-01-01T00:00:00Z"


@pytest.fixture
def dots_dir(tmp_path: Path) -> Path:
    """Fresh store at tmp_path/.dots with an empty archive."""
    return init_storage(tmp_path / ".dots")


@pytest.fixture
def make_issue() -> Callable[..., IssueFile]:
    """Build an IssueFile with sensible defaults; keyword args override fields."""

    def _make(issue_id: str, status: Status = Status.OPEN, **fields) -> IssueFile:
        data = {
            "id": issue_id,
            "title": f"Issue {issue_id}",
            "status": status,
            "created_at": FIXED_TS,
        }
        if status == Status.CLOSED:
            data["closed_at"] = FIXED_TS
        data.update(fields)
        return IssueFile(**data)

    return _make


@pytest.fixture
def put_issue(dots_dir: Path, make_issue: Callable[..., IssueFile]) -> Callable[..., Path]:
    """Write a record straight to a path relative to the store, bypassing create_issue."""

    def _put(relpath: str, status: Status = Status.OPEN, **fields) -> Path:
        path = dots_dir / relpath
        path.parent.mkdir(parents=True, exist_ok=True)
        write_issue_at(path, make_issue(path.stem, status, **fields))
        return path

    return _put


@pytest.fixture(autouse=True)
def _reset_package_logger():
    """Drop handlers and level set on the ``dots`` logger by a test."""
    logger = logging.getLogger("dots")
    handlers, level = list(logger.handlers), logger.level
    yield
    for handler in list(logger.handlers):
        if handler not in handlers:
            logger.removeHandler(handler)
            handler.close()
    logger.setLevel(level)
