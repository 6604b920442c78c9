"""Moving closed records into the archive.

A closed child stays where it is until its parent closes; the parent then
moves with its whole folder in one rename. Records already in the archive
are left alone.
"""

import logging
import shutil
from pathlib import Path

from dots.errors import ChildrenNotClosed
from dots.store.atomic import move
from dots.store.hierarchy import child_issues
from dots.store.paths import archive_dir, is_archived, is_folder_self, parent_from_path
from dots.store.schemas import Status

LOG = logging.getLogger("dots.store.archive")


def ensure_children_closed(dots_dir: Path, path: Path) -> None:
    """Raise ChildrenNotClosed if any direct child of the record at path is not closed."""
    still_open = [c.id for c in child_issues(dots_dir, path) if c.status != Status.CLOSED]
    if still_open:
        raise ChildrenNotClosed(f"children not closed: {', '.join(still_open)}")


def maybe_archive(dots_dir: Path, issue_id: str, path: Path) -> Path | None:
    """Move a closed record (and its folder, if it has one) under the archive root.

    Returns the new location, or None if nothing moved.
    """
    dots_dir = Path(dots_dir)
    path = Path(path)
    if is_archived(dots_dir, path):
        return None
    if parent_from_path(dots_dir, path) is not None:
        LOG.debug("%s is a child; it moves with its parent", issue_id)
        return None
    archive = archive_dir(dots_dir)
    archive.mkdir(exist_ok=True)
    if is_folder_self(dots_dir, path):
        ensure_children_closed(dots_dir, path)
        folder = path.parent
        move(folder, archive / folder.name)
        LOG.info("Archived %s with its children", issue_id)
        return archive / folder.name / path.name
    move(path, archive / path.name)
    LOG.info("Archived %s", issue_id)
    return archive / path.name


def purge_archive(dots_dir: Path) -> None:
    """Delete everything under the archive root and leave an empty archive."""
    archive = archive_dir(dots_dir)
    if archive.exists():
        shutil.rmtree(archive)
    archive.mkdir(exist_ok=True)
    LOG.info("Purged archive %s", archive)
