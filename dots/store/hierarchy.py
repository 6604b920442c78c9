"""Parent folders and orphan recovery.

A record with children lives at {id}/{id}.md and its children sit next to
it. Creating the folder and moving the parent's file into it are two
separate renames; an interruption between them leaves an orphan folder,
which fix_orphans repairs.
"""

import errno
import logging
from pathlib import Path
from typing import Iterator, List, NamedTuple

from dots.errors import InvalidFrontmatter, InvalidStatus, IssueAlreadyExists, IssueNotFound
from dots.store.atomic import move
from dots.store.paths import (
    ISSUE_EXT,
    MAX_DEPTH,
    archive_dir,
    find_issue_path,
    is_archived,
    is_folder_self,
    issue_file_name,
)
from dots.store.records import read_issue_at
from dots.store.schemas import IssueFile

LOG = logging.getLogger("dots.store.hierarchy")


class FixResult(NamedTuple):
    folders: int
    files: int


def ensure_parent_folder(dots_dir: Path, parent_id: str) -> Path:
    """Make sure parent_id has a folder and its own file is inside it. Returns the folder.

    A live parent gets its folder next to its current file. An unknown or
    archived parent gets a folder at the root, which stays an orphan until
    the parent file appears there.
    """
    dots_dir = Path(dots_dir)
    name = issue_file_name(parent_id)
    try:
        current = find_issue_path(dots_dir, parent_id)
    except IssueNotFound:
        current = None
    if current is not None and is_folder_self(dots_dir, current) and not is_archived(dots_dir, current):
        return current.parent
    if current is not None and not is_archived(dots_dir, current):
        folder = current.parent / parent_id
    else:
        folder = dots_dir / parent_id
        current = dots_dir / name
    folder.mkdir(exist_ok=True)
    if current.is_file():
        move(current, folder / name)
        LOG.info("Moved %s into its own folder", parent_id)
    return folder


def _iter_live_dirs(dots_dir: Path, directory: Path, depth: int) -> Iterator[Path]:
    if depth > MAX_DEPTH:
        return
    archive = archive_dir(dots_dir)
    for entry in sorted(directory.iterdir()):
        if entry.is_dir() and not entry.is_symlink() and entry != archive:
            yield entry
            yield from _iter_live_dirs(dots_dir, entry, depth + 1)


def list_orphan_parents(dots_dir: Path) -> List[Path]:
    """Live folders whose own record file is missing or unreadable, deepest first."""
    dots_dir = Path(dots_dir)
    if not dots_dir.is_dir():
        return []
    orphans = []
    for folder in _iter_live_dirs(dots_dir, dots_dir, 1):
        own = folder / issue_file_name(folder.name)
        if not own.is_file():
            orphans.append(folder)
            continue
        try:
            read_issue_at(dots_dir, own)
        except (InvalidFrontmatter, InvalidStatus) as e:
            LOG.warning("Parent file %s is unreadable: %s", own, e)
            orphans.append(folder)
    orphans.sort(key=lambda p: len(p.parts), reverse=True)
    return orphans


def _collides(folder: Path, entry: Path) -> bool:
    """True if moving entry up next to folder would clash with an existing record."""
    target = folder.parent
    if (target / entry.name).exists():
        return True
    if entry.is_dir():
        return (target / issue_file_name(entry.name)).exists()
    sibling_folder = target / entry.stem
    return sibling_folder != folder and sibling_folder.is_dir()


def _promote(folder: Path) -> int:
    target = folder.parent
    entries = []
    leftovers = []
    strays = []
    for e in sorted(folder.iterdir()):
        if e.is_symlink():
            strays.append(e)
        elif (e.is_file() and e.suffix == ISSUE_EXT) or e.is_dir():
            entries.append(e)
        elif e.suffix == ".tmp":
            leftovers.append(e)
        else:
            strays.append(e)
    if strays:
        raise OSError(
            errno.ENOTEMPTY,
            f"cannot remove orphan folder, it holds non-record files: {', '.join(s.name for s in strays)}",
            str(folder),
        )
    for entry in entries:
        if _collides(folder, entry):
            raise IssueAlreadyExists(f"cannot promote {entry.name}: {target} already has it")
    for entry in entries:
        move(entry, target / entry.name)
    for leftover in leftovers:
        leftover.unlink()
    folder.rmdir()
    return len(entries)


def fix_orphans(dots_dir: Path) -> FixResult:
    """Move the contents of every orphan folder up one level and remove the folder.

    A folder holding anything besides record files, subfolders and stale temp
    files raises OSError before any of its entries move.
    """
    folders = files = 0
    for folder in list_orphan_parents(dots_dir):
        moved = _promote(folder)
        folders += 1
        files += moved
        LOG.info("Fixed orphan folder %s, moved %s entries", folder.name, moved)
    return FixResult(folders=folders, files=files)


def child_paths(dots_dir: Path, path: Path) -> List[Path]:
    """Record files of the direct children of the record at path."""
    if not is_folder_self(dots_dir, path):
        return []
    folder = Path(path).parent
    out = []
    for entry in sorted(folder.iterdir()):
        if entry.is_symlink():
            continue
        if entry.is_file() and entry.suffix == ISSUE_EXT and entry.stem != folder.name:
            out.append(entry)
        elif entry.is_dir():
            own = entry / issue_file_name(entry.name)
            if own.is_file():
                out.append(own)
    return out


def child_issues(dots_dir: Path, path: Path) -> List[IssueFile]:
    """Direct children of the record at path; malformed child files are skipped."""
    children = []
    for child in child_paths(dots_dir, path):
        try:
            children.append(read_issue_at(dots_dir, child))
        except (InvalidFrontmatter, InvalidStatus) as e:
            LOG.warning("Skip malformed child file %s: %s", child, e)
    return children
