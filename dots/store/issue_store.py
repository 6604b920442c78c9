"""Record storage in {dots_dir}/ as markdown files with a header block.

One file per record. Parents live in a folder named after their ID together
with their children; closed top-level records move under archive/. Every
function takes the store directory first and validates every ID it is given
before touching the filesystem.
"""

import logging
import shutil
from datetime import UTC, datetime
from pathlib import Path
from typing import List, Tuple

from dots.errors import (
    DependencyCycle,
    DependencyNotFound,
    InvalidFrontmatter,
    InvalidStatus,
    IssueAlreadyExists,
    IssueNotFound,
)
from dots.store.archive import ensure_children_closed, maybe_archive
from dots.store.atomic import move
from dots.store.graph import (
    compute_ready,
    is_blocked,
    renamed_references,
    without_references,
    would_create_cycle,
)
from dots.store.hierarchy import child_issues, ensure_parent_folder
from dots.store.identifiers import slugged_id, unslugged_suffix, validate_id
from dots.store.ordering import compute_order_key
from dots.store.paths import (
    archive_dir,
    find_issue_path,
    is_folder_self,
    is_issue_file,
    issue_file_name,
    iter_issue_files,
)
from dots.store.records import (
    collect_issues,
    iter_all_issues,
    read_issue_at,
    write_issue_at,
)
from dots.store.schemas import ChildIssue, DependencyKind, IssueFile, Status
from dots.store.store_config import get_or_create_prefix

LOG = logging.getLogger("dots.store.issue_store")


def utc_now() -> str:
    """Current time as YYYY-MM-DDTHH:MM:SSZ."""
    return datetime.now(UTC).strftime("%Y-%m-%dT%H:%M:%SZ")


def init_storage(dots_dir: Path) -> Path:
    """Create the store and its archive directory if needed."""
    dots_dir = Path(dots_dir)
    dots_dir.mkdir(parents=True, exist_ok=True)
    archive_dir(dots_dir).mkdir(exist_ok=True)
    return dots_dir


def _load(dots_dir: Path, issue_id: str) -> Tuple[Path, IssueFile]:
    validate_id(issue_id)
    path = find_issue_path(dots_dir, issue_id)
    return path, read_issue_at(dots_dir, path)


def _path_of(dots_dir: Path, issue_id: str) -> Path:
    """Locate a record anywhere, including children of archived parents."""
    try:
        return find_issue_path(dots_dir, issue_id)
    except IssueNotFound:
        name = issue_file_name(issue_id)
        for path in iter_issue_files(dots_dir, archive_dir(dots_dir)):
            if path.name == name:
                return path
        raise


def _exists_anywhere(dots_dir: Path, issue_id: str) -> bool:
    try:
        _path_of(dots_dir, issue_id)
    except IssueNotFound:
        return False
    return True


def get_issue(dots_dir: Path, issue_id: str) -> IssueFile | None:
    """Load a record by full ID.

    Returns None if it does not exist. A malformed file raises
    InvalidFrontmatter / InvalidStatus.
    """
    try:
        return _load(dots_dir, issue_id)[1]
    except IssueNotFound:
        return None


def get_issue_by_path(dots_dir: Path, path: Path) -> IssueFile:
    """Load the record stored in a given file (absolute or relative to the store)."""
    path = Path(path)
    if not path.is_absolute():
        path = Path(dots_dir) / path
    return read_issue_at(dots_dir, path)


def _top_level(dots_dir: Path) -> List[IssueFile]:
    dots_dir = Path(dots_dir)
    out = []
    for entry in sorted(dots_dir.iterdir()):
        if entry == archive_dir(dots_dir) or entry.is_symlink():
            continue
        if entry.is_dir():
            entry = entry / issue_file_name(entry.name)
        if not is_issue_file(entry):
            continue
        try:
            out.append(read_issue_at(dots_dir, entry))
        except (InvalidFrontmatter, InvalidStatus) as e:
            LOG.warning("Skip malformed issue file %s: %s", entry, e)
    return out


def _siblings(dots_dir: Path, parent_id: str | None) -> List[IssueFile]:
    """Records that would share a level with a new record under parent_id, sorted by key."""
    if parent_id is None:
        siblings = _top_level(dots_dir)
    else:
        try:
            path = find_issue_path(dots_dir, parent_id)
        except IssueNotFound:
            path = Path(dots_dir) / parent_id / issue_file_name(parent_id)
        siblings = child_issues(dots_dir, path) if path.parent.is_dir() else []
    return sorted(siblings, key=IssueFile.sibling_key)


def create_issue(
    dots_dir: Path,
    issue: IssueFile,
    parent_id: str | None = None,
    after: str | None = None,
    before: str | None = None,
) -> IssueFile:
    """Store a new record, optionally as a child of parent_id.

    after / before place it next to a sibling; otherwise it goes last unless
    the record carries an explicit peer_index. Raises InvalidId,
    IssueAlreadyExists, DependencyNotFound or IssueNotFound (unknown anchor).
    """
    dots_dir = Path(dots_dir)
    for value in (issue.id, parent_id, after, before, *issue.blocks):
        if value is not None:
            validate_id(value)
    if _exists_anywhere(dots_dir, issue.id):
        raise IssueAlreadyExists(f"issue already exists: {issue.id}")
    for blocker in issue.blocks:
        if not _exists_anywhere(dots_dir, blocker):
            raise DependencyNotFound(f"dependency not found: {blocker}")

    peer_index = issue.peer_index
    if after is not None or before is not None or "peer_index" not in issue.model_fields_set:
        peer_index = compute_order_key(_siblings(dots_dir, parent_id), after=after, before=before)

    if issue.status == Status.CLOSED:
        closed_at, close_reason = issue.closed_at or utc_now(), issue.close_reason
    else:
        closed_at, close_reason = None, None

    if parent_id is not None:
        path = ensure_parent_folder(dots_dir, parent_id) / issue_file_name(issue.id)
    elif (dots_dir / issue.id).is_dir():
        path = dots_dir / issue.id / issue_file_name(issue.id)
    else:
        path = dots_dir / issue_file_name(issue.id)

    stored = issue.model_copy(
        update={
            "peer_index": peer_index,
            "closed_at": closed_at,
            "close_reason": close_reason,
            "parent": parent_id,
        }
    )
    write_issue_at(path, stored)
    LOG.info("Created issue %s", issue.id)
    return stored


def list_issues(dots_dir: Path, status: Status | None = None) -> List[IssueFile]:
    """Live (not archived) records, optionally filtered by status."""
    return sorted(collect_issues(dots_dir, status=status), key=IssueFile.sort_key)


def list_all_issues(dots_dir: Path) -> List[IssueFile]:
    """Live records followed by archived ones, each group sorted."""
    archive = archive_dir(dots_dir)
    live = sorted(collect_issues(dots_dir), key=IssueFile.sort_key)
    archived = sorted(collect_issues(dots_dir, archive), key=IssueFile.sort_key) if archive.is_dir() else []
    return live + archived


def _known(dots_dir: Path) -> dict[str, IssueFile]:
    return {issue.id: issue for _, issue in iter_all_issues(dots_dir)}


def get_ready_issues(dots_dir: Path) -> List[IssueFile]:
    """Live open records with no open or active blocker."""
    known = _known(dots_dir)
    live = collect_issues(dots_dir)
    return sorted(compute_ready(live, known), key=IssueFile.sort_key)


def get_children(dots_dir: Path, parent_id: str) -> List[ChildIssue]:
    """Direct children of parent_id with their blocked flag, in sibling order."""
    validate_id(parent_id)
    try:
        path = find_issue_path(dots_dir, parent_id)
    except IssueNotFound:
        path = Path(dots_dir) / parent_id / issue_file_name(parent_id)
        if not path.parent.is_dir():
            raise
    known = _known(dots_dir)
    children = sorted(child_issues(dots_dir, path), key=IssueFile.sibling_key)
    return [ChildIssue(issue=c, blocked=is_blocked(c, known)) for c in children]


def get_root_issues(dots_dir: Path) -> List[IssueFile]:
    """Top-level live records that are not closed, in sibling order."""
    roots = [i for i in _top_level(dots_dir) if i.status != Status.CLOSED]
    return sorted(roots, key=IssueFile.sibling_key)


def _matches(issue: IssueFile, needle: str) -> bool:
    fields = (issue.title, issue.description, issue.close_reason, issue.created_at, issue.closed_at)
    return any(needle in f.lower() for f in fields if f)


def search_issues(dots_dir: Path, query: str) -> List[IssueFile]:
    """Case-insensitive substring search over text and timestamps; live matches first."""
    needle = query.lower()
    return [i for i in list_all_issues(dots_dir) if _matches(i, needle)]


def add_dependency(
    dots_dir: Path,
    from_id: str,
    to_id: str,
    kind: DependencyKind | str = DependencyKind.BLOCKS,
) -> None:
    """Record that from_id is blocked by to_id.

    PARENT_CHILD edges are expressed by file location, so they are only
    checked for existence. Raises DependencyNotFound or DependencyCycle
    before anything is written.
    """
    validate_id(from_id)
    validate_id(to_id)
    kind = DependencyKind(kind)
    if not _exists_anywhere(dots_dir, to_id):
        raise DependencyNotFound(f"dependency not found: {to_id}")
    if kind == DependencyKind.PARENT_CHILD:
        if not _exists_anywhere(dots_dir, from_id):
            raise IssueNotFound(f"issue not found: {from_id}")
        return

    def blocks_of(issue_id: str) -> List[str] | None:
        found = get_issue(dots_dir, issue_id)
        return found.blocks if found is not None else None

    if would_create_cycle(from_id, to_id, blocks_of):
        raise DependencyCycle(f"{from_id} -> {to_id} would create a cycle")
    path, issue = _load(dots_dir, from_id)
    if to_id in issue.blocks:
        return
    write_issue_at(path, issue.with_blocks([*issue.blocks, to_id]))
    LOG.info("Issue %s now blocked by %s", from_id, to_id)


def remove_dependency(dots_dir: Path, from_id: str, to_id: str) -> None:
    """Drop the blocks edge from_id -> to_id; no-op when absent."""
    validate_id(to_id)
    path, issue = _load(dots_dir, from_id)
    if to_id not in issue.blocks:
        return
    write_issue_at(path, issue.with_blocks(without_references(issue.blocks, [to_id])))
    LOG.info("Issue %s no longer blocked by %s", from_id, to_id)


def update_status(
    dots_dir: Path,
    issue_id: str,
    status: Status | str,
    closed_at: str | None = None,
    close_reason: str | None = None,
) -> IssueFile:
    """Change status; closing stamps closed_at and archives when allowed.

    Raises ChildrenNotClosed if closing a parent with unfinished children.
    """
    status = status if isinstance(status, Status) else Status.parse(status)
    path, issue = _load(dots_dir, issue_id)
    if status == Status.CLOSED:
        ensure_children_closed(dots_dir, path)
        updated = issue.with_status(
            status,
            closed_at or issue.closed_at or utc_now(),
            close_reason or issue.close_reason,
        )
    else:
        updated = issue.with_status(status, None, None)
    write_issue_at(path, updated)
    LOG.info("Issue %s status -> %s", issue_id, status.value)
    if status == Status.CLOSED:
        maybe_archive(dots_dir, issue_id, path)
    return updated


def archive_issue(dots_dir: Path, issue_id: str) -> None:
    """Archive a record without a status change (used for records imported already closed)."""
    validate_id(issue_id)
    maybe_archive(dots_dir, issue_id, find_issue_path(dots_dir, issue_id))


def _drop_references(dots_dir: Path, removed: set[str]) -> int:
    """Remove every ID in removed from the blocker lists of the remaining records."""
    rewritten = 0
    for path, issue in list(iter_all_issues(dots_dir)):
        if issue.id in removed or removed.isdisjoint(issue.blocks):
            continue
        write_issue_at(path, issue.with_blocks(without_references(issue.blocks, removed)))
        rewritten += 1
    return rewritten


def _rename_references(dots_dir: Path, old_id: str, new_id: str) -> int:
    rewritten = 0
    for path, issue in list(iter_all_issues(dots_dir)):
        if old_id in issue.blocks:
            write_issue_at(path, issue.with_blocks(renamed_references(issue.blocks, old_id, new_id)))
            rewritten += 1
    return rewritten


def _rename_at(dots_dir: Path, path: Path, new_id: str) -> Path:
    new_name = issue_file_name(new_id)
    if is_folder_self(dots_dir, path):
        folder = path.parent
        new_folder = folder.parent / new_id
        if new_folder.exists():
            raise IssueAlreadyExists(f"issue already exists: {new_id}")
        move(path, folder / new_name)
        move(folder, new_folder)
        return new_folder / new_name
    new_path = path.with_name(new_name)
    if new_path.exists() or (path.parent / new_id).exists():
        raise IssueAlreadyExists(f"issue already exists: {new_id}")
    move(path, new_path)
    return new_path


def rename_issue(dots_dir: Path, old_id: str, new_id: str) -> IssueFile:
    """Give a record a new ID and update every record that references the old one."""
    validate_id(old_id)
    validate_id(new_id)
    path = _path_of(dots_dir, old_id)
    issue = read_issue_at(dots_dir, path)
    if new_id == old_id:
        return issue
    if _exists_anywhere(dots_dir, new_id):
        raise IssueAlreadyExists(f"issue already exists: {new_id}")
    new_path = _rename_at(dots_dir, path, new_id)
    rewritten = _rename_references(dots_dir, old_id, new_id)
    LOG.info("Renamed %s -> %s (%s references updated)", old_id, new_id, rewritten)
    return read_issue_at(dots_dir, new_path)


def delete_issue(dots_dir: Path, issue_id: str) -> None:
    """Delete a record (a parent with its whole folder) and strip references to it."""
    validate_id(issue_id)
    path = _path_of(dots_dir, issue_id)
    removed = {issue_id}
    if is_folder_self(dots_dir, path):
        removed.update(p.stem for p in iter_issue_files(dots_dir, path.parent))
    _drop_references(dots_dir, removed)
    if is_folder_self(dots_dir, path):
        shutil.rmtree(path.parent)
    else:
        path.unlink()
    LOG.info("Deleted issue %s (%s records)", issue_id, len(removed))


def slugify_ids(dots_dir: Path) -> List[Tuple[str, str]]:
    """Rename every {prefix}-{hex} record to {prefix}-{slug}-{hex}, archive included.

    Returns the (old, new) pairs that were renamed.
    """
    prefix = get_or_create_prefix(dots_dir)
    renamed = []
    for issue in [i for _, i in iter_all_issues(dots_dir)]:
        suffix = unslugged_suffix(issue.id, prefix)
        if suffix is None:
            continue
        new_id = slugged_id(prefix, issue.title, suffix)
        if _exists_anywhere(dots_dir, new_id):
            raise IssueAlreadyExists(f"issue already exists: {new_id}")
        current = _path_of(dots_dir, issue.id)
        _rename_at(dots_dir, current, new_id)
        _rename_references(dots_dir, issue.id, new_id)
        renamed.append((issue.id, new_id))
        LOG.info("Slugified %s -> %s", issue.id, new_id)
    return renamed

