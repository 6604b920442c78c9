"""Locating records on disk and resolving short ID prefixes.

Layout under the store directory::

    {id}.md                     record without children
    {parent}/{parent}.md        record with children
    {parent}/{child}.md         child record
    archive/...                 closed records, same shapes
    config                      key=value settings
"""

from pathlib import Path
from typing import Iterable, Iterator, NamedTuple

from dots.errors import AmbiguousId, IssueNotFound, StorageError

ISSUE_EXT = ".md"
ARCHIVE_DIR = "archive"
CONFIG_FILE = "config"
MAX_DEPTH = 10


class Resolved(NamedTuple):
    """Outcome of resolving one prefix: id on success, error otherwise."""

    prefix: str
    id: str | None
    error: StorageError | None


def archive_dir(dots_dir: Path) -> Path:
    return Path(dots_dir) / ARCHIVE_DIR


def issue_file_name(issue_id: str) -> str:
    return f"{issue_id}{ISSUE_EXT}"


def is_issue_file(path: Path) -> bool:
    return path.suffix == ISSUE_EXT and path.is_file() and not path.is_symlink()


def _is_walkable_dir(path: Path, dots_dir: Path) -> bool:
    return path.is_dir() and not path.is_symlink() and path != archive_dir(dots_dir)


def is_archived(dots_dir: Path, path: Path) -> bool:
    """True if path lies under the archive root."""
    return Path(path).is_relative_to(archive_dir(dots_dir))


def is_folder_self(dots_dir: Path, path: Path) -> bool:
    """True if path is {x}/{x}.md, the own file of a parent record."""
    path = Path(path)
    folder = path.parent
    return folder not in (Path(dots_dir), archive_dir(dots_dir)) and folder.name == path.stem


def record_home(dots_dir: Path, path: Path) -> Path:
    """The entry that moves with the record: its folder if it has children, else its file."""
    return Path(path).parent if is_folder_self(dots_dir, path) else Path(path)


def parent_from_path(dots_dir: Path, path: Path) -> str | None:
    """Parent ID implied by where the record file lives, or None at a top level."""
    tops = (Path(dots_dir), archive_dir(dots_dir))
    container = record_home(dots_dir, path).parent
    if container in tops:
        return None
    return container.name


def find_issue_path(dots_dir: Path, issue_id: str) -> Path:
    """Path of the record file for issue_id.

    Checks root file, root folder, archive file and archive folder, then walks
    the live tree (symlinks and the archive skipped, at most MAX_DEPTH levels).
    Raises IssueNotFound.
    """
    dots_dir = Path(dots_dir)
    name = issue_file_name(issue_id)
    archive = archive_dir(dots_dir)
    for candidate in (
        dots_dir / name,
        dots_dir / issue_id / name,
        archive / name,
        archive / issue_id / name,
    ):
        if candidate.is_file():
            return candidate
    found = _search(dots_dir, dots_dir, name, 1)
    if found is None:
        raise IssueNotFound(f"issue not found: {issue_id}")
    return found


def _search(dots_dir: Path, directory: Path, name: str, depth: int) -> Path | None:
    if depth > MAX_DEPTH:
        return None
    try:
        entries = sorted(directory.iterdir())
    except (FileNotFoundError, PermissionError):
        return None
    for entry in entries:
        if not _is_walkable_dir(entry, dots_dir):
            continue
        candidate = entry / name
        if candidate.is_file():
            return candidate
        found = _search(dots_dir, entry, name, depth + 1)
        if found is not None:
            return found
    return None


def issue_exists(dots_dir: Path, issue_id: str) -> bool:
    try:
        find_issue_path(dots_dir, issue_id)
    except IssueNotFound:
        return False
    return True


def iter_issue_files(dots_dir: Path, base: Path | None = None) -> Iterator[Path]:
    """Record files under base (default: live tree), depth-first, sorted by name."""
    dots_dir = Path(dots_dir)
    yield from _walk(dots_dir, Path(base) if base is not None else dots_dir, 1)


def _walk(dots_dir: Path, directory: Path, depth: int) -> Iterator[Path]:
    if depth > MAX_DEPTH or not directory.is_dir():
        return
    for entry in sorted(directory.iterdir()):
        if is_issue_file(entry):
            yield entry
        elif _is_walkable_dir(entry, dots_dir):
            yield from _walk(dots_dir, entry, depth + 1)


def _collect_names(dots_dir: Path, directory: Path, names: list[str], depth: int) -> None:
    if depth > MAX_DEPTH or not directory.is_dir():
        return
    own = directory.name if depth > 1 else None
    for entry in sorted(directory.iterdir()):
        if is_issue_file(entry):
            if entry.stem != own:
                names.append(entry.stem)
        elif _is_walkable_dir(entry, dots_dir):
            names.append(entry.name)
            _collect_names(dots_dir, entry, names, depth + 1)


def all_id_names(dots_dir: Path) -> list[str]:
    """Every record name in the live tree and the archive, one entry per record."""
    dots_dir = Path(dots_dir)
    names: list[str] = []
    _collect_names(dots_dir, dots_dir, names, 1)
    archive = archive_dir(dots_dir)
    if archive.is_dir() and not archive.is_symlink():
        _collect_names(dots_dir, archive, names, 1)
    return names


def _match(prefix: str, names: list[str]) -> Resolved:
    matches = sorted({n for n in names if n.startswith(prefix)})
    if not matches:
        return Resolved(prefix, None, IssueNotFound(f"no issue matches {prefix!r}"))
    if len(matches) > 1:
        return Resolved(prefix, None, AmbiguousId(prefix, matches))
    return Resolved(prefix, matches[0], None)


def resolve_ids(dots_dir: Path, prefixes: Iterable[str]) -> list[Resolved]:
    """Resolve several prefixes with a single directory scan."""
    names = all_id_names(dots_dir)
    return [_match(prefix, names) for prefix in prefixes]


def resolve_id(dots_dir: Path, prefix: str) -> str:
    """Full ID for a unique prefix. Raises IssueNotFound or AmbiguousId."""
    result = _match(prefix, all_id_names(dots_dir))
    if result.error is not None:
        raise result.error
    return result.id
