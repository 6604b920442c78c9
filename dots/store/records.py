"""Reading and writing single record files, and bulk scans that tolerate bad files."""

import logging
from pathlib import Path
from typing import Iterator, List, Tuple

from dots.errors import InvalidFrontmatter, InvalidStatus
from dots.store.atomic import write_atomic
from dots.store.frontmatter import parse_frontmatter, serialize_frontmatter
from dots.store.paths import archive_dir, iter_issue_files, parent_from_path
from dots.store.schemas import IssueFile, Status

LOG = logging.getLogger("dots.store.records")


def read_issue_at(dots_dir: Path, path: Path) -> IssueFile:
    """Decode the record at path; the ID is the file name, the parent comes from the location.

    Raises InvalidFrontmatter / InvalidStatus for a malformed file and OSError
    if it cannot be read.
    """
    path = Path(path)
    with open(path, encoding="utf-8", newline="") as f:
        content = f.read()
    return parse_frontmatter(content, path.stem, parent=parent_from_path(dots_dir, path))


def write_issue_at(path: Path, issue: IssueFile) -> None:
    write_atomic(path, serialize_frontmatter(issue))


def iter_issues(dots_dir: Path, base: Path | None = None) -> Iterator[Tuple[Path, IssueFile]]:
    """(path, record) for every readable record under base (default: live tree).

    Malformed files are logged and skipped; read errors propagate.
    """
    for path in iter_issue_files(dots_dir, base):
        try:
            yield path, read_issue_at(dots_dir, path)
        except (InvalidFrontmatter, InvalidStatus) as e:
            LOG.warning("Skip malformed issue file %s: %s", path, e)


def iter_all_issues(dots_dir: Path) -> Iterator[Tuple[Path, IssueFile]]:
    """Live records followed by archived ones."""
    yield from iter_issues(dots_dir)
    archive = archive_dir(dots_dir)
    if archive.is_dir():
        yield from iter_issues(dots_dir, archive)


def collect_issues(
    dots_dir: Path,
    base: Path | None = None,
    status: Status | None = None,
) -> List[IssueFile]:
    """Records under base (default: live tree), optionally only those with status."""
    return [i for _, i in iter_issues(dots_dir, base) if status is None or i.status == status]


def collect_all_issues(dots_dir: Path) -> List[IssueFile]:
    return [i for _, i in iter_all_issues(dots_dir)]
