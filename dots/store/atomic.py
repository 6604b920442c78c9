"""Crash-safe file writes: temp file in the same directory, fsync, rename."""

import logging
import os
from pathlib import Path

from dots.store.identifiers import random_suffix

LOG = logging.getLogger("dots.store.atomic")


def write_atomic(path: Path, content: str) -> None:
    """Replace path with content so readers see either the old or the new file.

    The temporary file {path}.{hex}.tmp is removed if anything fails before the
    rename.
    """
    path = Path(path)
    tmp = path.with_name(f"{path.name}.{random_suffix()}.tmp")
    try:
        with open(tmp, "w", encoding="utf-8", newline="\n") as f:
            f.write(content)
            f.flush()
            os.fsync(f.fileno())
        os.replace(tmp, path)
    except BaseException:
        tmp.unlink(missing_ok=True)
        raise
    LOG.debug("Wrote %s", path)


def move(src: Path, dst: Path) -> None:
    """Rename a file or a whole directory in one step."""
    os.rename(src, dst)
    LOG.debug("Moved %s -> %s", src, dst)
