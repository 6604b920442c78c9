"""Store settings in {dots_dir}/config: one key=value per line.

Every write rewrites the whole file atomically.
"""

import logging
from pathlib import Path

from dots.store.atomic import write_atomic
from dots.store.paths import CONFIG_FILE

LOG = logging.getLogger("dots.store.store_config")

DEFAULT_PREFIX = "dot"


def _config_path(dots_dir: Path) -> Path:
    return Path(dots_dir) / CONFIG_FILE


def read_config(dots_dir: Path) -> dict[str, str]:
    """All settings, in file order. Lines without '=' are ignored.

    Only "\\n" ends a line, so any other character survives in a value.
    """
    path = _config_path(dots_dir)
    if not path.is_file():
        return {}
    with open(path, encoding="utf-8", newline="") as f:
        content = f.read()
    out: dict[str, str] = {}
    for line in content.split("\n"):
        key, sep, value = line.partition("=")
        if sep:
            out[key] = value
    return out


def get_config(dots_dir: Path, key: str) -> str | None:
    return read_config(dots_dir).get(key)


def set_config(dots_dir: Path, key: str, value: str) -> None:
    """Set one key, keeping the others, and rewrite the file."""
    if "=" in key or "\n" in key or "\n" in value:
        raise ValueError(f"invalid config entry {key!r}={value!r}")
    config = read_config(dots_dir)
    config[key] = value
    write_atomic(_config_path(dots_dir), "".join(f"{k}={v}\n" for k, v in config.items()))
    LOG.debug("Config %s=%s", key, value)


def get_or_create_prefix(dots_dir: Path) -> str:
    """ID prefix from config; on first use derived from the project directory name and saved."""
    prefix = get_config(dots_dir, "prefix")
    if prefix:
        return prefix
    project = Path(dots_dir).resolve().parent.name
    prefix = project.rstrip("-") or DEFAULT_PREFIX
    set_config(dots_dir, "prefix", prefix)
    LOG.info("Using ID prefix %s", prefix)
    return prefix
