"""Entry point for callers: load config, set up logging, open the store."""

import logging
from pathlib import Path

from dots.config import AppConfig, load_config, resolve_dots_dir
from dots.logging import DotsLogging
from dots.store import get_config, init_storage, set_config

LOG = logging.getLogger("dots.bootstrap")


def open_store(
    config_path: Path | None = None,
    base_dir: Path | None = None,
    config: AppConfig | None = None,
) -> Path:
    """Return the store directory, creating it if needed.

    A prefix given in the app config is written to the store's own config
    when the store has none yet.
    """
    config = config or load_config(config_path)
    DotsLogging(config.logging).setup()
    dots_dir = init_storage(resolve_dots_dir(config, base_dir))
    if config.storage.prefix and not get_config(dots_dir, "prefix"):
        set_config(dots_dir, "prefix", config.storage.prefix)
    LOG.debug("Opened store %s", dots_dir)
    return dots_dir
