"""Log setup for the ``dots`` package logger.

Every store module logs under ``dots.*``:
- WARNING: malformed record files skipped by a scan
- INFO: mutations (create, status, archive, rename, delete, orphan fix)
- DEBUG: every file write and move

Only the ``dots`` logger is touched; records still propagate to whatever
handlers the host application put on the root logger. Configure via
dots.yaml (logging.level, logging.format) or env (LOGGING_LEVEL,
LOGGING_FORMAT).
"""

import logging

from dots.config import LoggingConfig

PACKAGE_LOGGER = "dots"
HANDLER_NAME = "dots.stream"

LEVELS = {
    "DEBUG": logging.DEBUG,
    "INFO": logging.INFO,
    "WARNING": logging.WARNING,
    "ERROR": logging.ERROR,
}

DEFAULT_LEVEL = "INFO"
DEFAULT_FORMAT = "%(asctime)s - %(name)s - %(levelname)s - %(message)s"


def _resolve_level(level: str) -> int:
    """Level name to logging constant; unknown names give INFO."""
    return LEVELS.get(level.upper().strip(), LEVELS[DEFAULT_LEVEL])


def _own_handler(logger: logging.Logger) -> logging.Handler | None:
    for handler in logger.handlers:
        if handler.get_name() == HANDLER_NAME:
            return handler
    return None


class DotsLogging:
    """Applies LoggingConfig to the ``dots`` logger."""

    def __init__(self, config: LoggingConfig) -> None:
        self._level = _resolve_level(config.level)
        self._format = config.format or DEFAULT_FORMAT

    def setup(self) -> logging.Logger:
        """Set the package level and format.

        A stream handler is added only when the ``dots`` logger has no
        handler of its own yet; handlers the host attached are left alone.
        Calling setup again updates the level and format in place.
        """
        logger = logging.getLogger(PACKAGE_LOGGER)
        logger.setLevel(self._level)
        handler = _own_handler(logger)
        if handler is None and not logger.handlers:
            handler = logging.StreamHandler()
            handler.set_name(HANDLER_NAME)
            logger.addHandler(handler)
        if handler is not None:
            handler.setFormatter(logging.Formatter(self._format))
        return logger
