"""Logging setup for the ``streamedit`` logger tree.

Every module logs through ``logging.getLogger(__name__)``; configuring the
``streamedit`` root here covers them all. Verbosity is a count, as given by
repeated ``-v`` flags:

    0  warnings and errors only
    1  marker repairs and loosely matched blocks
    2  everything, including parser resets and ignored stray lines
"""

import logging
from logging.handlers import RotatingFileHandler
from pathlib import Path
from typing import Optional, Union

__all__ = ["ROOT_LOGGER", "level_for", "setup_logger", "edit_logger"]

ROOT_LOGGER = "streamedit"
DEFAULT_LOG_FILE = Path("~/.streamedit/logs/streamedit.log").expanduser()
CONSOLE_FORMAT = "[%(levelname).1s] %(message)s"
FILE_FORMAT = "%(asctime)s %(levelname)-7s %(name)s: %(message)s"
MAX_LOG_BYTES = 2 * 1024 * 1024
LOG_BACKUP_COUNT = 3

_LEVELS = (logging.WARNING, logging.INFO, logging.DEBUG)

LogTarget = Union[str, Path, bool, None]


def level_for(verbosity: int) -> int:
    """Map a ``-v`` count to a logging level; counts past the last level saturate."""
    return _LEVELS[max(0, min(verbosity, len(_LEVELS) - 1))]


def _resolve_log_path(log_file: LogTarget) -> Optional[Path]:
    if log_file is True:
        return DEFAULT_LOG_FILE
    if not log_file:
        return None
    return Path(log_file).expanduser()


def setup_logger(verbosity: int = 0, log_file: LogTarget = None,
                 name: str = ROOT_LOGGER) -> logging.Logger:
    """(Re)configure ``name`` with a stderr handler and an optional rotating file.

    The file handler always records DEBUG so a log file keeps the full
    history of a run regardless of console verbosity.
    """
    logger = logging.getLogger(name)
    for handler in list(logger.handlers):
        logger.removeHandler(handler)
        handler.close()

    console_level = level_for(verbosity)
    logger.propagate = False

    console_handler = logging.StreamHandler()
    console_handler.setLevel(console_level)
    console_handler.setFormatter(logging.Formatter(CONSOLE_FORMAT))
    logger.addHandler(console_handler)

    log_path = _resolve_log_path(log_file)
    if log_path is None:
        logger.setLevel(console_level)
        return logger

    log_path.parent.mkdir(parents=True, exist_ok=True)
    file_handler = RotatingFileHandler(
        log_path, maxBytes=MAX_LOG_BYTES, backupCount=LOG_BACKUP_COUNT, encoding="utf-8",
    )
    file_handler.setLevel(logging.DEBUG)
    file_handler.setFormatter(logging.Formatter(FILE_FORMAT))
    logger.addHandler(file_handler)
    logger.setLevel(logging.DEBUG)
    return logger


class EditLogAdapter(logging.LoggerAdapter):
    """Prefixes records with the file an edit targets."""

    def process(self, msg, kwargs):
        return f"[{self.extra['path']}] {msg}", kwargs


def edit_logger(path: str, name: str = f"{ROOT_LOGGER}.edit") -> EditLogAdapter:
    return EditLogAdapter(logging.getLogger(name), {"path": path})
