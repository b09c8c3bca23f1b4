"""
Logging setup for the LinkLeaf API.

``setup_logging`` attaches a console handler (and a file handler when
``LOG_FILE`` is set) to the root logger and applies the configured
level to the root and ``linkleaf_api`` loggers.  Handlers are
recognised by name, so calling it again (tests, several ``create_app``
calls, the seed script) only updates levels and never duplicates
output, even when a test runner already installed its own handlers.
"""

import logging
from pathlib import Path
from typing import Optional

from .config import settings

CONSOLE_HANDLER = "linkleaf-console"
FILE_HANDLER = "linkleaf-file"
LOG_FORMAT = "%(asctime)s [%(levelname)s] %(name)s: %(message)s"
DATE_FORMAT = "%Y-%m-%d %H:%M:%S"


def _level_from_name(name: str) -> int:
    level = logging.getLevelName(name.upper())
    return level if isinstance(level, int) else logging.INFO


def _find_handler(logger: logging.Logger, name: str) -> Optional[logging.Handler]:
    for handler in logger.handlers:
        if handler.get_name() == name:
            return handler
    return None


def setup_logging(level: Optional[str] = None, logfile: Optional[str] = None) -> logging.Logger:
    """Configure logging and return the ``linkleaf_api`` logger.

    Parameters
    ----------
    level : Optional[str]
        Level name such as ``"DEBUG"``; defaults to ``settings.log_level``.
        Unknown names fall back to ``INFO``.
    logfile : Optional[str]
        Log file path; defaults to ``settings.log_file``.  Empty means
        console only.
    """
    numeric_level = _level_from_name(level or settings.log_level)
    if logfile is None:
        logfile = settings.log_file

    root = logging.getLogger()
    root.setLevel(numeric_level)
    app_logger = logging.getLogger("linkleaf_api")
    app_logger.setLevel(numeric_level)

    formatter = logging.Formatter(fmt=LOG_FORMAT, datefmt=DATE_FORMAT)

    if _find_handler(root, CONSOLE_HANDLER) is None:
        console_handler = logging.StreamHandler()
        console_handler.set_name(CONSOLE_HANDLER)
        console_handler.setFormatter(formatter)
        root.addHandler(console_handler)

    if logfile and _find_handler(root, FILE_HANDLER) is None:
        file_handler = logging.FileHandler(Path(logfile).resolve(), encoding="utf-8")
        file_handler.set_name(FILE_HANDLER)
        file_handler.setFormatter(formatter)
        root.addHandler(file_handler)

    return app_logger
