"""
Logging setup shared by the API server and the maintenance CLI.

Records from the application and from uvicorn all flow to the root
logger, where ``setup_logging`` installs one console handler and an
optional file handler.  Those handlers are tagged with ``HANDLER_PREFIX``
so that repeated calls (one per ``create_app``) replace them instead of
stacking duplicates, and handlers installed by someone else, such as
pytest's capture, are left alone.
"""

import logging
from pathlib import Path
from typing import List, Optional

HANDLER_PREFIX = "todo_api"
LOG_FORMAT = "%(asctime)s [%(levelname)s] %(name)s: %(message)s"
DATE_FORMAT = "%Y-%m-%d %H:%M:%S"

# uvicorn configures these with handlers of its own; clearing them makes
# server and access logs share the application's format and destination.
UVICORN_LOGGERS = ("uvicorn", "uvicorn.error", "uvicorn.access")


def owned_handlers(logger: Optional[logging.Logger] = None) -> List[logging.Handler]:
    """Return the handlers on ``logger`` (default: root) installed by ``setup_logging``."""
    logger = logger or logging.getLogger()
    return [
        handler
        for handler in logger.handlers
        if (handler.get_name() or "").startswith(HANDLER_PREFIX)
    ]


def setup_logging(level: str = "INFO", logfile: Optional[str] = None) -> None:
    """Configure the root logger for the API.

    Parameters
    ----------
    level : str
        Logging level name (e.g. ``"DEBUG"``).  Case insensitive;
        unknown names fall back to ``INFO``.
    logfile : Optional[str]
        Also append records to this file.  Relative paths are resolved
        against the working directory.
    """
    root = logging.getLogger()
    for handler in owned_handlers(root):
        root.removeHandler(handler)
        handler.close()

    root.setLevel(getattr(logging, level.upper(), logging.INFO))
    formatter = logging.Formatter(fmt=LOG_FORMAT, datefmt=DATE_FORMAT)

    console_handler = logging.StreamHandler()
    console_handler.set_name(f"{HANDLER_PREFIX}.console")
    console_handler.setFormatter(formatter)
    root.addHandler(console_handler)

    if logfile:
        file_handler = logging.FileHandler(Path(logfile).resolve(), encoding="utf-8")
        file_handler.set_name(f"{HANDLER_PREFIX}.file")
        file_handler.setFormatter(formatter)
        root.addHandler(file_handler)

    for name in UVICORN_LOGGERS:
        server_logger = logging.getLogger(name)
        server_logger.handlers.clear()
        server_logger.propagate = True
