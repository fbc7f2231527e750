"""Package logger shared by the page store, the section editor, the CLI and the service.

Components log under ``wikisections.<component>`` (``stores.pages``, ``editor``,
``service``). Section edits are reported at INFO; promotions, skipped writes and
order changes at DEBUG, which ``--verbose`` turns on.
"""

from __future__ import annotations

import logging
from pathlib import Path

_LOGGER_NAME = "wikisections"
_CONSOLE_FORMAT = "[wikisections] %(levelname)s %(message)s"
_FILE_FORMAT = "%(asctime)s %(levelname)s %(name)s: %(message)s"


def get_logger(component: str | None = None) -> logging.Logger:
    """Logger for one component, e.g. ``get_logger("editor")`` -> ``wikisections.editor``."""
    full_name = f"{_LOGGER_NAME}.{component}" if component else _LOGGER_NAME
    return logging.getLogger(full_name)


def configure_logging(
    *, verbose: bool = False, log_file: Path | None = None
) -> logging.Logger:
    """Route package records to stderr and, with ``log_file``, to an edit log.

    Console output goes to stderr so ``wikisections show`` can be piped. The file
    sink keeps the component name and timestamp of every edit. Calling this again
    replaces the handlers installed by the previous call.
    """
    level = logging.DEBUG if verbose else logging.INFO
    logger = logging.getLogger(_LOGGER_NAME)
    logger.setLevel(level)
    logger.propagate = False

    for handler in list(logger.handlers):
        logger.removeHandler(handler)
        handler.close()

    console = logging.StreamHandler()
    console.setLevel(level)
    console.setFormatter(logging.Formatter(_CONSOLE_FORMAT))
    logger.addHandler(console)

    if log_file is not None:
        log_file.parent.mkdir(parents=True, exist_ok=True)
        edit_log = logging.FileHandler(log_file, encoding="utf-8")
        edit_log.setLevel(level)
        edit_log.setFormatter(logging.Formatter(_FILE_FORMAT))
        logger.addHandler(edit_log)

    return logger


__all__ = ["configure_logging", "get_logger"]
