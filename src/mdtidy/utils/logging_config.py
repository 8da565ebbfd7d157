"""Logging setup shared by the library and the CLI."""

from __future__ import annotations

import logging
import sys

_LOG_FORMAT = "%(levelname)s %(name)s: %(message)s"


def get_logger(name: str) -> logging.Logger:
    """Return a module logger under the ``mdtidy`` hierarchy."""
    return logging.getLogger(name)


def configure_logging(*, verbose: bool = False, quiet: bool = False) -> None:
    """Attach a stderr handler to the package logger.

    Args:
        verbose: Log at DEBUG level.
        quiet: Only log errors. Takes precedence over ``verbose``.
    """
    if quiet:
        level = logging.ERROR
    elif verbose:
        level = logging.DEBUG
    else:
        level = logging.WARNING

    root = logging.getLogger("mdtidy")
    root.setLevel(level)
    for handler in root.handlers:
        if getattr(handler, "_mdtidy_handler", False):
            # sys.stderr may have been replaced since the last call.
            handler.setStream(sys.stderr)
            return

    handler = logging.StreamHandler(sys.stderr)
    handler.setFormatter(logging.Formatter(_LOG_FORMAT))
    handler._mdtidy_handler = True  # type: ignore[attr-defined]
    root.addHandler(handler)
