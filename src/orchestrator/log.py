"""Stderr logging setup for command line runs."""

from __future__ import annotations

import logging
import sys

__all__ = ["configure", "reset", "LOGGER_NAMES"]

LOGGER_NAMES = ("orchestrator", "engine", "project_config")

_HANDLER: logging.Handler | None = None


def configure(verbose: bool = False) -> logging.Handler:
    """Route project loggers to stderr with a bare message format.

    Calling again replaces the previously installed handler so repeated runs in
    one process do not duplicate output.
    """

    global _HANDLER
    handler = logging.StreamHandler(sys.stderr)
    handler.setFormatter(logging.Formatter("%(message)s"))
    level = logging.DEBUG if verbose else logging.WARNING

    for name in LOGGER_NAMES:
        logger = logging.getLogger(name)
        if _HANDLER is not None:
            logger.removeHandler(_HANDLER)
        logger.addHandler(handler)
        logger.setLevel(level)

    _HANDLER = handler
    return handler


def reset() -> None:
    """Detach the handler installed by :func:`configure`."""

    global _HANDLER
    if _HANDLER is None:
        return
    for name in LOGGER_NAMES:
        logging.getLogger(name).removeHandler(_HANDLER)
        logging.getLogger(name).setLevel(logging.NOTSET)
    _HANDLER = None
