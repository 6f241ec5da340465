"""Logging setup shared by the server and the command line."""

from __future__ import annotations

import logging
import sys

LOG_FORMAT = "%(asctime)s %(levelname)s %(name)s: %(message)s"

_handler: logging.Handler | None = None


def setup_logging(level: str | int = "WARNING") -> logging.Logger:
    """Attach one stream handler to the ``pmdesk`` logger (idempotent)."""
    global _handler
    root = logging.getLogger("pmdesk")
    if isinstance(level, str):
        level = logging.getLevelName(level.upper())
        if not isinstance(level, int):
            level = logging.WARNING
    root.setLevel(level)
    if _handler is None:
        _handler = logging.StreamHandler(sys.stderr)
        _handler.setFormatter(logging.Formatter(LOG_FORMAT))
        root.addHandler(_handler)
    return root
