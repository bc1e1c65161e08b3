"""Shared logging helpers."""

from __future__ import annotations

import logging
import os
from typing import Optional

_CONFIGURED = False
_DEFAULT_FORMAT = "%(asctime)s %(levelname)s %(name)s - %(message)s"


def _level_from_env(default: int) -> int:
    raw = (os.getenv("LOG_LEVEL") or "").strip().upper()
    if not raw:
        return default
    level = logging.getLevelName(raw)
    return level if isinstance(level, int) else default


def setup_logging(level: Optional[int] = None, *, fmt: Optional[str] = None) -> None:
    """Ensure the root logger is configured once.

    ``LOG_LEVEL`` wins over the ``level`` argument so operators can raise
    verbosity without touching code.
    """
    global _CONFIGURED
    if _CONFIGURED:
        return
    resolved = _level_from_env(level if level is not None else logging.INFO)
    logging.basicConfig(level=resolved, format=fmt or _DEFAULT_FORMAT)
    _CONFIGURED = True


def get_logger(name: str, *, level: Optional[int] = None) -> logging.Logger:
    """Return a configured logger for a module."""
    setup_logging(level=level)
    logger = logging.getLogger(name)
    if level is not None:
        logger.setLevel(level)
    return logger
