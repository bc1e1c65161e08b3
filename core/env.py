"""Environment variable helpers."""

from __future__ import annotations

import os
from typing import Callable, Optional, TypeVar
from zoneinfo import ZoneInfo, ZoneInfoNotFoundError

from core.logging import get_logger

T = TypeVar("T", int, float)

logger = get_logger(__name__)

_TRUE_VALUES = {"1", "true", "yes", "y", "on"}
_FALSE_VALUES = {"0", "false", "no", "n", "off"}


def env_str(key: str, default: Optional[str] = None) -> Optional[str]:
    value = os.getenv(key, default)
    if value is None:
        logger.debug("Environment variable %s not set. Using default=%s.", key, default)
    return value


def _env_number(key: str, default: T, cast: Callable[[str], T], minimum: Optional[T]) -> T:
    raw = os.getenv(key)
    if raw is None or not raw.strip():
        return default
    try:
        value = cast(raw.strip())
    except ValueError:
        logger.warning("Invalid %s value '%s'. Falling back to %s.", key, raw, default)
        return default
    if minimum is not None and value < minimum:
        logger.warning("%s=%s is below the minimum %s. Falling back to %s.", key, value, minimum, default)
        return default
    return value


def env_int(key: str, default: int, *, minimum: Optional[int] = None) -> int:
    return _env_number(key, default, int, minimum)


def env_float(key: str, default: float, *, minimum: Optional[float] = None) -> float:
    return _env_number(key, default, float, minimum)


def env_bool(key: str, default: bool) -> bool:
    raw = os.getenv(key)
    if raw is None:
        return default
    normalized = raw.strip().lower()
    if normalized in _TRUE_VALUES:
        return True
    if normalized in _FALSE_VALUES:
        return False
    logger.warning("Invalid boolean env %s='%s'. Using default=%s.", key, raw, default)
    return default


def env_zone(key: str, default: str = "UTC") -> ZoneInfo:
    """Return the IANA zone named by ``key``; unknown names fall back to ``default``."""
    name = (os.getenv(key) or default).strip()
    try:
        return ZoneInfo(name)
    except (ZoneInfoNotFoundError, ValueError):
        logger.warning("Unknown timezone %s='%s'. Using %s.", key, name, default)
        return ZoneInfo(default)


__all__ = ["env_str", "env_int", "env_float", "env_bool", "env_zone"]
