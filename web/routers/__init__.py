"""FastAPI routers mounted under ``/api/v1``."""

from . import customers, differences, health  # noqa: F401

__all__ = ["customers", "differences", "health"]
