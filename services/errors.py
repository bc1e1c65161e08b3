"""Exception types shared by the tracking services."""

from __future__ import annotations

from typing import Any, Dict, Mapping, Optional


class CustomerNotFoundError(LookupError):
    """Raised when an operation references a customer id that does not exist."""

    def __init__(self, customer_id: int) -> None:
        super().__init__(f"Customer with ID {customer_id} not found")
        self.customer_id = customer_id

    def to_detail(self) -> Dict[str, Any]:
        return {"code": "customer.not_found", "message": str(self)}


class StoreFailureError(RuntimeError):
    """Raised when reading from or writing to the backing store failed."""

    def to_detail(self) -> Dict[str, Any]:
        return {"code": "store.unavailable", "message": str(self)}


class SnapshotWriteError(StoreFailureError):
    """Raised after the snapshot writer attempted every kind and at least one failed."""

    def __init__(self, failures: Mapping[str, str], written: Mapping[str, int]) -> None:
        kinds = ", ".join(sorted(failures))
        super().__init__(f"Snapshot write failed for: {kinds}")
        self.failures = dict(failures)
        self.written = dict(written)

    def to_detail(self) -> Dict[str, Any]:
        detail = super().to_detail()
        detail["failures"] = self.failures
        detail["written"] = self.written
        return detail


class InvalidTargetDateError(ValueError):
    """Raised when a difference target date is not an ISO ``YYYY-MM-DD`` string."""

    def __init__(self, raw: Any) -> None:
        super().__init__(f"Invalid date '{raw}'. Expected YYYY-MM-DD.")
        self.raw = raw

    def to_detail(self) -> Dict[str, Any]:
        return {"code": "differences.invalid_date", "message": str(self)}


class SyncError(RuntimeError):
    """Base class for remote ticketing API failures."""

    def __init__(self, message: str, *, status_code: Optional[int] = None) -> None:
        super().__init__(message)
        self.status_code = status_code


class TransientSyncError(SyncError):
    """Remote failure that may succeed later (rate limit, 5xx, network)."""


class FatalSyncError(SyncError):
    """Remote failure that will not recover without intervention (auth, bad payload)."""


__all__ = [
    "CustomerNotFoundError",
    "StoreFailureError",
    "SnapshotWriteError",
    "InvalidTargetDateError",
    "SyncError",
    "TransientSyncError",
    "FatalSyncError",
]
