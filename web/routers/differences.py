"""FastAPI router exposing daily difference reports and the snapshot trigger."""

from __future__ import annotations

from datetime import date
from typing import Optional

from fastapi import APIRouter, Depends, HTTPException, Query, status
from sqlalchemy.orm import Session

from database import get_db
from schemas.api.differences import DailyDifferences, SnapshotRunResponse
from services import customer_service, difference_engine, snapshot_writer
from services.errors import CustomerNotFoundError, InvalidTargetDateError, StoreFailureError

router = APIRouter(tags=["Differences"])


@router.get("/customers/{customer_id}/daily-differences", response_model=DailyDifferences)
def get_daily_differences(
    customer_id: int,
    target_date: Optional[str] = Query(None, alias="date", description="Target day as YYYY-MM-DD."),
    include_removed: bool = Query(False),
    db: Session = Depends(get_db),
) -> DailyDifferences:
    """Return what changed for the customer since the previous day's snapshot."""
    # The engine treats unknown customers as empty; the API reports them as 404.
    try:
        customer_service.get_customer(db, customer_id)
    except CustomerNotFoundError as exc:
        raise HTTPException(status_code=status.HTTP_404_NOT_FOUND, detail=exc.to_detail()) from exc

    try:
        return difference_engine.compute_daily_differences(
            db,
            customer_id,
            target_date,
            include_removed=include_removed,
        )
    except InvalidTargetDateError as exc:
        raise HTTPException(status_code=status.HTTP_422_UNPROCESSABLE_ENTITY, detail=exc.to_detail()) from exc
    except StoreFailureError as exc:
        raise HTTPException(status_code=status.HTTP_503_SERVICE_UNAVAILABLE, detail=exc.to_detail()) from exc


@router.post("/snapshots/daily", response_model=SnapshotRunResponse)
def run_daily_snapshots(
    snapshot_date: Optional[date] = Query(None, alias="date"),
    db: Session = Depends(get_db),
) -> SnapshotRunResponse:
    """Operator trigger for the snapshot run normally started by the scheduler."""
    try:
        result = snapshot_writer.write_daily_snapshots(db, today=snapshot_date)
    except StoreFailureError as exc:
        raise HTTPException(status_code=status.HTTP_503_SERVICE_UNAVAILABLE, detail=exc.to_detail()) from exc
    return SnapshotRunResponse(**result.as_dict())


__all__ = ["router"]
