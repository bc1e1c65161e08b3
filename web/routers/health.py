"""Runtime status endpoints: store connectivity and snapshot freshness."""

from __future__ import annotations

from datetime import date, timedelta
from typing import Any, Dict, Optional, Tuple

from fastapi import APIRouter
from sqlalchemy import func, text
from sqlalchemy.exc import SQLAlchemyError

import database
from core import settings
from services.record_kinds import RECORD_KINDS

router = APIRouter(prefix="/health", tags=["Health"])


def ping_database() -> Tuple[bool, Optional[str]]:
    db = database.SessionLocal()
    try:
        db.execute(text("SELECT 1"))
        return True, None
    except SQLAlchemyError as exc:
        return False, str(exc)
    finally:
        db.close()


def snapshot_freshness(baseline_day: date) -> Dict[str, Any]:
    """Latest snapshot day per record kind and whether ``baseline_day`` is covered.

    A kind without live records needs no snapshot, so it never blocks readiness.
    """
    db = database.SessionLocal()
    try:
        latest: Dict[str, Optional[str]] = {}
        ready = True
        for kind in RECORD_KINDS:
            day = db.query(func.max(kind.snapshot_model.snapshot_date)).scalar()
            latest[kind.name] = day.isoformat() if day else None
            has_live = db.query(kind.live_model.id).first() is not None
            if has_live and (day is None or day < baseline_day):
                ready = False
        return {"latest": latest, "baseline_ready": ready}
    finally:
        db.close()


@router.get("/status", summary="Service runtime status")
def read_service_status():
    db_ok, db_error = ping_database()
    payload = {"status": "ok" if db_ok else "degraded", "database": {"ok": db_ok}}
    if db_error:
        payload["database"]["error"] = db_error
        return payload

    # Today's report needs yesterday's snapshot as its baseline.
    payload["snapshots"] = snapshot_freshness(settings.today() - timedelta(days=1))
    return payload


__all__ = ["router", "ping_database", "snapshot_freshness"]
