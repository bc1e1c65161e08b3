"""Celery tasks for the daily snapshot run and the live record refresh."""

from __future__ import annotations

from datetime import date
from typing import Any, Dict, Optional

from celery import shared_task

from core.logging import get_logger
from database import SessionLocal
from services import snapshot_writer, sync_service

logger = get_logger(__name__)


@shared_task(name="snapshots.write_daily")
def write_daily_snapshots(snapshot_date: Optional[str] = None) -> Dict[str, Any]:
    """Capture today's baseline (or ``snapshot_date`` when given as YYYY-MM-DD)."""
    today = date.fromisoformat(snapshot_date) if snapshot_date else None
    with SessionLocal() as db:
        result = snapshot_writer.write_daily_snapshots(db, today=today)
    logger.info(
        "Daily snapshot run for %s complete: tickets=%d issues=%d",
        result.snapshot_date.isoformat(),
        result.ticket_snapshots_written,
        result.issue_snapshots_written,
    )
    return result.as_dict()


@shared_task(name="sync.refresh_all")
def refresh_all_customers() -> Dict[str, Any]:
    with SessionLocal() as db:
        summary = sync_service.sync_all_customers(db)
    if summary["errors"]:
        logger.warning("Live record refresh finished with %d error(s).", len(summary["errors"]))
    return summary
