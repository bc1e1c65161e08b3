"""Day-over-day difference computation for a customer's tickets and issues."""

from __future__ import annotations

import re
from datetime import date, datetime, timedelta
from typing import Any, List, Optional, Union

from pydantic import BaseModel
from sqlalchemy.exc import SQLAlchemyError
from sqlalchemy.orm import Session

from core import settings
from core.logging import get_logger
from schemas.api.differences import ChangeType, DailyDifferences
from services.errors import InvalidTargetDateError, StoreFailureError
from services.record_kinds import JIRA_ISSUES, ZENDESK_TICKETS, RecordKind

logger = get_logger(__name__)

_ISO_DAY = re.compile(r"\d{4}-\d{2}-\d{2}")


def resolve_target_date(value: Optional[Union[str, date]] = None) -> date:
    """Parse an ISO ``YYYY-MM-DD`` target; ``None`` means today."""
    if value is None or value == "":
        return settings.today()
    if isinstance(value, datetime):
        return value.date()
    if isinstance(value, date):
        return value
    text = str(value).strip()
    if not _ISO_DAY.fullmatch(text):
        raise InvalidTargetDateError(value)
    try:
        return datetime.strptime(text, "%Y-%m-%d").date()
    except ValueError as exc:
        raise InvalidTargetDateError(value) from exc


def _load_live(db: Session, kind: RecordKind, customer_id: int) -> List[Any]:
    model = kind.live_model
    return db.query(model).filter(model.customer_id == customer_id).order_by(model.id.asc()).all()


def _load_baseline(db: Session, kind: RecordKind, customer_id: int, day_key: date) -> List[Any]:
    model = kind.snapshot_model
    return (
        db.query(model)
        .filter(model.customer_id == customer_id, model.snapshot_date == day_key)
        .order_by(model.id.asc())
        .all()
    )


def diff_records(
    kind: RecordKind,
    live_records: List[Any],
    snapshots: List[Any],
    *,
    include_removed: bool = False,
) -> List[BaseModel]:
    """Classify ``live_records`` against ``snapshots`` of the same kind.

    One difference at most is emitted per live record, in enumeration order.
    Snapshot keys missing from the live set are reported as ``removed`` only
    when ``include_removed`` is set.
    """
    baseline = kind.index_by_key(snapshots)
    differences: List[BaseModel] = []
    seen_keys = set()
    for record in live_records:
        key = kind.key_of(record)
        seen_keys.add(key)
        previous = baseline.get(key)
        change_type = kind.classify(record, previous)
        if change_type is None:
            continue
        previous_status = previous.status if previous is not None else None
        differences.append(kind.build_difference(record, change_type, previous_status))

    if include_removed:
        for key, snapshot in baseline.items():
            if key in seen_keys:
                continue
            differences.append(kind.build_difference(snapshot, ChangeType.REMOVED, snapshot.status))
    return differences


def compute_daily_differences(
    db: Session,
    customer_id: int,
    target_date: Optional[Union[str, date]] = None,
    *,
    include_removed: bool = False,
) -> DailyDifferences:
    """Compare a customer's live tickets and issues against the previous day's snapshots.

    The baseline is exactly ``target_date - 1 day``; older snapshots are never
    consulted, so a skipped snapshot run makes every live record ``new``. An
    unknown customer yields empty lists. Any store error aborts the whole
    report with :class:`StoreFailureError`.
    """
    target = resolve_target_date(target_date)
    previous_day = target - timedelta(days=1)

    try:
        loaded = {
            kind.name: (
                _load_live(db, kind, customer_id),
                _load_baseline(db, kind, customer_id, previous_day),
            )
            for kind in (ZENDESK_TICKETS, JIRA_ISSUES)
        }
    except SQLAlchemyError as exc:
        logger.error(
            "Failed to load records for daily differences (customer=%s, date=%s): %s",
            customer_id,
            target.isoformat(),
            exc,
            exc_info=True,
        )
        raise StoreFailureError("Failed to load tracking records for daily differences.") from exc

    zendesk_live, zendesk_baseline = loaded[ZENDESK_TICKETS.name]
    jira_live, jira_baseline = loaded[JIRA_ISSUES.name]

    report = DailyDifferences(
        customer_id=customer_id,
        date=target.isoformat(),
        zendesk_differences=diff_records(
            ZENDESK_TICKETS, zendesk_live, zendesk_baseline, include_removed=include_removed
        ),
        jira_differences=diff_records(JIRA_ISSUES, jira_live, jira_baseline, include_removed=include_removed),
    )
    logger.info(
        "Computed daily differences for customer %s on %s: zendesk=%d jira=%d (baseline %s)",
        customer_id,
        report.date,
        len(report.zendesk_differences),
        len(report.jira_differences),
        previous_day.isoformat(),
    )
    return report


__all__ = ["compute_daily_differences", "diff_records", "resolve_target_date"]
