"""Daily snapshot writer for every customer's live tickets and issues."""

from __future__ import annotations

from dataclasses import dataclass
from datetime import date, datetime
from typing import Dict, Optional, Union

from sqlalchemy.exc import SQLAlchemyError
from sqlalchemy.orm import Session

from core import settings
from core.logging import get_logger
from services.errors import SnapshotWriteError
from services.record_kinds import JIRA_ISSUES, ZENDESK_TICKETS, RecordKind

logger = get_logger(__name__)


@dataclass(frozen=True, slots=True)
class SnapshotWriteResult:
    snapshot_date: date
    ticket_snapshots_written: int
    issue_snapshots_written: int

    def as_dict(self) -> Dict[str, object]:
        return {
            "snapshot_date": self.snapshot_date.isoformat(),
            "ticket_snapshots_written": self.ticket_snapshots_written,
            "issue_snapshots_written": self.issue_snapshots_written,
        }


def day_key(value: Optional[Union[date, datetime]] = None) -> date:
    """Truncate ``value`` to its calendar day; ``None`` means today."""
    if value is None:
        return settings.today()
    if isinstance(value, datetime):
        return value.date()
    return value


def _write_kind(db: Session, kind: RecordKind, snapshot_day: date) -> int:
    """Upsert one snapshot per live record of ``kind`` for ``snapshot_day``.

    A row already captured for the same (customer, key, day) is refreshed in
    place instead of duplicated.
    """
    live_records = db.query(kind.live_model).order_by(kind.live_model.id.asc()).all()
    if not live_records:
        return 0

    snapshot_model = kind.snapshot_model
    existing = {
        (row.customer_id, kind.key_of(row)): row
        for row in db.query(snapshot_model).filter(snapshot_model.snapshot_date == snapshot_day).all()
    }

    pending = []
    for record in live_records:
        current = existing.get((record.customer_id, kind.key_of(record)))
        if current is None:
            pending.append(kind.build_snapshot(record, snapshot_day))
        else:
            kind.refresh_snapshot(current, record)
    db.add_all(pending)
    db.flush()
    return len(live_records)


def write_daily_snapshots(
    db: Session,
    *,
    today: Optional[Union[date, datetime]] = None,
) -> SnapshotWriteResult:
    """Snapshot every live ticket and issue across all customers for ``today``.

    Each kind is committed as its own unit of work. A failure in one kind is
    rolled back, the other kind is still attempted, and a
    :class:`SnapshotWriteError` is raised afterwards so the failure is never
    reported as success.
    """
    snapshot_day = day_key(today)
    written: Dict[str, int] = {}
    failures: Dict[str, str] = {}

    for kind in (ZENDESK_TICKETS, JIRA_ISSUES):
        try:
            count = _write_kind(db, kind, snapshot_day)
            db.commit()
        except SQLAlchemyError as exc:
            db.rollback()
            logger.error(
                "Snapshot write failed for %s on %s: %s",
                kind.name,
                snapshot_day.isoformat(),
                exc,
                exc_info=True,
            )
            failures[kind.name] = str(exc)
            written[kind.name] = 0
            continue
        written[kind.name] = count
        logger.info("Wrote %d %s snapshots for %s.", count, kind.name, snapshot_day.isoformat())

    if failures:
        raise SnapshotWriteError(failures, written)

    return SnapshotWriteResult(
        snapshot_date=snapshot_day,
        ticket_snapshots_written=written[ZENDESK_TICKETS.name],
        issue_snapshots_written=written[JIRA_ISSUES.name],
    )


__all__ = ["SnapshotWriteResult", "day_key", "write_daily_snapshots"]
