"""Descriptions of the two record kinds compared day over day.

Zendesk tickets and Jira issues go through the same snapshot and difference
pipeline. A :class:`RecordKind` captures everything that differs between the
two: the ORM models, the natural key, which columns are copied into a
snapshot and the ordered change checks used to classify a live record
against its baseline.
"""

from __future__ import annotations

from dataclasses import dataclass
from datetime import date, datetime, timezone
from typing import Any, Iterable, Optional, Sequence, Tuple, Type

from pydantic import BaseModel

from models.snapshot import JiraIssueSnapshot, ZendeskTicketSnapshot
from models.tracking import JiraIssue, ZendeskTicket
from schemas.api.differences import ChangeType, JiraIssueDifference, ZendeskTicketDifference

_REPORT_ONLY_FIELDS = {"current_status", "previous_status", "change_type"}


def _comparable(value: Any) -> Any:
    # Aware and naive timestamps for the same instant must compare equal.
    if isinstance(value, datetime) and value.tzinfo is not None:
        return value.astimezone(timezone.utc).replace(tzinfo=None)
    return value


@dataclass(frozen=True)
class RecordKind:
    name: str
    live_model: Type[Any]
    snapshot_model: Type[Any]
    key_field: str
    copied_fields: Tuple[str, ...]
    change_checks: Tuple[Tuple[ChangeType, Tuple[str, ...]], ...]
    difference_model: Type[BaseModel]

    def key_of(self, record: Any) -> Any:
        return getattr(record, self.key_field)

    def build_snapshot(self, record: Any, day_key: date) -> Any:
        values = {field: getattr(record, field) for field in self.copied_fields}
        return self.snapshot_model(
            customer_id=record.customer_id,
            snapshot_date=day_key,
            **{self.key_field: self.key_of(record)},
            **values,
        )

    def refresh_snapshot(self, snapshot: Any, record: Any) -> None:
        for field in self.copied_fields:
            setattr(snapshot, field, getattr(record, field))

    def classify(self, live: Any, snapshot: Optional[Any]) -> Optional[ChangeType]:
        """Return the single change type for ``live`` or ``None`` when unchanged.

        Checks run in declaration order and the first one that sees a
        difference wins, so a status change hides any other edits.
        """
        if snapshot is None:
            return ChangeType.NEW
        for change_type, fields in self.change_checks:
            if any(_comparable(getattr(live, f)) != _comparable(getattr(snapshot, f)) for f in fields):
                return change_type
        return None

    def build_difference(
        self,
        source: Any,
        change_type: ChangeType,
        previous_status: Optional[str],
    ) -> BaseModel:
        payload = {
            name: getattr(source, name)
            for name in self.difference_model.model_fields
            if name not in _REPORT_ONLY_FIELDS
        }
        return self.difference_model(
            **payload,
            current_status=source.status,
            previous_status=previous_status,
            change_type=change_type,
        )

    def index_by_key(self, snapshots: Iterable[Any]) -> dict:
        # Later rows overwrite earlier ones for the same key.
        return {self.key_of(snapshot): snapshot for snapshot in snapshots}


ZENDESK_TICKETS = RecordKind(
    name="zendesk",
    live_model=ZendeskTicket,
    snapshot_model=ZendeskTicketSnapshot,
    key_field="ticket_id",
    copied_fields=("subject", "status", "requester", "last_update", "ticket_url"),
    change_checks=(
        (ChangeType.STATUS_CHANGED, ("status",)),
        (ChangeType.UPDATED, ("subject", "last_update")),
    ),
    difference_model=ZendeskTicketDifference,
)

JIRA_ISSUES = RecordKind(
    name="jira",
    live_model=JiraIssue,
    snapshot_model=JiraIssueSnapshot,
    key_field="issue_key",
    copied_fields=("summary", "status", "assignee", "project", "last_update", "issue_url"),
    change_checks=(
        (ChangeType.STATUS_CHANGED, ("status",)),
        (ChangeType.ASSIGNEE_CHANGED, ("assignee",)),
        (ChangeType.UPDATED, ("summary",)),
    ),
    difference_model=JiraIssueDifference,
)

RECORD_KINDS: Sequence[RecordKind] = (ZENDESK_TICKETS, JIRA_ISSUES)


__all__ = ["RecordKind", "ZENDESK_TICKETS", "JIRA_ISSUES", "RECORD_KINDS"]
