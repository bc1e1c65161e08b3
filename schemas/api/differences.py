"""Daily difference report schemas."""

from __future__ import annotations

from datetime import datetime
from enum import Enum
from typing import List, Optional

from pydantic import BaseModel, Field


class ChangeType(str, Enum):
    NEW = "new"
    STATUS_CHANGED = "status_changed"
    ASSIGNEE_CHANGED = "assignee_changed"
    UPDATED = "updated"
    REMOVED = "removed"


class ZendeskTicketDifference(BaseModel):
    ticket_id: int
    subject: str
    current_status: str
    previous_status: Optional[str] = None
    requester: str
    last_update: datetime
    ticket_url: str
    change_type: ChangeType


class JiraIssueDifference(BaseModel):
    issue_key: str
    summary: str
    current_status: str
    previous_status: Optional[str] = None
    assignee: Optional[str] = None
    project: str
    last_update: Optional[datetime] = None
    issue_url: str
    change_type: ChangeType


class DailyDifferences(BaseModel):
    customer_id: int
    date: str = Field(..., description="Target day as YYYY-MM-DD.")
    zendesk_differences: List[ZendeskTicketDifference] = Field(default_factory=list)
    jira_differences: List[JiraIssueDifference] = Field(default_factory=list)


class SnapshotRunResponse(BaseModel):
    snapshot_date: str
    ticket_snapshots_written: int
    issue_snapshots_written: int
