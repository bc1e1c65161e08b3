"""API schemas for live tickets, issues and synchronisation results."""

from __future__ import annotations

from datetime import datetime
from typing import List, Optional

from pydantic import BaseModel, ConfigDict, Field


class ZendeskTicketRead(BaseModel):
    model_config = ConfigDict(from_attributes=True)

    id: int
    customer_id: int
    ticket_id: int
    subject: str
    status: str
    requester: str
    last_update: datetime
    ticket_url: str
    created_at: datetime
    updated_at: datetime


class JiraIssueRead(BaseModel):
    model_config = ConfigDict(from_attributes=True)

    id: int
    customer_id: int
    issue_key: str
    summary: str
    status: str
    assignee: Optional[str] = None
    project: str
    last_update: Optional[datetime] = None
    issue_url: str
    created_at: datetime
    updated_at: datetime


class SyncResponse(BaseModel):
    synced: int
    errors: List[str] = Field(default_factory=list)
