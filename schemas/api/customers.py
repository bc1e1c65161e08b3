"""API schemas for customer profile endpoints."""

from __future__ import annotations

from datetime import datetime
from typing import List, Optional

from pydantic import BaseModel, ConfigDict, EmailStr, Field, field_validator


class CustomerCreate(BaseModel):
    model_config = ConfigDict(extra="forbid")

    company_name: str = Field(..., min_length=1)
    slack_channel: str = Field(..., min_length=1)
    zendesk_subdomain: Optional[str] = None
    zendesk_api_token: Optional[str] = None
    zendesk_email: Optional[EmailStr] = None
    jira_host: Optional[str] = None
    jira_api_token: Optional[str] = None
    jira_email: Optional[EmailStr] = None


class CustomerUpdate(BaseModel):
    """Partial update; only fields present in the request body are applied."""

    model_config = ConfigDict(extra="forbid")

    company_name: Optional[str] = Field(default=None, min_length=1)
    slack_channel: Optional[str] = Field(default=None, min_length=1)
    zendesk_subdomain: Optional[str] = None
    zendesk_api_token: Optional[str] = None
    zendesk_email: Optional[EmailStr] = None
    jira_host: Optional[str] = None
    jira_api_token: Optional[str] = None
    jira_email: Optional[EmailStr] = None

    @field_validator("company_name", "slack_channel")
    @classmethod
    def _reject_null(cls, value: Optional[str]) -> str:
        # May be omitted, but an explicit null would clear a required column.
        if value is None:
            raise ValueError("must not be null")
        return value


class CustomerRead(BaseModel):
    model_config = ConfigDict(from_attributes=True)

    id: int
    company_name: str
    slack_channel: str
    zendesk_subdomain: Optional[str] = None
    zendesk_email: Optional[str] = None
    jira_host: Optional[str] = None
    jira_email: Optional[str] = None
    zendesk_configured: bool = False
    jira_configured: bool = False
    created_at: datetime
    updated_at: datetime


class CustomerListResponse(BaseModel):
    items: List[CustomerRead] = Field(default_factory=list)
