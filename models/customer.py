"""Customer profiles and the credentials used by the ticket synchronisers."""

from __future__ import annotations

from sqlalchemy import Column, DateTime, Integer, String, Text, func
from sqlalchemy.orm import relationship

from database import Base


class Customer(Base):
    """A tracked customer and its Zendesk/Jira connection details."""

    __tablename__ = "customers"

    id = Column(Integer, primary_key=True, autoincrement=True)
    company_name = Column(Text, nullable=False, index=True)
    slack_channel = Column(Text, nullable=False)
    zendesk_subdomain = Column(String(255), nullable=True)
    zendesk_api_token = Column(Text, nullable=True)
    zendesk_email = Column(String(320), nullable=True)
    jira_host = Column(String(255), nullable=True)
    jira_api_token = Column(Text, nullable=True)
    jira_email = Column(String(320), nullable=True)
    created_at = Column(DateTime(timezone=True), server_default=func.now(), nullable=False)
    updated_at = Column(DateTime(timezone=True), server_default=func.now(), onupdate=func.now(), nullable=False)

    zendesk_tickets = relationship("ZendeskTicket", back_populates="customer", passive_deletes=True)
    jira_issues = relationship("JiraIssue", back_populates="customer", passive_deletes=True)

    @property
    def zendesk_configured(self) -> bool:
        return bool(self.zendesk_subdomain and self.zendesk_api_token and self.zendesk_email)

    @property
    def jira_configured(self) -> bool:
        return bool(self.jira_host and self.jira_api_token and self.jira_email)

    def __repr__(self) -> str:  # pragma: no cover - repr helper
        return f"<Customer(id={self.id}, company_name='{self.company_name}')>"


__all__ = ["Customer"]
