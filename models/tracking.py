"""Live Zendesk tickets and Jira issues mirrored per customer."""

from __future__ import annotations

from sqlalchemy import Column, DateTime, ForeignKey, Integer, String, Text, UniqueConstraint, func
from sqlalchemy.orm import relationship

from database import Base


class ZendeskTicket(Base):
    """Current state of one Zendesk ticket; the natural key is ``ticket_id``."""

    __tablename__ = "zendesk_tickets"
    __table_args__ = (UniqueConstraint("customer_id", "ticket_id", name="uq_zendesk_tickets_customer_ticket"),)

    id = Column(Integer, primary_key=True, autoincrement=True)
    customer_id = Column(Integer, ForeignKey("customers.id", ondelete="CASCADE"), nullable=False, index=True)
    ticket_id = Column(Integer, nullable=False)
    subject = Column(Text, nullable=False)
    status = Column(String(64), nullable=False)
    requester = Column(Text, nullable=False)
    last_update = Column(DateTime(timezone=True), nullable=False)
    ticket_url = Column(Text, nullable=False)
    created_at = Column(DateTime(timezone=True), server_default=func.now(), nullable=False)
    updated_at = Column(DateTime(timezone=True), server_default=func.now(), onupdate=func.now(), nullable=False)

    customer = relationship("Customer", back_populates="zendesk_tickets")


class JiraIssue(Base):
    """Current state of one Jira issue; the natural key is ``issue_key``."""

    __tablename__ = "jira_issues"
    __table_args__ = (UniqueConstraint("customer_id", "issue_key", name="uq_jira_issues_customer_key"),)

    id = Column(Integer, primary_key=True, autoincrement=True)
    customer_id = Column(Integer, ForeignKey("customers.id", ondelete="CASCADE"), nullable=False, index=True)
    issue_key = Column(String(64), nullable=False)
    summary = Column(Text, nullable=False)
    status = Column(String(64), nullable=False)
    assignee = Column(Text, nullable=True)
    project = Column(String(64), nullable=False)
    last_update = Column(DateTime(timezone=True), nullable=True)
    issue_url = Column(Text, nullable=False)
    created_at = Column(DateTime(timezone=True), server_default=func.now(), nullable=False)
    updated_at = Column(DateTime(timezone=True), server_default=func.now(), onupdate=func.now(), nullable=False)

    customer = relationship("Customer", back_populates="jira_issues")


__all__ = ["ZendeskTicket", "JiraIssue"]
