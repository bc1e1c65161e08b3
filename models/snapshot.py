"""Day-stamped copies of live tickets/issues used as the comparison baseline."""

from __future__ import annotations

from sqlalchemy import Column, Date, DateTime, ForeignKey, Index, Integer, String, Text, UniqueConstraint, func

from database import Base


class ZendeskTicketSnapshot(Base):
    __tablename__ = "zendesk_ticket_snapshots"
    __table_args__ = (
        UniqueConstraint(
            "customer_id",
            "ticket_id",
            "snapshot_date",
            name="uq_zendesk_ticket_snapshots_day",
        ),
        Index("ix_zendesk_ticket_snapshots_customer_day", "customer_id", "snapshot_date"),
    )

    id = Column(Integer, primary_key=True, autoincrement=True)
    ticket_id = Column(Integer, nullable=False)
    customer_id = Column(Integer, ForeignKey("customers.id", ondelete="CASCADE"), nullable=False)
    subject = Column(Text, nullable=False)
    status = Column(String(64), nullable=False)
    requester = Column(Text, nullable=False)
    last_update = Column(DateTime(timezone=True), nullable=False)
    ticket_url = Column(Text, nullable=False)
    snapshot_date = Column(Date, nullable=False)
    created_at = Column(DateTime(timezone=True), server_default=func.now(), nullable=False)


class JiraIssueSnapshot(Base):
    __tablename__ = "jira_issue_snapshots"
    __table_args__ = (
        UniqueConstraint(
            "customer_id",
            "issue_key",
            "snapshot_date",
            name="uq_jira_issue_snapshots_day",
        ),
        Index("ix_jira_issue_snapshots_customer_day", "customer_id", "snapshot_date"),
    )

    id = Column(Integer, primary_key=True, autoincrement=True)
    issue_key = Column(String(64), nullable=False)
    customer_id = Column(Integer, ForeignKey("customers.id", ondelete="CASCADE"), nullable=False)
    summary = Column(Text, nullable=False)
    status = Column(String(64), nullable=False)
    assignee = Column(Text, nullable=True)
    project = Column(String(64), nullable=False)
    last_update = Column(DateTime(timezone=True), nullable=True)
    issue_url = Column(Text, nullable=False)
    snapshot_date = Column(Date, nullable=False)
    created_at = Column(DateTime(timezone=True), server_default=func.now(), nullable=False)


__all__ = ["ZendeskTicketSnapshot", "JiraIssueSnapshot"]
