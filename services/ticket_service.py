"""Read access to a customer's live Zendesk tickets and Jira issues."""

from __future__ import annotations

from typing import List

from sqlalchemy.orm import Session

from models.tracking import JiraIssue, ZendeskTicket
from services.customer_service import get_customer


def list_customer_tickets(db: Session, customer_id: int) -> List[ZendeskTicket]:
    get_customer(db, customer_id)
    return (
        db.query(ZendeskTicket)
        .filter(ZendeskTicket.customer_id == customer_id)
        .order_by(ZendeskTicket.last_update.desc(), ZendeskTicket.ticket_id.asc())
        .all()
    )


def list_customer_issues(db: Session, customer_id: int) -> List[JiraIssue]:
    get_customer(db, customer_id)
    return (
        db.query(JiraIssue)
        .filter(JiraIssue.customer_id == customer_id)
        .order_by(JiraIssue.issue_key.asc())
        .all()
    )


__all__ = ["list_customer_tickets", "list_customer_issues"]
