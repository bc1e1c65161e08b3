"""Refresh the live ticket/issue store from Zendesk and Jira.

Sync never raises for per-item or remote failures: problems are collected in
``SyncResult.errors`` next to the number of records that did sync.
"""

from __future__ import annotations

from dataclasses import dataclass, field
from typing import Any, Callable, Dict, Iterable, List, Mapping, Optional

from sqlalchemy.exc import SQLAlchemyError
from sqlalchemy.orm import Session

from core.logging import get_logger
from models.customer import Customer
from models.tracking import JiraIssue, ZendeskTicket
from services import customer_service
from services.errors import FatalSyncError, SyncError
from services.sync.jira_client import JiraClient, RemoteIssue, parse_issue
from services.sync.zendesk_client import RemoteTicket, ZendeskClient, parse_ticket

logger = get_logger(__name__)


@dataclass
class SyncResult:
    synced: int = 0
    errors: List[str] = field(default_factory=list)

    def as_dict(self) -> Dict[str, Any]:
        return {"synced": self.synced, "errors": list(self.errors)}


def _upsert_ticket(db: Session, customer_id: int, remote: RemoteTicket) -> ZendeskTicket:
    row = (
        db.query(ZendeskTicket)
        .filter(ZendeskTicket.customer_id == customer_id, ZendeskTicket.ticket_id == remote.ticket_id)
        .one_or_none()
    )
    if row is None:
        row = ZendeskTicket(customer_id=customer_id, ticket_id=remote.ticket_id)
        db.add(row)
    row.subject = remote.subject
    row.status = remote.status
    row.requester = remote.requester
    row.last_update = remote.last_update
    row.ticket_url = remote.ticket_url
    db.flush()
    return row


def _upsert_issue(db: Session, customer_id: int, remote: RemoteIssue) -> JiraIssue:
    row = (
        db.query(JiraIssue)
        .filter(JiraIssue.customer_id == customer_id, JiraIssue.issue_key == remote.issue_key)
        .one_or_none()
    )
    if row is None:
        row = JiraIssue(customer_id=customer_id, issue_key=remote.issue_key)
        db.add(row)
    row.summary = remote.summary
    row.status = remote.status
    row.assignee = remote.assignee
    row.project = remote.project
    row.last_update = remote.last_update
    row.issue_url = remote.issue_url
    db.flush()
    return row


def _run_sync(
    db: Session,
    customer: Customer,
    *,
    label: str,
    item_label: str,
    item_id_field: str,
    pages: Iterable[List[Mapping[str, Any]]],
    parse: Callable[[Mapping[str, Any]], Any],
    upsert: Callable[[Session, int, Any], Any],
) -> SyncResult:
    result = SyncResult()
    try:
        for page in pages:
            for raw in page:
                try:
                    remote = parse(raw)
                    with db.begin_nested():
                        upsert(db, customer.id, remote)
                except (FatalSyncError, SQLAlchemyError) as exc:
                    item_id = raw.get(item_id_field)
                    logger.warning("Failed to sync %s %s for customer %s: %s", item_label, item_id, customer.id, exc)
                    result.errors.append(f"Failed to sync {item_label} {item_id}: {exc}")
                    continue
                result.synced += 1
            db.commit()
    except SyncError as exc:
        logger.warning("%s sync aborted for customer %s: %s", label, customer.id, exc)
        db.commit()
        result.errors.append(f"Sync failed: {exc}")
    except SQLAlchemyError as exc:
        logger.error("%s sync store failure for customer %s: %s", label, customer.id, exc, exc_info=True)
        db.rollback()
        result.errors.append(f"Sync failed: {exc}")
    logger.info(
        "%s sync for customer %s finished: synced=%d errors=%d",
        label,
        customer.id,
        result.synced,
        len(result.errors),
    )
    return result


def sync_zendesk_tickets(db: Session, customer_id: int, *, client: Optional[ZendeskClient] = None) -> SyncResult:
    customer = customer_service.find_customer(db, customer_id)
    if customer is None:
        return SyncResult(errors=[f"Customer with ID {customer_id} not found"])
    if client is None:
        if not customer.zendesk_configured:
            return SyncResult(errors=[f"Customer {customer.company_name} is missing required Zendesk credentials"])
        client = ZendeskClient(customer.zendesk_subdomain, customer.zendesk_email, customer.zendesk_api_token)

    base_url = client.base_url
    return _run_sync(
        db,
        customer,
        label="Zendesk",
        item_label="ticket",
        item_id_field="id",
        pages=client.iter_ticket_pages(),
        parse=lambda raw: parse_ticket(raw, base_url=base_url),
        upsert=_upsert_ticket,
    )


def sync_jira_issues(db: Session, customer_id: int, *, client: Optional[JiraClient] = None) -> SyncResult:
    customer = customer_service.find_customer(db, customer_id)
    if customer is None:
        return SyncResult(errors=[f"Customer with ID {customer_id} not found"])
    if client is None:
        if not customer.jira_configured:
            return SyncResult(errors=[f"Customer {customer.company_name} is missing required Jira credentials"])
        client = JiraClient(customer.jira_host, customer.jira_email, customer.jira_api_token)

    base_url = client.base_url
    return _run_sync(
        db,
        customer,
        label="Jira",
        item_label="issue",
        item_id_field="key",
        pages=client.iter_issue_pages(),
        parse=lambda raw: parse_issue(raw, base_url=base_url),
        upsert=_upsert_issue,
    )


def sync_all_customers(db: Session) -> Dict[str, Any]:
    """Run both synchronisers for every customer that has credentials configured."""
    summary: Dict[str, Any] = {"customers": 0, "tickets": 0, "issues": 0, "errors": []}
    for customer in customer_service.list_customers(db):
        if not (customer.zendesk_configured or customer.jira_configured):
            continue
        summary["customers"] += 1
        if customer.zendesk_configured:
            tickets = sync_zendesk_tickets(db, customer.id)
            summary["tickets"] += tickets.synced
            summary["errors"].extend(f"[{customer.id}] {message}" for message in tickets.errors)
        if customer.jira_configured:
            issues = sync_jira_issues(db, customer.id)
            summary["issues"] += issues.synced
            summary["errors"].extend(f"[{customer.id}] {message}" for message in issues.errors)
    return summary


__all__ = ["SyncResult", "sync_zendesk_tickets", "sync_jira_issues", "sync_all_customers"]
