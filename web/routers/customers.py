"""FastAPI router for customer profiles, their live records and sync triggers."""

from __future__ import annotations

from typing import List

from fastapi import APIRouter, Depends, HTTPException, Query, status
from sqlalchemy.orm import Session

from database import get_db
from schemas.api.customers import CustomerCreate, CustomerListResponse, CustomerRead, CustomerUpdate
from schemas.api.tracking import JiraIssueRead, SyncResponse, ZendeskTicketRead
from services import customer_service, sync_service, ticket_service
from services.errors import CustomerNotFoundError

router = APIRouter(prefix="/customers", tags=["Customers"])


def _not_found(exc: CustomerNotFoundError) -> HTTPException:
    return HTTPException(status_code=status.HTTP_404_NOT_FOUND, detail=exc.to_detail())


@router.post("", response_model=CustomerRead, status_code=status.HTTP_201_CREATED)
def create_customer(payload: CustomerCreate, db: Session = Depends(get_db)) -> CustomerRead:
    customer = customer_service.create_customer(db, payload)
    return CustomerRead.model_validate(customer)


@router.get("", response_model=CustomerListResponse)
def list_customers(db: Session = Depends(get_db)) -> CustomerListResponse:
    customers = customer_service.list_customers(db)
    return CustomerListResponse(items=[CustomerRead.model_validate(item) for item in customers])


@router.get("/search", response_model=CustomerListResponse)
def search_customers(q: str = Query(..., min_length=1), db: Session = Depends(get_db)) -> CustomerListResponse:
    try:
        customers = customer_service.search_customers(db, q)
    except ValueError as exc:
        raise HTTPException(
            status_code=status.HTTP_422_UNPROCESSABLE_ENTITY,
            detail={"code": "customers.invalid_query", "message": str(exc)},
        ) from exc
    return CustomerListResponse(items=[CustomerRead.model_validate(item) for item in customers])


@router.get("/{customer_id}", response_model=CustomerRead)
def get_customer(customer_id: int, db: Session = Depends(get_db)) -> CustomerRead:
    try:
        customer = customer_service.get_customer(db, customer_id)
    except CustomerNotFoundError as exc:
        raise _not_found(exc) from exc
    return CustomerRead.model_validate(customer)


@router.patch("/{customer_id}", response_model=CustomerRead)
def update_customer(customer_id: int, payload: CustomerUpdate, db: Session = Depends(get_db)) -> CustomerRead:
    try:
        customer = customer_service.update_customer(db, customer_id, payload)
    except CustomerNotFoundError as exc:
        raise _not_found(exc) from exc
    return CustomerRead.model_validate(customer)


@router.get("/{customer_id}/zendesk-tickets", response_model=List[ZendeskTicketRead])
def list_zendesk_tickets(customer_id: int, db: Session = Depends(get_db)) -> List[ZendeskTicketRead]:
    try:
        tickets = ticket_service.list_customer_tickets(db, customer_id)
    except CustomerNotFoundError as exc:
        raise _not_found(exc) from exc
    return [ZendeskTicketRead.model_validate(ticket) for ticket in tickets]


@router.get("/{customer_id}/jira-issues", response_model=List[JiraIssueRead])
def list_jira_issues(customer_id: int, db: Session = Depends(get_db)) -> List[JiraIssueRead]:
    try:
        issues = ticket_service.list_customer_issues(db, customer_id)
    except CustomerNotFoundError as exc:
        raise _not_found(exc) from exc
    return [JiraIssueRead.model_validate(issue) for issue in issues]


@router.post("/{customer_id}/sync/zendesk", response_model=SyncResponse)
def sync_zendesk(customer_id: int, db: Session = Depends(get_db)) -> SyncResponse:
    """Pull the customer's Zendesk tickets; per-item failures come back in ``errors``."""
    result = sync_service.sync_zendesk_tickets(db, customer_id)
    return SyncResponse(**result.as_dict())


@router.post("/{customer_id}/sync/jira", response_model=SyncResponse)
def sync_jira(customer_id: int, db: Session = Depends(get_db)) -> SyncResponse:
    result = sync_service.sync_jira_issues(db, customer_id)
    return SyncResponse(**result.as_dict())


__all__ = ["router"]
