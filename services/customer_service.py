"""Customer profile storage and lookup."""

from __future__ import annotations

from datetime import datetime, timezone
from typing import List, Optional

from sqlalchemy import or_
from sqlalchemy.orm import Session

from core.logging import get_logger
from models.customer import Customer
from schemas.api.customers import CustomerCreate, CustomerUpdate
from services.errors import CustomerNotFoundError

logger = get_logger(__name__)


def _escape_like(value: str) -> str:
    return value.replace("\\", "\\\\").replace("%", "\\%").replace("_", "\\_")


def create_customer(db: Session, payload: CustomerCreate) -> Customer:
    customer = Customer(**payload.model_dump())
    db.add(customer)
    db.commit()
    db.refresh(customer)
    logger.info("Created customer %s (%s).", customer.id, customer.company_name)
    return customer


def list_customers(db: Session) -> List[Customer]:
    """Return every customer, newest first."""
    return db.query(Customer).order_by(Customer.created_at.desc(), Customer.id.desc()).all()


def find_customer(db: Session, customer_id: int) -> Optional[Customer]:
    return db.query(Customer).filter(Customer.id == customer_id).one_or_none()


def get_customer(db: Session, customer_id: int) -> Customer:
    customer = find_customer(db, customer_id)
    if customer is None:
        raise CustomerNotFoundError(customer_id)
    return customer


def update_customer(db: Session, customer_id: int, payload: CustomerUpdate) -> Customer:
    """Apply only the fields explicitly present in ``payload``."""
    customer = get_customer(db, customer_id)
    changes = payload.model_dump(exclude_unset=True)
    for field, value in changes.items():
        setattr(customer, field, value)
    customer.updated_at = datetime.now(timezone.utc)
    db.commit()
    db.refresh(customer)
    logger.info("Updated customer %s fields=%s.", customer.id, sorted(changes))
    return customer


def search_customers(db: Session, query: str) -> List[Customer]:
    """Case-insensitive substring search on company name and Slack channel."""
    term = (query or "").strip()
    if not term:
        raise ValueError("Search query must not be empty.")
    pattern = f"%{_escape_like(term)}%"
    return (
        db.query(Customer)
        .filter(
            or_(
                Customer.company_name.ilike(pattern, escape="\\"),
                Customer.slack_channel.ilike(pattern, escape="\\"),
            )
        )
        .order_by(Customer.company_name.asc())
        .all()
    )


__all__ = [
    "create_customer",
    "list_customers",
    "find_customer",
    "get_customer",
    "update_customer",
    "search_customers",
]
