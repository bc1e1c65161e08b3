import os
from datetime import datetime, timezone
from typing import Callable, Generator

import pytest

os.environ.setdefault("DATABASE_ALLOW_NON_POSTGRES", "1")
os.environ.setdefault("TEST_DATABASE_URL", "sqlite+pysqlite:///:memory:")
os.environ.setdefault("DATABASE_URL", os.getenv("DATABASE_URL", os.environ["TEST_DATABASE_URL"]))

from sqlalchemy import create_engine, event  # noqa: E402
from sqlalchemy.engine import Engine  # noqa: E402
from sqlalchemy.orm import Session  # noqa: E402
from sqlalchemy.pool import StaticPool  # noqa: E402

from database import Base  # noqa: E402
import models  # noqa: E402,F401
from models.customer import Customer  # noqa: E402
from models.snapshot import JiraIssueSnapshot, ZendeskTicketSnapshot  # noqa: E402
from models.tracking import JiraIssue, ZendeskTicket  # noqa: E402


def pytest_configure(config: pytest.Config) -> None:
    config.addinivalue_line("markers", "postgres: requires a PostgreSQL database")


def _resolve_test_database_url() -> str:
    return os.getenv("TEST_DATABASE_URL") or os.getenv("DATABASE_URL") or "sqlite+pysqlite:///:memory:"


@pytest.fixture(scope="session")
def engine(request: pytest.FixtureRequest) -> Generator[Engine, None, None]:
    database_url = _resolve_test_database_url()
    is_sqlite = database_url.startswith("sqlite")
    if request.node.get_closest_marker("postgres") and not database_url.lower().startswith("postgresql"):
        pytest.skip("PostgreSQL is required for this test")

    engine_kwargs = {}
    if is_sqlite:
        engine_kwargs["connect_args"] = {"check_same_thread": False}
        if ":memory:" in database_url:
            engine_kwargs["poolclass"] = StaticPool
    test_engine = create_engine(database_url, **engine_kwargs)

    if is_sqlite:
        # pysqlite needs explicit BEGIN handling for SAVEPOINT support.
        @event.listens_for(test_engine, "connect")
        def _disable_pysqlite_transactions(dbapi_connection, _record):  # pragma: no cover - driver hook
            dbapi_connection.isolation_level = None

        @event.listens_for(test_engine, "begin")
        def _emit_begin(connection):  # pragma: no cover - driver hook
            connection.exec_driver_sql("BEGIN")

    Base.metadata.create_all(bind=test_engine)
    try:
        yield test_engine
    finally:
        Base.metadata.drop_all(bind=test_engine)
        test_engine.dispose()


@pytest.fixture()
def db_session(engine: Engine) -> Generator[Session, None, None]:
    """Session whose commits land in a savepoint of an outer, always rolled back, transaction."""
    connection = engine.connect()
    transaction = connection.begin()
    session = Session(
        bind=connection,
        autoflush=False,
        expire_on_commit=False,
        join_transaction_mode="create_savepoint",
    )
    try:
        yield session
    finally:
        session.close()
        transaction.rollback()
        connection.close()


@pytest.fixture()
def make_customer(db_session: Session) -> Callable[..., Customer]:
    def _make(**overrides) -> Customer:
        values = {"company_name": "Acme Corp", "slack_channel": "#acme-support"}
        values.update(overrides)
        customer = Customer(**values)
        db_session.add(customer)
        db_session.flush()
        return customer

    return _make


@pytest.fixture()
def make_ticket(db_session: Session) -> Callable[..., ZendeskTicket]:
    def _make(customer: Customer, ticket_id: int, **overrides) -> ZendeskTicket:
        values = {
            "customer_id": customer.id,
            "ticket_id": ticket_id,
            "subject": f"Ticket {ticket_id}",
            "status": "open",
            "requester": "john.doe@example.com",
            "last_update": datetime(2024, 1, 15, 10, 30, tzinfo=timezone.utc),
            "ticket_url": f"https://acme.zendesk.com/agent/tickets/{ticket_id}",
        }
        values.update(overrides)
        ticket = ZendeskTicket(**values)
        db_session.add(ticket)
        db_session.flush()
        return ticket

    return _make


@pytest.fixture()
def make_issue(db_session: Session) -> Callable[..., JiraIssue]:
    def _make(customer: Customer, issue_key: str, **overrides) -> JiraIssue:
        values = {
            "customer_id": customer.id,
            "issue_key": issue_key,
            "summary": f"Issue {issue_key}",
            "status": "To Do",
            "assignee": "john",
            "project": issue_key.split("-", 1)[0],
            "last_update": datetime(2024, 1, 15, 9, 0, tzinfo=timezone.utc),
            "issue_url": f"https://acme.atlassian.net/browse/{issue_key}",
        }
        values.update(overrides)
        issue = JiraIssue(**values)
        db_session.add(issue)
        db_session.flush()
        return issue

    return _make


@pytest.fixture()
def make_ticket_snapshot(db_session: Session) -> Callable[..., ZendeskTicketSnapshot]:
    def _make(ticket: ZendeskTicket, snapshot_date, **overrides) -> ZendeskTicketSnapshot:
        values = {
            "customer_id": ticket.customer_id,
            "ticket_id": ticket.ticket_id,
            "subject": ticket.subject,
            "status": ticket.status,
            "requester": ticket.requester,
            "last_update": ticket.last_update,
            "ticket_url": ticket.ticket_url,
            "snapshot_date": snapshot_date,
        }
        values.update(overrides)
        snapshot = ZendeskTicketSnapshot(**values)
        db_session.add(snapshot)
        db_session.flush()
        return snapshot

    return _make


@pytest.fixture()
def make_issue_snapshot(db_session: Session) -> Callable[..., JiraIssueSnapshot]:
    def _make(issue: JiraIssue, snapshot_date, **overrides) -> JiraIssueSnapshot:
        values = {
            "customer_id": issue.customer_id,
            "issue_key": issue.issue_key,
            "summary": issue.summary,
            "status": issue.status,
            "assignee": issue.assignee,
            "project": issue.project,
            "last_update": issue.last_update,
            "issue_url": issue.issue_url,
            "snapshot_date": snapshot_date,
        }
        values.update(overrides)
        snapshot = JiraIssueSnapshot(**values)
        db_session.add(snapshot)
        db_session.flush()
        return snapshot

    return _make
