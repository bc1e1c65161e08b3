from datetime import date, datetime, timedelta, timezone
from types import SimpleNamespace

import pytest
from sqlalchemy.exc import OperationalError

from core import settings
from schemas.api.differences import ChangeType
from services import difference_engine
from services.errors import InvalidTargetDateError, StoreFailureError
from services.record_kinds import JIRA_ISSUES, ZENDESK_TICKETS

TARGET = "2024-01-16"
PREVIOUS_DAY = date(2024, 1, 15)


def test_new_ticket_without_snapshot(db_session, make_customer, make_ticket):
    customer = make_customer()
    make_ticket(customer, 123, status="open")

    report = difference_engine.compute_daily_differences(db_session, customer.id, TARGET)

    assert report.customer_id == customer.id
    assert report.date == TARGET
    assert len(report.zendesk_differences) == 1
    diff = report.zendesk_differences[0]
    assert diff.ticket_id == 123
    assert diff.change_type == ChangeType.NEW
    assert diff.previous_status is None
    assert diff.current_status == "open"
    assert report.jira_differences == []


def test_status_change_reports_both_statuses(db_session, make_customer, make_ticket, make_ticket_snapshot):
    customer = make_customer()
    ticket = make_ticket(customer, 123, status="solved")
    make_ticket_snapshot(ticket, PREVIOUS_DAY, status="open")

    report = difference_engine.compute_daily_differences(db_session, customer.id, TARGET)

    assert len(report.zendesk_differences) == 1
    diff = report.zendesk_differences[0]
    assert diff.change_type == ChangeType.STATUS_CHANGED
    assert diff.previous_status == "open"
    assert diff.current_status == "solved"


def test_status_change_wins_over_other_edits(db_session, make_customer, make_ticket, make_ticket_snapshot):
    customer = make_customer()
    ticket = make_ticket(customer, 7, status="pending", subject="New subject")
    make_ticket_snapshot(
        ticket,
        PREVIOUS_DAY,
        status="open",
        subject="Old subject",
        last_update=datetime(2024, 1, 1, tzinfo=timezone.utc),
    )

    report = difference_engine.compute_daily_differences(db_session, customer.id, TARGET)

    assert [d.change_type for d in report.zendesk_differences] == [ChangeType.STATUS_CHANGED]


def test_ticket_subject_or_last_update_change_is_updated(
    db_session, make_customer, make_ticket, make_ticket_snapshot
):
    customer = make_customer()
    renamed = make_ticket(customer, 1, subject="Login fails on Safari")
    make_ticket_snapshot(renamed, PREVIOUS_DAY, subject="Login fails")
    touched = make_ticket(customer, 2)
    make_ticket_snapshot(touched, PREVIOUS_DAY, last_update=touched.last_update - timedelta(hours=3))

    report = difference_engine.compute_daily_differences(db_session, customer.id, TARGET)

    assert [(d.ticket_id, d.change_type) for d in report.zendesk_differences] == [
        (1, ChangeType.UPDATED),
        (2, ChangeType.UPDATED),
    ]
    assert all(d.previous_status == d.current_status == "open" for d in report.zendesk_differences)


def test_unchanged_records_are_omitted(
    db_session, make_customer, make_ticket, make_issue, make_ticket_snapshot, make_issue_snapshot
):
    customer = make_customer()
    make_ticket_snapshot(make_ticket(customer, 10), PREVIOUS_DAY)
    make_issue_snapshot(make_issue(customer, "OPS-1"), PREVIOUS_DAY)

    report = difference_engine.compute_daily_differences(db_session, customer.id, TARGET)

    assert report.zendesk_differences == []
    assert report.jira_differences == []


def test_issue_assignee_change(db_session, make_customer, make_issue, make_issue_snapshot):
    customer = make_customer()
    issue = make_issue(customer, "TEST-123", status="To Do", assignee="jane")
    make_issue_snapshot(issue, PREVIOUS_DAY, status="To Do", assignee="john")

    report = difference_engine.compute_daily_differences(db_session, customer.id, TARGET)

    assert len(report.jira_differences) == 1
    diff = report.jira_differences[0]
    assert diff.issue_key == "TEST-123"
    assert diff.change_type == ChangeType.ASSIGNEE_CHANGED
    assert diff.assignee == "jane"
    assert diff.previous_status == "To Do"


def test_issue_assignee_cleared_counts_as_change(db_session, make_customer, make_issue, make_issue_snapshot):
    customer = make_customer()
    issue = make_issue(customer, "TEST-9", assignee=None)
    make_issue_snapshot(issue, PREVIOUS_DAY, assignee="john")

    report = difference_engine.compute_daily_differences(db_session, customer.id, TARGET)

    assert [d.change_type for d in report.jira_differences] == [ChangeType.ASSIGNEE_CHANGED]


def test_issue_precedence_and_summary_update(db_session, make_customer, make_issue, make_issue_snapshot):
    customer = make_customer()
    moved = make_issue(customer, "TEST-1", status="In Progress", assignee="jane", summary="changed")
    make_issue_snapshot(moved, PREVIOUS_DAY, status="To Do", assignee="john", summary="original")
    reassigned = make_issue(customer, "TEST-2", assignee="jane", summary="changed")
    make_issue_snapshot(reassigned, PREVIOUS_DAY, assignee="john", summary="original")
    renamed = make_issue(customer, "TEST-3", summary="changed")
    make_issue_snapshot(renamed, PREVIOUS_DAY, summary="original")

    report = difference_engine.compute_daily_differences(db_session, customer.id, TARGET)

    assert [(d.issue_key, d.change_type) for d in report.jira_differences] == [
        ("TEST-1", ChangeType.STATUS_CHANGED),
        ("TEST-2", ChangeType.ASSIGNEE_CHANGED),
        ("TEST-3", ChangeType.UPDATED),
    ]


def test_issue_last_update_alone_is_not_a_change(db_session, make_customer, make_issue, make_issue_snapshot):
    customer = make_customer()
    issue = make_issue(customer, "TEST-4")
    make_issue_snapshot(issue, PREVIOUS_DAY, last_update=datetime(2023, 12, 31, tzinfo=timezone.utc))

    report = difference_engine.compute_daily_differences(db_session, customer.id, TARGET)

    assert report.jira_differences == []


def test_only_previous_calendar_day_is_used(db_session, make_customer, make_ticket, make_ticket_snapshot):
    customer = make_customer()
    ticket = make_ticket(customer, 55, status="solved")
    make_ticket_snapshot(ticket, PREVIOUS_DAY - timedelta(days=1), status="open")
    make_ticket_snapshot(ticket, date(2024, 1, 16), status="open")

    report = difference_engine.compute_daily_differences(db_session, customer.id, TARGET)

    assert [d.change_type for d in report.zendesk_differences] == [ChangeType.NEW]
    assert report.zendesk_differences[0].previous_status is None


def test_customer_isolation(
    db_session, make_customer, make_ticket, make_issue, make_ticket_snapshot
):
    acme = make_customer(company_name="Acme")
    globex = make_customer(company_name="Globex", slack_channel="#globex")
    make_ticket(acme, 100)
    other = make_ticket(globex, 100, status="solved")
    make_ticket_snapshot(other, PREVIOUS_DAY, status="open")
    make_issue(globex, "GLX-1")

    report = difference_engine.compute_daily_differences(db_session, acme.id, TARGET)

    assert [(d.ticket_id, d.change_type) for d in report.zendesk_differences] == [(100, ChangeType.NEW)]
    assert report.jira_differences == []


def test_unknown_customer_yields_empty_report(db_session):
    report = difference_engine.compute_daily_differences(db_session, 987654, TARGET)

    assert report.customer_id == 987654
    assert report.zendesk_differences == []
    assert report.jira_differences == []


def test_repeated_calls_are_identical(db_session, make_customer, make_ticket, make_issue, make_issue_snapshot):
    customer = make_customer()
    make_ticket(customer, 1)
    issue = make_issue(customer, "TEST-1", status="Done")
    make_issue_snapshot(issue, PREVIOUS_DAY, status="In Review")

    first = difference_engine.compute_daily_differences(db_session, customer.id, TARGET)
    second = difference_engine.compute_daily_differences(db_session, customer.id, TARGET)

    assert first.model_dump() == second.model_dump()


def test_default_date_is_today(db_session, make_customer):
    customer = make_customer()

    report = difference_engine.compute_daily_differences(db_session, customer.id)

    assert report.date == settings.today().isoformat()


def test_date_object_and_string_are_equivalent(db_session, make_customer, make_ticket):
    customer = make_customer()
    make_ticket(customer, 3)

    from_string = difference_engine.compute_daily_differences(db_session, customer.id, TARGET)
    from_date = difference_engine.compute_daily_differences(db_session, customer.id, date(2024, 1, 16))

    assert from_string == from_date


@pytest.mark.parametrize("raw", ["16/01/2024", "20240116", "2024-W03-2", "2024-1-16", "2024-02-30"])
def test_invalid_date_is_rejected(db_session, raw):
    with pytest.raises(InvalidTargetDateError):
        difference_engine.compute_daily_differences(db_session, 1, raw)


def test_removed_records_only_reported_on_request(
    db_session, make_customer, make_ticket, make_issue, make_ticket_snapshot, make_issue_snapshot
):
    customer = make_customer()
    gone_ticket = make_ticket(customer, 900, status="pending")
    make_ticket_snapshot(gone_ticket, PREVIOUS_DAY)
    gone_issue = make_issue(customer, "OLD-1")
    make_issue_snapshot(gone_issue, PREVIOUS_DAY)
    db_session.delete(gone_ticket)
    db_session.delete(gone_issue)
    db_session.flush()

    default_report = difference_engine.compute_daily_differences(db_session, customer.id, TARGET)
    assert default_report.zendesk_differences == []
    assert default_report.jira_differences == []

    report = difference_engine.compute_daily_differences(db_session, customer.id, TARGET, include_removed=True)
    assert [(d.ticket_id, d.change_type) for d in report.zendesk_differences] == [(900, ChangeType.REMOVED)]
    assert report.zendesk_differences[0].previous_status == "pending"
    assert [(d.issue_key, d.change_type) for d in report.jira_differences] == [("OLD-1", ChangeType.REMOVED)]


def test_store_failure_aborts_whole_report(monkeypatch, db_session):
    calls = []

    def fake_load_live(db, kind, customer_id):
        calls.append(kind.name)
        if kind.name == "jira":
            raise OperationalError("SELECT", {}, Exception("connection reset"))
        return []

    monkeypatch.setattr(difference_engine, "_load_live", fake_load_live)

    with pytest.raises(StoreFailureError) as excinfo:
        difference_engine.compute_daily_differences(db_session, 1, TARGET)

    assert calls == ["zendesk", "jira"]
    assert isinstance(excinfo.value.__cause__, OperationalError)


def test_diff_records_last_snapshot_wins_for_duplicate_keys():
    stamp = datetime(2024, 1, 15, 8, 0)
    live = [SimpleNamespace(ticket_id=5, status="solved", subject="s", last_update=stamp,
                            requester="r", ticket_url="u", customer_id=1)]
    older = SimpleNamespace(ticket_id=5, status="open", subject="s", last_update=stamp)
    newer = SimpleNamespace(ticket_id=5, status="solved", subject="s", last_update=stamp)

    assert difference_engine.diff_records(ZENDESK_TICKETS, live, [older, newer]) == []
    flipped = difference_engine.diff_records(ZENDESK_TICKETS, live, [newer, older])
    assert [d.change_type for d in flipped] == [ChangeType.STATUS_CHANGED]


def test_aware_and_naive_timestamps_for_same_instant_are_equal():
    live = SimpleNamespace(issue_key="A-1", status="Done", assignee=None, summary="x",
                           last_update=datetime(2024, 1, 15, 12, 0, tzinfo=timezone.utc))
    stored = SimpleNamespace(issue_key="A-1", status="Done", assignee=None, summary="x",
                             last_update=datetime(2024, 1, 15, 12, 0))

    assert JIRA_ISSUES.classify(live, stored) is None
    ticket = SimpleNamespace(status="open", subject="s", last_update=datetime(2024, 1, 15, 21, 0,
                             tzinfo=timezone(timedelta(hours=9))))
    ticket_snapshot = SimpleNamespace(status="open", subject="s", last_update=datetime(2024, 1, 15, 12, 0))
    assert ZENDESK_TICKETS.classify(ticket, ticket_snapshot) is None
