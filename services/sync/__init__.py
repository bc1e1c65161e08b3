"""Remote ticketing API clients used to refresh the live record store."""

from .jira_client import JiraClient, RemoteIssue, parse_issue  # noqa: F401
from .zendesk_client import RemoteTicket, ZendeskClient, parse_ticket  # noqa: F401
