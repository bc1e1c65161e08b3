"""Client for the Jira Cloud issue search API."""

from __future__ import annotations

import time
from dataclasses import dataclass
from datetime import datetime
from typing import Any, Callable, Dict, Iterator, List, Mapping, Optional

import httpx

from core import settings
from core.logging import get_logger
from services.errors import FatalSyncError
from services.sync.http import build_client, parse_timestamp, request_json

logger = get_logger(__name__)

SEARCH_PATH = "/rest/api/3/search/jql"
SEARCH_FIELDS = "summary,status,assignee,project,updated"


@dataclass(frozen=True, slots=True)
class RemoteIssue:
    issue_key: str
    summary: str
    status: str
    assignee: Optional[str]
    project: str
    last_update: Optional[datetime]
    issue_url: str


def _normalize_host(host: str) -> str:
    value = host.strip().rstrip("/")
    if not value.startswith(("http://", "https://")):
        value = f"https://{value}"
    return value


def _object_field(container: Mapping[str, Any], name: str, *, key: str) -> Mapping[str, Any]:
    value = container.get(name) or {}
    if not isinstance(value, Mapping):
        raise FatalSyncError(f"Jira issue {key} has a malformed '{name}' field: {value!r}")
    return value


def parse_issue(raw: Mapping[str, Any], *, base_url: str) -> RemoteIssue:
    key = raw.get("key")
    if not key:
        raise FatalSyncError(f"Jira issue without a key: id={raw.get('id')!r}")
    fields = _object_field(raw, "fields", key=key)
    status = _object_field(fields, "status", key=key).get("name")
    if not status:
        raise FatalSyncError(f"Jira issue {key} has no status.")
    assignee = _object_field(fields, "assignee", key=key) or None
    project = _object_field(fields, "project", key=key).get("key") or str(key).split("-", 1)[0]
    updated = fields.get("updated")
    return RemoteIssue(
        issue_key=str(key),
        summary=str(fields.get("summary") or ""),
        status=str(status),
        assignee=(assignee.get("displayName") or assignee.get("emailAddress")) if assignee else None,
        project=str(project),
        last_update=parse_timestamp(updated, field="updated") if updated else None,
        issue_url=f"{base_url}/browse/{key}",
    )


class JiraClient:
    """Pages through issues matching a JQL query using ``nextPageToken``."""

    def __init__(
        self,
        host: str,
        email: str,
        api_token: str,
        *,
        page_size: Optional[int] = None,
        transport: Optional[httpx.BaseTransport] = None,
        sleep: Callable[[float], None] = time.sleep,
    ) -> None:
        if not host or not email or not api_token:
            raise ValueError("Jira host, email and API token are required.")
        self.base_url = _normalize_host(host)
        self._auth = (email, api_token)
        self._page_size = min(page_size or settings.SYNC_PAGE_SIZE, 100)
        self._transport = transport
        self._sleep = sleep

    def iter_issue_pages(self, jql: Optional[str] = None) -> Iterator[List[Dict[str, Any]]]:
        query = jql or settings.JIRA_SYNC_JQL
        next_token: Optional[str] = None
        pages = 0
        with build_client(self.base_url, auth=self._auth, transport=self._transport) as client:
            while True:
                if pages and settings.SYNC_THROTTLE_SECONDS:
                    self._sleep(settings.SYNC_THROTTLE_SECONDS)
                params: Dict[str, Any] = {
                    "jql": query,
                    "maxResults": self._page_size,
                    "fields": SEARCH_FIELDS,
                }
                if next_token:
                    params["nextPageToken"] = next_token
                payload = request_json(client, SEARCH_PATH, params=params, context="Jira search", sleep=self._sleep)
                pages += 1
                yield [issue for issue in payload.get("issues") or [] if isinstance(issue, dict)]
                next_token = payload.get("nextPageToken")
                if payload.get("isLast") or not next_token:
                    break
        logger.info("Fetched %d Jira issue page(s) from %s.", pages, self.base_url)


__all__ = ["JiraClient", "RemoteIssue", "parse_issue"]
