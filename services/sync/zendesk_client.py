"""Client for the Zendesk Support tickets API."""

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

TICKETS_PATH = "/api/v2/tickets.json"


@dataclass(frozen=True, slots=True)
class RemoteTicket:
    ticket_id: int
    subject: str
    status: str
    requester: str
    last_update: datetime
    ticket_url: str


def parse_ticket(raw: Mapping[str, Any], *, base_url: str) -> RemoteTicket:
    """Convert one ticket payload (with ``requester_name`` resolved) into a :class:`RemoteTicket`."""
    try:
        ticket_id = int(raw["id"])
    except (KeyError, TypeError, ValueError) as exc:
        raise FatalSyncError(f"Zendesk ticket without a valid id: {raw.get('id')!r}") from exc
    status = raw.get("status")
    if not status:
        raise FatalSyncError(f"Zendesk ticket {ticket_id} has no status.")
    requester = raw.get("requester_name") or raw.get("requester_id")
    return RemoteTicket(
        ticket_id=ticket_id,
        subject=str(raw.get("subject") or raw.get("raw_subject") or ""),
        status=str(status),
        requester=str(requester) if requester is not None else "unknown",
        last_update=parse_timestamp(raw.get("updated_at"), field="updated_at"),
        ticket_url=f"{base_url}/agent/tickets/{ticket_id}",
    )


class ZendeskClient:
    """Pages through every ticket visible to the configured agent."""

    def __init__(
        self,
        subdomain: str,
        email: str,
        api_token: str,
        *,
        page_size: Optional[int] = None,
        transport: Optional[httpx.BaseTransport] = None,
        sleep: Callable[[float], None] = time.sleep,
    ) -> None:
        if not subdomain or not email or not api_token:
            raise ValueError("Zendesk subdomain, email and API token are required.")
        self.base_url = f"https://{subdomain.strip()}.zendesk.com"
        self._auth = (f"{email}/token", api_token)
        self._page_size = page_size or settings.SYNC_PAGE_SIZE
        self._transport = transport
        self._sleep = sleep

    def iter_ticket_pages(self) -> Iterator[List[Dict[str, Any]]]:
        """Yield raw ticket dicts page by page with ``requester_name`` filled from side-loaded users."""
        url: Optional[str] = TICKETS_PATH
        params: Optional[Dict[str, Any]] = {"include": "users", "per_page": self._page_size}
        pages = 0
        with build_client(self.base_url, auth=self._auth, transport=self._transport) as client:
            while url:
                if pages and settings.SYNC_THROTTLE_SECONDS:
                    self._sleep(settings.SYNC_THROTTLE_SECONDS)
                payload = request_json(client, url, params=params, context="Zendesk tickets", sleep=self._sleep)
                pages += 1
                users = {
                    user.get("id"): user.get("name") or user.get("email")
                    for user in payload.get("users") or []
                    if isinstance(user, dict)
                }
                tickets = []
                for raw in payload.get("tickets") or []:
                    if not isinstance(raw, dict):
                        continue
                    ticket = dict(raw)
                    ticket["requester_name"] = users.get(raw.get("requester_id"))
                    tickets.append(ticket)
                yield tickets
                # next_page is absolute and already carries the query string.
                url = payload.get("next_page")
                params = None
        logger.info("Fetched %d Zendesk ticket page(s) from %s.", pages, self.base_url)


__all__ = ["RemoteTicket", "ZendeskClient", "parse_ticket"]
