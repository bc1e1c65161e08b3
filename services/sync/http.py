"""HTTP plumbing shared by the Zendesk and Jira clients."""

from __future__ import annotations

import time
from datetime import datetime
from typing import Any, Callable, Dict, Mapping, Optional

import httpx

from core import settings
from core.logging import get_logger
from services.errors import FatalSyncError, TransientSyncError

logger = get_logger(__name__)

_TIMESTAMP_FORMATS = ("%Y-%m-%dT%H:%M:%S.%f%z", "%Y-%m-%dT%H:%M:%S%z")


def _retry_after_seconds(response: httpx.Response) -> Optional[float]:
    raw = response.headers.get("Retry-After")
    if not raw:
        return None
    try:
        return max(float(raw), 0.0)
    except ValueError:
        return None


def request_json(
    client: httpx.Client,
    url: str,
    *,
    context: str,
    params: Optional[Mapping[str, Any]] = None,
    max_retries: Optional[int] = None,
    sleep: Callable[[float], None] = time.sleep,
) -> Dict[str, Any]:
    """GET ``url`` and decode the JSON body.

    429 and 5xx responses and transport errors are retried up to
    ``max_retries`` times, honouring ``Retry-After`` when present, then raise
    :class:`TransientSyncError`. Any other 4xx or an undecodable body raises
    :class:`FatalSyncError`.
    """
    retries = settings.SYNC_MAX_RETRIES if max_retries is None else max_retries
    attempt = 0
    while True:
        try:
            response = client.get(url, params=params)
        except httpx.TransportError as exc:
            if attempt >= retries:
                raise TransientSyncError(f"{context} request failed: {exc}") from exc
            attempt += 1
            logger.warning("%s request error (attempt %d/%d): %s", context, attempt, retries, exc)
            sleep(float(attempt))
            continue

        status_code = response.status_code
        if status_code == 429 or status_code >= 500:
            if attempt >= retries:
                raise TransientSyncError(
                    f"{context} responded with HTTP {status_code} after {attempt} retries.",
                    status_code=status_code,
                )
            attempt += 1
            delay = _retry_after_seconds(response)
            if delay is None:
                delay = float(attempt)
            logger.warning(
                "%s responded with HTTP %d; retrying in %.1fs (attempt %d/%d).",
                context,
                status_code,
                delay,
                attempt,
                retries,
            )
            sleep(delay)
            continue
        if status_code >= 400:
            raise FatalSyncError(f"{context} responded with HTTP {status_code}.", status_code=status_code)

        try:
            payload = response.json()
        except ValueError as exc:
            raise FatalSyncError(f"{context} responded with invalid JSON.") from exc
        if not isinstance(payload, dict):
            raise FatalSyncError(f"{context} responded with an unexpected payload.")
        return payload


def parse_timestamp(value: Any, *, field: str) -> datetime:
    """Parse the ISO-8601 variants Zendesk and Jira emit (``Z`` and ``+0000`` offsets)."""
    if isinstance(value, datetime):
        return value
    text = str(value or "").strip()
    if not text:
        raise FatalSyncError(f"Missing timestamp field '{field}'.")
    try:
        return datetime.fromisoformat(text.replace("Z", "+00:00"))
    except ValueError:
        pass
    for fmt in _TIMESTAMP_FORMATS:
        try:
            return datetime.strptime(text, fmt)
        except ValueError:
            continue
    raise FatalSyncError(f"Invalid timestamp '{text}' in field '{field}'.")


def build_client(
    base_url: str,
    *,
    auth: httpx.Auth | tuple,
    transport: Optional[httpx.BaseTransport] = None,
) -> httpx.Client:
    return httpx.Client(
        base_url=base_url,
        auth=auth,
        timeout=settings.SYNC_HTTP_TIMEOUT,
        headers={"Accept": "application/json"},
        transport=transport,
    )


__all__ = ["request_json", "parse_timestamp", "build_client"]
