"""Runtime settings resolved from the environment at import time."""

from __future__ import annotations

from datetime import date, datetime
from pathlib import Path

from core.env import env_float, env_int, env_str, env_zone

SNAPSHOT_TIMEZONE = env_zone("SNAPSHOT_TIMEZONE", "UTC")

CELERY_BROKER_URL = env_str("CELERY_BROKER_URL", "redis://redis:6379/0") or "redis://redis:6379/0"
CELERY_RESULT_BACKEND = env_str("CELERY_RESULT_BACKEND", "redis://redis:6379/1") or "redis://redis:6379/1"
CELERY_TIMEZONE = env_str("CELERY_TIMEZONE", "UTC") or "UTC"
CELERY_DEFAULT_QUEUE = env_str("CELERY_DEFAULT_QUEUE", "default") or "default"
SCHEDULE_FILE = Path(env_str("SCHEDULE_FILE", "configs/schedules/snapshots.yml") or "configs/schedules/snapshots.yml")

SYNC_HTTP_TIMEOUT = env_float("SYNC_HTTP_TIMEOUT", 30.0, minimum=1.0)
SYNC_MAX_RETRIES = env_int("SYNC_MAX_RETRIES", 3, minimum=0)
SYNC_PAGE_SIZE = env_int("SYNC_PAGE_SIZE", 100, minimum=1)
SYNC_THROTTLE_SECONDS = env_float("SYNC_THROTTLE_SECONDS", 0.2, minimum=0.0)
_DEFAULT_JIRA_JQL = "updated >= -30d ORDER BY updated DESC"
JIRA_SYNC_JQL = env_str("JIRA_SYNC_JQL", _DEFAULT_JIRA_JQL) or _DEFAULT_JIRA_JQL


def today() -> date:
    """Current calendar day in ``SNAPSHOT_TIMEZONE``."""
    return datetime.now(SNAPSHOT_TIMEZONE).date()


__all__ = [
    "SNAPSHOT_TIMEZONE",
    "CELERY_BROKER_URL",
    "CELERY_RESULT_BACKEND",
    "CELERY_TIMEZONE",
    "CELERY_DEFAULT_QUEUE",
    "SCHEDULE_FILE",
    "SYNC_HTTP_TIMEOUT",
    "SYNC_MAX_RETRIES",
    "SYNC_PAGE_SIZE",
    "SYNC_THROTTLE_SECONDS",
    "JIRA_SYNC_JQL",
    "today",
]
