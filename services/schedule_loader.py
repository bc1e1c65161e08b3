"""Load the Celery beat schedule for snapshot and sync jobs from YAML."""

from __future__ import annotations

from dataclasses import dataclass, field
from pathlib import Path
from typing import Any, Dict, List, Optional, Tuple

import yaml
from celery.schedules import crontab

from core import settings
from core.logging import get_logger

logger = get_logger(__name__)


@dataclass(frozen=True)
class ScheduleEntry:
    name: str
    task: str
    cron: str
    args: List[Any] = field(default_factory=list)
    kwargs: Dict[str, Any] = field(default_factory=dict)
    options: Dict[str, Any] = field(default_factory=dict)


def cron_from_string(expr: str) -> crontab:
    """Convert a 5-field cron expression into a Celery ``crontab``."""
    fields = str(expr or "").split()
    if len(fields) != 5:
        raise ValueError(f"Invalid cron expression '{expr}'. Expected 5 fields.")
    minute, hour, day_of_month, month, day_of_week = fields
    return crontab(
        minute=minute,
        hour=hour,
        day_of_month=day_of_month,
        month_of_year=month,
        day_of_week=day_of_week,
    )


def load_schedule_config(path: Optional[Path] = None) -> Tuple[Optional[str], List[ScheduleEntry]]:
    """Return the schedule timezone and the enabled entries.

    A missing file yields no entries. Entries without ``task``/``cron`` or
    with ``enabled: false`` are skipped.
    """
    schedule_path = path or settings.SCHEDULE_FILE
    if not schedule_path.exists():
        logger.info("Schedule file %s not found; beat schedule left empty.", schedule_path)
        return None, []

    try:
        raw = yaml.safe_load(schedule_path.read_text(encoding="utf-8")) or {}
    except yaml.YAMLError as exc:
        raise RuntimeError(f"Failed to parse schedule file: {schedule_path}") from exc

    entries: List[ScheduleEntry] = []
    for name, payload in (raw.get("entries") or {}).items():
        if not isinstance(payload, dict) or payload.get("enabled") is False:
            continue
        task = payload.get("task")
        cron = payload.get("cron")
        if not task or not cron:
            logger.warning("Schedule entry %s is missing task or cron; skipping.", name)
            continue
        entries.append(
            ScheduleEntry(
                name=str(name),
                task=str(task),
                cron=str(cron),
                args=list(payload.get("args") or []),
                kwargs=dict(payload.get("kwargs") or {}),
                options=dict(payload.get("options") or {}),
            )
        )
    return raw.get("timezone"), entries


def as_celery_schedule(entries: List[ScheduleEntry]) -> Dict[str, Dict[str, Any]]:
    schedule: Dict[str, Dict[str, Any]] = {}
    for entry in entries:
        item: Dict[str, Any] = {
            "task": entry.task,
            "schedule": cron_from_string(entry.cron),
            "args": entry.args,
            "kwargs": entry.kwargs,
        }
        if entry.options:
            item["options"] = entry.options
        schedule[entry.name] = item
    return schedule


__all__ = ["ScheduleEntry", "as_celery_schedule", "cron_from_string", "load_schedule_config"]
