from celery import Celery
from kombu import Queue

from core import settings
from services.schedule_loader import as_celery_schedule, load_schedule_config

app = Celery(
    "support_pulse",
    broker=settings.CELERY_BROKER_URL,
    backend=settings.CELERY_RESULT_BACKEND,
    include=["worker.tasks"],
)

app.conf.update(
    task_track_started=True,
    timezone=settings.CELERY_TIMEZONE,
    task_default_queue=settings.CELERY_DEFAULT_QUEUE,
    task_queues=(Queue(settings.CELERY_DEFAULT_QUEUE),),
    beat_schedule={},
)

yaml_timezone, yaml_entries = load_schedule_config()
if yaml_entries:
    app.conf.beat_schedule.update(as_celery_schedule(yaml_entries))
if yaml_timezone:
    app.conf.update(timezone=yaml_timezone)
current_tz = getattr(app.conf, "timezone", None) or "UTC"
app.conf.enable_utc = str(current_tz).upper() == "UTC"
