"""
Celery application for periodic work.

Run a worker with beat:
    celery -A ogs.tasks.celery_app worker --beat --loglevel=info
"""

from celery import Celery
from celery.schedules import crontab

from ogs.core.config import settings

celery_app = Celery(
    "ogs_tasks",
    broker=settings.broker_url,
    backend=settings.tasks.TASK_RESULT_BACKEND or settings.redis.redis_url,
    include=["ogs.tasks.scheduled_checkouts", "ogs.tasks.group_cleanup"],
)

# Crontab entries are read in the facility's local time
celery_app.conf.update(
    task_serializer="json",
    accept_content=["json"],
    result_serializer="json",
    timezone=settings.TIMEZONE,
    enable_utc=True,
    task_track_started=True,
    task_time_limit=settings.tasks.TASK_TIMEOUT,
    worker_prefetch_multiplier=1,
    task_acks_late=True,
    worker_hijack_root_logger=False,
)


def _build_beat_schedule() -> dict:
    tasks = settings.tasks
    schedule = {
        "process-scheduled-checkouts": {
            "task": "ogs.tasks.process_scheduled_checkouts",
            "schedule": float(tasks.SCHEDULED_CHECKOUT_INTERVAL_SECONDS),
        },
        "end-idle-groups": {
            "task": "ogs.tasks.end_idle_groups",
            "schedule": float(tasks.SESSION_CLEANUP_INTERVAL_MINUTES * 60),
        },
    }
    if tasks.ENABLE_DAILY_SESSION_END:
        hour, minute = tasks.SESSION_END_TIME.split(":")
        schedule["end-daily-groups"] = {
            "task": "ogs.tasks.end_daily_groups",
            "schedule": crontab(hour=int(hour), minute=int(minute)),
        }
    return schedule


if settings.tasks.ENABLE_PERIODIC_TASKS:
    celery_app.conf.beat_schedule = _build_beat_schedule()
