from ogs.tasks.celery_app import celery_app
from ogs.tasks.group_cleanup import end_daily_groups, end_idle_groups, run_daily_group_end, run_idle_group_cleanup
from ogs.tasks.scheduled_checkouts import process_scheduled_checkouts, run_scheduled_checkout_processing

__all__ = [
    "celery_app",
    "end_daily_groups",
    "end_idle_groups",
    "process_scheduled_checkouts",
    "run_daily_group_end",
    "run_idle_group_cleanup",
    "run_scheduled_checkout_processing",
]
