"""Periodic ending of idle groups and of the day's remaining sessions."""

from datetime import timedelta
from typing import Any, Dict, Optional

from sqlalchemy.orm import sessionmaker

from ogs.core.config import settings
from ogs.core.logging import get_logger
from ogs.db.session import SessionLocal, get_db_context
from ogs.services.active import ActiveGroupService
from ogs.tasks.celery_app import celery_app

logger = get_logger(__name__)


def _report_body(result) -> Dict[str, Any]:
    if not result:
        return {"success": False, "message": result.error.message}
    body = result.data.to_dict()
    body["message"] = result.message
    return body


def run_idle_group_cleanup(
    session_factory: sessionmaker = SessionLocal,
    timeout_minutes: Optional[int] = None,
) -> Dict[str, Any]:
    timeout = timedelta(minutes=timeout_minutes or settings.tasks.SESSION_IDLE_TIMEOUT_MINUTES)
    with get_db_context(session_factory) as db:
        result = ActiveGroupService(db).end_idle_groups(timeout)

    if not result:
        logger.error("Idle group cleanup failed", error=result.error.message)
    return _report_body(result)


def run_daily_group_end(session_factory: sessionmaker = SessionLocal) -> Dict[str, Any]:
    with get_db_context(session_factory) as db:
        result = ActiveGroupService(db).end_all_groups()

    if not result:
        logger.error("Daily group end failed", error=result.error.message)
    return _report_body(result)


@celery_app.task(name="ogs.tasks.end_idle_groups")
def end_idle_groups() -> Dict[str, Any]:
    report = run_idle_group_cleanup()
    logger.info(
        "Idle group cleanup finished",
        found=report.get("groups_found", 0),
        ended=report.get("groups_ended", 0),
    )
    return report


@celery_app.task(name="ogs.tasks.end_daily_groups")
def end_daily_groups() -> Dict[str, Any]:
    report = run_daily_group_end()
    logger.info(
        "Daily group end finished",
        found=report.get("groups_found", 0),
        ended=report.get("groups_ended", 0),
    )
    return report
