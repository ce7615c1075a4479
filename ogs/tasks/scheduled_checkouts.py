"""Periodic execution of due scheduled checkouts."""

from typing import Any, Dict

from sqlalchemy.orm import sessionmaker

from ogs.core.logging import get_logger
from ogs.db.session import SessionLocal, get_db_context
from ogs.services.active import ScheduledCheckoutService
from ogs.tasks.celery_app import celery_app

logger = get_logger(__name__)


def run_scheduled_checkout_processing(session_factory: sessionmaker = SessionLocal) -> Dict[str, Any]:
    with get_db_context(session_factory) as db:
        result = ScheduledCheckoutService(db).process_due()

    if not result:
        logger.error("Scheduled checkout processing failed", error=result.error.message)
        return {"success": False, "message": result.error.message}

    body = result.data.to_dict()
    body["message"] = result.message
    return body


@celery_app.task(name="ogs.tasks.process_scheduled_checkouts")
def process_scheduled_checkouts() -> Dict[str, Any]:
    report = run_scheduled_checkout_processing()
    logger.info(
        "Scheduled checkout run finished",
        attempted=report.get("checkouts_attempted", 0),
        executed=report.get("checkouts_executed", 0),
        failed=report.get("checkouts_failed", 0),
    )
    return report
