"""Database initialization utilities."""
from sqlalchemy import inspect
from sqlalchemy.engine import Engine

from ogs.core.logging import get_logger
from ogs.db.session import engine as default_engine
from ogs.models import Base

logger = get_logger(__name__)


def init_db(engine: Engine = default_engine) -> None:
    """
    Create any missing tables.

    Suitable for development and tests; production schemas are managed
    outside the application.
    """
    existing_tables = inspect(engine).get_table_names()
    Base.metadata.create_all(bind=engine)
    logger.info(
        "Database initialized",
        existing_tables=len(existing_tables),
        total_tables=len(Base.metadata.tables),
    )
