"""Database session management."""
from contextlib import contextmanager
from typing import Generator

from sqlalchemy import create_engine
from sqlalchemy.orm import Session, sessionmaker

from ogs.core.config import settings


def _engine_options() -> dict:
    options = {
        "pool_pre_ping": True,
        "echo": settings.database.DB_ECHO,
    }
    if settings.database.is_sqlite:
        options["connect_args"] = {"check_same_thread": False}
    else:
        options["pool_size"] = settings.database.DB_POOL_SIZE
        options["max_overflow"] = settings.database.DB_MAX_OVERFLOW
        options["pool_recycle"] = settings.database.DB_POOL_RECYCLE
    return options


engine = create_engine(settings.database.database_url, **_engine_options())

SessionLocal = sessionmaker(autocommit=False, autoflush=False, bind=engine)


def get_db() -> Generator[Session, None, None]:
    """
    Dependency function that yields a database session.

    Usage in FastAPI endpoints:
        @router.get("/items/")
        def read_items(db: Session = Depends(get_db)):
            ...
    """
    db = SessionLocal()
    try:
        yield db
    finally:
        db.close()


@contextmanager
def get_db_context(session_factory: sessionmaker = SessionLocal) -> Generator[Session, None, None]:
    """Session scope for code running outside a request (workers, scripts)."""
    db = session_factory()
    try:
        yield db
        db.commit()
    except Exception:
        db.rollback()
        raise
    finally:
        db.close()
