from ogs.db.session import SessionLocal, engine, get_db, get_db_context

__all__ = ["SessionLocal", "engine", "get_db", "get_db_context"]
