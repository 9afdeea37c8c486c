from .database import Base, DATABASE_URL, build_engine, create_session_factory, init_db
from .models import KeyValueEntryDB

__all__ = [
    "Base", "DATABASE_URL", "build_engine", "create_session_factory", "init_db",
    "KeyValueEntryDB"
]
