"""Database engine and per-request sessions for the transaction store"""

from typing import Any, Dict, Generator
from sqlalchemy import create_engine
from sqlalchemy.engine import make_url
from sqlalchemy.orm import sessionmaker, Session
from payment_service.config import settings
from payment_service.infrastructure.database.models import Base


def engine_options(database_url: str) -> Dict[str, Any]:
    """Pool settings for server databases, thread sharing for SQLite"""
    if make_url(database_url).get_backend_name() == "sqlite":
        return {"connect_args": {"check_same_thread": False}}
    return {
        "pool_pre_ping": True,  # Verify connections before using
        "pool_size": settings.db_pool_size,
        "max_overflow": settings.db_max_overflow,
        "pool_recycle": 3600,
    }


engine = create_engine(settings.database_url, **engine_options(settings.database_url))

SessionLocal = sessionmaker(autocommit=False, autoflush=False, bind=engine)


def init_db() -> None:
    """Create the transaction tables if they do not exist yet"""
    Base.metadata.create_all(bind=engine)


def get_db() -> Generator[Session, None, None]:
    """One session per request; the endpoint decides commit or rollback"""
    db = SessionLocal()
    try:
        yield db
    finally:
        db.close()
