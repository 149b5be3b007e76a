"""Database engine and session factory."""
from typing import Any, Dict
from sqlalchemy import create_engine
from sqlalchemy.orm import sessionmaker, declarative_base
from execora.config import get_settings

settings = get_settings()


def _engine_options(url: str) -> Dict[str, Any]:
    """Pool options for the configured backend (SQLite has no pool sizing)."""
    if url.startswith("sqlite"):
        # Sessions are opened from worker threads by the queue manager
        return {"connect_args": {"check_same_thread": False}}
    return {
        "pool_pre_ping": True,
        "pool_size": settings.DATABASE_POOL_SIZE,
        "max_overflow": settings.DATABASE_MAX_OVERFLOW,
    }


engine = create_engine(
    settings.DATABASE_URL,
    echo=settings.DATABASE_ECHO,
    **_engine_options(settings.DATABASE_URL),
)

# One session per request or per queue operation
SessionLocal = sessionmaker(autocommit=False, autoflush=False, bind=engine)

# Base class for declarative models
Base = declarative_base()


def init_db() -> None:
    """Create missing tables for every imported model."""
    Base.metadata.create_all(bind=engine)
