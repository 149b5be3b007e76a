"""API dependencies for FastAPI."""
from typing import Generator, Annotated
from fastapi import Depends, HTTPException, Request
from sqlalchemy.orm import Session
from redis import Redis
from execora.core.database import SessionLocal
from execora.core.redis import get_redis
from execora.services.execution_service import ExecutionService
from execora.worker.queue_manager import ExecutionQueueManager


def get_db() -> Generator[Session, None, None]:
    """
    Dependency to get database session.

    Yields:
        Session: SQLAlchemy database session
    """
    db = SessionLocal()
    try:
        yield db
    finally:
        db.close()


def get_execution_service(db: Annotated[Session, Depends(get_db)]) -> ExecutionService:
    """
    Dependency to get ExecutionService instance.

    Args:
        db: Database session (injected)

    Returns:
        ExecutionService: Execution service instance
    """
    return ExecutionService(db)


def get_redis_client() -> Redis:
    """
    Dependency to get Redis client.

    Returns:
        Redis: Redis client instance
    """
    return get_redis()


def get_queue_manager(request: Request) -> ExecutionQueueManager:
    """
    Dependency to get the application's queue manager.

    Args:
        request: Current request

    Returns:
        ExecutionQueueManager: Manager created at startup

    Raises:
        HTTPException: If the application has no queue manager
    """
    manager = getattr(request.app.state, "queue_manager", None)
    if manager is None:
        raise HTTPException(status_code=503, detail="Execution queue not available")
    return manager

