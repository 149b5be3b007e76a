"""Health check API endpoint."""
from fastapi import APIRouter, Depends, Request
from sqlalchemy.orm import Session
from sqlalchemy import text
from redis import Redis
from pydantic import BaseModel
from typing import Optional
from execora.api.deps import get_db, get_redis_client
from execora.api.schemas.response import StandardResponse, ResponseCodes
from execora.core.enums import ConsumerState

router = APIRouter()


class HealthData(BaseModel):
    """Health check data model."""

    status: str
    database: str
    redis: str
    consumer: Optional[ConsumerState] = None


@router.get("/health", response_model=StandardResponse[HealthData])
async def health_check(
    request: Request,
    db: Session = Depends(get_db),
    redis: Redis = Depends(get_redis_client),
) -> StandardResponse[HealthData]:
    """
    Health check endpoint.

    Returns:
        StandardResponse: Service health status including database, Redis and consumer state
    """
    # Check database connection
    try:
        db.execute(text("SELECT 1"))
        db_status = "connected"
    except Exception:
        db_status = "disconnected"

    # Check Redis connection
    try:
        redis.ping()
        redis_status = "connected"
    except Exception:
        redis_status = "disconnected"

    manager = getattr(request.app.state, "queue_manager", None)

    overall_status = "healthy"
    if db_status != "connected" or redis_status != "connected":
        overall_status = "unhealthy"

    health_data = HealthData(
        status=overall_status,
        database=db_status,
        redis=redis_status,
        consumer=manager.state if manager is not None else None,
    )

    return StandardResponse(
        data=health_data,
        code=ResponseCodes.HEALTH_OK,
        httpStatus="OK",
        description="Health check completed successfully",
    )
