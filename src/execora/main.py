"""FastAPI application factory for the execution API."""
import logging
from contextlib import asynccontextmanager
from fastapi import FastAPI
from execora.config import get_settings
from execora.api.v1 import executions, health, queue, metrics
from execora.core.database import init_db
from execora.core.redis import close_redis
from execora.observability.metrics import init_system_info
from execora.observability.middleware import MetricsMiddleware
from execora.worker.queue_manager import build_queue_manager

logger = logging.getLogger(__name__)

settings = get_settings()


@asynccontextmanager
async def lifespan(app: FastAPI):
    """
    Own the queue manager for the lifetime of the application.

    A manager preset on app.state (tests) is used as-is and not closed.
    """
    manager = getattr(app.state, "queue_manager", None)
    owned = manager is None
    if owned:
        init_db()
        manager = build_queue_manager(settings)
        app.state.queue_manager = manager

    if settings.RECOVER_STALE_EXECUTIONS:
        try:
            await manager.recover()
        except Exception as e:
            logger.error(f"Startup recovery failed: {e}", exc_info=True)

    try:
        yield
    finally:
        await manager.stop()
        if owned:
            await manager.client.aclose()
            close_redis()


def create_app() -> FastAPI:
    """
    Create and configure FastAPI application.

    Returns:
        FastAPI: Configured FastAPI application
    """
    app = FastAPI(
        title=settings.APP_NAME,
        version=settings.APP_VERSION,
        debug=settings.DEBUG,
        lifespan=lifespan,
    )

    # Add middleware
    app.add_middleware(MetricsMiddleware, service="api")

    # Initialize metrics
    init_system_info(settings.APP_VERSION)

    # Include routers
    app.include_router(executions.router, prefix=settings.API_V1_PREFIX, tags=["executions"])
    app.include_router(health.router, prefix=settings.API_V1_PREFIX, tags=["health"])
    app.include_router(queue.router, prefix=settings.API_V1_PREFIX)
    app.include_router(metrics.router, prefix=settings.API_V1_PREFIX)

    return app


# Create app instance
app = create_app()
