"""FastAPI application factory for the executor service."""
import logging
from datetime import datetime, timezone
from typing import Optional
from fastapi import FastAPI, Request, status
from fastapi.exceptions import RequestValidationError
from fastapi.responses import JSONResponse, PlainTextResponse
from prometheus_client import generate_latest, CONTENT_TYPE_LATEST
from execora.config import get_settings
from execora.api.v1 import execute
from execora.api.schemas.execution import default_resource_limits
from execora.api.schemas.response import ResponseCodes
from execora.executor.orchestrator import ExecutionOrchestrator
from execora.executor.runner_registry import build_default_registry
from execora.observability.metrics import init_system_info
from execora.observability.middleware import MetricsMiddleware

logger = logging.getLogger(__name__)

settings = get_settings()


def _error_body(message: str, code: str) -> dict:
    return {"success": False, "error": {"message": message, "code": code}}


def create_executor_app(orchestrator: Optional[ExecutionOrchestrator] = None) -> FastAPI:
    """
    Create and configure the executor application.

    Args:
        orchestrator: Orchestrator to serve (default: all runners with configured limits)

    Returns:
        FastAPI: Configured executor application
    """
    app = FastAPI(
        title=f"{settings.APP_NAME} Executor",
        version=settings.APP_VERSION,
        debug=settings.DEBUG,
    )

    if orchestrator is None:
        orchestrator = ExecutionOrchestrator(
            build_default_registry(settings),
            default_resource_limits(settings),
        )
    app.state.orchestrator = orchestrator

    app.add_middleware(MetricsMiddleware, service="executor")
    init_system_info(settings.APP_VERSION, component="executor")

    app.include_router(execute.router)

    @app.get("/health", tags=["health"])
    async def health_check():
        """Liveness check with the routed artifact types."""
        return {
            "status": "ok",
            "timestamp": datetime.now(timezone.utc).isoformat(),
            "runners": app.state.orchestrator.registry.list_routes(),
        }

    @app.get("/metrics", response_class=PlainTextResponse, tags=["metrics"])
    def get_metrics():
        """Prometheus metrics endpoint."""
        return PlainTextResponse(
            content=generate_latest().decode('utf-8'),
            media_type=CONTENT_TYPE_LATEST
        )

    @app.exception_handler(RequestValidationError)
    async def validation_error_handler(request: Request, exc: RequestValidationError):
        problems = "; ".join(
            f"{'.'.join(str(part) for part in error['loc'])}: {error['msg']}"
            for error in exc.errors()
        )
        return JSONResponse(
            status_code=status.HTTP_400_BAD_REQUEST,
            content=_error_body(f"Invalid execution request: {problems}", ResponseCodes.VALIDATION_ERROR),
        )

    @app.exception_handler(Exception)
    async def unhandled_error_handler(request: Request, exc: Exception):
        logger.error(f"Executor error: {exc}", exc_info=True)
        return JSONResponse(
            status_code=status.HTTP_500_INTERNAL_SERVER_ERROR,
            content=_error_body(str(exc) or "Execution failed", ResponseCodes.INTERNAL_ERROR),
        )

    return app


# Create app instance
app = create_executor_app()
