"""Middleware for request/response metrics."""
import time
from fastapi import Request
from starlette.middleware.base import BaseHTTPMiddleware
from starlette.types import ASGIApp
from prometheus_client import Counter, Histogram, Gauge


# HTTP metrics
http_requests_total = Counter(
    'execora_http_requests_total',
    'Total HTTP requests',
    ['service', 'method', 'endpoint', 'status']
)

http_request_duration_seconds = Histogram(
    'execora_http_request_duration_seconds',
    'HTTP request duration in seconds',
    ['service', 'method', 'endpoint'],
    buckets=[0.005, 0.01, 0.025, 0.05, 0.1, 0.25, 0.5, 1.0, 2.5, 5.0, 10.0, 30.0]
)

http_requests_in_progress = Gauge(
    'execora_http_requests_in_progress',
    'HTTP requests currently in progress',
    ['service', 'method']
)


def _endpoint_label(request: Request) -> str:
    """Route template (e.g. /api/v1/executions/{execution_id}), raw path if unmatched."""
    route = request.scope.get("route")
    return getattr(route, "path", request.url.path)


class MetricsMiddleware(BaseHTTPMiddleware):
    """Middleware to track HTTP request metrics per service."""

    def __init__(self, app: ASGIApp, service: str = "api"):
        super().__init__(app)
        self.service = service

    async def dispatch(self, request: Request, call_next):
        """
        Process request and track metrics.

        Args:
            request: FastAPI request
            call_next: Next middleware/handler

        Returns:
            Response
        """
        # Skip metrics endpoint to avoid recursion
        if request.url.path.endswith("/metrics"):
            return await call_next(request)

        method = request.method
        start_time = time.time()
        http_requests_in_progress.labels(service=self.service, method=method).inc()
        status = 500

        try:
            response = await call_next(request)
            status = response.status_code
            return response
        finally:
            # Route is only resolved once the request went through the router
            endpoint = _endpoint_label(request)
            http_requests_total.labels(
                service=self.service,
                method=method,
                endpoint=endpoint,
                status=status,
            ).inc()
            http_request_duration_seconds.labels(
                service=self.service,
                method=method,
                endpoint=endpoint,
            ).observe(time.time() - start_time)
            http_requests_in_progress.labels(service=self.service, method=method).dec()
