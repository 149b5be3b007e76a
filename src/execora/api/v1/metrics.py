"""Prometheus metrics endpoint."""
import logging
from fastapi import APIRouter, Request
from fastapi.responses import PlainTextResponse
from prometheus_client import generate_latest, CONTENT_TYPE_LATEST
from execora.observability.metrics import update_queue_metrics

logger = logging.getLogger(__name__)

router = APIRouter(tags=["metrics"])


@router.get("/metrics", response_class=PlainTextResponse)
def get_metrics(request: Request):
    """
    Prometheus metrics endpoint.

    Returns metrics in Prometheus text format.
    """
    # Refresh queue gauges if the queue is reachable
    manager = getattr(request.app.state, "queue_manager", None)
    if manager is not None:
        try:
            update_queue_metrics(manager.queue)
        except Exception as e:
            logger.warning(f"Queue gauges not refreshed: {e}")

    # Generate Prometheus metrics
    return PlainTextResponse(
        content=generate_latest().decode('utf-8'),
        media_type=CONTENT_TYPE_LATEST
    )
