"""Queue statistics API endpoint."""
import asyncio
from fastapi import APIRouter, Depends
from pydantic import BaseModel
from execora.api.deps import get_queue_manager
from execora.api.schemas.response import StandardResponse, ResponseCodes
from execora.core.enums import ConsumerState
from execora.worker.queue_manager import ExecutionQueueManager


router = APIRouter(prefix="/queue", tags=["queue"])


class QueueStats(BaseModel):
    """Queue statistics."""

    pending: int
    processing: int
    consumer_state: ConsumerState
    items_processed: int
    items_completed: int
    items_failed: int
    items_skipped: int


@router.get("/stats", response_model=StandardResponse[QueueStats])
async def get_queue_stats(
    manager: ExecutionQueueManager = Depends(get_queue_manager),
) -> StandardResponse[QueueStats]:
    """
    Get queue statistics.

    Returns:
        StandardResponse: Pending and processing counts plus consumer state
    """
    pending = await asyncio.to_thread(manager.queue.get_queue_length)
    processing = await asyncio.to_thread(manager.queue.get_processing_count)

    stats = QueueStats(
        pending=pending,
        processing=processing,
        consumer_state=manager.state,
        items_processed=manager.items_processed,
        items_completed=manager.items_completed,
        items_failed=manager.items_failed,
        items_skipped=manager.items_skipped,
    )
    return StandardResponse(
        data=stats,
        code=ResponseCodes.QUEUE_STATS_RETRIEVED,
        httpStatus="OK",
        description="Queue statistics retrieved successfully",
    )
