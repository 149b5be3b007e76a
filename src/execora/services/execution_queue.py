"""Redis-based FIFO queue for pending executions."""
import logging
from typing import Optional
from pydantic import ValidationError as PydanticValidationError
from redis import Redis
from execora.api.schemas.execution import QueueItem

logger = logging.getLogger(__name__)


class ExecutionQueue:
    """
    Redis list used as a strict FIFO queue of execution requests.

    Items are pushed on the left (LPUSH) and popped from the right (RPOP),
    so the oldest item is always dequeued first. A companion set tracks
    the executions currently being processed.
    """

    def __init__(self, redis: Redis, queue_name: str = "executions"):
        """
        Initialize execution queue.

        Args:
            redis: Redis client instance
            queue_name: Name of the queue (default: "executions")
        """
        self.redis = redis
        self.queue_name = f"execora:queue:{queue_name}"
        self.processing_name = f"{self.queue_name}:processing"

    def enqueue(self, item: QueueItem) -> None:
        """
        Append an item to the tail of the queue.

        Args:
            item: Queue envelope to store
        """
        self.redis.lpush(self.queue_name, item.model_dump_json(by_alias=True))

    def dequeue(self) -> Optional[QueueItem]:
        """
        Remove and return the oldest item.

        Malformed payloads are logged and dropped; the next item is tried.

        Returns:
            Optional[QueueItem]: Oldest item, None if queue empty
        """
        while True:
            raw = self.redis.rpop(self.queue_name)
            if raw is None:
                return None
            try:
                return QueueItem.model_validate_json(raw)
            except PydanticValidationError as e:
                logger.error(f"Dropping malformed queue item: {e}")

    def peek(self) -> Optional[QueueItem]:
        """
        View the oldest item without removing it.

        Returns:
            Optional[QueueItem]: Oldest item, None if queue empty
        """
        result = self.redis.lrange(self.queue_name, -1, -1)
        if result:
            return QueueItem.model_validate_json(result[0])
        return None

    def get_queue_length(self) -> int:
        """
        Get number of items waiting in the queue.

        Returns:
            int: Number of queued items
        """
        return self.redis.llen(self.queue_name)

    def mark_processing(self, execution_id: str) -> None:
        """Record that an execution is being processed."""
        self.redis.sadd(self.processing_name, execution_id)

    def clear_processing(self, execution_id: str) -> None:
        """Remove an execution from the processing set."""
        self.redis.srem(self.processing_name, execution_id)

    def get_processing_count(self) -> int:
        """
        Get number of executions currently being processed.

        Returns:
            int: Size of the processing set
        """
        return self.redis.scard(self.processing_name)

    def purge(self) -> None:
        """Delete all pending items and the processing set."""
        self.redis.delete(self.queue_name, self.processing_name)
