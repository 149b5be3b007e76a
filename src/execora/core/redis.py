"""Redis client for the execution queue."""
from typing import Optional
from redis import Redis
from execora.config import get_settings

# Process-wide client; redis-py pools connections internally
_redis_client: Optional[Redis] = None


def _connect(url: str) -> Redis:
    return Redis.from_url(
        url,
        decode_responses=True,
        socket_connect_timeout=5,
        socket_keepalive=True,
        health_check_interval=30,
        retry_on_timeout=True,
    )


def get_redis() -> Redis:
    """
    Get the shared Redis client, connecting on first use.

    The queue manager calls it from worker threads, which is safe:
    each command checks a connection out of the client's pool.

    Returns:
        Redis: Client for REDIS_URL with string responses

    Example:
        >>> queue = ExecutionQueue(get_redis())
        >>> queue.get_queue_length()
        0
    """
    global _redis_client
    if _redis_client is None:
        _redis_client = _connect(get_settings().REDIS_URL)
    return _redis_client


def close_redis() -> None:
    """Close the shared client; the next get_redis() reconnects."""
    global _redis_client
    if _redis_client is not None:
        _redis_client.close()
        _redis_client = None
