"""CLI entry point for draining the execution queue outside the API process."""
import asyncio
import signal
import logging
import sys
from execora.config import get_settings
from execora.core.redis import close_redis
from execora.worker.queue_manager import build_queue_manager

# Configure logging
logging.basicConfig(
    level=logging.INFO,
    format="%(asctime)s - %(name)s - %(levelname)s - %(message)s",
)
logger = logging.getLogger(__name__)


async def run_drain() -> int:
    """
    Reconcile stale executions and drain the queue once.

    Stops early on SIGINT/SIGTERM after the in-flight execution.

    Returns:
        int: Number of executions taken off the queue
    """
    settings = get_settings()
    manager = build_queue_manager(settings)
    logger.info(f"Draining queue '{settings.QUEUE_NAME}' via {settings.EXECUTOR_URL}")

    # Setup signal handlers for graceful shutdown
    stop_event = asyncio.Event()

    def signal_handler(signum, frame):
        logger.info(f"Received signal {signum}, initiating graceful shutdown...")
        stop_event.set()

    signal.signal(signal.SIGINT, signal_handler)
    signal.signal(signal.SIGTERM, signal_handler)

    try:
        failed = await manager.recover()
        logger.info(f"Reconciled {len(failed)} stale execution(s)")

        drained = asyncio.create_task(manager.join())
        stopped = asyncio.create_task(stop_event.wait())
        await asyncio.wait({drained, stopped}, return_when=asyncio.FIRST_COMPLETED)
        stopped.cancel()

        await manager.stop(timeout=30.0)
        drained.cancel()
    finally:
        await manager.client.aclose()
        close_redis()

    logger.info(
        f"Drain finished: processed={manager.items_processed}, "
        f"completed={manager.items_completed}, failed={manager.items_failed}, "
        f"skipped={manager.items_skipped}"
    )
    return manager.items_processed


def main():
    """Main entry point."""
    try:
        asyncio.run(run_drain())
    except KeyboardInterrupt:
        logger.info("Drain interrupted")
    except Exception as e:
        logger.error(f"Drain error: {e}", exc_info=True)
        sys.exit(1)


if __name__ == "__main__":
    main()
