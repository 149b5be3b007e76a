"""Execution queue manager: single consumer draining the Redis FIFO."""
import asyncio
import logging
from typing import Any, Callable, Dict, List, Optional, Tuple, TypeVar
import httpx
from sqlalchemy.orm import Session
from execora.config import Settings, get_settings
from execora.core.enums import ConsumerState, ExecutionStatus
from execora.api.schemas.execution import ArtifactSnapshot, QueueItem
from execora.services.execution_queue import ExecutionQueue
from execora.services.execution_service import ExecutionService
from execora.worker.orchestrator_client import OrchestratorClient, classify_transport_error
from execora.observability.metrics import (
    record_execution_enqueued,
    record_execution_finished,
    record_execution_skipped,
    set_consumer_running,
)

logger = logging.getLogger(__name__)

T = TypeVar("T")


class ExecutionQueueManager:
    """
    Accepts executions and runs them one at a time through the executor.

    The consumer task only exists while there is work: it is started by
    enqueue() and exits when it finds the queue empty. State changes happen
    on the event loop thread, so checking and switching the consumer state
    never interleave.
    """

    def __init__(
        self,
        queue: ExecutionQueue,
        orchestrator_client: OrchestratorClient,
        session_factory: Callable[[], Session],
        settings: Optional[Settings] = None,
    ):
        """
        Initialize queue manager.

        Args:
            queue: Redis-backed FIFO of queue items
            orchestrator_client: Client for the executor service
            session_factory: Creates a fresh database session per operation
            settings: Application settings
        """
        self.queue = queue
        self.client = orchestrator_client
        self.session_factory = session_factory
        self.settings = settings or get_settings()

        # Consumer state
        self._state = ConsumerState.STOPPED
        self._task: Optional[asyncio.Task] = None
        self._wake = False
        self._stopping = False

        # Metrics
        self.items_processed = 0
        self.items_completed = 0
        self.items_failed = 0
        self.items_skipped = 0

    @property
    def state(self) -> ConsumerState:
        """Current consumer state."""
        return self._state

    async def enqueue(
        self,
        execution_id: str,
        artifact: ArtifactSnapshot,
        input: Optional[Any] = None,
    ) -> None:
        """
        Store an execution request and make sure the consumer is running.

        Returns once the item is on the queue; the execution itself
        happens later on the consumer task.

        Args:
            execution_id: ID of an existing QUEUED execution record
            artifact: Artifact snapshot to run
            input: Optional structured input
        """
        item = QueueItem(execution_id=execution_id, artifact=artifact, input=input)
        await asyncio.to_thread(self.queue.enqueue, item)
        record_execution_enqueued(artifact.type)
        logger.info(f"Queued execution {execution_id} ({artifact.type})")
        self.start()

    def start(self) -> asyncio.Task:
        """
        Start the consumer if it is stopped, otherwise wake it up.

        Must be called from the event loop thread.

        Returns:
            asyncio.Task: The consumer task
        """
        if self._state is ConsumerState.RUNNING:
            self._wake = True
            return self._task

        self._state = ConsumerState.RUNNING
        self._stopping = False
        self._wake = False
        set_consumer_running(True)
        self._task = asyncio.create_task(self._consume())
        return self._task

    async def join(self, timeout: Optional[float] = None) -> bool:
        """
        Wait until the consumer has drained the queue.

        Args:
            timeout: Maximum seconds to wait (None waits forever)

        Returns:
            bool: True if the consumer stopped, False on timeout
        """
        loop = asyncio.get_running_loop()
        deadline = None if timeout is None else loop.time() + timeout

        # A new task may have been started while waiting
        while self._task is not None and not self._task.done():
            remaining = None if deadline is None else max(deadline - loop.time(), 0)
            done, _ = await asyncio.wait({self._task}, timeout=remaining)
            if not done:
                return False
        return True

    async def stop(self, timeout: float = 30.0) -> None:
        """
        Stop the consumer after the in-flight item.

        Items still on the queue stay there for the next start().

        Args:
            timeout: Maximum time to wait for the in-flight item
        """
        self._stopping = True
        task = self._task
        if task is None or task.done():
            return

        logger.info("Stopping execution consumer...")
        done, _ = await asyncio.wait({task}, timeout=timeout)
        if not done:
            logger.warning("Timeout waiting for in-flight execution, cancelling consumer")
            task.cancel()
            await asyncio.gather(task, return_exceptions=True)

    async def recover(self) -> List[str]:
        """
        Reconcile state left by a previous process and resume draining.

        Executions stuck in RUNNING are failed; their runner is gone.
        Items still on the Redis list are picked up by a new consumer.

        Returns:
            List[str]: IDs of the executions that were failed
        """
        failed = await self._run_in_session(lambda service: service.fail_stale_executions())
        for execution_id in failed:
            await asyncio.to_thread(self.queue.clear_processing, execution_id)
            record_execution_finished(ExecutionStatus.FAILED.value)
        if failed:
            logger.warning(f"Failed {len(failed)} stale running execution(s): {', '.join(failed)}")

        pending = await asyncio.to_thread(self.queue.get_queue_length)
        if pending:
            logger.info(f"Resuming {pending} queued execution(s)")
            self.start()
        return failed

    async def _consume(self) -> None:
        """Pop and process items until the queue is empty or stop() is called."""
        logger.info("Execution consumer started")
        try:
            while not self._stopping:
                self._wake = False
                item = await asyncio.to_thread(self.queue.dequeue)
                if item is None:
                    # An enqueue may have landed while the pop was in flight
                    if self._wake:
                        continue
                    break
                await self._process(item)
        except Exception as e:
            logger.error(f"Execution consumer error: {e}", exc_info=True)
        finally:
            self._state = ConsumerState.STOPPED
            set_consumer_running(False)
            logger.info(
                f"Execution consumer stopped (processed={self.items_processed}, "
                f"completed={self.items_completed}, failed={self.items_failed}, "
                f"skipped={self.items_skipped})"
            )

    async def _process(self, item: QueueItem) -> None:
        """
        Run one queue item and persist its terminal status.

        Args:
            item: Dequeued item
        """
        execution_id = item.execution_id
        self.items_processed += 1

        try:
            started = await self._run_in_session(
                lambda service: service.mark_running(execution_id)
            )
            if not started:
                self.items_skipped += 1
                record_execution_skipped()
                return

            await asyncio.to_thread(self.queue.mark_processing, execution_id)
            status, fields = await self._call_executor(item)

            recorded = await self._run_in_session(
                lambda service: service.record_result(execution_id, status, fields) is not None
            )
            if not recorded:
                return

            record_execution_finished(status.value)
            if status is ExecutionStatus.COMPLETED:
                self.items_completed += 1
                logger.info(f"Execution {execution_id} completed")
            else:
                self.items_failed += 1
                logger.warning(f"Execution {execution_id} {status.value}: {fields.get('error')}")

        except Exception as e:
            self.items_failed += 1
            logger.error(f"Error processing execution {execution_id}: {e}", exc_info=True)
        finally:
            try:
                await asyncio.to_thread(self.queue.clear_processing, execution_id)
            except Exception as e:
                logger.error(f"Could not clear processing mark for {execution_id}: {e}")

    async def _call_executor(self, item: QueueItem) -> Tuple[ExecutionStatus, Dict[str, Any]]:
        """
        Call the executor and translate the outcome into a terminal write.

        Args:
            item: Queue item being processed

        Returns:
            Tuple[ExecutionStatus, Dict[str, Any]]: Status and result fields
        """
        limits = item.artifact.metadata.resource_limits
        if limits is not None and limits.max_execution_time:
            seconds = limits.max_execution_time
        else:
            seconds = self.settings.MAX_EXECUTION_TIME / 1000
        timeout = seconds + self.settings.EXECUTION_TIMEOUT_GRACE

        try:
            result = await self.client.execute(
                item.execution_id, item.artifact, item.input, timeout
            )
        except Exception as e:
            status, message = classify_transport_error(e)
            logger.warning(f"Executor call for {item.execution_id} failed: {e!r}")
            return status, {"error": message}

        status = ExecutionStatus.COMPLETED if result.success else ExecutionStatus.FAILED
        return status, {
            "output": result.output,
            "error": result.error,
            "exit_code": result.exit_code,
            "stdout": result.stdout,
            "stderr": result.stderr,
            "duration": result.duration,
            "resource_usage": result.resource_usage,
        }

    async def _run_in_session(self, operation: Callable[[ExecutionService], T]) -> T:
        """
        Run a service operation in a worker thread with its own session.

        Args:
            operation: Callable receiving an ExecutionService

        Returns:
            Whatever the operation returns
        """
        def run():
            session = self.session_factory()
            try:
                return operation(ExecutionService(session))
            finally:
                session.close()

        return await asyncio.to_thread(run)


def build_queue_manager(
    settings: Optional[Settings] = None,
    http_client: Optional[httpx.AsyncClient] = None,
) -> ExecutionQueueManager:
    """
    Wire a queue manager from configuration.

    Args:
        settings: Application settings
        http_client: Optional preconfigured client for the executor

    Returns:
        ExecutionQueueManager: Manager using the shared Redis client and SessionLocal
    """
    from execora.core.database import SessionLocal
    from execora.core.redis import get_redis

    settings = settings or get_settings()
    return ExecutionQueueManager(
        ExecutionQueue(get_redis(), settings.QUEUE_NAME),
        OrchestratorClient(settings.EXECUTOR_URL, client=http_client),
        SessionLocal,
        settings,
    )
