"""Prometheus metrics for Execora."""
from typing import Optional, TYPE_CHECKING
from prometheus_client import Counter, Gauge, Histogram, Info

if TYPE_CHECKING:
    from execora.services.execution_queue import ExecutionQueue


# Execution metrics
executions_enqueued_total = Counter(
    'execora_executions_enqueued_total',
    'Total number of executions enqueued',
    ['artifact_type']
)

executions_finished_total = Counter(
    'execora_executions_finished_total',
    'Total number of executions that reached a terminal status',
    ['status']
)

executions_skipped_total = Counter(
    'execora_executions_skipped_total',
    'Total number of dequeued executions skipped because they were already terminal'
)

# Runner metrics
runner_executions_total = Counter(
    'execora_runner_executions_total',
    'Total number of runner invocations',
    ['runner', 'outcome']
)

runner_duration_seconds = Histogram(
    'execora_runner_duration_seconds',
    'Runner wall-clock duration in seconds',
    ['runner'],
    buckets=[0.01, 0.05, 0.1, 0.25, 0.5, 1.0, 2.5, 5.0, 10.0, 30.0, 60.0]
)

# Queue metrics
queue_length = Gauge(
    'execora_queue_length',
    'Number of executions waiting in the queue',
    ['queue_name']
)

queue_processing = Gauge(
    'execora_queue_processing',
    'Number of executions being processed',
    ['queue_name']
)

queue_consumer_running = Gauge(
    'execora_queue_consumer_running',
    'Whether a consumer loop is active (1) or stopped (0)'
)

# System info
system_info = Info(
    'execora_system',
    'Execora system information'
)


def update_queue_metrics(queue: Optional["ExecutionQueue"] = None) -> None:
    """
    Update queue gauge metrics.

    Args:
        queue: Optional ExecutionQueue instance
    """
    if not queue:
        return

    queue_length.labels(queue_name=queue.queue_name).set(queue.get_queue_length())
    queue_processing.labels(queue_name=queue.queue_name).set(queue.get_processing_count())


def record_execution_enqueued(artifact_type: str) -> None:
    """Record execution enqueued."""
    executions_enqueued_total.labels(artifact_type=artifact_type).inc()


def record_execution_finished(status: str) -> None:
    """Record execution terminal status."""
    executions_finished_total.labels(status=status).inc()


def record_execution_skipped() -> None:
    """Record dequeued execution skipped."""
    executions_skipped_total.inc()


def record_runner_execution(runner: str, outcome: str, duration: float) -> None:
    """Record one runner invocation and its duration in seconds."""
    runner_executions_total.labels(runner=runner, outcome=outcome).inc()
    runner_duration_seconds.labels(runner=runner).observe(duration)


def set_consumer_running(running: bool) -> None:
    """Record consumer loop state."""
    queue_consumer_running.set(1 if running else 0)


def init_system_info(version: str, component: str = "api") -> None:
    """
    Initialize system information metric.

    Args:
        version: Application version
        component: Service name ("api" or "executor")
    """
    system_info.info({
        'version': version,
        'name': 'Execora',
        'component': component,
    })
