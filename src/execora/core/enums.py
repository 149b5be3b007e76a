"""Core enumerations for the Execora execution platform."""
from enum import Enum


class ExecutionStatus(str, Enum):
    """
    Execution state machine states.

    State flow:
        QUEUED → RUNNING → COMPLETED/FAILED/TIMEOUT
           ↓
        CANCELLED (only while still queued)
    """

    QUEUED = "QUEUED"
    RUNNING = "RUNNING"
    COMPLETED = "COMPLETED"
    FAILED = "FAILED"
    TIMEOUT = "TIMEOUT"
    CANCELLED = "CANCELLED"

    def __str__(self) -> str:
        """Return string representation of the enum value."""
        return self.value


class ConsumerState(str, Enum):
    """
    Lifecycle of a queue manager's consumer loop.

    - STOPPED: No consumer task; the next enqueue starts one
    - RUNNING: A consumer task is draining the queue
    """

    STOPPED = "stopped"
    RUNNING = "running"

    def __str__(self) -> str:
        """Return string representation of the enum value."""
        return self.value


class RunnerKind(str, Enum):
    """Runner variants known to the orchestrator."""

    PYTHON = "python"
    JAVASCRIPT = "javascript"
    TYPESCRIPT = "typescript"
    HTML = "html"
    REACT = "react"

    def __str__(self) -> str:
        """Return string representation of the enum value."""
        return self.value
