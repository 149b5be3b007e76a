"""Runner base class shared by all language runners."""
import logging
import time
from abc import ABC, abstractmethod
from typing import Any, Optional
from execora.config import Settings, get_settings
from execora.core.enums import RunnerKind
from execora.core.exceptions import (
    ValidationError,
    SandboxViolationError,
    ResourceExceededError,
)
from execora.api.schemas.execution import ResourceLimits
from execora.executor.models import RunnerResult, ResourceUsage

logger = logging.getLogger(__name__)


class Runner(ABC):
    """
    Executes or validates one piece of source code.

    Subclasses implement _run() and may raise ValidationError,
    SandboxViolationError or ResourceExceededError; execute() turns those
    and any unexpected exception into a failed RunnerResult.
    """

    kind: RunnerKind
    empty_message = "Empty source code"
    reports_usage = True

    def __init__(self, settings: Optional[Settings] = None):
        """
        Initialize runner.

        Args:
            settings: Application settings (defaults to cached settings)
        """
        self.settings = settings or get_settings()

    async def execute(
        self,
        content: str,
        input: Optional[Any] = None,
        limits: Optional[ResourceLimits] = None,
    ) -> RunnerResult:
        """
        Run the code and return a normalized result. Never raises.

        Args:
            content: Source text
            input: Optional structured input (e.g. {"stdin": "..."})
            limits: Optional resource limits

        Returns:
            RunnerResult: Outcome of the run
        """
        started = time.perf_counter()
        try:
            if not content or not content.strip():
                raise ValidationError(self.empty_message)
            return await self._run(content, input, limits)
        except ResourceExceededError as e:
            logger.warning(f"{self.kind} runner stopped execution: {e}")
            return RunnerResult.failure(
                str(e),
                stdout=e.stdout,
                resource_usage=self._usage(started),
            )
        except (ValidationError, SandboxViolationError) as e:
            logger.warning(f"{self.kind} runner rejected code: {e}")
            return RunnerResult.failure(str(e), resource_usage=self._usage(started))
        except Exception as e:
            logger.error(f"{self.kind} runner error: {e}", exc_info=True)
            return RunnerResult.failure(
                str(e) or "Execution failed",
                resource_usage=self._usage(started),
            )

    @abstractmethod
    async def _run(
        self,
        content: str,
        input: Optional[Any],
        limits: Optional[ResourceLimits],
    ) -> RunnerResult:
        """Runner-specific execution."""

    def timeout_seconds(self, limits: Optional[ResourceLimits]) -> float:
        """Execution time limit in seconds."""
        if limits is not None and limits.max_execution_time:
            return limits.max_execution_time
        return self.settings.MAX_EXECUTION_TIME / 1000

    def max_output_size(self, limits: Optional[ResourceLimits]) -> int:
        """Output cap in bytes."""
        if limits is not None and limits.max_output_size:
            return limits.max_output_size
        return self.settings.MAX_OUTPUT_SIZE

    def _usage(self, started: float) -> Optional[ResourceUsage]:
        if not self.reports_usage:
            return None
        return ResourceUsage(cpu_time=int((time.perf_counter() - started) * 1000))
