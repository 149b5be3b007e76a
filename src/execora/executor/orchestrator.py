"""Execution orchestrator: routes an artifact to its runner and normalizes the result."""
import logging
import time
from typing import Any, Optional
from execora.api.schemas.execution import ArtifactSnapshot, ExecutionResult, ResourceLimits
from execora.core.exceptions import NoRunnerAvailableError
from execora.executor.runner_registry import RunnerRegistry
from execora.observability.metrics import record_runner_execution

logger = logging.getLogger(__name__)


class ExecutionOrchestrator:
    """
    Executes artifacts by invoking the registered runner.

    Lookup failures and runner faults are reported as status="error"
    results; execute() never raises.
    """

    def __init__(self, registry: RunnerRegistry, default_limits: ResourceLimits):
        """
        Initialize orchestrator.

        Args:
            registry: Runner registry built at startup
            default_limits: Limits applied when the artifact carries none
        """
        self.registry = registry
        self.default_limits = default_limits

    async def execute(
        self,
        execution_id: str,
        artifact: ArtifactSnapshot,
        input: Optional[Any] = None,
    ) -> ExecutionResult:
        """
        Execute an artifact.

        Args:
            execution_id: Execution identifier echoed in the result
            artifact: Artifact snapshot to run
            input: Optional structured input

        Returns:
            ExecutionResult: Normalized result
        """
        started = time.perf_counter()

        try:
            runner = self.registry.get_runner(artifact.type, artifact.language)
        except NoRunnerAvailableError as e:
            logger.warning(f"Execution {execution_id}: {e}")
            return self._error_result(execution_id, str(e), started)

        limits = artifact.metadata.resource_limits or self.default_limits
        runner_name = str(runner.kind)
        logger.info(f"Execution {execution_id}: running {runner_name} artifact")

        try:
            result = await runner.execute(artifact.content, input, limits)
        except Exception as e:
            logger.error(f"Execution {execution_id}: runner {runner_name} raised: {e}", exc_info=True)
            record_runner_execution(runner_name, "error", time.perf_counter() - started)
            return self._error_result(execution_id, str(e) or "Execution failed", started)

        elapsed = time.perf_counter() - started
        outcome = "success" if result.success else "error"
        record_runner_execution(runner_name, outcome, elapsed)
        logger.info(
            f"Execution {execution_id}: {runner_name} finished with {outcome} "
            f"in {int(elapsed * 1000)}ms"
        )

        return ExecutionResult(
            execution_id=execution_id,
            status=outcome,
            output=result.output,
            error=result.error,
            exit_code=result.exit_code,
            stdout=result.stdout,
            stderr=result.stderr,
            duration=int(elapsed * 1000),
            resource_usage=result.resource_usage.to_dict() if result.resource_usage else {},
            warnings=list(result.warnings),
        )

    @staticmethod
    def _error_result(execution_id: str, message: str, started: float) -> ExecutionResult:
        return ExecutionResult(
            execution_id=execution_id,
            status="error",
            error=message,
            exit_code=1,
            stdout="",
            stderr=message,
            duration=int((time.perf_counter() - started) * 1000),
        )
