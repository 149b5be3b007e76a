"""JavaScript/TypeScript runner - evaluates code in a Node.js vm sandbox."""
import json
import logging
import os
from typing import Any, Dict, Optional
from execora.api.schemas.execution import ResourceLimits
from execora.config import Settings
from execora.core.enums import RunnerKind
from execora.core.exceptions import ResourceExceededError
from execora.executor.models import RunnerResult, ResourceUsage
from execora.executor.runners.base import Runner
from execora.executor.runners.js_harness import NODE_HARNESS
from execora.executor.runners.process import run_process

logger = logging.getLogger(__name__)

# Node startup and harness bookkeeping on top of the vm timeout
HARNESS_GRACE_SECONDS = 2.0

# Room for the JSON report wrapped around captured console output
REPORT_OVERHEAD_BYTES = 64 * 1024


class JavaScriptRunner(Runner):
    """
    Runs JavaScript in a fresh vm context inside a Node.js child process.

    The context sees only captured console methods, an allow-listed
    require, the execution input, a stub process object and timers.
    The vm timeout bounds synchronous code; the child process timeout
    bounds everything else.
    """

    kind = RunnerKind.JAVASCRIPT

    def __init__(self, settings: Optional[Settings] = None, typescript: bool = False):
        """
        Initialize runner.

        Args:
            settings: Application settings
            typescript: Strip type annotations before evaluation when Node supports it
        """
        super().__init__(settings)
        self.typescript = typescript
        if typescript:
            self.kind = RunnerKind.TYPESCRIPT

    async def _run(
        self,
        content: str,
        input: Optional[Any],
        limits: Optional[ResourceLimits],
    ) -> RunnerResult:
        timeout = self.timeout_seconds(limits)
        max_output = self.max_output_size(limits)
        request = {
            "code": content,
            "input": input if input is not None else {},
            "allowedModules": list(self.settings.ALLOWED_NODE_MODULES),
            "timeoutMs": int(timeout * 1000),
            "maxOutputSize": max_output,
            "typescript": self.typescript,
        }

        try:
            outcome = await run_process(
                [self.settings.NODE_EXECUTABLE, "-e", NODE_HARNESS],
                stdin=json.dumps(request).encode("utf-8"),
                timeout=timeout + HARNESS_GRACE_SECONDS,
                max_output_size=2 * max_output + REPORT_OVERHEAD_BYTES,
                env=self._node_env(),
            )
        except FileNotFoundError:
            raise RuntimeError(
                f"Node.js runtime not found: {self.settings.NODE_EXECUTABLE}"
            )

        if outcome.timed_out:
            raise ResourceExceededError(f"Execution timed out after {timeout:g}s")
        if outcome.output_exceeded:
            raise ResourceExceededError("Output size limit exceeded")

        try:
            report = json.loads(outcome.stdout)
        except json.JSONDecodeError:
            raise RuntimeError(
                outcome.stderr.strip()
                or f"Sandbox exited with code {outcome.returncode} without a result"
            )

        output = "\n".join(report.get("stdout", []))
        errors = list(report.get("stderr", []))
        if report.get("failure"):
            errors.append(report["failure"])
        error_text = "\n".join(errors)
        success = not errors

        return RunnerResult(
            success=success,
            output=output,
            error=error_text or None,
            exit_code=0 if success else 1,
            stdout=output,
            stderr=error_text,
            resource_usage=ResourceUsage(cpu_time=outcome.duration_ms),
        )

    @staticmethod
    def _node_env() -> Dict[str, str]:
        """Minimal environment for the Node process."""
        env = {"PATH": os.environ.get("PATH", "")}
        if os.environ.get("NODE_PATH"):
            env["NODE_PATH"] = os.environ["NODE_PATH"]
        return env
