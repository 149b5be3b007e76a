"""Python runner - executes scripts in a separate interpreter process."""
import logging
import os
import re
from typing import Any, Dict, List, Optional
from uuid import uuid4
from execora.api.schemas.execution import ResourceLimits
from execora.core.enums import RunnerKind
from execora.core.exceptions import ValidationError, ResourceExceededError
from execora.executor.models import RunnerResult, ResourceUsage
from execora.executor.runners.base import Runner
from execora.executor.runners.process import run_process

logger = logging.getLogger(__name__)

IMPORT_PATTERN = re.compile(
    r"\bfrom\s+([^\s'\"]+)\s+import\b"
    r"|\bimport\s+([^\n;#'\"()]+)"
)


def extract_imports(code: str) -> List[str]:
    """
    Extract top-level module names from import statements.

    This is a textual scan, not a parse: ``import`` and ``from ... import``
    are matched anywhere in the source, so statements after ``;`` or ``:``
    and imports inside strings handed to ``exec`` are caught too. Submodule
    paths are truncated to their root (``os.path`` -> ``os``). Relative
    imports keep their dots.

    Args:
        code: Python source

    Returns:
        List[str]: Unique module names in order of appearance
    """
    found = []
    for match in IMPORT_PATTERN.finditer(code):
        if match.group(1):
            found.append(match.group(1))
            continue
        for part in match.group(2).split(","):
            tokens = part.split()
            if tokens:
                found.append(tokens[0])

    modules = []
    for name in found:
        root = name if name.startswith(".") else name.split(".")[0]
        if root and root not in modules:
            modules.append(root)
    return modules


class PythonRunner(Runner):
    """
    Runs Python source in a fresh interpreter subprocess.

    Imports are checked against ALLOWED_PYTHON_LIBRARIES before anything
    is spawned. The script is written to a uniquely named temporary file
    that is removed however the run ends.
    """

    kind = RunnerKind.PYTHON

    async def _run(
        self,
        content: str,
        input: Optional[Any],
        limits: Optional[ResourceLimits],
    ) -> RunnerResult:
        unauthorized = [
            module
            for module in extract_imports(content)
            if module not in self.settings.ALLOWED_PYTHON_LIBRARIES
        ]
        if unauthorized:
            raise ValidationError(
                f"Unauthorized imports: {', '.join(unauthorized)}",
                modules=unauthorized,
            )

        timeout = self.timeout_seconds(limits)
        temp_dir = self.settings.EXECUTION_TEMP_DIR
        temp_dir.mkdir(parents=True, exist_ok=True)
        script_path = temp_dir / f"script_{uuid4().hex}.py"

        try:
            script_path.write_text(content, encoding="utf-8")
            outcome = await run_process(
                [self.settings.PYTHON_EXECUTABLE, str(script_path)],
                stdin=self._stdin(input),
                timeout=timeout,
                max_output_size=self.max_output_size(limits),
                cwd=temp_dir,
                env=self._python_env(),
            )
        finally:
            script_path.unlink(missing_ok=True)

        if outcome.output_exceeded:
            raise ResourceExceededError("Output size limit exceeded", stdout=outcome.stdout)
        if outcome.timed_out:
            raise ResourceExceededError(
                f"Execution timed out after {timeout:g}s", stdout=outcome.stdout
            )

        return RunnerResult(
            success=outcome.returncode == 0,
            output=outcome.stdout,
            error=outcome.stderr or None,
            exit_code=outcome.returncode,
            stdout=outcome.stdout,
            stderr=outcome.stderr,
            resource_usage=ResourceUsage(cpu_time=outcome.duration_ms),
        )

    @staticmethod
    def _python_env() -> Dict[str, str]:
        """Minimal environment for the interpreter; service secrets stay out."""
        return {
            "PATH": os.environ.get("PATH", ""),
            "PYTHONIOENCODING": "utf-8",
            "PYTHONDONTWRITEBYTECODE": "1",
        }

    @staticmethod
    def _stdin(input: Optional[Any]) -> Optional[bytes]:
        if isinstance(input, dict) and input.get("stdin") is not None:
            return str(input["stdin"]).encode("utf-8")
        return None
