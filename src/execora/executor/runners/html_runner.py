"""HTML runner - static validation only; rendering happens in the browser."""
import re
from typing import Any, Optional
from execora.api.schemas.execution import ResourceLimits
from execora.core.enums import RunnerKind
from execora.executor.models import RunnerResult
from execora.executor.runners.base import Runner

UNSAFE_PATTERNS = (
    ("<script> block", re.compile(r"<script[^>]*>.*?</script>", re.IGNORECASE | re.DOTALL)),
    ("javascript: URL", re.compile(r"javascript:", re.IGNORECASE)),
    ("inline event handler", re.compile(r"\bon\w+\s*=", re.IGNORECASE)),
)


class HTMLRunner(Runner):
    """Audits HTML for unsafe patterns and reports them as warnings."""

    kind = RunnerKind.HTML
    empty_message = "Empty HTML content"
    reports_usage = False

    async def _run(
        self,
        content: str,
        input: Optional[Any],
        limits: Optional[ResourceLimits],
    ) -> RunnerResult:
        warnings = [
            f"Warning: Potentially unsafe pattern detected ({label})"
            for label, pattern in UNSAFE_PATTERNS
            if pattern.search(content)
        ]

        return RunnerResult(
            success=True,
            output="HTML validated successfully",
            exit_code=0,
            stdout="\n".join(warnings) if warnings else "HTML is safe to render",
            stderr="",
            warnings=warnings,
        )
