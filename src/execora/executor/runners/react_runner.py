"""React runner - static validation only; rendering happens in the browser."""
import re
from typing import Any, Optional
from execora.api.schemas.execution import ResourceLimits
from execora.core.enums import RunnerKind
from execora.core.exceptions import SandboxViolationError
from execora.executor.models import RunnerResult
from execora.executor.runners.base import Runner

REACT_IMPORT_PATTERNS = (
    re.compile(r"import\s+React", re.IGNORECASE),
    re.compile(r"import.*from\s+['\"]react['\"]", re.IGNORECASE),
)
EXPORT_PATTERN = re.compile(r"export\s+(default|const|function)", re.IGNORECASE)
INNER_HTML_PATTERN = re.compile(r"dangerouslySetInnerHTML")
DYNAMIC_CODE_PATTERN = re.compile(r"\beval\s*\(|\bnew\s+Function\s*\(|(?<![\w.$])Function\s*\(")


class ReactRunner(Runner):
    """
    Audits a React component's source.

    Missing imports/exports and dangerouslySetInnerHTML produce warnings;
    eval() and the Function constructor are refused outright.
    """

    kind = RunnerKind.REACT
    empty_message = "Empty React component"
    reports_usage = False

    async def _run(
        self,
        content: str,
        input: Optional[Any],
        limits: Optional[ResourceLimits],
    ) -> RunnerResult:
        if DYNAMIC_CODE_PATTERN.search(content):
            raise SandboxViolationError(
                "eval() and Function() are not allowed in React components"
            )

        warnings = []
        if not any(pattern.search(content) for pattern in REACT_IMPORT_PATTERNS):
            warnings.append("Warning: React import not found. Component may not work properly.")
        if not EXPORT_PATTERN.search(content):
            warnings.append("Warning: No export statement found. Component may not be importable.")
        if INNER_HTML_PATTERN.search(content):
            warnings.append("Warning: dangerouslySetInnerHTML detected. Use with caution.")

        return RunnerResult(
            success=True,
            output="React component validated successfully",
            exit_code=0,
            stdout="\n".join(warnings) if warnings else "Component is ready to render",
            stderr="",
            warnings=warnings,
        )
