"""Runner data models and result classes."""
from dataclasses import dataclass, field
from typing import Optional, Dict, Any, List


@dataclass
class ResourceUsage:
    """Resources consumed by one runner invocation."""

    cpu_time: int = 0  # Milliseconds
    memory: int = 0  # Bytes; not measured by any runner yet

    def to_dict(self) -> Dict[str, Any]:
        """Wire representation."""
        return {"cpuTime": self.cpu_time, "memory": self.memory}


@dataclass
class RunnerResult:
    """
    Result of one runner invocation.

    Every runner returns this shape; failures are data, never exceptions.
    """

    success: bool
    output: str = ""
    error: Optional[str] = None
    exit_code: Optional[int] = 0
    stdout: str = ""
    stderr: str = ""
    resource_usage: Optional[ResourceUsage] = None
    warnings: List[str] = field(default_factory=list)

    @classmethod
    def failure(
        cls,
        message: str,
        stdout: str = "",
        stderr: Optional[str] = None,
        exit_code: Optional[int] = 1,
        resource_usage: Optional[ResourceUsage] = None,
    ) -> "RunnerResult":
        """Build a failed result whose error and stderr carry the message."""
        return cls(
            success=False,
            output=stdout,
            error=message,
            exit_code=exit_code,
            stdout=stdout,
            stderr=message if stderr is None else stderr,
            resource_usage=resource_usage,
        )
