"""Pydantic schemas for executions, artifacts and the executor wire format."""
from datetime import datetime, timezone
from typing import Optional, Dict, Any, List, Literal
from pydantic import BaseModel, ConfigDict, Field
from pydantic.alias_generators import to_camel
from execora.config import Settings
from execora.core.enums import ExecutionStatus


class CamelModel(BaseModel):
    """Base model speaking camelCase on the wire and snake_case in Python."""

    model_config = ConfigDict(alias_generator=to_camel, populate_by_name=True)


class ResourceLimits(CamelModel):
    """
    Per-execution resource ceilings.

    maxExecutionTime is in seconds; runners convert to milliseconds where
    their sandbox expects it. Unset fields fall back to configuration.
    """

    max_execution_time: Optional[float] = Field(default=None, gt=0)
    max_memory: Optional[int] = Field(default=None, gt=0)
    max_output_size: Optional[int] = Field(default=None, gt=0)
    max_cpu: Optional[float] = Field(default=None, alias="maxCPU")
    max_disk: Optional[int] = None
    max_network_requests: Optional[int] = None
    allow_network: Optional[bool] = None


def default_resource_limits(settings: Settings) -> ResourceLimits:
    """
    Build the library-wide default limits from configuration.

    Args:
        settings: Application settings

    Returns:
        ResourceLimits: Defaults with the execution time converted to seconds
    """
    return ResourceLimits(
        max_execution_time=settings.MAX_EXECUTION_TIME / 1000,
        max_memory=settings.MAX_MEMORY,
        max_output_size=settings.MAX_OUTPUT_SIZE,
        max_cpu=1.0,
        max_disk=100,
        max_network_requests=0,
        allow_network=False,
    )


class ArtifactMetadata(CamelModel):
    """Artifact metadata; keys other than resourceLimits pass through untouched."""

    model_config = ConfigDict(alias_generator=to_camel, populate_by_name=True, extra="allow")

    resource_limits: Optional[ResourceLimits] = None


class ArtifactSnapshot(CamelModel):
    """Copy of an artifact taken at enqueue time."""

    id: Optional[str] = None
    type: str = Field(..., min_length=1, max_length=100)
    language: str = Field(..., min_length=1, max_length=50)
    content: str
    metadata: ArtifactMetadata = Field(default_factory=ArtifactMetadata)


class ExecutionInput(CamelModel):
    """Structured input forwarded to the runner."""

    model_config = ConfigDict(alias_generator=to_camel, populate_by_name=True, extra="allow")

    stdin: Optional[str] = None
    args: Optional[List[str]] = None
    env: Optional[Dict[str, str]] = None
    files: Optional[Dict[str, str]] = None


class QueueItem(CamelModel):
    """Envelope stored on the execution queue."""

    execution_id: str
    artifact: ArtifactSnapshot
    input: Optional[Any] = None
    queued_at: datetime = Field(default_factory=lambda: datetime.now(timezone.utc))


class ExecuteRequest(CamelModel):
    """Body of POST /execute on the executor service."""

    execution_id: str
    artifact: ArtifactSnapshot
    input: Optional[Any] = None


class ExecutionResult(CamelModel):
    """Normalized result returned by the orchestrator for every runner."""

    execution_id: str
    status: Literal["success", "error"]
    output: Optional[str] = None
    error: Optional[str] = None
    exit_code: Optional[int] = None
    stdout: Optional[str] = None
    stderr: Optional[str] = None
    duration: int = 0
    resource_usage: Dict[str, Any] = Field(default_factory=dict)
    warnings: List[str] = Field(default_factory=list)

    @property
    def success(self) -> bool:
        """Whether the runner reported success."""
        return self.status == "success"


class ExecuteErrorDetail(BaseModel):
    """Error body of a failed executor call."""

    message: str
    code: Optional[str] = None


class ExecuteResponse(BaseModel):
    """Envelope returned by POST /execute."""

    success: bool
    data: Optional[ExecutionResult] = None
    error: Optional[ExecuteErrorDetail] = None


class ExecutionCreate(CamelModel):
    """Schema for submitting an artifact for execution."""

    artifact: ArtifactSnapshot
    artifact_id: Optional[str] = Field(default=None, max_length=100)
    user_id: Optional[str] = Field(default=None, max_length=100)
    input: Optional[ExecutionInput] = None

    model_config = ConfigDict(
        alias_generator=to_camel,
        populate_by_name=True,
        json_schema_extra={
            "examples": [
                {
                    "artifact": {
                        "id": "artifact-123",
                        "type": "python-script",
                        "language": "python",
                        "content": "print('hello')",
                        "metadata": {"resourceLimits": {"maxExecutionTime": 10}},
                    },
                    "input": {"stdin": ""},
                }
            ]
        },
    )


class ExecutionResponse(BaseModel):
    """Schema for execution record responses."""

    execution_id: str
    artifact_id: str
    user_id: Optional[str]
    status: ExecutionStatus
    input: Optional[Dict[str, Any]]
    output: Optional[str]
    error: Optional[str]
    exit_code: Optional[int]
    stdout: Optional[str]
    stderr: Optional[str]
    duration: Optional[int]
    resource_usage: Optional[Dict[str, Any]]
    started_at: Optional[datetime]
    completed_at: Optional[datetime]
    created_at: datetime
    updated_at: datetime

    model_config = {
        "from_attributes": True,
    }


class ExecutionCancelResponse(BaseModel):
    """Response for execution cancellation."""

    execution_id: str
    status: ExecutionStatus
    message: str
