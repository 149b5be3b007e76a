"""Standard API response schemas."""
from typing import Any, Dict, Optional, Generic, TypeVar
from pydantic import BaseModel, Field

T = TypeVar('T')


class StandardResponse(BaseModel, Generic[T]):
    """Standard API response wrapper."""

    data: T = Field(..., description="Response data")
    code: str = Field(..., description="Response code")
    httpStatus: str = Field(..., description="HTTP status text")
    description: str = Field(..., description="Response description")

    model_config = {"from_attributes": True}


class ErrorResponse(BaseModel):
    """Standard error response, sent as the detail of an HTTPException."""

    data: Optional[Any] = Field(None, description="Error details")
    code: str = Field(..., description="Error code")
    httpStatus: str = Field(..., description="HTTP status text")
    description: str = Field(..., description="Error description")


def error_detail(code: str, http_status: str, description: str) -> Dict[str, Any]:
    """
    Build the HTTPException detail for an error response.

    Args:
        code: Error code from ResponseCodes
        http_status: HTTP status text (e.g. "NOT_FOUND")
        description: Human-readable message

    Returns:
        Dict[str, Any]: Serialized ErrorResponse
    """
    return ErrorResponse(code=code, httpStatus=http_status, description=description).model_dump()


# Response codes
class ResponseCodes:
    """Standard response codes."""

    # Success codes (2xx)
    EXECUTION_QUEUED = "EXE_0001"
    EXECUTION_RETRIEVED = "EXE_0002"
    EXECUTION_CANCELLED = "EXE_0003"
    EXECUTIONS_LISTED = "EXE_0004"

    QUEUE_STATS_RETRIEVED = "QUEUE_0001"

    HEALTH_OK = "HEALTH_0001"

    # Error codes (4xx, 5xx)
    EXECUTION_NOT_FOUND = "EXE_4001"
    EXECUTION_INVALID_TRANSITION = "EXE_4003"

    VALIDATION_ERROR = "ERR_4001"
    INTERNAL_ERROR = "ERR_5001"
    EXECUTOR_ERROR = "ERR_5002"
