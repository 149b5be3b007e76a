"""Execution API endpoints."""
from typing import List, Optional
from fastapi import APIRouter, Depends, HTTPException, Query, status
from execora.api.deps import get_execution_service, get_queue_manager
from execora.api.schemas.execution import (
    ExecutionCreate,
    ExecutionResponse,
    ExecutionCancelResponse,
)
from execora.api.schemas.response import StandardResponse, ResponseCodes, error_detail
from execora.core.enums import ExecutionStatus
from execora.core.exceptions import InvalidStateTransitionError, ExecutionNotFoundError
from execora.services.execution_service import ExecutionService
from execora.worker.queue_manager import ExecutionQueueManager

router = APIRouter()


def _not_found(e: ExecutionNotFoundError) -> HTTPException:
    return HTTPException(
        status_code=status.HTTP_404_NOT_FOUND,
        detail=error_detail(ResponseCodes.EXECUTION_NOT_FOUND, "NOT_FOUND", str(e)),
    )


@router.post(
    "/executions",
    response_model=StandardResponse[ExecutionResponse],
    status_code=status.HTTP_202_ACCEPTED,
)
async def create_execution(
    execution_data: ExecutionCreate,
    execution_service: ExecutionService = Depends(get_execution_service),
    manager: ExecutionQueueManager = Depends(get_queue_manager),
) -> StandardResponse[ExecutionResponse]:
    """
    Submit an artifact for execution.

    - Creates a QUEUED execution record
    - Enqueues the artifact snapshot
    - Returns immediately; poll GET /executions/{id} for the result
    """
    artifact_id = execution_data.artifact_id or execution_data.artifact.id
    if not artifact_id:
        raise HTTPException(
            status_code=status.HTTP_400_BAD_REQUEST,
            detail=error_detail(
                ResponseCodes.VALIDATION_ERROR,
                "BAD_REQUEST",
                "artifactId or artifact.id is required",
            ),
        )

    input = execution_data.input.model_dump(exclude_none=True) if execution_data.input else {}

    execution = execution_service.create_execution(
        artifact_id=artifact_id,
        user_id=execution_data.user_id,
        input=input,
    )
    await manager.enqueue(execution.execution_id, execution_data.artifact, input)

    return StandardResponse(
        data=ExecutionResponse.model_validate(execution),
        code=ResponseCodes.EXECUTION_QUEUED,
        httpStatus="ACCEPTED",
        description="Execution queued successfully"
    )


@router.get("/executions", response_model=StandardResponse[List[ExecutionResponse]])
async def list_executions(
    status_filter: Optional[ExecutionStatus] = Query(default=None, alias="status"),
    artifact_id: Optional[str] = None,
    user_id: Optional[str] = None,
    limit: int = Query(default=20, ge=1, le=100),
    offset: int = Query(default=0, ge=0),
    execution_service: ExecutionService = Depends(get_execution_service),
) -> StandardResponse[List[ExecutionResponse]]:
    """
    List executions, newest first.
    """
    executions = execution_service.list_executions(
        status=status_filter,
        artifact_id=artifact_id,
        user_id=user_id,
        limit=limit,
        offset=offset,
    )
    return StandardResponse(
        data=[ExecutionResponse.model_validate(e) for e in executions],
        code=ResponseCodes.EXECUTIONS_LISTED,
        httpStatus="OK",
        description=f"{len(executions)} execution(s) retrieved"
    )


@router.get("/executions/{execution_id}", response_model=StandardResponse[ExecutionResponse])
async def get_execution(
    execution_id: str,
    execution_service: ExecutionService = Depends(get_execution_service),
) -> StandardResponse[ExecutionResponse]:
    """
    Get execution by ID.

    Returns status and, once terminal, the captured result.
    """
    try:
        execution = execution_service.get_execution(execution_id)
        return StandardResponse(
            data=ExecutionResponse.model_validate(execution),
            code=ResponseCodes.EXECUTION_RETRIEVED,
            httpStatus="OK",
            description="Execution retrieved successfully"
        )
    except ExecutionNotFoundError as e:
        raise _not_found(e)


@router.post(
    "/executions/{execution_id}/cancel",
    response_model=StandardResponse[ExecutionCancelResponse],
)
async def cancel_execution(
    execution_id: str,
    execution_service: ExecutionService = Depends(get_execution_service),
) -> StandardResponse[ExecutionCancelResponse]:
    """
    Cancel a queued execution.

    - Only QUEUED executions can be cancelled
    - The consumer skips the item when it is dequeued
    """
    try:
        execution = execution_service.cancel_execution(execution_id)
        cancel_response = ExecutionCancelResponse(
            execution_id=execution.execution_id,
            status=execution.status,
            message=f"Execution {execution_id} has been cancelled",
        )
        return StandardResponse(
            data=cancel_response,
            code=ResponseCodes.EXECUTION_CANCELLED,
            httpStatus="OK",
            description="Execution cancelled successfully"
        )
    except ExecutionNotFoundError as e:
        raise _not_found(e)
    except InvalidStateTransitionError as e:
        raise HTTPException(
            status_code=status.HTTP_400_BAD_REQUEST,
            detail=error_detail(
                ResponseCodes.EXECUTION_INVALID_TRANSITION,
                "BAD_REQUEST",
                str(e),
            ),
        )
