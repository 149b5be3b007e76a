"""Executor API endpoint."""
import logging
from fastapi import APIRouter, Request, status
from fastapi.responses import JSONResponse
from execora.api.schemas.execution import ExecuteRequest, ExecuteResponse, ExecuteErrorDetail
from execora.api.schemas.response import ResponseCodes

logger = logging.getLogger(__name__)

router = APIRouter(tags=["execute"])


@router.post("/execute", response_model=ExecuteResponse)
async def execute_artifact(body: ExecuteRequest, request: Request):
    """
    Execute an artifact synchronously.

    - Routes the artifact to its runner
    - Returns the normalized ExecutionResult
    - Runner failures are reported in data.status, not as HTTP errors
    """
    orchestrator = request.app.state.orchestrator
    logger.info(f"Starting execution {body.execution_id} for artifact {body.artifact.type}")

    try:
        result = await orchestrator.execute(body.execution_id, body.artifact, body.input)
    except Exception as e:
        logger.error(f"Execution {body.execution_id} failed: {e}", exc_info=True)
        error = ExecuteResponse(
            success=False,
            error=ExecuteErrorDetail(
                message=str(e) or "Execution failed",
                code=ResponseCodes.EXECUTOR_ERROR,
            ),
        )
        return JSONResponse(
            status_code=status.HTTP_500_INTERNAL_SERVER_ERROR,
            content=error.model_dump(mode="json", by_alias=True),
        )

    return ExecuteResponse(success=True, data=result)
