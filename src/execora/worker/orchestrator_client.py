"""HTTP client for the executor service."""
import asyncio
import logging
from typing import Any, Optional, Tuple
import httpx
from pydantic import ValidationError as PydanticValidationError
from execora.api.schemas.execution import (
    ArtifactSnapshot,
    ExecuteRequest,
    ExecuteResponse,
    ExecutionResult,
)
from execora.core.enums import ExecutionStatus
from execora.core.exceptions import TransportError

logger = logging.getLogger(__name__)

TIMEOUT_ERROR = "Execution timeout"


class OrchestratorClient:
    """
    Calls POST /execute on the executor service.

    Every call is bounded twice: by the httpx request timeout and by
    asyncio.wait_for around the whole exchange.
    """

    def __init__(self, base_url: str, client: Optional[httpx.AsyncClient] = None):
        """
        Initialize client.

        Args:
            base_url: Executor service URL (e.g. http://localhost:5000)
            client: Preconfigured AsyncClient (tests pass one bound to an ASGI app)
        """
        self.base_url = base_url
        self._owns_client = client is None
        self.client = client or httpx.AsyncClient(base_url=base_url)

    async def execute(
        self,
        execution_id: str,
        artifact: ArtifactSnapshot,
        input: Optional[Any],
        timeout: float,
    ) -> ExecutionResult:
        """
        Run an artifact on the executor service.

        Args:
            execution_id: Execution identifier
            artifact: Artifact snapshot
            input: Structured input forwarded to the runner
            timeout: Seconds to wait for the full response

        Returns:
            ExecutionResult: Result reported by the executor

        Raises:
            TransportError: On non-2xx status or unparsable body
            asyncio.TimeoutError: If the call exceeds timeout
            httpx.HTTPError: On connection failures
        """
        request = ExecuteRequest(execution_id=execution_id, artifact=artifact, input=input)
        response = await asyncio.wait_for(
            self.client.post(
                "/execute",
                json=request.model_dump(mode="json", by_alias=True),
                timeout=timeout,
            ),
            timeout=timeout,
        )

        body = self._parse(response)
        if not response.is_success or not body.success or body.data is None:
            server_message = body.error.message if body.error else None
            raise TransportError(
                server_message or f"Executor returned HTTP {response.status_code}",
                status_code=response.status_code,
                server_message=server_message,
            )
        return body.data

    @staticmethod
    def _parse(response: httpx.Response) -> ExecuteResponse:
        try:
            return ExecuteResponse.model_validate(response.json())
        except (ValueError, PydanticValidationError) as e:
            if response.is_success:
                raise TransportError(
                    f"Unparsable executor response: {e}",
                    status_code=response.status_code,
                ) from e
            # Non-JSON error page; keep the status for the caller
            return ExecuteResponse(success=False)

    async def aclose(self) -> None:
        """Close the underlying HTTP client if this instance created it."""
        if self._owns_client:
            await self.client.aclose()


def classify_transport_error(error: BaseException) -> Tuple[ExecutionStatus, str]:
    """
    Map a failed executor call to the terminal status to record.

    Time-based failures (timeouts, aborted connections, or any error whose
    message mentions a timeout) become TIMEOUT; everything else is FAILED.

    Args:
        error: Exception raised by OrchestratorClient.execute

    Returns:
        Tuple[ExecutionStatus, str]: Status and error message
    """
    if isinstance(error, (asyncio.TimeoutError, httpx.TimeoutException, ConnectionAbortedError)):
        return ExecutionStatus.TIMEOUT, TIMEOUT_ERROR
    if "timeout" in str(error).lower():
        return ExecutionStatus.TIMEOUT, TIMEOUT_ERROR

    if isinstance(error, TransportError) and error.server_message:
        return ExecutionStatus.FAILED, error.server_message
    return ExecutionStatus.FAILED, f"Execution failed: {str(error) or type(error).__name__}"
