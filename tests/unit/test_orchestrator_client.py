"""Unit tests for OrchestratorClient and transport error classification."""
import asyncio
import json
import httpx
import pytest
from execora.core.enums import ExecutionStatus
from execora.core.exceptions import TransportError


def _result_body(execution_id="exec-1", status="success"):
    return {
        "success": True,
        "data": {
            "executionId": execution_id,
            "status": status,
            "output": "hi",
            "error": None,
            "exitCode": 0,
            "stdout": "hi",
            "stderr": "",
            "duration": 5,
            "resourceUsage": {"cpuTime": 5, "memory": 0},
            "warnings": [],
        },
    }


def _client(handler):
    from execora.worker.orchestrator_client import OrchestratorClient

    http_client = httpx.AsyncClient(
        transport=httpx.MockTransport(handler),
        base_url="http://executor",
    )
    return OrchestratorClient("http://executor", client=http_client)


class TestClassifyTransportError:
    """Test mapping of transport failures to terminal statuses."""

    def test_asyncio_timeout(self):
        """Test asyncio timeouts become TIMEOUT."""
        from execora.worker.orchestrator_client import classify_transport_error

        assert classify_transport_error(asyncio.TimeoutError()) == (
            ExecutionStatus.TIMEOUT,
            "Execution timeout",
        )

    def test_httpx_timeout(self):
        """Test httpx read timeouts become TIMEOUT."""
        from execora.worker.orchestrator_client import classify_transport_error

        status, message = classify_transport_error(httpx.ReadTimeout("read timed out"))

        assert status is ExecutionStatus.TIMEOUT
        assert message == "Execution timeout"

    def test_connection_aborted(self):
        """Test aborted connections count as time-based."""
        from execora.worker.orchestrator_client import classify_transport_error

        status, _ = classify_transport_error(ConnectionAbortedError())

        assert status is ExecutionStatus.TIMEOUT

    def test_timeout_keyword(self):
        """Test any error mentioning a timeout becomes TIMEOUT."""
        from execora.worker.orchestrator_client import classify_transport_error

        status, _ = classify_transport_error(RuntimeError("upstream Timeout"))

        assert status is ExecutionStatus.TIMEOUT

    def test_server_message_is_used(self):
        """Test a server error message becomes the execution error."""
        from execora.worker.orchestrator_client import classify_transport_error

        error = TransportError("x", status_code=500, server_message="Runner pool exhausted")

        assert classify_transport_error(error) == (ExecutionStatus.FAILED, "Runner pool exhausted")

    def test_generic_failure(self):
        """Test other errors are prefixed with 'Execution failed:'."""
        from execora.worker.orchestrator_client import classify_transport_error

        status, message = classify_transport_error(httpx.ConnectError("connection refused"))

        assert status is ExecutionStatus.FAILED
        assert message == "Execution failed: connection refused"


@pytest.mark.asyncio
class TestOrchestratorClient:
    """Test the HTTP exchange with the executor."""

    async def test_posts_camel_case_request(self, make_artifact):
        """Test the request body and the parsed result."""
        seen = {}

        def handler(request: httpx.Request) -> httpx.Response:
            seen["path"] = request.url.path
            seen["body"] = json.loads(request.content)
            return httpx.Response(200, json=_result_body())

        client = _client(handler)
        result = await client.execute("exec-1", make_artifact(), {"stdin": "x"}, timeout=5)
        await client.aclose()

        assert seen["path"] == "/execute"
        assert seen["body"]["executionId"] == "exec-1"
        assert seen["body"]["artifact"]["type"] == "python-script"
        assert seen["body"]["input"] == {"stdin": "x"}
        assert result.success is True
        assert result.resource_usage == {"cpuTime": 5, "memory": 0}

    async def test_server_error_raises_transport_error(self, make_artifact):
        """Test a 500 with an error envelope carries the server message."""
        def handler(request):
            return httpx.Response(
                500,
                json={"success": False, "error": {"message": "Sandbox unavailable", "code": "ERR_5002"}},
            )

        client = _client(handler)

        with pytest.raises(TransportError) as exc_info:
            await client.execute("exec-1", make_artifact(), None, timeout=5)

        assert exc_info.value.status_code == 500
        assert exc_info.value.server_message == "Sandbox unavailable"

    async def test_non_json_error_page(self, make_artifact):
        """Test a non-JSON error page still raises TransportError without a server message."""
        def handler(request):
            return httpx.Response(502, text="<html>Bad Gateway</html>")

        client = _client(handler)

        with pytest.raises(TransportError) as exc_info:
            await client.execute("exec-1", make_artifact(), None, timeout=5)

        assert exc_info.value.status_code == 502
        assert exc_info.value.server_message is None

    async def test_unparsable_success_body(self, make_artifact):
        """Test a 200 with garbage raises TransportError."""
        def handler(request):
            return httpx.Response(200, text="garbage")

        client = _client(handler)

        with pytest.raises(TransportError):
            await client.execute("exec-1", make_artifact(), None, timeout=5)

    async def test_slow_executor_times_out(self, make_artifact):
        """Test the call is bounded by the timeout."""
        async def handler(request):
            await asyncio.sleep(5)
            return httpx.Response(200, json=_result_body())

        client = _client(handler)

        with pytest.raises(asyncio.TimeoutError):
            await client.execute("exec-1", make_artifact(), None, timeout=0.2)
