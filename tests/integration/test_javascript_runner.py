"""Integration tests for JavaScriptRunner (spawns Node.js)."""
import shutil
import pytest

pytestmark = [
    pytest.mark.integration,
    pytest.mark.skipif(shutil.which("node") is None, reason="Node.js is not installed"),
]


@pytest.mark.asyncio
class TestJavaScriptRunner:
    """Test JavaScriptRunner end to end."""

    async def test_console_and_completion_value(self, test_settings):
        """Test console.log capture, prefixes and the final expression value."""
        from execora.executor.runners.javascript_runner import JavaScriptRunner

        code = "console.log('Hello', 1); console.info('note'); console.warn('careful'); 2 + 3"
        result = await JavaScriptRunner(test_settings).execute(code)

        assert result.success is True
        assert result.output.splitlines() == ["Hello 1", "[INFO] note", "[WARN] careful", "5"]
        assert result.exit_code == 0
        assert result.error is None

    async def test_objects_are_json_encoded(self, test_settings):
        """Test logged objects and object results are JSON."""
        from execora.executor.runners.javascript_runner import JavaScriptRunner

        result = await JavaScriptRunner(test_settings).execute("console.log({a: 1}); [1, 2]")

        assert result.output.splitlines() == ['{"a":1}', "[1,2]"]

    async def test_input_is_visible(self, test_settings):
        """Test the execution input is exposed as a global."""
        from execora.executor.runners.javascript_runner import JavaScriptRunner

        result = await JavaScriptRunner(test_settings).execute(
            "console.log(input.name)", {"name": "Ada"}
        )

        assert result.output == "Ada"

    async def test_console_error_fails_run(self, test_settings):
        """Test console.error output marks the run as failed."""
        from execora.executor.runners.javascript_runner import JavaScriptRunner

        result = await JavaScriptRunner(test_settings).execute(
            "console.log('ok'); console.error('bad thing')"
        )

        assert result.success is False
        assert result.stdout == "ok"
        assert result.stderr == "bad thing"
        assert result.exit_code == 1

    async def test_thrown_error(self, test_settings):
        """Test an uncaught exception is reported."""
        from execora.executor.runners.javascript_runner import JavaScriptRunner

        result = await JavaScriptRunner(test_settings).execute("throw new Error('kaboom')")

        assert result.success is False
        assert "kaboom" in result.error

    async def test_disallowed_require(self, test_settings):
        """Test require outside the allow-list throws inside the sandbox."""
        from execora.executor.runners.javascript_runner import JavaScriptRunner

        result = await JavaScriptRunner(test_settings).execute("require('fs')")

        assert result.success is False
        assert "Module 'fs' is not allowed" in result.error

    async def test_allowed_builtin_require(self, test_settings):
        """Test an allow-listed core module loads."""
        from execora.executor.runners.javascript_runner import JavaScriptRunner

        result = await JavaScriptRunner(test_settings).execute(
            "const path = require('path'); path.join('a', 'b')"
        )

        assert result.success is True
        assert result.output == "a/b"

    async def test_process_is_stubbed(self, test_settings):
        """Test the sandbox sees a stub process without the host environment."""
        from execora.executor.runners.javascript_runner import JavaScriptRunner

        result = await JavaScriptRunner(test_settings).execute(
            "console.log(process.platform, Object.keys(process.env).length)"
        )

        assert result.output == "sandbox 0"

    async def test_infinite_loop_times_out(self, test_settings):
        """Test a synchronous infinite loop is stopped near the limit."""
        from execora.api.schemas.execution import ResourceLimits
        from execora.executor.runners.javascript_runner import JavaScriptRunner

        limits = ResourceLimits(max_execution_time=1)
        result = await JavaScriptRunner(test_settings).execute("while (true) {}", limits=limits)

        assert result.success is False
        assert "timed out" in result.error
        assert result.resource_usage.cpu_time < 1000 + 2000 + 1000

    async def test_pending_interval_is_killed(self, test_settings):
        """Test code that never lets the event loop drain is killed."""
        from execora.api.schemas.execution import ResourceLimits
        from execora.executor.runners.javascript_runner import JavaScriptRunner

        limits = ResourceLimits(max_execution_time=1)
        result = await JavaScriptRunner(test_settings).execute(
            "setInterval(() => {}, 100)", limits=limits
        )

        assert result.success is False
        assert result.error == "Execution timed out after 1s"

    async def test_async_output_is_collected(self, test_settings):
        """Test output from timers is reported once the event loop drains."""
        from execora.executor.runners.javascript_runner import JavaScriptRunner

        result = await JavaScriptRunner(test_settings).execute(
            "setTimeout(() => console.log('later'), 10); console.log('now')"
        )

        assert result.output.splitlines() == ["now", "later"]

    async def test_output_cap(self, test_settings):
        """Test console output beyond the cap fails the run."""
        from execora.api.schemas.execution import ResourceLimits
        from execora.executor.runners.javascript_runner import JavaScriptRunner

        limits = ResourceLimits(max_execution_time=5, max_output_size=1000)
        result = await JavaScriptRunner(test_settings).execute(
            "for (let i = 0; i < 1000; i++) console.log('x'.repeat(50))", limits=limits
        )

        assert result.success is False
        assert "Output size limit exceeded" in result.error
        assert len(result.stdout) <= 1000

    async def test_missing_node_binary(self, test_settings):
        """Test a missing runtime is reported as a failed result."""
        from execora.executor.runners.javascript_runner import JavaScriptRunner

        settings = test_settings.model_copy(update={"NODE_EXECUTABLE": "node-does-not-exist"})
        result = await JavaScriptRunner(settings).execute("1")

        assert result.success is False
        assert result.error.startswith("Node.js runtime not found")

    async def test_typescript_runner_kind(self, test_settings):
        """Test plain JavaScript runs through the TypeScript runner."""
        from execora.core.enums import RunnerKind
        from execora.executor.runners.javascript_runner import JavaScriptRunner

        runner = JavaScriptRunner(test_settings, typescript=True)
        result = await runner.execute("const n = 2; n * 21")

        assert runner.kind is RunnerKind.TYPESCRIPT
        assert result.output == "42"
