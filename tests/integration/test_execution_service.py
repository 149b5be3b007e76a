"""Integration tests for ExecutionService against SQLite."""
import pytest
from execora.core.enums import ExecutionStatus
from execora.core.exceptions import ExecutionNotFoundError, InvalidStateTransitionError


@pytest.mark.integration
class TestExecutionService:
    """Test record lifecycle through the service."""

    def test_create_execution_is_queued(self, db_session):
        """Test new executions start QUEUED with an ID."""
        from execora.services.execution_service import ExecutionService

        execution = ExecutionService(db_session).create_execution(
            "artifact-1", user_id="user-1", input={"stdin": "x"}
        )

        assert execution.execution_id
        assert execution.status == ExecutionStatus.QUEUED
        assert execution.input == {"stdin": "x"}
        assert execution.started_at is None

    def test_get_missing_execution(self, db_session):
        """Test ExecutionNotFoundError for unknown IDs."""
        from execora.services.execution_service import ExecutionService

        with pytest.raises(ExecutionNotFoundError):
            ExecutionService(db_session).get_execution("does-not-exist")

    def test_mark_running_then_record_result(self, db_session):
        """Test QUEUED -> RUNNING -> COMPLETED with result fields."""
        from execora.services.execution_service import ExecutionService

        service = ExecutionService(db_session)
        execution = service.create_execution("artifact-1")

        assert service.mark_running(execution.execution_id) is True
        updated = service.record_result(
            execution.execution_id,
            ExecutionStatus.COMPLETED,
            {"output": "hi", "exit_code": 0, "duration": 12, "not_a_column": "ignored"},
        )

        assert updated.status == ExecutionStatus.COMPLETED
        assert updated.output == "hi"
        assert updated.duration == 12
        assert updated.started_at is not None
        assert updated.completed_at is not None

    def test_terminal_write_is_idempotent(self, db_session):
        """Test a second terminal write leaves the first result untouched."""
        from execora.services.execution_service import ExecutionService

        service = ExecutionService(db_session)
        execution = service.create_execution("artifact-1")
        service.mark_running(execution.execution_id)
        service.record_result(execution.execution_id, ExecutionStatus.FAILED, {"error": "first"})

        second = service.record_result(
            execution.execution_id, ExecutionStatus.COMPLETED, {"output": "second"}
        )

        assert second is None
        current = service.get_execution(execution.execution_id)
        assert current.status == ExecutionStatus.FAILED
        assert current.error == "first"
        assert current.output is None

    def test_mark_running_skips_terminal(self, db_session):
        """Test a cancelled execution is reported as not startable."""
        from execora.services.execution_service import ExecutionService

        service = ExecutionService(db_session)
        execution = service.create_execution("artifact-1")
        service.cancel_execution(execution.execution_id)

        assert service.mark_running(execution.execution_id) is False
        assert service.get_execution(execution.execution_id).status == ExecutionStatus.CANCELLED

    def test_cancel_only_when_queued(self, db_session):
        """Test cancelling a RUNNING execution is rejected."""
        from execora.services.execution_service import ExecutionService

        service = ExecutionService(db_session)
        execution = service.create_execution("artifact-1")
        service.mark_running(execution.execution_id)

        with pytest.raises(InvalidStateTransitionError):
            service.cancel_execution(execution.execution_id)

    def test_cancel_sets_completed_at(self, db_session):
        """Test cancellation timestamps the record."""
        from execora.services.execution_service import ExecutionService

        service = ExecutionService(db_session)
        execution = service.create_execution("artifact-1")

        cancelled = service.cancel_execution(execution.execution_id)

        assert cancelled.status == ExecutionStatus.CANCELLED
        assert cancelled.completed_at is not None

    def test_fail_stale_executions(self, db_session):
        """Test RUNNING records left behind are failed."""
        from execora.services.execution_service import ExecutionService, STALE_EXECUTION_ERROR

        service = ExecutionService(db_session)
        stale = service.create_execution("artifact-1")
        queued = service.create_execution("artifact-2")
        service.mark_running(stale.execution_id)

        failed = service.fail_stale_executions()

        assert failed == [stale.execution_id]
        assert service.get_execution(stale.execution_id).status == ExecutionStatus.FAILED
        assert service.get_execution(stale.execution_id).error == STALE_EXECUTION_ERROR
        assert service.get_execution(queued.execution_id).status == ExecutionStatus.QUEUED

    def test_list_executions_filters(self, db_session):
        """Test listing by status and artifact."""
        from execora.services.execution_service import ExecutionService

        service = ExecutionService(db_session)
        first = service.create_execution("artifact-1")
        service.create_execution("artifact-2")
        service.cancel_execution(first.execution_id)

        cancelled = service.list_executions(status=ExecutionStatus.CANCELLED)
        by_artifact = service.list_executions(artifact_id="artifact-2")

        assert [e.execution_id for e in cancelled] == [first.execution_id]
        assert len(by_artifact) == 1
        assert len(service.list_executions(limit=1)) == 1


@pytest.mark.integration
class TestConcurrentTransitions:
    """Test transitions committed by another session between read and write."""

    def test_cancel_between_read_and_running_write(self, session_factory):
        """Test a cancel that lands first keeps the execution CANCELLED."""
        from execora.services.execution_service import ExecutionService

        consumer_session = session_factory()
        api_session = session_factory()
        try:
            consumer = ExecutionService(consumer_session)
            execution_id = consumer.create_execution("artifact-1").execution_id
            write = consumer.repository.update_if_status

            def cancel_then_write(*args, **kwargs):
                ExecutionService(api_session).cancel_execution(execution_id)
                return write(*args, **kwargs)

            consumer.repository.update_if_status = cancel_then_write

            assert consumer.mark_running(execution_id) is False
        finally:
            consumer_session.close()
            api_session.close()

        check_session = session_factory()
        try:
            execution = ExecutionService(check_session).get_execution(execution_id)
            assert execution.status == ExecutionStatus.CANCELLED
            assert execution.started_at is None
        finally:
            check_session.close()

    def test_cancel_after_running_read_is_rejected(self, session_factory):
        """Test a cancel that read QUEUED loses to a committed RUNNING write."""
        from execora.services.execution_service import ExecutionService

        consumer_session = session_factory()
        api_session = session_factory()
        try:
            consumer = ExecutionService(consumer_session)
            execution_id = consumer.create_execution("artifact-1").execution_id
            api = ExecutionService(api_session)
            write = api.repository.update_if_status

            def start_then_write(*args, **kwargs):
                consumer.mark_running(execution_id)
                return write(*args, **kwargs)

            api.repository.update_if_status = start_then_write

            with pytest.raises(InvalidStateTransitionError):
                api.cancel_execution(execution_id)

            result = consumer.record_result(
                execution_id, ExecutionStatus.COMPLETED, {"output": "done"}
            )
            assert result is not None
            assert result.status == ExecutionStatus.COMPLETED
            assert result.output == "done"
        finally:
            consumer_session.close()
            api_session.close()

    def test_result_write_loses_to_committed_terminal(self, session_factory):
        """Test record_result does not overwrite a terminal status set meanwhile."""
        from execora.services.execution_service import ExecutionService, STALE_EXECUTION_ERROR

        consumer_session = session_factory()
        other_session = session_factory()
        try:
            consumer = ExecutionService(consumer_session)
            execution_id = consumer.create_execution("artifact-1").execution_id
            consumer.mark_running(execution_id)
            write = consumer.repository.update_if_status

            def fail_then_write(*args, **kwargs):
                ExecutionService(other_session).fail_stale_executions()
                return write(*args, **kwargs)

            consumer.repository.update_if_status = fail_then_write

            result = consumer.record_result(
                execution_id, ExecutionStatus.COMPLETED, {"output": "late"}
            )

            assert result is None
            current = consumer.get_execution(execution_id)
            assert current.status == ExecutionStatus.FAILED
            assert current.error == STALE_EXECUTION_ERROR
            assert current.output is None
        finally:
            consumer_session.close()
            other_session.close()
