"""Execution service for record lifecycle and status transitions."""
import logging
from datetime import datetime, timezone
from typing import Optional, Dict, Any, List
from sqlalchemy.orm import Session
from execora.repositories.execution_repository import ExecutionRepository
from execora.services.state_machine import ExecutionStateMachine
from execora.models.execution import Execution
from execora.core.enums import ExecutionStatus
from execora.core.exceptions import ExecutionNotFoundError

logger = logging.getLogger(__name__)

# Columns written on a terminal transition
RESULT_FIELDS = (
    "output",
    "error",
    "exit_code",
    "stdout",
    "stderr",
    "duration",
    "resource_usage",
)

STALE_EXECUTION_ERROR = "Execution interrupted before completion"


class ExecutionService:
    """Service for execution business logic and status transitions."""

    def __init__(self, db: Session):
        """
        Initialize service with database session.

        Args:
            db: SQLAlchemy database session
        """
        self.db = db
        self.repository = ExecutionRepository(db)

    def create_execution(
        self,
        artifact_id: str,
        user_id: Optional[str] = None,
        input: Optional[Dict[str, Any]] = None,
    ) -> Execution:
        """
        Create a new execution in QUEUED state.

        Args:
            artifact_id: Artifact being executed
            user_id: Optional owner
            input: Payload forwarded to the runner

        Returns:
            Execution: Created execution instance
        """
        return self.repository.create(
            {
                "artifact_id": artifact_id,
                "user_id": user_id,
                "input": input or {},
                "status": ExecutionStatus.QUEUED,
            }
        )

    def get_execution(self, execution_id: str) -> Execution:
        """
        Get execution by ID.

        Args:
            execution_id: Execution identifier

        Returns:
            Execution: Execution instance

        Raises:
            ExecutionNotFoundError: If execution not found
        """
        execution = self.repository.get_by_id(execution_id)
        if execution is None:
            raise ExecutionNotFoundError(f"Execution {execution_id} not found")
        return execution

    def list_executions(
        self,
        status: Optional[ExecutionStatus] = None,
        artifact_id: Optional[str] = None,
        user_id: Optional[str] = None,
        limit: int = 20,
        offset: int = 0,
    ) -> List[Execution]:
        """List executions newest first with optional filters."""
        return self.repository.list(
            status=status,
            artifact_id=artifact_id,
            user_id=user_id,
            limit=limit,
            offset=offset,
        )

    def cancel_execution(self, execution_id: str) -> Execution:
        """
        Cancel a queued execution.

        Running executions cannot be cancelled; their runner is not
        interrupted and only stops through its own limits.

        Args:
            execution_id: Execution identifier

        Returns:
            Execution: Updated execution instance

        Raises:
            ExecutionNotFoundError: If execution not found
            InvalidStateTransitionError: If execution is not QUEUED
        """
        execution = self.get_execution(execution_id)
        ExecutionStateMachine.validate_transition(execution.status, ExecutionStatus.CANCELLED)

        cancelled = self.repository.update_if_status(
            execution_id,
            [ExecutionStatus.QUEUED],
            status=ExecutionStatus.CANCELLED,
            completed_at=datetime.now(timezone.utc),
        )
        if cancelled is None:
            # The consumer started it after our read
            current = self.get_execution(execution_id)
            ExecutionStateMachine.validate_transition(current.status, ExecutionStatus.CANCELLED)
        return cancelled

    def mark_running(self, execution_id: str) -> bool:
        """
        Transition a dequeued execution to RUNNING.

        Args:
            execution_id: Execution identifier

        Returns:
            bool: False if the execution is already terminal and must be skipped

        Raises:
            ExecutionNotFoundError: If execution not found
            InvalidStateTransitionError: If execution is not QUEUED
        """
        execution = self.get_execution(execution_id)
        if not ExecutionStateMachine.is_terminal(execution.status):
            ExecutionStateMachine.validate_transition(execution.status, ExecutionStatus.RUNNING)
            started = self.repository.update_if_status(
                execution_id,
                [ExecutionStatus.QUEUED],
                status=ExecutionStatus.RUNNING,
                started_at=datetime.now(timezone.utc),
            )
            if started is not None:
                return True
            execution = self.get_execution(execution_id)

        if ExecutionStateMachine.is_terminal(execution.status):
            logger.info(
                f"Execution {execution_id} is already {execution.status}, skipping"
            )
            return False

        ExecutionStateMachine.validate_transition(execution.status, ExecutionStatus.RUNNING)
        return False

    def record_result(
        self,
        execution_id: str,
        status: ExecutionStatus,
        fields: Optional[Dict[str, Any]] = None,
    ) -> Optional[Execution]:
        """
        Write a terminal status and its result fields.

        A record that is already terminal is left untouched.

        Args:
            execution_id: Execution identifier
            status: Terminal status to write
            fields: Result columns (see RESULT_FIELDS)

        Returns:
            Optional[Execution]: Updated execution, None if it was already terminal

        Raises:
            ExecutionNotFoundError: If execution not found
            InvalidStateTransitionError: If status is not reachable
        """
        execution = self.get_execution(execution_id)
        if not ExecutionStateMachine.is_terminal(execution.status):
            ExecutionStateMachine.validate_transition(execution.status, status)

            values = {k: v for k, v in (fields or {}).items() if k in RESULT_FIELDS}
            updated = self.repository.update_if_status(
                execution_id,
                [execution.status],
                status=status,
                completed_at=datetime.now(timezone.utc),
                **values,
            )
            if updated is not None:
                return updated
            execution = self.get_execution(execution_id)

        logger.warning(
            f"Ignoring {status} for execution {execution_id}: "
            f"already terminal ({execution.status})"
        )
        return None

    def fail_stale_executions(self) -> List[str]:
        """
        Fail executions left RUNNING by a previous process.

        Returns:
            List[str]: IDs of the executions that were failed
        """
        failed = []
        for execution in self.repository.get_by_status(ExecutionStatus.RUNNING):
            updated = self.repository.update_if_status(
                execution.execution_id,
                [ExecutionStatus.RUNNING],
                status=ExecutionStatus.FAILED,
                error=STALE_EXECUTION_ERROR,
                completed_at=datetime.now(timezone.utc),
            )
            if updated is not None:
                failed.append(execution.execution_id)
        return failed
