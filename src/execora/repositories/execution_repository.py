"""Execution repository for database operations."""
from typing import Optional, Dict, Any, Iterable, List
from sqlalchemy.orm import Session
from execora.models.execution import Execution
from execora.core.enums import ExecutionStatus


class ExecutionRepository:
    """Repository for Execution database operations."""

    def __init__(self, db: Session):
        """
        Initialize repository with database session.

        Args:
            db: SQLAlchemy database session
        """
        self.db = db

    def create(self, execution_data: Dict[str, Any]) -> Execution:
        """
        Create a new execution in the database.

        Args:
            execution_data: Dictionary of execution attributes

        Returns:
            Execution: Created execution instance
        """
        execution = Execution(**execution_data)
        self.db.add(execution)
        self.db.commit()
        self.db.refresh(execution)
        return execution

    def get_by_id(self, execution_id: str) -> Optional[Execution]:
        """
        Retrieve execution by ID.

        Args:
            execution_id: Execution identifier

        Returns:
            Optional[Execution]: Execution instance or None if not found
        """
        return (
            self.db.query(Execution)
            .filter(Execution.execution_id == execution_id)
            .first()
        )

    def list(
        self,
        status: Optional[ExecutionStatus] = None,
        artifact_id: Optional[str] = None,
        user_id: Optional[str] = None,
        limit: int = 20,
        offset: int = 0,
    ) -> List[Execution]:
        """
        List executions, newest first.

        Args:
            status: Optional status filter
            artifact_id: Optional artifact filter
            user_id: Optional owner filter
            limit: Maximum number of rows
            offset: Rows to skip

        Returns:
            List[Execution]: Matching executions
        """
        query = self.db.query(Execution)
        if status is not None:
            query = query.filter(Execution.status == status)
        if artifact_id is not None:
            query = query.filter(Execution.artifact_id == artifact_id)
        if user_id is not None:
            query = query.filter(Execution.user_id == user_id)
        return (
            query.order_by(Execution.created_at.desc())
            .offset(offset)
            .limit(limit)
            .all()
        )

    def get_by_status(self, status: ExecutionStatus) -> List[Execution]:
        """
        Retrieve all executions in a status.

        Args:
            status: Execution status

        Returns:
            List[Execution]: Executions in that status
        """
        return self.db.query(Execution).filter(Execution.status == status).all()

    def update_if_status(
        self,
        execution_id: str,
        expected: Iterable[ExecutionStatus],
        **fields: Any,
    ) -> Optional[Execution]:
        """
        Update execution fields only while its status is one of ``expected``.

        The status check and the write are one UPDATE statement, so a
        concurrent transition committed by another session makes this a
        no-op instead of being overwritten.

        Args:
            execution_id: Execution identifier
            expected: Statuses the row must currently have
            **fields: Column values to set

        Returns:
            Optional[Execution]: Updated execution, None if the status did not match
        """
        rows = (
            self.db.query(Execution)
            .filter(
                Execution.execution_id == execution_id,
                Execution.status.in_(list(expected)),
            )
            .update(fields, synchronize_session=False)
        )
        self.db.commit()
        if rows == 0:
            return None
        return self.get_by_id(execution_id)
