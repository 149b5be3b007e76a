"""Execution model tracking one run of an artifact."""
from datetime import datetime
from uuid import uuid4
from typing import Optional, Dict, Any
from sqlalchemy import (
    String,
    Integer,
    CheckConstraint,
    Index,
    Text,
    DateTime,
    JSON,
    Enum as SQLEnum,
)
from sqlalchemy.orm import Mapped, mapped_column
from execora.core.database import Base
from execora.core.enums import ExecutionStatus
from execora.models.base import TimestampMixin


def _new_execution_id() -> str:
    return str(uuid4())


class Execution(Base, TimestampMixin):
    """
    Execution record: the unit of work and its lifecycle.

    Created in QUEUED by the surrounding CRUD layer, then mutated only by
    the queue manager until it reaches a terminal status.
    """

    __tablename__ = "executions"

    # Primary identification
    execution_id: Mapped[str] = mapped_column(
        String(36), primary_key=True, default=_new_execution_id
    )

    # Linkage
    artifact_id: Mapped[str] = mapped_column(String(100), nullable=False, index=True)
    user_id: Mapped[Optional[str]] = mapped_column(String(100), nullable=True, index=True)

    # State Machine
    status: Mapped[ExecutionStatus] = mapped_column(
        SQLEnum(ExecutionStatus, values_callable=lambda x: [e.value for e in x]),
        nullable=False,
        default=ExecutionStatus.QUEUED,
        index=True,
    )

    input: Mapped[Dict[str, Any]] = mapped_column(JSON, nullable=False, default=dict)

    # Result fields (terminal states only)
    output: Mapped[Optional[str]] = mapped_column(Text, nullable=True)
    error: Mapped[Optional[str]] = mapped_column(Text, nullable=True)
    exit_code: Mapped[Optional[int]] = mapped_column(Integer, nullable=True)
    stdout: Mapped[Optional[str]] = mapped_column(Text, nullable=True)
    stderr: Mapped[Optional[str]] = mapped_column(Text, nullable=True)
    duration: Mapped[Optional[int]] = mapped_column(Integer, nullable=True)
    resource_usage: Mapped[Optional[Dict[str, Any]]] = mapped_column(JSON, nullable=True)

    # Execution tracking
    started_at: Mapped[Optional[datetime]] = mapped_column(
        DateTime(timezone=True), nullable=True
    )
    completed_at: Mapped[Optional[datetime]] = mapped_column(
        DateTime(timezone=True), nullable=True
    )

    __table_args__ = (
        CheckConstraint("duration IS NULL OR duration >= 0", name="check_duration_non_negative"),
        Index("idx_executions_status_created_at", "status", "created_at"),
    )

    def __repr__(self) -> str:
        """Return string representation of Execution."""
        return (
            f"<Execution(execution_id={self.execution_id}, "
            f"artifact_id={self.artifact_id}, status={self.status})>"
        )
