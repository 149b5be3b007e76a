"""Execution state machine logic for managing valid status transitions."""
from typing import Set, Dict
from execora.core.enums import ExecutionStatus
from execora.core.exceptions import InvalidStateTransitionError


class ExecutionStateMachine:
    """
    Defines valid state transitions for executions.

    Transitions are one-directional; terminal states never change again.

    State Diagram:
        QUEUED → RUNNING → COMPLETED/FAILED/TIMEOUT
           ↓
        CANCELLED
    """

    TRANSITIONS: Dict[ExecutionStatus, Set[ExecutionStatus]] = {
        ExecutionStatus.QUEUED: {ExecutionStatus.RUNNING, ExecutionStatus.CANCELLED},
        ExecutionStatus.RUNNING: {
            ExecutionStatus.COMPLETED,
            ExecutionStatus.FAILED,
            ExecutionStatus.TIMEOUT,
        },
        ExecutionStatus.COMPLETED: set(),  # Terminal state
        ExecutionStatus.FAILED: set(),  # Terminal state
        ExecutionStatus.TIMEOUT: set(),  # Terminal state
        ExecutionStatus.CANCELLED: set(),  # Terminal state
    }

    TERMINAL_STATES = {
        ExecutionStatus.COMPLETED,
        ExecutionStatus.FAILED,
        ExecutionStatus.TIMEOUT,
        ExecutionStatus.CANCELLED,
    }

    @classmethod
    def can_transition(cls, from_state: ExecutionStatus, to_state: ExecutionStatus) -> bool:
        """
        Check if transition from from_state to to_state is valid.

        Args:
            from_state: Current execution status
            to_state: Desired execution status

        Returns:
            bool: True if transition is valid, False otherwise
        """
        return to_state in cls.TRANSITIONS.get(from_state, set())

    @classmethod
    def validate_transition(cls, from_state: ExecutionStatus, to_state: ExecutionStatus) -> None:
        """
        Validate state transition and raise exception if invalid.

        Args:
            from_state: Current execution status
            to_state: Desired execution status

        Raises:
            InvalidStateTransitionError: If transition is not valid
        """
        if not cls.can_transition(from_state, to_state):
            raise InvalidStateTransitionError(
                f"Invalid state transition: {from_state} -> {to_state}"
            )

    @classmethod
    def is_terminal(cls, state: ExecutionStatus) -> bool:
        """
        Check if state is terminal (no further transitions possible).

        Args:
            state: Execution status to check

        Returns:
            bool: True if terminal state, False otherwise
        """
        return state in cls.TERMINAL_STATES

    @classmethod
    def get_valid_transitions(cls, from_state: ExecutionStatus) -> Set[ExecutionStatus]:
        """
        Get all valid next states from current state.

        Args:
            from_state: Current execution status

        Returns:
            Set[ExecutionStatus]: Set of valid next states
        """
        return cls.TRANSITIONS.get(from_state, set())
