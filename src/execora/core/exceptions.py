"""Custom exceptions for Execora."""
from typing import List, Optional


class ExecoraException(Exception):
    """Base exception for all Execora-specific exceptions."""

    pass


class InvalidStateTransitionError(ExecoraException):
    """Raised when attempting an invalid execution state transition."""

    pass


class ExecutionNotFoundError(ExecoraException):
    """Raised when an execution is not found in the database."""

    pass


class ValidationError(ExecoraException):
    """Raised when source code imports modules outside the allow-list."""

    def __init__(self, message: str, modules: Optional[List[str]] = None):
        super().__init__(message)
        self.modules = modules or []


class SandboxViolationError(ExecoraException):
    """Raised when a disallowed construct is found in submitted code."""

    pass


class ResourceExceededError(ExecoraException):
    """Raised when an execution breaches its output or time limit."""

    def __init__(self, message: str, stdout: str = ""):
        super().__init__(message)
        self.stdout = stdout


class NoRunnerAvailableError(ExecoraException):
    """Raised when no runner is registered for an artifact type or language."""

    pass


class TransportError(ExecoraException):
    """Raised when the executor service cannot be reached or answers with an error."""

    def __init__(
        self,
        message: str,
        status_code: Optional[int] = None,
        server_message: Optional[str] = None,
    ):
        super().__init__(message)
        self.status_code = status_code
        self.server_message = server_message
