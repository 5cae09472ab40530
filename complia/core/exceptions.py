"""Structured exception hierarchy for the scheduling engine.

Key components:
- **ErrorCode enum**: Standardized error identifiers for programmatic handling
- **Severity enum**: Error classification for monitoring and alerting
- **ComplianceEngineError**: Base exception with context and fingerprinting
- **Specialized exceptions**: validation, not found, unauthorized,
  date computation and storage failures

How each kind is treated:
- ``ValidationError`` and ``NotFoundError`` reach the caller with detail.
- ``InternalComputationError`` never leaves the due date calculator; it is
  logged and turned into an empty date list for one compliance.
- ``StoreError`` aborts the whole generation call. A uniqueness violation on
  the task table is not a ``StoreError``; the store swallows it.
"""

import hashlib
import traceback
from enum import Enum
from typing import Any


class ErrorCode(Enum):
    """Standardized error codes."""

    INTERNAL_ERROR = "INTERNAL_ERROR"
    """An unexpected internal error occurred in the system."""

    VALIDATION_ERROR = "VALIDATION_ERROR"
    """Input validation failed due to invalid or malformed data."""

    NOT_FOUND = "NOT_FOUND"
    """The requested entity or compliance could not be found."""

    UNAUTHORIZED = "UNAUTHORIZED"
    """The request carried no usable tenant identity."""

    COMPUTATION_ERROR = "COMPUTATION_ERROR"
    """Due date arithmetic failed for a single compliance."""

    STORE_ERROR = "STORE_ERROR"
    """The task store rejected a write for a reason other than a duplicate."""


class Severity(Enum):
    """Severity levels used for log levels and alerting."""

    LOW = "LOW"
    MEDIUM = "MEDIUM"
    HIGH = "HIGH"
    CRITICAL = "CRITICAL"


class ComplianceEngineError(Exception):
    """Base exception class for all application exceptions.

    Args:
        error_code: Unique identifier for the error type (string or ErrorCode enum)
        message: Human-readable error message
        severity: Severity level of the error (defaults to MEDIUM)
        context: Additional context information about the error
        cause: The original exception that caused this error
    """

    def __init__(
        self,
        error_code: str | ErrorCode,
        message: str,
        severity: Severity = Severity.MEDIUM,
        context: dict[str, Any] | None = None,
        cause: Exception | None = None,
    ) -> None:
        self.error_code = (
            error_code.value if isinstance(error_code, ErrorCode) else error_code
        )
        self.message = message
        self.severity = severity
        self.context = context or {}
        self.cause = cause
        self.stack_trace = traceback.format_stack()[:-1]
        self.fingerprint = self._generate_fingerprint()

        super().__init__(message)
        if cause:
            self.__cause__ = cause

    def _generate_fingerprint(self) -> str:
        """Hash the error type and the raising location for grouping."""
        max_frames = 5
        fingerprint_data = f"{self.__class__.__name__}:{self.error_code}"
        for frame in self.stack_trace[-max_frames:]:
            if "site-packages" not in frame and "complia/" in frame:
                fingerprint_data += f":{frame.strip().splitlines()[0]}"
        return hashlib.sha256(fingerprint_data.encode()).hexdigest()[:16]

    @property
    def is_expected(self) -> bool:
        """Expected errors (LOW or MEDIUM) come from input, not from faults."""
        return self.severity in (Severity.LOW, Severity.MEDIUM)

    @property
    def should_alert(self) -> bool:
        """HIGH and CRITICAL errors should page someone."""
        return self.severity in (Severity.HIGH, Severity.CRITICAL)

    def __str__(self) -> str:
        return f"[{self.error_code}] {self.message}"

    def __repr__(self) -> str:
        class_name = self.__class__.__name__
        context_str = f", context={self.context}" if self.context else ""
        return (
            f"{class_name}(error_code='{self.error_code}', "
            f"message='{self.message}', severity={self.severity.value}{context_str})"
        )


class ValidationError(ComplianceEngineError):
    """Raised for invalid caller input or a malformed due-date rule."""

    def __init__(
        self,
        message: str,
        error_code: str | ErrorCode = ErrorCode.VALIDATION_ERROR,
        context: dict[str, Any] | None = None,
        cause: Exception | None = None,
    ) -> None:
        super().__init__(error_code, message, Severity.LOW, context, cause)


class NotFoundError(ValidationError):
    """Raised when an entity or compliance does not exist for the tenant."""

    def __init__(
        self,
        message: str,
        error_code: str | ErrorCode = ErrorCode.NOT_FOUND,
        context: dict[str, Any] | None = None,
        cause: Exception | None = None,
    ) -> None:
        super().__init__(message, error_code, context, cause)


class UnauthorizedError(ComplianceEngineError):
    """Raised when the request carries no usable tenant identity."""

    def __init__(
        self,
        message: str,
        error_code: str | ErrorCode = ErrorCode.UNAUTHORIZED,
        context: dict[str, Any] | None = None,
        cause: Exception | None = None,
    ) -> None:
        super().__init__(error_code, message, Severity.HIGH, context, cause)


class InternalComputationError(ComplianceEngineError):
    """Raised inside date arithmetic; downgraded to an empty date list."""

    def __init__(
        self,
        message: str,
        error_code: str | ErrorCode = ErrorCode.COMPUTATION_ERROR,
        context: dict[str, Any] | None = None,
        cause: Exception | None = None,
    ) -> None:
        super().__init__(error_code, message, Severity.MEDIUM, context, cause)


class StoreError(ComplianceEngineError):
    """Raised when persisting tasks fails for any reason but a duplicate."""

    def __init__(
        self,
        message: str,
        error_code: str | ErrorCode = ErrorCode.STORE_ERROR,
        context: dict[str, Any] | None = None,
        cause: Exception | None = None,
    ) -> None:
        super().__init__(error_code, message, Severity.HIGH, context, cause)
