"""
Infrastructure exceptions.

``StructuredError`` is the shared base for every error this backend raises
on purpose: infrastructure failures here, game rule violations in
``src.modules.shared.exceptions``. Each carries a stable ``error_code``,
a ``details`` dict for logs, a ``severity`` and an ``is_retryable`` hint.
"""

from __future__ import annotations

from enum import Enum
from typing import Any, Dict, Optional


class ErrorSeverity(Enum):
    DEBUG = "debug"
    INFO = "info"
    WARNING = "warning"
    ERROR = "error"
    CRITICAL = "critical"


class StructuredError(Exception):
    """
    Exception with structured metadata.

    Subclasses tune ``DEFAULT_SEVERITY`` / ``DEFAULT_RETRYABLE`` instead of
    passing them on every raise.
    """

    DEFAULT_SEVERITY: ErrorSeverity = ErrorSeverity.ERROR
    DEFAULT_RETRYABLE: bool = False

    def __init__(
        self,
        message: str,
        details: Optional[Dict[str, Any]] = None,
        severity: Optional[ErrorSeverity] = None,
        is_retryable: Optional[bool] = None,
        error_code: Optional[str] = None,
    ) -> None:
        self.message = message
        self.details: Dict[str, Any] = details or {}
        self.severity = severity or self.DEFAULT_SEVERITY
        self.is_retryable = self.DEFAULT_RETRYABLE if is_retryable is None else is_retryable
        self.error_code = error_code or type(self).__name__
        super().__init__(message)

    def to_dict(self) -> Dict[str, Any]:
        return {
            "error_type": type(self).__name__,
            "error_code": self.error_code,
            "message": self.message,
            "details": self.details,
            "severity": self.severity.value,
            "is_retryable": self.is_retryable,
        }

    def __str__(self) -> str:
        if not self.details:
            return f"[{self.error_code}] {self.message}"
        return f"[{self.error_code}] {self.message} | Details: {self.details}"


class InfrastructureException(StructuredError):
    """Failures of the machinery rather than of game rules."""


class ConfigurationError(InfrastructureException):
    """A balance or environment setting is missing or has an unusable value."""

    DEFAULT_SEVERITY = ErrorSeverity.CRITICAL

    def __init__(self, config_key: str, message: str) -> None:
        self.config_key = config_key
        super().__init__(
            f"Configuration error for {config_key}: {message}",
            details={"config_key": config_key, "message": message},
            error_code="CONFIG_ERROR",
        )


class DatabaseError(InfrastructureException):
    """Wraps a driver/ORM exception raised during ``operation``."""

    DEFAULT_RETRYABLE = True

    def __init__(self, operation: str, original_error: Exception) -> None:
        self.operation = operation
        self.original_error = original_error
        super().__init__(
            f"Database error during {operation}: {original_error}",
            details={
                "operation": operation,
                "error": str(original_error),
                "error_type": type(original_error).__name__,
            },
            error_code="DATABASE_ERROR",
        )
