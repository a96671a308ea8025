"""Client-level exception types.

This module defines domain errors used across services/adapters, enabling
consistent error handling and logging.
"""

from __future__ import annotations

from dataclasses import dataclass
from typing import Any, NotRequired, TypedDict


class ErrorDetails(TypedDict, total=False):
    """Structured error context for observability and callers.

    Fields are optional; use the ones relevant to the failure.
    """

    hint: str
    request_limit: int
    window_seconds: float
    timeout_seconds: float
    waited_seconds: float
    endpoint: str
    submission_id: str
    error_type: str
    context: NotRequired[dict[str, Any]]


@dataclass
class AppError(Exception):
    """Base error for client/domain failures.

    Attributes:
        code: Stable, machine-readable error code.
        message: Human-readable error message.
        details: Optional structured details for debugging/observability.
    """

    code: str
    message: str
    details: ErrorDetails | None = None

    def __post_init__(self) -> None:
        # Populate Exception args so str(error) is useful in logs/tracebacks.
        super().__init__(self.message)


class ConfigurationAppError(AppError):
    """Raised when a component cannot be built from the given configuration."""


class CancellationAppError(AppError):
    """Raised when a permit wait is abandoned; no permit was consumed."""


class ValidationAppError(AppError):
    """Raised when submission input fails validation."""


class TransportAppError(AppError):
    """Raised when the registry cannot be reached or the exchange fails."""
