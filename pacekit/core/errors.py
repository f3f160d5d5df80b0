"""Library-level exception types.

This module defines the errors raised by pacekit itself, enabling consistent
error handling and logging. Errors raised by wrapped user functions are never
converted into these types: they propagate unchanged.
"""

from __future__ import annotations

from dataclasses import dataclass
from typing import Any, NotRequired, TypedDict


class ErrorDetails(TypedDict, total=False):
    """Structured error context for observability and callers.

    Fields are optional to keep the shape flexible while encouraging
    consistent keys across the codebase.
    """

    code: str
    message: str
    hint: str
    option: str
    value: str
    errors: list[dict[str, Any]]
    context: NotRequired[dict[str, Any]]


@dataclass
class PacekitError(Exception):
    """Base error for pacekit failures.

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


class InvalidOptionError(PacekitError):
    """Raised when a wrapper is configured with unusable options."""


class SchedulerUnavailableError(PacekitError):
    """Raised when a timer is requested but no scheduler can run it."""
