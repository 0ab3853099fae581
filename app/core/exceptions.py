"""
Base exception classes for application-wide error handling.

Exception Hierarchy:
    BaseApplicationError (base)
    ├── ValidationError - Input validation failures
    └── ExternalServiceError - Collaborator or transport failures

Usage:
    from core.exceptions import ValidationError

    raise ValidationError(
        "Invitation payload is incomplete",
        details={"fields": {"invitation_id": ["This field is required."]}},
    )

Note:
    Services report expected failures through ServiceResult; these exceptions
    cover payload parsing and collaborator calls, and are converted with
    ServiceResult.from_exception() at the service boundary.
"""

from __future__ import annotations

from typing import TYPE_CHECKING

if TYPE_CHECKING:
    from typing import Any


class BaseApplicationError(Exception):
    """
    Base exception for all application-specific errors.

    Attributes:
        message: Human-readable error description
        error_code: Machine-readable code for client-side handling
        details: Additional error context (field errors, metadata, etc.)
    """

    default_error_code: str = "APPLICATION_ERROR"

    def __init__(
        self,
        message: str,
        error_code: str | None = None,
        details: dict[str, Any] | None = None,
    ):
        self.message = message
        self.error_code = error_code or self.default_error_code
        self.details = details or {}
        super().__init__(message)

    def __str__(self) -> str:
        return f"[{self.error_code}] {self.message}"

    def __repr__(self) -> str:
        return (
            f"{self.__class__.__name__}("
            f"message={self.message!r}, "
            f"error_code={self.error_code!r}, "
            f"details={self.details!r})"
        )


class ValidationError(BaseApplicationError):
    """Raised when input validation fails (missing text, malformed payload)."""

    default_error_code: str = "VALIDATION_ERROR"


class ExternalServiceError(BaseApplicationError):
    """
    Raised when a collaborator or the transport fails.

    Use for:
    - Application tracking or team membership service errors
    - Channel layer send failures

    Note:
        Log the original error but report a generic transient failure to
        clients; the caller may retry.
    """

    default_error_code: str = "TRANSIENT_FAILURE"
