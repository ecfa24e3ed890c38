"""Centralized error definitions for UbiCity.

This module provides a unified error hierarchy and user-friendly error handling
for the analytics core.

Usage:
    from ubicity.errors import (
        UbiCityError,
        RecordValidationError,
        handle_error,
    )

    try:
        sanitized = privacy_filter.sanitize_all(records, skip_invalid=False)
    except UbiCityError as e:
        user_message = handle_error(e)
        print(user_message)
"""

from __future__ import annotations

from typing import Any, Dict, List, Optional

from ubicity.errors.user_messages import (
    format_error_for_user,
    get_recovery_suggestion,
    get_user_message,
)


# =============================================================================
# Base Error
# =============================================================================


class UbiCityError(Exception):
    """Base exception for all UbiCity errors.

    Attributes:
        code: Error code for categorization
        user_message: User-friendly message (optional override)
        recoverable: Whether the error is potentially recoverable
        details: Additional error details for debugging
    """

    code: str = "UBICITY_ERROR"
    default_message: str = "An unexpected error occurred"
    recoverable: bool = True

    def __init__(
        self,
        message: str | None = None,
        *,
        user_message: str | None = None,
        details: dict | None = None,
    ) -> None:
        self.message = message or self.default_message
        self._user_message = user_message
        self.details = details or {}
        super().__init__(self.message)

    @property
    def user_message(self) -> str:
        """Get user-friendly message."""
        if self._user_message:
            return self._user_message
        return get_user_message(self)

    @property
    def recovery_suggestion(self) -> str:
        """Get recovery suggestion."""
        return get_recovery_suggestion(self)

    def to_dict(self) -> dict:
        """Convert to dictionary for serialization."""
        return {
            "code": self.code,
            "message": self.message,
            "user_message": self.user_message,
            "recoverable": self.recoverable,
            "details": self.details,
        }


# =============================================================================
# Record Errors
# =============================================================================


class RecordValidationError(UbiCityError):
    """A learning experience record failed validation.

    Raised before any privacy or aggregation logic touches the record. Only the
    record id and the failing field locations are kept; field values are never
    copied into the error so rejected records cannot leak through logs.
    """

    code = "VALIDATION_ERROR"
    default_message = "Learning experience record is invalid"
    recoverable = True

    def __init__(
        self,
        problems: List[str],
        *,
        record_id: Optional[str] = None,
        index: Optional[int] = None,
        message: str | None = None,
    ) -> None:
        self.problems = list(problems)
        self.record_id = record_id
        self.index = index
        label = record_id if record_id else f"#{index}" if index is not None else "<unknown>"
        super().__init__(
            message or f"Record {label} rejected: {'; '.join(self.problems)}",
            details={"record_id": record_id, "index": index, "problems": self.problems},
        )


# =============================================================================
# Privacy Errors
# =============================================================================


class PrivacyError(UbiCityError):
    """Base error for privacy operations."""

    code = "PRIVACY_ERROR"
    default_message = "Privacy operation failed"


class PrivacyViolationError(PrivacyError):
    """An analyzer received a record that was not produced by the privacy filter."""

    code = "PRIVACY_VIOLATION"
    default_message = "Unsanitized record passed to an analyzer"
    recoverable = False

    def __init__(self, component: str, *, record_id: Optional[str] = None) -> None:
        self.component = component
        self.record_id = record_id
        super().__init__(
            f"{component} only accepts records produced by PrivacyFilter",
            details={"component": component, "record_id": record_id},
        )


# =============================================================================
# Configuration Errors
# =============================================================================


class ConfigurationError(UbiCityError):
    """Base error for configuration issues."""

    code = "CONFIGURATION_ERROR"
    default_message = "Configuration error"
    recoverable = True


class InvalidConfigError(ConfigurationError):
    """Configuration is invalid."""

    code = "INVALID_CONFIG"
    default_message = "Invalid configuration"


# =============================================================================
# Error Handler
# =============================================================================


def handle_error(error: Exception) -> str:
    """Handle an error and return a user-friendly message.

    Args:
        error: The exception to handle

    Returns:
        User-friendly error message with recovery suggestion
    """
    return format_error_for_user(error)


def is_recoverable(error: Exception) -> bool:
    """Check if an error is potentially recoverable."""
    if isinstance(error, UbiCityError):
        return error.recoverable
    return False


def summarize_rejections(errors: List[RecordValidationError]) -> Dict[str, Any]:
    """Collapse a batch of validation failures into counts for logging."""
    by_problem: Dict[str, int] = {}
    for error in errors:
        for problem in error.problems:
            field_name = problem.split(":", 1)[0]
            by_problem[field_name] = by_problem.get(field_name, 0) + 1
    return {"rejected": len(errors), "by_field": by_problem}


__all__ = [
    # Base
    "UbiCityError",
    # Records
    "RecordValidationError",
    # Privacy
    "PrivacyError",
    "PrivacyViolationError",
    # Configuration
    "ConfigurationError",
    "InvalidConfigError",
    # Handlers
    "handle_error",
    "is_recoverable",
    "summarize_rejections",
]
