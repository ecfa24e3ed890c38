"""User-friendly error messages for UbiCity.

This module provides human-readable error messages and recovery suggestions
for all error types.

Privacy Note:
- Error messages NEVER include learner identifiers or descriptions
- Only record ids and field names are surfaced
"""

from __future__ import annotations

from typing import Any


# =============================================================================
# Error Message Catalog
# =============================================================================

ERROR_MESSAGES: dict[str, str] = {
    # Record errors
    "VALIDATION_ERROR": "A learning experience record is missing required data.",
    # Privacy errors
    "PRIVACY_ERROR": "A privacy-related issue occurred.",
    "PRIVACY_VIOLATION": "An analysis step received data that skipped the privacy filter.",
    # Configuration errors
    "CONFIGURATION_ERROR": "There's a configuration issue.",
    "INVALID_CONFIG": "The configuration is invalid. Check settings.",
    # Generic
    "UBICITY_ERROR": "An unexpected error occurred. Please try again.",
    "UNKNOWN_ERROR": "Something went wrong. Please try again.",
}


# =============================================================================
# Recovery Suggestions
# =============================================================================

RECOVERY_SUGGESTIONS: dict[str, str] = {
    "VALIDATION_ERROR": "Every record needs a non-empty 'id' and an ISO-8601 'timestamp'.",
    "PRIVACY_ERROR": "Check the record's privacy tier: public, anonymous or private.",
    "PRIVACY_VIOLATION": "Pass records through PrivacyFilter.sanitize_all before analysis.",
    "CONFIGURATION_ERROR": "Check the settings file and UBICITY_* environment variables.",
    "INVALID_CONFIG": "Remove the offending setting to fall back to its default.",
    "UBICITY_ERROR": "If this persists, please report the issue.",
    "UNKNOWN_ERROR": "Report the issue if it continues.",
}


# =============================================================================
# Helper Functions
# =============================================================================


def _error_code(error: Any) -> str:
    if hasattr(error, "code"):
        return error.code
    if isinstance(error, str):
        return error
    return type(error).__name__.upper()


def get_user_message(error: Any) -> str:
    """Get user-friendly message for an error.

    Args:
        error: The error (can be Exception or error code string)

    Returns:
        User-friendly error message
    """
    return ERROR_MESSAGES.get(_error_code(error), ERROR_MESSAGES["UNKNOWN_ERROR"])


def get_recovery_suggestion(error: Any) -> str:
    """Get recovery suggestion for an error.

    Args:
        error: The error (can be Exception or error code string)

    Returns:
        Recovery suggestion
    """
    return RECOVERY_SUGGESTIONS.get(_error_code(error), RECOVERY_SUGGESTIONS["UNKNOWN_ERROR"])


def format_error_for_user(error: Any) -> str:
    """Format a complete user-friendly error message."""
    message = get_user_message(error)
    suggestion = get_recovery_suggestion(error)

    return f"{message}\n\nSuggestion: {suggestion}"


def format_error_for_cli(error: Any) -> str:
    """Format error for terminal output.

    Args:
        error: The error to format

    Returns:
        Multi-line message with code, suggestion and non-sensitive details
    """
    message = get_user_message(error)
    suggestion = get_recovery_suggestion(error)
    code = getattr(error, "code", "ERROR")

    lines = [
        f"Error [{code}]: {message}",
        "",
        f"Suggestion: {suggestion}",
    ]

    if hasattr(error, "details") and error.details:
        lines.append("")
        lines.append("Details:")
        for key, value in error.details.items():
            # Don't expose sensitive details
            if key not in ("learner", "name", "description", "email"):
                lines.append(f"  {key}: {value}")

    return "\n".join(lines)


__all__ = [
    "ERROR_MESSAGES",
    "RECOVERY_SUGGESTIONS",
    "get_user_message",
    "get_recovery_suggestion",
    "format_error_for_user",
    "format_error_for_cli",
]
