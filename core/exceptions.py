"""
Custom exceptions for OrderIntake.

Exception Hierarchy:
    OrderIntakeError (base)
    ├── ConfigurationError        - Required server configuration missing (fatal per request)
    ├── UploadConstraintError     - A single image broke an upload rule (recoverable, local)
    ├── SubmissionInProgressError - A submission for this form is already in flight
    └── SubmissionError           - Transmission failed (recoverable, user may retry)
        ├── TransportError        - Network failure or timeout talking to the relay/webhook
        └── UpstreamError         - Relay or webhook answered with a failure

Usage:
    Field validation produces a ValidationReport, not an exception.
    Upload errors are resolved before any network call is made.
    Submission errors are surfaced to the user and are never retried automatically.
"""

from typing import Optional, Dict, Any


class OrderIntakeError(Exception):
    """
    Base exception for all OrderIntake errors.

    All custom exceptions inherit from this class, allowing callers to catch
    all application-specific errors with a single except clause if needed.
    """

    def __init__(self, message: str, details: Optional[Dict[str, Any]] = None):
        """
        Initialize the exception.

        Args:
            message: Human-readable error message
            details: Optional dictionary with additional context for debugging
        """
        super().__init__(message)
        self.message = message
        self.details = details or {}

    def __str__(self) -> str:
        if self.details:
            return f"{self.message} | Details: {self.details}"
        return self.message


# =============================================================================
# SERVER ERRORS
# =============================================================================

class ConfigurationError(OrderIntakeError):
    """
    A required configuration value is missing.

    The relay cannot forward anything without a destination webhook URL.
    The detail is logged server-side only; clients get a fixed message.
    """

    def __init__(self, setting: str):
        message = f"Missing required setting: {setting}"
        details = {
            "setting": setting,
            "resolution": f"Set {setting} in the environment or .env file",
        }
        super().__init__(message, details)
        self.setting = setting


# =============================================================================
# CLIENT-SIDE ERRORS - resolved before any network call
# =============================================================================

class UploadConstraintError(OrderIntakeError):
    """
    A single attached image broke a format, size or resolution rule.

    Raised (or carried) on attach; the offending slot is cleared.
    """

    def __init__(self, slot: int, reason: str, message: str):
        details = {"slot": slot, "reason": reason}
        super().__init__(message, details)
        self.slot = slot
        self.reason = reason

    @property
    def field_label(self) -> str:
        """Display label for the slot (1-based)."""
        return f"Image {self.slot}"


class SubmissionInProgressError(OrderIntakeError):
    """A submission for the same form is already being transmitted."""

    def __init__(self, form_id: str):
        super().__init__("A submission is already in progress", {"form_id": form_id})
        self.form_id = form_id


# =============================================================================
# SUBMISSION ERRORS - surfaced to the user, never retried
# =============================================================================

class SubmissionError(OrderIntakeError):
    """
    Base class for failures while transmitting a valid submission.

    The client treats every subclass the same way: keep the form values,
    show the message, let the user try again.
    """


class TransportError(SubmissionError):
    """
    No usable response was received (connection error, DNS, timeout).
    """

    def __init__(self, message: str = "Network error", details: Optional[Dict[str, Any]] = None):
        super().__init__(message, details)


class UpstreamError(SubmissionError):
    """
    The relay or webhook responded, but not with a success.

    Either the HTTP status was outside 200-299 or the body's
    ``success`` flag was not exactly true.
    """

    def __init__(self, message: str, status_code: int, body: Optional[Dict[str, Any]] = None):
        details = {"status_code": status_code}
        super().__init__(message, details)
        self.status_code = status_code
        self.body = body or {}
