"""
Core module for OrderIntake.

Contains fundamental infrastructure components:
- exceptions: Custom exception hierarchy
- relay_client: Transports from the order form to the relay
"""

from .exceptions import (
    OrderIntakeError,
    ConfigurationError,
    UploadConstraintError,
    SubmissionInProgressError,
    SubmissionError,
    TransportError,
    UpstreamError,
)
from .relay_client import HttpRelayClient, LocalRelayClient, check_relay_response

__all__ = [
    "OrderIntakeError",
    "ConfigurationError",
    "UploadConstraintError",
    "SubmissionInProgressError",
    "SubmissionError",
    "TransportError",
    "UpstreamError",
    "HttpRelayClient",
    "LocalRelayClient",
    "check_relay_response",
]
