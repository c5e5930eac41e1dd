"""
Data models for OrderIntake.

This module contains dataclasses for:
- OrderSubmission: A creator's order form (immutable, edited by replacement)
- ImageAsset: One attached image plus measured metadata
- ValidationReport: Per-field and per-slot error messages
- RelayRequest / RelayResponse: One round trip through the webhook relay
"""

from .order import (
    IMAGE_SLOTS,
    ImageAsset,
    OrderSubmission,
    SubmissionOutcome,
    SubmissionState,
    ValidationReport,
)
from .relay import RelayAttachment, RelayRequest, RelayResponse

__all__ = [
    # Order models
    "IMAGE_SLOTS",
    "ImageAsset",
    "OrderSubmission",
    "SubmissionOutcome",
    "SubmissionState",
    "ValidationReport",
    # Relay models
    "RelayAttachment",
    "RelayRequest",
    "RelayResponse",
]
