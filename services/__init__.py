"""
Services layer for OrderIntake.

This module contains the business logic services:
- RelayService: Forwards submissions to the destination webhook
- SubmissionOrchestrator: Validates, renames and transmits order forms

Request Model:
    Flask handles each request on its own thread. RelayService keeps no
    state between requests; SubmissionOrchestrator only tracks which forms
    have a submission in flight.
"""

from .relay_service import RelayService
from .submission_service import AttachResult, SubmissionOrchestrator

__all__ = [
    "RelayService",
    "SubmissionOrchestrator",
    "AttachResult",
]
