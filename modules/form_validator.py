"""Whole-form validation for the order and resubmission forms."""

from __future__ import annotations

import re
from typing import Dict, List, Optional, Sequence

from models.order import IMAGE_SLOTS, ImageAsset, OrderSubmission, ValidationReport
from modules.image_checker import DEFAULT_CONSTRAINTS, ImageConstraints, validate_image


URL_RE = re.compile(r"^https?://.+\..+")
QUANTITY_RE = re.compile(r"[+-]?[0-9]+")


def _required(value: str) -> bool:
    return bool((value or "").strip())


def _check_quantity(value: str) -> Optional[str]:
    if not _required(value):
        return "Quantity is required"
    text = value.strip()
    if not QUANTITY_RE.fullmatch(text):
        return "Enter a valid quantity (min 1)"
    if int(text, 10) < 1:
        return "Enter a valid quantity (min 1)"
    return None


def _check_url(value: str, required_message: str) -> Optional[str]:
    if not _required(value):
        return required_message
    if not URL_RE.match(value):
        return "Enter a valid URL"
    return None


def validate_images(
    images: Sequence[Optional[ImageAsset]],
    constraints: ImageConstraints = DEFAULT_CONSTRAINTS,
) -> List[Optional[str]]:
    """
    Check every slot, one at a time, in slot order.

    Returns:
        List of IMAGE_SLOTS messages (None where the slot is fine)
    """
    messages: List[Optional[str]] = []
    for asset in images:
        if asset is None:
            messages.append("Image is required")
            continue
        result = validate_image(asset, constraints)
        messages.append(None if result.valid else result.message)
    return messages


def validate_form(
    submission: OrderSubmission,
    constraints: ImageConstraints = DEFAULT_CONSTRAINTS,
) -> ValidationReport:
    """
    Validate a whole order submission.

    Runs in full on every submit attempt; nothing is cached between attempts.

    Args:
        submission: The form to check
        constraints: Image limits

    Returns:
        ValidationReport; ``report.is_valid`` means ready to send
    """
    errors: Dict[str, str] = {}

    if not _required(submission.order_number):
        errors["order_number"] = "Order number is required"
    if not _required(submission.creator_name):
        errors["creator_name"] = "Creator name is required"

    quantity_error = _check_quantity(submission.quantity_ordered)
    if quantity_error:
        errors["quantity_ordered"] = quantity_error

    url_error = _check_url(submission.submitted_url, "Submitted URL is required")
    if url_error:
        errors["submitted_url"] = url_error

    link_error = _check_url(submission.order_confirmation_link, "Order confirmation link is required")
    if link_error:
        errors["order_confirmation_link"] = link_error

    return ValidationReport(errors=errors, images=validate_images(submission.images, constraints))


def validate_resubmission(
    order_id: str,
    images: Sequence[Optional[ImageAsset]],
    constraints: ImageConstraints = DEFAULT_CONSTRAINTS,
) -> ValidationReport:
    """Validate the resubmission form: an order ID plus five images."""
    if len(images) != IMAGE_SLOTS:
        raise ValueError(f"Expected {IMAGE_SLOTS} image slots, got {len(images)}")

    errors: Dict[str, str] = {}
    if not _required(order_id):
        errors["order_id"] = "Order ID is required"

    return ValidationReport(errors=errors, images=validate_images(images, constraints))
