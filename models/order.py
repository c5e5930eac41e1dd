"""
Order data models.

These models represent a creator's order form as it flows through the
application: prefill -> edit/attach -> validate -> submit.

Immutability:
    - OrderSubmission and ImageAsset are frozen dataclasses
    - Every edit returns a NEW submission (with_field, with_image, ...)
    - The Flask session stores the dict form (to_dict / from_dict)
"""

from __future__ import annotations

from dataclasses import dataclass, field, replace
from enum import Enum
from pathlib import Path
from typing import Dict, Any, List, Optional, Tuple


IMAGE_SLOTS = 5
"""Number of fixed image attachment positions on the form."""

TEXT_FIELDS = (
    "order_number",
    "creator_name",
    "quantity_ordered",
    "submitted_url",
    "order_confirmation_link",
    "message",
)

FIELD_LABELS = {
    "order_number": "Order Number",
    "creator_name": "Creator Name",
    "quantity_ordered": "Quantity Ordered",
    "submitted_url": "Submitted URL",
    "order_confirmation_link": "Order Confirmation Link",
    "message": "Message",
    "order_id": "Order ID",
}


@dataclass(frozen=True)
class ImageAsset:
    """
    A single attached image file plus its derived metadata.

    The bytes live on disk in the upload folder; only the path travels
    through the session.
    """

    filename: str
    """Original (or canonical, once renamed) filename."""

    content_type: str
    """MIME type declared by the uploader (e.g. 'image/png')."""

    size: int
    """Size in bytes."""

    path: str
    """Location of the stored bytes."""

    width: Optional[int] = None
    """Pixel width, once measured."""

    height: Optional[int] = None
    """Pixel height, once measured."""

    def read(self) -> bytes:
        """Return the file content."""
        return Path(self.path).read_bytes()

    def renamed(self, filename: str) -> "ImageAsset":
        """Copy with a new filename; bytes and MIME type are unchanged."""
        return replace(self, filename=filename)

    def with_dimensions(self, width: int, height: int) -> "ImageAsset":
        """Copy carrying measured pixel dimensions."""
        return replace(self, width=width, height=height)

    def to_dict(self) -> Dict[str, Any]:
        """Convert to dictionary for session storage."""
        return {
            "filename": self.filename,
            "content_type": self.content_type,
            "size": self.size,
            "path": self.path,
            "width": self.width,
            "height": self.height,
        }

    @classmethod
    def from_dict(cls, data: Dict[str, Any]) -> "ImageAsset":
        """Create from dictionary (e.g., from session)."""
        return cls(
            filename=data.get("filename", ""),
            content_type=data.get("content_type", ""),
            size=data.get("size", 0),
            path=data.get("path", ""),
            width=data.get("width"),
            height=data.get("height"),
        )


def _empty_slots() -> Tuple[Optional[ImageAsset], ...]:
    return (None,) * IMAGE_SLOTS


@dataclass(frozen=True)
class OrderSubmission:
    """
    One user-filled order form prior to transmission.

    Lifecycle:
        1. Created empty (or prefilled from query parameters)
        2. Replaced by a new value on every edit or image attach
        3. Read once at submit time
        4. Reset to empty after a confirmed successful transmission
    """

    order_number: str = ""
    creator_name: str = ""
    quantity_ordered: str = ""
    """Kept as the string the user typed; relayed verbatim."""

    submitted_url: str = ""
    order_confirmation_link: str = ""
    message: str = ""

    images: Tuple[Optional[ImageAsset], ...] = field(default_factory=_empty_slots)
    """Exactly IMAGE_SLOTS entries, each an ImageAsset or None."""

    edited_fields: frozenset = frozenset()
    """Text fields the user has changed; prefill never overrides these."""

    def __post_init__(self):
        if len(self.images) != IMAGE_SLOTS:
            raise ValueError(f"images must have exactly {IMAGE_SLOTS} slots, got {len(self.images)}")

    @classmethod
    def empty(cls) -> "OrderSubmission":
        """All-empty defaults."""
        return cls()

    # -------------------------------------------------------------------------
    # State transitions (each returns a new value)
    # -------------------------------------------------------------------------

    def with_field(self, name: str, value: str) -> "OrderSubmission":
        """Set a text field as a user edit."""
        if name not in TEXT_FIELDS:
            raise KeyError(f"Unknown field: {name}")
        return replace(self, **{name: value}, edited_fields=self.edited_fields | {name})

    def with_prefill(self, values: Dict[str, str]) -> "OrderSubmission":
        """
        Apply initial values, skipping any field the user already edited.

        Prefilled values are not marked as edited.
        """
        updates = {
            name: value
            for name, value in values.items()
            if name in TEXT_FIELDS and name not in self.edited_fields
        }
        if not updates:
            return self
        return replace(self, **updates)

    def with_image(self, slot: int, asset: ImageAsset) -> "OrderSubmission":
        """Place an image into a slot (0-based)."""
        self._check_slot(slot)
        images = list(self.images)
        images[slot] = asset
        return replace(self, images=tuple(images))

    def without_image(self, slot: int) -> "OrderSubmission":
        """Empty a slot (0-based)."""
        self._check_slot(slot)
        images = list(self.images)
        images[slot] = None
        return replace(self, images=tuple(images))

    def reset(self) -> "OrderSubmission":
        """Back to defaults."""
        return OrderSubmission.empty()

    @staticmethod
    def _check_slot(slot: int) -> None:
        if not 0 <= slot < IMAGE_SLOTS:
            raise IndexError(f"Image slot out of range: {slot}")

    @property
    def attached_count(self) -> int:
        """Number of filled image slots."""
        return sum(1 for image in self.images if image is not None)

    # -------------------------------------------------------------------------
    # Session serialisation
    # -------------------------------------------------------------------------

    def to_dict(self) -> Dict[str, Any]:
        """Convert to dictionary for session storage."""
        data: Dict[str, Any] = {name: getattr(self, name) for name in TEXT_FIELDS}
        data["images"] = [image.to_dict() if image else None for image in self.images]
        data["edited_fields"] = sorted(self.edited_fields)
        return data

    @classmethod
    def from_dict(cls, data: Dict[str, Any]) -> "OrderSubmission":
        """Create from dictionary (e.g., from session)."""
        raw_images = list(data.get("images") or [])[:IMAGE_SLOTS]
        raw_images += [None] * (IMAGE_SLOTS - len(raw_images))
        return cls(
            **{name: data.get(name, "") for name in TEXT_FIELDS},
            images=tuple(ImageAsset.from_dict(i) if i else None for i in raw_images),
            edited_fields=frozenset(data.get("edited_fields", [])),
        )


@dataclass
class ValidationReport:
    """
    Result of one validation pass.

    ``errors`` maps field name to message; a missing key means no error.
    ``images`` is index-aligned with the five image slots.

    A whole-form pass produces a fresh report. A single-image attach only
    overwrites its own slot via with_image_error().
    """

    errors: Dict[str, str] = field(default_factory=dict)
    images: List[Optional[str]] = field(default_factory=lambda: [None] * IMAGE_SLOTS)

    @property
    def is_valid(self) -> bool:
        """True when there are no field errors and no image errors."""
        return not self.errors and not any(self.images)

    def with_image_error(self, slot: int, message: Optional[str]) -> "ValidationReport":
        """Copy with one slot's message replaced (None clears it)."""
        images = list(self.images)
        images[slot] = message
        return ValidationReport(errors=dict(self.errors), images=images)

    def without_field_error(self, name: str) -> "ValidationReport":
        """Copy with one field's error removed (used when the user edits it)."""
        errors = dict(self.errors)
        errors.pop(name, None)
        return ValidationReport(errors=errors, images=list(self.images))

    def error_list(self) -> List[Tuple[str, str]]:
        """Flatten into (label, message) pairs for display."""
        items = [(FIELD_LABELS.get(name, name), message) for name, message in self.errors.items()]
        for index, message in enumerate(self.images):
            if message:
                items.append((f"Image {index + 1}", message))
        return items

    def to_dict(self) -> Dict[str, Any]:
        """Convert to dictionary for session storage."""
        return {"errors": dict(self.errors), "images": list(self.images)}

    @classmethod
    def from_dict(cls, data: Optional[Dict[str, Any]]) -> "ValidationReport":
        """Create from dictionary (e.g., from session)."""
        if not data:
            return cls()
        images = list(data.get("images") or [])[:IMAGE_SLOTS]
        images += [None] * (IMAGE_SLOTS - len(images))
        return cls(errors=dict(data.get("errors", {})), images=images)


class SubmissionState(Enum):
    """
    States of the order form.

    Lifecycle:
        EDITING -> VALIDATING -> (INVALID -> EDITING)
                              | (SUBMITTING -> SUCCEEDED | FAILED -> EDITING)
    """

    EDITING = "editing"
    VALIDATING = "validating"
    INVALID = "invalid"
    SUBMITTING = "submitting"
    SUCCEEDED = "succeeded"
    FAILED = "failed"


@dataclass(frozen=True)
class SubmissionOutcome:
    """
    What a submit attempt produced.

    ``submission`` is the value the form should show next: the reset form
    on success, the user's unchanged values otherwise.
    """

    state: SubmissionState
    submission: OrderSubmission
    report: ValidationReport
    error_message: str = ""

    @property
    def succeeded(self) -> bool:
        return self.state is SubmissionState.SUCCEEDED
