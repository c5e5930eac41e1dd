"""
Image constraint checks for card artwork uploads.

Rules (applied in order, first failure wins):
    1. Declared MIME type is image/jpeg or image/png
    2. Byte size is within the configured maximum (default 100 MB)
    3. Pixel dimensions decode and meet the card minimum

Card minimum:
    Final card is 2.5" x 3" at 300 DPI -> 750 x 900 px.
    The check is orientation-agnostic: the longer side must be >= 900 and
    the shorter side >= 750, so 900x750 and 750x900 both pass.
"""

from __future__ import annotations

from dataclasses import dataclass
from typing import Optional, Tuple

from PIL import Image, UnidentifiedImageError

from models.order import ImageAsset


ACCEPTED_CONTENT_TYPES = ("image/jpeg", "image/png")
MAX_IMAGE_SIZE_MB = 100

# 2.5" x 3" at 300 DPI
CARD_MIN_SHORT_SIDE_PX = 750
CARD_MIN_LONG_SIDE_PX = 900

# Rejection reasons
UNSUPPORTED_FORMAT = "unsupported_format"
EXCEEDS_MAX_SIZE = "exceeds_max_size"
INVALID_IMAGE = "invalid_image"
BELOW_MIN_RESOLUTION = "below_min_resolution"


@dataclass(frozen=True)
class ImageConstraints:
    """Limits applied by validate_image()."""

    max_bytes: int = MAX_IMAGE_SIZE_MB * 1024 * 1024
    min_long_side: int = CARD_MIN_LONG_SIDE_PX
    min_short_side: int = CARD_MIN_SHORT_SIDE_PX

    @property
    def max_megabytes(self) -> int:
        return self.max_bytes // (1024 * 1024)

    @classmethod
    def from_config(cls, config) -> "ImageConstraints":
        """Build from a Flask config mapping."""
        max_mb = int(config.get("MAX_IMAGE_SIZE_MB", MAX_IMAGE_SIZE_MB))
        return cls(max_bytes=max_mb * 1024 * 1024)


DEFAULT_CONSTRAINTS = ImageConstraints()


@dataclass(frozen=True)
class ImageCheckResult:
    """Verdict for one image."""

    valid: bool
    reason: Optional[str] = None
    """Machine-readable rejection reason (None when valid)."""

    message: Optional[str] = None
    """Message shown to the user (None when valid)."""

    asset: Optional[ImageAsset] = None
    """The checked asset, carrying dimensions when they were measured."""

    @classmethod
    def ok(cls, asset: ImageAsset) -> "ImageCheckResult":
        return cls(valid=True, asset=asset)

    @classmethod
    def rejected(cls, reason: str, message: str, asset: Optional[ImageAsset] = None) -> "ImageCheckResult":
        return cls(valid=False, reason=reason, message=message, asset=asset)


def read_dimensions(asset: ImageAsset) -> Tuple[int, int]:
    """
    Decode the image header and return (width, height).

    Raises:
        ValueError: If the bytes are not a decodable image
    """
    try:
        with Image.open(asset.path) as img:
            return img.size
    except (UnidentifiedImageError, Image.DecompressionBombError, OSError) as e:
        raise ValueError(f"Cannot decode image {asset.filename!r}: {e}") from e


def meets_min_resolution(width: int, height: int, constraints: ImageConstraints = DEFAULT_CONSTRAINTS) -> bool:
    """Orientation-agnostic card size check."""
    long_side, short_side = max(width, height), min(width, height)
    return long_side >= constraints.min_long_side and short_side >= constraints.min_short_side


def resolution_message(constraints: ImageConstraints = DEFAULT_CONSTRAINTS) -> str:
    return f'Min {constraints.min_short_side}×{constraints.min_long_side} px (2.5"×3" @ 300 DPI)'


def validate_image(asset: ImageAsset, constraints: ImageConstraints = DEFAULT_CONSTRAINTS) -> ImageCheckResult:
    """
    Check one image against format, size and resolution rules.

    No side effects; calling it twice on the same file gives the same verdict.

    Args:
        asset: The attached image
        constraints: Limits to apply

    Returns:
        ImageCheckResult; when valid, ``result.asset`` carries the dimensions
    """
    if asset.content_type not in ACCEPTED_CONTENT_TYPES:
        return ImageCheckResult.rejected(UNSUPPORTED_FORMAT, "JPG or PNG only", asset)

    if asset.size > constraints.max_bytes:
        return ImageCheckResult.rejected(EXCEEDS_MAX_SIZE, f"Max {constraints.max_megabytes} MB", asset)

    try:
        width, height = read_dimensions(asset)
    except ValueError:
        return ImageCheckResult.rejected(INVALID_IMAGE, "Invalid image", asset)

    measured = asset.with_dimensions(width, height)
    if not meets_min_resolution(width, height, constraints):
        return ImageCheckResult.rejected(BELOW_MIN_RESOLUTION, resolution_message(constraints), measured)

    return ImageCheckResult.ok(measured)
