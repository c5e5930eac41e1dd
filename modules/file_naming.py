"""Canonical upload names: ORDER{orderNumber}_Image{n}.{ext}."""

from __future__ import annotations

import re

from models.order import IMAGE_SLOTS, ImageAsset


_WHITESPACE_RE = re.compile(r"\s")


def clean_order_number(order_number: str) -> str:
    """Strip a leading '#' and all whitespace; empty becomes 'ORDER'."""
    cleaned = (order_number or "").strip()
    if cleaned.startswith("#"):
        cleaned = cleaned[1:]
    cleaned = _WHITESPACE_RE.sub("", cleaned)
    return cleaned or "ORDER"


def upload_extension(asset: ImageAsset) -> str:
    """Lower-cased filename suffix, or one inferred from the MIME type."""
    name = asset.filename or ""
    if "." in name:
        ext = name.rsplit(".", 1)[1].lower()
        if ext:
            return ext
    return "png" if asset.content_type == "image/png" else "jpg"


def rename_for_upload(order_number: str, image_index: int, asset: ImageAsset) -> ImageAsset:
    """
    Rename an accepted image before transmission.

    >>> rename_for_upload("#1005", 3, photo_jpg).filename
    'ORDER1005_Image3.jpg'

    Args:
        order_number: Order number as typed (may start with '#')
        image_index: Slot number, 1..5
        asset: The image to rename

    Returns:
        Copy of the asset with the canonical filename
    """
    if not 1 <= image_index <= IMAGE_SLOTS:
        raise ValueError(f"image_index must be 1..{IMAGE_SLOTS}, got {image_index}")

    name = f"ORDER{clean_order_number(order_number)}_Image{image_index}.{upload_extension(asset)}"
    return asset.renamed(name)
