"""Attached images on disk, between attach and submit."""

from __future__ import annotations

import uuid
from datetime import datetime, timezone
from pathlib import Path
from typing import Iterable, Optional

from werkzeug.utils import secure_filename

from models.order import ImageAsset
from logging_config import get_logger


# Module logger
logger = get_logger(__name__)


def store_upload(file_storage, upload_folder: str | Path) -> ImageAsset:
    """
    Save an uploaded file and describe it as an ImageAsset.

    The stored name gets a timestamp and a short random prefix so two
    uploads of "photo.jpg" never collide. The asset keeps the original
    filename and the MIME type the browser declared.

    Args:
        file_storage: werkzeug FileStorage from request.files
        upload_folder: Directory to save into

    Returns:
        ImageAsset pointing at the stored file
    """
    folder = Path(upload_folder)
    folder.mkdir(parents=True, exist_ok=True)

    original_name = file_storage.filename or ""
    timestamp = datetime.now(timezone.utc).strftime("%Y%m%d%H%M%S")
    safe_name = secure_filename(original_name) or "image"
    stored_path = folder / f"{timestamp}_{uuid.uuid4().hex[:8]}_{safe_name}"

    file_storage.save(stored_path)
    size = stored_path.stat().st_size

    logger.debug(f"Stored upload {original_name!r} as {stored_path.name} ({size} bytes)")
    return ImageAsset(
        filename=original_name,
        content_type=file_storage.mimetype or "",
        size=size,
        path=str(stored_path),
    )


def discard(asset: Optional[ImageAsset]) -> None:
    """Delete a stored image; missing files are ignored."""
    if asset is None or not asset.path:
        return
    try:
        Path(asset.path).unlink(missing_ok=True)
    except OSError as e:
        logger.warning(f"Could not delete stored upload {asset.path}: {e}")


def discard_all(assets: Iterable[Optional[ImageAsset]]) -> None:
    for asset in assets:
        discard(asset)
