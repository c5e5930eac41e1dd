"""
Unit tests for single-image validation.
"""

import pytest

from models.order import ImageAsset
from modules.image_checker import (
    BELOW_MIN_RESOLUTION,
    EXCEEDS_MAX_SIZE,
    INVALID_IMAGE,
    UNSUPPORTED_FORMAT,
    ImageConstraints,
    meets_min_resolution,
    read_dimensions,
    resolution_message,
    validate_image,
)


class TestValidateImage:
    """Format, size and resolution rules, first failure wins."""

    def test_portrait_at_minimum_passes(self, make_image):
        result = validate_image(make_image(750, 900))

        assert result.valid is True
        assert result.reason is None
        assert (result.asset.width, result.asset.height) == (750, 900)

    def test_landscape_at_minimum_passes(self, make_image):
        """The check does not care about orientation."""
        result = validate_image(make_image(900, 750))

        assert result.valid is True

    def test_jpeg_passes(self, make_image):
        result = validate_image(make_image(1500, 1800, fmt="JPEG"))

        assert result.valid is True

    @pytest.mark.parametrize("width,height", [(749, 900), (750, 899), (800, 800), (100, 2000)])
    def test_below_minimum_rejected(self, make_image, width, height):
        result = validate_image(make_image(width, height))

        assert result.valid is False
        assert result.reason == BELOW_MIN_RESOLUTION
        assert result.message == 'Min 750×900 px (2.5"×3" @ 300 DPI)'
        assert (result.asset.width, result.asset.height) == (width, height)

    def test_unsupported_type_rejected(self, make_image):
        asset = make_image(content_type="image/gif")

        result = validate_image(asset)

        assert result.valid is False
        assert result.reason == UNSUPPORTED_FORMAT
        assert result.message == "JPG or PNG only"

    def test_format_checked_before_decoding(self, tmp_path):
        """A non-image declared as text is rejected for its format, not its bytes."""
        path = tmp_path / "notes.txt"
        path.write_bytes(b"hello")
        asset = ImageAsset("notes.txt", "text/plain", 5, str(path))

        assert validate_image(asset).reason == UNSUPPORTED_FORMAT

    def test_oversized_rejected_without_decoding(self, tmp_path):
        asset = ImageAsset(
            filename="huge.png",
            content_type="image/png",
            size=101 * 1024 * 1024,
            path=str(tmp_path / "does-not-exist.png"),
        )

        result = validate_image(asset)

        assert result.reason == EXCEEDS_MAX_SIZE
        assert result.message == "Max 100 MB"

    def test_size_limit_is_configurable(self, make_image):
        asset = make_image()
        constraints = ImageConstraints(max_bytes=asset.size - 1)

        assert validate_image(asset, constraints).reason == EXCEEDS_MAX_SIZE
        assert validate_image(asset, ImageConstraints(max_bytes=asset.size)).valid is True

    def test_undecodable_bytes_rejected(self, tmp_path):
        path = tmp_path / "broken.png"
        path.write_bytes(b"\x89PNG not really")
        asset = ImageAsset("broken.png", "image/png", path.stat().st_size, str(path))

        result = validate_image(asset)

        assert result.valid is False
        assert result.reason == INVALID_IMAGE
        assert result.message == "Invalid image"

    def test_same_file_same_verdict(self, make_image):
        asset = make_image(700, 900)

        assert validate_image(asset) == validate_image(asset)


class TestHelpers:

    def test_read_dimensions(self, make_image):
        assert read_dimensions(make_image(1024, 768)) == (1024, 768)

    def test_read_dimensions_raises_value_error(self, tmp_path):
        path = tmp_path / "x.jpg"
        path.write_bytes(b"nope")

        with pytest.raises(ValueError):
            read_dimensions(ImageAsset("x.jpg", "image/jpeg", 4, str(path)))

    def test_meets_min_resolution(self):
        assert meets_min_resolution(750, 900)
        assert meets_min_resolution(900, 750)
        assert not meets_min_resolution(750, 750)

    def test_resolution_message_uses_constraints(self):
        constraints = ImageConstraints(min_long_side=1200, min_short_side=1000)

        assert resolution_message(constraints).startswith("Min 1000×1200 px")

    def test_constraints_from_config(self):
        constraints = ImageConstraints.from_config({"MAX_IMAGE_SIZE_MB": 5})

        assert constraints.max_bytes == 5 * 1024 * 1024
        assert constraints.max_megabytes == 5
