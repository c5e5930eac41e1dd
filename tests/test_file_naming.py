"""
Unit tests for canonical upload names.
"""

import pytest

from models.order import ImageAsset
from modules.file_naming import clean_order_number, rename_for_upload, upload_extension


def _asset(filename, content_type="image/jpeg"):
    return ImageAsset(filename=filename, content_type=content_type, size=10, path="/tmp/stored")


class TestCleanOrderNumber:

    @pytest.mark.parametrize("raw,expected", [
        ("1005", "1005"),
        ("#1005", "1005"),
        ("  #10 05 ", "1005"),
        ("AB-77", "AB-77"),
        ("", "ORDER"),
        ("#", "ORDER"),
    ])
    def test_clean(self, raw, expected):
        assert clean_order_number(raw) == expected


class TestUploadExtension:

    def test_from_filename_lowercased(self):
        assert upload_extension(_asset("PHOTO.JPEG")) == "jpeg"

    def test_last_suffix_wins(self):
        assert upload_extension(_asset("card.final.PNG", "image/png")) == "png"

    def test_inferred_from_type_when_missing(self):
        assert upload_extension(_asset("scan", "image/png")) == "png"
        assert upload_extension(_asset("scan", "image/jpeg")) == "jpg"


class TestRenameForUpload:

    def test_canonical_name(self):
        renamed = rename_for_upload("#1005", 3, _asset("photo.jpg"))

        assert renamed.filename == "ORDER1005_Image3.jpg"

    def test_only_the_name_changes(self):
        original = _asset("photo.png", "image/png")

        renamed = rename_for_upload("1005", 1, original)

        assert renamed.path == original.path
        assert renamed.content_type == "image/png"
        assert renamed.size == original.size
        assert original.filename == "photo.png"

    def test_empty_order_number(self):
        assert rename_for_upload("", 2, _asset("a.jpg")).filename == "ORDERORDER_Image2.jpg"

    @pytest.mark.parametrize("index", [0, 6, -1])
    def test_index_out_of_range(self, index):
        with pytest.raises(ValueError):
            rename_for_upload("1005", index, _asset("a.jpg"))
