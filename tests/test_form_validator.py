"""
Unit tests for whole-form validation.
"""

import pytest

from models.order import OrderSubmission
from modules.form_validator import validate_form, validate_images, validate_resubmission


# Fixtures

@pytest.fixture
def five_images(make_image):
    return tuple(make_image(750, 900) for _ in range(5))


@pytest.fixture
def complete_submission(five_images):
    return OrderSubmission(
        order_number="#1005",
        creator_name="Jane Doe",
        quantity_ordered="3",
        submitted_url="https://shop.example.com/products/1005",
        order_confirmation_link="https://shop.example.com/orders/1005/status",
        images=five_images,
    )


# Tests

class TestValidateForm:

    def test_complete_form_is_valid(self, complete_submission):
        report = validate_form(complete_submission)

        assert report.is_valid
        assert report.errors == {}
        assert report.images == [None] * 5

    def test_message_is_optional(self, complete_submission):
        assert complete_submission.message == ""
        assert validate_form(complete_submission).is_valid

    def test_empty_form_reports_every_problem(self):
        report = validate_form(OrderSubmission.empty())

        assert report.errors == {
            "order_number": "Order number is required",
            "creator_name": "Creator name is required",
            "quantity_ordered": "Quantity is required",
            "submitted_url": "Submitted URL is required",
            "order_confirmation_link": "Order confirmation link is required",
        }
        assert report.images == ["Image is required"] * 5

    def test_whitespace_only_counts_as_empty(self, complete_submission):
        submission = complete_submission.with_field("creator_name", "   ")

        assert validate_form(submission).errors == {"creator_name": "Creator name is required"}

    @pytest.mark.parametrize("quantity", ["0", "-2", "abc", "1.5", "1_000", "٣", "５"])
    def test_invalid_quantity(self, complete_submission, quantity):
        submission = complete_submission.with_field("quantity_ordered", quantity)

        report = validate_form(submission)

        assert report.errors == {"quantity_ordered": "Enter a valid quantity (min 1)"}

    @pytest.mark.parametrize("url", ["shop.example.com/p/1", "ftp://example.com", "http://localhost"])
    def test_invalid_urls(self, complete_submission, url):
        submission = (
            complete_submission
            .with_field("submitted_url", url)
            .with_field("order_confirmation_link", url)
        )

        report = validate_form(submission)

        assert report.errors == {
            "submitted_url": "Enter a valid URL",
            "order_confirmation_link": "Enter a valid URL",
        }

    def test_one_missing_image(self, complete_submission):
        report = validate_form(complete_submission.without_image(3))

        assert report.images == [None, None, None, "Image is required", None]
        assert report.error_list() == [("Image 4", "Image is required")]

    def test_image_rechecked_on_every_validation(self, complete_submission):
        """An attached file that stopped being a valid image is caught at submit time."""
        with open(complete_submission.images[0].path, "wb") as f:
            f.write(b"overwritten")

        report = validate_form(complete_submission)

        assert report.images[0] == "Invalid image"
        assert not report.is_valid


class TestValidateImages:

    def test_messages_are_slot_aligned(self, make_image):
        images = [make_image(), None, make_image(10, 10), make_image(), None]

        messages = validate_images(images)

        assert messages == [
            None,
            "Image is required",
            'Min 750×900 px (2.5"×3" @ 300 DPI)',
            None,
            "Image is required",
        ]


class TestValidateResubmission:

    def test_valid(self, five_images):
        assert validate_resubmission("1005", five_images).is_valid

    def test_order_id_required(self, five_images):
        report = validate_resubmission("  ", five_images)

        assert report.errors == {"order_id": "Order ID is required"}
        assert report.error_list() == [("Order ID", "Order ID is required")]

    def test_wrong_slot_count_raises(self, five_images):
        with pytest.raises(ValueError):
            validate_resubmission("1005", five_images[:4])
