"""
Order submission orchestration.

Drives one order form through its states:

    EDITING -> VALIDATING -> (INVALID -> EDITING)
                          | (SUBMITTING -> SUCCEEDED | FAILED -> EDITING)

The orchestrator never mutates a submission. Every operation takes the
current OrderSubmission (and ValidationReport) and returns new values, so
the Flask routes only have to store whatever comes back in the session.

Single submission in flight:
    submit() registers the form's id in an in-flight set (guarded by a lock)
    for the duration of the transmission. A second submit() for the same
    form while the first is outstanding raises SubmissionInProgressError.

Flow for a valid form:
    1. Whole-form validation (every image re-checked, one at a time)
    2. Images renamed ORDER{n}_Image{i}.{ext}
    3. RelayRequest built, including QR image URLs for both links
    4. Transport sends it (exactly one attempt)
    5. SUCCEEDED -> empty form; FAILED -> user's values kept, message shown
"""

from __future__ import annotations

import threading
from dataclasses import dataclass
from typing import Dict, Optional, Set

from core.exceptions import SubmissionError, SubmissionInProgressError, UploadConstraintError
from models.order import (
    IMAGE_SLOTS,
    ImageAsset,
    OrderSubmission,
    SubmissionOutcome,
    SubmissionState,
    ValidationReport,
)
from models.relay import RelayAttachment, RelayRequest
from modules.file_naming import rename_for_upload
from modules.form_validator import validate_form, validate_resubmission
from modules.image_checker import DEFAULT_CONSTRAINTS, ImageConstraints, validate_image
from modules.qr_codes import QRCodeLinkBuilder
from logging_config import get_logger


# Module logger
logger = get_logger(__name__)


@dataclass(frozen=True)
class AttachResult:
    """
    Outcome of attaching one image.

    ``upload_error`` is set when the image was rejected; the slot is then
    empty in ``submission`` and its message is in ``report``.
    """

    submission: OrderSubmission
    report: ValidationReport
    upload_error: Optional[UploadConstraintError] = None

    @property
    def accepted(self) -> bool:
        return self.upload_error is None


class SubmissionOrchestrator:
    """
    State machine over a single order submission.

    Attributes:
        transport: Object with send(RelayRequest) -> RelayResponse that raises
                   SubmissionError on failure (HttpRelayClient / LocalRelayClient)
    """

    def __init__(
        self,
        transport,
        constraints: ImageConstraints = DEFAULT_CONSTRAINTS,
        qr_builder: Optional[QRCodeLinkBuilder] = None,
    ):
        self.transport = transport
        self.constraints = constraints
        self.qr_builder = qr_builder or QRCodeLinkBuilder()

        self._in_flight: Set[str] = set()
        self._in_flight_lock = threading.Lock()

        logger.info("SubmissionOrchestrator initialized")

    # =========================================================================
    # EDITING
    # =========================================================================

    def attach_image(
        self,
        submission: OrderSubmission,
        report: ValidationReport,
        slot: int,
        asset: ImageAsset,
    ) -> AttachResult:
        """
        Validate one image as soon as it is attached.

        Only the attached slot changes; the rest of the form is untouched.

        Args:
            submission: Current form
            report: Current validation report
            slot: 0-based slot index
            asset: The attached image
        """
        result = validate_image(asset, self.constraints)

        if result.valid:
            logger.debug(f"Image {slot + 1} accepted: {asset.filename} ({result.asset.width}x{result.asset.height})")
            return AttachResult(
                submission=submission.with_image(slot, result.asset),
                report=report.with_image_error(slot, None),
            )

        logger.info(f"Image {slot + 1} rejected ({result.reason}): {asset.filename}")
        return AttachResult(
            submission=submission.without_image(slot),
            report=report.with_image_error(slot, result.message),
            upload_error=UploadConstraintError(slot + 1, result.reason, result.message),
        )

    def clear_image(self, submission: OrderSubmission, report: ValidationReport, slot: int) -> AttachResult:
        """Empty a slot and drop its message."""
        return AttachResult(
            submission=submission.without_image(slot),
            report=report.with_image_error(slot, None),
        )

    # =========================================================================
    # SUBMIT
    # =========================================================================

    def submit(self, submission: OrderSubmission, form_id: str) -> SubmissionOutcome:
        """
        Validate and, if valid, transmit the order.

        Args:
            submission: The form as the user left it
            form_id: Identifies this form for the in-flight guard

        Returns:
            SubmissionOutcome in state INVALID, SUCCEEDED or FAILED

        Raises:
            SubmissionInProgressError: If this form is already being sent
        """
        report = validate_form(submission, self.constraints)
        if not report.is_valid:
            logger.info(f"Order {submission.order_number!r} failed validation: {len(report.error_list())} error(s)")
            return SubmissionOutcome(SubmissionState.INVALID, submission, report)

        request = self.build_relay_request(submission)
        return self._transmit(submission, report, request, form_id)

    def resubmit(self, order_id: str, images, form_id: str) -> SubmissionOutcome:
        """
        Validate and transmit a resubmission (order ID plus five images).

        Only the order number and the renamed images are relayed.
        """
        submission = OrderSubmission(order_number=order_id, images=tuple(images))
        report = validate_resubmission(order_id, submission.images, self.constraints)
        if not report.is_valid:
            logger.info(f"Resubmission {order_id!r} failed validation")
            return SubmissionOutcome(SubmissionState.INVALID, submission, report)

        request = RelayRequest(
            fields={"orderNumber": order_id.strip()},
            attachments=self._renamed_attachments(order_id, submission),
        )
        return self._transmit(submission, report, request, form_id)

    def build_relay_request(self, submission: OrderSubmission) -> RelayRequest:
        """
        Assemble the relay request for a validated submission.

        Images are renamed to ORDER{n}_Image{i}.{ext} and QR image URLs are
        derived from both links.
        """
        fields: Dict[str, str] = {
            "orderNumber": submission.order_number,
            "creatorName": submission.creator_name,
            "quantityOrdered": submission.quantity_ordered,
            "submittedUrl": submission.submitted_url,
            "orderConfirmationLink": submission.order_confirmation_link,
            "message": submission.message,
            "submittedQr": self.qr_builder.image_url(submission.submitted_url),
            "confirmationQr": self.qr_builder.image_url(submission.order_confirmation_link),
        }
        return RelayRequest(
            fields=fields,
            attachments=self._renamed_attachments(submission.order_number, submission),
        )

    @staticmethod
    def _renamed_attachments(order_number: str, submission: OrderSubmission) -> Dict[int, RelayAttachment]:
        attachments: Dict[int, RelayAttachment] = {}
        for index in range(IMAGE_SLOTS):
            asset = submission.images[index]
            if asset is None:
                continue
            renamed = rename_for_upload(order_number, index + 1, asset)
            attachments[index + 1] = RelayAttachment(
                filename=renamed.filename,
                content_type=renamed.content_type,
                content=renamed.read(),
            )
        return attachments

    def _transmit(
        self,
        submission: OrderSubmission,
        report: ValidationReport,
        request: RelayRequest,
        form_id: str,
    ) -> SubmissionOutcome:
        self._begin(form_id)
        try:
            logger.info(f"Submitting order {submission.order_number!r} ({len(request.attachments)} images)")
            self.transport.send(request)
        except SubmissionError as e:
            logger.warning(f"Submission of order {submission.order_number!r} failed: {e.message}")
            return SubmissionOutcome(SubmissionState.FAILED, submission, report, e.message)
        finally:
            self._end(form_id)

        logger.info(f"Order {submission.order_number!r} submitted successfully")
        return SubmissionOutcome(SubmissionState.SUCCEEDED, submission.reset(), ValidationReport())

    # =========================================================================
    # IN-FLIGHT GUARD
    # =========================================================================

    def is_submitting(self, form_id: str) -> bool:
        with self._in_flight_lock:
            return form_id in self._in_flight

    def _begin(self, form_id: str) -> None:
        with self._in_flight_lock:
            if form_id in self._in_flight:
                raise SubmissionInProgressError(form_id)
            self._in_flight.add(form_id)

    def _end(self, form_id: str) -> None:
        with self._in_flight_lock:
            self._in_flight.discard(form_id)
