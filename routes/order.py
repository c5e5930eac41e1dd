"""
Order form routes.

The form lives in the session between requests:
    session["order_form"] = {
        "form_id": <uuid>,
        "submission": OrderSubmission.to_dict(),
        "report": ValidationReport.to_dict(),
    }

Attached images are stored in UPLOAD_FOLDER as soon as they pass the
single-image check; only their paths travel in the session.
"""

import html
import uuid
from typing import List, Optional, Tuple

import bleach
from flask import (
    Blueprint,
    current_app,
    flash,
    redirect,
    render_template,
    request,
    session,
    url_for,
)

from core.exceptions import SubmissionInProgressError, UploadConstraintError
from models.order import FIELD_LABELS, IMAGE_SLOTS, OrderSubmission, SubmissionState, ValidationReport
from modules.prefill import prefill_from_query
from modules.upload_store import discard, discard_all, store_upload
from logging_config import get_logger


# Module logger
logger = get_logger(__name__)

order_bp = Blueprint("order", __name__)

# Constants
MAX_MESSAGE_LENGTH = 1000

# Form input names -> OrderSubmission fields
FORM_INPUTS = {
    "orderNumber": "order_number",
    "creatorName": "creator_name",
    "quantityOrdered": "quantity_ordered",
    "submittedUrl": "submitted_url",
    "orderConfirmationLink": "order_confirmation_link",
    "message": "message",
}

SUCCESS_MODAL = {
    "kind": "success",
    "title": "Upload required Images to complete your release!",
    "items": [],
    "paragraphs": [
        "Your images have been successfully received.",
        "Our team will review your files within 1–2 business days. If any adjustments "
        "are needed, we will contact you before production begins.",
        "Thank you for completing your release.",
    ],
}


def _sanitize_text(text: str, max_length: int = None) -> str:
    """
    Strip HTML tags from free text.

    bleach escapes entities; the webhook wants plain text, so they are
    unescaped again afterwards.
    """
    if not text:
        return ""
    text = html.unescape(bleach.clean(text, tags=[], strip=True))
    if max_length and len(text) > max_length:
        text = text[:max_length]
    return text


# =============================================================================
# SESSION STATE
# =============================================================================

def _load_form() -> Tuple[str, OrderSubmission, ValidationReport]:
    state = session.get("order_form") or {}
    form_id = state.get("form_id") or uuid.uuid4().hex
    submission = OrderSubmission.from_dict(state.get("submission") or {})
    report = ValidationReport.from_dict(state.get("report"))
    return form_id, submission, report


def _prefill_applied() -> bool:
    state = session.get("order_form") or {}
    return bool(state.get("prefilled"))


def _save_form(
    form_id: str,
    submission: OrderSubmission,
    report: ValidationReport,
    prefilled: Optional[bool] = None,
) -> None:
    if prefilled is None:
        # Keep the flag for as long as the same form is being edited
        state = session.get("order_form") or {}
        prefilled = state.get("form_id") == form_id and bool(state.get("prefilled"))
    session["order_form"] = {
        "form_id": form_id,
        "submission": submission.to_dict(),
        "report": report.to_dict(),
        "prefilled": prefilled,
    }
    session.modified = True


def _show_modal(kind: str, title: str, intro: str, items: List[Tuple[str, str]]) -> None:
    session["modal"] = {"kind": kind, "title": title, "intro": intro, "items": [list(i) for i in items]}
    session.modified = True


def _show_upload_error(error: UploadConstraintError) -> None:
    _show_modal(
        "error",
        "Upload error",
        "This image does not meet the requirements:",
        [(error.field_label, error.message)],
    )


def _slot_index(slot: int) -> Optional[int]:
    """Convert a 1-based URL slot to a 0-based index (None if out of range)."""
    if 1 <= slot <= IMAGE_SLOTS:
        return slot - 1
    return None


def _apply_text_edits(submission: OrderSubmission, report: ValidationReport):
    """
    Apply text fields posted with the form as user edits.

    A changed field is marked edited and its error message is dropped.
    """
    for input_name, field_name in FORM_INPUTS.items():
        if input_name not in request.form:
            continue
        value = request.form.get(input_name, "")
        if field_name == "message":
            value = _sanitize_text(value, max_length=MAX_MESSAGE_LENGTH)
        if value != getattr(submission, field_name):
            submission = submission.with_field(field_name, value)
            report = report.without_field_error(field_name)
    return submission, report


def _attach(submission, report, index, file_storage):
    """
    Store, check and place one uploaded image.

    Returns:
        (submission, report, upload_error) - upload_error is None when accepted
    """
    orchestrator = current_app.config["ORCHESTRATOR"]
    asset = store_upload(file_storage, current_app.config["UPLOAD_FOLDER"])
    previous = submission.images[index]

    result = orchestrator.attach_image(submission, report, index, asset)
    if result.accepted:
        if previous is not None and previous.path != asset.path:
            discard(previous)
    else:
        discard(asset)
        discard(previous)
        _show_upload_error(result.upload_error)

    return result.submission, result.report, result.upload_error


# =============================================================================
# ROUTES
# =============================================================================

@order_bp.route("/", methods=["GET"])
def form():
    """
    Display the order form.

    Query parameters prefill the text fields (canonical name or alias)
    once per form, on the first page load; fields the user has already
    edited are never overwritten.
    """
    form_id, submission, report = _load_form()

    if not _prefill_applied():
        prefill = prefill_from_query(request.args)
        if prefill:
            submission = submission.with_prefill(prefill)
            logger.debug(f"Prefilled fields: {sorted(prefill)}")

    _save_form(form_id, submission, report, prefilled=True)

    orchestrator = current_app.config["ORCHESTRATOR"]
    return render_template(
        "order_form.html",
        submission=submission,
        report=report,
        modal=session.pop("modal", None),
        submitting=orchestrator.is_submitting(form_id),
        max_image_mb=orchestrator.constraints.max_megabytes,
        image_slots=IMAGE_SLOTS,
        labels=FIELD_LABELS,
    )


@order_bp.route("/order/images/<int:slot>", methods=["POST"])
def attach_image(slot: int):
    """
    Attach one image to a slot (1-5); it is checked immediately.

    The file is read from "image<slot>" (whole form posted) or "image".
    Text fields posted alongside are kept as edits.
    """
    index = _slot_index(slot)
    if index is None:
        flash(f"Unknown image slot: {slot}", "error")
        return redirect(url_for("order.form"))

    form_id, submission, report = _load_form()
    submission, report = _apply_text_edits(submission, report)

    file_storage = request.files.get(f"image{slot}") or request.files.get("image")
    if not file_storage or file_storage.filename == "":
        _save_form(form_id, submission, report)
        flash("Please choose an image to upload.", "error")
        return redirect(url_for("order.form"))

    try:
        submission, report, _ = _attach(submission, report, index, file_storage)
    except OSError as e:
        logger.error(f"Failed to store image {slot}: {e}", exc_info=True)
        flash("Failed to store the image. Please try again.", "error")

    _save_form(form_id, submission, report)
    return redirect(url_for("order.form"))


@order_bp.route("/order/images/<int:slot>/clear", methods=["POST"])
def clear_image(slot: int):
    """Remove the image in a slot."""
    index = _slot_index(slot)
    if index is None:
        flash(f"Unknown image slot: {slot}", "error")
        return redirect(url_for("order.form"))

    form_id, submission, report = _load_form()
    submission, report = _apply_text_edits(submission, report)
    discard(submission.images[index])
    result = current_app.config["ORCHESTRATOR"].clear_image(submission, report, index)
    _save_form(form_id, result.submission, result.report)
    return redirect(url_for("order.form"))


@order_bp.route("/order/submit", methods=["POST"])
def submit():
    """
    Validate the whole form and, if valid, send it.

    Text fields posted with the form are applied first (as user edits),
    as are any images posted in image1..image5.
    """
    form_id, submission, report = _load_form()
    orchestrator = current_app.config["ORCHESTRATOR"]

    submission, report = _apply_text_edits(submission, report)

    # Images posted with the form (no-script fallback)
    rejected = False
    for index in range(IMAGE_SLOTS):
        file_storage = request.files.get(f"image{index + 1}")
        if file_storage and file_storage.filename:
            submission, report, error = _attach(submission, report, index, file_storage)
            rejected = rejected or error is not None

    if rejected:
        # Show the upload error before anything else
        _save_form(form_id, submission, report)
        return redirect(url_for("order.form"))

    try:
        outcome = orchestrator.submit(submission, form_id)
    except SubmissionInProgressError:
        flash("Your order is already being submitted. Please wait.", "warning")
        _save_form(form_id, submission, report)
        return redirect(url_for("order.form"))

    if outcome.state is SubmissionState.INVALID:
        _save_form(form_id, outcome.submission, outcome.report)
        _show_modal(
            "error",
            "Validation errors",
            "Please fix the following before submitting:",
            outcome.report.error_list(),
        )
        return redirect(url_for("order.form"))

    if outcome.state is SubmissionState.FAILED:
        _save_form(form_id, outcome.submission, outcome.report)
        flash(f"Error: {outcome.error_message}", "error")
        _show_modal(
            "error",
            "Upload error",
            "Your order could not be submitted:",
            [("Submit", outcome.error_message)],
        )
        return redirect(url_for("order.form"))

    # SUCCEEDED
    discard_all(submission.images)
    _save_form(uuid.uuid4().hex, outcome.submission, outcome.report)
    session["modal"] = dict(SUCCESS_MODAL)
    session.modified = True
    return redirect(url_for("order.form"))


@order_bp.route("/order/reset", methods=["POST"])
def reset():
    """Discard the form and its stored images."""
    _, submission, _ = _load_form()
    discard_all(submission.images)
    session.pop("order_form", None)
    session.pop("modal", None)
    flash("Form cleared.", "success")
    return redirect(url_for("order.form"))

