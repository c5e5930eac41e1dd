"""
Resubmission route.

Lets a creator send five replacement images for an existing order.
Same image rules as the order form; images are renamed with the order ID.
"""

import uuid

from flask import (
    Blueprint,
    current_app,
    flash,
    redirect,
    render_template,
    request,
    url_for,
)

from core.exceptions import SubmissionInProgressError
from models.order import IMAGE_SLOTS, SubmissionState, ValidationReport
from modules.upload_store import discard_all, store_upload
from logging_config import get_logger


# Module logger
logger = get_logger(__name__)

resubmit_bp = Blueprint("resubmit", __name__)


@resubmit_bp.route("/resubmit", methods=["GET", "POST"])
def resubmit():
    """
    GET: Display resubmission form
    POST: Validate order ID + five images, relay them
    """
    if request.method == "GET":
        return render_template(
            "resubmit.html",
            order_id=request.args.get("orderId", ""),
            report=ValidationReport(),
            image_slots=IMAGE_SLOTS,
        )

    orchestrator = current_app.config["ORCHESTRATOR"]
    order_id = request.form.get("orderId", "")

    images = []
    try:
        for slot in range(1, IMAGE_SLOTS + 1):
            file_storage = request.files.get(f"image{slot}")
            if file_storage and file_storage.filename:
                images.append(store_upload(file_storage, current_app.config["UPLOAD_FOLDER"]))
            else:
                images.append(None)

        outcome = orchestrator.resubmit(order_id, images, form_id=f"resubmit-{uuid.uuid4().hex}")
    except SubmissionInProgressError:
        flash("This resubmission is already being sent. Please wait.", "warning")
        return redirect(url_for("resubmit.resubmit"))
    except OSError as e:
        logger.error(f"Failed to store resubmitted images: {e}", exc_info=True)
        flash("Failed to store the images. Please try again.", "error")
        return redirect(url_for("resubmit.resubmit"))
    finally:
        # Files are re-attached on every attempt; nothing is kept between requests
        discard_all(images)

    if outcome.state is SubmissionState.SUCCEEDED:
        logger.info(f"Resubmission for order {order_id!r} sent")
        flash("Your images have been successfully received.", "success")
        return redirect(url_for("resubmit.resubmit"))

    if outcome.state is SubmissionState.FAILED:
        flash(f"Error: {outcome.error_message}", "error")

    return render_template(
        "resubmit.html",
        order_id=order_id,
        report=outcome.report,
        image_slots=IMAGE_SLOTS,
    ), 400
