"""
Packaging slip routes.

Handles:
- /packaging-slips/<id>/scan-form - Scan form definition with subscriber fields
- /packaging-slips/<id>/shipped   - Mark a slip as shipped and deliver its label
"""

from typing import Optional

import bleach
from email_validator import EmailNotValidError, validate_email
from flask import (
    Blueprint,
    current_app,
    jsonify,
    request,
    session,
)

from models.events import (
    EVENT_FORM_BUILDER,
    EVENT_STATUS_SHIPPED,
    FormBuilderEvent,
    PackagingSlipStatusChangedEvent,
)
from models.form import FormDefinition
from logging_config import get_logger


# Module logger
logger = get_logger(__name__)

packaging_slips_bp = Blueprint("packaging_slips", __name__, url_prefix="/packaging-slips")

# Constants
MAX_FIELD_LENGTH = 255
MAX_EMAIL_LENGTH = 254

# Fields kept exactly as typed, without HTML escaping
RAW_FIELDS = ("email", "email_format")


def _sanitize_text(text: str, max_length: int = None) -> str:
    """Sanitize user input text."""
    if not text:
        return ""
    text = text.strip()
    text = bleach.clean(text, tags=[], strip=True)
    if max_length and len(text) > max_length:
        text = text[:max_length]
    return text


def _submitted_data() -> dict:
    """
    Form fields of the current request.

    The recipient address and label format are only stripped; every other
    field is sanitized as display text.
    """
    data = {}
    for key, value in request.form.items():
        if key in RAW_FIELDS:
            data[key] = value.strip()[:MAX_FIELD_LENGTH]
        else:
            data[key] = _sanitize_text(value, max_length=MAX_FIELD_LENGTH)
    return data


def _invalid_recipient(email: str) -> Optional[str]:
    """Reason the submitted recipient is unusable, or None if it is fine (or empty)."""
    if not email:
        return None
    if len(email) > MAX_EMAIL_LENGTH:
        return f"Email address longer than {MAX_EMAIL_LENGTH} characters"
    try:
        validate_email(email, check_deliverability=False)
    except EmailNotValidError as e:
        return str(e)
    return None


def _slip_not_found(slip_id: int):
    return jsonify({"success": False, "error": f"Packaging slip {slip_id} not found"}), 404


@packaging_slips_bp.route("/<int:slip_id>/scan-form", methods=["GET"])
def scan_form(slip_id: int):
    """
    Return the scan form for a packaging slip.

    The host form only has the barcode field; subscribers add their own
    fields through the form builder event.
    """
    slip = current_app.config["PACKAGING_SLIPS"].get(slip_id)
    if slip is None:
        return _slip_not_found(slip_id)

    form = FormDefinition("packaging_slip_scan")
    form.add("document_number", "text", label="Packaging slip", required=True)
    form.get("document_number").set_data(slip.document_number)

    event = FormBuilderEvent(form=form)
    current_app.config["EVENT_DISPATCHER"].dispatch(EVENT_FORM_BUILDER, event, session)

    return jsonify({
        "form": form.to_dict(),
        "additional_widgets": list(event.additional_widgets),
    })


@packaging_slips_bp.route("/<int:slip_id>/shipped", methods=["POST"])
def shipped(slip_id: int):
    """
    Mark a packaging slip as shipped.

    Dispatches the shipped event; the label dispatcher fetches the label and
    mails it. Carrier failures surface through the app's error handlers.
    """
    slip = current_app.config["PACKAGING_SLIPS"].get(slip_id)
    if slip is None:
        return _slip_not_found(slip_id)

    submitted_data = _submitted_data()
    reason = None
    if current_app.config["LABEL_DISPATCHER"].policy.configurable_recipient:
        reason = _invalid_recipient(submitted_data.get("email", ""))
    if reason:
        logger.warning(f"Rejected label recipient for {slip.document_number}: {reason}")
        return jsonify({"success": False, "error": f"Invalid email address: {reason}"}), 400

    event = PackagingSlipStatusChangedEvent(packaging_slip=slip, submitted_data=submitted_data)
    logger.info(f"Packaging slip {slip.document_number} marked as shipped")

    current_app.config["EVENT_DISPATCHER"].dispatch(EVENT_STATUS_SHIPPED, event, session)

    label = event.delivered_label
    return jsonify({
        "success": True,
        "packaging_slip": slip.to_dict(),
        "label_delivered": label is not None,
        "label_format": label.label_format.value if label else None,
    })
