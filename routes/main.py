"""
Main routes (health).
"""

from flask import Blueprint, current_app, jsonify

main_bp = Blueprint("main", __name__)


@main_bp.route("/health", methods=["GET"])
def health():
    """Report which dispatcher variant is running."""
    label_dispatcher = current_app.config["LABEL_DISPATCHER"]
    policy = label_dispatcher.policy
    return jsonify({
        "status": "ok",
        "carrier_type": label_dispatcher.carrier_type,
        "configurable_recipient": policy.configurable_recipient,
        "strict_errors": policy.strict_errors,
    })
