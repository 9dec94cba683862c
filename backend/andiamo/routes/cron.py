# backend/andiamo/routes/cron.py
"""
Scheduled jobs exposed over HTTP for the hosting platform's cron.

When CRON_SECRET is configured the caller must send it in X-Cron-Secret.
"""

import hmac

from flask import Blueprint, request, jsonify, current_app

from ..decorators import server_error
from ..services import cancellation_service


cron_bp = Blueprint("cron", __name__, url_prefix="/api")


def _authorized() -> bool:
    secret = current_app.config.get("CRON_SECRET")
    if not secret:
        return True
    supplied = request.headers.get("X-Cron-Secret") or ""
    return hmac.compare_digest(supplied, secret)


@cron_bp.route("/auto-reject-expired-orders", methods=["GET", "POST"])
def auto_reject_expired_orders_route():
    if not _authorized():
        return jsonify({"error": "Unauthorized"}), 401
    try:
        result = cancellation_service.check_and_cancel_timeouts()
        current_app.logger.info(
            "Expired cash orders: checked=%s cancelled=%s errors=%s",
            result["checked"], result["cancelled"], result["errors"],
        )
        return jsonify({"success": True, **result}), 200
    except Exception:
        return server_error("Failed to reject expired orders")
