# backend/andiamo/routes/messaging.py
"""
Admin marketing messages.

- POST /api/admin/sms/bulk     {"phones": [...], "message": "..."}
- POST /api/admin/email/send   {"to": "...", "subject": "...", "html": "..."}
"""

from flask import Blueprint, request, jsonify

from ..decorators import require_admin, server_error
from ..services import sms_service, email_service
from ..services.email_service import EmailDeliveryError
from ..validation import ValidationError


messaging_bp = Blueprint("messaging", __name__, url_prefix="/api/admin")


@messaging_bp.post("/sms/bulk")
@require_admin
def bulk_sms_route():
    try:
        data = request.get_json(silent=True) or {}
        phones = data.get("phones") or data.get("phoneNumbers") or []
        if not isinstance(phones, list):
            return jsonify({"error": "phones must be a list"}), 400
        result = sms_service.send_bulk_sms(phones, data.get("message") or "")
        return jsonify({"success": result["failed"] == 0, **result}), 200
    except ValidationError as e:
        return jsonify({"error": str(e)}), 400
    except Exception:
        return server_error("Failed to send bulk SMS")


@messaging_bp.post("/email/send")
@require_admin
def send_email_route():
    try:
        data = request.get_json(silent=True) or {}
        email_service.send_email(data.get("to"), data.get("subject"), data.get("html"))
        return jsonify({"success": True}), 200
    except ValidationError as e:
        return jsonify({"error": str(e)}), 400
    except EmailDeliveryError as e:
        return jsonify({"success": False, "error": str(e)}), 502
    except Exception:
        return server_error("Failed to send email")
