# backend/andiamo/routes/settings.py
"""
Payment options and ambassador sales settings.

Public:
- GET /api/payment-options?city=&ville=   options a customer may choose

Admin:
- GET /api/admin/payment-options
- PUT /api/admin/payment-options/<option_type>
- GET/PUT /api/admin/sales-settings
"""

from flask import Blueprint, request, jsonify

from ..decorators import require_admin, server_error
from ..services import settings_service
from ..validation import ValidationError, NotFoundError


settings_bp = Blueprint("settings", __name__, url_prefix="/api")


@settings_bp.get("/payment-options")
def available_payment_options_route():
    city = (request.args.get("city") or "").strip() or None
    ville = (request.args.get("ville") or "").strip() or None
    try:
        options = settings_service.get_available_payment_options(city, ville)
        return jsonify({"options": [o.to_dict() for o in options]}), 200
    except Exception:
        return server_error("Failed to load payment options")


@settings_bp.get("/admin/payment-options")
@require_admin
def list_payment_options_route():
    try:
        options = settings_service.list_payment_options()
        return jsonify({"options": [o.to_dict() for o in options]}), 200
    except Exception:
        return server_error("Failed to list payment options")


@settings_bp.put("/admin/payment-options/<option_type>")
@require_admin
def update_payment_option_route(option_type: str):
    try:
        data = request.get_json(silent=True) or {}
        option = settings_service.update_payment_option(option_type, data)
        return jsonify({"success": True, "option": option.to_dict()}), 200
    except ValidationError as e:
        return jsonify({"error": str(e)}), 400
    except NotFoundError as e:
        return jsonify({"error": str(e)}), 404
    except Exception:
        return server_error("Failed to update payment option")


@settings_bp.get("/admin/sales-settings")
@require_admin
def get_sales_settings_route():
    try:
        return jsonify({
            **settings_service.get_sales_settings(),
            "cash_payment_timeout_hours": settings_service.get_cash_payment_timeout_hours(),
        }), 200
    except Exception:
        return server_error("Failed to load sales settings")


@settings_bp.put("/admin/sales-settings")
@require_admin
def update_sales_settings_route():
    """
    Body: {"enabled": bool} and/or {"cash_payment_timeout_hours": int}
    """
    data = request.get_json(silent=True) or {}
    if "enabled" not in data and "cash_payment_timeout_hours" not in data:
        return jsonify({"error": "enabled or cash_payment_timeout_hours required"}), 400
    try:
        if "enabled" in data:
            settings_service.update_sales_settings(data["enabled"])
        if "cash_payment_timeout_hours" in data:
            settings_service.update_order_timeout_settings(data["cash_payment_timeout_hours"])
        return jsonify({
            "success": True,
            **settings_service.get_sales_settings(),
            "cash_payment_timeout_hours": settings_service.get_cash_payment_timeout_hours(),
        }), 200
    except ValidationError as e:
        return jsonify({"error": str(e)}), 400
    except Exception:
        return server_error("Failed to update sales settings")
