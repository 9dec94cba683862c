# backend/andiamo/routes/ambassadors.py
"""
Ambassador endpoints: public selection, applications, the ambassador's own
cancellations, and admin performance views.
"""

from flask import Blueprint, request, jsonify

from ..decorators import require_admin, server_error
from ..services import ambassador_service, ambassador_sales_service, cancellation_service
from ..services.auth_service import PasswordValidationError
from ..services.order_statuses import OrderTransitionError, to_ambassador_status
from ..validation import ValidationError, ConflictError, NotFoundError


ambassadors_bp = Blueprint("ambassadors", __name__, url_prefix="/api")


def _public(ambassador) -> dict:
    # Customers only need who to call
    return {
        "id": ambassador.id,
        "full_name": ambassador.full_name,
        "phone": ambassador.phone,
        "city": ambassador.city,
        "ville": ambassador.ville,
    }


@ambassadors_bp.get("/ambassadors/active")
def active_ambassadors_route():
    """
    Approved ambassadors for ?city=&ville=, in random order.

    An empty list is a valid answer; a database failure is a 500.
    """
    city = (request.args.get("city") or "").strip()
    ville = (request.args.get("ville") or "").strip() or None
    if not city:
        return jsonify({"error": "city is required"}), 400

    try:
        ambassadors = ambassador_service.get_active_ambassadors_by_location(city, ville)
        return jsonify({
            "ambassadors": [_public(a) for a in ambassadors],
            "count": len(ambassadors),
        }), 200
    except Exception:
        return server_error("Unable to load ambassadors")


@ambassadors_bp.post("/ambassador-application")
def submit_application_route():
    try:
        data = request.get_json(silent=True) or {}
        ambassador = ambassador_service.submit_application(data)
        return jsonify({
            "success": True,
            "application": ambassador.to_dict(),
            "message": "Application submitted, we will contact you soon",
        }), 201

    except (ValidationError, PasswordValidationError) as e:
        return jsonify({"error": str(e)}), 400
    except ConflictError as e:
        return jsonify({"error": str(e)}), 409
    except Exception:
        return server_error("Failed to submit ambassador application")


@ambassadors_bp.post("/admin-update-application")
@require_admin
def update_application_route():
    try:
        data = request.get_json(silent=True) or {}
        ambassador = ambassador_service.update_application_status(
            data.get("ambassador_id") or data.get("applicationId"),
            data.get("status"),
        )
        payload = ambassador.to_dict()
        payload["account_status"] = to_ambassador_status(ambassador.status).value
        return jsonify({"success": True, "ambassador": payload}), 200

    except ValidationError as e:
        return jsonify({"error": str(e)}), 400
    except NotFoundError as e:
        return jsonify({"error": str(e)}), 404
    except Exception:
        return server_error("Failed to update ambassador application")


@ambassadors_bp.post("/ambassador/orders/<order_id>/cancel")
def ambassador_cancel_order_route(order_id: str):
    """
    Ambassador cancels one of their own pending orders.

    Body: {"ambassador_id": "...", "reason": "..."}
    """
    try:
        data = request.get_json(silent=True) or {}
        order = cancellation_service.cancel_by_ambassador(
            order_id,
            data.get("ambassador_id"),
            data.get("reason"),
        )
        return jsonify({"success": True, "order": order.to_dict()}), 200

    except ValidationError as e:
        return jsonify({"error": str(e)}), 400
    except NotFoundError as e:
        return jsonify({"error": str(e)}), 404
    except OrderTransitionError as e:
        return jsonify({"error": str(e)}), 409
    except Exception:
        return server_error("Failed to cancel order")


@ambassadors_bp.get("/admin/ambassadors/<ambassador_id>/performance")
@require_admin
def ambassador_performance_route(ambassador_id: str):
    try:
        return jsonify(ambassador_sales_service.get_ambassador_performance(ambassador_id)), 200
    except NotFoundError as e:
        return jsonify({"error": str(e)}), 404
    except Exception:
        return server_error("Failed to load ambassador performance")


@ambassadors_bp.get("/admin/sales-overview")
@require_admin
def sales_overview_route():
    try:
        return jsonify({"ambassadors": ambassador_sales_service.get_sales_overview()}), 200
    except Exception:
        return server_error("Failed to load sales overview")
