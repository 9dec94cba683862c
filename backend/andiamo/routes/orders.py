# backend/andiamo/routes/orders.py
"""
Public checkout endpoints.

- GET  /api/passes/<event_id>  passes on sale, with remaining stock
- POST /api/orders/create      server-priced checkout (any payment method)
- POST /api/orders/cod         cash-on-delivery checkout from the Sousse form

Notifications go out after the order is committed; a failed SMS never turns
a created order into an error response.
"""

from flask import Blueprint, request, jsonify

from ..decorators import server_error
from ..extensions import db
from ..models import EventPass
from ..services import order_service, notification_service
from ..validation import ValidationError, ConflictError, NotFoundError


orders_bp = Blueprint("orders", __name__, url_prefix="/api")


@orders_bp.get("/passes/<event_id>")
def event_passes_route(event_id: str):
    try:
        passes = (
            db.session.query(EventPass)
            .filter_by(event_id=event_id, is_active=True)
            .order_by(EventPass.price.asc())
            .all()
        )
        return jsonify({"passes": [p.to_dict() for p in passes]}), 200
    except Exception:
        return server_error("Failed to load passes")


@orders_bp.post("/orders/create")
def create_order_route():
    """
    Request body:
        {
            "event_id": "...",
            "passes": [{"pass_id": "...", "quantity": 2}],
            "customer": {"full_name", "phone", "email", "city", "ville"},
            "payment_method": "online" | "external_app" | "ambassador_cash",
            "ambassador_id": "...",        // cash only
            "idempotency_key": "..."       // optional
        }

    Returns 201 for a new order, 200 when idempotency_key matched one.
    """
    try:
        data = request.get_json(silent=True) or {}
        order, created = order_service.create_order(
            event_id=data.get("event_id") or data.get("eventId"),
            pass_selections=data.get("passes") or [],
            customer=data.get("customer") or data.get("customerInfo") or {},
            payment_method=data.get("payment_method") or data.get("paymentMethod"),
            ambassador_id=data.get("ambassador_id") or data.get("ambassadorId"),
            idempotency_key=data.get("idempotency_key") or request.headers.get("Idempotency-Key"),
        )
    except ValidationError as e:
        return jsonify({"error": str(e)}), 400
    except NotFoundError as e:
        return jsonify({"error": str(e)}), 404
    except ConflictError as e:
        return jsonify({"error": str(e)}), 409
    except Exception:
        return server_error("Failed to create order")

    if created:
        notification_service.notify_order_created(order)
    return jsonify({"success": True, "order": order.to_dict()}), 201 if created else 200


@orders_bp.post("/orders/cod")
def create_cod_order_route():
    """
    Request body:
        {
            "passes": [{"passId", "passName", "quantity", "price"}],
            "totalPrice": 100,
            "customerInfo": {"fullName", "phone", "email", "city", "ville", "ambassadorId"},
            "eventId": "..."
        }
    """
    try:
        data = request.get_json(silent=True) or {}
        order = order_service.create_cod_order(
            data.get("passes") or [],
            data.get("totalPrice", data.get("total_price")),
            data.get("customerInfo") or data.get("customer_info") or {},
            data.get("eventId") or data.get("event_id"),
        )
    except ValidationError as e:
        return jsonify({"error": str(e)}), 400
    except NotFoundError as e:
        return jsonify({"error": str(e)}), 404
    except Exception:
        return server_error("Failed to create cash order")

    notification_service.notify_order_created(order)
    return jsonify({"success": True, "order": order.to_dict()}), 201
