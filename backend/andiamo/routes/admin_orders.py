# backend/andiamo/routes/admin_orders.py
"""
Admin order management.

- GET  /api/admin/orders                   list with filters
- GET  /api/admin/orders/<id>              one order with passes and logs
- POST /api/admin/orders/<id>/accept       acknowledge (status unchanged)
- POST /api/admin/orders/<id>/complete     -> PAID, client gets an SMS
- POST /api/admin/orders/<id>/cancel       -> CANCELLED, reason required
- POST /api/admin/orders/<id>/remove       -> REMOVED_BY_ADMIN
- POST /api/admin/orders/<id>/reassign     another ambassador, same location
- GET  /api/admin/ambassador-sales         dashboard feed

SECURITY: the acting admin comes from the session cookie (g.current_admin),
never from the request body, so the audit trail cannot be spoofed.

Error responses for transitions:
    400: missing reason / invalid input
    404: order or ambassador not found
    409: transition not allowed, or the order changed under us
"""

from flask import Blueprint, request, jsonify, g

from ..decorators import require_admin, server_error
from ..extensions import db
from ..models import OrderLog
from ..services import ambassador_orders_service, order_service, notification_service
from ..services.order_statuses import OrderTransitionError
from ..validation import ValidationError, NotFoundError


admin_orders_bp = Blueprint("admin_orders", __name__, url_prefix="/api/admin")


def _run_transition(action, *, message: str):
    try:
        order = action()
        return order, None
    except ValidationError as e:
        return None, (jsonify({"error": str(e)}), 400)
    except NotFoundError as e:
        return None, (jsonify({"error": str(e)}), 404)
    except OrderTransitionError as e:
        return None, (jsonify({"error": str(e)}), 409)
    except Exception:
        return None, server_error(message)


@admin_orders_bp.get("/orders")
@require_admin
def list_orders_route():
    try:
        orders = order_service.list_orders(request.args.to_dict())
        return jsonify({"orders": [o.to_dict() for o in orders], "count": len(orders)}), 200
    except ValidationError as e:
        return jsonify({"error": str(e)}), 400
    except Exception:
        return server_error("Failed to list orders")


@admin_orders_bp.get("/orders/<order_id>")
@require_admin
def get_order_route(order_id: str):
    try:
        order = order_service.get_order(order_id)
        logs = (
            db.session.query(OrderLog)
            .filter_by(order_id=order.id)
            .order_by(OrderLog.created_at.asc(), OrderLog.id.asc())
            .all()
        )
        payload = order.to_dict()
        payload["logs"] = [entry.to_dict() for entry in logs]
        return jsonify({"order": payload}), 200
    except NotFoundError as e:
        return jsonify({"error": str(e)}), 404
    except Exception:
        return server_error("Failed to load order")


@admin_orders_bp.post("/orders/<order_id>/accept")
@require_admin
def accept_order_route(order_id: str):
    order, error = _run_transition(
        lambda: ambassador_orders_service.accept_order_as_admin(order_id, g.current_admin.id),
        message="Failed to accept order",
    )
    if error:
        return error
    return jsonify({"success": True, "order": order.to_dict()}), 200


@admin_orders_bp.post("/orders/<order_id>/complete")
@require_admin
def complete_order_route(order_id: str):
    order, error = _run_transition(
        lambda: ambassador_orders_service.complete_order_as_admin(order_id, g.current_admin.id),
        message="Failed to complete order",
    )
    if error:
        return error
    sms_sent = notification_service.notify_order_paid(order)
    return jsonify({"success": True, "order": order.to_dict(), "sms_sent": sms_sent}), 200


@admin_orders_bp.post("/orders/<order_id>/cancel")
@require_admin
def cancel_order_route(order_id: str):
    data = request.get_json(silent=True) or {}
    order, error = _run_transition(
        lambda: ambassador_orders_service.cancel_order_as_admin(
            order_id, g.current_admin.id, data.get("reason")
        ),
        message="Failed to cancel order",
    )
    if error:
        return error
    return jsonify({"success": True, "order": order.to_dict()}), 200


@admin_orders_bp.post("/orders/<order_id>/remove")
@require_admin
def remove_order_route(order_id: str):
    order, error = _run_transition(
        lambda: ambassador_orders_service.remove_order_as_admin(order_id, g.current_admin.id),
        message="Failed to remove order",
    )
    if error:
        return error
    return jsonify({"success": True, "order": order.to_dict()}), 200


@admin_orders_bp.post("/orders/<order_id>/reassign")
@require_admin
def reassign_order_route(order_id: str):
    data = request.get_json(silent=True) or {}
    order, error = _run_transition(
        lambda: ambassador_orders_service.reassign_order_as_admin(
            order_id, data.get("ambassador_id"), g.current_admin.id
        ),
        message="Failed to reassign order",
    )
    if error:
        return error
    return jsonify({"success": True, "order": order.to_dict()}), 200


@admin_orders_bp.get("/ambassador-sales")
@require_admin
def ambassador_sales_route():
    try:
        return jsonify(ambassador_orders_service.fetch_ambassador_sales_data()), 200
    except Exception:
        return server_error("Unable to load ambassador sales data")
