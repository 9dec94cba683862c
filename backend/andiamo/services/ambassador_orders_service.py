# Overview: Service-layer operations for admin actions on ambassador orders.

"""
Admin lifecycle actions on orders, plus the ambassador sales dashboard feed.

================================================================================
TRANSITIONS
================================================================================

    accept    pending -> pending   sets accepted_at (acknowledgement only)
    complete  pending -> PAID      sets completed_at, payment_status
    cancel    pending|PAID -> CANCELLED   reason required, stock released
    remove    pending -> REMOVED_BY_ADMIN soft delete, stock released
    reassign  pending cash order -> another eligible ambassador

Each action:
1. Reads the order and checks the rule (order_statuses) -> OrderTransitionError
2. UPDATE orders ... WHERE id = :id AND status = :seen (compare_and_set)
3. INSERTs exactly one OrderLog with performed_by_type='admin'
4. Commits 2+3 together, or rolls both back

If step 2 matches no row another admin changed the order first; the caller
gets OrderTransitionError and nothing is written.
================================================================================
"""

from __future__ import annotations

from ..extensions import db
from ..models import Ambassador, Order, OrderLog
from ..validation import ValidationError
from . import ambassador_service
from .cancellation_service import require_reason, write_cancellation
from .concurrency import compare_and_set
from .order_service import get_order, release_stock, log_order_action
from .order_statuses import (
    OrderSource,
    OrderStatus,
    OrderTransitionError,
    PaymentMethod,
    can_update_status,
    ensure_transition,
)
from andiamo.time_utils import utcnow


RECENT_LOG_LIMIT = 100
UNKNOWN_AMBASSADOR = "Unknown"

AMBASSADOR_SOURCES = (OrderSource.AMBASSADOR_MANUAL.value, OrderSource.PLATFORM_COD.value)


def _guarded_update(order: Order, values: dict, *, expected: dict | None = None) -> None:
    """Status-guarded UPDATE; raises when another writer got there first."""
    ok = compare_and_set(
        Order,
        order.id,
        expected={"status": order.status, **(expected or {})},
        values=values,
    )
    if not ok:
        raise OrderTransitionError(f"Order {order.id} was modified by someone else, reload and retry")


def _commit(order: Order) -> Order:
    try:
        db.session.commit()
    except Exception:
        db.session.rollback()
        raise
    db.session.refresh(order)
    return order


def accept_order_as_admin(order_id: str, admin_id) -> Order:
    """
    Acknowledge a pending order. Status is unchanged; accepted_at is set.

    Raises:
        NotFoundError, OrderTransitionError
    """
    order = get_order(order_id)
    if not can_update_status(order.status):
        raise OrderTransitionError(f"Order in status '{order.status}' can no longer be modified")
    if order.accepted_at is not None:
        raise OrderTransitionError(f"Order {order_id} was already accepted")

    now = utcnow()
    try:
        _guarded_update(order, {"accepted_at": now, "updated_at": now}, expected={"accepted_at": None})
        log_order_action(order.id, "accepted", performed_by=admin_id, performed_by_type="admin",
                         details={"status": order.status})
    except Exception:
        db.session.rollback()
        raise
    return _commit(order)


def complete_order_as_admin(order_id: str, admin_id) -> Order:
    """Mark a pending order as paid (cash collected, payment confirmed)."""
    order = get_order(order_id)
    seen = order.status
    target = ensure_transition(seen, OrderStatus.PAID, order_id=order_id)

    now = utcnow()
    try:
        _guarded_update(order, {
            "status": target.value,
            "payment_status": "PAID",
            "completed_at": now,
            "updated_at": now,
        })
        log_order_action(order.id, "completed", performed_by=admin_id, performed_by_type="admin",
                         details={"from": seen, "to": target.value})
    except Exception:
        db.session.rollback()
        raise
    return _commit(order)


def cancel_order_as_admin(order_id: str, admin_id, reason) -> Order:
    """
    Cancel a pending or paid order. Cancelling a PAID order is a refund and
    is logged as 'admin_refunded' instead of 'cancelled'.

    Raises:
        ValidationError: missing reason
        NotFoundError, OrderTransitionError
    """
    reason = require_reason(reason)
    order = get_order(order_id)
    ensure_transition(order.status, OrderStatus.CANCELLED, order_id=order_id)

    refund = order.status == OrderStatus.PAID.value
    try:
        write_cancellation(
            order,
            reason=reason,
            cancelled_by="admin",
            performed_by=admin_id,
            details={"refund": refund},
            action="admin_refunded" if refund else "cancelled",
        )
    except Exception:
        db.session.rollback()
        raise
    return _commit(order)


def remove_order_as_admin(order_id: str, admin_id) -> Order:
    """Soft delete. PAID orders cannot be removed, only cancelled."""
    order = get_order(order_id)
    seen = order.status
    target = ensure_transition(seen, OrderStatus.REMOVED_BY_ADMIN, order_id=order_id)

    now = utcnow()
    try:
        _guarded_update(order, {
            "status": target.value,
            "removed_at": now,
            "removed_by": str(admin_id) if admin_id is not None else None,
            "updated_at": now,
        })
        release_stock(order)
        log_order_action(order.id, "status_changed", performed_by=admin_id, performed_by_type="admin",
                         details={"from": seen, "to": target.value})
    except Exception:
        db.session.rollback()
        raise
    return _commit(order)


def reassign_order_as_admin(order_id: str, ambassador_id: str, admin_id) -> Order:
    """
    Hand a pending cash order to another ambassador serving the same location.

    Resets accepted_at: the new ambassador has not acknowledged it yet.
    """
    if not ambassador_id:
        raise ValidationError("ambassador_id is required")
    order = get_order(order_id)
    if order.payment_method != PaymentMethod.AMBASSADOR_CASH.value:
        raise ValidationError("Only cash orders can be reassigned")
    if not can_update_status(order.status):
        raise OrderTransitionError(f"Order in status '{order.status}' can no longer be modified")
    if order.ambassador_id == ambassador_id:
        raise ValidationError("Order is already assigned to this ambassador")

    ambassador = ambassador_service.require_ambassador(ambassador_id)
    ambassador_service.ensure_eligible_for_location(ambassador, order.city, order.ville)

    previous = order.ambassador_id
    now = utcnow()
    try:
        _guarded_update(
            order,
            {"ambassador_id": ambassador.id, "assigned_at": now, "accepted_at": None, "updated_at": now},
            expected={"ambassador_id": previous},
        )
        log_order_action(order.id, "reassigned", performed_by=admin_id, performed_by_type="admin",
                         details={"from_ambassador_id": previous, "to_ambassador_id": ambassador.id})
    except Exception:
        db.session.rollback()
        raise
    return _commit(order)


def update_order_status(
    order_id: str,
    new_status,
    metadata: dict | None = None,
    *,
    performed_by=None,
    performed_by_type: str = "system",
) -> Order:
    """
    Generic path used by payment callbacks: only pending orders move here.

    metadata keys: reason (required for CANCELLED), payment_gateway_reference,
    external_app_reference, payment_response_data.
    """
    metadata = metadata or {}
    order = get_order(order_id)
    seen = order.status
    if not can_update_status(seen):
        raise OrderTransitionError(f"Order in status '{seen}' can no longer be modified")
    target = ensure_transition(seen, new_status, order_id=order_id)

    if target is OrderStatus.CANCELLED:
        reason = require_reason(metadata.get("reason"))
        try:
            write_cancellation(order, reason=reason, cancelled_by=performed_by_type, performed_by=performed_by)
        except Exception:
            db.session.rollback()
            raise
        return _commit(order)

    now = utcnow()
    values = {"status": target.value, "updated_at": now}
    if target is OrderStatus.PAID:
        values["payment_status"] = "PAID"
        values["completed_at"] = now
    elif target is OrderStatus.REMOVED_BY_ADMIN:
        values["removed_at"] = now
        values["removed_by"] = str(performed_by) if performed_by is not None else None
    for key in ("payment_gateway_reference", "external_app_reference", "payment_response_data"):
        if metadata.get(key) is not None:
            values[key] = metadata[key]

    try:
        _guarded_update(order, values)
        if target is OrderStatus.REMOVED_BY_ADMIN:
            release_stock(order)
        log_order_action(order.id, "status_changed", performed_by=performed_by,
                         performed_by_type=performed_by_type,
                         details={"from": seen, "to": target.value})
    except Exception:
        db.session.rollback()
        raise
    return _commit(order)


def fetch_ambassador_sales_data() -> dict:
    """
    Read-only feed for the admin sales dashboard.

    Orders carry ambassador_name: the approved ambassador's full name,
    "Unknown" when the id does not resolve to one, None when the order
    has no ambassador.
    """
    names = {
        a.id: a.full_name
        for a in db.session.query(Ambassador).filter(Ambassador.status == ambassador_service.APPROVED).all()
    }

    orders = (
        db.session.query(Order)
        .filter(db.or_(Order.source.in_(AMBASSADOR_SOURCES), Order.ambassador_id.isnot(None)))
        .order_by(Order.created_at.desc())
        .all()
    )

    def _annotate(order: Order) -> dict:
        data = order.to_dict()
        if order.ambassador_id:
            data["ambassador_name"] = names.get(order.ambassador_id, UNKNOWN_AMBASSADOR)
        else:
            data["ambassador_name"] = None
        return data

    all_orders = [_annotate(o) for o in orders]
    logs = (
        db.session.query(OrderLog)
        .order_by(OrderLog.created_at.desc(), OrderLog.id.desc())
        .limit(RECENT_LOG_LIMIT)
        .all()
    )

    return {
        # Legacy platform_cod orders are no longer written
        "cod_orders": [],
        "manual_orders": [o for o in all_orders if o["source"] == OrderSource.AMBASSADOR_MANUAL.value],
        "all_ambassador_orders": all_orders,
        "order_logs": [entry.to_dict() for entry in logs],
    }
