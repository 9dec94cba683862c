# Overview: Service-layer operations for cancellations by ambassadors, admins and the system.

"""
Order cancellation.

Every cancellation, whoever triggers it:
- requires a non-empty reason
- sets status=CANCELLED, cancellation_reason, cancelled_by, cancelled_at
- releases reserved stock
- appends exactly one 'cancelled' OrderLog ('admin_refunded' for a paid order)
- is guarded by the status read beforehand (UPDATE ... WHERE status = seen)

Who may cancel what:
- ambassador: own orders only, can_cancel_order() (pending states; PAID refused)
- system:     can_cancel_order(); missing/paid/cancelled orders are skipped
- admin:      the transition table (PAID -> CANCELLED is a refund), see
              ambassador_orders_service.cancel_order_as_admin()
"""

from __future__ import annotations

from flask import current_app

from ..extensions import db
from ..models import Order
from ..validation import ValidationError, NotFoundError
from . import settings_service
from .concurrency import compare_and_set
from .order_service import get_order, release_stock, log_order_action
from .order_statuses import (
    CANCELLED_BY_VALUES,
    OrderStatus,
    OrderTransitionError,
    PaymentMethod,
    can_cancel_order,
)
from andiamo.time_utils import utcnow, hours_ago


def require_reason(reason) -> str:
    if not isinstance(reason, str) or not reason.strip():
        raise ValidationError("A cancellation reason is required")
    return reason.strip()


def write_cancellation(
    order: Order,
    *,
    reason: str,
    cancelled_by: str,
    performed_by=None,
    details: dict | None = None,
    action: str = "cancelled",
) -> None:
    """
    Stage the cancellation of order in the current transaction.

    The caller has already decided the transition is allowed; this only
    guards against the status having moved since it was read. Does not
    commit. action names the audit row: 'cancelled', or 'admin_refunded'
    when an admin cancels a paid order.
    """
    if cancelled_by not in CANCELLED_BY_VALUES:
        raise ValueError(f"Unknown cancelled_by '{cancelled_by}'")
    seen = order.status
    now = utcnow()
    ok = compare_and_set(
        Order,
        order.id,
        expected={"status": seen},
        values={
            "status": OrderStatus.CANCELLED.value,
            "cancellation_reason": reason,
            "cancelled_by": cancelled_by,
            "cancelled_at": now,
            "updated_at": now,
        },
    )
    if not ok:
        raise OrderTransitionError(f"Order {order.id} was modified by someone else, reload and retry")

    release_stock(order)
    log_order_action(
        order.id,
        action,
        performed_by=performed_by,
        performed_by_type=cancelled_by,
        details={"reason": reason, "previous_status": seen, **(details or {})},
    )


def cancel_by_ambassador(order_id: str, ambassador_id: str, reason) -> Order:
    """
    Raises:
        ValidationError: missing reason
        NotFoundError: unknown order, or the order belongs to someone else
        OrderTransitionError: order no longer cancellable
    """
    reason = require_reason(reason)
    order = get_order(order_id)
    if not ambassador_id or order.ambassador_id != ambassador_id:
        # Do not reveal other ambassadors' orders
        raise NotFoundError(f"Order {order_id} not found")
    if not can_cancel_order(order.status):
        raise OrderTransitionError(f"Order in status '{order.status}' cannot be cancelled")

    try:
        write_cancellation(order, reason=reason, cancelled_by="ambassador", performed_by=ambassador_id)
        db.session.commit()
    except Exception:
        db.session.rollback()
        raise

    db.session.refresh(order)
    return order


def cancel_by_system(order_id: str, reason) -> bool:
    """
    Cancel on behalf of the platform (timeouts, failed payments).

    Returns False, without raising, when the order is missing or already
    out of a cancellable state.
    """
    reason = require_reason(reason)
    order = db.session.get(Order, order_id)
    if order is None or not can_cancel_order(order.status):
        return False

    try:
        write_cancellation(order, reason=reason, cancelled_by="system")
        db.session.commit()
    except OrderTransitionError:
        db.session.rollback()
        return False
    except Exception:
        db.session.rollback()
        raise
    return True


def find_expired_cash_orders(timeout_hours: int | None = None) -> list[Order]:
    hours = settings_service.get_cash_payment_timeout_hours() if timeout_hours is None else timeout_hours
    cutoff = hours_ago(hours)
    return (
        db.session.query(Order)
        .filter(
            Order.status == OrderStatus.PENDING_CASH.value,
            Order.payment_method == PaymentMethod.AMBASSADOR_CASH.value,
            Order.created_at < cutoff,
        )
        .order_by(Order.created_at.asc())
        .all()
    )


def check_and_cancel_timeouts(timeout_hours: int | None = None) -> dict:
    """
    Cancel cash orders left unpaid past the configured timeout.

    One order failing does not stop the sweep; failures are counted and
    logged.
    """
    hours = settings_service.get_cash_payment_timeout_hours() if timeout_hours is None else timeout_hours
    expired = find_expired_cash_orders(hours)

    cancelled = 0
    skipped = 0
    errors = 0
    for order in expired:
        order_id = order.id
        try:
            if cancel_by_system(order_id, f"Payment not received within {hours} hours"):
                cancelled += 1
            else:
                skipped += 1
        except Exception:
            errors += 1
            current_app.logger.exception("Timeout cancellation failed for order %s", order_id)

    return {
        "checked": len(expired),
        "cancelled": cancelled,
        "skipped": skipped,
        "errors": errors,
        "timeout_hours": hours,
    }
