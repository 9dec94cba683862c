# Overview: Fire-and-forget order notifications sent after commit.

"""
Notifications never undo an order change: they run after the transaction
has committed, and every delivery problem is logged as a warning and
swallowed here (and only here).
"""

from __future__ import annotations

from flask import current_app
from sqlalchemy.exc import SQLAlchemyError

from ..extensions import db
from ..models import Order
from ..validation import ValidationError
from . import sms_templates
from .email_service import EmailDeliveryError
from .order_statuses import PaymentMethod
from .sms_service import SmsDeliveryError, send_sms

DELIVERY_ERRORS = (SmsDeliveryError, EmailDeliveryError, ValidationError, ValueError)


def _try_sms(phone, build, *, what: str, order: Order) -> bool:
    try:
        send_sms(phone, build())
        return True
    except DELIVERY_ERRORS as exc:
        current_app.logger.warning("%s SMS for order %s not sent: %s", what, order.id, exc)
        return False
    except SQLAlchemyError as exc:
        db.session.rollback()
        current_app.logger.warning("%s SMS for order %s not logged: %s", what, order.id, exc)
        return False


def notify_order_created(order: Order) -> dict:
    """Client confirmation and ambassador alert for cash orders with an ambassador."""
    result = {"client": False, "ambassador": False}
    if order.payment_method != PaymentMethod.AMBASSADOR_CASH.value or order.ambassador is None:
        return result

    ambassador = order.ambassador
    result["client"] = _try_sms(
        order.user_phone,
        lambda: sms_templates.build_client_order_confirmation_sms(order, ambassador),
        what="Client confirmation",
        order=order,
    )
    result["ambassador"] = _try_sms(
        ambassador.phone,
        lambda: sms_templates.build_ambassador_new_order_sms(order),
        what="Ambassador new-order",
        order=order,
    )
    return result


def notify_order_paid(order: Order) -> bool:
    return _try_sms(
        order.user_phone,
        lambda: sms_templates.build_client_admin_approval_sms(order),
        what="Payment confirmation",
        order=order,
    )
