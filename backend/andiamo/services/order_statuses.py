# Overview: Order status and payment vocabulary plus the order transition table.

"""
Order status model shared by every payment method.

================================================================================
STATE MACHINE
================================================================================

    PENDING_ONLINE --+
    REDIRECTED ------+--> PAID --> CANCELLED (refund)
    PENDING_CASH ----+
          |
          +--> CANCELLED
          +--> REMOVED_BY_ADMIN (soft delete)

Entry state is chosen by payment method (initial_status_for), never by callers:
    online          -> PENDING_ONLINE
    external_app    -> REDIRECTED
    ambassador_cash -> PENDING_CASH

CANCELLED and REMOVED_BY_ADMIN are terminal. PAID can still be cancelled
(refund) but never removed.

can_cancel_order() is narrower than the table: it is False for PAID. The
ambassador and system cancellation paths use it; the admin path uses the
table so that refunds remain possible.

Everything here is pure. Services look the rules up, then perform the
write themselves with a status-guarded UPDATE.
================================================================================
"""

from __future__ import annotations

from enum import Enum


class OrderStatus(str, Enum):
    PENDING_ONLINE = "PENDING_ONLINE"      # Online payment pending
    REDIRECTED = "REDIRECTED"              # External app payment, user redirected
    PENDING_CASH = "PENDING_CASH"          # Ambassador cash payment pending
    PAID = "PAID"
    CANCELLED = "CANCELLED"                # Cancelled, with reason
    REMOVED_BY_ADMIN = "REMOVED_BY_ADMIN"  # Soft delete


class PaymentMethod(str, Enum):
    ONLINE = "online"
    EXTERNAL_APP = "external_app"
    AMBASSADOR_CASH = "ambassador_cash"


class PaymentOptionType(str, Enum):
    ONLINE = "online"
    EXTERNAL_APP = "external_app"
    AMBASSADOR_CASH = "ambassador_cash"


class AmbassadorStatus(str, Enum):
    ACTIVE = "ACTIVE"
    PAUSED = "PAUSED"
    DISABLED = "DISABLED"
    PENDING = "PENDING"
    REJECTED = "REJECTED"


class OrderSource(str, Enum):
    PLATFORM_ONLINE = "platform_online"
    AMBASSADOR_MANUAL = "ambassador_manual"
    PLATFORM_COD = "platform_cod"  # legacy, never written


CANCELLED_BY_VALUES = {"admin", "ambassador", "system"}
PERFORMER_TYPES = {"admin", "ambassador", "system"}

LOG_ACTIONS = {
    "assigned",
    "accepted",
    "completed",
    "cancelled",
    "reassigned",
    "status_changed",
    "admin_refunded",
}

PENDING_STATUSES = frozenset({
    OrderStatus.PENDING_ONLINE,
    OrderStatus.REDIRECTED,
    OrderStatus.PENDING_CASH,
})

_PENDING_NEXT = (OrderStatus.PAID, OrderStatus.CANCELLED, OrderStatus.REMOVED_BY_ADMIN)

_TRANSITIONS: dict[OrderStatus, tuple[OrderStatus, ...]] = {
    OrderStatus.PENDING_ONLINE: _PENDING_NEXT,
    OrderStatus.REDIRECTED: _PENDING_NEXT,
    OrderStatus.PENDING_CASH: _PENDING_NEXT,
    OrderStatus.PAID: (OrderStatus.CANCELLED,),
    OrderStatus.CANCELLED: (),
    OrderStatus.REMOVED_BY_ADMIN: (),
}

_INITIAL_STATUS: dict[PaymentMethod, OrderStatus] = {
    PaymentMethod.ONLINE: OrderStatus.PENDING_ONLINE,
    PaymentMethod.EXTERNAL_APP: OrderStatus.REDIRECTED,
    PaymentMethod.AMBASSADOR_CASH: OrderStatus.PENDING_CASH,
}

# Persisted ambassador states -> application taxonomy
_AMBASSADOR_STATUS_MAP = {
    "approved": AmbassadorStatus.ACTIVE,
    "pending": AmbassadorStatus.PENDING,
    "rejected": AmbassadorStatus.REJECTED,
    "suspended": AmbassadorStatus.PAUSED,
}

_ORDER_STATUS_LABELS = {
    OrderStatus.PENDING_ONLINE: {"en": "Pending Online Payment", "fr": "Paiement en ligne en attente"},
    OrderStatus.REDIRECTED: {"en": "Redirected to Payment App", "fr": "Redirigé vers l'application de paiement"},
    OrderStatus.PENDING_CASH: {"en": "Pending Cash Payment", "fr": "Paiement en espèces en attente"},
    OrderStatus.PAID: {"en": "Paid", "fr": "Payé"},
    OrderStatus.CANCELLED: {"en": "Cancelled", "fr": "Annulé"},
    OrderStatus.REMOVED_BY_ADMIN: {"en": "Removed by Admin", "fr": "Retiré par l'administrateur"},
}

_PAYMENT_METHOD_LABELS = {
    PaymentMethod.ONLINE: {"en": "Online Payment", "fr": "Paiement en ligne"},
    PaymentMethod.EXTERNAL_APP: {"en": "External App", "fr": "Application externe"},
    PaymentMethod.AMBASSADOR_CASH: {"en": "Cash on Delivery", "fr": "Paiement à la livraison"},
}


class OrderTransitionError(ValueError):
    """
    Raised when an order cannot move to the requested status.

    Distinct from ValidationError so callers can say "this order can no
    longer be modified" instead of showing a form error.
    """
    pass


def _coerce(enum_cls, value):
    if isinstance(value, enum_cls):
        return value
    try:
        return enum_cls(value)
    except ValueError:
        return None


def parse_order_status(value) -> OrderStatus:
    """Strict parse; raises OrderTransitionError for legacy or unknown literals."""
    status = _coerce(OrderStatus, value)
    if status is None:
        raise OrderTransitionError(f"Unknown order status '{value}'")
    return status


def parse_payment_method(value) -> PaymentMethod | None:
    return _coerce(PaymentMethod, value)


def get_order_status_label(status, language: str = "en") -> str:
    """Localized label, or the raw value when status/language is unknown."""
    member = _coerce(OrderStatus, status)
    labels = _ORDER_STATUS_LABELS.get(member) if member else None
    if labels and labels.get(language):
        return labels[language]
    return status.value if isinstance(status, Enum) else status


def get_payment_method_label(method, language: str = "en") -> str:
    member = _coerce(PaymentMethod, method)
    labels = _PAYMENT_METHOD_LABELS.get(member) if member else None
    if labels and labels.get(language):
        return labels[language]
    return method.value if isinstance(method, Enum) else method


def can_cancel_order(status) -> bool:
    """True only for the three pending states. PAID is refused here."""
    return _coerce(OrderStatus, status) in PENDING_STATUSES


def can_update_status(status) -> bool:
    """True only for pending states; PAID and terminal states need a dedicated operation."""
    return _coerce(OrderStatus, status) in PENDING_STATUSES


def get_valid_next_statuses(current_status) -> list[OrderStatus]:
    """Allowed successors of current_status. Unknown values have none."""
    member = _coerce(OrderStatus, current_status)
    if member is None:
        return []
    return list(_TRANSITIONS[member])


def can_transition(from_status, to_status) -> bool:
    target = _coerce(OrderStatus, to_status)
    return target is not None and target in get_valid_next_statuses(from_status)


def ensure_transition(from_status, to_status, *, order_id: str | None = None) -> OrderStatus:
    """
    Return the target status or raise OrderTransitionError.

    Used by every write path before it touches the row.
    """
    target = parse_order_status(to_status)
    if not can_transition(from_status, target):
        label = f"order {order_id}" if order_id else "order"
        raise OrderTransitionError(
            f"Cannot move {label} from '{_value(from_status)}' to '{target.value}'"
        )
    return target


def initial_status_for(payment_method) -> OrderStatus:
    method = _coerce(PaymentMethod, payment_method)
    if method is None:
        raise ValueError(f"Unknown payment method '{payment_method}'")
    return _INITIAL_STATUS[method]


def source_for(payment_method) -> OrderSource:
    method = _coerce(PaymentMethod, payment_method)
    if method is PaymentMethod.AMBASSADOR_CASH:
        return OrderSource.AMBASSADOR_MANUAL
    return OrderSource.PLATFORM_ONLINE


def payment_method_for_option(option_type) -> PaymentMethod:
    option = _coerce(PaymentOptionType, option_type)
    if option is None:
        raise ValueError(f"Invalid payment option type: {option_type}")
    return PaymentMethod(option.value)


def to_ambassador_status(persisted: str | None) -> AmbassadorStatus:
    return _AMBASSADOR_STATUS_MAP.get((persisted or "").lower(), AmbassadorStatus.DISABLED)


def _value(status) -> str:
    return status.value if isinstance(status, Enum) else str(status)
