# Overview: Service-layer operations for orders; creation, numbering, stock and lookups.

"""
Order creation and read paths.

================================================================================
TWO ENTRY POINTS
================================================================================

create_cod_order()
    Cash-on-delivery checkout from the public site. Only Sousse with a ville
    is served this way; anything else is rejected before a single row is
    written. Prices arrive from the client and are checked for consistency
    (total == sum of price x quantity). NOT idempotent: two calls create two
    orders.

create_order()
    Unified server-side checkout for every payment method. Prices are read
    from event_passes, stock is reserved with conditional UPDATEs, and an
    optional idempotency_key turns retries into a lookup.

Both write one Order, N OrderPass rows and (when an ambassador is set) one
'assigned' OrderLog in a single transaction. Initial status always comes
from initial_status_for(payment_method).

================================================================================
STOCK
================================================================================

sold_quantity moves only through compare_and_set so two buyers cannot both
take the last ticket. reserve_stock() raises ConflictError and leaves the
caller to roll back; release_stock() runs at most once per order
(stock_released flag) and only touches rows that carry a pass_id.
================================================================================
"""

from __future__ import annotations

from decimal import Decimal

from sqlalchemy import update
from sqlalchemy.exc import IntegrityError

from ..extensions import db
from ..models import Event, EventPass, Order, OrderPass, OrderLog, OrderSequence
from ..validation import (
    ValidationError,
    ConflictError,
    NotFoundError,
    require_text,
    optional_text,
    coerce_quantity,
    coerce_money,
)
from . import ambassador_service, settings_service
from .concurrency import compare_and_set
from .order_statuses import (
    LOG_ACTIONS,
    PERFORMER_TYPES,
    OrderStatus,
    PaymentMethod,
    initial_status_for,
    parse_payment_method,
    source_for,
)
from andiamo.time_utils import utcnow, parse_iso_datetime


ORDER_SEQUENCE = "orders"
MIXED_PASS_TYPE = "mixed"
COD_CITY = "Sousse"

# Online and external-app tickets are delivered by email
EMAIL_REQUIRED_METHODS = {PaymentMethod.ONLINE, PaymentMethod.EXTERNAL_APP}


# =============================================================================
# Order numbers
# =============================================================================

def next_order_number() -> int:
    """
    Allocate the next human-facing order number inside the caller's transaction.

    The counter row is bumped with a single UPDATE so concurrent checkouts
    serialise on it; the first order ever creates the row.
    """
    stmt = (
        update(OrderSequence)
        .where(OrderSequence.name == ORDER_SEQUENCE)
        .values(next_number=OrderSequence.next_number + 1)
    )
    result = db.session.execute(stmt)
    if result.rowcount:
        current = (
            db.session.query(OrderSequence.next_number)
            .filter_by(name=ORDER_SEQUENCE)
            .scalar()
        )
        return current - 1

    try:
        with db.session.begin_nested():
            db.session.add(OrderSequence(name=ORDER_SEQUENCE, next_number=2))
        return 1
    except IntegrityError:
        # Another checkout created the row first
        result = db.session.execute(stmt)
        current = (
            db.session.query(OrderSequence.next_number)
            .filter_by(name=ORDER_SEQUENCE)
            .scalar()
        )
        return current - 1


# =============================================================================
# Stock
# =============================================================================

def reserve_stock(event_pass: EventPass, quantity: int) -> None:
    """Add quantity to sold_quantity, refusing to go past max_quantity."""
    seen = event_pass.sold_quantity or 0
    if event_pass.max_quantity is not None and seen + quantity > event_pass.max_quantity:
        raise ConflictError(f"Not enough '{event_pass.name}' passes left")

    ok = compare_and_set(
        EventPass,
        event_pass.id,
        expected={"sold_quantity": seen},
        values={"sold_quantity": seen + quantity},
    )
    if not ok:
        raise ConflictError(f"'{event_pass.name}' stock changed, please retry")


def release_stock(order: Order) -> int:
    """
    Give an order's passes back to stock. Returns the number of tickets released.

    Does not commit. Safe to call twice: the second call is a no-op.
    """
    if order.stock_released:
        return 0

    released = 0
    for line in order.passes:
        if not line.pass_id:
            continue
        stmt = (
            update(EventPass)
            .where(EventPass.id == line.pass_id, EventPass.sold_quantity >= line.quantity)
            .values(sold_quantity=EventPass.sold_quantity - line.quantity)
            .execution_options(synchronize_session=False)
        )
        if db.session.execute(stmt).rowcount:
            released += line.quantity

    order.stock_released = True
    return released


# =============================================================================
# Helpers
# =============================================================================

def _pick(data: dict, *keys):
    """First present key; the public site posts camelCase, the API snake_case."""
    for key in keys:
        if key in data and data[key] is not None:
            return data[key]
    return None


def _primary_pass_type(names: list[str]) -> str:
    return names[0] if len(names) == 1 else MIXED_PASS_TYPE


def _customer_fields(customer: dict, *, email_required: bool) -> dict:
    name = _pick(customer, "full_name", "fullName", "name")
    fields = {
        "user_name": require_text({"v": name}, "v", label="full_name"),
        "user_phone": require_text({"v": _pick(customer, "phone")}, "v", label="phone"),
        "city": require_text({"v": _pick(customer, "city")}, "v", label="city"),
        "ville": optional_text({"v": _pick(customer, "ville")}, "v"),
        "user_email": optional_text({"v": _pick(customer, "email")}, "v"),
    }
    if email_required and not fields["user_email"]:
        raise ValidationError("email is required")
    if fields["user_email"]:
        fields["user_email"] = fields["user_email"].lower()
    return fields


def log_order_action(order_id: str, action: str, *, performed_by=None, performed_by_type: str, details=None) -> OrderLog:
    """
    Stage one audit row. Raises ValueError for an action or performer type
    outside the fixed vocabulary.
    """
    if action not in LOG_ACTIONS:
        raise ValueError(f"Unknown order log action '{action}'")
    if performed_by_type not in PERFORMER_TYPES:
        raise ValueError(f"Unknown performer type '{performed_by_type}'")
    entry = OrderLog(
        order_id=order_id,
        action=action,
        performed_by=str(performed_by) if performed_by is not None else None,
        performed_by_type=performed_by_type,
        details=details,
    )
    db.session.add(entry)
    return entry


# =============================================================================
# Cash on delivery (public site)
# =============================================================================

def create_cod_order(passes: list[dict], total_price, customer_info: dict, event_id: str | None) -> Order:
    """
    Create one ambassador_cash order for Sousse.

    Every check runs before the session is touched, so a rejected call
    leaves no partial state.

    Raises:
        ValidationError: wrong city, missing ville, bad passes or total
        NotFoundError: ambassador_id given but unknown
    """
    city = (_pick(customer_info, "city") or "").strip()
    ville = (_pick(customer_info, "ville") or "").strip()
    if city != COD_CITY:
        raise ValidationError(f"Cash on delivery is only available in {COD_CITY}")
    if not ville:
        raise ValidationError("ville is required for cash on delivery")

    customer = _customer_fields(customer_info, email_required=False)

    if not passes:
        raise ValidationError("Select at least one pass")

    lines = []
    for i, item in enumerate(passes):
        name = _pick(item, "pass_name", "passName", "pass_type")
        if not isinstance(name, str) or not name.strip():
            raise ValidationError(f"passes[{i}].pass_name is required")
        quantity = coerce_quantity(item.get("quantity"), field=f"passes[{i}].quantity")
        price = coerce_money(item.get("price"), field=f"passes[{i}].price")
        lines.append({
            "pass_id": _pick(item, "pass_id", "passId"),
            "pass_name": name.strip(),
            "quantity": quantity,
            "price": price,
        })

    total = coerce_money(total_price, field="total_price")
    computed = sum((line["price"] * line["quantity"] for line in lines), Decimal("0"))
    if computed != total:
        raise ValidationError(f"total_price {total} does not match passes total {computed}")

    ambassador_id = _pick(customer_info, "ambassador_id", "ambassadorId")
    if ambassador_id:
        ambassador = ambassador_service.require_ambassador(ambassador_id)
        ambassador_service.ensure_eligible_for_location(ambassador, city, ville)

    method = PaymentMethod.AMBASSADOR_CASH
    now = utcnow()
    order = Order(
        source=source_for(method).value,
        ambassador_id=ambassador_id or None,
        event_id=event_id or None,
        pass_type=_primary_pass_type([line["pass_name"] for line in lines]),
        quantity=sum(line["quantity"] for line in lines),
        total_price=total,
        payment_method=method.value,
        status=initial_status_for(method).value,
        notes={
            "all_passes": [
                {
                    "passId": line["pass_id"],
                    "passName": line["pass_name"],
                    "quantity": line["quantity"],
                    "price": float(line["price"]),
                }
                for line in lines
            ],
            "total_order_price": float(total),
            "pass_count": len(lines),
        },
        assigned_at=now if ambassador_id else None,
        created_at=now,
        updated_at=now,
        **customer,
    )

    try:
        order.order_number = next_order_number()
        db.session.add(order)
        db.session.flush()
        for line in lines:
            # Client-side ids are not trusted as catalogue references
            db.session.add(OrderPass(
                order_id=order.id,
                pass_type=line["pass_name"],
                quantity=line["quantity"],
                price=line["price"],
            ))
        if ambassador_id:
            log_order_action(order.id, "assigned", performed_by_type="system",
                 details={"ambassador_id": ambassador_id, "source": "cod"})
        db.session.commit()
    except Exception:
        db.session.rollback()
        raise

    return order


# =============================================================================
# Unified checkout
# =============================================================================

def _find_by_idempotency_key(key: str | None) -> Order | None:
    if not key:
        return None
    return db.session.query(Order).filter_by(idempotency_key=key).first()


def create_order(
    *,
    event_id: str,
    pass_selections: list[dict],
    customer: dict,
    payment_method,
    ambassador_id: str | None = None,
    idempotency_key: str | None = None,
) -> tuple[Order, bool]:
    """
    Server-priced checkout for any payment method.

    Returns (order, created). created is False when idempotency_key matched
    an existing order, which is returned unchanged.

    Raises:
        ValidationError, NotFoundError, ConflictError
    """
    existing = _find_by_idempotency_key(idempotency_key)
    if existing is not None:
        return existing, False

    method = parse_payment_method(payment_method)
    if method is None:
        raise ValidationError(f"Invalid payment method: {payment_method}")
    if not settings_service.is_payment_option_enabled(method.value):
        raise ConflictError(f"Payment method '{method.value}' is not available")

    fields = _customer_fields(customer, email_required=method in EMAIL_REQUIRED_METHODS)
    city, ville = fields["city"], fields["ville"]

    if ambassador_service.city_requires_ville(city) and not ville:
        raise ValidationError(f"ville is required for {city}")

    ambassador = None
    if method is PaymentMethod.AMBASSADOR_CASH:
        if not settings_service.get_sales_settings()["enabled"]:
            raise ConflictError("Ambassador sales are currently closed")
        if not ambassador_id:
            raise ValidationError("ambassador_id is required for cash payment")
        ambassador = ambassador_service.require_ambassador(ambassador_id)
        ambassador_service.ensure_eligible_for_location(ambassador, city, ville)

    if not event_id:
        raise ValidationError("event_id is required")
    if db.session.get(Event, event_id) is None:
        raise NotFoundError(f"Event {event_id} not found")

    if not pass_selections:
        raise ValidationError("Select at least one pass")

    quantities: dict[str, int] = {}
    for i, item in enumerate(pass_selections):
        pass_id = _pick(item, "pass_id", "passId")
        if not pass_id:
            raise ValidationError(f"passes[{i}].pass_id is required")
        qty = coerce_quantity(item.get("quantity"), field=f"passes[{i}].quantity")
        quantities[pass_id] = quantities.get(pass_id, 0) + qty

    event_passes = {
        p.id: p
        for p in db.session.query(EventPass).filter(EventPass.id.in_(list(quantities))).all()
    }
    for pass_id in quantities:
        event_pass = event_passes.get(pass_id)
        if event_pass is None or event_pass.event_id != event_id:
            raise NotFoundError(f"Pass {pass_id} not found for this event")
        if not event_pass.is_active:
            raise ValidationError(f"Pass '{event_pass.name}' is no longer on sale")

    status = initial_status_for(method)
    now = utcnow()

    try:
        lines = []
        for pass_id, qty in quantities.items():
            event_pass = event_passes[pass_id]
            reserve_stock(event_pass, qty)
            lines.append((event_pass, qty))

        total = sum((p.price * qty for p, qty in lines), Decimal("0"))
        order = Order(
            source=source_for(method).value,
            ambassador_id=ambassador.id if ambassador else None,
            event_id=event_id,
            pass_type=_primary_pass_type([p.name for p, _ in lines]),
            quantity=sum(qty for _, qty in lines),
            total_price=total,
            payment_method=method.value,
            status=status.value,
            notes={
                "all_passes": [
                    {"passId": p.id, "passName": p.name, "quantity": qty, "price": float(p.price)}
                    for p, qty in lines
                ],
                "total_order_price": float(total),
                "pass_count": len(lines),
            },
            idempotency_key=idempotency_key or None,
            assigned_at=now if ambassador else None,
            created_at=now,
            updated_at=now,
            **fields,
        )
        order.order_number = next_order_number()
        db.session.add(order)
        db.session.flush()

        for event_pass, qty in lines:
            db.session.add(OrderPass(
                order_id=order.id,
                pass_id=event_pass.id,
                pass_type=event_pass.name,
                quantity=qty,
                price=event_pass.price,
            ))

        if ambassador:
            log_order_action(order.id, "assigned", performed_by_type="system",
                 details={"ambassador_id": ambassador.id, "payment_method": method.value})

        db.session.commit()
    except IntegrityError:
        db.session.rollback()
        # Same idempotency_key committed by a concurrent request
        existing = _find_by_idempotency_key(idempotency_key)
        if existing is not None:
            return existing, False
        raise
    except Exception:
        db.session.rollback()
        raise

    return order, True


# =============================================================================
# Reads
# =============================================================================

def get_order(order_id: str) -> Order:
    order = db.session.get(Order, order_id) if order_id else None
    if order is None:
        raise NotFoundError(f"Order {order_id} not found")
    return order


def list_orders(filters: dict | None = None) -> list[Order]:
    """
    Admin order listing, newest first.

    Filters: status, payment_method, ambassador_id, city, ville, source,
    created_from / created_to (ISO dates), limit (default 100, max 500).
    REMOVED_BY_ADMIN rows are hidden unless that status is asked for.
    """
    filters = filters or {}
    q = db.session.query(Order)

    status = filters.get("status")
    if status:
        q = q.filter(Order.status == status)
    else:
        q = q.filter(Order.status != OrderStatus.REMOVED_BY_ADMIN.value)

    for key in ("payment_method", "ambassador_id", "city", "ville", "source"):
        if filters.get(key):
            q = q.filter(getattr(Order, key) == filters[key])

    try:
        created_from = parse_iso_datetime(filters.get("created_from"))
        created_to = parse_iso_datetime(filters.get("created_to"))
    except ValueError:
        raise ValidationError("created_from/created_to must be ISO-8601 dates")
    if created_from:
        q = q.filter(Order.created_at >= created_from)
    if created_to:
        q = q.filter(Order.created_at <= created_to)

    limit = filters.get("limit") or 100
    try:
        limit = max(1, min(int(limit), 500))
    except (TypeError, ValueError):
        raise ValidationError("limit must be an integer")

    return q.order_by(Order.created_at.desc()).limit(limit).all()
