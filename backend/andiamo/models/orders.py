from __future__ import annotations

from ..extensions import db
from andiamo.time_utils import to_utc_z, utcnow
from ._ids import new_id


def _money(value):
    return float(value) if value is not None else None


class Order(db.Model):
    """
    Ticket order, one row per checkout.

    status is one of the six OrderStatus values and only moves through the
    transition table in services/order_statuses.py. Orders are never
    deleted; REMOVED_BY_ADMIN is the soft-delete state.

    notes keeps the per-pass breakdown ({"all_passes": [...]}) next to the
    order_passes rows so the order can be rebuilt from the order row alone.
    """
    __tablename__ = "orders"
    __table_args__ = (
        db.Index("ix_orders_status_payment_created", "status", "payment_method", "created_at"),
        db.Index("ix_orders_ambassador_status", "ambassador_id", "status"),
    )

    id = db.Column(db.String(36), primary_key=True, default=new_id)
    order_number = db.Column(db.Integer, nullable=True, unique=True)

    # platform_online, ambassador_manual (platform_cod is legacy, read-only)
    source = db.Column(db.String(32), nullable=False, index=True)

    user_name = db.Column(db.String(255), nullable=False)
    user_phone = db.Column(db.String(32), nullable=False)
    user_email = db.Column(db.String(255), nullable=True)
    city = db.Column(db.String(120), nullable=False)
    ville = db.Column(db.String(120), nullable=True)

    ambassador_id = db.Column(db.String(36), db.ForeignKey("ambassadors.id"), nullable=True, index=True)
    event_id = db.Column(db.String(36), db.ForeignKey("events.id"), nullable=True, index=True)

    pass_type = db.Column(db.String(120), nullable=True)  # sole pass name, or "mixed"
    quantity = db.Column(db.Integer, nullable=False)
    total_price = db.Column(db.Numeric(10, 2), nullable=False)

    payment_method = db.Column(db.String(32), nullable=False)
    status = db.Column(db.String(32), nullable=False, index=True)

    # Gateway fields (online / external app)
    payment_status = db.Column(db.String(16), nullable=True)
    payment_gateway_reference = db.Column(db.String(255), nullable=True)
    external_app_reference = db.Column(db.String(255), nullable=True)
    payment_response_data = db.Column(db.JSON, nullable=True)

    # Set together with status=CANCELLED, never otherwise
    cancellation_reason = db.Column(db.Text, nullable=True)
    cancelled_by = db.Column(db.String(16), nullable=True)  # admin, ambassador, system

    notes = db.Column(db.JSON, nullable=True)
    idempotency_key = db.Column(db.String(64), nullable=True, unique=True)
    stock_released = db.Column(db.Boolean, nullable=False, default=False)
    removed_by = db.Column(db.String(64), nullable=True)

    assigned_at = db.Column(db.DateTime(timezone=True), nullable=True)
    accepted_at = db.Column(db.DateTime(timezone=True), nullable=True)
    completed_at = db.Column(db.DateTime(timezone=True), nullable=True)
    cancelled_at = db.Column(db.DateTime(timezone=True), nullable=True)
    removed_at = db.Column(db.DateTime(timezone=True), nullable=True)
    created_at = db.Column(db.DateTime(timezone=True), nullable=False, default=utcnow)
    updated_at = db.Column(db.DateTime(timezone=True), nullable=False, default=utcnow)

    passes = db.relationship(
        "OrderPass",
        backref="order",
        lazy=True,
        cascade="all, delete-orphan",
        order_by="OrderPass.id",
    )
    ambassador = db.relationship("Ambassador", backref=db.backref("orders", lazy=True))
    event = db.relationship("Event")

    def __repr__(self) -> str:
        return f"<Order id={self.id} number={self.order_number} status={self.status}>"

    def to_dict(self, *, include_passes: bool = True) -> dict:
        data = {
            "id": self.id,
            "order_number": self.order_number,
            "source": self.source,
            "user_name": self.user_name,
            "user_phone": self.user_phone,
            "user_email": self.user_email,
            "city": self.city,
            "ville": self.ville,
            "ambassador_id": self.ambassador_id,
            "event_id": self.event_id,
            "pass_type": self.pass_type,
            "quantity": self.quantity,
            "total_price": _money(self.total_price),
            "payment_method": self.payment_method,
            "status": self.status,
            "payment_status": self.payment_status,
            "payment_gateway_reference": self.payment_gateway_reference,
            "external_app_reference": self.external_app_reference,
            "cancellation_reason": self.cancellation_reason,
            "cancelled_by": self.cancelled_by,
            "notes": self.notes,
            "stock_released": self.stock_released,
            "assigned_at": to_utc_z(self.assigned_at),
            "accepted_at": to_utc_z(self.accepted_at),
            "completed_at": to_utc_z(self.completed_at),
            "cancelled_at": to_utc_z(self.cancelled_at),
            "removed_at": to_utc_z(self.removed_at),
            "created_at": to_utc_z(self.created_at),
            "updated_at": to_utc_z(self.updated_at),
        }
        if include_passes:
            data["order_passes"] = [p.to_dict() for p in self.passes]
        return data


class OrderPass(db.Model):
    """
    One pass tier within an order. price is the unit price at checkout,
    copied from event_passes and never re-read.
    """
    __tablename__ = "order_passes"
    __table_args__ = {"sqlite_autoincrement": True}

    id = db.Column(db.Integer, primary_key=True)
    order_id = db.Column(db.String(36), db.ForeignKey("orders.id"), nullable=False, index=True)
    pass_id = db.Column(db.String(36), db.ForeignKey("event_passes.id"), nullable=True, index=True)
    pass_type = db.Column(db.String(120), nullable=False)
    quantity = db.Column(db.Integer, nullable=False)
    price = db.Column(db.Numeric(10, 2), nullable=False)

    def to_dict(self) -> dict:
        return {
            "id": self.id,
            "order_id": self.order_id,
            "pass_id": self.pass_id,
            "pass_type": self.pass_type,
            "quantity": self.quantity,
            "price": _money(self.price),
        }


class OrderLog(db.Model):
    """
    Append-only audit trail. One row per state-changing action; rows are
    never updated or deleted.
    """
    __tablename__ = "order_logs"
    __table_args__ = (
        db.Index("ix_order_logs_created", "created_at"),
        {"sqlite_autoincrement": True},
    )

    id = db.Column(db.Integer, primary_key=True)
    order_id = db.Column(db.String(36), db.ForeignKey("orders.id"), nullable=False, index=True)
    # assigned, accepted, completed, cancelled, reassigned, status_changed, admin_refunded
    action = db.Column(db.String(32), nullable=False)
    performed_by = db.Column(db.String(64), nullable=True)
    performed_by_type = db.Column(db.String(16), nullable=False)  # admin, ambassador, system
    details = db.Column(db.JSON, nullable=True)
    created_at = db.Column(db.DateTime(timezone=True), nullable=False, default=utcnow)

    def to_dict(self) -> dict:
        return {
            "id": self.id,
            "order_id": self.order_id,
            "action": self.action,
            "performed_by": self.performed_by,
            "performed_by_type": self.performed_by_type,
            "details": self.details,
            "created_at": to_utc_z(self.created_at),
        }


class OrderSequence(db.Model):
    """Single-row counter behind orders.order_number."""
    __tablename__ = "order_sequences"

    name = db.Column(db.String(32), primary_key=True)
    next_number = db.Column(db.Integer, nullable=False, default=1)
