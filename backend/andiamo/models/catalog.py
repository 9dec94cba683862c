from __future__ import annotations

from ..extensions import db
from andiamo.time_utils import to_utc_z, utcnow
from ._ids import new_id


class Event(db.Model):
    """An event tickets are sold for. Admin CRUD lives outside the order core."""
    __tablename__ = "events"

    id = db.Column(db.String(36), primary_key=True, default=new_id)
    name = db.Column(db.String(255), nullable=False)
    date = db.Column(db.DateTime(timezone=True), nullable=True)
    venue = db.Column(db.String(255), nullable=True)
    city = db.Column(db.String(120), nullable=True)
    created_at = db.Column(db.DateTime(timezone=True), nullable=False, default=utcnow)

    passes = db.relationship("EventPass", backref="event", lazy=True, order_by="EventPass.price")

    def to_dict(self) -> dict:
        return {
            "id": self.id,
            "name": self.name,
            "date": to_utc_z(self.date),
            "venue": self.venue,
            "city": self.city,
            "created_at": to_utc_z(self.created_at),
        }


class EventPass(db.Model):
    """
    A ticket tier ("VIP", "Standard") for one event.

    max_quantity NULL means unlimited stock; otherwise sold_quantity is
    moved with conditional updates so two buyers cannot oversell.
    """
    __tablename__ = "event_passes"
    __table_args__ = (
        db.CheckConstraint("sold_quantity >= 0", name="ck_event_passes_sold_non_negative"),
    )

    id = db.Column(db.String(36), primary_key=True, default=new_id)
    event_id = db.Column(db.String(36), db.ForeignKey("events.id"), nullable=False, index=True)
    name = db.Column(db.String(120), nullable=False)
    price = db.Column(db.Numeric(10, 2), nullable=False)
    is_active = db.Column(db.Boolean, nullable=False, default=True)
    max_quantity = db.Column(db.Integer, nullable=True)
    sold_quantity = db.Column(db.Integer, nullable=False, default=0)
    created_at = db.Column(db.DateTime(timezone=True), nullable=False, default=utcnow)

    @property
    def remaining(self) -> int | None:
        if self.max_quantity is None:
            return None
        return max(0, self.max_quantity - (self.sold_quantity or 0))

    def to_dict(self) -> dict:
        return {
            "id": self.id,
            "event_id": self.event_id,
            "name": self.name,
            "price": float(self.price) if self.price is not None else None,
            "is_active": self.is_active,
            "max_quantity": self.max_quantity,
            "sold_quantity": self.sold_quantity,
            "remaining": self.remaining,
        }
