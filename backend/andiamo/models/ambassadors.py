from __future__ import annotations

from ..extensions import db
from andiamo.time_utils import to_utc_z, utcnow
from ._ids import new_id


class Ambassador(db.Model):
    """
    Reseller who delivers cash orders in person.

    status is the persisted application state: pending, approved, rejected
    (suspended for paused accounts). Only approved ambassadors are eligible
    for order assignment. commission_rate is kept for schema compatibility;
    income uses the tiered formula in ambassador_income.
    """
    __tablename__ = "ambassadors"
    __table_args__ = (
        db.Index("ix_ambassadors_status_city_ville", "status", "city", "ville"),
    )

    id = db.Column(db.String(36), primary_key=True, default=new_id)
    full_name = db.Column(db.String(255), nullable=False)
    phone = db.Column(db.String(32), nullable=False, unique=True, index=True)
    email = db.Column(db.String(255), nullable=True)
    city = db.Column(db.String(120), nullable=False)
    ville = db.Column(db.String(120), nullable=True)
    password = db.Column(db.String(255), nullable=False)
    status = db.Column(db.String(16), nullable=False, default="pending", index=True)
    commission_rate = db.Column(db.Numeric(5, 2), nullable=True)
    created_at = db.Column(db.DateTime(timezone=True), nullable=False, default=utcnow)
    updated_at = db.Column(db.DateTime(timezone=True), nullable=False, default=utcnow, onupdate=utcnow)

    def __repr__(self) -> str:
        return f"<Ambassador id={self.id} name={self.full_name!r} status={self.status}>"

    def to_dict(self) -> dict:
        # password hash is never serialized
        return {
            "id": self.id,
            "full_name": self.full_name,
            "phone": self.phone,
            "email": self.email,
            "city": self.city,
            "ville": self.ville,
            "status": self.status,
            "commission_rate": float(self.commission_rate) if self.commission_rate is not None else None,
            "created_at": to_utc_z(self.created_at),
        }
