from __future__ import annotations

from ..extensions import db
from andiamo.time_utils import to_utc_z, utcnow


class SiteContent(db.Model):
    """
    Key/JSON store for site-wide settings and copy.

    Keys used by the order core: sales_settings, order_timeout_settings.
    """
    __tablename__ = "site_content"

    key = db.Column(db.String(128), primary_key=True)
    content = db.Column(db.JSON, nullable=False, default=dict)
    updated_at = db.Column(db.DateTime(timezone=True), nullable=False, default=utcnow, onupdate=utcnow)

    def to_dict(self) -> dict:
        return {
            "key": self.key,
            "content": self.content,
            "updated_at": to_utc_z(self.updated_at),
        }


class PaymentOption(db.Model):
    """One row per payment option type (online, external_app, ambassador_cash)."""
    __tablename__ = "payment_options"
    __table_args__ = {"sqlite_autoincrement": True}

    id = db.Column(db.Integer, primary_key=True)
    option_type = db.Column(db.String(32), nullable=False, unique=True)
    enabled = db.Column(db.Boolean, nullable=False, default=False)

    # external_app only
    app_name = db.Column(db.String(120), nullable=True)
    external_link = db.Column(db.String(512), nullable=True)
    app_image = db.Column(db.String(512), nullable=True)

    updated_at = db.Column(db.DateTime(timezone=True), nullable=False, default=utcnow, onupdate=utcnow)

    def to_dict(self) -> dict:
        return {
            "id": self.id,
            "option_type": self.option_type,
            "enabled": self.enabled,
            "app_name": self.app_name,
            "external_link": self.external_link,
            "app_image": self.app_image,
            "updated_at": to_utc_z(self.updated_at),
        }
