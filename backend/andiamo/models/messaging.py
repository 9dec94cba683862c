from __future__ import annotations

from ..extensions import db
from andiamo.time_utils import to_utc_z, utcnow


class SmsLog(db.Model):
    """One row per SMS attempt, successful or not."""
    __tablename__ = "sms_logs"
    __table_args__ = {"sqlite_autoincrement": True}

    id = db.Column(db.Integer, primary_key=True)
    phone_number = db.Column(db.String(32), nullable=False, index=True)
    message = db.Column(db.Text, nullable=False)
    status = db.Column(db.String(16), nullable=False)  # sent, failed
    api_response = db.Column(db.Text, nullable=True)
    error_message = db.Column(db.Text, nullable=True)
    sent_at = db.Column(db.DateTime(timezone=True), nullable=True)
    created_at = db.Column(db.DateTime(timezone=True), nullable=False, default=utcnow)

    def to_dict(self) -> dict:
        return {
            "id": self.id,
            "phone_number": self.phone_number,
            "message": self.message,
            "status": self.status,
            "api_response": self.api_response,
            "error_message": self.error_message,
            "sent_at": to_utc_z(self.sent_at),
            "created_at": to_utc_z(self.created_at),
        }
