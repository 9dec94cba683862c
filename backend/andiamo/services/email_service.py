# Overview: Outgoing email over SMTP.

from __future__ import annotations

import smtplib
from email.mime.multipart import MIMEMultipart
from email.mime.text import MIMEText

from flask import current_app

from ..validation import ValidationError


class EmailDeliveryError(Exception):
    """SMTP not configured, unreachable, or refused the message."""
    pass


def send_email(to: str, subject: str, html: str) -> None:
    """
    Send one HTML email with the configured SMTP account.

    Raises:
        ValidationError: missing recipient, subject or body
        EmailDeliveryError: configuration or SMTP failure
    """
    if not to or "@" not in to:
        raise ValidationError("A valid recipient email is required")
    if not subject or not subject.strip():
        raise ValidationError("subject is required")
    if not html or not html.strip():
        raise ValidationError("html is required")

    cfg = current_app.config
    host = cfg.get("SMTP_HOST")
    sender = cfg.get("EMAIL_FROM") or cfg.get("SMTP_USER")
    if not host or not sender:
        raise EmailDeliveryError("SMTP is not configured")

    msg = MIMEMultipart("alternative")
    msg["From"] = sender
    msg["To"] = to
    msg["Subject"] = subject
    msg.attach(MIMEText(html, "html", "utf-8"))

    try:
        with smtplib.SMTP(host, cfg.get("SMTP_PORT", 587), timeout=15) as server:
            server.starttls()
            if cfg.get("SMTP_USER"):
                server.login(cfg["SMTP_USER"], cfg.get("SMTP_PASSWORD") or "")
            server.sendmail(sender, [to], msg.as_string())
    except (smtplib.SMTPException, OSError) as exc:
        raise EmailDeliveryError(f"Email delivery failed: {exc}") from exc
