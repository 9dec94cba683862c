# Overview: Service-layer operations for SMS; WinSMS gateway calls and delivery log.

"""
SMS delivery through the WinSMS HTTP API.

- send_sms() makes one GET to WINSMS_API_URL and records an sms_logs row
  for every attempt (sent or failed). Failures raise SmsDeliveryError after
  the log row is committed. A log row that cannot be written also raises
  SmsDeliveryError, with the session rolled back.
- send_bulk_sms() normalises and de-duplicates numbers first, then sends one
  by one; a failing number never stops the batch.

The gateway answers JSON with code 'ok' (or '200') on success.
"""

from __future__ import annotations

import requests
from flask import current_app
from sqlalchemy.exc import SQLAlchemyError

from ..extensions import db
from ..models import SmsLog
from ..validation import ValidationError
from .phone_numbers import deduplicate_phone_numbers, normalize_phone_number, to_international
from andiamo.time_utils import utcnow


REQUEST_TIMEOUT_SECONDS = 10
SUCCESS_CODES = {"ok", "200"}
MAX_MESSAGE_LENGTH = 1000


class SmsDeliveryError(Exception):
    """Gateway refused the message, or could not be reached."""
    pass


def _record(phone: str, message: str, *, status: str, api_response=None, error=None) -> SmsLog:
    entry = SmsLog(
        phone_number=phone,
        message=message,
        status=status,
        api_response=api_response,
        error_message=error,
        sent_at=utcnow() if status == "sent" else None,
    )
    try:
        db.session.add(entry)
        db.session.commit()
    except SQLAlchemyError as exc:
        db.session.rollback()
        raise SmsDeliveryError(f"Could not record SMS log: {exc}") from exc
    return entry


def send_sms(phone, message: str) -> SmsLog:
    """
    Send one SMS.

    Raises:
        ValidationError: invalid number or empty message
        SmsDeliveryError: gateway not configured, unreachable or refusing
    """
    if not message or not message.strip():
        raise ValidationError("message is required")
    if len(message) > MAX_MESSAGE_LENGTH:
        raise ValidationError(f"message cannot exceed {MAX_MESSAGE_LENGTH} characters")

    local = normalize_phone_number(phone)
    if local is None:
        raise ValidationError(f"Invalid phone number: {phone}")

    api_key = current_app.config.get("WINSMS_API_KEY")
    if not api_key:
        _record(local, message, status="failed", error="SMS gateway not configured")
        raise SmsDeliveryError("SMS gateway not configured")

    params = {
        "action": "send-sms",
        "api_key": api_key,
        "to": to_international(local),
        "sms": message,
        "from": current_app.config.get("WINSMS_SENDER"),
        "response": "json",
    }

    try:
        resp = requests.get(
            current_app.config["WINSMS_API_URL"],
            params=params,
            timeout=REQUEST_TIMEOUT_SECONDS,
        )
    except requests.RequestException as exc:
        _record(local, message, status="failed", error=str(exc))
        raise SmsDeliveryError(f"SMS gateway unreachable: {exc}") from exc

    body = resp.text
    try:
        data = resp.json()
    except ValueError:
        data = {}

    code = str(data.get("code", "")).lower() if isinstance(data, dict) else ""
    if resp.ok and code in SUCCESS_CODES:
        return _record(local, message, status="sent", api_response=body)

    error = (data.get("message") if isinstance(data, dict) else None) or f"HTTP {resp.status_code}"
    _record(local, message, status="failed", api_response=body, error=error)
    raise SmsDeliveryError(error)


def send_bulk_sms(phones, message: str) -> dict:
    """
    Send the same message to many numbers.

    Returns {"sent", "failed", "total", "invalid", "results"} where results
    holds one {"phone", "success", "error"} per normalised number.
    """
    if not message or not message.strip():
        raise ValidationError("message is required")

    numbers, invalid = deduplicate_phone_numbers(phones)
    if not numbers:
        raise ValidationError("No valid phone numbers")

    results = []
    for phone in numbers:
        try:
            send_sms(phone, message)
            results.append({"phone": phone, "success": True, "error": None})
        except SmsDeliveryError as exc:
            results.append({"phone": phone, "success": False, "error": str(exc)})

    sent = sum(1 for r in results if r["success"])
    return {
        "sent": sent,
        "failed": len(results) - sent,
        "total": len(results),
        "invalid": invalid,
        "results": results,
    }
