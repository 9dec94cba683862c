# Overview: Site-wide settings stored in site_content, and payment option configuration.

from __future__ import annotations

from urllib.parse import urlparse

from flask import current_app

from ..extensions import db
from ..models import SiteContent, PaymentOption
from ..validation import ValidationError, NotFoundError
from . import ambassador_service
from .order_statuses import PaymentOptionType
from andiamo.time_utils import utcnow


SALES_SETTINGS_KEY = "sales_settings"
ORDER_TIMEOUT_KEY = "order_timeout_settings"

EXTERNAL_APP_FIELDS = ("app_name", "external_link", "app_image")


def get_content(key: str) -> dict | None:
    row = db.session.get(SiteContent, key)
    return dict(row.content or {}) if row else None


def set_content(key: str, content: dict) -> SiteContent:
    row = db.session.get(SiteContent, key)
    if row is None:
        row = SiteContent(key=key, content=content)
        db.session.add(row)
    else:
        row.content = content
        row.updated_at = utcnow()
    db.session.commit()
    return row


# =============================================================================
# Sales settings
# =============================================================================

def get_sales_settings() -> dict:
    """Ambassador sales are enabled unless explicitly switched off."""
    content = get_content(SALES_SETTINGS_KEY) or {}
    return {"enabled": content.get("enabled") is not False}


def update_sales_settings(enabled) -> dict:
    if not isinstance(enabled, bool):
        raise ValidationError("enabled must be a boolean")
    set_content(SALES_SETTINGS_KEY, {"enabled": enabled})
    return {"enabled": enabled}


def get_cash_payment_timeout_hours() -> int:
    content = get_content(ORDER_TIMEOUT_KEY) or {}
    hours = content.get("cash_payment_timeout_hours")
    if isinstance(hours, int) and not isinstance(hours, bool) and hours > 0:
        return hours
    return current_app.config["DEFAULT_CASH_TIMEOUT_HOURS"]


def update_order_timeout_settings(hours) -> dict:
    if isinstance(hours, bool) or not isinstance(hours, int) or hours <= 0:
        raise ValidationError("cash_payment_timeout_hours must be a positive integer")
    set_content(ORDER_TIMEOUT_KEY, {"cash_payment_timeout_hours": hours})
    return {"cash_payment_timeout_hours": hours}


# =============================================================================
# Payment options
# =============================================================================

def _option_type(value) -> PaymentOptionType:
    try:
        return PaymentOptionType(value)
    except ValueError:
        raise ValidationError(f"Invalid payment option type: {value}")


def list_payment_options() -> list[PaymentOption]:
    return db.session.query(PaymentOption).order_by(PaymentOption.option_type).all()


def list_enabled_payment_options() -> list[PaymentOption]:
    return (
        db.session.query(PaymentOption)
        .filter_by(enabled=True)
        .order_by(PaymentOption.option_type)
        .all()
    )


def is_payment_option_enabled(option_type) -> bool:
    """A missing row counts as disabled."""
    row = db.session.query(PaymentOption).filter_by(option_type=_option_type(option_type).value).first()
    return bool(row and row.enabled)


def validate_external_app_config(config: dict) -> tuple[bool, str | None]:
    app_name = (config.get("app_name") or "").strip()
    link = (config.get("external_link") or "").strip()

    if not app_name:
        return False, "App name is required"
    if not link:
        return False, "External link is required"

    parsed = urlparse(link)
    if parsed.scheme not in {"http", "https"} or not parsed.netloc:
        return False, "External link must be a valid URL"
    return True, None


def update_payment_option(option_type, config: dict) -> PaymentOption:
    option = _option_type(option_type)
    row = db.session.query(PaymentOption).filter_by(option_type=option.value).first()
    if row is None:
        raise NotFoundError(f"Payment option {option.value} not found")

    if "enabled" in config:
        if not isinstance(config["enabled"], bool):
            raise ValidationError("enabled must be a boolean")
        row.enabled = config["enabled"]

    if option is PaymentOptionType.EXTERNAL_APP:
        for field in EXTERNAL_APP_FIELDS:
            if field in config:
                value = config[field]
                setattr(row, field, value.strip() if isinstance(value, str) else value)
        if row.enabled:
            ok, error = validate_external_app_config({
                "app_name": row.app_name,
                "external_link": row.external_link,
            })
            if not ok:
                db.session.rollback()
                raise ValidationError(error)

    row.updated_at = utcnow()
    db.session.commit()
    return row


def ensure_default_payment_options() -> list[PaymentOption]:
    """Create missing rows (online enabled, others disabled). Idempotent."""
    defaults = {
        PaymentOptionType.ONLINE: True,
        PaymentOptionType.EXTERNAL_APP: False,
        PaymentOptionType.AMBASSADOR_CASH: False,
    }
    existing = {row.option_type for row in list_payment_options()}
    for option, enabled in defaults.items():
        if option.value not in existing:
            db.session.add(PaymentOption(option_type=option.value, enabled=enabled))
    db.session.commit()
    return list_payment_options()


def get_available_payment_options(city: str | None = None, ville: str | None = None) -> list[PaymentOption]:
    """
    Enabled options a customer may pick. Cash on delivery is hidden when no
    approved ambassador covers the location (or no location was given).
    """
    options = list_enabled_payment_options()
    cash = PaymentOptionType.AMBASSADOR_CASH.value
    if any(o.option_type == cash for o in options):
        if not city or not ambassador_service.has_active_ambassadors(city, ville):
            options = [o for o in options if o.option_type != cash]
    return options
