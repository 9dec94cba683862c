from __future__ import annotations

from decimal import Decimal, InvalidOperation
from typing import Any


# Largest order total accepted (TND). Guards Numeric(10, 2) columns.
MAX_PRICE = Decimal("99999999.99")


class ValidationError(ValueError):
    """400-level input problem, raised before any write."""


class ConflictError(ValueError):
    """409-level business rule conflict (duplicate phone, stock exhausted)."""


class NotFoundError(LookupError):
    """404-level: the referenced order/ambassador/pass does not exist."""


def require_text(payload: dict, key: str, *, label: str | None = None) -> str:
    """Return a stripped, non-empty string field or raise ValidationError."""
    value = payload.get(key)
    if value is None or not isinstance(value, str) or not value.strip():
        raise ValidationError(f"{label or key} is required")
    return value.strip()


def optional_text(payload: dict, key: str) -> str | None:
    value = payload.get(key)
    if value is None:
        return None
    if not isinstance(value, str):
        raise ValidationError(f"{key} must be a string")
    value = value.strip()
    return value or None


def coerce_quantity(value: Any, *, field: str = "quantity") -> int:
    """
    Strict positive integer: rejects bools, floats, "1e3" and "2.0".
    """
    if isinstance(value, bool):
        raise ValidationError(f"{field} must be an integer")
    if isinstance(value, int):
        result = value
    elif isinstance(value, str):
        stripped = value.strip()
        if not stripped.isdigit():
            raise ValidationError(f"{field} must be a plain positive integer")
        result = int(stripped)
    else:
        raise ValidationError(f"{field} must be an integer")
    if result <= 0:
        raise ValidationError(f"{field} must be greater than zero")
    return result


def coerce_money(value: Any, *, field: str = "price") -> Decimal:
    """
    Parse a currency amount into a 2-place Decimal.

    Floats go through str() so 0.1 stays 0.1. Negative and out-of-range
    amounts are rejected.
    """
    if value is None or isinstance(value, bool):
        raise ValidationError(f"{field} is required")
    try:
        amount = Decimal(str(value).strip())
    except (InvalidOperation, ValueError):
        raise ValidationError(f"{field} must be a number")
    if not amount.is_finite():
        raise ValidationError(f"{field} must be a finite number")
    if amount < 0:
        raise ValidationError(f"{field} cannot be negative")
    if amount > MAX_PRICE:
        raise ValidationError(f"{field} cannot exceed {MAX_PRICE}")
    return amount.quantize(Decimal("0.01"))
