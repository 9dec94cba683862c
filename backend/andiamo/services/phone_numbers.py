# Overview: Tunisian mobile number normalisation for SMS delivery.

from __future__ import annotations

import re

COUNTRY_CODE = "216"
VALID_PREFIXES = ("2", "4", "5", "9")
LOCAL_LENGTH = 8


def normalize_phone_number(phone) -> str | None:
    """
    Reduce a phone number to its 8 local digits, or None if it is not a
    Tunisian mobile number.

    "+216 20 123 456", "21620123456" and "20123456" all give "20123456".
    """
    if phone is None:
        return None
    digits = re.sub(r"\D", "", str(phone))
    if digits.startswith(COUNTRY_CODE):
        digits = digits[len(COUNTRY_CODE):]
    digits = digits.lstrip("0")

    if len(digits) != LOCAL_LENGTH or not digits.startswith(VALID_PREFIXES):
        return None
    return digits


def format_phone_for_display(phone) -> str:
    """'+216 20 123 456' for valid numbers, the input unchanged otherwise."""
    local = normalize_phone_number(phone)
    if local is None:
        return "" if phone is None else str(phone)
    return f"+{COUNTRY_CODE} {local[:2]} {local[2:5]} {local[5:]}"


def to_international(phone) -> str | None:
    local = normalize_phone_number(phone)
    return f"+{COUNTRY_CODE}{local}" if local else None


def deduplicate_phone_numbers(phones) -> tuple[list[str], list[str]]:
    """
    Returns (valid, invalid). valid holds normalised numbers in first-seen
    order without duplicates; invalid keeps the raw inputs that were rejected.
    """
    seen = set()
    valid = []
    invalid = []
    for raw in phones or []:
        local = normalize_phone_number(raw)
        if local is None:
            invalid.append(raw)
            continue
        if local not in seen:
            seen.add(local)
            valid.append(local)
    return valid, invalid
