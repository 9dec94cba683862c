# Overview: Fixed SMS wording for order notifications.

"""
SMS bodies sent to customers and ambassadors.

Wording is fixed (French, with the brand signature); only the placeholders
change. Builders raise ValueError when a required value is missing so a
half-filled message is never sent.
"""

from __future__ import annotations

from decimal import Decimal, ROUND_HALF_UP

SIGNATURE = "We Create Memories"


def format_passes_text(passes) -> str:
    """'VIP x2, Standard x1' from order pass rows or dicts."""
    parts = []
    for p in passes or []:
        if isinstance(p, dict):
            name = p.get("pass_type") or p.get("passName") or p.get("pass_name")
            qty = p.get("quantity")
        else:
            name, qty = p.pass_type, p.quantity
        if name and qty:
            parts.append(f"{name} x{qty}")
    return ", ".join(parts)


def format_order_number(order) -> str:
    """order_number when assigned, else the first 8 id characters uppercased."""
    number = _get(order, "order_number")
    if number is not None:
        return str(number)
    order_id = _get(order, "id")
    if not order_id:
        raise ValueError("order has neither order_number nor id")
    return str(order_id)[:8].upper()


def format_total(amount) -> str:
    if amount is None:
        raise ValueError("total_price is required")
    return str(Decimal(str(amount)).quantize(Decimal("1"), rounding=ROUND_HALF_UP))


def _get(obj, key):
    return obj.get(key) if isinstance(obj, dict) else getattr(obj, key, None)


def _passes_of(order) -> str:
    passes = _get(order, "passes") or _get(order, "order_passes")
    if not passes:
        notes = _get(order, "notes") or {}
        passes = notes.get("all_passes") if isinstance(notes, dict) else None
    text = format_passes_text(passes)
    if not text:
        raise ValueError("order has no passes")
    return text


def build_client_order_confirmation_sms(order, ambassador) -> str:
    if ambassador is None:
        raise ValueError("ambassador is required")
    name = _get(ambassador, "full_name")
    phone = _get(ambassador, "phone")
    if not name or not phone:
        raise ValueError("ambassador name and phone are required")

    return (
        f"Commande #{format_order_number(order)} confirmée\n"
        f"Pass: {_passes_of(order)} | Total: {format_total(_get(order, 'total_price'))} DT\n"
        f"Ambassadeur: {name} – {phone}\n"
        f"{SIGNATURE}"
    )


def build_ambassador_new_order_sms(order) -> str:
    name = _get(order, "user_name")
    phone = _get(order, "user_phone")
    if not name or not phone:
        raise ValueError("customer name and phone are required")

    return (
        f"Nouvelle commande #{format_order_number(order)}\n"
        f"Client: {name} – {phone} Pass: {_passes_of(order)}\n"
        f"Total: {format_total(_get(order, 'total_price'))} DT"
    )


def build_client_admin_approval_sms(order) -> str:
    return (
        f"Paiement confirmé #{format_order_number(order)}\n"
        f"Total: {format_total(_get(order, 'total_price'))} DT\n"
        f"Billets envoyés par email (Check SPAM).\n"
        f"{SIGNATURE}"
    )
