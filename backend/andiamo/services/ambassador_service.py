# Overview: Service-layer operations for ambassadors; selection, lookup and applications.

"""
Ambassador selection and application workflow.

SELECTION:
- Eligible = persisted status 'approved' AND exact city match AND, when a
  ville is given, exact ville match.
- get_active_ambassadors_by_location() returns the eligible set shuffled
  (Fisher-Yates via random.shuffle) on every call so no reseller is
  favoured by name or insertion order. Callers must not rely on ordering.
- An empty list is a normal answer ("no ambassadors available").
- Database errors propagate; nothing here retries or caches.

APPLICATIONS:
- submit_application() stores a 'pending' ambassador with a bcrypt hash.
- update_application_status() approves or rejects it (admin).
"""

from __future__ import annotations

import random

from sqlalchemy import func

from ..extensions import db
from ..models import Ambassador
from ..validation import ValidationError, ConflictError, NotFoundError, require_text, optional_text
from .auth_service import hash_ambassador_password
from andiamo.time_utils import utcnow


APPROVED = "approved"
PENDING = "pending"
REJECTED = "rejected"
APPLICATION_DECISIONS = {APPROVED, REJECTED}

# Cities where delivery is organised per neighbourhood
CITIES_REQUIRING_VILLE = {"Sousse", "Tunis"}


def city_requires_ville(city: str | None) -> bool:
    return (city or "").strip() in CITIES_REQUIRING_VILLE


def _eligible_query(city: str, ville: str | None = None):
    q = db.session.query(Ambassador).filter(
        Ambassador.status == APPROVED,
        Ambassador.city == city,
    )
    if ville:
        q = q.filter(Ambassador.ville == ville)
    return q


def get_active_ambassadors_by_location(city: str, ville: str | None = None) -> list[Ambassador]:
    """
    Approved ambassadors for a location, in random order.

    A fresh list is shuffled per call; the module-level RNG keeps no
    per-caller state.
    """
    ambassadors = _eligible_query(city, ville).all()
    random.shuffle(ambassadors)
    return ambassadors


def has_active_ambassadors(city: str, ville: str | None = None) -> bool:
    """Existence check without loading rows (COD availability)."""
    count = (
        _eligible_query(city, ville)
        .with_entities(func.count(Ambassador.id))
        .scalar()
    )
    return (count or 0) > 0


def get_all_active_ambassadors() -> list[Ambassador]:
    return (
        db.session.query(Ambassador)
        .filter(Ambassador.status == APPROVED)
        .order_by(Ambassador.full_name.asc())
        .all()
    )


def get_ambassador_by_id(ambassador_id: str) -> Ambassador | None:
    return db.session.get(Ambassador, ambassador_id)


def require_ambassador(ambassador_id: str) -> Ambassador:
    ambassador = get_ambassador_by_id(ambassador_id) if ambassador_id else None
    if ambassador is None:
        raise NotFoundError(f"Ambassador {ambassador_id} not found")
    return ambassador


def ensure_eligible_for_location(ambassador: Ambassador, city: str, ville: str | None) -> None:
    """
    Raise ValidationError unless the ambassador may deliver to city/ville.

    Exists-but-ineligible is a validation problem, not a not-found.
    """
    if ambassador.status != APPROVED:
        raise ValidationError("Selected ambassador is not active")
    if ambassador.city != city:
        raise ValidationError("Selected ambassador does not serve this city")
    if ville and ambassador.ville != ville:
        raise ValidationError("Selected ambassador does not serve this ville")


def submit_application(data: dict) -> Ambassador:
    full_name = require_text(data, "full_name")
    phone = require_text(data, "phone")
    password = data.get("password") or ""
    city = require_text(data, "city")
    ville = optional_text(data, "ville")
    email = optional_text(data, "email")

    if city_requires_ville(city) and not ville:
        raise ValidationError(f"ville is required for {city}")

    existing = db.session.query(Ambassador.id).filter_by(phone=phone).first()
    if existing:
        raise ConflictError("An application with this phone number already exists")

    ambassador = Ambassador(
        full_name=full_name,
        phone=phone,
        email=email.lower() if email else None,
        city=city,
        ville=ville,
        password=hash_ambassador_password(password),
        status=PENDING,
    )
    db.session.add(ambassador)
    db.session.commit()
    return ambassador


def update_application_status(ambassador_id: str, status: str) -> Ambassador:
    decision = (status or "").strip().lower()
    if decision not in APPLICATION_DECISIONS:
        raise ValidationError("status must be 'approved' or 'rejected'")

    ambassador = require_ambassador(ambassador_id)
    ambassador.status = decision
    ambassador.updated_at = utcnow()
    db.session.commit()
    return ambassador
