# Overview: Service-layer operations for auth; bcrypt hashing and credential checks.

"""
Authentication for admins (email + password, JWT cookie issued by the route)
and ambassadors (phone + password).

SECURITY NOTES:
- Passwords hashed with bcrypt (cost factor 12)
- Admin passwords: 8+ chars with upper, lower, digit and special char
- Ambassador passwords: 6+ chars (set during the public application)
- Unknown account and wrong password produce the same error
"""

import re

import bcrypt

from ..extensions import db
from ..models import Admin, Ambassador
from andiamo.time_utils import utcnow


ADMIN_ROLES = {"admin", "super_admin"}
AMBASSADOR_MIN_PASSWORD = 6


class PasswordValidationError(Exception):
    """Raised when password doesn't meet strength requirements."""
    pass


class AuthenticationError(Exception):
    """Bad credentials (401)."""
    pass


class AccountStatusError(Exception):
    """Valid credentials but the account may not sign in yet (403)."""
    pass


def validate_password_strength(password: str) -> None:
    """
    Validate an admin password.

    Raises PasswordValidationError if requirements not met.
    """
    if len(password) < 8:
        raise PasswordValidationError("Password must be at least 8 characters long")

    if not re.search(r'[A-Z]', password):
        raise PasswordValidationError("Password must contain at least one uppercase letter")

    if not re.search(r'[a-z]', password):
        raise PasswordValidationError("Password must contain at least one lowercase letter")

    if not re.search(r'\d', password):
        raise PasswordValidationError("Password must contain at least one digit")

    if not re.search(r"[!@#$%^&*(),.'\":{}|<>_\-]", password):
        raise PasswordValidationError("Password must contain at least one special character")


def _hash(password: str) -> str:
    salt = bcrypt.gensalt(rounds=12)
    return bcrypt.hashpw(password.encode('utf-8'), salt).decode('utf-8')


def hash_password(password: str) -> str:
    """Strength-checked bcrypt hash for admin accounts."""
    validate_password_strength(password)
    return _hash(password)


def hash_ambassador_password(password: str) -> str:
    if not password or len(password) < AMBASSADOR_MIN_PASSWORD:
        raise PasswordValidationError(
            f"Password must be at least {AMBASSADOR_MIN_PASSWORD} characters long"
        )
    return _hash(password)


def verify_password(password: str, password_hash: str | None) -> bool:
    """
    Verify password against bcrypt hash.

    Malformed hashes (legacy plaintext rows) never match.
    """
    if not password or not password_hash:
        return False
    try:
        return bcrypt.checkpw(password.encode('utf-8'), password_hash.encode('utf-8'))
    except ValueError:
        return False


def create_admin(email: str, password: str, *, name: str | None = None, role: str = "admin") -> Admin:
    """
    Create an admin account.

    Raises:
        ValueError: unknown role or duplicate email
        PasswordValidationError: weak password
    """
    email = (email or "").strip().lower()
    if not email:
        raise ValueError("email is required")
    if role not in ADMIN_ROLES:
        raise ValueError(f"role must be one of: {', '.join(sorted(ADMIN_ROLES))}")
    if db.session.query(Admin.id).filter_by(email=email).first():
        raise ValueError(f"Admin '{email}' already exists")

    admin = Admin(email=email, name=name, password=hash_password(password), role=role, is_active=True)
    db.session.add(admin)
    db.session.commit()
    return admin


def authenticate_admin(email: str, password: str) -> Admin:
    admin = (
        db.session.query(Admin)
        .filter_by(email=(email or "").strip().lower())
        .first()
    )
    if admin is None or not admin.is_active or not verify_password(password, admin.password):
        raise AuthenticationError("Invalid credentials")

    admin.last_login_at = utcnow()
    db.session.commit()
    return admin


def get_active_admin(admin_id, email: str | None = None) -> Admin | None:
    """Admin behind a token, if it still exists and is active."""
    try:
        admin = db.session.get(Admin, int(admin_id))
    except (TypeError, ValueError):
        return None
    if admin is None or not admin.is_active:
        return None
    if email is not None and admin.email != email:
        return None
    return admin


def authenticate_ambassador(phone: str, password: str) -> Ambassador:
    """
    Phone + password login.

    Raises:
        AuthenticationError: unknown phone or wrong password
        AccountStatusError: application pending or rejected
    """
    ambassador = (
        db.session.query(Ambassador)
        .filter_by(phone=(phone or "").strip())
        .first()
    )
    if ambassador is None or not verify_password(password, ambassador.password):
        raise AuthenticationError("Invalid phone number or password")

    if ambassador.status == "pending":
        raise AccountStatusError("Your application is under review")
    if ambassador.status != "approved":
        raise AccountStatusError("Your application was not approved")

    return ambassador
