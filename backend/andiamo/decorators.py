# Overview: Request decorators and shared error responses for API routes.

import uuid
from functools import wraps

from flask import jsonify, g, current_app
from flask_jwt_extended import verify_jwt_in_request, get_jwt, get_jwt_identity
from flask_jwt_extended.exceptions import JWTExtendedException
from jwt.exceptions import PyJWTError

from .extensions import db
from .services import auth_service
from .services.auth_service import ADMIN_ROLES


def require_admin(f):
    """
    Require a valid admin session cookie (adminToken).

    Sets g.current_admin to the Admin row behind the token.

    SECURITY: Returns 401 if:
    - No cookie, or the token is expired or tampered with
    - The admin was deleted or deactivated after the token was issued
    - The token email no longer matches the account
    Returns 403 if the role claim is not an admin role.
    """
    @wraps(f)
    def decorated_function(*args, **kwargs):
        try:
            verify_jwt_in_request(locations=["cookies"])
        except (JWTExtendedException, PyJWTError):
            return jsonify({"error": "Authentication required", "valid": False}), 401

        claims = get_jwt()
        if claims.get("role") not in ADMIN_ROLES:
            return jsonify({"error": "Admin access required"}), 403

        admin = auth_service.get_active_admin(get_jwt_identity(), claims.get("email"))
        if admin is None:
            return jsonify({"error": "Invalid or expired session", "valid": False}), 401

        g.current_admin = admin
        return f(*args, **kwargs)

    return decorated_function


def server_error(message: str):
    """
    Roll back, log with a correlation id, and answer a generic 500.

    Call from inside an except block so the traceback is captured.
    """
    db.session.rollback()
    correlation_id = uuid.uuid4().hex[:12]
    current_app.logger.exception("%s [correlation_id=%s]", message, correlation_id)
    return jsonify({"error": "Internal server error", "correlation_id": correlation_id}), 500
