# backend/andiamo/routes/auth.py
"""
Admin and ambassador sign-in.

- POST /api/admin-login     email + password -> adminToken cookie (JWT)
- POST /api/admin-logout    clears the cookie
- GET  /api/verify-admin    validates the cookie, returns the admin
- POST /api/ambassador-login  phone + password -> ambassador profile

SECURITY:
- The JWT carries the admin id as identity and {email, role} as claims
- The cookie is HttpOnly; Secure/Domain come from configuration
- Unknown account and wrong password give the same 401
"""

from flask import Blueprint, request, jsonify, g
from flask_jwt_extended import create_access_token, set_access_cookies, unset_jwt_cookies

from ..decorators import require_admin, server_error
from ..services import auth_service
from ..services.auth_service import AuthenticationError, AccountStatusError


auth_bp = Blueprint("auth", __name__, url_prefix="/api")


@auth_bp.post("/admin-login")
def admin_login_route():
    try:
        data = request.get_json(silent=True) or {}
        email = data.get("email")
        password = data.get("password")

        if not all([email, password]):
            return jsonify({"error": "email and password required"}), 400

        admin = auth_service.authenticate_admin(email, password)

        token = create_access_token(
            identity=str(admin.id),
            additional_claims={"email": admin.email, "role": admin.role},
        )
        response = jsonify({"success": True, "admin": admin.to_dict()})
        set_access_cookies(response, token)
        return response, 200

    except AuthenticationError as e:
        return jsonify({"error": str(e)}), 401
    except Exception:
        return server_error("Failed to login admin")


@auth_bp.post("/admin-logout")
def admin_logout_route():
    response = jsonify({"success": True})
    unset_jwt_cookies(response)
    return response, 200


@auth_bp.get("/verify-admin")
@require_admin
def verify_admin_route():
    return jsonify({"valid": True, "admin": g.current_admin.to_dict()}), 200


@auth_bp.post("/ambassador-login")
def ambassador_login_route():
    """
    Error responses:
        400: phone or password missing
        401: unknown phone or wrong password
        403: application pending or rejected
    """
    try:
        data = request.get_json(silent=True) or {}
        phone = data.get("phone")
        password = data.get("password")

        if not all([phone, password]):
            return jsonify({"error": "phone and password required"}), 400

        ambassador = auth_service.authenticate_ambassador(phone, password)
        return jsonify({"success": True, "ambassador": ambassador.to_dict()}), 200

    except AuthenticationError as e:
        return jsonify({"error": str(e)}), 401
    except AccountStatusError as e:
        return jsonify({"error": str(e)}), 403
    except Exception:
        return server_error("Failed to login ambassador")
