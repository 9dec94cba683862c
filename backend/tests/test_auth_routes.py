"""
Admin cookie sessions and ambassador login.
"""

import pytest
from flask_jwt_extended import create_access_token

from andiamo.extensions import db

ADMIN_EMAIL = "admin@andiamo.tn"
ADMIN_PASSWORD = "Password123!"
AMBASSADOR_PASSWORD = "secret123"


def _cookie(client, name="adminToken"):
    return client.get_cookie(name)


# =============================================================================
# ADMIN LOGIN / LOGOUT
# =============================================================================


class TestAdminLogin:

    def test_login_sets_cookie(self, client, admin):
        resp = client.post("/api/admin-login", json={"email": ADMIN_EMAIL, "password": ADMIN_PASSWORD})
        assert resp.status_code == 200
        assert resp.get_json()["admin"]["email"] == ADMIN_EMAIL
        assert "password" not in resp.get_json()["admin"]
        cookie = _cookie(client)
        assert cookie is not None
        assert cookie.http_only

    def test_email_is_case_insensitive(self, client, admin):
        resp = client.post("/api/admin-login", json={"email": "Admin@Andiamo.TN", "password": ADMIN_PASSWORD})
        assert resp.status_code == 200

    @pytest.mark.parametrize("body", [
        {"email": ADMIN_EMAIL, "password": "wrong"},
        {"email": "nobody@andiamo.tn", "password": ADMIN_PASSWORD},
    ])
    def test_bad_credentials_same_answer(self, client, admin, body):
        resp = client.post("/api/admin-login", json=body)
        assert resp.status_code == 401
        assert resp.get_json()["error"] == "Invalid credentials"

    def test_missing_fields(self, client, db_session):
        assert client.post("/api/admin-login", json={"email": ADMIN_EMAIL}).status_code == 400

    def test_inactive_admin_cannot_login(self, client, admin):
        admin.is_active = False
        db.session.commit()
        resp = client.post("/api/admin-login", json={"email": ADMIN_EMAIL, "password": ADMIN_PASSWORD})
        assert resp.status_code == 401

    def test_verify_and_logout(self, admin_client):
        resp = admin_client.get("/api/verify-admin")
        assert resp.status_code == 200
        assert resp.get_json()["valid"] is True

        assert admin_client.post("/api/admin-logout").status_code == 200
        assert admin_client.get("/api/verify-admin").status_code == 401


# =============================================================================
# TOKEN CHECKS
# =============================================================================


class TestRequireAdmin:

    def test_no_cookie(self, client, db_session):
        resp = client.get("/api/verify-admin")
        assert resp.status_code == 401
        assert resp.get_json()["valid"] is False

    def test_tampered_token(self, client, db_session):
        client.set_cookie("adminToken", "not.a.jwt")
        assert client.get("/api/verify-admin").status_code == 401

    def test_non_admin_role_forbidden(self, app, client, admin):
        token = create_access_token(identity=str(admin.id), additional_claims={"email": admin.email, "role": "ambassador"})
        client.set_cookie("adminToken", token)
        assert client.get("/api/verify-admin").status_code == 403

    def test_deactivated_after_login(self, admin_client, admin):
        admin.is_active = False
        db.session.commit()
        assert admin_client.get("/api/verify-admin").status_code == 401

    def test_email_claim_must_match(self, app, client, admin):
        token = create_access_token(identity=str(admin.id), additional_claims={"email": "old@andiamo.tn", "role": "admin"})
        client.set_cookie("adminToken", token)
        assert client.get("/api/verify-admin").status_code == 401


# =============================================================================
# AMBASSADOR LOGIN
# =============================================================================


class TestAmbassadorLogin:

    def test_approved(self, client, ambassador):
        resp = client.post("/api/ambassador-login", json={"phone": ambassador.phone, "password": AMBASSADOR_PASSWORD})
        assert resp.status_code == 200
        body = resp.get_json()["ambassador"]
        assert body["id"] == ambassador.id
        assert "password" not in body

    def test_wrong_password(self, client, ambassador):
        resp = client.post("/api/ambassador-login", json={"phone": ambassador.phone, "password": "nope"})
        assert resp.status_code == 401

    @pytest.mark.parametrize("status", ["pending", "rejected"])
    def test_not_approved(self, client, make_ambassador, status):
        amb = make_ambassador(status=status)
        resp = client.post("/api/ambassador-login", json={"phone": amb.phone, "password": AMBASSADOR_PASSWORD})
        assert resp.status_code == 403

    def test_missing_fields(self, client, db_session):
        assert client.post("/api/ambassador-login", json={"phone": "20123456"}).status_code == 400
