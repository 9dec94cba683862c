"""
Ambassador selection, lookup and applications.
"""

from unittest import mock

import pytest
from sqlalchemy.exc import OperationalError

from andiamo.extensions import db
from andiamo.models import Ambassador
from andiamo.services import ambassador_service
from andiamo.services.auth_service import verify_password, PasswordValidationError
from andiamo.validation import ValidationError, ConflictError, NotFoundError


# =============================================================================
# SELECTION
# =============================================================================


class TestSelection:

    def test_tunis_ariana_returns_exactly_the_matching_two(self, db_session, make_ambassador):
        a1 = make_ambassador(city="Tunis", ville="Ariana")
        a2 = make_ambassador(city="Tunis", ville="Ariana")
        make_ambassador(city="Tunis", ville="La Marsa")
        make_ambassador(city="Sousse", ville="Ariana")
        make_ambassador(city="Tunis", ville="Ariana", status="pending")

        result = ambassador_service.get_active_ambassadors_by_location("Tunis", "Ariana")

        assert {a.id for a in result} == {a1.id, a2.id}

    def test_city_only_ignores_ville(self, db_session, make_ambassador):
        make_ambassador(city="Monastir", ville=None)
        make_ambassador(city="Monastir", ville="Skanes")
        assert len(ambassador_service.get_active_ambassadors_by_location("Monastir")) == 2

    def test_match_is_exact(self, db_session, make_ambassador):
        make_ambassador(city="Sousse", ville="Sahloul")
        assert ambassador_service.get_active_ambassadors_by_location("sousse", "Sahloul") == []

    def test_empty_result_is_not_an_error(self, db_session):
        assert ambassador_service.get_active_ambassadors_by_location("Bizerte") == []
        assert ambassador_service.has_active_ambassadors("Bizerte") is False

    def test_order_is_shuffled_across_calls(self, db_session, make_ambassador):
        for _ in range(4):
            make_ambassador(city="Sousse", ville="Sahloul")

        orderings = {
            tuple(a.id for a in ambassador_service.get_active_ambassadors_by_location("Sousse", "Sahloul"))
            for _ in range(100)
        }
        assert len(orderings) > 1

    def test_has_active_ambassadors(self, db_session, make_ambassador):
        make_ambassador(city="Sousse", ville="Sahloul")
        make_ambassador(city="Sousse", ville="Khezama", status="rejected")
        assert ambassador_service.has_active_ambassadors("Sousse", "Sahloul")
        assert not ambassador_service.has_active_ambassadors("Sousse", "Khezama")

    def test_database_error_propagates(self, db_session):
        with mock.patch.object(
            ambassador_service, "_eligible_query",
            side_effect=OperationalError("SELECT", {}, Exception("db down")),
        ):
            with pytest.raises(OperationalError):
                ambassador_service.get_active_ambassadors_by_location("Sousse")


class TestEligibility:

    def test_require_ambassador_not_found(self, db_session):
        with pytest.raises(NotFoundError):
            ambassador_service.require_ambassador("missing-id")

    def test_ineligible_is_validation_not_not_found(self, db_session, make_ambassador):
        amb = make_ambassador(city="Tunis", ville="Ariana")
        with pytest.raises(ValidationError):
            ambassador_service.ensure_eligible_for_location(amb, "Sousse", "Sahloul")

    def test_pending_is_ineligible(self, db_session, make_ambassador):
        amb = make_ambassador(status="pending")
        with pytest.raises(ValidationError):
            ambassador_service.ensure_eligible_for_location(amb, amb.city, amb.ville)


# =============================================================================
# APPLICATIONS
# =============================================================================


class TestApplications:

    def _payload(self, **overrides):
        data = {
            "full_name": "Yasmine Trabelsi",
            "phone": "55123456",
            "password": "secret123",
            "city": "Sousse",
            "ville": "Khezama",
        }
        data.update(overrides)
        return data

    def test_submit_creates_pending_with_hash(self, db_session):
        amb = ambassador_service.submit_application(self._payload())
        assert amb.status == "pending"
        assert amb.password != "secret123"
        assert verify_password("secret123", amb.password)

    def test_duplicate_phone_conflicts(self, db_session):
        ambassador_service.submit_application(self._payload())
        with pytest.raises(ConflictError):
            ambassador_service.submit_application(self._payload(full_name="Other"))

    def test_ville_required_for_sousse(self, db_session):
        with pytest.raises(ValidationError):
            ambassador_service.submit_application(self._payload(ville=""))

    def test_short_password_rejected(self, db_session):
        with pytest.raises(PasswordValidationError):
            ambassador_service.submit_application(self._payload(password="123"))
        assert db.session.query(Ambassador).count() == 0

    def test_approve_then_eligible(self, db_session):
        amb = ambassador_service.submit_application(self._payload())
        ambassador_service.update_application_status(amb.id, "approved")
        assert ambassador_service.has_active_ambassadors("Sousse", "Khezama")

    def test_invalid_decision(self, db_session):
        amb = ambassador_service.submit_application(self._payload())
        with pytest.raises(ValidationError):
            ambassador_service.update_application_status(amb.id, "maybe")
