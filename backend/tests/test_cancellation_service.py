"""
Ambassador and system cancellations, and the unpaid-cash timeout sweep.
"""

from datetime import timedelta
from unittest import mock

import pytest

from andiamo.extensions import db
from andiamo.models import Order, OrderLog
from andiamo.services import cancellation_service, settings_service
from andiamo.services.order_statuses import OrderStatus, PaymentMethod, OrderTransitionError
from andiamo.time_utils import utcnow
from andiamo.validation import ValidationError, NotFoundError


class TestCancelByAmbassador:

    def test_owner_cancels_pending(self, db_session, make_order, ambassador):
        order = make_order(ambassador=ambassador)
        result = cancellation_service.cancel_by_ambassador(order.id, ambassador.id, "Client changed mind")
        assert result.status == "CANCELLED"
        assert result.cancelled_by == "ambassador"
        entry = db.session.query(OrderLog).filter_by(order_id=order.id).one()
        assert entry.performed_by_type == "ambassador"
        assert entry.performed_by == ambassador.id

    def test_paid_cannot_be_cancelled_by_ambassador(self, db_session, make_order, ambassador):
        order = make_order(ambassador=ambassador, status=OrderStatus.PAID)
        with pytest.raises(OrderTransitionError):
            cancellation_service.cancel_by_ambassador(order.id, ambassador.id, "refund please")

    def test_other_ambassadors_order_looks_missing(self, db_session, make_order, make_ambassador):
        owner = make_ambassador()
        intruder = make_ambassador()
        order = make_order(ambassador=owner)
        with pytest.raises(NotFoundError):
            cancellation_service.cancel_by_ambassador(order.id, intruder.id, "mine now")

    def test_reason_required(self, db_session, make_order, ambassador):
        order = make_order(ambassador=ambassador)
        with pytest.raises(ValidationError):
            cancellation_service.cancel_by_ambassador(order.id, ambassador.id, None)


class TestCancelBySystem:

    def test_cancels_pending(self, db_session, make_order):
        order = make_order()
        assert cancellation_service.cancel_by_system(order.id, "Payment failed") is True
        stored = db.session.get(Order, order.id)
        assert stored.status == "CANCELLED"
        assert stored.cancelled_by == "system"

    @pytest.mark.parametrize("status", [OrderStatus.PAID, OrderStatus.CANCELLED, OrderStatus.REMOVED_BY_ADMIN])
    def test_skips_non_cancellable(self, db_session, make_order, status):
        order = make_order(status=status)
        assert cancellation_service.cancel_by_system(order.id, "timeout") is False
        assert db.session.query(OrderLog).count() == 0

    def test_skips_missing(self, db_session):
        assert cancellation_service.cancel_by_system("missing", "timeout") is False


class TestTimeoutSweep:

    def test_only_old_pending_cash_orders(self, db_session, make_order):
        old = make_order(created_at=utcnow() - timedelta(hours=30))
        fresh = make_order(created_at=utcnow() - timedelta(hours=2))
        old_paid = make_order(status=OrderStatus.PAID, created_at=utcnow() - timedelta(hours=30))
        old_online = make_order(status=OrderStatus.PENDING_ONLINE, payment_method=PaymentMethod.ONLINE,
                                created_at=utcnow() - timedelta(hours=30))

        result = cancellation_service.check_and_cancel_timeouts()

        assert result["checked"] == 1
        assert result["cancelled"] == 1
        assert result["errors"] == 0
        assert db.session.get(Order, old.id).status == "CANCELLED"
        assert db.session.get(Order, fresh.id).status == "PENDING_CASH"
        assert db.session.get(Order, old_paid.id).status == "PAID"
        assert db.session.get(Order, old_online.id).status == "PENDING_ONLINE"

    def test_uses_configured_timeout(self, db_session, make_order):
        settings_service.update_order_timeout_settings(1)
        order = make_order(created_at=utcnow() - timedelta(hours=2))
        result = cancellation_service.check_and_cancel_timeouts()
        assert result["timeout_hours"] == 1
        assert db.session.get(Order, order.id).status == "CANCELLED"

    def test_one_failure_does_not_stop_the_sweep(self, db_session, make_order):
        first = make_order(created_at=utcnow() - timedelta(hours=40))
        second = make_order(created_at=utcnow() - timedelta(hours=30))
        real = cancellation_service.cancel_by_system

        def flaky(order_id, reason):
            if order_id == first.id:
                raise RuntimeError("db hiccup")
            return real(order_id, reason)

        with mock.patch.object(cancellation_service, "cancel_by_system", side_effect=flaky):
            result = cancellation_service.check_and_cancel_timeouts()

        assert result == {"checked": 2, "cancelled": 1, "skipped": 0, "errors": 1, "timeout_hours": 24}
        assert db.session.get(Order, second.id).status == "CANCELLED"

    def test_explicit_zero_timeout_is_not_the_default(self, db_session, make_order):
        order = make_order(created_at=utcnow() - timedelta(hours=2))
        result = cancellation_service.check_and_cancel_timeouts(timeout_hours=0)
        assert result["timeout_hours"] == 0
        assert result["cancelled"] == 1
        assert db.session.get(Order, order.id).status == "CANCELLED"


class TestWriteCancellation:

    def test_unknown_canceller_rejected_before_any_write(self, db_session, make_order):
        order = make_order()
        with pytest.raises(ValueError):
            cancellation_service.write_cancellation(order, reason="x", cancelled_by="customer")
        db.session.rollback()
        assert db.session.get(Order, order.id).status == "PENDING_CASH"
        assert db.session.query(OrderLog).count() == 0
