from datetime import timedelta

from andiamo.extensions import db
from andiamo.models import Admin, Order, PaymentOption
from andiamo.time_utils import utcnow


class TestCli:

    def test_system_init_is_idempotent(self, app, db_session):
        runner = app.test_cli_runner()
        first = runner.invoke(args=["system", "init"])
        second = runner.invoke(args=["system", "init"])
        assert first.exit_code == 0, first.output
        assert "DONE" in second.output
        assert db.session.query(PaymentOption).count() == 3

    def test_create_and_list_admins(self, app, db_session):
        runner = app.test_cli_runner()
        result = runner.invoke(args=[
            "admins", "create", "--email", "Ops@Andiamo.tn", "--password", "Password123!",
        ])
        assert result.exit_code == 0, result.output
        assert db.session.query(Admin).filter_by(email="ops@andiamo.tn").count() == 1

        listing = runner.invoke(args=["admins", "list"])
        assert "ops@andiamo.tn" in listing.output

    def test_weak_password_refused(self, app, db_session):
        runner = app.test_cli_runner()
        result = runner.invoke(args=["admins", "create", "--email", "x@andiamo.tn", "--password", "weak"])
        assert result.exit_code != 0
        assert "Password validation failed" in result.output

    def test_reject_expired(self, app, make_order):
        old = make_order(created_at=utcnow() - timedelta(hours=5))
        runner = app.test_cli_runner()
        result = runner.invoke(args=["orders", "reject-expired", "--hours", "4"])
        assert result.exit_code == 0, result.output
        assert "1 cancelled" in result.output
        db.session.expire_all()
        assert db.session.get(Order, old.id).status == "CANCELLED"
