import pytest

from andiamo.services import settings_service
from andiamo.validation import ValidationError, NotFoundError


class TestPaymentOptions:

    def test_defaults_are_idempotent(self, db_session):
        settings_service.ensure_default_payment_options()
        options = settings_service.ensure_default_payment_options()
        assert {o.option_type: o.enabled for o in options} == {
            "online": True,
            "external_app": False,
            "ambassador_cash": False,
        }

    def test_missing_row_counts_as_disabled(self, db_session):
        assert settings_service.is_payment_option_enabled("online") is False

    def test_unknown_type(self, db_session):
        with pytest.raises(ValidationError):
            settings_service.is_payment_option_enabled("bitcoin")

    def test_enable_external_app_needs_valid_config(self, db_session):
        settings_service.ensure_default_payment_options()
        with pytest.raises(ValidationError):
            settings_service.update_payment_option("external_app", {"enabled": True, "app_name": "Pay"})
        assert settings_service.is_payment_option_enabled("external_app") is False

        option = settings_service.update_payment_option("external_app", {
            "enabled": True,
            "app_name": " AndiamoPay ",
            "external_link": "https://pay.example.com/checkout",
        })
        assert option.enabled is True
        assert option.app_name == "AndiamoPay"

    def test_update_missing_row(self, db_session):
        with pytest.raises(NotFoundError):
            settings_service.update_payment_option("online", {"enabled": True})

    @pytest.mark.parametrize("config,ok", [
        ({"app_name": "Pay", "external_link": "https://x.tn"}, True),
        ({"app_name": "", "external_link": "https://x.tn"}, False),
        ({"app_name": "Pay", "external_link": "ftp://x.tn"}, False),
        ({"app_name": "Pay", "external_link": "pay.example.com"}, False),
    ])
    def test_validate_external_app_config(self, config, ok):
        valid, error = settings_service.validate_external_app_config(config)
        assert valid is ok
        assert (error is None) is ok

    def test_cash_hidden_without_local_ambassadors(self, db_session, payment_options, make_ambassador):
        make_ambassador(city="Sousse", ville="Sahloul")

        here = {o.option_type for o in settings_service.get_available_payment_options("Sousse", "Sahloul")}
        elsewhere = {o.option_type for o in settings_service.get_available_payment_options("Sfax")}
        nowhere = {o.option_type for o in settings_service.get_available_payment_options()}

        assert "ambassador_cash" in here
        assert "ambassador_cash" not in elsewhere
        assert "ambassador_cash" not in nowhere
        assert "online" in elsewhere


class TestSalesSettings:

    def test_enabled_by_default(self, db_session):
        assert settings_service.get_sales_settings() == {"enabled": True}

    def test_toggle(self, db_session):
        settings_service.update_sales_settings(False)
        assert settings_service.get_sales_settings() == {"enabled": False}

    def test_enabled_must_be_bool(self, db_session):
        with pytest.raises(ValidationError):
            settings_service.update_sales_settings("no")

    def test_timeout_default_and_override(self, app, db_session):
        assert settings_service.get_cash_payment_timeout_hours() == app.config["DEFAULT_CASH_TIMEOUT_HOURS"]
        settings_service.update_order_timeout_settings(48)
        assert settings_service.get_cash_payment_timeout_hours() == 48

    @pytest.mark.parametrize("bad", [0, -3, "12", True, 1.5])
    def test_timeout_validation(self, db_session, bad):
        with pytest.raises(ValidationError):
            settings_service.update_order_timeout_settings(bad)
