"""
Order status vocabulary and transition table.

Pure functions: no app or database needed.
"""

import pytest

from andiamo.services.order_statuses import (
    OrderStatus,
    PaymentMethod,
    PENDING_STATUSES,
    OrderTransitionError,
    can_cancel_order,
    can_transition,
    can_update_status,
    ensure_transition,
    get_order_status_label,
    get_payment_method_label,
    get_valid_next_statuses,
    initial_status_for,
    payment_method_for_option,
    source_for,
    to_ambassador_status,
)


EXPECTED_NEXT = {
    OrderStatus.PENDING_ONLINE: {OrderStatus.PAID, OrderStatus.CANCELLED, OrderStatus.REMOVED_BY_ADMIN},
    OrderStatus.REDIRECTED: {OrderStatus.PAID, OrderStatus.CANCELLED, OrderStatus.REMOVED_BY_ADMIN},
    OrderStatus.PENDING_CASH: {OrderStatus.PAID, OrderStatus.CANCELLED, OrderStatus.REMOVED_BY_ADMIN},
    OrderStatus.PAID: {OrderStatus.CANCELLED},
    OrderStatus.CANCELLED: set(),
    OrderStatus.REMOVED_BY_ADMIN: set(),
}


# =============================================================================
# TRANSITION TABLE
# =============================================================================


class TestTransitionTable:

    @pytest.mark.parametrize("status", list(OrderStatus))
    def test_exact_successors_every_call(self, status):
        for _ in range(5):
            assert set(get_valid_next_statuses(status)) == EXPECTED_NEXT[status]

    def test_every_status_has_an_entry(self):
        assert set(EXPECTED_NEXT) == set(OrderStatus)

    @pytest.mark.parametrize("status", list(OrderStatus))
    def test_accepts_raw_string_values(self, status):
        assert set(get_valid_next_statuses(status.value)) == EXPECTED_NEXT[status]

    def test_unknown_status_has_no_successors(self):
        assert get_valid_next_statuses("ACCEPTED") == []
        assert get_valid_next_statuses(None) == []

    def test_paid_cannot_be_removed(self):
        assert not can_transition(OrderStatus.PAID, OrderStatus.REMOVED_BY_ADMIN)
        assert can_transition(OrderStatus.PAID, OrderStatus.CANCELLED)

    @pytest.mark.parametrize("status", list(OrderStatus))
    def test_update_gate_implies_pending(self, status):
        if can_update_status(status):
            assert status in PENDING_STATUSES

    @pytest.mark.parametrize("status", list(OrderStatus))
    def test_non_empty_successors_exactly_for_pending_and_paid(self, status):
        has_next = bool(get_valid_next_statuses(status))
        assert has_next == (status in PENDING_STATUSES or status is OrderStatus.PAID)

    def test_cancel_predicate_is_narrower_than_table(self):
        assert can_cancel_order(OrderStatus.PENDING_CASH)
        assert can_cancel_order("REDIRECTED")
        assert not can_cancel_order(OrderStatus.PAID)
        assert not can_cancel_order(OrderStatus.CANCELLED)
        assert not can_cancel_order("PENDING")

    def test_ensure_transition_raises_for_terminal(self):
        with pytest.raises(OrderTransitionError):
            ensure_transition(OrderStatus.CANCELLED, OrderStatus.PAID, order_id="abc")

    def test_ensure_transition_rejects_legacy_literal(self):
        with pytest.raises(OrderTransitionError):
            ensure_transition(OrderStatus.PENDING_CASH, "ACCEPTED")

    def test_ensure_transition_returns_target(self):
        assert ensure_transition("PENDING_ONLINE", "PAID") is OrderStatus.PAID


# =============================================================================
# PAYMENT METHOD MAPPING
# =============================================================================


class TestPaymentMethodMapping:

    def test_initial_status_per_method(self):
        assert initial_status_for(PaymentMethod.ONLINE) is OrderStatus.PENDING_ONLINE
        assert initial_status_for("external_app") is OrderStatus.REDIRECTED
        assert initial_status_for("ambassador_cash") is OrderStatus.PENDING_CASH

    def test_initial_status_unknown_method(self):
        with pytest.raises(ValueError):
            initial_status_for("cod")

    def test_source_per_method(self):
        assert source_for("ambassador_cash").value == "ambassador_manual"
        assert source_for("online").value == "platform_online"

    def test_option_maps_to_method(self):
        assert payment_method_for_option("external_app") is PaymentMethod.EXTERNAL_APP
        with pytest.raises(ValueError):
            payment_method_for_option("bitcoin")


# =============================================================================
# LABELS
# =============================================================================


class TestLabels:

    @pytest.mark.parametrize("status", list(OrderStatus))
    @pytest.mark.parametrize("language", ["en", "fr"])
    def test_every_status_has_a_label(self, status, language):
        label = get_order_status_label(status, language)
        assert isinstance(label, str) and label

    def test_french_label(self):
        assert get_order_status_label(OrderStatus.PAID, "fr") == "Payé"
        assert get_payment_method_label("ambassador_cash", "fr") == "Paiement à la livraison"

    def test_unknown_value_falls_back_to_raw(self):
        assert get_order_status_label("ACCEPTED", "en") == "ACCEPTED"
        assert get_payment_method_label("cod") == "cod"

    def test_unknown_language_falls_back_to_raw(self):
        assert get_order_status_label(OrderStatus.PAID, "de") == "PAID"


class TestAmbassadorStatusMapping:

    @pytest.mark.parametrize("persisted,expected", [
        ("approved", "ACTIVE"),
        ("pending", "PENDING"),
        ("rejected", "REJECTED"),
        ("suspended", "PAUSED"),
        ("whatever", "DISABLED"),
        (None, "DISABLED"),
    ])
    def test_mapping(self, persisted, expected):
        assert to_ambassador_status(persisted).value == expected
