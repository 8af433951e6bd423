"""Tests for the loyalty ledger."""

import pytest

from grooming import db
from grooming.scheduling.errors import NotFoundError, ValidationError
from grooming.scheduling.loyalty import LoyaltyLedger, POINTS_PER_BOOKING, POINTS_PER_CANCELLATION


@pytest.fixture
def ledger():
    return LoyaltyLedger()


def _balance_after(ledger, customer, change):
    change()
    db.session.commit()
    return ledger.balance(customer.id)


class TestLedger:
    def test_policy_constants(self):
        assert POINTS_PER_BOOKING == 10
        assert POINTS_PER_CANCELLATION == 10

    def test_credit_adds_points(self, ledger, customer):
        assert _balance_after(ledger, customer, lambda: ledger.credit(customer.id, 10)) == 10
        assert _balance_after(ledger, customer, lambda: ledger.credit(customer.id, 25)) == 35

    def test_debit_subtracts_points(self, ledger, customer):
        ledger.credit(customer.id, 30)
        assert _balance_after(ledger, customer, lambda: ledger.debit(customer.id, 10)) == 20

    def test_debit_clamps_at_zero(self, ledger, customer):
        ledger.credit(customer.id, 5)
        assert _balance_after(ledger, customer, lambda: ledger.debit(customer.id, 10)) == 0
        assert _balance_after(ledger, customer, lambda: ledger.debit(customer.id, 10)) == 0

    def test_unknown_customer(self, ledger, app):
        with pytest.raises(NotFoundError):
            ledger.credit(9999, 10)
        with pytest.raises(NotFoundError):
            ledger.debit(9999, 10)
        with pytest.raises(NotFoundError):
            ledger.balance(9999)

    def test_staff_have_no_ledger(self, ledger, groomer):
        with pytest.raises(NotFoundError):
            ledger.credit(groomer.id, 10)

    def test_negative_amount_rejected(self, ledger, customer):
        with pytest.raises(ValidationError):
            ledger.credit(customer.id, -5)

    def test_uncommitted_change_rolls_back(self, ledger, customer):
        ledger.credit(customer.id, 10)
        db.session.rollback()
        assert ledger.balance(customer.id) == 0
