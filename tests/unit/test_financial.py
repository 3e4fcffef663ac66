"""Unit tests for patrisim.core.financial module."""

import pytest

from patrisim.core.financial import (
    calculate_future_value,
    calculate_remaining_balance,
    calculate_yearly_payment,
)


class TestCalculateYearlyPayment:
    """Tests for calculate_yearly_payment function."""

    def test_standard_loan(self):
        """Test a standard 20-year loan at 3.5%."""
        pmt = calculate_yearly_payment(200000, 3.5, 20)
        # Expected around 14 072€/year
        assert 14000 < pmt < 14100

    def test_zero_principal(self):
        """Zero principal should return zero payment."""
        assert calculate_yearly_payment(0, 3.5, 20) == 0.0

    def test_zero_rate(self):
        """Zero interest rate should return principal/years."""
        assert calculate_yearly_payment(120000, 0.0, 10) == 12000.0

    def test_short_term(self):
        """Short term loan should have higher payments."""
        assert calculate_yearly_payment(200000, 3.5, 15) > calculate_yearly_payment(200000, 3.5, 25)


class TestCalculateRemainingBalance:
    """Tests for calculate_remaining_balance function."""

    def test_start_of_loan(self):
        """Before any payment the whole principal is due."""
        assert calculate_remaining_balance(200000, 3.5, 20, 0) == 200000

    def test_end_of_loan(self):
        """Balance should be zero at end of loan."""
        assert calculate_remaining_balance(200000, 3.5, 20, 20) == 0.0

    def test_decreasing(self):
        """Balance decreases as payments are made."""
        b5 = calculate_remaining_balance(200000, 3.5, 20, 5)
        b10 = calculate_remaining_balance(200000, 3.5, 20, 10)
        assert 200000 > b5 > b10 > 0

    def test_zero_rate_is_linear(self):
        assert calculate_remaining_balance(100000, 0.0, 10, 4) == pytest.approx(60000.0)


class TestCalculateFutureValue:
    """Tests for calculate_future_value function."""

    def test_zero_rate(self):
        """Without return the plan is the sum of payments."""
        assert calculate_future_value(1000, 0.0, 5) == pytest.approx(5000.0)

    def test_with_initial_value(self):
        expected = 10000 * 1.02**3 + 1000 * (1.02**3 - 1) / 0.02
        assert calculate_future_value(1000, 2.0, 3, initial_value=10000) == pytest.approx(expected)

    def test_no_payment_yet(self):
        assert calculate_future_value(1000, 2.0, 0, initial_value=500) == 500
