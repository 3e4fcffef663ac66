"""Liabilities: amortized loans and fixed debts.

Liabilities are ownable like assets so that they follow the same transfer
rules on death. Their value is negative.
"""

from __future__ import annotations

from pydantic import Field

from patrisim.core.financial import calculate_remaining_balance, calculate_yearly_payment
from patrisim.domain.models.ownable import OwnableAsset


class Loan(OwnableAsset):
    """Amortized loan repaid by constant yearly payments."""

    principal: float = Field(..., ge=0, description="Borrowed amount in €")
    interest_rate_pct: float = Field(default=3.5, ge=0, description="Yearly interest rate %")
    first_year: int = Field(..., description="Year of the first payment")
    duration_years: int = Field(..., gt=0, description="Number of yearly payments")

    @property
    def last_year(self) -> int:
        return self.first_year + self.duration_years - 1

    @property
    def yearly_payment_amount(self) -> float:
        return calculate_yearly_payment(self.principal, self.interest_rate_pct, self.duration_years)

    def yearly_payment(self, year: int) -> float:
        """Payment due during `year` (positive)."""
        if self.first_year <= year <= self.last_year:
            return self.yearly_payment_amount
        return 0.0

    def value(self, year: int) -> float:
        """Outstanding principal at the end of `year`, as a negative amount."""
        if year < self.first_year - 1:
            return 0.0
        years_paid = year - self.first_year + 1
        return -calculate_remaining_balance(
            self.principal, self.interest_rate_pct, self.duration_years, years_paid
        )


class Debt(OwnableAsset):
    """Debt with a constant outstanding amount."""

    amount: float = Field(..., ge=0, description="Amount owed in €")

    def value(self, year: int) -> float:
        return -self.amount
