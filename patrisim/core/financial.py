"""Financial calculation functions.

Yearly loan and annuity maths shared by liabilities and periodic investments.
"""

from __future__ import annotations

import numpy_financial as npf


def calculate_yearly_payment(
    principal: float,
    annual_rate_pct: float,
    duration_years: int,
) -> float:
    """Calculate the constant yearly repayment of a loan (principal + interest).

    Args:
        principal: Loan amount in €
        annual_rate_pct: Annual interest rate as percentage (e.g., 3.5 for 3.5%)
        duration_years: Loan term in years

    Returns:
        Yearly payment amount in € (positive)
    """
    if principal <= 0 or duration_years <= 0:
        return 0.0

    rate = annual_rate_pct / 100.0
    if rate <= 0:
        return principal / duration_years

    return float(-npf.pmt(rate, duration_years, principal))


def calculate_remaining_balance(
    principal: float,
    annual_rate_pct: float,
    duration_years: int,
    years_paid: int,
) -> float:
    """Calculate the outstanding principal after N yearly payments.

    Args:
        principal: Initial loan amount in €
        annual_rate_pct: Annual interest rate %
        duration_years: Loan term in years
        years_paid: Number of yearly payments already made

    Returns:
        Remaining principal in € (>= 0)
    """
    if principal <= 0 or years_paid >= duration_years:
        return 0.0
    if years_paid <= 0:
        return principal

    rate = annual_rate_pct / 100.0
    if rate <= 0:
        return principal * (1.0 - years_paid / duration_years)

    payment = calculate_yearly_payment(principal, annual_rate_pct, duration_years)
    balance = npf.fv(rate, years_paid, payment, -principal)
    return max(0.0, float(balance))


def calculate_future_value(
    yearly_payment: float,
    annual_rate_pct: float,
    nb_years: int,
    initial_value: float = 0.0,
) -> float:
    """Value of a savings plan after N yearly payments made at period end.

    Args:
        yearly_payment: Amount paid in each year in €
        annual_rate_pct: Yearly return %
        nb_years: Number of payments
        initial_value: Capital already invested at start in €
    """
    if nb_years <= 0:
        return initial_value
    rate = annual_rate_pct / 100.0
    return float(npf.fv(rate, nb_years, -yearly_payment, -initial_value))
