"""Liquidity waterfall.

Closes the adults' yearly cash position against the free investment pool:
surpluses are deposited into the best vehicle, deficits are funded by
withdrawals, and capitals received during the year (sales, liquidations,
death capitals) are invested on behalf of each recipient.

Deposit priority: life insurance with yearly social taxes, life insurance,
PEA, then other accounts, the best net-of-inflation rate first within a
tier. Withdrawal priority: the richest adult first, then PEA, life
insurance, other, the lowest rate first within a tier.
"""

from __future__ import annotations

from typing import Iterable

from patrisim.core.exceptions import InsufficientLiquidityError
from patrisim.core.logging import get_logger
from patrisim.domain.models.assets import InvestmentKind
from patrisim.domain.models.cashflow import TaxCategory, ValuedTaxes
from patrisim.domain.models.family import Family
from patrisim.domain.models.free_investment import FreeInvestment
from patrisim.domain.models.patrimoine import Patrimoine

log = get_logger(__name__)

_CASH_TOLERANCE = 1e-6
_WITHDRAWAL_KINDS = (InvestmentKind.PEA, InvestmentKind.LIFE_INSURANCE, InvestmentKind.OTHER)


class LifeInsuranceRebate:
    """Yearly allowance on life insurance interests, shared by every liquidation of the year."""

    def __init__(self, amount: float):
        self.initial = max(0.0, amount)
        self.remaining = self.initial

    @property
    def consumed(self) -> float:
        return self.initial - self.remaining

    def consume(self, taxable: float) -> float:
        """Apply the remaining rebate to `taxable` and return what stays taxable."""
        taxable = max(0.0, taxable)
        used = min(self.remaining, taxable)
        self.remaining -= used
        return taxable - used

    def __repr__(self) -> str:
        return f"LifeInsuranceRebate(remaining={self.remaining:.2f}/{self.initial:.2f})"


def deposit_tier(fi: FreeInvestment) -> int:
    """Rank of a vehicle in the deposit priority (lower is preferred)."""
    if fi.kind == InvestmentKind.LIFE_INSURANCE:
        return 0 if fi.periodic_social_taxes else 1
    if fi.kind == InvestmentKind.PEA:
        return 2
    return 3


class LiquidityWaterfall:
    """Deposits and withdrawals on the free investment pool of a patrimony."""

    def __init__(self, patrimoine: Patrimoine, family: Family | None = None):
        self.patrimoine = patrimoine
        self.family = family

    def capitalize_free_investments(self, year: int) -> None:
        for fi in self.patrimoine.free_investments:
            fi.capitalize(year)

    def _best_vehicle(self, candidates: Iterable[FreeInvestment]) -> FreeInvestment | None:
        ranked = sorted(
            candidates,
            key=lambda fi: (deposit_tier(fi), -fi.average_interest_rate_net_of_inflation_pct),
        )
        return ranked[0] if ranked else None

    # --- Deposits ---

    def invest_capital(self, owned_capitals: dict[str, float], year: int) -> float:
        """Deposit each person's capital into a vehicle they hold alone in full ownership.

        Args:
            owned_capitals: Capital to invest per person
            year: Year of the deposit

        Returns:
            Total amount deposited
        """
        invested = 0.0
        for name, capital in owned_capitals.items():
            if capital <= 0.0:
                continue
            if self.family is not None:
                member = self.family.member(name)
                if member is None or not member.is_alive(year):
                    log.warning(
                        "capital_without_recipient",
                        owner=name,
                        amount=round(capital, 2),
                        known=member is not None,
                    )
                    continue

            vehicle = self._best_vehicle(
                fi for fi in self.patrimoine.free_investments if fi.ownership.has_a_unique_full_owner(name)
            )
            if vehicle is None:
                log.warning("capital_without_receptacle", owner=name, amount=round(capital, 2))
                continue
            vehicle.deposit(capital)
            invested += capital
            log.debug("capital_invested", owner=name, vehicle=vehicle.name, amount=round(capital, 2))
        return invested

    def invest_net_cash_flow(self, amount: float, adults: list[str]) -> FreeInvestment | None:
        """Deposit a yearly surplus into the best vehicle with an adult among its full owners.

        Returns:
            The vehicle credited, or None if the surplus is stranded
        """
        if amount <= 0.0:
            return None
        vehicle = self._best_vehicle(
            fi
            for fi in self.patrimoine.free_investments
            if not fi.ownership.is_dismembered and any(fi.ownership.has_a_full_owner(a) for a in adults)
        )
        if vehicle is None:
            log.warning("surplus_stranded", amount=round(amount, 2), adults=adults)
            return None
        vehicle.deposit(amount)
        log.info("surplus_deposited", vehicle=vehicle.name, amount=round(amount, 2))
        return vehicle

    # --- Withdrawals ---

    def _withdraw_for(
        self,
        name: str,
        remaining: float,
        taxes: ValuedTaxes,
        rebate: LifeInsuranceRebate,
    ) -> tuple[float, float]:
        """Withdraw up to `remaining` from the vehicles available to `name`.

        Returns:
            Tuple of (amount still to find, taxable interests)
        """
        taxable_interests = 0.0
        by_rate = sorted(self.patrimoine.free_investments, key=lambda fi: fi.average_interest_rate_net_of_inflation_pct)

        for kind in _WITHDRAWAL_KINDS:
            for fi in by_rate:
                if remaining <= _CASH_TOLERANCE:
                    return remaining, taxable_interests
                if fi.kind != kind:
                    continue
                removal = fi.remove(remaining, for_name=name)
                if removal.brut_amount <= 0.0:
                    continue
                remaining -= removal.revenue

                if kind == InvestmentKind.LIFE_INSURANCE:
                    taxable_interests += rebate.consume(removal.taxable_interests)
                else:
                    taxable_interests += removal.taxable_interests
                if removal.social_taxes > 0.0:
                    taxes[TaxCategory.SOCIAL_TAXES].append(fi.name, removal.social_taxes)
        return remaining, taxable_interests

    def get_cash_from_investments(
        self,
        amount: float,
        year: int,
        adults: list[str],
        taxes: ValuedTaxes,
        rebate: LifeInsuranceRebate,
    ) -> float:
        """Withdraw `amount` (net) from the free investments to cover a deficit.

        Social taxes withheld at source are appended to `taxes`.

        Returns:
            Interests taxable to IRPP, delayed to next year

        Raises:
            InsufficientLiquidityError: the pool cannot cover `amount`.
        """
        remaining = amount
        total_taxable = 0.0
        if remaining <= 0.0:
            return total_taxable

        if not adults:
            # heirs bear the cost
            remaining, total_taxable = self._withdraw_for("", remaining, taxes, rebate)
        else:
            richest_first = sorted(
                adults,
                key=lambda name: self.patrimoine.free_investments_value_of(name, year),
                reverse=True,
            )
            for name in richest_first:
                remaining, taxable = self._withdraw_for(name, remaining, taxes, rebate)
                total_taxable += taxable
                if remaining <= _CASH_TOLERANCE:
                    break

        if remaining > _CASH_TOLERANCE:
            log.error(
                "insufficient_liquidity",
                requested=round(amount, 2),
                missing=round(remaining, 2),
                adults=adults,
            )
            raise InsufficientLiquidityError(remaining)

        log.debug("deficit_funded", amount=round(amount, 2), taxable_interests=round(total_taxable, 2))
        return total_taxable
