"""Real assets and periodic investment plans.

Each asset knows its value over time and the revenues and taxes it
generates in a given year. The split of those amounts between family
members is done by the ledger through the asset's Ownership.
"""

from __future__ import annotations

from dataclasses import dataclass
from enum import Enum

from pydantic import Field, model_validator

from patrisim.core.exceptions import InvalidParameterError
from patrisim.core.financial import calculate_future_value
from patrisim.core.settings import get_settings
from patrisim.domain.calculator.fiscal import FiscalModel
from patrisim.domain.models.clause import LifeInsuranceClause
from patrisim.domain.models.ownable import OwnableAsset


class InvestmentKind(str, Enum):
    """Tax wrapper of a financial investment."""

    LIFE_INSURANCE = "life_insurance"
    PEA = "pea"
    OTHER = "other"


@dataclass(frozen=True)
class YearlyRevenue:
    """Revenue of an asset for one year, before split between owners."""

    revenue: float = 0.0
    taxable_irpp: float = 0.0
    social_taxes: float = 0.0


@dataclass(frozen=True)
class LiquidatedValue:
    """Proceeds of a sale, credited at the start of the following year."""

    revenue: float = 0.0
    capital_gain: float = 0.0
    irpp: float = 0.0
    social_taxes: float = 0.0

    @property
    def net_revenue(self) -> float:
        return self.revenue - self.irpp - self.social_taxes


@dataclass(frozen=True)
class LiquidatedInvestment:
    """Proceeds of a periodic investment closed at term."""

    revenue: float = 0.0
    interests: float = 0.0
    taxable_irpp_interests: float = 0.0
    social_taxes: float = 0.0

    @property
    def net_revenue(self) -> float:
        return self.revenue - self.social_taxes


class HeldAsset(OwnableAsset):
    """Asset bought in a given year and optionally sold at the end of another."""

    buying_year: int = Field(..., description="Year of purchase")
    buying_price: float = Field(..., ge=0, description="Purchase price in €")
    yearly_appreciation_pct: float = Field(default=0.0, description="Yearly value growth %")
    selling_year: int | None = Field(None, description="Sold at the end of this year")
    selling_price: float | None = Field(None, ge=0, description="Sale price (defaults to appreciated value)")

    @model_validator(mode="after")
    def check_years(self) -> "HeldAsset":
        if self.selling_year is not None and self.selling_year < self.buying_year:
            raise InvalidParameterError("selling_year", self.selling_year, "before buying year")
        return self

    def is_held_during(self, year: int) -> bool:
        return self.buying_year <= year and (self.selling_year is None or year <= self.selling_year)

    def is_held_at_end_of(self, year: int) -> bool:
        return self.buying_year <= year and (self.selling_year is None or year < self.selling_year)

    def appreciated_value(self, year: int) -> float:
        years = max(0, year - self.buying_year)
        return self.buying_price * (1.0 + self.yearly_appreciation_pct / 100.0) ** years

    def value(self, year: int) -> float:
        return self.appreciated_value(year) if self.is_held_at_end_of(year) else 0.0

    @property
    def sale_price(self) -> float:
        if self.selling_year is None:
            return 0.0
        if self.selling_price is not None:
            return self.selling_price
        return self.appreciated_value(self.selling_year)

    def is_sold_during(self, year: int) -> bool:
        return self.selling_year == year

    def liquidated_value(self, year: int, fiscal_model: FiscalModel) -> LiquidatedValue:
        """Sale proceeds and capital gain taxes if the asset is sold in `year`."""
        if not self.is_sold_during(year):
            return LiquidatedValue()
        revenue = self.sale_price
        gain = revenue - self.buying_price
        if self.is_capital_gain_exempt:
            return LiquidatedValue(revenue=revenue, capital_gain=gain)
        taxes = fiscal_model.real_estate_capital_gain(gain, year - self.buying_year)
        return LiquidatedValue(
            revenue=revenue,
            capital_gain=gain,
            irpp=taxes.irpp,
            social_taxes=taxes.social_taxes,
        )

    @property
    def is_capital_gain_exempt(self) -> bool:
        return False


class RealEstateAsset(HeldAsset):
    """Property held directly, possibly rented."""

    yearly_rent: float = Field(default=0.0, ge=0, description="Yearly rent collected in €")
    yearly_local_taxes: float = Field(default=0.0, ge=0, description="Taxe foncière / habitation in €")
    is_primary_residence: bool = Field(default=False, description="Capital gain exempt")

    @property
    def is_capital_gain_exempt(self) -> bool:
        return self.is_primary_residence

    def rent(self, year: int, fiscal_model: FiscalModel, rent_abatement_pct: float) -> YearlyRevenue:
        """Rent of the year with its IRPP base (micro-foncier) and social taxes."""
        if not self.is_held_during(year) or self.yearly_rent <= 0:
            return YearlyRevenue()
        taxable = self.yearly_rent * (1.0 - rent_abatement_pct / 100.0)
        return YearlyRevenue(
            revenue=self.yearly_rent,
            taxable_irpp=taxable,
            social_taxes=fiscal_model.social_taxes(taxable),
        )

    def local_taxes(self, year: int) -> float:
        return self.yearly_local_taxes if self.is_held_during(year) else 0.0


class ScpiAsset(HeldAsset):
    """Shares of a real estate investment trust."""

    distribution_rate_pct: float = Field(default=4.5, ge=0, description="Yearly dividend % of buying price")

    def revenue(self, year: int, fiscal_model: FiscalModel) -> YearlyRevenue:
        """Dividends of the year, fully taxable, with social taxes."""
        if not self.is_held_during(year):
            return YearlyRevenue()
        dividends = self.buying_price * self.distribution_rate_pct / 100.0
        return YearlyRevenue(
            revenue=dividends,
            taxable_irpp=dividends,
            social_taxes=fiscal_model.social_taxes(dividends),
        )


class PeriodicInvestment(OwnableAsset):
    """Savings plan fed by yearly payments and closed at the end of `last_year`."""

    kind: InvestmentKind = Field(default=InvestmentKind.LIFE_INSURANCE)
    periodic_social_taxes: bool = Field(default=True, description="Life insurance: social taxes levied yearly")
    clause: LifeInsuranceClause | None = Field(None, description="Beneficiary clause (life insurance only)")
    yearly_payment: float = Field(..., ge=0, description="Payment at the end of each year in €")
    interest_rate_pct: float = Field(default=2.0, description="Gross yearly return %")
    social_taxes_rate_pct: float = Field(default_factory=lambda: get_settings().social_taxes_rate_pct, ge=0, le=100)
    initial_value: float = Field(default=0.0, ge=0, description="Capital at the start of first_year in €")
    first_year: int = Field(..., description="First year of payment")
    last_year: int = Field(..., description="Year of liquidation")

    @model_validator(mode="after")
    def check_years(self) -> "PeriodicInvestment":
        if self.last_year < self.first_year:
            raise InvalidParameterError("last_year", self.last_year, "before first year")
        return self

    @property
    def is_life_insurance(self) -> bool:
        return self.kind == InvestmentKind.LIFE_INSURANCE

    @property
    def average_interest_rate_pct(self) -> float:
        if self.is_life_insurance and self.periodic_social_taxes:
            return self.interest_rate_pct * (1.0 - self.social_taxes_rate_pct / 100.0)
        return self.interest_rate_pct

    def value(self, year: int) -> float:
        if year < self.first_year or year > self.last_year:
            return 0.0
        return calculate_future_value(
            self.yearly_payment,
            self.average_interest_rate_pct,
            year - self.first_year + 1,
            self.initial_value,
        )

    def yearly_total_payment(self, year: int) -> float:
        return self.yearly_payment if self.first_year <= year <= self.last_year else 0.0

    def cumulated_payments(self, year: int) -> float:
        nb_years = min(year, self.last_year) - self.first_year + 1
        return self.initial_value + self.yearly_payment * max(0, nb_years)

    def liquidated_value(self, year: int, fiscal_model: FiscalModel) -> LiquidatedInvestment:
        """Proceeds if the plan is closed at the end of `year`."""
        if year != self.last_year:
            return LiquidatedInvestment()
        revenue = self.value(year)
        interests = max(0.0, revenue - self.cumulated_payments(year))

        if self.kind == InvestmentKind.LIFE_INSURANCE:
            social = 0.0 if self.periodic_social_taxes else fiscal_model.social_taxes(interests)
            taxable = interests
        elif self.kind == InvestmentKind.PEA:
            social = fiscal_model.social_taxes(interests)
            taxable = 0.0
        else:
            social = fiscal_model.social_taxes(interests)
            taxable = interests

        return LiquidatedInvestment(
            revenue=revenue,
            interests=interests,
            taxable_irpp_interests=taxable,
            social_taxes=social,
        )
