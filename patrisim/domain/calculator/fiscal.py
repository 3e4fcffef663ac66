"""Fiscal model.

The ledger builder only depends on the `FiscalModel` protocol: pure
functions returning tax amounts from taxable bases. `FrenchFiscalModel`
is a default implementation with French barèmes, good enough for
simulations and tests. Callers may inject any other model.
"""

from __future__ import annotations

from dataclasses import dataclass
from typing import Protocol

import numpy as np
from pydantic import BaseModel, Field

from patrisim.core.exceptions import FiscalModelError
from patrisim.core.settings import SimulationSettings, get_settings


@dataclass(frozen=True)
class IrppResult:
    """Income tax of the fiscal household."""

    amount: float = 0.0
    family_quotient: float = 0.0
    marginal_rate: float = 0.0
    average_rate: float = 0.0


@dataclass(frozen=True)
class IsfResult:
    """Wealth tax (IFI) of the fiscal household."""

    amount: float = 0.0
    taxable: float = 0.0
    marginal_rate: float = 0.0


@dataclass(frozen=True)
class InheritanceTaxResult:
    net_amount: float
    tax: float


@dataclass(frozen=True)
class CapitalGainTaxes:
    irpp: float
    social_taxes: float

    @property
    def total(self) -> float:
        return self.irpp + self.social_taxes


class FiscalModel(Protocol):
    """Pure fiscal functions injected into the yearly computation."""

    life_insurance_rebate_per_person: float

    def irpp(self, taxable_income: float, nb_adults: int, nb_children: int) -> IrppResult: ...

    def isf(self, taxable_asset: float) -> IsfResult: ...

    def flat_tax(self, taxable_base: float) -> float: ...

    def social_taxes(self, amount: float) -> float: ...

    def real_estate_capital_gain(self, gain: float, holding_years: int) -> CapitalGainTaxes: ...

    def inheritance_tax_of_child(self, amount: float) -> InheritanceTaxResult: ...

    def life_insurance_inheritance_tax(self, amount: float, to_spouse: bool) -> InheritanceTaxResult: ...


class TaxBracket(BaseModel):
    """Bracket of a progressive barème: `rate_pct` applies above `lower_bound`."""

    lower_bound: float = Field(..., ge=0)
    rate_pct: float = Field(..., ge=0, le=100)


def _irpp_brackets() -> list[TaxBracket]:
    return [
        TaxBracket(lower_bound=0, rate_pct=0),
        TaxBracket(lower_bound=11_294, rate_pct=11),
        TaxBracket(lower_bound=28_797, rate_pct=30),
        TaxBracket(lower_bound=82_341, rate_pct=41),
        TaxBracket(lower_bound=177_106, rate_pct=45),
    ]


def _ifi_brackets() -> list[TaxBracket]:
    return [
        TaxBracket(lower_bound=0, rate_pct=0),
        TaxBracket(lower_bound=800_000, rate_pct=0.5),
        TaxBracket(lower_bound=1_300_000, rate_pct=0.7),
        TaxBracket(lower_bound=2_570_000, rate_pct=1.0),
        TaxBracket(lower_bound=5_000_000, rate_pct=1.25),
        TaxBracket(lower_bound=10_000_000, rate_pct=1.5),
    ]


def _child_inheritance_brackets() -> list[TaxBracket]:
    return [
        TaxBracket(lower_bound=0, rate_pct=5),
        TaxBracket(lower_bound=8_072, rate_pct=10),
        TaxBracket(lower_bound=12_109, rate_pct=15),
        TaxBracket(lower_bound=15_932, rate_pct=20),
        TaxBracket(lower_bound=552_324, rate_pct=30),
        TaxBracket(lower_bound=902_838, rate_pct=40),
        TaxBracket(lower_bound=1_805_677, rate_pct=45),
    ]


def progressive_tax(amount: float, brackets: list[TaxBracket]) -> tuple[float, float]:
    """Apply a progressive barème.

    Returns:
        Tuple of (tax, marginal rate in %)
    """
    if amount <= 0 or not brackets:
        return 0.0, 0.0
    lowers = np.array([b.lower_bound for b in brackets], dtype=float)
    rates = np.array([b.rate_pct for b in brackets], dtype=float) / 100.0
    uppers = np.append(lowers[1:], np.inf)
    slices = np.clip(amount - lowers, 0.0, uppers - lowers)
    reached = rates[lowers < amount]
    marginal = float(reached[-1] * 100.0) if reached.size else 0.0
    return float(np.sum(slices * rates)), marginal


class FrenchFiscalModel(BaseModel):
    """Default French fiscal model (IRPP, IFI, PFU, successions, life insurance)."""

    irpp_brackets: list[TaxBracket] = Field(default_factory=_irpp_brackets)
    ifi_brackets: list[TaxBracket] = Field(default_factory=_ifi_brackets)
    ifi_threshold: float = Field(default=1_300_000, ge=0)
    ifi_decote_base: float = Field(default=17_500, ge=0)
    ifi_decote_rate_pct: float = Field(default=1.25, ge=0)
    ifi_decote_limit: float = Field(default=1_400_000, ge=0)
    child_inheritance_brackets: list[TaxBracket] = Field(default_factory=_child_inheritance_brackets)
    child_inheritance_abatement: float = Field(default=100_000, ge=0)
    life_insurance_abatement: float = Field(default=152_500, ge=0, description="Per beneficiary (art. 990 I)")
    life_insurance_first_rate_pct: float = Field(default=20.0, ge=0, le=100)
    life_insurance_first_slice: float = Field(default=700_000, ge=0)
    life_insurance_upper_rate_pct: float = Field(default=31.25, ge=0, le=100)
    life_insurance_rebate_per_person: float = Field(
        default_factory=lambda: get_settings().life_insurance_rebate_per_person, ge=0
    )
    flat_tax_rate_pct: float = Field(default_factory=lambda: get_settings().flat_tax_rate_pct, ge=0, le=100)
    social_taxes_rate_pct: float = Field(default_factory=lambda: get_settings().social_taxes_rate_pct, ge=0, le=100)
    capital_gain_irpp_rate_pct: float = Field(default=19.0, ge=0, le=100)

    @classmethod
    def from_settings(cls, settings: SimulationSettings | None = None) -> FrenchFiscalModel:
        settings = settings or get_settings()
        return cls(
            life_insurance_rebate_per_person=settings.life_insurance_rebate_per_person,
            flat_tax_rate_pct=settings.flat_tax_rate_pct,
            social_taxes_rate_pct=settings.social_taxes_rate_pct,
        )

    # --- Income taxes ---

    @staticmethod
    def family_parts(nb_adults: int, nb_children: int) -> float:
        """Number of parts of the family quotient."""
        if nb_adults < 0 or nb_children < 0:
            raise FiscalModelError(f"Negative household size: {nb_adults} adults, {nb_children} children")
        parts = float(max(1, nb_adults))
        parts += 0.5 * min(nb_children, 2) + 1.0 * max(0, nb_children - 2)
        return parts

    def irpp(self, taxable_income: float, nb_adults: int, nb_children: int) -> IrppResult:
        parts = self.family_parts(nb_adults, nb_children)
        if taxable_income <= 0:
            return IrppResult(family_quotient=0.0)
        quotient = taxable_income / parts
        tax_per_part, marginal = progressive_tax(quotient, self.irpp_brackets)
        amount = tax_per_part * parts
        return IrppResult(
            amount=amount,
            family_quotient=quotient,
            marginal_rate=marginal,
            average_rate=100.0 * amount / taxable_income,
        )

    def flat_tax(self, taxable_base: float) -> float:
        return max(0.0, taxable_base) * self.flat_tax_rate_pct / 100.0

    def social_taxes(self, amount: float) -> float:
        return max(0.0, amount) * self.social_taxes_rate_pct / 100.0

    # --- Wealth tax ---

    def isf(self, taxable_asset: float) -> IsfResult:
        if taxable_asset < self.ifi_threshold:
            return IsfResult(taxable=taxable_asset)
        amount, marginal = progressive_tax(taxable_asset, self.ifi_brackets)
        if taxable_asset < self.ifi_decote_limit:
            amount -= self.ifi_decote_base - taxable_asset * self.ifi_decote_rate_pct / 100.0
        return IsfResult(amount=max(0.0, amount), taxable=taxable_asset, marginal_rate=marginal)

    # --- Capital gains ---

    def real_estate_capital_gain(self, gain: float, holding_years: int) -> CapitalGainTaxes:
        """Taxes on a real estate capital gain after holding-period abatements."""
        if gain <= 0:
            return CapitalGainTaxes(irpp=0.0, social_taxes=0.0)

        years = max(0, holding_years)
        irpp_abatement = sum(6.0 if year < 22 else 4.0 for year in range(6, min(years, 22) + 1))
        social_abatement = 0.0
        for year in range(6, min(years, 30) + 1):
            if year < 22:
                social_abatement += 1.65
            elif year == 22:
                social_abatement += 1.60
            else:
                social_abatement += 9.0

        irpp_base = gain * max(0.0, 100.0 - irpp_abatement) / 100.0
        social_base = gain * max(0.0, 100.0 - social_abatement) / 100.0
        return CapitalGainTaxes(
            irpp=irpp_base * self.capital_gain_irpp_rate_pct / 100.0,
            social_taxes=social_base * self.social_taxes_rate_pct / 100.0,
        )

    # --- Successions ---

    def inheritance_tax_of_child(self, amount: float) -> InheritanceTaxResult:
        """Direct-line inheritance tax on one child's share."""
        if amount < 0:
            raise FiscalModelError(f"Negative inheritance: {amount}")
        taxable = max(0.0, amount - self.child_inheritance_abatement)
        tax, _ = progressive_tax(taxable, self.child_inheritance_brackets)
        return InheritanceTaxResult(net_amount=amount - tax, tax=tax)

    def life_insurance_inheritance_tax(self, amount: float, to_spouse: bool) -> InheritanceTaxResult:
        """Levy on a life insurance death capital received by one beneficiary."""
        if amount < 0:
            raise FiscalModelError(f"Negative death capital: {amount}")
        if to_spouse:
            return InheritanceTaxResult(net_amount=amount, tax=0.0)
        taxable = max(0.0, amount - self.life_insurance_abatement)
        first = min(taxable, self.life_insurance_first_slice)
        upper = taxable - first
        tax = first * self.life_insurance_first_rate_pct / 100.0 + upper * self.life_insurance_upper_rate_pct / 100.0
        return InheritanceTaxResult(net_amount=amount - tax, tax=tax)
