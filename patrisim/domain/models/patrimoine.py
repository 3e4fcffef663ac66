"""Family patrimony: every asset, free investment and liability."""

from __future__ import annotations

from typing import Iterator

from pydantic import BaseModel, Field

from patrisim.domain.calculator.demembrement import ValuationProvider
from patrisim.domain.models.assets import PeriodicInvestment, RealEstateAsset, ScpiAsset
from patrisim.domain.models.free_investment import FreeInvestment
from patrisim.domain.models.liabilities import Debt, Loan
from patrisim.domain.models.ownable import OwnableAsset
from patrisim.domain.models.ownership import EvaluationContext


class Patrimoine(BaseModel):
    """Assets and liabilities of the family for one simulation run.

    Each run must work on its own copy (`model_copy(deep=True)`): the
    transfer engine and the liquidity waterfall mutate it in place.
    """

    real_estates: list[RealEstateAsset] = Field(default_factory=list)
    scpis: list[ScpiAsset] = Field(default_factory=list)
    periodic_investments: list[PeriodicInvestment] = Field(default_factory=list)
    free_investments: list[FreeInvestment] = Field(default_factory=list)
    loans: list[Loan] = Field(default_factory=list)
    debts: list[Debt] = Field(default_factory=list)

    @property
    def assets(self) -> list[OwnableAsset]:
        return [*self.real_estates, *self.scpis, *self.periodic_investments, *self.free_investments]

    @property
    def liabilities(self) -> list[OwnableAsset]:
        return [*self.loans, *self.debts]

    def for_each_ownable(self) -> Iterator[OwnableAsset]:
        yield from self.assets
        yield from self.liabilities

    def free_investment(self, name: str) -> FreeInvestment | None:
        return next((fi for fi in self.free_investments if fi.name == name), None)

    def real_estate_value(
        self,
        year: int,
        context: EvaluationContext,
        owners: list[str],
        valuation: ValuationProvider | None = None,
    ) -> float:
        """Real estate (direct and SCPI) value attributed to `owners`."""
        return sum(
            asset.owned_value(name, year, context, valuation)
            for asset in [*self.real_estates, *self.scpis]
            for name in owners
        )

    def owned_value(
        self,
        owner_name: str,
        year: int,
        context: EvaluationContext,
        valuation: ValuationProvider | None = None,
    ) -> float:
        """Net patrimony of `owner_name` (liabilities deducted)."""
        return sum(
            ownable.owned_value(owner_name, year, context, valuation)
            for ownable in self.for_each_ownable()
        )

    def free_investments_value_of(self, name: str, year: int) -> float:
        """Value of the free investments `name` holds, at least partly, in full ownership."""
        return sum(
            fi.owned_value(name, year, EvaluationContext.PATRIMOINE)
            for fi in self.free_investments
            if not fi.ownership.is_dismembered and fi.ownership.has_a_full_owner(name)
        )
