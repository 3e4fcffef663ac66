"""Base model for anything that can be owned and valued."""

from __future__ import annotations

from pydantic import BaseModel, Field

from patrisim.domain.calculator.demembrement import ValuationProvider
from patrisim.domain.models.ownership import EvaluationContext, Ownership


class OwnableAsset(BaseModel):
    """An asset or liability with a name, an ownership and a yearly value."""

    name: str = Field(..., min_length=1, description="Asset identifier")
    ownership: Ownership = Field(default_factory=Ownership)

    model_config = {
        "extra": "forbid",
    }

    @property
    def is_life_insurance(self) -> bool:
        return False

    def value(self, year: int) -> float:
        """Total value at the end of `year` (negative for liabilities)."""
        raise NotImplementedError

    def is_part_of_patrimoine(self, names: list[str]) -> bool:
        return self.ownership.is_part_of_patrimoine(names)

    def provides_revenue(self, names: list[str]) -> bool:
        return self.ownership.provides_revenue(names)

    def owned_value(
        self,
        owner_name: str,
        year: int,
        context: EvaluationContext,
        valuation: ValuationProvider | None = None,
    ) -> float:
        """Value of the asset attributed to `owner_name` at the end of `year`.

        Life insurance only enters the life insurance contexts, every other
        asset only the other contexts.
        """
        if context.is_life_insurance != self.is_life_insurance:
            if context.is_life_insurance or context is EvaluationContext.LEGAL_SUCCESSION:
                return 0.0
        return self.ownership.owned_value(owner_name, self.value(year), year, context, valuation)

    def owned_values(
        self,
        year: int,
        context: EvaluationContext,
        valuation: ValuationProvider | None = None,
    ) -> dict[str, float]:
        return {
            name: self.owned_value(name, year, context, valuation)
            for name in self.ownership.names
        }
