"""Ownership of an asset.

An asset is held either in full ownership (PP) or, once dismembered,
split between usufruct (UF) and bare ownership (NP). Each right is held by
an OwnerSet. Values are attributed to owners according to an evaluation
context, because the tax rules value a dismembered right differently for
wealth tax and for successions.
"""

from __future__ import annotations

from enum import Enum
from typing import Iterable

from pydantic import BaseModel, Field

from patrisim.core.exceptions import InvalidOwnershipError, NotDismemberedError, ValuationError
from patrisim.domain.calculator.demembrement import DemembrementSplit, ValuationProvider
from patrisim.domain.models.owners import FRACTION_TOLERANCE, OwnerSet


class EvaluationContext(str, Enum):
    """Fiscal rule used to value an owner's share of an asset."""

    PATRIMOINE = "patrimoine"
    IFI = "ifi"
    ISF = "isf"
    LEGAL_SUCCESSION = "legal_succession"
    LIFE_INSURANCE_SUCCESSION = "life_insurance_succession"
    LIFE_INSURANCE_TRANSMISSION = "life_insurance_transmission"

    @property
    def is_wealth_tax(self) -> bool:
        return self in (EvaluationContext.IFI, EvaluationContext.ISF)

    @property
    def values_usufruct_at_full_value(self) -> bool:
        """Wealth taxes and quasi-usufruct of a life insurance cash transmission."""
        return self.is_wealth_tax or self is EvaluationContext.LIFE_INSURANCE_TRANSMISSION

    @property
    def is_life_insurance(self) -> bool:
        return self in (
            EvaluationContext.LIFE_INSURANCE_SUCCESSION,
            EvaluationContext.LIFE_INSURANCE_TRANSMISSION,
        )


class Ownership(BaseModel):
    """Rights held over one asset."""

    full_owners: OwnerSet = Field(default_factory=OwnerSet, description="Full owners (PP)")
    usufruct_owners: OwnerSet = Field(default_factory=OwnerSet, description="Usufructuaries (UF)")
    bare_owners: OwnerSet = Field(default_factory=OwnerSet, description="Bare owners (NP)")
    is_dismembered: bool = Field(default=False, description="Usufruct and bare ownership are split")

    @classmethod
    def full(cls, *owners: tuple[str, float]) -> Ownership:
        return cls(full_owners=OwnerSet.of(*owners))

    @classmethod
    def dismembered(
        cls,
        usufruct: Iterable[tuple[str, float]],
        bare: Iterable[tuple[str, float]],
    ) -> Ownership:
        return cls(
            usufruct_owners=OwnerSet.of(*usufruct),
            bare_owners=OwnerSet.of(*bare),
            is_dismembered=True,
        )

    def set_dismembered(self, dismembered: bool) -> None:
        """Toggle dismemberment.

        Dismembering seeds both usufruct and bare sets with the current full
        owners. Reuniting drops the usufruct and bare sets.
        """
        if dismembered and not self.is_dismembered:
            self.usufruct_owners = self.full_owners.model_copy(deep=True)
            self.bare_owners = self.full_owners.model_copy(deep=True)
            self.full_owners = OwnerSet()
        elif not dismembered and self.is_dismembered:
            self.usufruct_owners = OwnerSet()
            self.bare_owners = OwnerSet()
        self.is_dismembered = dismembered

    # --- Validity ---

    def is_valid(self, tolerance: float = FRACTION_TOLERANCE) -> bool:
        if self.is_dismembered:
            return (
                bool(self.usufruct_owners)
                and bool(self.bare_owners)
                and self.usufruct_owners.is_valid(tolerance)
                and self.bare_owners.is_valid(tolerance)
            )
        return self.full_owners.is_valid(tolerance)

    def check_valid(self, context: str = "", tolerance: float = FRACTION_TOLERANCE) -> None:
        """Raise InvalidOwnershipError if the invariants are broken."""
        if not self.is_valid(tolerance):
            where = f" {context}" if context else ""
            raise InvalidOwnershipError(f"Invalid ownership{where}: {self!r}")

    # --- Queries ---

    @property
    def names(self) -> list[str]:
        """Every person holding any right, in order of first appearance."""
        seen: dict[str, None] = {}
        for owner_set in (self.full_owners, self.usufruct_owners, self.bare_owners):
            for name in owner_set.names:
                seen.setdefault(name, None)
        return list(seen)

    def has_a_full_owner(self, name: str) -> bool:
        return self.full_owners.contains(name)

    def has_a_unique_full_owner(self, name: str) -> bool:
        """`name` alone holds the asset in full ownership."""
        return (
            not self.is_dismembered
            and len(self.full_owners) == 1
            and self.full_owners[0].name == name
        )

    def has_an_usufruct_owner(self, name: str) -> bool:
        return self.usufruct_owners.contains(name)

    def has_a_bare_owner(self, name: str) -> bool:
        return self.bare_owners.contains(name)

    def is_part_of_patrimoine(self, names: Iterable[str]) -> bool:
        """At least one of `names` holds a right on the asset."""
        held = set(self.names)
        return any(name in held for name in names)

    def provides_revenue(self, names: Iterable[str]) -> bool:
        """At least one of `names` collects revenue (UF, or PP if not dismembered)."""
        receivers = self.usufruct_owners if self.is_dismembered else self.full_owners
        return any(receivers.contains(name) for name in names)

    def owned_revenue_fraction(self, names: Iterable[str]) -> float:
        """Percentage of the revenue collected by `names`."""
        receivers = self.usufruct_owners if self.is_dismembered else self.full_owners
        return sum(receivers.fraction_of(name) for name in set(names))

    # --- Valuation ---

    def demembrement(
        self,
        total_value: float,
        year: int,
        valuation: ValuationProvider,
    ) -> DemembrementSplit:
        """Split `total_value` between usufruct and bare ownership.

        Each usufructuary's slice is valued with their own age.

        Raises:
            NotDismemberedError: the asset is held in full ownership.
            InvalidOwnershipError: the ownership is invalid.
        """
        if not self.is_dismembered:
            raise NotDismemberedError("Cannot split an asset that is not dismembered")
        self.check_valid("before demembrement")

        usufruct_value = 0.0
        bare_value = 0.0
        for usufructuary in self.usufruct_owners:
            owned = total_value * usufructuary.fraction / 100.0
            split = valuation.split(owned, usufructuary.name, year)
            usufruct_value += split.usufruct_value
            bare_value += split.bare_value
        return DemembrementSplit(usufruct_value=usufruct_value, bare_value=bare_value)

    def owned_value(
        self,
        owner_name: str,
        total_value: float,
        year: int,
        context: EvaluationContext,
        valuation: ValuationProvider | None = None,
    ) -> float:
        """Share of `total_value` attributed to `owner_name` in `context`."""
        if not self.is_dismembered:
            return total_value * self.full_owners.fraction_of(owner_name) / 100.0

        usufruct_fraction = self.usufruct_owners.fraction_of(owner_name)
        if context.values_usufruct_at_full_value:
            # the usufructuary is attributed the full value of its fraction
            return total_value * usufruct_fraction / 100.0

        bare_fraction = self.bare_owners.fraction_of(owner_name)
        if usufruct_fraction == 0.0 and bare_fraction == 0.0:
            return 0.0
        if valuation is None:
            raise ValuationError("A valuation provider is required for a dismembered asset")

        value = 0.0
        if bare_fraction > 0.0:
            value += bare_fraction / 100.0 * self.demembrement(total_value, year, valuation).bare_value
        # a usufruct dies with its holder and never enters their estate
        if usufruct_fraction > 0.0 and context is not EvaluationContext.LEGAL_SUCCESSION:
            own_slice = total_value * usufruct_fraction / 100.0
            value += valuation.split(own_slice, owner_name, year).usufruct_value
        return value

    def owned_values(
        self,
        total_value: float,
        year: int,
        context: EvaluationContext,
        valuation: ValuationProvider | None = None,
    ) -> dict[str, float]:
        """Value attributed to every owner of the asset."""
        return {
            name: self.owned_value(name, total_value, year, context, valuation)
            for name in self.names
        }

    # --- Normalisation ---

    def group_shares(self) -> None:
        """Merge duplicate owners and reunite usufruct with bare ownership when they coincide."""
        if not self.is_dismembered:
            self.full_owners.group_shares()
            return

        self.usufruct_owners.group_shares()
        self.bare_owners.group_shares()
        if self.usufruct_owners.is_equal(self.bare_owners):
            self.full_owners = self.bare_owners.model_copy(deep=True)
            self.usufruct_owners = OwnerSet()
            self.bare_owners = OwnerSet()
            self.is_dismembered = False
