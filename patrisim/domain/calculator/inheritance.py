"""Surviving spouse inheritance options.

When a spouse survives the decedent alongside children, the civil code
lets the spouse choose how the estate is shared. The option drives both the
ownership transfer and the fiscal valuation of each heir's share.
"""

from __future__ import annotations

from dataclasses import dataclass
from enum import Enum

from patrisim.core.exceptions import InvalidParameterError
from patrisim.domain.calculator.demembrement import DemembrementModel


@dataclass(frozen=True)
class InheritanceShares:
    """Fractions ([0, 1]) of the decedent's share received by each heir, by right."""

    for_spouse_usufruct: float
    for_spouse_bare: float
    for_spouse_full: float
    for_child_bare: float
    for_child_full: float


@dataclass(frozen=True)
class InheritanceValueShares:
    """Fractions ([0, 1]) of the estate's fiscal value received by each heir."""

    for_spouse: float
    for_child: float


class InheritanceFiscalOption(str, Enum):
    """Spouse option: usufruct of everything, available quota, or 1/4 PP + 3/4 UF."""

    FULL_USUFRUCT = "full_usufruct"
    QUOTITE_DISPONIBLE = "quotite_disponible"
    USUFRUCT_PLUS_BARE = "usufruct_plus_bare"

    def shares(self, nb_children: int) -> InheritanceShares:
        """Split of the decedent's rights between the spouse and each child."""
        if nb_children < 0:
            raise InvalidParameterError("nb_children", nb_children, "must be >= 0")
        if nb_children == 0:
            return InheritanceShares(0.0, 0.0, 1.0, 0.0, 0.0)

        n = float(nb_children)
        if self is InheritanceFiscalOption.FULL_USUFRUCT:
            return InheritanceShares(
                for_spouse_usufruct=1.0,
                for_spouse_bare=0.0,
                for_spouse_full=0.0,
                for_child_bare=1.0 / n,
                for_child_full=0.0,
            )
        if self is InheritanceFiscalOption.QUOTITE_DISPONIBLE:
            spouse = 1.0 / (n + 1.0)
            return InheritanceShares(
                for_spouse_usufruct=0.0,
                for_spouse_bare=0.0,
                for_spouse_full=spouse,
                for_child_bare=0.0,
                for_child_full=(1.0 - spouse) / n,
            )
        # 1/4 in full ownership + 3/4 in usufruct
        return InheritanceShares(
            for_spouse_usufruct=1.0,
            for_spouse_bare=0.25,
            for_spouse_full=0.0,
            for_child_bare=0.75 / n,
            for_child_full=0.0,
        )

    def shared_values(
        self,
        nb_children: int,
        spouse_age: int,
        demembrement: DemembrementModel,
    ) -> InheritanceValueShares:
        """Fiscal value fractions, valuing usufruct with the spouse's age."""
        if nb_children <= 0:
            return InheritanceValueShares(for_spouse=1.0, for_child=0.0)

        n = float(nb_children)
        if self is InheritanceFiscalOption.QUOTITE_DISPONIBLE:
            spouse = 1.0 / (n + 1.0)
            return InheritanceValueShares(for_spouse=spouse, for_child=(1.0 - spouse) / n)

        split = demembrement.split(1.0, spouse_age)
        if self is InheritanceFiscalOption.FULL_USUFRUCT:
            return InheritanceValueShares(for_spouse=split.usufruct_value, for_child=split.bare_value / n)
        return InheritanceValueShares(
            for_spouse=0.25 + 0.75 * split.usufruct_value,
            for_child=0.75 * split.bare_value / n,
        )
