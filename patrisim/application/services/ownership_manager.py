"""Transfer of a whole patrimony on the death of a family member."""

from __future__ import annotations

from patrisim.application.services.transfer import TransferEngine
from patrisim.core.logging import get_logger
from patrisim.domain.models.family import Adult, Family
from patrisim.domain.models.free_investment import FreeInvestment
from patrisim.domain.models.ownable import OwnableAsset
from patrisim.domain.models.patrimoine import Patrimoine

log = get_logger(__name__)


class OwnershipManager:
    """Moves every right held by a decedent to their heirs."""

    def __init__(self, family: Family, engine: TransferEngine | None = None):
        self.family = family
        self.engine = engine or TransferEngine()

    def heirs_of(self, decedent: str, year: int, is_first_decedent: bool = True) -> tuple[str | None, Adult | None, list[str]]:
        """Surviving spouse (name and person) and children of `decedent`.

        The spouse counts only if alive at the end of the previous year and
        only for the first death of the year.
        """
        spouse_name: str | None = None
        spouse: Adult | None = None
        candidate = self.family.spouse_name_of(decedent)
        if candidate and is_first_decedent:
            member = self.family.member(candidate)
            if isinstance(member, Adult) and member.is_alive(year - 1):
                spouse_name = candidate
                spouse = member
        return spouse_name, spouse, self.family.children_alive_names(year)

    def transfer_ownership_of(
        self,
        patrimoine: Patrimoine,
        decedent: str,
        year: int,
        is_first_decedent: bool = True,
    ) -> None:
        """Transfer every asset and liability held by `decedent` during `year`."""
        spouse_name, spouse, children = self.heirs_of(decedent, year, is_first_decedent)
        option = spouse.fiscal_option if spouse is not None else None

        for fi in patrimoine.free_investments:
            if fi.value(year) <= 0:
                continue
            if fi.is_life_insurance:
                self._transfer_life_insurance(fi, decedent, spouse_name, children)
            else:
                self._transfer(fi, decedent, children, spouse_name, option)
            fi.initialize_interests_after_transmission(year)

        for asset in [*patrimoine.periodic_investments, *patrimoine.real_estates, *patrimoine.scpis]:
            if asset.value(year) > 0:
                self._transfer(asset, decedent, children, spouse_name, option)

        for liability in patrimoine.liabilities:
            if liability.value(year) < 0:
                self._transfer(liability, decedent, children, spouse_name, option)

    def _transfer(self, ownable: OwnableAsset, decedent, children, spouse_name, option) -> None:
        if not ownable.is_part_of_patrimoine([decedent]):
            return
        before = repr(ownable.ownership)
        ownable.ownership = self.engine.transfer_ownership(
            ownable.ownership,
            decedent=decedent,
            children=children,
            spouse=spouse_name,
            spouse_option=option,
        )
        log.debug("ownership_transferred", asset=ownable.name, decedent=decedent, before=before, after=repr(ownable.ownership))

    def _transfer_life_insurance(self, fi: FreeInvestment, decedent, spouse_name, children) -> None:
        if not fi.is_part_of_patrimoine([decedent]):
            return
        before = repr(fi.ownership)
        ownership, clause = self.engine.transfer_life_insurance(
            fi.ownership,
            fi.clause,
            decedent=decedent,
            spouse=spouse_name,
            children=children,
        )
        # the capital is paid out on the ownership held at the death
        death_capital = fi.withdraw_life_insurance_death_capital(decedent)
        fi.ownership, fi.clause = ownership, clause
        log.debug(
            "ownership_transferred",
            asset=fi.name,
            decedent=decedent,
            death_capital=death_capital,
            before=before,
            after=repr(fi.ownership),
        )
