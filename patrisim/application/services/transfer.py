"""Ownership transfer on death.

The engine answers one question: who owns what once a family member has
died. The generic path follows civil law heirship and the surviving
spouse's fiscal option. Life insurance follows its own path because the
death capital is paid to the clause's beneficiaries, outside the estate.

Every transfer works on a deep copy: the caller's ownership is left
untouched when a transfer fails.
"""

from __future__ import annotations

from patrisim.core.exceptions import (
    DecedentIsBareOwnerError,
    MissingFiscalOptionError,
    NoBareOwnerError,
    SeveralUsufructOwnersError,
)
from patrisim.core.logging import get_logger
from patrisim.core.settings import SimulationSettings, get_settings
from patrisim.domain.calculator.inheritance import InheritanceFiscalOption
from patrisim.domain.models.clause import LifeInsuranceClause
from patrisim.domain.models.owners import OwnerSet
from patrisim.domain.models.ownership import Ownership

log = get_logger(__name__)


class TransferEngine:
    """Applies succession rules to the Ownership of one asset."""

    def __init__(self, settings: SimulationSettings | None = None):
        self.settings = settings or get_settings()

    def resolve_option(self, option: InheritanceFiscalOption | None) -> InheritanceFiscalOption:
        """Spouse option, falling back to the configured default."""
        if option is not None:
            return option
        try:
            return InheritanceFiscalOption(self.settings.default_fiscal_option)
        except ValueError as exc:
            raise MissingFiscalOptionError(
                f"No fiscal option and invalid default '{self.settings.default_fiscal_option}'"
            ) from exc

    # --- Generic succession ---

    def transfer_ownership(
        self,
        ownership: Ownership,
        decedent: str,
        children: list[str] | None = None,
        spouse: str | None = None,
        spouse_option: InheritanceFiscalOption | None = None,
    ) -> Ownership:
        """Ownership of the asset once `decedent` has passed away.

        Args:
            ownership: Ownership before the death (not modified)
            decedent: Name of the deceased person
            children: Surviving children, heirs of the decedent
            spouse: Surviving spouse, if any
            spouse_option: Option chosen by the surviving spouse

        Returns:
            New, validated Ownership

        Raises:
            InvalidOwnershipError: the ownership is invalid before or after.
            SeveralUsufructOwnersError: the decedent shares the usufruct.
        """
        ownership.check_valid("before transfer", self.settings.ownership_tolerance)
        children = list(children or [])
        result = ownership.model_copy(deep=True)

        if result.is_dismembered:
            self._transfer_dismembered(result, decedent, children, spouse, spouse_option)
        elif result.has_a_full_owner(decedent):
            self._transfer_full_ownership(result, decedent, children, spouse, spouse_option)

        result.check_valid("after transfer", self.settings.ownership_tolerance)
        return result

    def _transfer_dismembered(
        self,
        ownership: Ownership,
        decedent: str,
        children: list[str],
        spouse: str | None,
        spouse_option: InheritanceFiscalOption | None,
    ) -> None:
        is_usufructuary = ownership.has_an_usufruct_owner(decedent)
        is_bare_owner = ownership.has_a_bare_owner(decedent)

        if is_usufructuary and is_bare_owner:
            if children:
                # usufruct rejoins bare ownership, then the decedent's full share is inherited
                self._extinguish_usufruct(ownership, decedent)
                self._transfer_full_ownership(ownership, decedent, children, spouse, spouse_option)
            elif spouse:
                ownership.usufruct_owners.replace(decedent, [spouse])
                ownership.bare_owners.replace(decedent, [spouse])
                ownership.group_shares()
        elif is_usufructuary:
            self._extinguish_usufruct(ownership, decedent)
        elif is_bare_owner:
            self._transfer_bare_ownership(ownership, decedent, children, spouse, spouse_option)

    @staticmethod
    def _extinguish_usufruct(ownership: Ownership, decedent: str) -> None:
        """Bare owners become full owners of their own fractions."""
        if len(ownership.usufruct_owners) > 1 or not ownership.has_an_usufruct_owner(decedent):
            raise SeveralUsufructOwnersError(
                f"Cannot transfer usufruct of '{decedent}' shared with {ownership.usufruct_owners.names}"
            )
        ownership.full_owners = ownership.bare_owners.model_copy(deep=True)
        ownership.usufruct_owners = OwnerSet()
        ownership.bare_owners = OwnerSet()
        ownership.is_dismembered = False
        ownership.group_shares()

    def _transfer_bare_ownership(
        self,
        ownership: Ownership,
        decedent: str,
        children: list[str],
        spouse: str | None,
        spouse_option: InheritanceFiscalOption | None,
    ) -> None:
        if not spouse and not children:
            return

        if not spouse:
            ownership.bare_owners.replace(decedent, children)
        else:
            shares = self.resolve_option(spouse_option).shares(len(children))
            fraction = ownership.bare_owners.remove(decedent)
            ownership.bare_owners.append(spouse, fraction * (shares.for_spouse_bare + shares.for_spouse_full))
            for child in children:
                ownership.bare_owners.append(child, fraction * (shares.for_child_bare + shares.for_child_full))
        ownership.group_shares()

    def _transfer_full_ownership(
        self,
        ownership: Ownership,
        decedent: str,
        children: list[str],
        spouse: str | None,
        spouse_option: InheritanceFiscalOption | None,
    ) -> None:
        if not spouse:
            if children:
                ownership.full_owners.replace(decedent, children)
            return

        shares = self.resolve_option(spouse_option).shares(len(children))
        if shares.for_spouse_usufruct > 0.0:
            # co-owners keep their fractions in both usufruct and bare ownership
            fraction = ownership.full_owners.fraction_of(decedent)
            ownership.set_dismembered(True)
            ownership.usufruct_owners.remove(decedent)
            ownership.bare_owners.remove(decedent)
            ownership.usufruct_owners.append(spouse, fraction * shares.for_spouse_usufruct)
            ownership.bare_owners.append(spouse, fraction * shares.for_spouse_bare)
            for child in children:
                ownership.bare_owners.append(child, fraction * shares.for_child_bare)
        else:
            fraction = ownership.full_owners.remove(decedent)
            ownership.full_owners.append(spouse, fraction * shares.for_spouse_full)
            for child in children:
                ownership.full_owners.append(child, fraction * shares.for_child_full)
        ownership.group_shares()

    # --- Life insurance ---

    def transfer_life_insurance(
        self,
        ownership: Ownership,
        clause: LifeInsuranceClause | None,
        decedent: str,
        spouse: str | None = None,
        children: list[str] | None = None,
    ) -> tuple[Ownership, LifeInsuranceClause | None]:
        """Ownership and clause of a life insurance once `decedent` has passed away.

        The decedent's capital itself is paid out as death capital before
        this transfer, so a sole holder leaves the contract without owner.

        Returns:
            Tuple of (new ownership, new clause)

        Raises:
            InvalidOwnershipError: the ownership is invalid before or after.
            InvalidClauseError: the clause is invalid before or after.
            SeveralUsufructOwnersError: the decedent shares the usufruct of the capital.
            NoBareOwnerError: the dismembered capital has no bare owner.
            DecedentIsBareOwnerError: the decedent is bare owner of the capital.
        """
        if clause is not None:
            clause.validate_clause()
        children = list(children or [])
        result = ownership.model_copy(deep=True)
        new_clause = clause.model_copy(deep=True) if clause is not None else None

        if result.is_dismembered and result.has_an_usufruct_owner(decedent) and not result.bare_owners:
            raise NoBareOwnerError("No bare owner to receive the life insurance usufruct")
        result.check_valid("before life insurance transfer", self.settings.ownership_tolerance)

        if result.is_dismembered:
            self._transfer_dismembered_life_insurance(result, decedent)
        else:
            new_clause = self._transfer_undismembered_life_insurance(
                result, new_clause, decedent, spouse, children
            )

        result.check_valid("after life insurance transfer", self.settings.ownership_tolerance)
        if new_clause is not None:
            new_clause.validate_clause()
        return result, new_clause

    @staticmethod
    def _transfer_dismembered_life_insurance(ownership: Ownership, decedent: str) -> None:
        if ownership.has_a_bare_owner(decedent):
            raise DecedentIsBareOwnerError(
                f"'{decedent}' is bare owner of a dismembered life insurance capital"
            )
        if ownership.has_an_usufruct_owner(decedent):
            if len(ownership.usufruct_owners) > 1:
                raise SeveralUsufructOwnersError(
                    f"Life insurance usufruct of '{decedent}' shared with {ownership.usufruct_owners.names}"
                )
            ownership.full_owners = ownership.bare_owners.model_copy(deep=True)
            ownership.usufruct_owners = OwnerSet()
            ownership.bare_owners = OwnerSet()
            ownership.is_dismembered = False
            ownership.group_shares()

    @staticmethod
    def _transfer_undismembered_life_insurance(
        ownership: Ownership,
        clause: LifeInsuranceClause | None,
        decedent: str,
        spouse: str | None,
        children: list[str],
    ) -> LifeInsuranceClause | None:
        if not ownership.has_a_full_owner(decedent):
            return clause

        if ownership.has_a_unique_full_owner(decedent):
            ownership.full_owners = OwnerSet()
            return clause

        ownership.full_owners.redistribute_share(of=decedent)
        ownership.group_shares()
        if clause is not None and spouse and ownership.has_a_full_owner(spouse) and children:
            # the spouse's own death must not pay the capital back to the spouse
            share = 100.0 / len(children)
            clause = LifeInsuranceClause(
                is_optional=False,
                is_dismembered=False,
                full_recipients=OwnerSet.of(*((child, share) for child in children)),
            )
            log.debug("life_insurance_clause_rewritten", decedent=decedent, recipients=children)
        return clause
