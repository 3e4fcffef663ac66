"""Successions of the adults who die during a simulated year.

For each decedent, in declaration order:
1. the legal succession is valued at the end of the previous year and
   shared between the surviving spouse and the children;
2. the life insurance death capitals are shared according to each
   contract's beneficiary clause;
3. every right held by the decedent is transferred to the heirs.
"""

from __future__ import annotations

from patrisim.application.services.ownership_manager import OwnershipManager
from patrisim.application.services.transfer import TransferEngine
from patrisim.core.logging import get_logger
from patrisim.domain.calculator.demembrement import ValuationProvider
from patrisim.domain.calculator.fiscal import FiscalModel
from patrisim.domain.models.clause import LifeInsuranceClause
from patrisim.domain.models.family import Adult, Family
from patrisim.domain.models.ownership import EvaluationContext
from patrisim.domain.models.patrimoine import Patrimoine
from patrisim.domain.models.succession import Inheritance, Succession, SuccessionKind

log = get_logger(__name__)


class SuccessionManager:
    """Computes the successions of the year and transfers the estates."""

    def __init__(
        self,
        family: Family,
        patrimoine: Patrimoine,
        fiscal_model: FiscalModel,
        valuation: ValuationProvider,
        engine: TransferEngine | None = None,
    ):
        self.family = family
        self.patrimoine = patrimoine
        self.fiscal_model = fiscal_model
        self.valuation = valuation
        self.engine = engine or TransferEngine()
        self.ownership_manager = OwnershipManager(family, self.engine)

    def manage(self, year: int) -> tuple[list[Succession], list[Succession]]:
        """Process every adult dying during `year`.

        Returns:
            Tuple of (legal successions, life insurance successions)
        """
        legal_successions: list[Succession] = []
        life_insurance_successions: list[Succession] = []

        for idx, decedent in enumerate(self.family.deceased_adults(during=year)):
            is_first = idx == 0
            spouse_name, spouse, children = self.ownership_manager.heirs_of(decedent, year, is_first)

            legal = self.legal_succession(decedent, year, spouse, children)
            life_insurance = self.life_insurance_succession(decedent, year, spouse_name, children)
            legal_successions.append(legal)
            life_insurance_successions.append(life_insurance)

            self.ownership_manager.transfer_ownership_of(self.patrimoine, decedent, year, is_first)

            log.info(
                "decedent_processed",
                decedent=decedent,
                spouse=spouse_name,
                children=children,
                legal_taxable=round(legal.taxable_value, 2),
                legal_tax=round(legal.tax, 2),
                life_insurance_capital=round(life_insurance.taxable_value, 2),
                life_insurance_tax=round(life_insurance.tax, 2),
            )

        return legal_successions, life_insurance_successions

    # --- Legal succession ---

    def legal_succession(
        self,
        decedent: str,
        year: int,
        spouse: Adult | None,
        children: list[str],
    ) -> Succession:
        """Estate of `decedent` valued at the end of the previous year, shared between heirs."""
        estate = self.patrimoine.owned_value(
            decedent, year - 1, EvaluationContext.LEGAL_SUCCESSION, self.valuation
        )

        percents: dict[str, float] = {}
        if spouse is not None:
            option = self.engine.resolve_option(spouse.fiscal_option)
            shares = option.shared_values(
                len(children), spouse.age(year), self.valuation.demembrement
            )
            percents[spouse.name] = shares.for_spouse
            for child in children:
                percents[child] = shares.for_child
        elif children:
            for child in children:
                percents[child] = 1.0 / len(children)

        inheritances = []
        for name, percent in percents.items():
            brut = estate * percent
            if spouse is not None and name == spouse.name:
                tax = 0.0
            else:
                tax = self.fiscal_model.inheritance_tax_of_child(max(0.0, brut)).tax
            inheritances.append(
                Inheritance(successor_name=name, percent=percent, brut=brut, net=brut - tax, tax=tax)
            )

        return Succession(
            kind=SuccessionKind.LEGAL,
            year_of_death=year,
            decedent_name=decedent,
            taxable_value=estate,
            inheritances=inheritances,
        )

    # --- Life insurance succession ---

    def life_insurance_succession(
        self,
        decedent: str,
        year: int,
        spouse_name: str | None,
        children: list[str],
    ) -> Succession:
        """Death capitals of the decedent's life insurances, shared per clause.

        The levy applies to the total received by each beneficiary, the
        spouse being exempt.
        """
        received: dict[str, float] = {}
        total_capital = 0.0

        for fi in self.patrimoine.free_investments:
            if not fi.is_life_insurance or fi.ownership.is_dismembered:
                continue
            if not fi.ownership.has_a_full_owner(decedent):
                continue
            capital = fi.owned_value(decedent, year - 1, EvaluationContext.LIFE_INSURANCE_SUCCESSION)
            if capital <= 0.0:
                continue

            clause = fi.clause or LifeInsuranceClause.standard(spouse_name, children)
            if clause is None:
                log.warning("life_insurance_without_beneficiary", vehicle=fi.name, decedent=decedent, capital=capital)
                continue

            total_capital += capital
            for name, share in clause.recipients_shares(capital, year, self.valuation).items():
                received[name] = received.get(name, 0.0) + share

        # the spouse of the decedent is exempt, even when the clause names them
        decedent_spouse = self.family.spouse_name_of(decedent)
        inheritances = []
        for name, brut in received.items():
            result = self.fiscal_model.life_insurance_inheritance_tax(brut, to_spouse=(name == decedent_spouse))
            inheritances.append(
                Inheritance(
                    successor_name=name,
                    percent=brut / total_capital if total_capital > 0 else 0.0,
                    brut=brut,
                    net=result.net_amount,
                    tax=result.tax,
                )
            )

        return Succession(
            kind=SuccessionKind.LIFE_INSURANCE,
            year_of_death=year,
            decedent_name=decedent,
            taxable_value=total_capital,
            inheritances=inheritances,
        )
