"""Annual ledger builder.

Builds the CashFlowLine of one simulated year, in strict phase order:
1. ages, work incomes and pensions;
2. rents, SCPI dividends, sale proceeds and periodic investment liquidations;
3. flat tax, income tax and wealth tax;
4. life expenses, loan repayments and periodic investment payments;
5. successions of the adults who die during the year;
6. closing of the adults' net cash flow against the free investment pool.

The builder mutates the patrimony only through the liquidity waterfall and
the succession manager. A failing phase raises and no line is returned.
"""

from __future__ import annotations

from typing import Mapping

from patrisim.application.services.liquidity import LifeInsuranceRebate, LiquidityWaterfall
from patrisim.application.services.succession import SuccessionManager
from patrisim.application.services.transfer import TransferEngine
from patrisim.core.logging import bind_simulation_year, clear_simulation_context, get_logger
from patrisim.core.settings import SimulationSettings, get_settings
from patrisim.domain.calculator.demembrement import ValuationProvider
from patrisim.domain.calculator.fiscal import FiscalModel
from patrisim.domain.models.assets import HeldAsset, InvestmentKind, YearlyRevenue
from patrisim.domain.models.cashflow import CashFlowLine, RevenueCategory, TaxCategory
from patrisim.domain.models.family import Family, IncomeKind
from patrisim.domain.models.ownership import EvaluationContext
from patrisim.domain.models.patrimoine import Patrimoine

log = get_logger(__name__)


class AnnualLedgerBuilder:
    """Builds one CashFlowLine per simulated year for a family and its patrimony."""

    def __init__(
        self,
        family: Family,
        patrimoine: Patrimoine,
        fiscal_model: FiscalModel,
        valuation: ValuationProvider | None = None,
        settings: SimulationSettings | None = None,
    ):
        self.family = family
        self.patrimoine = patrimoine
        self.fiscal_model = fiscal_model
        self.valuation = valuation or ValuationProvider(family)
        self.settings = settings or get_settings()
        self.waterfall = LiquidityWaterfall(patrimoine, family)
        self.succession_manager = SuccessionManager(
            family,
            patrimoine,
            fiscal_model,
            self.valuation,
            TransferEngine(self.settings),
        )

    def build(
        self,
        year: int,
        life_expenses: Mapping[str, float] | None = None,
        taxable_irpp_revenue_delayed_from_last_year: float = 0.0,
    ) -> CashFlowLine:
        """Compute the ledger of `year`.

        Args:
            year: Simulated year
            life_expenses: Expenses of the year by label (positive amounts)
            taxable_irpp_revenue_delayed_from_last_year: Taxable interests carried over

        Returns:
            The closed CashFlowLine

        Raises:
            InsufficientLiquidityError: the free investments cannot cover the deficit.
        """
        bind_simulation_year(year)
        try:
            adults = self.family.adults_alive_names(year)
            children = self.family.children_alive_names(year)

            line = CashFlowLine(year=year, ages=self.family.ages(year))
            line.adults_revenues.taxable_irpp_revenue_delayed_from_last_year = (
                taxable_irpp_revenue_delayed_from_last_year
            )
            rebate = LifeInsuranceRebate(
                self.fiscal_model.life_insurance_rebate_per_person * len(adults)
            )

            self._populate_incomes(line, year)
            self._manage_real_estates(line, year, adults, children)
            self._manage_scpis(line, year, adults, children)
            self._manage_periodic_investments(line, year, adults, children, rebate)

            self._compute_flat_tax(line)
            self._compute_irpp(line, year)
            self._compute_isf(line, year, adults)

            for label, amount in (life_expenses or {}).items():
                line.life_expenses.append(label, amount)
            self._manage_loans(line, year, adults)

            self._manage_successions(line, year)

            self._close_year(line, year, adults, rebate)

            log.info(
                "year_closed",
                revenues=round(line.sum_of_adults_revenues, 2),
                expenses=round(line.sum_of_adults_expenses, 2),
                net_cash_flow=round(line.net_adults_cash_flow_sales_excluded, 2),
                delayed_taxable=round(line.taxable_irpp_revenue_delayed_to_next_year, 2),
            )
            return line
        finally:
            clear_simulation_context()

    # --- Phase 1: incomes ---

    def _populate_incomes(self, line: CashFlowLine, year: int) -> None:
        for adult in self.family.adults:
            if not adult.is_alive(year):
                continue
            for income in adult.incomes:
                category = (
                    RevenueCategory.PENSIONS if income.kind == IncomeKind.PENSION else RevenueCategory.WORK_INCOMES
                )
                line.adults_revenues[category].add(
                    f"{adult.name} - {income.name}", income.net(year), income.taxable(year)
                )

    # --- Phase 2: assets ---

    def _split_by_group(
        self,
        owned_values: dict[str, float],
        adults: list[str],
        children: list[str],
    ) -> tuple[float, float]:
        adults_part = sum(v for name, v in owned_values.items() if name in adults)
        children_part = sum(v for name, v in owned_values.items() if name in children)
        return adults_part, children_part

    def _credit_revenue(
        self,
        line: CashFlowLine,
        asset: HeldAsset,
        category: RevenueCategory,
        revenue: YearlyRevenue,
        local_taxes: float,
        adults: list[str],
        children: list[str],
    ) -> None:
        """Split a yearly revenue between adults and children by their revenue rights."""
        groups = (
            (adults, line.adults_revenues, line.adult_taxes),
            (children, line.children_revenues, line.children_taxes),
        )
        for names, revenues, taxes in groups:
            fraction = 0.0
            if asset.provides_revenue(names):
                fraction = asset.ownership.owned_revenue_fraction(names) / 100.0
            revenues[category].add(asset.name, fraction * revenue.revenue, fraction * revenue.taxable_irpp)
            taxes[TaxCategory.SOCIAL_TAXES].append(asset.name, fraction * revenue.social_taxes)
            taxes[TaxCategory.LOCAL_TAXES].append(asset.name, fraction * local_taxes)

    def _credit_sale(
        self,
        line: CashFlowLine,
        asset: HeldAsset,
        category: RevenueCategory,
        year: int,
        adults: list[str],
        children: list[str],
    ) -> None:
        """Invest the net proceeds of a sale made last year on behalf of the owners."""
        adults_sale = children_sale = 0.0
        if asset.is_part_of_patrimoine(adults) or asset.is_part_of_patrimoine(children):
            liquidated = asset.liquidated_value(year - 1, self.fiscal_model)
            if liquidated.revenue > 0:
                owned_sale_values = asset.ownership.owned_values(
                    liquidated.net_revenue, year, EvaluationContext.PATRIMOINE, self.valuation
                )
                self.waterfall.invest_capital(owned_sale_values, year)
                adults_sale, children_sale = self._split_by_group(owned_sale_values, adults, children)
                log.info("sale_proceeds_invested", asset=asset.name, net_revenue=round(liquidated.net_revenue, 2))
        line.adults_revenues[category].add(asset.name, adults_sale, 0.0)
        line.children_revenues[category].add(asset.name, children_sale, 0.0)

    def _manage_real_estates(self, line: CashFlowLine, year: int, adults: list[str], children: list[str]) -> None:
        for real_estate in self.patrimoine.real_estates:
            rent = real_estate.rent(year, self.fiscal_model, self.settings.rent_abatement_pct)
            self._credit_revenue(
                line,
                real_estate,
                RevenueCategory.REAL_ESTATE_RENTS,
                rent,
                real_estate.local_taxes(year),
                adults,
                children,
            )
            self._credit_sale(line, real_estate, RevenueCategory.REAL_ESTATE_SALE, year, adults, children)

    def _manage_scpis(self, line: CashFlowLine, year: int, adults: list[str], children: list[str]) -> None:
        # each SCPI is attributed through its own ownership
        for scpi in self.patrimoine.scpis:
            revenue = scpi.revenue(year, self.fiscal_model)
            self._credit_revenue(line, scpi, RevenueCategory.SCPIS, revenue, 0.0, adults, children)
            self._credit_sale(line, scpi, RevenueCategory.SCPI_SALE, year, adults, children)

    def _manage_periodic_investments(
        self,
        line: CashFlowLine,
        year: int,
        adults: list[str],
        children: list[str],
        rebate: LifeInsuranceRebate,
    ) -> None:
        for plan in self.patrimoine.periodic_investments:
            name = plan.name
            adults_sale = children_sale = 0.0
            taxable = social_taxes = 0.0
            adults_fraction = 1.0

            if plan.is_part_of_patrimoine(adults) or plan.is_part_of_patrimoine(children):
                liquidated = plan.liquidated_value(year - 1, self.fiscal_model)
                if liquidated.revenue > 0:
                    owned_values = plan.ownership.owned_values(
                        liquidated.revenue, year, EvaluationContext.PATRIMOINE, self.valuation
                    )
                    self.waterfall.invest_capital(owned_values, year)
                    adults_sale, children_sale = self._split_by_group(owned_values, adults, children)
                    adults_fraction = adults_sale / liquidated.revenue

                    if plan.kind == InvestmentKind.LIFE_INSURANCE:
                        taxable = rebate.consume(liquidated.taxable_irpp_interests)
                    else:
                        taxable = liquidated.taxable_irpp_interests
                    social_taxes = liquidated.social_taxes

            # interests of ordinary accounts go to the flat tax, not to IRPP
            to_flat_tax = plan.kind == InvestmentKind.OTHER
            for revenues, taxes, fraction, sale in (
                (line.adults_revenues, line.adult_taxes, adults_fraction, adults_sale),
                (line.children_revenues, line.children_taxes, 1.0 - adults_fraction, children_sale),
            ):
                revenues[RevenueCategory.FINANCIALS].add(name, sale, 0.0 if to_flat_tax else fraction * taxable)
                if to_flat_tax:
                    revenues.flat_tax_base.append(name, fraction * taxable)
                taxes[TaxCategory.SOCIAL_TAXES].append(name, fraction * social_taxes)

            payment = plan.yearly_total_payment(year) if plan.is_part_of_patrimoine(adults) else 0.0
            line.invest_payments.append(name, payment)

    # --- Phase 3: taxes ---

    def _compute_flat_tax(self, line: CashFlowLine) -> None:
        for revenues, taxes in (
            (line.adults_revenues, line.adult_taxes),
            (line.children_revenues, line.children_taxes),
        ):
            taxes[TaxCategory.FLAT_TAX].append(
                TaxCategory.FLAT_TAX.label, self.fiscal_model.flat_tax(revenues.flat_tax_base.total)
            )

    def _compute_irpp(self, line: CashFlowLine, year: int) -> None:
        irpp = self.fiscal_model.irpp(
            line.adults_revenues.total_taxable_irpp,
            self.family.nb_adults_alive(year),
            self.family.nb_fiscal_children(year, self.settings.fiscal_child_max_age),
        )
        line.adult_taxes.irpp = irpp
        line.adult_taxes[TaxCategory.IRPP].append(TaxCategory.IRPP.label, irpp.amount)

    def _compute_isf(self, line: CashFlowLine, year: int, adults: list[str]) -> None:
        taxable_asset = self.patrimoine.real_estate_value(year, EvaluationContext.IFI, adults, self.valuation)
        isf = self.fiscal_model.isf(taxable_asset)
        line.adult_taxes.isf = isf
        line.adult_taxes[TaxCategory.ISF].append(TaxCategory.ISF.label, isf.amount)

    # --- Phase 4: expenses ---

    def _manage_loans(self, line: CashFlowLine, year: int, adults: list[str]) -> None:
        for loan in self.patrimoine.loans:
            payment = loan.yearly_payment(year) if loan.is_part_of_patrimoine(adults) else 0.0
            line.debt_payments.append(loan.name, payment)

    # --- Phase 5: successions ---

    def _manage_successions(self, line: CashFlowLine, year: int) -> None:
        legal, life_insurance = self.succession_manager.manage(year)
        line.legal_successions = legal
        line.life_ins_successions = life_insurance

        adults = self.family.adults_alive_names(year)
        children = self.family.children_alive_names(year)

        for succession in legal:
            line.adult_taxes[TaxCategory.SUCCESSION].append(
                succession.decedent_name,
                sum(i.tax for i in succession.inheritances if i.successor_name in adults),
            )
            line.children_taxes[TaxCategory.SUCCESSION].append(
                succession.decedent_name,
                sum(i.tax for i in succession.inheritances if i.successor_name in children),
            )

        for succession in life_insurance:
            received = {i.successor_name: i.net for i in succession.inheritances}
            self.waterfall.invest_capital(received, year)
            adults_part, children_part = self._split_by_group(received, adults, children)
            line.adults_revenues[RevenueCategory.LIFE_INSURANCE_CAPITAL].add(
                succession.decedent_name, adults_part, 0.0
            )
            line.children_revenues[RevenueCategory.LIFE_INSURANCE_CAPITAL].add(
                succession.decedent_name, children_part, 0.0
            )

    # --- Phase 6: closing ---

    def _close_year(
        self,
        line: CashFlowLine,
        year: int,
        adults: list[str],
        rebate: LifeInsuranceRebate,
    ) -> None:
        """Invest the surplus or fund the deficit of the adults."""
        net = line.net_adults_cash_flow_sales_excluded
        if net > 0.0:
            self.waterfall.capitalize_free_investments(year)
            self.waterfall.invest_net_cash_flow(net, adults)
        else:
            taxable = self.waterfall.get_cash_from_investments(
                -net, year, adults, line.adult_taxes, rebate
            )
            line.taxable_irpp_revenue_delayed_to_next_year += taxable
            self.waterfall.capitalize_free_investments(year)
