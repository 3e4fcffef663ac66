"""Integration tests for the annual ledger.

Tests the complete flow of one simulated year: incomes → assets → taxes →
expenses → successions → closing against the free investment pool.
"""

import pytest

from patrisim.application.services.ledger import AnnualLedgerBuilder
from patrisim.core.exceptions import InsufficientLiquidityError
from patrisim.domain.models.assets import InvestmentKind, PeriodicInvestment, RealEstateAsset
from patrisim.domain.models.cashflow import RevenueCategory, TaxCategory, cash_flow_table
from patrisim.domain.models.family import Adult, Family, IncomeKind, IncomeStream
from patrisim.domain.models.liabilities import Loan
from patrisim.domain.models.ownership import Ownership
from patrisim.domain.models.patrimoine import Patrimoine


@pytest.fixture
def retiree():
    """Single retiree with a tax-free pension."""
    return Family(
        adults=[
            Adult(
                name="Jean",
                birth_year=1955,
                incomes=[
                    IncomeStream(
                        name="Retraite", kind=IncomeKind.PENSION, net_amount=20_000, taxable_amount=0, first_year=2020
                    )
                ],
            )
        ]
    )


@pytest.fixture
def savings(free_investment_factory):
    return Patrimoine(
        free_investments=[free_investment_factory("AV Jean", "Jean", 10_000, inflation_rate_pct=0.0)]
    )


@pytest.fixture
def builder(retiree, savings, fiscal_model, settings):
    return AnnualLedgerBuilder(retiree, savings, fiscal_model, settings=settings)


class TestClosingTheYear:
    """Surplus and deficit of the adults."""

    def test_surplus_deposited_after_capitalization(self, builder, savings):
        line = builder.build(2026, life_expenses={"Vie courante": 18_000})
        account = savings.free_investment("AV Jean")
        assert line.adults_revenues[RevenueCategory.PENSIONS].credits.total == 20_000
        assert line.net_adults_cash_flow == pytest.approx(2_000)
        assert account.state.year == 2026
        assert account.state.investment == pytest.approx(12_000)
        assert account.state.interest == pytest.approx(10_000 * 0.01656)
        assert line.taxable_irpp_revenue_delayed_to_next_year == 0.0

    def test_deficit_funded_by_withdrawal(self, builder, savings):
        builder.build(2026, life_expenses={"Vie courante": 25_000})
        account = savings.free_investment("AV Jean")
        assert account.state.investment == pytest.approx(5_000)
        assert account.state.interest == pytest.approx(5_000 * 0.01656)

    def test_withdrawn_interests_covered_by_rebate(self, retiree, fiscal_model, settings, free_investment_factory):
        account = free_investment_factory("AV Jean", "Jean", 10_000, interest=5_000, periodic_social_taxes=False)
        builder = AnnualLedgerBuilder(retiree, Patrimoine(free_investments=[account]), fiscal_model, settings=settings)
        line = builder.build(2026, life_expenses={"Vie courante": 21_000})
        assert line.taxable_irpp_revenue_delayed_to_next_year == 0.0
        assert line.adult_taxes[TaxCategory.SOCIAL_TAXES].value_of("AV Jean") > 0.0

    def test_insufficient_liquidity(self, builder):
        with pytest.raises(InsufficientLiquidityError) as exc_info:
            builder.build(2026, life_expenses={"Vie courante": 40_000})
        assert exc_info.value.missing_amount == pytest.approx(10_000)

    def test_delayed_revenue_taxed(self, builder):
        line = builder.build(2026, taxable_irpp_revenue_delayed_from_last_year=20_000)
        assert line.adults_revenues.total_taxable_irpp == pytest.approx(20_000)
        assert line.adult_taxes.irpp.amount == pytest.approx((20_000 - 11_294) * 0.11)


class TestAssetsInTheLedger:
    """Revenues and expenses generated by the patrimony."""

    def test_rent_and_loan(self, retiree, savings, fiscal_model, settings):
        savings.real_estates.append(
            RealEstateAsset(
                name="Studio",
                ownership=Ownership.full(("Jean", 100.0)),
                buying_year=2020,
                buying_price=150_000,
                yearly_rent=6_000,
                yearly_local_taxes=800,
            )
        )
        savings.loans.append(
            Loan(
                name="Prêt Studio",
                ownership=Ownership.full(("Jean", 100.0)),
                principal=100_000,
                interest_rate_pct=0.0,
                first_year=2020,
                duration_years=10,
            )
        )
        line = AnnualLedgerBuilder(retiree, savings, fiscal_model, settings=settings).build(2026)
        assert line.adults_revenues[RevenueCategory.REAL_ESTATE_RENTS].credits.total == 6_000
        assert line.adults_revenues[RevenueCategory.REAL_ESTATE_RENTS].taxables_irpp.total == pytest.approx(4_200)
        assert line.adult_taxes[TaxCategory.LOCAL_TAXES].total == 800
        assert line.adult_taxes[TaxCategory.SOCIAL_TAXES].total == pytest.approx(4_200 * 0.172)
        assert line.debt_payments.total == pytest.approx(10_000)
        assert line.children_revenues.total_revenue == 0.0

    def test_sale_proceeds_invested(self, retiree, savings, fiscal_model, settings):
        savings.real_estates.append(
            RealEstateAsset(
                name="Studio",
                ownership=Ownership.full(("Jean", 100.0)),
                buying_year=2000,
                buying_price=100_000,
                selling_year=2025,
                selling_price=100_000,
            )
        )
        line = AnnualLedgerBuilder(retiree, savings, fiscal_model, settings=settings).build(
            2026, life_expenses={"Vie courante": 20_000}
        )
        assert line.adults_revenues[RevenueCategory.REAL_ESTATE_SALE].credits.total == pytest.approx(100_000)
        assert line.net_adults_cash_flow_sales_excluded == pytest.approx(0.0)
        assert savings.free_investment("AV Jean").state.investment == pytest.approx(110_000)

    def test_ordinary_plan_goes_to_flat_tax(self, retiree, savings, fiscal_model, settings):
        plan = PeriodicInvestment(
            name="CTO",
            kind=InvestmentKind.OTHER,
            ownership=Ownership.full(("Jean", 100.0)),
            yearly_payment=1_000,
            interest_rate_pct=3.0,
            first_year=2021,
            last_year=2025,
        )
        savings.periodic_investments.append(plan)
        line = AnnualLedgerBuilder(retiree, savings, fiscal_model, settings=settings).build(2026)
        interests = plan.value(2025) - 5_000
        assert line.adults_revenues[RevenueCategory.FINANCIALS].credits.total == pytest.approx(plan.value(2025))
        assert line.adults_revenues[RevenueCategory.FINANCIALS].taxables_irpp.total == 0.0
        assert line.adult_taxes[TaxCategory.FLAT_TAX].total == pytest.approx(interests * 0.128)
        assert line.invest_payments.total == 0.0

    def test_plan_payments_are_expenses(self, retiree, savings, fiscal_model, settings):
        savings.periodic_investments.append(
            PeriodicInvestment(
                name="PER",
                ownership=Ownership.full(("Jean", 100.0)),
                yearly_payment=1_500,
                first_year=2026,
                last_year=2035,
            )
        )
        line = AnnualLedgerBuilder(retiree, savings, fiscal_model, settings=settings).build(2026)
        assert line.invest_payments.total == 1_500
        assert line.net_adults_cash_flow == pytest.approx(18_500)


class TestDeathDuringTheYear:
    """Successions within the yearly ledger."""

    @pytest.fixture
    def estate(self, free_investment_factory):
        return Patrimoine(
            real_estates=[
                RealEstateAsset(
                    name="Maison",
                    ownership=Ownership.full(("M. Lionel", 100.0)),
                    buying_year=2010,
                    buying_price=400_000,
                )
            ],
            free_investments=[
                free_investment_factory("AV Lionel", "M. Lionel", 100_000),
                free_investment_factory("AV Lou", "Mme. Lou", 80_000),
            ],
        )

    def test_successions_recorded(self, family, estate, fiscal_model, settings):
        family.adults[0].death_year = 2026
        line = AnnualLedgerBuilder(family, estate, fiscal_model, settings=settings).build(2026)

        assert [s.decedent_name for s in line.legal_successions] == ["M. Lionel"]
        assert line.life_ins_successions[0].taxable_value == pytest.approx(100_000)
        child_tax = 8_072 * 0.05 + 4_037 * 0.10 + 3_823 * 0.15 + 4_068 * 0.20
        assert line.children_taxes[TaxCategory.SUCCESSION].total == pytest.approx(2 * child_tax)
        assert line.adult_taxes[TaxCategory.SUCCESSION].total == 0.0

        # the death capital goes to the surviving spouse's own contract
        assert line.adults_revenues[RevenueCategory.LIFE_INSURANCE_CAPITAL].credits.total == pytest.approx(100_000)
        assert estate.free_investment("AV Lou").state.investment == pytest.approx(180_000)
        assert estate.free_investment("AV Lionel").current_value == 0.0
        assert estate.real_estates[0].ownership.usufruct_owners.names == ["Mme. Lou"]

    def test_decedent_incomes_excluded(self, family, estate, fiscal_model, settings):
        family.adults[0].death_year = 2025
        line = AnnualLedgerBuilder(family, estate, fiscal_model, settings=settings).build(2026)
        assert line.sum_of_adults_revenues_sales_excluded == 0.0
        assert "M. Lionel" not in line.ages


class TestMultiYearRun:
    """Chaining yearly ledgers."""

    def test_table_of_lines(self, builder):
        lines = []
        delayed = 0.0
        for year in range(2026, 2031):
            line = builder.build(year, {"Vie courante": 19_000}, delayed)
            delayed = line.taxable_irpp_revenue_delayed_to_next_year
            lines.append(line)
        df = cash_flow_table(lines)
        assert list(df.index) == list(range(2026, 2031))
        assert (df["Solde Net Parents"] > 0).all()
