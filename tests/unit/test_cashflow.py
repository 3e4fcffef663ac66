"""Unit tests for patrisim.domain.models.cashflow module."""

import pytest

from patrisim.domain.calculator.fiscal import IrppResult
from patrisim.domain.models.cashflow import (
    CashFlowLine,
    NamedValueTable,
    RevenueCategory,
    TaxCategory,
    ValuedRevenues,
    cash_flow_table,
)
from patrisim.domain.models.succession import Inheritance, Succession, SuccessionKind


class TestNamedValueTable:
    """Tests for NamedValueTable."""

    def test_total_and_lookup(self):
        table = NamedValueTable("T")
        table.append("a", 10.0)
        table.append("b", 5.0)
        table.append("a", 1.0)
        assert table.total == 16.0
        assert table.names == ["a", "b", "a"]
        assert table.value_of("a") == 11.0
        assert table.value_of("z") == 0.0


class TestValuedRevenues:
    """Tests for ValuedRevenues."""

    def test_every_category_present(self):
        revenues = ValuedRevenues("R")
        assert set(revenues.per_category) == set(RevenueCategory)
        assert revenues.total_revenue == 0.0

    def test_sales_excluded(self):
        revenues = ValuedRevenues("R")
        revenues[RevenueCategory.PENSIONS].add("Retraite", 20_000, 18_000)
        revenues[RevenueCategory.REAL_ESTATE_SALE].add("Appartement", 300_000, 0)
        revenues[RevenueCategory.FINANCIALS].add("Plan", 5_000, 500)
        assert revenues.total_revenue == pytest.approx(325_000)
        assert revenues.total_revenue_sales_excluded == pytest.approx(20_000)
        assert revenues.total_taxable_irpp == pytest.approx(18_500)

    def test_delayed_revenue_is_taxable(self):
        revenues = ValuedRevenues("R", taxable_irpp_revenue_delayed_from_last_year=1_200)
        assert revenues.total_taxable_irpp == pytest.approx(1_200)

    def test_summary_in_display_order(self):
        summary = ValuedRevenues("R").summary
        assert summary.names[0] == RevenueCategory.WORK_INCOMES.label
        assert len(summary.named_values) == len(RevenueCategory)


class TestCashFlowLine:
    """Tests for CashFlowLine totals."""

    @pytest.fixture
    def line(self):
        line = CashFlowLine(year=2025)
        line.adults_revenues[RevenueCategory.WORK_INCOMES].add("M. Lionel - Salaire", 40_000, 36_000)
        line.adults_revenues[RevenueCategory.SCPI_SALE].add("SCPI", 10_000, 0)
        line.adult_taxes[TaxCategory.IRPP].append("IRPP", 3_000)
        line.adult_taxes.irpp = IrppResult(amount=3_000)
        line.life_expenses.append("Vie", 20_000)
        line.debt_payments.append("Prêt", 5_000)
        line.invest_payments.append("Plan", 1_000)
        line.children_revenues[RevenueCategory.SCPIS].add("SCPI", 800, 800)
        line.children_taxes[TaxCategory.SOCIAL_TAXES].append("SCPI", 137.6)
        return line

    def test_adults_cash_flow(self, line):
        assert line.sum_of_adults_revenues == pytest.approx(50_000)
        assert line.sum_of_adults_expenses == pytest.approx(29_000)
        assert line.net_adults_cash_flow == pytest.approx(21_000)
        assert line.net_adults_cash_flow_sales_excluded == pytest.approx(11_000)

    def test_children_cash_flow(self, line):
        assert line.net_children_cash_flow == pytest.approx(800 - 137.6)

    def test_empty_line(self):
        line = CashFlowLine(year=2030)
        assert line.net_adults_cash_flow == 0.0
        assert set(line.adult_taxes.per_category) == set(TaxCategory)

    def test_to_dict(self, line):
        line.legal_successions.append(
            Succession(
                kind=SuccessionKind.LEGAL,
                year_of_death=2025,
                decedent_name="M. Lionel",
                taxable_value=100_000,
                inheritances=[Inheritance("Arthur", 1.0, 100_000, 95_000, 5_000)],
            )
        )
        row = line.to_dict()
        assert row["Année"] == 2025
        assert row["IRPP"] == 3_000
        assert row["Solde Net Parents"] == pytest.approx(21_000)
        assert row["Droits de Succession"] == 5_000
        assert row["Droits Assurance Vie"] == 0


class TestCashFlowTable:
    """Tests for cash_flow_table."""

    def test_indexed_by_year(self):
        df = cash_flow_table([CashFlowLine(year=2025), CashFlowLine(year=2026)])
        assert list(df.index) == [2025, 2026]
        assert "Solde Net Parents" in df.columns

    def test_empty(self):
        assert cash_flow_table([]).empty
