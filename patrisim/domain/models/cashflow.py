"""Annual cash flow ledger.

A CashFlowLine aggregates, for one simulated year, the revenues and taxes
of the adults and of the children, the expenses of the household, and the
successions of the year.
"""

from __future__ import annotations

from dataclasses import dataclass, field
from enum import Enum
from typing import Any, Iterable

import pandas as pd

from patrisim.domain.calculator.fiscal import IrppResult, IsfResult
from patrisim.domain.models.succession import Succession


class RevenueCategory(str, Enum):
    """Revenue categories, in display order."""

    WORK_INCOMES = "work_incomes"
    PENSIONS = "pensions"
    REAL_ESTATE_RENTS = "real_estate_rents"
    SCPIS = "scpis"
    FINANCIALS = "financials"
    REAL_ESTATE_SALE = "real_estate_sale"
    SCPI_SALE = "scpi_sale"
    LIFE_INSURANCE_CAPITAL = "life_insurance_capital"

    @property
    def label(self) -> str:
        return _REVENUE_LABELS[self]

    @property
    def is_part_of_cash_flow(self) -> bool:
        """False for proceeds already reinvested when they are received."""
        return self not in (
            RevenueCategory.FINANCIALS,
            RevenueCategory.REAL_ESTATE_SALE,
            RevenueCategory.SCPI_SALE,
            RevenueCategory.LIFE_INSURANCE_CAPITAL,
        )


_REVENUE_LABELS = {
    RevenueCategory.WORK_INCOMES: "Revenus du Travail",
    RevenueCategory.PENSIONS: "Pensions",
    RevenueCategory.REAL_ESTATE_RENTS: "Loyers",
    RevenueCategory.SCPIS: "Revenus SCPI",
    RevenueCategory.FINANCIALS: "Liquidations Financières",
    RevenueCategory.REAL_ESTATE_SALE: "Ventes Immobilières",
    RevenueCategory.SCPI_SALE: "Ventes SCPI",
    RevenueCategory.LIFE_INSURANCE_CAPITAL: "Capitaux Décès",
}


class TaxCategory(str, Enum):
    IRPP = "irpp"
    ISF = "isf"
    FLAT_TAX = "flat_tax"
    SOCIAL_TAXES = "social_taxes"
    LOCAL_TAXES = "local_taxes"
    SUCCESSION = "succession"

    @property
    def label(self) -> str:
        return _TAX_LABELS[self]


_TAX_LABELS = {
    TaxCategory.IRPP: "IRPP",
    TaxCategory.ISF: "IFI",
    TaxCategory.FLAT_TAX: "Flat Tax",
    TaxCategory.SOCIAL_TAXES: "Prélèvements Sociaux",
    TaxCategory.LOCAL_TAXES: "Taxes Locales",
    TaxCategory.SUCCESSION: "Droits de Succession",
}


@dataclass
class NamedValue:
    name: str
    value: float


@dataclass
class NamedValueTable:
    """Ordered list of named amounts."""

    name: str
    named_values: list[NamedValue] = field(default_factory=list)

    def append(self, name: str, value: float) -> None:
        self.named_values.append(NamedValue(name, value))

    @property
    def total(self) -> float:
        return sum(nv.value for nv in self.named_values)

    @property
    def names(self) -> list[str]:
        return [nv.name for nv in self.named_values]

    @property
    def values(self) -> list[float]:
        return [nv.value for nv in self.named_values]

    def value_of(self, name: str) -> float:
        return sum(nv.value for nv in self.named_values if nv.name == name)


@dataclass
class RevenuesInCategory:
    """Amounts received (credits) and their IRPP taxable part for one category."""

    name: str
    credits: NamedValueTable
    taxables_irpp: NamedValueTable

    @classmethod
    def empty(cls, name: str) -> RevenuesInCategory:
        return cls(
            name=name,
            credits=NamedValueTable(f"{name} PERCU"),
            taxables_irpp=NamedValueTable(f"{name} TAXABLE"),
        )

    def add(self, name: str, credit: float, taxable_irpp: float) -> None:
        self.credits.append(name, credit)
        self.taxables_irpp.append(name, taxable_irpp)


@dataclass
class ValuedRevenues:
    """Revenues of a family sub-group, one entry per category."""

    name: str
    per_category: dict[RevenueCategory, RevenuesInCategory] = field(default_factory=dict)
    taxable_irpp_revenue_delayed_from_last_year: float = 0.0
    flat_tax_base: NamedValueTable = field(default_factory=lambda: NamedValueTable("BASE FLAT TAX"))

    def __post_init__(self) -> None:
        for category in RevenueCategory:
            self.per_category.setdefault(category, RevenuesInCategory.empty(category.label))

    def __getitem__(self, category: RevenueCategory) -> RevenuesInCategory:
        return self.per_category[category]

    @property
    def total_revenue(self) -> float:
        return sum(r.credits.total for r in self.per_category.values())

    @property
    def total_revenue_sales_excluded(self) -> float:
        return sum(
            r.credits.total for category, r in self.per_category.items() if category.is_part_of_cash_flow
        )

    @property
    def total_taxable_irpp(self) -> float:
        """IRPP base of the year, including revenue delayed from last year."""
        return (
            sum(r.taxables_irpp.total for r in self.per_category.values())
            + self.taxable_irpp_revenue_delayed_from_last_year
        )

    @property
    def summary(self) -> NamedValueTable:
        table = NamedValueTable(self.name)
        for category in RevenueCategory:
            table.append(category.label, self.per_category[category].credits.total)
        return table


@dataclass
class ValuedTaxes:
    """Taxes of a family sub-group, one entry per category."""

    name: str
    per_category: dict[TaxCategory, NamedValueTable] = field(default_factory=dict)
    irpp: IrppResult = field(default_factory=IrppResult)
    isf: IsfResult = field(default_factory=IsfResult)

    def __post_init__(self) -> None:
        for category in TaxCategory:
            self.per_category.setdefault(category, NamedValueTable(category.label))

    def __getitem__(self, category: TaxCategory) -> NamedValueTable:
        return self.per_category[category]

    @property
    def total(self) -> float:
        return sum(t.total for t in self.per_category.values())

    @property
    def summary(self) -> NamedValueTable:
        table = NamedValueTable(self.name)
        for category in TaxCategory:
            table.append(category.label, self.per_category[category].total)
        return table


@dataclass
class CashFlowLine:
    """Ledger of one simulated year for the whole family."""

    year: int
    ages: dict[str, int] = field(default_factory=dict)
    adults_revenues: ValuedRevenues = field(default_factory=lambda: ValuedRevenues("REVENUS PARENTS"))
    children_revenues: ValuedRevenues = field(default_factory=lambda: ValuedRevenues("REVENUS ENFANTS"))
    adult_taxes: ValuedTaxes = field(default_factory=lambda: ValuedTaxes("TAXES PARENTS"))
    children_taxes: ValuedTaxes = field(default_factory=lambda: ValuedTaxes("TAXES ENFANTS"))
    life_expenses: NamedValueTable = field(default_factory=lambda: NamedValueTable("Dépenses de vie"))
    debt_payments: NamedValueTable = field(default_factory=lambda: NamedValueTable("Remboursements d'emprunts"))
    invest_payments: NamedValueTable = field(default_factory=lambda: NamedValueTable("Investissements des parents"))
    taxable_irpp_revenue_delayed_to_next_year: float = 0.0
    legal_successions: list[Succession] = field(default_factory=list)
    life_ins_successions: list[Succession] = field(default_factory=list)

    # --- Adults ---

    @property
    def sum_of_adults_revenues(self) -> float:
        return self.adults_revenues.total_revenue

    @property
    def sum_of_adults_revenues_sales_excluded(self) -> float:
        return self.adults_revenues.total_revenue_sales_excluded

    @property
    def sum_of_adults_expenses(self) -> float:
        return (
            self.adult_taxes.total
            + self.life_expenses.total
            + self.debt_payments.total
            + self.invest_payments.total
        )

    @property
    def net_adults_cash_flow(self) -> float:
        return self.sum_of_adults_revenues - self.sum_of_adults_expenses

    @property
    def net_adults_cash_flow_sales_excluded(self) -> float:
        """Net cash flow left once proceeds reinvested on receipt are removed."""
        return self.sum_of_adults_revenues_sales_excluded - self.sum_of_adults_expenses

    # --- Children ---

    @property
    def sum_of_children_revenues(self) -> float:
        return self.children_revenues.total_revenue

    @property
    def sum_of_children_expenses(self) -> float:
        return self.children_taxes.total

    @property
    def net_children_cash_flow(self) -> float:
        return self.sum_of_children_revenues - self.sum_of_children_expenses

    def to_dict(self) -> dict[str, Any]:
        return {
            "Année": self.year,
            "Revenus Parents": self.sum_of_adults_revenues,
            "Revenus Parents Hors Ventes": self.sum_of_adults_revenues_sales_excluded,
            "Taxes Parents": self.adult_taxes.total,
            "Dépenses de Vie": self.life_expenses.total,
            "Remboursements": self.debt_payments.total,
            "Investissements": self.invest_payments.total,
            "Solde Net Parents": self.net_adults_cash_flow,
            "Solde Net Enfants": self.net_children_cash_flow,
            "IRPP": self.adult_taxes.irpp.amount,
            "IFI": self.adult_taxes.isf.amount,
            "Revenu Imposable Reporté": self.taxable_irpp_revenue_delayed_to_next_year,
            "Droits de Succession": sum(s.tax for s in self.legal_successions),
            "Droits Assurance Vie": sum(s.tax for s in self.life_ins_successions),
        }


def cash_flow_table(lines: Iterable[CashFlowLine]) -> pd.DataFrame:
    """One row per simulated year, indexed by year."""
    df = pd.DataFrame([line.to_dict() for line in lines])
    if df.empty:
        return df
    return df.set_index("Année")
