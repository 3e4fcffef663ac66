"""Data models for patrisim."""

from .assets import InvestmentKind, PeriodicInvestment, RealEstateAsset, ScpiAsset
from .cashflow import CashFlowLine, RevenueCategory, TaxCategory, cash_flow_table
from .clause import LifeInsuranceClause
from .family import Adult, Child, Family, IncomeKind, IncomeStream
from .free_investment import FreeInvestment, InvestmentState
from .liabilities import Debt, Loan
from .owners import Owner, OwnerSet
from .ownership import EvaluationContext, Ownership
from .patrimoine import Patrimoine
from .succession import Inheritance, Succession, SuccessionKind

__all__ = [
    "Owner",
    "OwnerSet",
    "Ownership",
    "EvaluationContext",
    "LifeInsuranceClause",
    "Family",
    "Adult",
    "Child",
    "IncomeKind",
    "IncomeStream",
    "InvestmentKind",
    "RealEstateAsset",
    "ScpiAsset",
    "PeriodicInvestment",
    "FreeInvestment",
    "InvestmentState",
    "Loan",
    "Debt",
    "Patrimoine",
    "Succession",
    "SuccessionKind",
    "Inheritance",
    "CashFlowLine",
    "RevenueCategory",
    "TaxCategory",
    "cash_flow_table",
]
