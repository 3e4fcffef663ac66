"""Pytest fixtures for patrisim tests."""

import os
import sys

import pytest

# Add project root to path for imports
sys.path.insert(0, os.path.dirname(os.path.dirname(os.path.abspath(__file__))))

from patrisim.core.settings import SimulationSettings, get_settings
from patrisim.domain.calculator.demembrement import ValuationProvider
from patrisim.domain.calculator.fiscal import FrenchFiscalModel
from patrisim.domain.calculator.inheritance import InheritanceFiscalOption
from patrisim.domain.models.family import Adult, Child, Family, IncomeKind, IncomeStream
from patrisim.domain.models.free_investment import FreeInvestment, InvestmentState
from patrisim.domain.models.assets import InvestmentKind
from patrisim.domain.models.ownership import Ownership
from patrisim.domain.models.patrimoine import Patrimoine


@pytest.fixture
def settings():
    """Default settings, independent from the environment."""
    return SimulationSettings(_env_file=None)


@pytest.fixture
def settings_env(monkeypatch):
    """Set PATRISIM_* variables read by the cached settings."""

    def apply(**values):
        for key, value in values.items():
            monkeypatch.setenv(f"PATRISIM_{key.upper()}", str(value))
        get_settings.cache_clear()

    yield apply
    get_settings.cache_clear()


@pytest.fixture
def family():
    """Married couple (born 1960 and 1962) with two children."""
    return Family(
        adults=[
            Adult(
                name="M. Lionel",
                birth_year=1960,
                spouse_name="Mme. Lou",
                fiscal_option=InheritanceFiscalOption.FULL_USUFRUCT,
                incomes=[
                    IncomeStream(
                        name="Salaire",
                        kind=IncomeKind.WORK,
                        net_amount=40_000,
                        taxable_amount=36_000,
                        first_year=2020,
                        last_year=2025,
                    ),
                    IncomeStream(name="Retraite", kind=IncomeKind.PENSION, net_amount=25_000, first_year=2026),
                ],
            ),
            Adult(
                name="Mme. Lou",
                birth_year=1962,
                spouse_name="M. Lionel",
                fiscal_option=InheritanceFiscalOption.FULL_USUFRUCT,
            ),
        ],
        children=[
            Child(name="Arthur", birth_year=1990),
            Child(name="Lewis", birth_year=1993),
        ],
    )


@pytest.fixture
def valuation(family):
    return ValuationProvider(family)


@pytest.fixture
def fiscal_model():
    return FrenchFiscalModel()


def make_free_investment(
    name: str,
    owner: str,
    balance: float,
    kind: InvestmentKind = InvestmentKind.LIFE_INSURANCE,
    year: int = 2025,
    interest: float = 0.0,
    **kwargs,
) -> FreeInvestment:
    """Free investment held in full by `owner`, with `interest` out of `balance` capitalized."""
    return FreeInvestment(
        name=name,
        kind=kind,
        ownership=Ownership.full((owner, 100.0)),
        state=InvestmentState(year=year, interest=interest, investment=balance - interest),
        **kwargs,
    )


@pytest.fixture
def free_investment_factory():
    """Factory building single-owner free investments."""
    return make_free_investment


@pytest.fixture
def patrimoine():
    """One life insurance and one PEA per adult."""
    return Patrimoine(
        free_investments=[
            make_free_investment("AV Lionel", "M. Lionel", 100_000, interest=20_000),
            make_free_investment("PEA Lionel", "M. Lionel", 50_000, kind=InvestmentKind.PEA, interest=10_000),
            make_free_investment("AV Lou", "Mme. Lou", 80_000, interest=16_000),
        ]
    )
