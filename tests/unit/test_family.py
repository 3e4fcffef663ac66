"""Unit tests for patrisim.domain.models.family module."""

import pytest

from patrisim.core.exceptions import InvalidParameterError
from patrisim.domain.models.family import Adult, Child, Family, IncomeKind, IncomeStream


class TestIncomeStream:
    """Tests for IncomeStream."""

    def test_active_range(self):
        income = IncomeStream(name="Salaire", net_amount=40_000, taxable_amount=36_000, first_year=2020, last_year=2025)
        assert income.net(2019) == 0.0
        assert income.net(2025) == 40_000
        assert income.taxable(2022) == 36_000
        assert income.taxable(2026) == 0.0

    def test_taxable_defaults_to_net(self):
        pension = IncomeStream(name="Retraite", kind=IncomeKind.PENSION, net_amount=25_000, first_year=2026)
        assert pension.taxable(2040) == 25_000


class TestPerson:
    """Tests for Person life cycle."""

    def test_alive_until_death_year(self):
        child = Child(name="Arthur", birth_year=1990, death_year=2050)
        assert not child.is_alive(1989)
        assert child.is_alive(2049)
        assert not child.is_alive(2050)
        assert child.dies_during(2050)

    def test_death_before_birth(self):
        with pytest.raises(InvalidParameterError):
            Adult(name="X", birth_year=1980, death_year=1970)

    def test_fiscally_dependent(self):
        child = Child(name="Lewis", birth_year=2005)
        assert child.is_fiscally_dependent(2025, max_age=25)
        assert not child.is_fiscally_dependent(2030, max_age=25)


class TestFamily:
    """Tests for Family queries."""

    def test_names_and_ages(self, family):
        assert family.adults_names == ["M. Lionel", "Mme. Lou"]
        assert family.children_alive_names(2025) == ["Arthur", "Lewis"]
        assert family.age("Arthur", 2025) == 35
        assert family.ages(2025)["M. Lionel"] == 65

    def test_unknown_member(self, family):
        assert family.member("Inconnu") is None
        with pytest.raises(InvalidParameterError):
            family.age("Inconnu", 2025)

    def test_deceased_adults(self, family):
        family.adults[1].death_year = 2030
        assert family.deceased_adults(during=2030) == ["Mme. Lou"]
        assert family.adults_alive_names(2030) == ["M. Lionel"]
        assert family.nb_adults_alive(2029) == 2

    def test_spouse_name_of(self, family):
        assert family.spouse_name_of("M. Lionel") == "Mme. Lou"
        assert family.spouse_name_of("Arthur") is None

    def test_nb_fiscal_children(self, family):
        assert family.nb_fiscal_children(2010, max_age=25) == 2
        assert family.nb_fiscal_children(2025, max_age=25) == 0

    def test_duplicate_names(self):
        with pytest.raises(InvalidParameterError):
            Family(adults=[Adult(name="A", birth_year=1960)], children=[Child(name="A", birth_year=1990)])
