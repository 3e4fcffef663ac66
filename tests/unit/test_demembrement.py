"""Unit tests for the demembrement barème and inheritance options."""

import pytest

from patrisim.core.exceptions import InvalidParameterError, ValuationError
from patrisim.domain.calculator.demembrement import BaremeSlice, DemembrementModel, ValuationProvider
from patrisim.domain.calculator.inheritance import InheritanceFiscalOption


class TestDemembrementModel:
    """Tests for the article 669 barème."""

    @pytest.mark.parametrize(
        "age,expected",
        [(0, 90.0), (20, 90.0), (21, 80.0), (45, 60.0), (65, 40.0), (70, 40.0), (71, 30.0), (90, 20.0), (95, 10.0)],
    )
    def test_usufruct_pct(self, age, expected):
        assert DemembrementModel().usufruct_pct(age) == expected

    def test_split_conserves_value(self):
        """Usufruct + bare == value for any age."""
        model = DemembrementModel()
        for age in range(0, 110, 7):
            split = model.split(123_456.78, age)
            assert split.usufruct_value + split.bare_value == pytest.approx(123_456.78)

    def test_negative_age(self):
        with pytest.raises(ValuationError):
            DemembrementModel().usufruct_pct(-1)

    def test_custom_bareme_is_sorted(self):
        """Slices given out of order are sorted by age."""
        model = DemembrementModel(
            bareme=[BaremeSlice(age_limit=60, usufruct_pct=30.0), BaremeSlice(age_limit=30, usufruct_pct=70.0)],
            oldest_usufruct_pct=5.0,
        )
        assert model.usufruct_pct(25) == 70.0
        assert model.usufruct_pct(45) == 30.0
        assert model.usufruct_pct(80) == 5.0


class TestValuationProvider:
    """Tests for the valuation context."""

    def test_split_uses_age_of_person(self, family):
        provider = ValuationProvider(family)
        # Mme. Lou is 63 at the end of 2025
        split = provider.split(1000.0, "Mme. Lou", 2025)
        assert split.usufruct_value == pytest.approx(400.0)
        assert provider.age("Arthur", 2025) == 35


class TestInheritanceShares:
    """Tests for InheritanceFiscalOption.shares."""

    def test_full_usufruct(self):
        shares = InheritanceFiscalOption.FULL_USUFRUCT.shares(2)
        assert shares.for_spouse_usufruct == 1.0
        assert shares.for_spouse_full == 0.0
        assert shares.for_child_bare == pytest.approx(0.5)

    def test_quotite_disponible(self):
        """1/(n+1) to the spouse in full ownership, the rest to the children."""
        shares = InheritanceFiscalOption.QUOTITE_DISPONIBLE.shares(3)
        assert shares.for_spouse_full == pytest.approx(0.25)
        assert shares.for_child_full == pytest.approx(0.25)
        assert shares.for_spouse_usufruct == 0.0

    def test_usufruct_plus_bare(self):
        shares = InheritanceFiscalOption.USUFRUCT_PLUS_BARE.shares(3)
        assert shares.for_spouse_usufruct == 1.0
        assert shares.for_spouse_bare == pytest.approx(0.25)
        assert shares.for_child_bare == pytest.approx(0.25)

    @pytest.mark.parametrize("option", list(InheritanceFiscalOption))
    def test_no_children_spouse_takes_all(self, option):
        shares = option.shares(0)
        assert shares.for_spouse_full == 1.0
        assert shares.for_spouse_usufruct == 0.0

    def test_negative_children(self):
        with pytest.raises(InvalidParameterError):
            InheritanceFiscalOption.FULL_USUFRUCT.shares(-1)


class TestInheritanceSharedValues:
    """Tests for InheritanceFiscalOption.shared_values."""

    @pytest.mark.parametrize("option", list(InheritanceFiscalOption))
    def test_values_add_up(self, option):
        """Spouse share + children shares == whole estate."""
        values = option.shared_values(2, 63, DemembrementModel())
        assert values.for_spouse + 2 * values.for_child == pytest.approx(1.0)

    def test_full_usufruct_values_with_age(self):
        values = InheritanceFiscalOption.FULL_USUFRUCT.shared_values(2, 63, DemembrementModel())
        assert values.for_spouse == pytest.approx(0.4)
        assert values.for_child == pytest.approx(0.3)

    def test_usufruct_plus_bare_values(self):
        values = InheritanceFiscalOption.USUFRUCT_PLUS_BARE.shared_values(1, 63, DemembrementModel())
        assert values.for_spouse == pytest.approx(0.25 + 0.75 * 0.4)
        assert values.for_child == pytest.approx(0.75 * 0.6)
