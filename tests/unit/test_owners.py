"""Unit tests for patrisim.domain.models.owners module."""

import pytest

from patrisim.core.exceptions import NoNewOwnersError, NoOtherOwnersError, OwnerNotFoundError
from patrisim.domain.models.owners import Owner, OwnerSet


class TestOwnerSetValidity:
    """Tests for OwnerSet.is_valid."""

    def test_empty_set_is_valid(self):
        """An empty set is valid."""
        assert OwnerSet().is_valid()

    def test_fractions_summing_to_100(self):
        """Fractions adding up to 100 are valid."""
        assert OwnerSet.of(("A", 60.0), ("B", 40.0)).is_valid()

    def test_tolerance(self):
        """A residue below 1e-4 is accepted, above it is not."""
        assert OwnerSet.of(("A", 33.33335), ("B", 66.66666)).is_valid()
        assert not OwnerSet.of(("A", 60.0), ("B", 39.9)).is_valid()

    def test_blank_name_is_invalid(self):
        """Owners must be named."""
        assert not Owner(name="  ", fraction=100.0).is_valid
        assert not OwnerSet.of(("", 100.0)).is_valid()

    def test_duplicate_names_are_invalid(self):
        """The same person cannot appear twice."""
        assert not OwnerSet.of(("A", 50.0), ("A", 50.0)).is_valid()


class TestOwnerSetQueries:
    """Tests for lookups on an OwnerSet."""

    def test_lookups(self):
        """owner, contains and fraction_of agree."""
        owners = OwnerSet.of(("A", 70.0), ("B", 30.0))
        assert owners.owner("A").fraction == 70.0
        assert owners.owner("C") is None
        assert owners.contains("B")
        assert owners.fraction_of("B") == 30.0
        assert owners.fraction_of("C") == 0.0
        assert owners.names == ["A", "B"]
        assert owners.sum_of_fractions == pytest.approx(100.0)

    def test_equality_ignores_order(self):
        """Two sets with the same shares in another order are equal."""
        assert OwnerSet.of(("A", 60.0), ("B", 40.0)) == OwnerSet.of(("B", 40.0), ("A", 60.0))

    def test_equality_tolerance(self):
        """Fractions are compared with a tolerance."""
        assert OwnerSet.of(("A", 50.0), ("B", 50.0)) == OwnerSet.of(("A", 50.00001), ("B", 49.99999))
        assert OwnerSet.of(("A", 50.0), ("B", 50.0)) != OwnerSet.of(("A", 51.0), ("B", 49.0))


class TestReplace:
    """Tests for OwnerSet.replace."""

    def test_equal_split(self):
        """The replaced fraction is shared equally between new owners."""
        owners = OwnerSet.of(("A", 60.0), ("B", 40.0))
        owners.replace("A", ["C", "D"])
        assert owners == OwnerSet.of(("B", 40.0), ("C", 30.0), ("D", 30.0))

    def test_total_is_preserved(self):
        """Replacing does not change the total fraction."""
        owners = OwnerSet.of(("A", 25.0), ("B", 75.0))
        before = owners.sum_of_fractions
        owners.replace("B", ["A", "C", "D"])
        assert owners.sum_of_fractions == pytest.approx(before)
        assert owners.fraction_of("A") == pytest.approx(50.0)

    def test_no_new_owners(self):
        """An empty replacement list raises."""
        with pytest.raises(NoNewOwnersError):
            OwnerSet.of(("A", 100.0)).replace("A", [])

    def test_unknown_owner(self):
        """Replacing a stranger raises."""
        with pytest.raises(OwnerNotFoundError):
            OwnerSet.of(("A", 100.0)).replace("Z", ["B"])


class TestRedistributeShare:
    """Tests for OwnerSet.redistribute_share."""

    def test_proportional(self):
        """The removed fraction goes to the others pro rata."""
        owners = OwnerSet.of(("A", 50.0), ("B", 30.0), ("C", 20.0))
        owners.redistribute_share(of="A")
        assert owners == OwnerSet.of(("B", 60.0), ("C", 40.0))

    def test_zero_fractions_share_equally(self):
        """Remaining owners holding nothing share equally."""
        owners = OwnerSet([Owner(name="A", fraction=100.0), Owner(name="B", fraction=0.0), Owner(name="C", fraction=0.0)])
        owners.redistribute_share(of="A")
        assert owners == OwnerSet.of(("B", 50.0), ("C", 50.0))

    def test_sole_owner(self):
        """The sole owner has nobody to give to."""
        with pytest.raises(NoOtherOwnersError):
            OwnerSet.of(("A", 100.0)).redistribute_share(of="A")

    def test_unknown_owner(self):
        with pytest.raises(OwnerNotFoundError):
            OwnerSet.of(("A", 50.0), ("B", 50.0)).redistribute_share(of="Z")


class TestGroupShares:
    """Tests for OwnerSet.group_shares."""

    def test_merges_duplicates(self):
        """Duplicate names are merged by summing fractions."""
        owners = OwnerSet.of(("A", 30.0), ("B", 40.0), ("A", 30.0))
        owners.group_shares()
        assert len(owners) == 2
        assert owners.fraction_of("A") == pytest.approx(60.0)

    def test_drops_zero_fractions(self):
        """Owners left with nothing disappear."""
        owners = OwnerSet.of(("A", 100.0), ("B", 0.0))
        owners.group_shares()
        assert owners.names == ["A"]

    def test_idempotent(self):
        """Grouping twice gives the same set as grouping once."""
        owners = OwnerSet.of(("A", 20.0), ("B", 30.0), ("A", 50.0), ("C", 0.0))
        owners.group_shares()
        once = owners.model_copy(deep=True)
        owners.group_shares()
        assert owners == once
        assert owners.names == once.names
