"""Owner and owner set models.

An owner set lists the people holding one right (full ownership, usufruct
or bare ownership) on an asset, each with a fraction in percent. A non-empty
set is valid when its fractions add up to 100.
"""

from __future__ import annotations

from typing import Iterator

from pydantic import BaseModel, Field, RootModel

from patrisim.core.exceptions import NoNewOwnersError, NoOtherOwnersError, OwnerNotFoundError

FRACTION_TOLERANCE = 1e-4
_ZERO_FRACTION = 1e-10


class Owner(BaseModel):
    """A person holding `fraction` percent of a right."""

    name: str = Field(..., description="Family member name")
    fraction: float = Field(default=100.0, ge=0, description="Share of the right in %")

    @property
    def is_valid(self) -> bool:
        return self.name.strip() != ""

    def __repr__(self) -> str:
        return f"Owner({self.name!r}, {self.fraction:g})"


class OwnerSet(RootModel[list[Owner]]):
    """Ordered collection of owners of one right."""

    root: list[Owner] = Field(default_factory=list)

    # --- Collection protocol ---

    def __iter__(self) -> Iterator[Owner]:  # type: ignore[override]
        return iter(self.root)

    def __len__(self) -> int:
        return len(self.root)

    def __getitem__(self, idx: int) -> Owner:
        return self.root[idx]

    def __bool__(self) -> bool:
        return bool(self.root)

    def __eq__(self, other: object) -> bool:
        if not isinstance(other, OwnerSet):
            return NotImplemented
        return self.is_equal(other)

    def __repr__(self) -> str:
        return f"OwnerSet({self.root!r})"

    @classmethod
    def of(cls, *owners: tuple[str, float]) -> OwnerSet:
        """Build a set from (name, fraction) pairs."""
        return cls([Owner(name=name, fraction=fraction) for name, fraction in owners])

    # --- Queries ---

    @property
    def names(self) -> list[str]:
        return [owner.name for owner in self.root]

    @property
    def sum_of_fractions(self) -> float:
        return sum(owner.fraction for owner in self.root)

    def is_valid(self, tolerance: float = FRACTION_TOLERANCE) -> bool:
        """Empty, or distinct named owners whose fractions add up to 100."""
        if not self.root:
            return True
        if not all(owner.is_valid for owner in self.root):
            return False
        normalized = [owner.name.strip() for owner in self.root]
        if len(set(normalized)) != len(normalized):
            return False
        return abs(self.sum_of_fractions - 100.0) <= tolerance

    def owner(self, name: str) -> Owner | None:
        return next((owner for owner in self.root if owner.name == name), None)

    def contains(self, name: str) -> bool:
        return self.owner(name) is not None

    def fraction_of(self, name: str) -> float:
        """Sum of the fractions held by `name` (0 if absent)."""
        return sum(owner.fraction for owner in self.root if owner.name == name)

    def as_dict(self) -> dict[str, float]:
        fractions: dict[str, float] = {}
        for owner in self.root:
            fractions[owner.name] = fractions.get(owner.name, 0.0) + owner.fraction
        return fractions

    def is_equal(self, other: OwnerSet, tolerance: float = FRACTION_TOLERANCE) -> bool:
        """Order-insensitive comparison with a tolerance on fractions."""
        mine = self.as_dict()
        theirs = other.as_dict()
        if mine.keys() != theirs.keys():
            return False
        return all(abs(mine[name] - theirs[name]) <= tolerance for name in mine)

    # --- Mutations ---

    def append(self, name: str, fraction: float) -> None:
        self.root.append(Owner(name=name, fraction=max(0.0, fraction)))

    def remove(self, name: str) -> float:
        """Remove every entry of `name` and return the fraction it held."""
        if not self.contains(name):
            raise OwnerNotFoundError(name)
        fraction = self.fraction_of(name)
        self.root = [owner for owner in self.root if owner.name != name]
        return fraction

    def replace(self, owner_name: str, new_owner_names: list[str]) -> None:
        """Replace an owner by new owners, sharing its fraction equally.

        Raises:
            NoNewOwnersError: `new_owner_names` is empty.
            OwnerNotFoundError: `owner_name` is not in the set.
        """
        if not new_owner_names:
            raise NoNewOwnersError(f"No new owners to replace '{owner_name}'")
        fraction = self.remove(owner_name)
        share = fraction / len(new_owner_names)
        for name in new_owner_names:
            self.append(name, share)
        self.group_shares()

    def redistribute_share(self, of: str) -> None:
        """Remove an owner and spread its fraction over the remaining owners.

        The fraction is spread in proportion to each remaining owner's
        fraction (equally if they all hold zero).

        Raises:
            OwnerNotFoundError: `of` is not in the set.
            NoOtherOwnersError: `of` is the only owner.
        """
        if not self.contains(of):
            raise OwnerNotFoundError(of)
        if len({owner.name for owner in self.root}) <= 1:
            raise NoOtherOwnersError(f"'{of}' is the sole owner")

        fraction = self.remove(of)
        remaining = self.sum_of_fractions
        for owner in self.root:
            if remaining > 0:
                owner.fraction += fraction * owner.fraction / remaining
            else:
                owner.fraction += fraction / len(self.root)

    def group_shares(self) -> None:
        """Merge duplicate names (summing fractions) and drop zero fractions."""
        grouped = self.as_dict()
        self.root = [
            Owner(name=name, fraction=fraction)
            for name, fraction in grouped.items()
            if fraction > _ZERO_FRACTION
        ]

    def scaled(self, factor: float) -> OwnerSet:
        """Copy of the set with every fraction multiplied by `factor`."""
        return OwnerSet([Owner(name=o.name, fraction=o.fraction * factor) for o in self.root])
