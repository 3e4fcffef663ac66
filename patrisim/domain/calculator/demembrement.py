"""Usufruct / bare ownership valuation.

Fiscal barème of article 669 of the CGI: the usufruct value is a fraction
of the full value that decreases with the age of the usufructuary.
"""

from __future__ import annotations

from dataclasses import dataclass
from typing import Protocol

from pydantic import BaseModel, Field, field_validator

from patrisim.core.exceptions import ValuationError


class BaremeSlice(BaseModel):
    """Usufruct percentage applicable strictly below an age limit."""

    age_limit: int = Field(..., gt=0, description="Usufructuary age (exclusive upper bound)")
    usufruct_pct: float = Field(..., ge=0, le=100, description="Usufruct value as % of full value")


def _default_bareme() -> list[BaremeSlice]:
    return [
        BaremeSlice(age_limit=21, usufruct_pct=90.0),
        BaremeSlice(age_limit=31, usufruct_pct=80.0),
        BaremeSlice(age_limit=41, usufruct_pct=70.0),
        BaremeSlice(age_limit=51, usufruct_pct=60.0),
        BaremeSlice(age_limit=61, usufruct_pct=50.0),
        BaremeSlice(age_limit=71, usufruct_pct=40.0),
        BaremeSlice(age_limit=81, usufruct_pct=30.0),
        BaremeSlice(age_limit=91, usufruct_pct=20.0),
    ]


@dataclass(frozen=True)
class DemembrementSplit:
    """Result of splitting a full value between usufruct and bare ownership."""

    usufruct_value: float
    bare_value: float

    @property
    def total(self) -> float:
        return self.usufruct_value + self.bare_value


class DemembrementModel(BaseModel):
    """Age-indexed demembrement barème."""

    bareme: list[BaremeSlice] = Field(default_factory=_default_bareme)
    oldest_usufruct_pct: float = Field(default=10.0, ge=0, le=100, description="Usufruct % beyond the last slice")

    @field_validator("bareme")
    @classmethod
    def sort_slices(cls, v: list[BaremeSlice]) -> list[BaremeSlice]:
        """Keep slices ordered by increasing age limit."""
        return sorted(v, key=lambda s: s.age_limit)

    def usufruct_pct(self, usufructuary_age: int) -> float:
        """Usufruct percentage for a usufructuary of the given age."""
        if usufructuary_age < 0:
            raise ValuationError(f"Negative usufructuary age: {usufructuary_age}")
        for slice_ in self.bareme:
            if usufructuary_age < slice_.age_limit:
                return slice_.usufruct_pct
        return self.oldest_usufruct_pct

    def split(self, value: float, usufructuary_age: int) -> DemembrementSplit:
        """Split `value` into usufruct and bare ownership values.

        The bare value is computed as the remainder so that both parts
        always add up to `value`.
        """
        usufruct_value = value * self.usufruct_pct(usufructuary_age) / 100.0
        return DemembrementSplit(usufruct_value=usufruct_value, bare_value=value - usufruct_value)


class AgeProvider(Protocol):
    """Anything able to give the age of a named person at the end of a year."""

    def age(self, name: str, at_end_of: int) -> int:
        ...


class ValuationProvider:
    """Valuation context threaded through every ownership computation.

    Combines an age provider (usually the Family) with a demembrement
    barème, so that no global state is needed to value a dismembered asset.
    """

    def __init__(
        self,
        age_provider: AgeProvider,
        demembrement: DemembrementModel | None = None,
    ):
        self.age_provider = age_provider
        self.demembrement = demembrement or DemembrementModel()

    def age(self, name: str, year: int) -> int:
        return self.age_provider.age(name, year)

    def split(self, value: float, usufructuary_name: str, year: int) -> DemembrementSplit:
        """Split `value` according to the age of `usufructuary_name` at the end of `year`."""
        return self.demembrement.split(value, self.age(usufructuary_name, year))
