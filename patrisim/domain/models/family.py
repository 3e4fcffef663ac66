"""Family members.

The family answers every question the simulation asks about people:
who is alive, how old they are, who is whose spouse, and how much work or
pension income each adult earns in a given year.
"""

from __future__ import annotations

from enum import Enum

from pydantic import BaseModel, Field, model_validator

from patrisim.core.exceptions import InvalidParameterError
from patrisim.domain.calculator.inheritance import InheritanceFiscalOption


class IncomeKind(str, Enum):
    WORK = "work"
    PENSION = "pension"


class IncomeStream(BaseModel):
    """Yearly income received between two years (inclusive)."""

    name: str = Field(..., description="Label of the income")
    kind: IncomeKind = Field(default=IncomeKind.WORK)
    net_amount: float = Field(..., ge=0, description="Yearly amount credited in €")
    taxable_amount: float | None = Field(None, ge=0, description="Yearly IRPP taxable amount (defaults to net)")
    first_year: int = Field(..., description="First year of payment")
    last_year: int | None = Field(None, description="Last year of payment (None = for life)")

    def is_active(self, year: int) -> bool:
        return self.first_year <= year and (self.last_year is None or year <= self.last_year)

    def net(self, year: int) -> float:
        return self.net_amount if self.is_active(year) else 0.0

    def taxable(self, year: int) -> float:
        if not self.is_active(year):
            return 0.0
        return self.net_amount if self.taxable_amount is None else self.taxable_amount


class Person(BaseModel):
    """A family member."""

    name: str = Field(..., min_length=1)
    birth_year: int = Field(..., description="Year of birth")
    death_year: int | None = Field(None, description="Year of death (None = alive over the horizon)")

    @model_validator(mode="after")
    def check_dates(self) -> "Person":
        if self.death_year is not None and self.death_year < self.birth_year:
            raise InvalidParameterError("death_year", self.death_year, "before birth year")
        return self

    def is_alive(self, at_end_of: int) -> bool:
        """Alive at the end of the year (born, and not dead during or before it)."""
        if at_end_of < self.birth_year:
            return False
        return self.death_year is None or at_end_of < self.death_year

    def dies_during(self, year: int) -> bool:
        return self.death_year == year

    def age(self, at_end_of: int) -> int:
        return at_end_of - self.birth_year


class Adult(Person):
    """Adult of the fiscal household."""

    spouse_name: str | None = Field(None, description="Name of the spouse, if married")
    fiscal_option: InheritanceFiscalOption | None = Field(
        None, description="Option chosen if this adult survives the spouse"
    )
    incomes: list[IncomeStream] = Field(default_factory=list)

    def incomes_of_kind(self, kind: IncomeKind) -> list[IncomeStream]:
        return [income for income in self.incomes if income.kind == kind]


class Child(Person):
    """Child of the family."""

    def is_fiscally_dependent(self, year: int, max_age: int) -> bool:
        return self.is_alive(year) and self.age(year) < max_age


class Family(BaseModel):
    """Read-only view of the family for one simulation run."""

    adults: list[Adult] = Field(default_factory=list)
    children: list[Child] = Field(default_factory=list)

    @model_validator(mode="after")
    def check_unique_names(self) -> "Family":
        names = [member.name for member in self.members]
        if len(set(names)) != len(names):
            raise InvalidParameterError("members", names, "names must be unique")
        return self

    @property
    def members(self) -> list[Person]:
        return [*self.adults, *self.children]

    @property
    def adults_names(self) -> list[str]:
        return [adult.name for adult in self.adults]

    @property
    def children_names(self) -> list[str]:
        return [child.name for child in self.children]

    def member(self, name: str) -> Person | None:
        return next((m for m in self.members if m.name == name), None)

    def age(self, name: str, at_end_of: int) -> int:
        """Age provider used by the demembrement valuation."""
        person = self.member(name)
        if person is None:
            raise InvalidParameterError("name", name, "not a family member")
        return person.age(at_end_of)

    def ages(self, at_end_of: int) -> dict[str, int]:
        return {m.name: m.age(at_end_of) for m in self.members if m.is_alive(at_end_of)}

    def adults_alive_names(self, at_end_of: int) -> list[str]:
        return [a.name for a in self.adults if a.is_alive(at_end_of)]

    def children_alive_names(self, at_end_of: int) -> list[str]:
        return [c.name for c in self.children if c.is_alive(at_end_of)]

    def nb_adults_alive(self, at_end_of: int) -> int:
        return len(self.adults_alive_names(at_end_of))

    def nb_fiscal_children(self, year: int, max_age: int) -> int:
        return sum(1 for c in self.children if c.is_fiscally_dependent(year, max_age))

    def deceased_adults(self, during: int) -> list[str]:
        """Adults who die during the year, in declaration order."""
        return [a.name for a in self.adults if a.dies_during(during)]

    def spouse_name_of(self, name: str) -> str | None:
        person = self.member(name)
        if isinstance(person, Adult):
            return person.spouse_name
        return None
