"""Succession records produced when a family member dies."""

from __future__ import annotations

from dataclasses import dataclass, field
from enum import Enum


class SuccessionKind(str, Enum):
    LEGAL = "legal"
    LIFE_INSURANCE = "life_insurance"


@dataclass(frozen=True)
class Inheritance:
    """Share of a succession received by one successor."""

    successor_name: str
    percent: float  # [0, 1] of the taxable value
    brut: float
    net: float
    tax: float


@dataclass(frozen=True)
class Succession:
    """Legal or life insurance succession of one decedent."""

    kind: SuccessionKind
    year_of_death: int
    decedent_name: str
    taxable_value: float
    inheritances: list[Inheritance] = field(default_factory=list)

    @property
    def tax(self) -> float:
        return sum(i.tax for i in self.inheritances)

    @property
    def received(self) -> float:
        return sum(i.brut for i in self.inheritances)

    @property
    def received_net(self) -> float:
        return sum(i.net for i in self.inheritances)

    @property
    def successors_received_net_value(self) -> dict[str, float]:
        values: dict[str, float] = {}
        for inheritance in self.inheritances:
            values[inheritance.successor_name] = values.get(inheritance.successor_name, 0.0) + inheritance.net
        return values

    def tax_of(self, name: str) -> float:
        return sum(i.tax for i in self.inheritances if i.successor_name == name)

    def to_dict(self) -> dict:
        return {
            "Type": self.kind.value,
            "Année": self.year_of_death,
            "Défunt": self.decedent_name,
            "Masse Taxable": self.taxable_value,
            "Droits": self.tax,
            "Reçu Net": self.received_net,
        }
