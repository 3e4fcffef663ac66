"""Life insurance beneficiary clause."""

from __future__ import annotations

from pydantic import BaseModel, Field

from patrisim.core.exceptions import InvalidClauseError
from patrisim.domain.calculator.demembrement import ValuationProvider
from patrisim.domain.models.owners import OwnerSet


class LifeInsuranceClause(BaseModel):
    """Designation of the beneficiaries of a life insurance death capital.

    Three forms are supported:
    - an ordinary list of full recipients with fractions;
    - an optional clause: a single full recipient who may waive the benefit;
    - a dismembered clause: one usufruct recipient and bare recipients
      sharing the bare ownership in equal parts.
    """

    is_optional: bool = Field(default=False, description="Recipient may renounce (clause à option)")
    is_dismembered: bool = Field(default=False, description="Capital paid in usufruct / bare ownership")
    full_recipients: OwnerSet = Field(default_factory=OwnerSet)
    usufruct_recipient: str = Field(default="")
    bare_recipients: list[str] = Field(default_factory=list, description="Equal bare shares")

    @classmethod
    def standard(cls, spouse_name: str | None, children_names: list[str]) -> LifeInsuranceClause | None:
        """Default designation: the spouse, or else the children in equal shares."""
        if spouse_name:
            return cls(full_recipients=OwnerSet.of((spouse_name, 100.0)))
        if children_names:
            share = 100.0 / len(children_names)
            return cls(full_recipients=OwnerSet.of(*((name, share) for name in children_names)))
        return None

    @property
    def is_valid(self) -> bool:
        if self.is_optional and self.is_dismembered:
            return False
        if self.is_dismembered:
            return self.usufruct_recipient.strip() != "" and len(self.bare_recipients) > 0
        if self.is_optional:
            return len(self.full_recipients) == 1 and self.full_recipients.is_valid()
        return len(self.full_recipients) > 0 and self.full_recipients.is_valid()

    def validate_clause(self) -> None:
        """Raise InvalidClauseError if the clause is inconsistent."""
        if not self.is_valid:
            raise InvalidClauseError(f"Invalid life insurance clause: {self!r}")

    @property
    def recipients_names(self) -> list[str]:
        if self.is_dismembered:
            return [self.usufruct_recipient, *self.bare_recipients]
        return self.full_recipients.names

    def recipients_shares(
        self,
        capital: float,
        year: int,
        valuation: ValuationProvider,
    ) -> dict[str, float]:
        """Fiscal value of the death capital received by each recipient.

        In a dismembered clause the usufruct recipient is credited with the
        usufruct value at their age, and the bare recipients split the bare
        value equally.
        """
        self.validate_clause()
        shares: dict[str, float] = {}
        if self.is_dismembered:
            split = valuation.split(capital, self.usufruct_recipient, year)
            shares[self.usufruct_recipient] = split.usufruct_value
            per_bare = split.bare_value / len(self.bare_recipients)
            for name in self.bare_recipients:
                shares[name] = shares.get(name, 0.0) + per_bare
        else:
            for recipient in self.full_recipients:
                shares[recipient.name] = shares.get(recipient.name, 0.0) + capital * recipient.fraction / 100.0
        return shares
