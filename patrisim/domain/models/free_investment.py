"""Free investment vehicles.

A free investment is an account (life insurance, PEA, securities account)
that receives the family's surpluses and funds its deficits. Interests are
capitalized yearly. Withdrawals are taxed on their interest part, according
to the tax wrapper.
"""

from __future__ import annotations

from dataclasses import dataclass

from pydantic import BaseModel, Field

from patrisim.core.exceptions import InvalidParameterError, SimulationError
from patrisim.core.logging import get_logger
from patrisim.core.settings import get_settings
from patrisim.domain.models.assets import InvestmentKind
from patrisim.domain.models.clause import LifeInsuranceClause
from patrisim.domain.models.ownable import OwnableAsset
from patrisim.domain.models.ownership import EvaluationContext
from patrisim.domain.models.owners import OwnerSet

log = get_logger(__name__)

_EMPTY_TOLERANCE = 1e-6


class InvestmentState(BaseModel):
    """Balance of the account at the end of `year`."""

    year: int
    interest: float = Field(default=0.0, description="Capitalized interests in €")
    investment: float = Field(default=0.0, description="Paid-in capital in €")

    @property
    def value(self) -> float:
        return self.interest + self.investment


class TransmittedInterests(BaseModel):
    """Interests capitalized since the account was last transmitted."""

    year: int
    interest: float = 0.0


@dataclass(frozen=True)
class Withdrawal:
    """Outcome of a withdrawal from a free investment."""

    brut_amount: float = 0.0
    revenue: float = 0.0
    interests: float = 0.0
    net_interests: float = 0.0
    taxable_interests: float = 0.0
    social_taxes: float = 0.0


class FreeInvestment(OwnableAsset):
    """Account of the free investment pool, used by the liquidity waterfall."""

    kind: InvestmentKind = Field(default=InvestmentKind.LIFE_INSURANCE)
    periodic_social_taxes: bool = Field(default=True, description="Life insurance: social taxes levied yearly")
    clause: LifeInsuranceClause | None = Field(None, description="Beneficiary clause (life insurance only)")
    interest_rate_pct: float = Field(default=2.0, description="Gross yearly return %")
    inflation_rate_pct: float = Field(
        default_factory=lambda: get_settings().inflation_rate_pct, description="Yearly inflation %"
    )
    social_taxes_rate_pct: float = Field(default_factory=lambda: get_settings().social_taxes_rate_pct, ge=0, le=100)
    state: InvestmentState
    interests_after_transmission: TransmittedInterests | None = None

    @property
    def is_life_insurance(self) -> bool:
        return self.kind == InvestmentKind.LIFE_INSURANCE

    @property
    def current_value(self) -> float:
        return self.state.value

    def value(self, year: int) -> float:
        """Current balance. The account is only known at its last capitalized state."""
        return self.state.value

    # --- Rates ---

    @property
    def average_interest_rate_pct(self) -> float:
        """Yearly return, net of social taxes when they are levied yearly."""
        if self.is_life_insurance and self.periodic_social_taxes:
            return self.interest_rate_pct * (1.0 - self.social_taxes_rate_pct / 100.0)
        return self.interest_rate_pct

    @property
    def average_interest_rate_net_of_inflation_pct(self) -> float:
        return self.average_interest_rate_pct - self.inflation_rate_pct

    def interest_fraction(self) -> float:
        value = self.state.value
        return self.state.interest / value if value > 0 else 0.0

    def split(self, removal: float) -> tuple[float, float]:
        """Split a gross removal into (investment, interest) pro rata of the balance."""
        interest = removal * self.interest_fraction()
        return removal - interest, interest

    # --- Deposits and capitalization ---

    def deposit(self, amount: float) -> None:
        if amount < 0:
            raise InvalidParameterError("amount", amount, "deposit must be >= 0")
        self.state.investment += amount

    def capitalize(self, year: int) -> None:
        """Capitalize the interests of `year`, net of taxes and inflation.

        Capitalizing the current year again is a no-op.

        Raises:
            SimulationError: `year` is neither the current year nor the next one.
        """
        if year not in (self.state.year, self.state.year + 1):
            raise SimulationError(
                f"{self.name}: cannot capitalize {year} from state of {self.state.year}"
            )
        if year == self.state.year + 1:
            interests = self.state.value * self.average_interest_rate_net_of_inflation_pct / 100.0
            self.state.interest += interests
            self.state.year = year
            if self.interests_after_transmission is not None:
                self.interests_after_transmission.interest += interests

    def initialize_interests_after_transmission(self, year: int) -> None:
        """Start tracking the usufructuary's claim on future interests."""
        if self.ownership.is_dismembered:
            self.interests_after_transmission = TransmittedInterests(year=year)
        else:
            self.interests_after_transmission = None

    # --- Withdrawals ---

    def gross_withdrawal(self, net_amount: float, max_permitted: float) -> Withdrawal:
        """Gross amount to remove to obtain `net_amount` after social taxes.

        Social taxes are withheld at source on the interest part of the
        removal, except for life insurance with yearly social taxes.
        """
        if self.state.interest <= 0.0:
            brut = min(net_amount, max_permitted)
            _, interest = self.split(brut)
            return Withdrawal(
                brut_amount=brut,
                revenue=brut,
                interests=interest,
                net_interests=interest,
                taxable_interests=0.0,
                social_taxes=0.0,
            )

        social_rate = self.social_taxes_rate_pct / 100.0
        no_social_taxes = self.is_life_insurance and self.periodic_social_taxes
        beta = 0.0 if no_social_taxes else social_rate
        factor = 1.0 - self.interest_fraction() * beta
        brut = min(net_amount / factor, max_permitted)
        _, interest = self.split(brut)

        social_taxes = 0.0 if no_social_taxes else interest * social_rate
        taxable = 0.0 if self.kind == InvestmentKind.PEA else interest
        return Withdrawal(
            brut_amount=brut,
            revenue=brut - social_taxes,
            interests=interest,
            net_interests=interest - social_taxes,
            taxable_interests=taxable,
            social_taxes=social_taxes,
        )

    def remove(self, net_amount: float, for_name: str = "") -> Withdrawal:
        """Withdraw up to `net_amount` (net of social taxes) on behalf of `for_name`.

        Without a name the whole balance is available. Otherwise:
        - a usufructuary may only take its share of the interests
          capitalized since the last transmission;
        - one of several full owners may take up to its owned value, and the
          ownership fractions are recomputed afterwards;
        - the sole full owner may take the whole balance;
        - anybody else gets nothing.
        """
        balance = self.state.value
        if balance <= 0.0 or net_amount <= 0.0:
            return Withdrawal()

        ownership = self.ownership
        update_ownership = False
        update_interests = False
        owned_values: dict[str, float] = {}

        if not for_name:
            max_permitted = balance
        elif ownership.is_dismembered and ownership.has_an_usufruct_owner(for_name):
            if self.interests_after_transmission is None:
                return Withdrawal()
            fraction = ownership.usufruct_owners.fraction_of(for_name)
            max_permitted = self.interests_after_transmission.interest * fraction / 100.0
            update_interests = True
        elif ownership.has_a_unique_full_owner(for_name):
            max_permitted = balance
        elif not ownership.is_dismembered and ownership.has_a_full_owner(for_name):
            owned_values = ownership.owned_values(balance, self.state.year, EvaluationContext.PATRIMOINE)
            max_permitted = min(balance, owned_values[for_name])
            update_ownership = True
        else:
            return Withdrawal()

        if max_permitted <= 0.0:
            return Withdrawal()

        removal = self.gross_withdrawal(net_amount, max_permitted)
        if removal.brut_amount >= balance - _EMPTY_TOLERANCE:
            self.state.interest = 0.0
            self.state.investment = 0.0
        else:
            investment, interest = self.split(removal.brut_amount)
            self.state.interest -= interest
            self.state.investment -= investment

        if update_interests and self.interests_after_transmission is not None:
            self.interests_after_transmission.interest -= removal.brut_amount

        if update_ownership and self.state.value > 0.0:
            owned_values[for_name] -= removal.brut_amount
            new_value = self.state.value
            ownership.full_owners = OwnerSet.of(
                *((name, 100.0 * value / new_value) for name, value in owned_values.items())
            )
            ownership.group_shares()

        log.debug(
            "free_investment_withdrawal",
            vehicle=self.name,
            owner=for_name or None,
            requested=net_amount,
            brut=removal.brut_amount,
            revenue=removal.revenue,
        )
        return removal

    def withdraw_life_insurance_death_capital(self, decedent_name: str) -> float:
        """Remove the decedent's share of a life insurance, paid out as death capital.

        Returns:
            Death capital withdrawn in €
        """
        if not self.is_life_insurance or self.ownership.is_dismembered:
            return 0.0
        if not self.ownership.has_a_full_owner(decedent_name):
            return 0.0

        capital = self.owned_value(
            decedent_name, self.state.year, EvaluationContext.LIFE_INSURANCE_SUCCESSION
        )
        if self.ownership.has_a_unique_full_owner(decedent_name):
            capital = self.state.value
            self.state.interest = 0.0
            self.state.investment = 0.0
        elif capital != 0.0:
            investment, interest = self.split(capital)
            self.state.interest -= interest
            self.state.investment -= investment
        return capital
