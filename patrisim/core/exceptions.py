"""Custom exceptions for patrisim.

Domain-specific exception types for better error handling and debugging.
"""

from __future__ import annotations

from typing import Any


class PatrisimError(Exception):
    """Base exception for all patrisim errors."""
    pass


# --- Ownership Errors ---

class OwnershipError(PatrisimError):
    """Error while reading or mutating the ownership of an asset."""
    pass


class InvalidOwnershipError(OwnershipError):
    """Ownership breaks its invariants (fractions, dismembered sets)."""
    pass


class SeveralUsufructOwnersError(OwnershipError):
    """Transfer of an asset whose usufruct is shared by several people."""
    pass


class DecedentIsBareOwnerError(OwnershipError):
    """Transfer of a dismembered life insurance where the decedent holds bare ownership."""
    pass


class NoBareOwnerError(OwnershipError):
    """Dismembered asset without any bare owner."""
    pass


class NotDismemberedError(OwnershipError):
    """Demembrement requested on an asset held in full ownership."""
    pass


class MissingFiscalOptionError(OwnershipError):
    """A surviving spouse inherits but no fiscal option is available."""
    pass


# --- Owner Set Errors ---

class OwnersError(PatrisimError):
    """Error in owner set arithmetic."""
    pass


class OwnerNotFoundError(OwnersError):
    """Referenced owner is not part of the set."""

    def __init__(self, owner_name: str):
        self.owner_name = owner_name
        super().__init__(f"Owner '{owner_name}' not found")


class NoNewOwnersError(OwnersError):
    """Replacement list of owners is empty."""
    pass


class NoOtherOwnersError(OwnersError):
    """Cannot redistribute the share of the sole owner."""
    pass


# --- Clause Errors ---

class InvalidClauseError(PatrisimError):
    """Invalid life insurance beneficiary clause."""
    pass


# --- Liquidity Errors ---

class InsufficientLiquidityError(PatrisimError):
    """Not enough capital in the free investments to cover a deficit."""

    def __init__(self, missing_amount: float):
        self.missing_amount = missing_amount
        super().__init__(f"Insufficient liquidity: {missing_amount:.2f} € missing")


# --- Calculation Errors ---

class ValuationError(PatrisimError):
    """Error in usufruct / bare ownership valuation."""
    pass


class FiscalModelError(PatrisimError):
    """Error in a fiscal computation."""
    pass


class SimulationError(PatrisimError):
    """Error during the yearly simulation."""
    pass


class InvalidParameterError(PatrisimError):
    """Invalid parameter value provided."""

    def __init__(self, param_name: str, value: Any, reason: str = ""):
        self.param_name = param_name
        self.value = value
        self.reason = reason
        msg = f"Invalid parameter '{param_name}': {value}"
        if reason:
            msg += f" - {reason}"
        super().__init__(msg)


# --- Configuration Errors ---

class ConfigurationError(PatrisimError):
    """Error in application configuration."""
    pass
