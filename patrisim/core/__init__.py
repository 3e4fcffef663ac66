"""Core infrastructure: errors, logging, settings and financial maths."""

from .exceptions import (
    InsufficientLiquidityError,
    InvalidClauseError,
    InvalidOwnershipError,
    OwnershipError,
    OwnersError,
    PatrisimError,
    SimulationError,
)
from .financial import (
    calculate_future_value,
    calculate_remaining_balance,
    calculate_yearly_payment,
)
from .logging import configure_logging, get_logger
from .settings import SimulationSettings, get_settings

__all__ = [
    "calculate_yearly_payment",
    "calculate_remaining_balance",
    "calculate_future_value",
    "configure_logging",
    "get_logger",
    "SimulationSettings",
    "get_settings",
    # Exceptions
    "PatrisimError",
    "OwnershipError",
    "InvalidOwnershipError",
    "OwnersError",
    "InvalidClauseError",
    "InsufficientLiquidityError",
    "SimulationError",
]
