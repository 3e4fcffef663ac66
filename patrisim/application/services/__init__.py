"""Application services."""

from .ledger import AnnualLedgerBuilder
from .liquidity import LifeInsuranceRebate, LiquidityWaterfall
from .ownership_manager import OwnershipManager
from .succession import SuccessionManager
from .transfer import TransferEngine

__all__ = [
    "TransferEngine",
    "OwnershipManager",
    "SuccessionManager",
    "LiquidityWaterfall",
    "LifeInsuranceRebate",
    "AnnualLedgerBuilder",
]
