"""
patrisim - Family Wealth Simulator

Year-by-year simulation of a family's patrimony: fractional ownership,
successions, annual cash flow and reinvestment of liquidities.

Modules:
    - core: Exceptions, logging, settings and loan/annuity maths
    - domain.models: Pydantic models for owners, ownership, assets and ledgers
    - domain.calculator: Demembrement barème, inheritance options, fiscal model
    - application.services: Transfer engine, successions, liquidity waterfall
      and annual ledger builder
"""

__version__ = "1.4.0"
