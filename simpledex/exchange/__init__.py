"""
SimpleDEX Exchange Engine

Two-asset constant-product pool.

Components:
  - Reserve State (authoritative reserve counters)
  - Liquidity Engine (share mint / burn on deposit / withdrawal)
  - Swap Engine (exact-input trades, 0.5% fee to the collector)
  - Reentrancy Guard (FREE / LOCKED state machine)
  - Settlement (journaled transfers, compensating unwind)
  - SimpleDEX coordinator (guard + atomic rollback + events)
"""

from .events import LiquidityAdded, LiquidityRemoved, Swapped
from .guard import GuardState, ReentrancyGuard
from .liquidity import ImbalancePolicy, LiquidityEngine
from .pool import SimpleDEX
from .reserves import ReserveState
from .settlement import Movement, Settlement
from .swap import SwapEngine
from . import pricing

__all__ = [
    # Events
    "LiquidityAdded", "LiquidityRemoved", "Swapped",
    # Guard
    "GuardState", "ReentrancyGuard",
    # Engines
    "ImbalancePolicy", "LiquidityEngine", "SwapEngine", "ReserveState",
    # Settlement
    "Movement", "Settlement",
    # Coordinator
    "SimpleDEX",
    "pricing",
]
