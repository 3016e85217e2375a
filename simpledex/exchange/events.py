"""
Records emitted by a pool for external consumers.
"""

import time
from dataclasses import dataclass, field
from typing import Any, Dict


@dataclass(frozen=True)
class LiquidityAdded:
    """Emitted on every successful deposit."""
    provider: str
    amount_a: int
    amount_b: int
    shares_minted: int
    timestamp: float = field(default_factory=time.time)

    def to_dict(self) -> Dict[str, Any]:
        return {
            "event": "LiquidityAdded",
            "provider": self.provider,
            "amountA": self.amount_a,
            "amountB": self.amount_b,
            "sharesMinted": self.shares_minted,
            "timestamp": self.timestamp,
        }


@dataclass(frozen=True)
class LiquidityRemoved:
    """Emitted on every successful withdrawal."""
    provider: str
    amount_a: int
    amount_b: int
    timestamp: float = field(default_factory=time.time)

    def to_dict(self) -> Dict[str, Any]:
        return {
            "event": "LiquidityRemoved",
            "provider": self.provider,
            "amountA": self.amount_a,
            "amountB": self.amount_b,
            "timestamp": self.timestamp,
        }


@dataclass(frozen=True)
class Swapped:
    """Emitted on every successful swap."""
    trader: str
    asset_in: str
    asset_out: str
    amount_in: int
    amount_out: int
    fee: int
    timestamp: float = field(default_factory=time.time)

    def to_dict(self) -> Dict[str, Any]:
        return {
            "event": "Swapped",
            "trader": self.trader,
            "assetIn": self.asset_in,
            "assetOut": self.asset_out,
            "amountIn": self.amount_in,
            "amountOut": self.amount_out,
            "fee": self.fee,
            "timestamp": self.timestamp,
        }
