"""
Swap engine: exact-input trades against the constant-product curve.

The fee is skimmed from the trader straight to the fee collector and never
enters the reserves; only the net input is priced.
"""

from __future__ import annotations

import logging
from typing import Dict, Tuple

from ..constants import FEE_DENOMINATOR, FEE_NUMERATOR
from ..exceptions import (
    InsufficientLiquidity,
    InvalidAmount,
    InvalidInputToken,
    InvalidOutputToken,
    SameTokenSwap,
)
from ..tokens.base import is_null_address
from ..tokens.ledger import AssetLedger
from . import pricing
from .events import Swapped
from .reserves import ReserveState
from .settlement import Settlement

logger = logging.getLogger(__name__)


class SwapEngine:
    """Prices and settles swaps between the pool's two assets."""

    def __init__(
        self,
        settlement: Settlement,
        ledger_a: AssetLedger,
        ledger_b: AssetLedger,
        reserves: ReserveState,
        fee_collector: str,
    ):
        self.settlement = settlement
        self.pool_address = settlement.pool
        self.reserves = reserves
        self.fee_collector = fee_collector
        self._ledgers: Dict[str, AssetLedger] = {
            ledger_a.address: ledger_a,
            ledger_b.address: ledger_b,
        }
        self._token_a = ledger_a.address

    def validate(self, asset_in: str, asset_out: str, amount_in: int) -> None:
        if is_null_address(asset_in) or asset_in not in self._ledgers:
            raise InvalidInputToken("Invalid input token")
        if is_null_address(asset_out) or asset_out not in self._ledgers:
            raise InvalidOutputToken("Invalid output token")
        if asset_in == asset_out:
            raise SameTokenSwap("Cannot swap same token")
        if amount_in <= 0:
            raise InvalidAmount("Invalid amount")

    def _oriented_reserves(self, asset_in: str) -> Tuple[int, int]:
        reserve_a, reserve_b = self.reserves.current_reserves()
        if asset_in == self._token_a:
            return reserve_a, reserve_b
        return reserve_b, reserve_a

    def quote(self, asset_in: str, asset_out: str, amount_in: int) -> Tuple[int, int]:
        """(amount_out, fee) for a trade against current reserves, without executing it."""
        self.validate(asset_in, asset_out, amount_in)
        reserve_in, reserve_out = self._oriented_reserves(asset_in)
        fee, _, out = pricing.quote(amount_in, reserve_in, reserve_out)
        return out, fee

    def swap(self, trader: str, asset_in: str, asset_out: str, amount_in: int) -> Swapped:
        self.validate(asset_in, asset_out, amount_in)

        reserve_in, reserve_out = self._oriented_reserves(asset_in)
        if reserve_in == 0 or reserve_out == 0:
            raise InsufficientLiquidity("Pool has no liquidity")

        ledger_in = self._ledgers[asset_in]
        ledger_out = self._ledgers[asset_out]

        fee = pricing.swap_fee(amount_in, FEE_NUMERATOR, FEE_DENOMINATOR)
        net_in = amount_in - fee

        if fee > 0:
            self.settlement.pull(ledger_in, trader, self.fee_collector, fee)
        self.settlement.pull(ledger_in, trader, self.pool_address, net_in)

        amount_out = pricing.amount_out(reserve_in, reserve_out, net_in)
        if amount_out == 0 or amount_out >= reserve_out:
            raise InsufficientLiquidity(
                f"Input {amount_in} yields no output against reserves ({reserve_in}, {reserve_out})"
            )

        self.settlement.push(ledger_out, trader, amount_out)

        if asset_in == self._token_a:
            self.reserves.apply_delta(net_in, -amount_out, swap=True)
        else:
            self.reserves.apply_delta(-amount_out, net_in, swap=True)

        logger.info(
            "Swapped trader=%s in=%s out=%s amountIn=%d amountOut=%d fee=%d",
            trader, asset_in, asset_out, amount_in, amount_out, fee,
        )
        return Swapped(
            trader=trader,
            asset_in=asset_in,
            asset_out=asset_out,
            amount_in=amount_in,
            amount_out=amount_out,
            fee=fee,
        )
