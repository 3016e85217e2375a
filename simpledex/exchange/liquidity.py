"""
Liquidity engine: deposit and withdrawal effects on reserves and shares.

Runs inside the pool's guarded, journaled section; it neither locks nor
unwinds on its own.
"""

from __future__ import annotations

import logging
from enum import Enum

from ..exceptions import (
    InsufficientBalanceError,
    InsufficientInitialLiquidity,
    InsufficientLiquidityMinted,
    InvalidAmounts,
    InvalidShareAmount,
    RatioMismatch,
)
from ..tokens.ledger import AssetLedger
from ..tokens.shares import ShareLedger
from . import pricing
from .events import LiquidityAdded, LiquidityRemoved
from .reserves import ReserveState
from .settlement import Settlement

logger = logging.getLogger(__name__)


class ImbalancePolicy(str, Enum):
    """What a seeded pool does with a deposit off the current reserve ratio."""
    DONATE = "donate"   # pull both amounts, excess stays in reserves unbacked by shares
    REJECT = "reject"   # refuse unless both sides imply the same share count


class LiquidityEngine:
    """
    Applies deposits and withdrawals.

    Shares for a seeded pool are min(a * S / Ra, b * S / Rb); the first
    deposit mints isqrt(a * b).
    """

    def __init__(
        self,
        settlement: Settlement,
        ledger_a: AssetLedger,
        ledger_b: AssetLedger,
        reserves: ReserveState,
        shares: ShareLedger,
        policy: ImbalancePolicy = ImbalancePolicy.DONATE,
    ):
        self.settlement = settlement
        self.pool_address = settlement.pool
        self.ledger_a = ledger_a
        self.ledger_b = ledger_b
        self.reserves = reserves
        self.shares = shares
        self.policy = ImbalancePolicy(policy)

    def shares_for_deposit(self, amount_a: int, amount_b: int) -> int:
        """Share count a deposit would mint right now (no side effects)."""
        if amount_a <= 0 or amount_b <= 0:
            raise InvalidAmounts("Invalid amounts")

        total = self.shares.total_supply
        if total == 0:
            minted = pricing.initial_shares(amount_a, amount_b)
            if minted == 0:
                raise InsufficientInitialLiquidity(
                    f"Initial deposit ({amount_a}, {amount_b}) mints no shares"
                )
            return minted

        reserve_a, reserve_b = self.reserves.current_reserves()
        from_a, from_b = pricing.proportional_shares(amount_a, amount_b, reserve_a, reserve_b, total)
        if self.policy is ImbalancePolicy.REJECT and from_a != from_b:
            raise RatioMismatch(
                f"Deposit ({amount_a}, {amount_b}) is off the reserve ratio ({reserve_a}, {reserve_b})"
            )
        minted = min(from_a, from_b)
        if minted == 0:
            raise InsufficientLiquidityMinted(
                f"Deposit ({amount_a}, {amount_b}) mints no shares"
            )
        return minted

    def add_liquidity(self, provider: str, amount_a: int, amount_b: int) -> LiquidityAdded:
        minted = self.shares_for_deposit(amount_a, amount_b)

        self.settlement.pull(self.ledger_a, provider, self.pool_address, amount_a)
        self.settlement.pull(self.ledger_b, provider, self.pool_address, amount_b)

        self.reserves.apply_delta(amount_a, amount_b)
        self.shares.mint(provider, minted)

        logger.info(
            "LiquidityAdded provider=%s amountA=%d amountB=%d shares=%d",
            provider, amount_a, amount_b, minted,
        )
        return LiquidityAdded(
            provider=provider,
            amount_a=amount_a,
            amount_b=amount_b,
            shares_minted=minted,
        )

    def remove_liquidity(self, provider: str, share_amount: int) -> LiquidityRemoved:
        if share_amount <= 0:
            raise InvalidShareAmount("Invalid share amount")

        held = self.shares.balance_of(provider)
        if held < share_amount:
            raise InsufficientBalanceError(
                f"{provider} holds {held} shares < {share_amount}"
            )

        reserve_a, reserve_b = self.reserves.current_reserves()
        out_a, out_b = pricing.withdrawal_amounts(
            share_amount, reserve_a, reserve_b, self.shares.total_supply
        )

        self.shares.burn(provider, share_amount)
        self.reserves.apply_delta(-out_a, -out_b)

        if out_a > 0:
            self.settlement.push(self.ledger_a, provider, out_a)
        if out_b > 0:
            self.settlement.push(self.ledger_b, provider, out_b)

        logger.info(
            "LiquidityRemoved provider=%s amountA=%d amountB=%d shares=%d",
            provider, out_a, out_b, share_amount,
        )
        return LiquidityRemoved(provider=provider, amount_a=out_a, amount_b=out_b)
