"""
SimpleDEX pool coordinator

Composes reserve state, the share ledger, the liquidity and swap engines and
the reentrancy guard into a single two-asset constant-product pool.

Every mutating entry point:
  1. acquires the guard (nested entry -> ReentrantCall)
  2. snapshots reserves and shares and opens a transfer journal
  3. runs the engine, which calls out to the asset ledgers
  4. checks the seeded-pool invariant and records the event
  5. on any failure restores reserves and shares, reverses the journaled
     transfers with compensating transfers, then re-raises
  6. releases the guard on every exit path

The pool is also the LP token: balance_of / approve / transfer / transfer_from
act on its share ledger.
"""

from __future__ import annotations

import hashlib
import logging
from contextlib import contextmanager
from typing import Any, Dict, Iterator, List, Optional, Tuple

from ..constants import FEE_DENOMINATOR, FEE_NUMERATOR
from ..exceptions import ConfigurationError, InvariantViolation
from ..tokens.base import is_null_address
from ..tokens.ledger import AssetLedger
from ..tokens.shares import ShareLedger
from .events import LiquidityAdded, LiquidityRemoved, Swapped
from .guard import ReentrancyGuard
from .liquidity import ImbalancePolicy, LiquidityEngine
from .reserves import ReserveState
from .settlement import Settlement
from .swap import SwapEngine

logger = logging.getLogger(__name__)

DEFAULT_SHARE_NAME = "SimpleDEX LP"
DEFAULT_SHARE_SYMBOL = "SDLP"


class SimpleDEX:
    """
    Two-asset constant-product pool with a 0.5% swap fee.

    Args:
        token_a: ledger of asset A
        token_b: ledger of asset B
        fee_collector: identity receiving swap fees
        share_name / share_symbol: LP token metadata
        imbalance_policy: how off-ratio deposits into a seeded pool are handled
    """

    def __init__(
        self,
        token_a: AssetLedger,
        token_b: AssetLedger,
        fee_collector: str,
        *,
        share_name: str = DEFAULT_SHARE_NAME,
        share_symbol: str = DEFAULT_SHARE_SYMBOL,
        imbalance_policy: ImbalancePolicy = ImbalancePolicy.DONATE,
        address: Optional[str] = None,
    ):
        if is_null_address(token_a.address) or is_null_address(token_b.address):
            raise ConfigurationError("Pool assets must have non-null addresses")
        if token_a.address == token_b.address:
            raise ConfigurationError("Pool assets must be distinct")
        if is_null_address(fee_collector):
            raise ConfigurationError("Fee collector must be a non-null address")

        self._ledger_a = token_a
        self._ledger_b = token_b
        self._fee_collector = fee_collector
        self.address = address or self._deterministic_address(
            token_a.address, token_b.address, fee_collector
        )

        self._guard = ReentrancyGuard()
        self._reserves = ReserveState()
        self._shares = ShareLedger(share_name, share_symbol)
        self._settlement = Settlement(self.address)
        self._liquidity = LiquidityEngine(
            self._settlement, token_a, token_b, self._reserves, self._shares, imbalance_policy
        )
        self._swapper = SwapEngine(
            self._settlement, token_a, token_b, self._reserves, fee_collector
        )
        self._events: List[Any] = []

        logger.info(
            "Pool %s deployed: %s/%s fee_collector=%s policy=%s",
            self.address, token_a.address, token_b.address, fee_collector,
            self._liquidity.policy.value,
        )

    # -- Atomic section -------------------------------------------------------

    @contextmanager
    def _transaction(self, operation: str) -> Iterator[None]:
        with self._guard.held():
            reserves = self._reserves.snapshot()
            shares = self._shares.checkpoint()
            self._settlement.reset()
            try:
                yield
                self._check_seeded_invariant()
            except Exception as e:
                self._shares.rollback(shares)
                self._reserves.restore(reserves)
                logger.warning("%s reverted: %s: %s", operation, type(e).__name__, e)
                # raises InvariantViolation, chained to e, if a transfer cannot be reversed
                self._settlement.unwind()
                raise
            finally:
                self._settlement.reset()

    def _check_seeded_invariant(self) -> None:
        reserve_a, reserve_b = self._reserves.current_reserves()
        empty = (reserve_a == 0, reserve_b == 0, self._shares.total_supply == 0)
        if len(set(empty)) != 1:
            raise InvariantViolation(
                f"Pool partially seeded: reserves=({reserve_a}, {reserve_b}) "
                f"shares={self._shares.total_supply}"
            )

    # -- Liquidity ------------------------------------------------------------

    def add_liquidity(self, provider: str, amount_a: int, amount_b: int) -> LiquidityAdded:
        """
        Deposit both assets and receive shares.

        The provider must have approved the pool for at least *amount_a* /
        *amount_b* on the respective asset ledgers.
        """
        with self._transaction("addLiquidity"):
            event = self._liquidity.add_liquidity(provider, amount_a, amount_b)
        self._events.append(event)
        return event

    def remove_liquidity(self, provider: str, share_amount: int) -> LiquidityRemoved:
        """Burn *share_amount* shares and receive the proportional reserves."""
        with self._transaction("removeLiquidity"):
            event = self._liquidity.remove_liquidity(provider, share_amount)
        self._events.append(event)
        return event

    # -- Swap -----------------------------------------------------------------

    def swap(self, trader: str, asset_in: str, asset_out: str, amount_in: int) -> Swapped:
        """
        Exact-input swap of *amount_in* of *asset_in* for *asset_out*.

        The trader must have approved the pool for *amount_in* of *asset_in*.
        """
        with self._transaction("swap"):
            event = self._swapper.swap(trader, asset_in, asset_out, amount_in)
        self._events.append(event)
        return event

    def get_amount_out(self, asset_in: str, amount_in: int) -> Tuple[int, int]:
        """Quote (amount_out, fee) for swapping *amount_in* of *asset_in*."""
        asset_out = self.token_b if asset_in == self.token_a else self.token_a
        return self._swapper.quote(asset_in, asset_out, amount_in)

    # -- LP token -------------------------------------------------------------

    @property
    def name(self) -> str:
        return self._shares.name

    @property
    def symbol(self) -> str:
        return self._shares.symbol

    @property
    def decimals(self) -> int:
        return self._shares.decimals

    @property
    def total_supply(self) -> int:
        return self._shares.total_supply

    def balance_of(self, account: str) -> int:
        return self._shares.balance_of(account)

    def allowance(self, owner: str, spender: str) -> int:
        return self._shares.allowance(owner, spender)

    def approve(self, owner: str, spender: str, amount: int) -> bool:
        return self._shares.approve(owner, spender, amount)

    def transfer(self, sender: str, recipient: str, amount: int) -> bool:
        with self._guard.held():
            return self._shares.transfer(sender, recipient, amount)

    def transfer_from(self, spender: str, owner: str, recipient: str, amount: int) -> bool:
        with self._guard.held():
            return self._shares.transfer_from(spender, owner, recipient, amount)

    # -- Queries --------------------------------------------------------------

    @property
    def token_a(self) -> str:
        return self._ledger_a.address

    @property
    def token_b(self) -> str:
        return self._ledger_b.address

    @property
    def fee_collector(self) -> str:
        return self._fee_collector

    @property
    def fee_rate(self) -> Tuple[int, int]:
        return FEE_NUMERATOR, FEE_DENOMINATOR

    @property
    def reserve_a(self) -> int:
        return self._reserves.reserve_a

    @property
    def reserve_b(self) -> int:
        return self._reserves.reserve_b

    def current_reserves(self) -> Tuple[int, int]:
        return self._reserves.current_reserves()

    @property
    def imbalance_policy(self) -> ImbalancePolicy:
        return self._liquidity.policy

    @property
    def events(self) -> List[Any]:
        return list(self._events)

    def to_dict(self) -> Dict[str, Any]:
        return {
            "address": self.address,
            "tokenA": self.token_a,
            "tokenB": self.token_b,
            "feeCollector": self._fee_collector,
            "feeRate": f"{FEE_NUMERATOR}/{FEE_DENOMINATOR}",
            "reserveA": self.reserve_a,
            "reserveB": self.reserve_b,
            "totalShares": self.total_supply,
            "imbalancePolicy": self._liquidity.policy.value,
        }

    def __repr__(self) -> str:
        return (
            f"<SimpleDEX {self.address} reserves=({self.reserve_a}, {self.reserve_b}) "
            f"shares={self.total_supply}>"
        )

    @staticmethod
    def _deterministic_address(token_a: str, token_b: str, fee_collector: str) -> str:
        raw = f"pool:{token_a}:{token_b}:{fee_collector}".encode()
        return "0x" + hashlib.blake2b(raw, digest_size=20).hexdigest()
