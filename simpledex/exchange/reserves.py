"""
Reserve state: the pool's authoritative accounting of both assets.

Only the liquidity and swap engines mutate it, through apply_delta().
"""

from __future__ import annotations

import logging
from typing import Tuple

from ..constants import MAX_UINT256
from ..exceptions import InvariantViolation

logger = logging.getLogger(__name__)


class ReserveState:
    """Two reserve counters with an invariant-checked update."""

    def __init__(self) -> None:
        self._reserve_a: int = 0
        self._reserve_b: int = 0

    @property
    def reserve_a(self) -> int:
        return self._reserve_a

    @property
    def reserve_b(self) -> int:
        return self._reserve_b

    def current_reserves(self) -> Tuple[int, int]:
        return self._reserve_a, self._reserve_b

    @property
    def product(self) -> int:
        return self._reserve_a * self._reserve_b

    @property
    def is_empty(self) -> bool:
        return self._reserve_a == 0 and self._reserve_b == 0

    def apply_delta(self, delta_a: int, delta_b: int, *, swap: bool = False) -> Tuple[int, int]:
        """
        Apply signed deltas to both reserves.

        Raises:
            InvariantViolation: on underflow, overflow, or (for swaps) when one
                side does not strictly grow while the other strictly shrinks,
                or the constant product decreases.
        """
        new_a = self._reserve_a + delta_a
        new_b = self._reserve_b + delta_b

        if new_a < 0 or new_b < 0:
            raise InvariantViolation(
                f"Reserve underflow: ({self._reserve_a}, {self._reserve_b}) + ({delta_a}, {delta_b})"
            )
        if new_a > MAX_UINT256 or new_b > MAX_UINT256:
            raise InvariantViolation("Reserve overflow")

        if swap:
            a_in = delta_a > 0 and delta_b < 0
            b_in = delta_b > 0 and delta_a < 0
            if not (a_in or b_in):
                raise InvariantViolation(
                    f"Swap must grow the input reserve and shrink the output reserve, got ({delta_a}, {delta_b})"
                )
            if new_a * new_b < self.product:
                raise InvariantViolation("Swap would decrease the constant product")

        self._reserve_a = new_a
        self._reserve_b = new_b
        logger.debug("Reserves updated to (%d, %d)", new_a, new_b)
        return new_a, new_b

    # -- Atomicity ------------------------------------------------------------

    def snapshot(self) -> Tuple[int, int]:
        return self._reserve_a, self._reserve_b

    def restore(self, snapshot: Tuple[int, int]) -> None:
        self._reserve_a, self._reserve_b = snapshot

    def __repr__(self) -> str:
        return f"<ReserveState a={self._reserve_a} b={self._reserve_b}>"
