"""
Constant-product pricing math.

Pure functions over non-negative integers. Every division truncates and
every product is formed before its division.
"""

from __future__ import annotations

import math
from typing import Tuple

from ..constants import FEE_DENOMINATOR, FEE_NUMERATOR


def initial_shares(amount_a: int, amount_b: int) -> int:
    """Shares minted by the first deposit: floor(sqrt(a * b))."""
    return math.isqrt(amount_a * amount_b)


def proportional_shares(
    amount_a: int,
    amount_b: int,
    reserve_a: int,
    reserve_b: int,
    total_shares: int,
) -> Tuple[int, int]:
    """Candidate share counts implied by each side of a deposit into a seeded pool."""
    return (
        amount_a * total_shares // reserve_a,
        amount_b * total_shares // reserve_b,
    )


def withdrawal_amounts(
    share_amount: int,
    reserve_a: int,
    reserve_b: int,
    total_shares: int,
) -> Tuple[int, int]:
    """Reserves released by burning *share_amount*; remainders stay in the pool."""
    return (
        share_amount * reserve_a // total_shares,
        share_amount * reserve_b // total_shares,
    )


def swap_fee(
    amount_in: int,
    numerator: int = FEE_NUMERATOR,
    denominator: int = FEE_DENOMINATOR,
) -> int:
    return amount_in * numerator // denominator


def amount_out(reserve_in: int, reserve_out: int, net_in: int) -> int:
    """
    Output for *net_in* against pre-trade reserves.

    Rounds down, so (reserve_in + net_in) * (reserve_out - out) never drops
    below reserve_in * reserve_out.
    """
    if reserve_in + net_in == 0:
        return 0
    return reserve_out * net_in // (reserve_in + net_in)


def quote(amount_in: int, reserve_in: int, reserve_out: int) -> Tuple[int, int, int]:
    """(fee, net_in, amount_out) for a gross input."""
    fee = swap_fee(amount_in)
    net_in = amount_in - fee
    return fee, net_in, amount_out(reserve_in, reserve_out, net_in)
