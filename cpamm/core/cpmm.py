"""
Constant Product Market Maker (CPMM) swap pricing.

Algorithm Design:
- Type: Fixed-Point Integer Arithmetic / Deterministic Rounding
- Time Complexity: O(1) per swap operation
- Invariant: after each swap, reserve_in' * reserve_out' >= reserve_in * reserve_out
  (the fee stays in the pool, so k can only grow)
"""

from __future__ import annotations

import logging
from dataclasses import dataclass

from ..errors import SlippageExceeded
from ..kernels.python.cpmm_swap import swap_exact_in
from ..kernels.python.fixed_math import require_u64
from ..state.pools import Direction, PoolState, Reserves
from .oracle import update_twap


logger = logging.getLogger(__name__)


@dataclass(frozen=True)
class SwapResult:
    pool: PoolState
    direction: Direction
    amount_in: int
    amount_in_effective: int
    amount_out: int
    new_reserve_in: int
    new_reserve_out: int


def quote_swap(pool: PoolState, reserves: Reserves, amount_in: int, direction: Direction) -> int:
    """
    Output amount for an exact-in swap.

        amount_in_effective = floor(amount_in * (fee_den - fee_num) / fee_den)
        amount_out = floor(reserve_out * amount_in_effective / (reserve_in + amount_in_effective))

    Raises:
        MathOverflow: on any checked arithmetic failure (including an empty pool)
    """
    reserve_in, reserve_out = reserves.oriented(direction)
    return swap_exact_in(
        reserve_in=reserve_in,
        reserve_out=reserve_out,
        amount_in=amount_in,
        fee_numerator=pool.fee_numerator,
        fee_denominator=pool.fee_denominator,
    ).amount_out


def swap(
    pool: PoolState,
    reserves: Reserves,
    amount_in: int,
    direction: Direction,
    min_amount_out: int,
    now: int,
) -> SwapResult:
    """
    Swap transition: TWAP update with pre-trade reserves, then quote and slippage check.

    The caller moves `amount_in` into the input vault and `amount_out` out of
    the output vault, and persists `result.pool`, as one atomic step.
    """
    require_u64("min_amount_out", min_amount_out)

    # Always (A, B) order, whatever the swap direction.
    next_pool = update_twap(pool, reserves.reserve_a, reserves.reserve_b, now)

    reserve_in, reserve_out = reserves.oriented(direction)
    res = swap_exact_in(
        reserve_in=reserve_in,
        reserve_out=reserve_out,
        amount_in=amount_in,
        fee_numerator=pool.fee_numerator,
        fee_denominator=pool.fee_denominator,
    )
    logger.debug(
        "swap quote pool=%s %s amount_in_effective=%d amount_out=%d",
        pool.pool_id,
        direction.value,
        res.amount_in_effective,
        res.amount_out,
    )

    if res.amount_out < min_amount_out:
        raise SlippageExceeded(f"amount_out ({res.amount_out}) < min_amount_out ({min_amount_out})")

    return SwapResult(
        pool=next_pool,
        direction=direction,
        amount_in=amount_in,
        amount_in_effective=res.amount_in_effective,
        amount_out=res.amount_out,
        new_reserve_in=res.new_reserve_in,
        new_reserve_out=res.new_reserve_out,
    )
