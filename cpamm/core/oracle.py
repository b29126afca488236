"""
Time-weighted average price oracle.

This module is intentionally small and pure:
- `update_twap` folds the elapsed interval into the pool's cumulative prices.
- `observe` / `average_price` are read-only helpers for external observers,
  who sample two cumulative readings and divide the delta by the elapsed time.

`update_twap` must run with PRE-trade reserves, before any balance changes, so
the accumulated price is the one that held for the whole elapsed interval.
"""

from __future__ import annotations

import logging
from dataclasses import dataclass, replace
from fractions import Fraction

from ..kernels.python.fixed_math import Q64_SHIFT, checked_div, checked_sub
from ..kernels.python.twap import accumulate
from ..state.pools import PoolState, Reserves


logger = logging.getLogger(__name__)


@dataclass(frozen=True)
class TwapObservation:
    """One cumulative-price sample."""

    timestamp: int
    price_a_cumulative: int
    price_b_cumulative: int


def update_twap(pool: PoolState, reserve_a: int, reserve_b: int, now: int) -> PoolState:
    """
    Return `pool` with cumulative prices advanced to `now`.

    A non-increasing clock or an empty reserve skips accumulation. The stored
    timestamp becomes max(now, block_timestamp_last), so a rewound clock cannot
    count the same seconds twice. Accumulator overflow raises MathOverflow.
    """
    acc = accumulate(
        price_a_cumulative=pool.price_a_cumulative_last,
        price_b_cumulative=pool.price_b_cumulative_last,
        last_timestamp=pool.block_timestamp_last,
        reserve_a=reserve_a,
        reserve_b=reserve_b,
        now=now,
    )
    if acc.price_a_cumulative != pool.price_a_cumulative_last:
        logger.debug(
            "twap accumulated pool=%s elapsed=%d", pool.pool_id, now - pool.block_timestamp_last
        )
    return replace(
        pool,
        block_timestamp_last=acc.timestamp,
        price_a_cumulative_last=acc.price_a_cumulative,
        price_b_cumulative_last=acc.price_b_cumulative,
    )


def observe(pool: PoolState, reserves: Reserves, now: int) -> TwapObservation:
    """Cumulative prices as they would be after an update at `now` (no mutation)."""
    updated = update_twap(pool, reserves.reserve_a, reserves.reserve_b, now)
    return TwapObservation(
        timestamp=updated.block_timestamp_last,
        price_a_cumulative=updated.price_a_cumulative_last,
        price_b_cumulative=updated.price_b_cumulative_last,
    )


def average_price(start: TwapObservation, end: TwapObservation) -> tuple[int, int]:
    """
    Q64.64 average prices (A in B, B in A) over the window [start, end].

    Raises:
        ValueError: if the window is empty or reversed
    """
    if end.timestamp <= start.timestamp:
        raise ValueError(
            f"observation window must be non-empty: {start.timestamp} -> {end.timestamp}"
        )
    elapsed = end.timestamp - start.timestamp
    avg_a = checked_div(checked_sub(end.price_a_cumulative, start.price_a_cumulative), elapsed)
    avg_b = checked_div(checked_sub(end.price_b_cumulative, start.price_b_cumulative), elapsed)
    return avg_a, avg_b


def q64_to_fraction(value: int) -> Fraction:
    """Exact rational value of a Q64.64 number."""
    return Fraction(value, 1 << Q64_SHIFT)
