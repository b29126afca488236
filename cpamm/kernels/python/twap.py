"""
Cumulative price accumulator kernel.

Prices are Q64.64 (`(reserve_other << 64) // reserve_self`) and are integrated
over seconds into u128 accumulators. Accumulators only ever grow; a value that
would leave the u128 range is an error, never a wrap.
"""

from __future__ import annotations

from dataclasses import dataclass

from .fixed_math import checked_add, checked_mul, q64_ratio, require_u64, require_u128


@dataclass(frozen=True)
class CumulativePrices:
    timestamp: int
    price_a_cumulative: int
    price_b_cumulative: int


def elapsed_seconds(*, last_timestamp: int, now: int) -> int:
    """Seconds since `last_timestamp`, floored at 0 for stale or repeated clocks."""
    require_u64("last_timestamp", last_timestamp)
    require_u64("now", now)
    return now - last_timestamp if now > last_timestamp else 0


def spot_prices_q64(*, reserve_a: int, reserve_b: int) -> tuple[int, int]:
    """(price of A in B, price of B in A) as Q64.64; reserves must be non-zero."""
    return q64_ratio(reserve_b, reserve_a), q64_ratio(reserve_a, reserve_b)


def accumulate(
    *,
    price_a_cumulative: int,
    price_b_cumulative: int,
    last_timestamp: int,
    reserve_a: int,
    reserve_b: int,
    now: int,
) -> CumulativePrices:
    """
    Advance the accumulators to `now`.

    Accumulation is skipped when no time passed or a reserve is empty. The
    returned timestamp never moves backwards: a clock behind `last_timestamp`
    leaves it where it was.
    """
    require_u128("price_a_cumulative", price_a_cumulative)
    require_u128("price_b_cumulative", price_b_cumulative)
    require_u64("reserve_a", reserve_a)
    require_u64("reserve_b", reserve_b)

    elapsed = elapsed_seconds(last_timestamp=last_timestamp, now=now)
    if elapsed > 0 and reserve_a != 0 and reserve_b != 0:
        price_a, price_b = spot_prices_q64(reserve_a=reserve_a, reserve_b=reserve_b)
        price_a_cumulative = checked_add(price_a_cumulative, checked_mul(price_a, elapsed))
        price_b_cumulative = checked_add(price_b_cumulative, checked_mul(price_b, elapsed))

    return CumulativePrices(
        timestamp=max(now, last_timestamp),
        price_a_cumulative=price_a_cumulative,
        price_b_cumulative=price_b_cumulative,
    )
