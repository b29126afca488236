"""
CPMM swap kernel (exact-in).

Semantics:
- The fee is a rational `fee_numerator / fee_denominator` taken from the input:
  `amount_in_effective = floor(amount_in * (fee_denominator - fee_numerator) / fee_denominator)`.
  Multiply first, then divide; the floor keeps the rounding dust in the pool.
- Pricing: `amount_out = floor(reserve_out * amount_in_effective / (reserve_in + amount_in_effective))`
  with a u128 intermediate.
- The whole fee stays in the pool (no protocol cut on swaps).

Every step is checked; see `fixed_math`.
"""

from __future__ import annotations

from dataclasses import dataclass

from .fixed_math import (
    U64_MAX,
    checked_add,
    checked_div,
    checked_mul,
    checked_sub,
    require_u64,
    to_u64,
)


@dataclass(frozen=True)
class SwapExactInResult:
    amount_in: int
    amount_in_effective: int
    amount_out: int
    new_reserve_in: int
    new_reserve_out: int
    k_before: int
    k_after: int


def compute_amount_in_effective(*, amount_in: int, fee_numerator: int, fee_denominator: int) -> int:
    """Input left after the swap fee, floor-rounded (u64 arithmetic)."""
    require_u64("amount_in", amount_in)
    require_u64("fee_numerator", fee_numerator)
    require_u64("fee_denominator", fee_denominator)

    fee_complement = checked_sub(fee_denominator, fee_numerator, limit=U64_MAX)
    scaled = checked_mul(amount_in, fee_complement, limit=U64_MAX)
    return checked_div(scaled, fee_denominator, limit=U64_MAX)


def compute_amount_out(*, reserve_in: int, reserve_out: int, amount_in_effective: int) -> int:
    """Constant-product output for an already fee-adjusted input."""
    require_u64("reserve_in", reserve_in)
    require_u64("reserve_out", reserve_out)
    require_u64("amount_in_effective", amount_in_effective)

    numerator = checked_mul(reserve_out, amount_in_effective)
    denominator = checked_add(reserve_in, amount_in_effective)
    return to_u64(checked_div(numerator, denominator))


def swap_exact_in(
    *,
    reserve_in: int,
    reserve_out: int,
    amount_in: int,
    fee_numerator: int,
    fee_denominator: int,
) -> SwapExactInResult:
    """
    Exact-in swap quote + post-reserves.

    Raises MathOverflow on any width violation, including post-swap reserves
    that would not fit the ledger's u64 balances.
    """
    amount_in_effective = compute_amount_in_effective(
        amount_in=amount_in,
        fee_numerator=fee_numerator,
        fee_denominator=fee_denominator,
    )
    amount_out = compute_amount_out(
        reserve_in=reserve_in,
        reserve_out=reserve_out,
        amount_in_effective=amount_in_effective,
    )

    new_reserve_in = checked_add(reserve_in, amount_in, limit=U64_MAX)
    new_reserve_out = checked_sub(reserve_out, amount_out, limit=U64_MAX)

    return SwapExactInResult(
        amount_in=amount_in,
        amount_in_effective=amount_in_effective,
        amount_out=amount_out,
        new_reserve_in=new_reserve_in,
        new_reserve_out=new_reserve_out,
        k_before=checked_mul(reserve_in, reserve_out),
        k_after=checked_mul(new_reserve_in, new_reserve_out),
    )
