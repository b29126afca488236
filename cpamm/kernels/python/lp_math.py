"""
Liquidity math kernel.

Pure functions with explicit rounding rules (floor everywhere):
- genesis mint: sqrt(amount_a * amount_b) minus a permanently locked MINIMUM_LIQUIDITY,
- proportional mint: min over both assets of amount * supply / reserve,
- burn: amount_lp * reserve / supply per asset,
- protocol fee: LP minted to the protocol from growth of sqrt(k) since `k_last`.
"""

from __future__ import annotations

from dataclasses import dataclass

from ...errors import InitialLiquidityTooLow
from .fixed_math import (
    U64_MAX,
    checked_add,
    checked_div,
    checked_mul,
    checked_sub,
    integer_sqrt,
    require_u64,
    require_u128,
    sqrt_of_product,
    to_u64,
)


MINIMUM_LIQUIDITY = 1000
BPS_DENOM = 10_000


@dataclass(frozen=True)
class InitialMintResult:
    liquidity_minted: int
    liquidity_locked: int


@dataclass(frozen=True)
class BurnLiquidityResult:
    amount_a_out: int
    amount_b_out: int
    total_supply_for_ratio: int


def mint_liquidity_initial(*, amount_a: int, amount_b: int) -> InitialMintResult:
    """
    Genesis mint.

    `MINIMUM_LIQUIDITY` is minted to an unrecoverable sink; the depositor gets
    the remainder. Fails if the geometric mean does not clear the lock.
    """
    initial = sqrt_of_product(amount_a, amount_b)
    if initial <= MINIMUM_LIQUIDITY:
        raise InitialLiquidityTooLow(
            f"sqrt(amount_a * amount_b) = {initial} <= MINIMUM_LIQUIDITY ({MINIMUM_LIQUIDITY})"
        )
    return InitialMintResult(
        liquidity_minted=initial - MINIMUM_LIQUIDITY,
        liquidity_locked=MINIMUM_LIQUIDITY,
    )


def mint_liquidity(
    *,
    reserve_a: int,
    reserve_b: int,
    lp_supply: int,
    amount_a: int,
    amount_b: int,
) -> int:
    """LP minted for a deposit into a pool with outstanding supply."""
    for name, v in (
        ("reserve_a", reserve_a),
        ("reserve_b", reserve_b),
        ("lp_supply", lp_supply),
        ("amount_a", amount_a),
        ("amount_b", amount_b),
    ):
        require_u64(name, v)

    liquidity_a = to_u64(checked_div(checked_mul(amount_a, lp_supply), reserve_a))
    liquidity_b = to_u64(checked_div(checked_mul(amount_b, lp_supply), reserve_b))
    return min(liquidity_a, liquidity_b)


def burn_liquidity(
    *,
    amount_lp: int,
    reserve_a: int,
    reserve_b: int,
    lp_supply: int,
    protocol_mint: int = 0,
) -> BurnLiquidityResult:
    """
    Redemption amounts for `amount_lp`.

    `protocol_mint` is LP minted to the protocol in the same transition; it is
    added to the supply before the ratio is taken, so the withdrawer's share is
    diluted by it.
    """
    for name, v in (
        ("amount_lp", amount_lp),
        ("reserve_a", reserve_a),
        ("reserve_b", reserve_b),
        ("lp_supply", lp_supply),
        ("protocol_mint", protocol_mint),
    ):
        require_u64(name, v)

    total_supply = checked_add(lp_supply, protocol_mint, limit=U64_MAX)
    amount_a_out = to_u64(checked_div(checked_mul(amount_lp, reserve_a), total_supply))
    amount_b_out = to_u64(checked_div(checked_mul(amount_lp, reserve_b), total_supply))
    return BurnLiquidityResult(
        amount_a_out=amount_a_out,
        amount_b_out=amount_b_out,
        total_supply_for_ratio=total_supply,
    )


def protocol_fee_mint(
    *,
    reserve_a: int,
    reserve_b: int,
    k_last: int,
    lp_supply: int,
    protocol_fee_share: int,
) -> int:
    """
    LP to mint to the protocol for invariant growth since `k_last`.

        root_now  = sqrt(reserve_a * reserve_b)
        root_last = sqrt(k_last)
        mint = lp_supply * (root_now - root_last) * share / (root_now * (10_000 - share))

    Returns 0 before the first settlement, when disabled, or when k did not grow.
    Raises MathOverflow on any width violation.
    """
    require_u64("reserve_a", reserve_a)
    require_u64("reserve_b", reserve_b)
    require_u128("k_last", k_last)
    require_u64("lp_supply", lp_supply)
    require_u64("protocol_fee_share", protocol_fee_share)

    if k_last == 0 or protocol_fee_share == 0:
        return 0

    k_now = checked_mul(reserve_a, reserve_b)
    if k_now <= k_last:
        return 0

    root_now = integer_sqrt(k_now)
    root_last = integer_sqrt(k_last)

    numerator = checked_mul(
        checked_mul(lp_supply, checked_sub(root_now, root_last)),
        protocol_fee_share,
    )
    denominator = checked_mul(root_now, checked_sub(BPS_DENOM, protocol_fee_share))
    return to_u64(checked_div(numerator, denominator))


def projected_k_last(*, reserve_a: int, reserve_b: int, amount_a_out: int, amount_b_out: int) -> int:
    """Invariant of the reserves left after paying out a withdrawal."""
    new_reserve_a = checked_sub(reserve_a, amount_a_out, limit=U64_MAX)
    new_reserve_b = checked_sub(reserve_b, amount_b_out, limit=U64_MAX)
    return checked_mul(new_reserve_a, new_reserve_b)
