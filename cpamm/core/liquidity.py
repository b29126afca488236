"""
Liquidity management operations: create pool, add/remove liquidity.
"""

from __future__ import annotations

import logging
from dataclasses import dataclass, replace

from ..errors import InvalidFee, InvalidLpMint, InvalidMint, SlippageExceeded
from ..kernels.python.fixed_math import U64_MAX, require_u64
from ..kernels.python.lp_math import (
    burn_liquidity,
    mint_liquidity,
    mint_liquidity_initial,
    projected_k_last,
)
from ..state.pools import (
    CANONICAL_BUMP,
    Address,
    AssetId,
    PoolState,
    Reserves,
    compute_pool_id,
    derive_address,
)
from .fees import protocol_fee_mint_or_zero
from .oracle import update_twap


logger = logging.getLogger(__name__)


@dataclass(frozen=True)
class AddLiquidityResult:
    pool: PoolState
    amount_a: int
    amount_b: int
    lp_minted: int
    lp_locked: int


@dataclass(frozen=True)
class RemoveLiquidityResult:
    pool: PoolState
    amount_lp: int
    amount_a: int
    amount_b: int
    protocol_mint: int


def create_pool(
    asset_a: AssetId,
    asset_b: AssetId,
    fee_numerator: int,
    fee_denominator: int,
    *,
    creator: Address,
    now: int,
    program_id: str,
    pool_bump: int = CANONICAL_BUMP,
    auth_bump: int = CANONICAL_BUMP,
) -> PoolState:
    """
    Genesis state for a new pool.

    Vault and LP mint ids are derived from the pool id, so the same pair always
    binds to the same accounts:
        vault_x = H("vault" || pool_id || asset_x)
        lp_mint = H("lp_mint" || pool_id)

    The creator becomes admin and protocol-fee recipient; accrual starts
    disabled (share 0) and `k_last` starts at 0.

    Raises:
        InvalidMint: if asset_a >= asset_b
        InvalidFee: unless 0 <= fee_numerator < fee_denominator (u64)
    """
    if not isinstance(asset_a, str) or not isinstance(asset_b, str):
        raise TypeError("asset ids must be strings")
    if asset_a >= asset_b:
        raise InvalidMint(f"Assets must be in canonical order: {asset_a} < {asset_b}")
    for name, v in (("fee_numerator", fee_numerator), ("fee_denominator", fee_denominator)):
        if not isinstance(v, int) or isinstance(v, bool) or not (0 <= v <= U64_MAX):
            raise InvalidFee(f"{name} must be a u64: {v!r}")
    if not (fee_denominator > 0 and fee_numerator < fee_denominator):
        raise InvalidFee(
            f"fee must satisfy 0 <= numerator < denominator: {fee_numerator}/{fee_denominator}"
        )
    require_u64("now", now)

    pool_id = compute_pool_id(program_id, asset_a, asset_b, pool_bump)
    pool_id_bytes = pool_id.encode("utf-8")
    return PoolState(
        pool_id=pool_id,
        asset_a=asset_a,
        asset_b=asset_b,
        vault_a=derive_address(program_id, (b"vault", pool_id_bytes, asset_a.encode("utf-8"))),
        vault_b=derive_address(program_id, (b"vault", pool_id_bytes, asset_b.encode("utf-8"))),
        lp_mint=derive_address(program_id, (b"lp_mint", pool_id_bytes)),
        fee_numerator=fee_numerator,
        fee_denominator=fee_denominator,
        pool_bump=pool_bump,
        auth_bump=auth_bump,
        block_timestamp_last=now,
        admin=creator,
        protocol_fee_recipient=creator,
    )


def add_liquidity(
    pool: PoolState,
    reserves: Reserves,
    amount_a: int,
    amount_b: int,
    now: int,
) -> AddLiquidityResult:
    """
    Deposit transition.

    First deposit (lp_supply == 0):
        lp = floor(sqrt(amount_a * amount_b)) - MINIMUM_LIQUIDITY
        (MINIMUM_LIQUIDITY is minted to the burn sink)

    Subsequent deposits:
        lp = min(floor(amount_a * lp_supply / reserve_a), floor(amount_b * lp_supply / reserve_b))

    The minimum means an off-ratio deposit is credited at the less favourable
    of the two ratios; the surplus accrues to existing LPs.

    Raises:
        InitialLiquidityTooLow: genesis deposit does not clear the lock
        MathOverflow: on any checked arithmetic failure
    """
    require_u64("amount_a", amount_a)
    require_u64("amount_b", amount_b)

    next_pool = update_twap(pool, reserves.reserve_a, reserves.reserve_b, now)

    if reserves.lp_supply == 0:
        initial = mint_liquidity_initial(amount_a=amount_a, amount_b=amount_b)
        lp_minted, lp_locked = initial.liquidity_minted, initial.liquidity_locked
        logger.debug("initial liquidity pool=%s lp=%d", pool.pool_id, lp_minted)
    else:
        lp_minted = mint_liquidity(
            reserve_a=reserves.reserve_a,
            reserve_b=reserves.reserve_b,
            lp_supply=reserves.lp_supply,
            amount_a=amount_a,
            amount_b=amount_b,
        )
        lp_locked = 0
        logger.debug("liquidity pool=%s lp=%d", pool.pool_id, lp_minted)

    return AddLiquidityResult(
        pool=next_pool,
        amount_a=amount_a,
        amount_b=amount_b,
        lp_minted=lp_minted,
        lp_locked=lp_locked,
    )


def remove_liquidity(
    pool: PoolState,
    reserves: Reserves,
    amount_lp: int,
    lp_balance: int,
    min_amount_a: int,
    min_amount_b: int,
    now: int,
) -> RemoveLiquidityResult:
    """
    Withdrawal transition.

    Order:
    1. balance check, 2. TWAP update with current reserves,
    3. protocol-fee mint (best effort), 4. redemption amounts against
    `lp_supply + protocol_mint` (the withdrawer's own LP is still counted, it is
    burned afterwards), 5. slippage, 6. `k_last` from the projected
    post-withdrawal reserves.

        amount_x = floor(amount_lp * reserve_x / (lp_supply + protocol_mint))

    Raises:
        InvalidLpMint: lp_balance < amount_lp
        SlippageExceeded: either output below its minimum
        MathOverflow: on any checked arithmetic failure
    """
    require_u64("amount_lp", amount_lp)
    require_u64("lp_balance", lp_balance)
    require_u64("min_amount_a", min_amount_a)
    require_u64("min_amount_b", min_amount_b)

    if lp_balance < amount_lp:
        raise InvalidLpMint(f"LP balance ({lp_balance}) < amount_lp ({amount_lp})")

    next_pool = update_twap(pool, reserves.reserve_a, reserves.reserve_b, now)

    protocol_mint = protocol_fee_mint_or_zero(
        reserves.reserve_a,
        reserves.reserve_b,
        pool.k_last,
        reserves.lp_supply,
        pool.protocol_fee_share,
    )
    if protocol_mint:
        logger.debug("protocol mint pool=%s amount=%d", pool.pool_id, protocol_mint)

    burn = burn_liquidity(
        amount_lp=amount_lp,
        reserve_a=reserves.reserve_a,
        reserve_b=reserves.reserve_b,
        lp_supply=reserves.lp_supply,
        protocol_mint=protocol_mint,
    )

    if burn.amount_a_out < min_amount_a:
        raise SlippageExceeded(f"amount_a ({burn.amount_a_out}) < min_amount_a ({min_amount_a})")
    if burn.amount_b_out < min_amount_b:
        raise SlippageExceeded(f"amount_b ({burn.amount_b_out}) < min_amount_b ({min_amount_b})")

    k_last = projected_k_last(
        reserve_a=reserves.reserve_a,
        reserve_b=reserves.reserve_b,
        amount_a_out=burn.amount_a_out,
        amount_b_out=burn.amount_b_out,
    )
    logger.debug("new k_last pool=%s k_last=%d", pool.pool_id, k_last)

    return RemoveLiquidityResult(
        pool=replace(next_pool, k_last=k_last),
        amount_lp=amount_lp,
        amount_a=burn.amount_a_out,
        amount_b=burn.amount_b_out,
        protocol_mint=protocol_mint,
    )
