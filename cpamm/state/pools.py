"""
Pool state for constant-product pools.
"""

from __future__ import annotations

import hashlib
from dataclasses import dataclass
from enum import Enum
from typing import Optional, Sequence

from ..kernels.python.fixed_math import require_u64, require_u128


# Type aliases
AssetId = str  # mint identifier, hex string (0x...)
Address = str  # account owner / identity, hex string (0x...)

# Owner of the minimum-liquidity sink; no key controls it.
NULL_ADDRESS = "0x" + "00" * 32

MAX_PROTOCOL_FEE_SHARE = 500  # bps

CANONICAL_BUMP = 255
POOL_SEED = b"pool"
AUTHORITY_SEED = b"authority"


class Direction(Enum):
    """Swap direction. The two user token slots are always (A, B)."""

    A_TO_B = "A_TO_B"
    B_TO_A = "B_TO_A"


def derive_address(program_id: str, seeds: Sequence[bytes], bump: int = CANONICAL_BUMP) -> Address:
    """
    Deterministically derive a program-owned address from seeds and a bump.

        address = H(seed_0 || ... || seed_n || bump || program_id || "ProgramDerivedAddress")
    """
    if not isinstance(program_id, str) or not program_id:
        raise ValueError("program_id must be a non-empty string")
    if not (0 <= bump <= 255):
        raise ValueError(f"bump must be in [0, 255]: {bump}")
    h = hashlib.sha256()
    for seed in seeds:
        h.update(seed)
    h.update(bytes([bump]))
    h.update(program_id.encode("utf-8"))
    h.update(b"ProgramDerivedAddress")
    return "0x" + h.hexdigest()


def compute_pool_id(program_id: str, asset_a: AssetId, asset_b: AssetId, bump: int = CANONICAL_BUMP) -> Address:
    """Pool address for the canonical pair (asset_a, asset_b)."""
    if asset_a >= asset_b:
        raise ValueError(f"Assets must be in canonical order: {asset_a} < {asset_b}")
    return derive_address(
        program_id,
        (POOL_SEED, asset_a.encode("utf-8"), asset_b.encode("utf-8")),
        bump,
    )


@dataclass(frozen=True)
class Reserves:
    """
    Ledger-owned balances read at the start of a transition.

    Never persisted with the pool and never cached across transitions.
    """

    reserve_a: int
    reserve_b: int
    lp_supply: int

    def __post_init__(self) -> None:
        require_u64("reserve_a", self.reserve_a)
        require_u64("reserve_b", self.reserve_b)
        require_u64("lp_supply", self.lp_supply)

    def oriented(self, direction: Direction) -> tuple[int, int]:
        """(reserve_in, reserve_out) for a swap in `direction`."""
        if direction is Direction.A_TO_B:
            return self.reserve_a, self.reserve_b
        return self.reserve_b, self.reserve_a


@dataclass(frozen=True)
class PoolState:
    """
    Persisted state of one pool.

    Attributes:
        pool_id: Pool address derived from (asset_a, asset_b)
        asset_a: First asset (must be < asset_b)
        asset_b: Second asset
        vault_a: Ledger account holding reserve A
        vault_b: Ledger account holding reserve B
        lp_mint: LP token mint
        fee_numerator: Swap fee numerator
        fee_denominator: Swap fee denominator (fee = numerator / denominator)
        pool_bump: Bump used to derive `pool_id`
        auth_bump: Bump used to derive the pool signing authority
        block_timestamp_last: Timestamp of the last TWAP update
        price_a_cumulative_last: Q64.64 cumulative price of A (in B)
        price_b_cumulative_last: Q64.64 cumulative price of B (in A)
        admin: Governance identity
        pending_admin: Identity that may claim admin, if a handover is open
        protocol_fee_recipient: Owner of protocol-fee LP
        protocol_fee_share: Share of invariant growth minted to the protocol (bps, <= 500)
        k_last: reserve_a * reserve_b after the last withdrawal (0 before the first)
    """

    pool_id: Address
    asset_a: AssetId
    asset_b: AssetId
    vault_a: Address
    vault_b: Address
    lp_mint: AssetId
    fee_numerator: int
    fee_denominator: int
    pool_bump: int
    auth_bump: int
    block_timestamp_last: int
    admin: Address
    protocol_fee_recipient: Address
    price_a_cumulative_last: int = 0
    price_b_cumulative_last: int = 0
    pending_admin: Optional[Address] = None
    protocol_fee_share: int = 0
    k_last: int = 0

    def __post_init__(self) -> None:
        """Validate pool state invariants."""
        if self.asset_a >= self.asset_b:
            raise ValueError(
                f"Assets must be in canonical order: {self.asset_a} < {self.asset_b}"
            )

        require_u64("fee_numerator", self.fee_numerator)
        require_u64("fee_denominator", self.fee_denominator)
        if not (self.fee_denominator > 0 and self.fee_numerator < self.fee_denominator):
            raise ValueError(
                f"fee must satisfy 0 <= numerator < denominator: {self.fee_numerator}/{self.fee_denominator}"
            )

        for name in ("pool_bump", "auth_bump"):
            bump = getattr(self, name)
            if not isinstance(bump, int) or not (0 <= bump <= 255):
                raise ValueError(f"{name} must be in [0, 255]: {bump}")

        require_u64("block_timestamp_last", self.block_timestamp_last)
        require_u128("price_a_cumulative_last", self.price_a_cumulative_last)
        require_u128("price_b_cumulative_last", self.price_b_cumulative_last)
        require_u128("k_last", self.k_last)

        require_u64("protocol_fee_share", self.protocol_fee_share)
        if self.protocol_fee_share > MAX_PROTOCOL_FEE_SHARE:
            raise ValueError(
                f"protocol_fee_share must be <= {MAX_PROTOCOL_FEE_SHARE}: {self.protocol_fee_share}"
            )

    @property
    def key(self) -> tuple[AssetId, AssetId]:
        return self.asset_a, self.asset_b

    def vault_for(self, asset: AssetId) -> Address:
        """
        Get the vault holding a specific asset.

        Raises:
            ValueError: If asset is not in this pool
        """
        if asset == self.asset_a:
            return self.vault_a
        if asset == self.asset_b:
            return self.vault_b
        raise ValueError(f"Asset {asset} not in pool {self.pool_id}")

    def __repr__(self) -> str:
        return (
            f"PoolState(pool_id={self.pool_id[:16]}..., "
            f"assets=({self.asset_a[:8]}..., {self.asset_b[:8]}...), "
            f"fee={self.fee_numerator}/{self.fee_denominator}, "
            f"k_last={self.k_last}, ts={self.block_timestamp_last})"
        )
