# [TESTER] v1

from __future__ import annotations

from dataclasses import replace

import pytest

from cpamm.core.liquidity import create_pool
from cpamm.errors import MathOverflow
from cpamm.kernels.python.fixed_math import U64_MAX
from cpamm.state.pools import Direction, Reserves, compute_pool_id, derive_address

ASSET_A = "0x" + "11" * 32
ASSET_B = "0x" + "22" * 32


def test_derive_address_is_deterministic_and_bump_sensitive() -> None:
    a = derive_address("cpamm", (b"authority",))
    assert a == derive_address("cpamm", (b"authority",), 255)
    assert a != derive_address("cpamm", (b"authority",), 254)
    assert a != derive_address("other", (b"authority",))
    assert a.startswith("0x") and len(a) == 66


def test_derive_address_rejects_bad_bump() -> None:
    with pytest.raises(ValueError, match="bump"):
        derive_address("cpamm", (b"x",), 256)


def test_pool_id_requires_canonical_order() -> None:
    with pytest.raises(ValueError, match="canonical order"):
        compute_pool_id("cpamm", ASSET_B, ASSET_A)


class TestReserves:
    def test_oriented(self) -> None:
        r = Reserves(reserve_a=1, reserve_b=2, lp_supply=0)
        assert r.oriented(Direction.A_TO_B) == (1, 2)
        assert r.oriented(Direction.B_TO_A) == (2, 1)

    def test_u64_bounds(self) -> None:
        with pytest.raises(MathOverflow):
            Reserves(reserve_a=U64_MAX + 1, reserve_b=0, lp_supply=0)
        with pytest.raises(MathOverflow):
            Reserves(reserve_a=0, reserve_b=-1, lp_supply=0)


class TestPoolState:
    def _pool(self):
        return create_pool(ASSET_A, ASSET_B, 3, 1000, creator="0x" + "aa" * 32, now=0, program_id="cpamm")

    def test_share_cap_is_a_state_invariant(self) -> None:
        with pytest.raises(ValueError, match="protocol_fee_share"):
            replace(self._pool(), protocol_fee_share=501)

    def test_asset_order_is_a_state_invariant(self) -> None:
        pool = self._pool()
        with pytest.raises(ValueError, match="canonical order"):
            replace(pool, asset_a=ASSET_B, asset_b=ASSET_A)

    def test_fee_invariant(self) -> None:
        with pytest.raises(ValueError, match="numerator < denominator"):
            replace(self._pool(), fee_numerator=1000)

    def test_accumulators_are_u128(self) -> None:
        with pytest.raises(MathOverflow):
            replace(self._pool(), price_a_cumulative_last=1 << 128)

    def test_vault_for(self) -> None:
        pool = self._pool()
        assert pool.vault_for(ASSET_A) == pool.vault_a
        assert pool.vault_for(ASSET_B) == pool.vault_b
        with pytest.raises(ValueError, match="not in pool"):
            pool.vault_for("0x" + "33" * 32)

    def test_key(self) -> None:
        assert self._pool().key == (ASSET_A, ASSET_B)
