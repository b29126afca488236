# [TESTER] v1

from __future__ import annotations

import pytest

from cpamm.errors import InitialLiquidityTooLow, MathOverflow
from cpamm.kernels.python.fixed_math import U64_MAX
from cpamm.kernels.python.lp_math import (
    MINIMUM_LIQUIDITY,
    burn_liquidity,
    mint_liquidity,
    mint_liquidity_initial,
    projected_k_last,
    protocol_fee_mint,
)


class TestInitialMint:
    def test_lock_must_be_cleared(self) -> None:
        with pytest.raises(InitialLiquidityTooLow, match="MINIMUM_LIQUIDITY"):
            mint_liquidity_initial(amount_a=1000, amount_b=1000)

    def test_one_above_lock(self) -> None:
        res = mint_liquidity_initial(amount_a=1001, amount_b=1001)
        assert res.liquidity_minted == 1
        assert res.liquidity_locked == MINIMUM_LIQUIDITY

    def test_geometric_mean(self) -> None:
        res = mint_liquidity_initial(amount_a=10_000, amount_b=10_000)
        assert (res.liquidity_minted, res.liquidity_locked) == (9000, 1000)

    def test_unbalanced_genesis_uses_floor_sqrt(self) -> None:
        # sqrt(2_000_000 * 5) = 3162.27...
        res = mint_liquidity_initial(amount_a=2_000_000, amount_b=5)
        assert res.liquidity_minted == 3162 - MINIMUM_LIQUIDITY


class TestProportionalMint:
    def test_on_ratio(self) -> None:
        lp = mint_liquidity(reserve_a=10_000, reserve_b=10_000, lp_supply=10_000, amount_a=1000, amount_b=1000)
        assert lp == 1000

    def test_off_ratio_credits_the_smaller_side(self) -> None:
        lp = mint_liquidity(reserve_a=10_000, reserve_b=10_000, lp_supply=10_000, amount_a=1000, amount_b=500)
        assert lp == 500

    def test_empty_reserve_with_supply_is_an_error(self) -> None:
        with pytest.raises(MathOverflow):
            mint_liquidity(reserve_a=0, reserve_b=10, lp_supply=10, amount_a=1, amount_b=1)


class TestBurn:
    def test_pro_rata(self) -> None:
        res = burn_liquidity(amount_lp=1000, reserve_a=10_000, reserve_b=20_000, lp_supply=10_000)
        assert (res.amount_a_out, res.amount_b_out) == (1000, 2000)
        assert res.total_supply_for_ratio == 10_000

    def test_protocol_mint_dilutes_the_ratio(self) -> None:
        res = burn_liquidity(
            amount_lp=1000, reserve_a=10_000, reserve_b=20_000, lp_supply=10_000, protocol_mint=1000
        )
        assert res.total_supply_for_ratio == 11_000
        assert (res.amount_a_out, res.amount_b_out) == (909, 1818)

    def test_zero_supply(self) -> None:
        with pytest.raises(MathOverflow):
            burn_liquidity(amount_lp=0, reserve_a=1, reserve_b=1, lp_supply=0)


class TestProtocolFeeMint:
    def test_disabled_before_first_settlement(self) -> None:
        assert protocol_fee_mint(reserve_a=11_000, reserve_b=11_000, k_last=0, lp_supply=10_000, protocol_fee_share=500) == 0

    def test_disabled_at_zero_share(self) -> None:
        assert (
            protocol_fee_mint(
                reserve_a=11_000, reserve_b=11_000, k_last=100_000_000, lp_supply=10_000, protocol_fee_share=0
            )
            == 0
        )

    def test_no_growth_no_mint(self) -> None:
        assert (
            protocol_fee_mint(
                reserve_a=10_000, reserve_b=10_000, k_last=100_000_000, lp_supply=10_000, protocol_fee_share=500
            )
            == 0
        )

    def test_growth(self) -> None:
        # 10_000 * (11_000 - 10_000) * 500 / (11_000 * 9_500) = 47.8
        mint = protocol_fee_mint(
            reserve_a=11_000, reserve_b=11_000, k_last=100_000_000, lp_supply=10_000, protocol_fee_share=500
        )
        assert mint == 47

    def test_overflow_is_raised(self) -> None:
        with pytest.raises(MathOverflow):
            protocol_fee_mint(
                reserve_a=U64_MAX, reserve_b=U64_MAX, k_last=1, lp_supply=U64_MAX, protocol_fee_share=500
            )


def test_projected_k_last_uses_post_withdrawal_reserves() -> None:
    assert projected_k_last(reserve_a=10_000, reserve_b=20_000, amount_a_out=1000, amount_b_out=2000) == 9000 * 18_000
