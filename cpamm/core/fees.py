"""
Protocol-fee accrual.

On liquidity removal the protocol is minted LP worth `protocol_fee_share` bps
of the growth in sqrt(k) since the last settlement. Accrual is best-effort
revenue, not a correctness requirement: `protocol_fee_mint_or_zero` maps any
arithmetic failure to 0 so the withdrawal itself still goes through.
"""

from __future__ import annotations

import logging

from ..errors import MathOverflow
from ..kernels.python.lp_math import protocol_fee_mint


logger = logging.getLogger(__name__)


def calculate_protocol_fee_mint(
    reserve_a: int,
    reserve_b: int,
    k_last: int,
    lp_supply: int,
    protocol_fee_share: int,
) -> int:
    """
    LP to mint to the protocol recipient.

    Raises:
        MathOverflow: on any checked arithmetic failure
    """
    return protocol_fee_mint(
        reserve_a=reserve_a,
        reserve_b=reserve_b,
        k_last=k_last,
        lp_supply=lp_supply,
        protocol_fee_share=protocol_fee_share,
    )


def protocol_fee_mint_or_zero(
    reserve_a: int,
    reserve_b: int,
    k_last: int,
    lp_supply: int,
    protocol_fee_share: int,
) -> int:
    """`calculate_protocol_fee_mint`, with arithmetic failure mapped to 0 (logged)."""
    try:
        return calculate_protocol_fee_mint(reserve_a, reserve_b, k_last, lp_supply, protocol_fee_share)
    except MathOverflow as exc:
        logger.warning(
            "protocol fee accrual dropped (reserves=(%d, %d) k_last=%d lp_supply=%d share=%d): %s",
            reserve_a,
            reserve_b,
            k_last,
            lp_supply,
            protocol_fee_share,
            exc,
        )
        return 0
