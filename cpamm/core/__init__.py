"""
Core AMM transitions (pure: PoolState in, PoolState out)
"""

from .cpmm import SwapResult, quote_swap, swap
from .fees import calculate_protocol_fee_mint, protocol_fee_mint_or_zero
from .governance import claim_admin, update_config
from .liquidity import (
    AddLiquidityResult,
    RemoveLiquidityResult,
    add_liquidity,
    create_pool,
    remove_liquidity,
)
from .oracle import TwapObservation, average_price, observe, q64_to_fraction, update_twap

__all__ = [
    "quote_swap",
    "swap",
    "SwapResult",
    "create_pool",
    "add_liquidity",
    "remove_liquidity",
    "AddLiquidityResult",
    "RemoveLiquidityResult",
    "calculate_protocol_fee_mint",
    "protocol_fee_mint_or_zero",
    "update_config",
    "claim_admin",
    "TwapObservation",
    "update_twap",
    "observe",
    "average_price",
    "q64_to_fraction",
]
