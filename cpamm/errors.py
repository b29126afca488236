"""Exception types for the AMM core.

Every error aborts the whole transition. ``code`` is a stable identifier that
hosts can surface to callers without string-matching messages.
"""

from __future__ import annotations


class AmmError(Exception):
    """Base class for all AMM errors."""

    code: str = "AmmError"

    def __init__(self, message: str | None = None) -> None:
        super().__init__(message or self.code)


class InvalidMint(AmmError):
    """Asset ordering violated (asset_a must be < asset_b) or pair already exists."""

    code = "InvalidMint"


class InvalidFee(AmmError):
    """Swap fee is out of bounds (need 0 <= numerator < denominator)."""

    code = "InvalidFee"


class InvalidFeeConfig(AmmError):
    """Protocol fee share exceeds the 500 bps cap."""

    code = "InvalidFeeConfig"


class InvalidVault(AmmError):
    """A pool vault account does not match the pool binding."""

    code = "InvalidVault"


class InvalidLpMint(AmmError):
    """LP account/mint mismatch, or LP balance below the requested burn."""

    code = "InvalidLpMint"


class InvalidUserToken(AmmError):
    """A user token account is not bound to the expected asset or owner."""

    code = "InvalidUserToken"


class MathOverflow(AmmError):
    """A checked fixed-width arithmetic step overflowed, underflowed or divided by zero."""

    code = "MathOverflow"


class SlippageExceeded(AmmError):
    """A computed output fell below the caller's minimum."""

    code = "SlippageExceeded"


class InitialLiquidityTooLow(AmmError):
    """Genesis deposit does not clear MINIMUM_LIQUIDITY."""

    code = "InitialLiquidityTooLow"


class Unauthorized(AmmError):
    """Governance action by a caller that is not the admin / pending admin."""

    code = "Unauthorized"
