"""
Pool governance: bounded config updates and two-step admin handover.
"""

from __future__ import annotations

from dataclasses import replace
from typing import Any, Dict, Optional

from ..errors import InvalidFeeConfig, Unauthorized
from ..state.pools import MAX_PROTOCOL_FEE_SHARE, Address, PoolState


def update_config(
    pool: PoolState,
    caller: Address,
    new_admin: Optional[Address] = None,
    new_recipient: Optional[Address] = None,
    new_share: Optional[int] = None,
) -> PoolState:
    """
    Apply the given fields; `None` leaves a field unchanged.

    `new_admin` only opens a handover (sets `pending_admin`); the new admin
    must call `claim_admin` to take over.

    Raises:
        Unauthorized: caller is not the admin
        InvalidFeeConfig: new_share > 500 bps
    """
    if caller != pool.admin:
        raise Unauthorized(f"caller {caller} is not the pool admin")

    updates: Dict[str, Any] = {}
    if new_share is not None:
        if not isinstance(new_share, int) or isinstance(new_share, bool):
            raise TypeError("new_share must be an int")
        if not (0 <= new_share <= MAX_PROTOCOL_FEE_SHARE):
            raise InvalidFeeConfig(
                f"protocol_fee_share must be in [0, {MAX_PROTOCOL_FEE_SHARE}]: {new_share}"
            )
        updates["protocol_fee_share"] = new_share
    if new_admin is not None:
        updates["pending_admin"] = new_admin
    if new_recipient is not None:
        updates["protocol_fee_recipient"] = new_recipient

    return replace(pool, **updates) if updates else pool


def claim_admin(pool: PoolState, caller: Address) -> PoolState:
    """
    Complete a handover opened by `update_config(new_admin=...)`.

    Raises:
        Unauthorized: no handover is open or caller is not the pending admin
    """
    if pool.pending_admin is None or caller != pool.pending_admin:
        raise Unauthorized(f"caller {caller} is not the pending admin")
    return replace(pool, admin=caller, pending_admin=None)
