# [TESTER] v1

from __future__ import annotations

import pytest

from cpamm.core.governance import claim_admin, update_config
from cpamm.core.liquidity import create_pool
from cpamm.errors import InvalidFeeConfig, Unauthorized
from cpamm.state.pools import PoolState

ADMIN = "0x" + "aa" * 32
NEXT_ADMIN = "0x" + "bb" * 32
STRANGER = "0x" + "cc" * 32


def _pool() -> PoolState:
    return create_pool("0x" + "11" * 32, "0x" + "22" * 32, 3, 1000, creator=ADMIN, now=0, program_id="cpamm-test")


class TestUpdateConfig:
    def test_only_admin(self) -> None:
        with pytest.raises(Unauthorized):
            update_config(_pool(), STRANGER, new_share=10)

    def test_share_cap(self) -> None:
        with pytest.raises(InvalidFeeConfig):
            update_config(_pool(), ADMIN, new_share=501)
        assert update_config(_pool(), ADMIN, new_share=500).protocol_fee_share == 500

    def test_negative_share(self) -> None:
        with pytest.raises(InvalidFeeConfig):
            update_config(_pool(), ADMIN, new_share=-1)

    def test_recipient(self) -> None:
        pool = update_config(_pool(), ADMIN, new_recipient=STRANGER)
        assert pool.protocol_fee_recipient == STRANGER
        assert pool.admin == ADMIN

    def test_new_admin_only_opens_handover(self) -> None:
        pool = update_config(_pool(), ADMIN, new_admin=NEXT_ADMIN)
        assert pool.admin == ADMIN
        assert pool.pending_admin == NEXT_ADMIN

    def test_nothing_to_change(self) -> None:
        pool = _pool()
        assert update_config(pool, ADMIN) == pool

    def test_failed_update_applies_nothing(self) -> None:
        pool = _pool()
        with pytest.raises(InvalidFeeConfig):
            update_config(pool, ADMIN, new_admin=NEXT_ADMIN, new_share=501)
        assert pool.pending_admin is None


class TestClaimAdmin:
    def test_two_step_handover(self) -> None:
        pool = update_config(_pool(), ADMIN, new_admin=NEXT_ADMIN)
        pool = claim_admin(pool, NEXT_ADMIN)
        assert pool.admin == NEXT_ADMIN
        assert pool.pending_admin is None
        # The old admin has lost control.
        with pytest.raises(Unauthorized):
            update_config(pool, ADMIN, new_share=1)

    def test_wrong_claimant(self) -> None:
        pool = update_config(_pool(), ADMIN, new_admin=NEXT_ADMIN)
        with pytest.raises(Unauthorized):
            claim_admin(pool, STRANGER)

    def test_no_open_handover(self) -> None:
        with pytest.raises(Unauthorized):
            claim_admin(_pool(), ADMIN)

    def test_admin_can_retarget_pending(self) -> None:
        pool = update_config(_pool(), ADMIN, new_admin=NEXT_ADMIN)
        pool = update_config(pool, ADMIN, new_admin=STRANGER)
        with pytest.raises(Unauthorized):
            claim_admin(pool, NEXT_ADMIN)
        assert claim_admin(pool, STRANGER).admin == STRANGER
