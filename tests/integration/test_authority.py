# [TESTER] v1

from __future__ import annotations

from dataclasses import replace

import pytest

from cpamm.core.liquidity import create_pool
from cpamm.errors import Unauthorized
from cpamm.integration.authority import derive_pool_authority


def _pool(auth_bump: int = 255):
    return create_pool(
        "0x" + "11" * 32,
        "0x" + "22" * 32,
        3,
        1000,
        creator="0x" + "aa" * 32,
        now=0,
        program_id="cpamm",
        auth_bump=auth_bump,
    )


def test_derivation_is_deterministic() -> None:
    assert derive_pool_authority("cpamm") == derive_pool_authority("cpamm", 255)
    assert derive_pool_authority("cpamm").address != derive_pool_authority("other").address


def test_verify_accepts_matching_bump() -> None:
    derive_pool_authority("cpamm").verify(_pool())


def test_verify_rejects_other_bump() -> None:
    with pytest.raises(Unauthorized, match="bump"):
        derive_pool_authority("cpamm").verify(_pool(auth_bump=254))


def test_verify_rejects_forged_address() -> None:
    forged = replace(derive_pool_authority("cpamm"), address="0x" + "ee" * 32)
    with pytest.raises(Unauthorized, match="does not derive"):
        forged.verify(_pool())
