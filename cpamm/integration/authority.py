"""
Signing capability for pool-owned funds.

Vaults and the LP mint are owned by an address derived from the program id and
a stored bump. The engine passes a `PoolAuthority` to the ledger as the
`authority` of every pool-side transfer or mint. The core never sees it.
"""

from __future__ import annotations

from dataclasses import dataclass

from ..errors import Unauthorized
from ..state.pools import AUTHORITY_SEED, CANONICAL_BUMP, Address, PoolState, derive_address


@dataclass(frozen=True)
class PoolAuthority:
    program_id: str
    bump: int
    address: Address

    def verify(self, pool: PoolState) -> None:
        """
        Check that this capability signs for `pool`.

        Raises:
            Unauthorized: bump or address do not re-derive
        """
        if self.bump != pool.auth_bump:
            raise Unauthorized(f"authority bump {self.bump} does not match pool ({pool.auth_bump})")
        expected = derive_address(self.program_id, (AUTHORITY_SEED,), self.bump)
        if self.address != expected:
            raise Unauthorized("authority address does not derive from program id and bump")


def derive_pool_authority(program_id: str, bump: int = CANONICAL_BUMP) -> PoolAuthority:
    return PoolAuthority(
        program_id=program_id,
        bump=bump,
        address=derive_address(program_id, (AUTHORITY_SEED,), bump),
    )
