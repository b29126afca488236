"""
AMM execution engine.

This is the imperative shell around the pure core:
- serialises transitions per pool (one lock per (asset_a, asset_b)),
- reads reserves and LP supply fresh from the ledger,
- checks account bindings (vaults, user token accounts, LP accounts),
- runs the core transition,
- issues the ledger side effects and saves the new pool state inside one
  ledger transaction, so a failure anywhere leaves nothing applied.
"""

from __future__ import annotations

import logging
import threading
import time
from typing import Callable, Dict, Optional

from ..core import cpmm, governance, liquidity, oracle
from ..core.cpmm import SwapResult
from ..core.liquidity import AddLiquidityResult, RemoveLiquidityResult
from ..core.oracle import TwapObservation
from ..errors import InvalidLpMint, InvalidMint, InvalidUserToken, InvalidVault
from ..kernels.python.fixed_math import require_u64
from ..state.ledger import AccountId, Ledger
from ..state.pools import Address, AssetId, Direction, PoolState, Reserves, derive_address
from ..state.store import DirectoryPoolStore, InMemoryPoolStore, PairKey, PoolStore
from .authority import PoolAuthority, derive_pool_authority
from .config import EngineConfig


logger = logging.getLogger(__name__)

Clock = Callable[[], int]


def _wall_clock() -> int:
    return int(time.time())


class AmmEngine:
    """
    Host for a set of pools sharing one ledger and one store.

    Every public mutating method is an atomic transition: it either returns
    after committing ledger effects and pool state, or raises with neither.
    """

    def __init__(
        self,
        ledger: Ledger,
        store: Optional[PoolStore] = None,
        config: EngineConfig = EngineConfig(),
        clock: Clock = _wall_clock,
    ) -> None:
        self._ledger = ledger
        if store is None:
            store = DirectoryPoolStore(config.state_dir) if config.state_dir else InMemoryPoolStore()
        self._store = store
        self._config = config
        self._clock = clock
        self._authority = derive_pool_authority(config.program_id)
        self._locks: Dict[PairKey, threading.Lock] = {}
        self._locks_guard = threading.Lock()

    @property
    def authority(self) -> PoolAuthority:
        return self._authority

    # -- helpers -------------------------------------------------------------

    def _lock(self, key: PairKey) -> threading.Lock:
        with self._locks_guard:
            lock = self._locks.get(key)
            if lock is None:
                lock = threading.Lock()
                self._locks[key] = lock
            return lock

    def _now(self) -> int:
        return require_u64("now", self._clock())

    def _load(self, asset_a: AssetId, asset_b: AssetId) -> PoolState:
        pool = self._store.load((asset_a, asset_b))
        self._authority.verify(pool)
        return pool

    def burn_account(self, pool: PoolState) -> AccountId:
        """Account that holds the permanently locked MINIMUM_LIQUIDITY."""
        return derive_address(self._config.program_id, (b"lp_burn", pool.lp_mint.encode("utf-8")))

    def _check_vault(self, vault: AccountId, asset: AssetId) -> None:
        if not self._ledger.has_account(vault):
            raise InvalidVault(f"vault {vault} does not exist")
        if self._ledger.mint_of(vault) != asset or self._ledger.owner_of(vault) != self._authority.address:
            raise InvalidVault(f"vault {vault} is not bound to asset {asset}")

    def _check_user_token(self, account: AccountId, asset: AssetId) -> None:
        if self._ledger.mint_of(account) != asset:
            raise InvalidUserToken(f"account {account} does not hold asset {asset}")

    def _check_lp_account(self, pool: PoolState, account: AccountId) -> None:
        if self._ledger.mint_of(account) != pool.lp_mint:
            raise InvalidLpMint(f"account {account} does not hold LP of pool {pool.pool_id}")

    def _read_reserves(self, pool: PoolState) -> Reserves:
        self._check_vault(pool.vault_a, pool.asset_a)
        self._check_vault(pool.vault_b, pool.asset_b)
        return Reserves(
            reserve_a=self._ledger.balance_of(pool.vault_a),
            reserve_b=self._ledger.balance_of(pool.vault_b),
            lp_supply=self._ledger.supply_of(pool.lp_mint),
        )

    # -- reads ---------------------------------------------------------------

    def pool(self, asset_a: AssetId, asset_b: AssetId) -> PoolState:
        return self._load(asset_a, asset_b)

    def reserves(self, asset_a: AssetId, asset_b: AssetId) -> Reserves:
        return self._read_reserves(self._load(asset_a, asset_b))

    def quote(self, asset_a: AssetId, asset_b: AssetId, amount_in: int, direction: Direction) -> int:
        pool = self._load(asset_a, asset_b)
        return cpmm.quote_swap(pool, self._read_reserves(pool), amount_in, direction)

    def observe(self, asset_a: AssetId, asset_b: AssetId) -> TwapObservation:
        """Cumulative prices as of now, without writing the pool."""
        pool = self._load(asset_a, asset_b)
        return oracle.observe(pool, self._read_reserves(pool), self._now())

    # -- transitions ---------------------------------------------------------

    def create_pool(
        self,
        asset_a: AssetId,
        asset_b: AssetId,
        creator: Address,
        fee_numerator: Optional[int] = None,
        fee_denominator: Optional[int] = None,
    ) -> PoolState:
        """
        Create a pool for (asset_a, asset_b) with its vaults, LP mint and burn sink.

        Raises:
            InvalidMint: assets out of order or pair already has a pool
            InvalidFee: fee out of bounds
        """
        if fee_numerator is None:
            fee_numerator = self._config.default_fee_numerator
        if fee_denominator is None:
            fee_denominator = self._config.default_fee_denominator

        key = (asset_a, asset_b)
        with self._lock(key):
            if self._store.exists(key):
                raise InvalidMint(f"pool already exists for pair {key}")
            pool = liquidity.create_pool(
                asset_a,
                asset_b,
                fee_numerator,
                fee_denominator,
                creator=creator,
                now=self._now(),
                program_id=self._config.program_id,
                auth_bump=self._authority.bump,
            )
            self._authority.verify(pool)

            owner = self._authority.address
            with self._ledger.transaction():
                self._ledger.create_mint(pool.lp_mint, owner)
                self._ledger.create_account(pool.vault_a, asset_a, owner)
                self._ledger.create_account(pool.vault_b, asset_b, owner)
                self._ledger.create_account(self.burn_account(pool), pool.lp_mint, self._config.burn_owner)
                self._store.save(pool)

        logger.info(
            "pool created pool=%s pair=(%s, %s) fee=%d/%d",
            pool.pool_id,
            asset_a,
            asset_b,
            fee_numerator,
            fee_denominator,
        )
        return pool

    def swap(
        self,
        asset_a: AssetId,
        asset_b: AssetId,
        user: Address,
        user_token_a: AccountId,
        user_token_b: AccountId,
        amount_in: int,
        direction: Direction,
        min_amount_out: int,
    ) -> SwapResult:
        key = (asset_a, asset_b)
        with self._lock(key):
            pool = self._load(asset_a, asset_b)
            self._check_user_token(user_token_a, pool.asset_a)
            self._check_user_token(user_token_b, pool.asset_b)
            reserves = self._read_reserves(pool)

            result = cpmm.swap(pool, reserves, amount_in, direction, min_amount_out, self._now())

            if direction is Direction.A_TO_B:
                asset_in, asset_out, user_in, user_out = pool.asset_a, pool.asset_b, user_token_a, user_token_b
            else:
                asset_in, asset_out, user_in, user_out = pool.asset_b, pool.asset_a, user_token_b, user_token_a

            with self._ledger.transaction():
                self._ledger.transfer(user_in, pool.vault_for(asset_in), result.amount_in, user)
                self._ledger.transfer(
                    pool.vault_for(asset_out), user_out, result.amount_out, self._authority.address
                )
                self._store.save(result.pool)

        logger.info(
            "swap completed pool=%s %s: %d -> %d",
            pool.pool_id,
            direction.value,
            result.amount_in,
            result.amount_out,
        )
        return result

    def add_liquidity(
        self,
        asset_a: AssetId,
        asset_b: AssetId,
        user: Address,
        user_token_a: AccountId,
        user_token_b: AccountId,
        user_lp_account: AccountId,
        amount_a: int,
        amount_b: int,
    ) -> AddLiquidityResult:
        key = (asset_a, asset_b)
        with self._lock(key):
            pool = self._load(asset_a, asset_b)
            self._check_user_token(user_token_a, pool.asset_a)
            self._check_user_token(user_token_b, pool.asset_b)
            self._check_lp_account(pool, user_lp_account)
            reserves = self._read_reserves(pool)

            result = liquidity.add_liquidity(pool, reserves, amount_a, amount_b, self._now())

            signer = self._authority.address
            with self._ledger.transaction():
                if result.lp_locked:
                    self._ledger.mint_to(pool.lp_mint, self.burn_account(pool), result.lp_locked, signer)
                self._ledger.transfer(user_token_a, pool.vault_a, amount_a, user)
                self._ledger.transfer(user_token_b, pool.vault_b, amount_b, user)
                self._ledger.mint_to(pool.lp_mint, user_lp_account, result.lp_minted, signer)
                self._store.save(result.pool)

        logger.info(
            "liquidity added pool=%s (%d, %d) -> %d LP",
            pool.pool_id,
            amount_a,
            amount_b,
            result.lp_minted,
        )
        return result

    def remove_liquidity(
        self,
        asset_a: AssetId,
        asset_b: AssetId,
        user: Address,
        user_token_a: AccountId,
        user_token_b: AccountId,
        user_lp_account: AccountId,
        protocol_fee_account: AccountId,
        amount_lp: int,
        min_amount_a: int,
        min_amount_b: int,
    ) -> RemoveLiquidityResult:
        key = (asset_a, asset_b)
        with self._lock(key):
            pool = self._load(asset_a, asset_b)
            self._check_user_token(user_token_a, pool.asset_a)
            self._check_user_token(user_token_b, pool.asset_b)
            self._check_lp_account(pool, user_lp_account)
            self._check_lp_account(pool, protocol_fee_account)
            if self._ledger.owner_of(protocol_fee_account) != pool.protocol_fee_recipient:
                raise InvalidUserToken(
                    f"protocol fee account {protocol_fee_account} is not owned by the fee recipient"
                )
            reserves = self._read_reserves(pool)

            result = liquidity.remove_liquidity(
                pool,
                reserves,
                amount_lp,
                self._ledger.balance_of(user_lp_account),
                min_amount_a,
                min_amount_b,
                self._now(),
            )

            signer = self._authority.address
            with self._ledger.transaction():
                if result.protocol_mint:
                    self._ledger.mint_to(pool.lp_mint, protocol_fee_account, result.protocol_mint, signer)
                self._ledger.burn(user_lp_account, amount_lp, user)
                self._ledger.transfer(pool.vault_a, user_token_a, result.amount_a, signer)
                self._ledger.transfer(pool.vault_b, user_token_b, result.amount_b, signer)
                self._store.save(result.pool)

        logger.info(
            "liquidity removed pool=%s %d LP -> (%d, %d) protocol_mint=%d",
            pool.pool_id,
            amount_lp,
            result.amount_a,
            result.amount_b,
            result.protocol_mint,
        )
        return result

    def update_config(
        self,
        asset_a: AssetId,
        asset_b: AssetId,
        caller: Address,
        new_admin: Optional[Address] = None,
        new_recipient: Optional[Address] = None,
        new_share: Optional[int] = None,
    ) -> PoolState:
        key = (asset_a, asset_b)
        with self._lock(key):
            pool = self._load(asset_a, asset_b)
            updated = governance.update_config(pool, caller, new_admin, new_recipient, new_share)
            self._store.save(updated)

        logger.info("config updated pool=%s by %s", pool.pool_id, caller)
        return updated

    def claim_admin(self, asset_a: AssetId, asset_b: AssetId, caller: Address) -> PoolState:
        key = (asset_a, asset_b)
        with self._lock(key):
            pool = self._load(asset_a, asset_b)
            updated = governance.claim_admin(pool, caller)
            self._store.save(updated)

        logger.info("admin handed over pool=%s admin=%s", pool.pool_id, updated.admin)
        return updated
