"""
Token ledger: the custody layer the AMM core delegates balance changes to.

`Ledger` is the interface the engine depends on. `InMemoryLedger` is a
deterministic implementation with SPL-style token accounts:

    account_id -> (mint, owner, amount)
    mint_id    -> (mint_authority, supply)

Balances and supplies are u64. Every operation either applies completely or
raises `LedgerError` without changing anything; `transaction()` extends that
guarantee to a block of operations.
"""

from __future__ import annotations

import threading
from contextlib import contextmanager
from dataclasses import dataclass, replace
from typing import Dict, Iterator, List, Protocol, Tuple

from ..kernels.python.fixed_math import U64_MAX
from .pools import Address, AssetId


AccountId = str


class LedgerError(ValueError):
    """Raised when a ledger operation cannot be applied."""


@dataclass(frozen=True)
class TokenAccount:
    mint: AssetId
    owner: Address
    amount: int = 0


@dataclass(frozen=True)
class Mint:
    authority: Address
    supply: int = 0


class Ledger(Protocol):
    """
    Custody interface used by the engine.

    The engine runs different pools on different threads against one ledger,
    so `transaction()` blocks must be isolated from each other: a rollback
    restores only the writes made inside its own block.
    """

    def transfer(self, source: AccountId, destination: AccountId, amount: int, authority: Address) -> None: ...

    def mint_to(self, mint: AssetId, destination: AccountId, amount: int, authority: Address) -> None: ...

    def burn(self, source: AccountId, amount: int, authority: Address) -> None: ...

    def balance_of(self, account: AccountId) -> int: ...

    def supply_of(self, mint: AssetId) -> int: ...

    def mint_of(self, account: AccountId) -> AssetId: ...

    def owner_of(self, account: AccountId) -> Address: ...

    def has_account(self, account: AccountId) -> bool: ...

    def create_mint(self, mint: AssetId, authority: Address) -> None: ...

    def create_account(self, account: AccountId, mint: AssetId, owner: Address) -> None: ...

    def transaction(self) -> Iterator[None]: ...


def _require_amount(amount: int) -> None:
    if not isinstance(amount, int) or isinstance(amount, bool):
        raise TypeError("amount must be an int")
    if not (0 <= amount <= U64_MAX):
        raise LedgerError(f"amount must fit in u64: {amount}")


class InMemoryLedger:
    """
    Deterministic in-memory ledger.

    One re-entrant lock guards all state. A `transaction()` block holds it from
    snapshot to commit or rollback, so transactions from different pools never
    interleave and a rollback can only discard its own writes.

    Note: this class stores state in plain dicts. Callers that hash or export
    ledger contents must sort keys explicitly.
    """

    def __init__(self) -> None:
        self._accounts: Dict[AccountId, TokenAccount] = {}
        self._mints: Dict[AssetId, Mint] = {}
        self._snapshots: List[Tuple[Dict[AccountId, TokenAccount], Dict[AssetId, Mint]]] = []
        self._lock = threading.RLock()

    # -- setup ---------------------------------------------------------------

    def create_mint(self, mint: AssetId, authority: Address) -> None:
        with self._lock:
            if mint in self._mints:
                raise LedgerError(f"mint already exists: {mint}")
            self._mints[mint] = Mint(authority=authority)

    def create_account(self, account: AccountId, mint: AssetId, owner: Address) -> None:
        with self._lock:
            if account in self._accounts:
                raise LedgerError(f"account already exists: {account}")
            if mint not in self._mints:
                raise LedgerError(f"unknown mint: {mint}")
            self._accounts[account] = TokenAccount(mint=mint, owner=owner)

    # -- reads ---------------------------------------------------------------

    def _account(self, account: AccountId) -> TokenAccount:
        try:
            return self._accounts[account]
        except KeyError:
            raise LedgerError(f"unknown account: {account}") from None

    def _mint(self, mint: AssetId) -> Mint:
        try:
            return self._mints[mint]
        except KeyError:
            raise LedgerError(f"unknown mint: {mint}") from None

    def has_account(self, account: AccountId) -> bool:
        return account in self._accounts

    def balance_of(self, account: AccountId) -> int:
        return self._account(account).amount

    def supply_of(self, mint: AssetId) -> int:
        return self._mint(mint).supply

    def mint_of(self, account: AccountId) -> AssetId:
        return self._account(account).mint

    def owner_of(self, account: AccountId) -> Address:
        return self._account(account).owner

    # -- writes --------------------------------------------------------------

    def transfer(self, source: AccountId, destination: AccountId, amount: int, authority: Address) -> None:
        """Move `amount` between two accounts of the same mint; `authority` must own `source`."""
        _require_amount(amount)
        with self._lock:
            src = self._account(source)
            dst = self._account(destination)
            if src.owner != authority:
                raise LedgerError(f"authority {authority} does not own account {source}")
            if src.mint != dst.mint:
                raise LedgerError(f"mint mismatch: {src.mint} -> {dst.mint}")
            if amount == 0 or source == destination:
                return
            if src.amount < amount:
                raise LedgerError(f"Insufficient balance: {src.amount} < {amount}")
            if dst.amount + amount > U64_MAX:
                raise LedgerError("destination balance overflow")
            self._accounts[source] = replace(src, amount=src.amount - amount)
            self._accounts[destination] = replace(dst, amount=dst.amount + amount)

    def mint_to(self, mint: AssetId, destination: AccountId, amount: int, authority: Address) -> None:
        """Create `amount` new tokens of `mint` in `destination`."""
        _require_amount(amount)
        with self._lock:
            m = self._mint(mint)
            dst = self._account(destination)
            if m.authority != authority:
                raise LedgerError(f"authority {authority} cannot mint {mint}")
            if dst.mint != mint:
                raise LedgerError(f"mint mismatch: {mint} -> account of {dst.mint}")
            if amount == 0:
                return
            if m.supply + amount > U64_MAX:
                raise LedgerError("supply overflow")
            self._mints[mint] = replace(m, supply=m.supply + amount)
            self._accounts[destination] = replace(dst, amount=dst.amount + amount)

    def burn(self, source: AccountId, amount: int, authority: Address) -> None:
        """Destroy `amount` tokens held by `source`; `authority` must own it."""
        _require_amount(amount)
        with self._lock:
            src = self._account(source)
            if src.owner != authority:
                raise LedgerError(f"authority {authority} does not own account {source}")
            if amount == 0:
                return
            if src.amount < amount:
                raise LedgerError(f"Insufficient balance: {src.amount} < {amount}")
            m = self._mint(src.mint)
            self._mints[src.mint] = replace(m, supply=m.supply - amount)
            self._accounts[source] = replace(src, amount=src.amount - amount)

    # -- atomicity -----------------------------------------------------------

    @contextmanager
    def transaction(self) -> Iterator[None]:
        """Apply every operation in the block, or none of them."""
        with self._lock:
            self._snapshots.append((dict(self._accounts), dict(self._mints)))
            try:
                yield
            except BaseException:
                self._accounts, self._mints = self._snapshots.pop()
                raise
            else:
                self._snapshots.pop()

    def verify_supply(self) -> bool:
        """Verify every mint's supply equals the sum of its account balances."""
        with self._lock:
            totals: Dict[AssetId, int] = {mint: 0 for mint in self._mints}
            for acc in self._accounts.values():
                totals[acc.mint] += acc.amount
            return all(totals[mint] == m.supply for mint, m in self._mints.items())

    def __repr__(self) -> str:
        return f"InMemoryLedger({len(self._accounts)} accounts, {len(self._mints)} mints)"
