"""
State management for cpamm pools
"""

from .ledger import InMemoryLedger, Ledger, LedgerError
from .pools import Direction, PoolState, Reserves
from .store import DirectoryPoolStore, InMemoryPoolStore, PoolStore

__all__ = [
    "Direction",
    "PoolState",
    "Reserves",
    "Ledger",
    "LedgerError",
    "InMemoryLedger",
    "PoolStore",
    "InMemoryPoolStore",
    "DirectoryPoolStore",
]
