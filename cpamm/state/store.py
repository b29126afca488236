"""
Pool persistence keyed by the canonical pair (asset_a, asset_b).

Stores hold encoded bytes, not live objects: every `load` returns a fresh
`PoolState`, so a transition can never observe another transition's
uncommitted state through aliasing.
"""

from __future__ import annotations

import hashlib
import os
from pathlib import Path
from typing import Dict, List, Protocol, Tuple

from .canonical import decode_pool_state, encode_pool_state
from .pools import AssetId, PoolState


PairKey = Tuple[AssetId, AssetId]


class PoolStore(Protocol):
    def load(self, key: PairKey) -> PoolState: ...

    def save(self, state: PoolState) -> None: ...

    def exists(self, key: PairKey) -> bool: ...

    def keys(self) -> List[PairKey]: ...


class InMemoryPoolStore:
    def __init__(self) -> None:
        self._data: Dict[PairKey, bytes] = {}

    def load(self, key: PairKey) -> PoolState:
        try:
            return decode_pool_state(self._data[key])
        except KeyError:
            raise KeyError(f"no pool for pair {key}") from None

    def save(self, state: PoolState) -> None:
        self._data[state.key] = encode_pool_state(state)

    def exists(self, key: PairKey) -> bool:
        return key in self._data

    def keys(self) -> List[PairKey]:
        return sorted(self._data)

    def __repr__(self) -> str:
        return f"InMemoryPoolStore({len(self._data)} pools)"


class DirectoryPoolStore:
    """
    One canonical JSON file per pool under `root`.

    File names are a hash of the pair so arbitrary asset ids are safe on disk;
    the pair itself is recovered from the file content.
    """

    def __init__(self, root: str | os.PathLike[str]) -> None:
        self._root = Path(root)
        self._root.mkdir(parents=True, exist_ok=True)

    def _path(self, key: PairKey) -> Path:
        digest = hashlib.sha256("\x00".join(key).encode("utf-8")).hexdigest()
        return self._root / f"pool-{digest}.json"

    def load(self, key: PairKey) -> PoolState:
        path = self._path(key)
        if not path.is_file():
            raise KeyError(f"no pool for pair {key}")
        state = decode_pool_state(path.read_bytes())
        if state.key != key:
            raise ValueError(f"pool file {path.name} holds pair {state.key}, expected {key}")
        return state

    def save(self, state: PoolState) -> None:
        path = self._path(state.key)
        tmp = path.with_suffix(".json.tmp")
        tmp.write_bytes(encode_pool_state(state))
        os.replace(tmp, path)

    def exists(self, key: PairKey) -> bool:
        return self._path(key).is_file()

    def keys(self) -> List[PairKey]:
        out = [decode_pool_state(p.read_bytes()).key for p in self._root.glob("pool-*.json")]
        return sorted(out)

    def __repr__(self) -> str:
        return f"DirectoryPoolStore({str(self._root)!r})"
