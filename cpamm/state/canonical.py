"""
Deterministic canonical encoding for persisted pool state.

Round-trip property (tested): `pool_state_from_dict(pool_state_to_dict(s)) == s`.
"""

from __future__ import annotations

import json
from dataclasses import fields
from typing import Any, Mapping

from .pools import PoolState


CANONICAL_ENCODING_VERSION = 1

# Persisted field set, in PoolState declaration order.
POOL_STATE_FIELDS: tuple[str, ...] = tuple(f.name for f in fields(PoolState))

_OPTIONAL_STR_FIELDS = frozenset({"pending_admin"})
_STR_FIELDS = frozenset(
    {
        "pool_id",
        "asset_a",
        "asset_b",
        "vault_a",
        "vault_b",
        "lp_mint",
        "admin",
        "protocol_fee_recipient",
    }
)


def _check_text(text: str, where: str) -> None:
    if any(0xD800 <= ord(ch) <= 0xDFFF for ch in text):
        raise TypeError(f"{where}: lone surrogate cannot be encoded as UTF-8")


def _check_encodable(value: Any, where: str = "$") -> None:
    """Walk `value`, allowing only None, int, str, list and str-keyed dict."""
    if value is None or isinstance(value, int):
        return
    if isinstance(value, float):
        raise TypeError(f"{where}: floats are not allowed, amounts and accumulators are exact ints")
    if isinstance(value, str):
        _check_text(value, where)
        return
    if isinstance(value, dict):
        for key, item in value.items():
            if not isinstance(key, str):
                raise TypeError(f"{where}: object keys must be str, got {type(key).__name__}")
            _check_text(key, where)
            _check_encodable(item, f"{where}.{key}")
        return
    if isinstance(value, (list, tuple)):
        for i, item in enumerate(value):
            _check_encodable(item, f"{where}[{i}]")
        return
    raise TypeError(f"{where}: {type(value).__name__} is not encodable")


def canonical_json_bytes(value: Any) -> bytes:
    """
    UTF-8 JSON with sorted keys and no whitespace.

    Equal values always encode to equal bytes, so encoded pools can be compared
    and hashed directly.
    """
    _check_encodable(value)
    return json.dumps(
        value,
        sort_keys=True,
        separators=(",", ":"),
        ensure_ascii=False,
        allow_nan=False,
    ).encode("utf-8")


def pool_state_to_dict(state: PoolState) -> dict[str, Any]:
    """Serialize a PoolState to a plain dict."""
    out: dict[str, Any] = {name: getattr(state, name) for name in POOL_STATE_FIELDS}
    out["version"] = CANONICAL_ENCODING_VERSION
    return out


def pool_state_from_dict(d: Mapping[str, Any]) -> PoolState:
    """Deserialize a dict to a PoolState. Raises KeyError on missing fields."""
    version = d.get("version", CANONICAL_ENCODING_VERSION)
    if version != CANONICAL_ENCODING_VERSION:
        raise ValueError(f"unsupported pool state encoding version: {version!r}")

    kwargs: dict[str, Any] = {}
    for name in POOL_STATE_FIELDS:
        val = d[name]
        if name in _OPTIONAL_STR_FIELDS:
            if val is not None and not isinstance(val, str):
                raise TypeError(f"pool field {name!r} must be str|None, got {type(val).__name__}")
        elif name in _STR_FIELDS:
            if not isinstance(val, str):
                raise TypeError(f"pool field {name!r} must be str, got {type(val).__name__}")
        elif not isinstance(val, int) or isinstance(val, bool):
            raise TypeError(f"pool field {name!r} must be int, got {type(val).__name__}")
        kwargs[name] = val
    return PoolState(**kwargs)


def encode_pool_state(state: PoolState) -> bytes:
    return canonical_json_bytes(pool_state_to_dict(state))


def decode_pool_state(data: bytes) -> PoolState:
    obj = json.loads(data.decode("utf-8"))
    if not isinstance(obj, dict):
        raise TypeError("pool state must decode to a JSON object")
    return pool_state_from_dict(obj)
