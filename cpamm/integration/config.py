"""
Engine configuration.

`EngineConfig` is a frozen dataclass; `load_engine_config` reads it from a
YAML mapping. Unknown keys and wrong types are rejected (fail-closed).

Example:

    program_id: cpamm-mainnet
    default_fee_numerator: 3
    default_fee_denominator: 1000
    state_dir: /var/lib/cpamm/pools
"""

from __future__ import annotations

import os
from dataclasses import dataclass, fields
from pathlib import Path
from typing import Any, Mapping, Optional

import yaml

from ..state.pools import NULL_ADDRESS


@dataclass(frozen=True)
class EngineConfig:
    # Namespace for pool / vault / authority address derivation.
    program_id: str = "cpamm"

    # Swap fee applied by `create_pool` when the caller gives none (0.3%).
    default_fee_numerator: int = 3
    default_fee_denominator: int = 1000

    # Owner of the minimum-liquidity sink account.
    burn_owner: str = NULL_ADDRESS

    # If set, pools are persisted as canonical JSON files in this directory.
    state_dir: Optional[str] = None

    def __post_init__(self) -> None:
        if not isinstance(self.program_id, str) or not self.program_id.strip():
            raise ValueError("program_id must be a non-empty string")
        for name in ("default_fee_numerator", "default_fee_denominator"):
            v = getattr(self, name)
            if not isinstance(v, int) or isinstance(v, bool) or v < 0:
                raise ValueError(f"{name} must be a non-negative int")
        if not (0 <= self.default_fee_numerator < self.default_fee_denominator):
            raise ValueError("default fee must satisfy 0 <= numerator < denominator")
        if not isinstance(self.burn_owner, str) or not self.burn_owner:
            raise ValueError("burn_owner must be a non-empty string")
        if self.state_dir is not None and (not isinstance(self.state_dir, str) or not self.state_dir):
            raise ValueError("state_dir must be a non-empty string or null")


_FIELD_NAMES = frozenset(f.name for f in fields(EngineConfig))


def engine_config_from_mapping(obj: Mapping[str, Any]) -> EngineConfig:
    """Build an EngineConfig from a parsed mapping."""
    if not isinstance(obj, Mapping):
        raise TypeError("engine config must be a mapping")
    unknown = sorted(set(obj) - _FIELD_NAMES)
    if unknown:
        raise ValueError(f"unknown engine config keys: {', '.join(map(str, unknown))}")
    return EngineConfig(**dict(obj))


def load_engine_config(path: str | os.PathLike[str]) -> EngineConfig:
    """Read an EngineConfig from a YAML file. An empty file yields the defaults."""
    obj = yaml.safe_load(Path(path).read_text(encoding="utf-8"))
    if obj is None:
        return EngineConfig()
    return engine_config_from_mapping(obj)
