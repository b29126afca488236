"""
Host integration: engine, signing authority and configuration.
"""

from .authority import PoolAuthority, derive_pool_authority
from .config import EngineConfig, engine_config_from_mapping, load_engine_config
from .engine import AmmEngine

__all__ = [
    "AmmEngine",
    "EngineConfig",
    "engine_config_from_mapping",
    "load_engine_config",
    "PoolAuthority",
    "derive_pool_authority",
]
