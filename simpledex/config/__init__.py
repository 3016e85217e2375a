"""
SimpleDEX Configuration

Loads simpledex.toml. Environment variables override TOML values.
"""

from .loader import (
    DexConfig,
    LoggingSectionConfig,
    PoolSectionConfig,
    load_config,
)

__all__ = [
    "DexConfig",
    "LoggingSectionConfig",
    "PoolSectionConfig",
    "load_config",
]
