"""
SimpleDEX TOML Configuration Loader

Loads simpledex.toml with environment variable overrides.

Environment variable mapping:
    [pool] token_a           → SIMPLEDEX_TOKEN_A
    [pool] token_b           → SIMPLEDEX_TOKEN_B
    [pool] fee_collector     → SIMPLEDEX_FEE_COLLECTOR
    [pool] share_name        → SIMPLEDEX_SHARE_NAME
    [pool] share_symbol      → SIMPLEDEX_SHARE_SYMBOL
    [pool] imbalance_policy  → SIMPLEDEX_IMBALANCE_POLICY
    [logging] level          → SIMPLEDEX_LOG_LEVEL
    [logging] file_output    → SIMPLEDEX_LOG_FILE_OUTPUT
"""

from __future__ import annotations

import logging
import os
from dataclasses import dataclass, field
from pathlib import Path
from typing import Any, Dict, Optional

try:
    import tomllib as tomli  # Python 3.11+
except ImportError:
    import tomli  # type: ignore[no-redef]

from .. import constants
from ..exceptions import ConfigurationError
from ..exchange.liquidity import ImbalancePolicy

logger = logging.getLogger(__name__)

LOG_LEVELS = ("DEBUG", "INFO", "WARNING", "ERROR", "CRITICAL")


def _env_bool(value: str) -> bool:
    return value.strip().casefold() in {"1", "true", "yes", "on"}


@dataclass
class PoolSectionConfig:
    """[pool] section."""
    token_a: str = ""
    token_b: str = ""
    fee_collector: str = ""
    share_name: str = str(constants.SIMPLEDEX_SHARE_NAME)
    share_symbol: str = str(constants.SIMPLEDEX_SHARE_SYMBOL)
    imbalance_policy: str = str(constants.SIMPLEDEX_IMBALANCE_POLICY)

    @classmethod
    def from_dict(cls, data: Dict[str, Any]) -> "PoolSectionConfig":
        defaults = cls()
        return cls(
            token_a=data.get("token_a", defaults.token_a),
            token_b=data.get("token_b", defaults.token_b),
            fee_collector=data.get("fee_collector", defaults.fee_collector),
            share_name=data.get("share_name", defaults.share_name),
            share_symbol=data.get("share_symbol", defaults.share_symbol),
            imbalance_policy=data.get("imbalance_policy", defaults.imbalance_policy),
        )

    def apply_env(self) -> None:
        """Override from environment variables."""
        if v := os.environ.get("SIMPLEDEX_TOKEN_A"):
            self.token_a = v
        if v := os.environ.get("SIMPLEDEX_TOKEN_B"):
            self.token_b = v
        if v := os.environ.get("SIMPLEDEX_FEE_COLLECTOR"):
            self.fee_collector = v
        if v := os.environ.get("SIMPLEDEX_SHARE_NAME"):
            self.share_name = v
        if v := os.environ.get("SIMPLEDEX_SHARE_SYMBOL"):
            self.share_symbol = v
        if v := os.environ.get("SIMPLEDEX_IMBALANCE_POLICY"):
            self.imbalance_policy = v

    @property
    def policy(self) -> ImbalancePolicy:
        return ImbalancePolicy(str(self.imbalance_policy).lower())


@dataclass
class LoggingSectionConfig:
    """[logging] section."""
    level: str = str(constants.LOG_LEVEL)
    console_output: bool = True
    file_output: bool = bool(constants.LOG_FILE_OUTPUT)
    file: str = ""

    @classmethod
    def from_dict(cls, data: Dict[str, Any]) -> "LoggingSectionConfig":
        defaults = cls()
        return cls(
            level=data.get("level", defaults.level),
            console_output=data.get("console_output", defaults.console_output),
            file_output=data.get("file_output", defaults.file_output),
            file=data.get("file", defaults.file),
        )

    def apply_env(self) -> None:
        if v := os.environ.get("SIMPLEDEX_LOG_LEVEL"):
            self.level = v
        if v := os.environ.get("SIMPLEDEX_LOG_FILE_OUTPUT"):
            self.file_output = _env_bool(v)


@dataclass
class DexConfig:
    """
    Unified SimpleDEX configuration.

    Loads every section of simpledex.toml and applies environment variable
    overrides.
    """
    pool: PoolSectionConfig = field(default_factory=PoolSectionConfig)
    logging: LoggingSectionConfig = field(default_factory=LoggingSectionConfig)

    # --- factories --------------------------------------------------------

    @classmethod
    def from_dict(cls, data: Dict[str, Any]) -> "DexConfig":
        return cls(
            pool=PoolSectionConfig.from_dict(data.get("pool", {})),
            logging=LoggingSectionConfig.from_dict(data.get("logging", {})),
        )

    @classmethod
    def from_file(cls, config_path: str) -> "DexConfig":
        """
        Load configuration from a TOML file.

        A missing file yields defaults (with env overrides applied).
        """
        path = Path(config_path)
        if not path.exists():
            logger.warning("Config file not found: %s, using defaults", config_path)
            cfg = cls()
            cfg.apply_env()
            return cfg

        with open(path, "rb") as f:
            try:
                raw = tomli.load(f)
            except tomli.TOMLDecodeError as e:
                raise ConfigurationError(f"Invalid TOML in {config_path}: {e}") from e

        cfg = cls.from_dict(raw)
        cfg.apply_env()
        return cfg

    # --- env overrides ----------------------------------------------------

    def apply_env(self) -> None:
        self.pool.apply_env()
        self.logging.apply_env()

    # --- validation -------------------------------------------------------

    def validate(self) -> bool:
        """
        Raises:
            ConfigurationError: on invalid config
        """
        if str(self.logging.level).upper() not in LOG_LEVELS:
            raise ConfigurationError(f"Invalid log level: {self.logging.level}")
        try:
            self.pool.policy
        except ValueError as e:
            raise ConfigurationError(
                f"Invalid imbalance_policy: {self.pool.imbalance_policy}"
            ) from e
        if not self.pool.share_name or not self.pool.share_symbol:
            raise ConfigurationError("share_name and share_symbol must be non-empty")
        if self.pool.token_a and self.pool.token_a == self.pool.token_b:
            raise ConfigurationError("token_a and token_b must differ")
        return True

    # --- serialisation ----------------------------------------------------

    def to_dict(self) -> Dict[str, Any]:
        """Serialize to dict (for diagnostics, NOT for re-creating TOML)."""
        return {
            "pool": {
                "token_a": self.pool.token_a,
                "token_b": self.pool.token_b,
                "fee_collector": self.pool.fee_collector,
                "share_name": self.pool.share_name,
                "share_symbol": self.pool.share_symbol,
                "imbalance_policy": self.pool.imbalance_policy,
            },
            "logging": {
                "level": self.logging.level,
                "console_output": self.logging.console_output,
                "file_output": self.logging.file_output,
                "file": self.logging.file,
            },
        }


# -----------------------------------------------------------------------
# Convenience function
# -----------------------------------------------------------------------

def load_config(path: Optional[str] = None) -> DexConfig:
    """
    Load SimpleDEX configuration.

    Resolution order:
        1. Explicit *path* argument
        2. SIMPLEDEX_CONFIG env var
        3. ./simpledex.toml in current directory
        4. Defaults (with env overrides)
    """
    if path is None:
        path = os.environ.get("SIMPLEDEX_CONFIG", "simpledex.toml")

    cfg = DexConfig.from_file(path)
    cfg.validate()
    return cfg
