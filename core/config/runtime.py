"""
Runtime Configuration

Central configuration for the oracle service, the holder-side client and
the quorum every ledger instance is constructed with.
"""

from __future__ import annotations

import copy
import json
import logging
import os
from dataclasses import dataclass, field
from pathlib import Path
from typing import Any, Optional

from dotenv import load_dotenv

load_dotenv()

logger = logging.getLogger(__name__)

ENV_PREFIX = "BASKET_"

CONFIG_SEARCH_PATHS = (
    Path.cwd() / "basket.json",
    Path.cwd() / ".basket.json",
    Path.home() / ".config" / "basket" / "config.json",
)


def _split_list(raw: str) -> list[str]:
    return [item.strip() for item in raw.split(",") if item.strip()]


@dataclass
class OracleConfig:
    """Signing key and listen address of one oracle service."""
    private_key: Optional[str] = None  # raw Ed25519 key, 0x hex
    private_key_path: Optional[str] = None  # PEM file
    host: str = "127.0.0.1"
    port: int = 8080

    def load_keypair(self):
        """Load the signing key, or return None when none is configured."""
        from core.crypto.signatures import OracleKeypair

        if self.private_key:
            return OracleKeypair.from_private_hex(self.private_key)
        if self.private_key_path:
            return OracleKeypair.from_pem_file(self.private_key_path)
        return None


@dataclass
class QuorumSettings:
    """Authorized oracle public keys and the signature threshold."""
    min_oracles: int = 1
    oracles: list[str] = field(default_factory=list)


@dataclass
class HttpConfig:
    """Configuration for the HTTP client."""
    timeout: float = 10.0
    max_retries: int = 2
    retry_delay: float = 0.5


@dataclass
class HolderConfig:
    """Where a holder finds oracles and off-chain stores."""
    oracle_endpoints: list[str] = field(default_factory=list)
    oracle_timeout: float = 5.0
    basket_store_url: Optional[str] = None
    master_data_url: Optional[str] = None
    network_id: Optional[str] = None
    token_addr: Optional[str] = None


@dataclass
class RuntimeConfig:
    """
    Complete runtime configuration.

    Can be loaded from:
    - Environment variables
    - JSON or YAML file
    - Programmatic construction
    """
    oracle: OracleConfig = field(default_factory=OracleConfig)
    quorum: QuorumSettings = field(default_factory=QuorumSettings)
    http: HttpConfig = field(default_factory=HttpConfig)
    holder: HolderConfig = field(default_factory=HolderConfig)
    log_level: str = "INFO"
    extra: dict[str, Any] = field(default_factory=dict)

    @staticmethod
    def _get_env_overrides() -> dict[str, Any]:
        """
        Get configuration overrides from environment variables.

        Supported variables:
        - BASKET_ORACLE_PRIVATE_KEY: Oracle Ed25519 private key (0x hex)
        - BASKET_ORACLE_KEY_PATH: Oracle private key PEM file
        - BASKET_ORACLE_HOST / BASKET_ORACLE_PORT: Oracle service address
        - BASKET_MIN_ORACLES: Quorum threshold
        - BASKET_ORACLES: Comma-separated authorized oracle public keys
        - BASKET_ORACLE_ENDPOINTS: Comma-separated oracle URLs
        - BASKET_ORACLE_TIMEOUT: Per-oracle timeout in seconds
        - BASKET_STORE_URL: Basket data store base URL
        - BASKET_MASTER_DATA_URL: Master-data history base URL
        - BASKET_LOG_LEVEL: Log level
        """
        overrides: dict[str, Any] = {}

        def env(name: str) -> Optional[str]:
            return os.getenv(f"{ENV_PREFIX}{name}") or None

        if env("ORACLE_PRIVATE_KEY"):
            overrides.setdefault("oracle", {})["private_key"] = env("ORACLE_PRIVATE_KEY")
        if env("ORACLE_KEY_PATH"):
            overrides.setdefault("oracle", {})["private_key_path"] = env("ORACLE_KEY_PATH")
        if env("ORACLE_HOST"):
            overrides.setdefault("oracle", {})["host"] = env("ORACLE_HOST")
        if env("ORACLE_PORT"):
            overrides.setdefault("oracle", {})["port"] = int(env("ORACLE_PORT"))

        if env("MIN_ORACLES"):
            overrides.setdefault("quorum", {})["min_oracles"] = int(env("MIN_ORACLES"))
        if env("ORACLES"):
            overrides.setdefault("quorum", {})["oracles"] = _split_list(env("ORACLES"))

        if env("ORACLE_ENDPOINTS"):
            overrides.setdefault("holder", {})["oracle_endpoints"] = _split_list(env("ORACLE_ENDPOINTS"))
        if env("ORACLE_TIMEOUT"):
            overrides.setdefault("holder", {})["oracle_timeout"] = float(env("ORACLE_TIMEOUT"))
        if env("STORE_URL"):
            overrides.setdefault("holder", {})["basket_store_url"] = env("STORE_URL")
        if env("MASTER_DATA_URL"):
            overrides.setdefault("holder", {})["master_data_url"] = env("MASTER_DATA_URL")

        if env("LOG_LEVEL"):
            overrides["log_level"] = env("LOG_LEVEL")

        return overrides

    @classmethod
    def from_env(cls) -> "RuntimeConfig":
        """Load configuration purely from environment variables."""
        return cls.from_dict(cls._get_env_overrides())

    @classmethod
    def from_yaml(cls, path: str | Path) -> "RuntimeConfig":
        """Load configuration from a YAML file."""
        import yaml
        path = Path(path)
        if not path.exists():
            raise FileNotFoundError(f"Config file not found: {path}")

        with open(path) as f:
            data = yaml.safe_load(f) or {}

        return cls.from_dict(data)

    @classmethod
    def from_file(cls, path: str | Path) -> "RuntimeConfig":
        """Load from JSON, or YAML when the suffix is .yaml/.yml."""
        path = Path(path)
        if path.suffix in (".yaml", ".yml"):
            return cls.from_yaml(path)
        if not path.exists():
            raise FileNotFoundError(f"Config file not found: {path}")
        with open(path) as f:
            return cls.from_dict(json.load(f))

    @classmethod
    def from_dict(cls, data: dict[str, Any]) -> "RuntimeConfig":
        """Load configuration from a dictionary (supports partial data)."""
        oracle_data = data.get("oracle") or {}
        quorum_data = data.get("quorum") or {}
        http_data = data.get("http") or {}
        holder_data = data.get("holder") or {}

        return cls(
            oracle=OracleConfig(**oracle_data),
            quorum=QuorumSettings(**quorum_data),
            http=HttpConfig(**http_data),
            holder=HolderConfig(**holder_data),
            log_level=data.get("log_level", "INFO"),
            extra=data.get("extra", {}),
        )

    def with_env_overrides(self) -> "RuntimeConfig":
        """
        Return a new config with environment variable overrides applied.

        This allows loading from a config file first, then overlaying env vars.
        """
        overrides = self._get_env_overrides()
        if not overrides:
            return self

        new_config = copy.deepcopy(self)
        for section in ("oracle", "quorum", "holder"):
            for key, value in overrides.get(section, {}).items():
                setattr(getattr(new_config, section), key, value)
        if "log_level" in overrides:
            new_config.log_level = overrides["log_level"]
        return new_config

    def quorum_config(self):
        """Build the immutable OracleQuorumConfig a ledger is constructed with."""
        from core.ledger.quorum import OracleQuorumConfig

        return OracleQuorumConfig(
            min_number_of_oracles=self.quorum.min_oracles,
            oracles=self.quorum.oracles,
        )

    def to_dict(self) -> dict[str, Any]:
        """Convert configuration to a dictionary. Private keys are never included."""
        return {
            "oracle": {
                "private_key_path": self.oracle.private_key_path,
                "host": self.oracle.host,
                "port": self.oracle.port,
            },
            "quorum": {
                "min_oracles": self.quorum.min_oracles,
                "oracles": list(self.quorum.oracles),
            },
            "http": {
                "timeout": self.http.timeout,
                "max_retries": self.http.max_retries,
                "retry_delay": self.http.retry_delay,
            },
            "holder": {
                "oracle_endpoints": list(self.holder.oracle_endpoints),
                "oracle_timeout": self.holder.oracle_timeout,
                "basket_store_url": self.holder.basket_store_url,
                "master_data_url": self.holder.master_data_url,
                "network_id": self.holder.network_id,
                "token_addr": self.holder.token_addr,
            },
            "log_level": self.log_level,
            "extra": self.extra,
        }


def load_runtime_config(path: str | Path | None = None) -> RuntimeConfig:
    """
    Load RuntimeConfig from a config file, then overlay environment variables.

    Without an explicit path the first existing file in CONFIG_SEARCH_PATHS
    is used. Environment variables ALWAYS override file values.
    """
    config: RuntimeConfig | None = None

    if path is not None:
        config = RuntimeConfig.from_file(path)
        logger.info(f"Loaded config from {path}")
    else:
        for candidate in CONFIG_SEARCH_PATHS:
            if candidate.exists():
                try:
                    config = RuntimeConfig.from_file(candidate)
                    logger.info(f"Loaded config from {candidate}")
                    break
                except (OSError, ValueError, TypeError) as e:
                    logger.warning(f"Failed to parse {candidate}: {e}")

    if config is None:
        config = RuntimeConfig()

    return config.with_env_overrides()


# Global default configuration
_default_config: Optional[RuntimeConfig] = None


def get_default_config() -> RuntimeConfig:
    """Get the default runtime configuration."""
    global _default_config
    if _default_config is None:
        _default_config = load_runtime_config()
    return _default_config


def set_default_config(config: Optional[RuntimeConfig]) -> None:
    """Set (or with None, reset) the default runtime configuration."""
    global _default_config
    _default_config = config
