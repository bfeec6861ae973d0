"""
Runtime Configuration Module

Provides configuration loading and management for oracles and holders.
"""

from .runtime import (
    HolderConfig,
    HttpConfig,
    OracleConfig,
    QuorumSettings,
    RuntimeConfig,
    get_default_config,
    load_runtime_config,
    set_default_config,
)

__all__ = [
    "HolderConfig",
    "HttpConfig",
    "OracleConfig",
    "QuorumSettings",
    "RuntimeConfig",
    "get_default_config",
    "load_runtime_config",
    "set_default_config",
]
