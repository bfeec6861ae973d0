"""
Module 09C - CLI Configuration

The CLI reads the same RuntimeConfig as the oracle service: a JSON or YAML
file (explicit, or found on the standard search path) overlaid with
BASKET_* environment variables.
"""

from __future__ import annotations

import json
from pathlib import Path

from core.config.runtime import RuntimeConfig, load_runtime_config


def load_config(config_path: Path | None = None) -> RuntimeConfig:
    """
    Load configuration with precedence:
    1. Environment variables (highest)
    2. Specified config file
    3. Default config file locations
    4. Default values (lowest)
    """
    return load_runtime_config(config_path)


def get_default_config_template() -> str:
    """Get a template configuration file."""
    template = {
        "oracle": {
            "private_key_path": "./keys/oracle.pem",
            "host": "127.0.0.1",
            "port": 8080,
        },
        "quorum": {
            "min_oracles": 2,
            "oracles": [],
        },
        "http": {
            "timeout": 10.0,
            "max_retries": 2,
            "retry_delay": 0.5,
        },
        "holder": {
            "oracle_endpoints": [
                "http://127.0.0.1:8080",
                "http://127.0.0.1:8081",
                "http://127.0.0.1:8082",
            ],
            "oracle_timeout": 5.0,
            "basket_store_url": None,
            "master_data_url": None,
        },
        "log_level": "INFO",
    }
    return json.dumps(template, indent=2)
