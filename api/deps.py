"""
Module 09D - API Dependencies

Dependency injection for the oracle service.
The verifier is built once per application from the runtime config, or
injected directly via create_app(verifier=...).
"""

from __future__ import annotations

import logging
from typing import Optional

from fastapi import Request

from api.errors import OracleNotConfiguredError
from core.config.runtime import RuntimeConfig, load_runtime_config
from oracle.verifier import ReorgVerifier

logger = logging.getLogger(__name__)

_UNSET = object()


def build_verifier(config: RuntimeConfig) -> Optional[ReorgVerifier]:
    """Build a verifier from the configured key, or None without one."""
    keypair = config.oracle.load_keypair()
    if keypair is None:
        logger.warning(
            "No oracle key configured. Set BASKET_ORACLE_PRIVATE_KEY in .env "
            "or oracle.private_key_path in basket.json."
        )
        return None
    logger.info(f"Oracle signing as {keypair.public_key}")
    return ReorgVerifier(keypair)


def peek_verifier(request: Request) -> Optional[ReorgVerifier]:
    """The application's verifier, loading it on first use."""
    state = request.app.state
    verifier = getattr(state, "verifier", _UNSET)
    if verifier is _UNSET:
        verifier = build_verifier(load_runtime_config())
        state.verifier = verifier
    return verifier


def get_verifier(request: Request) -> ReorgVerifier:
    """
    FastAPI dependency for routes that sign.

    Raises:
        OracleNotConfiguredError: no signing key is configured
    """
    verifier = peek_verifier(request)
    if verifier is None:
        raise OracleNotConfiguredError()
    return verifier
