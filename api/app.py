"""
Module 09D - FastAPI Application

Oracle service: verifies reorg proposals and signs their digests.

Usage:
    uvicorn api.app:app --reload

    # Or run directly
    python -m api.app
"""

import logging
import os
from typing import Optional

from fastapi import FastAPI
from fastapi.exceptions import RequestValidationError
from fastapi.middleware.cors import CORSMiddleware

from api.errors import (
    APIError,
    api_error_handler,
    generic_error_handler,
    validation_error_handler,
)
from api.routes import health, reorg
from oracle.verifier import ReorgVerifier


def _resolve_log_level() -> int:
    """Resolve log level from BASKET_LOG_LEVEL, defaulting to INFO."""
    raw = os.getenv("BASKET_LOG_LEVEL")
    return getattr(logging, (raw or "INFO").upper(), logging.INFO)


logging.basicConfig(
    level=_resolve_log_level(),
    format="%(asctime)s [%(levelname)s] %(name)s: %(message)s",
)


def create_app(verifier: Optional[ReorgVerifier] = None) -> FastAPI:
    """
    Create and configure the FastAPI application.

    Args:
        verifier: Verifier to sign with. When omitted the key is loaded from
            the runtime config on first request.
    """

    app = FastAPI(
        title="Basket Oracle",
        description="""
Stateless oracle for the basket commitment ledger.

## Endpoints

- **POST /reorg** - Verify a reorg proposal and sign its digest
- **POST /reorg/evaluate** - Report every check without signing
- **GET /health** - Health check and oracle public key

A proposal is signed only if every claimed basket hash matches its
plaintext and, for every token id, input values sum to output values.
        """,
        version="0.1.0",
        docs_url="/docs",
        redoc_url="/redoc",
    )

    if verifier is not None:
        app.state.verifier = verifier

    app.add_middleware(
        CORSMiddleware,
        allow_origins=["*"],
        allow_credentials=True,
        allow_methods=["*"],
        allow_headers=["*"],
    )

    app.add_exception_handler(APIError, api_error_handler)
    app.add_exception_handler(RequestValidationError, validation_error_handler)
    app.add_exception_handler(Exception, generic_error_handler)

    app.include_router(health.router)
    app.include_router(reorg.router)

    return app


app = create_app()


if __name__ == "__main__":
    import uvicorn
    uvicorn.run(app, host="0.0.0.0", port=8080)
