"""
Module 09D - Health Check Route

Liveness probe that also reports which key this oracle signs with.
"""

from fastapi import APIRouter, Request

from api.deps import peek_verifier
from api.models.responses import HealthResponse


router = APIRouter(tags=["health"])


def _health(request: Request) -> HealthResponse:
    verifier = peek_verifier(request)
    return HealthResponse(
        ok=True,
        configured=verifier is not None,
        public_key=verifier.public_key if verifier else None,
    )


@router.get("/health", response_model=HealthResponse)
def health_check(request: Request) -> HealthResponse:
    """
    Health check endpoint.

    Returns service status and the oracle public key, if one is loaded.
    """
    return _health(request)


@router.get("/", response_model=HealthResponse)
def root(request: Request) -> HealthResponse:
    """
    Root endpoint - same as health check.
    """
    return _health(request)
