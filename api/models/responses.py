"""
Module 09D - API Response Models

Pydantic models for API response serialization.
"""

from typing import Any

from pydantic import BaseModel, Field


class HealthResponse(BaseModel):
    """Response for GET /health endpoint."""

    ok: bool = True
    service: str = "basket-oracle"
    version: str = "v1"
    configured: bool = Field(default=False, description="Whether a signing key is loaded")
    public_key: str | None = Field(default=None, description="Oracle Ed25519 public key (0x hex)")


class SignatureResponse(BaseModel):
    """Response for POST /reorg endpoint."""

    signature: str = Field(..., description="Ed25519 signature over the digest (0x hex)")
    signer: str = Field(..., description="Oracle public key (0x hex)")
    digest: str = Field(..., description="Reorg digest that was signed (0x hex)")
    scheme: str = Field(default="ed25519")


class EvaluateResponse(BaseModel):
    """Response for POST /reorg/evaluate endpoint (dry run)."""

    ok: bool = Field(..., description="Whether the oracle would sign")
    digest: str | None = Field(default=None)
    checks: list[dict[str, Any]] = Field(default_factory=list)
    errors: list[str] = Field(default_factory=list)


class ErrorDetail(BaseModel):
    """Detailed error information."""

    code: str = Field(..., description="Error code")
    message: str = Field(..., description="Human-readable error message")
    details: dict[str, Any] = Field(default_factory=dict)


class ErrorResponse(BaseModel):
    """Standard error response."""

    ok: bool = False
    error: ErrorDetail = Field(..., description="Error details")
