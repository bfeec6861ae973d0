"""API request and response models."""

from api.models.requests import ReorgRequest
from api.models.responses import (
    ErrorDetail,
    ErrorResponse,
    EvaluateResponse,
    HealthResponse,
    SignatureResponse,
)

__all__ = [
    "ReorgRequest",
    "ErrorDetail",
    "ErrorResponse",
    "EvaluateResponse",
    "HealthResponse",
    "SignatureResponse",
]
