"""
Module 09D - Reorg Route

Verify a reorg proposal and return this oracle's signature over its digest.
The service keeps no record of what it has signed.
"""

from __future__ import annotations

import logging

from fastapi import APIRouter, Depends

from api.deps import get_verifier
from api.errors import InvalidRequestError, OracleRejectedError
from api.models.requests import ReorgRequest
from api.models.responses import EvaluateResponse, SignatureResponse
from core.crypto.hashing import to_hex
from core.schemas.errors import LedgerProtocolException, OracleException
from oracle.verifier import ReorgVerifier


logger = logging.getLogger(__name__)

router = APIRouter(tags=["reorg"])


@router.post("/reorg", response_model=SignatureResponse)
def sign_reorg(
    request: ReorgRequest,
    verifier: ReorgVerifier = Depends(get_verifier),
) -> SignatureResponse:
    """
    Sign a reorg proposal.

    Returns 422 with HASH_MISMATCH or CONSERVATION_VIOLATION when the
    proposal is rejected.
    """
    proposal = request.to_proposal()
    try:
        signature = verifier.sign(proposal)
    except OracleException as e:
        raise OracleRejectedError(e)
    except LedgerProtocolException as e:
        raise InvalidRequestError(e.message, details={"code": e.code, **e.details})

    return SignatureResponse(
        signature=signature.signature,
        signer=signature.signer,
        digest=to_hex(proposal.digest()),
        scheme=signature.scheme,
    )


@router.post("/reorg/evaluate", response_model=EvaluateResponse)
def evaluate_reorg(
    request: ReorgRequest,
    verifier: ReorgVerifier = Depends(get_verifier),
) -> EvaluateResponse:
    """
    Dry run: report every check without signing.
    """
    result = verifier.evaluate(request.to_proposal())
    return EvaluateResponse(
        ok=result.ok,
        digest=result.digest,
        checks=[c.model_dump(mode="json") for c in result.checks],
        errors=result.get_error_messages(),
    )
