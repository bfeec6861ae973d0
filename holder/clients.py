"""
Oracle Clients

Uniform access to oracles, whether in-process or behind the oracle HTTP
service. A client returns a signature or raises; it never decides whether
the signature is good enough. That is the collector's job.
"""

from __future__ import annotations

import logging
from abc import ABC, abstractmethod
from typing import Optional

from core.crypto.signatures import OracleSignature
from core.http import HttpClient, HttpError
from core.schemas.basket import ReorgProposal
from core.schemas.errors import BasketError, OracleUnavailableException
from oracle.verifier import ReorgVerifier

logger = logging.getLogger(__name__)


class OracleClient(ABC):
    """Requests an oracle signature over a reorg proposal."""

    name: str

    @abstractmethod
    def request_signature(self, proposal: ReorgProposal) -> OracleSignature:
        """
        Ask the oracle to verify and sign.

        Raises:
            OracleException: the oracle rejected the proposal
            OracleUnavailableException: the oracle could not be reached
        """

    def __repr__(self) -> str:
        return f"{self.__class__.__name__}({self.name!r})"


class LocalOracleClient(OracleClient):
    """Calls a ReorgVerifier in the same process."""

    def __init__(self, verifier: ReorgVerifier, name: Optional[str] = None) -> None:
        self.verifier = verifier
        self.name = name or verifier.public_key

    def request_signature(self, proposal: ReorgProposal) -> OracleSignature:
        return self.verifier.sign(proposal)


class HttpOracleClient(OracleClient):
    """
    Calls an oracle service over HTTP.

    POST {endpoint}/reorg with the proposal wire payload; a 200 response
    carries {signature, signer, digest}, anything else the service's error
    envelope {ok: false, error: {code, message, details}}.
    """

    def __init__(
        self,
        endpoint: str,
        *,
        client: Optional[HttpClient] = None,
        timeout: Optional[float] = None,
    ) -> None:
        self.endpoint = endpoint.rstrip("/")
        self.name = self.endpoint
        self.client = client or HttpClient()
        self.timeout = timeout

    def request_signature(self, proposal: ReorgProposal) -> OracleSignature:
        try:
            response = self.client.post(
                f"{self.endpoint}/reorg",
                json=proposal.to_wire(),
                timeout=self.timeout,
            )
        except HttpError as e:
            raise OracleUnavailableException(self.name, str(e)) from e

        if response.ok:
            try:
                body = response.json()
                return OracleSignature(signer=body["signer"], signature=body["signature"])
            except (TypeError, KeyError, ValueError) as e:
                raise OracleUnavailableException(self.name, f"malformed signature response: {e!r}") from e

        error = _error_from_response(response)
        if error is None:
            raise OracleUnavailableException(self.name, f"HTTP {response.status_code}")
        raise error.to_exception()


def _error_from_response(response) -> Optional[BasketError]:
    try:
        body = response.json()
        payload = body["error"]
        return BasketError(
            code=payload["code"],
            message=payload.get("message", ""),
            details=payload.get("details") or {},
        )
    except (ValueError, KeyError, TypeError):
        return None
