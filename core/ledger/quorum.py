"""
Oracle Quorum Configuration

The authorized oracle set and the minimum number of distinct oracle
signatures a reorg needs. Immutable for the lifetime of a ledger instance;
changing the set means constructing a new configuration.
"""

from __future__ import annotations

import logging
from typing import Iterable

from pydantic import BaseModel, ConfigDict, Field, field_validator, model_validator

from core.crypto.signatures import OracleSignature, normalize_public_key, verify_signature
from core.schemas.errors import QuorumNotMetException, SignatureException

logger = logging.getLogger(__name__)


class OracleQuorumConfig(BaseModel):
    """
    Authorized oracle public keys plus the quorum threshold.

    Invariants:
        - 1 <= min_number_of_oracles <= len(oracles)
        - oracle keys are distinct after normalization
    """

    model_config = ConfigDict(frozen=True, extra="forbid")

    min_number_of_oracles: int = Field(..., ge=1)
    oracles: frozenset[str] = Field(..., min_length=1)

    @field_validator("oracles", mode="before")
    @classmethod
    def _normalize_oracles(cls, value: Iterable[str]) -> frozenset[str]:
        keys = list(value)
        try:
            normalized = [normalize_public_key(k) for k in keys]
        except SignatureException as e:
            raise ValueError(e.message) from e
        if len(set(normalized)) != len(normalized):
            raise ValueError("oracle public keys must be distinct")
        return frozenset(normalized)

    @model_validator(mode="after")
    def _check_reachable(self) -> "OracleQuorumConfig":
        if self.min_number_of_oracles > len(self.oracles):
            raise ValueError(
                f"min_number_of_oracles ({self.min_number_of_oracles}) exceeds "
                f"the number of configured oracles ({len(self.oracles)})"
            )
        return self

    def is_authorized(self, signer: str) -> bool:
        return signer in self.oracles

    def valid_signers(
        self,
        digest: bytes,
        signatures: Iterable[OracleSignature],
    ) -> set[str]:
        """
        Distinct authorized oracles with a valid signature over ``digest``.

        Unauthorized signers and invalid signatures are skipped. A signer that
        appears several times counts once.
        """
        signers: set[str] = set()
        for sig in signatures:
            if sig.signer in signers:
                continue
            if not self.is_authorized(sig.signer):
                logger.debug(f"Ignoring signature from unauthorized signer {sig.signer}")
                continue
            if not verify_signature(digest, sig):
                logger.debug(f"Ignoring invalid signature from {sig.signer}")
                continue
            signers.add(sig.signer)
        return signers

    def has_quorum(self, digest: bytes, signatures: Iterable[OracleSignature]) -> bool:
        return len(self.valid_signers(digest, signatures)) >= self.min_number_of_oracles

    def require_quorum(
        self,
        digest: bytes,
        signatures: Iterable[OracleSignature],
    ) -> set[str]:
        """
        Return the valid signer set, or raise if it is below the threshold.

        Raises:
            QuorumNotMetException
        """
        signatures = list(signatures)
        signers = self.valid_signers(digest, signatures)
        if len(signers) < self.min_number_of_oracles:
            raise QuorumNotMetException(
                valid=len(signers),
                required=self.min_number_of_oracles,
                details={"submitted": len(signatures)},
            )
        return signers
