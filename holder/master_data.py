"""
Master Data History

Client for the off-chain history of token master data. The ledger stores
only the current (revision, fingerprint) of each token; the history service
serves every published revision in full:

    GET /token?network-id=N&token-addr=A&token-id=T
        -> [{fingerprint, data: {salt, tokenId, revision, ...}}, ...]

Entries are ordered by ascending revision, starting at 1. Every fingerprint
must equal master_data_fingerprint(data). A fingerprint that does not
match points at diverging canonicalization, so it is raised rather than
skipped.
"""

from __future__ import annotations

import logging
from typing import Any, Optional

from pydantic import BaseModel, ConfigDict, Field, field_validator

from core.crypto.commitment import master_data_fingerprint
from core.crypto.hashing import normalize_hash
from core.http import AuthProvider, HttpClient
from core.schemas.errors import (
    FingerprintMismatchException,
    SchemaValidationException,
    StaleRevisionException,
)

logger = logging.getLogger(__name__)


class MasterDataEntry(BaseModel):
    """One published revision of a token's master data."""

    model_config = ConfigDict(frozen=True)

    fingerprint: str
    data: dict[str, Any] = Field(default_factory=dict)

    @field_validator("fingerprint")
    @classmethod
    def _normalize_fingerprint(cls, v: str) -> str:
        return normalize_hash(v, "fingerprint")

    @property
    def revision(self) -> Optional[int]:
        revision = self.data.get("revision")
        return revision if isinstance(revision, int) and not isinstance(revision, bool) else None

    @property
    def computed_fingerprint(self) -> str:
        return master_data_fingerprint(self.data)

    @classmethod
    def publish(cls, data: dict[str, Any]) -> "MasterDataEntry":
        """Build an entry whose fingerprint is computed from its data."""
        return cls(fingerprint=master_data_fingerprint(data), data=data)


def verify_history(entries: list[MasterDataEntry]) -> list[MasterDataEntry]:
    """
    Check fingerprints and revision order of a history.

    Raises:
        FingerprintMismatchException: an entry's fingerprint does not match its data
        SchemaValidationException: revisions are missing or not 1, 2, 3, ...
    """
    for position, entry in enumerate(entries):
        computed = entry.computed_fingerprint
        if computed != entry.fingerprint:
            raise FingerprintMismatchException(
                f"Master data fingerprint mismatch at position {position}",
                details={
                    "position": position,
                    "published": entry.fingerprint,
                    "computed": computed,
                },
            )
        expected_revision = position + 1
        if entry.revision != expected_revision:
            raise SchemaValidationException(
                f"Expected revision {expected_revision} at position {position}, "
                f"got {entry.data.get('revision')!r}",
                field_path=f"[{position}].data.revision",
            )
    return entries


class MasterDataHistory:
    """
    Fetches and verifies a token's master-data history.

    Usage:
        history = MasterDataHistory(url, network_id="main", token_addr="0xabc")
        entries = history.fetch(token_id=7)
        latest = history.verify_against_ledger(ledger, token_id=7)
    """

    def __init__(
        self,
        base_url: str,
        *,
        network_id: str,
        token_addr: str,
        client: Optional[HttpClient] = None,
        auth: Optional[AuthProvider] = None,
    ) -> None:
        self.base_url = base_url.rstrip("/")
        self.network_id = network_id
        self.token_addr = token_addr
        self.client = client or HttpClient(auth=auth)

    def fetch(self, token_id: int) -> list[MasterDataEntry]:
        """Download and verify every revision of a token's master data."""
        response = self.client.get(
            f"{self.base_url}/token",
            params={
                "network-id": self.network_id,
                "token-addr": self.token_addr,
                "token-id": str(token_id),
            },
        )
        response.raise_for_status()
        payload = response.json()
        if not isinstance(payload, list):
            raise SchemaValidationException(
                "Master data history must be a JSON array", field_path="$"
            )
        entries = [MasterDataEntry.model_validate(item) for item in payload]
        logger.debug(f"Fetched {len(entries)} master data revision(s) for token {token_id}")
        return verify_history(entries)

    def latest(self, token_id: int) -> Optional[MasterDataEntry]:
        entries = self.fetch(token_id)
        return entries[-1] if entries else None

    def verify_against_ledger(self, ledger, token_id: int) -> MasterDataEntry:
        """
        Check that the newest published revision is the one the ledger holds.

        Raises:
            UnknownTokenException: the ledger has no such token
            StaleRevisionException: history and ledger disagree
        """
        record = ledger.token(token_id)
        current = (record.master_data_revision, record.master_data_fp)
        entry = self.latest(token_id)
        published = (entry.revision, entry.fingerprint) if entry else (0, "")
        if published != current:
            raise StaleRevisionException(token_id, expected=published, actual=current)
        return entry
