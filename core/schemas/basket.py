"""
Module 01 - Schemas & Canonicalization
File: basket.py

Purpose: Wire models for plaintext basket data and reorg proposals.

These are the shapes exchanged with the off-chain basket store
({basket, data:{salt, tokenId, value}}) and posted to oracles
({in:[...], out:[...]}). The ledger itself never receives them.
"""

from __future__ import annotations

from typing import Any

from pydantic import BaseModel, ConfigDict, Field, field_validator

UINT256_MAX = 2**256 - 1


def _validate_hex32(value: str, field: str) -> str:
    if not isinstance(value, str) or not value.startswith("0x"):
        raise ValueError(f"{field} must be 0x-prefixed hex")
    try:
        raw = bytes.fromhex(value[2:])
    except ValueError as e:
        raise ValueError(f"{field} contains invalid hex: {e}") from e
    if len(raw) != 32:
        raise ValueError(f"{field} must be 32 bytes, got {len(raw)}")
    return value.lower()


class BasketData(BaseModel):
    """Plaintext preimage of a basket hash. Known only off-ledger."""

    model_config = ConfigDict(frozen=True, extra="forbid", populate_by_name=True)

    salt: str = Field(..., description="32 random bytes, 0x hex")
    token_id: int = Field(..., alias="tokenId", ge=0, le=UINT256_MAX, strict=True)
    value: int = Field(..., ge=0, le=UINT256_MAX, strict=True)

    @field_validator("salt")
    @classmethod
    def _check_salt(cls, v: str) -> str:
        return _validate_hex32(v, "salt")

    def basket_hash(self) -> str:
        """Recompute the commitment for this preimage."""
        from core.crypto.commitment import basket_hash

        return basket_hash(self.salt, self.token_id, self.value)


class BasketRecord(BaseModel):
    """A basket hash together with its claimed plaintext."""

    model_config = ConfigDict(frozen=True, extra="forbid")

    basket: str = Field(..., description="Claimed basket hash, 0x hex")
    data: BasketData

    @field_validator("basket")
    @classmethod
    def _check_basket(cls, v: str) -> str:
        return _validate_hex32(v, "basket")

    @classmethod
    def from_data(cls, data: BasketData) -> "BasketRecord":
        return cls(basket=data.basket_hash(), data=data)

    def matches(self) -> bool:
        return self.data.basket_hash() == self.basket

    def to_wire(self) -> dict[str, Any]:
        return self.model_dump(mode="json", by_alias=True)


class ReorgProposal(BaseModel):
    """
    Replacement of input baskets by output baskets.

    Ephemeral: built by a holder, posted to oracles, then reduced to its two
    hash lists for ledger submission.
    """

    model_config = ConfigDict(frozen=True, extra="forbid", populate_by_name=True)

    baskets_in: list[BasketRecord] = Field(..., alias="in")
    baskets_out: list[BasketRecord] = Field(default_factory=list, alias="out")

    @property
    def in_hashes(self) -> list[str]:
        return [r.basket for r in self.baskets_in]

    @property
    def out_hashes(self) -> list[str]:
        return [r.basket for r in self.baskets_out]

    def digest(self) -> bytes:
        """The canonical reorg digest over the claimed hashes."""
        from core.crypto.commitment import reorg_digest

        return reorg_digest(self.in_hashes, self.out_hashes)

    def reversed(self) -> "ReorgProposal":
        """The inverse reorg. Conservation holds for it iff it holds for self."""
        return ReorgProposal(baskets_in=self.baskets_out, baskets_out=self.baskets_in)

    def to_wire(self) -> dict[str, Any]:
        return self.model_dump(mode="json", by_alias=True)
