"""
Module 01 - Schemas & Canonicalization
File: events.py

Purpose: Audit events emitted once per successful ledger mutation.

Every event carries the initiating identity, the affected basket hashes or
token id, and the caller's opaque ``ref`` unchanged. Events are consumed by
external indexers only.
"""

from __future__ import annotations

from datetime import datetime, timezone
from typing import Annotated, Any, Literal, Optional, Union

from pydantic import BaseModel, ConfigDict, Field


class LedgerEvent(BaseModel):
    """Fields common to every audit event."""

    model_config = ConfigDict(frozen=True, extra="forbid")

    sequence: int = Field(..., ge=1, description="Position in the audit log, 1-based")
    caller: str = Field(..., description="Identity that initiated the mutation")
    ref: Any = Field(default=None, description="Opaque caller reference, passed through")
    emitted_at: datetime = Field(
        default_factory=lambda: datetime.now(timezone.utc),
        description="Wall-clock time of emission (not part of ledger state)",
    )


class CreateTokenEvent(LedgerEvent):
    event: Literal["CreateToken"] = "CreateToken"
    token_id: int
    total_supply_basket: str
    master_data_fp: str


class UpdateMasterDataEvent(LedgerEvent):
    event: Literal["UpdateMasterData"] = "UpdateMasterData"
    token_id: int
    from_revision: int
    to_revision: int
    from_fp: str
    to_fp: str


class MintEvent(LedgerEvent):
    event: Literal["Mint"] = "Mint"
    receiver: str
    baskets: list[str]


class TransferEvent(LedgerEvent):
    event: Literal["Transfer"] = "Transfer"
    receiver: str
    baskets: list[str]


class ReorgHolderBasketsEvent(LedgerEvent):
    event: Literal["ReorgHolderBaskets"] = "ReorgHolderBaskets"
    baskets_in: list[str]
    baskets_out: list[str]
    signers: list[str]


class ReorgSupplyBasketsEvent(LedgerEvent):
    event: Literal["ReorgSupplyBaskets"] = "ReorgSupplyBaskets"
    baskets_in: list[str]
    baskets_out: list[str]
    signers: list[str]


class BurnEvent(LedgerEvent):
    event: Literal["Burn"] = "Burn"
    baskets: list[str]


AuditEvent = Annotated[
    Union[
        CreateTokenEvent,
        UpdateMasterDataEvent,
        MintEvent,
        TransferEvent,
        ReorgHolderBasketsEvent,
        ReorgSupplyBasketsEvent,
        BurnEvent,
    ],
    Field(discriminator="event"),
]


def touched_baskets(event: LedgerEvent) -> list[str]:
    """All basket hashes an event refers to, in event order."""
    if isinstance(event, CreateTokenEvent):
        return [event.total_supply_basket]
    if isinstance(event, (ReorgHolderBasketsEvent, ReorgSupplyBasketsEvent)):
        return [*event.baskets_in, *event.baskets_out]
    baskets: Optional[list[str]] = getattr(event, "baskets", None)
    return list(baskets or [])
