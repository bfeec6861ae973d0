"""
Ledger state records.

Basket states only move forward:

    UNKNOWN -> LIVE_SUPPLY | LIVE_HOLDER -> SPENT

SPENT is terminal. A spent hash never becomes live again, even when the
same plaintext is resubmitted.
"""

from __future__ import annotations

from dataclasses import dataclass
from enum import Enum
from typing import Optional


class BasketState(str, Enum):
    UNKNOWN = "unknown"
    LIVE_SUPPLY = "live_supply"
    LIVE_HOLDER = "live_holder"
    SPENT = "spent"

    @property
    def is_live(self) -> bool:
        return self in (BasketState.LIVE_SUPPLY, BasketState.LIVE_HOLDER)


# Allowed forward transitions
TRANSITIONS: dict[BasketState, frozenset[BasketState]] = {
    BasketState.UNKNOWN: frozenset({BasketState.LIVE_SUPPLY, BasketState.LIVE_HOLDER}),
    BasketState.LIVE_SUPPLY: frozenset({BasketState.LIVE_HOLDER, BasketState.SPENT}),
    BasketState.LIVE_HOLDER: frozenset({BasketState.LIVE_HOLDER, BasketState.SPENT}),
    BasketState.SPENT: frozenset(),
}


@dataclass(frozen=True)
class BasketEntry:
    """State of one basket hash. ``owner`` is set only for LIVE_HOLDER."""

    state: BasketState
    owner: Optional[str] = None

    @classmethod
    def unknown(cls) -> "BasketEntry":
        return cls(BasketState.UNKNOWN)

    @classmethod
    def live_supply(cls) -> "BasketEntry":
        return cls(BasketState.LIVE_SUPPLY)

    @classmethod
    def live_holder(cls, owner: str) -> "BasketEntry":
        return cls(BasketState.LIVE_HOLDER, owner)

    @classmethod
    def spent(cls) -> "BasketEntry":
        return cls(BasketState.SPENT)

    def is_held_by(self, caller: str) -> bool:
        return self.state is BasketState.LIVE_HOLDER and self.owner == caller

    def can_become(self, target: "BasketEntry") -> bool:
        return target.state in TRANSITIONS[self.state]


@dataclass(frozen=True)
class TokenRecord:
    """
    Registry entry for one token id.

    ``total_supply_basket`` commits to the supply ceiling fixed at creation;
    the ledger keeps only the hash.
    """

    token_id: int
    master_data_revision: int
    master_data_fp: str
    total_supply_basket: str
