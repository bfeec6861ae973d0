"""
Reorg Coordinator

Drives a complete holder-side reorg:

1. Resolve plaintext for each input hash from the basket data store
2. Build the proposal with fresh output baskets
3. Store the output plaintext (before submission, so a committed basket is
   never left without its data)
4. Collect an oracle quorum
5. Submit the hash-only transaction to the ledger
"""

from __future__ import annotations

import logging
from typing import Any, Iterable, Optional, Sequence

from core.crypto.commitment import master_data_fingerprint
from core.ledger import CommitmentLedger
from core.schemas.basket import BasketRecord, ReorgProposal
from core.schemas.events import (
    CreateTokenEvent,
    ReorgHolderBasketsEvent,
    ReorgSupplyBasketsEvent,
)

from .clients import OracleClient
from .collector import collect_signatures
from .proposal import build_proposal, merge_baskets, new_basket, split_basket
from .store import BasketDataStore

logger = logging.getLogger(__name__)


class ReorgCoordinator:
    """
    Holder-side orchestration of reorgs against one ledger.

    Usage:
        coordinator = ReorgCoordinator(ledger, store, [LocalOracleClient(v) for v in verifiers])
        event = coordinator.split(alice, basket_hash, [40, 60])
    """

    def __init__(
        self,
        ledger: CommitmentLedger,
        store: BasketDataStore,
        oracle_clients: Sequence[OracleClient],
        *,
        timeout: Optional[float] = None,
    ) -> None:
        self.ledger = ledger
        self.store = store
        self.oracle_clients = list(oracle_clients)
        self.timeout = timeout

    def create_token(
        self,
        caller: str,
        token_id: int,
        total_supply: int,
        master_data: dict[str, Any],
        *,
        ref: Any = None,
    ) -> tuple[CreateTokenEvent, BasketRecord]:
        """Register a token with a fresh total-supply basket."""
        supply = new_basket(token_id, total_supply)
        self.store.put(supply)
        event = self.ledger.create_token(
            caller,
            token_id,
            supply.basket,
            master_data_fingerprint(master_data),
            ref=ref,
        )
        return event, supply

    def submit(
        self,
        caller: str,
        proposal: ReorgProposal,
        *,
        supply: bool = False,
        ref: Any = None,
    ) -> ReorgHolderBasketsEvent | ReorgSupplyBasketsEvent:
        """Store outputs, collect a quorum and submit to the ledger."""
        self.store.put_many(proposal.baskets_out)
        signatures = collect_signatures(
            proposal,
            self.oracle_clients,
            self.ledger.oracle_config(),
            timeout=self.timeout,
        )
        submit = self.ledger.reorg_supply_baskets if supply else self.ledger.reorg_holder_baskets
        return submit(caller, signatures, proposal.in_hashes, proposal.out_hashes, ref=ref)

    def reorg(
        self,
        caller: str,
        baskets_in: Iterable[str],
        outputs: Iterable[tuple[int, int]],
        *,
        supply: bool = False,
        ref: Any = None,
    ) -> ReorgHolderBasketsEvent | ReorgSupplyBasketsEvent:
        """Spend baskets (by hash) into fresh (token_id, value) outputs."""
        records = [self.store.require(h) for h in baskets_in]
        return self.submit(caller, build_proposal(records, outputs), supply=supply, ref=ref)

    def split(
        self,
        caller: str,
        basket: str,
        values: Sequence[int],
        *,
        supply: bool = False,
        ref: Any = None,
    ) -> ReorgHolderBasketsEvent | ReorgSupplyBasketsEvent:
        proposal = split_basket(self.store.require(basket), values)
        return self.submit(caller, proposal, supply=supply, ref=ref)

    def merge(
        self,
        caller: str,
        baskets: Iterable[str],
        *,
        supply: bool = False,
        ref: Any = None,
    ) -> ReorgHolderBasketsEvent | ReorgSupplyBasketsEvent:
        proposal = merge_baskets(self.store.require(h) for h in baskets)
        return self.submit(caller, proposal, supply=supply, ref=ref)
