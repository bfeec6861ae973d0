"""
Module 04 - Commitment Ledger

State-transition engine over basket commitments.

The ledger tracks which basket hashes are live, who owns them and whether
they sit in the supply pool. It never sees salts or values: conservation of
value across a reorg is attested by a quorum of oracle signatures over the
reorg digest.

Guarantees:
- Every mutating call is atomic. Checks run first, writes are staged and
  applied only after all checks pass; a rejected call changes nothing.
- Mutating calls are serialized under one lock, giving a single total order.
- Basket states only move forward (see core.ledger.state). A spent hash can
  never be reused.
- One audit event per committed mutation, carrying the caller's ``ref``.
"""

from __future__ import annotations

import logging
import threading
from contextlib import contextmanager
from typing import Any, Iterable, Iterator, Optional, Sequence

from core.crypto.commitment import reorg_digest
from core.crypto.hashing import normalize_hash
from core.crypto.signatures import OracleSignature
from core.ledger.audit import AuditLog
from core.ledger.quorum import OracleQuorumConfig
from core.ledger.state import BasketEntry, BasketState, TokenRecord
from core.schemas.errors import (
    DuplicateBasketException,
    DuplicateTokenException,
    InvalidBasketException,
    LedgerException,
    SchemaValidationException,
    StaleRevisionException,
    UnauthorizedException,
    UnknownTokenException,
)
from core.schemas.events import (
    BurnEvent,
    CreateTokenEvent,
    MintEvent,
    ReorgHolderBasketsEvent,
    ReorgSupplyBasketsEvent,
    TransferEvent,
    UpdateMasterDataEvent,
)

logger = logging.getLogger(__name__)


def _require_identity(value: str, field: str) -> str:
    if not isinstance(value, str) or not value:
        raise SchemaValidationException(f"{field} must be a non-empty string", field_path=field)
    return value


def _normalize_batch(baskets: Iterable[str], field: str) -> list[str]:
    """Normalize hashes and reject internal duplicates."""
    if isinstance(baskets, str):
        raise SchemaValidationException(f"{field} must be a sequence of hashes", field_path=field)
    normalized = [normalize_hash(b, field) for b in baskets]
    seen: set[str] = set()
    for h in normalized:
        if h in seen:
            raise DuplicateBasketException(h, f"listed more than once in {field}")
        seen.add(h)
    return normalized


class CommitmentLedger:
    """
    Basket ownership, supply pool and master-data revision chain.

    Usage:
        ledger = CommitmentLedger(operator="issuer", quorum_config=quorum)
        ledger.create_token("issuer", token_id=1, total_supply_basket=b0, master_data_fp=fp)
        ledger.mint("issuer", [b0], receiver="alice")
        ledger.reorg_holder_baskets("alice", signatures, [b0], [b1, b2])
    """

    def __init__(
        self,
        operator: str,
        quorum_config: OracleQuorumConfig,
        audit_log: Optional[AuditLog] = None,
    ) -> None:
        self.operator = _require_identity(operator, "operator")
        self._quorum = quorum_config
        self._audit = audit_log if audit_log is not None else AuditLog()
        self._baskets: dict[str, BasketEntry] = {}
        self._tokens: dict[int, TokenRecord] = {}
        self._lock = threading.RLock()

    # =========================================================================
    # Reads
    # =========================================================================

    def oracle_config(self) -> OracleQuorumConfig:
        return self._quorum

    @property
    def audit_log(self) -> AuditLog:
        return self._audit

    def basket_state(self, basket: str) -> BasketEntry:
        h = normalize_hash(basket, "basket")
        with self._lock:
            return self._baskets.get(h, BasketEntry.unknown())

    def owner(self, basket: str) -> Optional[str]:
        """Current holder of a basket, or None when it is not held."""
        entry = self.basket_state(basket)
        return entry.owner if entry.state is BasketState.LIVE_HOLDER else None

    def token(self, token_id: int) -> TokenRecord:
        with self._lock:
            record = self._tokens.get(token_id)
        if record is None:
            raise UnknownTokenException(token_id)
        return record

    def has_token(self, token_id: int) -> bool:
        with self._lock:
            return token_id in self._tokens

    def total_supply(self, token_id: int) -> str:
        """
        Commitment to the supply ceiling of a token.

        Returns the total-supply basket hash registered at creation. Its value
        is visible only to holders of the preimage.
        """
        return self.token(token_id).total_supply_basket

    def token_master_data_revision(self, token_id: int) -> int:
        return self.token(token_id).master_data_revision

    def token_master_data_fp(self, token_id: int) -> str:
        return self.token(token_id).master_data_fp

    # =========================================================================
    # Token registry
    # =========================================================================

    def create_token(
        self,
        caller: str,
        token_id: int,
        total_supply_basket: str,
        master_data_fp: str,
        *,
        ref: Any = None,
    ) -> CreateTokenEvent:
        """
        Register a token and put its total-supply basket in the supply pool.

        Raises:
            UnauthorizedException: caller is not the operator
            DuplicateTokenException: token id already registered
            DuplicateBasketException: supply basket already known
        """
        with self._transaction("create_token", caller):
            self._require_operator(caller)
            if isinstance(token_id, bool) or not isinstance(token_id, int) or token_id < 0:
                raise SchemaValidationException("token_id must be a non-negative integer", field_path="token_id")
            basket = normalize_hash(total_supply_basket, "total_supply_basket")
            fp = normalize_hash(master_data_fp, "master_data_fp")

            if token_id in self._tokens:
                raise DuplicateTokenException(token_id)
            self._require_fresh([basket])

            self._apply({basket: BasketEntry.live_supply()})
            self._tokens[token_id] = TokenRecord(
                token_id=token_id,
                master_data_revision=1,
                master_data_fp=fp,
                total_supply_basket=basket,
            )

            return self._audit.record(
                CreateTokenEvent,
                caller=caller,
                ref=ref,
                token_id=token_id,
                total_supply_basket=basket,
                master_data_fp=fp,
            )

    def update_master_data(
        self,
        caller: str,
        token_id: int,
        from_revision: int,
        from_fp: str,
        to_fp: str,
        *,
        ref: Any = None,
    ) -> UpdateMasterDataEvent:
        """
        Compare-and-swap the master-data fingerprint of a token.

        Succeeds only if the current (revision, fp) equals
        (from_revision, from_fp) exactly; the revision then increases by one.

        Raises:
            UnauthorizedException: caller is not the operator
            UnknownTokenException: token id not registered
            StaleRevisionException: (from_revision, from_fp) is not current
        """
        with self._transaction("update_master_data", caller):
            self._require_operator(caller)
            expected_fp = normalize_hash(from_fp, "from_fp")
            new_fp = normalize_hash(to_fp, "to_fp")

            record = self._tokens.get(token_id)
            if record is None:
                raise UnknownTokenException(token_id)

            current = (record.master_data_revision, record.master_data_fp)
            if current != (from_revision, expected_fp):
                raise StaleRevisionException(token_id, (from_revision, expected_fp), current)

            self._tokens[token_id] = TokenRecord(
                token_id=token_id,
                master_data_revision=record.master_data_revision + 1,
                master_data_fp=new_fp,
                total_supply_basket=record.total_supply_basket,
            )

            return self._audit.record(
                UpdateMasterDataEvent,
                caller=caller,
                ref=ref,
                token_id=token_id,
                from_revision=record.master_data_revision,
                to_revision=record.master_data_revision + 1,
                from_fp=record.master_data_fp,
                to_fp=new_fp,
            )

    # =========================================================================
    # Basket movements
    # =========================================================================

    def mint(
        self,
        caller: str,
        supply_baskets: Sequence[str],
        receiver: str,
        *,
        ref: Any = None,
    ) -> MintEvent:
        """
        Assign supply-pool baskets to a receiver.

        Raises:
            UnauthorizedException: caller is not the operator
            InvalidBasketException: a basket is not LIVE_SUPPLY
            DuplicateBasketException: a basket is listed twice
        """
        with self._transaction("mint", caller):
            self._require_operator(caller)
            receiver = _require_identity(receiver, "receiver")
            baskets = self._non_empty(_normalize_batch(supply_baskets, "supply_baskets"), "supply_baskets")
            self._require_supply(baskets)

            self._apply({h: BasketEntry.live_holder(receiver) for h in baskets})

            return self._audit.record(
                MintEvent, caller=caller, ref=ref, receiver=receiver, baskets=baskets
            )

    def transfer(
        self,
        caller: str,
        baskets: Sequence[str],
        receiver: str,
        *,
        ref: Any = None,
    ) -> TransferEvent:
        """
        Reassign the caller's baskets to a receiver.

        Value and token id are unchanged by construction; the hash is kept.

        Raises:
            UnauthorizedException: a basket is held by someone else
            InvalidBasketException: a basket is not LIVE_HOLDER
            DuplicateBasketException: a basket is listed twice
        """
        with self._transaction("transfer", caller):
            receiver = _require_identity(receiver, "receiver")
            hashes = self._non_empty(_normalize_batch(baskets, "baskets"), "baskets")
            self._require_held(caller, hashes)

            self._apply({h: BasketEntry.live_holder(receiver) for h in hashes})

            return self._audit.record(
                TransferEvent, caller=caller, ref=ref, receiver=receiver, baskets=hashes
            )

    def burn(
        self,
        caller: str,
        baskets: Sequence[str],
        *,
        ref: Any = None,
    ) -> BurnEvent:
        """
        Destroy the caller's baskets. No conservation check applies.

        Raises:
            UnauthorizedException: a basket is held by someone else
            InvalidBasketException: a basket is not LIVE_HOLDER
        """
        with self._transaction("burn", caller):
            hashes = self._non_empty(_normalize_batch(baskets, "baskets"), "baskets")
            self._require_held(caller, hashes)

            self._apply({h: BasketEntry.spent() for h in hashes})

            return self._audit.record(BurnEvent, caller=caller, ref=ref, baskets=hashes)

    # =========================================================================
    # Reorganization
    # =========================================================================

    def reorg_holder_baskets(
        self,
        caller: str,
        signatures: Iterable[OracleSignature],
        baskets_in: Sequence[str],
        baskets_out: Sequence[str],
        *,
        ref: Any = None,
    ) -> ReorgHolderBasketsEvent:
        """
        Replace the caller's baskets with new baskets owned by the caller.

        Raises:
            DuplicateBasketException: duplicates, or an output already exists
            UnauthorizedException: an input is held by someone else
            InvalidBasketException: an input is not LIVE_HOLDER
            QuorumNotMetException: too few distinct valid oracle signatures
        """
        with self._transaction("reorg_holder_baskets", caller):
            ins, outs = self._prepare_reorg(baskets_in, baskets_out)
            self._require_held(caller, ins)
            self._require_fresh(outs)
            signers = self._quorum.require_quorum(reorg_digest(ins, outs), signatures)

            staged = {h: BasketEntry.spent() for h in ins}
            staged.update({h: BasketEntry.live_holder(caller) for h in outs})
            self._apply(staged)

            return self._audit.record(
                ReorgHolderBasketsEvent,
                caller=caller,
                ref=ref,
                baskets_in=ins,
                baskets_out=outs,
                signers=sorted(signers),
            )

    def reorg_supply_baskets(
        self,
        caller: str,
        signatures: Iterable[OracleSignature],
        baskets_in: Sequence[str],
        baskets_out: Sequence[str],
        *,
        ref: Any = None,
    ) -> ReorgSupplyBasketsEvent:
        """
        Replace supply-pool baskets with new supply-pool baskets.

        Raises:
            UnauthorizedException: caller is not the operator
            DuplicateBasketException: duplicates, or an output already exists
            InvalidBasketException: an input is not LIVE_SUPPLY
            QuorumNotMetException: too few distinct valid oracle signatures
        """
        with self._transaction("reorg_supply_baskets", caller):
            self._require_operator(caller)
            ins, outs = self._prepare_reorg(baskets_in, baskets_out)
            self._require_supply(ins)
            self._require_fresh(outs)
            signers = self._quorum.require_quorum(reorg_digest(ins, outs), signatures)

            staged = {h: BasketEntry.spent() for h in ins}
            staged.update({h: BasketEntry.live_supply() for h in outs})
            self._apply(staged)

            return self._audit.record(
                ReorgSupplyBasketsEvent,
                caller=caller,
                ref=ref,
                baskets_in=ins,
                baskets_out=outs,
                signers=sorted(signers),
            )

    # =========================================================================
    # Internals
    # =========================================================================

    @contextmanager
    def _transaction(self, operation: str, caller: str) -> Iterator[None]:
        _require_identity(caller, "caller")
        with self._lock:
            try:
                yield
            except LedgerException as e:
                logger.warning(f"{operation} rejected for {caller}: {e.message} [{e.code}]")
                raise
            logger.info(f"{operation} committed for {caller}")

    def _require_operator(self, caller: str) -> None:
        if caller != self.operator:
            raise UnauthorizedException(caller, "operator role required")

    @staticmethod
    def _non_empty(hashes: list[str], field: str) -> list[str]:
        if not hashes:
            raise InvalidBasketException(None, f"{field} is empty")
        return hashes

    def _prepare_reorg(
        self,
        baskets_in: Sequence[str],
        baskets_out: Sequence[str],
    ) -> tuple[list[str], list[str]]:
        ins = self._non_empty(_normalize_batch(baskets_in, "baskets_in"), "baskets_in")
        outs = _normalize_batch(baskets_out, "baskets_out")
        overlap = set(ins).intersection(outs)
        if overlap:
            raise DuplicateBasketException(sorted(overlap)[0], "appears as both input and output")
        return ins, outs

    def _entry(self, basket: str) -> BasketEntry:
        return self._baskets.get(basket, BasketEntry.unknown())

    def _require_supply(self, hashes: Iterable[str]) -> None:
        for h in hashes:
            entry = self._entry(h)
            if entry.state is not BasketState.LIVE_SUPPLY:
                raise InvalidBasketException(h, f"expected live supply basket, found {entry.state.value}")

    def _require_held(self, caller: str, hashes: Iterable[str]) -> None:
        for h in hashes:
            entry = self._entry(h)
            if entry.is_held_by(caller):
                continue
            if entry.state is BasketState.LIVE_HOLDER:
                raise UnauthorizedException(caller, "basket is held by another address", basket=h)
            raise InvalidBasketException(h, f"expected live holder basket, found {entry.state.value}")

    def _require_fresh(self, hashes: Iterable[str]) -> None:
        for h in hashes:
            entry = self._entry(h)
            if entry.state is not BasketState.UNKNOWN:
                raise DuplicateBasketException(h, f"already exists as {entry.state.value}")

    def _apply(self, staged: dict[str, BasketEntry]) -> None:
        for h, target in staged.items():
            current = self._entry(h)
            if not current.can_become(target):
                # Unreachable when the checks above are complete.
                raise InvalidBasketException(
                    h, f"illegal transition {current.state.value} -> {target.state.value}"
                )
        self._baskets.update(staged)
