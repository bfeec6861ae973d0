"""
Module 05 - Reorg Verifier

The oracle role: check a reorg proposal against its plaintext and, if
value is conserved, sign the reorg digest.

Each call is independent. The verifier keeps nothing between calls except
its signing key, so any number of replicas can run side by side and be
restarted at will.

Checks, in order:
1. No basket hash appears twice, on one side or across both
   (RepeatedBasket otherwise).
2. Every claimed basket hash equals the hash recomputed from its data
   (HashMismatch otherwise).
3. For every token id on either side, the input values sum to the output
   values (ConservationViolation otherwise).
"""

from __future__ import annotations

import logging
from collections import defaultdict
from typing import Iterable

from core.crypto.hashing import to_hex
from core.crypto.signatures import OracleKeypair, OracleSignature
from core.schemas.basket import BasketRecord, ReorgProposal
from core.schemas.errors import (
    ConservationViolationException,
    HashMismatchException,
    OracleException,
    RepeatedBasketException,
)
from core.schemas.verification import CheckResult, VerificationResult

logger = logging.getLogger(__name__)


def find_repeated_basket(proposal: ReorgProposal) -> RepeatedBasketException | None:
    """The first basket hash listed more than once, within or across sides."""
    seen: dict[str, str] = {}
    for side, records in (("in", proposal.baskets_in), ("out", proposal.baskets_out)):
        for record in records:
            if record.basket in seen:
                return RepeatedBasketException(record.basket, [seen[record.basket], side])
            seen[record.basket] = side
    return None


def find_hash_mismatch(proposal: ReorgProposal) -> HashMismatchException | None:
    """The first basket whose data does not hash to its claimed hash."""
    for side, records in (("in", proposal.baskets_in), ("out", proposal.baskets_out)):
        for index, record in enumerate(records):
            computed = record.data.basket_hash()
            if computed != record.basket:
                return HashMismatchException(record.basket, computed, side, index)
    return None


def _totals(records: Iterable[BasketRecord]) -> dict[int, int]:
    totals: dict[int, int] = defaultdict(int)
    for record in records:
        totals[record.data.token_id] += record.data.value
    return totals


def conservation_deltas(proposal: ReorgProposal) -> dict[int, int]:
    """
    Per token id, input total minus output total, for unbalanced ids only.

    A token id present on one side only counts as unbalanced unless its sum
    there is zero.
    """
    totals_in = _totals(proposal.baskets_in)
    totals_out = _totals(proposal.baskets_out)
    deltas = {}
    for token_id in sorted(set(totals_in) | set(totals_out)):
        delta = totals_in.get(token_id, 0) - totals_out.get(token_id, 0)
        if delta != 0:
            deltas[token_id] = delta
    return deltas


class ReorgVerifier:
    """
    Stateless verification and signing of reorg proposals.

    Usage:
        verifier = ReorgVerifier(OracleKeypair.from_private_hex(key_hex))
        signature = verifier.sign(proposal)   # raises on rejection
        report = verifier.evaluate(proposal)  # never raises, lists every check
    """

    _name = "ReorgVerifier"
    _version = "v1"

    def __init__(self, keypair: OracleKeypair) -> None:
        self._keypair = keypair

    @property
    def name(self) -> str:
        return self._name

    @property
    def version(self) -> str:
        return self._version

    @property
    def public_key(self) -> str:
        return self._keypair.public_key

    def verify(self, proposal: ReorgProposal) -> bytes:
        """
        Run every check and return the digest to sign.

        Raises:
            RepeatedBasketException
            HashMismatchException
            ConservationViolationException
        """
        repeated = find_repeated_basket(proposal)
        if repeated is not None:
            raise repeated

        mismatch = find_hash_mismatch(proposal)
        if mismatch is not None:
            raise mismatch

        deltas = conservation_deltas(proposal)
        if deltas:
            raise ConservationViolationException(list(deltas))

        return proposal.digest()

    def sign(self, proposal: ReorgProposal) -> OracleSignature:
        """Verify a proposal and sign its digest."""
        try:
            digest = self.verify(proposal)
        except OracleException as e:
            logger.info(
                f"Rejected reorg ({len(proposal.baskets_in)} in, "
                f"{len(proposal.baskets_out)} out): {e.code}"
            )
            raise
        signature = self._keypair.sign(digest)
        logger.info(
            f"Signed reorg digest {to_hex(digest)} "
            f"({len(proposal.baskets_in)} in, {len(proposal.baskets_out)} out)"
        )
        return signature

    def evaluate(self, proposal: ReorgProposal) -> VerificationResult:
        """Dry run: report every check without signing."""
        result = VerificationResult(ok=True, digest=to_hex(proposal.digest()))

        repeated = find_repeated_basket(proposal)
        if repeated is None:
            result.add_check(CheckResult.passed("distinct", "Every basket is listed once"))
        else:
            result.add_check(CheckResult.failed("distinct", repeated.message, details=repeated.details))

        for side, records in (("in", proposal.baskets_in), ("out", proposal.baskets_out)):
            for index, record in enumerate(records):
                check_id = f"hash_{side}_{index}"
                computed = record.data.basket_hash()
                if computed == record.basket:
                    result.add_check(CheckResult.passed(check_id, f"{side}[{index}] matches its data"))
                else:
                    result.add_check(CheckResult.failed(
                        check_id,
                        f"{side}[{index}] does not match its data",
                        details={"claimed": record.basket, "computed": computed},
                    ))

        deltas = conservation_deltas(proposal)
        if deltas:
            result.add_check(CheckResult.failed(
                "conservation",
                f"Value not conserved for token id(s) {list(deltas)}",
                details={"deltas": {str(k): v for k, v in deltas.items()}},
            ))
        else:
            result.add_check(CheckResult.passed("conservation", "Value conserved for every token id"))

        if not proposal.baskets_out:
            result.add_check(CheckResult.warning("outputs", "Proposal has no output baskets"))

        if not result.ok:
            blocking = (
                repeated
                or find_hash_mismatch(proposal)
                or ConservationViolationException(list(deltas))
            )
            result.error = blocking.to_error_model()
        return result
