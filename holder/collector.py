"""
Signature Collection

Fan a reorg proposal out to every configured oracle in parallel and gather
signatures until the quorum threshold is reached.

Each returned signature is checked locally against the quorum
configuration before it counts, so a misbehaving oracle cannot make the
holder submit a transaction the ledger will reject. Outstanding requests
are cancelled once enough signatures are in.
"""

from __future__ import annotations

import concurrent.futures
import logging
from typing import Optional, Sequence

from core.crypto.hashing import to_hex
from core.crypto.signatures import OracleSignature, verify_signature
from core.http import HttpError
from core.ledger.quorum import OracleQuorumConfig
from core.schemas.basket import ReorgProposal
from core.schemas.errors import LedgerProtocolException, QuorumNotMetException

from .clients import OracleClient

logger = logging.getLogger(__name__)


def collect_signatures(
    proposal: ReorgProposal,
    clients: Sequence[OracleClient],
    quorum_config: OracleQuorumConfig,
    timeout: Optional[float] = None,
) -> list[OracleSignature]:
    """
    Collect distinct valid oracle signatures over the proposal's digest.

    Args:
        proposal: The reorg to have signed
        clients: One client per oracle
        quorum_config: Authorized signers and threshold the ledger will apply
        timeout: Overall wall-clock limit in seconds (None waits for all)

    Returns:
        At least min_number_of_oracles signatures from distinct authorized
        signers, in arrival order

    Raises:
        QuorumNotMetException: with per-oracle failures in details["failures"]
    """
    digest = proposal.digest()
    required = quorum_config.min_number_of_oracles
    signatures: list[OracleSignature] = []
    signers: set[str] = set()
    failures: dict[str, str] = {}

    executor = concurrent.futures.ThreadPoolExecutor(
        max_workers=max(1, len(clients)),
        thread_name_prefix="oracle",
    )
    futures = {executor.submit(client.request_signature, proposal): client for client in clients}

    try:
        for future in concurrent.futures.as_completed(futures, timeout=timeout):
            client = futures[future]
            try:
                signature = future.result()
            except LedgerProtocolException as e:
                logger.warning(f"Oracle {client.name} declined: {e.code}: {e.message}")
                failures[client.name] = e.code
                continue
            except (HttpError, ValueError, KeyError) as e:
                logger.warning(f"Oracle {client.name} returned an unusable response: {e}")
                failures[client.name] = f"bad response: {e}"
                continue
            except Exception as e:
                # One broken client must not end the round for the others.
                logger.exception(f"Oracle client {client.name} failed unexpectedly")
                failures[client.name] = f"client error: {type(e).__name__}: {e}"
                continue

            if signature.signer in signers:
                continue
            if not quorum_config.is_authorized(signature.signer):
                logger.warning(f"Oracle {client.name} signed as unauthorized key {signature.signer}")
                failures[client.name] = "unauthorized signer"
                continue
            if not verify_signature(digest, signature):
                logger.warning(f"Oracle {client.name} returned an invalid signature")
                failures[client.name] = "invalid signature"
                continue

            signatures.append(signature)
            signers.add(signature.signer)
            if len(signers) >= required:
                break
    except concurrent.futures.TimeoutError:
        for future, client in futures.items():
            if not future.done():
                logger.warning(f"Oracle {client.name} timed out after {timeout}s")
                failures[client.name] = "timed out"
    finally:
        for future in futures:
            future.cancel()
        executor.shutdown(wait=False, cancel_futures=True)

    if len(signers) < required:
        raise QuorumNotMetException(
            valid=len(signers),
            required=required,
            details={"digest": to_hex(digest), "failures": failures},
        )

    logger.info(f"Collected {len(signers)}/{len(clients)} oracle signature(s) for {to_hex(digest)}")
    return signatures
