"""
Common test fixtures shared by all modules.

Provides factory functions for the core ledger data structures:
- Oracle keypairs and quorum configurations
- Basket records with deterministic salts
- Ledgers with a registered token
- Oracle signature sets over a reorg

Keys and salts are derived from small integers so failures are reproducible.
"""

import itertools
from typing import Any, Optional, Sequence

from core.crypto.commitment import master_data_fingerprint, reorg_digest
from core.crypto.signatures import OracleKeypair, OracleSignature
from core.ledger import CommitmentLedger, OracleQuorumConfig
from core.schemas.basket import BasketData, BasketRecord, ReorgProposal
from oracle.verifier import ReorgVerifier


OPERATOR = "issuer"


# =============================================================================
# Oracle Factories
# =============================================================================

def make_keypair(index: int = 0) -> OracleKeypair:
    """Deterministic Ed25519 keypair; any 32 bytes are a valid seed."""
    return OracleKeypair.from_private_hex("0x" + f"{index + 1:064x}")


def make_keypairs(count: int = 3, offset: int = 0) -> list[OracleKeypair]:
    return [make_keypair(offset + i) for i in range(count)]


def make_quorum_config(
    keypairs: Sequence[OracleKeypair],
    min_number_of_oracles: int = 2,
) -> OracleQuorumConfig:
    return OracleQuorumConfig(
        min_number_of_oracles=min_number_of_oracles,
        oracles=[kp.public_key for kp in keypairs],
    )


def make_verifiers(keypairs: Sequence[OracleKeypair]) -> list[ReorgVerifier]:
    return [ReorgVerifier(kp) for kp in keypairs]


def sign_reorg(
    keypairs: Sequence[OracleKeypair],
    baskets_in: Sequence[str],
    baskets_out: Sequence[str],
) -> list[OracleSignature]:
    """Sign the reorg digest directly, bypassing conservation checks."""
    digest = reorg_digest(baskets_in, baskets_out)
    return [kp.sign(digest) for kp in keypairs]


# =============================================================================
# Basket Factories
# =============================================================================

def make_salt(seed: int) -> str:
    return "0x" + f"{seed:064x}"


_salt_seeds = itertools.count(1001)


def make_record(
    token_id: int = 1,
    value: int = 100,
    salt: Optional[str] = None,
) -> BasketRecord:
    """BasketRecord with a unique deterministic salt unless one is given."""
    if salt is None:
        salt = make_salt(next(_salt_seeds))
    return BasketRecord.from_data(BasketData(salt=salt, token_id=token_id, value=value))


def make_proposal(
    baskets_in: Sequence[BasketRecord],
    baskets_out: Sequence[BasketRecord] = (),
) -> ReorgProposal:
    return ReorgProposal(baskets_in=list(baskets_in), baskets_out=list(baskets_out))


def make_master_data(token_id: int = 1, revision: int = 1, **extra: Any) -> dict[str, Any]:
    data: dict[str, Any] = {
        "salt": make_salt(9000 + revision),
        "tokenId": token_id,
        "revision": revision,
        "name": "Basket Token",
        "decimals": 2,
    }
    data.update(extra)
    return data


# =============================================================================
# Ledger Factories
# =============================================================================

def make_ledger(
    oracle_count: int = 3,
    min_number_of_oracles: int = 2,
    operator: str = OPERATOR,
) -> tuple[CommitmentLedger, list[OracleKeypair]]:
    keypairs = make_keypairs(oracle_count)
    ledger = CommitmentLedger(
        operator=operator,
        quorum_config=make_quorum_config(keypairs, min_number_of_oracles),
    )
    return ledger, keypairs


def make_ledger_with_token(
    token_id: int = 1,
    total_supply: int = 100,
    oracle_count: int = 3,
    min_number_of_oracles: int = 2,
) -> tuple[CommitmentLedger, list[OracleKeypair], BasketRecord]:
    """Ledger with one token whose total-supply basket is in the supply pool."""
    ledger, keypairs = make_ledger(oracle_count, min_number_of_oracles)
    supply = make_record(token_id=token_id, value=total_supply)
    ledger.create_token(
        OPERATOR,
        token_id,
        supply.basket,
        master_data_fingerprint(make_master_data(token_id)),
        ref="create",
    )
    return ledger, keypairs, supply
