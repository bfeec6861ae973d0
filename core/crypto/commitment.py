"""
Module 02 - Basket Commitments
Basket hashes, master-data fingerprints and the reorg digest.

These three functions are shared by the ledger, every oracle and every
holder. Their outputs must match bit-exactly across implementations:

    basket_hash   = sha256(salt[32] || uint256(token_id) || uint256(value))
    fingerprint   = sha256(canonical_json(payload))
    reorg_digest  = sha256(uint256(len(in)) || in... || uint256(len(out)) || out...)
"""
from __future__ import annotations

from typing import Any, Sequence

from core.crypto.hashing import (
    HASH_SIZE,
    encode_uint256,
    from_hex,
    hash_canonical,
    sha256,
    to_hex,
)
from core.schemas.errors import SchemaValidationException

SALT_SIZE = 32


def _salt_bytes(salt: bytes | str) -> bytes:
    if isinstance(salt, str):
        try:
            salt = from_hex(salt.lower())
        except ValueError as e:
            raise SchemaValidationException(str(e), field_path="salt") from e
    if not isinstance(salt, (bytes, bytearray)) or len(salt) != SALT_SIZE:
        raise SchemaValidationException(
            f"salt must be exactly {SALT_SIZE} bytes", field_path="salt"
        )
    return bytes(salt)


def basket_hash(salt: bytes | str, token_id: int, value: int) -> str:
    """
    Compute the commitment hash of a basket.

    Args:
        salt: 32 random bytes, raw or as 0x hex
        token_id: Fungibility class (uint256)
        value: Non-negative amount (uint256)

    Returns:
        0x-prefixed hex basket hash

    Raises:
        SchemaValidationException: On malformed salt or out-of-range integers.
    """
    preimage = (
        _salt_bytes(salt)
        + encode_uint256(token_id, "token_id")
        + encode_uint256(value, "value")
    )
    return to_hex(sha256(preimage))


def master_data_fingerprint(payload: Any) -> str:
    """
    Fingerprint an arbitrary master-data payload.

    Keys are sorted recursively and whitespace removed before hashing, so
    dict insertion order never affects the result.
    """
    return to_hex(hash_canonical(payload))


def reorg_digest(baskets_in: Sequence[str], baskets_out: Sequence[str]) -> bytes:
    """
    Compute the canonical digest oracles sign and the ledger verifies.

    Order of both sequences is significant. Each side is length-prefixed so
    moving a hash from one side to the other always changes the digest.
    """
    parts = [encode_uint256(len(baskets_in), "len(baskets_in)")]
    parts.extend(_hash_bytes(h, "baskets_in") for h in baskets_in)
    parts.append(encode_uint256(len(baskets_out), "len(baskets_out)"))
    parts.extend(_hash_bytes(h, "baskets_out") for h in baskets_out)
    return sha256(b"".join(parts))


def _hash_bytes(value: str, field: str) -> bytes:
    try:
        raw = from_hex(value.lower())
    except (ValueError, AttributeError) as e:
        raise SchemaValidationException(f"Invalid basket hash: {value!r}", field_path=field) from e
    if len(raw) != HASH_SIZE:
        raise SchemaValidationException(
            f"Basket hash must be {HASH_SIZE} bytes, got {len(raw)}", field_path=field
        )
    return raw


__all__ = [
    "SALT_SIZE",
    "basket_hash",
    "master_data_fingerprint",
    "reorg_digest",
]
