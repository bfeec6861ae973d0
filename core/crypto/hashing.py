"""
Module 02 - Hashing Utilities
Basic hashing, fixed-width integer encoding and hex helpers.

This module provides:
- SHA-256 hashing for raw bytes
- Canonical hashing for structured payloads (via dumps_canonical)
- uint256 big-endian encoding
- Hex encoding/decoding with 0x prefix

Security/Determinism Notes:
- Always hash raw bytes exactly as specified
- Every hash that crosses a component boundary is 0x-prefixed lowercase hex
"""
from __future__ import annotations

import hashlib
from typing import Any

from core.schemas.canonical import dumps_canonical
from core.schemas.errors import SchemaValidationException

HASH_SIZE = 32
UINT256_MAX = 2**256 - 1


def sha256(data: bytes) -> bytes:
    """
    Compute SHA-256 hash of raw bytes.

    Example:
        >>> sha256(b"hello").hex()
        '2cf24dba5fb0a30e26e83b2ac5b9e29e1b161e5c1fa7425e73043362938b9824'
    """
    return hashlib.sha256(data).digest()


def hash_canonical(obj: Any) -> bytes:
    """
    Hash an object using canonical JSON serialization.

    Rule: sha256(dumps_canonical(obj).encode("utf-8"))

    Raises:
        CanonicalizationException: If the object cannot be canonically serialized
    """
    return sha256(dumps_canonical(obj).encode("utf-8"))


def encode_uint256(value: int, field: str = "value") -> bytes:
    """
    Encode a non-negative integer as 32 big-endian bytes.

    Raises:
        SchemaValidationException: If value is not an int in [0, 2**256).
    """
    if isinstance(value, bool) or not isinstance(value, int):
        raise SchemaValidationException(
            f"{field} must be an integer, got {type(value).__name__}",
            field_path=field,
        )
    if value < 0 or value > UINT256_MAX:
        raise SchemaValidationException(
            f"{field} out of uint256 range: {value}",
            field_path=field,
        )
    return value.to_bytes(HASH_SIZE, "big")


def to_hex(data: bytes) -> str:
    """
    Convert bytes to hexadecimal string with 0x prefix.

    Example:
        >>> to_hex(bytes.fromhex("deadbeef"))
        '0xdeadbeef'
    """
    return "0x" + data.hex()


def from_hex(hex_string: str) -> bytes:
    """
    Convert hexadecimal string (with 0x prefix) to bytes.

    Raises:
        ValueError: If string doesn't start with 0x, has odd length,
                   or contains invalid hex characters
    """
    if not hex_string.startswith("0x"):
        raise ValueError(
            f"Hex string must start with '0x' prefix, got: {hex_string[:10]}..."
        )

    hex_content = hex_string[2:]
    if len(hex_content) % 2 != 0:
        raise ValueError(
            f"Hex string must have even length after 0x prefix, "
            f"got length {len(hex_content)}"
        )

    try:
        return bytes.fromhex(hex_content)
    except ValueError as e:
        raise ValueError(f"Invalid hex characters in string: {e}") from e


def normalize_hash(value: str, field: str = "hash") -> str:
    """
    Validate a 32-byte hash in 0x hex form and return it lowercased.

    Raises:
        SchemaValidationException: If the value is not a 32-byte 0x hex string.
    """
    if not isinstance(value, str):
        raise SchemaValidationException(
            f"{field} must be a 0x-prefixed hex string", field_path=field
        )
    try:
        raw = from_hex(value.lower())
    except ValueError as e:
        raise SchemaValidationException(str(e), field_path=field) from e
    if len(raw) != HASH_SIZE:
        raise SchemaValidationException(
            f"{field} must be {HASH_SIZE} bytes, got {len(raw)}", field_path=field
        )
    return to_hex(raw)


__all__ = [
    "HASH_SIZE",
    "UINT256_MAX",
    "sha256",
    "hash_canonical",
    "encode_uint256",
    "to_hex",
    "from_hex",
    "normalize_hash",
]
