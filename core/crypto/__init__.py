"""
Core cryptographic utilities.

Module 02 provides hashing, basket commitments and fingerprints.
Module 03 provides oracle signatures.
"""
from .hashing import (
    sha256,
    hash_canonical,
    encode_uint256,
    to_hex,
    from_hex,
    normalize_hash,
)
from .commitment import (
    basket_hash,
    master_data_fingerprint,
    reorg_digest,
)
from .signatures import (
    OracleKeypair,
    OracleSignature,
    normalize_public_key,
    verify_signature,
)

__all__ = [
    "sha256",
    "hash_canonical",
    "encode_uint256",
    "to_hex",
    "from_hex",
    "normalize_hash",
    "basket_hash",
    "master_data_fingerprint",
    "reorg_digest",
    "OracleKeypair",
    "OracleSignature",
    "normalize_public_key",
    "verify_signature",
]
