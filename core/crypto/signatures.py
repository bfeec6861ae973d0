"""
Module 03 - Oracle Signatures
Ed25519 signing and verification of reorg digests.

An oracle is identified by its raw Ed25519 public key (0x hex). Ed25519
has no public-key recovery, so every signature travels together with the
signer's key and the verifier checks the key against the authorized set.
"""
from __future__ import annotations

from pathlib import Path

from cryptography.exceptions import InvalidSignature
from cryptography.hazmat.primitives import serialization
from cryptography.hazmat.primitives.asymmetric.ed25519 import (
    Ed25519PrivateKey,
    Ed25519PublicKey,
)
from pydantic import BaseModel, ConfigDict, Field, field_validator

from core.crypto.hashing import from_hex, to_hex
from core.schemas.errors import SignatureException

PUBLIC_KEY_SIZE = 32
SIGNATURE_SIZE = 64


def normalize_public_key(public_key: str) -> str:
    """
    Validate an Ed25519 public key in 0x hex form and return it lowercased.

    Raises:
        SignatureException: If the value is not a 32-byte 0x hex string.
    """
    try:
        raw = from_hex(public_key.lower())
    except (ValueError, AttributeError) as e:
        raise SignatureException(
            f"Invalid public key encoding: {public_key!r}",
            details={"public_key": str(public_key)},
        ) from e
    if len(raw) != PUBLIC_KEY_SIZE:
        raise SignatureException(
            f"Public key must be {PUBLIC_KEY_SIZE} bytes, got {len(raw)}",
            details={"public_key": public_key},
        )
    return to_hex(raw)


class OracleSignature(BaseModel):
    """A signature over a reorg digest, tagged with the signing oracle."""

    model_config = ConfigDict(frozen=True, extra="forbid")

    signer: str = Field(..., description="Oracle Ed25519 public key (0x hex)")
    signature: str = Field(..., description="Ed25519 signature (0x hex, 64 bytes)")
    scheme: str = Field(default="ed25519")

    @field_validator("signer")
    @classmethod
    def _normalize_signer(cls, v: str) -> str:
        try:
            return normalize_public_key(v)
        except SignatureException as e:
            raise ValueError(e.message) from e

    @field_validator("signature")
    @classmethod
    def _lowercase_signature(cls, v: str) -> str:
        if not v.startswith("0x"):
            raise ValueError("signature must be 0x-prefixed hex")
        return v.lower()


class OracleKeypair:
    """
    Ed25519 signing key held by one oracle instance.

    Usage:
        keypair = OracleKeypair.generate()
        sig = keypair.sign(digest)
        assert verify_signature(digest, sig)
    """

    def __init__(self, private_key: Ed25519PrivateKey) -> None:
        self._private_key = private_key
        self.public_key = to_hex(
            private_key.public_key().public_bytes(
                encoding=serialization.Encoding.Raw,
                format=serialization.PublicFormat.Raw,
            )
        )

    @classmethod
    def generate(cls) -> "OracleKeypair":
        return cls(Ed25519PrivateKey.generate())

    @classmethod
    def from_private_hex(cls, private_hex: str) -> "OracleKeypair":
        """Load from the raw 32-byte private key in 0x hex form."""
        try:
            raw = from_hex(private_hex.strip())
            return cls(Ed25519PrivateKey.from_private_bytes(raw))
        except ValueError as e:
            raise SignatureException(f"Invalid Ed25519 private key: {e}") from e

    @classmethod
    def from_pem(cls, pem: bytes) -> "OracleKeypair":
        try:
            key = serialization.load_pem_private_key(pem, password=None)
        except ValueError as e:
            raise SignatureException(f"Invalid PEM private key: {e}") from e
        if not isinstance(key, Ed25519PrivateKey):
            raise SignatureException(
                f"Expected an Ed25519 private key, got {type(key).__name__}"
            )
        return cls(key)

    @classmethod
    def from_pem_file(cls, path: str | Path) -> "OracleKeypair":
        return cls.from_pem(Path(path).read_bytes())

    def private_key_hex(self) -> str:
        return to_hex(
            self._private_key.private_bytes(
                encoding=serialization.Encoding.Raw,
                format=serialization.PrivateFormat.Raw,
                encryption_algorithm=serialization.NoEncryption(),
            )
        )

    def private_pem(self) -> bytes:
        return self._private_key.private_bytes(
            encoding=serialization.Encoding.PEM,
            format=serialization.PrivateFormat.PKCS8,
            encryption_algorithm=serialization.NoEncryption(),
        )

    def public_pem(self) -> bytes:
        return self._private_key.public_key().public_bytes(
            encoding=serialization.Encoding.PEM,
            format=serialization.PublicFormat.SubjectPublicKeyInfo,
        )

    def sign(self, digest: bytes) -> OracleSignature:
        """Sign a reorg digest."""
        return OracleSignature(
            signer=self.public_key,
            signature=to_hex(self._private_key.sign(digest)),
        )

    def __repr__(self) -> str:
        return f"OracleKeypair(public_key={self.public_key!r})"


def verify_signature(digest: bytes, signature: OracleSignature) -> bool:
    """
    Check an oracle signature over a digest.

    Returns False for malformed or invalid signatures instead of raising, so
    callers can count valid signers without special-casing bad input.
    """
    if signature.scheme != "ed25519":
        return False
    try:
        public_key = Ed25519PublicKey.from_public_bytes(from_hex(signature.signer))
        raw_signature = from_hex(signature.signature)
    except ValueError:
        return False
    if len(raw_signature) != SIGNATURE_SIZE:
        return False
    try:
        public_key.verify(raw_signature, digest)
    except InvalidSignature:
        return False
    return True


__all__ = [
    "OracleKeypair",
    "OracleSignature",
    "normalize_public_key",
    "verify_signature",
]
