"""
Module 01 - Schemas & Canonicalization
File: errors.py

Purpose: Error taxonomy shared by the ledger, the oracle verifier and the
holder-side collaborators. Defines both a Pydantic model for structured error
communication (API bodies, logs) and Python exceptions for control flow.
"""

from typing import Any

from pydantic import BaseModel, ConfigDict, Field


# =============================================================================
# Error Codes (Machine-Readable Constants)
# =============================================================================

class ErrorCodes:
    """Stable machine-readable error codes."""

    # Schema & Encoding Errors
    SCHEMA_VALIDATION_ERROR = "SCHEMA_VALIDATION_ERROR"
    CANONICALIZATION_ERROR = "CANONICALIZATION_ERROR"
    FINGERPRINT_MISMATCH = "FINGERPRINT_MISMATCH"
    SIGNATURE_INVALID = "SIGNATURE_INVALID"

    # Ledger Errors
    UNKNOWN_TOKEN = "UNKNOWN_TOKEN"
    DUPLICATE_TOKEN = "DUPLICATE_TOKEN"
    DUPLICATE_BASKET = "DUPLICATE_BASKET"
    INVALID_BASKET = "INVALID_BASKET"
    UNAUTHORIZED = "UNAUTHORIZED"
    STALE_REVISION = "STALE_REVISION"
    QUORUM_NOT_MET = "QUORUM_NOT_MET"

    # Oracle Errors
    HASH_MISMATCH = "HASH_MISMATCH"
    CONSERVATION_VIOLATION = "CONSERVATION_VIOLATION"

    # Collaborator Errors
    BASKET_NOT_FOUND = "BASKET_NOT_FOUND"
    ORACLE_UNAVAILABLE = "ORACLE_UNAVAILABLE"


# =============================================================================
# Pydantic Error Model (Structured Communication)
# =============================================================================

class BasketError(BaseModel):
    """
    Structured error passed between components without raising.

    Oracle rejections collected during a signature round are kept in this
    form so the caller can report every failure at once.
    """

    model_config = ConfigDict(extra="forbid")

    code: str = Field(
        ...,
        description="Stable machine-readable error code",
        examples=[ErrorCodes.INVALID_BASKET],
    )
    message: str = Field(
        ...,
        description="Human-readable error message",
    )
    details: dict[str, Any] = Field(
        default_factory=dict,
        description="Additional structured details about the error",
    )
    retryable: bool = Field(
        default=False,
        description="Whether the operation can be retried as-is",
    )

    def to_exception(self) -> "LedgerProtocolException":
        """Convert this error model to a raisable exception."""
        return LedgerProtocolException(
            code=self.code,
            message=self.message,
            details=self.details,
            retryable=self.retryable,
        )


# =============================================================================
# Python Exceptions (Control Flow)
# =============================================================================

class LedgerProtocolException(Exception):
    """
    Base exception for every error raised by this package.

    Carries a stable code plus structured details and converts to/from
    BasketError.
    """

    code: str = "PROTOCOL_ERROR"

    def __init__(
        self,
        message: str,
        code: str | None = None,
        details: dict[str, Any] | None = None,
        retryable: bool = False,
    ) -> None:
        super().__init__(message)
        if code is not None:
            self.code = code
        self.message = message
        self.details = details or {}
        self.retryable = retryable

    def to_error_model(self) -> BasketError:
        """Convert this exception to a BasketError model."""
        return BasketError(
            code=self.code,
            message=self.message,
            details=self.details,
            retryable=self.retryable,
        )

    def __repr__(self) -> str:
        return f"{self.__class__.__name__}(code={self.code!r}, message={self.message!r})"


class CanonicalizationException(LedgerProtocolException):
    """Raised when a payload cannot be serialized canonically."""

    code = ErrorCodes.CANONICALIZATION_ERROR


class SchemaValidationException(LedgerProtocolException):
    """Raised when an input is structurally invalid (bad hex, out-of-range ints)."""

    code = ErrorCodes.SCHEMA_VALIDATION_ERROR

    def __init__(
        self,
        message: str,
        field_path: str | None = None,
        details: dict[str, Any] | None = None,
    ) -> None:
        full_details = details or {}
        if field_path:
            full_details["field_path"] = field_path
        super().__init__(message, details=full_details)


class SignatureException(LedgerProtocolException):
    """Raised when a key or signature cannot be decoded."""

    code = ErrorCodes.SIGNATURE_INVALID


class FingerprintMismatchException(LedgerProtocolException):
    """
    Raised when a published fingerprint does not match its payload.

    This always indicates diverging canonicalization between producer and
    consumer, never a business error.
    """

    code = ErrorCodes.FINGERPRINT_MISMATCH


# -----------------------------------------------------------------------------
# Ledger
# -----------------------------------------------------------------------------

class LedgerException(LedgerProtocolException):
    """Base class for ledger rejections. The ledger state is unchanged."""


class UnknownTokenException(LedgerException):
    code = ErrorCodes.UNKNOWN_TOKEN

    def __init__(self, token_id: int) -> None:
        super().__init__(
            f"Token {token_id} is not registered",
            details={"token_id": token_id},
        )


class DuplicateTokenException(LedgerException):
    code = ErrorCodes.DUPLICATE_TOKEN

    def __init__(self, token_id: int) -> None:
        super().__init__(
            f"Token {token_id} is already registered",
            details={"token_id": token_id},
        )


class DuplicateBasketException(LedgerException):
    code = ErrorCodes.DUPLICATE_BASKET

    def __init__(self, basket: str, reason: str = "basket already exists") -> None:
        super().__init__(
            f"Duplicate basket {basket}: {reason}",
            details={"basket": basket, "reason": reason},
        )


class InvalidBasketException(LedgerException):
    code = ErrorCodes.INVALID_BASKET

    def __init__(self, basket: str | None, reason: str) -> None:
        details: dict[str, Any] = {"reason": reason}
        if basket is not None:
            details["basket"] = basket
        super().__init__(
            f"Invalid basket {basket}: {reason}" if basket else f"Invalid baskets: {reason}",
            details=details,
        )


class UnauthorizedException(LedgerException):
    code = ErrorCodes.UNAUTHORIZED

    def __init__(self, caller: str, reason: str, basket: str | None = None) -> None:
        details: dict[str, Any] = {"caller": caller, "reason": reason}
        if basket is not None:
            details["basket"] = basket
        super().__init__(f"Caller {caller!r} is not authorized: {reason}", details=details)


class StaleRevisionException(LedgerException):
    """Master-data compare-and-swap failed; re-read and resubmit."""

    code = ErrorCodes.STALE_REVISION

    def __init__(
        self,
        token_id: int,
        expected: tuple[int, str],
        actual: tuple[int, str],
    ) -> None:
        super().__init__(
            f"Stale master data for token {token_id}: "
            f"submitted revision {expected[0]}, current revision {actual[0]}",
            details={
                "token_id": token_id,
                "from_revision": expected[0],
                "from_fp": expected[1],
                "current_revision": actual[0],
                "current_fp": actual[1],
            },
            retryable=True,
        )


class QuorumNotMetException(LedgerException):
    code = ErrorCodes.QUORUM_NOT_MET

    def __init__(
        self,
        valid: int,
        required: int,
        details: dict[str, Any] | None = None,
    ) -> None:
        full_details = dict(details or {})
        full_details.update({"valid_signers": valid, "required": required})
        super().__init__(
            f"Quorum not met: {valid} distinct valid oracle signature(s), {required} required",
            details=full_details,
        )


# -----------------------------------------------------------------------------
# Oracle
# -----------------------------------------------------------------------------

class OracleException(LedgerProtocolException):
    """Base class for oracle rejections. Nothing is retained after raising."""


class RepeatedBasketException(OracleException):
    """A proposal lists the same basket hash twice; its totals would count it twice."""

    code = ErrorCodes.DUPLICATE_BASKET

    def __init__(self, basket: str, sides: list[str]) -> None:
        super().__init__(
            f"Basket {basket} appears more than once in the proposal ({', '.join(sides)})",
            details={"basket": basket, "sides": sides},
        )


class HashMismatchException(OracleException):
    code = ErrorCodes.HASH_MISMATCH

    def __init__(self, claimed: str, computed: str, side: str, index: int) -> None:
        super().__init__(
            f"Basket {side}[{index}] does not match its data: "
            f"claimed {claimed}, computed {computed}",
            details={"side": side, "index": index, "claimed": claimed, "computed": computed},
        )


class ConservationViolationException(OracleException):
    code = ErrorCodes.CONSERVATION_VIOLATION

    def __init__(self, token_ids: list[int]) -> None:
        super().__init__(
            f"Value not conserved for token id(s) {token_ids}",
            details={"token_ids": token_ids},
        )


# -----------------------------------------------------------------------------
# Holder-side collaborators
# -----------------------------------------------------------------------------

class BasketNotFoundException(LedgerProtocolException):
    code = ErrorCodes.BASKET_NOT_FOUND

    def __init__(self, basket: str) -> None:
        super().__init__(
            f"No plaintext data available for basket {basket}",
            details={"basket": basket},
        )


class OracleUnavailableException(LedgerProtocolException):
    code = ErrorCodes.ORACLE_UNAVAILABLE

    def __init__(self, oracle: str, reason: str) -> None:
        super().__init__(
            f"Oracle {oracle} unavailable: {reason}",
            details={"oracle": oracle, "reason": reason},
            retryable=True,
        )
