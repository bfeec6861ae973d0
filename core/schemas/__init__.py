"""
Module 01 - Schemas & Canonicalization
File: __init__.py

Purpose: Export the public API for the schemas module.
This is the main entry point for other modules to import schema definitions.
"""

# Canonical serialization API
from .canonical import (
    CANONICAL_JSON_SEPARATORS,
    canonical_equals,
    canonicalize_value,
    dumps_canonical,
    format_datetime_canonical,
    loads_canonical,
)

# Error models and exceptions
from .errors import (
    BasketError,
    BasketNotFoundException,
    CanonicalizationException,
    ConservationViolationException,
    DuplicateBasketException,
    DuplicateTokenException,
    ErrorCodes,
    FingerprintMismatchException,
    HashMismatchException,
    InvalidBasketException,
    LedgerException,
    LedgerProtocolException,
    OracleException,
    OracleUnavailableException,
    QuorumNotMetException,
    RepeatedBasketException,
    SchemaValidationException,
    SignatureException,
    StaleRevisionException,
    UnauthorizedException,
    UnknownTokenException,
)

# Basket wire models
from .basket import (
    BasketData,
    BasketRecord,
    ReorgProposal,
)

# Verification results
from .verification import (
    CheckResult,
    VerificationResult,
)

# Audit events
from .events import (
    AuditEvent,
    BurnEvent,
    CreateTokenEvent,
    LedgerEvent,
    MintEvent,
    ReorgHolderBasketsEvent,
    ReorgSupplyBasketsEvent,
    TransferEvent,
    UpdateMasterDataEvent,
    touched_baskets,
)

__all__ = [
    # Canonical
    "CANONICAL_JSON_SEPARATORS",
    "canonical_equals",
    "canonicalize_value",
    "dumps_canonical",
    "format_datetime_canonical",
    "loads_canonical",
    # Errors
    "BasketError",
    "BasketNotFoundException",
    "CanonicalizationException",
    "ConservationViolationException",
    "DuplicateBasketException",
    "DuplicateTokenException",
    "ErrorCodes",
    "FingerprintMismatchException",
    "HashMismatchException",
    "InvalidBasketException",
    "LedgerException",
    "LedgerProtocolException",
    "OracleException",
    "OracleUnavailableException",
    "QuorumNotMetException",
    "RepeatedBasketException",
    "SchemaValidationException",
    "SignatureException",
    "StaleRevisionException",
    "UnauthorizedException",
    "UnknownTokenException",
    # Baskets
    "BasketData",
    "BasketRecord",
    "ReorgProposal",
    # Verification
    "CheckResult",
    "VerificationResult",
    # Events
    "AuditEvent",
    "BurnEvent",
    "CreateTokenEvent",
    "LedgerEvent",
    "MintEvent",
    "ReorgHolderBasketsEvent",
    "ReorgSupplyBasketsEvent",
    "TransferEvent",
    "UpdateMasterDataEvent",
    "touched_baskets",
]
