"""
Core Ledger Module

Commitment ledger state machine, oracle quorum configuration and audit log.
"""

from .state import BasketEntry, BasketState, TokenRecord
from .quorum import OracleQuorumConfig
from .audit import AuditLog
from .ledger import CommitmentLedger

__all__ = [
    "BasketEntry",
    "BasketState",
    "TokenRecord",
    "OracleQuorumConfig",
    "AuditLog",
    "CommitmentLedger",
]
