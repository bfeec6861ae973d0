"""
Test fixtures package for basket ledger tests.

This package provides factory functions for creating test objects.

Usage:
    from fixtures.common import make_ledger_with_token, make_record

    def test_something():
        ledger, keypairs, supply = make_ledger_with_token(total_supply=100)
"""

from .common import (
    OPERATOR,
    make_keypair,
    make_keypairs,
    make_ledger,
    make_ledger_with_token,
    make_master_data,
    make_proposal,
    make_quorum_config,
    make_record,
    make_salt,
    make_verifiers,
    sign_reorg,
)

__all__ = [
    "OPERATOR",
    "make_keypair",
    "make_keypairs",
    "make_ledger",
    "make_ledger_with_token",
    "make_master_data",
    "make_proposal",
    "make_quorum_config",
    "make_record",
    "make_salt",
    "make_verifiers",
    "sign_reorg",
]
