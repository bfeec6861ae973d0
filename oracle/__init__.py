"""
Oracle Module

Stateless reorg verification and signing, run independently by each oracle.
"""

from .verifier import ReorgVerifier, conservation_deltas, find_hash_mismatch

__all__ = [
    "ReorgVerifier",
    "conservation_deltas",
    "find_hash_mismatch",
]
