"""
Holder Module

Everything a basket holder runs off-ledger: plaintext storage, master-data
history, proposal building, oracle fan-out and ledger submission.
"""

from .clients import HttpOracleClient, LocalOracleClient, OracleClient
from .collector import collect_signatures
from .coordinator import ReorgCoordinator
from .master_data import MasterDataEntry, MasterDataHistory, verify_history
from .proposal import build_proposal, merge_baskets, new_basket, new_salt, split_basket
from .store import BasketDataStore, HttpBasketStore, InMemoryBasketStore

__all__ = [
    # Oracle access
    "HttpOracleClient",
    "LocalOracleClient",
    "OracleClient",
    "collect_signatures",
    "ReorgCoordinator",
    # Master data
    "MasterDataEntry",
    "MasterDataHistory",
    "verify_history",
    # Proposals
    "build_proposal",
    "merge_baskets",
    "new_basket",
    "new_salt",
    "split_basket",
    # Storage
    "BasketDataStore",
    "HttpBasketStore",
    "InMemoryBasketStore",
]
