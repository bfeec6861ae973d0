"""
CLI command modules.
"""

from basket_cli.commands import commitments, keys, reorg, serve

__all__ = ["commitments", "keys", "reorg", "serve"]
