"""
Module 09C - Basket CLI

Command-line tools for basket oracles and holders.

Usage:
    python -m basket_cli keygen --out ./keys
    python -m basket_cli hash --token-id 1 --value 100
    python -m basket_cli fingerprint master_data.json
    python -m basket_cli sign-reorg proposal.json
    python -m basket_cli serve --port 8080
"""

__version__ = "0.1.0"
