"""
Module 09C - CLI Commitment Commands

Compute basket hashes and master-data fingerprints offline.

Usage:
    basket hash --token-id 1 --value 100 [--salt 0x...]
    basket fingerprint master_data.json
    cat master_data.json | basket fingerprint -
"""

from __future__ import annotations

import json
import sys
from argparse import Namespace

from core.crypto.commitment import basket_hash, master_data_fingerprint
from core.schemas.errors import LedgerProtocolException
from holder.proposal import new_salt


EXIT_SUCCESS = 0
EXIT_RUNTIME_ERROR = 1


def hash_cmd(args: Namespace) -> int:
    """Handle hash command. A random salt is drawn when none is given."""
    salt = args.salt or new_salt()
    try:
        basket = basket_hash(salt, args.token_id, args.value)
    except LedgerProtocolException as e:
        print(f"Error: {e.message}", file=sys.stderr)
        return EXIT_RUNTIME_ERROR

    print(json.dumps({
        "basket": basket,
        "data": {"salt": salt.lower(), "tokenId": args.token_id, "value": args.value},
    }, indent=2))
    return EXIT_SUCCESS


def fingerprint_cmd(args: Namespace) -> int:
    """Handle fingerprint command."""
    try:
        if args.file == "-":
            payload = json.load(sys.stdin)
        else:
            with open(args.file) as f:
                payload = json.load(f)
    except (OSError, json.JSONDecodeError) as e:
        print(f"Error reading {args.file}: {e}", file=sys.stderr)
        return EXIT_RUNTIME_ERROR

    try:
        fingerprint = master_data_fingerprint(payload)
    except LedgerProtocolException as e:
        print(f"Error: {e.message}", file=sys.stderr)
        return EXIT_RUNTIME_ERROR

    print(fingerprint)
    return EXIT_SUCCESS
