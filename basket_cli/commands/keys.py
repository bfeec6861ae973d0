"""
Module 09C - CLI Keygen Command

Generate an Ed25519 oracle keypair.

Usage:
    basket keygen                 # print keys as JSON
    basket keygen --out ./keys    # write oracle.pem / oracle.pub.pem
"""

from __future__ import annotations

import json
import logging
import os
import sys
from argparse import Namespace
from pathlib import Path

from core.crypto.signatures import OracleKeypair


logger = logging.getLogger(__name__)

EXIT_SUCCESS = 0
EXIT_RUNTIME_ERROR = 1

PRIVATE_KEY_FILE = "oracle.pem"
PUBLIC_KEY_FILE = "oracle.pub.pem"


def keygen_cmd(args: Namespace) -> int:
    """Handle keygen command."""
    keypair = OracleKeypair.generate()

    if args.out is None:
        print(json.dumps({
            "public_key": keypair.public_key,
            "private_key": keypair.private_key_hex(),
        }, indent=2))
        return EXIT_SUCCESS

    out_dir = Path(args.out)
    out_dir.mkdir(parents=True, exist_ok=True)
    private_path = out_dir / PRIVATE_KEY_FILE
    if private_path.exists() and not args.force:
        print(f"Error: Key file already exists: {private_path} (use --force)", file=sys.stderr)
        return EXIT_RUNTIME_ERROR

    private_path.write_bytes(keypair.private_pem())
    os.chmod(private_path, 0o600)
    (out_dir / PUBLIC_KEY_FILE).write_bytes(keypair.public_pem())
    logger.info(f"Wrote oracle key to {private_path}")

    print(json.dumps({
        "public_key": keypair.public_key,
        "private_key_path": str(private_path),
    }, indent=2))
    return EXIT_SUCCESS
