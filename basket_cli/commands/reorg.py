"""
Module 09C - CLI Sign-Reorg Command

Run the oracle verifier on a proposal file with the configured key.

Usage:
    basket sign-reorg proposal.json [--evaluate] [--json]

Exit codes:
    0 - signed (or every check passed with --evaluate)
    1 - runtime error (no key, unreadable file, malformed proposal)
    2 - proposal rejected
"""

from __future__ import annotations

import json
import logging
import sys
from argparse import Namespace

from pydantic import ValidationError

from core.crypto.hashing import to_hex
from core.schemas.basket import ReorgProposal
from core.schemas.errors import LedgerProtocolException, OracleException
from oracle.verifier import ReorgVerifier


logger = logging.getLogger(__name__)

EXIT_SUCCESS = 0
EXIT_RUNTIME_ERROR = 1
EXIT_VERIFICATION_FAILED = 2


def load_proposal(path: str) -> ReorgProposal:
    """Read a proposal in wire format ({in: [...], out: [...]})."""
    if path == "-":
        return ReorgProposal.model_validate(json.load(sys.stdin))
    with open(path) as f:
        return ReorgProposal.model_validate(json.load(f))


def sign_reorg_cmd(args: Namespace) -> int:
    """Handle sign-reorg command."""
    config = args.runtime_config
    try:
        keypair = config.oracle.load_keypair()
    except (OSError, ValueError, LedgerProtocolException) as e:
        print(f"Error loading oracle key: {e}", file=sys.stderr)
        return EXIT_RUNTIME_ERROR
    if keypair is None:
        print(
            "Error: No oracle key configured (set BASKET_ORACLE_PRIVATE_KEY "
            "or oracle.private_key_path)",
            file=sys.stderr,
        )
        return EXIT_RUNTIME_ERROR

    try:
        proposal = load_proposal(args.file)
    except (OSError, json.JSONDecodeError, ValidationError) as e:
        print(f"Error reading proposal {args.file}: {e}", file=sys.stderr)
        return EXIT_RUNTIME_ERROR

    verifier = ReorgVerifier(keypair)

    if args.evaluate:
        result = verifier.evaluate(proposal)
        if args.json:
            print(result.model_dump_json(indent=2))
        else:
            for check in result.checks:
                marker = "ok" if check.ok else check.severity
                print(f"[{marker}] {check.check_id}: {check.message}")
            print(f"digest: {result.digest}")
        return EXIT_SUCCESS if result.ok else EXIT_VERIFICATION_FAILED

    try:
        signature = verifier.sign(proposal)
    except OracleException as e:
        if args.json:
            print(json.dumps({"ok": False, "error": e.to_error_model().model_dump()}, indent=2))
        else:
            print(f"Rejected: {e.code}: {e.message}", file=sys.stderr)
        return EXIT_VERIFICATION_FAILED

    output = {
        "signature": signature.signature,
        "signer": signature.signer,
        "digest": to_hex(proposal.digest()),
    }
    print(json.dumps(output, indent=2))
    return EXIT_SUCCESS
