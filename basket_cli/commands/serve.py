"""
Module 09C - CLI Serve Command

Run the oracle HTTP service with uvicorn.

Usage:
    basket serve [--host HOST] [--port PORT]
"""

from __future__ import annotations

import sys
from argparse import Namespace

from core.schemas.errors import LedgerProtocolException


EXIT_SUCCESS = 0
EXIT_RUNTIME_ERROR = 1


def serve_cmd(args: Namespace) -> int:
    """Handle serve command."""
    import uvicorn

    from api.app import create_app
    from api.deps import build_verifier

    config = args.runtime_config
    try:
        verifier = build_verifier(config)
    except (OSError, ValueError, LedgerProtocolException) as e:
        print(f"Error loading oracle key: {e}", file=sys.stderr)
        return EXIT_RUNTIME_ERROR

    app = create_app()
    app.state.verifier = verifier

    uvicorn.run(
        app,
        host=args.host or config.oracle.host,
        port=args.port or config.oracle.port,
        log_level=config.log_level.lower(),
    )
    return EXIT_SUCCESS
