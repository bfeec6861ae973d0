"""
Module 09D - Oracle Service (FastAPI)

HTTP API for a basket oracle:
- POST /reorg - Verify and sign a reorg proposal
- POST /reorg/evaluate - Dry-run verification
- GET /health - Health check

Usage:
    uvicorn api.app:app --reload
"""

__version__ = "0.1.0"
