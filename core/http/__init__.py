"""
HTTP Client Module

requests-based client shared by the holder-side collaborators.
"""

from .client import AuthProvider, HttpClient, HttpError, HttpResponse

__all__ = [
    "AuthProvider",
    "HttpClient",
    "HttpError",
    "HttpResponse",
]
