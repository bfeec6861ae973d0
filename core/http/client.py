"""
HTTP Client

Thin wrapper over a requests session used by holders to reach oracles,
the basket data store and the master-data history service.
"""

from __future__ import annotations

import json as jsonlib
import logging
import time
from dataclasses import dataclass, field
from typing import Any, Callable, Optional

import requests

logger = logging.getLogger(__name__)

# Returns extra headers (e.g. Authorization) for each outgoing request.
AuthProvider = Callable[[], dict[str, str]]


@dataclass
class HttpResponse:
    """
    Response from an HTTP request.
    """
    status_code: int
    content: bytes
    headers: dict[str, str] = field(default_factory=dict)
    url: str = ""
    elapsed_ms: float = 0.0

    @property
    def ok(self) -> bool:
        """Check if request was successful (2xx status)."""
        return 200 <= self.status_code < 300

    @property
    def text(self) -> str:
        return self.content.decode("utf-8", errors="replace")

    def json(self) -> Any:
        return jsonlib.loads(self.content)

    def raise_for_status(self) -> None:
        """Raise HttpError if status is not 2xx."""
        if not self.ok:
            raise HttpError(
                f"HTTP {self.status_code} from {self.url}",
                status_code=self.status_code,
                response=self,
            )


class HttpError(Exception):
    """HTTP request error."""

    def __init__(
        self,
        message: str,
        status_code: Optional[int] = None,
        response: Optional[HttpResponse] = None,
    ) -> None:
        super().__init__(message)
        self.status_code = status_code
        self.response = response


class HttpClient:
    """
    HTTP client with retries and pluggable authentication.

    Usage:
        client = HttpClient(timeout=5.0, auth=lambda: {"Authorization": "Bearer ..."})

        response = client.get("https://store.example.com/basket", params={"basket-hash": h})
        if response.ok:
            data = response.json()

    Connection errors and 5xx responses are retried up to max_retries times;
    4xx responses are returned to the caller as-is.
    """

    def __init__(
        self,
        *,
        timeout: float = 10.0,
        max_retries: int = 0,
        retry_delay: float = 0.5,
        default_headers: Optional[dict[str, str]] = None,
        auth: Optional[AuthProvider] = None,
        session: Optional[requests.Session] = None,
    ) -> None:
        self.timeout = timeout
        self.max_retries = max_retries
        self.retry_delay = retry_delay
        self.default_headers = default_headers or {}
        self.auth = auth
        self._session = session

    @classmethod
    def from_config(cls, config, auth: Optional[AuthProvider] = None) -> "HttpClient":
        """Build from an HttpConfig."""
        return cls(
            timeout=config.timeout,
            max_retries=config.max_retries,
            retry_delay=config.retry_delay,
            auth=auth,
        )

    def _get_session(self) -> requests.Session:
        if self._session is None:
            self._session = requests.Session()
            self._session.headers.update(self.default_headers)
        return self._session

    def request(
        self,
        method: str,
        url: str,
        *,
        headers: Optional[dict[str, str]] = None,
        params: Optional[dict[str, Any]] = None,
        json: Optional[Any] = None,
        timeout: Optional[float] = None,
    ) -> HttpResponse:
        """
        Make an HTTP request.

        Raises:
            HttpError: when the request could not be completed at all
        """
        session = self._get_session()
        effective_timeout = timeout or self.timeout

        request_headers = dict(self.default_headers)
        if self.auth is not None:
            request_headers.update(self.auth())
        if headers:
            request_headers.update(headers)

        attempt = 0
        while True:
            attempt += 1
            try:
                response = session.request(
                    method=method,
                    url=url,
                    headers=request_headers,
                    params=params,
                    json=json,
                    timeout=effective_timeout,
                )
            except requests.RequestException as e:
                if attempt > self.max_retries:
                    raise HttpError(f"{method} {url} failed: {e}") from e
                logger.warning(f"{method} {url} failed (attempt {attempt}): {e}")
                time.sleep(self.retry_delay)
                continue

            if response.status_code >= 500 and attempt <= self.max_retries:
                logger.warning(f"{method} {url} returned {response.status_code} (attempt {attempt})")
                time.sleep(self.retry_delay)
                continue

            return HttpResponse(
                status_code=response.status_code,
                content=response.content,
                headers=dict(response.headers),
                url=str(response.url),
                elapsed_ms=response.elapsed.total_seconds() * 1000,
            )

    def get(
        self,
        url: str,
        *,
        headers: Optional[dict[str, str]] = None,
        params: Optional[dict[str, Any]] = None,
        timeout: Optional[float] = None,
    ) -> HttpResponse:
        return self.request("GET", url, headers=headers, params=params, timeout=timeout)

    def post(
        self,
        url: str,
        *,
        headers: Optional[dict[str, str]] = None,
        params: Optional[dict[str, Any]] = None,
        json: Optional[Any] = None,
        timeout: Optional[float] = None,
    ) -> HttpResponse:
        return self.request("POST", url, headers=headers, params=params, json=json, timeout=timeout)

    def put(
        self,
        url: str,
        *,
        headers: Optional[dict[str, str]] = None,
        params: Optional[dict[str, Any]] = None,
        json: Optional[Any] = None,
        timeout: Optional[float] = None,
    ) -> HttpResponse:
        return self.request("PUT", url, headers=headers, params=params, json=json, timeout=timeout)

    def close(self) -> None:
        """Close the HTTP session."""
        if self._session:
            self._session.close()
            self._session = None

    def __enter__(self) -> "HttpClient":
        return self

    def __exit__(self, *args) -> None:
        self.close()
