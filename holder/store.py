"""
Basket Data Store

Off-chain persistence of basket plaintext. A holder must be able to
resolve the data behind every basket it spends; the ledger only ever sees
hashes.

Wire format:
    PUT /basket                    {basket, data: {salt, tokenId, value}}
    GET /basket?basket-hash=H  ->  {basket, data: {salt, tokenId, value}}

Read access control is left to the deployment. HttpBasketStore accepts an
AuthProvider callable whose headers are attached to every request.
"""

from __future__ import annotations

import logging
import threading
from abc import ABC, abstractmethod
from typing import Iterable, Optional

from core.crypto.hashing import normalize_hash
from core.http import AuthProvider, HttpClient
from core.schemas.basket import BasketData, BasketRecord
from core.schemas.errors import BasketNotFoundException, HashMismatchException

logger = logging.getLogger(__name__)


class BasketDataStore(ABC):
    """Resolves basket hashes to their plaintext."""

    @abstractmethod
    def put(self, record: BasketRecord) -> None:
        """Persist a record. The record must match its own hash."""

    @abstractmethod
    def resolve(self, basket: str) -> Optional[BasketData]:
        """Plaintext for a basket hash, or None if unknown."""

    def put_many(self, records: Iterable[BasketRecord]) -> None:
        for record in records:
            self.put(record)

    def require(self, basket: str) -> BasketRecord:
        """
        Resolve a basket or fail.

        Raises:
            BasketNotFoundException
        """
        data = self.resolve(basket)
        if data is None:
            raise BasketNotFoundException(basket)
        return BasketRecord(basket=basket, data=data)


def _check_record(record: BasketRecord) -> None:
    computed = record.data.basket_hash()
    if computed != record.basket:
        raise HashMismatchException(record.basket, computed, side="store", index=0)


class InMemoryBasketStore(BasketDataStore):
    """Dictionary-backed store for tests and single-process holders."""

    def __init__(self, records: Iterable[BasketRecord] = ()) -> None:
        self._data: dict[str, BasketData] = {}
        self._lock = threading.Lock()
        self.put_many(records)

    def put(self, record: BasketRecord) -> None:
        _check_record(record)
        with self._lock:
            self._data[record.basket] = record.data

    def resolve(self, basket: str) -> Optional[BasketData]:
        with self._lock:
            return self._data.get(normalize_hash(basket, "basket"))

    def __len__(self) -> int:
        return len(self._data)

    def __contains__(self, basket: str) -> bool:
        return self.resolve(basket) is not None


class HttpBasketStore(BasketDataStore):
    """Client for a remote basket data store."""

    def __init__(
        self,
        base_url: str,
        *,
        client: Optional[HttpClient] = None,
        auth: Optional[AuthProvider] = None,
    ) -> None:
        self.base_url = base_url.rstrip("/")
        self.client = client or HttpClient(auth=auth)
        if auth is not None and client is not None:
            self.client.auth = auth

    @property
    def endpoint(self) -> str:
        return f"{self.base_url}/basket"

    def put(self, record: BasketRecord) -> None:
        _check_record(record)
        response = self.client.put(self.endpoint, json=record.to_wire())
        response.raise_for_status()
        logger.debug(f"Stored basket {record.basket}")

    def resolve(self, basket: str) -> Optional[BasketData]:
        basket = normalize_hash(basket, "basket")
        response = self.client.get(self.endpoint, params={"basket-hash": basket})
        if response.status_code == 404:
            return None
        response.raise_for_status()

        record = BasketRecord.model_validate(response.json())
        computed = record.data.basket_hash()
        if record.basket != basket or computed != basket:
            raise HashMismatchException(basket, computed, side="store", index=0)
        return record.data
