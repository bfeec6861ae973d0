"""
Audit Log

Append-only trail of ledger events for external indexers. The ledger writes
to it after every committed mutation and never reads it back.
"""

from __future__ import annotations

import json
import logging
import threading
from pathlib import Path
from typing import Any, Callable, Iterator, Optional, TypeVar

from pydantic import TypeAdapter

from core.schemas.events import AuditEvent, LedgerEvent

logger = logging.getLogger(__name__)

E = TypeVar("E", bound=LedgerEvent)

EventSubscriber = Callable[[LedgerEvent], None]

_EVENT_ADAPTER: TypeAdapter[Any] = TypeAdapter(AuditEvent)


class AuditLog:
    """
    Records ledger events in commit order.

    Usage:
        log = AuditLog()
        log.subscribe(indexer.on_event)

        event = log.record(MintEvent, caller="operator", receiver="alice", baskets=[...])

        for event in log.since(last_seen):
            ...
    """

    def __init__(self) -> None:
        self._events: list[LedgerEvent] = []
        self._subscribers: list[EventSubscriber] = []
        self._lock = threading.Lock()

    def record(self, event_type: type[E], **fields: Any) -> E:
        """Append a new event, assigning the next sequence number."""
        with self._lock:
            event = event_type(sequence=len(self._events) + 1, **fields)
            self._events.append(event)
            subscribers = list(self._subscribers)

        kind = getattr(event, "event", event_type.__name__)
        logger.info(f"audit #{event.sequence} {kind} caller={event.caller} ref={event.ref!r}")
        for subscriber in subscribers:
            try:
                subscriber(event)
            except Exception:
                # The mutation is already committed; a failing indexer must not undo it.
                logger.exception(f"Audit subscriber {subscriber!r} failed on event #{event.sequence}")
        return event

    def subscribe(self, callback: EventSubscriber) -> None:
        with self._lock:
            self._subscribers.append(callback)

    def unsubscribe(self, callback: EventSubscriber) -> None:
        with self._lock:
            self._subscribers.remove(callback)

    @property
    def events(self) -> tuple[LedgerEvent, ...]:
        with self._lock:
            return tuple(self._events)

    def since(self, sequence: int) -> list[LedgerEvent]:
        """Events with a sequence number strictly greater than ``sequence``."""
        with self._lock:
            return list(self._events[max(sequence, 0):])

    def of_kind(self, event_name: str) -> list[LedgerEvent]:
        return [e for e in self.events if getattr(e, "event", None) == event_name]

    def last(self) -> Optional[LedgerEvent]:
        with self._lock:
            return self._events[-1] if self._events else None

    def __len__(self) -> int:
        with self._lock:
            return len(self._events)

    def __iter__(self) -> Iterator[LedgerEvent]:
        return iter(self.events)

    # -------------------------------------------------------------------------
    # Export / import for indexers
    # -------------------------------------------------------------------------

    def dump_jsonl(self, path: str | Path) -> int:
        """Write every event as one JSON object per line. Returns the count."""
        events = self.events
        with open(path, "w", encoding="utf-8") as f:
            for event in events:
                f.write(event.model_dump_json())
                f.write("\n")
        return len(events)

    @staticmethod
    def load_jsonl(path: str | Path) -> list[LedgerEvent]:
        """Parse events previously written by dump_jsonl."""
        events: list[LedgerEvent] = []
        with open(path, encoding="utf-8") as f:
            for line in f:
                if line.strip():
                    events.append(_EVENT_ADAPTER.validate_python(json.loads(line)))
        return events
