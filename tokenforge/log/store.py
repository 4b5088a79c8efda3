"""
EventStore interface and in-memory implementation.

The chain appends events here only after a top-level call commits.
"""

from abc import ABC, abstractmethod
from dataclasses import dataclass, replace
from typing import Any, Dict, Iterator, List, Optional

from ..core.events import Event
from ..core.errors import EventStoreError
from .integrity import ZERO_HASH, chain_record, verify_chain


@dataclass(frozen=True)
class AppendResult:
    """Result of an append: the sequenced event and its chain hashes."""

    event: Event
    seq: int
    event_hash: str
    prev_hash: str


class EventStore(ABC):
    """
    Abstract event storage interface.

    All implementations must guarantee:
    - Append-only (no updates, no deletes)
    - Sequential ordering (events indexed by seq)
    - Hash chain integrity
    """

    @abstractmethod
    def append(self, event: Event) -> AppendResult:
        """
        Append event to log, assigning its sequence number.

        Raises:
            EventStoreError: If append fails
        """
        ...

    @abstractmethod
    def read(
        self,
        emitter: Optional[str] = None,
        name: Optional[str] = None,
        from_seq: int = 0,
    ) -> Iterator[Event]:
        """
        Read events from log.

        Args:
            emitter: Filter by emitting contract (None = all)
            name: Filter by event name (None = all)
            from_seq: Start from this sequence number (inclusive)

        Yields:
            Events in sequence order
        """
        ...

    @abstractmethod
    def truncate(self, length: int) -> None:
        """Drop every record at or after length (used by chain revert)."""
        ...

    def get_last_hash(self) -> Optional[str]:
        return None


class InMemoryEventStore(EventStore):
    """Append-only hash-chained event list."""

    def __init__(self) -> None:
        self._records: List[Dict[str, Any]] = []
        self._events: List[Event] = []

    def __len__(self) -> int:
        return len(self._events)

    def append(self, event: Event) -> AppendResult:
        if event.seq is not None and event.seq != len(self._events):
            raise EventStoreError(f"Sequence gap: expected {len(self._events)}, got {event.seq}")
        prev_hash = self.get_last_hash() or ZERO_HASH
        sequenced = replace(event, seq=len(self._events))
        rec = chain_record(prev_hash, sequenced)
        self._records.append(rec)
        self._events.append(sequenced)
        return AppendResult(
            event=sequenced,
            seq=sequenced.require_seq(),
            event_hash=rec["event_hash"],
            prev_hash=prev_hash,
        )

    def read(
        self,
        emitter: Optional[str] = None,
        name: Optional[str] = None,
        from_seq: int = 0,
    ) -> Iterator[Event]:
        for ev in self._events[from_seq:]:
            if emitter is not None and ev.emitter != emitter:
                continue
            if name is not None and ev.name != name:
                continue
            yield ev

    def truncate(self, length: int) -> None:
        if length > len(self._events):
            raise EventStoreError(f"Cannot truncate to {length}, log has {len(self._events)} events")
        del self._records[length:]
        del self._events[length:]

    def get_last_hash(self) -> Optional[str]:
        if not self._records:
            return None
        return self._records[-1]["event_hash"]

    def records(self) -> List[Dict[str, Any]]:
        return list(self._records)

    def verify(self) -> int:
        """
        Verify the full hash chain.

        Raises:
            IntegrityError: If any record was altered
        """
        return verify_chain(self._records)
