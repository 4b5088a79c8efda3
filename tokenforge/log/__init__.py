"""
Committed event log.

This module provides:
- EventStore: Abstract interface for event persistence
- InMemoryEventStore: Hash-chained append-only event list
- Integrity: Hash chain construction and verification
"""

from .store import EventStore, AppendResult, InMemoryEventStore
from .integrity import ZERO_HASH, hash_event, chain_record, verify_chain

__all__ = [
    "EventStore",
    "AppendResult",
    "InMemoryEventStore",
    "ZERO_HASH",
    "hash_event",
    "chain_record",
    "verify_chain",
]
