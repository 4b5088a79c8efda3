"""
Hash chain integrity for the committed event log.

Each record includes the hash of the previous record, so rewriting any
committed event invalidates every record after it.
"""

import hashlib
from typing import Any, Dict, Iterable

from ..core.canonical import canonical_json_bytes
from ..core.errors import IntegrityError
from ..core.events import Event

ZERO_HASH = "0" * 64


def _event_dict_for_hash(event: Event) -> Dict[str, Any]:
    return {
        "name": event.name,
        "emitter": event.emitter,
        "seq": event.seq,
        "ts": event.ts,
        "args": event.args,
    }


def hash_event(prev_hash: str, event: Event) -> str:
    """
    Compute hash of event chained to previous hash.

    Hash input: prev_hash + canonical_json(event_data)

    Args:
        prev_hash: Hash of previous event (or ZERO_HASH for genesis)
        event: Event to hash

    Returns:
        SHA-256 hash as hex string
    """
    data = _event_dict_for_hash(event)
    b = prev_hash.encode("utf-8") + canonical_json_bytes(data)
    return hashlib.sha256(b).hexdigest()


def chain_record(prev_hash: str, event: Event) -> Dict[str, Any]:
    """
    Create hash chain record for storage.

    Returns:
        Dict with prev_hash, event_hash and the hashed event fields
    """
    h = hash_event(prev_hash, event)
    return {
        "prev_hash": prev_hash,
        "event_hash": h,
        "event": _event_dict_for_hash(event),
    }


def verify_chain(records: Iterable[Dict[str, Any]]) -> int:
    """
    Walk records from genesis and recompute every link.

    Returns:
        Number of verified records

    Raises:
        IntegrityError: On the first broken link or hash mismatch
    """
    prev_hash = ZERO_HASH
    count = 0
    for rec in records:
        if rec["prev_hash"] != prev_hash:
            raise IntegrityError(f"Broken link at record {count}")
        ev = rec["event"]
        event = Event(
            name=ev["name"],
            emitter=ev["emitter"],
            ts=ev["ts"],
            args=ev["args"],
            seq=ev["seq"],
        )
        if hash_event(prev_hash, event) != rec["event_hash"]:
            raise IntegrityError(f"Hash mismatch at record {count}")
        prev_hash = rec["event_hash"]
        count += 1
    return count
