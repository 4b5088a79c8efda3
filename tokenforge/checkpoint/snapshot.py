"""
Deterministic world state snapshot utilities.

Ensures same state always produces same bytes.
"""

import hashlib

from ..core.canonical import canonical_json_bytes
from ..core.state import WorldState


def serialize_state(state: WorldState) -> bytes:
    """
    Serialize world state to deterministic bytes.

    Contract classes are serialized by qualified name, storage records by
    field; canonical JSON removes ordering and whitespace variance.
    """
    return canonical_json_bytes(state.to_dict())


def compute_state_hash(state: WorldState) -> str:
    """
    Compute SHA-256 hash of world state.

    Returns:
        Hex string (64 characters)
    """
    return hashlib.sha256(serialize_state(state)).hexdigest()
