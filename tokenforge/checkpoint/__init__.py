"""
Chain snapshots.

Provides:
- Checkpoint model
- Deterministic state serialization and hashing
"""

from .model import Checkpoint
from .snapshot import serialize_state, compute_state_hash

__all__ = [
    "Checkpoint",
    "serialize_state",
    "compute_state_hash",
]
