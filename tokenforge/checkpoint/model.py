"""
Checkpoint model for chain snapshots.

A checkpoint captures everything chain.revert() needs to restore:
- World state copy
- Block clock
- Committed event log length
"""

from dataclasses import dataclass

from ..core.clock import BlockClock
from ..core.state import WorldState


@dataclass(frozen=True)
class Checkpoint:
    """
    Immutable checkpoint record.

    Fields:
        snapshot_id: Identifier handed out by chain.snapshot()
        state: Deep copy of the world state
        clock: Block clock at snapshot time
        event_count: Number of committed events at snapshot time
        state_hash: SHA-256 of canonical state bytes
    """
    snapshot_id: int
    state: WorldState
    clock: BlockClock
    event_count: int
    state_hash: str
