"""
Contract event model.

Events are immutable records emitted by contracts during a call and
committed to the event log once the top-level call succeeds.
"""

from dataclasses import dataclass, field
from typing import Any, Dict, Optional


@dataclass(frozen=True)
class Event:
    """
    Immutable event record.

    Fields:
        name: Event name (e.g., "Transfer", "CreateToken")
        emitter: Address of the emitting contract
        ts: Block timestamp of the call
        args: Event arguments by name
        seq: Sequence number (assigned by EventStore)
    """
    name: str
    emitter: str
    ts: int
    args: Dict[str, Any] = field(default_factory=dict)
    seq: Optional[int] = None

    def require_seq(self) -> int:
        """
        Get sequence number or raise error if not assigned.

        Raises:
            ValueError: If seq is None
        """
        if self.seq is None:
            raise ValueError("Event.seq is required but None")
        return self.seq

    def values(self) -> tuple:
        """Argument values in emission order."""
        return tuple(self.args.values())
