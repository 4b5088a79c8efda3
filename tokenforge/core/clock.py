"""
Block clock.

Time on the simulated chain only moves when the caller advances it.
"""

from dataclasses import dataclass


@dataclass(frozen=True)
class BlockClock:
    """
    Deterministic block timestamp source.

    Contracts read now(); tests and the chain advance it with tick() or at().
    The clock is immutable, so every advance returns a new instance and an
    old instance can be kept around for snapshots.
    """
    current: int = 0

    def now(self) -> int:
        """Get current timestamp without advancing."""
        return self.current

    def tick(self, step: int = 1) -> "BlockClock":
        """Advance clock by step seconds and return new clock instance."""
        if step < 0:
            raise ValueError("clock cannot move backwards")
        return BlockClock(self.current + step)

    def at(self, ts: int) -> "BlockClock":
        """Return clock pinned at ts. ts must not be in the past."""
        if ts < self.current:
            raise ValueError(f"timestamp {ts} is before current time {self.current}")
        return BlockClock(ts)
