"""
Core primitives for the contract runtime.

- Event: Immutable record of something a contract emitted
- WorldState: Everything a revert must undo
- Canonical: Deterministic serialization
- Clock: Block timestamp source
- IDs: Addresses, salts and create2 derivation
"""

from .events import Event
from .state import WorldState
from .canonical import canonicalize, canonical_json_bytes, canonical_json_str, encode_args
from .clock import BlockClock
from .ids import (
    DEAD_ADDRESS,
    ZERO_ADDRESS,
    account_address,
    checksum,
    create2_address,
    create_address,
    salt_for,
)
from .errors import CallContextError, ContractError, EventStoreError, IntegrityError

__all__ = [
    "Event",
    "WorldState",
    "canonicalize",
    "canonical_json_bytes",
    "canonical_json_str",
    "encode_args",
    "BlockClock",
    "DEAD_ADDRESS",
    "ZERO_ADDRESS",
    "account_address",
    "checksum",
    "create2_address",
    "create_address",
    "salt_for",
    "CallContextError",
    "ContractError",
    "EventStoreError",
    "IntegrityError",
]
