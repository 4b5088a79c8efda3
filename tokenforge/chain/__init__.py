"""
Contract runtime.

- Contract: handle base class, @external entry points
- Ownable / initializer / only_owner: access control helpers
- AddressSet: swap-and-pop address set for contract storage
- Chain: world state, atomic calls, create2, clock and snapshots
"""

from .contract import (
    AddressSet,
    Contract,
    Msg,
    Ownable,
    OwnableStorage,
    as_address,
    external,
    initializer,
    only_owner,
)
from .chain import Chain

__all__ = [
    "AddressSet",
    "Contract",
    "Msg",
    "Ownable",
    "OwnableStorage",
    "as_address",
    "external",
    "initializer",
    "only_owner",
    "Chain",
]
