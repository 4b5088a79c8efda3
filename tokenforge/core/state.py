"""
World state for the simulated chain.

Everything a revert must undo lives here: contract code bindings, contract
storage, native balances and account nonces.
"""

import copy
from dataclasses import dataclass, field, fields, is_dataclass
from typing import Any, Dict, Optional


@dataclass
class WorldState:
    """
    Mutable world state container.

    Fields:
        version: Monotonic version number (increments with each committed call)
        code: address -> contract class deployed there
        storage: address -> contract storage record
        balances: address -> native currency balance (wei)
        nonces: address -> deployment nonce
    """
    version: int = 0
    code: Dict[str, type] = field(default_factory=dict)
    storage: Dict[str, Any] = field(default_factory=dict)
    balances: Dict[str, int] = field(default_factory=dict)
    nonces: Dict[str, int] = field(default_factory=dict)

    def get_storage(self, address: str) -> Any:
        """
        Get contract storage by address.

        Returns:
            Storage record or None if nothing is deployed there
        """
        return self.storage.get(address)

    def has_code(self, address: str) -> bool:
        return address in self.code

    def next_nonce(self, address: str) -> int:
        nonce = self.nonces.get(address, 0)
        self.nonces[address] = nonce + 1
        return nonce

    def copy(self) -> "WorldState":
        """Deep copy used for snapshots; contract classes are shared."""
        return copy.deepcopy(self)

    def to_dict(self) -> Dict[str, Any]:
        return {
            "version": self.version,
            "code": {addr: _qualname(cls) for addr, cls in self.code.items()},
            "storage": {addr: _storage_dict(s) for addr, s in self.storage.items()},
            "balances": dict(self.balances),
            "nonces": dict(self.nonces),
        }


def _qualname(cls: type) -> str:
    return f"{cls.__module__}.{cls.__qualname__}"


def _storage_dict(storage: Optional[Any]) -> Any:
    if storage is None or not is_dataclass(storage):
        return storage
    return {f.name: _storage_dict(getattr(storage, f.name)) for f in fields(storage)}
