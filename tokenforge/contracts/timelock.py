"""
Governance timelock.

The admin queues a call (target, value, signature, data, eta); it becomes
executable once eta is reached and stays executable for GRACE_PERIOD.
Signatures are Solidity-style ("withdraw(address,uint256)") and data is the
positional argument tuple.
"""

from dataclasses import dataclass, field
from typing import Any, Dict, Sequence, Union

from eth_hash.auto import keccak

from ..chain.contract import Contract, as_address, external
from ..config import GRACE_PERIOD, MAXIMUM_DELAY, MINIMUM_DELAY
from ..core.canonical import canonical_json_bytes
from ..core.errors import (
    CallContextError,
    ContractError,
    DelayNotSatisfied,
    ExecutionReverted,
    InvalidDelay,
    NotAdmin,
    NotQueued,
    StaleTransaction,
    TooEarly,
)
from ..core.ids import ZERO_ADDRESS

Address = Union[str, Contract]


def tx_hash(target: str, value: int, signature: str, data: Sequence[Any], eta: int) -> str:
    """Queue key: keccak256 of the canonical call description."""
    payload = canonical_json_bytes([target, value, signature, list(data), eta])
    return "0x" + keccak(payload).hex()


def _check_delay(delay: int) -> None:
    if delay < MINIMUM_DELAY:
        raise InvalidDelay("Timelock: Delay must exceed minimum delay.")
    if delay > MAXIMUM_DELAY:
        raise InvalidDelay("Timelock: Delay must not exceed maximum delay.")


@dataclass
class TimelockStorage:
    admin: str = ZERO_ADDRESS
    pending_admin: str = ZERO_ADDRESS
    delay: int = 0
    queued_transactions: Dict[str, bool] = field(default_factory=dict)


class Timelock(Contract):
    Storage = TimelockStorage

    GRACE_PERIOD = GRACE_PERIOD
    MINIMUM_DELAY = MINIMUM_DELAY
    MAXIMUM_DELAY = MAXIMUM_DELAY

    def constructor(self, admin: str, delay: int) -> None:
        _check_delay(delay)
        self.storage.admin = as_address(admin)
        self.storage.delay = delay

    def admin(self) -> str:
        return self.storage.admin

    def pending_admin(self) -> str:
        return self.storage.pending_admin

    def delay(self) -> int:
        return self.storage.delay

    def queued_transactions(self, key: str) -> bool:
        return self.storage.queued_transactions.get(key, False)

    def _only_admin(self) -> None:
        if self.msg.sender != self.storage.admin:
            raise NotAdmin()

    def _only_self(self, what: str) -> None:
        if self.msg.sender != self.address:
            raise NotAdmin(f"Timelock::{what}: Call must come from Timelock.")

    @external
    def set_delay(self, delay: int) -> None:
        self._only_self("setDelay")
        _check_delay(delay)
        self.storage.delay = delay
        self.emit("NewDelay", newDelay=delay)

    @external
    def accept_admin(self) -> None:
        s = self.storage
        if self.msg.sender != s.pending_admin:
            raise NotAdmin("Timelock::acceptAdmin: Call must come from pendingAdmin.")
        s.admin = self.msg.sender
        s.pending_admin = ZERO_ADDRESS
        self.emit("NewAdmin", newAdmin=s.admin)

    @external
    def set_pending_admin(self, pending_admin: Address) -> None:
        self._only_self("setPendingAdmin")
        self.storage.pending_admin = as_address(pending_admin)
        self.emit("NewPendingAdmin", newPendingAdmin=self.storage.pending_admin)

    @external
    def queue_transaction(
        self, target: Address, value: int, signature: str, data: Sequence[Any], eta: int
    ) -> str:
        self._only_admin()
        if eta < self.now + self.storage.delay:
            raise DelayNotSatisfied()
        target = as_address(target)
        key = tx_hash(target, value, signature, data, eta)
        self.storage.queued_transactions[key] = True
        self.emit(
            "QueueTransaction",
            txHash=key, target=target, value=value, signature=signature, data=list(data), eta=eta,
        )
        return key

    @external
    def cancel_transaction(
        self, target: Address, value: int, signature: str, data: Sequence[Any], eta: int
    ) -> None:
        self._only_admin()
        target = as_address(target)
        key = tx_hash(target, value, signature, data, eta)
        if not self.storage.queued_transactions.get(key):
            raise NotQueued()
        self.storage.queued_transactions[key] = False
        self.emit(
            "CancelTransaction",
            txHash=key, target=target, value=value, signature=signature, data=list(data), eta=eta,
        )

    @external(payable=True)
    def execute_transaction(
        self, target: Address, value: int, signature: str, data: Sequence[Any], eta: int
    ) -> Any:
        self._only_admin()
        target = as_address(target)
        key = tx_hash(target, value, signature, data, eta)
        s = self.storage
        if not s.queued_transactions.get(key):
            raise NotQueued()
        if self.now < eta:
            raise TooEarly()
        if self.now > eta + GRACE_PERIOD:
            raise StaleTransaction()
        s.queued_transactions[key] = False

        try:
            function = self.chain.contract_at(target).function(signature)
        except (AttributeError, CallContextError) as exc:
            raise ExecutionReverted() from exc
        try:
            result = function(*data, value=value)
        except ContractError as exc:
            raise ExecutionReverted(f"{ExecutionReverted.reason} {exc.reason}") from exc
        except TypeError as exc:
            # data does not fit the target's parameter list
            raise ExecutionReverted() from exc

        self.emit(
            "ExecuteTransaction",
            txHash=key, target=target, value=value, signature=signature, data=list(data), eta=eta,
        )
        return result
