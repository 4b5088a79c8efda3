"""
Deterministic-address factories.

Each factory deploys with create2 using salt_for(primary input address), so
the deployed address is known before the call and repeating the same
arguments collides with the first deployment.
"""

from ..chain.contract import Contract, as_address, external
from ..core.ids import salt_for
from ..logging_config import get_logger
from .timelock import Timelock
from .token_timelock import TokenTimelock
from .vault import Vault


class TokenTimelockFactory(Contract):

    @external
    def create_token_timelock(self, token, beneficiary, release_time: int) -> str:
        token = as_address(token)
        lock = self.chain.create2(
            TokenTimelock, salt_for(token), token, as_address(beneficiary), release_time
        )
        get_logger(__name__, trace_id=self.address).debug("Created token timelock %s", lock.address)
        self.emit("CreateTokenTimelock", tokenTimelock=lock.address)
        return lock.address


class TimelockFactory(Contract):

    @external
    def create_timelock(self, target, admin, delay: int) -> str:
        """Timelock for target; target only seeds the salt."""
        timelock = self.chain.create2(Timelock, salt_for(as_address(target)), as_address(admin), delay)
        get_logger(__name__, trace_id=self.address).debug("Created timelock %s", timelock.address)
        self.emit("CreateTimelock", timelock=timelock.address)
        return timelock.address


class VaultFactory(Contract):

    @external
    def create_vault(self, token) -> str:
        token = as_address(token)
        vault = self.chain.create2(Vault, salt_for(token), token)
        vault.transfer_ownership(self.msg.sender)
        get_logger(__name__, trace_id=self.address).debug("Created vault %s", vault.address)
        self.emit("CreateVault", vault=vault.address)
        return vault.address
