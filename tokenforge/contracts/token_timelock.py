"""Single-beneficiary token lock."""

from dataclasses import dataclass

from ..chain.contract import Contract, as_address, external
from ..core.errors import NothingToRelease, TooEarly
from ..core.ids import ZERO_ADDRESS


@dataclass
class TokenTimelockStorage:
    token: str = ZERO_ADDRESS
    beneficiary: str = ZERO_ADDRESS
    release_time: int = 0


class TokenTimelock(Contract):
    """
    Holds one token for one beneficiary until release_time.

    release() can be called by anyone once the lock expires and sends the
    whole held balance. Releasing an empty lock raises NothingToRelease.
    """

    Storage = TokenTimelockStorage

    def constructor(self, token: str, beneficiary: str, release_time: int) -> None:
        s = self.storage
        s.token = as_address(token)
        s.beneficiary = as_address(beneficiary)
        s.release_time = release_time

    def token(self) -> str:
        return self.storage.token

    def beneficiary(self) -> str:
        return self.storage.beneficiary

    def release_time(self) -> int:
        return self.storage.release_time

    @external
    def release(self) -> int:
        s = self.storage
        if self.now < s.release_time:
            raise TooEarly("TokenTimelock: current time is before release time")
        token = self.chain.contract_at(s.token)
        amount = token.balance_of(self.address)
        if amount <= 0:
            raise NothingToRelease()
        token.transfer(s.beneficiary, amount)
        self.emit("Released", beneficiary=s.beneficiary, amount=amount)
        return amount
