"""Owner-controlled token vault."""

from dataclasses import dataclass

from ..chain.contract import Ownable, OwnableStorage, as_address, external, only_owner
from ..core.ids import ZERO_ADDRESS


@dataclass
class VaultStorage(OwnableStorage):
    token: str = ZERO_ADDRESS


class Vault(Ownable):
    """Holds a single token; only the owner (usually a Timelock) can withdraw."""

    Storage = VaultStorage

    def constructor(self, token: str) -> None:
        self._init_owner(self.msg.sender)
        self.storage.token = as_address(token)

    def token(self) -> str:
        return self.storage.token

    def balance(self) -> int:
        return self.chain.contract_at(self.storage.token).balance_of(self.address)

    @external
    @only_owner
    def withdraw(self, to: str, amount: int) -> None:
        to = as_address(to)
        self.chain.contract_at(self.storage.token).transfer(to, amount)
        self.emit("Withdraw", to=to, amount=amount)
