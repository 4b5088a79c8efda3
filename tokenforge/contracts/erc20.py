"""
Plain fungible token ledger.

Used directly for WETH and the AMM pool-share token; ReflectionToken keeps
the same external surface with its own accounting.
"""

from dataclasses import dataclass, field
from typing import Dict, Union

from ..chain.contract import Contract, as_address, external
from ..core.errors import InsufficientAllowance, InsufficientBalance, ZeroAddress
from ..core.ids import ZERO_ADDRESS

Address = Union[str, Contract]


@dataclass
class ERC20Storage:
    name: str = ""
    symbol: str = ""
    decimals: int = 18
    total_supply: int = 0
    balances: Dict[str, int] = field(default_factory=dict)
    allowances: Dict[str, Dict[str, int]] = field(default_factory=dict)


class ERC20(Contract):
    Storage = ERC20Storage

    def constructor(self, name: str = "", symbol: str = "", decimals: int = 18) -> None:
        s = self.storage
        s.name = name
        s.symbol = symbol
        s.decimals = decimals

    def name(self) -> str:
        return self.storage.name

    def symbol(self) -> str:
        return self.storage.symbol

    def decimals(self) -> int:
        return self.storage.decimals

    def total_supply(self) -> int:
        return self.storage.total_supply

    def balance_of(self, account: Address) -> int:
        return self.storage.balances.get(as_address(account), 0)

    def allowance(self, owner: Address, spender: Address) -> int:
        return self.storage.allowances.get(as_address(owner), {}).get(as_address(spender), 0)

    @external
    def transfer(self, recipient: Address, amount: int) -> bool:
        self._transfer(self.msg.sender, as_address(recipient), amount)
        return True

    @external
    def approve(self, spender: Address, amount: int) -> bool:
        self._approve(self.msg.sender, as_address(spender), amount)
        return True

    @external
    def transfer_from(self, sender: Address, recipient: Address, amount: int) -> bool:
        sender = as_address(sender)
        self._transfer(sender, as_address(recipient), amount)
        self._spend_allowance(sender, self.msg.sender, amount)
        return True

    @external
    def increase_allowance(self, spender: Address, added_value: int) -> bool:
        spender = as_address(spender)
        self._approve(self.msg.sender, spender, self.allowance(self.msg.sender, spender) + added_value)
        return True

    @external
    def decrease_allowance(self, spender: Address, subtracted_value: int) -> bool:
        spender = as_address(spender)
        current = self.allowance(self.msg.sender, spender)
        if current < subtracted_value:
            raise InsufficientAllowance("ERC20: decreased allowance below zero")
        self._approve(self.msg.sender, spender, current - subtracted_value)
        return True

    def _approve(self, owner: str, spender: str, amount: int) -> None:
        if owner == ZERO_ADDRESS or spender == ZERO_ADDRESS:
            raise ZeroAddress("ERC20: approve with the zero address")
        self.storage.allowances.setdefault(owner, {})[spender] = amount
        self.emit("Approval", owner=owner, spender=spender, value=amount)

    def _spend_allowance(self, owner: str, spender: str, amount: int) -> None:
        current = self.allowance(owner, spender)
        if current < amount:
            raise InsufficientAllowance()
        self._approve(owner, spender, current - amount)

    def _transfer(self, sender: str, recipient: str, amount: int) -> None:
        if sender == ZERO_ADDRESS or recipient == ZERO_ADDRESS:
            raise ZeroAddress("ERC20: transfer with the zero address")
        balances = self.storage.balances
        if balances.get(sender, 0) < amount:
            raise InsufficientBalance()
        balances[sender] = balances.get(sender, 0) - amount
        balances[recipient] = balances.get(recipient, 0) + amount
        self.emit("Transfer", **{"from": sender, "to": recipient, "value": amount})

    def _mint(self, account: str, amount: int) -> None:
        s = self.storage
        s.total_supply += amount
        s.balances[account] = s.balances.get(account, 0) + amount
        self.emit("Transfer", **{"from": ZERO_ADDRESS, "to": account, "value": amount})

    def _burn(self, account: str, amount: int) -> None:
        s = self.storage
        if s.balances.get(account, 0) < amount:
            raise InsufficientBalance("ERC20: burn amount exceeds balance")
        s.balances[account] -= amount
        s.total_supply -= amount
        self.emit("Transfer", **{"from": account, "to": ZERO_ADDRESS, "value": amount})
