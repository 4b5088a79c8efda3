"""
Reflection token.

Holders are tracked in one of two representations:

- reflected (r_owned): the default. A holder's balance is r_owned / rate,
  so lowering r_total redistributes the tax fee to every included holder
  without touching their records.
- true (t_owned): accounts excluded from reward hold a fixed token amount
  and stop receiving reflections.

rate = current reflected supply / current true supply, where the current
supplies leave out excluded accounts. Every transfer keeps
sum(r_owned) == r_total, so included balances plus excluded balances add up
to the total supply minus at most one unit of flooring per holder.

Transfers between two non-exempt accounts pay tax_fee% (reflected) and
liquidity_fee% (credited to the contract and later paired into the pool).
Before launch_time, with bot protection on, every fresh recipient is blocked
from sending until the owner allows it after launch. The pair, the owner, the
liquidity lock and fee-exempt accounts are never blocked.
"""

from dataclasses import dataclass, field
from typing import Dict, Union

from ..chain.contract import (
    AddressSet,
    Contract,
    Ownable,
    OwnableStorage,
    as_address,
    external,
    initializer,
    only_owner,
)
from ..config import DECIMALS, LAUNCH_WINDOW, MAX_FEE_PERCENT, MAX_UINT256, TOTAL_SUPPLY
from ..core.errors import (
    AlreadyExcluded,
    AlreadyIncluded,
    AmountZero,
    BeforeLaunch,
    ConstructorInvalid,
    ContractError,
    ExceedsMaxTx,
    FeeTooHigh,
    InsufficientBalance,
    TransfersBlocked,
    TransfersNotBlocked,
    ZeroAddress,
)
from ..core.ids import ZERO_ADDRESS
from ..logging_config import get_logger
from .amm import AmmFactory, Pair, Router
from .erc20 import ERC20

Address = Union[str, Contract]


@dataclass
class ReflectionTokenStorage(OwnableStorage):
    initialized: bool = False
    name: str = ""
    symbol: str = ""
    decimals: int = DECIMALS
    total_supply: int = TOTAL_SUPPLY
    r_total: int = 0
    t_fee_total: int = 0
    r_owned: Dict[str, int] = field(default_factory=dict)
    t_owned: Dict[str, int] = field(default_factory=dict)
    allowances: Dict[str, Dict[str, int]] = field(default_factory=dict)
    excluded: AddressSet = field(default_factory=AddressSet)
    excluded_from_fee: AddressSet = field(default_factory=AddressSet)

    tax_fee: int = 0
    liquidity_fee: int = 0
    max_tx_amount: int = 0
    num_tokens_sell_to_add_to_liquidity: int = 0

    uniswap_v2_router: str = ZERO_ADDRESS
    uniswap_v2_pair: str = ZERO_ADDRESS
    swap_and_liquify_enabled: bool = True
    in_swap_and_liquify: bool = False

    liquidity_timelock_address: str = ZERO_ADDRESS
    vault_address: str = ZERO_ADDRESS

    bot_protection_enabled: bool = False
    launch_time: int = 0
    blocked: AddressSet = field(default_factory=AddressSet)


@dataclass(frozen=True)
class TransferValues:
    r_amount: int
    r_transfer: int
    r_fee: int
    r_liquidity: int
    t_transfer: int
    t_fee: int
    t_liquidity: int


def _sub(a: int, b: int) -> int:
    if b > a:
        raise InsufficientBalance("SafeMath: subtraction overflow")
    return a - b


class ReflectionToken(ERC20, Ownable):
    Storage = ReflectionTokenStorage

    def constructor(
        self,
        name: str,
        symbol: str,
        max_tx_amount: int,
        num_tokens_sell_to_add_to_liquidity: int,
        tax_fee: int,
        liquidity_fee: int,
        launch_time: int,
    ) -> None:
        if max_tx_amount <= 0:
            raise ConstructorInvalid(AmountZero.reason)
        if not 0 <= tax_fee <= MAX_FEE_PERCENT or not 0 <= liquidity_fee <= MAX_FEE_PERCENT:
            raise ConstructorInvalid(FeeTooHigh.reason)
        if launch_time > self.now + LAUNCH_WINDOW:
            raise ConstructorInvalid("BotProtection: launch time must be within 1 week")

        ERC20.constructor(self, name, symbol, DECIMALS)
        deployer = self.msg.sender
        self._init_owner(deployer)

        s = self.storage
        s.max_tx_amount = max_tx_amount
        s.num_tokens_sell_to_add_to_liquidity = num_tokens_sell_to_add_to_liquidity
        s.tax_fee = tax_fee
        s.liquidity_fee = liquidity_fee
        s.launch_time = launch_time
        s.r_total = MAX_UINT256 - (MAX_UINT256 % s.total_supply)
        s.r_owned[deployer] = s.r_total

        router = self.chain.router
        s.uniswap_v2_router = router.address
        s.uniswap_v2_pair = self.chain.at(AmmFactory, router.factory()).create_pair(self.address, router.weth())

        s.excluded_from_fee.add(deployer)
        s.excluded_from_fee.add(self.address)

        self.emit("Transfer", **{"from": ZERO_ADDRESS, "to": deployer, "value": s.total_supply})

    # -- views ----------------------------------------------------------------

    def balance_of(self, account: Address) -> int:
        account = as_address(account)
        s = self.storage
        if account in s.excluded:
            return s.t_owned.get(account, 0)
        return self.token_from_reflection(s.r_owned.get(account, 0))

    def tax_fee(self) -> int:
        return self.storage.tax_fee

    def liquidity_fee(self) -> int:
        return self.storage.liquidity_fee

    def max_tx_amount(self) -> int:
        return self.storage.max_tx_amount

    def num_tokens_sell_to_add_to_liquidity(self) -> int:
        return self.storage.num_tokens_sell_to_add_to_liquidity

    def launch_time(self) -> int:
        return self.storage.launch_time

    def bot_protection_enabled(self) -> bool:
        return self.storage.bot_protection_enabled

    def liquidity_timelock_address(self) -> str:
        return self.storage.liquidity_timelock_address

    def vault_address(self) -> str:
        return self.storage.vault_address

    def uniswap_v2_router(self) -> str:
        return self.storage.uniswap_v2_router

    def uniswap_v2_pair(self) -> str:
        return self.storage.uniswap_v2_pair

    def swap_and_liquify_enabled(self) -> bool:
        return self.storage.swap_and_liquify_enabled

    def total_fees(self) -> int:
        return self.storage.t_fee_total

    def is_excluded_from_reward(self, account: Address) -> bool:
        return as_address(account) in self.storage.excluded

    def is_excluded_from_fee(self, account: Address) -> bool:
        return as_address(account) in self.storage.excluded_from_fee

    def excluded(self, index: int) -> str:
        return self.storage.excluded.at(index)

    def excluded_length(self) -> int:
        return len(self.storage.excluded)

    def excluded_from_fee(self, index: int) -> str:
        return self.storage.excluded_from_fee.at(index)

    def excluded_from_fee_length(self) -> int:
        return len(self.storage.excluded_from_fee)

    def blocked(self, index: int) -> str:
        return self.storage.blocked.at(index)

    def blocked_index(self, account: Address) -> int:
        return self.storage.blocked.index_of(as_address(account))

    def blocked_length(self) -> int:
        return len(self.storage.blocked)

    def transfers_blocked(self, account: Address) -> bool:
        return as_address(account) in self.storage.blocked

    def reflection_from_token(self, t_amount: int, deduct_transfer_fee: bool = False) -> int:
        if t_amount > self.storage.total_supply:
            raise ContractError("Amount must be less than supply")
        values = self._get_values(t_amount, take_fee=True)
        return values.r_transfer if deduct_transfer_fee else values.r_amount

    def token_from_reflection(self, r_amount: int) -> int:
        if r_amount > self.storage.r_total:
            raise ContractError("Amount must be less than total reflections")
        return r_amount // self._get_rate()

    # -- rate -----------------------------------------------------------------

    def _get_current_supply(self):
        s = self.storage
        r_supply, t_supply = s.r_total, s.total_supply
        for account in s.excluded:
            r = s.r_owned.get(account, 0)
            t = s.t_owned.get(account, 0)
            if r > r_supply or t > t_supply:
                return s.r_total, s.total_supply
            r_supply -= r
            t_supply -= t
        if r_supply < s.r_total // s.total_supply:
            return s.r_total, s.total_supply
        return r_supply, t_supply

    def _get_rate(self) -> int:
        r_supply, t_supply = self._get_current_supply()
        return r_supply // t_supply

    def _get_values(self, t_amount: int, take_fee: bool) -> TransferValues:
        s = self.storage
        t_fee = t_amount * s.tax_fee // 100 if take_fee else 0
        t_liquidity = t_amount * s.liquidity_fee // 100 if take_fee else 0
        t_transfer = t_amount - t_fee - t_liquidity

        rate = self._get_rate()
        r_amount = t_amount * rate
        r_fee = t_fee * rate
        r_liquidity = t_liquidity * rate
        return TransferValues(
            r_amount=r_amount,
            r_transfer=r_amount - r_fee - r_liquidity,
            r_fee=r_fee,
            r_liquidity=r_liquidity,
            t_transfer=t_transfer,
            t_fee=t_fee,
            t_liquidity=t_liquidity,
        )

    # -- transfers ------------------------------------------------------------

    def _transfer(self, sender: str, recipient: str, amount: int) -> None:
        if sender == ZERO_ADDRESS or recipient == ZERO_ADDRESS:
            raise ZeroAddress("ERC20: transfer with the zero address")
        if amount <= 0:
            raise AmountZero("Transfer amount must be greater than zero")
        s = self.storage
        if sender in s.blocked:
            raise TransfersBlocked()

        take_fee = sender not in s.excluded_from_fee and recipient not in s.excluded_from_fee
        if take_fee and amount > s.max_tx_amount:
            raise ExceedsMaxTx()

        if sender != s.uniswap_v2_pair:
            self._maybe_swap_and_liquify()

        self._token_transfer(sender, recipient, amount, take_fee)
        self._block_if_prelaunch(recipient)

    def _token_transfer(self, sender: str, recipient: str, t_amount: int, take_fee: bool) -> None:
        s = self.storage
        values = self._get_values(t_amount, take_fee)

        if sender in s.excluded:
            s.t_owned[sender] = _sub(s.t_owned.get(sender, 0), t_amount)
        s.r_owned[sender] = _sub(s.r_owned.get(sender, 0), values.r_amount)

        s.r_owned[recipient] = s.r_owned.get(recipient, 0) + values.r_transfer
        if recipient in s.excluded:
            s.t_owned[recipient] = s.t_owned.get(recipient, 0) + values.t_transfer

        self._take_liquidity(values.t_liquidity, values.r_liquidity)
        s.r_total -= values.r_fee
        s.t_fee_total += values.t_fee

        self.emit("Transfer", **{"from": sender, "to": recipient, "value": values.t_transfer})

    def _take_liquidity(self, t_liquidity: int, r_liquidity: int) -> None:
        if not t_liquidity:
            return
        s = self.storage
        s.r_owned[self.address] = s.r_owned.get(self.address, 0) + r_liquidity
        if self.address in s.excluded:
            s.t_owned[self.address] = s.t_owned.get(self.address, 0) + t_liquidity

    def _block_if_prelaunch(self, recipient: str) -> None:
        s = self.storage
        if not s.bot_protection_enabled or self.now >= s.launch_time:
            return
        # Never block the pool or launch infrastructure: a third party could
        # otherwise freeze it by buying on its behalf.
        if recipient in (s.uniswap_v2_pair, self.address, s.liquidity_timelock_address, s.owner):
            return
        if recipient in s.excluded_from_fee:
            return
        if s.blocked.add(recipient):
            self.emit("TransfersBlocked", account=recipient)

    # -- liquidity ------------------------------------------------------------

    def _maybe_swap_and_liquify(self) -> None:
        s = self.storage
        if s.in_swap_and_liquify or not s.swap_and_liquify_enabled:
            return
        contract_balance = min(self.balance_of(self.address), s.max_tx_amount)
        threshold = s.num_tokens_sell_to_add_to_liquidity
        if threshold <= 0 or contract_balance < threshold:
            return
        reserve0, reserve1, _ = self.chain.at(Pair, s.uniswap_v2_pair).get_reserves()
        if reserve0 == 0 or reserve1 == 0:
            return

        s.in_swap_and_liquify = True
        try:
            self._swap_and_liquify(threshold)
        finally:
            self.storage.in_swap_and_liquify = False

    def _swap_and_liquify(self, amount: int) -> None:
        half = amount // 2
        other_half = amount - half
        router = self.chain.at(Router, self.storage.uniswap_v2_router)

        initial_balance = self.native_balance()
        self._approve(self.address, router.address, half)
        router.swap_exact_tokens_for_eth_supporting_fee_on_transfer_tokens(
            half, 0, [self.address, router.weth()], self.address, self.now
        )
        new_balance = self.native_balance() - initial_balance
        if new_balance <= 0:
            return

        s = self.storage
        lp_recipient = s.liquidity_timelock_address
        if lp_recipient == ZERO_ADDRESS:
            lp_recipient = s.owner
        self._approve(self.address, router.address, other_half)
        router.add_liquidity_eth(self.address, other_half, 0, 0, lp_recipient, self.now, value=new_balance)

        get_logger(__name__, trace_id=self.address).info(
            "Swapped %d tokens for %d wei and added liquidity", half, new_balance
        )
        self.emit("SwapAndLiquify", tokensSwapped=half, ethReceived=new_balance, tokensIntoLiquidity=other_half)

    # -- holder operations ----------------------------------------------------

    @external
    def deliver(self, t_amount: int) -> None:
        sender = self.msg.sender
        s = self.storage
        if sender in s.excluded:
            raise ContractError("Excluded addresses cannot call this function")
        r_amount = self._get_values(t_amount, take_fee=True).r_amount
        s.r_owned[sender] = _sub(s.r_owned.get(sender, 0), r_amount)
        s.r_total -= r_amount
        s.t_fee_total += t_amount

    # -- owner operations -----------------------------------------------------

    @external
    @only_owner
    @initializer
    def initialize(self, liquidity_timelock_address: Address, vault_address: Address) -> None:
        s = self.storage
        s.liquidity_timelock_address = as_address(liquidity_timelock_address)
        s.vault_address = as_address(vault_address)

    @external
    @only_owner
    def exclude_from_reward(self, account: Address) -> None:
        account = as_address(account)
        s = self.storage
        if account in s.excluded:
            raise AlreadyExcluded()
        r_owned = s.r_owned.get(account, 0)
        if r_owned > 0:
            s.t_owned[account] = self.token_from_reflection(r_owned)
        s.excluded.add(account)

    @external
    @only_owner
    def include_in_reward(self, account: Address) -> None:
        account = as_address(account)
        s = self.storage
        if account not in s.excluded:
            raise AlreadyIncluded()
        # Re-price the true balance at the current rate and move r_total by
        # the same delta so sum(r_owned) == r_total still holds.
        rate = self._get_rate()
        r_owned = s.t_owned.get(account, 0) * rate
        s.r_total += r_owned - s.r_owned.get(account, 0)
        s.r_owned[account] = r_owned
        s.t_owned[account] = 0
        s.excluded.remove(account)

    @external
    @only_owner
    def exclude_from_fee(self, account: Address) -> None:
        if not self.storage.excluded_from_fee.add(as_address(account)):
            raise AlreadyExcluded()

    @external
    @only_owner
    def include_in_fee(self, account: Address) -> None:
        if not self.storage.excluded_from_fee.remove(as_address(account)):
            raise AlreadyIncluded()

    @external
    @only_owner
    def set_tax_fee_percent(self, tax_fee: int) -> None:
        if not 0 <= tax_fee <= MAX_FEE_PERCENT:
            raise FeeTooHigh()
        self.storage.tax_fee = tax_fee

    @external
    @only_owner
    def set_liquidity_fee_percent(self, liquidity_fee: int) -> None:
        if not 0 <= liquidity_fee <= MAX_FEE_PERCENT:
            raise FeeTooHigh()
        self.storage.liquidity_fee = liquidity_fee

    @external
    @only_owner
    def set_max_tx_amount(self, amount: int) -> None:
        if amount <= 0:
            raise AmountZero()
        self.storage.max_tx_amount = amount

    @external
    @only_owner
    def set_swap_and_liquify_enabled(self, enabled: bool) -> None:
        self.storage.swap_and_liquify_enabled = enabled
        self.emit("SwapAndLiquifyEnabledUpdated", enabled=enabled)

    @external
    @only_owner
    def enable_bot_protection(self) -> None:
        s = self.storage
        if not s.bot_protection_enabled:
            s.bot_protection_enabled = True
            self.emit("BotProtectionEnabled")

    @external
    @only_owner
    def allow_transfers(self, account: Address) -> None:
        account = as_address(account)
        s = self.storage
        if self.now < s.launch_time:
            raise BeforeLaunch()
        if not s.blocked.remove(account):
            raise TransfersNotBlocked()
        self.emit("TransfersAllowed", account=account)
