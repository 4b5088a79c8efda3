"""
One-call token launch.

create_token deploys a ReflectionToken and everything around it in a single
atomic call: the creation fee is burned, initial liquidity is locked in a
TokenTimelock for the creator, the remaining supply goes to a vault, and
both the vault and the token end up owned by Timelocks administered by the
creator.
"""

from dataclasses import dataclass, field

from pydantic import BaseModel, ConfigDict, Field, field_validator

from ..chain.contract import Ownable, OwnableStorage, as_address, external, only_owner
from ..config import ETHER, MIN_LIQUIDITY_TIMELOCK_DELAY
from ..core.errors import LiquidityAmountZero, LiquidityLockTooShort, ValueBelowMinimum
from ..core.ids import DEAD_ADDRESS, ZERO_ADDRESS, checksum, salt_for
from ..logging_config import get_logger
from .amm import Router
from .factories import TimelockFactory, TokenTimelockFactory, VaultFactory
from .reflection_token import ReflectionToken
from .vault import Vault


class FactoryConfig(BaseModel):
    """Owner-tunable launch fee settings."""

    model_config = ConfigDict(validate_assignment=True)

    fee_token: str = ZERO_ADDRESS
    fee_amount: int = Field(default=0, ge=0)
    min_value: int = Field(default=10 * ETHER, ge=0)
    burn_address: str = DEAD_ADDRESS

    @field_validator("fee_token", "burn_address")
    @classmethod
    def _checksum(cls, value: str) -> str:
        return checksum(value)


@dataclass
class ReflectionTokenFactoryStorage(OwnableStorage):
    token_timelock_factory: str = ZERO_ADDRESS
    timelock_factory: str = ZERO_ADDRESS
    vault_factory: str = ZERO_ADDRESS
    router: str = ZERO_ADDRESS
    config: FactoryConfig = field(default_factory=FactoryConfig)


class ReflectionTokenFactory(Ownable):
    Storage = ReflectionTokenFactoryStorage

    def constructor(
        self,
        token_timelock_factory,
        timelock_factory,
        vault_factory,
        router,
        burn_address,
        fee_token,
        fee_amount: int,
        min_value: int,
    ) -> None:
        self._init_owner(self.msg.sender)
        s = self.storage
        s.token_timelock_factory = as_address(token_timelock_factory)
        s.timelock_factory = as_address(timelock_factory)
        s.vault_factory = as_address(vault_factory)
        s.router = as_address(router)
        s.config = FactoryConfig(
            fee_token=as_address(fee_token),
            fee_amount=fee_amount,
            min_value=min_value,
            burn_address=as_address(burn_address),
        )

    def token_timelock_factory(self) -> str:
        return self.storage.token_timelock_factory

    def timelock_factory(self) -> str:
        return self.storage.timelock_factory

    def vault_factory(self) -> str:
        return self.storage.vault_factory

    def router(self) -> str:
        return self.storage.router

    def burn_address(self) -> str:
        return self.storage.config.burn_address

    def fee_token(self) -> str:
        return self.storage.config.fee_token

    def fee_amount(self) -> int:
        return self.storage.config.fee_amount

    def min_value(self) -> int:
        return self.storage.config.min_value

    @external
    @only_owner
    def set_fee_token(self, fee_token) -> None:
        self.storage.config.fee_token = as_address(fee_token)
        self.emit("SetFeeToken", feeToken=self.storage.config.fee_token)

    @external
    @only_owner
    def set_fee_amount(self, fee_amount: int) -> None:
        self.storage.config.fee_amount = fee_amount
        self.emit("SetFeeAmount", feeAmount=fee_amount)

    @external
    @only_owner
    def set_min_value(self, min_value: int) -> None:
        self.storage.config.min_value = min_value
        self.emit("SetMinValue", minValue=min_value)

    @external(payable=True)
    def create_token(
        self,
        name: str,
        symbol: str,
        max_tx_amount: int,
        num_tokens_sell_to_add_to_liquidity: int,
        tax_fee: int,
        liquidity_fee: int,
        launch_time: int,
        timelock_delay: int,
        liquidity_timelock_delay: int,
        liquidity_amount: int,
        burn_amount: int,
    ) -> str:
        """
        Launch a token for the caller and return its address.

        The token address is create2(self, salt_for(caller), token args), so
        one caller cannot launch two tokens with identical arguments.

        Raises:
            LiquidityLockTooShort: liquidity_timelock_delay below 26 weeks
            LiquidityAmountZero: liquidity_amount is not positive
            ValueBelowMinimum: attached value below min_value
        """
        s = self.storage
        config = s.config
        caller = self.msg.sender
        if liquidity_timelock_delay < MIN_LIQUIDITY_TIMELOCK_DELAY:
            raise LiquidityLockTooShort()
        if liquidity_amount <= 0:
            raise LiquidityAmountZero()
        if self.msg.value < config.min_value:
            raise ValueBelowMinimum()

        if config.fee_amount > 0:
            self.chain.contract_at(config.fee_token).transfer_from(caller, config.burn_address, config.fee_amount)

        token = self.chain.create2(
            ReflectionToken,
            salt_for(caller),
            name,
            symbol,
            max_tx_amount,
            num_tokens_sell_to_add_to_liquidity,
            tax_fee,
            liquidity_fee,
            launch_time,
        )
        pair = token.uniswap_v2_pair()
        liquidity_timelock = self.chain.at(TokenTimelockFactory, s.token_timelock_factory).create_token_timelock(
            pair, caller, self.now + liquidity_timelock_delay
        )
        vault = self.chain.at(Vault, self.chain.at(VaultFactory, s.vault_factory).create_vault(token))

        token.initialize(liquidity_timelock, vault)
        token.exclude_from_fee(vault)
        token.exclude_from_reward(pair)

        router = self.chain.at(Router, s.router)
        token.approve(router, liquidity_amount)
        router.add_liquidity_eth(token, liquidity_amount, 0, 0, liquidity_timelock, self.now, value=self.msg.value)

        if burn_amount > 0:
            token.transfer(config.burn_address, burn_amount)
        remaining = token.balance_of(self.address)
        if remaining > 0:
            token.transfer(vault, remaining)

        timelock_factory = self.chain.at(TimelockFactory, s.timelock_factory)
        vault.transfer_ownership(timelock_factory.create_timelock(vault, caller, timelock_delay))

        if launch_time > self.now:
            token.enable_bot_protection()
        token.transfer_ownership(timelock_factory.create_timelock(token, caller, timelock_delay))

        get_logger(__name__, trace_id=token.address).info(
            "Created token %s for %s (vault %s, liquidity lock %s)",
            symbol, caller, vault.address, liquidity_timelock,
        )
        self.emit("CreateToken", token=token.address, owner=caller)
        return token.address
