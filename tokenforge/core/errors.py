"""
Exception types for the contract runtime.

ContractError is a revert: the chain discards every state change made by the
top-level call that raised it. Each subclass carries the revert reason the
contracts report by default.
"""

from typing import Optional


class ContractError(Exception):
    """Raised when a contract call reverts."""

    reason = "Transaction reverted"

    def __init__(self, reason: Optional[str] = None) -> None:
        if reason is not None:
            self.reason = reason
        super().__init__(self.reason)


# Authorization

class NotOwner(ContractError):
    reason = "Ownable: caller is not the owner"


class NotAdmin(ContractError):
    reason = "Timelock: Call must come from admin."


class AlreadyInitialized(ContractError):
    reason = "Initializable: contract is already initialized"


# Constructor / argument validation

class ConstructorInvalid(ContractError):
    reason = "Invalid constructor argument"


class AmountZero(ContractError):
    reason = "Amount must be greater than 0"


class FeeTooHigh(ContractError):
    reason = "Amount must be less than or equal to 15"


class ZeroAddress(ContractError):
    reason = "ERC20: zero address"


class OutOfBounds(ContractError):
    reason = "Index out of bounds"


class NotPayable(ContractError):
    reason = "Function is not payable"


# Set membership

class AlreadyIncluded(ContractError):
    reason = "Account is already included"


class AlreadyExcluded(ContractError):
    reason = "Account is already excluded"


# Economic guards

class InsufficientBalance(ContractError):
    reason = "ERC20: transfer amount exceeds balance"


class InsufficientAllowance(ContractError):
    reason = "ERC20: transfer amount exceeds allowance"


class InsufficientFunds(ContractError):
    reason = "Insufficient native balance"


class ExceedsMaxTx(ContractError):
    reason = "Transfer amount exceeds the maxTxAmount."


class TransfersBlocked(ContractError):
    reason = "BotProtection: transfers blocked"


class TransfersNotBlocked(ContractError):
    reason = "BotProtection: transfers not blocked"


class BeforeLaunch(ContractError):
    reason = "BotProtection: before launch"


class LiquidityLockTooShort(ContractError):
    reason = "ReflectionTokenFactory: liquidityTimelockDelay must be at least 6 months"


class LiquidityAmountZero(ContractError):
    reason = "ReflectionTokenFactory: liquidityAmount must be positive"


class ValueBelowMinimum(ContractError):
    reason = "ReflectionTokenFactory: value must be at least minValue"


class AmmError(ContractError):
    reason = "UniswapV2: reverted"


# Timelocks

class InvalidDelay(ContractError):
    reason = "Timelock: Delay must exceed minimum delay."


class DelayNotSatisfied(ContractError):
    reason = "Timelock: Estimated execution block must satisfy delay."


class NotQueued(ContractError):
    reason = "Timelock: Transaction hasn't been queued."


class TooEarly(ContractError):
    reason = "Timelock: Transaction hasn't surpassed time lock."


class StaleTransaction(ContractError):
    reason = "Timelock: Transaction is stale."


class ExecutionReverted(ContractError):
    reason = "Timelock: Transaction execution reverted."


class NothingToRelease(ContractError):
    reason = "TokenTimelock: no tokens to release"


# Deployment

class DeploymentCollision(ContractError):
    reason = "Create2: address already occupied"


class CallContextError(Exception):
    """Raised when a runtime primitive is used outside of a contract call."""
    pass


class IntegrityError(Exception):
    """Raised when an event log hash chain or a snapshot hash fails verification."""
    pass


class EventStoreError(Exception):
    """Raised when event store operations fail."""
    pass
