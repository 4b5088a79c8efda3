"""Contracts deployable on a tokenforge Chain."""

from .amm import WETH, AmmFactory, Pair, Router
from .erc20 import ERC20
from .factories import TimelockFactory, TokenTimelockFactory, VaultFactory
from .reflection_token import ReflectionToken
from .timelock import Timelock
from .token_factory import FactoryConfig, ReflectionTokenFactory
from .token_timelock import TokenTimelock
from .vault import Vault

__all__ = [
    "AmmFactory",
    "ERC20",
    "FactoryConfig",
    "Pair",
    "ReflectionToken",
    "ReflectionTokenFactory",
    "Router",
    "Timelock",
    "TimelockFactory",
    "TokenTimelock",
    "TokenTimelockFactory",
    "Vault",
    "VaultFactory",
    "WETH",
]
