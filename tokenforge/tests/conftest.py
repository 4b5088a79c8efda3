"""Shared fixtures: a fresh chain per test plus deployed token and launchpad."""

import pytest

from tokenforge.chain import Chain
from tokenforge.config import DAY, ETHER
from tokenforge.contracts import (
    ReflectionToken,
    ReflectionTokenFactory,
    TimelockFactory,
    TokenTimelockFactory,
    VaultFactory,
)
from tokenforge.core.ids import DEAD_ADDRESS

TOKENS = 10**6 * 10**9
MAX_TX_AMOUNT = 5_000_000 * TOKENS
NUM_TOKENS_SELL_TO_ADD_TO_LIQUIDITY = 500_000 * TOKENS
FEE_AMOUNT = 10_000_000_000 * 10**9
MIN_VALUE = 10 * ETHER
LIQUIDITY_TIMELOCK_DELAY = 15724800


def token_args(chain, launch_delay=DAY, name="Token", symbol="TOKEN"):
    return [
        name,
        symbol,
        MAX_TX_AMOUNT,
        NUM_TOKENS_SELL_TO_ADD_TO_LIQUIDITY,
        5,
        5,
        chain.now() + launch_delay,
    ]


def launch_args(liquidity_timelock_delay=LIQUIDITY_TIMELOCK_DELAY, liquidity_amount=100_000_000 * TOKENS, burn_amount=0):
    return [DAY, liquidity_timelock_delay, liquidity_amount, burn_amount]


@pytest.fixture
def chain():
    return Chain()


@pytest.fixture
def owner(chain):
    return chain.accounts[0]


@pytest.fixture
def account(chain):
    return chain.accounts[1]


@pytest.fixture
def other(chain):
    return chain.accounts[2]


@pytest.fixture
def token(chain, owner):
    return chain.deploy(ReflectionToken, *token_args(chain), sender=owner)


@pytest.fixture
def launchpad(chain, owner, account):
    """Factory wired like a production deployment, with account holding 2x the fee."""
    token_timelock_factory = chain.deploy(TokenTimelockFactory, sender=owner)
    timelock_factory = chain.deploy(TimelockFactory, sender=owner)
    vault_factory = chain.deploy(VaultFactory, sender=owner)
    fee_token = chain.deploy(ReflectionToken, *token_args(chain), sender=owner)
    factory = chain.deploy(
        ReflectionTokenFactory,
        token_timelock_factory,
        timelock_factory,
        vault_factory,
        chain.router,
        DEAD_ADDRESS,
        fee_token,
        FEE_AMOUNT,
        MIN_VALUE,
        sender=owner,
    )
    fee_token.transfer(account, 2 * FEE_AMOUNT)
    fee_token.connect(account).approve(factory, 2 * FEE_AMOUNT)
    return factory
