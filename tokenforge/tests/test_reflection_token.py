"""
Tests for ReflectionToken.

Covers constructor validation, owner operations, bot protection and the
reflection accounting invariants.
"""

import pytest

from tokenforge.config import DAY, ETHER, TOTAL_SUPPLY
from tokenforge.contracts import Pair, ReflectionToken
from tokenforge.core.errors import (
    AlreadyExcluded,
    AlreadyIncluded,
    AlreadyInitialized,
    AmountZero,
    BeforeLaunch,
    ConstructorInvalid,
    ExceedsMaxTx,
    FeeTooHigh,
    NotOwner,
    OutOfBounds,
    TransfersBlocked,
    TransfersNotBlocked,
)
from tokenforge.tests.conftest import (
    MAX_TX_AMOUNT,
    NUM_TOKENS_SELL_TO_ADD_TO_LIQUIDITY,
    TOKENS,
    token_args,
)


def _deploy(chain, owner, **overrides):
    args = token_args(chain)
    positions = {"max_tx_amount": 2, "tax_fee": 4, "liquidity_fee": 5, "launch_time": 6}
    for key, value in overrides.items():
        args[positions[key]] = value
    return chain.deploy(ReflectionToken, *args, sender=owner)


def _balances_sum(token, holders):
    return sum(token.balance_of(h) for h in holders)


# -- constructor --------------------------------------------------------------

def test_requires_max_tx_amount(chain, owner):
    """A zero max transaction amount is rejected."""
    with pytest.raises(ConstructorInvalid) as exc:
        _deploy(chain, owner, max_tx_amount=0)
    assert exc.value.reason == "Amount must be greater than 0"


@pytest.mark.parametrize("fee", ["tax_fee", "liquidity_fee"])
def test_requires_fees_at_most_15(chain, owner, fee):
    """Either fee above 15 percent is rejected."""
    with pytest.raises(ConstructorInvalid) as exc:
        _deploy(chain, owner, **{fee: 16})
    assert exc.value.reason == "Amount must be less than or equal to 15"


def test_limits_prelaunch_period_to_one_week(chain, owner):
    """Launch time must be within a week of deployment."""
    with pytest.raises(ConstructorInvalid) as exc:
        _deploy(chain, owner, launch_time=chain.now() + 604860)
    assert exc.value.reason == "BotProtection: launch time must be within 1 week"


def test_sets_state_variables(token, owner):
    """Constructor arguments are readable back."""
    assert token.name() == "Token"
    assert token.symbol() == "TOKEN"
    assert token.decimals() == 9
    assert token.tax_fee() == 5
    assert token.liquidity_fee() == 5
    assert token.max_tx_amount() == MAX_TX_AMOUNT
    assert token.num_tokens_sell_to_add_to_liquidity() == NUM_TOKENS_SELL_TO_ADD_TO_LIQUIDITY
    assert token.total_supply() == TOTAL_SUPPLY
    assert token.balance_of(owner) == TOTAL_SUPPLY
    assert token.owner() == owner


def test_creates_pair_with_weth(chain, token):
    """The WETH pair is created at deployment."""
    pair = token.uniswap_v2_pair()

    assert token.uniswap_v2_router() == chain.router.address
    assert chain.amm_factory.get_pair(token, chain.weth) == pair
    assert isinstance(chain.contract_at(pair), Pair)


def test_excludes_owner_and_contract_from_fee(token, owner):
    """Deployer and contract start fee-exempt."""
    assert token.excluded_from_fee(0) == owner
    assert token.excluded_from_fee(1) == token.address
    assert token.excluded_from_fee_length() == 2


# -- initialize ---------------------------------------------------------------

def test_initialize_only_owner(token, owner, account):
    """Only the owner can initialize."""
    with pytest.raises(NotOwner):
        token.connect(account).initialize(owner, account)


def test_initialize_sets_addresses(token, owner, account):
    """initialize stores the lock and vault addresses."""
    token.initialize(owner, account)

    assert token.liquidity_timelock_address() == owner
    assert token.vault_address() == account


def test_initialize_only_once(token, owner, account):
    """A second initialize fails."""
    token.initialize(owner, account)
    with pytest.raises(AlreadyInitialized) as exc:
        token.initialize(owner, account)
    assert exc.value.reason == "Initializable: contract is already initialized"


# -- bot protection -----------------------------------------------------------

def test_blocks_recipients_before_launch(token, owner, account, other):
    """Pre-launch recipients cannot send directly or via transferFrom."""
    token.enable_bot_protection()
    token.transfer(account, 100_000_000 * TOKENS)

    assert token.blocked_length() == 1
    assert token.blocked(token.blocked_index(account)) == account
    with pytest.raises(TransfersBlocked) as exc:
        token.connect(account).transfer(owner, 50_000_000 * TOKENS)
    assert exc.value.reason == "BotProtection: transfers blocked"

    token.connect(account).approve(other, 50_000_000 * TOKENS)
    with pytest.raises(TransfersBlocked):
        token.connect(other).transfer_from(account, owner, 50_000_000 * TOKENS)


def test_blocks_transfer_from_recipients_before_launch(token, owner, account, other):
    """Recipients of a pre-launch transferFrom are blocked too."""
    token.enable_bot_protection()
    token.approve(other, 100_000_000 * TOKENS)
    token.connect(other).transfer_from(owner, account, 100_000_000 * TOKENS)

    assert token.transfers_blocked(account)
    with pytest.raises(TransfersBlocked):
        token.connect(account).transfer(owner, 50_000_000 * TOKENS)


def test_allows_transfers_after_launch(chain, token, owner, account, other):
    """After launch recipients are not blocked."""
    token.enable_bot_protection()
    chain.increase_time(DAY)
    token.transfer(account, 100_000_000 * TOKENS)

    assert token.blocked_length() == 0
    token.connect(account).transfer(owner, 50_000_000 * TOKENS)
    token.connect(account).approve(other, 50_000_000 * TOKENS)
    token.connect(other).transfer_from(account, owner, 50_000_000 * TOKENS)


def test_no_blocking_without_bot_protection(token, account):
    """Without protection nobody is blocked."""
    token.transfer(account, 10**9)
    assert not token.transfers_blocked(account)


def test_recipient_blocked_exactly_once(chain, token, account):
    """Repeat deliveries to a blocked recipient do not add it again."""
    token.enable_bot_protection()
    token.transfer(account, 1_000_000 * TOKENS)
    token.transfer(account, 1_000_000 * TOKENS)

    assert token.blocked_length() == 1
    assert len(chain.events(token, "TransfersBlocked")) == 1


def test_enable_bot_protection(chain, token, account):
    """Protection is owner-only and only ever turns on."""
    with pytest.raises(NotOwner):
        token.connect(account).enable_bot_protection()

    assert token.bot_protection_enabled() is False
    token.enable_bot_protection()
    assert token.bot_protection_enabled() is True

    token.enable_bot_protection()
    assert token.bot_protection_enabled() is True
    assert len(chain.events(token, "BotProtectionEnabled")) == 1


def test_allow_transfers(chain, token, account, other):
    """Unblocking is owner-only and waits for launch."""
    with pytest.raises(NotOwner):
        token.connect(account).allow_transfers(account)

    token.enable_bot_protection()
    token.transfer(account, 100_000_000 * TOKENS)
    token.transfer(other, 100_000_000 * TOKENS)
    assert token.blocked_length() == 2

    with pytest.raises(BeforeLaunch) as exc:
        token.allow_transfers(account)
    assert exc.value.reason == "BotProtection: before launch"

    chain.increase_time(DAY)
    token.allow_transfers(account)

    assert not token.transfers_blocked(account)
    assert token.transfers_blocked(other)
    assert token.blocked_length() == 1
    assert token.blocked(token.blocked_index(other)) == other
    assert chain.events(token, "TransfersAllowed")[-1].args == {"account": account}


def test_allow_transfers_requires_blocked_account(chain, token, account):
    """Unblocking an unblocked account fails."""
    chain.increase_time(DAY)
    with pytest.raises(TransfersNotBlocked):
        token.allow_transfers(account)


# -- fee exclusion ------------------------------------------------------------

def test_excluded_length(token):
    """No account starts excluded from reward."""
    assert token.excluded_length() == 0


def test_include_in_reward_requires_excluded(token, owner):
    """Including an included account fails."""
    with pytest.raises(AlreadyIncluded) as exc:
        token.include_in_reward(owner)
    assert exc.value.reason == "Account is already included"


def test_exclude_from_fee(token, owner, account):
    """Fee exclusion appends and rejects duplicates."""
    with pytest.raises(AlreadyExcluded) as exc:
        token.exclude_from_fee(owner)
    assert exc.value.reason == "Account is already excluded"

    token.exclude_from_fee(account)
    assert token.excluded_from_fee(2) == account


def test_include_in_fee(token, owner, account):
    """Fee inclusion removes with swap-and-pop."""
    with pytest.raises(AlreadyIncluded):
        token.include_in_fee(account)

    token.include_in_fee(owner)

    assert token.excluded_from_fee(0) == token.address
    with pytest.raises(OutOfBounds):
        token.excluded_from_fee(1)


def test_set_max_tx_amount(token):
    """Max transaction amount must be positive."""
    with pytest.raises(AmountZero):
        token.set_max_tx_amount(0)

    token.set_max_tx_amount(5000 * TOKENS)
    assert token.max_tx_amount() == 5000 * TOKENS


def test_set_fee_percents(token, account):
    """Fee setters are owner-only and capped."""
    with pytest.raises(FeeTooHigh):
        token.set_tax_fee_percent(16)
    with pytest.raises(NotOwner):
        token.connect(account).set_liquidity_fee_percent(1)

    token.set_tax_fee_percent(2)
    token.set_liquidity_fee_percent(3)
    assert (token.tax_fee(), token.liquidity_fee()) == (2, 3)


# -- reflection ---------------------------------------------------------------

def test_fee_free_transfer_is_exact(token, owner, account):
    """Transfers from an exempt sender arrive in full."""
    token.transfer(account, 1234 * TOKENS)
    assert token.balance_of(account) == 1234 * TOKENS
    assert token.total_fees() == 0


def test_taxed_transfer_reflects_fee(token, owner, account, other):
    """Taxed transfers reflect the tax and collect the liquidity fee."""
    token.transfer(account, 100_000_000 * TOKENS)
    amount = 1_000_000 * TOKENS

    token.connect(account).transfer(other, amount)

    assert token.total_fees() == amount * 5 // 100
    # other received 90% plus its share of the reflected fee
    assert token.balance_of(other) >= amount * 90 // 100
    assert token.balance_of(token) >= amount * 5 // 100
    # holders gained from the reflection
    assert token.balance_of(owner) > TOTAL_SUPPLY - 100_000_000 * TOKENS


def test_taxed_transfer_respects_max_tx(token, account, other):
    """Taxed transfers above the cap fail."""
    token.transfer(account, 100_000_000 * TOKENS)
    with pytest.raises(ExceedsMaxTx):
        token.connect(account).transfer(other, MAX_TX_AMOUNT + 1)


def test_balances_sum_to_total_supply(token, owner, account, other):
    """Sum of balances stays within one unit per holder of the supply."""
    holders = [owner, account, other, token.address]
    token.transfer(account, 100_000_000 * TOKENS)
    for _ in range(3):
        token.connect(account).transfer(other, 1_000_000 * TOKENS)
        token.connect(other).transfer(account, 500_000 * TOKENS)

    total = _balances_sum(token, holders)
    assert TOTAL_SUPPLY - len(holders) <= total <= TOTAL_SUPPLY


def test_balances_sum_with_excluded_holder_and_pool_trades(chain, token, owner, account, other):
    """The supply invariant holds across exclusion, pool trades and re-inclusion."""
    pair = token.uniswap_v2_pair()
    holders = [owner, account, other, token.address, pair, chain.router.address]
    token.approve(chain.router, 100_000_000 * TOKENS)
    chain.router.connect(owner).add_liquidity_eth(
        token, 100_000_000 * TOKENS, 0, 0, owner, chain.now(), value=10 * ETHER
    )
    token.transfer(account, 100_000_000 * TOKENS)
    token.transfer(other, 100_000_000 * TOKENS)

    token.exclude_from_reward(account)
    token.connect(account).transfer(other, 1_000_000 * TOKENS)
    router = chain.router.connect(other)
    router.swap_exact_eth_for_tokens_supporting_fee_on_transfer_tokens(
        0, [chain.weth, token], other, chain.now(), value=ETHER // 10
    )
    token.connect(other).approve(chain.router, 500_000 * TOKENS)
    router.swap_exact_tokens_for_eth_supporting_fee_on_transfer_tokens(
        500_000 * TOKENS, 0, [token, chain.weth], other, chain.now()
    )

    total = _balances_sum(token, holders)
    assert TOTAL_SUPPLY - len(holders) <= total <= TOTAL_SUPPLY

    token.include_in_reward(account)
    token.connect(account).transfer(other, 1_000_000 * TOKENS)

    total = _balances_sum(token, holders)
    assert TOTAL_SUPPLY - len(holders) <= total <= TOTAL_SUPPLY


def test_excluded_account_keeps_exact_balance(token, owner, account, other):
    """Excluded holders do not receive reflections."""
    token.transfer(account, 100_000_000 * TOKENS)
    token.transfer(other, 100_000_000 * TOKENS)
    token.exclude_from_reward(account)
    before = token.balance_of(account)

    token.connect(other).transfer(owner, 1_000_000 * TOKENS)
    token.connect(other).transfer(token.uniswap_v2_pair(), 1_000_000 * TOKENS)

    assert token.is_excluded_from_reward(account)
    assert token.balance_of(account) == before
    with pytest.raises(AlreadyExcluded):
        token.exclude_from_reward(account)


def test_include_in_reward_preserves_balance(token, account, other):
    """Re-inclusion keeps the holder's balance."""
    token.transfer(account, 100_000_000 * TOKENS)
    token.transfer(other, 100_000_000 * TOKENS)
    token.exclude_from_reward(account)
    token.connect(other).transfer(token.uniswap_v2_pair(), 1_000_000 * TOKENS)
    balance = token.balance_of(account)

    token.include_in_reward(account)

    assert not token.is_excluded_from_reward(account)
    assert token.balance_of(account) == balance
    assert token.excluded_length() == 0


def test_deliver_distributes_to_holders(token, owner, account, other):
    """deliver() burns reflection from the caller for everyone else."""
    token.transfer(account, 100_000_000 * TOKENS)
    before = token.balance_of(owner)

    token.connect(account).deliver(1_000_000 * TOKENS)

    assert token.total_fees() == 1_000_000 * TOKENS
    assert token.balance_of(owner) > before
    assert token.balance_of(account) < 100_000_000 * TOKENS


def test_reflection_round_trip(token):
    """Reflection and token amounts convert back exactly."""
    r_amount = token.reflection_from_token(1000 * TOKENS)
    assert token.token_from_reflection(r_amount) == 1000 * TOKENS


# -- swap and liquify ---------------------------------------------------------

def test_swap_and_liquify_adds_liquidity(chain, token, owner, account, other):
    """Collected liquidity fees are paired into the pool once over the threshold."""
    token.approve(chain.router, 100_000_000 * TOKENS)
    chain.router.connect(owner).add_liquidity_eth(
        token, 100_000_000 * TOKENS, 0, 0, owner, chain.now(), value=10 * ETHER
    )
    pair = chain.at(Pair, token.uniswap_v2_pair())
    lp_before = pair.balance_of(owner)
    token.transfer(account, 100_000_000 * TOKENS)

    for _ in range(4):
        token.connect(account).transfer(other, MAX_TX_AMOUNT)

    assert chain.events(token, "SwapAndLiquify")
    assert pair.balance_of(owner) > lp_before
    assert token.balance_of(token) < NUM_TOKENS_SELL_TO_ADD_TO_LIQUIDITY * 2


def test_swap_and_liquify_skipped_without_pool_reserves(chain, token, account, other):
    """Fees accumulate while the pool is empty."""
    token.transfer(account, 100_000_000 * TOKENS)
    for _ in range(4):
        token.connect(account).transfer(other, MAX_TX_AMOUNT)

    assert not chain.events(token, "SwapAndLiquify")
    assert token.balance_of(token) >= 4 * MAX_TX_AMOUNT * 5 // 100


def test_swap_and_liquify_can_be_disabled(chain, token, account):
    """Swap-and-liquify can be switched off."""
    token.set_swap_and_liquify_enabled(False)
    assert token.swap_and_liquify_enabled() is False
    assert chain.events(token, "SwapAndLiquifyEnabledUpdated")[-1].args == {"enabled": False}
