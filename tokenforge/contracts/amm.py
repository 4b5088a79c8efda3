"""
Constant-product AMM: wrapped native token, pair factory, pairs and router.

Shaped after Uniswap V2 with a 0.25% swap fee. ReflectionToken and the token
factory use it through the router only.
"""

import math
from dataclasses import dataclass, field
from typing import Dict, List, Sequence, Tuple

from eth_hash.auto import keccak
from eth_utils import to_canonical_address

from ..chain.contract import Contract, as_address, external
from ..config import MINIMUM_LIQUIDITY, SWAP_FEE_DENOMINATOR, SWAP_FEE_NUMERATOR
from ..core.errors import AmmError
from ..core.ids import ZERO_ADDRESS
from .erc20 import ERC20, Address, ERC20Storage


def sort_tokens(token_a: str, token_b: str) -> Tuple[str, str]:
    if token_a == token_b:
        raise AmmError("UniswapV2: IDENTICAL_ADDRESSES")
    token0, token1 = sorted((token_a, token_b), key=lambda a: int(a, 16))
    if token0 == ZERO_ADDRESS:
        raise AmmError("UniswapV2: ZERO_ADDRESS")
    return token0, token1


def get_amount_out(amount_in: int, reserve_in: int, reserve_out: int) -> int:
    if amount_in <= 0:
        raise AmmError("UniswapV2Library: INSUFFICIENT_INPUT_AMOUNT")
    if reserve_in <= 0 or reserve_out <= 0:
        raise AmmError("UniswapV2Library: INSUFFICIENT_LIQUIDITY")
    amount_in_with_fee = amount_in * SWAP_FEE_NUMERATOR
    return (amount_in_with_fee * reserve_out) // (reserve_in * SWAP_FEE_DENOMINATOR + amount_in_with_fee)


def quote(amount_a: int, reserve_a: int, reserve_b: int) -> int:
    if amount_a <= 0:
        raise AmmError("UniswapV2Library: INSUFFICIENT_AMOUNT")
    if reserve_a <= 0 or reserve_b <= 0:
        raise AmmError("UniswapV2Library: INSUFFICIENT_LIQUIDITY")
    return amount_a * reserve_b // reserve_a


class WETH(ERC20):
    """Wrapped native currency."""

    def constructor(self) -> None:
        super().constructor("Wrapped Ether", "WETH", 18)

    @external(payable=True)
    def deposit(self) -> None:
        self._mint(self.msg.sender, self.msg.value)

    @external
    def withdraw(self, amount: int) -> None:
        sender = self.msg.sender
        self._burn(sender, amount)
        self._send_value(sender, amount)


@dataclass
class PairStorage(ERC20Storage):
    factory: str = ZERO_ADDRESS
    token0: str = ZERO_ADDRESS
    token1: str = ZERO_ADDRESS
    reserve0: int = 0
    reserve1: int = 0
    block_timestamp_last: int = 0
    locked: bool = False


class Pair(ERC20):
    """Two-asset pool; its own balance ledger is the pool-share token."""

    Storage = PairStorage

    def constructor(self, token0: str, token1: str) -> None:
        super().constructor("TokenForge LPs", "TF-LP", 18)
        s = self.storage
        s.factory = self.msg.sender
        s.token0 = token0
        s.token1 = token1

    def token0(self) -> str:
        return self.storage.token0

    def token1(self) -> str:
        return self.storage.token1

    def get_reserves(self) -> Tuple[int, int, int]:
        s = self.storage
        return s.reserve0, s.reserve1, s.block_timestamp_last

    def _token(self, address: str) -> ERC20:
        return self.chain.contract_at(address)

    def _balances(self) -> Tuple[int, int]:
        s = self.storage
        return (
            self._token(s.token0).balance_of(self.address),
            self._token(s.token1).balance_of(self.address),
        )

    def _lock(self) -> None:
        if self.storage.locked:
            raise AmmError("UniswapV2: LOCKED")
        self.storage.locked = True

    def _update(self, balance0: int, balance1: int) -> None:
        s = self.storage
        s.reserve0 = balance0
        s.reserve1 = balance1
        s.block_timestamp_last = self.now
        self.emit("Sync", reserve0=balance0, reserve1=balance1)

    @external
    def mint(self, to: Address) -> int:
        to = as_address(to)
        self._lock()
        s = self.storage
        balance0, balance1 = self._balances()
        amount0 = balance0 - s.reserve0
        amount1 = balance1 - s.reserve1

        if s.total_supply == 0:
            liquidity = math.isqrt(amount0 * amount1) - MINIMUM_LIQUIDITY
            if liquidity > 0:
                self._mint(ZERO_ADDRESS, MINIMUM_LIQUIDITY)
        else:
            liquidity = min(
                amount0 * s.total_supply // s.reserve0,
                amount1 * s.total_supply // s.reserve1,
            )
        if liquidity <= 0:
            raise AmmError("UniswapV2: INSUFFICIENT_LIQUIDITY_MINTED")
        self._mint(to, liquidity)

        self._update(balance0, balance1)
        self.emit("Mint", sender=self.msg.sender, amount0=amount0, amount1=amount1)
        s.locked = False
        return liquidity

    @external
    def burn(self, to: Address) -> Tuple[int, int]:
        to = as_address(to)
        self._lock()
        s = self.storage
        balance0, balance1 = self._balances()
        liquidity = self.balance_of(self.address)

        amount0 = liquidity * balance0 // s.total_supply
        amount1 = liquidity * balance1 // s.total_supply
        if amount0 <= 0 or amount1 <= 0:
            raise AmmError("UniswapV2: INSUFFICIENT_LIQUIDITY_BURNED")
        self._burn(self.address, liquidity)
        self._token(s.token0).transfer(to, amount0)
        self._token(s.token1).transfer(to, amount1)

        balance0, balance1 = self._balances()
        self._update(balance0, balance1)
        self.emit("Burn", sender=self.msg.sender, amount0=amount0, amount1=amount1, to=to)
        s.locked = False
        return amount0, amount1

    @external
    def swap(self, amount0_out: int, amount1_out: int, to: Address) -> None:
        to = as_address(to)
        if amount0_out <= 0 and amount1_out <= 0:
            raise AmmError("UniswapV2: INSUFFICIENT_OUTPUT_AMOUNT")
        self._lock()
        s = self.storage
        if amount0_out >= s.reserve0 or amount1_out >= s.reserve1:
            raise AmmError("UniswapV2: INSUFFICIENT_LIQUIDITY")
        if to in (s.token0, s.token1):
            raise AmmError("UniswapV2: INVALID_TO")

        if amount0_out > 0:
            self._token(s.token0).transfer(to, amount0_out)
        if amount1_out > 0:
            self._token(s.token1).transfer(to, amount1_out)
        balance0, balance1 = self._balances()

        amount0_in = max(balance0 - (s.reserve0 - amount0_out), 0)
        amount1_in = max(balance1 - (s.reserve1 - amount1_out), 0)
        if amount0_in <= 0 and amount1_in <= 0:
            raise AmmError("UniswapV2: INSUFFICIENT_INPUT_AMOUNT")

        fee = SWAP_FEE_DENOMINATOR - SWAP_FEE_NUMERATOR
        adjusted0 = balance0 * SWAP_FEE_DENOMINATOR - amount0_in * fee
        adjusted1 = balance1 * SWAP_FEE_DENOMINATOR - amount1_in * fee
        if adjusted0 * adjusted1 < s.reserve0 * s.reserve1 * SWAP_FEE_DENOMINATOR**2:
            raise AmmError("UniswapV2: K")

        self._update(balance0, balance1)
        self.emit(
            "Swap",
            sender=self.msg.sender,
            amount0In=amount0_in,
            amount1In=amount1_in,
            amount0Out=amount0_out,
            amount1Out=amount1_out,
            to=to,
        )
        s.locked = False

    @external
    def sync(self) -> None:
        self._lock()
        self._update(*self._balances())
        self.storage.locked = False


@dataclass
class AmmFactoryStorage:
    pairs: Dict[str, Dict[str, str]] = field(default_factory=dict)
    all_pairs: List[str] = field(default_factory=list)


class AmmFactory(Contract):
    Storage = AmmFactoryStorage

    def get_pair(self, token_a: Address, token_b: Address) -> str:
        return self.storage.pairs.get(as_address(token_a), {}).get(as_address(token_b), ZERO_ADDRESS)

    def all_pairs_length(self) -> int:
        return len(self.storage.all_pairs)

    @external
    def create_pair(self, token_a: Address, token_b: Address) -> str:
        token0, token1 = sort_tokens(as_address(token_a), as_address(token_b))
        if self.get_pair(token0, token1) != ZERO_ADDRESS:
            raise AmmError("UniswapV2: PAIR_EXISTS")
        salt = keccak(to_canonical_address(token0) + to_canonical_address(token1))
        pair = self.chain.create2(Pair, salt, token0, token1).address

        s = self.storage
        s.pairs.setdefault(token0, {})[token1] = pair
        s.pairs.setdefault(token1, {})[token0] = pair
        s.all_pairs.append(pair)
        self.emit("PairCreated", token0=token0, token1=token1, pair=pair, length=len(s.all_pairs))
        return pair


@dataclass
class RouterStorage:
    factory: str = ZERO_ADDRESS
    weth: str = ZERO_ADDRESS


class Router(Contract):
    Storage = RouterStorage

    def constructor(self, factory: str, weth: str) -> None:
        self.storage.factory = factory
        self.storage.weth = weth

    def factory(self) -> str:
        return self.storage.factory

    def weth(self) -> str:
        return self.storage.weth

    def _factory(self) -> AmmFactory:
        return self.chain.at(AmmFactory, self.storage.factory)

    def _weth(self) -> WETH:
        return self.chain.at(WETH, self.storage.weth)

    def _ensure(self, deadline: int) -> None:
        if deadline < self.now:
            raise AmmError("UniswapV2Router: EXPIRED")

    def get_reserves(self, token_a: str, token_b: str) -> Tuple[int, int]:
        token0, _ = sort_tokens(token_a, token_b)
        pair = self._factory().get_pair(token_a, token_b)
        if pair == ZERO_ADDRESS:
            return 0, 0
        reserve0, reserve1, _ = self.chain.at(Pair, pair).get_reserves()
        return (reserve0, reserve1) if token_a == token0 else (reserve1, reserve0)

    def get_amount_out(self, amount_in: int, reserve_in: int, reserve_out: int) -> int:
        return get_amount_out(amount_in, reserve_in, reserve_out)

    def get_amounts_out(self, amount_in: int, path: Sequence[Address]) -> List[int]:
        path = [as_address(p) for p in path]
        amounts = [amount_in]
        for token_in, token_out in zip(path, path[1:]):
            reserve_in, reserve_out = self.get_reserves(token_in, token_out)
            amounts.append(get_amount_out(amounts[-1], reserve_in, reserve_out))
        return amounts

    def _add_liquidity(
        self,
        token_a: str,
        token_b: str,
        amount_a_desired: int,
        amount_b_desired: int,
        amount_a_min: int,
        amount_b_min: int,
    ) -> Tuple[int, int]:
        factory = self._factory()
        if factory.get_pair(token_a, token_b) == ZERO_ADDRESS:
            factory.create_pair(token_a, token_b)
        reserve_a, reserve_b = self.get_reserves(token_a, token_b)
        if reserve_a == 0 and reserve_b == 0:
            return amount_a_desired, amount_b_desired

        amount_b_optimal = quote(amount_a_desired, reserve_a, reserve_b)
        if amount_b_optimal <= amount_b_desired:
            if amount_b_optimal < amount_b_min:
                raise AmmError("UniswapV2Router: INSUFFICIENT_B_AMOUNT")
            return amount_a_desired, amount_b_optimal
        amount_a_optimal = quote(amount_b_desired, reserve_b, reserve_a)
        if amount_a_optimal < amount_a_min:
            raise AmmError("UniswapV2Router: INSUFFICIENT_A_AMOUNT")
        return amount_a_optimal, amount_b_desired

    @external(payable=True)
    def add_liquidity_eth(
        self,
        token: Address,
        amount_token_desired: int,
        amount_token_min: int,
        amount_eth_min: int,
        to: Address,
        deadline: int,
    ) -> Tuple[int, int, int]:
        self._ensure(deadline)
        token = as_address(token)
        weth = self._weth()
        amount_token, amount_eth = self._add_liquidity(
            token,
            weth.address,
            amount_token_desired,
            self.msg.value,
            amount_token_min,
            amount_eth_min,
        )
        pair = self.chain.at(Pair, self._factory().get_pair(token, weth.address))
        self.chain.contract_at(token).transfer_from(self.msg.sender, pair.address, amount_token)
        weth.deposit(value=amount_eth)
        weth.transfer(pair.address, amount_eth)
        liquidity = pair.mint(as_address(to))
        if self.msg.value > amount_eth:
            self._send_value(self.msg.sender, self.msg.value - amount_eth)
        return amount_token, amount_eth, liquidity

    @external
    def remove_liquidity_eth(
        self,
        token: Address,
        liquidity: int,
        amount_token_min: int,
        amount_eth_min: int,
        to: Address,
        deadline: int,
    ) -> Tuple[int, int]:
        self._ensure(deadline)
        token = as_address(token)
        weth = self._weth()
        pair = self.chain.at(Pair, self._factory().get_pair(token, weth.address))
        pair.transfer_from(self.msg.sender, pair.address, liquidity)
        amount0, amount1 = pair.burn(self.address)
        token0, _ = sort_tokens(token, weth.address)
        amount_token, amount_eth = (amount0, amount1) if token == token0 else (amount1, amount0)
        if amount_token < amount_token_min:
            raise AmmError("UniswapV2Router: INSUFFICIENT_A_AMOUNT")
        if amount_eth < amount_eth_min:
            raise AmmError("UniswapV2Router: INSUFFICIENT_B_AMOUNT")

        erc20 = self.chain.contract_at(token)
        erc20.transfer(as_address(to), erc20.balance_of(self.address))
        weth.withdraw(amount_eth)
        self._send_value(as_address(to), amount_eth)
        return amount_token, amount_eth

    def _swap_supporting_fee_on_transfer_tokens(self, path: List[str], to: str) -> None:
        factory = self._factory()
        for i, (token_in, token_out) in enumerate(zip(path, path[1:])):
            token0, _ = sort_tokens(token_in, token_out)
            pair = self.chain.at(Pair, factory.get_pair(token_in, token_out))
            reserve0, reserve1, _ = pair.get_reserves()
            reserve_in, reserve_out = (reserve0, reserve1) if token_in == token0 else (reserve1, reserve0)
            amount_in = self.chain.contract_at(token_in).balance_of(pair.address) - reserve_in
            amount_out = get_amount_out(amount_in, reserve_in, reserve_out)
            amount0_out, amount1_out = (0, amount_out) if token_in == token0 else (amount_out, 0)
            if i < len(path) - 2:
                recipient = factory.get_pair(token_out, path[i + 2])
            else:
                recipient = to
            pair.swap(amount0_out, amount1_out, recipient)

    @external
    def swap_exact_tokens_for_eth_supporting_fee_on_transfer_tokens(
        self,
        amount_in: int,
        amount_out_min: int,
        path: Sequence[Address],
        to: Address,
        deadline: int,
    ) -> None:
        self._ensure(deadline)
        path = [as_address(p) for p in path]
        weth = self._weth()
        if path[-1] != weth.address:
            raise AmmError("UniswapV2Router: INVALID_PATH")
        first_pair = self._factory().get_pair(path[0], path[1])
        self.chain.contract_at(path[0]).transfer_from(self.msg.sender, first_pair, amount_in)
        self._swap_supporting_fee_on_transfer_tokens(path, self.address)
        amount_out = weth.balance_of(self.address)
        if amount_out < amount_out_min:
            raise AmmError("UniswapV2Router: INSUFFICIENT_OUTPUT_AMOUNT")
        weth.withdraw(amount_out)
        self._send_value(as_address(to), amount_out)

    @external(payable=True)
    def swap_exact_eth_for_tokens_supporting_fee_on_transfer_tokens(
        self,
        amount_out_min: int,
        path: Sequence[Address],
        to: Address,
        deadline: int,
    ) -> None:
        self._ensure(deadline)
        path = [as_address(p) for p in path]
        to = as_address(to)
        weth = self._weth()
        if path[0] != weth.address:
            raise AmmError("UniswapV2Router: INVALID_PATH")
        weth.deposit(value=self.msg.value)
        weth.transfer(self._factory().get_pair(path[0], path[1]), self.msg.value)
        token_out = self.chain.contract_at(path[-1])
        before = token_out.balance_of(to)
        self._swap_supporting_fee_on_transfer_tokens(path, to)
        if token_out.balance_of(to) - before < amount_out_min:
            raise AmmError("UniswapV2Router: INSUFFICIENT_OUTPUT_AMOUNT")
