"""
Contract base classes.

A contract instance is only a handle: code (the class) plus an address on a
chain. All mutable data lives in the chain's world state as the contract's
Storage record, so a revert that restores the world state never leaves a
handle pointing at stale data.

Usage:
    class Counter(Contract):
        @dataclass
        class Storage:
            n: int = 0

        @external
        def inc(self, by):
            self.storage.n += by
            self.emit("Inc", by=by)
"""

import functools
import re
from dataclasses import dataclass, field
from typing import Any, Callable, Dict, Iterator, List, Optional, Union

from ..core.canonical import encode_args
from ..core.errors import AlreadyInitialized, NotOwner, OutOfBounds, ZeroAddress
from ..core.ids import ZERO_ADDRESS, checksum


@dataclass(frozen=True)
class Msg:
    """Call context: immediate caller and attached native value."""
    sender: str
    value: int = 0


@dataclass(frozen=True)
class Frame:
    address: str
    msg: Msg


def external(fn: Optional[Callable] = None, *, payable: bool = False) -> Callable:
    """
    Mark a contract method as a callable entry point.

    The wrapped method runs inside a chain frame: msg.sender is resolved,
    attached value is moved to the contract, and a top-level call is atomic.
    Callers attach native currency with the value= keyword.
    """
    def decorate(func: Callable) -> Callable:
        @functools.wraps(func)
        def wrapper(self: "Contract", *args: Any, value: int = 0, **kwargs: Any) -> Any:
            return self.chain.execute(self, func, args, kwargs, value=value, payable=payable)

        wrapper.is_external = True  # type: ignore[attr-defined]
        wrapper.payable = payable  # type: ignore[attr-defined]
        return wrapper

    if fn is not None:
        return decorate(fn)
    return decorate


def only_owner(func: Callable) -> Callable:
    @functools.wraps(func)
    def wrapper(self: "Contract", *args: Any, **kwargs: Any) -> Any:
        if self.msg.sender != self.storage.owner:
            raise NotOwner()
        return func(self, *args, **kwargs)

    return wrapper


def as_address(value: Union[str, "Contract"]) -> str:
    if isinstance(value, Contract):
        return value.address
    return checksum(value)


_CAMEL = re.compile(r"(?<=[a-z0-9])([A-Z])")


def snake_case(name: str) -> str:
    """transferOwnership -> transfer_ownership"""
    return _CAMEL.sub(r"_\1", name).lower()


class Contract:
    """
    Base contract handle.

    Subclasses define a Storage dataclass (all fields defaulted) and an
    optional constructor(). Deploy with chain.deploy() or, from inside
    another contract, chain.create2().
    """

    @dataclass
    class Storage:
        pass

    def __init__(self, chain: Any, address: str, caller: Optional[str] = None) -> None:
        self.chain = chain
        self.address = address
        self.caller = caller

    def __repr__(self) -> str:
        return f"<{type(self).__name__} {self.address}>"

    def __eq__(self, other: object) -> bool:
        if isinstance(other, Contract):
            return self.address == other.address
        return NotImplemented

    def __hash__(self) -> int:
        return hash(self.address)

    def constructor(self) -> None:
        pass

    @classmethod
    def blueprint(cls) -> bytes:
        """Stand-in for contract bytecode: stable per contract class."""
        return f"{cls.__module__}.{cls.__qualname__}".encode("utf-8")

    @classmethod
    def init_code(cls, *args: Any) -> bytes:
        return cls.blueprint() + encode_args(*args)

    def connect(self, account: Union[str, "Contract"]) -> "Contract":
        """Return a handle that calls as account."""
        return type(self)(self.chain, self.address, caller=as_address(account))

    def function(self, name: str) -> Callable:
        """
        Resolve an external method by Solidity-style or Python name.

        "withdraw(address,uint256)" and "withdraw" both resolve to withdraw().
        """
        attr = snake_case(name.split("(", 1)[0])
        method = getattr(self, attr, None)
        if method is None or not getattr(method, "is_external", False):
            raise AttributeError(f"{type(self).__name__} has no external function {name!r}")
        return method

    @property
    def storage(self) -> Any:
        return self.chain.storage_of(self.address)

    @property
    def msg(self) -> Msg:
        return self.chain.current_msg()

    @property
    def now(self) -> int:
        return self.chain.now()

    def emit(self, name: str, **args: Any) -> None:
        self.chain.emit(self.address, name, args)

    def _send_value(self, to: str, amount: int) -> None:
        self.chain.transfer_value(self.address, to, amount)

    def native_balance(self) -> int:
        return self.chain.balance_of(self.address)


@dataclass
class OwnableStorage:
    owner: str = ZERO_ADDRESS


class Ownable(Contract):
    """Single-owner access control. The deployer becomes owner."""

    Storage = OwnableStorage

    def _init_owner(self, owner: str) -> None:
        self.storage.owner = owner
        self.emit("OwnershipTransferred", previousOwner=ZERO_ADDRESS, newOwner=owner)

    def owner(self) -> str:
        return self.storage.owner

    @external
    @only_owner
    def transfer_ownership(self, new_owner: Union[str, Contract]) -> None:
        new_owner = as_address(new_owner)
        if new_owner == ZERO_ADDRESS:
            raise ZeroAddress("Ownable: new owner is the zero address")
        previous = self.storage.owner
        self.storage.owner = new_owner
        self.emit("OwnershipTransferred", previousOwner=previous, newOwner=new_owner)

    @external
    @only_owner
    def renounce_ownership(self) -> None:
        previous = self.storage.owner
        self.storage.owner = ZERO_ADDRESS
        self.emit("OwnershipTransferred", previousOwner=previous, newOwner=ZERO_ADDRESS)


def initializer(func: Callable) -> Callable:
    """Allow a method to run once; storage needs an initialized flag."""
    @functools.wraps(func)
    def wrapper(self: Contract, *args: Any, **kwargs: Any) -> Any:
        if self.storage.initialized:
            raise AlreadyInitialized()
        self.storage.initialized = True
        return func(self, *args, **kwargs)

    return wrapper


@dataclass
class AddressSet:
    """
    Insertion-ordered address set with O(1) removal.

    Removal swaps the last element into the freed slot, so order is only
    preserved until the first removal.
    """
    items: List[str] = field(default_factory=list)
    index: Dict[str, int] = field(default_factory=dict)

    def __contains__(self, address: object) -> bool:
        return address in self.index

    def __len__(self) -> int:
        return len(self.items)

    def __iter__(self) -> Iterator[str]:
        return iter(list(self.items))

    def add(self, address: str) -> bool:
        if address in self.index:
            return False
        self.index[address] = len(self.items)
        self.items.append(address)
        return True

    def remove(self, address: str) -> bool:
        if address not in self.index:
            return False
        i = self.index.pop(address)
        last = self.items.pop()
        if i < len(self.items):
            self.items[i] = last
            self.index[last] = i
        return True

    def at(self, i: int) -> str:
        if not 0 <= i < len(self.items):
            raise OutOfBounds()
        return self.items[i]

    def index_of(self, address: str) -> int:
        # Unknown addresses map to slot 0, like an unset storage mapping.
        return self.index.get(address, 0)
