"""
Simulated chain: world state, call frames and deployment.

Every top-level operation (an @external call, a deploy, a native transfer)
runs inside transaction(): the world state is copied first and restored if
anything raises, so a failed call leaves no trace, including events.
"""

from contextlib import contextmanager
from typing import Any, Callable, Dict, Iterator, List, Optional, Sequence, Type, TypeVar, Union

from ..checkpoint import Checkpoint, compute_state_hash
from ..config import ChainSettings
from ..core.clock import BlockClock
from ..core.errors import (
    CallContextError,
    DeploymentCollision,
    InsufficientFunds,
    IntegrityError,
    NotPayable,
)
from ..core.events import Event
from ..core.ids import account_address, checksum, create2_address, create_address, init_code_hash
from ..core.state import WorldState
from ..log.store import EventStore, InMemoryEventStore
from ..logging_config import get_logger
from .contract import Contract, Frame, Msg, as_address

C = TypeVar("C", bound=Contract)

logger = get_logger(__name__)


class Chain:
    """
    In-process chain.

    Usage:
        chain = Chain()
        owner, account = chain.accounts[:2]
        token = chain.deploy(ReflectionToken, "Token", "TOKEN", ..., sender=owner)
        token.connect(owner).transfer(account, 10**9)
        chain.increase_time(86400)
    """

    def __init__(
        self,
        settings: Optional[ChainSettings] = None,
        event_store: Optional[EventStore] = None,
    ) -> None:
        self.settings = settings or ChainSettings()
        self.clock = BlockClock(self.settings.genesis_time)
        self.state = WorldState()
        self.event_store = event_store or InMemoryEventStore()

        self._frames: List[Frame] = []
        self._pending: List[Event] = []
        self._in_transaction = False
        self._checkpoints: Dict[int, Checkpoint] = {}
        self._next_snapshot_id = 1

        self.accounts: List[str] = [
            account_address(f"tokenforge:account:{i}") for i in range(self.settings.account_count)
        ]
        for account in self.accounts:
            self.state.balances[account] = self.settings.account_balance

        self._boot_amm()

    def _boot_amm(self) -> None:
        # Imported here: the AMM contracts are built on this module's runtime.
        from ..contracts.amm import WETH, AmmFactory, Router

        operator = account_address("tokenforge:amm-operator")
        self.weth = self.deploy(WETH, sender=operator)
        self.amm_factory = self.deploy(AmmFactory, sender=operator)
        self.router = self.deploy(Router, self.amm_factory.address, self.weth.address, sender=operator)

    # -- time ---------------------------------------------------------------

    def now(self) -> int:
        return self.clock.now()

    def increase_time(self, seconds: int) -> int:
        self.clock = self.clock.tick(seconds)
        return self.clock.now()

    def mine(self) -> int:
        """Advance to the next block, one second later."""
        return self.increase_time(1)

    def set_next_timestamp(self, ts: int) -> int:
        self.clock = self.clock.at(ts)
        return self.clock.now()

    # -- state access -------------------------------------------------------

    def storage_of(self, address: str) -> Any:
        storage = self.state.get_storage(address)
        if storage is None:
            raise CallContextError(f"No contract at {address}")
        return storage

    def balance_of(self, address: Union[str, Contract]) -> int:
        return self.state.balances.get(as_address(address), 0)

    def at(self, contract_cls: Type[C], address: Union[str, Contract], caller: Optional[str] = None) -> C:
        """Attach a handle of contract_cls to an existing deployment."""
        address = as_address(address)
        if not self.state.has_code(address):
            raise CallContextError(f"No contract at {address}")
        return contract_cls(self, address, caller=caller)

    def contract_at(self, address: Union[str, Contract]) -> Contract:
        """Handle typed with the class actually deployed at address."""
        address = as_address(address)
        if not self.state.has_code(address):
            raise CallContextError(f"No contract at {address}")
        return self.state.code[address](self, address)

    def state_hash(self) -> str:
        return compute_state_hash(self.state)

    def events(self, emitter: Optional[Union[str, Contract]] = None, name: Optional[str] = None) -> List[Event]:
        if emitter is not None:
            emitter = as_address(emitter)
        return list(self.event_store.read(emitter=emitter, name=name))

    # -- calls --------------------------------------------------------------

    @contextmanager
    def transaction(self) -> Iterator[None]:
        """
        Atomic top-level unit.

        Nested use joins the enclosing unit. On any exception the world state
        and pending events are restored and the exception propagates.
        """
        if self._in_transaction:
            yield
            return

        checkpoint = self.state.copy()
        self._pending = []
        self._in_transaction = True
        try:
            yield
        except Exception as exc:
            self.state = checkpoint
            self._pending = []
            logger.info("Transaction reverted: %s", exc)
            raise
        finally:
            self._in_transaction = False
        self._commit()

    def _commit(self) -> None:
        self.state.version += 1
        for event in self._pending:
            self.event_store.append(event)
        logger.debug("Committed state version %d with %d events", self.state.version, len(self._pending))
        self._pending = []

    def current_msg(self) -> Msg:
        if not self._frames:
            raise CallContextError("msg is only available inside a contract call")
        return self._frames[-1].msg

    def execute(
        self,
        contract: Contract,
        func: Callable,
        args: Sequence[Any],
        kwargs: Dict[str, Any],
        value: int = 0,
        payable: bool = False,
    ) -> Any:
        if value and not payable:
            raise NotPayable(f"{func.__name__} is not payable")
        if self._frames:
            sender = self._frames[-1].address
        else:
            sender = contract.caller or self.accounts[0]

        with self.transaction():
            self._frames.append(Frame(address=contract.address, msg=Msg(sender=sender, value=value)))
            try:
                if value:
                    self._move_value(sender, contract.address, value)
                return func(contract, *args, **kwargs)
            finally:
                self._frames.pop()

    def emit(self, emitter: str, name: str, args: Dict[str, Any]) -> None:
        if not self._frames:
            raise CallContextError("events can only be emitted inside a contract call")
        self._pending.append(Event(name=name, emitter=emitter, ts=self.now(), args=dict(args)))

    # -- native currency ------------------------------------------------------

    def _move_value(self, src: str, dst: str, amount: int) -> None:
        balance = self.state.balances.get(src, 0)
        if balance < amount:
            raise InsufficientFunds()
        self.state.balances[src] = balance - amount
        self.state.balances[dst] = self.state.balances.get(dst, 0) + amount

    def transfer_value(self, src: str, dst: str, amount: int) -> None:
        """Native transfer made by a running contract."""
        if not self._frames or self._frames[-1].address != src:
            raise CallContextError("only the executing contract can send its balance")
        self._move_value(src, as_address(dst), amount)

    def send(self, sender: Union[str, Contract], to: Union[str, Contract], amount: int) -> None:
        """Native transfer between externally-owned accounts."""
        with self.transaction():
            self._move_value(as_address(sender), as_address(to), amount)

    # -- deployment -----------------------------------------------------------

    def deploy(
        self,
        contract_cls: Type[C],
        *args: Any,
        sender: Optional[Union[str, Contract]] = None,
        value: int = 0,
    ) -> C:
        """Deploy from an externally-owned account. Address depends on sender nonce."""
        if self._frames:
            raise CallContextError("contracts deploy with create2")
        sender = as_address(sender) if sender is not None else self.accounts[0]
        with self.transaction():
            address = create_address(sender, self.state.next_nonce(sender))
            self._install(contract_cls, address, args, caller=sender, value=value)
        logger.debug("Deployed %s at %s", contract_cls.__name__, address)
        return contract_cls(self, address, caller=sender)

    def create2(self, contract_cls: Type[C], salt: bytes, *args: Any) -> C:
        """
        Deterministic deployment by the executing contract.

        Raises:
            DeploymentCollision: If the derived address is already occupied
        """
        if not self._frames:
            raise CallContextError("create2 is only available inside a contract call")
        deployer = self._frames[-1].address
        address = self.compute_create2_address(deployer, salt, contract_cls, *args)
        return self._install(contract_cls, address, args)

    def compute_create2_address(
        self,
        deployer: Union[str, Contract],
        salt: bytes,
        contract_cls: Type[Contract],
        *args: Any,
    ) -> str:
        code_hash = init_code_hash(contract_cls.init_code(*args))
        return create2_address(as_address(deployer), salt, code_hash)

    def _install(
        self,
        contract_cls: Type[C],
        address: str,
        args: Sequence[Any],
        caller: Optional[str] = None,
        value: int = 0,
    ) -> C:
        address = checksum(address)
        if self.state.has_code(address):
            raise DeploymentCollision()
        self.state.code[address] = contract_cls
        self.state.storage[address] = contract_cls.Storage()
        handle = contract_cls(self, address, caller=caller)
        self.execute(handle, contract_cls.constructor, args, {}, value=value, payable=True)
        return handle

    # -- snapshots ------------------------------------------------------------

    def snapshot(self) -> int:
        """Checkpoint the whole chain; returns an id for revert()."""
        snapshot_id = self._next_snapshot_id
        self._next_snapshot_id += 1
        self._checkpoints[snapshot_id] = Checkpoint(
            snapshot_id=snapshot_id,
            state=self.state.copy(),
            clock=self.clock,
            event_count=len(self.event_store),
            state_hash=self.state_hash(),
        )
        return snapshot_id

    def revert(self, snapshot_id: int) -> bool:
        """
        Restore a checkpoint. The checkpoint and every later one are consumed.

        Returns:
            False if snapshot_id is unknown

        Raises:
            IntegrityError: If the saved state no longer matches its hash
        """
        checkpoint = self._checkpoints.get(snapshot_id)
        if checkpoint is None:
            return False
        if compute_state_hash(checkpoint.state) != checkpoint.state_hash:
            raise IntegrityError(f"Snapshot {snapshot_id} state hash mismatch")
        self.state = checkpoint.state.copy()
        self.clock = checkpoint.clock
        self.event_store.truncate(checkpoint.event_count)
        for sid in [s for s in self._checkpoints if s >= snapshot_id]:
            del self._checkpoints[sid]
        return True
