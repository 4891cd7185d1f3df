"""
Contract runtime

Serial, atomic execution for the registry and the ledger:

- one operation at a time (an asyncio.Lock held for the whole operation)
- nested calls (ledger -> registry debit) join the running operation under
  a savepoint
- stores enlist before mutating; on any error every enlisted store is
  restored and the buffered events are dropped
- events reach the event bus only after the operation commits, and reach
  subscribers in commit order

The runtime also keeps the address -> component directory used to bind
the ledger to its registry.
"""

import asyncio
import logging
from contextlib import asynccontextmanager
from collections import deque
from contextvars import ContextVar
from typing import Any, AsyncIterator, Deque, Dict, List, Optional, Protocol, runtime_checkable

from core.access_control import make_contract_address, normalize_address
from core.event_bus import Event, InMemoryEventBus

logger = logging.getLogger(__name__)

_current_transaction: ContextVar[Optional["Transaction"]] = ContextVar(
    "ledger_transaction", default=None
)


@runtime_checkable
class SnapshotStoreProtocol(Protocol):
    """State holder that can be captured and rolled back"""

    def snapshot(self) -> Any:
        ...

    def restore(self, state: Any) -> None:
        ...


class Transaction:
    """
    State of one running operation.

    Also acts as the event bus seen by publishers during the operation,
    buffering events until commit. Nested calls open a savepoint, so a
    caller that catches a nested failure keeps none of its writes or events.
    """

    def __init__(self, runtime: "ContractRuntime"):
        self.runtime = runtime
        self._snapshots: Dict[int, tuple] = {}
        self._events: List[Event] = []
        self._savepoints: List[Dict[int, tuple]] = []

    def enlist(self, store: SnapshotStoreProtocol) -> None:
        """Capture store state once per scope, before its first mutation"""
        key = id(store)
        if key not in self._snapshots:
            self._snapshots[key] = (store, store.snapshot())
        for savepoint in self._savepoints:
            if key not in savepoint:
                savepoint[key] = (store, store.snapshot())

    async def publish_event(self, event: Event) -> bool:
        self._events.append(event)
        return True

    @property
    def events(self) -> List[Event]:
        return list(self._events)

    def begin_savepoint(self) -> int:
        self._savepoints.append({})
        return len(self._events)

    def release_savepoint(self) -> None:
        self._savepoints.pop()

    def rollback_savepoint(self, event_mark: int) -> None:
        savepoint = self._savepoints.pop()
        for store, state in reversed(list(savepoint.values())):
            store.restore(state)
        del self._events[event_mark:]

    def rollback(self) -> None:
        for store, state in reversed(list(self._snapshots.values())):
            store.restore(state)
        dropped = len(self._events)
        self._events.clear()
        self._snapshots.clear()
        self._savepoints.clear()
        if dropped:
            logger.debug(f"Rolled back operation, dropped {dropped} events")


class ContractRuntime:
    """Execution environment shared by the deployed components"""

    def __init__(self, event_bus: Optional[InMemoryEventBus] = None):
        self.event_bus = event_bus or InMemoryEventBus()
        self._lock = asyncio.Lock()
        self._dispatch_lock = asyncio.Lock()
        self._pending: Deque[Event] = deque()
        self._drainer: Optional[asyncio.Task] = None
        self._contracts: Dict[str, Any] = {}

    # ---- component directory ----

    def new_address(self) -> str:
        address = make_contract_address()
        while address in self._contracts:
            address = make_contract_address()
        return address

    def register(self, address: str, component: Any) -> str:
        address = normalize_address(address)
        if address in self._contracts:
            raise ValueError(f"Address already in use: {address}")
        self._contracts[address] = component
        logger.info(f"{type(component).__name__} deployed at {address}")
        return address

    def resolve(self, address: str) -> Optional[Any]:
        return self._contracts.get(normalize_address(address))

    # ---- operations ----

    @asynccontextmanager
    async def transaction(self) -> AsyncIterator[Transaction]:
        """
        Run the enclosed block as one atomic operation.

        Inside an operation already running on this runtime the block joins
        it under a savepoint: a nested failure undoes the nested writes and
        events, and reverts the outer operation too unless the caller
        handles it.
        """
        current = _current_transaction.get()
        if current is not None:
            if current.runtime is not self:
                raise RuntimeError("Nested operation on a different runtime")
            event_mark = current.begin_savepoint()
            try:
                yield current
            except BaseException:
                current.rollback_savepoint(event_mark)
                raise
            current.release_savepoint()
            return

        async with self._lock:
            tx = Transaction(self)
            token = _current_transaction.set(tx)
            try:
                yield tx
            except BaseException:
                tx.rollback()
                raise
            finally:
                _current_transaction.reset(token)
            # Log and delivery queue both follow commit order
            for event in tx.events:
                self.event_bus.record(event)
                self._pending.append(event)

        await self._deliver_pending()

    async def _deliver_pending(self) -> None:
        """
        Deliver committed events to subscribers in commit order.

        Whoever holds the dispatch lock drains the whole queue, so when an
        operation returns its events have been delivered. Operations run by
        a subscriber only enqueue; the running drain delivers them next.
        """
        if self._drainer is not None and self._drainer is asyncio.current_task():
            return
        async with self._dispatch_lock:
            self._drainer = asyncio.current_task()
            try:
                while self._pending:
                    await self.event_bus.dispatch(self._pending.popleft())
            finally:
                self._drainer = None
