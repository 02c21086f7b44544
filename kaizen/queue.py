"""Queue that groups transactions into chains and processes each chain in order."""

from __future__ import annotations

import asyncio
import logging
import uuid
from collections.abc import Hashable, Iterable

from kaizen.observer import Observer
from kaizen.transaction import (
    Executor,
    Transaction,
    TransactionAlreadyCompleted,
    TransactionChain,
    TransactionState,
    TransactionStatus,
)

__all__ = ["TransactionQueue"]

_log = logging.getLogger(__name__)


class TransactionQueue:
    """Receives transactions and runs them in chains, notifying observers.

    A transaction whose accounts intersect those of an existing chain is
    appended to that chain; otherwise a new chain is created. A chain is
    dropped once all of its transactions succeed. When a transaction fails
    it is put back at the front of its chain and the chain is left
    dangling: resubmitting the transaction restarts the chain, and
    ``discard_chain`` removes it.
    """

    def __init__(self, executor: Executor) -> None:
        self.executor = executor
        self.tx_chains: dict[uuid.UUID, TransactionChain] = {}
        self.observers: dict[Hashable, Observer] = {}
        self._processing: set[uuid.UUID] = set()
        self._tasks: set[asyncio.Task] = set()

    def register_observer(self, observer_id: Hashable, observer: Observer) -> None:
        self.observers[observer_id] = observer

    def unregister_observer(self, observer_id: Hashable) -> None:
        self.observers.pop(observer_id, None)

    def _observers(self) -> list[Observer]:
        return list(self.observers.values())

    async def discard_chain(self, chain_id: uuid.UUID) -> None:
        tx_chain = self.tx_chains.pop(chain_id, None)
        if tx_chain is not None:
            for observer in self._observers():
                await observer.tx_chain_discarded(tx_chain)

    def find_tx_chain_with_transaction(self, transaction: Transaction) -> TransactionChain | None:
        """Return the chain holding ``transaction`` among its pending ones."""
        for tx_chain in self.tx_chains.values():
            if any(tx.id == transaction.id for tx in list(tx_chain.pending)):
                return tx_chain
        return None

    def find_tx_chain_account_intersection(
        self, transaction: Transaction
    ) -> TransactionChain | None:
        """Return the first chain sharing an account with ``transaction``."""
        tx_accounts = transaction.accounts()
        for tx_chain in self.tx_chains.values():
            if tx_chain.accounts() & tx_accounts:
                return tx_chain
        return None

    async def _new_chain(self, transaction: Transaction) -> TransactionChain:
        tx_chain = TransactionChain()
        self.tx_chains[tx_chain.id] = tx_chain
        for observer in self._observers():
            await observer.tx_chain_created(tx_chain)
        tx_chain.extend_with([transaction])
        for observer in self._observers():
            await observer.tx_created(tx_chain, transaction)
        return tx_chain

    async def _enqueue_only(self, transaction: Transaction) -> TransactionChain:
        state = transaction.status.state
        tx_chain: TransactionChain | None
        if state is TransactionState.SUCCESS:
            raise TransactionAlreadyCompleted()
        if state in (TransactionState.TIMEOUT, TransactionState.ERROR):
            tx_chain = self.find_tx_chain_with_transaction(transaction)
            if tx_chain is None:
                _log.warning("Unable to find transaction chain during transaction resubmission")
        else:
            tx_chain = self.find_tx_chain_account_intersection(transaction)
            if tx_chain is not None:
                tx_chain.extend_with([transaction])
                for observer in self._observers():
                    await observer.tx_created(tx_chain, transaction)

        if tx_chain is None:
            tx_chain = await self._new_chain(transaction)
        _log.debug("enqueued into chain %s, accounts: %r", tx_chain.id, tx_chain.accounts())
        return tx_chain

    async def enqueue(self, transaction: Transaction) -> None:
        tx_chain = await self._enqueue_only(transaction)
        self._process_chains([tx_chain])

    async def enqueue_multiple(self, transactions: Iterable[Transaction]) -> None:
        chains: dict[uuid.UUID, TransactionChain] = {}
        for transaction in transactions:
            tx_chain = await self._enqueue_only(transaction)
            chains[tx_chain.id] = tx_chain
        self._process_chains(chains.values())

    async def wait_idle(self) -> None:
        """Wait until every chain processing task has finished."""
        while self._tasks:
            await asyncio.gather(*list(self._tasks), return_exceptions=True)

    def _process_chains(self, tx_chains: Iterable[TransactionChain]) -> None:
        loop = asyncio.get_running_loop()
        for tx_chain in tx_chains:
            if tx_chain.id in self._processing:
                continue
            self._processing.add(tx_chain.id)
            task = loop.create_task(self._run_chain(tx_chain))
            self._tasks.add(task)
            task.add_done_callback(self._tasks.discard)

    async def _run_chain(self, tx_chain: TransactionChain) -> None:
        try:
            await self._process_transaction_chain(tx_chain)
        except Exception as err:
            self._processing.discard(tx_chain.id)
            _log.error("TransactionQueue::process_transaction_task failure: %s", err)
            return
        self._processing.discard(tx_chain.id)
        if tx_chain.is_done():
            self.tx_chains.pop(tx_chain.id, None)
            for observer in self._observers():
                await observer.tx_chain_complete(tx_chain)

    async def _process_transaction_chain(self, tx_chain: TransactionChain) -> None:
        while (tx := tx_chain.dequeue_for_processing()) is not None:
            observers = self._observers()
            for observer in observers:
                await observer.tx_processing(tx_chain, tx)

            try:
                await tx.execute(self.executor)
            except Exception as err:
                tx.status = TransactionStatus.error(str(err))
                tx_chain.requeue_with_error(tx, err)
                tx.resolve(err)
                for observer in observers:
                    await observer.tx_failure(tx_chain, tx, err)
                raise

            tx.status = TransactionStatus.SUCCESS
            tx_chain.set_as_complete(tx)
            tx.resolve()
            for observer in observers:
                await observer.tx_success(tx_chain, tx)
            if tx.callback is not None:
                tx.callback(tx_chain, tx)