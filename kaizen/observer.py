"""Observers notified about transaction chain processing."""

from __future__ import annotations

import abc
import logging

from kaizen.transaction import Transaction, TransactionChain

__all__ = ["BasicObserver", "Observer"]

_log = logging.getLogger(__name__)


class Observer(abc.ABC):
    """Receives notifications from a transaction queue.

    Every transaction belongs to a chain, even when it is alone. When a
    transaction fails or times out its chain is left dangling: it can be
    resubmitted to restart the chain, or the chain can be discarded.
    """

    @abc.abstractmethod
    async def tx_chain_created(self, tx_chain: TransactionChain) -> None:
        """A new chain was added to the queue."""

    @abc.abstractmethod
    async def tx_chain_complete(self, tx_chain: TransactionChain) -> None:
        """Every transaction in the chain succeeded."""

    @abc.abstractmethod
    async def tx_chain_discarded(self, tx_chain: TransactionChain) -> None:
        """The chain was discarded from the queue."""

    @abc.abstractmethod
    async def tx_created(self, tx_chain: TransactionChain, transaction: Transaction) -> None:
        """A transaction was posted into a chain."""

    @abc.abstractmethod
    async def tx_processing(self, tx_chain: TransactionChain, transaction: Transaction) -> None:
        """Processing of a transaction began."""

    @abc.abstractmethod
    async def tx_success(self, tx_chain: TransactionChain, transaction: Transaction) -> None:
        """A transaction completed successfully."""

    @abc.abstractmethod
    async def tx_timeout(self, tx_chain: TransactionChain, transaction: Transaction) -> None:
        """A transaction timed out; the chain is left dangling."""

    @abc.abstractmethod
    async def tx_failure(
        self, tx_chain: TransactionChain, transaction: Transaction, error: BaseException
    ) -> None:
        """A transaction failed; the chain is left dangling."""


class BasicObserver(Observer):
    """Logs every notification at debug level."""

    async def tx_chain_created(self, tx_chain: TransactionChain) -> None:
        _log.debug("BasicObserver::tx_chain_created %s", tx_chain.id)

    async def tx_chain_complete(self, tx_chain: TransactionChain) -> None:
        _log.debug("BasicObserver::tx_chain_complete %s", tx_chain.id)

    async def tx_chain_discarded(self, tx_chain: TransactionChain) -> None:
        _log.debug("BasicObserver::tx_chain_discarded %s", tx_chain.id)

    async def tx_created(self, tx_chain: TransactionChain, transaction: Transaction) -> None:
        _log.debug("BasicObserver::tx_created %s %r", tx_chain.id, transaction)

    async def tx_processing(self, tx_chain: TransactionChain, transaction: Transaction) -> None:
        _log.debug("BasicObserver::tx_processing %s %r", tx_chain.id, transaction)

    async def tx_success(self, tx_chain: TransactionChain, transaction: Transaction) -> None:
        _log.debug("BasicObserver::tx_success %s %r", tx_chain.id, transaction)

    async def tx_timeout(self, tx_chain: TransactionChain, transaction: Transaction) -> None:
        _log.debug("BasicObserver::tx_timeout %s %r", tx_chain.id, transaction)

    async def tx_failure(
        self, tx_chain: TransactionChain, transaction: Transaction, error: BaseException
    ) -> None:
        _log.debug("BasicObserver::tx_failure %s %r %r", tx_chain.id, error, transaction)