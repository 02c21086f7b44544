"""Transactions, transaction lists and transaction chains."""

from __future__ import annotations

import asyncio
import enum
import threading
import uuid
from collections.abc import Awaitable, Callable, Iterable
from dataclasses import dataclass, field
from typing import Any, ClassVar, Protocol

from kaizen.utils import Pubkey

__all__ = [
    "Executor",
    "Transaction",
    "TransactionAlreadyCompleted",
    "TransactionChain",
    "TransactionList",
    "TransactionMeta",
    "TransactionState",
    "TransactionStatus",
]


class Executor(Protocol):
    """Anything able to run an instruction."""

    def execute(self, instruction: Any) -> Awaitable[None]: ...


class TransactionAlreadyCompleted(Exception):
    """Raised when a transaction that already succeeded is submitted again."""

    def __init__(self, message: str = "Transaction already completed") -> None:
        super().__init__(message)


class TransactionState(enum.Enum):
    PENDING = "Pending"
    SUCCESS = "Success"
    TIMEOUT = "Timeout"
    ERROR = "Error"


@dataclass(frozen=True)
class TransactionStatus:
    """Processing status of a transaction; errors carry a message."""

    state: TransactionState
    message: str | None = None

    PENDING: ClassVar[TransactionStatus]
    SUCCESS: ClassVar[TransactionStatus]
    TIMEOUT: ClassVar[TransactionStatus]

    @classmethod
    def error(cls, message: str) -> TransactionStatus:
        return cls(TransactionState.ERROR, message)

    @property
    def is_error(self) -> bool:
        return self.state is TransactionState.ERROR

    def __str__(self) -> str:
        if self.state is TransactionState.ERROR:
            return f"Error: {self.message}"
        return self.state.value


TransactionStatus.PENDING = TransactionStatus(TransactionState.PENDING)
TransactionStatus.SUCCESS = TransactionStatus(TransactionState.SUCCESS)
TransactionStatus.TIMEOUT = TransactionStatus(TransactionState.TIMEOUT)


@dataclass
class TransactionMeta:
    """Accounts affected by a transaction and its signature, once known."""

    accounts: list[Pubkey] = field(default_factory=list)
    signature: bytes | None = None

    def __post_init__(self) -> None:
        self.accounts = list(self.accounts)


TxCallback = Callable[["TransactionChain", "Transaction"], None]


@dataclass(eq=False)
class Transaction:
    """A single unit of work, optionally carrying an instruction and a callback."""

    name: str
    instruction: Any = None
    meta: TransactionMeta = field(default_factory=TransactionMeta)
    callback: TxCallback | None = None
    id: uuid.UUID = field(default_factory=uuid.uuid4)
    status: TransactionStatus = TransactionStatus.PENDING
    _done: asyncio.Event = field(default_factory=asyncio.Event, init=False, repr=False)
    _error: BaseException | None = field(default=None, init=False, repr=False)

    def accounts(self) -> set[Pubkey]:
        return set(self.meta.accounts)

    def target_account(self) -> Pubkey:
        """The account a create operation produces: the first one listed."""
        if not self.meta.accounts:
            raise ValueError("Transaction::target_account(): missing target account")
        return self.meta.accounts[0]

    async def execute(self, executor: Executor) -> None:
        if self.instruction is not None:
            await executor.execute(self.instruction)

    def resolve(self, error: BaseException | None = None) -> None:
        """Record the outcome of processing and wake anyone waiting on it."""
        self._error = error
        self._done.set()

    async def wait(self) -> None:
        """Wait for the outcome of processing; raise the error if it failed."""
        await self._done.wait()
        if self._error is not None:
            raise self._error


@dataclass
class TransactionList:
    transactions: list[Transaction] = field(default_factory=list)

    def target_account(self) -> Pubkey:
        if not self.transactions:
            raise ValueError("No transactions")
        return self.transactions[0].target_account()

    def push(self, tx: Transaction) -> None:
        self.transactions.append(tx)

    async def execute(self, executor: Executor) -> None:
        for tx in self.transactions:
            await tx.execute(executor)

    def __iter__(self):
        return iter(self.transactions)

    def __len__(self) -> int:
        return len(self.transactions)


class TransactionChain:
    """An ordered group of transactions whose accounts overlap."""

    def __init__(self) -> None:
        self.id = uuid.uuid4()
        self._lock = threading.Lock()
        self.pending: list[Transaction] = []
        self.complete: list[Transaction] = []
        self._accounts: set[Pubkey] = set()

    def __repr__(self) -> str:
        return f"TransactionChain(id={self.id}, pending={len(self.pending)}, complete={len(self.complete)})"

    def extend_with(self, transactions: Iterable[Transaction]) -> None:
        transactions = list(transactions)
        with self._lock:
            for transaction in transactions:
                self._accounts.update(transaction.accounts())
            self.pending.extend(transactions)

    def accounts(self) -> set[Pubkey]:
        with self._lock:
            return set(self._accounts)

    def is_done(self) -> bool:
        with self._lock:
            return not self.pending

    def enqueue(self, transaction: Transaction) -> None:
        with self._lock:
            self.pending.append(transaction)

    def dequeue_for_processing(self) -> Transaction | None:
        with self._lock:
            return self.pending.pop(0) if self.pending else None

    def requeue_with_error(self, transaction: Transaction, error: BaseException) -> None:
        """Put a failed transaction back at the front of the chain."""
        with self._lock:
            self.pending.insert(0, transaction)

    def set_as_complete(self, transaction: Transaction) -> None:
        with self._lock:
            self.complete.append(transaction)