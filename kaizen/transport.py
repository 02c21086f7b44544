"""Account lookups, instruction execution and transaction posting over an emulator or a validator."""

from __future__ import annotations

import abc
import asyncio
import logging
import time
from collections.abc import Iterable, Sequence
from dataclasses import dataclass, field
from typing import Any, Protocol

from kaizen.config import TransportConfig, TransportMode
from kaizen.lookup import LookupHandler, RequestKind
from kaizen.queue import TransactionQueue
from kaizen.reflector import (
    EmulatorLogs,
    PendingLookups,
    Reflector,
    WalletBalance,
    WalletRefresh,
)
from kaizen.transaction import Transaction
from kaizen.utils import Pubkey
from kaizen.wallet import Wallet

__all__ = [
    "AccountReference",
    "EmulatorInterface",
    "Transport",
    "TransportError",
    "global_transport",
    "set_global",
]

_log = logging.getLogger(__name__)


class TransportError(Exception):
    """Raised when the transport cannot carry out a request."""


@dataclass(frozen=True)
class AccountReference:
    """A snapshot of an account's state."""

    pubkey: Pubkey
    lamports: int = 0
    owner: Pubkey = field(default_factory=Pubkey)
    data: bytes = b""
    rent_epoch: int = 0


class EmulatorInterface(abc.ABC):
    """An emulated chain: an in-process simulator or an emulator server.

    An in-process simulator sets ``authority`` to the key it signs with.
    """

    authority: Pubkey | None = None

    @abc.abstractmethod
    async def lookup(self, pubkey: Pubkey) -> AccountReference | None:
        """Return the account stored under ``pubkey``, or None."""

    @abc.abstractmethod
    async def execute(self, authority: Pubkey, instruction: Any) -> Sequence[str]:
        """Run ``instruction`` signed by ``authority``; return the program logs."""


class _RpcClient(Protocol):
    async def get_balance(self, pubkey: Pubkey) -> int: ...

    async def get_account(self, pubkey: Pubkey) -> AccountReference | None: ...

    async def send_transaction(self, instruction: Any, wallet: Wallet, max_retries: int) -> Any: ...

    async def confirm_transaction(self, signature: Any) -> bool: ...


class Transport:
    """Routes account lookups and instructions to an emulator or a validator RPC client.

    Looked up accounts are cached; concurrent remote lookups of the same key
    are coalesced into one request. Pending lookup counts, emulator logs and
    wallet updates are broadcast through ``reflector``.
    """

    confirm_poll_interval: float = 1.0

    def __init__(
        self,
        mode: TransportMode,
        *,
        emulator: EmulatorInterface | None = None,
        rpc_client: _RpcClient | None = None,
        wallet: Wallet | None = None,
        config: TransportConfig | None = None,
    ) -> None:
        if mode.is_emulator() and emulator is None:
            raise TransportError("Missing emulator interface")
        if mode is TransportMode.VALIDATOR and rpc_client is None:
            raise TransportError("Missing RPC client")
        self._mode = mode
        self.emulator = emulator
        self.rpc_client = rpc_client
        self._wallet = wallet
        self.config = config if config is not None else TransportConfig()
        self.cache: dict[Pubkey, AccountReference] = {}
        self.queue = TransactionQueue(self)
        self.lookup_handler: LookupHandler[Pubkey, AccountReference] = LookupHandler()
        self.reflector = Reflector()
        self.custom_authority: Pubkey | None = None

    @property
    def mode(self) -> TransportMode:
        return self._mode

    @property
    def root(self) -> Pubkey:
        return self.config.root

    @property
    def wallet(self) -> Wallet:
        """The signing wallet, read from the default keypair file when none was given."""
        if self._wallet is None:
            self._wallet = Wallet.from_keypair_file()
        return self._wallet

    def set_custom_authority(self, key: Pubkey | None) -> None:
        self.custom_authority = key

    def get_authority_pubkey(self) -> Pubkey:
        if self._mode is TransportMode.INPROC:
            authority = self._require_emulator().authority
            if authority is None:
                raise TransportError("Simulator has no authority")
            return authority
        if self._mode is TransportMode.EMULATOR:
            if self.custom_authority is not None:
                return self.custom_authority
            return Wallet.from_keypair_file().pubkey
        return self.wallet.pubkey

    def _require_emulator(self) -> EmulatorInterface:
        if self.emulator is None:
            raise TransportError("Missing emulator interface")
        return self.emulator

    def _require_rpc_client(self) -> _RpcClient:
        if self.rpc_client is None:
            raise TransportError("Missing RPC client")
        return self.rpc_client

    async def balance(self) -> int:
        """Lamports held by the authority (emulator) or the wallet (validator)."""
        if self._mode.is_emulator():
            pubkey = self.get_authority_pubkey()
            reference = await self._require_emulator().lookup(pubkey)
            if reference is None:
                raise TransportError(
                    f"[Emulator] - Transport::balance() unable to lookup account: {pubkey}"
                )
            return reference.lamports
        return await self._require_rpc_client().get_balance(self.wallet.pubkey)

    async def execute(self, instruction: Any) -> None:
        if self.emulator is not None:
            authority = self.get_authority_pubkey()
            logs = await self.emulator.execute(authority, instruction)
            self.reflector.reflect(EmulatorLogs(logs))
            self.reflector.reflect(WalletRefresh("SOL", authority))
            try:
                balance = await self.balance()
            except Exception as err:
                _log.error("Unable to update wallet balance: %s", err)
            else:
                self.reflector.reflect(WalletBalance("SOL", authority, balance))
            return
        _log.debug("transport: running in native mode")
        await self._send_and_confirm(instruction)

    async def _send_and_confirm(self, instruction: Any) -> Any:
        """Send until a confirmation arrives, resending after each timeout."""
        rpc_client = self._require_rpc_client()
        wallet = self.wallet
        config = self.config
        while True:
            signature = await rpc_client.send_transaction(instruction, wallet, config.retries)
            start = time.monotonic()
            while True:
                try:
                    confirmed = await rpc_client.confirm_transaction(signature)
                except Exception:
                    confirmed = False
                if confirmed:
                    return signature
                if time.monotonic() - start > config.timeout:
                    break
                await asyncio.sleep(self.confirm_poll_interval)

    async def post(self, transaction: Transaction) -> None:
        await self.queue.enqueue(transaction)

    async def post_multiple(self, transactions: Iterable[Transaction]) -> None:
        await self.queue.enqueue_multiple(transactions)

    async def lookup(self, pubkey: Pubkey) -> AccountReference | None:
        """Return the cached account, fetching it remotely when not cached."""
        reference = await self.lookup_local(pubkey)
        if reference is not None:
            return reference
        return await self.lookup_remote(pubkey)

    async def lookup_local(self, pubkey: Pubkey) -> AccountReference | None:
        return self.cache.get(pubkey)

    async def lookup_remote(self, pubkey: Pubkey) -> AccountReference | None:
        request = self.lookup_handler.queue(pubkey)
        try:
            if request.kind is RequestKind.NEW:
                self.reflector.reflect(PendingLookups(self.lookup_handler.pending))
                try:
                    reference = await self._lookup_remote_impl(pubkey)
                except Exception as err:
                    self.lookup_handler.fail(pubkey, err)
                else:
                    self.lookup_handler.complete(pubkey, reference)
            return await request
        finally:
            self.reflector.reflect(PendingLookups(self.lookup_handler.pending))

    async def _lookup_remote_impl(self, pubkey: Pubkey) -> AccountReference | None:
        self.cache.pop(pubkey, None)
        if self._mode.is_emulator():
            reference = await self._require_emulator().lookup(pubkey)
        else:
            reference = await self._require_rpc_client().get_account(pubkey)
        if reference is not None:
            self.cache[pubkey] = reference
        return reference

    def purge(self, pubkey: Pubkey | None = None) -> None:
        """Drop one account from the cache, or every account when ``pubkey`` is None."""
        if pubkey is None:
            self.cache.clear()
        else:
            self.cache.pop(pubkey, None)


_global: Transport | None = None


def set_global(transport: Transport | None) -> None:
    """Make ``transport`` the process-wide transport; None clears it."""
    global _global
    _global = transport


def global_transport() -> Transport:
    if _global is None:
        raise TransportError("Transport is not initialized")
    return _global