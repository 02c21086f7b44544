"""Broadcasting of transport events to registered channels."""

from __future__ import annotations

import logging
import queue
import threading
import uuid
from collections.abc import Iterable
from dataclasses import dataclass, field
from typing import Union

from kaizen.utils import Pubkey

__all__ = [
    "EmulatorLogs",
    "Event",
    "Halt",
    "PendingLookups",
    "PendingTransactions",
    "Reflector",
    "WalletBalance",
    "WalletRefresh",
]

_log = logging.getLogger(__name__)


@dataclass(frozen=True)
class PendingLookups:
    count: int


@dataclass(frozen=True)
class PendingTransactions:
    count: int


@dataclass(frozen=True)
class WalletRefresh:
    token: str
    pubkey: Pubkey


@dataclass(frozen=True)
class WalletBalance:
    token: str
    pubkey: Pubkey
    balance: int


@dataclass(frozen=True)
class EmulatorLogs:
    logs: tuple[str, ...] = field(default_factory=tuple)

    def __init__(self, logs: Iterable[str] = ()) -> None:
        object.__setattr__(self, "logs", tuple(logs))


@dataclass(frozen=True)
class Halt:
    pass


Event = Union[PendingLookups, PendingTransactions, WalletRefresh, WalletBalance, EmulatorLogs, Halt]


class Reflector:
    """Delivers every reflected event to each registered channel."""

    def __init__(self) -> None:
        self._lock = threading.Lock()
        self.channels: dict[uuid.UUID, queue.Queue] = {}

    def register_event_channel(self) -> tuple[uuid.UUID, queue.Queue]:
        """Create a channel; return its id and the queue events arrive on."""
        channel: queue.Queue = queue.Queue()
        channel_id = uuid.uuid4()
        with self._lock:
            self.channels[channel_id] = channel
        return channel_id, channel

    def unregister_event_channel(self, channel_id: uuid.UUID) -> None:
        with self._lock:
            self.channels.pop(channel_id, None)

    def reflect(self, event: Event) -> None:
        with self._lock:
            channels = list(self.channels.values())
        for channel in channels:
            try:
                channel.put_nowait(event)
            except queue.Full as err:
                _log.error("Transport Reflector: error reflecting event %r: %r", event, err)