"""Coalescing of concurrent lookups for the same key."""

from __future__ import annotations

import asyncio
import enum
from dataclasses import dataclass
from typing import Any, Generator, Generic, Hashable, TypeVar

__all__ = ["LookupHandler", "LookupRequest", "RequestKind"]

K = TypeVar("K", bound=Hashable)
T = TypeVar("T")


class RequestKind(enum.Enum):
    NEW = "new"
    PENDING = "pending"


@dataclass(frozen=True)
class LookupRequest(Generic[T]):
    """A queued lookup; awaiting it yields the shared result."""

    kind: RequestKind
    future: asyncio.Future

    def __await__(self) -> Generator[Any, None, T]:
        return self.future.__await__()


class LookupHandler(Generic[K, T]):
    """Tracks in-flight lookups so only the first caller per key does the work.

    The first caller for a key gets a NEW request and must finish it with
    ``complete`` or ``fail``; later callers get PENDING requests that
    resolve with the same outcome.
    """

    def __init__(self) -> None:
        self._waiters: dict[K, list[asyncio.Future]] = {}

    @property
    def pending(self) -> int:
        """Number of keys with a lookup in flight."""
        return len(self._waiters)

    def queue(self, key: K) -> LookupRequest[T]:
        future = asyncio.get_running_loop().create_future()
        waiters = self._waiters.get(key)
        if waiters is not None:
            waiters.append(future)
            return LookupRequest(RequestKind.PENDING, future)
        self._waiters[key] = [future]
        return LookupRequest(RequestKind.NEW, future)

    def _take(self, key: K) -> list[asyncio.Future]:
        try:
            return self._waiters.pop(key)
        except KeyError:
            raise KeyError(f"Lookup handler failure while processing account {key}") from None

    def complete(self, key: K, value: T | None) -> None:
        """Resolve every request waiting on ``key`` with ``value``."""
        for future in self._take(key):
            if not future.done():
                future.set_result(value)

    def fail(self, key: K, error: BaseException) -> None:
        """Resolve every request waiting on ``key`` with ``error``."""
        for future in self._take(key):
            if not future.done():
                future.set_exception(error)