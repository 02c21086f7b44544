"""Account reference loading through the global transport."""

from __future__ import annotations

import asyncio
from collections.abc import Iterable

from kaizen.transport import AccountReference, Transport, global_transport
from kaizen.utils import Pubkey

__all__ = [
    "load_reference",
    "load_reference_with_transport",
    "load_references",
    "purge_reference",
    "purge_references",
    "reload_reference",
    "reload_reference_with_transport",
    "reload_references",
]

LoadOutcome = AccountReference | None | BaseException


async def load_reference(pubkey: Pubkey) -> AccountReference | None:
    return await load_reference_with_transport(global_transport(), pubkey)


async def load_references(pubkeys: Iterable[Pubkey]) -> list[LoadOutcome]:
    """Load several accounts concurrently; a failed lookup leaves its exception in place."""
    transport = global_transport()
    return await asyncio.gather(
        *(load_reference_with_transport(transport, pubkey) for pubkey in pubkeys),
        return_exceptions=True,
    )


async def load_reference_with_transport(
    transport: Transport, pubkey: Pubkey
) -> AccountReference | None:
    return await transport.lookup(pubkey)


async def reload_reference(pubkey: Pubkey) -> AccountReference | None:
    return await reload_reference_with_transport(global_transport(), pubkey)


async def reload_references(pubkeys: Iterable[Pubkey]) -> list[LoadOutcome]:
    """Purge and reload several accounts; a failed lookup leaves its exception in place."""
    transport = global_transport()
    pubkeys = list(pubkeys)
    for pubkey in pubkeys:
        transport.purge(pubkey)
    return await asyncio.gather(
        *(load_reference_with_transport(transport, pubkey) for pubkey in pubkeys),
        return_exceptions=True,
    )


async def reload_reference_with_transport(
    transport: Transport, pubkey: Pubkey
) -> AccountReference | None:
    transport.purge(pubkey)
    return await transport.lookup(pubkey)


def purge_reference(pubkey: Pubkey) -> None:
    global_transport().purge(pubkey)


def purge_references(pubkeys: Iterable[Pubkey]) -> None:
    transport = global_transport()
    for pubkey in pubkeys:
        transport.purge(pubkey)