"""Asyncio transport, transaction queue, account lookup and wallet helpers for ledger clients."""

__version__ = "0.1.0"

__all__ = [
    "config",
    "loaders",
    "lookup",
    "observer",
    "queue",
    "reflector",
    "transaction",
    "transport",
    "user",
    "utils",
    "wallet",
]