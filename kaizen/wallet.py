"""Wallet backed by a local keypair file."""

from __future__ import annotations

import json
from dataclasses import dataclass, field
from pathlib import Path

from kaizen.utils import PUBKEY_BYTES, Pubkey

__all__ = ["Adapter", "Wallet"]

KEYPAIR_BYTES = 64
DEFAULT_KEYPAIR_PATH = Path(".config") / "solana" / "id.json"


@dataclass
class Adapter:
    name: str
    icon: str
    index: int
    detected: bool


# A keypair wallet signs locally and offers no external adapters.
LOCAL_ADAPTERS: tuple[Adapter, ...] = ()


@dataclass(frozen=True)
class Wallet:
    """A wallet holding a 64-byte keypair: secret half then public half."""

    keypair: bytes = field(repr=False)

    def __post_init__(self) -> None:
        keypair = bytes(self.keypair)
        if len(keypair) != KEYPAIR_BYTES:
            raise ValueError(f"a keypair holds {KEYPAIR_BYTES} bytes, got {len(keypair)}")
        object.__setattr__(self, "keypair", keypair)

    @classmethod
    def from_keypair_file(cls, path: str | Path | None = None) -> Wallet:
        """Read a JSON keypair file, by default ``~/.config/solana/id.json``."""
        path = Path(path) if path is not None else Path.home() / DEFAULT_KEYPAIR_PATH
        data = json.loads(path.read_text())
        if not isinstance(data, list) or not all(
            isinstance(item, int) and 0 <= item <= 255 for item in data
        ):
            raise ValueError(f"Couldn't read authority keypair from '{path}'")
        return cls(bytes(data))

    @property
    def pubkey(self) -> Pubkey:
        return Pubkey(self.keypair[KEYPAIR_BYTES - PUBKEY_BYTES :])

    def is_connected(self) -> bool:
        return True

    async def get_adapter_list(self) -> list[Adapter] | None:
        """The adapters this wallet offers, or None when it has none."""
        return list(LOCAL_ADAPTERS) or None

    async def connect(self, adapter: Adapter | None = None) -> None:
        """Connect through ``adapter``; a local wallet is always connected."""
        if adapter is not None and not isinstance(adapter, Adapter):
            raise TypeError(f"expected an Adapter, got {type(adapter).__name__}")