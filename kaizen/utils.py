"""Public keys, lamport/SOL conversions and small buffer helpers."""

from __future__ import annotations

import math
import secrets
from dataclasses import dataclass

__all__ = [
    "LAMPORTS_PER_SOL",
    "Pubkey",
    "fill_buffer",
    "generate_random_pubkey",
    "lamports_to_sol",
    "shorten_pubkey",
    "sol_to_lamports",
    "u64sol_to_lamports",
]

LAMPORTS_PER_SOL = 1_000_000_000
PUBKEY_BYTES = 32
_U64_MAX = 2**64 - 1

_ALPHABET = "123456789ABCDEFGHJKLMNPQRSTUVWXYZabcdefghijkmnopqrstuvwxyz"
_ALPHABET_INDEX = {char: index for index, char in enumerate(_ALPHABET)}


def _b58encode(data: bytes) -> str:
    number = int.from_bytes(data, "big")
    digits = []
    while number:
        number, remainder = divmod(number, 58)
        digits.append(_ALPHABET[remainder])
    leading_zeros = len(data) - len(data.lstrip(b"\0"))
    return "1" * leading_zeros + "".join(reversed(digits))


def _b58decode(text: str) -> bytes:
    number = 0
    for char in text:
        try:
            number = number * 58 + _ALPHABET_INDEX[char]
        except KeyError:
            raise ValueError(f"invalid base58 character {char!r}") from None
    leading_ones = len(text) - len(text.lstrip("1"))
    body = number.to_bytes((number.bit_length() + 7) // 8, "big")
    return b"\0" * leading_ones + body


@dataclass(frozen=True, order=True)
class Pubkey:
    """A 32-byte account address, shown in base58."""

    raw: bytes = bytes(PUBKEY_BYTES)

    def __post_init__(self) -> None:
        raw = bytes(self.raw)
        if len(raw) != PUBKEY_BYTES:
            raise ValueError(f"a public key holds {PUBKEY_BYTES} bytes, got {len(raw)}")
        object.__setattr__(self, "raw", raw)

    @classmethod
    def from_string(cls, text: str) -> Pubkey:
        """Parse a base58 encoded public key."""
        return cls(_b58decode(text))

    def __bytes__(self) -> bytes:
        return self.raw

    def __str__(self) -> str:
        return _b58encode(self.raw)

    def __repr__(self) -> str:
        return f"Pubkey({str(self)!r})"


def shorten_pubkey(pubkey: Pubkey) -> str:
    """Return the first and last four characters of a key, joined by '....'."""
    text = str(pubkey)
    return f"{text[:4]}....{text[-4:]}"


def lamports_to_sol(lamports: int) -> float:
    return lamports / LAMPORTS_PER_SOL


def sol_to_lamports(sol: float) -> int:
    """Convert SOL to lamports, truncating and saturating to the u64 range."""
    value = sol * LAMPORTS_PER_SOL
    if math.isnan(value) or value <= 0:
        return 0
    if value >= _U64_MAX:
        return _U64_MAX
    return int(value)


def u64sol_to_lamports(sol: int) -> int:
    """Convert a whole number of SOL to lamports."""
    if sol < 0:
        raise ValueError("SOL amount must not be negative")
    lamports = sol * LAMPORTS_PER_SOL
    if lamports > _U64_MAX:
        raise OverflowError("lamport amount does not fit in 64 bits")
    return lamports


def generate_random_pubkey() -> Pubkey:
    return Pubkey(secrets.token_bytes(PUBKEY_BYTES))


def fill_buffer(buffer: bytearray | memoryview, value: int) -> None:
    """Set every byte of a writable buffer to ``value``."""
    if not 0 <= value <= 255:
        raise ValueError("byte value must be in range 0..255")
    buffer[:] = bytes([value]) * len(buffer)