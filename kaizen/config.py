"""Transport modes and transport configuration."""

from __future__ import annotations

import enum
from dataclasses import dataclass, field

from kaizen.utils import Pubkey

__all__ = ["TransportConfig", "TransportMode"]


class TransportMode(enum.Enum):
    INPROC = "Inproc"
    EMULATOR = "Emulator"
    VALIDATOR = "Validator"

    def is_emulator(self) -> bool:
        return self is not TransportMode.VALIDATOR


@dataclass
class TransportConfig:
    """Settings for a transport; timeouts are in seconds."""

    root: Pubkey = field(default_factory=Pubkey)
    timeout: float = 60.0
    confirm_transaction_initial_timeout: float = 5.0
    retries: int = 2

    @classmethod
    def default_with_root(cls, root: Pubkey) -> TransportConfig:
        return cls(root=root)