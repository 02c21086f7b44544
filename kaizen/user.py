"""The current user's identity record."""

from __future__ import annotations

import enum
import threading
from typing import Any

from kaizen.config import TransportMode
from kaizen.utils import Pubkey

__all__ = ["IdentityState", "User"]


class IdentityState(enum.Enum):
    UNKNOWN = "Unknown"
    MISSING = "Missing"
    PRESENT = "Present"


class User:
    """Authority and identity keys of a user, and whether the identity was found."""

    def __init__(
        self,
        transport_mode: TransportMode | None = None,
        authority: Pubkey | None = None,
        identity: Pubkey | None = None,
        sequencer: Any = None,
    ) -> None:
        given = [value is not None for value in (transport_mode, authority, identity)]
        if any(given) and not all(given):
            raise ValueError("transport mode, authority and identity must be given together")
        self._lock = threading.Lock()
        self._transport_mode = transport_mode
        self._authority = authority
        self._identity = identity
        self._state = IdentityState.PRESENT if all(given) else IdentityState.UNKNOWN
        self.sequencer = sequencer

    @property
    def transport_mode(self) -> TransportMode | None:
        with self._lock:
            return self._transport_mode

    @property
    def state(self) -> IdentityState:
        with self._lock:
            return self._state

    def identity(self) -> Pubkey:
        with self._lock:
            if self._identity is None:
                raise LookupError("User::identity() missing identity pubkey")
            return self._identity

    def authority(self) -> Pubkey:
        with self._lock:
            if self._authority is None:
                raise LookupError("User::authority() missing authority pubkey")
            return self._authority

    def builder_args(self) -> tuple[Pubkey, Pubkey, Any]:
        """Return (authority, identity, sequencer) for building instructions."""
        with self._lock:
            if self._authority is None:
                raise LookupError("User record is missing authority")
            if self._identity is None:
                raise LookupError("User record is missing identity")
            return self._authority, self._identity, self.sequencer

    def set_present(self, transport_mode: TransportMode, authority: Pubkey, identity: Pubkey) -> None:
        """Record a found identity."""
        with self._lock:
            self._state = IdentityState.PRESENT
            self._identity = identity
            self._authority = authority
            self._transport_mode = transport_mode

    def set_missing(self) -> None:
        """Record that the identity lookup found nothing."""
        with self._lock:
            self._state = IdentityState.MISSING
            self._identity = None

    def is_present(self) -> bool:
        return self.state is IdentityState.PRESENT

    def is_checked(self) -> bool:
        return self.state in (IdentityState.PRESENT, IdentityState.MISSING)