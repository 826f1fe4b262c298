"""Transport interfaces for talking to the eUICC and to remote servers."""

from __future__ import annotations

import string
from abc import ABC, abstractmethod
from collections.abc import Sequence
from dataclasses import dataclass

_HEX_DIGITS = frozenset(string.hexdigits)


class InterfaceError(Exception):
    """Raised when an APDU or HTTP interface cannot complete a request."""


@dataclass(frozen=True)
class HttpResponse:
    """Status code and body returned by an HTTP exchange."""

    rcode: int
    rx: bytes = b""


class ApduInterface(ABC):
    """A channel that carries APDUs to and from the card."""

    @abstractmethod
    def connect(self) -> None:
        """Open the connection to the card."""

    @abstractmethod
    def disconnect(self) -> None:
        """Close the connection to the card."""

    @abstractmethod
    def transmit(self, tx: bytes) -> bytes:
        """Send one command APDU and return the response APDU."""

    @abstractmethod
    def logic_channel_open(self, aid: bytes) -> int:
        """Open a logical channel selecting ``aid`` and return its number."""

    @abstractmethod
    def logic_channel_close(self, channel: int) -> None:
        """Close the logical channel ``channel``."""


class HttpInterface(ABC):
    """A channel that posts requests to an RSP server."""

    @abstractmethod
    def transmit(self, url: str, tx: bytes | None, headers: Sequence[str]) -> HttpResponse:
        """Post ``tx`` to ``url`` with ``headers`` and return the response."""


def bytes_to_hex(data: bytes) -> str:
    """Encode ``data`` as lower-case hexadecimal."""
    return bytes(data).hex()


def hex_to_bytes(text: str) -> bytes:
    """Decode strict hexadecimal text (no separators) into bytes."""
    if len(text) % 2 != 0:
        raise InterfaceError(f"hex string has odd length: {len(text)}")
    if not _HEX_DIGITS.issuperset(text):
        raise InterfaceError("hex string contains non-hex characters")
    return bytes.fromhex(text)