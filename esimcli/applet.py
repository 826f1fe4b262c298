"""Dispatch of named sub-commands and the shared card session."""

from __future__ import annotations

import sys
from collections.abc import Callable, Sequence
from dataclasses import dataclass
from typing import IO, Any

from esimcli.transport import ApduInterface, HttpInterface


@dataclass(frozen=True)
class Applet:
    """A named sub-command; ``main`` receives argv starting with its own name."""

    name: str
    main: Callable[[list[str]], int]


class CardError(Exception):
    """Raised when an operation on the card fails."""

    def __init__(self, function_name: str, detail: str | None = None) -> None:
        super().__init__(function_name if detail is None else f"{function_name}: {detail}")
        self.function_name = function_name
        self.detail = detail


class Session:
    """Holds the interfaces and a lazily created card context."""

    def __init__(
        self,
        card_factory: Callable[[ApduInterface | None, HttpInterface | None], Any],
        apdu: ApduInterface | None = None,
        http: HttpInterface | None = None,
    ) -> None:
        self.card_factory = card_factory
        self.apdu = apdu
        self.http = http
        self._card: Any = None

    def card(self) -> Any:
        """Return the card context, creating it on first use."""
        if self._card is None:
            try:
                self._card = self.card_factory(self.apdu, self.http)
            except Exception as exc:
                raise CardError("euicc_init") from exc
        return self._card

    def close(self) -> None:
        """Release the card context if one was created."""
        if self._card is None:
            return
        card, self._card = self._card, None
        closer = getattr(card, "close", None)
        if callable(closer):
            closer()

    def __enter__(self) -> Session:
        return self

    def __exit__(self, *exc_info: object) -> None:
        self.close()


def usage(selfname: str, entries: Sequence[Applet], file: IO[str] | None = None) -> None:
    """Write the usage line listing the available sub-commands."""
    out = sys.stdout if file is None else file
    names = "|".join(entry.name for entry in entries)
    out.write(f"Usage: {selfname} <{names}>\n")


def run_applet(argv: Sequence[str], entries: Sequence[Applet], file: IO[str] | None = None) -> int:
    """Run the entry named by ``argv[1]`` and return its exit status."""
    out = sys.stdout if file is None else file
    if len(argv) < 2:
        usage(argv[0] if argv else "", entries, out)
        return -1
    wanted = argv[1]
    for entry in entries:
        if entry.name == wanted:
            return entry.main(list(argv[1:]))
    out.write(f"Unknown command: {wanted}\n")
    usage(argv[0], entries, out)
    return -1