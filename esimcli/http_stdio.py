"""HTTP transport that exchanges JSON lines with a controlling process."""

from __future__ import annotations

import json
import sys
from collections.abc import Mapping, Sequence
from typing import IO

from esimcli.transport import HttpInterface, HttpResponse, InterfaceError, bytes_to_hex, hex_to_bytes


class StdioHttpInterface(HttpInterface):
    """Writes HTTP requests as JSON lines and reads JSON line replies."""

    def __init__(self, input: IO[str] | None = None, output: IO[str] | None = None) -> None:
        self._input = input
        self._output = output

    @property
    def input(self) -> IO[str]:
        return sys.stdin if self._input is None else self._input

    @property
    def output(self) -> IO[str]:
        return sys.stdout if self._output is None else self._output

    def request(self, url: str, tx: bytes | None, headers: Sequence[str]) -> None:
        """Write one request line carrying ``url``, hex-encoded ``tx`` and ``headers``."""
        message = {
            "type": "http",
            "payload": {
                "url": url,
                "tx": bytes_to_hex(tx or b""),
                "headers": [str(header) for header in headers],
            },
        }
        self.output.write(json.dumps(message, separators=(",", ":"), ensure_ascii=False) + "\n")
        self.output.flush()

    def _read_reply(self) -> HttpResponse:
        line = self.input.readline()
        for stop in "\r\n":
            line = line.split(stop, 1)[0]
        try:
            root = json.loads(line)
        except ValueError as exc:
            raise InterfaceError("malformed HTTP reply") from exc
        if not isinstance(root, Mapping) or root.get("type") != "http":
            raise InterfaceError("reply is not of type http")
        payload = root.get("payload")
        if not isinstance(payload, Mapping):
            raise InterfaceError("reply has no payload object")
        rcode = payload.get("rcode")
        if isinstance(rcode, bool) or not isinstance(rcode, (int, float)):
            raise InterfaceError("reply has no numeric rcode")
        rx = payload.get("rx")
        if not isinstance(rx, str):
            raise InterfaceError("reply has no rx string")
        return HttpResponse(rcode=int(rcode), rx=hex_to_bytes(rx))

    def transmit(self, url: str, tx: bytes | None, headers: Sequence[str]) -> HttpResponse:
        self.request(url, tx, headers)
        return self._read_reply()