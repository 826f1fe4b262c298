"""APDU transport that exchanges JSON lines with a controlling process."""

from __future__ import annotations

import json
import sys
from collections.abc import Mapping
from typing import IO

from esimcli.transport import ApduInterface, InterfaceError, bytes_to_hex, hex_to_bytes


class StdioApduInterface(ApduInterface):
    """Writes APDU requests as JSON lines and reads JSON line replies."""

    def __init__(self, input: IO[str] | None = None, output: IO[str] | None = None) -> None:
        self._input = input
        self._output = output

    @property
    def input(self) -> IO[str]:
        return sys.stdin if self._input is None else self._input

    @property
    def output(self) -> IO[str]:
        return sys.stdout if self._output is None else self._output

    def request(self, func: str, param: bytes | None = None) -> None:
        """Write one request line naming ``func`` with hex-encoded ``param``."""
        message = {
            "type": "apdu",
            "payload": {
                "func": func,
                "param": bytes_to_hex(param) if param else None,
            },
        }
        self.output.write(json.dumps(message, separators=(",", ":")) + "\n")
        self.output.flush()

    def response(self) -> tuple[int, bytes | None]:
        """Read one reply line and return its ecode and decoded data."""
        line = self.input.readline()
        for stop in "\r\n":
            line = line.split(stop, 1)[0]
        try:
            root = json.loads(line)
        except ValueError as exc:
            raise InterfaceError("malformed APDU reply") from exc
        if not isinstance(root, Mapping) or root.get("type") != "apdu":
            raise InterfaceError("reply is not of type apdu")
        payload = root.get("payload")
        if not isinstance(payload, Mapping):
            raise InterfaceError("reply has no payload object")
        ecode = payload.get("ecode")
        if isinstance(ecode, bool) or not isinstance(ecode, (int, float)):
            raise InterfaceError("reply has no numeric ecode")
        data = payload.get("data")
        decoded = hex_to_bytes(data) if isinstance(data, str) else None
        return int(ecode), decoded

    def connect(self) -> None:
        self.request("connect")
        ecode, _ = self.response()
        if ecode != 0:
            raise InterfaceError(f"connect failed with ecode {ecode}")

    def disconnect(self) -> None:
        try:
            self.request("disconnect")
            self.response()
        except InterfaceError:
            pass

    def transmit(self, tx: bytes) -> bytes:
        self.request("transmit", tx)
        ecode, data = self.response()
        if ecode != 0:
            raise InterfaceError(f"transmit failed with ecode {ecode}")
        return data if data is not None else b""

    def logic_channel_open(self, aid: bytes) -> int:
        self.request("logic_channel_open", aid)
        ecode, _ = self.response()
        if ecode < 0:
            raise InterfaceError(f"logic_channel_open failed with ecode {ecode}")
        return ecode

    def logic_channel_close(self, channel: int) -> None:
        try:
            self.request("logic_channel_close", bytes([channel & 0xFF]))
            self.response()
        except InterfaceError:
            pass