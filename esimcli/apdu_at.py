"""APDU transport over a modem's AT command port (CCHO/CCHC/CGLA)."""

from __future__ import annotations

import os
import re
from typing import IO

from esimcli.transport import ApduInterface, InterfaceError, hex_to_bytes

DEFAULT_DEVICE = "/dev/ttyUSB0"

_LEADING_INT = re.compile(r"\s*([+-]?\d+)")


def _atoi(text: str) -> int:
    """Parse a leading decimal integer the lenient way; 0 if there is none."""
    match = _LEADING_INT.match(text)
    return int(match.group(1)) if match else 0


class AtApduInterface(ApduInterface):
    """Carries APDUs through the AT+CGLA logical-channel commands of a modem."""

    def __init__(
        self,
        device: str | None = None,
        stream: IO[str] | None = None,
        debug: bool | None = None,
    ) -> None:
        self.device = device
        self.debug = bool(os.environ.get("AT_DEBUG")) if debug is None else debug
        self._stream = stream
        self._owns_stream = False
        self.logic_channel = 0

    def _send(self, command: str) -> None:
        if self._stream is None:
            raise InterfaceError("AT device is not connected")
        self._stream.write(command + "\r\n")
        self._stream.flush()

    def _expect(self, expected: str | None = None) -> tuple[bool, str | None]:
        """Read lines until OK or ERROR; return the status and any matched reply."""
        if self._stream is None:
            raise InterfaceError("AT device is not connected")
        response: str | None = None
        while True:
            raw = self._stream.readline()
            if raw == "":
                raise InterfaceError("AT device closed the connection")
            line = re.split(r"[\r\n]", raw, maxsplit=1)[0]
            if self.debug:
                print(f"AT_DEBUG: {line}", end="\r\n")
            if line == "ERROR":
                return False, response
            if line == "OK":
                return True, response
            if expected and line.startswith(expected):
                response = line[len(expected):]

    def connect(self) -> None:
        self.logic_channel = 0
        if self._stream is None:
            device = self.device or os.environ.get("AT_DEVICE") or DEFAULT_DEVICE
            try:
                self._stream = open(device, "r+", newline="")
            except OSError as exc:
                raise InterfaceError(f"Failed to open device: {device}") from exc
            self._owns_stream = True

        for command in ("CCHO", "CCHC", "CGLA"):
            self._send(f"AT+{command}=?")
            ok, _ = self._expect()
            if not ok:
                raise InterfaceError(f"Device missing AT+{command} support")

    def disconnect(self) -> None:
        if self._stream is not None and self._owns_stream:
            self._stream.close()
        self._stream = None
        self._owns_stream = False
        self.logic_channel = 0

    def transmit(self, tx: bytes) -> bytes:
        if not self.logic_channel:
            raise InterfaceError("no logical channel is open")
        payload = bytes(tx).hex().upper()
        self._send(f'AT+CGLA={self.logic_channel},{len(tx) * 2},"{payload}"')
        ok, response = self._expect("+CGLA: ")
        if not ok or response is None:
            raise InterfaceError("AT+CGLA failed")
        tokens = [token for token in response.split(",") if token]
        if len(tokens) < 2:
            raise InterfaceError("malformed +CGLA response")
        hexstr = tokens[1]
        if hexstr.startswith('"'):
            hexstr = hexstr[1:]
        hexstr = hexstr.split('"', 1)[0]
        return hex_to_bytes(hexstr)

    def logic_channel_open(self, aid: bytes) -> int:
        if self.logic_channel:
            return self.logic_channel
        for channel in range(1, 5):
            self._send(f"AT+CCHC={channel}")
            self._expect()
        self._send(f'AT+CCHO="{bytes(aid).hex().upper()}"')
        ok, response = self._expect("+CCHO: ")
        if not ok or response is None:
            raise InterfaceError("AT+CCHO failed")
        self.logic_channel = _atoi(response)
        return self.logic_channel

    def logic_channel_close(self, channel: int) -> None:
        if not self.logic_channel:
            return
        self._send(f"AT+CCHC={self.logic_channel}")
        self._expect()