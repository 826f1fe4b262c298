"""HTTP transport built on the standard library's urllib."""

from __future__ import annotations

import ssl
import urllib.error
import urllib.request
from collections.abc import Sequence

from esimcli.transport import HttpInterface, HttpResponse, InterfaceError


def _split_header(header: str) -> tuple[str, str]:
    name, sep, value = header.partition(":")
    if not sep or not name.strip():
        raise InterfaceError(f"malformed header: {header!r}")
    return name.strip(), value.strip()


class UrllibHttpInterface(HttpInterface):
    """Posts requests with urllib; server certificates are not verified."""

    def __init__(self, timeout: float | None = None) -> None:
        self.timeout = timeout
        context = ssl.create_default_context()
        context.check_hostname = False
        context.verify_mode = ssl.CERT_NONE
        self._opener = urllib.request.build_opener(urllib.request.HTTPSHandler(context=context))

    def transmit(self, url: str, tx: bytes | None, headers: Sequence[str]) -> HttpResponse:
        request = urllib.request.Request(url, data=None if tx is None else bytes(tx))
        for header in headers:
            name, value = _split_header(header)
            request.add_header(name, value)
        kwargs = {} if self.timeout is None else {"timeout": self.timeout}
        try:
            with self._opener.open(request, **kwargs) as reply:
                return HttpResponse(rcode=reply.status, rx=reply.read())
        except urllib.error.HTTPError as exc:
            with exc:
                body = exc.read() or b""
            return HttpResponse(rcode=exc.code, rx=body)
        except (urllib.error.URLError, OSError, ValueError) as exc:
            raise InterfaceError(f"HTTP request to {url} failed: {exc}") from exc