"""Selection of the APDU and HTTP drivers and the ``driver`` sub-command."""

from __future__ import annotations

import os
import sys
from collections.abc import Callable, Mapping
from dataclasses import dataclass

from esimcli.apdu_at import AtApduInterface
from esimcli.apdu_stdio import StdioApduInterface
from esimcli.applet import Applet, run_applet
from esimcli.http_stdio import StdioHttpInterface
from esimcli.http_urllib import UrllibHttpInterface
from esimcli.transport import ApduInterface, HttpInterface, InterfaceError

APDU_ENV = "APDU_INTERFACE"
HTTP_ENV = "HTTP_INTERFACE"
DEFAULT_APDU_DRIVER = "at"
DEFAULT_HTTP_DRIVER = "curl"

_APDU_DRIVERS: dict[str, Callable[[], ApduInterface]] = {
    "at": AtApduInterface,
    "stdio": StdioApduInterface,
}

_HTTP_DRIVERS: dict[str, Callable[[], HttpInterface]] = {
    "curl": UrllibHttpInterface,
    "urllib": UrllibHttpInterface,
    "stdio": StdioHttpInterface,
}


@dataclass
class Drivers:
    """The loaded APDU driver and, if one could be loaded, the HTTP driver."""

    apdu: ApduInterface
    http: HttpInterface | None
    apdu_name: str
    http_name: str | None


def _driver_name(value: str, kind: str) -> str:
    """Reduce a driver setting such as ``libapduinterface_stdio.so`` to ``stdio``."""
    base = os.path.basename(value)
    prefix = f"lib{kind}interface_"
    if base.startswith(prefix):
        base = base[len(prefix):]
    return base.split(".", 1)[0].lower()


def load_drivers(environ: Mapping[str, str] | None = None) -> Drivers:
    """Create the drivers named by APDU_INTERFACE and HTTP_INTERFACE."""
    env = os.environ if environ is None else environ

    apdu_value = env.get(APDU_ENV)
    if apdu_value is None:
        apdu_value = DEFAULT_APDU_DRIVER
    apdu_name = _driver_name(apdu_value, "apdu")
    apdu_factory = _APDU_DRIVERS.get(apdu_name)
    if apdu_factory is None:
        raise InterfaceError(f"APDU interface env missing, current: {APDU_ENV}={apdu_value}")
    try:
        apdu = apdu_factory()
    except Exception as exc:
        raise InterfaceError("APDU library init error") from exc

    http_value = env.get(HTTP_ENV)
    if http_value is None:
        http_value = DEFAULT_HTTP_DRIVER
    http_name: str | None = _driver_name(http_value, "http")
    http: HttpInterface | None = None
    http_factory = _HTTP_DRIVERS.get(http_name)
    if http_factory is None:
        print(f"HTTP interface env missing, current: {HTTP_ENV}={http_value}", file=sys.stderr)
        http_name = None
    else:
        try:
            http = http_factory()
        except Exception as exc:
            raise InterfaceError("HTTP library init error") from exc

    return Drivers(apdu=apdu, http=http, apdu_name=apdu_name, http_name=http_name)


def make_driver_applet(drivers: Drivers) -> Applet:
    """Build the ``driver`` sub-command with its ``apdu`` and ``http`` entries."""

    def apdu_main(argv: list[str]) -> int:
        return 0

    def http_main(argv: list[str]) -> int:
        if drivers.http is None:
            print("HTTP interface not loaded", file=sys.stderr)
            return -1
        return 0

    entries = (Applet("apdu", apdu_main), Applet("http", http_main))

    def driver_main(argv: list[str]) -> int:
        return run_applet(argv, entries)

    return Applet("driver", driver_main)