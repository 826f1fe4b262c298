"""Command-line entry point that wires drivers, card session and sub-commands."""

from __future__ import annotations

import sys
from collections.abc import Callable, Sequence
from typing import Any

from esimcli.applet import Applet, Session, run_applet
from esimcli.chip import make_chip_applet
from esimcli.interfaces import Drivers, load_drivers, make_driver_applet
from esimcli.notification import make_notification_applet
from esimcli.profile import make_profile_applet
from esimcli.transport import ApduInterface, HttpInterface, InterfaceError


def build_applets(session: Session, drivers: Drivers) -> tuple[Applet, ...]:
    """Return the top-level sub-commands in dispatch order."""
    return (
        make_driver_applet(drivers),
        make_chip_applet(session),
        make_profile_applet(session),
        make_notification_applet(session),
    )


def _no_card(apdu: ApduInterface | None, http: HttpInterface | None) -> Any:
    raise InterfaceError("no card backend is configured")


def main(
    argv: Sequence[str] | None = None,
    card_factory: Callable[[ApduInterface | None, HttpInterface | None], Any] | None = None,
) -> int:
    """Run the command line; return the exit status."""
    args = list(sys.argv if argv is None else argv)
    if not args:
        args = ["esimcli"]
    try:
        drivers = load_drivers()
    except InterfaceError as exc:
        print(exc, file=sys.stderr)
        return -1

    with Session(card_factory or _no_card, drivers.apdu, drivers.http) as session:
        return run_applet(args, build_applets(session, drivers))