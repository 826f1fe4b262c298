"""The ``notification`` sub-command: list, process and remove notifications.

The card object is expected to provide ``list_notifications()`` (an iterable
of mappings with ``seqNumber``, ``profileManagementOperation``,
``notificationAddress`` and ``iccid``), ``retrieve_notification(seq)`` (a
mapping with ``notificationAddress`` and ``b64_PendingNotification``),
``handle_notification(address, pending)`` and ``remove_notification(seq)``.
Operations that report a result code return it as an int (0 for success);
any exception counts as a failure.
"""

from __future__ import annotations

import functools
import re
from collections.abc import Callable, Sequence
from typing import Any

from esimcli.applet import Applet, CardError, Session, run_applet
from esimcli.jprint import print_error, print_progress, print_success

_REMOVE_REASONS = {1: "seqNumber not found"}

_LEADING_INT = re.compile(r"\s*([+-]?\d+)")


def _atol(text: str) -> int:
    """Parse a leading decimal integer leniently; 0 when there is none."""
    match = _LEADING_INT.match(text)
    return int(match.group(1)) if match else 0


def _status(operation: Callable[..., Any], *args: Any) -> int:
    """Run a card operation and return its result code; exceptions give -1."""
    try:
        result = operation(*args)
    except Exception:
        return -1
    return int(result) if isinstance(result, int) else 0


def list_notifications(session: Session, argv: Sequence[str]) -> int:
    """Print the metadata of every pending notification."""
    card = session.card()
    try:
        notifications = list(card.list_notifications())
    except Exception:
        print_error("es10b_list_notification")
        return -1
    print_success(
        [
            {
                "seqNumber": item.get("seqNumber"),
                "profileManagementOperation": item.get("profileManagementOperation"),
                "notificationAddress": item.get("notificationAddress"),
                "iccid": item.get("iccid"),
            }
            for item in notifications
        ]
    )
    return 0


def process(session: Session, argv: Sequence[str]) -> int:
    """Send the notification with the given sequence number to its server."""
    if len(argv) < 2:
        print(f"Usage: {argv[0] if argv else 'process'} <seqNumber>")
        return -1
    seq_number = _atol(argv[1])
    card = session.card()

    print_progress("es10b_retrieve_notifications_list")
    try:
        notification = card.retrieve_notification(seq_number)
    except Exception:
        print_error("es10b_retrieve_notifications_list")
        return -1

    print_progress("es9p_handle_notification")
    if _status(
        card.handle_notification,
        notification.get("notificationAddress"),
        notification.get("b64_PendingNotification"),
    ):
        print_error("es9p_handle_notification")
        return -1

    print_success()
    return 0


def remove(session: Session, argv: Sequence[str]) -> int:
    """Remove the notification with the given sequence number from the card."""
    if len(argv) < 2:
        print(f"Usage: {argv[0] if argv else 'remove'} <seqNumber>")
        return -1
    seq_number = _atol(argv[1])
    card = session.card()
    ret = _status(card.remove_notification, seq_number)
    if ret:
        print_error("es10b_remove_notification_from_list", _REMOVE_REASONS.get(ret, "unknown"))
        return -1
    print_success()
    return 0


def make_notification_applet(session: Session) -> Applet:
    """Build the ``notification`` sub-command bound to ``session``."""
    entries = (
        Applet("list", functools.partial(list_notifications, session)),
        Applet("process", functools.partial(process, session)),
        Applet("remove", functools.partial(remove, session)),
    )

    def notification_main(argv: list[str]) -> int:
        try:
            session.card()
        except CardError as exc:
            print_error(exc.function_name, exc.detail)
            return -1
        return run_applet(argv, entries)

    return Applet("notification", notification_main)