"""The ``chip`` sub-command: card information, default SM-DP+ and memory reset.

The card object is the one produced by the session's card factory. It is
expected to provide ``get_eid()``, ``get_configured_addresses()`` and
``get_euiccinfo2()`` (returning mappings keyed by the field names used in the
output), ``set_default_dp_address(smdp)`` and ``memory_reset()``. Operations
that report a result code return it as an int (0 for success); any exception
counts as a failure.
"""

from __future__ import annotations

import functools
import sys
from collections.abc import Callable, Mapping, Sequence
from typing import Any

from esimcli.applet import Applet, CardError, Session, run_applet
from esimcli.jprint import print_error, print_success

_PURGE_REASONS = {1: "nothing to delete"}

_INFO2_LIST_FIELDS = frozenset(
    {
        "uiccCapability",
        "rspCapability",
        "euiccCiPKIdListForVerification",
        "euiccCiPKIdListForSigning",
        "forbiddenProfilePolicyRules",
    }
)


def _status(operation: Callable[..., Any], *args: Any) -> int:
    """Run a card operation and return its result code; exceptions give -1."""
    try:
        result = operation(*args)
    except Exception:
        return -1
    return int(result) if isinstance(result, int) else 0


def _addresses_json(addresses: Mapping[str, Any]) -> dict[str, Any]:
    return {
        "defaultDpAddress": addresses.get("defaultDpAddress"),
        "rootDsAddress": addresses.get("rootDsAddress"),
    }


def _euiccinfo2_json(info2: Mapping[str, Any]) -> dict[str, Any]:
    resource = info2.get("extCardResource") or {}
    certification = info2.get("certificationDataObject") or {}
    result: dict[str, Any] = {}

    def add_list(key: str) -> None:
        values = info2.get(key)
        if values is not None:
            result[key] = [str(value) for value in values]

    result["profileVersion"] = info2.get("profileVersion")
    result["svn"] = info2.get("svn")
    result["euiccFirmwareVer"] = info2.get("euiccFirmwareVer")
    result["extCardResource"] = {
        "installedApplication": resource.get("installedApplication", 0),
        "freeNonVolatileMemory": resource.get("freeNonVolatileMemory", 0),
        "freeVolatileMemory": resource.get("freeVolatileMemory", 0),
    }
    add_list("uiccCapability")
    result["javacardVersion"] = info2.get("javacardVersion")
    result["globalplatformVersion"] = info2.get("globalplatformVersion")
    add_list("rspCapability")
    add_list("euiccCiPKIdListForVerification")
    add_list("euiccCiPKIdListForSigning")
    result["euiccCategory"] = info2.get("euiccCategory")
    add_list("forbiddenProfilePolicyRules")
    result["ppVersion"] = info2.get("ppVersion")
    result["sasAcreditationNumber"] = info2.get("sasAcreditationNumber")
    result["certificationDataObject"] = {
        "platformLabel": certification.get("platformLabel"),
        "discoveryBaseURL": certification.get("discoveryBaseURL"),
    }
    return result


def info(session: Session, argv: Sequence[str]) -> int:
    """Print the EID, configured addresses and EUICCInfo2 of the card."""
    card = session.card()
    try:
        eid = card.get_eid()
    except Exception:
        print_error("es10c_get_eid")
        return -1

    try:
        addresses = _addresses_json(card.get_configured_addresses())
    except Exception:
        addresses = None

    try:
        info2 = _euiccinfo2_json(card.get_euiccinfo2())
    except Exception:
        info2 = None

    print_success(
        {
            "eidValue": eid,
            "EuiccConfiguredAddresses": addresses,
            "EUICCInfo2": info2,
        }
    )
    return 0


def defaultsmdp(session: Session, argv: Sequence[str]) -> int:
    """Set the default SM-DP+ address stored on the card."""
    if len(argv) < 2:
        print(f"Usage: {argv[0] if argv else 'defaultsmdp'} <smdp>")
        return -1
    card = session.card()
    if _status(card.set_default_dp_address, argv[1]):
        print_error("es10a_set_default_dp_address")
        return -1
    print_success()
    return 0


def purge(session: Session, argv: Sequence[str]) -> int:
    """Reset the card's memory after an explicit ``yes``."""
    if len(argv) < 2:
        print(f"Usage: {argv[0] if argv else 'purge'} [yes|other]")
        print("\t\tConfirm purge eUICC, all data will lost!")
        return -1
    if argv[1] != "yes":
        print("Purge canceled")
        return -1
    card = session.card()
    ret = _status(card.memory_reset)
    if ret:
        print_error("es10c_euicc_memory_reset", _PURGE_REASONS.get(ret, "unknown"))
        return -1
    print_success()
    return 0


def make_chip_applet(session: Session) -> Applet:
    """Build the ``chip`` sub-command bound to ``session``."""
    entries = (
        Applet("info", functools.partial(info, session)),
        Applet("defaultsmdp", functools.partial(defaultsmdp, session)),
        Applet("purge", functools.partial(purge, session)),
    )

    def chip_main(argv: list[str]) -> int:
        try:
            session.card()
        except CardError as exc:
            print_error(exc.function_name, exc.detail)
            sys.stdout.flush()
            return -1
        return run_applet(argv, entries)

    return Applet("chip", chip_main)