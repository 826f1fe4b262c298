"""The ``profile`` sub-command: list, enable, disable, rename, delete and download.

The card object is the one produced by the session's card factory. It is
expected to provide:

* ``get_profiles_info()``, an iterable of mappings keyed by the output field
  names (``iccid``, ``isdpAid``, ``profileState`` and so on);
* ``enable_profile(param, refreshflag)``, ``disable_profile(param, refreshflag)``,
  ``set_nickname(iccid, name)`` and ``delete_profile(param)``, each returning
  a result code (0 for success);
* for downloads, ``get_configured_addresses()``, ``get_euicc_challenge_and_info()``,
  ``initiate_authentication(server_address)``,
  ``authenticate_server(matching_id, imei)``, ``authenticate_client()``,
  ``prepare_download(confirmation_code)``, ``get_bound_profile_package()``,
  ``load_bound_profile_package()`` and optionally ``http_cleanup()``.

Any exception raised by an operation counts as a failure. Exceptions from
server exchanges may carry a ``status_message``; a failed profile load may
carry ``bppCommandId`` and ``errorReason``.
"""

from __future__ import annotations

import functools
import getopt
import re
import sys
from collections.abc import Callable, Sequence
from typing import Any

from esimcli.applet import Applet, CardError, Session, run_applet
from esimcli.jprint import print_error, print_progress, print_success

_INTERNAL_ERROR = "internal error, maybe illegal iccid/aid coding"

_ENABLE_REASONS = {
    1: "iccid or aid not found",
    2: "profile not in disabled state",
    3: "disallowed by policy",
    4: "wrong profile reenabling",
    -1: _INTERNAL_ERROR,
}

_DISABLE_REASONS = {
    1: "iccid or aid not found",
    2: "profile not in enabled state",
    3: "disallowed by policy",
    -1: _INTERNAL_ERROR,
}

_DELETE_REASONS = {
    1: "iccid or aid not found",
    2: "profile not in disabled state",
    3: "disallowed by policy",
    -1: _INTERNAL_ERROR,
}

_NICKNAME_REASONS = {1: "iccid not found"}

_PROFILE_FIELDS = (
    "iccid",
    "isdpAid",
    "profileState",
    "profileNickname",
    "serviceProviderName",
    "profileName",
    "iconType",
    "icon",
    "profileClass",
)

_LEADING_INT = re.compile(r"\s*([+-]?\d+)")


def _atoi(text: str) -> int:
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


def _attempt(operation: Callable[..., Any], *args: Any) -> tuple[bool, Exception | None]:
    """Run a card operation; return whether it failed and the exception, if any."""
    try:
        result = operation(*args)
    except Exception as exc:
        return True, exc
    return isinstance(result, int) and int(result) != 0, None


def _server_detail(exc: Exception | None) -> str | None:
    if exc is None:
        return None
    message = getattr(exc, "status_message", None)
    if message is not None:
        return str(message)
    return str(exc) or None


def _prog(argv: Sequence[str], default: str) -> str:
    return argv[0] if argv else default


def list_profiles(session: Session, argv: Sequence[str]) -> int:
    """Print every profile installed on the card."""
    card = session.card()
    try:
        profiles = list(card.get_profiles_info())
    except Exception:
        print_error("es10c_get_profiles_info")
        return -1
    print_success([{field: profile.get(field) for field in _PROFILE_FIELDS} for profile in profiles])
    return 0


def _switch_profile(
    session: Session,
    argv: Sequence[str],
    default_name: str,
    method: str,
    function_name: str,
    reasons: dict[int, str],
) -> int:
    if len(argv) < 2:
        print(f"Usage: {_prog(argv, default_name)} [iccid/aid] [refreshflag]")
        print("\t[refreshflag]: optional")
        return -1
    param = argv[1]
    refreshflag = _atoi(argv[2]) if len(argv) > 2 else 0
    card = session.card()
    ret = _status(getattr(card, method), param, refreshflag)
    if ret:
        print_error(function_name, reasons.get(ret, "unknown"))
        return -1
    print_success()
    return 0


def enable(session: Session, argv: Sequence[str]) -> int:
    """Enable the profile named by ICCID or AID."""
    return _switch_profile(session, argv, "enable", "enable_profile", "es10c_enable_profile", _ENABLE_REASONS)


def disable(session: Session, argv: Sequence[str]) -> int:
    """Disable the profile named by ICCID or AID."""
    return _switch_profile(session, argv, "disable", "disable_profile", "es10c_disable_profile", _DISABLE_REASONS)


def nickname(session: Session, argv: Sequence[str]) -> int:
    """Set (or clear, when no name is given) a profile's nickname."""
    if len(argv) < 2:
        print(f"Usage: {_prog(argv, 'nickname')} [iccid] [new_name]")
        print("\t[new_name]: optional")
        return -1
    iccid = argv[1]
    new_name = argv[2] if len(argv) > 2 else ""
    card = session.card()
    ret = _status(card.set_nickname, iccid, new_name)
    if ret:
        print_error("es10c_set_nickname", _NICKNAME_REASONS.get(ret, "unknown"))
        return -1
    print_success()
    return 0


def delete(session: Session, argv: Sequence[str]) -> int:
    """Delete the profile named by ICCID or AID."""
    if len(argv) < 2:
        print(f"Usage: {_prog(argv, 'delete')} [iccid/aid]")
        return -1
    card = session.card()
    ret = _status(card.delete_profile, argv[1])
    if ret:
        print_error("es10c_disable_profile", _DELETE_REASONS.get(ret, "unknown"))
        return -1
    print_success()
    return 0


def _download_usage(prog: str) -> None:
    for line in (
        f"Usage: {prog} [OPTIONS]",
        "\t -s SM-DP+ Domain",
        "\t -m Matching ID",
        "\t -i IMEI",
        "\t -c Confirmation Code (Password)",
        "\t -h This help info",
    ):
        print(line, end="\r\n")


def _run_download(card: Any, options: dict[str, str]) -> int:
    smdp = options.get("-s")
    if smdp is None:
        print_progress("es10a_get_euicc_configured_addresses")
        try:
            smdp = card.get_configured_addresses().get("defaultDpAddress")
        except Exception:
            print_error("es10a_get_euicc_configured_addresses")
            return -1

    if not smdp:
        print_error("smdp is null")
        return -1

    print_progress("es10b_get_euicc_challenge_and_info")
    failed, _ = _attempt(card.get_euicc_challenge_and_info)
    if failed:
        print_error("es10b_get_euicc_challenge_and_info")
        return -1

    print_progress("es9p_initiate_authentication")
    failed, exc = _attempt(card.initiate_authentication, smdp)
    if failed:
        print_error("es9p_initiate_authentication", _server_detail(exc))
        return -1

    print_progress("es10b_authenticate_server")
    failed, _ = _attempt(card.authenticate_server, options.get("-m"), options.get("-i"))
    if failed:
        print_error("es10b_authenticate_server")
        return -1

    print_progress("es9p_authenticate_client")
    failed, exc = _attempt(card.authenticate_client)
    if failed:
        print_error("es9p_authenticate_client", _server_detail(exc))
        return -1

    print_progress("es10b_prepare_download")
    failed, _ = _attempt(card.prepare_download, options.get("-c"))
    if failed:
        print_error("es10b_prepare_download")
        return -1

    print_progress("es9p_get_bound_profile_package")
    failed, exc = _attempt(card.get_bound_profile_package)
    if failed:
        print_error("es9p_get_bound_profile_package", _server_detail(exc))
        return -1

    print_progress("es10b_load_bound_profile_package")
    failed, exc = _attempt(card.load_bound_profile_package)
    if failed:
        command = getattr(exc, "bppCommandId", "unknown")
        reason = getattr(exc, "errorReason", "unknown")
        print_error("es10b_load_bound_profile_package", f"{command},{reason}")
        return -1

    print_success()
    return 0


def download(session: Session, argv: Sequence[str]) -> int:
    """Download and install a profile from an SM-DP+ server."""
    prog = _prog(argv, "download")
    try:
        opts, _ = getopt.gnu_getopt(list(argv[1:]), "s:m:i:c:h")
    except getopt.GetoptError as exc:
        print(f"{prog}: {exc}", file=sys.stderr)
        _download_usage(prog)
        return -1

    options: dict[str, str] = {}
    for flag, value in opts:
        if flag == "-h":
            _download_usage(prog)
            return -1
        options[flag] = value

    card = session.card()
    try:
        return _run_download(card, options)
    finally:
        cleanup = getattr(card, "http_cleanup", None)
        if callable(cleanup):
            cleanup()


def discovery(session: Session, argv: Sequence[str]) -> int:
    """Report that SM-DS discovery is unavailable."""
    print_error("profile_discovery", "not supported")
    return -1


def make_profile_applet(session: Session) -> Applet:
    """Build the ``profile`` sub-command bound to ``session``."""
    entries = (
        Applet("list", functools.partial(list_profiles, session)),
        Applet("enable", functools.partial(enable, session)),
        Applet("disable", functools.partial(disable, session)),
        Applet("nickname", functools.partial(nickname, session)),
        Applet("delete", functools.partial(delete, session)),
        Applet("download", functools.partial(download, session)),
        Applet("discovery", functools.partial(discovery, session)),
    )

    def profile_main(argv: list[str]) -> int:
        try:
            session.card()
        except CardError as exc:
            print_error(exc.function_name, exc.detail)
            return -1
        return run_applet(argv, entries)

    return Applet("profile", profile_main)