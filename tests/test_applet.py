import io

import pytest

from esimcli.applet import Applet, CardError, Session, run_applet, usage


def _entries(calls):
    def make(name, status):
        def main(argv):
            calls.append((name, argv))
            return status

        return Applet(name, main)

    return [make("chip", 0), make("profile", 3)]


def test_usage_lists_entries():
    out = io.StringIO()
    usage("lpac", _entries([]), out)
    assert out.getvalue() == "Usage: lpac <chip|profile>\n"


def test_usage_single_entry_has_no_separator():
    out = io.StringIO()
    usage("lpac", [Applet("info", lambda argv: 0)], out)
    assert out.getvalue() == "Usage: lpac <info>\n"


def test_run_without_command_prints_usage():
    out = io.StringIO()
    assert run_applet(["lpac"], _entries([]), out) == -1
    assert out.getvalue() == "Usage: lpac <chip|profile>\n"


def test_run_dispatches_and_shifts_argv():
    calls = []
    out = io.StringIO()
    assert run_applet(["lpac", "profile", "list"], _entries(calls), out) == 3
    assert calls == [("profile", ["profile", "list"])]
    assert out.getvalue() == ""


def test_run_unknown_command():
    calls = []
    out = io.StringIO()
    assert run_applet(["lpac", "bogus"], _entries(calls), out) == -1
    assert calls == []
    assert out.getvalue() == "Unknown command: bogus\nUsage: lpac <chip|profile>\n"


def test_session_creates_card_once_with_interfaces():
    created = []
    apdu, http = object(), object()

    def factory(a, h):
        created.append((a, h))
        return object()

    session = Session(factory, apdu, http)
    first = session.card()
    assert session.card() is first
    assert created == [(apdu, http)]


def test_session_close_calls_card_close_and_resets():
    closed = []

    class Card:
        def close(self):
            closed.append(self)

    session = Session(lambda a, h: Card())
    card = session.card()
    session.close()
    session.close()
    assert closed == [card]
    assert session.card() is not card


def test_session_close_without_card_is_noop():
    made = []
    session = Session(lambda a, h: made.append(1))
    session.close()
    assert made == []


def test_session_context_manager_closes():
    closed = []

    class Card:
        def close(self):
            closed.append(self)

    session = Session(lambda a, h: Card())
    with session as entered:
        assert entered is session
        card = entered.card()
        assert isinstance(card, Card)
        assert closed == []
    assert closed == [card]


def test_session_factory_failure_raises_card_error():
    def factory(a, h):
        raise RuntimeError("no reader")

    with pytest.raises(CardError) as info:
        Session(factory).card()
    assert info.value.function_name == "euicc_init"
    assert info.value.detail is None
    assert isinstance(info.value.__cause__, RuntimeError)


def test_card_error_carries_detail():
    err = CardError("es10c_set_nickname", "iccid not found")
    assert err.detail == "iccid not found"
    assert "iccid not found" in str(err)