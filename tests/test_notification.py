import json

from esimcli.applet import Session
from esimcli.notification import list_notifications, make_notification_applet, process, remove

NOTIFICATIONS = [
    {
        "seqNumber": 5,
        "profileManagementOperation": "install",
        "notificationAddress": "smdp.example.com",
        "iccid": "ICCID-TEST-A",
    },
    {
        "seqNumber": 7,
        "profileManagementOperation": "delete",
        "notificationAddress": "other.example.com",
        "iccid": "ICCID-TEST-B",
    },
]


class FakeCard:
    def __init__(self, fail=(), remove_code=0, handle_code=0):
        self.fail = set(fail)
        self.remove_code = remove_code
        self.handle_code = handle_code
        self.handled = []
        self.removed = []
        self.retrieved = []

    def _check(self, name):
        if name in self.fail:
            raise RuntimeError(name)

    def list_notifications(self):
        self._check("list_notifications")
        return iter(NOTIFICATIONS)

    def retrieve_notification(self, seq):
        self._check("retrieve_notification")
        self.retrieved.append(seq)
        return {"notificationAddress": "smdp.example.com", "b64_PendingNotification": "cGVuZGluZw=="}

    def handle_notification(self, address, pending):
        self._check("handle_notification")
        self.handled.append((address, pending))
        return self.handle_code

    def remove_notification(self, seq):
        self._check("remove_notification")
        self.removed.append(seq)
        return self.remove_code


def make_session(card):
    return Session(lambda apdu, http: card)


def json_lines(out):
    return [json.loads(line) for line in out.splitlines()]


def test_list_outputs_all_notifications(capsys):
    assert list_notifications(make_session(FakeCard()), ["list"]) == 0
    (line,) = json_lines(capsys.readouterr().out)
    assert line["payload"]["message"] == "success"
    assert line["payload"]["data"] == NOTIFICATIONS


def test_list_failure(capsys):
    assert list_notifications(make_session(FakeCard(fail={"list_notifications"})), ["list"]) == -1
    assert json_lines(capsys.readouterr().out)[0]["payload"]["message"] == "es10b_list_notification"


def test_process_sends_notification(capsys):
    card = FakeCard()
    assert process(make_session(card), ["process", "7"]) == 0
    assert card.retrieved == [7]
    assert card.handled == [("smdp.example.com", "cGVuZGluZw==")]
    lines = json_lines(capsys.readouterr().out)
    assert [line["type"] for line in lines] == ["progress", "progress", "lpa"]
    assert [line["payload"]["message"] for line in lines] == [
        "es10b_retrieve_notifications_list",
        "es9p_handle_notification",
        "success",
    ]


def test_process_parses_leading_digits(capsys):
    card = FakeCard()
    assert process(make_session(card), ["process", "12abc"]) == 0
    assert card.retrieved == [12]


def test_process_usage(capsys):
    assert process(make_session(FakeCard()), ["process"]) == -1
    assert capsys.readouterr().out == "Usage: process <seqNumber>\n"


def test_process_retrieve_failure(capsys):
    card = FakeCard(fail={"retrieve_notification"})
    assert process(make_session(card), ["process", "5"]) == -1
    lines = json_lines(capsys.readouterr().out)
    assert lines[-1]["payload"]["code"] == -1
    assert lines[-1]["payload"]["message"] == "es10b_retrieve_notifications_list"
    assert card.handled == []


def test_process_handle_failure(capsys):
    assert process(make_session(FakeCard(handle_code=-1)), ["process", "5"]) == -1
    lines = json_lines(capsys.readouterr().out)
    assert lines[-1]["payload"]["message"] == "es9p_handle_notification"


def test_remove_success(capsys):
    card = FakeCard()
    assert remove(make_session(card), ["remove", "5"]) == 0
    assert card.removed == [5]
    assert json_lines(capsys.readouterr().out)[0]["payload"]["code"] == 0


def test_remove_not_found(capsys):
    assert remove(make_session(FakeCard(remove_code=1)), ["remove", "9"]) == -1
    payload = json_lines(capsys.readouterr().out)[0]["payload"]
    assert payload["message"] == "es10b_remove_notification_from_list"
    assert payload["data"] == "seqNumber not found"


def test_remove_other_code_is_unknown(capsys):
    assert remove(make_session(FakeCard(remove_code=3)), ["remove", "9"]) == -1
    assert json_lines(capsys.readouterr().out)[0]["payload"]["data"] == "unknown"


def test_notification_applet_dispatches(capsys):
    card = FakeCard()
    applet = make_notification_applet(make_session(card))
    assert applet.name == "notification"
    assert applet.main(["notification", "remove", "5"]) == 0
    assert card.removed == [5]


def test_notification_applet_unknown_command(capsys):
    applet = make_notification_applet(make_session(FakeCard()))
    assert applet.main(["notification", "bogus"]) == -1
    out = capsys.readouterr().out
    assert out == "Unknown command: bogus\nUsage: notification <list|process|remove>\n"


def test_notification_applet_init_failure(capsys):
    def broken(apdu, http):
        raise RuntimeError("no card")

    applet = make_notification_applet(Session(broken))
    assert applet.main(["notification", "list"]) == -1
    assert json_lines(capsys.readouterr().out)[0]["payload"]["message"] == "euicc_init"