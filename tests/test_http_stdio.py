import io
import json

import pytest

from esimcli.http_stdio import StdioHttpInterface
from esimcli.transport import HttpResponse, InterfaceError


def make(reply: str = ""):
    out = io.StringIO()
    iface = StdioHttpInterface(input=io.StringIO(reply), output=out)
    return iface, out


def test_request_line_format():
    iface, out = make()
    iface.request("https://smdp.example.com/x", b"\x01\xab", ["Content-Type: application/json"])
    line = out.getvalue()
    assert line.endswith("\n")
    message = json.loads(line)
    assert message == {
        "type": "http",
        "payload": {
            "url": "https://smdp.example.com/x",
            "tx": "01ab",
            "headers": ["Content-Type: application/json"],
        },
    }


def test_request_without_body_sends_empty_hex():
    iface, out = make()
    iface.request("https://smdp.example.com/", None, [])
    message = json.loads(out.getvalue())
    assert message["payload"]["tx"] == ""
    assert message["payload"]["headers"] == []


def test_transmit_documented_reply():
    iface, out = make('{"type":"http","payload":{"rcode":404,"rx":"333435"}}\n')
    response = iface.transmit("https://smdp.example.com/", b"abc", ["A: b"])
    assert response == HttpResponse(rcode=404, rx=b"345")
    assert json.loads(out.getvalue())["payload"]["tx"] == b"abc".hex()


def test_transmit_handles_crlf_line():
    iface, _ = make('{"type":"http","payload":{"rcode":200,"rx":""}}\r\n')
    response = iface.transmit("https://smdp.example.com/", b"", [])
    assert response.rcode == 200
    assert response.rx == b""


def test_round_trip_of_body_bytes():
    body = bytes(range(256))
    reply = json.dumps({"type": "http", "payload": {"rcode": 200, "rx": body.hex().upper()}})
    iface, _ = make(reply + "\n")
    assert iface.transmit("https://smdp.example.com/", body, []).rx == body


@pytest.mark.parametrize(
    "reply",
    [
        "",
        "not json\n",
        '{"type":"apdu","payload":{"rcode":200,"rx":""}}\n',
        '{"type":"http"}\n',
        '{"type":"http","payload":[]}\n',
        '{"type":"http","payload":{"rx":""}}\n',
        '{"type":"http","payload":{"rcode":"200","rx":""}}\n',
        '{"type":"http","payload":{"rcode":true,"rx":""}}\n',
        '{"type":"http","payload":{"rcode":200}}\n',
        '{"type":"http","payload":{"rcode":200,"rx":5}}\n',
        '{"type":"http","payload":{"rcode":200,"rx":"abc"}}\n',
        '{"type":"http","payload":{"rcode":200,"rx":"zz"}}\n',
    ],
)
def test_transmit_rejects_bad_replies(reply):
    iface, _ = make(reply)
    with pytest.raises(InterfaceError):
        iface.transmit("https://smdp.example.com/", b"", [])