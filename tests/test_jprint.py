import io
import json

from esimcli.jprint import (
    error_message,
    print_error,
    print_progress,
    print_success,
    progress_message,
    success_message,
)


def test_error_message_without_detail():
    assert error_message("es10c_get_eid", None) == {
        "type": "lpa",
        "payload": {"code": -1, "message": "es10c_get_eid", "data": ""},
    }


def test_error_message_with_detail():
    msg = error_message("es10c_set_nickname", "iccid not found")
    assert msg["payload"]["data"] == "iccid not found"
    assert msg["payload"]["code"] == -1


def test_progress_message():
    assert progress_message("es9p_handle_notification") == {
        "type": "progress",
        "payload": {"code": 0, "message": "es9p_handle_notification", "data": None},
    }


def test_success_message_default_data_is_null():
    assert success_message()["payload"] == {"code": 0, "message": "success", "data": None}


def test_success_message_keeps_data():
    data = [{"iccid": "1"}]
    assert success_message(data)["payload"]["data"] is data


def test_print_progress_exact_line():
    out = io.StringIO()
    print_progress("es10b_prepare_download", file=out)
    assert out.getvalue() == (
        '{"type":"progress","payload":{"code":0,"message":"es10b_prepare_download","data":null}}\n'
    )


def test_print_error_exact_line():
    out = io.StringIO()
    print_error("euicc_init", None, file=out)
    assert out.getvalue() == '{"type":"lpa","payload":{"code":-1,"message":"euicc_init","data":""}}\n'


def test_print_success_round_trip():
    out = io.StringIO()
    payload = {"eidValue": "0000", "list": [1, 2, None]}
    print_success(payload, file=out)
    line = out.getvalue()
    assert line.endswith("\n")
    assert line.count("\n") == 1
    assert json.loads(line) == success_message(payload)


def test_print_defaults_to_stdout(capsys):
    print_success(None)
    assert json.loads(capsys.readouterr().out) == success_message(None)


def test_non_ascii_is_kept_raw():
    out = io.StringIO()
    print_success({"profileNickname": "café"}, file=out)
    assert "café" in out.getvalue()