import io
import json

import pytest

from ris_live_mcp.cli import reader
from ris_live_mcp.cli.reader import build_parser, main, run, stream
from ris_live_mcp.cli.run_server import DEFAULT_CAPABILITIES, load_capability_imports


def _run(argv, lines):
    args = build_parser().parse_args(argv)
    out, err = io.StringIO(), io.StringIO()
    code = run(args, lines, out, err)
    return code, out.getvalue().splitlines(), err.getvalue()


def test_reader_prints_one_line_per_element(envelope, update_payload):
    code, out, err = _run([], [envelope(update_payload())])
    assert code == 0
    assert len(out) == 5
    assert out[0].startswith("A|1636342486.17|rrc21|37.49.237.175|199524|64.68.236.0/22|")
    assert out[-1].startswith("W|")
    assert err == ""


def test_reader_update_type_and_json(envelope, update_payload):
    code, out, _ = _run(["--update-type", "w", "--json"], [envelope(update_payload())])
    assert code == 0
    assert [json.loads(line)["prefix"] for line in out] == ["1.1.1.0/24", "8.8.8.0/24"]


def test_reader_prefix_filter(envelope, update_payload):
    _, out, _ = _run(["--prefix", "64.68.0.0/16"], [envelope(update_payload())])
    assert len(out) == 2


def test_reader_reports_end_of_rib_and_continues(envelope, update_payload):
    lines = [
        envelope(update_payload(announcements=[], withdrawals=[])),
        '{"type": "pong", "data": null}',
        envelope(update_payload()),
    ]
    code, out, err = _run([], lines)
    assert code == 0
    assert len(out) == 5
    assert err.startswith("end-of-rib:")


def test_reader_stop_on_error(envelope, update_payload):
    code, out, err = _run(["--stop-on-error"], ["{broken", envelope(update_payload())])
    assert code == 1
    assert out == []
    assert "error:" in err


def test_reader_raw_passthrough():
    code, out, _ = _run(["--raw"], ["{broken"])
    assert code == 0
    assert out == ["{broken"]


def test_subscribe_prints_request(capsys):
    assert main(["--subscribe", "--host", "rrc01", "--msg-type", "UPDATE", "--client", "tests"]) == 0
    url, msg = capsys.readouterr().out.splitlines()
    assert url.endswith("?client=tests")
    assert json.loads(msg)["data"] == {"host": "rrc01", "type": "UPDATE"}


def test_bad_update_type_is_usage_error():
    with pytest.raises(SystemExit) as exc:
        main(["--update-type", "x", "--subscribe"])
    assert exc.value.code == 2


def test_reader_reads_input_file(tmp_path, capsys, envelope, update_payload):
    capture = tmp_path / "capture.ndjson"
    capture.write_text(envelope(update_payload()) + "\n", encoding="utf-8")
    assert main(["--input", str(capture), "--update-type", "announce"]) == 0
    assert len(capsys.readouterr().out.splitlines()) == 3


def test_capability_imports_from_env():
    assert load_capability_imports({}) == DEFAULT_CAPABILITIES
    assert load_capability_imports({"RIS_CAPABILITIES": "[]"}) == []
    with pytest.raises(ValueError):
        load_capability_imports({"RIS_CAPABILITIES": '{"a": 1}'})


class _FakeConnection:
    def __init__(self, frames):
        self.frames = frames
        self.sent = []
        self.closed = False

    def __enter__(self):
        return self

    def __exit__(self, *exc):
        self.closed = True
        return False

    def send(self, message):
        self.sent.append(message)

    def __iter__(self):
        return iter(self.frames)


def test_stream_subscribes_then_decodes_frames(envelope, update_payload):
    conn = _FakeConnection([envelope(update_payload()), envelope(update_payload()).encode("utf-8")])
    urls = []

    def connect(url):
        urls.append(url)
        return conn

    args = build_parser().parse_args(["--client", "tests", "--update-type", "w"])
    out, err = io.StringIO(), io.StringIO()
    code = stream(args, '{"type": "ris_subscribe", "data": {}}', out, err, connect=connect)

    assert code == 0
    assert urls == ["wss://ris-live.ripe.net/v1/ws/?client=tests"]
    assert conn.sent == ['{"type": "ris_subscribe", "data": {}}']
    assert conn.closed
    assert len(out.getvalue().splitlines()) == 4
    assert err.getvalue().startswith("subscribed to ")


def test_stream_stop_on_error_ends_session(envelope, update_payload):
    conn = _FakeConnection(["{broken", envelope(update_payload())])
    args = build_parser().parse_args(["--stop-on-error"])
    out, err = io.StringIO(), io.StringIO()

    assert stream(args, "{}", out, err, connect=lambda url: conn) == 1
    assert out.getvalue() == ""
    assert conn.closed


def test_main_reports_connection_failure(monkeypatch, capsys):
    def refuse(url):
        raise ConnectionRefusedError("refused")

    monkeypatch.setattr(reader, "ws_connect", refuse)
    assert main(["--host", "rrc01"]) == 1
    assert "feed connection failed" in capsys.readouterr().err
