import json
import pytest

from ris_live_mcp.core.envelope import decode_envelope
from ris_live_mcp.core.errors import InvalidField, MalformedJson, MissingField, UnsupportedEnvelope


def test_returns_inner_payload(envelope, update_payload):
    payload = decode_envelope(envelope(update_payload()))
    assert payload["type"] == "UPDATE"
    assert payload["host"] == "rrc21"


def test_accepts_bytes_and_whitespace(envelope):
    raw = ("\n  " + envelope({"type": "KEEPALIVE"}) + "  \n").encode("utf-8")
    assert decode_envelope(raw) == {"type": "KEEPALIVE"}


@pytest.mark.parametrize("raw", ["", "   ", "{not json", "[1, 2"])
def test_malformed_json(raw):
    with pytest.raises(MalformedJson):
        decode_envelope(raw)


def test_invalid_utf8_is_malformed():
    with pytest.raises(MalformedJson):
        decode_envelope(b"\xff\xfe{}")


@pytest.mark.parametrize("kind", ["ris_error", "ris_rrc_list", "ris_subscribe_ok", "pong"])
def test_control_messages_are_unsupported(kind):
    with pytest.raises(UnsupportedEnvelope) as exc:
        decode_envelope(json.dumps({"type": kind, "data": {"message": "x"}}))
    assert exc.value.envelope_type == kind


def test_non_object_is_unsupported():
    with pytest.raises(UnsupportedEnvelope):
        decode_envelope("[1, 2, 3]")


def test_missing_type():
    with pytest.raises(MissingField) as exc:
        decode_envelope('{"data": {}}')
    assert exc.value.field == "type"


def test_missing_data():
    with pytest.raises(MissingField) as exc:
        decode_envelope('{"type": "ris_message"}')
    assert exc.value.field == "data"


def test_data_must_be_object():
    with pytest.raises(InvalidField) as exc:
        decode_envelope('{"type": "ris_message", "data": [1]}')
    assert exc.value.field == "data"


def test_error_fragment_is_clipped():
    with pytest.raises(MalformedJson) as exc:
        decode_envelope("{" + "x" * 5000)
    assert len(exc.value.fragment) < 300


def test_deeply_nested_text_is_malformed():
    with pytest.raises(MalformedJson):
        decode_envelope("[" * 100000)
