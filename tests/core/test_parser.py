import json
import pytest

from ris_live_mcp.core.errors import EndOfRib, MalformedJson, MissingField, UnsupportedEnvelope
from ris_live_mcp.core.models import ElemType
from ris_live_mcp.core.parser import OutcomeStatus, decode_message, parse_ris_live_message

RRC20_UPDATE = (
    '{"type": "ris_message","data":{"timestamp":1636247118.76,"peer":"2001:7f8:24::82",'
    '"peer_asn":"58299","id":"20-5761-238131559","host":"rrc20","type":"UPDATE",'
    '"path":[58299,49981,397666],"origin":"igp","announcements":[{"next_hop":"2001:7f8:24::82",'
    '"prefixes":["2602:fd9e:f00::/40"]},{"next_hop":"fe80::768e:f8ff:fea6:b2c4",'
    '"prefixes":["2602:fd9e:f00::/40"]}],"withdrawals":["1.1.1.0/24","8.8.8.0/24"]}}'
)


def test_parse_live_sample():
    elems = parse_ris_live_message(RRC20_UPDATE)
    assert len(elems) == 4
    assert [e.kind for e in elems] == [
        ElemType.ANNOUNCE,
        ElemType.ANNOUNCE,
        ElemType.WITHDRAW,
        ElemType.WITHDRAW,
    ]
    assert elems[0].peer_asn == 58299
    assert str(elems[1].next_hop) == "fe80::768e:f8ff:fea6:b2c4"


def test_decoding_is_repeatable():
    assert parse_ris_live_message(RRC20_UPDATE) == parse_ris_live_message(RRC20_UPDATE)


@pytest.mark.parametrize("groups, per_group, withdrawals", [(1, 1, 0), (3, 4, 2), (0, 0, 5), (2, 7, 1)])
def test_element_count_matches_prefixes(envelope, update_payload, groups, per_group, withdrawals):
    announcements = [
        {"next_hop": f"10.0.{g}.1", "prefixes": [f"10.{g}.{p}.0/24" for p in range(per_group)]}
        for g in range(groups)
    ]
    payload = update_payload(
        announcements=announcements,
        withdrawals=[f"172.16.{w}.0/24" for w in range(withdrawals)],
    )
    elems = parse_ris_live_message(envelope(payload))
    assert len(elems) == groups * per_group + withdrawals
    announced = [str(e.prefix) for e in elems if e.kind is ElemType.ANNOUNCE]
    assert announced == [p for g in announcements for p in g["prefixes"]]


def test_parse_raises_typed_errors(envelope, update_payload):
    with pytest.raises(MalformedJson):
        parse_ris_live_message("{not json")
    with pytest.raises(UnsupportedEnvelope):
        parse_ris_live_message(json.dumps({"type": "pong", "data": None}))

    payload = update_payload()
    del payload["peer_asn"]
    with pytest.raises(MissingField) as exc:
        parse_ris_live_message(envelope(payload))
    assert exc.value.field == "peer_asn"

    with pytest.raises(EndOfRib):
        parse_ris_live_message(envelope(update_payload(announcements=[], withdrawals=[])))


def test_outcome_elements():
    out = decode_message(RRC20_UPDATE)
    assert out.status is OutcomeStatus.ELEMENTS
    assert out.is_benign
    assert out.error is None
    assert len(out.elements) == 4


def test_outcome_session_message_is_empty_success(envelope):
    out = decode_message(envelope({"timestamp": 1, "peer": "192.0.2.1", "peer_asn": 1, "host": "rrc00", "type": "OPEN"}))
    assert out.status is OutcomeStatus.ELEMENTS
    assert out.elements == []


def test_outcome_end_of_rib(envelope, update_payload):
    out = decode_message(envelope(update_payload(announcements=[], withdrawals=[])))
    assert out.status is OutcomeStatus.END_OF_RIB
    assert out.is_benign
    assert out.elements == []


def test_outcome_skipped():
    out = decode_message('{"type": "ris_error", "data": {"message": "bad subscription"}}')
    assert out.status is OutcomeStatus.SKIPPED
    assert out.is_benign


def test_outcome_failed():
    out = decode_message("{not json")
    assert out.status is OutcomeStatus.FAILED
    assert not out.is_benign
    assert isinstance(out.error, MalformedJson)
    d = out.to_dict()
    assert d["status"] == "failed"
    assert d["error"]["kind"] == "malformed_json"


def test_outcome_failed_for_deeply_nested_text():
    out = decode_message("[" * 100000)
    assert out.status is OutcomeStatus.FAILED
    assert isinstance(out.error, MalformedJson)
