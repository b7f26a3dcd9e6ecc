from __future__ import annotations

import ipaddress
import math
from dataclasses import dataclass
from typing import Any, Callable, Dict, FrozenSet, List, Optional, Tuple, Union

from .errors import EndOfRib, InvalidField, MissingField, UnknownMessageKind
from .models import (
    Aggregator,
    AsPath,
    AsPathSegment,
    AsSequence,
    AsSet,
    Community,
    IPAddress,
    IPNetwork,
    Origin,
)

# Payload layout follows the RIS Live manual: https://ris-live.ripe.net/manual/
# Each BGP message kind gets its own dataclass carrying only its fields.

MAX_U32 = 0xFFFFFFFF
MAX_U16 = 0xFFFF

# Older feeds put a literal "eor" prefix in the list instead of sending empty lists.
EOR_TOKEN = "eor"

PEER_STATES = frozenset(
    [
        "connected",
        "down",
        "idle",
        "connect",
        "active",
        "opensent",
        "openconfirm",
        "established",
    ]
)


def _require(payload: Dict[str, Any], name: str) -> Any:
    if name not in payload or payload[name] is None:
        raise MissingField(name)
    return payload[name]


def _parse_uint(value: Any, name: str, upper: int = MAX_U32) -> int:
    """
    Accept ints and decimal strings. peer_asn arrives as a string in the feed.
    """
    if isinstance(value, bool):
        raise InvalidField(name, value, "expected an integer")
    if isinstance(value, int):
        n = value
    elif isinstance(value, str) and value.strip().isascii() and value.strip().isdecimal():
        n = int(value.strip())
    else:
        raise InvalidField(name, value, "expected an integer")
    if n < 0 or n > upper:
        raise InvalidField(name, value, f"out of range 0..{upper}")
    return n


def _parse_timestamp(value: Any) -> float:
    if isinstance(value, bool) or not isinstance(value, (int, float)):
        raise InvalidField("timestamp", value, "expected a number")
    ts = float(value)
    if math.isnan(ts) or math.isinf(ts) or ts < 0:
        raise InvalidField("timestamp", value, "expected a finite non-negative number")
    return ts


def _parse_address(value: Any, name: str) -> IPAddress:
    if not isinstance(value, str):
        raise InvalidField(name, value, "expected an IP address string")
    try:
        return ipaddress.ip_address(value.strip())
    except ValueError as e:
        raise InvalidField(name, value, str(e)) from e


def _parse_prefix(value: Any, name: str) -> IPNetwork:
    if not isinstance(value, str):
        raise InvalidField(name, value, "expected a CIDR string")
    if value.strip().lower() == EOR_TOKEN:
        raise EndOfRib(fragment=value)
    try:
        return ipaddress.ip_network(value.strip(), strict=False)
    except ValueError as e:
        raise InvalidField(name, value, str(e)) from e


def _parse_list(value: Any, name: str) -> List[Any]:
    if not isinstance(value, list):
        raise InvalidField(name, value, "expected a list")
    return value


def parse_as_path(value: Any) -> AsPath:
    """
    Feed form: [1, 2, [3, 4]]. Runs of plain ASNs form one AS_SEQUENCE
    segment, every nested list is one AS_SET segment.
    """
    if not isinstance(value, list):
        raise InvalidField("path", value, "expected a list")

    segments: List[AsPathSegment] = []
    run: List[int] = []

    for item in value:
        if isinstance(item, list):
            if run:
                segments.append(AsSequence(tuple(run)))
                run = []
            if not item:
                raise InvalidField("path", value, "empty AS_SET segment")
            segments.append(AsSet(frozenset(_parse_uint(a, "path") for a in item)))
        else:
            run.append(_parse_uint(item, "path"))

    if run:
        segments.append(AsSequence(tuple(run)))

    return AsPath(tuple(segments))


def parse_origin(value: Any) -> Origin:
    if not isinstance(value, str):
        raise InvalidField("origin", value, "expected a string")
    try:
        return Origin(value.strip().upper())
    except ValueError as e:
        raise InvalidField("origin", value, "expected igp, egp or incomplete") from e


def parse_communities(value: Any) -> FrozenSet[Community]:
    if not isinstance(value, list):
        raise InvalidField("community", value, "expected a list of pairs")
    out = set()
    for pair in value:
        if not isinstance(pair, list) or len(pair) != 2:
            raise InvalidField("community", pair, "expected [asn, value]")
        out.add(Community(asn=_parse_uint(pair[0], "community"), value=_parse_uint(pair[1], "community", MAX_U16)))
    return frozenset(out)


def parse_aggregator(value: Any) -> Aggregator:
    """
    Feed form: "65000:8.42.232.1". IPv6 aggregator addresses are not used
    by BGP, but split on the first colon only so they still parse.
    """
    if not isinstance(value, str) or ":" not in value:
        raise InvalidField("aggregator", value, "expected asn:address")
    asn_part, addr_part = value.split(":", 1)
    try:
        asn = _parse_uint(asn_part, "aggregator")
        address = _parse_address(addr_part, "aggregator")
    except InvalidField as e:
        raise InvalidField("aggregator", value, "expected asn:address") from e
    return Aggregator(asn=asn, address=address)


def parse_next_hop(value: Any) -> IPAddress:
    # IPv6 updates may carry "global,link-local"; the global address is the next hop.
    if not isinstance(value, str):
        raise InvalidField("next_hop", value, "expected an IP address string")
    return _parse_address(value.split(",")[0], "next_hop")


@dataclass(frozen=True)
class PeerHeader:
    """Fields common to every ris_message payload."""

    timestamp: float
    peer_address: IPAddress
    peer_asn: int
    host: str

    @classmethod
    def from_payload(cls, payload: Dict[str, Any]) -> "PeerHeader":
        timestamp = _parse_timestamp(_require(payload, "timestamp"))
        peer = _parse_address(_require(payload, "peer"), "peer")
        peer_asn = _parse_uint(_require(payload, "peer_asn"), "peer_asn")
        host = _require(payload, "host")
        if not isinstance(host, str) or not host.strip():
            raise InvalidField("host", host, "expected a collector name")
        return cls(timestamp=timestamp, peer_address=peer, peer_asn=peer_asn, host=host.strip())


@dataclass(frozen=True)
class Announcement:
    next_hop: IPAddress
    prefixes: Tuple[IPNetwork, ...]


@dataclass(frozen=True)
class UpdateMessage:
    header: PeerHeader
    as_path: Optional[AsPath]
    origin: Optional[Origin]
    communities: Optional[FrozenSet[Community]]
    med: Optional[int]
    local_pref: Optional[int]
    aggregator: Optional[Aggregator]
    announcements: Tuple[Announcement, ...]
    withdrawals: Tuple[IPNetwork, ...]


@dataclass(frozen=True)
class OpenMessage:
    header: PeerHeader


@dataclass(frozen=True)
class NotificationMessage:
    header: PeerHeader


@dataclass(frozen=True)
class KeepaliveMessage:
    header: PeerHeader


@dataclass(frozen=True)
class PeerStateMessage:
    header: PeerHeader
    state: str


RisMessage = Union[UpdateMessage, OpenMessage, NotificationMessage, KeepaliveMessage, PeerStateMessage]


def _parse_announcements(value: Any) -> Tuple[Announcement, ...]:
    groups: List[Announcement] = []
    for group in _parse_list(value, "announcements"):
        if not isinstance(group, dict):
            raise InvalidField("announcements", group, "expected an object")
        next_hop = parse_next_hop(_require(group, "next_hop"))
        prefixes = _parse_list(_require(group, "prefixes"), "prefixes")
        groups.append(Announcement(next_hop=next_hop, prefixes=tuple(_parse_prefix(p, "prefixes") for p in prefixes)))
    return tuple(groups)


def _optional(payload: Dict[str, Any], name: str, parse: Callable[[Any], Any]) -> Any:
    value = payload.get(name)
    if value is None:
        return None
    return parse(value)


def _parse_update(payload: Dict[str, Any], header: PeerHeader) -> UpdateMessage:
    has_announcements = payload.get("announcements") is not None
    has_withdrawals = payload.get("withdrawals") is not None

    if not has_announcements and not has_withdrawals:
        raise MissingField("announcements")

    announcements = _parse_announcements(payload["announcements"]) if has_announcements else ()
    withdrawals: Tuple[IPNetwork, ...] = ()
    if has_withdrawals:
        raw = _parse_list(payload["withdrawals"], "withdrawals")
        withdrawals = tuple(_parse_prefix(p, "withdrawals") for p in raw)

    announced = sum(len(a.prefixes) for a in announcements)
    if announced == 0 and not withdrawals:
        raise EndOfRib()

    # Path and origin only matter when something is announced.
    if announced:
        as_path = parse_as_path(_require(payload, "path"))
        origin = parse_origin(_require(payload, "origin"))
    else:
        as_path = _optional(payload, "path", parse_as_path)
        origin = _optional(payload, "origin", parse_origin)

    return UpdateMessage(
        header=header,
        as_path=as_path,
        origin=origin,
        communities=_optional(payload, "community", parse_communities),
        med=_optional(payload, "med", lambda v: _parse_uint(v, "med")),
        local_pref=_optional(payload, "local_pref", lambda v: _parse_uint(v, "local_pref")),
        aggregator=_optional(payload, "aggregator", parse_aggregator),
        announcements=announcements,
        withdrawals=withdrawals,
    )


def _parse_peer_state(payload: Dict[str, Any], header: PeerHeader) -> PeerStateMessage:
    state = payload.get("state")
    if not isinstance(state, str) or state.strip().lower() not in PEER_STATES:
        raise InvalidField("state", state, "unrecognized peer state")
    return PeerStateMessage(header=header, state=state.strip().lower())


_PARSERS: Dict[str, Callable[[Dict[str, Any], PeerHeader], RisMessage]] = {
    "UPDATE": _parse_update,
    "OPEN": lambda payload, header: OpenMessage(header=header),
    "NOTIFICATION": lambda payload, header: NotificationMessage(header=header),
    "KEEPALIVE": lambda payload, header: KeepaliveMessage(header=header),
    "RIS_PEER_STATE": _parse_peer_state,
}

MESSAGE_KINDS = tuple(_PARSERS.keys())


def parse_payload(payload: Dict[str, Any]) -> RisMessage:
    """
    Turn a ris_message payload into one of the typed message variants.

    The kind is checked before the common fields so an unknown kind is
    reported as such even if the rest of the payload is odd.
    """
    kind = _require(payload, "type")
    parser = _PARSERS.get(kind) if isinstance(kind, str) else None
    if parser is None:
        raise UnknownMessageKind(kind)

    header = PeerHeader.from_payload(payload)
    return parser(payload, header)
