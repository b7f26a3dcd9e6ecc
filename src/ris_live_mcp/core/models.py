from __future__ import annotations

import enum
import ipaddress
from dataclasses import dataclass
from typing import Any, Dict, FrozenSet, List, Optional, Tuple, Union

IPAddress = Union[ipaddress.IPv4Address, ipaddress.IPv6Address]
IPNetwork = Union[ipaddress.IPv4Network, ipaddress.IPv6Network]


class ElemType(str, enum.Enum):
    ANNOUNCE = "ANNOUNCE"
    WITHDRAW = "WITHDRAW"
    PEER_STATE = "PEER_STATE"

    @property
    def letter(self) -> str:
        return {"ANNOUNCE": "A", "WITHDRAW": "W", "PEER_STATE": "S"}[self.value]


class Origin(str, enum.Enum):
    IGP = "IGP"
    EGP = "EGP"
    INCOMPLETE = "INCOMPLETE"


@dataclass(frozen=True)
class AsSequence:
    """Ordered AS_PATH segment."""

    asns: Tuple[int, ...]

    def to_json(self) -> List[int]:
        return list(self.asns)

    def __str__(self) -> str:
        return " ".join(str(a) for a in self.asns)


@dataclass(frozen=True)
class AsSet:
    """Unordered AS_PATH segment, usually left behind by aggregation."""

    asns: FrozenSet[int]

    def to_json(self) -> List[List[int]]:
        # The feed nests a set one level deeper than the sequence items.
        return [sorted(self.asns)]

    def __str__(self) -> str:
        return "{" + ",".join(str(a) for a in sorted(self.asns)) + "}"


AsPathSegment = Union[AsSequence, AsSet]


@dataclass(frozen=True)
class AsPath:
    segments: Tuple[AsPathSegment, ...] = ()

    def origin_asns(self) -> FrozenSet[int]:
        """
        ASNs that may have originated the route.

        A trailing AS_SET means any member could be the origin.
        """
        if not self.segments:
            return frozenset()
        last = self.segments[-1]
        if isinstance(last, AsSet):
            return last.asns
        if not last.asns:
            return frozenset()
        return frozenset([last.asns[-1]])

    def to_json(self) -> List[Any]:
        out: List[Any] = []
        for seg in self.segments:
            out.extend(seg.to_json())
        return out

    def __len__(self) -> int:
        # Path length as used in best path selection, an AS_SET counts once.
        return sum(len(s.asns) if isinstance(s, AsSequence) else 1 for s in self.segments)

    def __str__(self) -> str:
        return " ".join(str(s) for s in self.segments if s.asns)


@dataclass(frozen=True)
class Community:
    asn: int
    value: int

    def __str__(self) -> str:
        return f"{self.asn}:{self.value}"


@dataclass(frozen=True)
class Aggregator:
    asn: int
    address: IPAddress

    def __str__(self) -> str:
        return f"{self.asn}:{self.address}"


_ANNOUNCE_ONLY = ("next_hop", "as_path", "origin", "communities", "med", "local_pref", "aggregator")


@dataclass(frozen=True)
class RoutingElement:
    """
    One routing change observed by a collector peer.

    All decoders emit this record so that store and monitor never see
    raw feed JSON.

    Fields:
      kind
        ANNOUNCE, WITHDRAW or PEER_STATE.

      timestamp
        Unix time in seconds as reported by the collector.

      peer_address, peer_asn
        The BGP neighbor of the collector that sent the message.

      collector_id
        Collector name from the feed, for example rrc21.

      prefix
        Set for ANNOUNCE and WITHDRAW.

      next_hop, as_path, origin
        Required for ANNOUNCE, absent otherwise.

      communities, med, local_pref, aggregator
        Optional path attributes, ANNOUNCE only.

      peer_state
        Lowercase state token, PEER_STATE only.
    """

    kind: ElemType
    timestamp: float
    peer_address: IPAddress
    peer_asn: int
    collector_id: str
    prefix: Optional[IPNetwork] = None
    next_hop: Optional[IPAddress] = None
    as_path: Optional[AsPath] = None
    origin: Optional[Origin] = None
    communities: Optional[FrozenSet[Community]] = None
    med: Optional[int] = None
    local_pref: Optional[int] = None
    aggregator: Optional[Aggregator] = None
    peer_state: Optional[str] = None

    def __post_init__(self) -> None:
        if self.kind is ElemType.PEER_STATE:
            if self.peer_state is None:
                raise ValueError("PEER_STATE element requires peer_state")
            if self.prefix is not None or any(getattr(self, f) is not None for f in _ANNOUNCE_ONLY):
                raise ValueError("PEER_STATE element cannot carry route fields")
            return

        if self.prefix is None:
            raise ValueError(f"{self.kind.value} element requires prefix")
        if self.peer_state is not None:
            raise ValueError(f"{self.kind.value} element cannot carry peer_state")

        if self.kind is ElemType.ANNOUNCE:
            for name in ("next_hop", "as_path", "origin"):
                if getattr(self, name) is None:
                    raise ValueError(f"ANNOUNCE element requires {name}")
        elif any(getattr(self, f) is not None for f in _ANNOUNCE_ONLY):
            raise ValueError("WITHDRAW element cannot carry path attributes")

    @property
    def host(self) -> str:
        return self.collector_id

    def to_dict(self) -> Dict[str, Any]:
        """
        JSON ready mapping. Fields that are absent for this kind are left
        out rather than set to null.
        """
        out: Dict[str, Any] = {
            "type": self.kind.value,
            "timestamp": self.timestamp,
            "peer_ip": str(self.peer_address),
            "peer_asn": self.peer_asn,
            "host": self.collector_id,
        }
        if self.prefix is not None:
            out["prefix"] = str(self.prefix)
        if self.next_hop is not None:
            out["next_hop"] = str(self.next_hop)
        if self.as_path is not None:
            out["as_path"] = str(self.as_path)
        if self.origin is not None:
            out["origin"] = self.origin.value
        if self.communities is not None:
            out["communities"] = [str(c) for c in sorted(self.communities, key=lambda c: (c.asn, c.value))]
        if self.med is not None:
            out["med"] = self.med
        if self.local_pref is not None:
            out["local_pref"] = self.local_pref
        if self.aggregator is not None:
            out["aggr_asn"] = self.aggregator.asn
            out["aggr_ip"] = str(self.aggregator.address)
        if self.peer_state is not None:
            out["state"] = self.peer_state
        return out
