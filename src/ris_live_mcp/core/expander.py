from __future__ import annotations

from typing import Any, Dict, List

from .messages import (
    KeepaliveMessage,
    NotificationMessage,
    OpenMessage,
    PeerStateMessage,
    RisMessage,
    UpdateMessage,
    parse_payload,
)
from .models import ElemType, RoutingElement


def _update_elements(msg: UpdateMessage) -> List[RoutingElement]:
    """
    Fan one UPDATE out into one element per prefix.

    Order:
      announcements by group, then by prefix inside a group
      withdrawals after that, in feed order

    Every ANNOUNCE shares the same path attribute objects. Withdrawals
    carry no path attributes upstream, so none are attached.
    """
    h = msg.header
    elems: List[RoutingElement] = []

    for group in msg.announcements:
        for prefix in group.prefixes:
            elems.append(
                RoutingElement(
                    kind=ElemType.ANNOUNCE,
                    timestamp=h.timestamp,
                    peer_address=h.peer_address,
                    peer_asn=h.peer_asn,
                    collector_id=h.host,
                    prefix=prefix,
                    next_hop=group.next_hop,
                    as_path=msg.as_path,
                    origin=msg.origin,
                    communities=msg.communities,
                    med=msg.med,
                    local_pref=msg.local_pref,
                    aggregator=msg.aggregator,
                )
            )

    for prefix in msg.withdrawals:
        elems.append(
            RoutingElement(
                kind=ElemType.WITHDRAW,
                timestamp=h.timestamp,
                peer_address=h.peer_address,
                peer_asn=h.peer_asn,
                collector_id=h.host,
                prefix=prefix,
            )
        )

    return elems


def _peer_state_elements(msg: PeerStateMessage) -> List[RoutingElement]:
    h = msg.header
    return [
        RoutingElement(
            kind=ElemType.PEER_STATE,
            timestamp=h.timestamp,
            peer_address=h.peer_address,
            peer_asn=h.peer_asn,
            collector_id=h.host,
            peer_state=msg.state,
        )
    ]


def elements_for(msg: RisMessage) -> List[RoutingElement]:
    if isinstance(msg, UpdateMessage):
        return _update_elements(msg)
    if isinstance(msg, PeerStateMessage):
        return _peer_state_elements(msg)
    if isinstance(msg, (OpenMessage, NotificationMessage, KeepaliveMessage)):
        # Session messages, no routing change.
        return []
    raise TypeError(f"unhandled message variant {type(msg).__name__}")


def expand(payload: Dict[str, Any]) -> List[RoutingElement]:
    """
    Expand a ris_message payload into routing elements.

    All or nothing: any DecodeError aborts the whole message and no
    elements are returned.
    """
    return elements_for(parse_payload(payload))
