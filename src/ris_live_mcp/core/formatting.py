from __future__ import annotations

import json
from typing import Any, List

from .models import ElemType, RoutingElement


def _col(v: Any) -> str:
    return "" if v is None else str(v)


def format_text(elem: RoutingElement) -> str:
    """
    One pipe separated line per element.

    Route elements:
      A|W|ts|collector|peer|peer_asn|prefix|as_path|origin|next_hop|local_pref|med|communities|aggr_asn|aggr_ip

    Peer state elements:
      S|ts|collector|peer|peer_asn|state
    """
    head = [elem.kind.letter, _col(elem.timestamp), elem.collector_id, str(elem.peer_address), str(elem.peer_asn)]

    if elem.kind is ElemType.PEER_STATE:
        return "|".join(head + [_col(elem.peer_state)])

    communities = ""
    if elem.communities:
        communities = " ".join(str(c) for c in sorted(elem.communities, key=lambda c: (c.asn, c.value)))

    cols: List[str] = [
        _col(elem.prefix),
        _col(elem.as_path),
        elem.origin.value if elem.origin is not None else "",
        _col(elem.next_hop),
        _col(elem.local_pref),
        _col(elem.med),
        communities,
        _col(elem.aggregator.asn if elem.aggregator else None),
        _col(elem.aggregator.address if elem.aggregator else None),
    ]
    return "|".join(head + cols)


def format_json(elem: RoutingElement, pretty: bool = False) -> str:
    if pretty:
        return json.dumps(elem.to_dict(), indent=2)
    return json.dumps(elem.to_dict())
