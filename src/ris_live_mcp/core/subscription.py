from __future__ import annotations

import ipaddress
import json
from typing import Any, Dict, Optional
from urllib.parse import urlencode

from .messages import MESSAGE_KINDS
from .models import ElemType, RoutingElement

RIS_LIVE_URL_BASE = "wss://ris-live.ripe.net/v1/ws/"


def ris_live_url(client: str = "ris-live-mcp") -> str:
    """
    The feed asks every consumer to identify itself with a client name.
    """
    return f"{RIS_LIVE_URL_BASE}?{urlencode({'client': client})}"


def compose_subscription_message(
    host: str = "all",
    msg_type: Optional[str] = None,
    require: Optional[str] = None,
    peer: Optional[str] = None,
    prefix: Optional[str] = None,
    path: Optional[str] = None,
    more_specific: Optional[bool] = None,
    less_specific: Optional[bool] = None,
    include_raw: bool = False,
) -> str:
    """
    Build a ris_subscribe request.

    Every criterion is optional. host "all" means the whole firehose and
    is sent as no host filter at all. more_specific and less_specific are
    only sent when given, the feed defaults apply otherwise.

    Raises ValueError for a message type outside the feed's set, a peer
    that is not an IP address, or a prefix that is not a network.
    """
    data: Dict[str, Any] = {}

    if host and host.lower() != "all":
        data["host"] = host

    if msg_type is not None:
        if msg_type.upper() not in MESSAGE_KINDS:
            raise ValueError(f"unknown message type {msg_type}, expected one of {', '.join(MESSAGE_KINDS)}")
        data["type"] = msg_type.upper()

    if require is not None:
        data["require"] = require

    if peer is not None:
        data["peer"] = str(ipaddress.ip_address(peer))

    if prefix is not None:
        data["prefix"] = str(ipaddress.ip_network(prefix, strict=False))

    if path is not None:
        data["path"] = path

    if more_specific is not None:
        data["moreSpecific"] = bool(more_specific)

    if less_specific is not None:
        data["lessSpecific"] = bool(less_specific)

    if include_raw:
        data["socketOptions"] = {"includeRaw": True}

    return json.dumps({"type": "ris_subscribe", "data": data})


def match_prefix(
    elem: RoutingElement,
    prefix: Optional[str],
    more_specific: Optional[bool] = None,
    less_specific: Optional[bool] = None,
) -> bool:
    """
    Client side version of the feed's prefix filter, for captures.

    Same defaults as the feed: exact matches and more specifics are kept,
    less specifics only when asked for.
    """
    if prefix is None:
        return True
    if elem.prefix is None:
        return False

    want = ipaddress.ip_network(prefix, strict=False)
    if elem.prefix.version != want.version:
        return False
    if elem.prefix == want:
        return True
    if more_specific is not False and elem.prefix.subnet_of(want):
        return True
    if less_specific and elem.prefix.supernet_of(want):
        return True
    return False


def match_update_type(elem: RoutingElement, update_type: Optional[str]) -> bool:
    """
    Client side announcement/withdrawal filter.

    Only the first letter counts, so "a", "announce" and "announcements"
    are all the same filter.
    """
    if update_type is None:
        return True

    t = update_type.strip().lower()[:1]
    if t == "a":
        return elem.kind is ElemType.ANNOUNCE
    if t == "w":
        return elem.kind is ElemType.WITHDRAW
    raise ValueError(f"update type must be announcement or withdrawal, got {update_type!r}")
