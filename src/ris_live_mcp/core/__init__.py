"""
Core modules: the RIS Live decoder and the runtime pieces around it.

The decoder (envelope, messages, expander, parser) is pure and holds no
state between calls. Store, monitor and server only ever see the
RoutingElement records it produces.
"""

from .errors import (
    DecodeError,
    EndOfRib,
    InvalidField,
    MalformedJson,
    MissingField,
    UnknownMessageKind,
    UnsupportedEnvelope,
)
from .models import ElemType, Origin, RoutingElement
from .envelope import decode_envelope
from .expander import expand
from .parser import DecodeOutcome, OutcomeStatus, decode_message, parse_ris_live_message
from .store import ElementStore
from .monitor import ChurnMonitor

__all__ = [
    "DecodeError",
    "EndOfRib",
    "InvalidField",
    "MalformedJson",
    "MissingField",
    "UnknownMessageKind",
    "UnsupportedEnvelope",
    "ElemType",
    "Origin",
    "RoutingElement",
    "decode_envelope",
    "expand",
    "DecodeOutcome",
    "OutcomeStatus",
    "decode_message",
    "parse_ris_live_message",
    "ElementStore",
    "ChurnMonitor",
]
