from __future__ import annotations

from typing import Any, Optional

_FRAGMENT_LIMIT = 200


def _clip(fragment: Any) -> Optional[str]:
    if fragment is None:
        return None
    text = fragment if isinstance(fragment, str) else repr(fragment)
    if len(text) > _FRAGMENT_LIMIT:
        return text[:_FRAGMENT_LIMIT] + "..."
    return text


class DecodeError(Exception):
    """
    Base class for every failure raised while decoding one message.

    Attributes:
      field
        Name of the offending payload key, when one applies.

      fragment
        Short text form of the raw input or value that failed.
    """

    kind = "decode_error"

    def __init__(self, message: str, field: Optional[str] = None, fragment: Any = None):
        super().__init__(message)
        self.field = field
        self.fragment = _clip(fragment)

    def to_dict(self):
        return {
            "kind": self.kind,
            "message": str(self),
            "field": self.field,
            "fragment": self.fragment,
        }


class MalformedJson(DecodeError):
    kind = "malformed_json"

    def __init__(self, fragment: Any = None, reason: str = "invalid JSON"):
        super().__init__(f"message is not valid JSON: {reason}", fragment=fragment)


class UnsupportedEnvelope(DecodeError):
    """
    Valid JSON that is not a routing message, such as ris_error or pong.
    Callers usually skip these.
    """

    kind = "unsupported_envelope"

    def __init__(self, envelope_type: Any, fragment: Any = None):
        super().__init__(f"unsupported envelope type {envelope_type!r}", field="type", fragment=fragment)
        self.envelope_type = envelope_type


class MissingField(DecodeError):
    kind = "missing_field"

    def __init__(self, field: str, fragment: Any = None):
        super().__init__(f"missing field {field}", field=field, fragment=fragment)


class InvalidField(DecodeError):
    kind = "invalid_field"

    def __init__(self, field: str, value: Any = None, reason: str = ""):
        msg = f"invalid field {field}: {value!r}"
        if reason:
            msg = f"{msg} ({reason})"
        super().__init__(msg, field=field, fragment=value)


class UnknownMessageKind(DecodeError):
    kind = "unknown_message_kind"

    def __init__(self, message_kind: Any):
        super().__init__(f"unknown message kind {message_kind!r}", field="type", fragment=message_kind)
        self.message_kind = message_kind


class EndOfRib(DecodeError):
    """
    An UPDATE that carries no routing change. This is a synchronization
    marker from the peer, not a broken message.
    """

    kind = "end_of_rib"

    def __init__(self, fragment: Any = None):
        super().__init__("end-of-RIB marker", fragment=fragment)
