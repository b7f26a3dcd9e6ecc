from __future__ import annotations

import json
from typing import Any, Dict, Union

from .errors import InvalidField, MalformedJson, MissingField, UnsupportedEnvelope

# RIS Live manual: https://ris-live.ripe.net/manual/
# Server to client messages are ris_message, ris_error, ris_rrc_list,
# ris_subscribe_ok and pong. Only ris_message carries BGP data.
ROUTING_ENVELOPE_TYPE = "ris_message"


def decode_envelope(raw: Union[str, bytes]) -> Dict[str, Any]:
    """
    Parse one feed message and return its inner payload mapping.

    Raises:
      MalformedJson
        Text is empty or not JSON.

      UnsupportedEnvelope
        Valid JSON that is not a ris_message envelope. Safe to skip.

      MissingField
        Envelope has no type or no data.

      InvalidField
        data is present but not an object.
    """
    if isinstance(raw, (bytes, bytearray)):
        try:
            raw = bytes(raw).decode("utf-8")
        except UnicodeDecodeError as e:
            raise MalformedJson(fragment=raw, reason=str(e)) from e

    text = raw.strip()
    if not text:
        raise MalformedJson(fragment=raw, reason="empty message")

    try:
        obj = json.loads(text)
    except (ValueError, RecursionError) as e:
        # RecursionError: nesting deeper than the interpreter stack allows.
        raise MalformedJson(fragment=text, reason=str(e)) from e

    if not isinstance(obj, dict):
        raise UnsupportedEnvelope(type(obj).__name__, fragment=text)

    if "type" not in obj:
        raise MissingField("type", fragment=text)

    if obj["type"] != ROUTING_ENVELOPE_TYPE:
        raise UnsupportedEnvelope(obj["type"], fragment=text)

    if "data" not in obj or obj["data"] is None:
        raise MissingField("data", fragment=text)

    payload = obj["data"]
    if not isinstance(payload, dict):
        raise InvalidField("data", payload, "expected an object")

    return payload
