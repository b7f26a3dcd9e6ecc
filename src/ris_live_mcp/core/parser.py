from __future__ import annotations

import enum
from dataclasses import dataclass, field
from typing import Any, Dict, List, Optional, Union

from .envelope import decode_envelope
from .errors import DecodeError, EndOfRib, UnsupportedEnvelope
from .expander import expand
from .models import RoutingElement


def parse_ris_live_message(raw: Union[str, bytes]) -> List[RoutingElement]:
    """
    Decode one RIS Live message into routing elements.

    Raises a DecodeError subclass on failure. EndOfRib and
    UnsupportedEnvelope are raised too, callers that want them treated
    as benign should use decode_message instead.
    """
    return expand(decode_envelope(raw))


class OutcomeStatus(str, enum.Enum):
    ELEMENTS = "elements"
    END_OF_RIB = "end_of_rib"
    SKIPPED = "skipped"
    FAILED = "failed"


@dataclass(frozen=True)
class DecodeOutcome:
    """
    Tagged result of decoding one message.

    status
      ELEMENTS   decoded, elements may be empty for session messages
      END_OF_RIB peer finished its table dump, nothing to store
      SKIPPED    not a routing envelope, for example pong or ris_error
      FAILED     genuine decode failure, see error
    """

    status: OutcomeStatus
    elements: List[RoutingElement] = field(default_factory=list)
    error: Optional[DecodeError] = None

    @property
    def is_benign(self) -> bool:
        return self.status is not OutcomeStatus.FAILED

    def to_dict(self) -> Dict[str, Any]:
        return {
            "status": self.status.value,
            "elements": [e.to_dict() for e in self.elements],
            "error": self.error.to_dict() if self.error is not None else None,
        }


def decode_message(raw: Union[str, bytes]) -> DecodeOutcome:
    """
    Same decode as parse_ris_live_message but never raises for bad input.
    """
    try:
        elems = parse_ris_live_message(raw)
    except EndOfRib as e:
        return DecodeOutcome(status=OutcomeStatus.END_OF_RIB, error=e)
    except UnsupportedEnvelope as e:
        return DecodeOutcome(status=OutcomeStatus.SKIPPED, error=e)
    except DecodeError as e:
        return DecodeOutcome(status=OutcomeStatus.FAILED, error=e)
    return DecodeOutcome(status=OutcomeStatus.ELEMENTS, elements=elems)
