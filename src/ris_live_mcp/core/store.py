from __future__ import annotations
import time
from collections import deque
from typing import Deque, List, Optional
from .models import ElemType, RoutingElement


class ElementStore:
    """
    In memory storage for recently decoded RoutingElement objects.

    Why a deque:
      It is fast for append
      It enforces a max size so a busy collector cannot grow memory forever

    Important:
      recent(seconds) uses the collector timestamp carried by each element,
      not the time it was ingested. Replayed captures are therefore only
      "recent" if the capture itself is recent.
    """

    def __init__(self, maxlen: int = 200_000):
        self._elems: Deque[RoutingElement] = deque(maxlen=maxlen)

    def __len__(self) -> int:
        return len(self._elems)

    def add_many(self, elems: List[RoutingElement]) -> None:
        """
        Capabilities call this with decoded RoutingElement objects.
        """
        self._elems.extend(elems)

    def recent(self, seconds: int = 300, kind: Optional[ElemType] = None) -> List[RoutingElement]:
        """
        Return elements newer than now minus seconds, optionally of one kind.
        """
        cutoff = time.time() - seconds
        return [e for e in self._elems if e.timestamp >= cutoff and (kind is None or e.kind is kind)]

    def latest(self, limit: int = 100) -> List[RoutingElement]:
        if limit <= 0:
            return []
        return list(self._elems)[-limit:]
