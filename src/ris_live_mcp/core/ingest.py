from __future__ import annotations

from typing import Any, Dict, Optional

from .parser import DecodeOutcome, OutcomeStatus


class IngestStats:
    """
    Counters shared by every capability that feeds the store.

    messages counts every decode attempt, elements counts what reached the
    store. end_of_rib and skipped are benign, failed is not.
    """

    def __init__(self) -> None:
        self.messages = 0
        self.elements = 0
        self.end_of_rib = 0
        self.skipped = 0
        self.failed = 0
        self.last_error: Optional[Dict[str, Any]] = None

    def record(self, outcome: DecodeOutcome) -> None:
        self.messages += 1
        if outcome.status is OutcomeStatus.ELEMENTS:
            self.elements += len(outcome.elements)
        elif outcome.status is OutcomeStatus.END_OF_RIB:
            self.end_of_rib += 1
        elif outcome.status is OutcomeStatus.SKIPPED:
            self.skipped += 1
        else:
            self.failed += 1
            if outcome.error is not None:
                self.last_error = outcome.error.to_dict()

    def as_dict(self) -> Dict[str, Any]:
        return {
            "messages": self.messages,
            "elements": self.elements,
            "end_of_rib": self.end_of_rib,
            "skipped": self.skipped,
            "failed": self.failed,
            "last_error": self.last_error,
        }
