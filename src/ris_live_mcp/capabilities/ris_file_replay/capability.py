from __future__ import annotations
from pathlib import Path
from typing import Any, Dict, Optional

from ris_live_mcp.core.capability_base import Capability, CapabilityContext
from ris_live_mcp.core.ingest import IngestStats
from ris_live_mcp.core.parser import OutcomeStatus, decode_message


class RisFileReplayCapability:
    """
    Replays a capture of RIS Live messages into the store.

    The capture is newline delimited, one raw feed message per line, as
    written by `ris-live-reader --raw` or any websocket client.
    """

    name = "ris_file_replay"

    def __init__(self):
        self._ctx: Optional[CapabilityContext] = None
        self._stats = IngestStats()
        self._files = 0

    def register_tools(self, mcp: Any, ctx: CapabilityContext) -> None:
        self._ctx = ctx

        if mcp is None:
            return

        @mcp.tool()
        def replay_file(path: str, limit: Optional[int] = None) -> Dict[str, Any]:
            return self.replay(path, limit=limit)

    def replay(self, path: str, limit: Optional[int] = None) -> Dict[str, Any]:
        """
        Decode up to limit messages from path and store the elements.

        Returns the counters for this file only.
        """
        if not self._ctx:
            raise RuntimeError(f"{self.name} used before register_tools")

        src = Path(path)
        if not src.is_file():
            raise FileNotFoundError(f"no such capture file {path}")

        run = IngestStats()
        with src.open("r", encoding="utf-8", errors="replace") as fh:
            for line in fh:
                if not line.strip():
                    continue
                if limit is not None and run.messages >= limit:
                    break

                outcome = decode_message(line)
                run.record(outcome)
                self._stats.record(outcome)

                if outcome.status is OutcomeStatus.ELEMENTS and outcome.elements:
                    self._ctx.store.add_many(outcome.elements)

        self._files += 1
        self._ctx.log(
            f"{self.name}: replayed {run.messages} messages from {path}, "
            f"{run.elements} elements, {run.failed} failed"
        )
        out: Dict[str, Any] = {"path": str(src)}
        out.update(run.as_dict())
        return out

    def status(self) -> Dict[str, Any]:
        out: Dict[str, Any] = {"name": self.name, "files": self._files}
        out.update(self._stats.as_dict())
        return out


def build_capability() -> Capability:
    return RisFileReplayCapability()
