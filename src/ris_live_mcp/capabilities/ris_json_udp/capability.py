from __future__ import annotations
import asyncio
import socket
from typing import Any, Dict, Optional, List

from ris_live_mcp.core.capability_base import Capability, CapabilityContext
from ris_live_mcp.core.ingest import IngestStats
from ris_live_mcp.core.models import RoutingElement
from ris_live_mcp.core.parser import OutcomeStatus, decode_message


class RisJsonUdpCapability:
    """
    RIS Live JSON over UDP capability.

    The websocket session with ris-live.ripe.net is kept outside this
    process. A relay forwards the raw feed text here, which lets you:
      run several MCP agents off one feed subscription
      replay captures with plain netcat
      test the whole pipeline without network access

    The expected UDP payload:
      one RIS Live message, or several separated by newlines
    """

    name = "ris_json_udp"

    def __init__(self):
        self._ctx: Optional[CapabilityContext] = None
        self._task: Optional[asyncio.Task] = None
        self._stop = asyncio.Event()
        self._running = False

        self._host = "0.0.0.0"
        self._port = 7979

        self._stats = IngestStats()

    def register_tools(self, mcp: Any, ctx: CapabilityContext) -> None:
        self._ctx = ctx

        if mcp is None:
            return

        @mcp.tool()
        async def start_udp_collection(host: str = "0.0.0.0", port: int = 7979) -> str:
            return await self.start(host, port)

        @mcp.tool()
        async def stop_udp_collection() -> str:
            return await self.stop()

    async def start(self, host: str, port: int) -> str:
        if self._running:
            return "already running"

        self._host = host
        self._port = int(port)
        self._stop.clear()
        self._task = asyncio.create_task(self._run())
        self._running = True
        return f"ris live udp collector started on {host}:{port}"

    async def stop(self) -> str:
        if not self._running:
            return "not running"

        self._stop.set()
        if self._task:
            await self._task
        self._running = False
        return "stopped"

    async def _run(self) -> None:
        if not self._ctx:
            return

        sock = socket.socket(socket.AF_INET, socket.SOCK_DGRAM)
        sock.setblocking(False)
        sock.bind((self._host, self._port))
        loop = asyncio.get_running_loop()

        try:
            while not self._stop.is_set():
                try:
                    data, _ = await asyncio.wait_for(loop.sock_recvfrom(sock, 65535), timeout=0.5)
                except asyncio.TimeoutError:
                    continue
                except OSError as e:
                    self._ctx.log(f"{self.name}: receive failed: {e}")
                    await asyncio.sleep(0.05)
                    continue

                elems = self.ingest(data)
                if elems:
                    self._ctx.store.add_many(elems)
        finally:
            sock.close()

    def ingest(self, data: bytes) -> List[RoutingElement]:
        """
        Decode every message in one datagram.

        A bad message only drops itself, the rest of the datagram is still
        decoded. Counters are updated per message.
        """
        elems: List[RoutingElement] = []
        text = data.decode("utf-8", errors="replace")

        for line in text.splitlines():
            if not line.strip():
                continue
            outcome = decode_message(line)
            self._stats.record(outcome)

            if outcome.status is OutcomeStatus.ELEMENTS:
                elems.extend(outcome.elements)
            elif outcome.status is OutcomeStatus.FAILED and self._ctx:
                self._ctx.log(f"{self.name}: dropped message: {outcome.error}")

        return elems

    def status(self) -> Dict[str, Any]:
        out = {
            "name": self.name,
            "running": self._running,
            "host": self._host,
            "port": self._port,
        }
        out.update(self._stats.as_dict())
        return out


def build_capability() -> Capability:
    return RisJsonUdpCapability()
