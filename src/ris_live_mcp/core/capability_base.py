from __future__ import annotations

from dataclasses import dataclass
from typing import Any, Callable, Dict, Protocol


@dataclass
class CapabilityContext:
    """
    Shared runtime objects provided by the core server to each capability.

    store
      Shared ElementStore instance where capabilities write RoutingElement objects.

    monitor
      Shared ChurnMonitor instance. Ingest capabilities do not need it,
      it is here for plugins that want to expose analysis helpers.

    log
      Simple logging function. The server writes to stderr so stdout stays
      free for the MCP stdio transport.
    """

    store: Any
    monitor: Any
    log: Callable[[str], None]


class Capability(Protocol):
    """
    Required interface for a capability plugin.

    A capability is responsible for
    1. Registering MCP tools for its own lifecycle
    2. Getting raw RIS Live messages from somewhere
    3. Decoding them into RoutingElement and writing to ctx.store

    The core server never imports specific capabilities directly.
    It loads them via registry using import paths.
    """

    name: str

    def register_tools(self, mcp: Any, ctx: CapabilityContext) -> None:
        """
        Called once at server startup. Capabilities should register tools here.
        """
        ...

    def status(self) -> Dict[str, Any]:
        """
        Return quick health and counters. Must be fast and side effect free.
        """
        ...
