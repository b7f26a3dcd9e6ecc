from __future__ import annotations
import sys
from typing import Any, Dict, List, Optional

from mcp.server.fastmcp import FastMCP

from .store import ElementStore
from .monitor import ChurnMonitor
from .capability_base import CapabilityContext
from .registry import CapabilityRegistry
from .models import ElemType
from .parser import decode_message
from .subscription import compose_subscription_message


class RisLiveMCPServer:
    """
    MCP server around the RIS Live decoder.

    Responsibilities:
      Load configured capabilities
      Register capability tools
      Expose decode, subscription and churn tools
      Provide shared store and monitor to all capabilities
    """

    def __init__(self, capability_imports: List[str]):
        self.store = ElementStore()
        self.monitor = ChurnMonitor()
        self.registry = CapabilityRegistry()
        self.mcp = FastMCP("ris_live_mcp")

        self._load_capabilities(capability_imports)
        self._register_core_tools()

    def _log(self, msg: str) -> None:
        print(msg, file=sys.stderr)

    def _load_capabilities(self, imports: List[str]) -> None:
        self.registry.load_from_import_paths(imports)
        ctx = CapabilityContext(store=self.store, monitor=self.monitor, log=self._log)

        for name in self.registry.list():
            cap = self.registry.get(name)
            cap.register_tools(self.mcp, ctx)
            self._log(f"loaded capability {name}")

    def recent_elements(
        self, seconds: Optional[int] = None, kind: Optional[str] = None, limit: int = 100
    ) -> List[Dict[str, Any]]:
        window = int(seconds) if seconds is not None else self.monitor.window_seconds
        elem_kind = ElemType(kind.upper()) if kind else None
        elems = self.store.recent(seconds=window, kind=elem_kind)
        return [e.to_dict() for e in elems[-int(limit):]] if limit > 0 else []

    def analyze_churn(self, seconds: Optional[int] = None) -> Dict[str, Any]:
        window = int(seconds) if seconds is not None else self.monitor.window_seconds
        return self.monitor.analyze(self.store.recent(seconds=window))

    def monitor_once(self) -> Dict[str, Any]:
        analysis = self.analyze_churn()
        alerts = self.monitor.build_alerts(analysis)
        return {"alerts": alerts, "analysis": analysis, "alert_count": len(alerts)}

    def _register_core_tools(self) -> None:
        @self.mcp.tool()
        def list_capabilities() -> List[str]:
            return self.registry.list()

        @self.mcp.tool()
        def capability_status(name: str) -> Dict[str, Any]:
            cap = self.registry.get(name)
            return cap.status()

        @self.mcp.tool(name="decode_message")
        def decode_message_text(raw: str) -> Dict[str, Any]:
            """Decode one RIS Live message without storing it."""
            return decode_message(raw).to_dict()

        @self.mcp.tool()
        def compose_subscription(
            host: str = "all",
            msg_type: Optional[str] = None,
            require: Optional[str] = None,
            peer: Optional[str] = None,
            prefix: Optional[str] = None,
            path: Optional[str] = None,
            more_specific: Optional[bool] = None,
            less_specific: Optional[bool] = None,
        ) -> str:
            return compose_subscription_message(
                host=host,
                msg_type=msg_type,
                require=require,
                peer=peer,
                prefix=prefix,
                path=path,
                more_specific=more_specific,
                less_specific=less_specific,
            )

        @self.mcp.tool()
        def recent_elements(
            seconds: Optional[int] = None, kind: Optional[str] = None, limit: int = 100
        ) -> List[Dict[str, Any]]:
            return self.recent_elements(seconds=seconds, kind=kind, limit=limit)

        @self.mcp.tool()
        def set_thresholds(
            threshold_updates: Optional[int] = None,
            window_seconds: Optional[int] = None,
            min_samples: Optional[int] = None,
            cooldown_seconds: Optional[int] = None,
        ) -> Dict[str, Any]:
            return self.monitor.set_thresholds(
                threshold_updates=threshold_updates,
                window_seconds=window_seconds,
                min_samples=min_samples,
                cooldown_seconds=cooldown_seconds,
            )

        @self.mcp.tool()
        def analyze_churn(seconds: Optional[int] = None) -> Dict[str, Any]:
            return self.analyze_churn(seconds=seconds)

        @self.mcp.tool()
        def monitor_once() -> Dict[str, Any]:
            return self.monitor_once()

    def run(self) -> None:
        self.mcp.run()
