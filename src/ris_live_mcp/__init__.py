"""
ris_live_mcp

Decoder for the RIS Live BGP telemetry feed plus an MCP server with
pluggable ingestion capabilities.

Core ideas
1. A message envelope is validated and unwrapped
2. The payload is expanded into typed RoutingElement records
3. Store and monitor work on RoutingElement only, never on raw JSON
"""

__all__ = ["core", "capabilities", "cli"]
