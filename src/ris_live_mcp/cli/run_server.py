from __future__ import annotations
import os
import json
from ris_live_mcp.core.server import RisLiveMCPServer

DEFAULT_CAPABILITIES = [
    "ris_live_mcp.capabilities.ris_json_udp.capability:build_capability",
    "ris_live_mcp.capabilities.ris_file_replay.capability:build_capability",
]


def load_capability_imports(environ=None):
    """
    Read capability import strings from RIS_CAPABILITIES.

    Unset means all bundled capabilities. An explicit "[]" loads none.
    """
    env = os.environ if environ is None else environ
    raw = env.get("RIS_CAPABILITIES")
    if raw is None:
        return list(DEFAULT_CAPABILITIES)

    imports = json.loads(raw)
    if not isinstance(imports, list) or not all(isinstance(i, str) for i in imports):
        raise ValueError("RIS_CAPABILITIES must be a JSON list of import strings")
    return imports


def main() -> None:
    """
    Load capabilities from RIS_CAPABILITIES env var.

    Example:
      export RIS_CAPABILITIES='[
        "ris_live_mcp.capabilities.ris_json_udp.capability:build_capability"
      ]'
      python -m ris_live_mcp.cli.run_server
    """
    server = RisLiveMCPServer(capability_imports=load_capability_imports())
    server.run()


if __name__ == "__main__":
    main()
