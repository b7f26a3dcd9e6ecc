from ris_live_mcp.core.registry import CapabilityRegistry


def test_load_all_capabilities():
    reg = CapabilityRegistry()
    reg.load_from_import_paths(
        [
            "ris_live_mcp.capabilities.ris_json_udp.capability:build_capability",
            "ris_live_mcp.capabilities.ris_file_replay.capability:build_capability",
        ]
    )

    names = reg.list()
    assert "ris_json_udp" in names
    assert "ris_file_replay" in names


class _FakeMCP:
    def __init__(self):
        self.tools = {}

    def tool(self):
        def deco(fn):
            self.tools[fn.__name__] = fn
            return fn
        return deco


def test_capabilities_register_their_tools(ctx):
    reg = CapabilityRegistry()
    reg.load_from_import_paths(
        [
            "ris_live_mcp.capabilities.ris_json_udp.capability:build_capability",
            "ris_live_mcp.capabilities.ris_file_replay.capability:build_capability",
        ]
    )
    mcp = _FakeMCP()
    for name in reg.list():
        reg.get(name).register_tools(mcp, ctx)

    assert {"start_udp_collection", "stop_udp_collection", "replay_file"} <= set(mcp.tools)
