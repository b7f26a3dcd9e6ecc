import json
import pytest

from ris_live_mcp.core.store import ElementStore
from ris_live_mcp.core.monitor import ChurnMonitor
from ris_live_mcp.core.capability_base import CapabilityContext


def _envelope(data, type_="ris_message") -> str:
    return json.dumps({"type": type_, "data": data})


def _update_payload(**overrides):
    data = {
        "timestamp": 1636342486.17,
        "peer": "37.49.237.175",
        "peer_asn": "199524",
        "id": "21-587-22045871",
        "host": "rrc21",
        "type": "UPDATE",
        "path": [199524, 1299, 3356, 13904],
        "community": [[1299, 35130], [199524, 100]],
        "origin": "igp",
        "med": 10,
        "aggregator": "65000:8.42.232.1",
        "announcements": [
            {"next_hop": "37.49.237.175", "prefixes": ["64.68.236.0/22", "64.68.240.0/22"]},
            {"next_hop": "37.49.237.1", "prefixes": ["193.0.0.0/21"]},
        ],
        "withdrawals": ["1.1.1.0/24", "8.8.8.0/24"],
    }
    data.update(overrides)
    return data


@pytest.fixture
def store():
    return ElementStore(maxlen=10_000)

@pytest.fixture
def monitor():
    m = ChurnMonitor()
    m.set_thresholds(threshold_updates=3, window_seconds=60, min_samples=1, cooldown_seconds=0)
    return m

@pytest.fixture
def log_lines():
    return []

@pytest.fixture
def ctx(store, monitor, log_lines):
    return CapabilityContext(store=store, monitor=monitor, log=log_lines.append)

@pytest.fixture
def envelope():
    return _envelope

@pytest.fixture
def update_payload():
    return _update_payload
