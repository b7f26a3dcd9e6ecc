from __future__ import annotations
import time
from collections import defaultdict
from typing import Any, Dict, List, Optional, Set
from .models import ElemType, RoutingElement
from .dedupe import AlertDeduper


class ChurnMonitor:
    """
    Routing churn monitor.

    It works on RoutingElement objects only, never on raw feed JSON.

    Main concepts:
      window_seconds
        How far back we look when computing stats

      threshold_updates
        A prefix with at least this many announcements plus withdrawals
        in the window is reported as an offender

      min_samples
        Avoid noise, do not alert on prefixes seen only a handful of times

      cooldown_seconds
        Prevent alert spam, one alert per prefix per cooldown interval
    """

    def __init__(
        self,
        threshold_updates: int = 50,
        window_seconds: int = 300,
        min_samples: int = 5,
        cooldown_seconds: int = 300,
    ):
        self.threshold_updates = int(threshold_updates)
        self.window_seconds = int(window_seconds)
        self.min_samples = int(min_samples)
        self.deduper = AlertDeduper(cooldown_seconds=int(cooldown_seconds))

    def set_thresholds(
        self,
        threshold_updates: Optional[int] = None,
        window_seconds: Optional[int] = None,
        min_samples: Optional[int] = None,
        cooldown_seconds: Optional[int] = None,
    ) -> Dict[str, Any]:
        """
        Update monitor parameters at runtime.
        Exposed as an MCP tool by the core server.
        """
        if threshold_updates is not None:
            self.threshold_updates = int(threshold_updates)
        if window_seconds is not None:
            self.window_seconds = int(window_seconds)
        if min_samples is not None:
            self.min_samples = int(min_samples)
        if cooldown_seconds is not None:
            self.deduper.cooldown_seconds = int(cooldown_seconds)

        return {
            "threshold_updates": self.threshold_updates,
            "window_seconds": self.window_seconds,
            "min_samples": self.min_samples,
            "cooldown_seconds": self.deduper.cooldown_seconds,
        }

    def analyze(self, elems: List[RoutingElement]) -> Dict[str, Any]:
        """
        Compute churn stats per prefix and per peer.

        Per prefix:
          announcements, withdrawals, distinct peers, origin ASNs seen

        Offenders:
          updates >= threshold_updates and updates >= min_samples

        MOAS:
          prefixes announced with more than one origin ASN in the window
        """
        announces: Dict[str, int] = defaultdict(int)
        withdraws: Dict[str, int] = defaultdict(int)
        peers_by_prefix: Dict[str, Set[str]] = defaultdict(set)
        origins_by_prefix: Dict[str, Set[int]] = defaultdict(set)
        updates_by_peer: Dict[str, int] = defaultdict(int)
        peer_states: List[Dict[str, Any]] = []

        for e in elems:
            peer_key = f"{e.collector_id}/{e.peer_address}/AS{e.peer_asn}"

            if e.kind is ElemType.PEER_STATE:
                peer_states.append({"peer": peer_key, "state": e.peer_state, "ts": e.timestamp})
                continue

            prefix = str(e.prefix)
            updates_by_peer[peer_key] += 1
            peers_by_prefix[prefix].add(peer_key)

            if e.kind is ElemType.ANNOUNCE:
                announces[prefix] += 1
                if e.as_path is not None:
                    origins_by_prefix[prefix].update(e.as_path.origin_asns())
            else:
                withdraws[prefix] += 1

        summary: List[Dict[str, Any]] = []
        offenders: List[Dict[str, Any]] = []

        for prefix in peers_by_prefix:
            updates = announces[prefix] + withdraws[prefix]
            row = {
                "prefix": prefix,
                "updates": updates,
                "announcements": announces[prefix],
                "withdrawals": withdraws[prefix],
                "peers": len(peers_by_prefix[prefix]),
                "origins": sorted(origins_by_prefix[prefix]),
            }
            summary.append(row)

            if updates >= self.min_samples and updates >= self.threshold_updates:
                offenders.append(row)

        moas = [r for r in summary if len(r["origins"]) > 1]

        offenders.sort(key=lambda r: r["updates"], reverse=True)
        summary.sort(key=lambda r: r["updates"], reverse=True)
        busiest_peers = sorted(
            ({"peer": k, "updates": v} for k, v in updates_by_peer.items()),
            key=lambda r: r["updates"],
            reverse=True,
        )

        return {
            "window_seconds": self.window_seconds,
            "threshold_updates": self.threshold_updates,
            "min_samples": self.min_samples,
            "elements": len(elems),
            "offenders": offenders[:50],
            "moas": moas[:50],
            "top": summary[:50],
            "peers": busiest_peers[:50],
            "peer_states": peer_states[-50:],
        }

    def build_alerts(self, analysis: Dict[str, Any]) -> List[Dict[str, Any]]:
        """
        Convert offenders and MOAS prefixes to alert objects and apply dedupe.

        Alerts are returned to the caller, the agent decides where they go.
        """
        alerts: List[Dict[str, Any]] = []

        for off in analysis.get("offenders", []):
            key = f"churn:{off['prefix']}"
            if self.deduper.should_alert(key):
                alerts.append(
                    {
                        "type": "prefix_churn",
                        "prefix": off["prefix"],
                        "updates": off["updates"],
                        "threshold_updates": analysis["threshold_updates"],
                        "ts": time.time(),
                        "message": (
                            f"{off['prefix']} changed {off['updates']} times "
                            f"(threshold {analysis['threshold_updates']}) "
                            f"in {analysis['window_seconds']} s"
                        ),
                    }
                )

        for row in analysis.get("moas", []):
            key = f"moas:{row['prefix']}"
            if self.deduper.should_alert(key):
                alerts.append(
                    {
                        "type": "multiple_origins",
                        "prefix": row["prefix"],
                        "origins": row["origins"],
                        "ts": time.time(),
                        "message": (
                            f"{row['prefix']} originated by "
                            + ", ".join(f"AS{a}" for a in row["origins"])
                        ),
                    }
                )

        return alerts
