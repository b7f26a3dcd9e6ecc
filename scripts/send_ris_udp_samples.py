import json
import random
import socket
import time


def _update(prefix: str, origin_asn: int) -> dict:
    return {
        "type": "ris_message",
        "data": {
            "timestamp": time.time(),
            "peer": "37.49.237.175",
            "peer_asn": "199524",
            "id": "21-587-22045871",
            "host": "rrc21",
            "type": "UPDATE",
            "path": [199524, 1299, 3356, origin_asn],
            "community": [[1299, 35130], [199524, 100]],
            "origin": "igp",
            "announcements": [{"next_hop": "37.49.237.175", "prefixes": [prefix]}],
        },
    }


def _withdraw(prefix: str) -> dict:
    return {
        "type": "ris_message",
        "data": {
            "timestamp": time.time(),
            "peer": "37.49.237.175",
            "peer_asn": "199524",
            "host": "rrc21",
            "type": "UPDATE",
            "withdrawals": [prefix],
        },
    }


def main():
    host = "127.0.0.1"
    port = 7979
    sock = socket.socket(socket.AF_INET, socket.SOCK_DGRAM)

    for _ in range(200):
        prefix = random.choice(["64.68.236.0/22", "193.0.0.0/21", "2001:db8::/32"])
        if random.random() < 0.3:
            msg = _withdraw(prefix)
        else:
            msg = _update(prefix, random.choice([13904, 13904, 13904, 64512]))
        sock.sendto(json.dumps(msg).encode(), (host, port))
        time.sleep(0.02)


if __name__ == "__main__":
    main()
