from __future__ import annotations
import argparse
import ipaddress
import sys
from typing import Any, Callable, Iterable, Iterator, List, Optional, TextIO

from websockets.exceptions import WebSocketException
from websockets.sync.client import connect as ws_connect

from ris_live_mcp.core.formatting import format_json, format_text
from ris_live_mcp.core.models import RoutingElement
from ris_live_mcp.core.parser import OutcomeStatus, decode_message
from ris_live_mcp.core.subscription import (
    compose_subscription_message,
    match_prefix,
    match_update_type,
    ris_live_url,
)


def build_parser() -> argparse.ArgumentParser:
    parser = argparse.ArgumentParser(
        prog="ris-live-reader",
        description=(
            "Decode RIS Live BGP messages into one line per routing change. "
            "Streams the live feed by default, or reads captured feed messages, "
            "one per line, with --input."
        ),
    )
    parser.add_argument("--client", default="ris-live-mcp", help="client name to identify the stream")
    parser.add_argument("--host", default="rrc21", help='filter by RRC host, e.g. rrc01. Use "all" for the firehose')
    parser.add_argument(
        "--msg-type",
        help="only messages of a given BGP or RIS type: UPDATE, OPEN, NOTIFICATION, KEEPALIVE, or RIS_PEER_STATE",
    )
    parser.add_argument("--update-type", help="only a given BGP update type: announcement (a) or withdrawal (w)")
    parser.add_argument("--require", help="only messages containing a given key")
    parser.add_argument("--peer", help="only messages sent by the given BGP peer")
    parser.add_argument("--prefix", help="filter UPDATE messages by prefixes in announcements or withdrawals")
    parser.add_argument(
        "--more-specific", dest="more_specific", action="store_true", default=None,
        help="match prefixes that are more specific (part of) --prefix",
    )
    parser.add_argument("--no-more-specific", dest="more_specific", action="store_false")
    parser.add_argument(
        "--less-specific", dest="less_specific", action="store_true", default=None,
        help="match prefixes that are less specific (contain) --prefix",
    )
    parser.add_argument("--path", help="ASN or pattern to match against the AS PATH attribute")
    parser.add_argument("--json", action="store_true", help="output as JSON objects")
    parser.add_argument("--pretty", action="store_true", help="pretty-print JSON output")
    parser.add_argument("--raw", action="store_true", help="print out raw messages without parsing")
    parser.add_argument(
        "--subscribe", action="store_true", help="print the feed URL and subscription message, then exit"
    )
    parser.add_argument(
        "-i", "--input", help="file of captured messages, - for stdin. Without it the live feed is streamed"
    )
    parser.add_argument("--stop-on-error", action="store_true", help="exit with status 1 on the first bad message")
    return parser


def _keep(elem: RoutingElement, args: argparse.Namespace) -> bool:
    if args.peer and elem.peer_address != ipaddress.ip_address(args.peer):
        return False
    if not match_prefix(elem, args.prefix, args.more_specific, args.less_specific):
        return False
    return match_update_type(elem, args.update_type)


def _render(elem: RoutingElement, args: argparse.Namespace) -> str:
    if args.json:
        return format_json(elem, pretty=args.pretty)
    return format_text(elem)


def run(args: argparse.Namespace, lines: Iterable[str], out: TextIO, err: TextIO) -> int:
    """
    Decode lines and print what survives the client side filters.

    Returns the process exit status.
    """
    for line in lines:
        msg = line.strip()
        if not msg:
            continue
        if args.raw:
            print(msg, file=out)
            continue

        outcome = decode_message(msg)

        if outcome.status is OutcomeStatus.END_OF_RIB:
            print(f"end-of-rib: {msg}", file=err)
            continue
        if outcome.status is OutcomeStatus.SKIPPED:
            continue
        if outcome.status is OutcomeStatus.FAILED:
            print(f"error: {outcome.error}", file=err)
            if args.stop_on_error:
                return 1
            continue

        for elem in outcome.elements:
            if _keep(elem, args):
                print(_render(elem, args), file=out)

    return 0


def _frames(conn: Any) -> Iterator[str]:
    for frame in conn:
        if isinstance(frame, bytes):
            frame = frame.decode("utf-8", errors="replace")
        yield frame


def stream(
    args: argparse.Namespace,
    subscribe_msg: str,
    out: TextIO,
    err: TextIO,
    connect: Optional[Callable[[str], Any]] = None,
) -> int:
    """
    Subscribe to the live feed and decode frames until the server closes.

    No reconnect: a dropped session ends the run.
    """
    url = ris_live_url(args.client)
    with (connect or ws_connect)(url) as conn:
        conn.send(subscribe_msg)
        print(f"subscribed to {url}: {subscribe_msg}", file=err)
        return run(args, _frames(conn), out, err)


def main(argv: Optional[List[str]] = None) -> int:
    parser = build_parser()
    args = parser.parse_args(argv)

    try:
        subscribe_msg = compose_subscription_message(
            host=args.host,
            msg_type=args.msg_type,
            require=args.require,
            peer=args.peer,
            prefix=args.prefix,
            path=args.path,
            more_specific=args.more_specific,
            less_specific=args.less_specific,
        )
        if args.update_type is not None and args.update_type.strip().lower()[:1] not in ("a", "w"):
            raise ValueError("update type must be announcement or withdrawal")
    except ValueError as e:
        parser.error(str(e))

    if args.subscribe:
        print(ris_live_url(args.client))
        print(subscribe_msg)
        return 0

    if args.input is None:
        try:
            return stream(args, subscribe_msg, sys.stdout, sys.stderr)
        except (OSError, WebSocketException) as e:
            print(f"error: feed connection failed: {e}", file=sys.stderr)
            return 1

    if args.input == "-":
        return run(args, sys.stdin, sys.stdout, sys.stderr)

    with open(args.input, "r", encoding="utf-8", errors="replace") as fh:
        return run(args, fh, sys.stdout, sys.stderr)


if __name__ == "__main__":
    sys.exit(main())
