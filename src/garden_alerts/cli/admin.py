"""CLI to drive a running garden_alerts server over HTTP.

Usage:
  garden-alerts-admin health
  garden-alerts-admin request-verification you@example.com
  garden-alerts-admin verify you@example.com <token>
  garden-alerts-admin subscribe you@example.com --items carrot tomato
  garden-alerts-admin subscribe you@example.com --seeds carrot --gear trowel
  garden-alerts-admin items --head 5
"""
import argparse
import json
import sys

import httpx


def print_json(data: object) -> None:
    print(json.dumps(data, indent=2, default=str))


def cmd_health(client: httpx.Client, _: argparse.Namespace) -> int:
    r = client.get("/health")
    r.raise_for_status()
    print_json(r.json())
    return 0


def cmd_request_verification(client: httpx.Client, args: argparse.Namespace) -> int:
    r = client.post("/request-verification", json={"email": args.email})
    r.raise_for_status()
    print_json(r.json())
    return 0


def cmd_verify(client: httpx.Client, args: argparse.Namespace) -> int:
    r = client.get("/verify", params={"email": args.email, "token": args.token})
    r.raise_for_status()
    print_json(r.json())
    return 0


def cmd_subscribe(client: httpx.Client, args: argparse.Namespace) -> int:
    body: dict[str, object] = {"email": args.email}
    if args.seeds or args.gear:
        body["seeds"] = args.seeds or []
        body["gear"] = args.gear or []
    else:
        body["items"] = args.items or []
    r = client.post("/subscribe", json=body)
    r.raise_for_status()
    print_json(r.json())
    return 0


def cmd_unsubscribe(client: httpx.Client, args: argparse.Namespace) -> int:
    r = client.get("/unsub", params={"email": args.email})
    r.raise_for_status()
    print_json(r.json())
    return 0


def cmd_refresh_items(client: httpx.Client, _: argparse.Namespace) -> int:
    r = client.post("/refresh-items")
    r.raise_for_status()
    data = r.json()
    print_json(data)
    return 0 if data.get("success") else 1


def cmd_items(client: httpx.Client, args: argparse.Namespace) -> int:
    r = client.get("/items")
    r.raise_for_status()
    data = r.json()
    for category, entries in data.items():
        print(f"{category}: {len(entries)} items")
        print_json(entries[: args.head] if args.head else entries)
    return 0


def cmd_test_email(client: httpx.Client, args: argparse.Namespace) -> int:
    r = client.get("/test-email", params={"email": args.email})
    r.raise_for_status()
    print_json(r.json())
    return 0


def build_parser() -> argparse.ArgumentParser:
    parser = argparse.ArgumentParser(
        description="Drive the garden_alerts HTTP API.",
        formatter_class=argparse.RawDescriptionHelpFormatter,
        epilog=__doc__,
    )
    parser.add_argument(
        "--base-url",
        default="http://localhost:3000",
        help="API base URL (default: http://localhost:3000)",
    )
    parser.add_argument(
        "--timeout",
        type=float,
        default=30.0,
        help="Request timeout in seconds (default: 30)",
    )
    subparsers = parser.add_subparsers(dest="command", required=True, help="Command")

    subparsers.add_parser("health", help="GET /health")

    p = subparsers.add_parser("request-verification", help="POST /request-verification")
    p.add_argument("email")

    p = subparsers.add_parser("verify", help="GET /verify")
    p.add_argument("email")
    p.add_argument("token")

    p = subparsers.add_parser("subscribe", help="POST /subscribe")
    p.add_argument("email")
    p.add_argument("--items", nargs="+", default=None, help="Item ids from any shop")
    p.add_argument("--seeds", nargs="+", default=None, help="Seed ids (partitioned)")
    p.add_argument("--gear", nargs="+", default=None, help="Gear ids (partitioned)")

    p = subparsers.add_parser("unsubscribe", help="GET /unsub")
    p.add_argument("email")

    subparsers.add_parser("refresh-items", help="POST /refresh-items")

    p = subparsers.add_parser("items", help="GET /items")
    p.add_argument("--head", type=int, default=0, help="Show only first N per category (0 = all)")

    p = subparsers.add_parser("test-email", help="GET /test-email")
    p.add_argument("email")
    return parser


HANDLERS = {
    "health": cmd_health,
    "request-verification": cmd_request_verification,
    "verify": cmd_verify,
    "subscribe": cmd_subscribe,
    "unsubscribe": cmd_unsubscribe,
    "refresh-items": cmd_refresh_items,
    "items": cmd_items,
    "test-email": cmd_test_email,
}


def main(argv: list[str] | None = None) -> int:
    args = build_parser().parse_args(argv)
    handler = HANDLERS[args.command]
    try:
        with httpx.Client(base_url=args.base_url.rstrip("/"), timeout=args.timeout) as client:
            return handler(client, args)
    except httpx.HTTPStatusError as e:
        print(f"HTTP error: {e.response.status_code}", file=sys.stderr)
        if e.response.content:
            try:
                print(e.response.json(), file=sys.stderr)
            except ValueError:
                print(e.response.text, file=sys.stderr)
        return 1
    except httpx.RequestError as e:
        print(f"Request error: {e}", file=sys.stderr)
        return 1


if __name__ == "__main__":
    sys.exit(main())
