"""Admin command line for the meme cache.

Examples:
    memecache status
    memecache get "cache:captions:funny_cats:181913649"
    memecache delete "cache:image:181913649:top_text:"
    memecache clear --namespace captions
"""

import argparse
import asyncio
import json
import sys
from typing import List, Optional

from memecache.core.config import Settings
from memecache.core.logging import setup_logging
from memecache.services.cache import MISSING, CacheService


def build_parser() -> argparse.ArgumentParser:
    parser = argparse.ArgumentParser(prog="memecache", description="Inspect and manage the meme cache.")
    parser.add_argument("--redis-url", default=None, help="Override REDIS_URL for this invocation")
    parser.add_argument("--log-level", default=None, help="Override LOG_LEVEL (default from settings)")

    sub = parser.add_subparsers(dest="command", required=True)

    sub.add_parser("status", help="Report Redis availability and cache statistics")

    get_cmd = sub.add_parser("get", help="Print the cached value for a key as JSON")
    get_cmd.add_argument("key")

    delete_cmd = sub.add_parser("delete", help="Delete a key from both tiers")
    delete_cmd.add_argument("key")

    clear_cmd = sub.add_parser("clear", help="Delete cached entries")
    clear_cmd.add_argument("--namespace", default=None, help="Only clear one namespace (e.g. captions)")

    return parser


async def run(args: argparse.Namespace, settings: Settings) -> int:
    """Execute one command; returns the process exit code."""
    async with CacheService.from_settings(settings) as cache:
        if args.command == "status":
            report = {
                "redis_configured": cache.redis_configured,
                "redis_available": await cache.is_redis_available(),
                "stats": cache.stats(),
            }
            print(json.dumps(report, indent=2))
            return 0

        if args.command == "get":
            value = await cache.get(args.key, MISSING)
            if value is MISSING:
                print(f"miss: {args.key}", file=sys.stderr)
                return 1
            print(json.dumps(value, indent=2))
            return 0

        if args.command == "delete":
            deleted = await cache.delete(args.key)
            print(json.dumps({"key": args.key, "deleted": deleted}))
            return 0

        if args.command == "clear":
            deleted = await cache.clear(args.namespace)
            print(json.dumps({"namespace": args.namespace, "redis_keys_deleted": deleted}))
            return 0

    raise ValueError(f"Unknown command: {args.command}")


def main(argv: Optional[List[str]] = None) -> int:
    args = build_parser().parse_args(argv)

    overrides = {}
    if args.redis_url is not None:
        overrides["redis_url"] = args.redis_url
    if args.log_level is not None:
        overrides["log_level"] = args.log_level
    settings = Settings(**overrides)

    setup_logging(settings.log_level, settings.log_format, stream=sys.stderr)
    return asyncio.run(run(args, settings))


if __name__ == "__main__":
    sys.exit(main())
