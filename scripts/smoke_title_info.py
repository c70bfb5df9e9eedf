"""Resolve one or more title URLs against the live sources and print the result.

Usage:
    python scripts/smoke_title_info.py https://anilist.co/anime/1535
    python scripts/smoke_title_info.py --fallback https://example.com/series/foo

No auth or secrets required; only public pages and APIs are requested.
"""

import argparse
import asyncio
import json
import logging
import os
import sys

import aiohttp
from dotenv import load_dotenv

sys.path.append(os.path.dirname(os.path.dirname(__file__)))

load_dotenv()

from resolvers.generic_resolver import GenericPageResolver
from services.title_info_errors import TitleInfoError, format_user_error
from services.title_info_service import list_supported_sources, resolve_title_info


def _parse_args(argv=None):
    parser = argparse.ArgumentParser(description=__doc__, formatter_class=argparse.RawDescriptionHelpFormatter)
    parser.add_argument("urls", nargs="*", help="title page URLs to resolve")
    parser.add_argument("--fallback", action="store_true", help="enable the generic og:* fallback for unknown hosts")
    parser.add_argument("--list-sources", action="store_true", help="print the supported sources and exit")
    parser.add_argument("--log-level", default="INFO")
    return parser.parse_args(argv)


async def _resolve_all(urls, fallback):
    timeout = aiohttp.ClientTimeout(total=30)
    async with aiohttp.ClientSession(timeout=timeout) as session:
        results = await asyncio.gather(
            *(resolve_title_info(url, session=session, fallback=fallback) for url in urls),
            return_exceptions=True,
        )
    return list(zip(urls, results))


def main(argv=None):
    args = _parse_args(argv)
    logging.basicConfig(
        level=getattr(logging, args.log_level.upper(), logging.INFO),
        format="%(asctime)s %(levelname)s %(name)s: %(message)s",
    )

    if args.list_sources:
        for source in list_supported_sources():
            print(f"{source['source']:<10} {source['name']:<14} {source['url_example']}")
        return 0

    if not args.urls:
        print("error: at least one URL is required", file=sys.stderr)
        return 2

    fallback = GenericPageResolver() if args.fallback else None
    failures = 0
    for url, result in asyncio.run(_resolve_all(args.urls, fallback)):
        if isinstance(result, TitleInfoError):
            failures += 1
            print(f"FAIL {url} [{result.code}] {format_user_error(result)}")
        elif isinstance(result, Exception):
            failures += 1
            print(f"FAIL {url} [{type(result).__name__}] {result}")
        else:
            print(f"OK   {url}")
            print(json.dumps(result.to_dict(), ensure_ascii=False, indent=2))

    return 1 if failures else 0


if __name__ == "__main__":
    sys.exit(main())
