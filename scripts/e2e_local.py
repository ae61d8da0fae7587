"""Local end-to-end run of the reddit-rss pipeline.

Fetches a real subreddit listing, enriches every post against the live sites
it links to, renders the RSS document, and prints what each item resolved to.
No server needed; calls the pipeline directly.

Usage:
    uv run python scripts/e2e_local.py r/python
    uv run python scripts/e2e_local.py r/pics --score-limit 1000 --out pics.xml
"""

import argparse
import asyncio
import sys
import time
import traceback

import httpx

from redditrss.config import settings
from redditrss.ingestion.reddit import RedditClient
from redditrss.logging_config import configure_logging
from redditrss.services.feed_writer import render_rss
from redditrss.services.pipeline.assembler import FeedAssembler
from redditrss.services.pipeline.filters import FeedFilters
from redditrss.services.resolver import ArticleResolver


def step(n: int, title: str) -> None:
    print(f"\n{'='*60}")
    print(f"  Step {n}: {title}")
    print(f"{'='*60}")


async def run(args: argparse.Namespace) -> int:
    path = "/" + args.subreddit.strip("/")
    filters = FeedFilters.from_query(
        safe="true" if args.safe else None,
        score_limit=args.score_limit,
        flair=args.flair,
    )

    async with httpx.AsyncClient(
        timeout=settings.fetch_timeout,
        follow_redirects=True,
        headers={"User-Agent": settings.user_agent},
    ) as client:
        step(1, f"Fetch listing {path}")
        reddit = RedditClient(client, settings)
        await reddit.login()
        listing = await reddit.fetch_listing(path)
        print(f"  {len(listing.posts)} posts (authenticated: {reddit.token is not None})")

        step(2, "Enrich posts")
        start = time.perf_counter()
        assembler = FeedAssembler(ArticleResolver(client, settings), settings)
        feed = await assembler.assemble(listing, filters, path)
        elapsed = time.perf_counter() - start
        print(f"  {len(feed.items)} items in {elapsed:.1f}s")

    step(3, "Items")
    for item in feed.items:
        kind = "empty" if not item.content else item.content.lstrip()[:40].replace("\n", " ")
        print(f"  [{item.id}] {item.title[:50]!r} -> {kind}")

    step(4, "Render RSS")
    body = render_rss(feed)
    print(f"  {len(body)} bytes, title={feed.title!r}")
    if args.out:
        with open(args.out, "wb") as fh:
            fh.write(body)
        print(f"  written to {args.out}")

    return 0


def main() -> int:
    parser = argparse.ArgumentParser(description=__doc__.splitlines()[0])
    parser.add_argument("subreddit", help="listing path, e.g. r/python or r/python/top")
    parser.add_argument("--safe", action="store_true")
    parser.add_argument("--score-limit")
    parser.add_argument("--flair")
    parser.add_argument("--out")
    args = parser.parse_args()

    configure_logging(settings.log_level)
    try:
        return asyncio.run(run(args))
    except Exception:
        traceback.print_exc()
        return 1


if __name__ == "__main__":
    sys.exit(main())
