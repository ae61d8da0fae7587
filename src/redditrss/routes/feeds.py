from __future__ import annotations

import logging
import time
from collections.abc import AsyncGenerator

import httpx
from fastapi import APIRouter, Depends, Query, Request, Response

from redditrss.config import Settings, get_settings
from redditrss.ingestion.reddit import RedditClient
from redditrss.services.feed_writer import render_rss
from redditrss.services.pipeline.assembler import FeedAssembler
from redditrss.services.pipeline.filters import FeedFilters
from redditrss.services.resolver import ArticleResolver

logger = logging.getLogger(__name__)

router = APIRouter(tags=["feeds"])


async def get_http_client(
    settings: Settings = Depends(get_settings),
) -> AsyncGenerator[httpx.AsyncClient, None]:
    async with httpx.AsyncClient(
        timeout=settings.fetch_timeout,
        follow_redirects=True,
        headers={"User-Agent": settings.user_agent},
    ) as client:
        yield client


@router.get("/{path:path}")
async def subreddit_feed(
    path: str,
    request: Request,
    safe: str | None = Query(None),
    score_limit: str | None = Query(None, alias="scoreLimit"),
    flair: str | None = Query(None),
    settings: Settings = Depends(get_settings),
    client: httpx.AsyncClient = Depends(get_http_client),
):
    listing_path = "/" + path
    logger.info("Fetch %s", request.url.path)
    start = time.perf_counter()

    filters = FeedFilters.from_query(safe=safe, score_limit=score_limit, flair=flair)

    reddit = RedditClient(client, settings)
    await reddit.login()
    listing = await reddit.fetch_listing(listing_path, list(request.query_params.multi_items()))

    assembler = FeedAssembler(ArticleResolver(client, settings), settings)
    feed = await assembler.assemble(listing, filters, listing_path)
    body = render_rss(feed)

    logger.info("OK %s (%dms)", request.url.path, (time.perf_counter() - start) * 1000)
    return Response(
        content=body,
        media_type="application/rss+xml",
        headers={"Cache-Control": f"public, max-age={settings.cache_max_age}"},
    )
