from __future__ import annotations

import asyncio
import logging
from datetime import UTC, datetime

import httpx

from redditrss.config import Settings
from redditrss.errors import ResolutionError, SubredditNotFound
from redditrss.models import EnrichmentKey, Feed, FeedImage, FeedItem, Listing, Post
from redditrss.services.pipeline.filters import FeedFilters
from redditrss.services.pipeline.loader import BatchLoader
from redditrss.services.resolver import ArticleResolver, strip_query

logger = logging.getLogger(__name__)


class FeedAssembler:
    def __init__(self, resolver: ArticleResolver, settings: Settings):
        self.resolver = resolver
        self.settings = settings

    async def assemble(self, listing: Listing, filters: FeedFilters, path: str = "") -> Feed:
        posts = listing.posts
        if not posts:
            # Feed metadata lives on the posts themselves; nothing to describe.
            raise SubredditNotFound()

        feed = self._feed_metadata(posts[0], path)
        selected = filters.apply(posts)
        logger.debug("%d of %d posts pass filters %s", len(selected), len(posts), filters)

        deadline = asyncio.get_running_loop().time() + self.settings.enrichment_timeout
        loader: BatchLoader[EnrichmentKey, FeedItem] = BatchLoader(
            lambda key: self._build_item(key.post, deadline),
            capacity=self.settings.batch_capacity,
        )

        keys = [EnrichmentKey.for_post(post) for post in selected]
        results = await loader.load_many(keys)

        for key, result in zip(keys, results):
            if not result.ok:
                logger.warning("Skipping post %s: %s", key.id, result.error)
                continue
            feed.items.append(result.value)

        return feed

    def _feed_metadata(self, first: Post, path: str) -> Feed:
        details = first.sr_detail
        if details is None:
            return Feed(
                title=f"reddit-rss {path}",
                link=f"{self.settings.reddit_url}{path}",
                description="Reddit RSS feed that links directly to the content",
            )

        link = f"{self.settings.reddit_url}{details.url}"
        icon = strip_query(details.community_icon)
        return Feed(
            title=details.title,
            link=link,
            description=details.public_description,
            image=FeedImage(url=icon, title=details.title, link=link) if icon else None,
        )

    async def _build_item(self, post: Post, deadline: float | None = None) -> FeedItem:
        content = ""
        try:
            async with asyncio.timeout_at(deadline):
                content = await self.resolver.resolve(post)
        except (ResolutionError, httpx.HTTPError, TimeoutError) as exc:
            logger.warning("Could not resolve content for post %s (%s): %r", post.id, post.url, exc)
        except Exception:
            logger.exception("Unexpected error resolving post %s (%s)", post.id, post.url)

        return FeedItem(
            title=post.title,
            link=f"{self.settings.reddit_url}{post.permalink}",
            author=post.author,
            id=post.id,
            created=datetime.fromtimestamp(int(post.created_utc), tz=UTC),
            description=post.selftext,
            content=content,
        )
