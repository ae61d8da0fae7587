from __future__ import annotations

import asyncio
import logging
from dataclasses import dataclass, field
from urllib.parse import urljoin

import httpx
from bs4 import BeautifulSoup
from readability import Document

from redditrss.errors import PreviewError, ResolutionError

logger = logging.getLogger(__name__)

MIN_READABLE_CHARS = 140


def parse_meta_tags(soup: BeautifulSoup) -> dict[str, str]:
    """Collect <meta property|name=... content=...> pairs, first occurrence wins."""
    tags: dict[str, str] = {}
    for meta in soup.find_all("meta"):
        key = meta.get("property") or meta.get("name")
        content = meta.get("content")
        if not key or content is None:
            continue
        tags.setdefault(key.strip().lower(), content.strip())
    return tags


@dataclass
class LinkPreview:
    url: str
    title: str
    image: str
    tags: dict[str, str] = field(default_factory=dict)


def parse_preview(html: str, url: str) -> LinkPreview:
    soup = BeautifulSoup(html, "lxml")
    tags = parse_meta_tags(soup)

    title = tags.get("og:title") or tags.get("twitter:title") or ""
    if not title and soup.title and soup.title.string:
        title = soup.title.string.strip()

    image = (
        tags.get("og:image")
        or tags.get("og:image:url")
        or tags.get("og:image:secure_url")
        or tags.get("twitter:image")
        or ""
    )

    missing = [name for name, value in (("title", title), ("image", image)) if not value]
    if missing:
        raise PreviewError(f"link preview for {url} is missing {', '.join(missing)}")

    return LinkPreview(url=url, title=title, image=urljoin(url, image), tags=tags)


class LinkPreviewer:
    def __init__(self, client: httpx.AsyncClient):
        self.client = client

    async def preview(self, url: str) -> LinkPreview:
        response = await self.client.get(url)
        response.raise_for_status()
        return parse_preview(response.text, str(response.url))


def _summarize(html: str) -> str:
    summary = Document(html).summary(html_partial=True)
    text = BeautifulSoup(summary, "lxml").get_text(separator=" ", strip=True)
    if len(text) < MIN_READABLE_CHARS:
        raise ResolutionError("the page is not readable")
    return summary


class ReadabilityExtractor:
    """Pulls the main article body out of an HTML page."""

    def __init__(self, client: httpx.AsyncClient):
        self.client = client

    async def extract(self, url: str) -> str:
        response = await self.client.get(url)
        response.raise_for_status()

        content_type = response.headers.get("content-type", "")
        if "text/html" not in content_type:
            raise ResolutionError(f"{url} is not a HTML document")

        loop = asyncio.get_event_loop()
        return await loop.run_in_executor(None, _summarize, response.text)
