from __future__ import annotations

import logging

import filetype
import httpx

from redditrss.models import MediaKind

logger = logging.getLogger(__name__)

# Enough of the body for every signature filetype knows about.
SNIFF_BYTES = 3072


def kind_for_mime(mime: str | None) -> MediaKind:
    if not mime:
        return MediaKind.unknown
    if mime.startswith("image/"):
        return MediaKind.image
    if mime.startswith("video/"):
        return MediaKind.video
    return MediaKind.unknown


class ContentClassifier:
    """Sniffs what a URL points at from the bytes it serves, ignoring Content-Type."""

    def __init__(self, client: httpx.AsyncClient):
        self.client = client

    async def detect_mime(self, url: str) -> str | None:
        head = b""
        async with self.client.stream("GET", url) as response:
            async for chunk in response.aiter_bytes():
                head += chunk
                if len(head) >= SNIFF_BYTES:
                    break
        mime = filetype.guess_mime(head[:SNIFF_BYTES])
        logger.debug("Sniffed %s as %s", url, mime)
        return mime

    async def classify(self, url: str) -> tuple[MediaKind, str | None]:
        mime = await self.detect_mime(url)
        return kind_for_mime(mime), mime
