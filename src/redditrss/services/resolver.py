from __future__ import annotations

import html
import logging
import re
from collections.abc import Awaitable, Callable

import httpx
from bs4 import BeautifulSoup

from redditrss.config import Settings
from redditrss.errors import PreviewError, ResolutionError, VideoMissing
from redditrss.models import MediaKind, MediaMetadata, Post
from redditrss.services.classifier import ContentClassifier
from redditrss.services.preview import LinkPreviewer, ReadabilityExtractor

logger = logging.getLogger(__name__)

PREVIEW_HOST = "https://preview.redd.it"

SIZE_ATTRIBUTE = re.compile(r"""\s(?:width|height)=(?:"[^"]*"|'[^']*'|[^\s>]*)""", re.IGNORECASE)

CARD_TEMPLATE = """<a href="{href}" style="text-decoration:none;color:inherit">
\t<div style="border:1px solid gray">
\t\t<img src="{image}" />
\t\t<div style="border-top:1px solid gray;padding:4px">
\t\t\t<span><strong>{title}</strong></span><br />
\t\t\t<span><small>{caption}</small></span>
\t\t</div>
\t</div></a>"""


def _attr(value: str) -> str:
    return html.escape(value, quote=True)


def strip_query(url: str) -> str:
    return url.split("?", 1)[0]


def cleanup_url(url: str) -> str:
    # imgur serves .gifv as an HTML wrapper page; .webm is the playable file
    if "imgur" in url and url.endswith("gifv"):
        return url[: -len("gifv")] + "webm"
    return url


def inline_preview_images(fragment: str) -> str:
    soup = BeautifulSoup(fragment, "html.parser")
    for anchor in soup.select(f'a[href^="{PREVIEW_HOST}"]'):
        anchor.replace_with(soup.new_tag("img", src=anchor["href"]))
    return str(soup)


def strip_size_attributes(fragment: str) -> str:
    return SIZE_ATTRIBUTE.sub("", fragment)


def gallery_image(entry: MediaMetadata | None) -> str:
    if entry is None or entry.s is None:
        return ""
    src = entry.s.gif or entry.s.u
    if not src:
        return ""
    return f'<img src="{_attr(src.replace("&amp;", "&"))}" /><br/>'


Strategy = tuple[Callable[[Post], bool], Callable[[Post], Awaitable[str]]]


class ArticleResolver:
    """Turns a post into the HTML body shown by feed readers.

    Self-text is rendered first. Link posts then go through an ordered list of
    (predicate, handler) strategies; the first predicate that matches decides
    the rest of the body. Anything no strategy claims is classified by sniffing
    the linked resource, falling back to a link-preview card.
    """

    def __init__(
        self,
        client: httpx.AsyncClient,
        settings: Settings,
        classifier: ContentClassifier | None = None,
        previewer: LinkPreviewer | None = None,
        readability: ReadabilityExtractor | None = None,
    ):
        self.client = client
        self.settings = settings
        self.classifier = classifier or ContentClassifier(client)
        self.previewer = previewer or LinkPreviewer(client)
        self.readability = readability or ReadabilityExtractor(client)
        self.strategies: tuple[Strategy, ...] = (
            (self._has_video_embed, self._video_embed),
            (self._has_media_metadata, self._gallery),
            (self._is_gfycat, self._gfycat),
            (self._is_reddit_video, self._reddit_video),
        )

    async def resolve(self, post: Post) -> str:
        content = ""
        if post.selftext:
            content = self._selftext(post)
            if post.is_self:
                return content

        for applies, handler in self.strategies:
            if applies(post):
                return content + await handler(post)

        return content + await self._generic(post)

    def _selftext(self, post: Post) -> str:
        return inline_preview_images(html.unescape(post.selftext_html or ""))

    @staticmethod
    def _has_video_embed(post: Post) -> bool:
        oembed = post.oembed
        return oembed is not None and oembed.type == "video" and bool(oembed.html)

    async def _video_embed(self, post: Post) -> str:
        return strip_size_attributes(html.unescape(post.oembed.html))

    @staticmethod
    def _has_media_metadata(post: Post) -> bool:
        return bool(post.media_metadata)

    async def _gallery(self, post: Post) -> str:
        metadata = post.media_metadata
        if post.gallery_data and post.gallery_data.items:
            entries = [metadata.get(item.media_id) for item in post.gallery_data.items]
        else:
            entries = list(metadata.values())
        return "<div>" + "".join(gallery_image(entry) for entry in entries) + "</div>"

    @staticmethod
    def _is_gfycat(post: Post) -> bool:
        return "gfycat" in post.url

    async def _gfycat(self, post: Post) -> str:
        response = await self.client.get(post.url)
        soup = BeautifulSoup(response.text, "lxml")

        def meta(selector: str) -> str:
            tag = soup.select_one(selector)
            return tag.get("content", "") if tag else ""

        image = meta('meta[property="og:image"][content$=".jpg"]')
        video = meta('meta[property="og:video:iframe"]')
        width = meta('meta[property="og:video:width"]')
        height = meta('meta[property="og:video:height"]')

        return (
            f'<div><iframe src="{_attr(video)}" width="{_attr(width)}" height="{_attr(height)}"/> '
            f'<img src="{_attr(image)}" class="webfeedsFeaturedVisual"/></div>'
        )

    @staticmethod
    def _is_reddit_video(post: Post) -> bool:
        return "v.redd.it" in post.url

    async def _reddit_video(self, post: Post) -> str:
        video = post.reddit_video
        if video is None and post.crosspost_parent_list:
            video = post.crosspost_parent_list[0].reddit_video
        if video is None:
            raise VideoMissing()
        return (
            f'<iframe src="{_attr(video.fallback_url)}" style="border:none;" /> '
            f'<img src="{_attr(post.thumbnail)}" class="webfeedsFeaturedVisual"/>'
        )

    async def _generic(self, post: Post) -> str:
        if not post.url:
            raise ResolutionError(f"post {post.id} has no link to resolve")

        url = cleanup_url(post.url)
        kind, mime = await self.classifier.classify(url)

        if kind is MediaKind.image:
            return f'<img src="{_attr(url)}" class="webfeedsFeaturedVisual"/>'
        if kind is MediaKind.video:
            return f'<video><source src="{_attr(url)}" type="{_attr(mime or "")}" /></video>'

        try:
            return await self._preview_card(url)
        except (PreviewError, httpx.HTTPError) as exc:
            if not self.settings.readability_fallback:
                raise
            logger.info("Link preview failed for %s, trying readability: %s", url, exc)
            try:
                return await self.readability.extract(url)
            except (ResolutionError, httpx.HTTPError):
                logger.debug("Readability failed for %s", url, exc_info=True)
                raise exc

    async def _preview_card(self, url: str) -> str:
        preview = await self.previewer.preview(url)
        target = strip_query(url)
        return CARD_TEMPLATE.format(
            href=_attr(target),
            image=_attr(preview.image),
            title=html.escape(preview.title),
            caption=html.escape(target),
        )
