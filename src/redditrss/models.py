from __future__ import annotations

import enum
from dataclasses import dataclass, field
from datetime import datetime

from pydantic import BaseModel


class _RedditModel(BaseModel):
    model_config = {"frozen": True, "extra": "ignore"}


class SubredditDetails(_RedditModel):
    title: str = ""
    public_description: str = ""
    community_icon: str = ""
    url: str = ""


class OEmbed(_RedditModel):
    type: str = ""
    html: str = ""


class Media(_RedditModel):
    oembed: OEmbed | None = None


class RedditVideo(_RedditModel):
    fallback_url: str = ""


class SecureMedia(_RedditModel):
    reddit_video: RedditVideo | None = None


class MediaSource(_RedditModel):
    u: str = ""
    gif: str = ""


class MediaMetadata(_RedditModel):
    status: str = ""
    s: MediaSource | None = None


class GalleryItem(_RedditModel):
    media_id: str


class GalleryData(_RedditModel):
    items: list[GalleryItem] = []


class Post(_RedditModel):
    id: str
    title: str = ""
    author: str = ""
    permalink: str = ""
    url: str = ""
    selftext: str = ""
    selftext_html: str | None = None
    created_utc: float = 0.0
    over_18: bool = False
    link_flair_text: str | None = None
    score: int = 0
    is_self: bool = False
    thumbnail: str = ""
    media: Media | None = None
    secure_media: SecureMedia | None = None
    media_metadata: dict[str, MediaMetadata] | None = None
    gallery_data: GalleryData | None = None
    crosspost_parent_list: list[Post] = []
    sr_detail: SubredditDetails | None = None

    @property
    def flair(self) -> str:
        return self.link_flair_text or ""

    @property
    def oembed(self) -> OEmbed | None:
        return self.media.oembed if self.media else None

    @property
    def reddit_video(self) -> RedditVideo | None:
        return self.secure_media.reddit_video if self.secure_media else None


class ListingChild(_RedditModel):
    kind: str = ""
    data: Post


class ListingData(_RedditModel):
    children: list[ListingChild] = []
    after: str | None = None
    before: str | None = None


class Listing(_RedditModel):
    kind: str = ""
    data: ListingData = ListingData()

    @property
    def posts(self) -> list[Post]:
        return [child.data for child in self.data.children]


class MediaKind(str, enum.Enum):
    image = "image"
    video = "video"
    unknown = "unknown"


@dataclass(frozen=True)
class EnrichmentKey:
    """Coalesces enrichment requests: two keys are equal iff their post ids are."""

    id: str
    post: Post = field(compare=False, hash=False, repr=False)

    @classmethod
    def for_post(cls, post: Post) -> EnrichmentKey:
        return cls(id=post.id, post=post)


@dataclass
class FeedImage:
    url: str
    title: str
    link: str


@dataclass
class FeedItem:
    title: str
    link: str
    author: str
    id: str
    created: datetime
    description: str = ""
    content: str = ""


@dataclass
class Feed:
    title: str
    link: str
    description: str
    image: FeedImage | None = None
    items: list[FeedItem] = field(default_factory=list)
