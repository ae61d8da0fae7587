from __future__ import annotations

import re
from dataclasses import dataclass

from redditrss.models import Post

INTEGER = re.compile(r"[+-]?\d+", re.ASCII)


def parse_score_limit(value: str | None) -> int | None:
    if value is None or not INTEGER.fullmatch(value):
        return None
    return int(value)


@dataclass(frozen=True)
class FeedFilters:
    safe: bool = False
    score_limit: int | None = None
    flair: str | None = None

    @classmethod
    def from_query(
        cls,
        safe: str | None = None,
        score_limit: str | None = None,
        flair: str | None = None,
    ) -> FeedFilters:
        return cls(
            safe=(safe or "").lower() == "true",
            score_limit=parse_score_limit(score_limit),
            flair=flair or None,
        )

    def matches(self, post: Post) -> bool:
        if self.safe and (post.over_18 or post.flair.lower() == "nsfw"):
            return False
        if self.score_limit is not None and post.score < self.score_limit:
            return False
        if self.flair is not None and post.flair != self.flair:
            return False
        return True

    def apply(self, posts: list[Post]) -> list[Post]:
        return [post for post in posts if self.matches(post)]
