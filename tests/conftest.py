import itertools

import pytest

from redditrss.config import Settings
from redditrss.models import Listing, Post

SR_DETAIL = {
    "title": "Python",
    "public_description": "News about the programming language Python.",
    "community_icon": "https://styles.redditmedia.com/t5_2qh0y/styles/communityIcon_abc.png?width=256&s=123",
    "url": "/r/Python/",
}


def _post_data(**overrides) -> dict:
    post_id = overrides.pop("id", "abc123")
    data = {
        "id": post_id,
        "title": f"Post {post_id}",
        "author": "spez",
        "permalink": f"/r/Python/comments/{post_id}/post/",
        "url": f"https://example.com/{post_id}",
        "selftext": "",
        "selftext_html": None,
        "created_utc": 1700000000.0,
        "over_18": False,
        "link_flair_text": None,
        "score": 10,
        "is_self": False,
        "thumbnail": "https://b.thumbs.redditmedia.com/thumb.jpg",
    }
    data.update(overrides)
    return data


@pytest.fixture
def settings():
    return Settings(_env_file=None, oauth_client_id="", reddit_username="", reddit_password="")


@pytest.fixture
def post_data():
    return _post_data


@pytest.fixture
def make_post():
    def _make(**overrides) -> Post:
        return Post.model_validate(_post_data(**overrides))

    return _make


@pytest.fixture
def listing_json():
    """Build a raw listing body; the first child carries sr_detail like Reddit's sr_detail=1."""
    counter = itertools.count()

    def _make(*children: dict, with_detail: bool = True) -> dict:
        wrapped = []
        for child in children:
            data = dict(child)
            if with_detail:
                data.setdefault("sr_detail", SR_DETAIL)
            wrapped.append({"kind": "t3", "data": data})
        return {
            "kind": "Listing",
            "data": {"children": wrapped, "after": f"t3_after{next(counter)}", "before": None},
        }

    return _make


@pytest.fixture
def make_listing(listing_json):
    def _make(*children: dict, with_detail: bool = True) -> Listing:
        return Listing.model_validate(listing_json(*children, with_detail=with_detail))

    return _make
