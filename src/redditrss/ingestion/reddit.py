from __future__ import annotations

import logging
import re

import httpx
from pydantic import ValidationError

from redditrss.config import Settings
from redditrss.errors import (
    ListingDecodeError,
    LoginError,
    SubredditNotFound,
    SubredditPrivate,
    UpstreamError,
)
from redditrss.models import Listing

logger = logging.getLogger(__name__)

LISTING_PATH = re.compile(
    r"^/r/[a-z0-9_]+(?:\+[a-z0-9_]+)*(?:/(?:hot|new|rising|top|controversial|best))?/?\.json$",
    re.IGNORECASE,
)


def listing_json_path(path: str) -> str:
    path = "/" + path.lstrip("/")
    if ".json" in path:
        logger.warning("Appending .json to url path is deprecated. This will likely be removed in the future.")
        return path
    return path + ".json"


def is_listing_path(path: str) -> bool:
    return LISTING_PATH.match(path) is not None


class RedditClient:
    def __init__(self, client: httpx.AsyncClient, settings: Settings, token: str | None = None):
        self.client = client
        self.settings = settings
        self.token = token

    @property
    def base_url(self) -> str:
        if self.token:
            return self.settings.reddit_oauth_url
        return self.settings.reddit_api_url

    def _headers(self) -> dict[str, str]:
        headers = {"User-Agent": self.settings.user_agent}
        if self.token:
            headers["Authorization"] = f"bearer {self.token}"
        return headers

    async def login(self) -> str | None:
        """Fetch a bearer token with the password grant when an OAuth client is configured."""
        if not self.settings.oauth_client_id:
            return None

        try:
            response = await self.client.post(
                self.settings.reddit_token_url,
                data={
                    "grant_type": "password",
                    "username": self.settings.reddit_username,
                    "password": self.settings.reddit_password,
                },
                auth=(self.settings.oauth_client_id, self.settings.oauth_client_secret),
                headers={"User-Agent": self.settings.user_agent},
            )
            response.raise_for_status()
            token = response.json().get("access_token")
        except (httpx.HTTPError, ValueError) as exc:
            logger.error("Unable to login as %s: %s", self.settings.reddit_username, exc)
            raise LoginError("Unable to login. Check your credentials.") from exc

        if not token:
            logger.error("Token response for %s carried no access token", self.settings.reddit_username)
            raise LoginError("Unable to login. Check your credentials.")

        self.token = token
        return token

    async def fetch_listing(
        self, path: str, params: list[tuple[str, str]] | None = None
    ) -> Listing:
        json_path = listing_json_path(path)
        if not is_listing_path(json_path):
            raise SubredditNotFound()

        query = list(params or []) + [("sr_detail", "1")]
        try:
            response = await self.client.get(
                f"{self.base_url}{json_path}", params=query, headers=self._headers()
            )
        except httpx.HTTPError as exc:
            logger.error("HTTP: %s", exc)
            raise UpstreamError(str(exc)) from exc

        if response.status_code == 403:
            logger.error("Subreddit is private: %s", path)
            raise SubredditPrivate()

        # Reddit redirects unknown subreddits to a search page instead of 404ing.
        if response.status_code == 404 or not is_listing_path(response.url.path):
            logger.error("Subreddit not found: %s", path)
            raise SubredditNotFound()

        if response.is_error:
            logger.error("Reddit answered %s for %s", response.status_code, path)
            raise UpstreamError(f"Reddit answered {response.status_code}")

        try:
            return Listing.model_validate(response.json())
        except (ValueError, ValidationError) as exc:
            logger.error("JSON: %s", exc)
            raise ListingDecodeError(str(exc)) from exc
