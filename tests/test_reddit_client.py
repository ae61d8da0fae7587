import httpx
import pytest

from redditrss.errors import (
    ListingDecodeError,
    LoginError,
    SubredditNotFound,
    SubredditPrivate,
    UpstreamError,
)
from redditrss.ingestion.reddit import RedditClient, is_listing_path, listing_json_path


def _client(handler) -> httpx.AsyncClient:
    return httpx.AsyncClient(transport=httpx.MockTransport(handler), follow_redirects=True)


class TestListingPaths:
    def test_appends_json_suffix(self):
        assert listing_json_path("/r/Python") == "/r/Python.json"
        assert listing_json_path("r/Python/top") == "/r/Python/top.json"

    def test_keeps_existing_suffix(self):
        assert listing_json_path("/r/Python.json") == "/r/Python.json"

    @pytest.mark.parametrize(
        "path",
        ["/r/Python.json", "/r/learn_python/.json", "/r/python+rust.json", "/r/Python/top.json", "/r/AskReddit/new/.json"],
    )
    def test_accepts_listing_shapes(self, path):
        assert is_listing_path(path)

    @pytest.mark.parametrize(
        "path",
        ["/subreddits/search.json", "/user/spez.json", "/r/Python/comments/abc.json", "/r/.json", "/r/Python"],
    )
    def test_rejects_other_shapes(self, path):
        assert not is_listing_path(path)


class TestFetchListing:
    async def test_requests_json_with_subreddit_details(self, settings, listing_json, post_data):
        seen = []

        def handler(request):
            seen.append(request)
            return httpx.Response(200, json=listing_json(post_data(id="a"), post_data(id="b")))

        async with _client(handler) as http:
            listing = await RedditClient(http, settings).fetch_listing("/r/Python", [("t", "week")])

        assert [p.id for p in listing.posts] == ["a", "b"]
        (request,) = seen
        assert request.url.host == "www.reddit.com"
        assert request.url.path == "/r/Python.json"
        assert request.url.params["sr_detail"] == "1"
        assert request.url.params["t"] == "week"
        assert request.headers["user-agent"] == "reddit-rss 1.0"
        assert "authorization" not in request.headers

    async def test_bearer_token_switches_to_oauth_host(self, settings, listing_json, post_data):
        seen = []

        def handler(request):
            seen.append(request)
            return httpx.Response(200, json=listing_json(post_data()))

        async with _client(handler) as http:
            await RedditClient(http, settings, token="tok").fetch_listing("/r/Python")

        assert seen[0].url.host == "oauth.reddit.com"
        assert seen[0].headers["authorization"] == "bearer tok"

    async def test_private_subreddit(self, settings):
        async with _client(lambda request: httpx.Response(403, json={"reason": "private"})) as http:
            with pytest.raises(SubredditPrivate) as exc_info:
                await RedditClient(http, settings).fetch_listing("/r/secret")
        assert exc_info.value.status_code == 403
        assert exc_info.value.message == "Subreddit is private."

    async def test_redirect_to_search_is_not_found(self, settings):
        def handler(request):
            if request.url.path == "/r/doesnotexist.json":
                return httpx.Response(302, headers={"location": "https://www.reddit.com/subreddits/search.json?q=doesnotexist"})
            return httpx.Response(200, json={"kind": "Listing", "data": {"children": []}})

        async with _client(handler) as http:
            with pytest.raises(SubredditNotFound):
                await RedditClient(http, settings).fetch_listing("/r/doesnotexist")

    async def test_non_listing_path_is_rejected_before_fetching(self, settings):
        def handler(request):
            raise AssertionError("should not fetch")

        async with _client(handler) as http:
            with pytest.raises(SubredditNotFound):
                await RedditClient(http, settings).fetch_listing("/user/spez")

    async def test_malformed_json(self, settings):
        async with _client(lambda request: httpx.Response(200, text="<html>not json</html>")) as http:
            with pytest.raises(ListingDecodeError):
                await RedditClient(http, settings).fetch_listing("/r/Python")

    async def test_unexpected_shape(self, settings):
        body = {"kind": "Listing", "data": {"children": [{"kind": "t3", "data": {"title": "no id"}}]}}
        async with _client(lambda request: httpx.Response(200, json=body)) as http:
            with pytest.raises(ListingDecodeError):
                await RedditClient(http, settings).fetch_listing("/r/Python")

    async def test_transport_error(self, settings):
        def handler(request):
            raise httpx.ConnectError("dns failure", request=request)

        async with _client(handler) as http:
            with pytest.raises(UpstreamError) as exc_info:
                await RedditClient(http, settings).fetch_listing("/r/Python")
        assert exc_info.value.status_code == 500

    async def test_server_error(self, settings):
        async with _client(lambda request: httpx.Response(503, text="down")) as http:
            with pytest.raises(UpstreamError):
                await RedditClient(http, settings).fetch_listing("/r/Python")


class TestLogin:
    async def test_skipped_without_oauth_client(self, settings):
        def handler(request):
            raise AssertionError("should not fetch")

        async with _client(handler) as http:
            client = RedditClient(http, settings)
            assert await client.login() is None
        assert client.base_url == "https://www.reddit.com"

    async def test_password_grant(self, settings):
        settings.oauth_client_id = "client"
        settings.oauth_client_secret = "secret"
        settings.reddit_username = "user"
        settings.reddit_password = "hunter2"
        seen = []

        def handler(request):
            seen.append(request)
            return httpx.Response(200, json={"access_token": "tok", "token_type": "bearer"})

        async with _client(handler) as http:
            client = RedditClient(http, settings)
            assert await client.login() == "tok"

        request = seen[0]
        assert str(request.url) == "https://www.reddit.com/api/v1/access_token"
        assert request.headers["authorization"].startswith("Basic ")
        assert b"grant_type=password" in request.content
        assert b"username=user" in request.content
        assert client.base_url == "https://oauth.reddit.com"

    async def test_rejected_credentials(self, settings):
        settings.oauth_client_id = "client"
        async with _client(lambda request: httpx.Response(401, json={"error": 401})) as http:
            with pytest.raises(LoginError, match="Check your credentials"):
                await RedditClient(http, settings).login()

    async def test_missing_token_in_response(self, settings):
        settings.oauth_client_id = "client"
        async with _client(lambda request: httpx.Response(200, json={"error": "invalid_grant"})) as http:
            with pytest.raises(LoginError):
                await RedditClient(http, settings).login()
