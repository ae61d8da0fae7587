from __future__ import annotations


class FeedError(Exception):
    """An error that fails the whole feed request with an HTTP status."""

    status_code = 500

    def __init__(self, message: str, status_code: int | None = None):
        super().__init__(message)
        self.message = message
        if status_code is not None:
            self.status_code = status_code


class UpstreamError(FeedError):
    status_code = 500


class ListingDecodeError(FeedError):
    status_code = 500


class LoginError(FeedError):
    status_code = 500


class SubredditNotFound(FeedError):
    status_code = 404

    def __init__(self, message: str = "Subreddit not found."):
        super().__init__(message)


class SubredditPrivate(FeedError):
    status_code = 403

    def __init__(self, message: str = "Subreddit is private."):
        super().__init__(message)


class ResolutionError(Exception):
    """A single post's content could not be resolved."""


class VideoMissing(ResolutionError):
    def __init__(self, message: str = "video missing from json"):
        super().__init__(message)


class PreviewError(ResolutionError):
    pass
