from .base import BaseFeed, RawFeedItem
from .exceptions import FeedFetchError, InvalidFeedError, TechNewsError
from .rss import FeedFetcher
from .service import FeedService

__all__ = [
    "BaseFeed",
    "RawFeedItem",
    "FeedFetcher",
    "FeedService",
    "FeedFetchError",
    "InvalidFeedError",
    "TechNewsError",
]
