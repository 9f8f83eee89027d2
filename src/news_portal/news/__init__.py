"""News fetching components."""

from news_portal.news.newsapi_client import (
    MalformedResponse,
    NetworkFailure,
    NewsAPIClient,
    NewsAPIError,
    RateLimitError,
    UpstreamFailure,
)

__all__ = [
    "NewsAPIClient",
    "NewsAPIError",
    "NetworkFailure",
    "UpstreamFailure",
    "RateLimitError",
    "MalformedResponse",
]
