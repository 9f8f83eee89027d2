"""News Portal - Category news grid backed by NewsAPI."""

from news_portal.store import NewsStore

__all__ = ["NewsStore"]
