"""Data models for the News Portal."""

from __future__ import annotations

from dataclasses import dataclass, field
from datetime import datetime

NO_TITLE = "No Title Available"
NO_DESCRIPTION = "No description available"
UNKNOWN_SOURCE = "Unknown Source"
PLACEHOLDER_IMAGE = "/api/placeholder/300/200"


class InvalidCategory(ValueError):
    """Category id outside the fixed category list."""

    pass


@dataclass(frozen=True)
class Category:
    """A fixed news topic the portal can display."""

    id: str
    display_name: str

    def to_dict(self) -> dict:
        """Serialize to a JSON-compatible dict."""
        return {"id": self.id, "display_name": self.display_name}


CATEGORIES: tuple[Category, ...] = (
    Category("headlines", "Headlines"),
    Category("politics", "Politics"),
    Category("business", "Business"),
    Category("sports", "Sports"),
    Category("entertainment", "Entertainment"),
    Category("health", "Health"),
)

DEFAULT_CATEGORY = "headlines"

_CATEGORIES_BY_ID = {c.id: c for c in CATEGORIES}


def get_category(category_id: str) -> Category:
    """Look up a category by id.

    Raises:
        InvalidCategory: If the id is not one of the fixed categories.
    """
    try:
        return _CATEGORIES_BY_ID[category_id]
    except KeyError:
        valid = ", ".join(_CATEGORIES_BY_ID)
        raise InvalidCategory(
            f"Unknown category '{category_id}'. Expected one of: {valid}"
        ) from None


def _text(value: object, fallback: str) -> str:
    """Upstream string field, or the fallback when empty or not a string."""
    if not isinstance(value, str) or not value:
        return fallback
    return value


@dataclass
class ArticleRecord:
    """One normalized news item, fallbacks already applied."""

    ordinal: int  # 1-based position within its fetch batch
    title: str
    snippet: str
    source_name: str
    url: str
    image_url: str
    published_at: str  # ISO timestamp as sent upstream

    @classmethod
    def from_upstream(cls, ordinal: int, item: dict) -> ArticleRecord:
        """Build a record from one raw NewsAPI article object."""
        source = item.get("source")
        source_name = source.get("name") if isinstance(source, dict) else None
        return cls(
            ordinal=ordinal,
            title=_text(item.get("title"), NO_TITLE),
            snippet=_text(item.get("description"), NO_DESCRIPTION),
            source_name=_text(source_name, UNKNOWN_SOURCE),
            url=_text(item.get("url"), ""),
            image_url=_text(item.get("urlToImage"), PLACEHOLDER_IMAGE),
            published_at=_text(item.get("publishedAt"), ""),
        )

    @property
    def published_time(self) -> datetime | None:
        """Parsed publication time, or None if the timestamp is unusable."""
        try:
            return datetime.fromisoformat(self.published_at.replace("Z", "+00:00"))
        except (ValueError, TypeError):
            return None

    def to_dict(self) -> dict:
        """Serialize to a JSON-compatible dict."""
        return {
            "ordinal": self.ordinal,
            "title": self.title,
            "snippet": self.snippet,
            "source_name": self.source_name,
            "url": self.url,
            "image_url": self.image_url,
            "published_at": self.published_at,
        }

    @classmethod
    def from_dict(cls, data: dict) -> ArticleRecord:
        """Deserialize from a dict."""
        return cls(
            ordinal=data["ordinal"],
            title=data["title"],
            snippet=data["snippet"],
            source_name=data["source_name"],
            url=data["url"],
            image_url=data["image_url"],
            published_at=data["published_at"],
        )


@dataclass
class SessionState:
    """Everything a view needs to render the portal.

    Attributes:
        active_category: Id of the category currently displayed.
        cache: Category id to the most recent successfully fetched records.
            A missing key means the category was never fetched.
        is_loading: True while a fetch is outstanding.
        last_error: Message from the most recent failed fetch, if any.
    """

    active_category: str = DEFAULT_CATEGORY
    cache: dict[str, list[ArticleRecord]] = field(default_factory=dict)
    is_loading: bool = True
    last_error: str | None = None

    @property
    def active_articles(self) -> list[ArticleRecord] | None:
        """Records for the active category, None if never fetched."""
        return self.cache.get(self.active_category)

    def to_dict(self) -> dict:
        """Serialize to a JSON-compatible dict."""
        return {
            "active_category": self.active_category,
            "cache": {
                key: [a.to_dict() for a in records]
                for key, records in self.cache.items()
            },
            "is_loading": self.is_loading,
            "last_error": self.last_error,
        }
