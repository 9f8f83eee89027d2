"""Tests for news_portal data models."""

from datetime import datetime, timezone

import pytest

from news_portal.models import (
    CATEGORIES,
    DEFAULT_CATEGORY,
    ArticleRecord,
    Category,
    InvalidCategory,
    SessionState,
    get_category,
)


class TestCategories:
    """Tests for the fixed category list."""

    def test_six_fixed_categories_in_order(self) -> None:
        assert [c.id for c in CATEGORIES] == [
            "headlines",
            "politics",
            "business",
            "sports",
            "entertainment",
            "health",
        ]
        assert DEFAULT_CATEGORY == "headlines"

    def test_category_is_immutable(self) -> None:
        with pytest.raises(AttributeError):
            CATEGORIES[0].id = "weather"  # type: ignore[misc]

    def test_get_category(self) -> None:
        assert get_category("sports") == Category("sports", "Sports")

    def test_get_unknown_category(self) -> None:
        with pytest.raises(InvalidCategory, match="Unknown category 'weather'"):
            get_category("weather")

    def test_invalid_category_is_value_error(self) -> None:
        assert issubclass(InvalidCategory, ValueError)


class TestArticleRecord:
    """Tests for ArticleRecord model."""

    def test_to_dict_and_from_dict(self) -> None:
        record = ArticleRecord(
            ordinal=3,
            title="Title",
            snippet="Snippet",
            source_name="The Hindu",
            url="https://thehindu.com/a",
            image_url="https://thehindu.com/a.jpg",
            published_at="2026-10-19T04:30:00Z",
        )

        restored = ArticleRecord.from_dict(record.to_dict())
        assert restored == record

    def test_published_time_parses_zulu(self) -> None:
        record = ArticleRecord.from_upstream(1, {"publishedAt": "2026-10-19T04:30:00Z"})
        assert record.published_time == datetime(2026, 10, 19, 4, 30, tzinfo=timezone.utc)

    def test_published_time_none_when_unparseable(self) -> None:
        assert ArticleRecord.from_upstream(1, {}).published_time is None
        assert ArticleRecord.from_upstream(1, {"publishedAt": "yesterday"}).published_time is None


class TestSessionState:
    """Tests for SessionState model."""

    def test_initial_state(self) -> None:
        state = SessionState()
        assert state.active_category == "headlines"
        assert state.cache == {}
        assert state.is_loading is True
        assert state.last_error is None
        assert state.active_articles is None

    def test_to_dict(self) -> None:
        record = ArticleRecord.from_upstream(1, {"title": "T"})
        state = SessionState(
            active_category="sports",
            cache={"sports": [record]},
            is_loading=False,
            last_error="boom",
        )

        data = state.to_dict()
        assert data["active_category"] == "sports"
        assert data["cache"]["sports"][0]["title"] == "T"
        assert data["is_loading"] is False
        assert data["last_error"] == "boom"
