"""Tests for the CLI interface."""

from __future__ import annotations

import json
from functools import partial
from unittest.mock import patch

import httpx
import pytest
from click.testing import CliRunner

from news_portal.cli.main import cli
from news_portal.news.newsapi_client import NewsAPIClient


def _handler(request: httpx.Request) -> httpx.Response:
    """Answer every category with one article named after it."""
    category = request.url.params.get("category", "headlines")
    if category == "health":
        return httpx.Response(500, text="boom")
    article = {"title": f"{category} story", "source": {"name": "PTI"}}
    return httpx.Response(200, json={"status": "ok", "articles": [article]})


def _client_factory(requests: list[httpx.Request] | None = None):
    def handler(request: httpx.Request) -> httpx.Response:
        if requests is not None:
            requests.append(request)
        return _handler(request)

    return partial(NewsAPIClient, api_key="test-key", transport=httpx.MockTransport(handler))


class TestCategoriesCommand:
    def test_lists_all_categories(self) -> None:
        runner = CliRunner()
        result = runner.invoke(cli, ["categories"])
        assert result.exit_code == 0
        for name in ("Headlines", "Politics", "Business", "Sports", "Entertainment", "Health"):
            assert name in result.output


class TestShowCommand:
    def test_show_text(self) -> None:
        requests: list[httpx.Request] = []
        with patch("news_portal.cli.main.NewsAPIClient", _client_factory(requests)):
            result = CliRunner().invoke(cli, ["show", "sports"])

        assert result.exit_code == 0
        assert "Sports Today" in result.output
        assert "1. sports story" in result.output
        assert len(requests) == 1
        assert requests[0].url.params["category"] == "sports"

    def test_show_json(self) -> None:
        with patch("news_portal.cli.main.NewsAPIClient", _client_factory()):
            result = CliRunner().invoke(cli, ["show", "business", "-j"])

        assert result.exit_code == 0
        data = json.loads(result.output)
        assert data["category"] == "business"
        assert data["article_count"] == 1
        assert data["articles"][0]["source_name"] == "PTI"
        assert data["error"] is None

    def test_show_failure_exits_nonzero(self) -> None:
        with patch("news_portal.cli.main.NewsAPIClient", _client_factory()):
            result = CliRunner().invoke(cli, ["show", "health"])

        assert result.exit_code == 1
        assert "Error loading news: NewsAPI returned HTTP 500" in result.output

    def test_show_unknown_category(self) -> None:
        result = CliRunner().invoke(cli, ["show", "weather"])
        assert result.exit_code == 2

    def test_show_without_api_key(self, monkeypatch: pytest.MonkeyPatch) -> None:
        monkeypatch.delenv("NEWSAPI_KEY", raising=False)
        result = CliRunner().invoke(cli, ["show", "sports"])
        assert result.exit_code == 1
        assert "NEWSAPI_KEY" in result.output


class TestBrowseCommand:
    def test_browse_session(self) -> None:
        requests: list[httpx.Request] = []
        with patch("news_portal.cli.main.NewsAPIClient", _client_factory(requests)):
            result = CliRunner().invoke(
                cli, ["browse"], input="sports\nheadlines\nr\nweather\nquit\n"
            )

        assert result.exit_code == 0
        assert "Interactive Mode" in result.output
        assert "Headlines Today" in result.output
        assert "Sports Today" in result.output
        assert "Unknown category 'weather'" in result.output
        assert "Goodbye!" in result.output
        # headlines on start, sports, cached headlines skipped, then refresh
        paths = [r.url.path for r in requests]
        assert paths == ["/v2/everything", "/v2/top-headlines", "/v2/everything"]

    def test_browse_skips_empty_input(self) -> None:
        with patch("news_portal.cli.main.NewsAPIClient", _client_factory()):
            result = CliRunner().invoke(cli, ["browse"], input="\nexit\n")
        assert result.exit_code == 0
        assert "Goodbye!" in result.output

    def test_browse_eof(self) -> None:
        with patch("news_portal.cli.main.NewsAPIClient", _client_factory()):
            result = CliRunner().invoke(cli, ["browse"], input="")
        assert result.exit_code == 0
        assert "Goodbye!" in result.output

    def test_browse_failure_shows_banner(self) -> None:
        with patch("news_portal.cli.main.NewsAPIClient", _client_factory()):
            result = CliRunner().invoke(cli, ["browse"], input="health\nq\n")
        assert result.exit_code == 0
        assert "Error loading news" in result.output

    def test_browse_policy_option(self) -> None:
        with patch("news_portal.cli.main.NewsAPIClient", _client_factory()):
            result = CliRunner().invoke(cli, ["browse", "--policy", "last_issued"], input="q\n")
        assert result.exit_code == 0
