"""Per-category fetch-and-cache controller behind every portal view."""

from __future__ import annotations

import asyncio
import logging
from enum import Enum
from typing import Callable, Protocol

from news_portal.models import (
    CATEGORIES,
    ArticleRecord,
    Category,
    SessionState,
    get_category,
)
from news_portal.news.newsapi_client import NewsAPIClient, NewsAPIError

logger = logging.getLogger(__name__)


class ArticleSource(Protocol):
    """Protocol for anything that can fetch a category's articles."""

    async def fetch_category(self, category_id: str) -> list[ArticleRecord]:
        """Fetch and normalize the articles for one category."""
        ...


class ResponsePolicy(Enum):
    """How overlapping responses for the same category are reconciled."""

    LAST_ARRIVED = "last_arrived"  # whichever response resolves last wins
    LAST_ISSUED = "last_issued"  # only the most recently dispatched request may write


Subscriber = Callable[["NewsStore"], None]


class NewsStore:
    """Owns the session state and mediates between views and NewsAPI.

    Views read :attr:`state` and call :meth:`select_category` or
    :meth:`refresh`. Both dispatch methods return immediately; any request
    they start runs as a task on the current event loop, so they must be
    called from a coroutine or a callback running on that loop.

    Attributes:
        policy: Reconciliation policy for overlapping responses.
    """

    def __init__(
        self,
        client: ArticleSource | None = None,
        policy: ResponsePolicy = ResponsePolicy.LAST_ARRIVED,
    ) -> None:
        """Initialize the store.

        Args:
            client: Article source. A :class:`NewsAPIClient` configured
                from the environment is created (and owned) when omitted.
            policy: Reconciliation policy for overlapping responses.
        """
        self._owns_client = client is None
        self._client: ArticleSource = client or NewsAPIClient()
        self.policy = policy
        self._state = SessionState()
        self._generations: dict[str, int] = {}
        self._tasks: set[asyncio.Task] = set()
        self._subscribers: list[Subscriber] = []
        self.started = False

    @property
    def state(self) -> SessionState:
        """Current session state. Views must treat it as read-only."""
        return self._state

    @property
    def categories(self) -> tuple[Category, ...]:
        return CATEGORIES

    @property
    def in_flight(self) -> int:
        """Number of fetches that have not resolved yet."""
        return len(self._tasks)

    # -- Observers --------------------------------------------------------

    def subscribe(self, callback: Subscriber) -> None:
        """Call ``callback(store)`` after every state change."""
        self._subscribers.append(callback)

    def unsubscribe(self, callback: Subscriber) -> None:
        if callback in self._subscribers:
            self._subscribers.remove(callback)

    def _notify(self) -> None:
        for callback in list(self._subscribers):
            callback(self)

    # -- Actions ----------------------------------------------------------

    def start(self) -> asyncio.Task | None:
        """Initial load: fetch the active category unless already cached."""
        task = self.select_category(self._state.active_category)
        self.started = True
        return task

    def select_category(self, category_id: str) -> asyncio.Task | None:
        """Make a category active, fetching it only if never fetched before.

        Returns:
            The fetch task, or None when the category was served from cache.

        Raises:
            InvalidCategory: If the id is not one of the fixed categories.
            RuntimeError: If no event loop is running; state is left unchanged.
        """
        get_category(category_id)
        asyncio.get_running_loop()
        self._state.active_category = category_id

        if category_id in self._state.cache:
            logger.debug("Category %s served from cache", category_id)
            self._notify()
            return None
        return self._fetch_category(category_id)

    def refresh(self) -> asyncio.Task:
        """Re-fetch the active category regardless of what is cached."""
        return self._fetch_category(self._state.active_category)

    async def wait_idle(self) -> None:
        """Wait until every in-flight fetch has resolved."""
        while self._tasks:
            await asyncio.gather(*self._tasks, return_exceptions=True)

    async def aclose(self) -> None:
        """Wait for outstanding fetches and close an owned client."""
        await self.wait_idle()
        if self._owns_client:
            await self._client.aclose()

    # -- Fetching ---------------------------------------------------------

    def _fetch_category(self, category_id: str) -> asyncio.Task:
        """Mark the session loading and schedule a fetch for a category."""
        loop = asyncio.get_running_loop()
        self._state.is_loading = True

        generation = self._generations.get(category_id, 0) + 1
        self._generations[category_id] = generation

        task = loop.create_task(self._run_fetch(category_id, generation))
        self._tasks.add(task)
        task.add_done_callback(self._tasks.discard)
        self._notify()
        return task

    def _is_superseded(self, category_id: str, generation: int) -> bool:
        if self.policy is not ResponsePolicy.LAST_ISSUED:
            return False
        return generation != self._generations.get(category_id)

    async def _run_fetch(self, category_id: str, generation: int) -> None:
        try:
            records = await self._client.fetch_category(category_id)
        except NewsAPIError as e:
            self._record_failure(category_id, generation, str(e))
        except Exception as e:
            logger.exception("Unexpected error fetching category %s", category_id)
            self._record_failure(category_id, generation, f"Failed to fetch news: {e}")
        else:
            self._record_success(category_id, generation, records)

    def _record_success(
        self, category_id: str, generation: int, records: list[ArticleRecord]
    ) -> None:
        if self._is_superseded(category_id, generation):
            logger.warning(
                "Discarding stale response for %s (request %d, latest %d)",
                category_id,
                generation,
                self._generations[category_id],
            )
            return

        self._state.cache[category_id] = records
        self._state.is_loading = False
        self._state.last_error = None
        logger.info("Cached %d articles for %s", len(records), category_id)
        self._notify()

    def _record_failure(self, category_id: str, generation: int, message: str) -> None:
        if self._is_superseded(category_id, generation):
            logger.warning(
                "Discarding stale failure for %s (request %d): %s",
                category_id,
                generation,
                message,
            )
            return

        logger.warning("Failed to fetch %s: %s", category_id, message)
        self._state.last_error = message or "Failed to fetch news"
        self._state.is_loading = False
        self._notify()
