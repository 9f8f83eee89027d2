"""FastAPI server rendering the News Portal in a browser."""

from __future__ import annotations

import logging
import os
from contextlib import asynccontextmanager
from typing import Any, AsyncIterator

from fastapi import FastAPI, HTTPException
from fastapi.responses import HTMLResponse, RedirectResponse
from pydantic import BaseModel

from news_portal.models import CATEGORIES, InvalidCategory
from news_portal.render import Renderer, get_renderer
from news_portal.store import NewsStore

logger = logging.getLogger(__name__)

_DEFAULT_THEME = os.environ.get("NEWS_PORTAL_THEME", "classic")

# One store per process: a single-user session shared by every request.
_store: NewsStore | None = None


def _get_store() -> NewsStore:
    """Get or create the process-wide store, starting its initial load."""
    global _store
    if _store is None:
        _store = NewsStore()
        logger.info("Created news store")
    if not _store.started:
        _store.start()
    return _store


def _get_renderer(theme: str | None) -> Renderer:
    try:
        return get_renderer(theme or _DEFAULT_THEME)
    except ValueError as e:
        raise HTTPException(status_code=404, detail=str(e))


def _check_default_theme() -> None:
    """Fail fast when NEWS_PORTAL_THEME names no registered renderer."""
    try:
        get_renderer(_DEFAULT_THEME)
    except ValueError as e:
        raise ValueError(f"Invalid NEWS_PORTAL_THEME: {e}") from None


@asynccontextmanager
async def lifespan(app: FastAPI) -> AsyncIterator[None]:
    global _store
    _check_default_theme()
    if _store is None:
        _store = NewsStore()
        logger.info("Created news store")
    yield
    if _store is not None:
        await _store.aclose()


app = FastAPI(
    title="News Portal",
    description="Category news grid backed by NewsAPI",
    version="0.1.0",
    lifespan=lifespan,
)


# ---------------------------------------------------------------------------
# Response Models
# ---------------------------------------------------------------------------


class HealthResponse(BaseModel):
    """Response model for health check."""

    status: str
    service: str


class CategoryResponse(BaseModel):
    id: str
    display_name: str


class StateResponse(BaseModel):
    """Snapshot of the session state."""

    active_category: str
    cache: dict[str, list[dict[str, Any]]]
    is_loading: bool
    last_error: str | None = None
    in_flight: int


def _state_response(store: NewsStore) -> StateResponse:
    return StateResponse(**store.state.to_dict(), in_flight=store.in_flight)


def _after_action(store: NewsStore, theme: str | None) -> StateResponse | RedirectResponse:
    """Redirect browser form posts back to the page, answer JSON otherwise."""
    if theme is not None:
        _get_renderer(theme)
        return RedirectResponse(url=f"/?theme={theme}", status_code=303)
    return _state_response(store)


# ---------------------------------------------------------------------------
# Endpoints
# ---------------------------------------------------------------------------


@app.get("/health", response_model=HealthResponse)
def health_check() -> HealthResponse:
    """Health check endpoint."""
    return HealthResponse(status="healthy", service="news-portal")


@app.get("/categories", response_model=list[CategoryResponse])
def list_categories() -> list[CategoryResponse]:
    """The fixed category list, in display order."""
    return [CategoryResponse(**c.to_dict()) for c in CATEGORIES]


@app.get("/", response_class=HTMLResponse)
async def portal(theme: str | None = None, wait: bool = True) -> str:
    """Render the active category.

    With ``wait`` (the default) the page is rendered once outstanding
    fetches resolve; otherwise it shows whatever state is current.
    """
    renderer = _get_renderer(theme)
    store = _get_store()
    if wait:
        await store.wait_idle()
    return renderer(store.state)


@app.get("/state", response_model=StateResponse)
async def get_state(wait: bool = False) -> StateResponse:
    """JSON snapshot of the session state."""
    store = _get_store()
    if wait:
        await store.wait_idle()
    return _state_response(store)


@app.post("/categories/{category_id}/select", response_model=None)
async def select_category(
    category_id: str, theme: str | None = None, wait: bool = False
) -> StateResponse | RedirectResponse:
    """Make a category active, fetching it if it was never fetched."""
    store = _get_store()
    try:
        store.select_category(category_id)
    except InvalidCategory as e:
        raise HTTPException(status_code=404, detail=str(e))

    if wait:
        await store.wait_idle()
    return _after_action(store, theme)


@app.post("/refresh", response_model=None)
async def refresh(
    theme: str | None = None, wait: bool = False
) -> StateResponse | RedirectResponse:
    """Re-fetch the active category."""
    store = _get_store()
    store.refresh()
    if wait:
        await store.wait_idle()
    return _after_action(store, theme)
