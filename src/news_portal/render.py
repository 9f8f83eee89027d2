"""Renderers: pure functions from session state to page output.

Both HTML themes go through :func:`render_page`; a theme is only a palette.
"""

from __future__ import annotations

from dataclasses import dataclass
from datetime import date
from html import escape
from typing import Callable

from news_portal.models import (
    CATEGORIES,
    PLACEHOLDER_IMAGE,
    ArticleRecord,
    SessionState,
    get_category,
)

Renderer = Callable[[SessionState], str]

SITE_NAME = "Bharat News"
TAGLINE = "India's Premier News Portal"
EMPTY_MESSAGE = "No news articles available for this category."
LOADING_MESSAGE = "Loading latest news..."


@dataclass(frozen=True)
class Palette:
    """Colours for one visual theme."""

    name: str
    page_bg: str
    surface: str
    text: str
    muted: str
    accent: str
    accent_hover: str
    on_accent: str
    error_bg: str
    error_text: str


CLASSIC = Palette(
    name="classic",
    page_bg="#f9fafb",
    surface="#ffffff",
    text="#111827",
    muted="#6b7280",
    accent="#b91c1c",
    accent_hover="#dc2626",
    on_accent="#ffffff",
    error_bg="#fee2e2",
    error_text="#b91c1c",
)

MIDNIGHT = Palette(
    name="midnight",
    page_bg="#0f172a",
    surface="#1e293b",
    text="#f1f5f9",
    muted="#94a3b8",
    accent="#f59e0b",
    accent_hover="#fbbf24",
    on_accent="#0f172a",
    error_bg="#451a03",
    error_text="#fde68a",
)


def format_long_date(day: date) -> str:
    """'19 October 2026' style date for the masthead."""
    return f"{day.day} {day:%B %Y}"


def format_published_time(article: ArticleRecord) -> str:
    """12-hour local clock time of publication, empty if unknown."""
    published = article.published_time
    if published is None:
        return ""
    return published.astimezone().strftime("%I:%M %p").lower()


def _styles(p: Palette) -> str:
    return f"""
      body {{ margin: 0; font-family: system-ui, sans-serif; background: {p.page_bg}; color: {p.text}; }}
      header.masthead {{ display: flex; justify-content: space-between; align-items: center;
        padding: 16px 24px; background: {p.surface}; box-shadow: 0 1px 4px rgba(0,0,0,.15); }}
      header.masthead h1 {{ margin: 0; color: {p.accent}; font-size: 28px; }}
      header.masthead .tagline, header.masthead .date {{ color: {p.muted}; font-size: 14px; }}
      nav {{ position: sticky; top: 0; display: flex; gap: 4px; overflow-x: auto;
        padding: 12px 16px; background: {p.accent}; }}
      nav form {{ margin: 0; }}
      nav button {{ border: 0; border-radius: 6px; padding: 8px 16px; font-weight: 600;
        background: transparent; color: {p.on_accent}; cursor: pointer; }}
      nav button:hover {{ background: {p.accent_hover}; }}
      nav button.active {{ background: {p.surface}; color: {p.accent}; }}
      main {{ padding: 32px 16px; }}
      .heading {{ display: flex; justify-content: space-between; align-items: center; }}
      .refresh {{ border: 0; border-radius: 6px; padding: 8px 16px; background: {p.accent};
        color: {p.on_accent}; cursor: pointer; }}
      .banner {{ background: {p.error_bg}; color: {p.error_text}; padding: 12px 16px;
        border-radius: 6px; margin-bottom: 24px; }}
      .loading, .empty {{ text-align: center; padding: 80px 0; color: {p.muted}; }}
      .grid {{ display: grid; gap: 24px; grid-template-columns: repeat(auto-fill, minmax(300px, 1fr)); }}
      .card {{ display: block; background: {p.surface}; color: inherit; text-decoration: none;
        border-radius: 8px; overflow: hidden; box-shadow: 0 1px 4px rgba(0,0,0,.15); }}
      .card img {{ width: 100%; height: 192px; object-fit: cover; }}
      .card .body {{ padding: 16px; }}
      .card .snippet {{ color: {p.muted}; font-size: 14px; }}
      .card .meta {{ display: flex; justify-content: space-between; font-size: 12px; }}
      .card .source {{ color: {p.accent}; font-weight: 600; }}
      footer {{ text-align: center; padding: 24px; color: {p.muted}; background: {p.surface}; }}
    """


def _render_card(article: ArticleRecord) -> str:
    title = escape(article.title)
    return f"""
        <a class="card" href="{escape(article.url)}" target="_blank" rel="noopener noreferrer">
          <img src="{escape(article.image_url)}" alt="{title}"
               onerror="this.onerror=null;this.src='{PLACEHOLDER_IMAGE}';" />
          <div class="body">
            <h3>{title}</h3>
            <p class="snippet">{escape(article.snippet)}</p>
            <div class="meta">
              <span class="source">{escape(article.source_name)}</span>
              <span class="time">{format_published_time(article)}</span>
            </div>
          </div>
        </a>"""


def _render_content(state: SessionState) -> str:
    if state.is_loading:
        return f'<div class="loading">{LOADING_MESSAGE}</div>'

    articles = state.active_articles
    if not articles:
        return f'<div class="empty"><p>{EMPTY_MESSAGE}</p></div>'

    cards = "".join(_render_card(a) for a in articles)
    return f'<div class="grid">{cards}</div>'


def render_page(
    state: SessionState,
    palette: Palette = CLASSIC,
    today: date | None = None,
) -> str:
    """Render the full portal page for the active category."""
    today = today or date.today()
    active = get_category(state.active_category)
    query = f"?theme={palette.name}"

    nav_items = []
    for category in CATEGORIES:
        css = ' class="active"' if category.id == active.id else ""
        nav_items.append(
            f'<form method="post" action="/categories/{category.id}/select{query}">'
            f'<button type="submit"{css}>{escape(category.display_name)}</button>'
            "</form>"
        )

    nav_html = "".join(nav_items)

    banner = ""
    if state.last_error:
        banner = f'<div class="banner"><p>Error loading news: {escape(state.last_error)}</p></div>'

    return f"""<!DOCTYPE html>
<html>
  <head>
    <meta charset="utf-8" />
    <title>{SITE_NAME}: {escape(active.display_name)}</title>
    <style>{_styles(palette)}</style>
  </head>
  <body class="theme-{palette.name}">
    <header class="masthead">
      <div>
        <h1>{SITE_NAME}</h1>
        <span class="tagline">{TAGLINE}</span>
      </div>
      <span class="date">{format_long_date(today)}</span>
    </header>
    <nav>{nav_html}</nav>
    <main>
      <div class="heading">
        <h2>{escape(active.display_name)} Today</h2>
        <form method="post" action="/refresh{query}">
          <button class="refresh" type="submit">Refresh</button>
        </form>
      </div>
      {banner}
      {_render_content(state)}
    </main>
    <footer>&copy; {today.year} {SITE_NAME}. All rights reserved.</footer>
  </body>
</html>
"""


def render_text(state: SessionState) -> str:
    """Plain-text rendering for terminals."""
    active = get_category(state.active_category)
    lines = [f"{active.display_name} Today", "=" * 40]

    if state.last_error:
        lines.append(f"Error loading news: {state.last_error}")

    if state.is_loading:
        lines.append(LOADING_MESSAGE)
        return "\n".join(lines)

    articles = state.active_articles
    if not articles:
        lines.append(EMPTY_MESSAGE)
        return "\n".join(lines)

    for article in articles:
        when = format_published_time(article)
        suffix = f" ({when})" if when else ""
        lines.append(f"{article.ordinal}. {article.title}")
        lines.append(f"   {article.source_name}{suffix}")
        lines.append(f"   {article.snippet}")
        if article.url:
            lines.append(f"   {article.url}")
    return "\n".join(lines)


THEMES: dict[str, Renderer] = {
    CLASSIC.name: lambda state: render_page(state, CLASSIC),
    MIDNIGHT.name: lambda state: render_page(state, MIDNIGHT),
    "text": render_text,
}


def get_renderer(theme: str) -> Renderer:
    """Look up a renderer by theme name.

    Raises:
        ValueError: If no renderer is registered under that name.
    """
    try:
        return THEMES[theme]
    except KeyError:
        raise ValueError(
            f"Unknown theme '{theme}'. Expected one of: {', '.join(THEMES)}"
        ) from None
