"""CLI commands for the News Portal."""

from __future__ import annotations

import asyncio
import json
import logging
import sys

import click

from news_portal.models import CATEGORIES, InvalidCategory, SessionState
from news_portal.news.newsapi_client import NewsAPIClient
from news_portal.render import render_text
from news_portal.store import NewsStore, ResponsePolicy

_QUIT_WORDS = ("quit", "exit", "q")
_REFRESH_WORDS = ("r", "refresh")


@click.group()
@click.option("--verbose", "-v", is_flag=True, help="Enable debug logging.")
def cli(verbose: bool) -> None:
    """News Portal - Browse NewsAPI headlines by category."""
    logging.basicConfig(
        level=logging.DEBUG if verbose else logging.WARNING,
        format="%(asctime)s %(levelname)s %(name)s: %(message)s",
    )


@cli.command()
def categories() -> None:
    """List the available categories."""
    for category in CATEGORIES:
        click.echo(f"{category.id:<15} {category.display_name}")


@cli.command()
@click.argument("category", type=click.Choice([c.id for c in CATEGORIES]))
@click.option("--json-output", "-j", is_flag=True, help="Output as JSON")
def show(category: str, json_output: bool) -> None:
    """Fetch one category and print its articles.

    Example: news-portal show sports
    """
    try:
        state = asyncio.run(_fetch_once(category))
    except ValueError as e:
        click.echo(f"Error: {e}", err=True)
        sys.exit(1)

    if json_output:
        articles = [a.to_dict() for a in state.cache.get(category, [])]
        payload = {
            "category": category,
            "article_count": len(articles),
            "articles": articles,
            "error": state.last_error,
        }
        click.echo(json.dumps(payload, indent=2))
    else:
        click.echo(render_text(state))

    if state.last_error:
        sys.exit(1)


async def _fetch_once(category: str) -> SessionState:
    async with NewsAPIClient() as client:
        store = NewsStore(client=client)
        store.select_category(category)
        await store.wait_idle()
        return store.state


@cli.command()
@click.option(
    "--policy",
    type=click.Choice([p.value for p in ResponsePolicy]),
    default=ResponsePolicy.LAST_ARRIVED.value,
    help="How overlapping responses for one category are reconciled.",
)
def browse(policy: str) -> None:
    """Browse categories interactively.

    Type a category id to switch, 'r' to refresh, 'quit' to leave.
    """
    loop = asyncio.new_event_loop()
    try:
        try:
            client = NewsAPIClient()
        except ValueError as e:
            click.echo(f"Error: {e}", err=True)
            sys.exit(1)

        store = NewsStore(client=client, policy=ResponsePolicy(policy))
        click.echo("News Portal - Interactive Mode")
        click.echo(f"Categories: {', '.join(c.id for c in CATEGORIES)}")
        click.echo("Type 'r' to refresh, 'quit' or 'exit' to end the session.\n")

        loop.run_until_complete(_dispatch(store, store.start))
        click.echo(render_text(store.state) + "\n")

        while True:
            try:
                user_input = click.prompt("Category", prompt_suffix="> ")
            except (EOFError, KeyboardInterrupt, click.Abort):
                click.echo("\nGoodbye!")
                break

            command = user_input.strip().lower()
            if command in _QUIT_WORDS:
                click.echo("Goodbye!")
                break
            if not command:
                continue

            if command in _REFRESH_WORDS:
                action = store.refresh
            else:
                action = lambda: store.select_category(command)  # noqa: E731

            try:
                loop.run_until_complete(_dispatch(store, action))
            except InvalidCategory as e:
                click.echo(f"\nError: {e}\n", err=True)
                continue
            click.echo("\n" + render_text(store.state) + "\n")

        loop.run_until_complete(client.aclose())
    finally:
        loop.close()


async def _dispatch(store: NewsStore, action) -> None:
    """Run a store action on the loop and wait for its fetch to settle."""
    action()
    await store.wait_idle()
