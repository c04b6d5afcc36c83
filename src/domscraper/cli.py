"""
domscraper CLI - Command line interface.

Usage:
    domscraper serve --port 3037
    domscraper scrape https://example.com --selector "h1,h2" --deep
    domscraper convert page.html --selector "ul.menu" --deep
    domscraper meta https://example.com
"""

import asyncio
import json
from pathlib import Path
from typing import Any

import typer
from dotenv import load_dotenv
from rich.console import Console

from domscraper.config import DEFAULT_SELECTOR, DEFAULT_SETTLE_MS, Settings

# Load .env file if present
load_dotenv()

app = typer.Typer(
    name="domscraper",
    help="Scrape rendered pages into JSON",
    add_completion=False,
)

console = Console()


def _setup(verbose: bool) -> Settings:
    from domscraper.exceptions import ConfigurationError
    from domscraper.logging import setup_logging

    try:
        settings = Settings.from_env()
    except ConfigurationError as e:
        console.print(f"[red]Error: {e}[/red]")
        raise typer.Exit(1)

    setup_logging(level="DEBUG" if verbose else settings.log_level)
    return settings


def _print_json(data: Any) -> None:
    console.print_json(json.dumps(data, ensure_ascii=False))


@app.command()
def serve(
    host: str | None = typer.Option(None, "--host", help="Interface to bind"),
    port: int | None = typer.Option(None, "--port", "-p", help="Port to bind"),
    cdp_url: str | None = typer.Option(
        None, "--cdp-url", help="Chrome DevTools URL (empty to launch Chrome)"
    ),
    verbose: bool = typer.Option(False, "--verbose", "-v", help="Enable verbose logging"),
) -> None:
    """Run the HTTP API."""
    import uvicorn

    from domscraper.server import create_app

    settings = _setup(verbose)
    updates: dict[str, Any] = {}
    if host:
        updates["host"] = host
    if port:
        updates["port"] = port
    if cdp_url is not None:
        updates["cdp_url"] = cdp_url or None
    settings = settings.model_copy(update=updates)

    console.print(f"[bold]domscraper[/bold] listening on http://{settings.host}:{settings.port}")
    uvicorn.run(create_app(settings), host=settings.host, port=settings.port, log_config=None)


@app.command()
def scrape(
    url: str = typer.Argument(..., help="Page URL"),
    selector: str = typer.Option(DEFAULT_SELECTOR, "--selector", "-s", help="CSS selectors"),
    time: int = typer.Option(DEFAULT_SETTLE_MS, "--time", "-t", help="Settle delay in ms"),
    deep: bool = typer.Option(False, "--deep", help="Nested tag/class/id mappings"),
    complete: bool = typer.Option(False, "--complete", help="Outer HTML"),
    cdp_url: str | None = typer.Option(
        None, "--cdp-url", help="Chrome DevTools URL (empty to launch Chrome)"
    ),
    verbose: bool = typer.Option(False, "--verbose", "-v", help="Enable verbose logging"),
) -> None:
    """Scrape one page and print the result as JSON."""
    from domscraper.browser import BrowserConfig, BrowserSession
    from domscraper.exceptions import DomScraperError
    from domscraper.models import ScrapeRequest
    from domscraper.scrape import ScrapeService

    settings = _setup(verbose)
    config = BrowserConfig(
        cdp_url=settings.cdp_url if cdp_url is None else (cdp_url or None),
        navigation_timeout=settings.navigation_timeout,
    )
    service = ScrapeService(
        lambda: BrowserSession(config=config),
        navigation_timeout=settings.navigation_timeout,
    )

    try:
        request = ScrapeRequest(
            url=url, selector=selector, settle_ms=time, deep=deep, complete=complete
        )
        result = asyncio.run(service.scrape(request))
    except (DomScraperError, ValueError) as e:
        console.print(f"[red]Error: {e}[/red]")
        raise typer.Exit(1)

    _print_json(result.model_dump())


@app.command()
def convert(
    path: Path = typer.Argument(..., exists=True, dir_okay=False, help="Saved HTML file"),
    selector: str = typer.Option(DEFAULT_SELECTOR, "--selector", "-s", help="CSS selectors"),
    deep: bool = typer.Option(False, "--deep", help="Nested tag/class/id mappings"),
    complete: bool = typer.Option(False, "--complete", help="Outer HTML"),
    collision: str = typer.Option(
        "overwrite", "--collision", help="overwrite, merge_to_array or error"
    ),
) -> None:
    """Convert a saved HTML file without a browser."""
    from domscraper.dom import CollisionPolicy, DomConverter
    from domscraper.exceptions import ConversionError
    from domscraper.utils.url import split_selectors

    try:
        converter = DomConverter(collision_policy=CollisionPolicy(collision))
    except ValueError:
        console.print(f"[red]Error: unknown collision policy {collision!r}[/red]")
        raise typer.Exit(1)

    html = path.read_text(encoding="utf-8", errors="replace")
    try:
        results = converter.convert_many(
            html, split_selectors(selector), complete=complete, deep=deep
        )
    except ConversionError as e:
        console.print(f"[red]Error: {e}[/red]")
        raise typer.Exit(1)

    _print_json({"results": [result.model_dump() for result in results]})


@app.command()
def meta(
    url: str = typer.Argument(..., help="Page URL"),
    verbose: bool = typer.Option(False, "--verbose", "-v", help="Enable verbose logging"),
) -> None:
    """Fetch a page's metadata."""
    from domscraper.exceptions import MetadataError
    from domscraper.metadata import MetadataFetcher, MetadataService

    settings = _setup(verbose)
    service = MetadataService(
        MetadataFetcher(timeout=settings.metadata_timeout, user_agent=settings.user_agent)
    )

    try:
        metadata = asyncio.run(service.fetch(url))
    except MetadataError as e:
        console.print(f"[red]Error: {e.message} ({e.status or 400})[/red]")
        raise typer.Exit(1)

    _print_json(metadata)


@app.command()
def version() -> None:
    """Show version information."""
    from domscraper import __version__

    console.print(f"domscraper v{__version__}")


def main() -> None:
    """Main entry point."""
    app()


if __name__ == "__main__":
    main()
