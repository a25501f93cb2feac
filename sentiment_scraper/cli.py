"""Command line interface for the sentiment scraper."""

import asyncio
import functools
import sys
from typing import Optional, Tuple

import click
from rich.console import Console
from rich.progress import Progress, SpinnerColumn, TextColumn
from rich.table import Table

from .config import settings
from .core.cache import ContentCache
from .core.http_client import PageFetcher
from .extractors.registry import create_default_registry
from .services.content_service import ContentService
from .utils.logging_config import setup_logging


console = Console()


def async_command(f):
    """Decorator to run async CLI commands."""
    @functools.wraps(f)
    def wrapper(*args, **kwargs):
        return asyncio.run(f(*args, **kwargs))
    return wrapper


async def run_batch(urls, concurrency: Optional[int]):
    async with PageFetcher() as fetcher:
        service = ContentService(fetcher, registry=create_default_registry(fetcher), cache=ContentCache())
        return await service.process_batch(urls, concurrency)


@click.group()
@click.version_option(version="1.0.0")
@click.option('--log-level', default=None, help='Override LOG_LEVEL')
def cli(log_level: Optional[str]):
    """Sentiment scraper - article extraction for news URLs."""
    setup_logging(log_level or settings.log_level)


@cli.command()
@click.argument('url')
@click.option('--full', is_flag=True, help='Print the whole content instead of a preview')
@async_command
async def extract(url: str, full: bool):
    """Fetch and extract a single URL."""
    console.print(f"[cyan]Extracting:[/cyan] {url}")
    batch = await run_batch([url], 1)
    result = batch.results[0]

    if not result.ok:
        console.print(f"[red]❌ {result.error_type.value}:[/red] {result.error}")
        sys.exit(1)

    content = result.content
    preview = content if full or len(content) <= 400 else content[:400] + '...'
    table = Table(title="Extraction Result")
    table.add_column("Field", style="cyan")
    table.add_column("Value")
    table.add_row("Extractor", str(result.extractor))
    table.add_row("Title", str(result.title))
    table.add_row("Author", str(result.author))
    table.add_row("Published", str(result.published_date))
    table.add_row("Length", str(len(content)))
    table.add_row("Content", preview)
    console.print(table)


@cli.command()
@click.argument('urls', nargs=-1)
@click.option('--file', '-f', 'url_file', type=click.File('r'), help='File with one URL per line')
@click.option('--concurrency', '-c', default=None, type=int, help='Concurrent fetches (1-10)')
@async_command
async def batch(urls: Tuple[str, ...], url_file, concurrency: Optional[int]):
    """Fetch and extract many URLs."""
    url_list = list(urls)
    if url_file is not None:
        url_list.extend(line.strip() for line in url_file if line.strip() and not line.startswith('#'))
    if not url_list:
        console.print("[yellow]No URLs given.[/yellow]")
        sys.exit(1)

    with Progress(
        SpinnerColumn(),
        TextColumn("[progress.description]{task.description}"),
        console=console,
    ) as progress:
        task = progress.add_task(f"Processing {len(url_list)} URLs...", total=None)
        result = await run_batch(url_list, concurrency)
        progress.update(task, description="✅ Batch completed!")

    table = Table(title="Batch Results")
    table.add_column("URL", style="cyan", overflow="fold")
    table.add_column("Status")
    table.add_column("Extractor")
    table.add_column("Chars", justify="right")
    table.add_column("Error")
    for item in result.results:
        status = "[green]success[/green]" if item.ok else f"[red]{item.error_type.value}[/red]"
        table.add_row(item.url, status, item.extractor or "-", str(len(item.content)), item.error or "")
    console.print(table)

    stats = result.stats
    console.print(
        f"\n[bold]Total:[/bold] {stats.total}  [green]successful:[/green] {stats.successful}  "
        f"[red]failed:[/red] {stats.failed}  cached: {stats.cached}  concurrency: {stats.concurrency}"
    )


@cli.command()
def extractors():
    """List registered site extractors."""
    registry = create_default_registry()
    table = Table(title="Site Extractors")
    table.add_column("Name", style="cyan")
    table.add_column("Domains")
    for info in registry.get_extractor_info():
        table.add_row(info['name'], ', '.join(info['domains']))
    console.print(table)


@cli.command()
@click.option('--host', default='0.0.0.0', help='Bind address')
@click.option('--port', default=8000, type=int, help='Bind port')
@click.option('--reload', is_flag=True, help='Auto-reload on code changes')
def serve(host: str, port: int, reload: bool):
    """Run the HTTP API."""
    import uvicorn
    uvicorn.run("sentiment_scraper.main:app", host=host, port=port, reload=reload)


if __name__ == '__main__':
    cli()
