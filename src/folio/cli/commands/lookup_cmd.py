# ABOUTME: The `folio lookup` command for resolving an ISBN into book metadata.
# ABOUTME: Prints the merged record as a table or JSON and can save the cover image.

import asyncio
import json
from pathlib import Path

import click
from rich.console import Console
from rich.table import Table

from folio.core.resolver import (
    BookNotFoundError,
    InvalidIsbnError,
    ResolutionTrace,
    create_resolver,
)
from folio.metadata.config import ProxyConfig
from folio.metadata.http import FolioHttpClient
from folio.metadata.types import BookRecord


async def _resolve(isbn: str, config: ProxyConfig) -> tuple[BookRecord, ResolutionTrace]:
    async with FolioHttpClient(config) as http_client:
        return await create_resolver(http_client, config).resolve_with_trace(isbn)


def _record_to_json(record: BookRecord, trace: ResolutionTrace) -> dict[str, object]:
    return {
        "isbn": trace.isbn,
        "title": record.title,
        "authors": record.authors,
        "publisher": record.publisher,
        "publishedDate": record.published_date,
        "language": record.language,
        "pageCount": record.page_count,
        "thumbnailBytes": len(record.thumbnail) if record.thumbnail else 0,
        "sources": trace.answered,
    }


def _render_table(console: Console, record: BookRecord, trace: ResolutionTrace) -> None:
    table = Table(show_header=False, box=None, pad_edge=False)
    table.add_column("Field", style="bold", width=12)
    table.add_column("Value")

    table.add_row("ISBN", trace.isbn)
    table.add_row("Title", record.title)
    table.add_row("Authors", record.authors)
    table.add_row("Publisher", record.publisher)
    table.add_row("Published", record.published_date)
    table.add_row("Language", record.language)
    table.add_row("Pages", str(record.page_count) if record.page_count else "?")
    if record.has_thumbnail:
        table.add_row("Cover", f"{len(record.thumbnail or b'')} bytes")
    else:
        table.add_row("Cover", "[dim]none[/dim]")
    table.add_row("Sources", ", ".join(trace.answered))

    console.print(table)
    if record.is_incomplete():
        console.print(
            f"[yellow]Partial record; unresolved: {', '.join(record.unresolved_fields())}[/yellow]"
        )


@click.command()
@click.argument("isbn")
@click.option(
    "--cover",
    "cover_path",
    type=click.Path(dir_okay=False, path_type=Path),
    default=None,
    help="Write the cover image to this file when one is found.",
)
@click.option("--json", "as_json", is_flag=True, default=False, help="Print the record as JSON.")
@click.option(
    "--proxy-base",
    default=None,
    help="Origin hosting the book-data proxies (default: $FOLIO_PROXY_BASE_URL).",
)
def lookup(isbn: str, cover_path: Path | None, as_json: bool, proxy_base: str | None) -> None:
    """Resolve ISBN into book metadata from Goodreads, Google Books and Hardcover."""
    console = Console(stderr=as_json)
    config = ProxyConfig.from_env(base_url=proxy_base)

    try:
        record, trace = asyncio.run(_resolve(isbn, config))
    except InvalidIsbnError as exc:
        console.print(f"[red]{exc}[/red]")
        raise SystemExit(2) from exc
    except BookNotFoundError as exc:
        console.print(f"[red]{exc}.[/red]")
        console.print("Book not found, enter details manually.")
        raise SystemExit(1) from exc

    if as_json:
        click.echo(json.dumps(_record_to_json(record, trace), indent=2))
    else:
        _render_table(console, record, trace)

    if cover_path is not None:
        if record.thumbnail:
            cover_path.write_bytes(record.thumbnail)
            if not as_json:
                console.print(f"Cover written to {cover_path}")
        else:
            console.print("[yellow]No cover image found; nothing written.[/yellow]")
