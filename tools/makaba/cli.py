"""CLI entry-point for the Makaba client."""

from __future__ import annotations

import logging
import sys
from typing import NoReturn

import click
from rich.console import Console
from rich.logging import RichHandler
from rich.markup import escape
from rich.table import Table

from .api import MakabaClient
from .catalog import CatalogReader
from .config import MakabaConfig
from .errors import MakabaError
from .models import LocalPath, RemoteURL, SortMode, ThreadNotFound
from .posting import PostBuilder

console = Console()


def _setup_logging(verbose: bool) -> None:
    level = logging.DEBUG if verbose else logging.INFO
    logging.basicConfig(
        level=level,
        format="%(message)s",
        datefmt="[%X]",
        handlers=[RichHandler(rich_tracebacks=True, console=console)],
    )
    # Suppress noisy libraries
    logging.getLogger("httpx").setLevel(logging.WARNING)
    logging.getLogger("httpcore").setLevel(logging.WARNING)


def _fail(message: str) -> NoReturn:
    console.print(f"[red]✗[/red] {escape(message)}")
    sys.exit(1)


@click.group()
@click.option("--host", envvar="MAKABA_HOST", default="2ch.hk", help="Imageboard host")
@click.option("--timeout", envvar="MAKABA_TIMEOUT", default=30.0, type=float, help="HTTP timeout in seconds")
@click.option("-v", "--verbose", is_flag=True, help="Enable debug logging")
@click.pass_context
def cli(ctx: click.Context, host: str, timeout: float, verbose: bool) -> None:
    """Makaba client – post to and read from a Makaba imageboard."""
    _setup_logging(verbose)
    ctx.ensure_object(dict)
    ctx.obj["cfg"] = MakabaConfig(host=host, timeout=timeout)


def _make_client(ctx: click.Context) -> MakabaClient:
    # "transport" is only ever set by callers embedding the CLI (tests)
    return MakabaClient(ctx.obj["cfg"], transport=ctx.obj.get("transport"))


# ─── Commands ────────────────────────────────────────────────────


@cli.command()
@click.argument("board")
@click.option("--thread", help="Thread number to reply to (omit to start a thread)")
@click.option("--name", help="Poster name")
@click.option("--email", help="Email / sage field")
@click.option("--subject", help="Post subject")
@click.option("--comment", help="Post text")
@click.option("--file", "files", multiple=True, type=click.Path(dir_okay=False), help="Local file to attach")
@click.option("--url", "urls", multiple=True, help="Remote file to attach")
@click.option("--passcode", envvar="MAKABA_PASSCODE", default=None, help="Passcode to authenticate with")
@click.pass_context
def post(
    ctx: click.Context,
    board: str,
    thread: str | None,
    name: str | None,
    email: str | None,
    subject: str | None,
    comment: str | None,
    files: tuple[str, ...],
    urls: tuple[str, ...],
    passcode: str | None,
) -> None:
    """Submit a post.

    Example: makaba post b --thread 12345 --comment "hello" --file 1.png
    """
    with _make_client(ctx) as client, PostBuilder(client) as p:
        p.board(board)
        for setter, value in ((p.thread, thread), (p.name, name), (p.email, email),
                              (p.subject, subject), (p.comment, comment)):
            if value is not None:
                setter(value)
        p.attach(*(LocalPath(f) for f in files), *(RemoteURL(u) for u in urls))
        for err in p.errors:
            console.print(f"[yellow]![/yellow] Skipped attachment {escape(str(err))}")

        if passcode and not p.authenticate(passcode):
            _fail("Passcode auth failed, nothing was posted")

        try:
            result = p.submit()
        except MakabaError as exc:
            _fail(f"Posting failed: {exc}")

        if not result.ok:
            _fail(f"Posting failed: {result.error}")
        elif result.redirect:
            console.print(f"[green]✓[/green] Redirected to /{board}/{result.num}")
        else:
            console.print(f"[green]✓[/green] Posted /{board}/{result.num}")


@cli.command()
@click.argument("board")
@click.option("--sort", type=click.Choice(["threads", "bump", "date"]), default="threads", help="Listing order")
@click.option("--limit", default=20, type=int, help="Number of threads to show (0 = all)")
@click.pass_context
def catalog(ctx: click.Context, board: str, sort: str, limit: int) -> None:
    """Show a board's thread listing.

    Example: makaba catalog b --sort bump --limit 5
    """
    with _make_client(ctx) as client, CatalogReader(board, client) as reader:
        try:
            listing = reader.fetch(SortMode.parse(sort))
        except MakabaError as exc:
            _fail(f"Could not read /{board}/: {exc}")

        table = Table(title=f"/{listing.board}/ {sort}", show_header=True, header_style="bold cyan")
        table.add_column("No", style="bold", justify="right")
        table.add_column("Subject", max_width=40)
        table.add_column("Posts", justify="right")
        table.add_column("Views", justify="right")
        table.add_column("Score", justify="right")
        threads = listing.threads[:limit] if limit > 0 else listing.threads
        for t in threads:
            table.add_row(t.num, escape(t.subject), str(t.posts_count), str(t.views), f"{t.score:.2f}")
        console.print(table)


@cli.command()
@click.argument("board")
@click.argument("keyword")
@click.pass_context
def find(ctx: click.Context, board: str, keyword: str) -> None:
    """Find the first thread whose subject contains KEYWORD.

    Example: makaba find b "music"
    """
    with _make_client(ctx) as client, CatalogReader(board, client) as reader:
        try:
            match = reader.find_thread(keyword)
        except MakabaError as exc:
            _fail(f"Could not read /{board}/: {exc}")
        if isinstance(match, ThreadNotFound):
            _fail(match.message)
        console.print(f"[green]✓[/green] /{board}/{match.num} {escape(match.subject)}")


def main() -> None:
    cli()


if __name__ == "__main__":
    main()
