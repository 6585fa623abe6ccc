"""CLI entry point for Gmail Inbox Stats."""

from __future__ import annotations

import click

from . import __version__
from .auth import get_local_credentials
from .constants import INBOX_LIST_SIZE, INBOX_QUERY, PAGE_SIZE, POLL_INTERVAL_SECONDS, TOP_SENDERS_DEFAULT
from .display import (
    confirm_trash,
    console,
    create_progress,
    display_inbox,
    display_summary,
    display_top_senders,
)
from .exceptions import ListingFetchError, MessageFetchError, MessageTrashError
from .export import export_stats
from .extractor import extract_metadata
from .gmail_client import GmailMailboxClient, get_profile_email
from .log import setup_logging
from .processor import InboxProcessor


def _load_credentials():
    try:
        return get_local_credentials()
    except FileNotFoundError as e:
        raise click.ClickException(str(e)) from e


@click.group()
@click.version_option(version=__version__, prog_name="gmail-inbox-stats")
@click.option(
    "--log-level",
    default="WARNING",
    type=click.Choice(["DEBUG", "INFO", "WARNING", "ERROR"], case_sensitive=False),
    help="Log level for diagnostics on stderr.",
)
@click.option("--json-logs", is_flag=True, help="Emit logs as JSON lines.")
def cli(log_level: str, json_logs: bool) -> None:
    """Gmail Inbox Stats - sender, recipient and volume statistics for your Gmail."""
    setup_logging(json=json_logs, level=log_level)


@cli.command()
@click.option("--page-size", default=PAGE_SIZE, type=click.IntRange(1, 500), help="Messages per page (and parallel fetches).")
@click.option("-n", "--top", default=TOP_SENDERS_DEFAULT, type=click.IntRange(1), help="Number of top senders to show.")
@click.option("-o", "--export", "output", default=None, help="Also export the results to this file.")
@click.option(
    "--format",
    "fmt",
    type=click.Choice(["csv", "json"]),
    default="json",
    help="Export format when --export is given.",
)
def scan(page_size: int, top: int, output: str | None, fmt: str) -> None:
    """Scan your whole mailbox and show sender statistics."""
    credentials = _load_credentials()
    processor = InboxProcessor(GmailMailboxClient(credentials), identity_key="local", page_size=page_size)

    processor.start()
    try:
        with create_progress("Processing inbox") as progress:
            task = progress.add_task("processing", total=None)
            while not processor.wait(POLL_INTERVAL_SECONDS):
                progress.update(task, completed=processor.progress().total_processed)
            progress.update(task, completed=processor.progress().total_processed)
    except KeyboardInterrupt:
        console.print("[yellow]Interrupted, stopping after in-flight messages...[/yellow]")
        processor.cancel()
        processor.wait()

    run = processor.progress()
    snapshot = processor.stats_snapshot()
    senders = processor.top_senders(top)

    display_top_senders(senders)
    display_summary(snapshot, run)

    if output:
        export_stats(snapshot, senders, format=fmt, output_path=output)


@cli.command()
@click.option("-n", "--max-results", default=INBOX_LIST_SIZE, type=click.IntRange(1, 500), help="Number of messages to show.")
@click.option("-q", "--query", default=INBOX_QUERY, help="Gmail search query.")
def inbox(max_results: int, query: str) -> None:
    """List the newest messages in your inbox."""
    client = GmailMailboxClient(_load_credentials())
    try:
        refs = client.list_inbox(query=query, max_results=max_results)
        emails = [extract_metadata(client.get_message(ref["id"])) for ref in refs]
    except (ListingFetchError, MessageFetchError) as exc:
        raise click.ClickException(str(exc)) from exc

    if not emails:
        console.print("[dim]No messages found.[/dim]")
        return
    display_inbox(emails)


@cli.command()
@click.argument("message_id")
@click.option("-y", "--yes", is_flag=True, help="Skip the confirmation prompt.")
def trash(message_id: str, yes: bool) -> None:
    """Move a single message to trash."""
    client = GmailMailboxClient(_load_credentials())
    try:
        if not yes and not confirm_trash(extract_metadata(client.get_message(message_id))):
            console.print("[yellow]Cancelled.[/yellow]")
            return
        client.trash_message(message_id)
    except (MessageFetchError, MessageTrashError) as exc:
        raise click.ClickException(str(exc)) from exc
    console.print(f"[green]Email {message_id} moved to trash.[/green]")


@cli.command()
def auth() -> None:
    """Test Gmail authentication."""
    credentials = _load_credentials()
    try:
        email = get_profile_email(credentials)
    except Exception as exc:  # noqa: BLE001
        raise click.ClickException(f"Authentication failed: {exc}") from exc
    console.print(f"Authenticated as [bold]{email}[/bold]")
