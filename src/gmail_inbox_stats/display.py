"""Rich-based display functions for Gmail Inbox Stats."""

from rich.console import Console
from rich.panel import Panel
from rich.progress import (
    Progress,
    SpinnerColumn,
    TextColumn,
    TimeElapsedColumn,
)
from rich.prompt import Prompt
from rich.table import Table

from .models import EmailMetadata
from .models import Progress as RunProgress
from .models import SenderSummary
from .stats import StatsSnapshot

console = Console()


def _format_bytes(size: int) -> str:
    """Return a human-readable size, e.g. 1536 -> '1.5 KB'."""
    value = float(size)
    for unit in ("B", "KB", "MB", "GB"):
        if value < 1024 or unit == "GB":
            return f"{value:.0f} {unit}" if unit == "B" else f"{value:.1f} {unit}"
        value /= 1024
    return f"{value:.1f} GB"


def display_top_senders(senders: list[SenderSummary]) -> None:
    """Display the top senders table, highest count first."""
    table = Table(title="Top Senders")
    table.add_column("#", justify="right", style="dim")
    table.add_column("Email")
    table.add_column("Count", justify="right")
    table.add_column("Size", justify="right")

    for idx, sender in enumerate(senders, start=1):
        table.add_row(
            str(idx),
            sender.email or "[dim](no sender)[/dim]",
            str(sender.count),
            _format_bytes(sender.total_bytes),
        )

    console.print(table)


def display_summary(snapshot: StatsSnapshot, progress: RunProgress) -> None:
    """Display totals for a finished (or interrupted) run."""
    lines = [
        f"[bold]Messages processed:[/bold] {snapshot.total_emails}",
        f"[bold]Distinct senders:[/bold] {len(snapshot.from_count)}",
        f"[bold]Distinct recipients:[/bold] {len(snapshot.to_count)}",
        f"[bold]Total size:[/bold] {_format_bytes(sum(snapshot.from_size.values()))}",
    ]

    busiest = snapshot.busiest_day()
    if busiest:
        lines.append(f"[bold]Busiest day:[/bold] {busiest[0]} ({busiest[1]} messages)")

    if progress.failed:
        lines.append(f"[yellow]Messages skipped after fetch errors: {progress.failed}[/yellow]")
    if progress.cancelled:
        lines.append("[yellow]Run was cancelled; results are partial.[/yellow]")
    if progress.error:
        lines.append(f"[red]Listing stopped early: {progress.error}[/red]")

    console.print(Panel("\n".join(lines), title="Summary"))


def create_progress(description: str) -> Progress:
    """Create a configured Rich Progress spinner."""
    return Progress(
        SpinnerColumn(),
        TextColumn(f"[bold blue]{description}"),
        TextColumn("{task.completed:.0f} messages"),
        TimeElapsedColumn(),
        console=console,
    )


def display_inbox(emails: list[EmailMetadata]) -> None:
    """Display the newest inbox messages, one row each."""
    table = Table(title="Inbox")
    table.add_column("ID", style="dim")
    table.add_column("From")
    table.add_column("Subject")
    table.add_column("Date")

    for email in emails:
        table.add_row(
            email.id,
            email.sender or "[dim](no sender)[/dim]",
            email.subject,
            email.date.strftime("%Y-%m-%d %H:%M") if email.date else "",
        )

    console.print(table)


def confirm_trash(email: EmailMetadata) -> bool:
    """Prompt the user to confirm trashing a single message."""
    lines = [
        f"[bold]From:[/bold] {email.sender}",
        f"[bold]Subject:[/bold] {email.subject}",
    ]
    console.print(Panel("\n".join(lines), title="Confirm Trash"))

    answer = Prompt.ask('[bold red]Type "TRASH" to confirm[/bold red]', console=console)
    return answer == "TRASH"
