"""Rich rendering of grouped triage results."""

from __future__ import annotations

from rich.console import Console
from rich.table import Table

from prtriage_core.models import ClassifiedPR, PullRequest

console = Console()

_BOT_DISPLAY_NAME = "DevinAI"


def display_author(pr: PullRequest, bot_login: str) -> str:
    """Show bot-authored PRs together with the human they are assigned to."""
    if pr.author != bot_login:
        return pr.author
    if pr.assignees:
        return f"{_BOT_DISPLAY_NAME} & {pr.assignees[0]}"
    return _BOT_DISPLAY_NAME


def render_groups(title: str, groups: dict, bot_login: str, show_owners: bool = True) -> int:
    """Print one table per non-empty group and return the number of PRs shown."""
    shown = 0
    console.print(f"\n[bold]{title}[/bold]")
    for bucket, items in groups.items():
        if not items:
            continue
        table = Table(title=f"{bucket.label} ({len(items)})", show_header=True, header_style="bold cyan")
        table.add_column("PR", style="bold", width=7)
        table.add_column("Title", max_width=50)
        table.add_column("Author")
        table.add_column("Age", justify="right")
        table.add_column("Stale", justify="right")
        if show_owners:
            table.add_column("Owners")

        for item in items:
            row = [
                f"#{item.pr.number}",
                item.pr.title,
                display_author(item.pr, bot_login),
                f"{item.age}d",
                f"{item.staleness}d" + (" [yellow]?[/yellow]" if item.partial else ""),
            ]
            if show_owners:
                row.append(", ".join(sorted(item.owning_teams)) or "—")
            table.add_row(*row)

        console.print(table)
        shown += len(items)
    return shown


def render_warnings(warnings: list[str]) -> None:
    for warning in warnings:
        console.print(f"[yellow]Warning:[/yellow] {warning}")
