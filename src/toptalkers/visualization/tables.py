"""Rich-powered table and bar chart rendering for top-address results."""
from __future__ import annotations

from rich import box
from rich.console import Console
from rich.table import Table

_console = Console()


def build_top_table(
    top: list[tuple[str, int]],
    title: str = "Top addresses",
    total: int | None = None,
) -> Table:
    """Build a Rich table for a ``TopIps.top()`` result.

    Args:
        top:    ``(address, count)`` pairs, busiest first.
        title:  Table title shown in the header.
        total:  Total recorded requests; adds a "Share" column when given.
    """
    table = Table(title=title, box=box.SIMPLE_HEAVY)
    table.add_column("#", style="dim", width=4)
    table.add_column("Address")
    table.add_column("Requests", justify="right", style="cyan")
    if total:
        table.add_column("Share", justify="right", style="dim")

    for rank, (address, count) in enumerate(top, start=1):
        row = [str(rank), address, str(count)]
        if total:
            row.append(f"{count / total * 100:.1f}%")
        table.add_row(*row)

    return table


def print_top_table(
    top: list[tuple[str, int]],
    title: str = "Top addresses",
    total: int | None = None,
    console: Console | None = None,
) -> None:
    """Render a ``TopIps.top()`` result as a Rich table."""
    out = console or _console
    if not top:
        out.print("[yellow]No addresses recorded.[/yellow]")
        return
    out.print(build_top_table(top, title=title, total=total))


def print_bar_chart(
    top: list[tuple[str, int]],
    title: str = "Requests by address",
    width: int = 40,
    console: Console | None = None,
) -> None:
    """Print a bar chart using Rich markup.

    Each bar is scaled relative to the busiest address.

    Args:
        top:    ``(address, count)`` pairs, busiest first.
        title:  Printed as a heading above the chart.
        width:  Maximum bar width in characters.
    """
    out = console or _console
    if not top:
        out.print("[yellow]No data for chart.[/yellow]")
        return

    max_val = top[0][1] or 1
    max_label = max(len(address) for address, _ in top)

    out.print(f"\n[bold]{title}[/bold]")
    for address, count in top:
        bar = "█" * int(count / max_val * width)
        pct = count / max_val * 100
        out.print(
            f"  {address:<{max_label}}  [green]{bar:<{width}}[/green]"
            f"  [cyan]{count:>8}[/cyan] [dim]({pct:.1f}%)[/dim]"
        )
    out.print()
