"""toptalkers CLI — entry point.

Commands:
    toptalkers top      <file>   Top N client addresses in a log file
    toptalkers tail     <file>   Live top N (refreshing table or TUI)
    toptalkers snapshot          Show the snapshot last published to Redis
    toptalkers bench             Run the record/top performance study
"""
from __future__ import annotations

import json
import logging
import sys
import time
from pathlib import Path

import click
from rich.console import Console
from rich.live import Live
from rich.logging import RichHandler

from .config import settings
from .ingest import IngestStats, LogFollower, feed_file
from .parsers.auto_detect import FORMATS
from .tracking.ip_tracker import InvalidAddressError, TopIps

console = Console()
err_console = Console(stderr=True)

_format_option = click.option(
    "--format", "-f", "fmt", default=settings.default_format,
    type=click.Choice(FORMATS, case_sensitive=False),
    help="Input format (default: auto-detect).",
    show_default=True,
)
_top_option = click.option(
    "--top", "-t", "top_n", default=settings.top_count, type=click.IntRange(min=0),
    help="How many addresses to keep.", show_default=True,
)
_field_option = click.option(
    "--field", default=settings.address_field,
    help="Entry field holding the client address.", show_default=True,
)


def _setup_logging(verbose: bool) -> None:
    level = logging.DEBUG if verbose else settings.log_level.upper()
    logging.basicConfig(
        level=level,
        format="%(message)s",
        handlers=[RichHandler(console=err_console, show_path=False)],
    )


def _abort_invalid(exc: InvalidAddressError, file: Path) -> None:
    err_console.print(
        f"[red]{exc}[/red] in {file.name}. "
        "Use --skip-invalid to log and skip malformed addresses."
    )
    sys.exit(1)


def _stats_line(stats: IngestStats, tracker: TopIps) -> str:
    line = (
        f"[dim]{stats.recorded} requests from {tracker.distinct} distinct addresses"
        f" ({stats.entries} entries"
    )
    if stats.missing:
        line += f", {stats.missing} without address"
    if stats.invalid:
        line += f", {stats.invalid} invalid"
    return line + ")[/dim]"


# ── CLI root ─────────────────────────────────────────────────────────────────


@click.group()
@click.version_option(version="1.0.0", prog_name="toptalkers")
@click.option("--verbose", "-v", is_flag=True, help="Debug logging on stderr.")
def main(verbose: bool) -> None:
    """toptalkers — the busiest client addresses in your access logs."""
    _setup_logging(verbose)


# ── top ──────────────────────────────────────────────────────────────────────


@main.command()
@click.argument("file", type=click.Path(exists=True, dir_okay=False, path_type=Path))
@_top_option
@_format_option
@_field_option
@click.option(
    "--output", "-o", "output_fmt", default="table",
    type=click.Choice(["table", "chart", "json"], case_sensitive=False),
    help="Output format.",
    show_default=True,
)
@click.option("--skip-invalid", is_flag=True, help="Log and skip malformed addresses instead of aborting.")
@click.option("--publish", is_flag=True, help="Publish the result to Redis for dashboards.")
def top(
    file: Path,
    top_n: int,
    fmt: str,
    field: str,
    output_fmt: str,
    skip_invalid: bool,
    publish: bool,
) -> None:
    """Show the addresses making the most requests in a log file.

    Auto-detects format from content (JSON, Apache/Nginx, plain address list).

    \b
    Examples:
      toptalkers top access.log
      toptalkers top access.log --top 10 --output chart
      toptalkers top app.json --field client_ip --output json
      toptalkers top access.log --skip-invalid --publish
    """
    from .visualization.tables import print_bar_chart, print_top_table

    tracker = TopIps(top_n)
    try:
        stats = feed_file(tracker, str(file), fmt=fmt, field=field, skip_invalid=skip_invalid)
    except InvalidAddressError as exc:
        _abort_invalid(exc, file)
        return

    result = tracker.top()

    if publish:
        from .publish.redis_snapshot import SnapshotPublisher

        publisher = SnapshotPublisher(
            url=settings.redis_url, ttl=settings.snapshot_ttl, name=settings.snapshot_name
        )
        if publisher.publish(result):
            err_console.print(f"[dim]Published snapshot to {publisher.key}[/dim]")
        else:
            err_console.print("[yellow]Snapshot not published (Redis unavailable).[/yellow]")

    if output_fmt == "json":
        click.echo(json.dumps([{"address": a, "requests": c} for a, c in result]))
        err_console.print(_stats_line(stats, tracker))
        return

    if output_fmt == "chart":
        print_bar_chart(result, title=f"Top {top_n} addresses in {file.name}")
    else:
        print_top_table(result, title=f"Top {top_n} addresses in {file.name}", total=tracker.total)
    console.print(_stats_line(stats, tracker))


# ── tail ─────────────────────────────────────────────────────────────────────


@main.command()
@click.argument("file", type=click.Path(path_type=Path))
@_top_option
@_format_option
@_field_option
@click.option("--tui", is_flag=True, help="Launch full Textual TUI dashboard.")
@click.option(
    "--interval", default=settings.poll_interval, type=float,
    help="Poll interval in seconds.", show_default=True,
)
@click.option(
    "--refresh", default=settings.refresh_interval, type=float,
    help="Table redraw interval in seconds.", show_default=True,
)
def tail(
    file: Path,
    top_n: int,
    fmt: str,
    field: str,
    tui: bool,
    interval: float,
    refresh: float,
) -> None:
    """Live top addresses for a growing log file.

    Only requests appended after startup are counted. Malformed addresses are
    logged and skipped so a single bad line cannot stop the tail.

    \b
    Examples:
      toptalkers tail /var/log/nginx/access.log
      toptalkers tail /var/log/nginx/access.log --top 20 --refresh 5
      toptalkers tail /var/log/nginx/access.log --tui
    """
    if tui:
        try:
            from .visualization.tui import run_dashboard
        except ImportError:
            err_console.print(
                "[red]Textual is not installed.[/red] Install it with:\n"
                "  pip install 'toptalkers[tui]'"
            )
            sys.exit(1)
        run_dashboard(str(file), capacity=top_n, poll_interval=interval, fmt=fmt, field=field)
        return

    from .visualization.tables import build_top_table

    tracker = TopIps(top_n)
    stats = IngestStats()

    if not file.exists():
        # Wait for file to appear (useful for docker log paths)
        err_console.print(f"[yellow]Waiting for {file} to appear…[/yellow]")
        while not file.exists():
            time.sleep(interval)

    err_console.print(f"[dim]Tailing {file} (Ctrl+C to stop)[/dim]")
    follower = LogFollower(file, fmt=fmt, field=field)
    last_draw = 0.0

    def _render():
        return build_top_table(tracker.top(), title=f"Top {top_n} addresses — {file.name}", total=tracker.total)

    try:
        with Live(_render(), console=console, auto_refresh=False) as live:
            while True:
                rotations = follower.rotations
                stats = stats.merge(follower.poll(tracker))
                if follower.rotations != rotations:
                    err_console.print("[yellow]— log rotated —[/yellow]")

                now = time.monotonic()
                if now - last_draw >= refresh:
                    live.update(_render(), refresh=True)
                    last_draw = now
                time.sleep(interval)
    except KeyboardInterrupt:
        console.print(_stats_line(stats, tracker))
        console.print("[dim]Stopped.[/dim]")


# ── snapshot ─────────────────────────────────────────────────────────────────


@main.command()
@click.option("--name", default=settings.snapshot_name, help="Snapshot name.", show_default=True)
@click.option(
    "--output", "-o", "output_fmt", default="table",
    type=click.Choice(["table", "json"], case_sensitive=False),
    show_default=True,
)
def snapshot(name: str, output_fmt: str) -> None:
    """Show the top addresses last published with `top --publish`."""
    from .publish.redis_snapshot import SnapshotPublisher
    from .visualization.tables import print_top_table

    publisher = SnapshotPublisher(url=settings.redis_url, ttl=settings.snapshot_ttl, name=name)
    result = publisher.fetch()
    if result is None:
        err_console.print(f"[yellow]No snapshot published under {publisher.key}.[/yellow]")
        sys.exit(1)

    if output_fmt == "json":
        click.echo(json.dumps([{"address": a, "requests": c} for a, c in result]))
    else:
        print_top_table(result, title=f"Snapshot {name!r}")


# ── bench ────────────────────────────────────────────────────────────────────


@main.command()
@click.option("--events", "-n", default=1_000_000, type=click.IntRange(min=1), show_default=True,
              help="Number of recorded requests.")
@click.option("--octet-limit", default=255, type=click.IntRange(0, 255), show_default=True,
              help="Upper bound of each random octet (controls distinct addresses).")
@_top_option
@click.option("--baseline-size", default=1_000_000, type=click.IntRange(min=1), show_default=True,
              help="Table size for the rejected-alternative baselines.")
@click.option("--json", "as_json", is_flag=True, help="Emit raw JSON results.")
def bench(events: int, octet_limit: int, top_n: int, baseline_size: int, as_json: bool) -> None:
    """Measure request_handled throughput and top() latency.

    \b
    Examples:
      toptalkers bench
      toptalkers bench --events 10000000 --octet-limit 100
    """
    from rich.table import Table

    from .perf.benchmark import run_study

    with console.status("Running performance study…"):
        results = run_study(
            n_events=events, octet_limit=octet_limit, capacity=top_n, baseline_size=baseline_size
        )

    if as_json:
        click.echo(json.dumps(results))
        return

    record, top_stats, baselines = results["record"], results["top"], results["baselines"]
    tbl = Table(title=f"Performance study (top {results['capacity']})")
    tbl.add_column("Measurement", style="bold")
    tbl.add_column("Value", justify="right", style="cyan")
    tbl.add_row("requests recorded", f"{record['events']:,}")
    tbl.add_row("distinct addresses", f"{record['distinct']:,}")
    tbl.add_row("request_handled / sec", f"{record['events_per_sec']:,}")
    tbl.add_row("µs / request_handled", f"{record['usec_per_event']}")
    tbl.add_row("top() mean ms", f"{top_stats['mean_ms']}")
    tbl.add_row("top() max ms", f"{top_stats['max_ms']}")
    tbl.add_row(f"build {baselines['size']:,}-entry table ms", f"{baselines['build_table_ms']}")
    tbl.add_row(f"max scan {baselines['size']:,}-entry table ms", f"{baselines['linear_max_scan_ms']}")
    console.print(tbl)


if __name__ == "__main__":
    main()
