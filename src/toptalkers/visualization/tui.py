"""Textual TUI dashboard for live top-address tracking.

Launch with:
    toptalkers tail --tui /var/log/nginx/access.log
    python -c "from toptalkers.visualization.tui import run_dashboard; run_dashboard('access.log')"

Requires: textual>=0.47
"""
from __future__ import annotations

import logging
from pathlib import Path
from typing import ClassVar

from textual.app import App, ComposeResult
from textual.binding import Binding
from textual.reactive import reactive
from textual.widgets import DataTable, Footer, Header, Static

from ..ingest import LogFollower
from ..tracking.ip_tracker import TopIps

logger = logging.getLogger(__name__)


class StatsBar(Static):
    """Status bar showing request totals and tail state."""

    total: reactive[int] = reactive(0)
    distinct: reactive[int] = reactive(0)
    skipped: reactive[int] = reactive(0)
    state: reactive[str] = reactive("LIVE")

    def render(self) -> str:
        colour = "green" if self.state == "LIVE" else "yellow"
        return (
            f"[{colour}]{self.state}[/{colour}]  "
            f"[bold cyan]Requests:[/bold cyan] {self.total}  "
            f"[bold cyan]Distinct:[/bold cyan] {self.distinct}  "
            f"[bold red]Skipped:[/bold red] {self.skipped}"
        )


class TopAddressTable(DataTable):
    """Ranked table of the busiest addresses."""

    BORDER_TITLE = "Top Addresses"

    def on_mount(self) -> None:
        self.add_columns("#", "Address", "Requests")
        self.cursor_type = "none"

    def update_top(self, top: list[tuple[str, int]]) -> None:
        self.clear()
        for rank, (address, count) in enumerate(top, start=1):
            self.add_row(str(rank), address, str(count))


class TopDashboard(App[None]):
    """Full-screen TUI dashboard tailing an access log.

    Keybindings:
        q / ctrl+c  — quit
        p           — pause / resume tailing
        r           — reset all counts
    """

    CSS = """
    Screen {
        layout: vertical;
    }
    TopAddressTable {
        border: round $primary;
        height: 1fr;
    }
    StatsBar {
        dock: bottom;
        height: 1;
        background: $surface;
        color: $text;
        padding: 0 1;
    }
    """

    BINDINGS: ClassVar[list[Binding]] = [
        Binding("q", "quit", "Quit"),
        Binding("p", "toggle_pause", "Pause/Resume"),
        Binding("r", "reset", "Reset"),
    ]

    def __init__(
        self,
        log_path: str,
        capacity: int | None = None,
        poll_interval: float = 0.25,
        fmt: str = "auto",
        field: str | None = None,
    ) -> None:
        super().__init__()
        self._path = Path(log_path)
        self._poll_interval = poll_interval
        self._field = field
        self._paused = False
        self._fmt = fmt
        self._follower: LogFollower | None = None
        self._tracker = TopIps(capacity)
        self._skipped = 0

    @property
    def tracker(self) -> TopIps:
        return self._tracker

    def compose(self) -> ComposeResult:
        yield Header(show_clock=True)
        yield TopAddressTable(id="top_table")
        yield StatsBar(id="stats_bar")
        yield Footer()

    def on_mount(self) -> None:
        # Only count requests that arrive after startup
        self._follower = LogFollower(self._path, fmt=self._fmt, field=self._field)
        self.title = f"toptalkers — {self._path.name}"
        self.set_interval(self._poll_interval, self._poll_file)

    def _poll_file(self) -> None:
        if self._paused:
            return
        try:
            stats = self._follower.poll(self._tracker)
        except OSError as exc:
            logger.warning("Cannot read %s: %s", self._path, exc)
            return
        if not stats.entries:
            return

        self._skipped += stats.invalid + stats.missing
        self._refresh_view()

    def _refresh_view(self) -> None:
        self.query_one("#top_table", TopAddressTable).update_top(self._tracker.top())
        bar = self.query_one("#stats_bar", StatsBar)
        bar.total = self._tracker.total
        bar.distinct = self._tracker.distinct
        bar.skipped = self._skipped

    def action_toggle_pause(self) -> None:
        self._paused = not self._paused
        self.query_one("#stats_bar", StatsBar).state = "PAUSED" if self._paused else "LIVE"

    def action_reset(self) -> None:
        self._tracker.clear()
        self._skipped = 0
        self._refresh_view()


def run_dashboard(
    log_path: str,
    capacity: int | None = None,
    poll_interval: float = 0.25,
    fmt: str = "auto",
    field: str | None = None,
) -> None:
    """Entry point for the TUI dashboard."""
    app = TopDashboard(
        log_path=log_path,
        capacity=capacity,
        poll_interval=poll_interval,
        fmt=fmt,
        field=field,
    )
    app.run()
