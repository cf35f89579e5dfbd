"""Feed parsed log entries into a :class:`TopIps` tracker.

A log line that carries no address (a comment, a health-check banner, a JSON
record without any address key) is not an observation and is merely counted
as ``missing``. A line whose address is present but malformed is an error:
by default it aborts ingestion, because dropping it silently would leave the
counts wrong without anyone noticing. ``skip_invalid=True`` turns that into a
logged warning per line.
"""
from __future__ import annotations

import logging
from dataclasses import dataclass
from pathlib import Path
from typing import Iterable

from .config import settings
from .parsers.auto_detect import AutoDetectParser, get_parser
from .parsers.base import LogEntry
from .tracking.ip_tracker import InvalidAddressError, TopIps

logger = logging.getLogger(__name__)


@dataclass
class IngestStats:
    """Tally of what happened to each entry during ingestion."""

    entries: int = 0
    recorded: int = 0
    missing: int = 0
    invalid: int = 0

    def merge(self, other: IngestStats) -> IngestStats:
        return IngestStats(
            entries=self.entries + other.entries,
            recorded=self.recorded + other.recorded,
            missing=self.missing + other.missing,
            invalid=self.invalid + other.invalid,
        )


def feed_entries(
    tracker: TopIps,
    entries: Iterable[LogEntry],
    field: str | None = None,
    skip_invalid: bool = False,
) -> IngestStats:
    """Record the address found under ``field`` of every entry.

    Args:
        tracker:      Destination tracker.
        entries:      Parsed log entries.
        field:        Entry key holding the address (default
                      ``settings.address_field``).
        skip_invalid: Log and skip malformed addresses instead of raising.

    Raises:
        InvalidAddressError: a malformed address was found and
            ``skip_invalid`` is False.
    """
    field = field or settings.address_field
    stats = IngestStats()
    for entry in entries:
        stats.entries += 1
        value = entry.get(field)
        if value is None or value == "" or value == "-":
            stats.missing += 1
            continue
        try:
            tracker.request_handled(str(value))
        except InvalidAddressError as exc:
            if not skip_invalid:
                raise
            stats.invalid += 1
            logger.warning("Skipping entry %d: %s", stats.entries, exc)
            continue
        stats.recorded += 1
    logger.debug("Ingest finished: %s", stats)
    return stats


def feed_file(
    tracker: TopIps,
    path: str,
    fmt: str | None = None,
    field: str | None = None,
    skip_invalid: bool = False,
) -> IngestStats:
    """Stream-parse ``path`` with the ``fmt`` parser and feed it to ``tracker``."""
    parser = get_parser(fmt or settings.default_format)
    logger.debug("Ingesting %s with %s parser", path, parser.name)
    return feed_entries(tracker, parser.parse_file(path), field=field, skip_invalid=skip_invalid)


class LogFollower:
    """Incrementally read a growing log file and feed new requests to a tracker.

    Only complete lines are consumed: text after the last newline stays in
    the file and is picked up by a later poll once its writer finishes it.
    A file that shrinks is treated as rotated and re-read from the start.

    Args:
        path:     Log file to follow.
        fmt:      Parser hint (default ``settings.default_format``).
        field:    Entry key holding the address.
        from_end: Ignore what is already in the file at construction time.
    """

    def __init__(
        self,
        path: str | Path,
        fmt: str | None = None,
        field: str | None = None,
        from_end: bool = True,
    ) -> None:
        self._path = Path(path)
        self._parser = AutoDetectParser(hint=fmt or settings.default_format)
        self._field = field
        self._offset = self._path.stat().st_size if from_end and self._path.exists() else 0
        self.rotations = 0

    @property
    def offset(self) -> int:
        """Byte offset just past the last complete line consumed."""
        return self._offset

    def read_complete_lines(self) -> list[str]:
        """Return the complete lines appended since the previous call."""
        if not self._path.exists():
            return []
        size = self._path.stat().st_size
        if size < self._offset:
            logger.info("%s shrank from %d to %d bytes, assuming rotation", self._path, self._offset, size)
            self._offset = 0
            self.rotations += 1
        if size == self._offset:
            return []
        with self._path.open("rb") as fh:
            fh.seek(self._offset)
            chunk = fh.read()
        end = chunk.rfind(b"\n")
        if end < 0:
            return []
        self._offset += end + 1
        return chunk[: end + 1].decode("utf-8", errors="replace").splitlines()

    def poll(self, tracker: TopIps) -> IngestStats:
        """Feed every newly completed line to ``tracker``.

        Malformed addresses are logged and skipped so one bad line cannot
        stop a long-running tail.
        """
        lines = self.read_complete_lines()
        entries = (e for e in map(self._parser.parse_line, lines) if e is not None)
        return feed_entries(tracker, entries, field=self._field, skip_invalid=True)
