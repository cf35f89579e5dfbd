"""Abstract base parser — all parsers implement this Protocol."""
from __future__ import annotations

from typing import Iterator, Protocol, runtime_checkable


LogEntry = dict[str, object]


@runtime_checkable
class LogParser(Protocol):
    """Protocol for log parsers — duck-typed, no inheritance required.

    Parsers that can locate the client address put it under ``host``.
    """

    def parse_line(self, line: str) -> LogEntry | None:
        """Parse a single log line. Returns None if the line should be skipped."""
        ...

    def parse_file(self, path: str) -> Iterator[LogEntry]:
        """Stream-parse a log file line by line."""
        ...

    @property
    def name(self) -> str:
        """Human-readable parser name (e.g. 'json', 'apache')."""
        ...


def iter_file(parser: LogParser, path: str) -> Iterator[LogEntry]:
    """Shared ``parse_file`` body: stream ``path`` through ``parser.parse_line``."""
    with open(path, encoding="utf-8", errors="replace") as f:
        for line in f:
            entry = parser.parse_line(line)
            if entry is not None:
                yield entry
