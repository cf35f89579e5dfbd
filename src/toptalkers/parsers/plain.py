"""Plain address list — one client address per line.

Useful for piping ``awk '{print $1}'`` output or firewall dumps straight in.
Blank lines and ``#`` comments are skipped.
"""
from __future__ import annotations

from typing import Iterator

from .base import LogEntry, iter_file


class PlainParser:
    """Treat every non-comment line as a bare address."""

    @property
    def name(self) -> str:
        return "plain"

    def parse_line(self, line: str) -> LogEntry | None:
        line = line.strip()
        if not line or line.startswith("#"):
            return None
        return {"host": line}

    def parse_file(self, path: str) -> Iterator[LogEntry]:
        return iter_file(self, path)
