"""JSON log parser — streaming, line-by-line, handles NDJSON.

Structured access logs rarely agree on what to call the client address, so
the first of :data:`ADDRESS_KEYS` with a value is copied to ``host`` when the
entry has no usable ``host`` of its own (absent, null or empty).
"""
from __future__ import annotations

import json
from typing import Iterator

from .base import LogEntry, iter_file

ADDRESS_KEYS = ("remote_addr", "client_ip", "clientip", "ip")


class JsonParser:
    """Parse newline-delimited JSON (NDJSON) log files."""

    @property
    def name(self) -> str:
        return "json"

    def parse_line(self, line: str) -> LogEntry | None:
        """Parse a single JSON log line. Returns None for blank lines or parse errors."""
        line = line.strip()
        if not line:
            return None
        try:
            entry = json.loads(line)
        except json.JSONDecodeError:
            return None
        if not isinstance(entry, dict):
            return None
        if not entry.get("host"):
            for key in ADDRESS_KEYS:
                if entry.get(key):
                    entry["host"] = entry[key]
                    break
        return entry

    def parse_file(self, path: str) -> Iterator[LogEntry]:
        """Stream-parse an NDJSON file. Memory usage: O(1) — one line at a time."""
        return iter_file(self, path)
