"""Auto-detect log format from content heuristics."""
from __future__ import annotations

import re
from typing import Iterator

from .apache import ApacheParser
from .base import LogEntry, LogParser
from .json_parser import JsonParser
from .plain import PlainParser

# Apache Combined Log: starts with an IP or hostname, has [timestamp]
_APACHE_RE = re.compile(r"^\S+ \S+ \S+ \[")

FORMATS = ("auto", "apache", "json", "plain")


def detect_format(line: str) -> str:
    """Return the format name detected from a single sample line.

    Returns one of: 'json', 'apache', 'plain'.
    """
    line = line.strip()
    if line.startswith("{"):
        return "json"
    if _APACHE_RE.match(line):
        return "apache"
    return "plain"


def _parsers() -> dict[str, LogParser]:
    return {
        "apache": ApacheParser(),
        "json": JsonParser(),
        "plain": PlainParser(),
    }


def get_parser(name: str) -> LogParser:
    """Return a parser for ``name`` (one of :data:`FORMATS`)."""
    name = name.lower()
    if name == "auto":
        return AutoDetectParser()
    try:
        return _parsers()[name]
    except KeyError:
        raise ValueError(f"Unknown log format {name!r}; expected one of {', '.join(FORMATS)}") from None


class AutoDetectParser:
    """Detect log format from content heuristics and delegate to the right parser.

    Detection order (first match wins):
      1. JSON   — line starts with '{'
      2. Apache — IP/host + [timestamp] pattern
      3. plain  — fallback, the whole line is the address

    Passing a concrete ``hint`` skips detection altogether.
    """

    def __init__(self, hint: str = "auto") -> None:
        self._hint = hint.lower()
        self._parsers = _parsers()
        if self._hint != "auto" and self._hint not in self._parsers:
            raise ValueError(f"Unknown log format {hint!r}")

    @property
    def name(self) -> str:
        return "auto" if self._hint == "auto" else self._hint

    def parse_line(self, line: str) -> LogEntry | None:
        line = line.strip()
        if not line:
            return None
        fmt = self._hint if self._hint != "auto" else detect_format(line)
        return self._parsers[fmt].parse_line(line)

    def parse_file(self, path: str) -> Iterator[LogEntry]:
        """Stream-parse a file, auto-detecting format from the first non-empty line.

        The detected format is locked in for the entire file — no per-line
        re-detection overhead on large files.
        """
        locked_parser: LogParser | None = self._parsers.get(self._hint)
        with open(path, encoding="utf-8", errors="replace") as f:
            for raw_line in f:
                stripped = raw_line.strip()
                if not stripped:
                    continue
                if locked_parser is None:
                    locked_parser = self._parsers[detect_format(stripped)]
                entry = locked_parser.parse_line(stripped)
                if entry is not None:
                    yield entry
