"""Apache / Nginx Common and Combined access log parser.

Common:  %h %l %u %t "%r" %>s %b
Combined: Common + "%{Referer}i" "%{User-agent}i"

The ``%h`` field is the client address and lands in ``host``.
"""
from __future__ import annotations

import re
from typing import Iterator

from .base import LogEntry, iter_file

_COMBINED_RE = re.compile(
    r'(?P<host>\S+)\s+'           # client IP
    r'(?P<ident>\S+)\s+'          # ident
    r'(?P<user>\S+)\s+'           # user
    r'\[(?P<time>[^\]]+)\]\s+'    # [timestamp]
    r'"(?P<request>[^"]*)"\s+'    # "METHOD /path HTTP/x.x"
    r'(?P<status>\d{3})\s+'       # status code
    r'(?P<bytes>\S+)'             # bytes sent
    r'(?:\s+"(?P<referer>[^"]*)")?' # optional referer
    r'(?:\s+"(?P<agent>[^"]*)")?'   # optional user-agent
)


class ApacheParser:
    """Parse Apache Common and Combined log formats."""

    @property
    def name(self) -> str:
        return "apache"

    def parse_line(self, line: str) -> LogEntry | None:
        line = line.strip()
        if not line:
            return None
        m = _COMBINED_RE.match(line)
        if not m:
            return None
        d = m.groupdict()
        request_parts = (d["request"] or "").split(" ", 2)
        user = d["user"]
        return {
            "host": d["host"],
            "user": None if user == "-" else user,
            "timestamp": d["time"],
            "method": request_parts[0] or None,
            "path": request_parts[1] if len(request_parts) > 1 else None,
            "protocol": request_parts[2] if len(request_parts) > 2 else None,
            "status": int(d["status"]),
            "bytes": int(d["bytes"]) if d["bytes"].isdigit() else 0,
            "referer": d.get("referer"),
            "user_agent": d.get("agent"),
        }

    def parse_file(self, path: str) -> Iterator[LogEntry]:
        return iter_file(self, path)
