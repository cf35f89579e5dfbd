"""Shared pytest fixtures for toptalkers tests."""
from __future__ import annotations

import json
from pathlib import Path

import pytest


@pytest.fixture()
def tmp_log_file(tmp_path: Path):
    """Return a factory that creates temporary log files."""

    def _make(lines: list[str], name: str = "test.log") -> Path:
        p = tmp_path / name
        p.write_text("\n".join(lines) + "\n", encoding="utf-8")
        return p

    return _make


@pytest.fixture()
def apache_log_lines() -> list[str]:
    return [
        '192.168.1.1 - - [01/Aug/2025:10:00:00 +0000] "GET /api/v1/health HTTP/1.1" 200 512',
        '10.0.0.1 - bob [01/Aug/2025:10:00:01 +0000] "POST /api/v1/jobs HTTP/1.1" 201 1024',
        '192.168.1.2 - - [01/Aug/2025:10:00:02 +0000] "GET /missing HTTP/1.1" 404 -',
        '192.168.1.1 - - [01/Aug/2025:10:00:03 +0000] "GET / HTTP/1.1" 200 2326 "-" "curl/8.4.0"',
        '192.168.1.1 - - [01/Aug/2025:10:00:04 +0000] "GET /favicon.ico HTTP/1.1" 404 209',
        '10.0.0.1 - bob [01/Aug/2025:10:00:05 +0000] "GET /api/v1/jobs/7 HTTP/1.1" 200 88',
    ]


@pytest.fixture()
def json_log_lines() -> list[str]:
    return [
        json.dumps({"timestamp": "2025-08-01T10:00:00", "remote_addr": "2001:db8::1", "path": "/"}),
        json.dumps({"timestamp": "2025-08-01T10:00:01", "remote_addr": "2001:0db8:0000::1", "path": "/a"}),
        json.dumps({"timestamp": "2025-08-01T10:00:02", "client_ip": "10.1.2.3", "path": "/b"}),
        json.dumps({"timestamp": "2025-08-01T10:00:03", "message": "worker started"}),
    ]


@pytest.fixture()
def plain_lines() -> list[str]:
    return [
        "# exported from firewall",
        "10.0.0.7",
        "",
        "10.0.0.7",
        "  10.0.0.8  ",
    ]
