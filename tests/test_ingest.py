"""Tests for feeding parsed entries into a TopIps tracker."""
from __future__ import annotations

import logging

import pytest

from toptalkers.ingest import IngestStats, LogFollower, feed_entries, feed_file
from toptalkers.tracking.ip_tracker import InvalidAddressError, TopIps


class TestFeedEntries:
    def test_records_host_field(self) -> None:
        tracker = TopIps(5)
        stats = feed_entries(tracker, [{"host": "10.0.0.1"}, {"host": "10.0.0.1"}, {"host": "10.0.0.2"}])
        assert tracker.top() == [("10.0.0.1", 2), ("10.0.0.2", 1)]
        assert stats == IngestStats(entries=3, recorded=3)

    def test_custom_field(self) -> None:
        tracker = TopIps(5)
        feed_entries(tracker, [{"client": "10.0.0.1", "host": "web-1"}], field="client")
        assert tracker.top() == [("10.0.0.1", 1)]

    @pytest.mark.parametrize("entry", [{}, {"host": None}, {"host": ""}, {"host": "-"}])
    def test_entries_without_address_are_missing(self, entry: dict) -> None:
        tracker = TopIps(5)
        stats = feed_entries(tracker, [entry])
        assert stats.missing == 1
        assert stats.recorded == 0
        assert tracker.total == 0

    def test_invalid_address_raises_by_default(self) -> None:
        tracker = TopIps(5)
        entries = [{"host": "10.0.0.1"}, {"host": "web-frontend"}, {"host": "10.0.0.2"}]
        with pytest.raises(InvalidAddressError):
            feed_entries(tracker, entries)
        # Fails fast: nothing after the bad entry is recorded
        assert tracker.top() == [("10.0.0.1", 1)]

    def test_skip_invalid_logs_and_counts(self, caplog) -> None:
        tracker = TopIps(5)
        entries = [{"host": "10.0.0.1"}, {"host": "web-frontend"}, {"host": "10.0.0.2"}]
        with caplog.at_level(logging.WARNING, logger="toptalkers.ingest"):
            stats = feed_entries(tracker, entries, skip_invalid=True)
        assert stats.invalid == 1
        assert stats.recorded == 2
        assert "web-frontend" in caplog.text

    def test_non_string_values_are_stringified(self) -> None:
        tracker = TopIps(5)
        feed_entries(tracker, [{"host": 167772161}], skip_invalid=True)
        # "167772161" is not dotted text, ipaddress rejects it as a string
        assert tracker.total == 0


class TestIngestStats:
    def test_merge(self) -> None:
        a = IngestStats(entries=3, recorded=2, missing=1)
        b = IngestStats(entries=2, recorded=1, invalid=1)
        assert a.merge(b) == IngestStats(entries=5, recorded=3, missing=1, invalid=1)


class TestFeedFile:
    def test_apache_file(self, tmp_log_file, apache_log_lines) -> None:
        path = tmp_log_file(apache_log_lines)
        tracker = TopIps(2)
        stats = feed_file(tracker, str(path))
        assert tracker.top() == [("192.168.1.1", 3), ("10.0.0.1", 2)]
        assert stats.recorded == 6

    def test_json_file(self, tmp_log_file, json_log_lines) -> None:
        path = tmp_log_file(json_log_lines)
        tracker = TopIps(5)
        stats = feed_file(tracker, str(path), fmt="json")
        assert tracker.top()[0] == ("2001:db8::1", 2)
        assert stats.missing == 1

    def test_plain_file(self, tmp_log_file, plain_lines) -> None:
        path = tmp_log_file(plain_lines)
        tracker = TopIps(5)
        feed_file(tracker, str(path), fmt="plain")
        assert tracker.top() == [("10.0.0.7", 2), ("10.0.0.8", 1)]

    def test_unknown_format(self, tmp_log_file) -> None:
        path = tmp_log_file(["10.0.0.1"])
        with pytest.raises(ValueError):
            feed_file(TopIps(5), str(path), fmt="syslog")


def _write(path, text: str) -> None:
    with path.open("a", encoding="utf-8") as fh:
        fh.write(text)


class TestLogFollower:
    def test_existing_content_is_ignored(self, tmp_log_file) -> None:
        path = tmp_log_file(["10.0.0.1"])
        follower = LogFollower(path, fmt="plain")
        tracker = TopIps(5)
        assert follower.poll(tracker).entries == 0
        assert tracker.total == 0

    def test_from_start(self, tmp_log_file) -> None:
        path = tmp_log_file(["10.0.0.1", "10.0.0.1"])
        tracker = TopIps(5)
        LogFollower(path, fmt="plain", from_end=False).poll(tracker)
        assert tracker.top() == [("10.0.0.1", 2)]

    def test_line_written_in_two_chunks_counts_once(self, tmp_path) -> None:
        path = tmp_path / "ips.txt"
        path.write_text("", encoding="utf-8")
        follower = LogFollower(path, fmt="plain")
        tracker = TopIps(5)

        _write(path, "10.0.0.1")
        stats = follower.poll(tracker)
        assert stats.entries == 0
        assert follower.offset == 0

        _write(path, "2\n")
        stats = follower.poll(tracker)
        assert stats == IngestStats(entries=1, recorded=1)
        assert tracker.top() == [("10.0.0.12", 1)]

    def test_apache_line_split_mid_request(self, tmp_path, apache_log_lines) -> None:
        path = tmp_path / "access.log"
        path.write_text("", encoding="utf-8")
        follower = LogFollower(path)
        tracker = TopIps(5)
        line = apache_log_lines[1]

        _write(path, apache_log_lines[0] + "\n" + line[:20])
        follower.poll(tracker)
        _write(path, line[20:] + "\n")
        follower.poll(tracker)

        assert sorted(tracker.top()) == [("10.0.0.1", 1), ("192.168.1.1", 1)]

    def test_rotation_rereads_from_start(self, tmp_log_file) -> None:
        path = tmp_log_file(["10.0.0.1", "10.0.0.2", "10.0.0.3"])
        follower = LogFollower(path, fmt="plain")
        tracker = TopIps(5)

        path.write_text("10.0.0.9\n", encoding="utf-8")
        follower.poll(tracker)

        assert follower.rotations == 1
        assert tracker.top() == [("10.0.0.9", 1)]

    def test_invalid_lines_are_skipped(self, tmp_path) -> None:
        path = tmp_path / "ips.txt"
        path.write_text("", encoding="utf-8")
        follower = LogFollower(path, fmt="plain")
        tracker = TopIps(5)
        _write(path, "10.0.0.1\nbogus\n")
        stats = follower.poll(tracker)
        assert stats.invalid == 1
        assert tracker.total == 1

    def test_missing_file(self, tmp_path) -> None:
        follower = LogFollower(tmp_path / "later.log", fmt="plain")
        assert follower.read_complete_lines() == []
