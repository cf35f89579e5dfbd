"""Bounded top-N frequency tracker.

``TopTracker`` keeps an exact count for every identity it has ever seen plus
a small list of the ``capacity`` most frequent ones, kept sorted by count
(highest first). Incrementing is effectively constant time: one dict lookup
and a local bubble whose length is bounded by ``capacity``. Reading the
leaders is O(capacity) regardless of how many distinct identities exist.

Memory grows with the number of *distinct* identities — counts are never
forgotten until the tracker itself is discarded.

Usage::

    tracker: TopTracker[str] = TopTracker(3)
    for word in "a b a c a b d".split():
        tracker.record(word)

    tracker.top()
    # [('a', 3), ('b', 2), ('c', 1)]

Ties are not ordered: entries with equal counts appear in whatever order the
recording history left them.
"""
from __future__ import annotations

from collections.abc import Hashable
from dataclasses import dataclass
from typing import Generic, TypeVar

Identity = TypeVar("Identity", bound=Hashable)


@dataclass
class _LeaderEntry(Generic[Identity]):
    identity: Identity
    count: int


@dataclass
class _IdentitySummary:
    count: int = 0
    # Index into the leader list, or None when not a leader.
    leader_position: int | None = None


class TopTracker(Generic[Identity]):
    """Track the ``capacity`` most frequently recorded identities.

    Identities must be immutable and hashable (ints, strings, ``ipaddress``
    objects, tuples, ...). The same value is stored in the index and in the
    leader list, so a mutable key would corrupt both.

    Args:
        capacity: Maximum number of leaders kept. ``0`` is allowed and turns
                  the tracker into a plain counter with an always-empty top.
    """

    def __init__(self, capacity: int) -> None:
        if capacity < 0:
            raise ValueError(f"capacity must be >= 0, got {capacity}")
        self._capacity = capacity
        self._leaders: list[_LeaderEntry[Identity]] = []
        self._index: dict[Identity, _IdentitySummary] = {}
        self._total = 0

    # ------------------------------------------------------------------
    # Public API
    # ------------------------------------------------------------------

    @property
    def capacity(self) -> int:
        return self._capacity

    @property
    def total(self) -> int:
        """Number of ``record`` calls since construction."""
        return self._total

    def record(self, identity: Identity) -> None:
        """Record one observation of ``identity``."""
        summary = self._index.get(identity)
        if summary is None:
            summary = self._index[identity] = _IdentitySummary()
        summary.count += 1
        self._total += 1

        leaders = self._leaders
        position = summary.leader_position

        if position is not None:
            leaders[position].count = summary.count
        elif len(leaders) < self._capacity:
            leaders.append(_LeaderEntry(identity, summary.count))
            position = len(leaders) - 1
        elif leaders and summary.count > leaders[-1].count:
            position = len(leaders) - 1
            evicted = leaders[position]
            self._index[evicted.identity].leader_position = None
            leaders[position] = _LeaderEntry(identity, summary.count)
        else:
            return

        summary.leader_position = self._bubble(position)

    def top(self) -> list[tuple[Identity, int]]:
        """Snapshot of the leaders as ``(identity, count)``, highest count first."""
        return [(entry.identity, entry.count) for entry in self._leaders]

    def count(self, identity: Identity) -> int:
        """All-time count for ``identity`` (0 if never recorded)."""
        summary = self._index.get(identity)
        return summary.count if summary is not None else 0

    def is_leader(self, identity: Identity) -> bool:
        summary = self._index.get(identity)
        return summary is not None and summary.leader_position is not None

    def __len__(self) -> int:
        return len(self._index)

    def __contains__(self, identity: object) -> bool:
        return identity in self._index

    def __repr__(self) -> str:
        return (
            f"TopTracker(capacity={self._capacity}, "
            f"leaders={len(self._leaders)}, distinct={len(self._index)})"
        )

    # ------------------------------------------------------------------
    # Internals
    # ------------------------------------------------------------------

    def _bubble(self, position: int) -> int:
        """Move the entry at ``position`` left until the list is sorted again.

        Returns the entry's final position. Both entries of every swap get
        their cached ``leader_position`` rewritten.
        """
        leaders = self._leaders
        index = self._index
        while position > 0 and leaders[position - 1].count < leaders[position].count:
            above = position - 1
            leaders[above], leaders[position] = leaders[position], leaders[above]
            index[leaders[above].identity].leader_position = above
            index[leaders[position].identity].leader_position = position
            assert index[leaders[above].identity].count == leaders[above].count
            position = above
        return position

    def check_invariants(self) -> None:
        """Assert the full structural invariants. O(distinct identities)."""
        leaders = self._leaders
        assert len(leaders) <= self._capacity, "leader list exceeds capacity"
        for i in range(1, len(leaders)):
            assert leaders[i - 1].count >= leaders[i].count, f"leaders unsorted at {i}"
        for i, entry in enumerate(leaders):
            summary = self._index[entry.identity]
            assert summary.leader_position == i, (
                f"{entry.identity!r}: cached position {summary.leader_position} != {i}"
            )
            assert summary.count == entry.count, f"{entry.identity!r}: count mismatch"
        positioned = sum(1 for s in self._index.values() if s.leader_position is not None)
        assert positioned == len(leaders), "stale leader positions in index"
        assert sum(s.count for s in self._index.values()) == self._total
