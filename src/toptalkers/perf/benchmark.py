"""Performance study — is TopIps fast enough for a request hot path?

Two questions drive the design of ``TopTracker``:

1. Can ``request_handled`` afford logarithmic (or worse) work per request?
   The stand-in for "logarithmic work over the whole population" is building
   a dict with ``baseline_size`` entries. If that takes tens of
   milliseconds, recording must stay effectively constant-time.

2. Can ``top()`` afford a linear scan over every address ever seen? The
   stand-in is finding the maximum of a ``baseline_size`` dict. A scan that
   takes hundreds of milliseconds blocks an event-loop web server, so
   ``top()`` must not depend on the number of distinct addresses.

Run it with::

    toptalkers bench --events 1000000 --octet-limit 255

or programmatically::

    from toptalkers.perf.benchmark import run_study
    print(run_study(n_events=200_000))
"""
from __future__ import annotations

import random
import time
from typing import Any, Iterator

from ..tracking.ip_tracker import TopIps


def random_addresses(n: int, octet_limit: int = 255, seed: int = 0) -> Iterator[str]:
    """Yield ``n`` IPv4 addresses with every octet drawn from ``[0, octet_limit]``.

    Uniform octets are not what real traffic looks like, but they give a
    pessimistic number of distinct addresses, which is what stresses the index.
    """
    rng = random.Random(seed)
    limit = max(0, min(octet_limit, 255))
    for _ in range(n):
        yield (
            f"{rng.randint(0, limit)}.{rng.randint(0, limit)}."
            f"{rng.randint(0, limit)}.{rng.randint(0, limit)}"
        )


def benchmark_record(
    n_events: int,
    octet_limit: int = 255,
    capacity: int | None = None,
    seed: int = 0,
) -> tuple[TopIps, dict[str, Any]]:
    """Feed ``n_events`` random addresses through a fresh TopIps.

    Address generation happens before the clock starts so only
    ``request_handled`` is measured. Returns the filled tracker alongside the
    statistics so ``top()`` can be timed against it.
    """
    addresses = list(random_addresses(n_events, octet_limit, seed))
    tracker = TopIps(capacity)

    start = time.perf_counter()
    for address in addresses:
        tracker.request_handled(address)
    elapsed = time.perf_counter() - start

    return tracker, {
        "events": n_events,
        "distinct": tracker.distinct,
        "elapsed_sec": round(elapsed, 3),
        "events_per_sec": round(n_events / elapsed) if elapsed > 0 else 0,
        "usec_per_event": round(elapsed / n_events * 1e6, 3) if n_events else 0.0,
    }


def benchmark_top(tracker: TopIps, repeat: int = 100) -> dict[str, Any]:
    """Time ``tracker.top()`` ``repeat`` times."""
    timings: list[float] = []
    for _ in range(max(repeat, 1)):
        start = time.perf_counter()
        tracker.top()
        timings.append(time.perf_counter() - start)
    return {
        "repeat": len(timings),
        "mean_ms": round(sum(timings) / len(timings) * 1e3, 4),
        "max_ms": round(max(timings) * 1e3, 4),
    }


def benchmark_baselines(n: int = 1_000_000) -> dict[str, Any]:
    """Time the rejected alternatives on an ``n``-entry table."""
    start = time.perf_counter()
    table = {i: i for i in range(n)}
    build = time.perf_counter() - start

    start = time.perf_counter()
    best = None
    for value in table.values():
        if best is None or value > best:
            best = value
    scan = time.perf_counter() - start

    return {
        "size": n,
        "build_table_ms": round(build * 1e3, 3),
        "linear_max_scan_ms": round(scan * 1e3, 3),
    }


def run_study(
    n_events: int = 1_000_000,
    octet_limit: int = 255,
    capacity: int | None = None,
    baseline_size: int = 1_000_000,
    seed: int = 0,
) -> dict[str, Any]:
    """Run every benchmark and return the combined results."""
    tracker, record_stats = benchmark_record(n_events, octet_limit, capacity, seed)
    return {
        "capacity": tracker.capacity,
        "record": record_stats,
        "top": benchmark_top(tracker),
        "baselines": benchmark_baselines(baseline_size),
    }


if __name__ == "__main__":
    import argparse
    import json

    ap = argparse.ArgumentParser(description="TopIps performance study")
    ap.add_argument("--events", type=int, default=1_000_000)
    ap.add_argument("--octet-limit", type=int, default=255)
    ap.add_argument("--baseline-size", type=int, default=1_000_000)
    args = ap.parse_args()

    print(json.dumps(
        run_study(args.events, args.octet_limit, baseline_size=args.baseline_size),
        indent=2,
    ))
