"""Top-N client addresses — the address-aware front of ``TopTracker``.

Feed it the textual address of every handled request and ask for the
busiest ones whenever a dashboard needs them::

    top_ips = TopIps()
    top_ips.request_handled("192.168.1.1")
    top_ips.top()
    # [('192.168.1.1', 1)]

Addresses are parsed with :mod:`ipaddress` so spelling variants of the same
address (surrounding whitespace, IPv6 zero compression) are counted as one.
"""
from __future__ import annotations

import ipaddress
from ipaddress import IPv4Address, IPv6Address

from ..config import settings
from .top_tracker import TopTracker

Address = IPv4Address | IPv6Address


class InvalidAddressError(ValueError):
    """Raised when a request address cannot be parsed as IPv4/IPv6."""

    def __init__(self, text: str) -> None:
        super().__init__(f"Invalid IP address: {text!r}")
        self.text = text


def parse_address(text: str) -> Address:
    """Parse ``text`` into a canonical address object or raise InvalidAddressError."""
    try:
        return ipaddress.ip_address(text.strip())
    except ValueError:
        raise InvalidAddressError(text) from None


class TopIps:
    """Keep track of the ``capacity`` addresses making the most requests.

    Every distinct address is remembered in memory until :meth:`clear` — do
    not point this at traffic from hundreds of millions of unique clients.

    Args:
        capacity: Number of top addresses reported. Defaults to
                  ``settings.top_count`` (100).
    """

    def __init__(self, capacity: int | None = None) -> None:
        self._capacity = settings.top_count if capacity is None else capacity
        self._tracker: TopTracker[Address] = TopTracker(self._capacity)

    @property
    def capacity(self) -> int:
        return self._capacity

    @property
    def distinct(self) -> int:
        return len(self._tracker)

    @property
    def total(self) -> int:
        return self._tracker.total

    def request_handled(self, address: str) -> None:
        """Record a request handled from ``address``.

        Raises:
            InvalidAddressError: ``address`` is not a valid IP address; the
                request is not recorded.
        """
        self._tracker.record(parse_address(address))

    def count(self, address: str) -> int:
        return self._tracker.count(parse_address(address))

    def top(self) -> list[tuple[str, int]]:
        """The top addresses by request count, busiest first.

        Ties are returned in no particular order, which can be surprising near
        the end of the list where many addresses may share the cut-off count.
        """
        return [(str(address), count) for address, count in self._tracker.top()]

    def clear(self) -> None:
        """Forget every address and start counting anew."""
        self._tracker = TopTracker(self._capacity)

    def __repr__(self) -> str:
        return f"TopIps(capacity={self._capacity}, distinct={self.distinct}, total={self.total})"
