"""
Ordering Engine.

Owns the collection of decoded quotes for a run and hands them out either in
capture order or sorted by accept time. Each quote is tagged with its capture
index so equal accept times keep capture order through the sort key itself.
"""

from enum import Enum
from typing import Iterator, List, Tuple

from .message import QuoteRecord


class OrderMode(Enum):
    """Output ordering, selected once per run."""
    CAPTURE = 'capture'
    ACCEPT_TIME = 'accept-time'


class QuoteCollector:
    """Append-only collection of quotes in capture order."""

    def __init__(self):
        self._entries: List[Tuple[int, QuoteRecord]] = []

    def append(self, quote: QuoteRecord) -> None:
        self._entries.append((len(self._entries), quote))

    def __len__(self) -> int:
        return len(self._entries)

    def __iter__(self) -> Iterator[QuoteRecord]:
        return (quote for _, quote in self._entries)

    def in_capture_order(self) -> List[QuoteRecord]:
        return [quote for _, quote in self._entries]

    def by_accept_time(self) -> List[QuoteRecord]:
        """Sort by (accept_time, capture index)."""
        ranked = sorted(self._entries, key=lambda entry: (entry[1].accept_time, entry[0]))
        return [quote for _, quote in ranked]

    def ordered(self, mode: OrderMode = OrderMode.CAPTURE) -> List[QuoteRecord]:
        if mode is OrderMode.ACCEPT_TIME:
            return self.by_accept_time()
        return self.in_capture_order()
