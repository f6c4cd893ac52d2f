"""
Output Formatter.

Renders a QuoteRecord as text in one of two layouts:

  COMPACT   one line, wall-clock times, bids worst-to-best then asks
            best-to-worst, each level as quantity@price
  DETAILED  two lines, labeled epoch timestamps and issue code, then the
            bid and ask levels comma-separated
"""

import datetime
from enum import Enum
from typing import Callable, Dict, List

from .message import QuoteLevel, QuoteRecord


NS_PER_SEC = 1_000_000_000
US_PER_SEC = 1_000_000

UTC = datetime.timezone.utc


class OutputLayout(Enum):
    """Text layouts for a quote."""
    COMPACT = 'compact'
    DETAILED = 'detailed'


def timezone_from_offset(minutes: int) -> datetime.timezone:
    if minutes == 0:
        return UTC
    return datetime.timezone(datetime.timedelta(minutes=minutes))


def format_price(price: int, decimals: int = 2) -> str:
    """Apply the implied decimals of a raw price field (18230 -> '182.30')."""
    if decimals <= 0:
        return str(price)
    scale = 10 ** decimals
    return f"{price // scale}.{price % scale:0{decimals}d}"


def format_level(level: QuoteLevel, decimals: int = 2) -> str:
    return f"{level.quantity}@{format_price(level.price, decimals)}"


def format_epoch_ns(timestamp_ns: int) -> str:
    """Epoch seconds with a 6-digit fraction."""
    return f"{timestamp_ns // NS_PER_SEC}.{timestamp_ns % NS_PER_SEC // 1000:06d}"


def format_wall_clock(timestamp_ns: int, tz: datetime.tzinfo = UTC) -> str:
    """HH:MM:SS.ffffff of an epoch timestamp in the given zone."""
    dt = datetime.datetime.fromtimestamp(timestamp_ns // NS_PER_SEC, tz)
    return f"{dt:%H:%M:%S}.{timestamp_ns % NS_PER_SEC // 1000:06d}"


def format_time_of_day(t: datetime.time) -> str:
    return t.isoformat(timespec='microseconds')


def accept_epoch_ns(quote: QuoteRecord, tz: datetime.tzinfo = UTC) -> int:
    """
    Anchor the accept time of day to the packet's calendar date in `tz`.

    The message carries no date, so the capture date stands in for it.
    """
    packet_date = datetime.datetime.fromtimestamp(quote.packet_time_ns // NS_PER_SEC, tz).date()
    midnight = datetime.datetime.combine(packet_date, datetime.time(0), tzinfo=tz)
    t = quote.accept_time
    seconds = int(midnight.timestamp()) + (t.hour * 60 + t.minute) * 60 + t.second
    return seconds * NS_PER_SEC + t.microsecond * 1000


def _levels(quote: QuoteRecord, decimals: int) -> List[str]:
    # Bids worst-to-best, then asks best-to-worst
    return ([format_level(level, decimals) for level in reversed(quote.bids)]
            + [format_level(level, decimals) for level in quote.asks])


def _render_compact(quote: QuoteRecord, decimals: int, tz: datetime.tzinfo) -> List[str]:
    fields = [
        format_wall_clock(quote.packet_time_ns, tz),
        format_time_of_day(quote.accept_time),
        quote.issue_code.strip(),
    ] + _levels(quote, decimals)
    return [" ".join(fields)]


def _render_detailed(quote: QuoteRecord, decimals: int, tz: datetime.tzinfo) -> List[str]:
    bids = ", ".join(format_level(level, decimals) for level in reversed(quote.bids))
    asks = ", ".join(format_level(level, decimals) for level in quote.asks)
    return [
        f"Packet-Time: {format_epoch_ns(quote.packet_time_ns)} | "
        f"Accept-Time: {format_epoch_ns(accept_epoch_ns(quote, tz))} | "
        f"Issue-Code: {quote.issue_code.strip()}",
        f"Bids: {bids} | Asks: {asks}",
    ]


_RENDERERS: Dict[OutputLayout, Callable[[QuoteRecord, int, datetime.tzinfo], List[str]]] = {
    OutputLayout.COMPACT: _render_compact,
    OutputLayout.DETAILED: _render_detailed,
}


def render(quote: QuoteRecord,
           layout: OutputLayout = OutputLayout.COMPACT,
           price_decimals: int = 2,
           tz: datetime.tzinfo = UTC) -> List[str]:
    """Render a quote as a list of text lines (no trailing newlines)."""
    return _RENDERERS[layout](quote, price_decimals, tz)
