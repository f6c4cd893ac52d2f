"""
Decode-and-order pipeline.

Capture Reader -> Datagram Extractor -> Message Filter -> Quote Decoder ->
Ordering Engine -> Output Formatter, run as one sequential pass.
"""

import logging
from dataclasses import dataclass, field
from typing import Iterator

from .capture import CaptureReader, CaptureSource
from .config import DEFAULT_PARSER_CONFIG, ParserConfig
from .datagram import LINK_LAYERS, extract_datagram
from .errors import MalformedMessage, NoMessagesFound
from .formatter import OutputLayout, render, timezone_from_offset
from .message import decode_quote, is_quote_message
from .ordering import OrderMode, QuoteCollector

logger = logging.getLogger(__name__)


@dataclass
class ParseStats:
    """Counters for one pass over a capture."""
    records: int = 0
    datagrams: int = 0  # UDP payloads extracted
    tagged: int = 0  # payloads carrying the quote tag
    decoded: int = 0
    malformed: int = 0


@dataclass
class ParseResult:
    """Quotes of a capture plus the pass counters."""
    quotes: QuoteCollector
    stats: ParseStats = field(default_factory=ParseStats)
    link_type: int = 0


def parse_quotes(source: CaptureSource,
                 config: ParserConfig = DEFAULT_PARSER_CONFIG) -> ParseResult:
    """
    Decode every quote message of a capture, in capture order.

    Malformed messages are dropped and counted; structural capture errors
    propagate.

    Raises:
        MalformedCapture, TruncatedRecord, TruncatedFrame: invalid capture
        NoMessagesFound: the pass produced zero quotes
    """
    stats = ParseStats()
    quotes = QuoteCollector()
    ports = frozenset(config.ports)

    with CaptureReader(source) as reader:
        link_type = reader.link_type
        if link_type not in LINK_LAYERS:
            logger.warning("Unsupported link type %d, every frame will be skipped", link_type)

        for record in reader:
            stats.records += 1
            if config.progress_every and stats.records % config.progress_every == 0:
                logger.info("%s records, %s quotes...", f"{stats.records:,}", f"{len(quotes):,}")

            datagram = extract_datagram(record, link_type, ports)
            if datagram is None:
                continue
            stats.datagrams += 1

            if not is_quote_message(datagram.payload, config.message_tag):
                continue
            stats.tagged += 1

            try:
                quote = decode_quote(datagram.payload, datagram.packet_time_ns)
            except MalformedMessage as e:
                stats.malformed += 1
                logger.debug("Record %d: dropped malformed message: %s", record.index, e)
                continue

            quotes.append(quote)

    stats.decoded = len(quotes)
    logger.info(
        "Total: %s records, %s UDP datagrams, %s quotes, %s malformed",
        f"{stats.records:,}", f"{stats.datagrams:,}", f"{stats.decoded:,}", f"{stats.malformed:,}",
    )

    if not quotes:
        raise NoMessagesFound(
            f"No quote messages found in {stats.records} records "
            f"({stats.tagged} tagged, {stats.malformed} malformed)"
        )

    return ParseResult(quotes=quotes, stats=stats, link_type=link_type)


def render_quotes(quotes: QuoteCollector,
                  order: OrderMode = OrderMode.CAPTURE,
                  layout: OutputLayout = OutputLayout.COMPACT,
                  config: ParserConfig = DEFAULT_PARSER_CONFIG) -> Iterator[str]:
    """Yield the rendered lines of every quote in the requested order."""
    tz = timezone_from_offset(config.utc_offset_minutes)
    for quote in quotes.ordered(order):
        yield from render(quote, layout, config.price_decimals, tz)
