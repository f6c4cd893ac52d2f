"""
Configuration parameters for the quote parser.
"""
from dataclasses import dataclass
from typing import Tuple


@dataclass(frozen=True)
class ParserConfig:
    """Parsing and rendering parameters."""

    # KOSPI200 futures quote: data type B6, info category 03, market 4
    message_tag: bytes = b'B6034'

    # UDP destination ports to accept (empty = any port).
    # The KOSPI200 feed is published on 15515 and 15516.
    ports: Tuple[int, ...] = ()

    # Implied decimals of the price fields (18230 -> 182.30)
    price_decimals: int = 2

    # Offset used for wall-clock rendering and accept-time anchoring
    utc_offset_minutes: int = 0

    # Log a progress line every N capture records
    progress_every: int = 100_000


KOSPI_QUOTE_PORTS = (15515, 15516)

# Default instance
DEFAULT_PARSER_CONFIG = ParserConfig()
