"""
KOSPI200 quote parser: decode B6034 quote messages from PCAP captures.
"""
from .capture import CaptureReader, CaptureRecord, read_capture
from .config import DEFAULT_PARSER_CONFIG, ParserConfig
from .datagram import Datagram, extract_datagram
from .errors import (
    CaptureError,
    MalformedCapture,
    MalformedMessage,
    NoMessagesFound,
    QuoteParserError,
    TruncatedFrame,
    TruncatedRecord,
)
from .formatter import OutputLayout, render
from .message import QUOTE_LAYOUT, QuoteLevel, QuoteRecord, decode_quote, is_quote_message
from .ordering import OrderMode, QuoteCollector
from .pipeline import ParseResult, ParseStats, parse_quotes, render_quotes

__all__ = [
    'CaptureReader',
    'CaptureRecord',
    'read_capture',
    'DEFAULT_PARSER_CONFIG',
    'ParserConfig',
    'Datagram',
    'extract_datagram',
    'CaptureError',
    'MalformedCapture',
    'MalformedMessage',
    'NoMessagesFound',
    'QuoteParserError',
    'TruncatedFrame',
    'TruncatedRecord',
    'OutputLayout',
    'render',
    'QUOTE_LAYOUT',
    'QuoteLevel',
    'QuoteRecord',
    'decode_quote',
    'is_quote_message',
    'OrderMode',
    'QuoteCollector',
    'ParseResult',
    'ParseStats',
    'parse_quotes',
    'render_quotes',
]
