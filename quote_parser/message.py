"""
KOSPI200 futures quote message (B6034) filter and decoder.

The message is a run of fixed-width ASCII fields with no delimiters. The
layout is declared as a table of FieldSpec entries and the decoder walks the
table, so offsets live in one place.
"""

import datetime
from dataclasses import dataclass
from typing import Dict, List, Tuple, Union

from .errors import MalformedMessage


QUOTE_TAG = b'B6034'
NUM_LEVELS = 5

# Field kinds
TEXT = 'text'
INT = 'int'
TIME = 'time'


@dataclass(frozen=True)
class FieldSpec:
    """One fixed-width field of the message."""
    name: str
    offset: int
    width: int
    kind: str

    @property
    def end(self) -> int:
        return self.offset + self.width


@dataclass(frozen=True)
class QuoteLevel:
    """One price/quantity rung. Price is the raw field value (implied decimals)."""
    quantity: int
    price: int


@dataclass(frozen=True)
class QuoteRecord:
    """Decoded quote message."""
    packet_time_ns: int
    accept_time: datetime.time
    issue_code: str
    bids: Tuple[QuoteLevel, ...]  # best first
    asks: Tuple[QuoteLevel, ...]  # best first


def _side_fields(side: str, start: int) -> List[FieldSpec]:
    # Each level: price (5) then quantity (7)
    fields = []
    for n in range(1, NUM_LEVELS + 1):
        offset = start + (n - 1) * 12
        fields.append(FieldSpec(f"{side}_price_{n}", offset, 5, INT))
        fields.append(FieldSpec(f"{side}_quantity_{n}", offset + 5, 7, INT))
    return fields


def build_quote_layout() -> Tuple[FieldSpec, ...]:
    """
    Field table of the B6034 message.

    Gaps in the table are fields the quote record does not carry:
      17-28   issue seq no (3), market status (2), total bid volume (7)
      89-95   total ask volume (7)
      156-205 valid quote counts per level, bid and ask side (50)
    """
    return tuple(
        [FieldSpec('issue_code', 5, 12, TEXT)]
        + _side_fields('bid', 29)
        + _side_fields('ask', 96)
        + [FieldSpec('accept_time', 206, 8, TIME)]  # HHMMSSuu
    )


QUOTE_LAYOUT = build_quote_layout()
QUOTE_MESSAGE_LEN = max(f.end for f in QUOTE_LAYOUT)


def is_quote_message(payload: bytes, tag: bytes = QUOTE_TAG) -> bool:
    """Cheap pre-check: does the payload start with the quote tag?"""
    return payload[:len(tag)] == tag


def _decode_text(field: FieldSpec, raw: bytes) -> str:
    try:
        return raw.decode('ascii')
    except UnicodeDecodeError:
        raise MalformedMessage(f"{field.name}: non-ASCII bytes {raw!r}") from None


def _decode_int(field: FieldSpec, raw: bytes) -> int:
    if not raw.isdigit():
        raise MalformedMessage(f"{field.name}: expected digits, got {raw!r}")
    return int(raw)


def _decode_time(field: FieldSpec, raw: bytes) -> datetime.time:
    """HHMMSS followed by a decimal fraction of a second, scaled to microseconds."""
    if not raw.isdigit() or len(raw) < 6:
        raise MalformedMessage(f"{field.name}: expected HHMMSS digits, got {raw!r}")

    fraction = raw[6:12]
    micros = int(fraction) * 10 ** (6 - len(fraction)) if fraction else 0
    try:
        return datetime.time(int(raw[0:2]), int(raw[2:4]), int(raw[4:6]), micros)
    except ValueError as e:
        raise MalformedMessage(f"{field.name}: {raw!r} is not a time of day ({e})") from None


_DECODERS = {
    TEXT: _decode_text,
    INT: _decode_int,
    TIME: _decode_time,
}


def decode_fields(payload: bytes,
                  layout: Tuple[FieldSpec, ...] = QUOTE_LAYOUT) -> Dict[str, Union[str, int, datetime.time]]:
    """
    Decode every field of the layout.

    Raises:
        MalformedMessage: payload too short or a field has invalid characters
    """
    needed = max(f.end for f in layout)
    if len(payload) < needed:
        raise MalformedMessage(f"Payload has {len(payload)} bytes, layout needs {needed}")

    return {
        field.name: _DECODERS[field.kind](field, payload[field.offset:field.end])
        for field in layout
    }


def decode_quote(payload: bytes, packet_time_ns: int,
                 layout: Tuple[FieldSpec, ...] = QUOTE_LAYOUT) -> QuoteRecord:
    """
    Decode a tagged payload into a QuoteRecord.

    Args:
        payload: UDP payload starting with the quote tag
        packet_time_ns: Capture time of the record that carried the payload
        layout: Field table

    Returns:
        QuoteRecord with 5 bid and 5 ask levels, best first

    Raises:
        MalformedMessage: payload too short or a field has invalid characters
    """
    values = decode_fields(payload, layout)

    def levels(side: str) -> Tuple[QuoteLevel, ...]:
        return tuple(
            QuoteLevel(quantity=values[f"{side}_quantity_{n}"], price=values[f"{side}_price_{n}"])
            for n in range(1, NUM_LEVELS + 1)
        )

    return QuoteRecord(
        packet_time_ns=packet_time_ns,
        accept_time=values['accept_time'],
        issue_code=values['issue_code'],
        bids=levels('bid'),
        asks=levels('ask'),
    )
