"""
CSV export and run summary for decoded quotes.
"""

import logging
from typing import Iterable, List

import pandas as pd

from .formatter import format_time_of_day
from .message import NUM_LEVELS, QuoteRecord

logger = logging.getLogger(__name__)


def _level_columns(side: str) -> List[str]:
    columns = []
    for n in range(1, NUM_LEVELS + 1):
        columns += [f"{side}_qty_{n}", f"{side}_px_{n}"]
    return columns


COLUMNS = (
    ['packet_time_ns', 'packet_time_s', 'accept_time', 'accept_us', 'issue_code']
    + _level_columns('bid')
    + _level_columns('ask')
)


def _micros_of_day(quote: QuoteRecord) -> int:
    t = quote.accept_time
    return ((t.hour * 60 + t.minute) * 60 + t.second) * 1_000_000 + t.microsecond


def quotes_to_frame(quotes: Iterable[QuoteRecord], price_decimals: int = 2) -> pd.DataFrame:
    """
    One row per quote, in the order given.

    Prices are scaled by the implied decimals (18230 -> 182.3).
    """
    scale = 10 ** price_decimals
    rows = []
    for quote in quotes:
        row = {
            'packet_time_ns': quote.packet_time_ns,
            'packet_time_s': quote.packet_time_ns / 1e9,
            'accept_time': format_time_of_day(quote.accept_time),
            'accept_us': _micros_of_day(quote),
            'issue_code': quote.issue_code.strip(),
        }
        for side, levels in (('bid', quote.bids), ('ask', quote.asks)):
            for n, level in enumerate(levels, start=1):
                row[f"{side}_qty_{n}"] = level.quantity
                row[f"{side}_px_{n}"] = level.price / scale
        rows.append(row)

    return pd.DataFrame(rows, columns=COLUMNS)


def quotes_to_csv(quotes: Iterable[QuoteRecord], output_path: str, price_decimals: int = 2) -> int:
    """Write quotes to a CSV file. Returns the number of rows written."""
    df = quotes_to_frame(quotes, price_decimals)
    df.to_csv(output_path, index=False)
    logger.info("Wrote %d rows to %s", len(df), output_path)
    return len(df)


def get_quote_summary(quotes: Iterable[QuoteRecord]) -> dict:
    """
    Summary statistics of a run.

    out_of_order counts quotes whose accept time is earlier than the
    latest accept time captured before them.
    """
    df = quotes_to_frame(quotes)

    if len(df) == 0:
        return {
            'total_quotes': 0,
            'issue_codes': 0,
            'first_accept_time': None,
            'last_accept_time': None,
            'out_of_order': 0,
            'quotes_per_issue': {},
        }

    accept_us = df['accept_us'].astype('int64')
    latest_before = accept_us.cummax().shift(1)

    return {
        'total_quotes': len(df),
        'issue_codes': int(df['issue_code'].nunique()),
        'first_accept_time': df.loc[accept_us.idxmin(), 'accept_time'],
        'last_accept_time': df.loc[accept_us.idxmax(), 'accept_time'],
        'out_of_order': int((accept_us < latest_before).sum()),
        'quotes_per_issue': {k: int(v) for k, v in df['issue_code'].value_counts().items()},
    }
