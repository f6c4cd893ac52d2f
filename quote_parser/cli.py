"""
Command-line interface.

Usage:
    parse-quote capture.pcap                    # compact layout, capture order
    parse-quote capture.pcap -r                 # reorder by accept time
    parse-quote capture.pcap -l detailed -o quotes.txt
    parse-quote capture.pcap --port 15515 --port 15516 --csv quotes.csv --summary

-o/--output takes a file path. Earlier releases used a bare -o to select the
two-line layout; that is now -l detailed, and a bare -o is a usage error.
"""

import argparse
import logging
import sys
from dataclasses import replace
from typing import List, Optional, TextIO

from .config import DEFAULT_PARSER_CONFIG, KOSPI_QUOTE_PORTS
from .errors import QuoteParserError
from .export import get_quote_summary, quotes_to_csv
from .formatter import OutputLayout
from .ordering import OrderMode
from .pipeline import ParseStats, parse_quotes, render_quotes

logger = logging.getLogger('quote_parser')


def build_parser() -> argparse.ArgumentParser:
    parser = argparse.ArgumentParser(
        prog="parse-quote",
        description="Parses KOSPI200 quote messages from PCAP files",
    )
    parser.add_argument("input", help="Input PCAP file")
    parser.add_argument("-r", "--reorder", action="store_true",
                        help="Reorder messages by accept time")
    parser.add_argument("-l", "--layout", choices=[layout.value for layout in OutputLayout],
                        default=OutputLayout.COMPACT.value,
                        help="Output layout (default: compact)")
    parser.add_argument("-o", "--output", metavar="PATH",
                        help="Write quotes to PATH instead of stdout (for the two-line layout use -l detailed)")
    parser.add_argument("--port", type=int, action="append", default=[],
                        help="Accept only this UDP destination port (repeatable)")
    parser.add_argument("--kospi-ports", action="store_true",
                        help=f"Accept only the KOSPI200 feed ports {KOSPI_QUOTE_PORTS}")
    parser.add_argument("--utc-offset", type=int, default=0, metavar="MINUTES",
                        help="UTC offset for wall-clock times and accept-time dates (KST: 540)")
    parser.add_argument("--csv", metavar="PATH",
                        help="Also export the quotes to a CSV file")
    parser.add_argument("--summary", action="store_true",
                        help="Print a run summary to stderr")
    parser.add_argument("-v", "--verbose", action="store_true",
                        help="Log progress and dropped messages")
    return parser


def print_summary(summary: dict, stats: ParseStats, stream: Optional[TextIO] = None) -> None:
    """Print run counters and the quote summary (stderr by default)."""
    stream = stream or sys.stderr
    print(f"\n{'='*60}", file=stream)
    print("  Summary", file=stream)
    print(f"{'='*60}", file=stream)
    print(f"  Records:        {stats.records:,}", file=stream)
    print(f"  UDP datagrams:  {stats.datagrams:,}", file=stream)
    print(f"  Tagged:         {stats.tagged:,}", file=stream)
    print(f"  Malformed:      {stats.malformed:,}", file=stream)
    print(f"  Quotes:         {summary['total_quotes']:,}", file=stream)
    print(f"  Issue codes:    {summary['issue_codes']}", file=stream)
    print(f"  Accept times:   {summary['first_accept_time']} - {summary['last_accept_time']}", file=stream)
    print(f"  Out of order:   {summary['out_of_order']:,}", file=stream)
    for issue_code, count in summary['quotes_per_issue'].items():
        print(f"    {issue_code}: {count:,}", file=stream)


def main(argv: Optional[List[str]] = None) -> int:
    args = build_parser().parse_args(argv)

    logging.basicConfig(
        level=logging.DEBUG if args.verbose else logging.WARNING,
        format="%(levelname)s %(name)s: %(message)s",
        stream=sys.stderr,
    )

    ports = tuple(args.port) + (KOSPI_QUOTE_PORTS if args.kospi_ports else ())
    config = replace(DEFAULT_PARSER_CONFIG, ports=ports, utc_offset_minutes=args.utc_offset)
    order = OrderMode.ACCEPT_TIME if args.reorder else OrderMode.CAPTURE
    layout = OutputLayout(args.layout)

    try:
        result = parse_quotes(args.input, config)
    except (QuoteParserError, OSError) as e:
        print(f"Error: {e}", file=sys.stderr)
        return 1

    lines = render_quotes(result.quotes, order, layout, config)
    if args.output:
        with open(args.output, 'w') as f:
            for line in lines:
                f.write(line + "\n")
        logger.info("Wrote %d quotes to %s", len(result.quotes), args.output)
    else:
        for line in lines:
            print(line)

    if args.csv:
        quotes_to_csv(result.quotes.ordered(order), args.csv, config.price_decimals)

    if args.summary:
        print_summary(get_quote_summary(result.quotes), result.stats)

    return 0
