#!/usr/bin/env python3
"""
KOSPI200 Quote Parser - Main Entry Point

Reads a PCAP capture of the KOSPI200 futures feed and prints every B6034
quote message, in capture order or reordered by exchange accept time.

Usage:
    python main.py capture.pcap [-r] [-l compact|detailed] [-o quotes.txt]
"""
import sys

from quote_parser.cli import main


if __name__ == '__main__':
    sys.exit(main())
