"""Shared test fixtures: quote payloads, scapy-built frames and pcap files."""

import struct

import pytest
from scapy.layers.inet import IP, UDP
from scapy.layers.l2 import Ether
from scapy.packet import Raw

# 2023-11-14 22:13:20.123456 UTC
BASE_TIME_NS = 1_700_000_000_123_456_000

DEFAULT_BIDS = [(25, 18230), (50, 18235), (100, 18240), (300, 18245), (500, 18250)]
DEFAULT_ASKS = [(100, 18255), (200, 18260), (300, 18265), (400, 18270), (500, 18275)]


def build_quote_payload(issue_code="US0378331005", bids=None, asks=None,
                        accept_time="09300010", tag=b"B6034", tail=b"\xff"):
    """B6034 message: levels are (quantity, raw price) pairs, best first."""
    bids = DEFAULT_BIDS if bids is None else bids
    asks = DEFAULT_ASKS if asks is None else asks

    payload = tag + issue_code.encode("ascii")
    payload += b"001" + b"20" + b"0000975"  # seq no, market status, total bid volume
    for qty, px in bids:
        payload += f"{px:05d}{qty:07d}".encode()
    payload += b"0001500"  # total ask volume
    for qty, px in asks:
        payload += f"{px:05d}{qty:07d}".encode()
    payload += b"0" * 50  # valid quote counts
    payload += accept_time.encode()
    assert len(payload) == 214
    return payload + tail


def build_frame(payload, dport=15515, sport=40000):
    """Ethernet/IPv4/UDP frame carrying the payload."""
    pkt = (Ether(src="00:11:22:33:44:55", dst="01:00:5e:25:36:01")
           / IP(src="10.0.0.1", dst="233.37.54.1")
           / UDP(sport=sport, dport=dport)
           / Raw(load=payload))
    return bytes(pkt)


def build_pcap(records, link_type=1, byte_order="<", nanosecond=False, version=(2, 4)):
    """Classic pcap bytes from (timestamp_ns, frame) pairs."""
    magic = 0xa1b23c4d if nanosecond else 0xa1b2c3d4
    data = struct.pack(byte_order + "IHHiIII", magic, version[0], version[1], 0, 0, 262144, link_type)
    for timestamp_ns, frame in records:
        sec, frac_ns = divmod(timestamp_ns, 1_000_000_000)
        frac = frac_ns if nanosecond else frac_ns // 1000
        data += struct.pack(byte_order + "IIII", sec, frac, len(frame), len(frame)) + frame
    return data


@pytest.fixture
def base_time_ns():
    return BASE_TIME_NS


@pytest.fixture
def quote_payload():
    return build_quote_payload


@pytest.fixture
def make_frame():
    return build_frame


@pytest.fixture
def make_pcap():
    return build_pcap


@pytest.fixture
def write_pcap(tmp_path):
    """Write pcap bytes built from (timestamp_ns, frame) pairs; returns the path."""
    def _write(records, name="capture.pcap", **kwargs):
        path = tmp_path / name
        path.write_bytes(build_pcap(records, **kwargs))
        return path
    return _write


@pytest.fixture
def scenario_capture(write_pcap):
    """Three quotes captured in order with accept times .10, .05, .05."""
    accept_times = ["09300010", "09300005", "09300005"]
    issue_codes = ["KR4101T30001", "KR4101T30002", "KR4101T30003"]
    records = [
        (BASE_TIME_NS + i * 1000, build_frame(build_quote_payload(issue_code=code, accept_time=t)))
        for i, (code, t) in enumerate(zip(issue_codes, accept_times))
    ]
    return write_pcap(records)
