"""
Capture Reader.

Walks a classic pcap file (global header + packet records) and yields one
CaptureRecord per record. Records are read with scapy's RawPcapReader; the
global header is validated up front because scapy does not check the version.
"""

import struct
from dataclasses import dataclass
from pathlib import Path
from typing import BinaryIO, Iterator, Tuple, Union

from scapy.all import RawPcapReader
from scapy.error import Scapy_Exception

from .errors import MalformedCapture, TruncatedRecord


# magic -> (struct byte order, nanosecond timestamps)
PCAP_MAGICS = {
    b'\xd4\xc3\xb2\xa1': ('<', False),
    b'\xa1\xb2\xc3\xd4': ('>', False),
    b'\x4d\x3c\xb2\xa1': ('<', True),
    b'\xa1\xb2\x3c\x4d': ('>', True),
}
PCAPNG_MAGIC = b'\x0a\x0d\x0d\x0a'

GLOBAL_HEADER_LEN = 24
RECORD_HEADER_LEN = 16
SUPPORTED_VERSION = (2, 4)

# Largest snapshot length libpcap will write
MAX_SNAPLEN = 262144

CaptureSource = Union[str, Path, BinaryIO]


@dataclass(frozen=True)
class PcapHeader:
    """Decoded pcap global header."""
    byte_order: str
    nanosecond: bool
    version: Tuple[int, int]
    snaplen: int
    link_type: int


@dataclass(frozen=True)
class CaptureRecord:
    """One packet record of the capture."""
    index: int
    timestamp_ns: int  # since the Unix epoch
    frame: bytes  # captured bytes only
    wire_length: int


def parse_global_header(data: bytes) -> PcapHeader:
    """
    Validate and decode the 24-byte pcap global header.

    Raises:
        MalformedCapture: short header, unknown magic or unsupported version
    """
    if len(data) < GLOBAL_HEADER_LEN:
        raise MalformedCapture(
            f"Capture too short for a pcap global header ({len(data)} of {GLOBAL_HEADER_LEN} bytes)"
        )

    magic = data[:4]
    if magic == PCAPNG_MAGIC:
        raise MalformedCapture("pcapng captures are not supported (convert with: editcap -F pcap)")
    if magic not in PCAP_MAGICS:
        raise MalformedCapture(f"Not a pcap capture file (bad magic: 0x{magic.hex()})")

    byte_order, nanosecond = PCAP_MAGICS[magic]
    major, minor, _thiszone, _sigfigs, snaplen, link_type = struct.unpack(
        byte_order + 'HHiIII', data[4:GLOBAL_HEADER_LEN]
    )
    if (major, minor) != SUPPORTED_VERSION:
        raise MalformedCapture(f"Unsupported pcap version {major}.{minor}")

    return PcapHeader(
        byte_order=byte_order,
        nanosecond=nanosecond,
        version=(major, minor),
        snaplen=snaplen,
        link_type=link_type,
    )


class CaptureReader:
    """
    Lazy, single-pass reader over a pcap file.

    Accepts a path or a seekable binary file object. A file object passed in
    is left open; a path is opened and closed by the reader.

    Usage:
        with CaptureReader("feed.pcap") as reader:
            for record in reader:
                ...
    """

    def __init__(self, source: CaptureSource):
        if isinstance(source, (str, Path)):
            self._fdesc = open(source, 'rb')
            self._owns_fdesc = True
        else:
            self._fdesc = source
            self._owns_fdesc = False

        try:
            self.header = parse_global_header(self._fdesc.read(GLOBAL_HEADER_LEN))
            self._fdesc.seek(0)
            self._reader = RawPcapReader(self._fdesc)
        except Scapy_Exception as e:
            self.close()
            raise MalformedCapture(str(e)) from e
        except MalformedCapture:
            self.close()
            raise

    @property
    def link_type(self) -> int:
        return self.header.link_type

    def __iter__(self) -> Iterator[CaptureRecord]:
        """
        Yield records until the end of the file.

        A trailing partial record header ends the capture. scapy clips each
        read to its own MTU-based limit, so truncation is judged by how far the
        file position moved, and a clipped record is read again in full.

        Raises:
            TruncatedRecord: a record declares more captured bytes than remain
        """
        ts_scale = 1 if self.header.nanosecond else 1000
        position = self._fdesc.tell()

        for index, (data, meta) in enumerate(self._reader):
            end = self._fdesc.tell()
            available = end - position - RECORD_HEADER_LEN
            if available < meta.caplen:
                raise TruncatedRecord(
                    f"Record {index} claims {meta.caplen} captured bytes, "
                    f"only {available} remain"
                )

            if len(data) < meta.caplen:
                self._fdesc.seek(position + RECORD_HEADER_LEN)
                data = self._fdesc.read(meta.caplen)
            position = end

            yield CaptureRecord(
                index=index,
                timestamp_ns=meta.sec * 1_000_000_000 + meta.usec * ts_scale,
                frame=data,
                wire_length=meta.wirelen,
            )

    def close(self) -> None:
        if self._owns_fdesc:
            self._fdesc.close()

    def __enter__(self) -> "CaptureReader":
        return self

    def __exit__(self, exc_type, exc_value, traceback) -> None:
        self.close()


def read_capture(source: CaptureSource) -> Iterator[CaptureRecord]:
    """Read every record of a pcap file."""
    with CaptureReader(source) as reader:
        yield from reader
