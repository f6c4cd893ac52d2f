"""
Datagram Extractor.

Strips link, IPv4 and UDP headers from a captured frame with scapy layers and
returns the UDP payload. Frames that are not UDP over IPv4 are skipped; only
headers that claim more bytes than the frame holds are errors.
"""

from dataclasses import dataclass
from typing import Collection, Optional

from scapy.layers.inet import IP, UDP
from scapy.layers.l2 import CookedLinux, Dot1Q, Ether

from .capture import CaptureRecord
from .errors import TruncatedFrame


# pcap LINKTYPE_* values
LINKTYPE_ETHERNET = 1
LINKTYPE_RAW = 101
LINKTYPE_LINUX_SLL = 113
LINKTYPE_IPV4 = 228

# link type -> (scapy layer, fixed header length)
LINK_LAYERS = {
    LINKTYPE_ETHERNET: (Ether, 14),
    LINKTYPE_RAW: (IP, 20),
    LINKTYPE_LINUX_SLL: (CookedLinux, 16),
    LINKTYPE_IPV4: (IP, 20),
}

ETHERTYPE_IPV4 = 0x0800
IPV4_MIN_HEADER_LEN = 20
IPPROTO_UDP = 17
UDP_HEADER_LEN = 8


@dataclass(frozen=True)
class Datagram:
    """UDP payload together with the capture time of its record."""
    packet_time_ns: int
    payload: bytes
    src_port: int
    dst_port: int


def _announced_ipv4(pkt) -> Optional[bytes]:
    """Bytes after the innermost link header, when that header announces IPv4."""
    carrier = pkt
    while isinstance(carrier.payload, Dot1Q):
        carrier = carrier.payload

    if isinstance(carrier, CookedLinux):
        ethertype = carrier.proto
    elif isinstance(carrier, (Ether, Dot1Q)):
        ethertype = carrier.type
    else:
        return None

    if ethertype != ETHERTYPE_IPV4:
        return None
    return bytes(carrier.payload)


def extract_datagram(record: CaptureRecord,
                     link_type: int = LINKTYPE_ETHERNET,
                     ports: Collection[int] = ()) -> Optional[Datagram]:
    """
    Extract the UDP payload of a frame.

    Args:
        record: Capture record holding the raw frame
        link_type: pcap link type of the capture
        ports: Accepted UDP destination ports (empty = any)

    Returns:
        Datagram, or None when the frame is not an unfragmented UDP/IPv4 packet
        (or goes to a port outside `ports`)

    Raises:
        TruncatedFrame: a header claims more bytes than remain in the frame
    """
    if link_type not in LINK_LAYERS:
        return None

    layer, header_len = LINK_LAYERS[link_type]
    frame = record.frame
    if len(frame) < header_len:
        raise TruncatedFrame(
            f"Record {record.index}: {len(frame)} bytes, link header needs {header_len}"
        )

    pkt = layer(frame)
    if IP not in pkt:
        # scapy leaves a cut-short IPv4 header as Raw
        remaining = _announced_ipv4(pkt)
        if remaining is None:
            return None
        claimed = max(IPV4_MIN_HEADER_LEN, (remaining[0] & 0x0F) * 4) if remaining else IPV4_MIN_HEADER_LEN
        if len(remaining) < claimed:
            raise TruncatedFrame(
                f"Record {record.index}: IPv4 header claims {claimed} bytes, "
                f"only {len(remaining)} remain"
            )
        return None

    ip = pkt[IP]
    if ip.ihl < 5:
        return None

    ip_available = len(bytes(ip))
    ip_header_len = ip.ihl * 4
    if ip_header_len > ip_available or ip.len > ip_available:
        raise TruncatedFrame(
            f"Record {record.index}: IPv4 header claims {max(ip_header_len, ip.len)} bytes, "
            f"only {ip_available} remain"
        )

    if ip.proto != IPPROTO_UDP:
        return None

    # No reassembly; non-first fragments carry no UDP header at all
    if ip.frag or ip.flags.MF:
        return None

    udp_available = ip.len - ip_header_len
    if UDP not in pkt or udp_available < UDP_HEADER_LEN:
        raise TruncatedFrame(
            f"Record {record.index}: {udp_available} bytes left for a UDP header"
        )

    udp = pkt[UDP]
    if udp.len < UDP_HEADER_LEN or udp.len > udp_available:
        raise TruncatedFrame(
            f"Record {record.index}: UDP length {udp.len}, {udp_available} bytes available"
        )

    if ports and udp.dport not in ports:
        return None

    # Cut at the UDP length so Ethernet padding never reaches the payload
    payload = bytes(udp)[UDP_HEADER_LEN:udp.len]

    return Datagram(
        packet_time_ns=record.timestamp_ns,
        payload=payload,
        src_port=udp.sport,
        dst_port=udp.dport,
    )
