"""Protocol header templates.

Each header is a frozen dataclass holding its own fields plus at most one
owned ``child``: the next header in the stack or the payload. The resulting
tree mirrors the layout of the packets the generator emits, always rooted at
``EtherHeader``::

    EtherHeader -> IpHeader -> TcpHeader | UdpHeader | IcmpHeader -> Payload
                -> ArpHeader
                -> Payload
"""

from __future__ import annotations

from dataclasses import dataclass
from enum import IntFlag
from typing import Any, ClassVar

from trafficmix._fields import as_list, as_text
from trafficmix.errors import RangeInvalidError, nested
from trafficmix.kinds import DataType
from trafficmix.payload import Payload, RawPayload
from trafficmix.ranges import AddrRange, PortRange
from trafficmix.sequence import Sequence


__all__ = [
    "ArpHeader",
    "EtherChild",
    "EtherHeader",
    "IcmpHeader",
    "IpChild",
    "IpHeader",
    "Node",
    "ProtocolHeader",
    "TcpFlags",
    "TcpHeader",
    "UdpHeader",
    "VlanTag",
    "describe",
    "header_chain",
    "parse_tcp_flags",
]


class TcpFlags(IntFlag):
    """TCP control bits as laid out in the flags octet."""

    FIN = 0x01
    SYN = 0x02
    RST = 0x04
    PSH = 0x08
    ACK = 0x10
    URG = 0x20
    ECE = 0x40
    CWR = 0x80


_FLAG_NAMES: dict[str, TcpFlags] = {flag.name.lower(): flag for flag in TcpFlags}


def parse_tcp_flags(value: Any) -> TcpFlags:
    """Fold an array of flag names into a ``TcpFlags`` value.

    Each name toggles its bit, so naming a flag twice clears it again.

    Examples
    --------
    >>> parse_tcp_flags(["syn", "ACK"]) == TcpFlags.SYN | TcpFlags.ACK
    True
    >>> parse_tcp_flags(["syn", "syn"])
    <TcpFlags: 0>
    """
    flags = TcpFlags(0)
    for index, item in enumerate(as_list(value)):
        with nested(f"[{index}]"):
            name = as_text(item).lower()
            if name not in _FLAG_NAMES:
                msg = f"unknown flag value {item!r}, expected one of {', '.join(_FLAG_NAMES)}"
                raise RangeInvalidError(msg)
        flags ^= _FLAG_NAMES[name]
    return flags


@dataclass(frozen=True)
class VlanTag:
    """802.1Q tag inserted after the Ethernet addresses."""

    kind: ClassVar[DataType] = DataType.VLAN

    tci: int


@dataclass(frozen=True)
class ArpHeader:
    """ARP request or reply template.

    Parameters
    ----------
    opcode : int
        ``1`` for request, ``2`` for reply.
    gratuitous : bool
        Announce the sender's own address.
    sha, tha : AddrRange | None
        Sender and target hardware (MAC) addresses.
    spa, tpa : AddrRange | None
        Sender and target protocol (IP) addresses.
    """

    kind: ClassVar[DataType] = DataType.ARP

    opcode: int = 1
    gratuitous: bool = False
    sha: AddrRange | None = None
    spa: AddrRange | None = None
    tha: AddrRange | None = None
    tpa: AddrRange | None = None


@dataclass(frozen=True)
class TcpHeader:
    kind: ClassVar[DataType] = DataType.TCP

    sport: PortRange | None = None
    dport: PortRange | None = None
    seq: Sequence | None = None
    flags: TcpFlags = TcpFlags(0)
    child: Payload | None = None


@dataclass(frozen=True)
class UdpHeader:
    kind: ClassVar[DataType] = DataType.UDP

    sport: PortRange | None = None
    dport: PortRange | None = None
    child: Payload | None = None


@dataclass(frozen=True)
class IcmpHeader:
    """ICMP message template; carries an empty raw payload unless told otherwise."""

    kind: ClassVar[DataType] = DataType.ICMP

    type: int = 0
    code: int = 0
    identifier: int = 0
    seq: Sequence | None = None
    child: Payload | None = RawPayload("")


type IpChild = TcpHeader | UdpHeader | IcmpHeader | Payload


@dataclass(frozen=True)
class IpHeader:
    """IPv4 or IPv6 header template.

    ``version`` and the address family of ``saddr``/``daddr`` are not
    cross-checked; the generator builds the header from ``version``.
    """

    kind: ClassVar[DataType] = DataType.IP

    version: int = 4
    saddr: AddrRange | None = None
    daddr: AddrRange | None = None
    child: IpChild | None = None


type EtherChild = IpHeader | ArpHeader | Payload


@dataclass(frozen=True)
class EtherHeader:
    """Root of every packet template.

    Parameters
    ----------
    saddr, daddr : AddrRange | None
        Source and destination MAC addresses.
    vlan : VlanTag | None
        Optional 802.1Q tag.
    child : EtherChild | None
        ``IpHeader``, ``ArpHeader`` or a payload.

    Examples
    --------
    >>> from trafficmix.ranges import AddrRange
    >>> eth = EtherHeader(daddr=AddrRange.single(b"\\xff" * 6), child=IpHeader())
    >>> [node.kind.value for node in header_chain(eth)]
    ['ether', 'ip']
    """

    kind: ClassVar[DataType] = DataType.ETHER

    saddr: AddrRange | None = None
    daddr: AddrRange | None = None
    vlan: VlanTag | None = None
    child: EtherChild | None = None


type ProtocolHeader = (
    EtherHeader | VlanTag | ArpHeader | IpHeader | TcpHeader | UdpHeader | IcmpHeader
)

type Node = EtherHeader | ArpHeader | IpHeader | TcpHeader | UdpHeader | IcmpHeader | Payload


def header_chain(root: Node) -> tuple[Node, ...]:
    """Return the nodes from *root* down to the innermost header or payload.

    A ``Distribution`` ends the chain; its alternatives are not expanded.
    """
    chain: list[Node] = []
    node: Node | None = root
    while node is not None:
        chain.append(node)
        match node:
            case EtherHeader() | IpHeader() | TcpHeader() | UdpHeader() | IcmpHeader():
                node = node.child
            case _:
                node = None
    return tuple(chain)


def describe(root: Node) -> str:
    """Render the header stack of *root* as ``"ether > ip > tcp > raw"``."""
    return " > ".join(node.kind.value for node in header_chain(root))
