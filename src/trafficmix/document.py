"""Render a ``MixConfig`` back into the document shape the parser reads.

``parse_config(dump_document(mix))`` rebuilds an equal ``MixConfig``, except
for the seeds of random sequences, which the parser draws afresh.
"""

from __future__ import annotations

from collections.abc import Callable
from typing import Any

from trafficmix.headers import (
    ArpHeader,
    EtherHeader,
    IcmpHeader,
    IpHeader,
    Node,
    TcpFlags,
    TcpHeader,
    UdpHeader,
)
from trafficmix.mix import MixConfig, MixEntry
from trafficmix.payload import Distribution, RandomBytes, RawPayload
from trafficmix.ranges import AddrRange, PortRange, format_ip, format_mac
from trafficmix.sequence import Sequence


__all__ = ["dump_document", "dump_packet"]


def _addr(value: AddrRange, fmt: Callable[[bytes], str]) -> Any:
    if value.is_fixed and value.incr_value == 0:
        return fmt(value.min)
    return {
        "range": {
            "min": fmt(value.min),
            "max": fmt(value.max),
            "start": fmt(value.current),
            "incr": value.incr_value,
        }
    }


def _port(value: PortRange) -> Any:
    if value.is_fixed and value.incr == 0:
        return value.min
    return {
        "range": {
            "min": value.min,
            "max": value.max,
            "start": value.current,
            "incr": value.incr,
        }
    }


def _sequence(value: Sequence) -> str:
    return value.type.value


def _flags(value: TcpFlags) -> list[str]:
    return [flag.name.lower() for flag in TcpFlags if flag in value]


def _optional(block: dict[str, Any], key: str, value: Any, render: Callable[[Any], Any]) -> None:
    if value is not None:
        block[key] = render(value)


def _payload(node: RawPayload | RandomBytes) -> dict[str, Any]:
    match node:
        case RawPayload(data=data):
            return {"data": data}
        case RandomBytes(size=size, deviation=deviation):
            return {"size": size, "deviation": deviation}


def _header(node: Node) -> dict[str, Any]:
    block: dict[str, Any] = {}
    match node:
        case EtherHeader(saddr=saddr, daddr=daddr, vlan=vlan):
            _optional(block, "saddr", saddr, lambda v: _addr(v, format_mac))
            _optional(block, "daddr", daddr, lambda v: _addr(v, format_mac))
            _optional(block, "vlan-tci", vlan, lambda v: v.tci)
        case IpHeader(version=version, saddr=saddr, daddr=daddr):
            block["version"] = version
            _optional(block, "saddr", saddr, lambda v: _addr(v, format_ip))
            _optional(block, "daddr", daddr, lambda v: _addr(v, format_ip))
        case ArpHeader(opcode=opcode, gratuitous=gratuitous):
            block["opcode"] = opcode
            block["gratuitous"] = gratuitous
            for key, fmt in (("sha", format_mac), ("spa", format_ip), ("tha", format_mac), ("tpa", format_ip)):
                _optional(block, key, getattr(node, key), lambda v, f=fmt: _addr(v, f))
        case TcpHeader(sport=sport, dport=dport, seq=seq, flags=flags):
            _optional(block, "sport", sport, _port)
            _optional(block, "dport", dport, _port)
            _optional(block, "seq", seq, _sequence)
            block["flags"] = _flags(flags)
        case UdpHeader(sport=sport, dport=dport):
            _optional(block, "sport", sport, _port)
            _optional(block, "dport", dport, _port)
        case IcmpHeader(type=icmp_type, code=code, identifier=identifier, seq=seq):
            block["type"] = icmp_type
            block["code"] = code
            block["identifier"] = identifier
            _optional(block, "seq", seq, _sequence)

    child = getattr(node, "child", None)
    if child is not None:
        block[child.kind.value] = _body(child)
    return block


def _pdist(node: Distribution) -> list[dict[str, Any]]:
    return [
        {"probability": entry.probability, entry.data.kind.value: _payload(entry.data)}
        for entry in node.entries
    ]


def _body(node: Node) -> Any:
    """Render *node* and its descendants as the value of its own document key."""
    match node:
        case Distribution():
            return _pdist(node)
        case RawPayload() | RandomBytes():
            return _payload(node)
        case _:
            return _header(node)


def dump_packet(packet: EtherHeader) -> dict[str, Any]:
    """Render one packet template as the body of an ``ether`` key."""
    return _header(packet)


def dump_document(config: MixConfig) -> dict[str, Any]:
    """Render *config* as a document ``parse_config`` accepts.

    A lone unnamed entry of quantity one uses the ``{"ether": ...}`` form;
    anything else is written as ``mix*`` entries under the names they were read from,
    or ``mix<N>`` by position for unnamed entries.

    Examples
    --------
    >>> from trafficmix.parser import parse_config
    >>> dump_document(parse_config({"ether": {"raw": {"data": "hi"}}}))
    {'ether': {'raw': {'data': 'hi'}}}
    """
    entries: tuple[MixEntry, ...] = config.entries
    if len(entries) == 1 and entries[0].name is None and entries[0].quantity == 1:
        return {"ether": dump_packet(entries[0].packet)}
    return {
        entry.name or f"mix{position}": {
            "ether": dump_packet(entry.packet),
            "quantity": entry.quantity,
        }
        for position, entry in enumerate(entries, start=1)
    }
