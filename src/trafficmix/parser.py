"""Turn a decoded mix document into a ``MixConfig``.

The document is the untyped tree a JSON or TOML decoder hands back. Its root
holds either a single ``ether`` block (one packet template, quantity 1) or one
or more ``mix<N>`` entries, each pairing an ``ether`` block with a quantity::

    {"mix1": {"ether": {...}, "quantity": 10},
     "mix2": {"ether": {...}, "q": 1}}

Keys match case-insensitively. Each block is decoded in one pass over its
full key set: the block's own fields first, then at most one nested block
(a header or a payload). The first malformed value aborts the whole document.
"""

from __future__ import annotations

import logging
import random
import re
from collections.abc import Callable, Mapping
from typing import Any

from trafficmix._fields import as_bool, as_int, as_uint, fold_keys, type_name
from trafficmix.errors import (
    MissingRequiredFieldError,
    RangeInvalidError,
    TypeMismatchError,
    UnknownKeyError,
    nested,
)
from trafficmix.headers import (
    ArpHeader,
    EtherHeader,
    IcmpHeader,
    IpHeader,
    TcpFlags,
    TcpHeader,
    UdpHeader,
    VlanTag,
    describe,
    parse_tcp_flags,
)
from trafficmix.mix import MixConfig, MixEntry
from trafficmix.payload import PAYLOAD_KEYS, RawPayload, parse_payload
from trafficmix.ranges import parse_ip_addr, parse_mac_addr, parse_port
from trafficmix.sequence import parse_sequence


__all__ = ["MIX_KEY_PATTERN", "ConfigParser", "parse_config"]

logger = logging.getLogger("trafficmix.parser")

MIX_KEY_PATTERN = re.compile(r"mix[0-9]*")

_ETHER_FIELDS = frozenset({"saddr", "daddr", "vlan-tci"})
_IP_FIELDS = frozenset({"version", "saddr", "daddr"})
_ARP_FIELDS = frozenset({"opcode", "gratuitous", "sha", "spa", "tha", "tpa"})
_TCP_FIELDS = frozenset({"sport", "dport", "seq", "flags"})
_UDP_FIELDS = frozenset({"sport", "dport"})
_ICMP_FIELDS = frozenset({"type", "code", "identifier", "id", "seq", "seqnum"})
_MIX_FIELDS = frozenset({"ether", "quantity", "q"})


def _last_of(fields: Mapping[str, Any], *aliases: str) -> tuple[str, Any] | None:
    """Return the last ``(key, value)`` among *aliases* in document order."""
    found = [(key, value) for key, value in fields.items() if key in aliases]
    return found[-1] if found else None


class ConfigParser:
    """Recursive decoder from a mix document to a ``MixConfig``.

    Parameters
    ----------
    rng : random.Random | None
        Source of the 32-bit seeds drawn for random sequence counters.
        Defaults to the ``random`` module's shared generator.

    Examples
    --------
    >>> parser = ConfigParser(rng=random.Random(7))
    >>> mix = parser.parse({"ether": {"ip": {"udp": {"dport": 53}}}})
    >>> mix[0].packet.child.child.dport.current
    53
    """

    def __init__(self, *, rng: random.Random | None = None) -> None:
        self._rng = rng

    def parse(self, document: Any) -> MixConfig:
        """Parse a whole document.

        Raises
        ------
        MixConfigError
            On the first malformed value; no partial result is returned.
        """
        if not isinstance(document, Mapping):
            msg = f"document root should be a mapping, got {type_name(document)}"
            raise TypeMismatchError(msg)
        fields = fold_keys(document)
        if not fields:
            msg = "expected 'ether' or mix[0-9]* key, but did not get any"
            raise MissingRequiredFieldError(msg)

        mix_keys = [key for key in fields if MIX_KEY_PATTERN.fullmatch(key)]
        for key in fields:
            if key != "ether" and key not in mix_keys:
                msg = f"unexpected key {key!r}, expected mix[0-9]* or ether"
                raise UnknownKeyError(msg)

        if "ether" in fields:
            if mix_keys:
                msg = f"unexpected key {mix_keys[0]!r}, 'ether' can't be combined with mix[0-9]* entries"
                raise UnknownKeyError(msg)
            with nested("ether"):
                packet = self.ether(fields["ether"])
            logger.debug("Parsed single packet template: %s", describe(packet))
            return MixConfig((MixEntry(packet, quantity=1),))

        entries = tuple(self._mix_entry(key, fields[key]) for key in mix_keys)
        config = MixConfig(entries)
        logger.debug(
            "Parsed mix with %d entries, %d packets per round",
            len(config),
            config.total_quantity,
        )
        return config

    def _mix_entry(self, name: str, value: Any) -> MixEntry:
        with nested(name):
            fields = fold_keys(value)
            for key in fields:
                if key not in _MIX_FIELDS:
                    msg = f"unexpected key {key!r}, expected ether and quantity or q"
                    raise UnknownKeyError(msg)
            if "ether" not in fields:
                msg = "mix entry needs an 'ether' block"
                raise MissingRequiredFieldError(msg)
            quantity_field = _last_of(fields, "quantity", "q")
            if quantity_field is None:
                msg = "mix entry needs a 'quantity' (or 'q')"
                raise MissingRequiredFieldError(msg)

            with nested("ether"):
                packet = self.ether(fields["ether"])

            key, raw = quantity_field
            with nested(key):
                quantity = as_uint(raw, bits=32)
                if quantity == 0:
                    msg = "quantity should be greater than zero"
                    raise MissingRequiredFieldError(msg)

        logger.debug("Parsed %s: %s x%d", name, describe(packet), quantity)
        return MixEntry(packet, quantity=quantity, name=name)

    # -----------------------------------------------------------------------
    # Nested block dispatch
    # -----------------------------------------------------------------------

    def _child(
        self,
        fields: Mapping[str, Any],
        own: frozenset[str],
        headers: Mapping[str, Callable[[Any], Any]],
    ) -> Any:
        """Decode the single nested block among the keys that are not *own* fields.

        Keys naming a header in *headers* recurse into that header's decoder;
        anything else goes to the payload dispatcher.
        """
        rest = [key for key in fields if key not in own]
        for key in rest:
            if key not in headers and key not in PAYLOAD_KEYS:
                expected = sorted(own | set(headers) | PAYLOAD_KEYS)
                msg = f"unknown key {key!r}, expected one of {', '.join(expected)}"
                raise UnknownKeyError(msg)
        if len(rest) > 1:
            msg = f"block holds more than one nested block: {', '.join(rest)}"
            raise TypeMismatchError(msg)
        if not rest:
            return None

        key = rest[0]
        decode = headers.get(key)
        if decode is None:
            return parse_payload(key, fields[key])
        with nested(key):
            return decode(fields[key])

    # -----------------------------------------------------------------------
    # Header decoders
    # -----------------------------------------------------------------------

    def ether(self, value: Any) -> EtherHeader:
        """Decode an ``ether`` block."""
        fields = fold_keys(value)
        saddr = daddr = vlan = None
        if "saddr" in fields:
            with nested("saddr"):
                saddr = parse_mac_addr(fields["saddr"])
        if "daddr" in fields:
            with nested("daddr"):
                daddr = parse_mac_addr(fields["daddr"])
        if "vlan-tci" in fields:
            with nested("vlan-tci"):
                vlan = VlanTag(as_uint(fields["vlan-tci"], bits=16))
        child = self._child(fields, _ETHER_FIELDS, {"ip": self.ip, "arp": self.arp})
        return EtherHeader(saddr=saddr, daddr=daddr, vlan=vlan, child=child)

    def ip(self, value: Any) -> IpHeader:
        """Decode an ``ip`` block; ``version`` defaults to 4."""
        fields = fold_keys(value)
        version = 4
        saddr = daddr = None
        if "version" in fields:
            with nested("version"):
                version = as_int(fields["version"])
                if version not in (4, 6):
                    msg = f"ip version should be 4 or 6, got: {version}"
                    raise RangeInvalidError(msg)
        if "saddr" in fields:
            with nested("saddr"):
                saddr = parse_ip_addr(fields["saddr"])
        if "daddr" in fields:
            with nested("daddr"):
                daddr = parse_ip_addr(fields["daddr"])
        child = self._child(
            fields,
            _IP_FIELDS,
            {"tcp": self.tcp, "udp": self.udp, "icmp": self.icmp},
        )
        return IpHeader(version=version, saddr=saddr, daddr=daddr, child=child)

    def arp(self, value: Any) -> ArpHeader:
        """Decode an ``arp`` block. ARP carries no nested block."""
        fields = fold_keys(value)
        for key in fields:
            if key not in _ARP_FIELDS:
                msg = f"unrecognized key for arp configuration: {key!r}"
                raise UnknownKeyError(msg)

        opcode = 1
        if "opcode" in fields:
            with nested("opcode"):
                opcode = as_int(fields["opcode"])
                if opcode not in (1, 2):
                    msg = f"supported opcodes are 1 and 2, got: {opcode}"
                    raise RangeInvalidError(msg)
        gratuitous = False
        if "gratuitous" in fields:
            with nested("gratuitous"):
                gratuitous = as_bool(fields["gratuitous"])

        addresses: dict[str, Any] = {}
        for key, decode in (
            ("sha", parse_mac_addr),
            ("spa", parse_ip_addr),
            ("tha", parse_mac_addr),
            ("tpa", parse_ip_addr),
        ):
            if key in fields:
                with nested(key):
                    addresses[key] = decode(fields[key])

        return ArpHeader(opcode=opcode, gratuitous=gratuitous, **addresses)

    def tcp(self, value: Any) -> TcpHeader:
        """Decode a ``tcp`` block."""
        fields = fold_keys(value)
        ports = self._ports(fields)
        seq = None
        flags = TcpFlags(0)
        if "seq" in fields:
            with nested("seq"):
                seq = parse_sequence(fields["seq"], self._rng)
        if "flags" in fields:
            with nested("flags"):
                flags = parse_tcp_flags(fields["flags"])
        child = self._child(fields, _TCP_FIELDS, {})
        return TcpHeader(**ports, seq=seq, flags=flags, child=child)

    def udp(self, value: Any) -> UdpHeader:
        """Decode a ``udp`` block."""
        fields = fold_keys(value)
        ports = self._ports(fields)
        child = self._child(fields, _UDP_FIELDS, {})
        return UdpHeader(**ports, child=child)

    def icmp(self, value: Any) -> IcmpHeader:
        """Decode an ``icmp`` block; without a payload key it carries an empty raw payload."""
        fields = fold_keys(value)
        numbers: dict[str, int] = {}
        for name, aliases, bits in (
            ("type", ("type",), 8),
            ("code", ("code",), 8),
            ("identifier", ("identifier", "id"), 16),
        ):
            found = _last_of(fields, *aliases)
            if found is not None:
                key, raw = found
                with nested(key):
                    numbers[name] = as_uint(raw, bits=bits)

        seq = None
        seq_field = _last_of(fields, "seq", "seqnum")
        if seq_field is not None:
            key, raw = seq_field
            with nested(key):
                seq = parse_sequence(raw, self._rng)

        child = self._child(fields, _ICMP_FIELDS, {})
        return IcmpHeader(
            **numbers,
            seq=seq,
            child=RawPayload("") if child is None else child,
        )

    def _ports(self, fields: Mapping[str, Any]) -> dict[str, Any]:
        ports: dict[str, Any] = {}
        for key in ("sport", "dport"):
            if key in fields:
                with nested(key):
                    ports[key] = parse_port(fields[key])
        return ports


def parse_config(document: Any, *, rng: random.Random | None = None) -> MixConfig:
    """Parse a decoded mix document into a ``MixConfig``.

    Parameters
    ----------
    document : Any
        Root of the decoded document (mapping of ``ether`` or ``mix*`` keys).
    rng : random.Random | None
        Source of random sequence seeds.

    Returns
    -------
    MixConfig

    Raises
    ------
    UnknownKeyError
        An unrecognized key, or ``ether`` combined with ``mix*`` keys.
    TypeMismatchError
        A value of the wrong shape.
    RangeInvalidError
        A value out of bounds.
    MissingRequiredFieldError
        A required field is absent, or a quantity is zero.

    Examples
    --------
    >>> mix = parse_config({"ether": {"daddr": "ff:ff:ff:ff:ff:ff",
    ...                               "ip": {"version": 4, "tcp": {"dport": 80}}}})
    >>> len(mix), mix[0].quantity
    (1, 1)
    >>> describe(mix[0].packet)
    'ether > ip > tcp'
    """
    return ConfigParser(rng=rng).parse(document)
