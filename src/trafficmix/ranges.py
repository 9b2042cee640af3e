"""Address and port ranges varied by the generator across packets.

Provides ``AddrRange`` (MAC and IP addresses as raw bytes) and ``PortRange``
(16-bit ports), the text decoders for MAC and IP addresses, and the builders
that accept either a bare value or a ``{"range": {...}}`` block.
"""

from __future__ import annotations

import ipaddress
import re
from collections.abc import Callable, Mapping
from dataclasses import dataclass
from typing import Any

from trafficmix._fields import as_text, as_uint, fold_keys, type_name
from trafficmix.errors import (
    MissingRequiredFieldError,
    RangeInvalidError,
    TypeMismatchError,
    UnknownKeyError,
    nested,
)


__all__ = [
    "AddrRange",
    "AddressDecoder",
    "PortRange",
    "decode_ip",
    "decode_mac",
    "format_ip",
    "format_mac",
    "minimal_bytes",
    "parse_addr",
    "parse_ip_addr",
    "parse_mac_addr",
    "parse_port",
]


type AddressDecoder = Callable[[str], bytes]

_MAC_PATTERN = re.compile(
    r"^[0-9a-f]{2}(?P<sep>[:-])(?:[0-9a-f]{2}(?P=sep)){4}[0-9a-f]{2}$",
    re.IGNORECASE,
)

_RANGE_KEYS = frozenset({"min", "max", "start", "incr"})


def minimal_bytes(value: int) -> bytes:
    """Return the unpadded big-endian form of a non-negative integer.

    Zero is the empty byte string.

    Examples
    --------
    >>> minimal_bytes(1)
    b'\\x01'
    >>> minimal_bytes(256)
    b'\\x01\\x00'
    >>> minimal_bytes(0)
    b''
    """
    return value.to_bytes((value.bit_length() + 7) // 8, "big")


@dataclass(frozen=True)
class AddrRange:
    """Range of fixed-width addresses.

    ``min``, ``max`` and ``current`` share one width (6 bytes for MAC, 4 for
    IPv4, 16 for IPv6) and compare as big-endian unsigned integers. ``incr``
    is the unpadded big-endian magnitude of the step; a consumer widens it to
    the address width before adding it to ``current``.

    Parameters
    ----------
    min : bytes
        Lowest address of the range.
    max : bytes
        Highest address of the range.
    current : bytes
        Address the generator starts from.
    incr : bytes
        Step between consecutive addresses, minimal big-endian form.

    Examples
    --------
    >>> r = AddrRange(min=b"\\x0a\\x00\\x00\\x01", max=b"\\x0a\\x00\\x00\\xff",
    ...               current=b"\\x0a\\x00\\x00\\x01", incr=b"\\x01")
    >>> r.width, r.incr_value, r.is_fixed
    (4, 1, False)
    """

    min: bytes
    max: bytes
    current: bytes
    incr: bytes = b""

    @classmethod
    def single(cls, address: bytes) -> AddrRange:
        """Range holding one address and no increment."""
        return cls(min=address, max=address, current=address, incr=b"")

    @property
    def width(self) -> int:
        return len(self.min)

    @property
    def incr_value(self) -> int:
        return int.from_bytes(self.incr, "big")

    @property
    def is_fixed(self) -> bool:
        return self.min == self.max


@dataclass(frozen=True)
class PortRange:
    """Range of 16-bit ports.

    Examples
    --------
    >>> PortRange.single(80)
    PortRange(min=80, max=80, current=80, incr=0)
    """

    min: int
    max: int
    current: int
    incr: int = 0

    @classmethod
    def single(cls, port: int) -> PortRange:
        """Range holding one port and no increment."""
        return cls(min=port, max=port, current=port, incr=0)

    @property
    def is_fixed(self) -> bool:
        return self.min == self.max


# ---------------------------------------------------------------------------
# Text decoders
# ---------------------------------------------------------------------------


def decode_mac(text: str) -> bytes:
    """Decode a 48-bit MAC address written with ``:`` or ``-`` separators.

    Raises
    ------
    TypeMismatchError
        If *text* is not a MAC address.

    Examples
    --------
    >>> decode_mac("00:1B:21:3a:4c:5d").hex()
    '001b213a4c5d'
    """
    if not _MAC_PATTERN.match(text):
        msg = f"invalid MAC address {text!r}"
        raise TypeMismatchError(msg)
    return bytes.fromhex(re.sub(r"[:-]", "", text))


def decode_ip(text: str) -> bytes:
    """Decode an IPv4 (4 bytes) or IPv6 (16 bytes) address.

    Examples
    --------
    >>> decode_ip("192.168.0.1")
    b'\\xc0\\xa8\\x00\\x01'
    >>> len(decode_ip("fe80::1"))
    16
    """
    try:
        return ipaddress.ip_address(text).packed
    except ValueError:
        msg = f"invalid IP address {text!r}"
        raise TypeMismatchError(msg) from None


def format_mac(address: bytes) -> str:
    return ":".join(f"{octet:02x}" for octet in address)


def format_ip(address: bytes) -> str:
    return str(ipaddress.ip_address(address))


def _format_bytes(address: bytes) -> str:
    return address.hex(":") if address else "<empty>"


# ---------------------------------------------------------------------------
# Builders
# ---------------------------------------------------------------------------


def _range_block(value: Any) -> dict[str, Any]:
    """Unwrap ``{"range": {...}}`` and check the inner key set."""
    outer = fold_keys(value)
    unknown = sorted(set(outer) - {"range"})
    if unknown:
        msg = f"unknown key {unknown[0]!r}, expected 'range'"
        raise UnknownKeyError(msg)
    if "range" not in outer:
        msg = "expected a 'range' block"
        raise MissingRequiredFieldError(msg)
    with nested("range"):
        inner = fold_keys(outer["range"])
        unknown = sorted(set(inner) - _RANGE_KEYS)
        if unknown:
            msg = f"unknown key {unknown[0]!r}, expected min, max, start or incr"
            raise UnknownKeyError(msg)
        if "min" not in inner or "max" not in inner:
            msg = "min and max values should be given for range"
            raise MissingRequiredFieldError(msg)
    return inner


def parse_addr(value: Any, decode: AddressDecoder) -> AddrRange:
    """Build an ``AddrRange`` from a bare address or a range block.

    *decode* turns address text into bytes and is chosen by the caller
    (``decode_mac`` or ``decode_ip``) according to the field being parsed.

    Raises
    ------
    MissingRequiredFieldError
        If a range block lacks ``min`` or ``max``.
    RangeInvalidError
        If ``max < min``, ``start`` falls outside ``[min, max]``, widths
        differ, or ``incr`` is negative.
    """
    if isinstance(value, str):
        return AddrRange.single(decode(value))
    if not isinstance(value, Mapping):
        msg = f"expected an address or a range block, got {type_name(value)}"
        raise TypeMismatchError(msg)

    block = _range_block(value)
    with nested("range"):
        with nested("min"):
            low = decode(as_text(block["min"]))
        with nested("max"):
            high = decode(as_text(block["max"]))
        if len(low) != len(high):
            msg = f"min and max have different widths ({len(low)} and {len(high)} bytes)"
            raise RangeInvalidError(msg)
        if high < low:
            msg = f"min value should be less than max: min={_format_bytes(low)}, max={_format_bytes(high)}"
            raise RangeInvalidError(msg)

        current = low
        if "start" in block:
            with nested("start"):
                current = decode(as_text(block["start"]))
            if len(current) != len(low):
                msg = f"start has a different width than min and max ({len(current)} bytes)"
                raise RangeInvalidError(msg)
        if not low <= current <= high:
            msg = (
                "start value should be between min and max: "
                f"start={_format_bytes(current)}, min={_format_bytes(low)}, max={_format_bytes(high)}"
            )
            raise RangeInvalidError(msg)

        incr = b"\x01"
        if "incr" in block:
            with nested("incr"):
                incr = minimal_bytes(as_uint(block["incr"]))

    return AddrRange(min=low, max=high, current=current, incr=incr)


def parse_mac_addr(value: Any) -> AddrRange:
    return parse_addr(value, decode_mac)


def parse_ip_addr(value: Any) -> AddrRange:
    return parse_addr(value, decode_ip)


def parse_port(value: Any) -> PortRange:
    """Build a ``PortRange`` from a bare port number or a range block.

    Examples
    --------
    >>> parse_port(443)
    PortRange(min=443, max=443, current=443, incr=0)
    >>> parse_port({"range": {"min": 1000, "max": 2000, "incr": 10}})
    PortRange(min=1000, max=2000, current=1000, incr=10)
    """
    if not isinstance(value, Mapping):
        return PortRange.single(as_uint(value, bits=16))

    block = _range_block(value)
    with nested("range"):
        fields: dict[str, int] = {}
        for key in ("min", "max", "start", "incr"):
            if key in block:
                with nested(key):
                    fields[key] = as_uint(block[key], bits=16)

        low, high = fields["min"], fields["max"]
        if high < low:
            msg = f"min value should be <= max value: min={low}, max={high}"
            raise RangeInvalidError(msg)
        current = fields.get("start", low)
        if not low <= current <= high:
            msg = f"start should be in range of min and max: start={current}, min={low}, max={high}"
            raise RangeInvalidError(msg)

    return PortRange(min=low, max=high, current=current, incr=fields.get("incr", 1))
