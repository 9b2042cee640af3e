"""msgpack wire form of a ``MixConfig``.

Generator workers receive their packet templates as bytes produced here. The
payload is the re-serialized document (see ``trafficmix.document``), so a
decoded mix goes through the same validation as one read from disk.

Usage:
    from trafficmix.codec import encode, decode

    data = encode(mix)
    same_mix = decode(data)
"""

from __future__ import annotations

import random
from typing import Any

import msgpack

from trafficmix.document import dump_document
from trafficmix.mix import MixConfig
from trafficmix.parser import parse_config
from trafficmix.ranges import minimal_bytes


__all__ = ["decode", "encode"]

# IPv6 increments may not fit in msgpack's 64-bit integers
_BIGINT_EXT = 0x01


def _default(obj: Any) -> Any:
    if isinstance(obj, int) and obj >= 0:
        return msgpack.ExtType(_BIGINT_EXT, minimal_bytes(obj))
    raise TypeError(f"Cannot serialize {type(obj).__name__}: {obj!r}")


def _ext_hook(code: int, data: bytes) -> Any:
    if code == _BIGINT_EXT:
        return int.from_bytes(data, "big")
    return msgpack.ExtType(code, data)


def encode(config: MixConfig) -> bytes:
    """Encode *config* as msgpack bytes.

    Args:
        config: Parsed mix to ship.

    Returns:
        msgpack payload holding the mix document.
    """
    return msgpack.packb(dump_document(config), use_bin_type=True, default=_default)


def decode(data: bytes, *, rng: random.Random | None = None) -> MixConfig:
    """Decode bytes produced by ``encode`` back into a ``MixConfig``.

    Args:
        data: msgpack payload.
        rng: Source of the seeds for random sequences, which are redrawn.

    Returns:
        The parsed mix.

    Raises:
        ValueError: If *data* is empty.
        MixConfigError: If the payload is not a valid mix document.
    """
    if not data:
        raise ValueError("Empty payload")
    document = msgpack.unpackb(data, raw=False, ext_hook=_ext_hook)
    return parse_config(document, rng=rng)
