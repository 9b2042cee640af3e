"""Payload generators carried at the bottom of a header stack.

Provides ``RawPayload`` (literal text), ``RandomBytes`` (random content of a
size that varies within a deviation), ``Distribution`` (weighted choice among
raw and random payloads), and ``parse_payload``, the dispatcher every header
decoder falls back to for keys it does not know itself.
"""

from __future__ import annotations

import logging
import math
from dataclasses import dataclass
from typing import Any, ClassVar

from trafficmix._fields import as_list, as_number, as_text, as_uint, fold_keys
from trafficmix.errors import (
    MissingRequiredFieldError,
    RangeInvalidError,
    TypeMismatchError,
    UnknownKeyError,
    nested,
)
from trafficmix.kinds import DataType


__all__ = [
    "PAYLOAD_KEYS",
    "Distribution",
    "PDistEntry",
    "Payload",
    "RandomBytes",
    "RawPayload",
    "parse_payload",
    "parse_pdist",
    "parse_randbytes",
    "parse_raw",
]

logger = logging.getLogger("trafficmix.payload")


PAYLOAD_KEYS = frozenset({"raw", "randbytes", "pdist"})


@dataclass(frozen=True)
class RawPayload:
    """Literal payload, emitted verbatim."""

    kind: ClassVar[DataType] = DataType.RAW

    data: str


@dataclass(frozen=True)
class RandomBytes:
    """Random payload whose length varies in ``[size - deviation, size + deviation]``.

    Examples
    --------
    >>> RandomBytes(size=64, deviation=16).bounds
    (48, 80)
    """

    kind: ClassVar[DataType] = DataType.RANDBYTES

    size: int
    deviation: int = 0

    @property
    def bounds(self) -> tuple[int, int]:
        return (self.size - self.deviation, self.size + self.deviation)


@dataclass(frozen=True)
class PDistEntry:
    """One alternative of a ``Distribution`` and its probability."""

    probability: float
    data: RawPayload | RandomBytes


@dataclass(frozen=True)
class Distribution:
    """Weighted choice among payloads.

    Probabilities are each in ``[0, 1]`` but are not required to sum to one;
    normalization is left to whoever samples the distribution.

    Examples
    --------
    >>> dist = Distribution((
    ...     PDistEntry(0.25, RawPayload("ping")),
    ...     PDistEntry(0.75, RandomBytes(size=32)),
    ... ))
    >>> dist.select(0.1)
    RawPayload(data='ping')
    >>> dist.select(0.6)
    RandomBytes(size=32, deviation=0)
    """

    kind: ClassVar[DataType] = DataType.PDIST

    entries: tuple[PDistEntry, ...]

    @property
    def total_probability(self) -> float:
        return math.fsum(entry.probability for entry in self.entries)

    def select(self, roll: float) -> RawPayload | RandomBytes:
        """Return the entry whose cumulative window contains *roll*.

        *roll* is drawn by the caller from ``[0, total_probability)``; values
        past the end select the last entry.
        """
        cumulative = 0.0
        for entry in self.entries:
            cumulative += entry.probability
            if roll < cumulative:
                return entry.data
        return self.entries[-1].data


type Payload = RawPayload | RandomBytes | Distribution


# ---------------------------------------------------------------------------
# Decoders
# ---------------------------------------------------------------------------


def parse_raw(value: Any) -> RawPayload:
    """Parse ``{"data": "<text>"}``."""
    fields = fold_keys(value)
    unknown = sorted(set(fields) - {"data"})
    if unknown:
        msg = f"unknown key {unknown[0]!r} in 'raw' block, expected 'data'"
        raise UnknownKeyError(msg)
    if "data" not in fields:
        msg = "no key 'data' found inside 'raw' block"
        raise MissingRequiredFieldError(msg)
    with nested("data"):
        return RawPayload(as_text(fields["data"]))


def parse_randbytes(value: Any) -> RandomBytes:
    """Parse ``{"size": n, "deviation": d}``; *d* may be omitted.

    Raises
    ------
    RangeInvalidError
        If either number is negative or ``deviation > size``.
    """
    fields = fold_keys(value)
    unknown = sorted(set(fields) - {"size", "deviation"})
    if unknown:
        msg = f"unknown key {unknown[0]!r} in 'randbytes' block, expected size or deviation"
        raise UnknownKeyError(msg)
    if "size" not in fields:
        msg = "'randbytes' block needs a 'size'"
        raise MissingRequiredFieldError(msg)
    with nested("size"):
        size = as_uint(fields["size"], bits=32)
    deviation = 0
    if "deviation" in fields:
        with nested("deviation"):
            deviation = as_uint(fields["deviation"], bits=32)
    if deviation > size:
        msg = f"deviation can't be larger than size: size={size}, deviation={deviation}"
        raise RangeInvalidError(msg)
    return RandomBytes(size=size, deviation=deviation)


def _parse_pdist_entry(value: Any) -> PDistEntry:
    fields = fold_keys(value)
    unknown = sorted(set(fields) - {"probability", "raw", "randbytes"})
    if unknown:
        msg = f"unknown key {unknown[0]!r}, expected probability and one of raw or randbytes"
        raise UnknownKeyError(msg)
    if "probability" not in fields:
        msg = "pdist entry needs a 'probability'"
        raise MissingRequiredFieldError(msg)

    with nested("probability"):
        probability = as_number(fields["probability"])
        # NaN fails both comparisons
        if not 0.0 <= probability <= 1.0:
            msg = f"invalid probability value: {probability}, expected 0..1"
            raise RangeInvalidError(msg)

    match ("raw" in fields, "randbytes" in fields):
        case (True, True):
            msg = "pdist entry holds both 'raw' and 'randbytes'"
            raise TypeMismatchError(msg)
        case (True, False):
            with nested("raw"):
                data: RawPayload | RandomBytes = parse_raw(fields["raw"])
        case (False, True):
            with nested("randbytes"):
                data = parse_randbytes(fields["randbytes"])
        case _:
            msg = "pdist entry needs one of 'raw' or 'randbytes'"
            raise MissingRequiredFieldError(msg)

    return PDistEntry(probability=probability, data=data)


def parse_pdist(value: Any) -> Distribution:
    """Parse a ``pdist`` array of ``{"probability": p, "raw"|"randbytes": ...}``."""
    items = as_list(value)
    if not items:
        msg = "pdist needs at least one entry"
        raise MissingRequiredFieldError(msg)
    entries: list[PDistEntry] = []
    for index, item in enumerate(items):
        with nested(f"[{index}]"):
            entries.append(_parse_pdist_entry(item))
    dist = Distribution(tuple(entries))
    logger.debug("pdist with %d entries, probabilities sum to %.3f", len(entries), dist.total_probability)
    return dist


def parse_payload(key: str, value: Any) -> Payload:
    """Dispatch one payload key to its decoder.

    This is where header decoders send every key they do not recognize, so
    anything other than ``raw``, ``randbytes`` or ``pdist`` is rejected here.

    Raises
    ------
    UnknownKeyError
        If *key* is not a payload key.
    """
    with nested(key):
        match key.lower():
            case "raw":
                return parse_raw(value)
            case "randbytes":
                return parse_randbytes(value)
            case "pdist":
                return parse_pdist(value)
    msg = f"unknown key {key!r}"
    raise UnknownKeyError(msg)
