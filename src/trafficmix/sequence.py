"""Sequence counters for TCP sequence numbers and ICMP echo sequence numbers."""

from __future__ import annotations

import random
from dataclasses import dataclass
from enum import Enum
from typing import Any

from trafficmix._fields import as_text
from trafficmix.errors import RangeInvalidError


__all__ = ["Sequence", "SequenceType", "parse_sequence"]


class SequenceType(Enum):
    RANDOM = "rand"
    INCREASING = "incr"


_TOKENS: dict[str, SequenceType] = {
    "rand": SequenceType.RANDOM,
    "random": SequenceType.RANDOM,
    "incr": SequenceType.INCREASING,
    "increasing": SequenceType.INCREASING,
}


@dataclass(frozen=True)
class Sequence:
    """How the generator fills a sequence field.

    Parameters
    ----------
    type : SequenceType
        ``RANDOM`` draws a fresh value per packet, ``INCREASING`` counts up.
    next : int
        32-bit value the generator starts its bookkeeping from.

    Examples
    --------
    >>> Sequence(SequenceType.INCREASING)
    Sequence(type=<SequenceType.INCREASING: 'incr'>, next=0)
    """

    type: SequenceType
    next: int = 0


def parse_sequence(value: Any, rng: random.Random | None = None) -> Sequence:
    """Parse ``"rand"``/``"random"`` or ``"incr"``/``"increasing"``.

    A random sequence is seeded once here from a uniform 32-bit draw of
    *rng* (the module-level generator when ``None``).

    Raises
    ------
    TypeMismatchError
        If *value* is not a string.
    RangeInvalidError
        If the token is not one of the four accepted spellings.
    """
    token = as_text(value).lower()
    kind = _TOKENS.get(token)
    match kind:
        case SequenceType.RANDOM:
            seed = (rng or random).getrandbits(32)
            return Sequence(SequenceType.RANDOM, next=seed)
        case SequenceType.INCREASING:
            return Sequence(SequenceType.INCREASING, next=0)
        case None:
            msg = f"unknown sequence type {value!r}, expected rand, random, incr or increasing"
            raise RangeInvalidError(msg)
