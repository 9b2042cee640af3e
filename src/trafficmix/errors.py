"""Errors raised while turning a mix document into a ``MixConfig``.

Every failure is terminal for the whole document. Errors carry the path of
block and field names leading to the offending value; builders extend that
path with ``nested()`` as the error travels back up to the root.
"""

from __future__ import annotations

from collections.abc import Iterator
from contextlib import contextmanager
from typing import Self


__all__ = [
    "MissingRequiredFieldError",
    "MixConfigError",
    "RangeInvalidError",
    "TypeMismatchError",
    "UnknownKeyError",
    "nested",
]


class MixConfigError(Exception):
    """Base class for every mix document parse failure.

    Parameters
    ----------
    reason : str
        Human readable cause, without location.
    path : tuple[str, ...]
        Block and field names from the document root to the failing value.

    Examples
    --------
    >>> err = RangeInvalidError("min is greater than max", path=("tcp", "dport"))
    >>> str(err)
    'tcp.dport: min is greater than max'
    >>> str(err.within("ip"))
    'ip.tcp.dport: min is greater than max'
    """

    def __init__(self, reason: str, *, path: tuple[str, ...] = ()) -> None:
        self.reason = reason
        self.path = path
        super().__init__(str(self))

    def __str__(self) -> str:
        if not self.path:
            return self.reason
        location = self.path[0]
        for part in self.path[1:]:
            location += part if part.startswith("[") else f".{part}"
        return f"{location}: {self.reason}"

    def within(self, block: str) -> Self:
        """Return a copy of this error located one level further out."""
        return type(self)(self.reason, path=(block, *self.path))


class UnknownKeyError(MixConfigError):
    """A key that the enclosing block does not recognize."""


class TypeMismatchError(MixConfigError):
    """A value is present but has the wrong shape."""


class RangeInvalidError(MixConfigError):
    """A value is out of bounds (min > max, negative, probability > 1, ...)."""


class MissingRequiredFieldError(MixConfigError):
    """A required field is absent or zero."""


@contextmanager
def nested(block: str) -> Iterator[None]:
    """Prefix *block* to the path of any ``MixConfigError`` raised inside.

    Examples
    --------
    >>> with nested("ether"):
    ...     raise UnknownKeyError("unknown key 'foo'")
    Traceback (most recent call last):
    ...
    trafficmix.errors.UnknownKeyError: ether: unknown key 'foo'
    """
    try:
        yield
    except MixConfigError as exc:
        raise exc.within(block) from exc
