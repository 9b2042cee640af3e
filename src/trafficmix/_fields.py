"""Shape checks shared by the block decoders."""

from __future__ import annotations

from collections.abc import Mapping
from typing import Any

from trafficmix.errors import RangeInvalidError, TypeMismatchError


def type_name(value: Any) -> str:
    if isinstance(value, Mapping):
        return "mapping"
    if isinstance(value, list | tuple):
        return "array"
    if value is None:
        return "null"
    return type(value).__name__


def fold_keys(value: Any) -> dict[str, Any]:
    """Return *value* as a dict keyed by lower-cased names.

    Later keys win when two names fold to the same key.
    """
    if not isinstance(value, Mapping):
        msg = f"expected a mapping, got {type_name(value)}"
        raise TypeMismatchError(msg)
    return {str(key).lower(): item for key, item in value.items()}


def as_list(value: Any) -> list[Any]:
    if not isinstance(value, list | tuple):
        msg = f"expected an array, got {type_name(value)}"
        raise TypeMismatchError(msg)
    return list(value)


def as_text(value: Any) -> str:
    if not isinstance(value, str):
        msg = f"expected a string, got {type_name(value)}"
        raise TypeMismatchError(msg)
    return value


def as_bool(value: Any) -> bool:
    if not isinstance(value, bool):
        msg = f"expected a boolean, got {type_name(value)}"
        raise TypeMismatchError(msg)
    return value


def as_number(value: Any) -> float:
    # bool is an int subclass; true/false is never a number here
    if isinstance(value, bool) or not isinstance(value, int | float):
        msg = f"expected a number, got {type_name(value)}"
        raise TypeMismatchError(msg)
    return float(value)


def as_int(value: Any) -> int:
    """Accept ints and integral floats, the latter being what JSON-ish decoders hand back."""
    if isinstance(value, bool):
        msg = "expected an integer, got bool"
        raise TypeMismatchError(msg)
    if isinstance(value, float):
        if not value.is_integer():
            msg = f"expected an integer, got {value!r}"
            raise TypeMismatchError(msg)
        return int(value)
    if not isinstance(value, int):
        msg = f"expected an integer, got {type_name(value)}"
        raise TypeMismatchError(msg)
    return value


def as_uint(value: Any, *, bits: int | None = None) -> int:
    """Return *value* as a non-negative integer, optionally bounded to *bits* wide."""
    number = as_int(value)
    if number < 0:
        msg = f"value should not be negative, got {number}"
        raise RangeInvalidError(msg)
    if bits is not None and number >= 1 << bits:
        msg = f"value {number} does not fit in {bits} bits"
        raise RangeInvalidError(msg)
    return number
