"""Packet mixes: the packet templates a generator cycles through."""

from __future__ import annotations

from collections.abc import Iterator
from dataclasses import dataclass
from typing import overload

from trafficmix.headers import EtherHeader


__all__ = ["MixConfig", "MixEntry"]


@dataclass(frozen=True)
class MixEntry:
    """One packet template and how many packets to emit per round.

    Parameters
    ----------
    packet : EtherHeader
        Root of the header tree.
    quantity : int
        Packets emitted from this template before moving to the next entry.
    name : str | None
        Document key the entry was read from (``"mix3"``), ``None`` for the
        single-entry ``ether`` form.

    Examples
    --------
    >>> MixEntry(EtherHeader(), quantity=10, name="mix1").quantity
    10
    """

    packet: EtherHeader
    quantity: int = 1
    name: str | None = None


@dataclass(frozen=True)
class MixConfig:
    """Ordered, immutable collection of ``MixEntry`` in document order.

    Behaves as a read-only sequence; safe to share between generator workers.

    Examples
    --------
    >>> mix = MixConfig((MixEntry(EtherHeader(), 3), MixEntry(EtherHeader(), 5)))
    >>> len(mix), mix.total_quantity
    (2, 8)
    """

    entries: tuple[MixEntry, ...] = ()

    @property
    def total_quantity(self) -> int:
        return sum(entry.quantity for entry in self.entries)

    def __len__(self) -> int:
        return len(self.entries)

    def __iter__(self) -> Iterator[MixEntry]:
        return iter(self.entries)

    @overload
    def __getitem__(self, index: int) -> MixEntry: ...

    @overload
    def __getitem__(self, index: slice) -> tuple[MixEntry, ...]: ...

    def __getitem__(self, index: int | slice) -> MixEntry | tuple[MixEntry, ...]:
        return self.entries[index]
