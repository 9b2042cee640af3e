"""Load mix documents from disk.

Provides ``load_config`` / ``discover_config`` for reading a mix from a
``.toml``, ``.json`` or msgpack file. Decoding the file text is delegated to
``tomllib``, ``json`` and ``trafficmix.codec``; the decoded tree goes through
``parse_config``.
"""

from __future__ import annotations

import json
import logging
import random
import tomllib
from pathlib import Path

from trafficmix import codec
from trafficmix.mix import MixConfig
from trafficmix.parser import parse_config


__all__ = ["CONFIG_NAMES", "discover_config", "load_config", "load_document"]

logger = logging.getLogger("trafficmix.config")

CONFIG_NAMES = ("trafficmix.toml", "trafficmix.json")

_MSGPACK_SUFFIXES = frozenset({".msgpack", ".mpk"})


def discover_config(start: Path | None = None) -> Path | None:
    """Walk up from *start* (default: cwd) looking for a mix file.

    In each directory ``trafficmix.toml`` is preferred over
    ``trafficmix.json``.

    Parameters
    ----------
    start : Path | None
        Directory to start searching from.

    Returns
    -------
    Path | None
        Path to the discovered file, or ``None`` if not found.

    Examples
    --------
    >>> discover_config(Path("/srv/loadtest"))
    PosixPath('/srv/loadtest/trafficmix.toml')
    """
    current = (start or Path.cwd()).resolve()
    while True:
        for name in CONFIG_NAMES:
            candidate = current / name
            if candidate.is_file():
                return candidate
        parent = current.parent
        if parent == current:
            return None
        current = parent


def load_document(path: Path) -> object:
    """Decode *path* into an untyped tree according to its suffix.

    Raises
    ------
    ValueError
        If the suffix is not ``.toml``, ``.json``, ``.msgpack`` or ``.mpk``.
    """
    suffix = path.suffix.lower()
    if suffix == ".toml":
        with path.open("rb") as f:
            return tomllib.load(f)
    if suffix == ".json":
        with path.open("r", encoding="utf-8") as f:
            return json.load(f)
    msg = f"Unsupported mix file type {path.suffix!r}: expected .toml, .json, .msgpack or .mpk"
    raise ValueError(msg)


def load_config(path: Path | None = None, *, rng: random.Random | None = None) -> MixConfig:
    """Load a ``MixConfig`` from a mix file.

    If *path* is ``None``, ``discover_config()`` looks for one starting at the
    current working directory.

    Parameters
    ----------
    path : Path | None
        Explicit path to a ``.toml``, ``.json``, ``.msgpack`` or ``.mpk`` file.
    rng : random.Random | None
        Source of the seeds drawn for random sequence counters.

    Returns
    -------
    MixConfig

    Raises
    ------
    FileNotFoundError
        If *path* does not exist, or nothing was discovered.
    MixConfigError
        If the document is not a valid mix.

    Examples
    --------
    >>> mix = load_config(Path("trafficmix.toml"))
    >>> mix.total_quantity
    12
    """
    if path is None:
        path = discover_config()
        if path is None:
            msg = f"No mix file found ({' or '.join(CONFIG_NAMES)})"
            raise FileNotFoundError(msg)

    if not path.exists():
        msg = f"Mix file not found: {path}"
        raise FileNotFoundError(msg)

    if path.suffix.lower() in _MSGPACK_SUFFIXES:
        config = codec.decode(path.read_bytes(), rng=rng)
    else:
        config = parse_config(load_document(path), rng=rng)

    logger.info(
        "Loaded %s: %d entries, %d packets per round",
        path,
        len(config),
        config.total_quantity,
    )
    return config
