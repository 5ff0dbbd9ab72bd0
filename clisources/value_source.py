"""Sources that supply flag values from the environment, files and nested maps."""

from __future__ import annotations

import math
import os
from abc import ABC, abstractmethod
from collections.abc import Iterator, Mapping
from dataclasses import dataclass, field
from decimal import Decimal
from pathlib import Path
from typing import Any

__all__ = [
    "ValueSource",
    "EnvValueSource",
    "ValueSourceChain",
    "EnvVarValueSource",
    "FileValueSource",
    "MapSource",
    "MapValueSource",
    "env_var",
    "env_vars",
    "file",
    "files",
    "format_value",
]

_NAMED_ESCAPES = {
    "\a": "\\a",
    "\b": "\\b",
    "\f": "\\f",
    "\n": "\\n",
    "\r": "\\r",
    "\t": "\\t",
    "\v": "\\v",
    "\\": "\\\\",
    '"': '\\"',
}


def _quote(text: str) -> str:
    """Return ``text`` as a double-quoted literal with escapes."""
    parts = []
    for char in text:
        if char in _NAMED_ESCAPES:
            parts.append(_NAMED_ESCAPES[char])
        elif char.isprintable():
            parts.append(char)
        elif ord(char) < 0x80:
            parts.append(f"\\x{ord(char):02x}")
        elif ord(char) <= 0xFFFF:
            parts.append(f"\\u{ord(char):04x}")
        else:
            parts.append(f"\\U{ord(char):08x}")
    return '"' + "".join(parts) + '"'


def _format_float(value: float) -> str:
    if math.isnan(value):
        return "NaN"
    if math.isinf(value):
        return "+Inf" if value > 0 else "-Inf"
    sign = "-" if math.copysign(1.0, value) < 0 else ""
    if value == 0:
        return sign + "0"

    decimal = Decimal(repr(abs(value))).normalize()
    _, digit_tuple, exponent = decimal.as_tuple()
    digits = "".join(str(d) for d in digit_tuple)
    point = len(digits) + exponent
    exp10 = point - 1

    if exp10 < -4 or exp10 >= 6:
        mantissa = digits[0] + ("." + digits[1:] if len(digits) > 1 else "")
        exp_sign = "-" if exp10 < 0 else "+"
        return f"{sign}{mantissa}e{exp_sign}{abs(exp10):02d}"

    if exponent >= 0:
        body = digits + "0" * exponent
    elif point <= 0:
        body = "0." + "0" * (-point) + digits
    else:
        body = digits[:point] + "." + digits[point:]
    return sign + body


def _sorted_keys(mapping: Mapping) -> list:
    keys = list(mapping)
    try:
        return sorted(keys)
    except TypeError:
        return sorted(keys, key=lambda k: (type(k).__name__, str(k)))


def format_value(value: Any) -> str:
    """Render a looked-up value as plain text, the way it would be given on a command line."""
    if value is None:
        return "<nil>"
    if isinstance(value, bool):
        return "true" if value else "false"
    if isinstance(value, int):
        return str(value)
    if isinstance(value, float):
        return _format_float(value)
    if isinstance(value, str):
        return value
    if isinstance(value, (bytes, bytearray)):
        return "[" + " ".join(str(b) for b in value) + "]"
    if isinstance(value, Mapping):
        items = (
            f"{format_value(key)}:{format_value(value[key])}"
            for key in _sorted_keys(value)
        )
        return "map[" + " ".join(items) + "]"
    if isinstance(value, (list, tuple, set, frozenset)):
        elements = _sorted_keys(dict.fromkeys(value)) if isinstance(value, (set, frozenset)) else value
        return "[" + " ".join(format_value(item) for item in elements) + "]"
    return str(value)


class ValueSource(ABC):
    """A place a single textual value can be looked up from."""

    @abstractmethod
    def lookup(self) -> str | None:
        """Return the value, or None when the source has none."""


class EnvValueSource(ABC):
    """Marks a source that reads an environment variable named by ``key``."""

    key: str

    @abstractmethod
    def is_from_env(self) -> bool:
        """Return True when the value comes from the environment."""


@dataclass
class ValueSourceChain(ValueSource):
    """An ordered series of sources; the first one that resolves wins."""

    chain: list[ValueSource] = field(default_factory=list)

    def append(self, other: ValueSourceChain) -> None:
        """Add every source of ``other`` to the end of this chain."""
        self.chain.extend(other.chain)

    def env_keys(self) -> list[str]:
        """Return the names of the environment variables in the chain, in order."""
        return [
            src.key
            for src in self.chain
            if isinstance(src, EnvValueSource) and src.is_from_env()
        ]

    def lookup(self) -> str | None:
        found = self.lookup_with_source()
        return None if found is None else found[0]

    def lookup_with_source(self) -> tuple[str, ValueSource] | None:
        """Return the first resolved value together with its source, or None."""
        for src in self.chain:
            value = src.lookup()
            if value is not None:
                return value, src
        return None

    def __iter__(self) -> Iterator[ValueSource]:
        return iter(self.chain)

    def __len__(self) -> int:
        return len(self.chain)

    def __str__(self) -> str:
        return ",".join(str(src) for src in self.chain)


@dataclass
class EnvVarValueSource(ValueSource, EnvValueSource):
    """A value held in an environment variable."""

    key: str

    def lookup(self) -> str | None:
        return os.environ.get(self.key.strip())

    def is_from_env(self) -> bool:
        return True

    def __str__(self) -> str:
        return f"environment variable {_quote(self.key)}"


@dataclass
class FileValueSource(ValueSource):
    """A value held as the whole contents of a file."""

    path: str

    def lookup(self) -> str | None:
        try:
            data = Path(self.path).read_bytes()
        except OSError:
            return None
        return data.decode("utf-8", errors="surrogateescape")

    def __str__(self) -> str:
        return f"file {_quote(str(self.path))}"


@dataclass
class MapSource:
    """A named nested mapping whose values are addressed by dot-separated paths."""

    name: str
    mapping: Mapping | None = field(default=None, repr=False)

    def lookup(self, name: str) -> Any:
        """Return the value at the dotted path ``name``.

        Raises KeyError when the path does not lead to a value.
        """
        if not name:
            raise KeyError(name)
        *parents, last = name.split(".")
        node: Mapping = self.mapping or {}
        for section in parents:
            if section not in node:
                raise KeyError(name)
            child = node[section]
            if not isinstance(child, Mapping):
                raise KeyError(name)
            node = child
        if last not in node:
            raise KeyError(name)
        return node[last]

    def __str__(self) -> str:
        return f"map source {_quote(self.name)}"


@dataclass
class MapValueSource(ValueSource):
    """A value taken from a MapSource under a fixed key."""

    key: str
    source: MapSource

    def lookup(self) -> str | None:
        try:
            value = self.source.lookup(self.key)
        except KeyError:
            return None
        return format_value(value)

    def __str__(self) -> str:
        return f"key {_quote(self.key)} from {self.source}"


def env_var(key: str) -> EnvVarValueSource:
    """Return a source reading the environment variable ``key``."""
    return EnvVarValueSource(key)


def env_vars(*args: str) -> ValueSourceChain:
    """Return a chain of environment variable sources, one per name given."""
    return ValueSourceChain([env_var(key) for key in args])


def file(path: str) -> FileValueSource:
    """Return a source reading the file at ``path``."""
    return FileValueSource(path)


def files(*args: str) -> ValueSourceChain:
    """Return a chain of file sources, one per path given."""
    return ValueSourceChain([file(path) for path in args])