"""Value types of the ``.data`` document format.

A document is an ordered list of ``(key, value)`` entries.  Values are plain
Python objects: ``None`` (null), ``int``, ``float``, ``bool``, ``str``, or one
of the small record types defined here.
"""

from __future__ import annotations

import enum
from dataclasses import dataclass, field
from typing import Iterator, Union


@dataclass(frozen=True)
class Tag:
    """An unquoted identifier, e.g. ``GRASS``."""

    name: str


@dataclass(frozen=True)
class IntRange:
    """An inclusive range with integer endpoints, e.g. ``0..100``."""

    lo: int
    hi: int


@dataclass(frozen=True)
class FloatRange:
    """An inclusive range with float endpoints, e.g. ``0.0..1.0``."""

    lo: float
    hi: float


@dataclass(frozen=True)
class Keybind:
    """A keybind chord literal, e.g. ``<F3+w>``."""

    keys: tuple[str, ...] = ()


class ElemType(enum.Enum):
    """Element type of a typed array."""

    INT = "int"
    FLOAT = "float"
    STRING = "string"
    BOOL = "bool"
    TAG = "tag"


@dataclass
class TypedArray:
    """A homogeneous, typed array literal, e.g. ``float[0.5, 1.0]``."""

    elem_type: ElemType = ElemType.INT
    elements: list[Value] = field(default_factory=list)

    def __iter__(self) -> Iterator[Value]:
        return iter(self.elements)

    def __len__(self) -> int:
        return len(self.elements)


def _first(entries: list[tuple[str, Value]], key: str) -> Value:
    return next((value for k, value in entries if k == key), None)


class _Entries:
    """Ordered key/value storage."""

    entries: list[tuple[str, Value]]

    def __contains__(self, key: object) -> bool:
        return any(k == key for k, _ in self.entries)

    def __iter__(self) -> Iterator[tuple[str, Value]]:
        return iter(self.entries)

    def __len__(self) -> int:
        return len(self.entries)


@dataclass
class DataObject(_Entries):
    """An inline key-value object, e.g. ``{ temp : 0.0..1.0 }``."""

    entries: list[tuple[str, Value]] = field(default_factory=list)

    def get(self, key: str) -> Value:
        """Return the first value stored under ``key``, or None."""
        return _first(self.entries, key)


@dataclass
class Document(_Entries):
    """A parsed ``.data`` file: ordered top-level entries."""

    entries: list[tuple[str, Value]] = field(default_factory=list)

    def get(self, key: str) -> Value:
        """Return the first value stored under ``key``, or None."""
        return _first(self.entries, key)

    def has(self, key: str) -> bool:
        """Return True when an entry with ``key`` exists."""
        return key in self


Value = Union[
    None, int, float, bool, str, Tag, IntRange, FloatRange, TypedArray, DataObject, Keybind
]


def is_int(value: object) -> bool:
    """True for integer values (booleans excluded)."""
    return isinstance(value, int) and not isinstance(value, bool)


def is_float(value: object) -> bool:
    """True for float values."""
    return isinstance(value, float)