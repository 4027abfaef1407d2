"""
Type classification - maps a field annotation or runtime value to an SQLite
storage class and flags sequence-valued fields for the ARR envelope.
"""

import collections.abc
import types
import typing
from dataclasses import dataclass
from datetime import date, datetime, time
from typing import Any, Optional, Tuple

INTEGER = "INTEGER"
REAL = "REAL"
TEXT = "TEXT"

# Origins treated as ordered collections stored in a single TEXT column
_SEQUENCE_ORIGINS = (
    list,
    tuple,
    set,
    frozenset,
    collections.abc.Sequence,
    collections.abc.MutableSequence,
    collections.abc.Set,
    collections.abc.MutableSet,
    collections.abc.Collection,
    collections.abc.Iterable,
)

_TEXT_SCALARS = (str, datetime, date, time)


@dataclass(frozen=True)
class TypeInfo:
    """Result of classifying a declared type."""
    sql_type: str
    is_sequence: bool = False
    element_type: Any = None
    python_type: Any = None


def unwrap_optional(annotation: Any) -> Tuple[Any, bool]:
    """Strip Optional[X] / X | None down to X. Returns (inner, was_optional)."""
    origin = typing.get_origin(annotation)
    if origin is typing.Union or origin is getattr(types, "UnionType", None):
        args = [a for a in typing.get_args(annotation) if a is not type(None)]
        if len(args) == 1:
            return args[0], True
    return annotation, False


def _element_type(annotation: Any, origin: Any) -> Any:
    args = typing.get_args(annotation)
    if not args:
        return Any
    if origin is tuple:
        # tuple[int, ...] is homogeneous; fixed-shape tuples fall back to Any
        if len(args) == 2 and args[1] is Ellipsis:
            return args[0]
        return args[0] if len(set(args)) == 1 else Any
    return args[0]


def classify(annotation: Any) -> TypeInfo:
    """Classify a declared field type into (sql_type, is_sequence, element_type)."""
    annotation, _ = unwrap_optional(annotation)

    if annotation is bool or annotation is int:
        return TypeInfo(INTEGER, python_type=annotation)
    if annotation is float:
        return TypeInfo(REAL, python_type=float)
    if annotation in _TEXT_SCALARS:
        return TypeInfo(TEXT, python_type=annotation)

    origin = typing.get_origin(annotation)
    if origin is None and isinstance(annotation, type) and annotation in _SEQUENCE_ORIGINS:
        # bare list / tuple / set without parameters
        return TypeInfo(TEXT, is_sequence=True, element_type=Any, python_type=annotation)
    if origin is not None and origin in _SEQUENCE_ORIGINS:
        return TypeInfo(TEXT, is_sequence=True, element_type=_element_type(annotation, origin), python_type=origin)

    if isinstance(annotation, type):
        if issubclass(annotation, bool) or issubclass(annotation, int):
            return TypeInfo(INTEGER, python_type=annotation)
        if issubclass(annotation, float):
            return TypeInfo(REAL, python_type=annotation)

    return TypeInfo(TEXT, python_type=annotation)


def is_sequence_value(value: Any) -> bool:
    """True for iterables stored with the sequence envelope (never str/bytes/dict)."""
    if isinstance(value, (str, bytes, bytearray, dict)):
        return False
    return isinstance(value, (list, tuple, set, frozenset, collections.abc.Sequence, collections.abc.Set))


def classify_value(value: Any) -> Optional[TypeInfo]:
    """Classify a runtime value. None has no storage class."""
    if value is None:
        return None
    if is_sequence_value(value):
        return TypeInfo(TEXT, is_sequence=True, element_type=Any, python_type=type(value))
    return classify(type(value))


def base_type(sql_type: str) -> str:
    """First word of a column type, e.g. 'INTEGER' from 'INTEGER PRIMARY KEY'."""
    return sql_type.strip().split(" ")[0].upper() if sql_type.strip() else TEXT
