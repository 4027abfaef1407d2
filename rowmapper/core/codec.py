"""
Value codec - converts field values to and from their SQLite representation.

Sequences are stored as TEXT in the envelope ``ARR|<json-array>``. Each element
is serialized on its own and validated back against the declared element
type on read, so ``[3, 1, 4]`` of ``list[int]`` comes back as the same list.
Decoding never raises: a malformed value yields no value and the caller
decides whether to fall back to a default.
"""

import collections.abc
import json
from dataclasses import dataclass
from datetime import date, datetime, time
from functools import lru_cache
from typing import Any, Iterable, Optional

from pydantic import TypeAdapter

from .config import SEQUENCE_MARKER
from .types import INTEGER, REAL, TEXT, classify, is_sequence_value, unwrap_optional
from ..util.logging import logger


@dataclass(frozen=True)
class Encoded:
    """A value ready to bind, with the storage class it was classified as."""
    sql_type: str
    sql_value: Any


@dataclass(frozen=True)
class Decoded:
    """Outcome of decoding a stored value. ``ok`` is False when there is no value."""
    ok: bool
    value: Any = None


NO_VALUE = Decoded(False)

_ANY = TypeAdapter(Any)

_SET_CONTAINERS = (set, collections.abc.Set, collections.abc.MutableSet)


@lru_cache(maxsize=256)
def _cached_adapter(target: Any) -> TypeAdapter:
    return TypeAdapter(target)


def _adapter(target: Any) -> TypeAdapter:
    if target is Any:
        return _ANY
    try:
        return _cached_adapter(target)
    except TypeError:
        # unhashable annotations are not cached
        return TypeAdapter(target)


def _element_json(item: Any) -> str:
    return _ANY.dump_json(item).decode("utf-8")


def encode_sequence(values: Iterable[Any]) -> Optional[str]:
    """Serialize an iterable into the ARR envelope. None if any element fails."""
    if values is None:
        return None
    try:
        parts = [_element_json(item) for item in values]
    except (ValueError, TypeError) as e:
        logger.log_encode_failure("<sequence>", type(values).__name__, str(e))
        return None
    return f"{SEQUENCE_MARKER}|[{','.join(parts)}]"


def _rebuild(container: Any, items: list) -> Any:
    if container is tuple:
        return tuple(items)
    if container is frozenset:
        return frozenset(items)
    if container in _SET_CONTAINERS:
        return set(items)
    return items


def decode_sequence(text: Any, element_type: Any = Any, container: Any = list) -> Decoded:
    """Parse ARR envelope text back into a collection of ``element_type``."""
    if not isinstance(text, str):
        return NO_VALUE

    marker, sep, body = text.strip().partition("|")
    if not sep or marker.strip().upper() != SEQUENCE_MARKER:
        return NO_VALUE

    try:
        parsed = json.loads(body.strip())
    except ValueError:
        return NO_VALUE

    # A bare JSON value is read as a one-element sequence
    if not isinstance(parsed, list):
        parsed = [parsed]

    try:
        adapter = _adapter(element_type)
        items = [adapter.validate_python(item) for item in parsed]
    except (ValueError, TypeError):
        return NO_VALUE

    return Decoded(True, _rebuild(container, items))


def encode(value: Any) -> Optional[Encoded]:
    """Convert a native value to (sql_type, sql_value). None on failure."""
    if value is None:
        return None

    if isinstance(value, bool):
        return Encoded(INTEGER, 1 if value else 0)
    if isinstance(value, int):
        return Encoded(INTEGER, int(value))
    if isinstance(value, float):
        return Encoded(REAL, float(value))
    if isinstance(value, str):
        return Encoded(TEXT, value)
    if isinstance(value, (datetime, date, time)):
        return Encoded(TEXT, value.isoformat())

    if is_sequence_value(value):
        text = encode_sequence(value)
        return Encoded(TEXT, text) if text is not None else None

    # Anything else is stored as its JSON form
    try:
        return Encoded(TEXT, _element_json(value))
    except (ValueError, TypeError) as e:
        logger.log_encode_failure("<value>", type(value).__name__, str(e))
        return None


def decode(raw: Any, target: Any) -> Decoded:
    """Convert a stored column value back to ``target``."""
    if raw is None:
        return NO_VALUE
    if isinstance(raw, (bytes, bytearray)):
        try:
            raw = bytes(raw).decode("utf-8")
        except UnicodeDecodeError:
            return NO_VALUE

    text = raw if isinstance(raw, str) else str(raw)
    if not text.strip():
        return NO_VALUE

    info = classify(target)
    if info.is_sequence:
        return decode_sequence(text, info.element_type, info.python_type)

    inner, _ = unwrap_optional(target)
    if inner is Any:
        return Decoded(True, raw)
    if inner is bool:
        return Decoded(True, text.strip() == "1")
    if inner is str:
        return Decoded(True, text)

    try:
        if inner in (int, float) or info.sql_type in (INTEGER, REAL):
            # numbers bind natively; text is only parsed when stored as TEXT
            return Decoded(True, _adapter(inner).validate_python(raw if not isinstance(raw, str) else raw.strip()))
        if inner in (datetime, date, time):
            return Decoded(True, _adapter(inner).validate_python(text.strip()))
        return Decoded(True, _adapter(inner).validate_json(text))
    except (ValueError, TypeError):
        return NO_VALUE


def render_literal(value: Any) -> Optional[str]:
    """Render a value as an SQL literal for a DEFAULT clause."""
    encoded = encode(value)
    if encoded is None:
        return None
    if encoded.sql_type in (INTEGER, REAL):
        return repr(encoded.sql_value)
    return "'" + str(encoded.sql_value).replace("'", "''") + "'"
