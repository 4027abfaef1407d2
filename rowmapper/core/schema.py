"""
Record schema description - per-field column metadata for mapped dataclasses.

Fields are declared on a dataclass with ``column(...)``::

    @dataclass
    class Item:
        id: str = column("", primary_key=True)
        count: int = column(0, default=7)
        tags: List[int] = column(factory=list)
        scratch: str = column("", ignore=True)

The dataclass default (first argument / ``factory``) is what a fresh instance
holds; ``default=`` is the SQL column default, also used as the fill fallback.
"""

import dataclasses
import typing
from dataclasses import dataclass
from typing import Any, Callable, Dict, List, Optional, Tuple, Type

from pydantic import ValidationError

from .models import FieldOptions, is_table_name
from .types import TypeInfo, classify
from ..util.logging import logger

METADATA_KEY = "rowmapper"


def column(value: Any = dataclasses.MISSING, *, factory: Callable[[], Any] = dataclasses.MISSING,
           primary_key: bool = False, not_null: bool = False, ignore: bool = False,
           default: Any = None, name: Optional[str] = None, **kwargs) -> Any:
    """Declare a dataclass field with column options."""
    options = {
        "primary_key": primary_key,
        "not_null": not_null,
        "ignore": ignore,
        "default": default,
        "name": name,
    }
    metadata = dict(kwargs.pop("metadata", None) or {})
    metadata[METADATA_KEY] = options
    return dataclasses.field(default=value, default_factory=factory, metadata=metadata, **kwargs)


@dataclass(frozen=True)
class FieldDescriptor:
    """Column metadata for one field of a record type."""
    name: str
    type_info: TypeInfo
    annotation: Any = Any
    primary_key: bool = False
    not_null: bool = False
    ignore: bool = False
    default: Any = None
    column_name: Optional[str] = None

    @property
    def column(self) -> str:
        return self.column_name or self.name

    @property
    def sql_type(self) -> str:
        return self.type_info.sql_type

    @property
    def has_default(self) -> bool:
        return self.default is not None


@dataclass(frozen=True)
class RecordSchema:
    """All field descriptors of a record type, in declaration order."""
    record_type: type
    table_name: str
    fields: Tuple[FieldDescriptor, ...]

    @property
    def mapped(self) -> List[FieldDescriptor]:
        """Fields that map to a column."""
        return [f for f in self.fields if not f.ignore]

    @property
    def primary_keys(self) -> List[FieldDescriptor]:
        return [f for f in self.mapped if f.primary_key]

    @property
    def columns(self) -> List[str]:
        return [f.column for f in self.mapped]


def table_name_for(record_type: type, table_name: str = "") -> str:
    """Resolve a table name: explicit argument, __table_name__, then class name."""
    if table_name:
        return table_name
    return getattr(record_type, "__table_name__", None) or record_type.__name__


def _type_hints(record_type: type) -> Dict[str, Any]:
    try:
        return typing.get_type_hints(record_type)
    except (NameError, TypeError) as e:
        logger.warning(f"Could not resolve annotations for {record_type.__name__}: {e}")
        return {}


def read_options(field: dataclasses.Field) -> Optional[FieldOptions]:
    """Read declared options from a dataclass field. None when absent or unreadable."""
    raw = field.metadata.get(METADATA_KEY) if field.metadata else None
    if raw is None:
        return None
    if isinstance(raw, FieldOptions):
        return raw
    try:
        return FieldOptions.model_validate(raw)
    except ValidationError as e:
        logger.warning(f"Ignoring column options on field '{field.name}': {e.error_count()} error(s)")
        return None


def _descriptor(field: dataclasses.Field, annotation: Any) -> FieldDescriptor:
    options = read_options(field) or FieldOptions()
    return FieldDescriptor(
        name=field.name,
        type_info=classify(annotation),
        annotation=annotation,
        primary_key=options.primary_key,
        not_null=options.not_null,
        ignore=options.ignore,
        default=options.default,
        column_name=options.name,
    )


def read_field(record_type: type, field_name: str) -> Optional[FieldDescriptor]:
    """Descriptor for one field of a record type, or None if there is no such field."""
    if not dataclasses.is_dataclass(record_type):
        return None
    hints = _type_hints(record_type)
    for field in dataclasses.fields(record_type):
        if field.name == field_name:
            return _descriptor(field, hints.get(field.name, Any))
    return None


def describe(record_type: Type, table_name: str = "") -> Optional[RecordSchema]:
    """Describe every field of a dataclass record type. None if it is not a dataclass.

    Table names are always quoted, so ``my-table`` maps fine. Column names must
    be plain identifiers since they are also the ``@column`` placeholders.
    """
    if not isinstance(record_type, type):
        record_type = type(record_type)
    if not dataclasses.is_dataclass(record_type):
        logger.warning(f"{record_type.__name__} is not a dataclass record type")
        return None

    hints = _type_hints(record_type)
    fields = tuple(
        _descriptor(field, hints.get(field.name, Any))
        for field in dataclasses.fields(record_type)
    )
    name = table_name_for(record_type, table_name)
    if not is_table_name(name):
        logger.warning(f"Invalid table name: {name!r}")
        return None
    return RecordSchema(record_type=record_type, table_name=name, fields=fields)
