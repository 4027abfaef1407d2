"""
rowmapper - map dataclass records onto SQLite tables without hand-written SQL.
"""

from .core.codec import decode, decode_sequence, encode, encode_sequence
from .core.db import Database, get_db
from .core.models import ColumnInfo, FieldOptions
from .core.schema import FieldDescriptor, RecordSchema, column, describe, read_field
from .core.store import RecordStore
from .core.types import classify

__version__ = "1.0.0"
