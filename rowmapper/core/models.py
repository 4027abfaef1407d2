"""
Validated models for declared field options and live pragma_table_info rows.
"""

import re
from typing import Any, Optional

from pydantic import BaseModel, ConfigDict, ValidationError, field_validator

_IDENTIFIER = re.compile(r"^[A-Za-z_][A-Za-z0-9_]*$")


def is_identifier(name: str) -> bool:
    """Check a column name is a plain SQL identifier, usable as a placeholder."""
    return bool(name) and bool(_IDENTIFIER.match(name))


def is_table_name(name: str) -> bool:
    """Check a table name can be quoted. Any non-empty text without NUL."""
    return isinstance(name, str) and bool(name) and "\x00" not in name


class FieldOptions(BaseModel):
    """Column options declared on a record field."""
    model_config = ConfigDict(frozen=True)

    primary_key: bool = False
    not_null: bool = False
    ignore: bool = False
    default: Any = None
    name: Optional[str] = None

    @field_validator('name')
    @classmethod
    def name_must_be_identifier(cls, v):
        if v is not None and not is_identifier(v):
            raise ValueError(f'column name must be an identifier: {v!r}')
        return v


class ColumnInfo(BaseModel):
    """One row of pragma_table_info for a live table."""
    cid: int = 0
    name: str = ""
    type: str = ""
    dflt_value: Optional[str] = None
    notnull: bool = False
    pk: bool = False

    @field_validator('dflt_value', mode='before')
    @classmethod
    def default_as_text(cls, v):
        return None if v is None else str(v)

    @field_validator('pk', mode='before')
    @classmethod
    def pk_as_flag(cls, v):
        # pk holds the 1-based position inside a composite key
        try:
            return int(v) > 0
        except (TypeError, ValueError):
            return False

    @property
    def has_default(self) -> bool:
        return self.dflt_value is not None

    @classmethod
    def from_row(cls, row: Any) -> "ColumnInfo":
        """Build from a sqlite3.Row, substituting safe defaults for bad values."""
        data = {key: row[key] for key in row.keys()}
        try:
            return cls.model_validate(data)
        except ValidationError:
            safe = {}
            for key in cls.model_fields:
                if key not in data:
                    continue
                try:
                    cls.model_validate({key: data[key]})
                except ValidationError:
                    continue
                safe[key] = data[key]
            return cls.model_validate(safe)
