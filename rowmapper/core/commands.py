"""
Statement generation - CREATE/INSERT/UPDATE/DELETE/SELECT text with bound
parameters, derived from a record schema and, for writes, an instance.

Every generator returns None when it refuses; nothing is raised. Placeholders
are ``@<column>`` and the parameter dict is keyed by column name, which is how
sqlite3 binds named parameters. Output depends only on the declared field
order and the instance values.
"""

from dataclasses import dataclass, field
from typing import Any, Dict, List, Optional, Tuple

from .codec import encode, render_literal
from .schema import FieldDescriptor, RecordSchema
from .types import base_type
from ..util.logging import logger

PLACEHOLDER_PREFIX = "@"

MATCH_ROW = "row"
MATCH_PRIMARY_KEY = "primary_key"


@dataclass(frozen=True)
class Statement:
    """Generated SQL text and its bound parameters."""
    text: str
    parameters: Dict[str, Any] = field(default_factory=dict)

    @property
    def placeholders(self) -> Dict[str, Any]:
        """Parameters keyed by their placeholder as written in the text."""
        return {placeholder(k): v for k, v in self.parameters.items()}


def quote(identifier: str) -> str:
    return '"' + identifier.replace('"', '""') + '"'


def placeholder(column: str) -> str:
    return PLACEHOLDER_PREFIX + column


def _assignments(fields: List[str], joiner: str) -> str:
    return joiner.join(f"{quote(c)} = {placeholder(c)}" for c in fields)


def _bind(record: Any, fields: List[FieldDescriptor],
          keep_none: bool = False) -> Optional[List[Tuple[FieldDescriptor, Any]]]:
    """Encode every non-None field value. None if any value fails to encode.

    With ``keep_none`` a None value is bound as SQL NULL instead of skipped.
    """
    bound = []
    for f in fields:
        value = getattr(record, f.name, None)
        if value is None:
            if keep_none:
                bound.append((f, None))
            continue
        encoded = encode(value)
        if encoded is None:
            logger.log_encode_failure(f.name, type(value).__name__)
            return None
        bound.append((f, encoded.sql_value))
    return bound


def _default_clause(f: FieldDescriptor) -> Optional[str]:
    encoded = encode(f.default)
    if encoded is None:
        logger.log_encode_failure(f.name, type(f.default).__name__, "default value")
        return None
    if encoded.sql_type != base_type(f.sql_type):
        logger.warning(
            f"Default for '{f.name}' is {encoded.sql_type} but the column is {f.sql_type}"
        )
        return None
    return render_literal(f.default)


def generate_create(schema: RecordSchema, if_not_exists: bool = False) -> Optional[Statement]:
    """CREATE TABLE for a record type."""
    mapped = schema.mapped
    if not mapped:
        logger.warning(f"{schema.record_type.__name__} has no mapped fields")
        return None
    if len(schema.primary_keys) > 1:
        logger.warning(f"{schema.record_type.__name__} declares more than one primary key")
        return None
    if len(set(schema.columns)) != len(mapped):
        logger.warning(f"{schema.record_type.__name__} maps two fields to the same column")
        return None

    definitions = []
    for f in mapped:
        definition = f"{quote(f.column)} {f.sql_type}"
        if f.primary_key:
            definition += " PRIMARY KEY"
        if f.has_default:
            literal = _default_clause(f)
            if literal is None:
                return None
            definition += f" DEFAULT {literal}"
        if f.not_null:
            definition += " NOT NULL"
        definitions.append(definition)

    head = "CREATE TABLE IF NOT EXISTS" if if_not_exists else "CREATE TABLE"
    text = f"{head} {quote(schema.table_name)}({', '.join(definitions)});"
    logger.log_statement("create", schema.table_name, text)
    return Statement(text)


def generate_insert(record: Any, schema: RecordSchema) -> Optional[Statement]:
    """INSERT of every non-None mapped field. An all-None record inserts defaults."""
    bound = _bind(record, schema.mapped)
    if bound is None:
        return None

    table = quote(schema.table_name)
    if not bound:
        text = f"INSERT INTO {table} DEFAULT VALUES;"
    else:
        columns = [f.column for f, _ in bound]
        text = (
            f"INSERT INTO {table}({', '.join(quote(c) for c in columns)})"
            f" VALUES ({', '.join(placeholder(c) for c in columns)});"
        )
    parameters = {f.column: value for f, value in bound}
    logger.log_statement("insert", schema.table_name, text, parameters)
    return Statement(text, parameters)


def generate_update(record: Any, schema: RecordSchema) -> Optional[Statement]:
    """UPDATE of the non-key fields, targeted by the primary key.

    A non-key field holding None is written as NULL so the stored row matches
    the record.
    """
    bound = _bind(record, schema.mapped, keep_none=True)
    if bound is None:
        return None

    keys = [f.column for f, value in bound if f.primary_key and value is not None]
    sets = [f.column for f, _ in bound if not f.primary_key]
    if not keys:
        logger.warning(f"Update on '{schema.table_name}' needs a primary key value")
        return None
    if not sets:
        logger.warning(f"Update on '{schema.table_name}' has nothing to set")
        return None

    text = (
        f"UPDATE {quote(schema.table_name)} SET {_assignments(sets, ', ')}"
        f" WHERE {_assignments(keys, ' AND ')};"
    )
    parameters = {f.column: value for f, value in bound}
    logger.log_statement("update", schema.table_name, text, parameters)
    return Statement(text, parameters)


def generate_delete(record: Any, schema: RecordSchema, match: str = MATCH_ROW) -> Optional[Statement]:
    """DELETE matching every non-None mapped field, or only the primary key."""
    if match == MATCH_PRIMARY_KEY:
        fields = schema.primary_keys
        if not fields or getattr(record, fields[0].name, None) is None:
            logger.warning(f"Delete on '{schema.table_name}' needs a primary key value")
            return None
    else:
        fields = schema.mapped

    bound = _bind(record, fields)
    if not bound:
        # never emit an unqualified DELETE
        return None

    columns = [f.column for f, _ in bound]
    text = f"DELETE FROM {quote(schema.table_name)} WHERE {_assignments(columns, ' AND ')};"
    parameters = {f.column: value for f, value in bound}
    logger.log_statement("delete", schema.table_name, text, parameters)
    return Statement(text, parameters)


def generate_select(schema: RecordSchema) -> Statement:
    """SELECT every row of the table."""
    return Statement(f"SELECT * FROM {quote(schema.table_name)};")


def generate_select_by_key(schema: RecordSchema, key: Any) -> Optional[Statement]:
    """SELECT the row whose primary key equals ``key``."""
    keys = schema.primary_keys
    if len(keys) != 1:
        return None
    encoded = encode(key)
    if encoded is None:
        return None
    column = keys[0].column
    text = f"SELECT * FROM {quote(schema.table_name)} WHERE {quote(column)} = {placeholder(column)};"
    return Statement(text, {column: encoded.sql_value})
