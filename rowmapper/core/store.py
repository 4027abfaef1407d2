"""
Record store - the public API for mapping dataclass records to SQLite tables.

Every write goes through the same steps: ensure the table exists, check the
record fits the live table, generate the statement, execute it. A failure at
any step returns False before anything else runs.
"""

from contextlib import closing
from typing import Any, Callable, List, Optional, Type, TypeVar

from .commands import (
    MATCH_PRIMARY_KEY,
    MATCH_ROW,
    Statement,
    generate_create,
    generate_delete,
    generate_insert,
    generate_select,
    generate_select_by_key,
    generate_update,
)
from .config import DB_PATH, get_delete_match
from .db import Database
from .inspector import SchemaInspector
from .mapper import fill_all as map_rows
from .models import ColumnInfo
from .schema import RecordSchema, describe
from ..util.logging import logger

T = TypeVar("T")


class RecordStore:
    """Maps dataclass records onto tables of one SQLite database."""

    def __init__(self, db_path: str = DB_PATH, db: Optional[Database] = None):
        self.db = db or Database(db_path)
        self.inspector = SchemaInspector(self.db)

    def __enter__(self) -> "RecordStore":
        return self

    def __exit__(self, exc_type, exc, tb) -> None:
        self.close()

    @property
    def path(self) -> str:
        return self.db.path

    def close(self) -> None:
        """Release the connection. It is reopened on the next call."""
        self.db.close()

    # Schema

    def tables(self) -> List[str]:
        return self.inspector.tables()

    def columns(self, table_name: str) -> List[ColumnInfo]:
        return self.inspector.columns(table_name)

    def table_exists(self, table_name: str) -> bool:
        return self.inspector.table_exists(table_name)

    def _ensure_table(self, schema: RecordSchema) -> bool:
        if self.inspector.table_exists(schema.table_name):
            return True

        statement = generate_create(schema)
        if statement is None:
            return False
        self.db.execute_ddl(statement.text)

        # concurrent creators may race here; only the final state matters
        if not self.inspector.table_exists(schema.table_name):
            logger.log_operation("table.create", "failed", {"table": schema.table_name})
            return False
        logger.log_operation("table.create", "success", {"table": schema.table_name})
        return True

    def create_table(self, record_type: Type, table_name: str = "") -> bool:
        """Create the table for a record type if it does not exist yet."""
        schema = describe(record_type, table_name)
        if schema is None:
            return False
        return self._ensure_table(schema)

    def contains(self, record: Any, table_name: str = "") -> bool:
        """Check every mapped field of a record has a column in the table."""
        schema = describe(record, table_name)
        if schema is None:
            return False
        return self.inspector.fits(schema)

    def _prepare(self, record: Any, table_name: str) -> Optional[RecordSchema]:
        """Ensure the table exists and the record fits it."""
        if record is None:
            return None
        schema = describe(record, table_name)
        if schema is None:
            return None
        if not self._ensure_table(schema):
            return None
        if not self.inspector.fits(schema):
            return None
        return schema

    # Writes

    def _run(self, kind: str, schema: RecordSchema, statement: Optional[Statement]) -> bool:
        if statement is None:
            logger.log_operation(f"record.{kind}", "rejected", {"table": schema.table_name})
            return False
        affected = self.db.execute(statement.text, statement.parameters)
        status = "success" if affected > 0 else "failed"
        logger.log_operation(f"record.{kind}", status, {"table": schema.table_name, "rows": affected})
        return affected > 0

    def add(self, record: Any, table_name: str = "") -> bool:
        """Insert a record, creating its table first if needed."""
        schema = self._prepare(record, table_name)
        if schema is None:
            return False
        return self._run("add", schema, generate_insert(record, schema))

    def update(self, record: Any, table_name: str = "") -> bool:
        """Update the row whose primary key matches the record."""
        schema = self._prepare(record, table_name)
        if schema is None:
            return False
        return self._run("update", schema, generate_update(record, schema))

    def delete(self, record: Any, table_name: str = "", match: Optional[str] = None) -> bool:
        """Delete the row matching the record.

        ``match="row"`` requires every stored field to equal the record's value;
        ``match="primary_key"`` matches on the key alone. Defaults to DELETE_MATCH.
        """
        match = match or get_delete_match()
        if match not in (MATCH_ROW, MATCH_PRIMARY_KEY):
            logger.warning(f"Unknown delete match mode: {match}")
            return False
        schema = self._prepare(record, table_name)
        if schema is None:
            return False
        return self._run("delete", schema, generate_delete(record, schema, match))

    # Reads

    def fill_from(self, cursor: Any, record_type: Type[T], table_name: str = "",
                  factory: Optional[Callable[[], T]] = None) -> Optional[List[T]]:
        """Build records from an open cursor over ``table_name``. Closes the cursor."""
        if cursor is None:
            return None
        with closing(cursor):
            schema = describe(record_type, table_name)
            if schema is None:
                return None
            columns = self.inspector.column_names(schema.table_name)
            return map_rows(cursor, schema, columns, factory)

    def fill_all(self, record_type: Type[T], table_name: str = "",
                 factory: Optional[Callable[[], T]] = None) -> Optional[List[T]]:
        """Every row of the table as a record. None if the table cannot be read."""
        schema = describe(record_type, table_name)
        if schema is None:
            return None
        statement = generate_select(schema)
        return self.fill_from(self.db.query(statement.text), record_type, schema.table_name, factory)

    def get(self, record_type: Type[T], key: Any, table_name: str = "",
            factory: Optional[Callable[[], T]] = None) -> Optional[T]:
        """The record whose primary key equals ``key``, or None."""
        schema = describe(record_type, table_name)
        if schema is None:
            return None
        statement = generate_select_by_key(schema, key)
        if statement is None:
            return None
        records = self.fill_from(
            self.db.query(statement.text, statement.parameters), record_type, schema.table_name, factory
        )
        return records[0] if records else None
