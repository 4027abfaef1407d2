"""
Schema inspection - live table and column metadata from the store.
Nothing here is cached; every call asks SQLite again.
"""

from contextlib import closing
from typing import List

from .db import Database
from .models import ColumnInfo
from .schema import RecordSchema
from ..util.logging import logger

TABLES_QUERY = "SELECT name FROM sqlite_master WHERE type='table'"
COLUMNS_QUERY = "SELECT * FROM pragma_table_info(@table)"


class SchemaInspector:
    """Queries sqlite_master and pragma_table_info for ground truth."""

    def __init__(self, db: Database):
        self.db = db

    def tables(self) -> List[str]:
        """All table names, in sqlite_master order."""
        cursor = self.db.query(TABLES_QUERY)
        if cursor is None:
            return []
        with closing(cursor):
            return [str(row["name"]) for row in cursor]

    def table_exists(self, name: str) -> bool:
        return name in self.tables()

    def columns(self, table: str) -> List[ColumnInfo]:
        """Column descriptors for a table, ordered by cid. Empty if it does not exist."""
        cursor = self.db.query(COLUMNS_QUERY, {"table": table})
        if cursor is None:
            return []
        with closing(cursor):
            return [ColumnInfo.from_row(row) for row in cursor]

    def column_names(self, table: str) -> List[str]:
        return [info.name for info in self.columns(table)]

    def fits(self, schema: RecordSchema, table: str = "") -> bool:
        """Check every mapped field of a record type has a column in the live table."""
        table = table or schema.table_name
        live = set(self.column_names(table))
        missing = [f.column for f in schema.mapped if f.column not in live]
        if missing:
            logger.log_schema_mismatch(table, "fields missing from table", missing)
            return False
        return True
