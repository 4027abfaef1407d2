"""
SQLite driver boundary - a single lazily opened connection per Database.
Errors from sqlite3 never propagate: execute reports 0 rows, query and
scalar report None.
"""

import sqlite3
from contextlib import closing, contextmanager
from typing import Any, Dict, Generator, Optional

from .config import DB_PATH, ensure_db_directory
from ..util.logging import logger

Params = Optional[Dict[str, Any]]


class Database:
    """Lazily connected SQLite database. Reopens transparently after close()."""

    def __init__(self, path: str = DB_PATH):
        self._path = path
        self._conn: Optional[sqlite3.Connection] = None

    @property
    def path(self) -> str:
        return self._path

    @property
    def connection(self) -> Optional[sqlite3.Connection]:
        """The current connection; None before first use or after close()."""
        return self._conn

    def connect(self) -> Optional[sqlite3.Connection]:
        """Open the connection if needed. None if it cannot be opened."""
        if self._conn is not None:
            try:
                # raises once the connection has been closed elsewhere
                self._conn.total_changes
                return self._conn
            except sqlite3.ProgrammingError:
                self._conn = None
        try:
            ensure_db_directory(self._path)
            # autocommit: every statement stands alone
            conn = sqlite3.connect(self._path, isolation_level=None)
            conn.row_factory = sqlite3.Row
        except (sqlite3.Error, OSError) as e:
            logger.log_driver_error("connect", e, self._path)
            return None
        self._conn = conn
        return conn

    def close(self) -> None:
        """Close the connection. The next call reopens it."""
        if self._conn is None:
            return
        try:
            self._conn.close()
        except sqlite3.Error as e:
            logger.log_driver_error("close", e)
        finally:
            self._conn = None

    def execute(self, text: str, params: Params = None) -> int:
        """Run a statement and return the affected row count, 0 on any failure."""
        conn = self.connect()
        if conn is None:
            return 0
        try:
            with closing(conn.execute(text, params or {})) as cursor:
                return max(cursor.rowcount, 0)
        except sqlite3.Error as e:
            logger.log_driver_error("execute", e, text)
            return 0

    def execute_ddl(self, text: str, params: Params = None) -> bool:
        """Run a statement whose row count is meaningless (CREATE, DROP)."""
        conn = self.connect()
        if conn is None:
            return False
        try:
            conn.execute(text, params or {}).close()
            return True
        except sqlite3.Error as e:
            logger.log_driver_error("execute", e, text)
            return False

    def query(self, text: str, params: Params = None) -> Optional[sqlite3.Cursor]:
        """Run a query and return its cursor, None on failure. Callers close it."""
        conn = self.connect()
        if conn is None:
            return None
        try:
            return conn.execute(text, params or {})
        except sqlite3.Error as e:
            logger.log_driver_error("query", e, text)
            return None

    def scalar(self, text: str, params: Params = None) -> Optional[Any]:
        """First column of the first row, None on failure or no rows."""
        cursor = self.query(text, params)
        if cursor is None:
            return None
        with closing(cursor):
            try:
                row = cursor.fetchone()
            except sqlite3.Error as e:
                logger.log_driver_error("scalar", e, text)
                return None
        return row[0] if row is not None else None

    def health_check(self) -> bool:
        """Check the database answers a trivial query."""
        return self.scalar("SELECT 1") == 1


@contextmanager
def get_db(path: str = DB_PATH) -> Generator[Database, None, None]:
    """Get a Database that is closed when the block exits."""
    db = Database(path)
    try:
        yield db
    finally:
        db.close()
