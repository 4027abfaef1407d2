"""
Schema inspection tests - live tables and columns from SQLite.
"""

from dataclasses import dataclass

import pytest

from rowmapper.core.db import Database
from rowmapper.core.inspector import SchemaInspector
from rowmapper.core.models import ColumnInfo
from rowmapper.core.schema import column, describe


@dataclass
class Gadget:
    id: int = column(0, primary_key=True)
    name: str = column("", not_null=True, default="none")
    weight: float = 0.0


@dataclass
class GadgetPlus:
    __table_name__ = "Gadget"
    id: int = column(0, primary_key=True)
    name: str = ""
    weight: float = 0.0
    colour: str = ""
    cache: str = column("", ignore=True)


@pytest.fixture
def db(tmp_path):
    database = Database(str(tmp_path / "inspect.db"))
    database.execute_ddl(
        'CREATE TABLE "Gadget"("id" INTEGER PRIMARY KEY, "name" TEXT DEFAULT \'none\' NOT NULL, "weight" REAL);'
    )
    yield database
    database.close()


@pytest.fixture
def inspector(db):
    return SchemaInspector(db)


class TestTables:
    """Test table listing."""

    def test_lists_tables(self, inspector):
        """Test created tables are listed."""
        assert inspector.tables() == ["Gadget"]
        assert inspector.table_exists("Gadget") is True
        assert inspector.table_exists("Missing") is False

    def test_sees_new_tables_immediately(self, db, inspector):
        """Test nothing is cached between calls."""
        db.execute_ddl('CREATE TABLE "Other"("x" INTEGER);')
        assert inspector.tables() == ["Gadget", "Other"]


class TestColumns:
    """Test pragma_table_info parsing."""

    def test_column_descriptors(self, inspector):
        """Test ordinal, type, default, not-null and key flags."""
        columns = inspector.columns("Gadget")
        assert [c.name for c in columns] == ["id", "name", "weight"]
        assert [c.cid for c in columns] == [0, 1, 2]
        assert columns[0].type == "INTEGER"
        assert columns[0].pk is True
        assert columns[1].notnull is True
        assert columns[1].has_default is True
        assert columns[1].dflt_value == "'none'"
        assert columns[2].has_default is False

    def test_missing_table_has_no_columns(self, inspector):
        """Test an unknown table yields an empty column list."""
        assert inspector.columns("Missing") == []

    def test_bad_row_values_fall_back(self):
        """Test a malformed pragma row keeps the values that validate."""
        row = {"cid": "x", "name": "weight", "type": "REAL", "dflt_value": None, "notnull": 0, "pk": 0}

        class Row(dict):
            pass

        info = ColumnInfo.from_row(Row(row))
        assert info.cid == 0
        assert info.name == "weight"


class TestFits:
    """Test record types against live tables."""

    def test_matching_record_fits(self, inspector):
        """Test a record whose fields are all columns fits."""
        assert inspector.fits(describe(Gadget)) is True

    def test_extra_field_does_not_fit(self, inspector):
        """Test a field missing from the table fails the check."""
        assert inspector.fits(describe(GadgetPlus)) is False

    def test_ignored_fields_do_not_count(self, db, inspector):
        """Test ignored fields are not required as columns."""
        db.execute_ddl('ALTER TABLE "Gadget" ADD COLUMN "colour" TEXT;')
        assert inspector.fits(describe(GadgetPlus)) is True
