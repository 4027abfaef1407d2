"""
Row to record mapping - populates record instances from result rows.
"""

import copy
from typing import Any, Callable, Iterable, List, Optional, Sequence

from .codec import decode
from .schema import RecordSchema
from ..util.logging import logger


def fill(instance: Any, row: Any, schema: RecordSchema, columns: Sequence[str]) -> bool:
    """Populate ``instance`` from one row.

    ``columns`` is the live column list of the table the row came from. A mapped
    field whose column is not in it fails the whole fill. A value that does not
    decode falls back to the field's declared default, or leaves the field as is.
    """
    if row is None:
        return False

    live = set(columns)
    available = set(row.keys()) if hasattr(row, "keys") else live
    for f in schema.mapped:
        if f.column not in live:
            logger.log_schema_mismatch(schema.table_name, f"no column for field '{f.name}'", [f.column])
            return False

        raw = row[f.column] if f.column in available else None
        decoded = decode(raw, f.annotation)
        if not decoded.ok and raw is not None:
            logger.log_decode_failure(f.name, str(f.annotation), raw)

        if decoded.ok:
            value = decoded.value
        elif f.has_default:
            # each record gets its own copy of a mutable default
            value = copy.deepcopy(f.default)
        else:
            continue

        try:
            setattr(instance, f.name, value)
        except AttributeError as e:
            # frozen dataclasses and read-only properties
            logger.debug(f"Cannot assign '{f.name}' on {type(instance).__name__}: {e}")
            return False

    return True


def fill_all(rows: Iterable[Any], schema: RecordSchema, columns: Sequence[str],
             factory: Optional[Callable[[], Any]] = None) -> List[Any]:
    """Build one record per row. Rows that cannot be filled are skipped."""
    make = factory or schema.record_type
    output = []
    for index, row in enumerate(rows):
        try:
            instance = make()
        except Exception as e:
            logger.debug(f"Skipping row {index} of '{schema.table_name}': factory failed: {e}")
            continue
        if not fill(instance, row, schema, columns):
            logger.debug(f"Skipping row {index} of '{schema.table_name}': fill failed")
            continue
        output.append(instance)
    return output
