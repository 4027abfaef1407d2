"""
Value codec tests - scalar conversion and the ARR sequence envelope.
"""

from dataclasses import dataclass
from datetime import date, datetime
from typing import Dict, List, Optional, Set, Tuple

import pytest

from rowmapper.core.codec import (
    NO_VALUE,
    decode,
    decode_sequence,
    encode,
    encode_sequence,
    render_literal,
)
from rowmapper.core.types import INTEGER, REAL, TEXT


@dataclass
class Pair:
    one: int = 1
    two: int = 2


class TestEncode:
    """Test native values convert to storable values."""

    def test_bool_becomes_integer(self):
        """Test booleans are stored as 0/1."""
        assert encode(True).sql_type == INTEGER
        assert encode(True).sql_value == 1
        assert encode(False).sql_value == 0

    def test_numbers_pass_through(self):
        """Test ints and floats keep their value."""
        assert (encode(42).sql_type, encode(42).sql_value) == (INTEGER, 42)
        assert (encode(0.25).sql_type, encode(0.25).sql_value) == (REAL, 0.25)

    def test_datetime_is_iso_text(self):
        """Test date/time values are stored in ISO form."""
        ts = datetime(2023, 4, 5, 6, 7, 8, 123456)
        assert encode(ts).sql_type == TEXT
        assert encode(ts).sql_value == "2023-04-05T06:07:08.123456"
        assert encode(date(2023, 4, 5)).sql_value == "2023-04-05"

    def test_none_does_not_encode(self):
        """Test None has no storable form."""
        assert encode(None) is None

    def test_object_is_json_text(self):
        """Test dataclasses and dicts are stored as JSON."""
        assert encode(Pair(3, 4)).sql_value == '{"one":3,"two":4}'
        assert encode({"a": 1}).sql_value == '{"a":1}'

    def test_unserializable_object_fails(self):
        """Test values with no JSON form report an encoding failure."""
        class Opaque:
            pass

        assert encode(Opaque()) is None


class TestSequenceEnvelope:
    """Test the ARR|<json> encoding of sequences."""

    def test_integer_list(self):
        """Test a list of ints becomes a compact JSON array in the envelope."""
        assert encode([1, 2, 3]).sql_value == "ARR|[1,2,3]"
        assert encode([1, 2, 3]).sql_type == TEXT

    def test_empty_sequence(self):
        """Test empty sequences keep a valid envelope."""
        assert encode_sequence([]) == "ARR|[]"
        assert decode_sequence("ARR|[]", int).value == []

    def test_strings_and_objects(self):
        """Test elements are serialized individually."""
        assert encode_sequence(["a", "b|c"]) == 'ARR|["a","b|c"]'
        assert encode_sequence([Pair(1, 2)]) == 'ARR|[{"one":1,"two":2}]'

    def test_integer_round_trip_keeps_order(self):
        """Test [3,1,4,1,5] survives encode then decode."""
        text = encode([3, 1, 4, 1, 5]).sql_value
        decoded = decode(text, List[int])
        assert decoded.ok is True
        assert decoded.value == [3, 1, 4, 1, 5]

    def test_missing_marker_is_no_value(self):
        """Test text without the ARR marker decodes to no value."""
        assert decode("[1,2,3]", List[int]) == NO_VALUE
        assert decode("XYZ|[1,2,3]", List[int]) == NO_VALUE

    def test_malformed_json_is_no_value(self):
        """Test broken JSON after the marker decodes to no value."""
        assert decode("ARR|[1,2", List[int]).ok is False

    def test_wrong_element_type_is_no_value(self):
        """Test elements that do not validate drop the whole value."""
        assert decode('ARR|["x","y"]', List[int]).ok is False

    def test_marker_is_case_insensitive(self):
        """Test a lower-case marker is accepted."""
        assert decode("arr|[1]", List[int]).value == [1]

    def test_single_value_becomes_one_element(self):
        """Test a bare JSON value after the marker reads as one element."""
        assert decode("ARR|5", List[int]).value == [5]

    def test_container_type_is_rebuilt(self):
        """Test tuples and sets come back as their declared container."""
        assert decode("ARR|[1,2]", Tuple[int, ...]).value == (1, 2)
        assert decode("ARR|[1,2,2]", Set[int]).value == {1, 2}

    def test_nested_objects(self):
        """Test dataclass elements are rebuilt from their JSON form."""
        decoded = decode('ARR|[{"one":5,"two":6}]', List[Pair])
        assert decoded.value == [Pair(5, 6)]

    def test_datetime_elements(self):
        """Test datetime elements round-trip."""
        values = [datetime(2020, 1, 1, 12, 0), datetime(2021, 6, 30, 8, 15, 30)]
        assert decode(encode_sequence(values), List[datetime]).value == values


class TestDecodeScalars:
    """Test stored values convert back to field types."""

    @pytest.mark.parametrize("raw", [None, "", "   "])
    def test_empty_is_no_value(self, raw):
        """Test NULL and empty text yield no value."""
        assert decode(raw, int) == NO_VALUE

    def test_bool_only_one_is_true(self):
        """Test only "1" decodes to True."""
        assert decode(1, bool).value is True
        assert decode("1", bool).value is True
        assert decode(0, bool).value is False
        assert decode("true", bool).value is False

    def test_numeric_coercion(self):
        """Test numbers decode from native and text storage."""
        assert decode(5, int).value == 5
        assert decode("5", int).value == 5
        assert decode(2.5, float).value == 2.5
        assert decode(3, float).value == 3.0

    def test_coercion_failure_is_no_value(self):
        """Test text that is not a number yields no value."""
        assert decode("abc", int).ok is False
        assert decode(2.5, int).ok is False

    def test_text_kept_verbatim(self):
        """Test strings are not trimmed or unquoted."""
        assert decode('  "quoted"  ', str).value == '  "quoted"  '

    def test_datetime(self):
        """Test ISO text decodes to datetime and date."""
        assert decode("2023-04-05T06:07:08", datetime).value == datetime(2023, 4, 5, 6, 7, 8)
        assert decode("2023-04-05", date).value == date(2023, 4, 5)
        assert decode("not a date", datetime).ok is False

    def test_optional_target(self):
        """Test Optional targets decode like their inner type."""
        assert decode("7", Optional[int]).value == 7

    def test_object_from_json(self):
        """Test objects decode from their JSON text."""
        assert decode('{"one":9,"two":8}', Pair).value == Pair(9, 8)
        assert decode('{"a":1}', Dict[str, int]).value == {"a": 1}
        assert decode("{broken", Pair).ok is False


class TestRenderLiteral:
    """Test SQL literal rendering for DEFAULT clauses."""

    def test_literals(self):
        """Test numbers are bare and text is quoted."""
        assert render_literal(7) == "7"
        assert render_literal(1.5) == "1.5"
        assert render_literal(True) == "1"
        assert render_literal("it's") == "'it''s'"
        assert render_literal([1, 2]) == "'ARR|[1,2]'"
        assert render_literal(None) is None
