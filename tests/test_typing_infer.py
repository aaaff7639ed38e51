"""
Type inference: test_typing_infer.py

Value-level:
  - boolean / long / double / timestamp / string, checked in that order
  - Timestamps carry the strptime format that parsed them
  - Out-of-range timestamp fields fall back to string
  - None and "" do not constrain
  - A value ending in a line break (multi-line quoted value) is a string

Column-level:
  - long + double → double; any other mixture → string
  - Timestamps with different formats → string
  - All null/empty → string
  - Ragged rows: missing cells are absent, width is the longest row
  - Deterministic: same rows, same types
"""

from __future__ import annotations

import sys, pathlib
_root = str(pathlib.Path(__file__).parent.parent)
if _root not in sys.path:
    sys.path.insert(0, _root)

import pytest

from csvguess.models.models import ColumnType, DialectCandidate, to_sample_lines
from csvguess.transformers.tokenizer import split_lines
from csvguess.transformers.typing_infer import (
    guess_timestamp_format,
    infer_column_type,
    infer_value_type,
    merge_types,
    types_from_records,
)


# ============================================================================
# Value-level inference
# ============================================================================

class TestInferValueType:
    @pytest.mark.parametrize("value", ["true", "False", "YES", "no", "On", "OFF"])
    def test_boolean(self, value):
        assert infer_value_type(value) == ColumnType.BOOLEAN

    @pytest.mark.parametrize("value", ["42", "-7", "+3", "007"])
    def test_long(self, value):
        assert infer_value_type(value) == ColumnType.LONG

    @pytest.mark.parametrize("value", ["3.14", "-.5", "1.", "1e3", "2.5E-4"])
    def test_double(self, value):
        assert infer_value_type(value) == ColumnType.DOUBLE

    @pytest.mark.parametrize("value, fmt", [
        ("2024-01-15", "%Y-%m-%d"),
        ("2024-01-15 10:00:00", "%Y-%m-%d %H:%M:%S"),
        ("2024-01-15T09:30:00", "%Y-%m-%dT%H:%M:%S"),
        ("2024-01-15T09:30:00.000Z", "%Y-%m-%dT%H:%M:%S.%f%z"),
        ("2024-01-15 10:00:00 +0900", "%Y-%m-%d %H:%M:%S %z"),
        ("2024/01/15", "%Y/%m/%d"),
        ("15/Jan/2024:10:00:00 +0000", "%d/%b/%Y:%H:%M:%S %z"),
    ])
    def test_timestamp(self, value, fmt):
        assert infer_value_type(value) == ColumnType.timestamp(fmt)

    def test_out_of_range_timestamp_is_string(self):
        assert guess_timestamp_format("2024-13-01") is None
        assert infer_value_type("2024-13-01") == ColumnType.STRING

    @pytest.mark.parametrize("value", ["alice", "1,5", "12abc", "t"])
    def test_string(self, value):
        assert infer_value_type(value) == ColumnType.STRING

    @pytest.mark.parametrize("value", [None, ""])
    def test_absent(self, value):
        assert infer_value_type(value) is None

    @pytest.mark.parametrize("value", ["12\n", "1.5\n", "true\n", "2024-01-15\n", "2024-01-15 10:00:00\n"])
    def test_trailing_line_break_is_string(self, value):
        assert infer_value_type(value) == ColumnType.STRING

    def test_multi_line_quoted_number_is_string(self):
        rows = split_lines(
            to_sample_lines(['a,"12', '"']), DialectCandidate(delimiter=","), skip_empty_lines=True,
        ).rows()
        assert rows == [["a", "12\n"]]
        assert types_from_records(rows) == [ColumnType.STRING, ColumnType.STRING]


# ============================================================================
# Column-level inference
# ============================================================================

class TestMergeTypes:
    def test_long_double(self):
        assert merge_types(ColumnType.LONG, ColumnType.DOUBLE) == ColumnType.DOUBLE
        assert merge_types(ColumnType.DOUBLE, ColumnType.LONG) == ColumnType.DOUBLE

    def test_equal(self):
        assert merge_types(ColumnType.BOOLEAN, ColumnType.BOOLEAN) == ColumnType.BOOLEAN

    def test_boolean_long(self):
        assert merge_types(ColumnType.BOOLEAN, ColumnType.LONG) == ColumnType.STRING

    def test_timestamp_formats_differ(self):
        a = ColumnType.timestamp("%Y-%m-%d")
        b = ColumnType.timestamp("%Y/%m/%d")
        assert merge_types(a, b) == ColumnType.STRING
        assert merge_types(a, a) == a


class TestTypesFromRecords:
    def test_widening(self):
        rows = [["1", "a"], ["2.5", "b"]]
        assert types_from_records(rows) == [ColumnType.DOUBLE, ColumnType.STRING]

    def test_nulls_do_not_constrain(self):
        rows = [["1", None], [None, "x"], ["", "y"]]
        assert types_from_records(rows) == [ColumnType.LONG, ColumnType.STRING]

    def test_all_null_column_is_string(self):
        assert infer_column_type([None, ""]) == ColumnType.STRING

    def test_ragged_rows(self):
        assert types_from_records([["1"], ["2", "x"]]) == [ColumnType.LONG, ColumnType.STRING]

    def test_empty(self):
        assert types_from_records([]) == []

    def test_deterministic(self):
        rows = [["2024-01-01", "1", "yes"], ["2024-02-01", "2", "no"]]
        assert types_from_records(rows) == types_from_records(rows)
        assert [str(t) for t in types_from_records(rows)] == ["timestamp", "long", "boolean"]
