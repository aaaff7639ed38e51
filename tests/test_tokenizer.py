"""
Dialect tokenizer: test_tokenizer.py

DialectTokenizer / split_lines:
  - Plain and quoted fields; delimiter inside quotes is data
  - Doubled quote → literal quote; escape + quote / escape + escape → literal
  - Quoted value spanning physical lines keeps '\\n'
  - trim_if_not_quoted strips only around unquoted values
  - Unquoted null_string → None; quoted null_string stays a string
  - Empty lines skipped or emitted as a one-empty-field record
  - Trailing delimiter gives a trailing empty field
  - Quoting disabled: quote characters are data
  - Multi-character delimiter
  - Invalid value: physical line dropped with one warning, scan resumes
  - Invalid value inside a multi-line quote: later lines are read again
  - Quoted value over max_quoted_size is an invalid value
  - Input ending inside an open quote: record kept with the fields read
    before it (the partial quoted value itself is not emitted)
  - next_record before the record ended raises RuntimeError
  - next_column after the record ended raises TooFewColumnsError
"""

from __future__ import annotations

import sys, pathlib
_root = str(pathlib.Path(__file__).parent.parent)
if _root not in sys.path:
    sys.path.insert(0, _root)

import pytest

from csvguess.configs.config import GuessConfig
from csvguess.configs.exceptions import (
    InvalidValueError,
    QuotedSizeLimitExceededError,
    TooFewColumnsError,
)
from csvguess.models.models import DialectCandidate, to_sample_lines
from csvguess.transformers.tokenizer import DialectTokenizer, split_lines


# ============================================================================
# Helpers
# ============================================================================

def _split(lines, skip_empty_lines=True, config=None, **dialect):
    dialect.setdefault("delimiter", ",")
    return split_lines(
        to_sample_lines(lines),
        DialectCandidate(**dialect),
        skip_empty_lines=skip_empty_lines,
        config=config,
    )


def _rows(lines, **kwargs):
    return _split(lines, **kwargs).rows()


# ============================================================================
# Basic splitting
# ============================================================================

class TestBasicSplitting:
    def test_plain_fields(self):
        assert _rows(["a,b,c", "1,2,3"]) == [["a", "b", "c"], ["1", "2", "3"]]

    def test_quoted_delimiter_is_data(self):
        result = _split(['"a,b",c'])
        assert result.rows() == [["a,b", "c"]]
        assert [f.quoted for f in result.records[0].fields] == [True, False]

    def test_trailing_delimiter(self):
        assert _rows(["a,b,"]) == [["a", "b", ""]]

    def test_spaces_after_closing_quote(self):
        assert _rows(['"a"  ,b']) == [["a", "b"]]

    def test_quoting_disabled(self):
        assert _rows(['"a",b'], quote=None) == [['"a"', "b"]]

    def test_multi_character_delimiter(self):
        assert _rows(["a::b::c"], delimiter="::") == [["a", "b", "c"]]

    def test_tab_delimiter(self):
        assert _rows(["a\tb"], delimiter="\t") == [["a", "b"]]


# ============================================================================
# Quotes and escapes
# ============================================================================

class TestQuotesAndEscapes:
    def test_doubled_quote(self):
        assert _rows(['"a""b",c'], escape='"') == [['a"b', "c"]]

    def test_doubled_quote_without_escape(self):
        assert _rows(['"a""b",c']) == [['a"b', "c"]]

    def test_backslash_quote(self):
        assert _rows(['"a\\"b",c'], escape="\\") == [['a"b', "c"]]

    def test_backslash_backslash(self):
        assert _rows(['"a\\\\b"'], escape="\\") == [["a\\b"]]

    def test_lone_escape_is_data(self):
        assert _rows(['"a\\b"'], escape="\\") == [["a\\b"]]

    def test_multi_line_quoted_value(self):
        rows = _rows(['"line1', 'line2",x', "y,z"])
        assert rows == [["line1\nline2", "x"], ["y", "z"]]


# ============================================================================
# Trim and null
# ============================================================================

class TestTrimAndNull:
    def test_trim_enabled(self):
        assert _rows(["  a , b  "], trim_if_not_quoted=True) == [["a", "b"]]

    def test_trim_disabled(self):
        assert _rows(["  a , b  "]) == [["  a ", " b  "]]

    def test_trim_keeps_inner_spaces(self):
        assert _rows(["a b , c"], trim_if_not_quoted=True) == [["a b", "c"]]

    def test_trim_leaves_quoted_value(self):
        assert _rows(['  " a " ,b'], trim_if_not_quoted=True) == [[" a ", "b"]]

    def test_unquoted_null_string(self):
        assert _rows(['NULL,"NULL"'], null_string="NULL") == [[None, "NULL"]]

    def test_empty_null_string(self):
        assert _rows(['a,,""'], null_string="") == [["a", None, ""]]


# ============================================================================
# Empty lines
# ============================================================================

class TestEmptyLines:
    def test_skipped(self):
        assert _rows(["a,b", "", "c,d"]) == [["a", "b"], ["c", "d"]]

    def test_kept(self):
        rows = _rows(["a,b", "", "c,d"], skip_empty_lines=False)
        assert rows == [["a", "b"], [""], ["c", "d"]]


# ============================================================================
# Recovery
# ============================================================================

class TestRecovery:
    def test_invalid_value_drops_line(self):
        result = _split(['"a"b,c', "d,e"])
        assert result.rows() == [["d", "e"]]
        assert len(result.warnings) == 1
        assert result.warnings[0].line_number == 1
        assert result.warnings[0].line == '"a"b,c'

    def test_invalid_value_in_multi_line_quote_rereads(self):
        result = _split(['"a', 'b"x', "c,d"])
        assert result.rows() == [['b"x'], ["c", "d"]]
        assert [w.line_number for w in result.warnings] == [1]

    def test_quoted_size_limit(self):
        result = _split(['"abcdefghij",x', "y,z"], config=GuessConfig(max_quoted_size=5))
        assert result.rows() == [["y", "z"]]
        assert len(result.warnings) == 1

    def test_open_quote_at_end_of_input_keeps_record(self):
        # The reading is ambiguous: the record is kept as a too-few-columns
        # record, so only the fields before the open quote survive.
        result = _split(['a,"b', "c"])
        assert result.rows() == [["a"]]
        assert result.warnings == ()


# ============================================================================
# Pull interface
# ============================================================================

class TestPullInterface:
    def _tokenizer(self, lines, **dialect):
        dialect.setdefault("delimiter", ",")
        return DialectTokenizer(to_sample_lines(lines), DialectCandidate(**dialect))

    def test_columns_then_too_few(self):
        tokenizer = self._tokenizer(["a,b"])
        assert tokenizer.next_record() is True
        assert tokenizer.next_column() == "a"
        assert tokenizer.next_column() == "b"
        with pytest.raises(TooFewColumnsError):
            tokenizer.next_column()
        assert tokenizer.next_record() is False

    def test_next_record_before_end(self):
        tokenizer = self._tokenizer(["a,b", "c,d"])
        tokenizer.next_record()
        tokenizer.next_column()
        with pytest.raises(RuntimeError):
            tokenizer.next_record()

    def test_was_quoted_column(self):
        tokenizer = self._tokenizer(['"a",b'])
        tokenizer.next_record()
        tokenizer.next_column()
        assert tokenizer.was_quoted_column is True
        tokenizer.next_column()
        assert tokenizer.was_quoted_column is False

    def test_invalid_value_raised(self):
        tokenizer = self._tokenizer(['"a"b'])
        tokenizer.next_record()
        with pytest.raises(InvalidValueError):
            tokenizer.next_column()

    def test_size_limit_is_invalid_value(self):
        assert issubclass(QuotedSizeLimitExceededError, InvalidValueError)

    def test_line_number(self):
        tokenizer = self._tokenizer(["a", "", "b"])
        tokenizer.next_record()
        tokenizer.next_column()
        tokenizer.next_record(skip_empty_lines=True)
        assert tokenizer.line_number == 3
