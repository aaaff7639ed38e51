"""
Configuration and override validation: test_config_validation.py

GuessConfig:
  - Defaults match the documented candidate sets and thresholds
  - CSVGUESS_* environment variables override numeric tunables
  - Frozen: fields cannot be reassigned

parser_type:
  - Reads only parser.type; other keys are not validated

parse_overrides:
  - Absent keys are UNSET; present keys (even null) are used as-is
  - Empty escape means "no escape"
  - Malformed values raise ConfigError naming the key

Exceptions:
  - __str__ carries key / source / line context
"""

from __future__ import annotations

import sys, pathlib
_root = str(pathlib.Path(__file__).parent.parent)
if _root not in sys.path:
    sys.path.insert(0, _root)

import dataclasses

import pytest

from csvguess.configs.config import GuessConfig
from csvguess.configs.exceptions import (
    ConfigError,
    GuessError,
    SampleError,
    TokenizeError,
    TooFewColumnsError,
)
from csvguess.models.models import UNSET
from csvguess.utils.validation import parse_overrides, parser_type


# ============================================================================
# GuessConfig
# ============================================================================

class TestGuessConfig:
    def test_defaults(self):
        cfg = GuessConfig()
        assert cfg.delimiter_candidates == (",", "\t", "|", ";")
        assert cfg.quote_candidates == ('"', "'")
        assert cfg.null_string_candidates == ("null", "NULL", "#N/A", "\\N")
        assert cfg.comment_line_marker_candidates == ("#", "//")
        assert cfg.delimiter_min_weight == 1.0
        assert cfg.quote_min_score == 10.0
        assert cfg.max_skip_lines == 10

    def test_env_override(self, monkeypatch):
        monkeypatch.setenv("CSVGUESS_QUOTE_MIN_SCORE", "2.5")
        monkeypatch.setenv("CSVGUESS_MAX_SAMPLE_LINES", "50")
        cfg = GuessConfig()
        assert cfg.quote_min_score == 2.5
        assert cfg.max_sample_lines == 50

    def test_frozen(self):
        cfg = GuessConfig()
        with pytest.raises(dataclasses.FrozenInstanceError):
            cfg.max_skip_lines = 3

    def test_replace(self):
        cfg = dataclasses.replace(GuessConfig(), max_sample_chars=10)
        assert cfg.max_sample_chars == 10


# ============================================================================
# parse_overrides
# ============================================================================

class TestParserType:
    def test_default_csv(self):
        assert parser_type({}) == "csv"
        assert parser_type(None) == "csv"

    def test_other_type_skips_csv_keys(self):
        assert parser_type({"parser": {"type": "json", "delimiter": 9}}) == "json"

    def test_non_string_type(self):
        with pytest.raises(ConfigError) as exc:
            parser_type({"parser": {"type": 1}})
        assert exc.value.key == "parser.type"


class TestParseOverrides:
    def test_absent_keys_unset(self):
        overrides = parse_overrides({})
        assert overrides.type == "csv"
        assert overrides.delimiter is UNSET
        assert not overrides.has("quote")

    def test_none_config(self):
        assert parse_overrides(None).type == "csv"

    def test_null_quote_is_present(self):
        overrides = parse_overrides({"parser": {"quote": None}})
        assert overrides.has("quote")
        assert overrides.quote is None

    def test_empty_escape_means_none(self):
        assert parse_overrides({"parser": {"escape": ""}}).escape is None

    def test_values_kept(self):
        overrides = parse_overrides({"parser": {
            "delimiter": ";",
            "null_string": "",
            "trim_if_not_quoted": True,
            "charset": "UTF-8",
        }})
        assert overrides.delimiter == ";"
        assert overrides.null_string == ""
        assert overrides.trim_if_not_quoted is True
        assert overrides.base["charset"] == "UTF-8"

    @pytest.mark.parametrize("parser, key", [
        ("csv", "parser"),
        ({"type": 1}, "parser.type"),
        ({"delimiter": 1}, "parser.delimiter"),
        ({"delimiter": ""}, "parser.delimiter"),
        ({"quote": "ab"}, "parser.quote"),
        ({"escape": 5}, "parser.escape"),
        ({"null_string": 0}, "parser.null_string"),
        ({"comment_line_marker": ""}, "parser.comment_line_marker"),
        ({"trim_if_not_quoted": "yes"}, "parser.trim_if_not_quoted"),
        ({"allow_extra_columns": 1}, "parser.allow_extra_columns"),
    ])
    def test_malformed(self, parser, key):
        with pytest.raises(ConfigError) as exc:
            parse_overrides({"parser": parser})
        assert exc.value.key == key


# ============================================================================
# Exceptions
# ============================================================================

class TestExceptions:
    def test_hierarchy(self):
        assert issubclass(ConfigError, GuessError)
        assert issubclass(SampleError, GuessError)
        assert issubclass(TooFewColumnsError, TokenizeError)

    def test_str_context(self):
        assert str(ConfigError("bad", key="parser.quote")) == "bad | key=parser.quote"
        assert str(SampleError("gone", source_path="a.csv")) == "gone | source=a.csv"
        assert str(TokenizeError("oops", line_number=3)) == "oops | line=3"
        assert str(TokenizeError("oops")) == "oops"
