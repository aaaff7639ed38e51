"""
Guess configuration.

All tuneable constants and candidate sets live here. Import from this module
everywhere; never hardcode candidate characters, score bonuses, or
thresholds inside a guesser.

Usage:
    from csvguess.configs.config import GuessConfig
    cfg = GuessConfig()                                  # defaults
    cfg = GuessConfig(delimiter_candidates=(",", ";"))   # alternate candidates

Environment overrides (optional) can be loaded via .env / os.environ before
constructing the config object; this module does not load .env itself.
"""

from __future__ import annotations

import os
from dataclasses import dataclass, field


# Defaults for the candidate sets, in priority order (first wins ties).
DELIMITER_CANDIDATES: tuple[str, ...] = (",", "\t", "|", ";")
QUOTE_CANDIDATES: tuple[str, ...] = ('"', "'")
ESCAPE_CANDIDATES: tuple[str | None, ...] = ("\\", None)
"""``None`` stands for the active quote character (doubled-quote convention)."""
NULL_STRING_CANDIDATES: tuple[str, ...] = ("null", "NULL", "#N/A", "\\N")
COMMENT_LINE_MARKER_CANDIDATES: tuple[str, ...] = ("#", "//")

DEFAULT_QUOTE: str = '"'
"""RFC 4180 quote; used when no quote candidate scores high enough."""


def _env_float(key: str, default: str):
    return lambda: float(os.environ.get(key, default))


def _env_int(key: str, default: str):
    return lambda: int(os.environ.get(key, default))


@dataclass(slots=True, frozen=True)
class GuessConfig:
    """
    Runtime configuration for the dialect and schema guess.

    Attributes:
        delimiter_candidates: Field separators tried by the delimiter guesser.
        quote_candidates: Quote characters tried by the quote guesser.
        escape_candidates: Escape characters tried by the escape guesser.
            ``None`` means "the active quote character".
        null_string_candidates: Literal strings tried as the null representation.
        comment_line_marker_candidates: Line prefixes tried as comment markers.
        default_quote: Quote assumed when no candidate is convincing, and the
            character checked by the force-no-quote test.
        delimiter_min_weight: A delimiter weight must exceed this to be chosen.
        delimiter_stddev_floor: Standard deviations below ``delimiter_stddev_epsilon``
            are replaced by this value.
        delimiter_stddev_epsilon: See ``delimiter_stddev_floor``.
        quote_clean_field_bonus: Score added per cleanly quoted field.
        quote_delimited_field_bonus: Score added per quoted field with no
            delimiter inside its quotes.
        quote_min_score: A quote candidate's average score must reach this.
        max_skip_lines: Maximum number of ragged leading lines to skip.
        no_skip_detect_lines: Number of following records that must fit under
            the column count of a candidate first body row.
        header_length_variance_max: Max value-length variance of body rows for
            the string-header test.
        header_length_deviation_min: Min relative deviation of the first row's
            value length for the string-header test.
        max_quoted_size: Characters allowed in a single quoted value.
        max_sample_lines: Lines read by the host-side sample reader.
        max_sample_chars: Characters read by the host-side sample reader.
    """

    delimiter_candidates: tuple[str, ...] = DELIMITER_CANDIDATES
    quote_candidates: tuple[str, ...] = QUOTE_CANDIDATES
    escape_candidates: tuple[str | None, ...] = ESCAPE_CANDIDATES
    null_string_candidates: tuple[str, ...] = NULL_STRING_CANDIDATES
    comment_line_marker_candidates: tuple[str, ...] = COMMENT_LINE_MARKER_CANDIDATES
    default_quote: str = DEFAULT_QUOTE

    # Empirically tuned; kept tunable.
    delimiter_min_weight: float = field(
        default_factory=_env_float("CSVGUESS_DELIMITER_MIN_WEIGHT", "1.0")
    )
    delimiter_stddev_floor: float = 1e-9
    delimiter_stddev_epsilon: float = 1e-11
    quote_clean_field_bonus: int = field(
        default_factory=_env_int("CSVGUESS_QUOTE_CLEAN_FIELD_BONUS", "20")
    )
    quote_delimited_field_bonus: int = field(
        default_factory=_env_int("CSVGUESS_QUOTE_DELIMITED_FIELD_BONUS", "40")
    )
    quote_min_score: float = field(
        default_factory=_env_float("CSVGUESS_QUOTE_MIN_SCORE", "10.0")
    )

    max_skip_lines: int = field(
        default_factory=_env_int("CSVGUESS_MAX_SKIP_LINES", "10")
    )
    no_skip_detect_lines: int = field(
        default_factory=_env_int("CSVGUESS_NO_SKIP_DETECT_LINES", "10")
    )
    header_length_variance_max: float = 0.2
    header_length_deviation_min: float = 0.7

    max_quoted_size: int = field(
        default_factory=_env_int("CSVGUESS_MAX_QUOTED_SIZE", "131072")
    )
    max_sample_lines: int = field(
        default_factory=_env_int("CSVGUESS_MAX_SAMPLE_LINES", "1000")
    )
    max_sample_chars: int = field(
        default_factory=_env_int("CSVGUESS_MAX_SAMPLE_CHARS", "32768")
    )

    def escape_candidates_for(self, quote: str) -> list[str]:
        """
        Return the concrete escape candidates for the active ``quote``.

        ``None`` entries are replaced by ``quote``; duplicates keep their
        first position.
        """
        resolved: list[str] = []
        for candidate in self.escape_candidates:
            concrete = quote if candidate is None else candidate
            if concrete not in resolved:
                resolved.append(concrete)
        return resolved
