"""
Guess orchestrator.

Sequences the guessers and the tokenizer and assembles the final
``GuessResult``.  This is the single callable hosts invoke.

Stage order (each of 1-4, 6 and 8 is skipped when the input configuration
already carries an explicit override):
  1. Delimiter          (raw lines)
  2. Quote              (raw lines; an explicit ``""`` means ``"``)
  3. Escape             (raw lines; only while quoting is enabled)
  4. Null string        (raw lines; may stay unset)
  5. Ragged prefix      tokenize with empty lines kept → drop leading lines
  6. Comment marker     drop comment lines (single pass)
  7. Final tokenize     empty lines skipped; no records → no guess
  8. Trim auto-tune     re-tokenize trimmed; keep trim only if types change
  9. Header decision    first-record types vs body types, then length test
 10. Schema            no types → no guess
 11. Column names      header values, or ``c0, c1, …``
 12. Emit              ``GuessResult`` / ``{"parser": {...}}``

Failure policy:
  - A parser type other than ``csv`` returns ``{}`` before any other
    override is read.
  - ``ConfigError`` (malformed override) is raised before stage 1.
  - An unusable sample (no records, no columns) is not an error:
    ``guess_result`` returns ``None`` and ``guess`` returns ``{}`` so the
    caller can fall back to asking for explicit configuration.
  - Invalid tokens are dropped line by line inside the tokenizer and
    surface as ``GuessResult.warnings``.
"""

from __future__ import annotations

import dataclasses
import logging
from typing import Any, Iterable, Mapping

from csvguess.configs.config import GuessConfig
from csvguess.discovery.comment_marker import drop_comment_lines, guess_comment_line_marker
from csvguess.discovery.delimiter import guess_delimiter
from csvguess.discovery.escape import guess_escape
from csvguess.discovery.header_line import is_header_line
from csvguess.discovery.header_skip import guess_skip_header_lines
from csvguess.discovery.null_string import guess_null_string
from csvguess.discovery.quote import guess_quote
from csvguess.models.models import (
    DialectCandidate,
    GuessResult,
    ParserOverrides,
    SampleLine,
    SchemaColumn,
    SkipPlan,
    to_sample_lines,
)
from csvguess.transformers.tokenizer import split_lines
from csvguess.transformers.typing_infer import types_from_records
from csvguess.utils.validation import parse_overrides, parser_type

logger = logging.getLogger(__name__)


# ---------------------------------------------------------------------------
# Public entry points
# ---------------------------------------------------------------------------

def guess(
    config: Mapping[str, Any] | None,
    sample: Iterable[SampleLine | str],
    guess_config: GuessConfig | None = None,
) -> dict[str, Any]:
    """
    Guess the parser configuration fragment for ``sample``.

    Args:
        config:       Input configuration; ``config["parser"]`` holds overrides.
        sample:       Decoded sample lines (``SampleLine`` or plain strings).
        guess_config: Candidate sets and thresholds; defaults to ``GuessConfig()``.

    Returns:
        ``{"parser": {...}}``, or ``{}`` when nothing could be guessed or the
        parser type is not ``csv``.

    Raises:
        ConfigError: If an explicit override is malformed.
    """
    result = guess_result(config, sample, guess_config)
    if result is None:
        return {}
    return result.to_config_diff()


def guess_result(
    config: Mapping[str, Any] | None,
    sample: Iterable[SampleLine | str],
    guess_config: GuessConfig | None = None,
) -> GuessResult | None:
    """
    Run every stage and return the structured result.

    Returns:
        ``GuessResult``, or ``None`` if the parser type is not ``csv`` or the
        sample yields no records or no columns.

    Raises:
        ConfigError: If an explicit override is malformed.
    """
    guess_config = guess_config or GuessConfig()
    consumer = parser_type(config)
    if consumer != "csv":
        logger.debug("Parser type is %r, not csv; nothing to guess.", consumer)
        return None

    overrides = parse_overrides(config)

    lines = to_sample_lines(sample)
    dialect, escape_resolved = _resolve_dialect([l.text for l in lines], overrides, guess_config)

    # ── Phase 5-6: skip ragged prefix and comment lines ────────────────────
    skip_plan = _plan_skip(lines, dialect, overrides, guess_config)

    # ── Phase 7: final tokenize ────────────────────────────────────────────
    final = split_lines(skip_plan.lines, dialect, skip_empty_lines=True, config=guess_config)
    if not final.records:
        logger.info("Sample yields no records; no guess.")
        return None

    rows = final.rows()

    # ── Phase 8-9: trim auto-tune and header decision ──────────────────────
    if len(rows) == 1:
        header = False
        column_types = types_from_records(rows)
        if not overrides.has("trim_if_not_quoted"):
            dialect, column_types = _tune_trim(skip_plan, dialect, column_types, 0, guess_config)
    else:
        first_types = types_from_records(rows[:1])
        other_types = types_from_records(rows[1:])
        if not overrides.has("trim_if_not_quoted"):
            dialect, other_types = _tune_trim(skip_plan, dialect, other_types, 1, guess_config)
        header = is_header_line(rows, first_types, other_types, guess_config)
        column_types = other_types

    # ── Phase 10-11: schema ────────────────────────────────────────────────
    if not column_types:
        logger.info("Sample yields no columns; no guess.")
        return None

    if header:
        names = [v.strip() if v is not None else None for v in rows[0]]
    else:
        names = [f"c{i}" for i in range(len(column_types) + 1)]
    schema = tuple(
        SchemaColumn(name, column_type)
        for name, column_type in zip(names, column_types)
        if name is not None
    )

    result = GuessResult(
        dialect=dialect,
        skip_plan=skip_plan,
        header=header,
        schema=schema,
        escape_resolved=escape_resolved,
        allow_extra_columns=_override_or(overrides, "allow_extra_columns", False),
        allow_optional_columns=_override_or(overrides, "allow_optional_columns", False),
        warnings=final.warnings,
        base=dict(overrides.base),
    )
    logger.info(
        "Guessed delimiter=%r quote=%r escape=%r header=%s columns=%d skip_header_lines=%d",
        dialect.delimiter, dialect.quote, dialect.escape,
        header, len(schema), result.skip_header_lines,
    )
    return result


# ---------------------------------------------------------------------------
# Stages
# ---------------------------------------------------------------------------

def _override_or(overrides: ParserOverrides, name: str, default: Any) -> Any:
    return getattr(overrides, name) if overrides.has(name) else default


def _resolve_dialect(
    texts: list[str],
    overrides: ParserOverrides,
    guess_config: GuessConfig,
) -> tuple[DialectCandidate, bool]:
    """
    Phases 1-4 on the raw line texts.

    Returns:
        The dialect (trim from the override, else off) and whether the escape
        was resolved (False only when quoting is disabled without an explicit
        escape).
    """
    if overrides.has("delimiter"):
        delimiter = overrides.delimiter
    else:
        delimiter = guess_delimiter(texts, guess_config)

    if overrides.has("quote"):
        quote = overrides.quote
    else:
        quote = guess_quote(texts, delimiter, guess_config)
    if quote == "":
        # legacy syntax for the default quote
        quote = '"'

    escape_resolved = True
    if overrides.has("escape"):
        escape = overrides.escape
    elif quote is not None:
        escape = guess_escape(texts, delimiter, quote, guess_config)
    else:
        # escaping means nothing without quoting
        escape = None
        escape_resolved = False

    if overrides.has("null_string"):
        null_string = overrides.null_string
    else:
        null_string = guess_null_string(texts, delimiter, guess_config)

    dialect = DialectCandidate(
        delimiter=delimiter,
        quote=quote,
        escape=escape,
        null_string=null_string,
        trim_if_not_quoted=_override_or(overrides, "trim_if_not_quoted", False),
    )
    logger.debug("Dialect resolved: %s", dialect)
    return dialect, escape_resolved


def _plan_skip(
    lines: list[SampleLine],
    dialect: DialectCandidate,
    overrides: ParserOverrides,
    guess_config: GuessConfig,
) -> SkipPlan:
    """
    Phases 5-6.

    The ragged prefix is measured on records tokenized with empty lines kept,
    since a parser skipping header lines does not skip empty lines either.
    It must be dropped before the comment marker guess, which looks at the
    remaining lines only.
    """
    first_pass = split_lines(lines, dialect, skip_empty_lines=False, config=guess_config)
    skip = guess_skip_header_lines([len(r) for r in first_pass.records], guess_config)
    remaining = lines[skip:]

    if overrides.has("comment_line_marker"):
        marker = overrides.comment_line_marker
        if marker is not None:
            remaining = drop_comment_lines(remaining, marker)
    else:
        marker, remaining = guess_comment_line_marker(
            remaining, dialect.delimiter, dialect.quote, dialect.null_string, guess_config,
        )

    return SkipPlan(skip_header_lines=skip, comment_line_marker=marker, lines=tuple(remaining))


def _tune_trim(
    skip_plan: SkipPlan,
    dialect: DialectCandidate,
    types: list,
    body_start: int,
    guess_config: GuessConfig,
) -> tuple[DialectCandidate, list]:
    """
    Phase 8: keep ``trim_if_not_quoted`` only if it changes the body types.

    ``body_start`` is 1 when the first record may be a header, else 0.
    """
    trimmed_dialect = dataclasses.replace(dialect, trim_if_not_quoted=True)
    trimmed = split_lines(skip_plan.lines, trimmed_dialect, skip_empty_lines=True, config=guess_config)
    trimmed_types = types_from_records(trimmed.rows()[body_start:])
    if trimmed_types != types:
        logger.debug("Trimming changes column types; trim_if_not_quoted enabled.")
        return trimmed_dialect, trimmed_types
    return dataclasses.replace(dialect, trim_if_not_quoted=False), types
