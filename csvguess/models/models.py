"""
Core data models for the guess.

SampleLine       — one decoded sample line and its ordinal.
DialectCandidate — delimiter / quote / escape / null-string / trim.
Field, Record    — tokenizer output.
SkipPlan         — leading lines skipped, comment marker, filtered sample.
ColumnType       — string | boolean | long | double | timestamp{format}.
SchemaColumn     — (name, ColumnType) pair.
ParserOverrides  — explicit overrides read from the input configuration.
GuessResult      — the final, immutable guess; renders the config fragment.

Every model is frozen.  Stages that refine a dialect build a new instance
with ``dataclasses.replace`` instead of mutating the committed one.
"""

from __future__ import annotations

from dataclasses import dataclass, field
from typing import Any, Literal, NamedTuple


ColumnTypeName = Literal["string", "boolean", "long", "double", "timestamp"]


class _Unset:
    """Marks a key that is absent from the input configuration."""

    def __repr__(self) -> str:
        return "UNSET"


UNSET: Any = _Unset()


class SampleLine(NamedTuple):
    """A decoded sample line (terminator stripped) and its 1-based ordinal."""

    number: int
    text: str


def to_sample_lines(lines) -> list[SampleLine]:
    """Accept ``SampleLine`` objects or plain strings; number strings from 1."""
    result: list[SampleLine] = []
    for i, line in enumerate(lines, start=1):
        if isinstance(line, SampleLine):
            result.append(line)
        else:
            result.append(SampleLine(i, str(line)))
    return result


@dataclass(slots=True, frozen=True)
class DialectCandidate:
    """
    Syntactic parameters needed to tokenize a sample.

    Attributes:
        delimiter:          Field separator (required).
        quote:              Quote character, or ``None`` when quoting is disabled.
        escape:             Escape character, or ``None`` when escaping is disabled.
        null_string:        Literal that represents an absent value, if any.
        trim_if_not_quoted: Strip spaces around unquoted values.
    """

    delimiter: str
    quote: str | None = '"'
    escape: str | None = None
    null_string: str | None = None
    trim_if_not_quoted: bool = False


@dataclass(slots=True, frozen=True)
class Field:
    """One tokenized value.  ``value`` is ``None`` for a null-string match."""

    value: str | None
    quoted: bool = False


@dataclass(slots=True, frozen=True)
class Record:
    """An ordered sequence of fields (one logical CSV record)."""

    fields: tuple[Field, ...] = ()

    def __len__(self) -> int:
        return len(self.fields)

    def values(self) -> list[str | None]:
        return [f.value for f in self.fields]


@dataclass(slots=True, frozen=True)
class TokenizeWarning:
    """A recovered invalid-value condition: the dropped line and the reason."""

    line_number: int
    line: str
    message: str


@dataclass(slots=True, frozen=True)
class TokenizeResult:
    """Records and recovered warnings of one tokenizer pass."""

    records: tuple[Record, ...] = ()
    warnings: tuple[TokenizeWarning, ...] = ()

    def rows(self) -> list[list[str | None]]:
        """Plain value rows, as fed to the type inferrer."""
        return [r.values() for r in self.records]


@dataclass(slots=True, frozen=True)
class SkipPlan:
    """
    How the raw sample was reduced before schema inference.

    Attributes:
        skip_header_lines:   Ragged leading lines dropped (header row excluded).
        comment_line_marker: Comment prefix, if one was found or configured.
        lines:               Sample lines left after skip and comment filtering.
    """

    skip_header_lines: int = 0
    comment_line_marker: str | None = None
    lines: tuple[SampleLine, ...] = ()


@dataclass(slots=True, frozen=True)
class ColumnType:
    """
    Tagged column type.  ``format`` is only set for timestamps.

    Use the class-level constants for the simple types and
    ``ColumnType.timestamp(fmt)`` for timestamps.
    """

    name: ColumnTypeName
    format: str | None = None

    @classmethod
    def timestamp(cls, fmt: str) -> "ColumnType":
        return cls("timestamp", fmt)

    def is_textual(self) -> bool:
        """True for the types a header row consists of (string or boolean)."""
        return self.name in ("string", "boolean")

    def __str__(self) -> str:
        return self.name


ColumnType.STRING = ColumnType("string")    # type: ignore[attr-defined]
ColumnType.BOOLEAN = ColumnType("boolean")  # type: ignore[attr-defined]
ColumnType.LONG = ColumnType("long")        # type: ignore[attr-defined]
ColumnType.DOUBLE = ColumnType("double")    # type: ignore[attr-defined]


@dataclass(slots=True, frozen=True)
class SchemaColumn:
    """A named, typed column of the guessed schema."""

    name: str
    type: ColumnType

    def to_dict(self) -> dict[str, str]:
        column = {"name": self.name, "type": self.type.name}
        if self.type.format is not None:
            column["format"] = self.type.format
        return column


@dataclass(slots=True, frozen=True)
class ParserOverrides:
    """
    Explicit overrides read from the ``parser`` section of the input config.

    Every attribute is ``UNSET`` when the key is absent; otherwise it holds the
    validated value, which may itself be ``None`` (e.g. ``quote: null``
    disables quoting).  ``base`` is the raw parser section, merged into the
    emitted fragment.
    """

    type: str = "csv"
    delimiter: Any = UNSET
    quote: Any = UNSET
    escape: Any = UNSET
    null_string: Any = UNSET
    comment_line_marker: Any = UNSET
    trim_if_not_quoted: Any = UNSET
    allow_extra_columns: Any = UNSET
    allow_optional_columns: Any = UNSET
    base: dict = field(default_factory=dict)

    def has(self, name: str) -> bool:
        return getattr(self, name) is not UNSET


@dataclass(slots=True, frozen=True)
class GuessResult:
    """
    The final guess.  Produced once by the orchestrator, never mutated.

    Attributes:
        dialect:                The resolved dialect (trim included).
        skip_plan:              Body skip count, comment marker, filtered sample.
        header:                 True if the first filtered record holds column names.
        schema:                 Ordered named column types.
        escape_resolved:        False when quoting is disabled and no escape was
                                configured; the escape key is then omitted.
        allow_extra_columns:    Emitted as-is (default ``False``).
        allow_optional_columns: Emitted as-is (default ``False``).
        warnings:               Invalid-value recoveries from the final tokenize.
        base:                   Raw parser config the fragment is merged onto.
    """

    dialect: DialectCandidate
    skip_plan: SkipPlan
    header: bool
    schema: tuple[SchemaColumn, ...]
    escape_resolved: bool = True
    allow_extra_columns: bool = False
    allow_optional_columns: bool = False
    warnings: tuple[TokenizeWarning, ...] = ()
    base: dict = field(default_factory=dict)

    @property
    def skip_header_lines(self) -> int:
        """Lines a parser must skip: the ragged prefix plus the header row."""
        return self.skip_plan.skip_header_lines + (1 if self.header else 0)

    @property
    def column_types(self) -> list[ColumnType]:
        return [c.type for c in self.schema]

    def to_config_diff(self) -> dict[str, Any]:
        """
        Render the mergeable configuration fragment ``{"parser": {...}}``.

        ``null_string`` and ``comment_line_marker`` are only present when set.
        """
        parser: dict[str, Any] = dict(self.base)
        parser["type"] = "csv"
        parser["delimiter"] = self.dialect.delimiter
        parser["quote"] = self.dialect.quote
        if self.escape_resolved:
            parser["escape"] = self.dialect.escape
        if self.dialect.null_string is not None:
            parser["null_string"] = self.dialect.null_string
        parser["skip_header_lines"] = self.skip_header_lines
        if self.skip_plan.comment_line_marker is not None:
            parser["comment_line_marker"] = self.skip_plan.comment_line_marker
        parser["allow_extra_columns"] = self.allow_extra_columns
        parser["allow_optional_columns"] = self.allow_optional_columns
        parser["trim_if_not_quoted"] = self.dialect.trim_if_not_quoted
        parser["columns"] = [c.to_dict() for c in self.schema]
        return {"parser": parser}
