"""
Dialect-aware tokenizer.

Turns sample lines into records under a fully resolved ``DialectCandidate``.
It is a character-scanning state machine with a pull interface
(``next_record`` / ``next_column``) and a driver, ``split_lines``, that the
orchestrator calls for every pass (header skip, final, trim re-check).

Column states::

    BEGIN ─space (trim)─▶ FIRST_TRIM ─other─▶ VALUE ⇄ LAST_TRIM_OR_VALUE
      │                       │
      └──────quote────────────┴──▶ QUOTED_VALUE ─closing quote─▶ AFTER_QUOTED_VALUE

Quoted values may continue on the following physical lines; the line break
is kept as ``\\n``.  Inside quotes a doubled quote is always a literal quote,
and ``<escape><quote>`` / ``<escape><escape>`` give the literal character.

Two conditions are recovered by ``split_lines`` and never abort a pass:

  - ``TooFewColumnsError``: the record has ended.  Raised after the last
    column of every record, and also when the input runs out inside an
    open quote; either way the record is kept with the fields read so far.
  - ``InvalidValueError``: malformed token (e.g. ``"a"b``).  The current
    physical line is dropped with a warning; lines already consumed by a
    multi-line quoted value are read again.
"""

from __future__ import annotations

import logging
from collections import deque
from enum import Enum
from typing import Iterable

from csvguess.configs.config import GuessConfig
from csvguess.configs.exceptions import (
    InvalidValueError,
    QuotedSizeLimitExceededError,
    TooFewColumnsError,
)
from csvguess.models.models import (
    DialectCandidate,
    Field,
    Record,
    SampleLine,
    TokenizeResult,
    TokenizeWarning,
)

logger = logging.getLogger(__name__)

_END_OF_LINE = None
_SPACES = (" ", "\t")


class _ColumnState(Enum):
    BEGIN = "begin"
    FIRST_TRIM = "first_trim"
    VALUE = "value"
    LAST_TRIM_OR_VALUE = "last_trim_or_value"
    QUOTED_VALUE = "quoted_value"
    AFTER_QUOTED_VALUE = "after_quoted_value"


class _RecordState(Enum):
    NOT_END = "not_end"
    END = "end"


class DialectTokenizer:
    """
    Pull tokenizer over a bounded list of sample lines.

    Args:
        lines:           Sample lines, in order.
        dialect:         Resolved dialect.  ``null_string`` is not applied here;
                         ``split_lines`` does that using ``was_quoted_column``.
        max_quoted_size: Characters allowed in one quoted value.

    Usage::

        tokenizer = DialectTokenizer(lines, dialect)
        while tokenizer.next_record(skip_empty_lines=True):
            try:
                while True:
                    value = tokenizer.next_column()
            except TooFewColumnsError:
                pass
    """

    def __init__(
        self,
        lines: Iterable[SampleLine],
        dialect: DialectCandidate,
        max_quoted_size: int = 131072,
    ) -> None:
        self._input: deque[SampleLine] = deque(lines)
        self._unread: deque[SampleLine] = deque()
        self._quoted_value_lines: list[SampleLine] = []

        self._delimiter = dialect.delimiter
        self._quote = dialect.quote or None
        self._escape = dialect.escape or None
        self._trim = dialect.trim_if_not_quoted
        self._max_quoted_size = max_quoted_size

        self._current: SampleLine | None = None
        self._line = ""
        self._pos = 0
        self._line_number = 0
        self._record_state = _RecordState.END
        self._was_quoted = False

    # ── state accessors ──────────────────────────────────────────────────

    @property
    def line_number(self) -> int:
        """Ordinal of the physical line being read (0 before the first)."""
        return self._line_number

    @property
    def was_quoted_column(self) -> bool:
        """True if the value last returned by ``next_column`` was quoted."""
        return self._was_quoted

    # ── line handling ────────────────────────────────────────────────────

    def _next_line(self, skip_empty_lines: bool) -> bool:
        while True:
            if self._unread:
                current = self._unread.popleft()
            elif self._input:
                current = self._input.popleft()
            else:
                self._current = None
                self._line = ""
                self._pos = 0
                return False

            self._current = current
            self._line = current.text
            self._pos = 0
            self._line_number = current.number
            if not (skip_empty_lines and not self._line):
                return True

    def next_record(self, skip_empty_lines: bool = True) -> bool:
        """
        Advance to the next record.

        Returns:
            False at the end of input.

        Raises:
            RuntimeError: If the current record still has unread columns.
        """
        if self._record_state is not _RecordState.END:
            raise RuntimeError("next_record() called before the current record ended.")
        if not self._next_line(skip_empty_lines):
            return False
        self._record_state = _RecordState.NOT_END
        return True

    def skip_current_line(self) -> SampleLine | None:
        """
        Drop the current physical line and end the record.

        If a multi-line quoted value was being read, only its first line is
        dropped; the other lines it consumed are queued to be read again.

        Returns:
            The dropped line.
        """
        if not self._quoted_value_lines:
            skipped = self._current
        else:
            skipped = self._quoted_value_lines[0]
            reread = self._quoted_value_lines[1:]
            if self._current is not None:
                reread.append(self._current)
            self._unread.extendleft(reversed(reread))
            self._quoted_value_lines = []
        self._record_state = _RecordState.END
        return skipped

    # ── character helpers ────────────────────────────────────────────────

    def _next_char(self) -> str | None:
        if self._pos >= len(self._line):
            return _END_OF_LINE
        c = self._line[self._pos]
        self._pos += 1
        return c

    def _peek_next_char(self) -> str | None:
        if self._pos >= len(self._line):
            return _END_OF_LINE
        return self._line[self._pos]

    def _consume_delimiter(self, c: str | None) -> bool:
        """True if ``c`` starts the delimiter; the rest of it is consumed."""
        if c is _END_OF_LINE or c != self._delimiter[0]:
            return False
        rest = self._delimiter[1:]
        if rest:
            if not self._line.startswith(rest, self._pos):
                return False
            self._pos += len(rest)
        return True

    def _is_quote(self, c: str | None) -> bool:
        return self._quote is not None and c == self._quote

    def _is_escape(self, c: str | None) -> bool:
        return self._escape is not None and c == self._escape

    @staticmethod
    def _is_space(c: str | None) -> bool:
        return c in _SPACES

    def _end_record(self) -> None:
        self._record_state = _RecordState.END

    # ── column scanner ───────────────────────────────────────────────────

    def next_column(self) -> str:
        """
        Return the next value of the current record.

        Raises:
            TooFewColumnsError: The record has no more columns, or the input
                ended inside an open quote.
            InvalidValueError: Extra characters after a closing quote.
            QuotedSizeLimitExceededError: A quoted value is too long.
        """
        if self._record_state is _RecordState.END:
            raise TooFewColumnsError("Too few columns", line_number=self._line_number)

        self._was_quoted = False
        self._quoted_value_lines = []

        start = self._pos
        end = 0
        quoted_parts: list[str] = []
        quoted_size = 0
        state = _ColumnState.BEGIN
        delimiter_len = len(self._delimiter)

        while True:
            c = self._next_char()

            if state is _ColumnState.BEGIN:
                if self._consume_delimiter(c):
                    return ""
                if c is _END_OF_LINE:
                    self._end_record()
                    return ""
                if self._trim and self._is_space(c):
                    state = _ColumnState.FIRST_TRIM
                elif self._is_quote(c):
                    start = self._pos
                    self._was_quoted = True
                    state = _ColumnState.QUOTED_VALUE
                else:
                    state = _ColumnState.VALUE

            elif state is _ColumnState.FIRST_TRIM:
                if self._consume_delimiter(c):
                    return ""
                if c is _END_OF_LINE:
                    self._end_record()
                    return ""
                if self._is_quote(c):
                    # leading spaces before an opening quote are tolerated
                    start = self._pos
                    self._was_quoted = True
                    state = _ColumnState.QUOTED_VALUE
                elif not self._is_space(c):
                    start = self._pos - 1
                    state = _ColumnState.VALUE

            elif state is _ColumnState.VALUE:
                if self._consume_delimiter(c):
                    return self._line[start:self._pos - delimiter_len]
                if c is _END_OF_LINE:
                    self._end_record()
                    return self._line[start:self._pos]
                if self._trim and self._is_space(c):
                    end = self._pos - 1
                    state = _ColumnState.LAST_TRIM_OR_VALUE

            elif state is _ColumnState.LAST_TRIM_OR_VALUE:
                if self._consume_delimiter(c):
                    return self._line[start:end]
                if c is _END_OF_LINE:
                    self._end_record()
                    return self._line[start:end]
                if not self._is_space(c):
                    state = _ColumnState.VALUE

            elif state is _ColumnState.QUOTED_VALUE:
                if c is _END_OF_LINE:
                    part = self._line[start:self._pos]
                    quoted_parts.append(part)
                    quoted_parts.append("\n")
                    quoted_size += len(part) + 1
                    self._quoted_value_lines.append(self._current)
                    last_line = self._line_number
                    if not self._next_line(False):
                        self._end_record()
                        raise TooFewColumnsError(
                            "Unexpected end of input inside a quoted value",
                            line_number=last_line,
                        )
                    start = 0
                elif self._is_quote(c):
                    if self._is_quote(self._peek_next_char()):
                        # doubled quote
                        part = self._line[start:self._pos]
                        quoted_parts.append(part)
                        quoted_size += len(part)
                        self._pos += 1
                        start = self._pos
                    else:
                        part = self._line[start:self._pos - 1]
                        quoted_parts.append(part)
                        quoted_size += len(part)
                        state = _ColumnState.AFTER_QUOTED_VALUE
                elif self._is_escape(c):
                    following = self._peek_next_char()
                    if self._is_quote(following) or self._is_escape(following):
                        part = self._line[start:self._pos - 1]
                        quoted_parts.append(part)
                        quoted_parts.append(following)
                        quoted_size += len(part) + 1
                        self._pos += 1
                        start = self._pos
                elif (self._pos - start) + quoted_size > self._max_quoted_size:
                    raise QuotedSizeLimitExceededError(
                        f"The size of the quoted value exceeds the limit size ({self._max_quoted_size})",
                        line_number=self._line_number,
                    )

            elif state is _ColumnState.AFTER_QUOTED_VALUE:
                if self._consume_delimiter(c):
                    return "".join(quoted_parts)
                if c is _END_OF_LINE:
                    self._end_record()
                    return "".join(quoted_parts)
                if not self._is_space(c):
                    raise InvalidValueError(
                        f"Unexpected extra character {c!r} after a value quoted by {self._quote!r}",
                        line_number=self._line_number,
                    )


def split_lines(
    lines: Iterable[SampleLine],
    dialect: DialectCandidate,
    skip_empty_lines: bool,
    config: GuessConfig | None = None,
) -> TokenizeResult:
    """
    Tokenize ``lines`` into records, recovering from both tokenizer conditions.

    Args:
        lines:            Sample lines (already skip/comment filtered as needed).
        dialect:          Resolved dialect; an unquoted value equal to
                          ``dialect.null_string`` becomes ``None``.
        skip_empty_lines: Drop empty physical lines instead of emitting a
                          one-empty-field record for them.
        config:           Supplies ``max_quoted_size``; defaults to ``GuessConfig()``.

    Returns:
        ``TokenizeResult`` with the records and one warning per dropped line.
    """
    config = config or GuessConfig()
    tokenizer = DialectTokenizer(lines, dialect, max_quoted_size=config.max_quoted_size)
    records: list[Record] = []
    warnings: list[TokenizeWarning] = []

    while tokenizer.next_record(skip_empty_lines):
        fields: list[Field] = []
        try:
            while True:
                try:
                    value = tokenizer.next_column()
                except TooFewColumnsError:
                    records.append(Record(tuple(fields)))
                    break
                quoted = tokenizer.was_quoted_column
                if dialect.null_string is not None and not quoted and value == dialect.null_string:
                    value = None
                fields.append(Field(value, quoted))
        except InvalidValueError as e:
            skipped = tokenizer.skip_current_line()
            number = skipped.number if skipped is not None else tokenizer.line_number
            text = skipped.text if skipped is not None else ""
            logger.warning("Skipped invalid line %d: %s", number, e)
            warnings.append(TokenizeWarning(line_number=number, line=text, message=str(e)))

    return TokenizeResult(records=tuple(records), warnings=tuple(warnings))
