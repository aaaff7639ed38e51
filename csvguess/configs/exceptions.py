"""
Custom exceptions for the CSV dialect and schema guess.

Hierarchy:
    GuessError
    ├── ConfigError                  An explicit override is malformed; the guess aborts.
    ├── SampleError                  The host could not read a sample.
    └── TokenizeError                Raised by the tokenizer; recovered inside ``split_lines``.
        ├── TooFewColumnsError       The current record has no more columns.
        └── InvalidValueError        Malformed token; the physical line is dropped.
            └── QuotedSizeLimitExceededError

A guess that simply finds nothing (empty sample, empty schema) is not an
error: the orchestrator returns an empty result instead of raising.
"""


class GuessError(Exception):
    """Base class for all guess errors."""


class ConfigError(GuessError):
    """
    Raised when an explicit override cannot be interpreted.

    Args:
        message: Human-readable description of the failure.
        key: Name of the offending configuration key.
    """

    def __init__(self, message: str, key: str | None = None) -> None:
        super().__init__(message)
        self.key = key

    def __str__(self) -> str:
        base = super().__str__()
        if self.key:
            return f"{base} | key={self.key}"
        return base


class SampleError(GuessError):
    """
    Raised when a sample cannot be read.

    Args:
        message: Human-readable description of the failure.
        source_path: Path of the file being sampled.
    """

    def __init__(self, message: str, source_path: str | None = None) -> None:
        super().__init__(message)
        self.source_path = source_path

    def __str__(self) -> str:
        base = super().__str__()
        if self.source_path:
            return f"{base} | source={self.source_path}"
        return base


class TokenizeError(GuessError):
    """
    Base class for tokenizer conditions.

    Args:
        message: Human-readable description.
        line_number: 1-based sample line number where the condition arose.
    """

    def __init__(self, message: str, line_number: int | None = None) -> None:
        super().__init__(message)
        self.line_number = line_number

    def __str__(self) -> str:
        base = super().__str__()
        if self.line_number is not None:
            return f"{base} | line={self.line_number}"
        return base


class TooFewColumnsError(TokenizeError):
    """Raised by ``next_column`` once the current record has ended."""


class InvalidValueError(TokenizeError):
    """Raised on a malformed token, e.g. characters after a closing quote."""


class QuotedSizeLimitExceededError(InvalidValueError):
    """Raised when a quoted value grows beyond ``GuessConfig.max_quoted_size``."""
