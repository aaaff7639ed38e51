"""
Validation of explicit overrides in the input configuration.

Called once, before any heuristic runs.  Malformed values raise
``ConfigError`` rather than returning a flag.  A bad override is a user
error that must surface immediately, never a reason to fall back to
guessing.

Presence semantics: a key that exists (even with a ``None`` value) is used
as-is; an absent key means "run the corresponding guesser".
"""

from __future__ import annotations

from typing import Any, Mapping

from csvguess.configs.exceptions import ConfigError
from csvguess.models.models import UNSET, ParserOverrides


def _require_mapping(value: Any, key: str) -> Mapping:
    if value is None:
        return {}
    if not isinstance(value, Mapping):
        raise ConfigError(
            f"'{key}' must be a mapping, got {type(value).__name__}.",
            key=key,
        )
    return value


def _delimiter(parser: Mapping) -> Any:
    if "delimiter" not in parser:
        return UNSET
    value = parser["delimiter"]
    if not isinstance(value, str) or not value:
        raise ConfigError(
            f"delimiter must be a non-empty string, got {value!r}.",
            key="parser.delimiter",
        )
    return value


def _char_or_none(parser: Mapping, name: str) -> Any:
    """A single character, ``None``, or ``""`` (caller decides what empty means)."""
    if name not in parser:
        return UNSET
    value = parser[name]
    if value is None:
        return None
    if not isinstance(value, str) or len(value) > 1:
        raise ConfigError(
            f"{name} must be a single character or null, got {value!r}.",
            key=f"parser.{name}",
        )
    return value


def _string_or_none(parser: Mapping, name: str, allow_empty: bool) -> Any:
    if name not in parser:
        return UNSET
    value = parser[name]
    if value is None:
        return None
    if not isinstance(value, str) or (not value and not allow_empty):
        raise ConfigError(
            f"{name} must be a {'string' if allow_empty else 'non-empty string'} "
            f"or null, got {value!r}.",
            key=f"parser.{name}",
        )
    return value


def _boolean(parser: Mapping, name: str) -> Any:
    if name not in parser:
        return UNSET
    value = parser[name]
    if not isinstance(value, bool):
        raise ConfigError(
            f"{name} must be true or false, got {value!r}.",
            key=f"parser.{name}",
        )
    return value


def parser_type(config: Mapping | None) -> str:
    """
    Read only ``parser.type`` (default ``csv``).

    Checked before any other key so that a configuration meant for another
    parser is never validated against the csv rules.

    Raises:
        ConfigError: If ``parser`` is not a mapping or ``type`` is not a string.
    """
    parser = _require_mapping((config or {}).get("parser"), "parser")
    value = parser.get("type", "csv")
    if not isinstance(value, str):
        raise ConfigError(
            f"type must be a string, got {value!r}.",
            key="parser.type",
        )
    return value


def parse_overrides(config: Mapping | None) -> ParserOverrides:
    """
    Read and validate the ``parser`` section of ``config``.

    Args:
        config: The whole input configuration, e.g. ``{"parser": {...}}``.
                ``None`` is treated as an empty configuration.

    Returns:
        ``ParserOverrides`` with ``UNSET`` for every absent key.

    Raises:
        ConfigError: If ``parser`` is not a mapping or any override has the
                     wrong type.
    """
    parser_type_name = parser_type(config)
    parser = _require_mapping((config or {}).get("parser"), "parser")

    escape = _char_or_none(parser, "escape")
    if escape == "":
        escape = None

    return ParserOverrides(
        type=parser_type_name,
        delimiter=_delimiter(parser),
        quote=_char_or_none(parser, "quote"),
        escape=escape,
        null_string=_string_or_none(parser, "null_string", allow_empty=True),
        comment_line_marker=_string_or_none(parser, "comment_line_marker", allow_empty=False),
        trim_if_not_quoted=_boolean(parser, "trim_if_not_quoted"),
        allow_extra_columns=_boolean(parser, "allow_extra_columns"),
        allow_optional_columns=_boolean(parser, "allow_optional_columns"),
        base=dict(parser),
    )
