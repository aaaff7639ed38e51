"""
Text file sample reader implementing ``AbstractSampleSource``.

Handles:
- UTF-8 with or without BOM (``utf-8-sig``).
- Windows CRLF, Unix LF and old Mac CR line endings.
- Bounded reads: at most ``max_sample_chars`` characters and
  ``max_sample_lines`` lines.  When the character bound cut the file, the
  last (possibly partial) line is dropped.
"""

from __future__ import annotations

import logging
import re
from pathlib import Path

from csvguess.configs.config import GuessConfig
from csvguess.configs.exceptions import SampleError
from csvguess.discovery.base import AbstractSampleSource
from csvguess.models.models import SampleLine

logger = logging.getLogger(__name__)

_LINE_BREAK_RE = re.compile(r"\r\n|\r|\n")


def bound_sample(text: str, max_chars: int, max_lines: int) -> list[str]:
    """
    Split ``text`` into at most ``max_lines`` lines of the first ``max_chars``
    characters.

    ``text`` is expected to hold up to ``max_chars + 1`` characters; the extra
    one tells whether the bound cut the input, in which case the last
    (possibly partial) line is dropped.  Only CRLF, LF and CR end a line.
    """
    truncated = len(text) > max_chars
    texts = _LINE_BREAK_RE.split(text[:max_chars])
    if texts and texts[-1] == "" and not truncated:
        texts.pop()
    if truncated and len(texts) > 1:
        texts = texts[:-1]
    return texts[:max_lines]


class TextSampleSource(AbstractSampleSource):
    """
    Bounded text sample of a delimited file.

    Args:
        path:   Path to the file.
        config: Supplies ``max_sample_lines`` and ``max_sample_chars``.
    """

    def __init__(self, path: Path | str, config: GuessConfig | None = None) -> None:
        self.path = Path(path)
        self._config = config or GuessConfig()
        self._lines: list[SampleLine] | None = None

    def open(self) -> None:
        """
        Read the sample.

        Raises:
            SampleError: If the file cannot be opened or is not valid UTF-8.
        """
        limit = self._config.max_sample_chars
        try:
            with open(self.path, encoding="utf-8-sig", newline="") as f:
                text = f.read(limit + 1)
        except OSError as e:
            raise SampleError(
                f"Cannot open {self.path}: {e}",
                source_path=str(self.path),
            ) from e
        except UnicodeDecodeError as e:
            raise SampleError(
                f"Sample of {self.path} is not valid UTF-8: {e}",
                source_path=str(self.path),
            ) from e

        texts = bound_sample(text, limit, self._config.max_sample_lines)

        self._lines = [SampleLine(i, t) for i, t in enumerate(texts, start=1)]
        logger.debug("Read %d sample line(s) from %s", len(self._lines), self.path)

    def lines(self) -> list[SampleLine]:
        """Return the cached sample.  ``open()`` must be called first."""
        if self._lines is None:
            raise RuntimeError("TextSampleSource.open() must be called before lines().")
        return self._lines

    def close(self) -> None:
        self._lines = None
