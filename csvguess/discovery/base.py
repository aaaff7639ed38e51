"""
Abstract base class for sample sources.

A sample source hands the guess a bounded list of decoded lines.  The guess
itself never reads files; hosts (the CLI, tests, an ingestion service) pick
a concrete source and pass ``source.lines()`` to ``csvguess.pipeline.guess``.

Usage:
    with TextSampleSource(path, config) as source:
        fragment = guess(seed_config, source.lines())
"""

from __future__ import annotations

from abc import ABC, abstractmethod

from csvguess.models.models import SampleLine


class AbstractSampleSource(ABC):
    """
    Interface for all sample sources.

    Subclasses must implement ``open``, ``lines``, and ``close``.
    Context manager support (``__enter__`` / ``__exit__``) is provided by
    this base class and delegates to ``open`` / ``close``.
    """

    @abstractmethod
    def open(self) -> None:
        """Acquire the sample.  Must be called before ``lines``."""

    @abstractmethod
    def lines(self) -> list[SampleLine]:
        """
        Return the sample lines, terminators stripped, numbered from 1.

        Must be called after ``open``.  Returns the same list on every call.
        """

    @abstractmethod
    def close(self) -> None:
        """Release any open file handles or resources."""

    # ── context manager ──────────────────────────────────────────────────

    def __enter__(self) -> "AbstractSampleSource":
        self.open()
        return self

    def __exit__(self, exc_type, exc_val, exc_tb) -> None:
        self.close()
        return None


class StaticSampleSource(AbstractSampleSource):
    """In-memory sample, e.g. lines already decoded by the host."""

    def __init__(self, lines) -> None:
        self._raw = list(lines)
        self._lines: list[SampleLine] | None = None

    def open(self) -> None:
        self._lines = [
            line if isinstance(line, SampleLine) else SampleLine(i, line)
            for i, line in enumerate(self._raw, start=1)
        ]

    def lines(self) -> list[SampleLine]:
        if self._lines is None:
            raise RuntimeError("StaticSampleSource.open() must be called before lines().")
        return self._lines

    def close(self) -> None:
        self._lines = None
