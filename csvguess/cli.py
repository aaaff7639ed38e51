"""
csvguess — guess the parser configuration of a delimited text file.

Reads a bounded sample of the file, runs the guess, and prints the guessed
``parser`` configuration as YAML, ready to merge into a loader config.

Environment variables read (optionally from a ``.env`` file):
    CSVGUESS_MAX_SAMPLE_LINES   Lines read from the source (default 1000)
    CSVGUESS_MAX_SAMPLE_CHARS   Characters read from the source (default 32768)
    CSVGUESS_*                  Any other numeric tunable of ``GuessConfig``

Commands:
    guess     Print (or write) the guessed configuration fragment.
    preview   Print the sample records as the guessed dialect reads them.

Usage examples:
    csvguess guess --source data/contacts.csv
    csvguess guess --source data/contacts.csv --config seed.yml --out guessed.yml
    cat data/contacts.csv | csvguess preview --source - --rows 5

Exit codes:
    0  A configuration was guessed
    1  Nothing could be guessed from the sample
    2  Configuration / sample error
"""

from __future__ import annotations

import argparse
import dataclasses
import logging
import sys
from pathlib import Path

import yaml
from dotenv import load_dotenv

from csvguess.configs.config import GuessConfig
from csvguess.configs.exceptions import ConfigError, SampleError
from csvguess.discovery.base import AbstractSampleSource, StaticSampleSource
from csvguess.discovery.text_reader import TextSampleSource, bound_sample
from csvguess.pipeline import guess_result
from csvguess.transformers.tokenizer import split_lines

logger = logging.getLogger(__name__)


# ---------------------------------------------------------------------------
# Logging
# ---------------------------------------------------------------------------

def _setup_logging(verbose: bool) -> None:
    level = logging.DEBUG if verbose else logging.INFO
    logging.basicConfig(
        format="%(asctime)s [%(levelname)s] %(name)s: %(message)s",
        datefmt="%Y-%m-%dT%H:%M:%S",
        level=level,
        stream=sys.stderr,
    )


# ---------------------------------------------------------------------------
# Config — env vars + optional CLI overrides
# ---------------------------------------------------------------------------

def _build_config(args: argparse.Namespace) -> GuessConfig:
    """
    Priority order for each setting:
      1. CLI flag (--max-lines, --max-chars)
      2. Environment variable (CSVGUESS_*)
      3. GuessConfig default
    """
    config = GuessConfig()
    kwargs: dict = {}
    if getattr(args, "max_lines", None):
        kwargs["max_sample_lines"] = args.max_lines
    if getattr(args, "max_chars", None):
        kwargs["max_sample_chars"] = args.max_chars
    return dataclasses.replace(config, **kwargs) if kwargs else config


def _load_seed(path: str | None) -> dict:
    """
    Load the seed configuration whose ``parser`` section holds overrides.

    Raises:
        ConfigError: If the file is unreadable or not a YAML mapping.
    """
    if not path:
        return {}
    try:
        with open(path, encoding="utf-8") as f:
            seed = yaml.safe_load(f)
    except (OSError, yaml.YAMLError) as e:
        raise ConfigError(f"Cannot load seed config {path}: {e}", key="config") from e
    if seed is None:
        return {}
    if not isinstance(seed, dict):
        raise ConfigError(f"Seed config {path} must be a mapping.", key="config")
    return seed


def _open_source(source: str, config: GuessConfig) -> AbstractSampleSource:
    if source == "-":
        text = sys.stdin.read(config.max_sample_chars + 1)
        return StaticSampleSource(
            bound_sample(text, config.max_sample_chars, config.max_sample_lines)
        )
    return TextSampleSource(source, config)


# ---------------------------------------------------------------------------
# Subcommand handlers
# ---------------------------------------------------------------------------

def _cmd_guess(args: argparse.Namespace) -> int:
    config = _build_config(args)
    seed = _load_seed(args.config)
    with _open_source(args.source, config) as source:
        result = guess_result(seed, source.lines(), config)

    if result is None:
        print(f"✗ {args.source} — nothing could be guessed", file=sys.stderr)
        return 1

    for warning in result.warnings:
        logger.warning("line %d dropped: %s", warning.line_number, warning.message)

    rendered = yaml.safe_dump(
        result.to_config_diff(), sort_keys=False, allow_unicode=True, default_flow_style=False
    )
    if args.out:
        Path(args.out).write_text(rendered, encoding="utf-8")
        print(f"✓ {args.source} — written to {args.out}")
    else:
        sys.stdout.write(rendered)
    return 0


def _cmd_preview(args: argparse.Namespace) -> int:
    config = _build_config(args)
    seed = _load_seed(args.config)
    with _open_source(args.source, config) as source:
        result = guess_result(seed, source.lines(), config)

    if result is None:
        print(f"✗ {args.source} — nothing could be guessed", file=sys.stderr)
        return 1

    tokenized = split_lines(result.skip_plan.lines, result.dialect, skip_empty_lines=True, config=config)
    records = tokenized.records[1:] if result.header else tokenized.records

    print(" | ".join(f"{c.name}:{c.type}" for c in result.schema))
    for record in records[: args.rows]:
        print(" | ".join("<null>" if v is None else v for v in record.values()))
    return 0


# ---------------------------------------------------------------------------
# Argument parser (importable for tests)
# ---------------------------------------------------------------------------

def _build_parser() -> argparse.ArgumentParser:
    parser = argparse.ArgumentParser(
        prog="csvguess",
        description="Guess the dialect and schema of a delimited text file",
        epilog="Tunables (CSVGUESS_*) are read from the environment or a .env file.",
    )
    parser.add_argument("--verbose", "-v", action="store_true")

    sub = parser.add_subparsers(dest="command", required=True)

    def _source_args(p):
        p.add_argument("--source", required=True, help="File to sample, or - for stdin")
        p.add_argument("--config", default=None, help="Seed YAML with parser overrides")
        p.add_argument("--max-lines", type=int, default=None, dest="max_lines")
        p.add_argument("--max-chars", type=int, default=None, dest="max_chars")

    p_guess = sub.add_parser("guess", help="Print the guessed parser configuration")
    _source_args(p_guess)
    p_guess.add_argument("--out", default=None, help="Write the YAML here instead of stdout")

    p_preview = sub.add_parser("preview", help="Show records read with the guessed dialect")
    _source_args(p_preview)
    p_preview.add_argument("--rows", type=int, default=10)

    return parser


# ---------------------------------------------------------------------------
# Entry point
# ---------------------------------------------------------------------------

def main(argv: list[str] | None = None) -> int:
    load_dotenv()
    parser = _build_parser()
    args = parser.parse_args(argv)
    _setup_logging(args.verbose)
    handlers = {"guess": _cmd_guess, "preview": _cmd_preview}
    try:
        return handlers[args.command](args)
    except (ConfigError, SampleError) as e:
        print(f"ERROR: {e}", file=sys.stderr)
        return 2


if __name__ == "__main__":
    sys.exit(main())
