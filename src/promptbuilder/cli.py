"""
promptbuilder — Concatenate source files into one Markdown document.

Overview
--------
The input file holds optional free-form header lines, a `---` separator, then
one `key=value` directive per line:

    You are reviewing the following project.
    ---
    basedir=.
    include=src
    excludefolder=node_modules
    excludeextension=json
    excludefile=src/config/dev.js

or, with glob includes (absolute `basedir` required):

    ---
    basedir=/home/me/project
    include=*.go
    exclude=*_test.go

Every selected text file becomes a `# path` heading followed by its content in
a fenced code block. Binary files are skipped.

Usage
-----
    uv run python -m promptbuilder.cli --input input.txt --output prompt.md
    uv run python -m promptbuilder.cli --heading absolute --log-file run.log
"""

from __future__ import annotations

import argparse
import sys
from typing import TYPE_CHECKING

from promptbuilder import __version__
from promptbuilder.config import HeadingStyle, parse_config, validate_configuration
from promptbuilder.exceptions import ConfigReadError, PromptBuilderError
from promptbuilder.logging import logger, setup_logging
from promptbuilder.output_construction import render, write_document
from promptbuilder.settings import Settings
from promptbuilder.traversal import find_files

if TYPE_CHECKING:
    from collections.abc import Sequence
    from pathlib import Path

    from promptbuilder.config import Configuration


def parse_args(argv: Sequence[str] | None = None, *, version: str = __version__) -> Settings:
    defaults = Settings()
    p = argparse.ArgumentParser(
        prog="promptbuilder",
        description="Concatenate selected text files into a single markdown document.",
    )
    p.add_argument("--input", type=str, default=str(defaults.input), help="Configuration file path.")
    p.add_argument("--output", type=str, default=str(defaults.output), help="Output file path.")
    p.add_argument(
        "--heading",
        type=str,
        choices=[h.value for h in HeadingStyle],
        default=None,
        help="Section heading path (overrides the `heading` directive).",
    )
    p.add_argument("--log-file", type=str, default=defaults.log_file, help="Log file path.")
    p.add_argument("--version", action="version", version=f"%(prog)s {version}")
    args = p.parse_args(argv)
    return Settings(**vars(args))


def load_configuration(path: Path) -> Configuration:
    """Read, parse and validate the configuration file.

    Args:
        path (Path): the configuration file

    Raises:
        ConfigReadError: if the file cannot be read as UTF-8 text
        ConfigParseError: if a directive value is invalid
        ConfigValidationError: if the configuration is not usable

    Returns:
        Configuration: the validated configuration
    """
    try:
        text = path.read_text(encoding="utf-8")
    except (OSError, UnicodeDecodeError) as e:
        raise ConfigReadError(path=path, cause=str(e)) from e
    return validate_configuration(parse_config(text))


def run(settings: Settings) -> int:
    """Generate the output document described by `settings`.

    Args:
        settings (Settings): the command line settings

    Returns:
        int: the process exit code
    """
    try:
        config = load_configuration(settings.input)
        if settings.heading is not None:
            config = config.model_copy(update={"heading_style": settings.heading})
        files = find_files(config)
        if not files:
            logger.warning("no_files_selected", input=str(settings.input))
            print("Warning: No files found matching the include/exclude rules")
        write_document(settings.output, render(config, files))
    except PromptBuilderError as e:
        logger.error("run_failed", error=str(e), kind=type(e).__name__)
        print(f"Error: {e}", file=sys.stderr)
        return 1

    print(f"Successfully processed {len(files)} files")
    print(f"Output written to: {settings.output}")
    return 0


def main(argv: Sequence[str] | None = None) -> int:
    settings = parse_args(argv)
    if settings.log_file:
        setup_logging(settings.log_file)
    return run(settings)


if __name__ == "__main__":
    raise SystemExit(main())
