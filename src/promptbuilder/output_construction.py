from __future__ import annotations

import io
from typing import TYPE_CHECKING

from promptbuilder.config import HeadingStyle
from promptbuilder.exceptions import OutputWriteError

if TYPE_CHECKING:
    from collections.abc import Sequence
    from pathlib import Path

    from promptbuilder.config import Configuration
    from promptbuilder.traversal import SelectedFile

FENCE = "```"


def read_raw_text(path: Path) -> str:
    """Read a file so that writing the result back reproduces its bytes.

    Undecodable bytes are kept as lone surrogates and line endings are not
    translated.

    Args:
        path (Path): the file to read

    Returns:
        str: the file content
    """
    return path.read_bytes().decode("utf-8", errors="surrogateescape")


def section_heading(rec: SelectedFile, heading_style: HeadingStyle) -> str:
    if heading_style is HeadingStyle.ABSOLUTE:
        return str(rec.path)
    return rec.rel


def render(config: Configuration, files: Sequence[SelectedFile]) -> str:
    """Build the markdown document for the selected files.

    The header text, when present, comes first followed by a blank line. Each
    file then gets a `#` heading and its raw content in a fenced block. Fence
    sequences inside the content are not escaped.

    Args:
        config (Configuration): the validated configuration
        files (Sequence[SelectedFile]): the files to render, in output order

    Raises:
        OutputWriteError: if a selected file cannot be read anymore

    Returns:
        str: the generated markdown document
    """
    out = io.StringIO()
    if config.header_text:
        out.write(f"{config.header_text}\n\n")

    for rec in files:
        try:
            body = read_raw_text(rec.path)
        except OSError as e:
            raise OutputWriteError(path=rec.path, cause=str(e)) from e
        out.write(f"# {section_heading(rec, config.heading_style)}\n")
        out.write(f"{FENCE}{rec.language}\n{body}\n{FENCE}\n\n")

    return out.getvalue()


def write_document(path: Path, document: str) -> None:
    """Overwrite `path` with the rendered document.

    Args:
        path (Path): the output file
        document (str): the rendered document

    Raises:
        OutputWriteError: if the file cannot be created or written
    """
    try:
        path.write_text(document, encoding="utf-8", errors="surrogateescape", newline="")
    except OSError as e:
        raise OutputWriteError(path=path, cause=str(e)) from e
