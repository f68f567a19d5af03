from __future__ import annotations

import codecs
from pathlib import Path, PurePosixPath
from typing import TYPE_CHECKING

from promptbuilder.config import (
    ExactPathRule,
    ExtensionRule,
    FolderNameRule,
    GlobRule,
    match_glob,
)

if TYPE_CHECKING:
    from collections.abc import Iterable, Sequence

    from promptbuilder.config import ExclusionRule

SNIFF_BYTES = 512


def relpath(path: Path, root: Path) -> str:
    """Send the relative path of path from root.

    Args:
        path (Path): the path to "relativise"
        root (Path): the root to relativise from

    Returns:
        str: the relative path from root to path, with POSIX separators.
            If path is not under root, returns the original path as a string.
    """
    try:
        return str(path.relative_to(root)).replace("\\", "/")
    except ValueError:
        return str(path).replace("\\", "/")


def is_binary(path: Path, sniff_bytes: int = SNIFF_BYTES) -> bool:
    """Check whether a file holds binary content.

    At most `sniff_bytes` bytes are read. A NUL byte means binary; otherwise the
    bytes must be valid UTF-8. When the file goes on past the window, a
    multi-byte sequence cut by the window boundary is not held against the
    file. When the file ends inside the window (or exactly at its edge), an
    incomplete trailing sequence is invalid UTF-8 and the file is binary.

    Args:
        path (Path): the file to classify
        sniff_bytes (int, optional): size of the sniff window. Defaults to 512.

    Raises:
        OSError: if the file cannot be opened or read

    Returns:
        bool: True if the file should be treated as binary
    """
    with path.open("rb") as f:
        data = f.read(sniff_bytes + 1)
    chunk = data[:sniff_bytes]
    ends_in_window = len(data) <= sniff_bytes

    if b"\x00" in chunk:
        return True

    decoder = codecs.getincrementaldecoder("utf-8")(errors="strict")
    try:
        decoder.decode(chunk, final=ends_in_window)
    except UnicodeDecodeError:
        return True
    return False


def matches_any_pattern(base_name: str, patterns: Iterable[str]) -> bool:
    """Check if a bare file name matches any of the provided glob patterns.

    Matching is case-sensitive and single-level: `*`, `?` and character
    classes are supported, `**` has no special meaning.

    Args:
        base_name (str): the file name to check, without directory
        patterns (Iterable[str]): the glob patterns to match against

    Returns:
        bool: True if `base_name` matches any pattern, False otherwise
    """
    return any(match_glob(base_name, p) for p in patterns)


def is_excluded_folder(dir_path: Path | PurePosixPath, rules: Sequence[ExclusionRule]) -> bool:
    """Check if a directory's final segment names an excluded folder."""
    rel = PurePosixPath(dir_path.name)
    return any(r.excludes_dir(rel) for r in rules if isinstance(r, FolderNameRule))


def is_excluded_extension(file_path: Path | PurePosixPath, rules: Sequence[ExclusionRule]) -> bool:
    """Check if a file's extension is excluded."""
    rel = PurePosixPath(file_path.name)
    return any(r.excludes_file(rel) for r in rules if isinstance(r, ExtensionRule))


def is_excluded_file(file_path: Path, base_dir: Path, rules: Sequence[ExclusionRule]) -> bool:
    """Check if a file is excluded by relative path or by bare file name."""
    rel = PurePosixPath(relpath(file_path, base_dir))
    return any(r.excludes_file(rel) for r in rules if isinstance(r, ExactPathRule))


class PathFilter:
    """Decide which directories and files the configured exclusion rules remove.

    Directories are tested before descending into them so that excluded
    subtrees are never visited. Files are tested by path relative to the base
    directory.
    """

    def __init__(self, rules: Sequence[ExclusionRule], base_dir: Path) -> None:
        self.rules = tuple(rules)
        self.base_dir = base_dir
        self.glob_patterns = [r.pattern for r in self.rules if isinstance(r, GlobRule)]

    def is_excluded_folder(self, dir_path: Path) -> bool:
        return is_excluded_folder(dir_path, self.rules)

    def is_excluded_extension(self, file_path: Path) -> bool:
        return is_excluded_extension(file_path, self.rules)

    def is_excluded_file(self, file_path: Path) -> bool:
        return is_excluded_file(file_path, self.base_dir, self.rules)

    def is_excluded_by_glob(self, file_path: Path) -> bool:
        return matches_any_pattern(file_path.name, self.glob_patterns)

    def prunes(self, dir_path: Path) -> bool:
        """Return True if the walk must not descend into `dir_path`."""
        rel = PurePosixPath(relpath(dir_path, self.base_dir))
        return any(r.excludes_dir(rel) for r in self.rules)

    def excludes(self, file_path: Path) -> bool:
        """Return True if any rule removes `file_path` from the result."""
        rel = PurePosixPath(relpath(file_path, self.base_dir))
        return any(r.excludes_file(rel) for r in self.rules)
