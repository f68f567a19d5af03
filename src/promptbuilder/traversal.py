"""Walk the configured includes and collect the files to export.

Both filter schemes share the walk below: folder rules prune subtrees while
walking, file rules and the binary sniff run on every candidate file, and
children are visited in sorted order so that the output is reproducible.
"""

from __future__ import annotations

import os
import posixpath
from pathlib import Path, PurePosixPath
from typing import TYPE_CHECKING

from pydantic import BaseModel, ConfigDict, Field, computed_field

from promptbuilder.config import FilterScheme
from promptbuilder.exceptions import TraversalError
from promptbuilder.file_manipulation import SNIFF_BYTES, PathFilter, is_binary, matches_any_pattern, relpath
from promptbuilder.logging import logger

if TYPE_CHECKING:
    from collections.abc import Callable, Iterator

    from promptbuilder.config import Configuration

EXT2LANG: dict[str, str] = {
    ".bash": "bash",
    ".c": "c",
    ".cpp": "cpp",
    ".cs": "csharp",
    ".css": "css",
    ".go": "go",
    ".h": "c",
    ".hpp": "cpp",
    ".html": "html",
    ".java": "java",
    ".js": "javascript",
    ".json": "json",
    ".kt": "kotlin",
    ".md": "markdown",
    ".php": "php",
    ".py": "python",
    ".rb": "ruby",
    ".rs": "rust",
    ".sh": "bash",
    ".sql": "sql",
    ".toml": "toml",
    ".ts": "typescript",
    ".tsx": "typescript",
    ".xml": "xml",
    ".yaml": "yaml",
    ".yml": "yaml",
}


class SelectedFile(BaseModel):
    """A file chosen for export.

    Attributes:
        rel: Path shown to readers, relative to the base directory (or prefixed
            with the include entry that reached it).
        path: Absolute path to the file on disk.
    """

    model_config = ConfigDict(frozen=True)

    rel: str = Field(..., description="Relative, POSIX-style path")
    path: Path = Field(..., description="Absolute file path")

    @computed_field
    @property
    def language(self) -> str:
        """Suggested code fence language, empty when unknown."""
        return EXT2LANG.get(self.path.suffix.lower(), "")


def normalize_path(path: Path) -> Path:
    """Collapse `..` segments so that a file reached twice gets one path."""
    return Path(os.path.normpath(path))


def walk_sorted(root: Path, path_filter: PathFilter) -> Iterator[Path]:
    """Yield the regular files under `root` in lexical order, pruning excluded folders.

    Files and subdirectories of a directory are visited in one sorted sequence,
    so `sub/c.go` comes between `a.go` and `z.go`. Directory symlinks are not
    followed.

    Args:
        root (Path): the directory to walk
        path_filter (PathFilter): decides which directories are pruned

    Raises:
        TraversalError: if a directory cannot be listed

    Yields:
        Iterator[Path]: absolute paths of the files found
    """
    if path_filter.prunes(root):
        logger.debug("folder_pruned", path=str(root))
        return
    try:
        with os.scandir(root) as it:
            entries = sorted(it, key=lambda e: e.name)
    except OSError as e:
        raise TraversalError(path=root, cause=e.strerror or str(e)) from e
    for entry in entries:
        p = root / entry.name
        if entry.is_dir(follow_symlinks=False):
            yield from walk_sorted(p, path_filter)
        elif entry.is_file():
            yield p


class _Collector:
    """Accumulate selected files, skipping duplicates and binary content."""

    def __init__(self, sniff_bytes: int) -> None:
        self.sniff_bytes = sniff_bytes
        self.files: list[SelectedFile] = []
        self._seen: set[Path] = set()

    def add(self, rel: str, path: Path) -> None:
        if path in self._seen:
            logger.debug("duplicate_file_skipped", path=rel)
            return
        try:
            binary = is_binary(path, self.sniff_bytes)
        except OSError as e:
            logger.warning("file_unreadable", path=rel, error=str(e))
            return
        if binary:
            logger.warning("binary_file_skipped", path=rel)
            return
        self._seen.add(path)
        self.files.append(SelectedFile(rel=rel, path=path))


def _find_structured(config: Configuration, path_filter: PathFilter, collector: _Collector) -> None:
    for entry in config.includes:
        target = normalize_path(path_filter.base_dir / entry)
        entry_rel = PurePosixPath(posixpath.normpath(entry.replace("\\", "/")))
        try:
            st_is_dir = target.is_dir()
            st_is_file = target.is_file()
        except OSError as e:
            logger.warning("include_not_accessible", include=entry, error=str(e))
            continue

        if st_is_dir:
            for p in walk_sorted(target, path_filter):
                if not path_filter.excludes(p):
                    collector.add((entry_rel / relpath(p, target)).as_posix(), p)
        elif st_is_file:
            if not path_filter.excludes(target):
                collector.add(entry_rel.as_posix(), target)
        elif target.exists():
            logger.warning("include_not_a_regular_file", include=entry)
        else:
            logger.warning("include_not_accessible", include=entry, error="no such file or directory")


def _find_glob(config: Configuration, path_filter: PathFilter, collector: _Collector) -> None:
    for p in walk_sorted(path_filter.base_dir, path_filter):
        if not matches_any_pattern(p.name, config.includes):
            continue
        if path_filter.excludes(p):
            continue
        collector.add(relpath(p, path_filter.base_dir), p)


_FINDERS: dict[FilterScheme, Callable[[Configuration, PathFilter, _Collector], None]] = {
    FilterScheme.STRUCTURED: _find_structured,
    FilterScheme.GLOB: _find_glob,
}


def find_files(config: Configuration, *, sniff_bytes: int = SNIFF_BYTES) -> list[SelectedFile]:
    """Collect the files selected by a validated configuration, in output order.

    Args:
        config (Configuration): a configuration returned by `validate_configuration`
        sniff_bytes (int, optional): size of the binary sniff window. Defaults to 512.

    Raises:
        TraversalError: if a directory cannot be walked

    Returns:
        list[SelectedFile]: the selected files, in include order then walk order
    """
    if config.base_dir is None:
        msg = "find_files needs a validated configuration"
        raise ValueError(msg)
    path_filter = PathFilter(config.rules, config.base_dir)
    collector = _Collector(sniff_bytes)
    _FINDERS[config.scheme](config, path_filter, collector)
    logger.info("files_selected", count=len(collector.files), scheme=str(config.scheme))
    return collector.files
