from __future__ import annotations

from dataclasses import dataclass, fields
from pathlib import Path


@dataclass(frozen=True)
class PromptBuilderError(Exception):
    """Base exception for errors in the promptbuilder package."""

    def __str__(self) -> str:
        message = getattr(self, "message", "") or (self.__doc__ or "").strip()
        details = ", ".join(f"{f.name}={getattr(self, f.name)}" for f in fields(self) if f.name != "message")
        return f"{message} ({details})" if details else message


@dataclass(frozen=True)
class ConfigReadError(PromptBuilderError):
    """Raised when the configuration file cannot be read."""

    path: Path
    cause: str
    message: str = "Cannot read the configuration file."


@dataclass(frozen=True)
class ConfigParseError(PromptBuilderError):
    """Raised when a directive carries a value that cannot be understood."""

    line_number: int
    line: str
    reason: str
    message: str = "Invalid directive in configuration."


@dataclass(frozen=True)
class ConfigValidationError(PromptBuilderError):
    """Raised when a parsed configuration is not usable."""


@dataclass(frozen=True)
class MissingBaseDirError(ConfigValidationError):
    """Raised when no base directory is configured."""

    message: str = "basedir is required."


@dataclass(frozen=True)
class RelativeBaseDirNotAllowedError(ConfigValidationError):
    """Raised when a relative base directory is used with the glob scheme."""

    base_dir: Path
    message: str = "basedir must be an absolute path with glob includes."


@dataclass(frozen=True)
class BaseDirNotFoundError(ConfigValidationError):
    """Raised when the base directory does not exist."""

    base_dir: Path
    message: str = "basedir does not exist or is not a directory."


@dataclass(frozen=True)
class NoIncludesSpecifiedError(ConfigValidationError):
    """Raised when the configuration lists no include entry."""

    message: str = "At least one include entry is required."


@dataclass(frozen=True)
class TraversalError(PromptBuilderError):
    """Raised when a directory cannot be walked."""

    path: Path
    cause: str
    message: str = "Error walking directory."


@dataclass(frozen=True)
class OutputWriteError(PromptBuilderError):
    """Raised when the output document cannot be assembled or written."""

    path: Path
    cause: str
    message: str = "Error generating output."
