from __future__ import annotations

import fnmatch
from enum import StrEnum, auto
from pathlib import Path, PurePosixPath
from typing import Annotated, Literal, TypeVar

from pydantic import BaseModel, ConfigDict, Field

from promptbuilder.exceptions import (
    BaseDirNotFoundError,
    ConfigParseError,
    MissingBaseDirError,
    NoIncludesSpecifiedError,
    RelativeBaseDirNotAllowedError,
)

SEPARATOR = "---"
GLOB_METACHARACTERS = frozenset("*?[")

E = TypeVar("E", bound=StrEnum)


class FilterScheme(StrEnum):
    """How include entries are interpreted.

    STRUCTURED includes are paths (directories or files) relative to the base
    directory. GLOB includes are patterns matched against the base name of every
    file found under the base directory.
    """

    STRUCTURED = auto()
    GLOB = auto()


class HeadingStyle(StrEnum):
    """Which path is written in the heading of each file section."""

    RELATIVE = auto()
    ABSOLUTE = auto()


def translate_glob(pattern: str) -> str:
    """Accept `[^...]` negated classes on top of the fnmatch `[!...]` syntax."""
    return pattern.replace("[^", "[!")


def match_glob(name: str, pattern: str) -> bool:
    """Case-sensitive, single-level glob match of a bare name."""
    return fnmatch.fnmatchcase(name, translate_glob(pattern))


class FolderNameRule(BaseModel):
    """Prune every directory whose final path segment equals `name`."""

    model_config = ConfigDict(frozen=True)

    kind: Literal["folder"] = "folder"
    name: str

    def excludes_dir(self, rel: PurePosixPath) -> bool:
        return rel.name == self.name

    def excludes_file(self, rel: PurePosixPath) -> bool:  # noqa: ARG002
        return False


class ExtensionRule(BaseModel):
    """Exclude files whose last suffix matches a `*.ext` pattern."""

    model_config = ConfigDict(frozen=True)

    kind: Literal["extension"] = "extension"
    pattern: str

    def excludes_dir(self, rel: PurePosixPath) -> bool:  # noqa: ARG002
        return False

    def excludes_file(self, rel: PurePosixPath) -> bool:
        suffix = rel.suffix
        return bool(suffix) and fnmatch.fnmatchcase(suffix, self.pattern)


class ExactPathRule(BaseModel):
    """Exclude a file by its path relative to the base directory or by its bare name."""

    model_config = ConfigDict(frozen=True)

    kind: Literal["path"] = "path"
    path: str

    def excludes_dir(self, rel: PurePosixPath) -> bool:  # noqa: ARG002
        return False

    def excludes_file(self, rel: PurePosixPath) -> bool:
        return rel.as_posix() == self.path or rel.name == self.path


class GlobRule(BaseModel):
    """Exclude files whose base name matches a glob pattern."""

    model_config = ConfigDict(frozen=True)

    kind: Literal["glob"] = "glob"
    pattern: str

    def excludes_dir(self, rel: PurePosixPath) -> bool:  # noqa: ARG002
        return False

    def excludes_file(self, rel: PurePosixPath) -> bool:
        return match_glob(rel.name, self.pattern)


ExclusionRule = Annotated[
    FolderNameRule | ExtensionRule | ExactPathRule | GlobRule,
    Field(discriminator="kind"),
]


class Configuration(BaseModel):
    """Normalized scan configuration read from the input file.

    Attributes:
        header_text: Text written verbatim before the first file section.
        base_dir: Root against which include entries are resolved. Absolute
            once the configuration went through `validate_configuration`.
        includes: Include entries, in output order.
        rules: Exclusion rules, applied in any order.
        scheme: How include entries are interpreted.
        heading_style: Which path is written in each section heading.
    """

    model_config = ConfigDict(frozen=True)

    header_text: str = Field(default="", description="Free-form header text")
    base_dir: Path | None = Field(default=None, description="Base directory")
    includes: tuple[str, ...] = Field(default=(), description="Include entries")
    rules: tuple[ExclusionRule, ...] = Field(default=(), description="Exclusion rules")
    scheme: FilterScheme = Field(default=FilterScheme.STRUCTURED, description="Include interpretation")
    heading_style: HeadingStyle = Field(default=HeadingStyle.RELATIVE, description="Section heading path")


def normalize_extension(value: str) -> str:
    """Turn `json` or `.json` into the `*.json` suffix pattern.

    Args:
        value (str): the configured extension

    Returns:
        str: a glob pattern matching the extension with its leading dot
    """
    if value.startswith("*"):
        return value
    if value.startswith("."):
        return f"*{value}"
    return f"*.{value}"


def normalize_rel_path(value: str) -> str:
    """Normalize a configured relative path to POSIX separators without a leading `./`.

    Args:
        value (str): the configured path

    Returns:
        str: the normalized path
    """
    out = value.replace("\\", "/")
    while out.startswith("./"):
        out = out[2:]
    return out


def has_glob_metacharacters(value: str) -> bool:
    return any(c in GLOB_METACHARACTERS for c in value)


def _enum_value(enum: type[E], value: str, line_number: int, line: str) -> E:
    try:
        return enum(value.lower())
    except ValueError:
        choices = ", ".join(e.value for e in enum)
        raise ConfigParseError(
            line_number=line_number,
            line=line,
            reason=f"expected one of: {choices}",
        ) from None


def parse_config(text: str) -> Configuration:  # noqa: C901
    """Parse the content of an input file into a configuration.

    Lines before the first `---` line form the header. Every following line of
    the form `key=value` is a directive; keys are case-insensitive, unknown
    keys and lines without `=` are ignored.

    Args:
        text (str): the raw input file content

    Raises:
        ConfigParseError: if a `scheme` or `heading` directive has an unknown value

    Returns:
        Configuration: the parsed, not yet validated, configuration
    """
    header_lines: list[str] = []
    header_text = ""
    in_header = True
    base_dir: Path | None = None
    includes: list[str] = []
    rules: list[FolderNameRule | ExtensionRule | ExactPathRule | GlobRule] = []
    scheme: FilterScheme | None = None
    heading_style = HeadingStyle.RELATIVE
    has_glob_excludes = False

    for line_number, raw in enumerate(text.split("\n"), start=1):
        line = raw.removesuffix("\r")
        if line == SEPARATOR:
            if in_header:
                header_text = "\n".join(header_lines)
                in_header = False
            continue
        if in_header:
            header_lines.append(line)
            continue
        if not line or "=" not in line:
            continue

        key, value = line.split("=", 1)
        key = key.strip().lower()
        value = value.strip()

        match key:
            case "basedir":
                base_dir = Path(value) if value else None
            case "include" if value:
                includes.append(value)
            case "exclude" if value:
                rules.append(GlobRule(pattern=value))
                has_glob_excludes = True
            case "excludefolder" if value:
                rules.append(FolderNameRule(name=value))
            case "excludeextension" if value:
                rules.append(ExtensionRule(pattern=normalize_extension(value)))
            case "excludefile" if value:
                rules.append(ExactPathRule(path=normalize_rel_path(value)))
            case "scheme":
                scheme = _enum_value(FilterScheme, value, line_number, line)
            case "heading":
                heading_style = _enum_value(HeadingStyle, value, line_number, line)

    if scheme is None:
        inferred_glob = has_glob_excludes or any(has_glob_metacharacters(i) for i in includes)
        scheme = FilterScheme.GLOB if inferred_glob else FilterScheme.STRUCTURED

    return Configuration(
        header_text=header_text,
        base_dir=base_dir,
        includes=tuple(includes),
        rules=tuple(rules),
        scheme=scheme,
        heading_style=heading_style,
    )


def validate_configuration(config: Configuration, cwd: Path | None = None) -> Configuration:
    """Check a parsed configuration and pin its base directory to an absolute path.

    A relative base directory is resolved against `cwd` with the structured
    scheme, and refused with the glob scheme.

    Args:
        config (Configuration): the parsed configuration
        cwd (Path | None): directory relative base directories are resolved
            against. Defaults to the process working directory.

    Raises:
        MissingBaseDirError: if no base directory is configured
        RelativeBaseDirNotAllowedError: if the base directory is relative with the glob scheme
        BaseDirNotFoundError: if the base directory is not an existing directory
        NoIncludesSpecifiedError: if no include entry is configured

    Returns:
        Configuration: a copy of `config` with an absolute base directory
    """
    if config.base_dir is None:
        raise MissingBaseDirError

    base_dir = config.base_dir
    if not base_dir.is_absolute():
        if config.scheme is FilterScheme.GLOB:
            raise RelativeBaseDirNotAllowedError(base_dir=base_dir)
        base_dir = (cwd or Path.cwd()) / base_dir

    base_dir = base_dir.absolute()
    if not base_dir.is_dir():
        raise BaseDirNotFoundError(base_dir=base_dir)

    if not config.includes:
        raise NoIncludesSpecifiedError

    return config.model_copy(update={"base_dir": base_dir})
