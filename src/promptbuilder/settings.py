from __future__ import annotations

import os
from pathlib import Path

from dotenv import dotenv_values, find_dotenv
from pydantic import BaseModel, ConfigDict, Field

from promptbuilder.config import HeadingStyle

ENV_FILE = find_dotenv(usecwd=True)
ENV_PREFIX = "PROMPTBUILDER_"


def env_default(name: str, default: str) -> str:
    """Look up a default in the environment, then in the nearest `.env` file.

    Args:
        name (str): the setting name, without the `PROMPTBUILDER_` prefix
        default (str): value used when neither source defines the setting

    Returns:
        str: the resolved default
    """
    key = ENV_PREFIX + name.upper()
    if key in os.environ:
        return os.environ[key]
    value = dotenv_values(ENV_FILE).get(key) if ENV_FILE else None
    return value if value is not None else default


class Settings(BaseModel):
    """Configuration settings for the promptbuilder command line."""

    model_config = ConfigDict(arbitrary_types_allowed=True, frozen=True)

    input: Path = Field(
        default_factory=lambda: Path(env_default("input", "input.txt")),
        description="Configuration file path.",
    )
    output: Path = Field(
        default_factory=lambda: Path(env_default("output", "output.txt")),
        description="Output file path.",
    )
    log_file: str = Field(
        default_factory=lambda: env_default("log_file", ""),
        description="Log file path.",
    )
    heading: HeadingStyle | None = Field(
        default=None,
        description="Override the heading style of the configuration file.",
    )
