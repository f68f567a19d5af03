from pathlib import Path

import pytest

from promptbuilder import settings as settings_module
from promptbuilder.settings import Settings, env_default


@pytest.mark.unit
def test_settings_defaults(monkeypatch: pytest.MonkeyPatch) -> None:
    monkeypatch.delenv("PROMPTBUILDER_INPUT", raising=False)
    monkeypatch.delenv("PROMPTBUILDER_OUTPUT", raising=False)
    monkeypatch.setattr(settings_module, "ENV_FILE", "")

    settings = Settings()

    assert settings.input == Path("input.txt")
    assert settings.output == Path("output.txt")
    assert settings.heading is None


@pytest.mark.unit
def test_settings_defaults_come_from_environment(monkeypatch: pytest.MonkeyPatch) -> None:
    monkeypatch.setenv("PROMPTBUILDER_OUTPUT", "prompt.md")

    assert Settings().output == Path("prompt.md")


@pytest.mark.unit
def test_env_default_reads_dotenv_file(tmp_path: Path, monkeypatch: pytest.MonkeyPatch) -> None:
    env_file = tmp_path / ".env"
    env_file.write_text("PROMPTBUILDER_INPUT=from-dotenv.txt\n", encoding="utf-8")
    monkeypatch.delenv("PROMPTBUILDER_INPUT", raising=False)
    monkeypatch.setattr(settings_module, "ENV_FILE", str(env_file))

    assert env_default("input", "input.txt") == "from-dotenv.txt"


@pytest.mark.unit
def test_environment_beats_dotenv_file(tmp_path: Path, monkeypatch: pytest.MonkeyPatch) -> None:
    env_file = tmp_path / ".env"
    env_file.write_text("PROMPTBUILDER_INPUT=from-dotenv.txt\n", encoding="utf-8")
    monkeypatch.setenv("PROMPTBUILDER_INPUT", "from-env.txt")
    monkeypatch.setattr(settings_module, "ENV_FILE", str(env_file))

    assert env_default("input", "input.txt") == "from-env.txt"
