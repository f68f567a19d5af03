from __future__ import annotations

from typing import TYPE_CHECKING

import pytest

from promptbuilder import cli

if TYPE_CHECKING:
    from pathlib import Path

    from pytest_mock import MockerFixture


@pytest.mark.integration
def test_main_skips_binary_and_unreadable_includes(tmp_path: Path, capsys: pytest.CaptureFixture[str]) -> None:
    repo = tmp_path / "repo"
    (repo / "src").mkdir(parents=True)
    (repo / "src" / "app.py").write_text("print('hi')\n", encoding="utf-8")
    (repo / "src" / "icon.ico").write_bytes(b"\x00\x00\x01\x00")
    cfg = tmp_path / "input.txt"
    cfg.write_text(f"---\nbasedir={repo}\ninclude=missing\ninclude=src\n", encoding="utf-8")
    output = tmp_path / "out.md"

    exit_code = cli.main(["--input", str(cfg), "--output", str(output)])

    assert exit_code == 0
    content = output.read_text(encoding="utf-8")
    assert "# src/app.py\n" in content
    assert "icon.ico" not in content
    assert "Successfully processed 1 files" in capsys.readouterr().out


@pytest.mark.integration
def test_main_zero_files_is_a_warning(tmp_path: Path, capsys: pytest.CaptureFixture[str]) -> None:
    cfg = tmp_path / "input.txt"
    cfg.write_text(f"Only a header\n---\nbasedir={tmp_path}\ninclude=*.go\n", encoding="utf-8")
    output = tmp_path / "out.md"

    exit_code = cli.main(["--input", str(cfg), "--output", str(output)])

    assert exit_code == 0
    assert output.read_text(encoding="utf-8") == "Only a header\n\n"
    assert "Warning: No files found" in capsys.readouterr().out


@pytest.mark.integration
def test_main_missing_config_file_exits_nonzero(tmp_path: Path, capsys: pytest.CaptureFixture[str]) -> None:
    exit_code = cli.main(["--input", str(tmp_path / "nope.txt"), "--output", str(tmp_path / "out.md")])

    assert exit_code == 1
    assert "nope.txt" in capsys.readouterr().err


@pytest.mark.integration
def test_main_unwritable_output_exits_nonzero(tmp_path: Path, mocker: MockerFixture) -> None:
    (tmp_path / "a.txt").write_text("a\n", encoding="utf-8")
    cfg = tmp_path / "input.txt"
    cfg.write_text(f"---\nbasedir={tmp_path}\ninclude=a.txt\n", encoding="utf-8")
    find_files = mocker.spy(cli, "find_files")

    exit_code = cli.main(["--input", str(cfg), "--output", str(tmp_path / "no-dir" / "out.md")])

    assert exit_code == 1
    assert find_files.call_count == 1


@pytest.mark.integration
def test_main_relative_base_dir_with_glob_includes_is_refused(tmp_path: Path) -> None:
    cfg = tmp_path / "input.txt"
    cfg.write_text("---\nbasedir=.\ninclude=*.py\n", encoding="utf-8")

    assert cli.main(["--input", str(cfg), "--output", str(tmp_path / "out.md")]) == 1
