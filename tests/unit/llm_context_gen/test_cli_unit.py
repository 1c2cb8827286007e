from __future__ import annotations

from pathlib import Path
from typing import TYPE_CHECKING

import pytest

from llm_context_gen import __version__, cli
from llm_context_gen.exceptions import OutputDirectoryError
from llm_context_gen.traversal import RunState

if TYPE_CHECKING:
    from pytest_mock import MockerFixture


@pytest.mark.unit
def test_parse_args_parses_limits() -> None:
    settings = cli.parse_args(
        [
            "--dir",
            "project",
            "-o",
            "ctx",
            "--ignore",
            "vendor,tmp",
            "-m",
            "10",
            "--max-size",
            "1234",
            "--max-depth",
            "3",
            "--no-gitignore",
        ],
    )

    assert settings.dir == Path("project")
    assert settings.output == Path("ctx")
    assert settings.ignore == "vendor,tmp"
    assert settings.max_files == 10
    assert settings.max_size == 1234
    assert settings.max_depth == 3
    assert settings.no_gitignore is True


@pytest.mark.unit
def test_parse_args_defaults() -> None:
    settings = cli.parse_args([])

    assert settings.dir == Path(".")
    assert settings.output == Path("llm-context")
    assert settings.max_files == 2000
    assert settings.no_gitignore is False


@pytest.mark.unit
def test_parse_args_config_file_is_overridden_by_flags(tmp_path: Path) -> None:
    config = tmp_path / "llm-context.yaml"
    config.write_text("max-files: 5\nignore: [vendor]\n", encoding="utf-8")

    settings = cli.parse_args(["--config", str(config), "--max-files", "7"])

    assert settings.max_files == 7
    assert settings.ignore == "vendor"


@pytest.mark.unit
def test_parse_args_version_flag(capsys: pytest.CaptureFixture[str]) -> None:
    with pytest.raises(SystemExit) as exc_info:
        cli.parse_args(["--version"])

    assert exc_info.value.code == 0
    captured = capsys.readouterr()
    assert __version__ in captured.out


@pytest.mark.unit
def test_main_rejects_invalid_settings(tmp_path: Path) -> None:
    bad = tmp_path / "bad.yaml"
    bad.write_text("colour: blue\n", encoding="utf-8")

    assert cli.main(["--max-files", "-1"]) == 2
    assert cli.main(["--config", str(bad)]) == 2
    assert cli.main(["--config", str(tmp_path / "missing.yaml")]) == 2


@pytest.mark.unit
def test_main_startup_failure_returns_one(mocker: MockerFixture) -> None:
    mocker.patch.object(
        cli,
        "run_snapshot",
        side_effect=OutputDirectoryError(folder=Path("out"), reason="denied"),
    )

    assert cli.main(["--output", "out"]) == 1


@pytest.mark.unit
def test_main_prints_summary(
    tmp_path: Path,
    mocker: MockerFixture,
    capsys: pytest.CaptureFixture[str],
) -> None:
    run = mocker.patch.object(
        cli,
        "run_snapshot",
        return_value=RunState(files_processed=3, budget_exhausted=True),
    )

    exit_code = cli.main(["--dir", str(tmp_path), "--output", "ctx", "--max-files", "3"])

    assert exit_code == 0
    run.assert_called_once()
    out = capsys.readouterr().out
    assert "Maximum file limit reached (3)" in out
    assert "Context files generated in: ctx" in out
    assert "Total files processed: 3" in out


@pytest.mark.unit
def test_main_attaches_and_releases_log_file(tmp_path: Path, mocker: MockerFixture) -> None:
    mocker.patch.object(cli, "run_snapshot", side_effect=OutputDirectoryError(folder=tmp_path, reason="x"))
    attach = mocker.patch.object(cli, "attach_log_file")
    detach = mocker.patch.object(cli, "detach_log_file")
    log_file = tmp_path / "run.log"

    assert cli.main(["--log-file", str(log_file)]) == 1
    attach.assert_called_once_with(str(log_file))
    detach.assert_called_once_with(attach.return_value)
