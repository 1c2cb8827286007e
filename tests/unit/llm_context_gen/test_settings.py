from __future__ import annotations

from pathlib import Path

import pytest
from pydantic import ValidationError

from llm_context_gen.exceptions import ConfigFileError
from llm_context_gen.settings import Settings, env_overrides, load_settings, read_config_file


@pytest.mark.unit
def test_settings_defaults() -> None:
    settings = Settings()

    assert settings.dir == Path(".")
    assert settings.output == Path("llm-context")
    assert not settings.ignore
    assert settings.max_files == 2000
    assert settings.max_size == 500_000
    assert settings.max_depth == 8
    assert settings.no_gitignore is False


@pytest.mark.unit
def test_settings_are_frozen_and_validated() -> None:
    settings = Settings()

    with pytest.raises(ValidationError):
        settings.max_files = 1  # type: ignore[misc]
    with pytest.raises(ValidationError):
        Settings(max_depth=-1)
    with pytest.raises(ValidationError):
        Settings(unknown=True)  # type: ignore[call-arg]


@pytest.mark.unit
def test_settings_ignore_accepts_a_list() -> None:
    assert Settings(ignore=["vendor", "tmp"]).ignore == "vendor,tmp"  # type: ignore[arg-type]


@pytest.mark.unit
def test_env_overrides_reads_prefixed_fields() -> None:
    env = {"LLM_CONTEXT_MAX_FILES": "10", "LLM_CONTEXT_NOPE": "x", "HOME": "/root"}

    assert env_overrides(env) == {"max_files": "10"}


@pytest.mark.unit
def test_read_config_file_normalizes_keys(tmp_path: Path) -> None:
    config = tmp_path / "llm-context.yaml"
    config.write_text("max-files: 5\nignore:\n  - vendor\n", encoding="utf-8")

    assert read_config_file(config) == {"max_files": 5, "ignore": ["vendor"]}


@pytest.mark.unit
def test_read_config_file_rejects_non_mapping(tmp_path: Path) -> None:
    config = tmp_path / "bad.yaml"
    config.write_text("- a\n- b\n", encoding="utf-8")

    with pytest.raises(ConfigFileError):
        read_config_file(config)
    with pytest.raises(ConfigFileError):
        read_config_file(tmp_path / "missing.yaml")


@pytest.mark.unit
def test_load_settings_precedence(tmp_path: Path) -> None:
    config = tmp_path / "llm-context.yaml"
    config.write_text("max_files: 5\nmax_depth: 3\n", encoding="utf-8")
    env = {"LLM_CONTEXT_MAX_FILES": "7", "LLM_CONTEXT_MAX_SIZE": "100"}

    settings = load_settings({"max_depth": 4, "output": None}, config_file=config, environ=env)

    assert settings.max_files == 5
    assert settings.max_size == 100
    assert settings.max_depth == 4
    assert settings.output == Path("llm-context")
