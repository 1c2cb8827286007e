from __future__ import annotations

import os
from pathlib import Path
from typing import TYPE_CHECKING, Any

import yaml
from dotenv import dotenv_values, find_dotenv
from pydantic import BaseModel, ConfigDict, Field, field_validator

from llm_context_gen.exceptions import ConfigFileError

if TYPE_CHECKING:
    from collections.abc import Mapping

ENV_FILE = find_dotenv(usecwd=True)
ENV_PREFIX = "LLM_CONTEXT_"


class Settings(BaseModel):
    """Run configuration of a snapshot, immutable once built."""

    model_config = ConfigDict(arbitrary_types_allowed=True, extra="forbid", frozen=True)

    dir: Path = Field(default=Path("."), description="The directory to process.")
    output: Path = Field(default=Path("llm-context"), description="The output directory.")
    ignore: str = Field(
        default="",
        description="Additional names to ignore (comma-separated).",
    )
    max_files: int = Field(default=2000, ge=0, description="Maximum number of files to process.")
    max_size: int = Field(
        default=500_000,
        ge=0,
        description="Maximum file size to process in bytes.",
    )
    max_depth: int = Field(default=8, ge=0, description="Maximum directory depth.")
    no_gitignore: bool = Field(default=False, description="Do not apply .gitignore rules.")
    log_file: str = Field(default="", description="Log file path.")

    @field_validator("ignore", mode="before")
    @classmethod
    def join_ignore_list(cls, value: Any) -> Any:  # noqa: ANN401
        if isinstance(value, (list, tuple, set, frozenset)):
            return ",".join(str(v) for v in value)
        return value


def env_overrides(environ: Mapping[str, str] | None = None) -> dict[str, str]:
    """Collect `LLM_CONTEXT_*` values from the `.env` file and the environment.

    The process environment wins over the `.env` file.

    Args:
        environ: the environment to read; defaults to `os.environ`

    Returns:
        dict[str, str]: settings field names mapped to their raw values
    """
    raw: dict[str, str] = {}
    if ENV_FILE:
        raw.update({k: v for k, v in dotenv_values(ENV_FILE).items() if v is not None})
    raw.update(os.environ if environ is None else environ)

    out: dict[str, str] = {}
    for key, value in raw.items():
        if not key.startswith(ENV_PREFIX):
            continue
        field = key.removeprefix(ENV_PREFIX).lower()
        if field in Settings.model_fields:
            out[field] = value
    return out


def read_config_file(path: Path) -> dict[str, Any]:
    """Load settings values from a YAML file.

    Keys may be written with dashes (`max-files`) or underscores (`max_files`).

    Args:
        path (Path): the YAML file to read

    Raises:
        ConfigFileError: if the file cannot be read, parsed, or is not a mapping.

    Returns:
        dict[str, Any]: the values found in the file
    """
    try:
        data = yaml.safe_load(path.read_text(encoding="utf-8"))
    except (OSError, yaml.YAMLError) as e:
        raise ConfigFileError(file=path, message=str(e)) from e
    if data is None:
        return {}
    if not isinstance(data, dict):
        raise ConfigFileError(file=path, message="Top-level YAML value must be a mapping.")
    return {str(k).replace("-", "_"): v for k, v in data.items()}


def load_settings(
    overrides: Mapping[str, Any] | None = None,
    config_file: Path | None = None,
    environ: Mapping[str, str] | None = None,
) -> Settings:
    """Build the run settings from every configuration source.

    Precedence, lowest first: field defaults, environment, config file, overrides.

    Args:
        overrides (Mapping[str, Any] | None): explicit values, usually from the command line
        config_file (Path | None): optional YAML config file
        environ (Mapping[str, str] | None): environment to read instead of `os.environ`

    Returns:
        Settings: the validated, frozen settings
    """
    values: dict[str, Any] = dict(env_overrides(environ))
    if config_file is not None:
        values.update(read_config_file(config_file))
    values.update({k: v for k, v in (overrides or {}).items() if v is not None})
    return Settings(**values)
