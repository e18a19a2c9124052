from __future__ import annotations

import os
from pathlib import Path
from typing import Any

import yaml
from dotenv import dotenv_values, find_dotenv
from pydantic import BaseModel, ConfigDict, Field, field_validator

from folder_to_document.exceptions import ConfigFileError

ENV_PREFIX = "FOLDER_DOC_"


class Settings(BaseModel):
    """Configuration settings for one document generation run."""

    model_config = ConfigDict(arbitrary_types_allowed=True, extra="ignore")

    root: Path = Field(default_factory=Path.cwd, description="Folder to document.")
    output: Path | None = Field(
        default=None,
        description="Output file or directory; derived from the root when empty.",
    )
    include: list[str] = Field(default_factory=list, description="Include globs.")
    strip_comments: bool = Field(default=False, description="Strip source comments.")
    log_file: str = Field(default="", description="Log file path.")
    config: Path | None = Field(default=None, description="YAML configuration file.")

    @field_validator("include", mode="before")
    @classmethod
    def _split_include(cls, value: Any) -> Any:  # noqa: ANN401
        if isinstance(value, str):
            return [v.strip() for v in value.split(",") if v.strip()]
        if value is None:
            return []
        return value


def env_settings(env_file: str | Path | None = None) -> dict[str, Any]:
    """Collect ``FOLDER_DOC_*`` values from a `.env` file and the environment.

    Process environment variables win over the `.env` file.

    Args:
        env_file (str | Path | None): `.env` file to read; the nearest one
            from the working directory when None

    Returns:
        dict[str, Any]: setting names mapped to raw values
    """
    path = env_file if env_file is not None else find_dotenv(usecwd=True)
    raw: dict[str, Any] = dict(dotenv_values(path)) if path else {}
    raw.update(os.environ)
    return {
        key.removeprefix(ENV_PREFIX).lower(): value
        for key, value in raw.items()
        if key.startswith(ENV_PREFIX) and value is not None
    }


def load_yaml_config(path: Path) -> dict[str, Any]:
    """Load a YAML configuration file holding a mapping of settings.

    Keys may use dashes or underscores (``strip-comments`` or ``strip_comments``).

    Args:
        path (Path): YAML file

    Raises:
        ConfigFileError: if the file is unreadable, invalid YAML, or not a mapping

    Returns:
        dict[str, Any]: setting names mapped to values
    """
    try:
        data = yaml.safe_load(path.read_text(encoding="utf-8")) or {}
    except (OSError, yaml.YAMLError) as e:
        raise ConfigFileError(file=path, reason=str(e)) from e
    if not isinstance(data, dict):
        raise ConfigFileError(file=path, reason="top-level value must be a mapping")
    return {str(k).replace("-", "_"): v for k, v in data.items()}


def load_settings(
    cli_values: dict[str, Any] | None = None,
    *,
    env_file: str | Path | None = None,
) -> Settings:
    """Build the settings of a run from every configuration layer.

    Precedence, lowest first: field defaults, `.env` and ``FOLDER_DOC_*``
    environment variables, the YAML file named by ``config``, explicit CLI values.

    Args:
        cli_values (dict[str, Any] | None): values given on the command line;
            None values are treated as not given
        env_file (str | Path | None): `.env` file override

    Returns:
        Settings: the merged settings
    """
    explicit = {k: v for k, v in (cli_values or {}).items() if v is not None}
    merged: dict[str, Any] = env_settings(env_file)
    config = explicit.get("config") or merged.get("config")
    if config:
        merged.update(load_yaml_config(Path(config)))
    merged.update(explicit)
    return Settings(**merged)
