"""Application configuration: settings schema, config.yaml loader, and logging setup"""

import logging
import os
from pathlib import Path
from typing import Any

import yaml
from pydantic import BaseModel, Field, field_validator


CONFIG_FILE = "config.yaml"
LOG_FORMAT = "%(asctime)s %(levelname)s %(name)s: %(message)s"
LOG_LEVELS = ("DEBUG", "INFO", "WARNING", "ERROR", "CRITICAL")


class Settings(BaseModel):
    app_name:          str = "mdblocks"
    parser_config:     str = Field(default="gfm-like",          description="MarkdownIt parser preset name")
    diagram_languages: list[str] = Field(default=["mermaid"],  description="Fence languages parsed as diagram blocks")
    staging_dir:       str = Field(default=".mdblocks/staging", description="Staging directory for extracted Document JSON")
    output_dir:        str = Field(default="dist",              description="Directory for rendered markdown files")
    log_level:         str = Field(default="WARNING", pattern="^(DEBUG|INFO|WARNING|ERROR|CRITICAL)$")

    @field_validator("diagram_languages", mode="before")
    @classmethod
    def _split_languages(cls, value: Any) -> Any:
        """Accept a comma-separated string (env vars) as well as a list."""
        if isinstance(value, str):
            return [lang.strip() for lang in value.split(",") if lang.strip()]
        return value

    @field_validator("log_level", mode="before")
    @classmethod
    def _upper_level(cls, value: Any) -> Any:
        return value.upper() if isinstance(value, str) else value


def load_config(overrides: dict[str, Any] = None) -> Settings:
    """Load Settings from config.yaml, then MDBLOCKS_<FIELD> env vars, then non-None CLI overrides."""
    data: dict[str, Any] = {}
    if Path(CONFIG_FILE).exists():
        try:
            data = yaml.safe_load(Path(CONFIG_FILE).read_text()) or {}
        except yaml.YAMLError as e:
            raise ValueError(f"Invalid {CONFIG_FILE}: {e}") from e
        if not isinstance(data, dict):
            raise ValueError(f"Invalid {CONFIG_FILE}: expected a mapping, got {type(data).__name__}")

    for name in Settings.model_fields:
        if val := os.getenv(f"MDBLOCKS_{name.upper()}"):
            data[name] = val

    if overrides:
        data.update({k: v for k, v in overrides.items() if v is not None})
    return Settings(**data)


def configure_logging(level: str = "WARNING") -> None:
    """Route mdblocks log records to stderr at the given level."""
    logging.basicConfig(level=level.upper(), format=LOG_FORMAT)
    logging.getLogger("mdblocks").setLevel(level.upper())
