"""Configuration for the template compiler.

A config file is optional; every field has a default:

    default_key_name: index
    default_value_name: value
    function_name: render
"""

from __future__ import annotations

import keyword
from pathlib import Path

import yaml
from pydantic import BaseModel, Field, ValidationError, field_validator

from tmplc.exceptions import ConfigError

# Prefix of every identifier the compiler generates.
RESERVED_PREFIX = "_tmpl_"


class CompilerConfig(BaseModel):
    """Compiler settings."""

    model_config = {"extra": "forbid", "frozen": True}

    default_key_name: str = Field(
        default="index", description="Loop key variable when {{each}} names none"
    )
    default_value_name: str = Field(
        default="value", description="Loop value variable when {{each}} names none"
    )
    function_name: str = Field(
        default="render", description="Name of the generated Python function"
    )
    filename_prefix: str = Field(
        default="<tmplc",
        description="Prefix of the pseudo filename used for generated code",
    )
    expose_arguments: bool = Field(
        default=True,
        description="Make `data` and `options` visible to template expressions",
    )

    @field_validator("default_key_name", "default_value_name", "function_name")
    @classmethod
    def check_identifier(cls, value: str) -> str:
        if not value.isidentifier() or keyword.iskeyword(value):
            raise ValueError(f"{value!r} is not a valid identifier")
        if value.startswith(RESERVED_PREFIX):
            raise ValueError(f"{value!r} uses the reserved prefix {RESERVED_PREFIX!r}")
        return value


def load_config(path: str | Path) -> CompilerConfig:
    """Load a CompilerConfig from a YAML file."""
    path = Path(path)
    try:
        raw = path.read_text(encoding="utf-8")
    except OSError as exc:
        raise ConfigError(f"Could not read config file: {path}") from exc

    try:
        data = yaml.safe_load(raw) or {}
    except yaml.YAMLError as exc:
        raise ConfigError(f"Invalid YAML in config file: {path}") from exc

    if not isinstance(data, dict):
        raise ConfigError(f"Config file must contain a mapping: {path}")

    try:
        return CompilerConfig.model_validate(data)
    except ValidationError as exc:
        raise ConfigError(f"Invalid config in {path}:\n{exc}") from exc
