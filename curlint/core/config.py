"""
Typed configuration for a lint run.

The config file is optional: a ``curlint.yaml`` at the corpus root is picked up
automatically, and CLI flags are layered on top of whatever it sets.
"""

from __future__ import annotations

import codecs
from pathlib import Path
from typing import Any, Dict, List, Literal

import yaml
from pydantic import BaseModel, ConfigDict, Field, ValidationError, field_validator

from .errors import ConfigError

DEFAULT_CONFIG_NAME = "curlint.yaml"


class LintConfig(BaseModel):
    """Knobs that control how the corpus is discovered, parsed, and judged."""

    model_config = ConfigDict(extra="forbid")

    plan_title: str = Field(default="Plan", min_length=1, description="Title of the note holding the session plan.")
    session_heading_level: int = Field(default=2, ge=1, le=6)
    title_source: Literal["filename", "heading"] = "filename"
    include: List[str] = Field(default_factory=lambda: ["**/*.md"])
    exclude: List[str] = Field(default_factory=list)
    encoding: str = "utf-8"
    report_orphans: bool = True
    fail_on_warning: bool = False

    @field_validator("include", "exclude", mode="before")
    @classmethod
    def strip_patterns(cls, value: Any) -> Any:
        if value is None:
            return []
        if isinstance(value, str):
            value = [value]
        if isinstance(value, list):
            cleaned = []
            for item in value:
                if isinstance(item, str):
                    item = item.strip()
                    if not item:
                        continue
                cleaned.append(item)
            return cleaned
        return value

    @field_validator("plan_title", mode="before")
    @classmethod
    def strip_title(cls, value: Any) -> Any:
        return value.strip() if isinstance(value, str) else value

    @field_validator("encoding")
    @classmethod
    def known_encoding(cls, value: str) -> str:
        try:
            codecs.lookup(value)
        except LookupError as exc:
            raise ValueError(f"unknown encoding '{value}'") from exc
        return value


def read_yaml_file(path: Path) -> Dict[str, Any]:
    """Load a YAML file and return a dictionary."""
    try:
        with path.open("r", encoding="utf-8") as handle:
            data = yaml.safe_load(handle) or {}
    except OSError as exc:
        raise ConfigError(f"Cannot read config file {path}: {exc}") from exc
    except yaml.YAMLError as exc:
        raise ConfigError(f"Invalid YAML in {path}: {exc}") from exc
    if not isinstance(data, dict):
        raise ConfigError(f"Expected mapping at root of {path}, received {type(data).__name__}")
    return data


def load_lint_config(path: Path) -> LintConfig:
    """Parse a config YAML into a typed model."""
    data = read_yaml_file(path)
    try:
        return LintConfig.model_validate(data)
    except ValidationError as exc:
        details = "; ".join(
            f"{'.'.join(str(loc) for loc in error['loc'])}: {error['msg']}" for error in exc.errors()
        )
        raise ConfigError(f"Invalid lint config in {path}: {details}") from exc


def resolve_config(corpus_dir: Path, config_path: Path | None = None) -> LintConfig:
    """Return the explicit config, the corpus-local ``curlint.yaml``, or defaults."""
    if config_path is not None:
        return load_lint_config(config_path)
    candidate = corpus_dir / DEFAULT_CONFIG_NAME
    if candidate.is_file():
        return load_lint_config(candidate)
    return LintConfig()


def merge_overrides(base: LintConfig, overrides: Dict[str, Any]) -> LintConfig:
    """
    Return a new LintConfig with CLI overrides applied on top of the base config.

    ``None`` values mean "flag not given" and are dropped.
    """
    payload = base.model_dump()
    payload.update({key: value for key, value in overrides.items() if value is not None})
    try:
        return LintConfig.model_validate(payload)
    except ValidationError as exc:
        raise ConfigError(f"Invalid command-line overrides: {exc}") from exc


__all__ = [
    "DEFAULT_CONFIG_NAME",
    "LintConfig",
    "load_lint_config",
    "merge_overrides",
    "read_yaml_file",
    "resolve_config",
]
