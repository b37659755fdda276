"""Configuration management for EuPathDB annotation retrieval."""

from __future__ import annotations

import os
from collections.abc import Iterable, Mapping
from pathlib import Path
from typing import Any, Literal

import yaml
from pydantic import BaseModel, ConfigDict, Field, ValidationError, field_validator

from eupathdb.common.exceptions import ConfigLoadError

DEFAULT_ENV_PREFIX = "EUPATHDB__"
DEFAULT_USER_AGENT = "eupathdb-annotations/0.1.0"


def _merge_dicts(base: dict[str, Any], overrides: Mapping[str, Any]) -> dict[str, Any]:
    """Recursively merge overrides into base and return a copy.

    Args:
        base: Base dictionary to merge into.
        overrides: Dictionary with override values.

    Returns:
        New dictionary with merged values.
    """

    result = dict(base)
    for key, value in overrides.items():
        if isinstance(value, Mapping) and isinstance(result.get(key), Mapping):
            result[key] = _merge_dicts(dict(result[key]), value)
        else:
            result[key] = value
    return result


def _assign_path(root: dict[str, Any], path: Iterable[str], value: Any) -> None:
    current = root
    *parents, last = list(path)
    for segment in parents:
        current = current.setdefault(segment, {})
    current[last] = value


def _parse_scalar(value: str) -> Any:
    try:
        parsed = yaml.safe_load(value)
    except yaml.YAMLError:
        return value
    return parsed


def _load_env_overrides(prefix: str) -> dict[str, Any]:
    if not prefix:
        return {}
    result: dict[str, Any] = {}
    for key, value in list(os.environ.items()):
        if not key.startswith(prefix):
            continue
        suffix = key[len(prefix) :]
        path = [segment.lower() for segment in suffix.split("__") if segment]
        if not path:
            continue
        _assign_path(result, path, _parse_scalar(value))
    return result


def parse_cli_overrides(values: Iterable[str]) -> dict[str, Any]:
    """Convert ``section.key=value`` strings into a nested override mapping."""

    overrides: dict[str, Any] = {}
    for item in values:
        if "=" not in item:
            raise ConfigLoadError(f"Overrides must be in KEY=VALUE format: {item!r}")
        key, value = item.split("=", 1)
        path = [segment.strip() for segment in key.split(".") if segment.strip()]
        if not path:
            raise ConfigLoadError("Override key must not be empty")
        _assign_path(overrides, path, _parse_scalar(value))
    return overrides


class HTTPSettings(BaseModel):
    """Transport settings shared by GET and POST queries."""

    model_config = ConfigDict(populate_by_name=True)

    base_url_template: str = Field(default="http://{provider}.org")
    timeout_sec: float = Field(default=600.0, gt=0, alias="timeout")
    post_timeout_sec: float = Field(default=10.0, gt=0, alias="post_timeout")
    headers: dict[str, str] = Field(
        default_factory=lambda: {"User-Agent": DEFAULT_USER_AGENT, "Accept": "application/json"}
    )

    @field_validator("base_url_template")
    @classmethod
    def validate_template(cls, value: str) -> str:
        if "{provider}" not in value:
            raise ValueError("base_url_template must contain a '{provider}' placeholder")
        return value.rstrip("/")


class QuerySettings(BaseModel):
    """Which remote questions are used for each flattening variant."""

    attributes_endpoint: str = Field(default="GeneQuestions/GenesByTaxonGene")
    table_endpoint: str = Field(default="GeneQuestions/GenesByTaxon")
    response_format: str = Field(default="json")


class CsvFormatSettings(BaseModel):
    """Formatting options for CSV outputs."""

    encoding: str = Field(default="utf-8")
    sep: str = Field(default=",")
    na_rep: str | None = Field(default=None)
    line_terminator: str | None = Field(default=None)


class ParquetFormatSettings(BaseModel):
    """Formatting options for Parquet outputs."""

    compression: str | None = Field(default="snappy")


class OutputSettings(BaseModel):
    """Where and how flattened tables are written."""

    dir: Path = Field(default=Path("data/output/eupathdb"))
    format: Literal["csv", "parquet"] = Field(default="csv")
    csv: CsvFormatSettings = Field(default_factory=CsvFormatSettings)
    parquet: ParquetFormatSettings = Field(default_factory=ParquetFormatSettings)


class IOSettings(BaseModel):
    """I/O configuration namespace."""

    output: OutputSettings = Field(default_factory=OutputSettings)


class RuntimeSettings(BaseModel):
    """Execution-related toggles exposed to the CLI."""

    workers: int = Field(default=1, ge=1)
    dry_run: bool = Field(default=False)
    validate_output: bool = Field(default=True)


class FileLoggingSettings(BaseModel):
    """File logging configuration."""

    enabled: bool = Field(default=False)
    path: Path = Field(default=Path("logs/eupathdb.log"))
    max_bytes: int = Field(default=10485760, description="Maximum file size in bytes (10MB)")
    backup_count: int = Field(default=5)


class ConsoleLoggingSettings(BaseModel):
    """Console logging configuration."""

    format: Literal["text", "json"] = Field(default="text", description="Console output format")


class LoggingSettings(BaseModel):
    """Structured logging configuration."""

    level: Literal["DEBUG", "INFO", "WARNING", "ERROR", "CRITICAL"] = Field(default="INFO")
    file: FileLoggingSettings = Field(default_factory=FileLoggingSettings)
    console: ConsoleLoggingSettings = Field(default_factory=ConsoleLoggingSettings)


class PipelineConfig(BaseModel):
    """Top-level configuration for annotation retrieval."""

    http: HTTPSettings = Field(default_factory=HTTPSettings)
    query: QuerySettings = Field(default_factory=QuerySettings)
    io: IOSettings = Field(default_factory=IOSettings)
    runtime: RuntimeSettings = Field(default_factory=RuntimeSettings)
    logging: LoggingSettings = Field(default_factory=LoggingSettings)


def load_config(
    config_path: Path | str | None = None,
    *,
    overrides: Mapping[str, Any] | None = None,
    env_prefix: str = DEFAULT_ENV_PREFIX,
) -> PipelineConfig:
    """Load the configuration applying layered overrides.

    Layers, lowest precedence first: YAML file, ``EUPATHDB__`` environment
    variables (``EUPATHDB__HTTP__TIMEOUT_SEC=30``), explicit ``overrides``.
    """

    base_data: dict[str, Any] = {}
    if config_path is not None:
        path = Path(config_path)
        if not path.exists():
            raise ConfigLoadError(f"Configuration file not found: {path}", config_file=str(path))
        try:
            with path.open("r", encoding="utf-8") as handle:
                base_data = yaml.safe_load(handle) or {}
        except yaml.YAMLError as exc:
            raise ConfigLoadError(f"Failed to parse configuration file: {exc}", config_file=str(path), cause=exc) from exc
        except OSError as exc:  # pragma: no cover - filesystem errors
            raise ConfigLoadError(f"Unable to read configuration file: {exc}", config_file=str(path), cause=exc) from exc
        if not isinstance(base_data, Mapping):
            raise ConfigLoadError("Configuration root must be a mapping", config_file=str(path))

    merged = _merge_dicts(base_data, _load_env_overrides(env_prefix))
    if overrides:
        merged = _merge_dicts(merged, overrides)

    try:
        return PipelineConfig.model_validate(merged)
    except ValidationError as exc:
        raise ConfigLoadError(str(exc), config_file=None if config_path is None else str(config_path), cause=exc) from exc


__all__ = [
    "ConsoleLoggingSettings",
    "CsvFormatSettings",
    "DEFAULT_ENV_PREFIX",
    "FileLoggingSettings",
    "HTTPSettings",
    "IOSettings",
    "LoggingSettings",
    "OutputSettings",
    "ParquetFormatSettings",
    "PipelineConfig",
    "QuerySettings",
    "RuntimeSettings",
    "load_config",
    "parse_cli_overrides",
]
