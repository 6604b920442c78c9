"""Configuration loading from YAML and environment.

The store itself keeps its own settings in {dots_dir}/config (see
dots.store.store_config); this module covers where the store lives and how
the process logs.
"""

import os
from pathlib import Path
from typing import Any

import yaml
from pydantic import Field
from pydantic_settings import BaseSettings, SettingsConfigDict

# Injected by load_config so ${VAR} substitution sees a consistent snapshot
_current_env: dict[str, str] = {}


class StorageConfig(BaseSettings):
    """Store location and ID prefix."""

    model_config = SettingsConfigDict(env_prefix="DOTS_", extra="ignore")

    dir: str = Field(default=".dots", description="Store directory, relative to the project root")
    prefix: str | None = Field(default=None, description="ID prefix; defaults to the store's own config")


class LoggingConfig(BaseSettings):
    """Logging settings."""

    model_config = SettingsConfigDict(env_prefix="LOGGING_", extra="ignore")

    level: str = Field(default="INFO", description="Log level")
    format: str = Field(
        default="%(asctime)s - %(name)s - %(levelname)s - %(message)s",
        description="Log format",
    )


class AppConfig(BaseSettings):
    """Root application config from YAML + env."""

    model_config = SettingsConfigDict(extra="ignore")

    storage: StorageConfig = Field(default_factory=StorageConfig)
    logging: LoggingConfig = Field(default_factory=LoggingConfig)


def _substitute_env(value: Any) -> Any:
    """Replace ${VAR} and $VAR in strings with environment values."""
    if isinstance(value, str):
        if value.startswith("${") and value.endswith("}"):
            key = value[2:-1].strip()
            return _current_env.get(key, value)
        if value.startswith("$") and not value.startswith("${"):
            key = value[1:].strip()
            return _current_env.get(key, value)
        return value
    if isinstance(value, dict):
        return {k: _substitute_env(v) for k, v in value.items()}
    if isinstance(value, list):
        return [_substitute_env(v) for v in value]
    return value


def load_config(config_path: Path | None = None) -> AppConfig:
    """Load config from a YAML file and environment.

    A missing file gives the defaults (still overridable via DOTS_* and
    LOGGING_* variables).
    """
    global _current_env
    _current_env = dict(os.environ)

    path = config_path or Path("dots.yaml")
    if not path.is_file():
        return AppConfig()

    raw = yaml.safe_load(path.read_text(encoding="utf-8")) or {}
    raw = _substitute_env(raw)

    storage = StorageConfig(**(raw.get("storage") or {}))
    logging = LoggingConfig(**(raw.get("logging") or {}))
    return AppConfig(storage=storage, logging=logging)


def resolve_dots_dir(config: AppConfig, base_dir: Path | None = None) -> Path:
    """Absolute store directory for config, relative paths taken from base_dir (default cwd)."""
    path = Path(config.storage.dir)
    if path.is_absolute():
        return path
    return (base_dir or Path.cwd()) / path
