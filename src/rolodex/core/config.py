"""Rolodex configuration: Pydantic model, load, and save."""

from __future__ import annotations

import os
from pathlib import Path
from typing import Any

from pydantic import BaseModel, Field, field_validator

from rolodex.core.constants import (
    CONFIG_FILENAME,
    DB_FILENAME,
    DEFAULT_LOG_LEVEL,
    ROLODEX_DIR_NAME,
)
from rolodex.core.exceptions import ConfigError, ConfigNotFoundError


def rolodex_dir() -> Path:
    """Return the Rolodex data directory, creating it if needed.

    Defaults to ``~/.rolodex``; ``ROLODEX_HOME`` overrides it. The directory
    is private to the current user (mode 0700).
    """
    if env_home := os.environ.get("ROLODEX_HOME"):
        d = Path(env_home).expanduser()
    else:
        d = Path.home() / ROLODEX_DIR_NAME
    d.mkdir(mode=0o700, parents=True, exist_ok=True)
    return d


# ---------------------------------------------------------------------------
# Sub-models
# ---------------------------------------------------------------------------


class DatabaseConfig(BaseModel):
    name: str = DB_FILENAME
    directory: str = ""  # empty → use rolodex_dir()

    @field_validator("name")
    @classmethod
    def validate_name(cls, v: str) -> str:
        v = v.strip()
        if not v or v in (".", ".."):
            raise ValueError("Database name must not be empty")
        if "/" in v or "\\" in v:
            raise ValueError(
                "Database name must be a bare file name. "
                "Use database.directory to choose where it lives."
            )
        return v


class LoggingConfig(BaseModel):
    level: str = DEFAULT_LOG_LEVEL
    format: str = "text"  # "text" | "json"

    @field_validator("level")
    @classmethod
    def validate_level(cls, v: str) -> str:
        allowed = {"DEBUG", "INFO", "WARNING", "ERROR"}
        if v.upper() not in allowed:
            raise ValueError(f"Log level must be one of: {allowed}")
        return v.upper()

    @field_validator("format")
    @classmethod
    def validate_format(cls, v: str) -> str:
        if v.lower() not in ("text", "json"):
            raise ValueError("Log format must be 'text' or 'json'")
        return v.lower()


# ---------------------------------------------------------------------------
# Root config
# ---------------------------------------------------------------------------


class RolodexConfig(BaseModel):
    """Root Rolodex configuration model."""

    database: DatabaseConfig = Field(default_factory=DatabaseConfig)
    logging: LoggingConfig = Field(default_factory=LoggingConfig)

    # Computed paths (not stored in config file)
    _config_path: Path | None = None

    @property
    def db_directory(self) -> Path:
        if self.database.directory:
            return Path(self.database.directory).expanduser()
        return rolodex_dir()

    @property
    def db_path(self) -> Path:
        return self.db_directory / self.database.name


# ---------------------------------------------------------------------------
# Load / save
# ---------------------------------------------------------------------------


def _config_file_path() -> Path:
    if env_path := os.environ.get("ROLODEX_CONFIG"):
        return Path(env_path)
    return rolodex_dir() / CONFIG_FILENAME


def load_config(path: Path | None = None) -> RolodexConfig:
    """
    Load RolodexConfig from TOML file, overlaid with environment variables.

    Priority (highest to lowest):
      1. Environment variables (ROLODEX_*)
      2. Config file (~/.rolodex/config.toml)
      3. Built-in defaults

    A missing default config file is not an error; a missing *path* is.
    """
    import tomllib

    cfg_path = path or _config_file_path()

    data: dict[str, Any] = {}
    if cfg_path.exists():
        try:
            with open(cfg_path, "rb") as f:
                data = tomllib.load(f)
        except Exception as exc:
            raise ConfigError(f"Cannot read config file {cfg_path}: {exc}") from exc
    elif path is not None:
        raise ConfigNotFoundError(f"Config file not found: {cfg_path}")

    _apply_env_overrides(data)

    try:
        config = RolodexConfig.model_validate(data)
    except Exception as exc:
        raise ConfigError(f"Invalid config at {cfg_path}: {exc}") from exc

    config._config_path = cfg_path
    return config


def _apply_env_overrides(data: dict[str, Any]) -> None:
    """Overlay ROLODEX_* environment variables onto the parsed TOML data."""
    if name := os.environ.get("ROLODEX_DB_NAME"):
        data.setdefault("database", {})["name"] = name
    if directory := os.environ.get("ROLODEX_DB_DIR"):
        data.setdefault("database", {})["directory"] = directory
    if level := os.environ.get("ROLODEX_LOG_LEVEL"):
        data.setdefault("logging", {})["level"] = level


def save_config(config_data: dict[str, Any], path: Path | None = None) -> Path:
    """Write config dict to TOML file with secure permissions (0600)."""
    import tomli_w

    cfg_path = path or _config_file_path()
    cfg_path.parent.mkdir(mode=0o700, parents=True, exist_ok=True)

    # Write atomically
    tmp_path = cfg_path.with_suffix(".tmp")
    try:
        with open(tmp_path, "wb") as f:
            tomli_w.dump(config_data, f)
        tmp_path.replace(cfg_path)
    except Exception as exc:
        tmp_path.unlink(missing_ok=True)
        raise ConfigError(f"Cannot write config to {cfg_path}: {exc}") from exc

    cfg_path.chmod(0o600)
    return cfg_path
