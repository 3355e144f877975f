"""
progress_reporter Application Settings - Centralized Configuration

Users can modify settings via:
1. Settings file (~/.progress_reporter/settings.toml or custom path)
2. Environment variables (PROGRESS_REPORTER_*)
3. Programmatic access via the SettingsManager singleton

Settings only seed new coordinators; a coordinator's own attributes can still
be changed freely after construction.
"""

from __future__ import annotations

import json
import os
import tomllib
from pathlib import Path
from typing import Annotated, Any, Literal

import tomli_w
from pydantic import BaseModel, ConfigDict, Field, ValidationError, field_validator

from progress_reporter.utils.logging import get_logger

logger = get_logger(__name__)

ENV_PREFIX = "PROGRESS_REPORTER_"
ENV_SETTINGS_PATH = f"{ENV_PREFIX}SETTINGS_PATH"
LOCAL_SETTINGS_FILE = "progress_reporter_settings.toml"

PositiveFloat = Annotated[float, Field(gt=0)]
PositiveInt = Annotated[int, Field(gt=0)]


# =============================================================================
# Settings Models
# =============================================================================


class BaseSettings(BaseModel):
    """Base settings with common configuration."""

    model_config = ConfigDict(
        validate_assignment=True,
        extra="forbid",
        str_strip_whitespace=True,
    )


class EstimatorSettings(BaseSettings):
    """Time-remaining estimator parameters."""

    time_per_increment_s: PositiveFloat = Field(
        default=0.5,
        description="Anticipated seconds for one reported increment",
    )
    increment_batch_size: PositiveInt = Field(
        default=1,
        description="Increments expected to run concurrently in one batch",
    )


class LoggingSettings(BaseSettings):
    """Logging output parameters."""

    level: Literal["DEBUG", "INFO", "WARNING", "ERROR"] = "INFO"
    log_file: Path | None = Field(default=None, description="Optional log file path")
    rich_tracebacks: bool = True
    show_time: bool = True
    show_path: bool = False

    @field_validator("level", mode="before")
    @classmethod
    def normalize_level(cls, v: Any) -> Any:
        """Accept lower-case level names."""
        return v.upper() if isinstance(v, str) else v


class ApplicationSettings(BaseSettings):
    """Root settings container with all subsections."""

    estimator: EstimatorSettings = Field(default_factory=EstimatorSettings)
    logging: LoggingSettings = Field(default_factory=LoggingSettings)

    def to_dict(self) -> dict[str, Any]:
        """Convert to a nested, serializable dictionary."""
        return self.model_dump(mode="json", exclude_none=True)

    @classmethod
    def from_dict(cls, data: dict[str, Any]) -> "ApplicationSettings":
        """Create from nested dictionary."""
        return cls.model_validate(data)


# =============================================================================
# Settings Manager - Singleton for Global Access
# =============================================================================


class SettingsManager:
    """
    Singleton manager for application settings.

    Usage:
        from progress_reporter.settings import get_settings

        s = get_settings()
        print(s.estimator.time_per_increment_s)

        get_settings_manager().update(**{"estimator.increment_batch_size": 4})
        save_settings("my_settings.toml")
        load_settings("my_settings.toml")
    """

    _instance: "SettingsManager | None" = None
    _settings: ApplicationSettings
    _settings_path: Path | None = None

    def __new__(cls) -> "SettingsManager":
        if cls._instance is None:
            cls._instance = super().__new__(cls)
            cls._instance._settings = ApplicationSettings()
            cls._instance._settings_path = None
        return cls._instance

    @property
    def settings(self) -> ApplicationSettings:
        """Get current settings."""
        return self._settings

    @property
    def path(self) -> Path | None:
        """Get path of loaded settings file."""
        return self._settings_path

    def reset(self) -> None:
        """Reset to default settings."""
        self._settings = ApplicationSettings()
        self._settings_path = None

    def update(self, **kwargs: Any) -> None:
        """
        Update settings from keyword arguments.

        Nested fields use dotted keys, e.g. ``"estimator.time_per_increment_s"``.

        Raises:
            KeyError: If a key does not name an existing setting
            pydantic.ValidationError: If a value fails validation
        """
        for key, value in kwargs.items():
            parts = key.split(".")
            obj: BaseModel = self._settings
            for part in parts[:-1]:
                child = getattr(obj, part, None)
                if not isinstance(child, BaseModel):
                    raise KeyError(f"Unknown settings section: {key}")
                obj = child
            if parts[-1] not in type(obj).model_fields:
                raise KeyError(f"Unknown setting: {key}")
            setattr(obj, parts[-1], value)

    def load_from_file(self, path: Path | str) -> None:
        """Load settings from TOML or JSON file."""
        path = Path(path)

        if not path.exists():
            raise FileNotFoundError(f"Settings file not found: {path}")

        with open(path, "rb") as f:
            if path.suffix == ".toml":
                data = tomllib.load(f)
            elif path.suffix == ".json":
                data = json.load(f)
            else:
                raise ValueError(f"Unsupported file format: {path.suffix}")

        self._settings = ApplicationSettings.from_dict(data)
        self._settings_path = path
        logger.debug(f"Loaded settings from {path}")

    def save_to_file(self, path: Path | str) -> None:
        """Save settings to TOML or JSON file."""
        path = Path(path)

        data = self._settings.to_dict()

        if path.suffix == ".toml":
            path.parent.mkdir(parents=True, exist_ok=True)
            with open(path, "wb") as f:
                tomli_w.dump(data, f)
        elif path.suffix == ".json":
            path.parent.mkdir(parents=True, exist_ok=True)
            with open(path, "w") as f:
                json.dump(data, f, indent=2)
        else:
            raise ValueError(f"Unsupported file format: {path.suffix}")

        self._settings_path = path
        logger.debug(f"Saved settings to {path}")

    def load_from_env(self) -> int:
        """
        Load settings from environment variables (PROGRESS_REPORTER_*).

        ``PROGRESS_REPORTER_ESTIMATOR__INCREMENT_BATCH_SIZE=4`` maps to
        ``estimator.increment_batch_size``. Unknown or invalid variables are
        logged and skipped.

        Returns:
            Number of settings applied
        """
        applied = 0
        for key, value in os.environ.items():
            if not key.startswith(ENV_PREFIX) or key == ENV_SETTINGS_PATH:
                continue

            setting_key = key[len(ENV_PREFIX):].lower().replace("__", ".")
            try:
                self.update(**{setting_key: value})
            except KeyError:
                logger.warning(f"Ignoring unknown setting from environment: {key}")
            except ValidationError as e:
                logger.warning(f"Ignoring invalid value for {key}: {e.errors()[0]['msg']}")
            else:
                applied += 1
        return applied

    def get_default_path(self) -> Path:
        """Get default settings file path."""
        if ENV_SETTINGS_PATH in os.environ:
            return Path(os.environ[ENV_SETTINGS_PATH])

        return Path.home() / ".progress_reporter" / "settings.toml"

    def auto_load(self) -> bool:
        """
        Automatically load settings from default locations.

        Search order:
        1. PROGRESS_REPORTER_SETTINGS_PATH environment variable
        2. ./progress_reporter_settings.toml (current directory)
        3. ~/.progress_reporter/settings.toml (user config)

        Environment variables are applied on top in every case.

        Returns:
            True if a settings file was loaded, False if using defaults
        """
        loaded = False
        for candidate in (
            Path(os.environ[ENV_SETTINGS_PATH]) if ENV_SETTINGS_PATH in os.environ else None,
            Path(LOCAL_SETTINGS_FILE),
            Path.home() / ".progress_reporter" / "settings.toml",
        ):
            if candidate is not None and candidate.exists():
                self.load_from_file(candidate)
                loaded = True
                break

        self.load_from_env()
        return loaded


# =============================================================================
# Module-Level Convenience Functions and Singleton Access
# =============================================================================


_manager = SettingsManager()


def get_settings() -> ApplicationSettings:
    """Get current application settings."""
    return _manager.settings


def get_settings_manager() -> SettingsManager:
    """Get the settings manager instance."""
    return _manager


def load_settings(path: Path | str) -> ApplicationSettings:
    """Load settings from file."""
    _manager.load_from_file(path)
    return _manager.settings


def save_settings(path: Path | str | None = None) -> Path:
    """
    Save current settings to file.

    Args:
        path: Output path. If None, uses default path.

    Returns:
        Path where settings were saved
    """
    if path is None:
        path = _manager.get_default_path()
    _manager.save_to_file(path)
    return Path(path)


def reset_settings() -> ApplicationSettings:
    """Reset to default settings."""
    _manager.reset()
    return _manager.settings
