"""
Configuration for appian-deploy.

Settings are read once per command invocation and passed explicitly (as a
frozen value) into the API client and the tracking services. Nothing in the
core reads ambient global settings.

Sources, highest priority first:
1. Command-line overrides (--base-url, --api-key)
2. TOML config file (--config-file, else ./appian-config.toml when present)
3. Environment variables (APPIAN_*, nested sections with __)
4. .env file named by LOAD_ENV_FILE (optional)
5. Defaults
"""

from __future__ import annotations

import logging
import os
import pathlib
import tomllib
from typing import Any

import attrs
import pydantic
import pydantic_settings

from appian_deploy.exceptions import ConfigurationError
from appian_deploy.redaction import redact_sensitive_info

logger = logging.getLogger(__name__)

DEFAULT_CONFIG_FILE = pathlib.Path('appian-config.toml')

# ==============================================================================
# Sections
# ==============================================================================


class LoggingConfig(pydantic.BaseModel):
    """[logging] section."""

    model_config = pydantic.ConfigDict(frozen=True, extra='forbid', populate_by_name=True)

    level: str = 'info'
    json_output: bool = pydantic.Field(default=False, alias='json')


class DownloadConfig(pydantic.BaseModel):
    """[download] section."""

    model_config = pydantic.ConfigDict(frozen=True, extra='forbid')

    dir: pathlib.Path = pathlib.Path('.')


class MonitorConfig(pydantic.BaseModel):
    """
    [monitor] section: polling defaults.

    The backoff fields only take effect when backoff_enabled is set (or
    `monitor --backoff` is passed); otherwise polling uses interval_seconds.
    """

    model_config = pydantic.ConfigDict(frozen=True, extra='forbid')

    interval_seconds: float = 10.0
    timeout_seconds: float = 3600.0
    backoff_enabled: bool = False
    backoff_initial_ms: int = 1000
    backoff_max_ms: int = 30000
    jitter: bool = True
    logs_follow_default: bool = False
    logs_follow_interval_seconds: float = 2.0

    @pydantic.model_validator(mode='after')
    def validate_backoff_bounds(self) -> MonitorConfig:
        """Backoff bounds must be positive and ordered."""
        if self.backoff_initial_ms <= 0:
            raise ValueError('backoff_initial_ms must be greater than 0')
        if self.backoff_max_ms < self.backoff_initial_ms:
            raise ValueError('backoff_max_ms must be >= backoff_initial_ms')
        return self


# ==============================================================================
# Settings
# ==============================================================================


class AppianSettings(pydantic_settings.BaseSettings):
    """Process-wide configuration for one CLI invocation."""

    model_config = pydantic_settings.SettingsConfigDict(
        env_prefix='APPIAN_',
        env_nested_delimiter='__',
        env_file_encoding='utf-8',
        extra='forbid',  # Reject unknown APPIAN_* variables and config keys
        frozen=True,
    )

    base_url: str = 'https://mysite.appiancloud.com'
    api_key: str = ''
    timeout_seconds: int = 300  # HTTP request timeout, not the polling deadline

    logging: LoggingConfig = LoggingConfig()
    download: DownloadConfig = DownloadConfig()
    monitor: MonitorConfig = MonitorConfig()

    @pydantic.field_validator('base_url')
    @classmethod
    def validate_base_url(cls, v: str) -> str:
        if not v.strip():
            raise ValueError('base_url cannot be empty')
        return v

    @pydantic.field_validator('api_key')
    @classmethod
    def validate_api_key(cls, v: str) -> str:
        if not v:
            raise ValueError('api_key cannot be empty (set APPIAN_API_KEY or pass --api-key)')
        return v

    @pydantic.field_validator('timeout_seconds')
    @classmethod
    def validate_timeout(cls, v: int) -> int:
        if v <= 0:
            raise ValueError('timeout_seconds must be greater than 0')
        return v

    def api_url(self, path: str) -> str:
        """Join base_url and an API path with exactly one slash."""
        return f'{self.base_url.rstrip("/")}/{path.lstrip("/")}'


@attrs.define(frozen=True)
class SettingsOverrides:
    """Values passed on the command line; None means "not given"."""

    base_url: str | None = None
    api_key: str | None = None

    def as_dict(self) -> dict[str, str]:
        return {k: v for k, v in attrs.asdict(self).items() if v is not None}


def load_settings(
    config_file: pathlib.Path | None = None,
    overrides: SettingsOverrides | None = None,
    env_file: str | None = None,
) -> AppianSettings:
    """
    Load and validate settings for one invocation.

    Args:
        config_file: Explicit TOML file (must exist); falls back to ./appian-config.toml
        overrides: Command-line values, applied last
        env_file: Optional .env file path (overrides LOAD_ENV_FILE)

    Returns:
        Frozen AppianSettings

    Raises:
        ConfigurationError: If a file is missing or unreadable, or validation fails
    """
    values: dict[str, Any] = {}

    toml_path = config_file
    if toml_path is None and DEFAULT_CONFIG_FILE.exists():
        toml_path = DEFAULT_CONFIG_FILE
    if toml_path is not None:
        values.update(_read_toml(toml_path))
    else:
        logger.debug('Loading configuration from environment variables')

    if overrides is not None:
        values.update(overrides.as_dict())

    env_file_path = env_file or os.getenv('LOAD_ENV_FILE')
    if env_file_path:
        resolved = pathlib.Path(env_file_path).resolve()
        if not resolved.exists():
            raise ConfigurationError(f'Environment file not found: {resolved}')
        values['_env_file'] = resolved

    try:
        settings = AppianSettings(**values)
    except pydantic.ValidationError as e:
        raise ConfigurationError(f'Invalid configuration: {e}') from e

    logger.debug(f'Loaded configuration: {redact_sensitive_info(settings.model_dump_json(exclude={"api_key"}))}')
    return settings


def _read_toml(path: pathlib.Path) -> dict[str, Any]:
    if not path.exists():
        raise ConfigurationError(f'Config file not found: {path}')
    logger.info(f'Loading configuration from: {path}')
    try:
        return dict(pydantic_settings.TomlConfigSettingsSource(AppianSettings, toml_file=path)())
    except tomllib.TOMLDecodeError as e:
        raise ConfigurationError(f'Failed to parse config file {path}: {e}') from e
