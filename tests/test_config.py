"""Tests for settings loading: TOML, environment, overrides, validation."""

from __future__ import annotations

from pathlib import Path

import pydantic
import pytest

from appian_deploy.config import AppianSettings, MonitorConfig, SettingsOverrides, load_settings
from appian_deploy.exceptions import ConfigurationError

CONFIG_TOML = """
base_url = "https://file.appiancloud.com"
api_key = "file-key"
timeout_seconds = 60

[logging]
level = "debug"
json = true

[monitor]
interval_seconds = 5
backoff_enabled = true
backoff_initial_ms = 250
backoff_max_ms = 4000
"""


def test_defaults_with_api_key_from_environment(monkeypatch: pytest.MonkeyPatch) -> None:
    monkeypatch.setenv('APPIAN_API_KEY', 'env-key')
    settings = load_settings()

    assert settings.api_key == 'env-key'
    assert settings.base_url == 'https://mysite.appiancloud.com'
    assert settings.timeout_seconds == 300
    assert settings.monitor.interval_seconds == 10
    assert settings.monitor.timeout_seconds == 3600
    assert settings.monitor.backoff_enabled is False
    assert settings.monitor.backoff_initial_ms == 1000
    assert settings.monitor.backoff_max_ms == 30000
    assert settings.monitor.jitter is True


def test_nested_environment_variables(monkeypatch: pytest.MonkeyPatch) -> None:
    monkeypatch.setenv('APPIAN_API_KEY', 'env-key')
    monkeypatch.setenv('APPIAN_MONITOR__INTERVAL_SECONDS', '2.5')
    monkeypatch.setenv('APPIAN_LOGGING__LEVEL', 'warning')

    settings = load_settings()

    assert settings.monitor.interval_seconds == 2.5
    assert settings.logging.level == 'warning'


def test_explicit_config_file(tmp_path: Path) -> None:
    config_file = tmp_path / 'custom.toml'
    config_file.write_text(CONFIG_TOML)

    settings = load_settings(config_file)

    assert settings.base_url == 'https://file.appiancloud.com'
    assert settings.api_key == 'file-key'
    assert settings.timeout_seconds == 60
    assert settings.logging.json_output is True
    assert settings.monitor.interval_seconds == 5
    assert settings.monitor.backoff_initial_ms == 250


def test_default_config_file_in_working_directory(tmp_path: Path) -> None:
    (tmp_path / 'appian-config.toml').write_text(CONFIG_TOML)
    assert load_settings().api_key == 'file-key'


def test_command_line_overrides_win(tmp_path: Path, monkeypatch: pytest.MonkeyPatch) -> None:
    monkeypatch.setenv('APPIAN_BASE_URL', 'https://env.appiancloud.com')
    config_file = tmp_path / 'custom.toml'
    config_file.write_text(CONFIG_TOML)

    settings = load_settings(config_file, SettingsOverrides(base_url='https://cli.appiancloud.com', api_key='cli-key'))

    assert settings.base_url == 'https://cli.appiancloud.com'
    assert settings.api_key == 'cli-key'


def test_env_file_from_load_env_file(tmp_path: Path, monkeypatch: pytest.MonkeyPatch) -> None:
    env_file = tmp_path / 'appian.env'
    env_file.write_text('APPIAN_API_KEY=dotenv-key\n')
    monkeypatch.setenv('LOAD_ENV_FILE', str(env_file))

    assert load_settings().api_key == 'dotenv-key'


def test_missing_env_file_is_configuration_error(monkeypatch: pytest.MonkeyPatch) -> None:
    monkeypatch.setenv('LOAD_ENV_FILE', 'does-not-exist.env')
    with pytest.raises(ConfigurationError, match='Environment file not found'):
        load_settings(overrides=SettingsOverrides(api_key='k'))


def test_missing_api_key_is_configuration_error() -> None:
    with pytest.raises(ConfigurationError, match='api_key'):
        load_settings()


def test_missing_config_file_is_configuration_error(tmp_path: Path) -> None:
    with pytest.raises(ConfigurationError, match='Config file not found'):
        load_settings(tmp_path / 'nope.toml')


def test_malformed_config_file_is_configuration_error(tmp_path: Path) -> None:
    config_file = tmp_path / 'bad.toml'
    config_file.write_text('base_url = "unterminated')
    with pytest.raises(ConfigurationError, match='Failed to parse'):
        load_settings(config_file)


def test_unknown_config_key_is_rejected(tmp_path: Path) -> None:
    config_file = tmp_path / 'extra.toml'
    config_file.write_text('api_key = "k"\nretries = 3\n')
    with pytest.raises(ConfigurationError):
        load_settings(config_file)


@pytest.mark.parametrize('timeout', [0, -5])
def test_non_positive_timeout_is_rejected(timeout: int) -> None:
    with pytest.raises(pydantic.ValidationError, match='timeout_seconds'):
        AppianSettings(api_key='k', timeout_seconds=timeout)


def test_backoff_bounds_are_validated() -> None:
    with pytest.raises(pydantic.ValidationError, match='backoff_max_ms'):
        MonitorConfig(backoff_initial_ms=5000, backoff_max_ms=1000)


@pytest.mark.parametrize(
    ('base_url', 'path'),
    [
        ('https://site.appiancloud.com', '/deployment/v2/packages'),
        ('https://site.appiancloud.com/', '/deployment/v2/packages'),
        ('https://site.appiancloud.com/', 'deployment/v2/packages'),
    ],
)
def test_api_url_joins_with_one_slash(base_url: str, path: str) -> None:
    settings = AppianSettings(base_url=base_url, api_key='k')
    assert settings.api_url(path) == 'https://site.appiancloud.com/deployment/v2/packages'


def test_settings_are_frozen(settings: AppianSettings) -> None:
    with pytest.raises(pydantic.ValidationError):
        settings.api_key = 'other'  # type: ignore[misc]
