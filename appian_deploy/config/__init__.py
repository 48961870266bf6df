"""Configuration loading for appian-deploy."""

from __future__ import annotations

from appian_deploy.config.base import (
    AppianSettings,
    DownloadConfig,
    LoggingConfig,
    MonitorConfig,
    SettingsOverrides,
    load_settings,
)

__all__ = [
    'AppianSettings',
    'DownloadConfig',
    'LoggingConfig',
    'MonitorConfig',
    'SettingsOverrides',
    'load_settings',
]
