"""Shared fixtures: isolated environment, settings, mock-transport clients."""

from __future__ import annotations

import os
from collections.abc import Callable
from datetime import UTC, datetime
from pathlib import Path
from typing import TypeAlias

import httpx
import pytest

from appian_deploy.client import DeploymentApiClient
from appian_deploy.config import AppianSettings
from appian_deploy.schemas.api import DeploymentStatusResponse, ExportStatusDocument, InspectionStatusDocument
from appian_deploy.schemas.operations import StatusDocument, StatusSnapshot
from appian_deploy.schemas.status import OperationKind

BASE_URL = 'https://example.appiancloud.com'
API_KEY = 'test-api-key'
FIXTURES_DIR = Path(__file__).parent.parent / 'fixtures'

Handler: TypeAlias = Callable[[httpx.Request], httpx.Response]


@pytest.fixture(autouse=True)
def isolated_environment(monkeypatch: pytest.MonkeyPatch, tmp_path: Path) -> None:
    """No APPIAN_* variables and no appian-config.toml leak into tests."""
    for name in list(os.environ):
        if name.startswith('APPIAN_') or name == 'LOAD_ENV_FILE':
            monkeypatch.delenv(name)
    monkeypatch.chdir(tmp_path)


@pytest.fixture
def settings() -> AppianSettings:
    return AppianSettings(base_url=BASE_URL, api_key=API_KEY)


@pytest.fixture
def client_factory(settings: AppianSettings) -> Callable[[Handler], DeploymentApiClient]:
    def factory(handler: Handler) -> DeploymentApiClient:
        return DeploymentApiClient(settings, transport=httpx.MockTransport(handler))

    return factory


def make_snapshot(status: str, kind: OperationKind = 'deployment', operation_uuid: str = 'op-1') -> StatusSnapshot:
    """Snapshot with a minimal document of the right kind."""
    document: StatusDocument
    match kind:
        case 'deployment':
            document = DeploymentStatusResponse(status=status)
        case 'export':
            document = ExportStatusDocument(status=status)
        case 'inspection':
            document = InspectionStatusDocument(status=status)
    return StatusSnapshot(
        operation_uuid=operation_uuid,
        kind=kind,
        status=status,
        observed_at=datetime.now(UTC),
        document=document,
    )
