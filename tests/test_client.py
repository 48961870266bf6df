"""Tests for the HTTP transport: paths, headers, multipart parts, error wrapping."""

from __future__ import annotations

import uuid
from collections.abc import Callable
from pathlib import Path

import httpx
import pytest

from appian_deploy.client import DeploymentApiClient
from appian_deploy.exceptions import DecodeError, LocalFileError, NotFoundError, TransportError
from appian_deploy.schemas.api import (
    DeploymentRequest,
    DeploymentStatusResponse,
    ExportRequest,
    ExportStatusDocument,
)
from appian_deploy.services.submission import plan_deployment, plan_inspection
from conftest import API_KEY, Handler

DEPLOY_UUID = '11111111-1111-1111-1111-111111111111'


class Recorder:
    """MockTransport handler that records requests and replays one response."""

    def __init__(self, status: int = 200, json: object | None = None, content: bytes | None = None) -> None:
        self.status = status
        self.json = json
        self.content = content
        self.requests: list[httpx.Request] = []
        self.bodies: list[bytes] = []

    def __call__(self, request: httpx.Request) -> httpx.Response:
        self.requests.append(request)
        self.bodies.append(request.read())
        if self.content is not None:
            return httpx.Response(self.status, content=self.content)
        return httpx.Response(self.status, json=self.json)


@pytest.mark.asyncio
async def test_every_request_carries_auth_headers(client_factory: Callable[[Handler], DeploymentApiClient]) -> None:
    recorder = Recorder(json={'status': 'IN_PROGRESS'})
    async with client_factory(recorder) as client:
        await client.get_deployment_status(DEPLOY_UUID)

    headers = recorder.requests[0].headers
    assert headers['Authorization'] == f'Bearer {API_KEY}'
    assert headers['appian-api-key'] == API_KEY
    assert headers['Accept'] == 'application/json'


@pytest.mark.asyncio
@pytest.mark.parametrize(
    ('kind', 'path', 'body', 'document_type'),
    [
        ('deployment', f'/deployment/v2/deployments/{DEPLOY_UUID}', {'status': 'SUCCEEDED'}, DeploymentStatusResponse),
        (
            'export',
            f'/suite/deployment-management/v2/deployments/{DEPLOY_UUID}',
            {'status': 'COMPLETED', 'packageZip': None},
            ExportStatusDocument,
        ),
    ],
)
async def test_get_status_builds_snapshot(
    client_factory: Callable[[Handler], DeploymentApiClient],
    kind: str,
    path: str,
    body: dict[str, object],
    document_type: type,
) -> None:
    recorder = Recorder(json=body)
    async with client_factory(recorder) as client:
        snapshot = await client.get_status(DEPLOY_UUID, kind)  # type: ignore[arg-type]

    assert recorder.requests[0].url.path == path
    assert snapshot.operation_uuid == DEPLOY_UUID
    assert snapshot.kind == kind
    assert snapshot.status == body['status']
    assert snapshot.is_terminal
    assert isinstance(snapshot.document, document_type)
    assert snapshot.observed_at.tzinfo is not None


@pytest.mark.asyncio
async def test_status_document_keeps_extra_fields(client_factory: Callable[[Handler], DeploymentApiClient]) -> None:
    recorder = Recorder(json={'status': 'IN_PROGRESS', 'currentStep': 'Importing objects', 'percent': 40})
    async with client_factory(recorder) as client:
        document = await client.get_deployment_status(DEPLOY_UUID)

    assert document.current_step == 'Importing objects'
    assert document.get_extra_fields() == {'percent': 40}


@pytest.mark.asyncio
async def test_unknown_status_token_is_decode_error(client_factory: Callable[[Handler], DeploymentApiClient]) -> None:
    recorder = Recorder(json={'status': 'PAUSED'})
    async with client_factory(recorder) as client:
        with pytest.raises(DecodeError):
            await client.get_status(DEPLOY_UUID, 'deployment')


@pytest.mark.asyncio
async def test_export_posts_json_part_with_action_type(
    client_factory: Callable[[Handler], DeploymentApiClient],
) -> None:
    recorder = Recorder(json={'uuid': DEPLOY_UUID, 'url': 'https://x/y', 'status': 'IN_PROGRESS'})
    request = ExportRequest(uuids=[uuid.UUID(DEPLOY_UUID)], export_type='package', name='nightly')

    async with client_factory(recorder) as client:
        response = await client.export(request)

    sent = recorder.requests[0]
    body = recorder.bodies[0]
    assert sent.method == 'POST'
    assert sent.url.path == '/suite/deployment-management/v2/deployments'
    assert sent.headers['Action-Type'] == 'export'
    assert sent.headers['Content-Type'].startswith('multipart/form-data')
    assert b'name="json"' in body
    assert b'"exportType":"package"' in body
    assert b'"description"' not in body
    assert response.status == 'IN_PROGRESS'


@pytest.mark.asyncio
async def test_deploy_uploads_named_parts_in_order(
    client_factory: Callable[[Handler], DeploymentApiClient], tmp_path: Path
) -> None:
    package = tmp_path / 'app.zip'
    package.write_bytes(b'PK\x03\x04package')
    icf = tmp_path / 'app.properties'
    icf.write_text('key=value')
    first = tmp_path / 'a.sql'
    first.write_text('create table a();')
    second = tmp_path / 'b.sql'
    second.write_text('create table b();')
    plan = plan_deployment(
        package, 'Release 1', customization_file=icf, database_scripts=[first, second]
    )
    recorder = Recorder(json={'uuid': DEPLOY_UUID, 'url': 'https://x/y', 'status': 'IN_PROGRESS'})

    async with client_factory(recorder) as client:
        response = await client.deploy(plan.request, plan.files)

    sent = recorder.requests[0]
    body = recorder.bodies[0]
    assert sent.url.path == '/deployment/v2/deployments'
    assert sent.headers['Action-Type'] == 'import'
    assert b'name="packageFileName"; filename="app.zip"' in body
    assert b'name="customizationFileName"; filename="app.properties"' in body
    assert body.index(b'name="databaseScript1"; filename="a.sql"') < body.index(
        b'name="databaseScript2"; filename="b.sql"'
    )
    assert b'"orderId":"1"' in body and b'"orderId":"2"' in body
    assert str(response.uuid) == DEPLOY_UUID


@pytest.mark.asyncio
async def test_inspect_uses_inspection_part_names(
    client_factory: Callable[[Handler], DeploymentApiClient], tmp_path: Path
) -> None:
    package = tmp_path / 'app.zip'
    package.write_bytes(b'PK')
    admin = tmp_path / 'admin.zip'
    admin.write_bytes(b'PK')
    plan = plan_inspection(package, admin_console_file=admin)
    recorder = Recorder(json={'uuid': DEPLOY_UUID, 'url': 'https://x/y'})

    async with client_factory(recorder) as client:
        await client.inspect(plan.request, plan.files)

    body = recorder.bodies[0]
    assert recorder.requests[0].url.path == '/suite/deployment-management/v2/inspections'
    assert b'name="zipFile"; filename="app.zip"' in body
    assert b'name="adminConsole"; filename="admin.zip"' in body
    assert b'name="ICF"' not in body


@pytest.mark.asyncio
async def test_unreadable_upload_is_local_file_error(
    client_factory: Callable[[Handler], DeploymentApiClient], tmp_path: Path
) -> None:
    recorder = Recorder(json={})
    request = DeploymentRequest(name='Release 1', package_file_name='vanished.zip')

    async with client_factory(recorder) as client:
        with pytest.raises(LocalFileError):
            await client.deploy(request, [('packageFileName', tmp_path / 'vanished.zip')])

    assert recorder.requests == []


@pytest.mark.asyncio
async def test_get_packages_joins_app_uuids(client_factory: Callable[[Handler], DeploymentApiClient]) -> None:
    recorder = Recorder(
        json={
            'packages': [
                {
                    'id': 'pkg-1',
                    'name': 'Core',
                    'version': '1.0',
                    'createdAt': '2024-01-01T00:00:00Z',
                    'updatedAt': '2024-01-02T00:00:00Z',
                }
            ],
            'total': 1,
        }
    )
    async with client_factory(recorder) as client:
        response = await client.get_packages(['a', 'b'])

    assert recorder.requests[0].url.path == '/deployment/v2/packages'
    assert recorder.requests[0].url.params['app_uuids'] == 'a,b'
    assert response.packages[0].name == 'Core'


@pytest.mark.asyncio
async def test_logs_pass_tail(client_factory: Callable[[Handler], DeploymentApiClient]) -> None:
    recorder = Recorder(json={'logs': [], 'total': 0, 'hasMore': False})
    async with client_factory(recorder) as client:
        response = await client.get_deployment_logs(DEPLOY_UUID, tail=50)

    assert recorder.requests[0].url.path == f'/deployment/v2/deployments/{DEPLOY_UUID}/log'
    assert recorder.requests[0].url.params['tail'] == '50'
    assert response.has_more is False


@pytest.mark.asyncio
async def test_download_returns_raw_bytes(client_factory: Callable[[Handler], DeploymentApiClient]) -> None:
    recorder = Recorder(content=b'PK\x03\x04binary')
    async with client_factory(recorder) as client:
        data = await client.download_artifact('artifact-1')

    assert data == b'PK\x03\x04binary'
    assert recorder.requests[0].url.path == '/deployment/v2/artifacts/artifact-1'


@pytest.mark.asyncio
async def test_download_not_found(client_factory: Callable[[Handler], DeploymentApiClient]) -> None:
    recorder = Recorder(status=404, content=b'gone')
    async with client_factory(recorder) as client:
        with pytest.raises(NotFoundError):
            await client.download_artifact('artifact-1')


@pytest.mark.asyncio
async def test_connection_failure_is_transport_error(
    client_factory: Callable[[Handler], DeploymentApiClient],
) -> None:
    def handler(request: httpx.Request) -> httpx.Response:
        raise httpx.ConnectError('connection refused', request=request)

    async with client_factory(handler) as client:
        with pytest.raises(TransportError) as exc_info:
            await client.get_deployment_status(DEPLOY_UUID)

    assert 'connection refused' in exc_info.value.reason
    assert isinstance(exc_info.value.__cause__, httpx.ConnectError)
