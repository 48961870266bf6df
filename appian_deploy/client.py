"""
HTTP transport for the deployment-management API v2.

One DeploymentApiClient wraps one httpx.AsyncClient. Every request carries
the API key headers; every response goes through the classifier, so callers
only ever see decoded payloads or exceptions from exceptions.py.

Connection-level failures (httpx.TransportError: DNS, TLS, socket, client
timeout) become TransportError. Nothing here retries.
"""

from __future__ import annotations

import logging
from collections.abc import Sequence
from datetime import UTC, datetime
from pathlib import Path
from types import TracebackType
from typing import Any, Self, TypeAlias, TypeVar

import httpx

from appian_deploy.classifier import check_status, classify_response
from appian_deploy.config import AppianSettings
from appian_deploy.exceptions import LocalFileError, TransportError
from appian_deploy.schemas.api import (
    DeploymentRequest,
    DeploymentStatusResponse,
    DeployResponse,
    ExportRequest,
    ExportResponse,
    ExportStatusDocument,
    InspectionRequest,
    InspectionResponse,
    InspectionStatusDocument,
    LogsResponse,
    PackageListResponse,
)
from appian_deploy.schemas.operations import StatusDocument, StatusSnapshot
from appian_deploy.schemas.results import InspectionResults
from appian_deploy.schemas.status import OperationKind, parse_status

__all__ = [
    'DeploymentApiClient',
    'MultipartFile',
]

logger = logging.getLogger(__name__)

# ==============================================================================
# Endpoints
# ==============================================================================

PACKAGES_PATH = '/deployment/v2/packages'
DEPLOY_PATH = '/deployment/v2/deployments'
ARTIFACTS_PATH = '/deployment/v2/artifacts'
MANAGEMENT_DEPLOYMENTS_PATH = '/suite/deployment-management/v2/deployments'
INSPECTIONS_PATH = '/suite/deployment-management/v2/inspections'

T = TypeVar('T')

MultipartFile: TypeAlias = tuple[str, Path]
"""(form field name, local path) of one file part."""


class DeploymentApiClient:
    """
    Async client for the deployment-management API.

    Use as an async context manager so the connection pool is closed:

        async with DeploymentApiClient(settings) as client:
            response = await client.export(request)
    """

    def __init__(self, settings: AppianSettings, transport: httpx.AsyncBaseTransport | None = None) -> None:
        """
        Initialize the client.

        Args:
            settings: Frozen settings (base URL, API key, request timeout)
            transport: Optional httpx transport (tests pass httpx.MockTransport)
        """
        self.settings = settings
        self._http = httpx.AsyncClient(
            timeout=settings.timeout_seconds,
            transport=transport,
            headers={
                'Authorization': f'Bearer {settings.api_key}',
                'appian-api-key': settings.api_key,
                'Accept': 'application/json',
            },
        )

    async def __aenter__(self) -> Self:
        return self

    async def __aexit__(
        self,
        exc_type: type[BaseException] | None,
        exc: BaseException | None,
        tb: TracebackType | None,
    ) -> None:
        await self.aclose()

    async def aclose(self) -> None:
        await self._http.aclose()

    # ==========================================================================
    # Plumbing
    # ==========================================================================

    async def _send(self, method: str, path: str, **kwargs: Any) -> httpx.Response:
        url = self.settings.api_url(path)
        logger.debug(f'Building {method} request to {url}')
        try:
            return await self._http.request(method, url, **kwargs)
        except httpx.TransportError as e:
            raise TransportError(url, str(e) or type(e).__name__) from e

    async def _request(self, method: str, path: str, target: type[T], **kwargs: Any) -> T:
        response = await self._send(method, path, **kwargs)
        return classify_response(response.status_code, response.content, target, url=str(response.request.url))

    async def _get_raw(self, path: str, **kwargs: Any) -> bytes:
        response = await self._send('GET', path, **kwargs)
        check_status(response.status_code, response.content, url=str(response.request.url))
        return response.content

    @staticmethod
    def _multipart(json_body: str, files: Sequence[MultipartFile]) -> list[tuple[str, tuple[str | None, bytes | str, str | None]]]:
        """Build the multipart form: a `json` part first, then one part per file."""
        parts: list[tuple[str, tuple[str | None, bytes | str, str | None]]] = [
            ('json', (None, json_body, 'application/json'))
        ]
        for field_name, path in files:
            try:
                content = path.read_bytes()
            except OSError as e:
                raise LocalFileError(f'Failed to read {path} for upload: {e}') from e
            parts.append((field_name, (path.name, content, 'application/octet-stream')))
        return parts

    # ==========================================================================
    # Submissions
    # ==========================================================================

    async def export(self, request: ExportRequest) -> ExportResponse:
        """Start an export. Returns the export operation UUID."""
        logger.info(f'Initiating export: exportType={request.export_type}, uuids={[str(u) for u in request.uuids]}')
        return await self._request(
            'POST',
            MANAGEMENT_DEPLOYMENTS_PATH,
            ExportResponse,
            headers={'Action-Type': 'export'},
            files=self._multipart(request.model_dump_json(by_alias=True, exclude_none=True), ()),
        )

    async def deploy(self, request: DeploymentRequest, files: Sequence[MultipartFile]) -> DeployResponse:
        """
        Start an import deployment.

        Args:
            request: JSON part; its file name fields must match the uploaded parts
            files: (field, path) pairs: packageFileName, customizationFileName,
                adminConsoleSettingsFileName, pluginsFileName, databaseScript{n}
        """
        logger.info(f'Deploying (multipart) package: {request.name}')
        return await self._request(
            'POST',
            DEPLOY_PATH,
            DeployResponse,
            headers={'Action-Type': 'import'},
            files=self._multipart(request.model_dump_json(by_alias=True, exclude_none=True), files),
        )

    async def inspect(self, request: InspectionRequest, files: Sequence[MultipartFile]) -> InspectionResponse:
        """Start an inspection. files uses the keys zipFile, ICF and adminConsole."""
        logger.info(f'Initiating inspection for package: {request.package_file_name}')
        return await self._request(
            'POST',
            INSPECTIONS_PATH,
            InspectionResponse,
            files=self._multipart(request.model_dump_json(by_alias=True, exclude_none=True), files),
        )

    # ==========================================================================
    # Status queries
    # ==========================================================================

    async def get_deployment_status(self, deployment_uuid: str) -> DeploymentStatusResponse:
        logger.debug(f'Getting deployment status for: {deployment_uuid}')
        return await self._request('GET', f'{DEPLOY_PATH}/{deployment_uuid}', DeploymentStatusResponse)

    async def get_export_status(self, export_uuid: str) -> ExportStatusDocument:
        logger.debug(f'Getting export status for: {export_uuid}')
        return await self._request('GET', f'{MANAGEMENT_DEPLOYMENTS_PATH}/{export_uuid}', ExportStatusDocument)

    async def get_inspection_status(self, inspection_uuid: str) -> InspectionStatusDocument:
        logger.debug(f'Getting inspection status for: {inspection_uuid}')
        return await self._request('GET', f'{INSPECTIONS_PATH}/{inspection_uuid}', InspectionStatusDocument)

    async def get_status(self, operation_uuid: str, kind: OperationKind) -> StatusSnapshot:
        """
        One status query for an operation, as a snapshot.

        Satisfies the StatusQuery protocol used by OperationPoller.
        """
        document: StatusDocument
        match kind:
            case 'deployment':
                document = await self.get_deployment_status(operation_uuid)
            case 'export':
                document = await self.get_export_status(operation_uuid)
            case 'inspection':
                document = await self.get_inspection_status(operation_uuid)
        return StatusSnapshot(
            operation_uuid=operation_uuid,
            kind=kind,
            status=parse_status(kind, document.status),
            observed_at=datetime.now(UTC),
            document=document,
        )

    # ==========================================================================
    # Results and artifacts
    # ==========================================================================

    async def get_deployment_results_body(self, deployment_uuid: str) -> bytes:
        """Raw results document; decoded by services.results (untagged union)."""
        logger.debug(f'Getting deployment results for: {deployment_uuid}')
        return await self._get_raw(f'{MANAGEMENT_DEPLOYMENTS_PATH}/{deployment_uuid}')

    async def get_inspection_results(self, inspection_uuid: str) -> InspectionResults:
        logger.debug(f'Getting inspection results for: {inspection_uuid}')
        return await self._request('GET', f'{INSPECTIONS_PATH}/{inspection_uuid}', InspectionResults)

    async def get_packages(self, app_uuids: Sequence[str]) -> PackageListResponse:
        logger.info(f'Fetching packages for applications: {list(app_uuids)}')
        params = {'app_uuids': ','.join(app_uuids)} if app_uuids else None
        return await self._request('GET', PACKAGES_PATH, PackageListResponse, params=params)

    async def get_deployment_logs(self, deployment_uuid: str, tail: int | None = None) -> LogsResponse:
        logger.debug(f'Getting deployment logs for: {deployment_uuid}')
        params = {'tail': str(tail)} if tail is not None else None
        return await self._request('GET', f'{DEPLOY_PATH}/{deployment_uuid}/log', LogsResponse, params=params)

    async def download_artifact(self, artifact_uuid: str) -> bytes:
        logger.info(f'Downloading artifact: {artifact_uuid}')
        data = await self._get_raw(f'{ARTIFACTS_PATH}/{artifact_uuid}', headers={'Accept': '*/*'})
        logger.info(f'Artifact downloaded successfully: {len(data)} bytes')
        return data
