"""
Schema definitions for appian-deploy.

This package contains Pydantic models for the deployment-management API:
- status: closed status vocabularies and the terminal predicate
- api: request bodies, submission responses and status documents
- results: import/export/inspection result shapes
- operations: client-side tracking records (StatusSnapshot)
"""

from __future__ import annotations

from appian_deploy.schemas.operations import StatusSnapshot
from appian_deploy.schemas.results import (
    DeploymentResults,
    ExportDeploymentResults,
    ImportDeploymentResults,
    InspectionResults,
)
from appian_deploy.schemas.status import OperationKind, is_terminal, parse_status
from appian_deploy.schemas.types import BaseStrictModel, JsonDatetime, JsonUuid, PermissiveModel

__all__ = [
    'BaseStrictModel',
    'PermissiveModel',
    'JsonDatetime',
    'JsonUuid',
    'OperationKind',
    'is_terminal',
    'parse_status',
    'StatusSnapshot',
    'DeploymentResults',
    'ImportDeploymentResults',
    'ExportDeploymentResults',
    'InspectionResults',
]
