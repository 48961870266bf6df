"""
Operation tracking schemas.

A StatusSnapshot is one observation of a server-side operation, produced by a
single status query. Snapshots are never merged or interpolated: the client
only trusts the latest one it made.
"""

from __future__ import annotations

from datetime import datetime
from typing import TypeAlias

from appian_deploy.schemas.api import DeploymentStatusResponse, ExportStatusDocument, InspectionStatusDocument
from appian_deploy.schemas.status import OperationKind, is_terminal
from appian_deploy.schemas.types import BaseStrictModel

StatusDocument: TypeAlias = DeploymentStatusResponse | ExportStatusDocument | InspectionStatusDocument
"""Kind-specific status document behind a snapshot."""


class StatusSnapshot(BaseStrictModel):
    """Immutable point-in-time observation of an operation's status."""

    operation_uuid: str
    kind: OperationKind
    status: str
    observed_at: datetime
    document: StatusDocument

    @property
    def is_terminal(self) -> bool:
        return is_terminal(self.kind, self.status)
