"""
Results resolver - fetch and decode the results document of an operation.

Deployment results come back as one of two untagged shapes. Decoding tries
each candidate in a fixed order (import, then export) and requires exactly one
to match: no match is reported with every candidate's failure, and more than
one match is reported as ambiguous instead of silently picking the first.
"""

from __future__ import annotations

import logging
from collections.abc import Sequence

import pydantic

from appian_deploy.client import DeploymentApiClient
from appian_deploy.exceptions import DecodeError
from appian_deploy.schemas.results import (
    DeploymentResults,
    ExportDeploymentResults,
    ImportDeploymentResults,
    InspectionResults,
)
from appian_deploy.schemas.status import OperationKind

__all__ = [
    'RESULT_CANDIDATES',
    'ResultsResolver',
    'decode_deployment_results',
]

logger = logging.getLogger(__name__)

# Tried in order; see decode_deployment_results
RESULT_CANDIDATES: Sequence[type[ImportDeploymentResults] | type[ExportDeploymentResults]] = (
    ImportDeploymentResults,
    ExportDeploymentResults,
)


def decode_deployment_results(body: bytes | str) -> DeploymentResults:
    """
    Decode a deployment results document.

    Args:
        body: Raw JSON body of GET .../deployments/{uuid}

    Returns:
        ImportDeploymentResults or ExportDeploymentResults

    Raises:
        DecodeError: If no candidate matches, or more than one does
    """
    matches: list[DeploymentResults] = []
    failures: list[str] = []

    for candidate in RESULT_CANDIDATES:
        try:
            matches.append(candidate.model_validate_json(body))
        except pydantic.ValidationError as e:
            failures.append(f'{candidate.__name__}: {e.error_count()} error(s): {_first_error(e)}')

    if len(matches) > 1:
        names = ', '.join(type(m).__name__ for m in matches)
        raise DecodeError('deployment results', f'ambiguous document, matched {names}')
    if not matches:
        raise DecodeError('deployment results', 'matched no known shape; ' + '; '.join(failures))

    logger.debug(f'Decoded deployment results as {type(matches[0]).__name__}')
    return matches[0]


def _first_error(error: pydantic.ValidationError) -> str:
    first = error.errors()[0]
    location = '.'.join(str(part) for part in first['loc']) or '<root>'
    return f'{location}: {first["msg"]}'


class ResultsResolver:
    """Fetch the results document matching an operation kind."""

    def __init__(self, client: DeploymentApiClient) -> None:
        self.client = client

    async def fetch_results(self, operation_uuid: str, kind: OperationKind) -> DeploymentResults | InspectionResults:
        """
        Fetch results for a (normally terminal) operation.

        Raises:
            DecodeError: If the document matches no result shape (or both)
            AppianCliError: Any classified failure of the request
        """
        if kind == 'inspection':
            return await self.client.get_inspection_results(operation_uuid)
        body = await self.client.get_deployment_results_body(operation_uuid)
        return decode_deployment_results(body)
