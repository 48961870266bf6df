"""
Operation status model.

Closed status vocabularies for the three kinds of server-side operation, plus
the terminal predicate. Wire tokens are SCREAMING_SNAKE_CASE.

Every vocabulary has exactly one non-terminal member (IN_PROGRESS). The
terminal decision is a membership test on the decoded token; message text is
never consulted. A token outside the vocabulary is a DecodeError, so a new
server-side status shows up as a visible failure rather than being read as
"still running" or "done".
"""

from __future__ import annotations

from collections.abc import Mapping
from types import MappingProxyType
from typing import Literal, get_args

from appian_deploy.exceptions import DecodeError

# ==============================================================================
# Operation kinds
# ==============================================================================

OperationKind = Literal['deployment', 'export', 'inspection']

OPERATION_KINDS: tuple[OperationKind, ...] = get_args(OperationKind)

# ==============================================================================
# Status vocabularies
# ==============================================================================

IN_PROGRESS = 'IN_PROGRESS'

DeploymentStatus = Literal['IN_PROGRESS', 'SUCCEEDED', 'FAILED', 'ROLLED_BACK']

ExportStatus = Literal[
    'IN_PROGRESS',
    'COMPLETED',
    'COMPLETED_WITH_ERRORS',
    'COMPLETED_WITH_EXPORT_ERRORS',  # v2 API may return this more specific variant
    'FAILED',
]

# Result-only vocabulary, richer than DeploymentStatus
ImportDeploymentStatus = Literal[
    'IN_PROGRESS',
    'COMPLETED',
    'COMPLETED_WITH_IMPORT_ERRORS',
    'COMPLETED_WITH_PUBLISH_ERRORS',
    'FAILED',
    'PENDING_REVIEW',
    'REJECTED',
]

InspectionOperationStatus = Literal['IN_PROGRESS', 'COMPLETED', 'FAILED']

DEPLOYMENT_TERMINAL_STATUSES: frozenset[str] = frozenset({'SUCCEEDED', 'FAILED', 'ROLLED_BACK'})

EXPORT_TERMINAL_STATUSES: frozenset[str] = frozenset(
    {'COMPLETED', 'COMPLETED_WITH_ERRORS', 'COMPLETED_WITH_EXPORT_ERRORS', 'FAILED'}
)

IMPORT_DEPLOYMENT_TERMINAL_STATUSES: frozenset[str] = frozenset(
    {
        'COMPLETED',
        'COMPLETED_WITH_IMPORT_ERRORS',
        'COMPLETED_WITH_PUBLISH_ERRORS',
        'FAILED',
        'PENDING_REVIEW',
        'REJECTED',
    }
)

INSPECTION_TERMINAL_STATUSES: frozenset[str] = frozenset({'COMPLETED', 'FAILED'})

# Vocabulary polled for each operation kind
STATUS_VOCABULARIES: Mapping[OperationKind, frozenset[str]] = MappingProxyType(
    {
        'deployment': frozenset(get_args(DeploymentStatus)),
        'export': frozenset(get_args(ExportStatus)),
        'inspection': frozenset(get_args(InspectionOperationStatus)),
    }
)

TERMINAL_STATUSES: Mapping[OperationKind, frozenset[str]] = MappingProxyType(
    {
        'deployment': DEPLOYMENT_TERMINAL_STATUSES,
        'export': EXPORT_TERMINAL_STATUSES,
        'inspection': INSPECTION_TERMINAL_STATUSES,
    }
)


def parse_kind(value: str) -> OperationKind:
    """Validate an operation kind name."""
    for kind in OPERATION_KINDS:
        if value == kind:
            return kind
    raise ValueError(f"Unknown operation kind '{value}' (expected one of: {', '.join(OPERATION_KINDS)})")


def parse_status(kind: OperationKind, token: str) -> str:
    """
    Validate a status token against the vocabulary of an operation kind.

    Args:
        kind: Operation kind whose vocabulary applies
        token: Raw status token from the server

    Returns:
        The token, unchanged

    Raises:
        DecodeError: If the token is not a member of the vocabulary
    """
    vocabulary = STATUS_VOCABULARIES[kind]
    if token not in vocabulary:
        raise DecodeError(f'{kind} status', f"unknown status '{token}' (expected one of: {', '.join(sorted(vocabulary))})")
    return token


def is_terminal(kind: OperationKind, status: str) -> bool:
    """
    Terminal predicate for an operation kind.

    Raises:
        DecodeError: If status is not a member of the kind's vocabulary
    """
    return parse_status(kind, status) in TERMINAL_STATUSES[kind]


def is_import_result_terminal(status: str) -> bool:
    """Terminal predicate for the result-only ImportDeploymentStatus vocabulary."""
    if status not in get_args(ImportDeploymentStatus):
        raise DecodeError('import deployment status', f"unknown status '{status}'")
    return status in IMPORT_DEPLOYMENT_TERMINAL_STATUSES
