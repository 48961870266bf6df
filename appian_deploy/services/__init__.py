"""
Services for appian-deploy.

- poller: drive one operation to a terminal status (deadline, backoff)
- results: fetch and decode results documents
- tracking: facade used by the CLI (track / fetch_results)
- submission: local validation and deploy/export/inspect submissions
"""

from __future__ import annotations

from appian_deploy.services.poller import BackoffPolicy, OperationPoller, PollPolicy
from appian_deploy.services.results import ResultsResolver, decode_deployment_results
from appian_deploy.services.submission import SubmissionService
from appian_deploy.services.tracking import OperationTracker

__all__ = [
    'BackoffPolicy',
    'OperationPoller',
    'PollPolicy',
    'ResultsResolver',
    'decode_deployment_results',
    'SubmissionService',
    'OperationTracker',
]
