"""
Process exit codes for appian-deploy.

Each constant maps to one failure class and is referenced by the matching
AppianCliError subclass (see exceptions.py). Scripting callers can branch on
the exit code without parsing stderr:

    $ appian-deploy monitor --deployment-uuid ...
    $ echo $?
    9   # EXIT_POLL_TIMEOUT -- operation did not reach a terminal status in time
"""

from __future__ import annotations

EXIT_SUCCESS = 0
"""The command completed successfully."""

EXIT_GENERIC_FAILURE = 1
"""An unclassified error occurred (including local file errors)."""

EXIT_INVALID_USAGE = 2
"""Invalid arguments or configuration."""

EXIT_TRANSPORT_ERROR = 3
"""Connection-level failure (DNS, TLS, socket, client-side request timeout)."""

EXIT_AUTH_FAILURE = 4
"""The API rejected the credentials (HTTP 401/403)."""

EXIT_SERVER_ERROR = 5
"""The API returned an HTTP 5xx response."""

EXIT_REQUEST_TIMEOUT = 6
"""The API reported a request timeout (HTTP 408)."""

EXIT_NOT_FOUND = 7
"""The requested resource does not exist (HTTP 404)."""

EXIT_DECODE_ERROR = 8
"""A response body did not match any known shape."""

EXIT_POLL_TIMEOUT = 9
"""Client-side polling deadline exceeded before a terminal status was observed."""

EXIT_API_ERROR = 10
"""Any other non-2xx API response."""
