"""
Shared exceptions for appian-deploy.

Every failure that reaches the command line is an AppianCliError carrying the
process exit code for its class.

Exception Hierarchy:
    AppianCliError (base)
    ├── ConfigurationError (settings missing or invalid)
    ├── InvalidArgumentError (bad command arguments)
    ├── LocalFileError (local file missing, unreadable or refused)
    ├── TransportError (connection-level failure, request never completed)
    ├── ApiResponseError (non-2xx response, carries status + message)
    │   ├── AuthenticationError (401/403)
    │   ├── NotFoundError (404)
    │   ├── RequestTimeoutError (408 reported by the server)
    │   ├── ServerError (5xx)
    │   └── ApiError (any other non-2xx)
    ├── DecodeError (2xx body did not match the expected shape)
    └── PollTimeoutError (client-side polling deadline exceeded)
"""

from __future__ import annotations

from appian_deploy import exit_codes


class AppianCliError(Exception):
    """Base exception for all appian-deploy errors."""

    exit_code: int = exit_codes.EXIT_GENERIC_FAILURE


class ConfigurationError(AppianCliError):
    """Raised when settings cannot be loaded or fail validation."""

    exit_code = exit_codes.EXIT_INVALID_USAGE


class InvalidArgumentError(AppianCliError):
    """Raised when a command is invoked with arguments the API would reject."""

    exit_code = exit_codes.EXIT_INVALID_USAGE


class LocalFileError(AppianCliError):
    """Raised when a local file to upload or write cannot be used."""


class TransportError(AppianCliError):
    """Raised when the HTTP request itself failed (DNS, TLS, socket, client timeout).

    Opaque passthrough of the underlying httpx error, kept as __cause__.
    """

    exit_code = exit_codes.EXIT_TRANSPORT_ERROR

    def __init__(self, url: str, reason: str) -> None:
        self.url = url
        self.reason = reason
        super().__init__(f'Request to {url} failed: {reason}')


class ApiResponseError(AppianCliError):
    """Base exception for non-2xx API responses."""

    label = 'API error'

    def __init__(self, status: int, message: str) -> None:
        self.status = status
        self.message = message
        super().__init__(f'{self.label} ({status}): {message}')


class AuthenticationError(ApiResponseError):
    """Raised for 401/403 responses. The response body is kept for diagnostics."""

    exit_code = exit_codes.EXIT_AUTH_FAILURE
    label = 'Authentication failed'


class NotFoundError(ApiResponseError):
    """Raised for 404 responses."""

    exit_code = exit_codes.EXIT_NOT_FOUND
    label = 'Resource not found'


class RequestTimeoutError(ApiResponseError):
    """Raised for 408 responses.

    This is the server reporting a timeout; see PollTimeoutError for the
    client-side polling deadline.
    """

    exit_code = exit_codes.EXIT_REQUEST_TIMEOUT
    label = 'Request timeout'


class ServerError(ApiResponseError):
    """Raised for 5xx responses."""

    exit_code = exit_codes.EXIT_SERVER_ERROR
    label = 'Server error'


class ApiError(ApiResponseError):
    """Raised for any other non-2xx response. Preserves the raw status."""

    exit_code = exit_codes.EXIT_API_ERROR


class DecodeError(AppianCliError):
    """Raised when a response body does not decode as the expected type."""

    exit_code = exit_codes.EXIT_DECODE_ERROR

    def __init__(self, target: str, detail: str) -> None:
        self.target = target
        self.detail = detail
        super().__init__(f'Failed to decode {target}: {detail}')


class PollTimeoutError(AppianCliError):
    """Raised when an operation does not reach a terminal status before the polling deadline.

    Fatal to the poll loop only. The server-side operation keeps running.
    """

    exit_code = exit_codes.EXIT_POLL_TIMEOUT

    def __init__(self, operation_uuid: str, timeout_seconds: float) -> None:
        self.operation_uuid = operation_uuid
        self.timeout_seconds = timeout_seconds
        super().__init__(f'Operation {operation_uuid} did not complete within {timeout_seconds:g} seconds')
