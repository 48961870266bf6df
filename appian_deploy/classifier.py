"""
Response classification.

Maps a completed HTTP response (status code + body) onto either a decoded
payload of the requested type or one exception of the error taxonomy in
exceptions.py. Pure apart from logging: no retries, no partial results.

Status mapping:
    2xx      -> decode body as target, DecodeError on mismatch
    401, 403 -> AuthenticationError
    404      -> NotFoundError
    408      -> RequestTimeoutError
    5xx      -> ServerError
    other    -> ApiError
"""

from __future__ import annotations

import logging
from typing import TypeVar

import pydantic

from appian_deploy.exceptions import (
    ApiError,
    ApiResponseError,
    AuthenticationError,
    DecodeError,
    NotFoundError,
    RequestTimeoutError,
    ServerError,
)
from appian_deploy.redaction import redact_sensitive_info

__all__ = [
    'check_status',
    'classify_response',
    'error_for_status',
]

logger = logging.getLogger(__name__)

T = TypeVar('T')


def classify_response(status_code: int, body: bytes, target: type[T], *, url: str) -> T:
    """
    Classify a completed response and decode its payload.

    Args:
        status_code: HTTP status code
        body: Raw response body
        target: Type to decode a 2xx body into (pydantic model or any TypeAdapter-able type)
        url: Request URL, for logging and error context

    Returns:
        The decoded payload

    Raises:
        DecodeError: 2xx body did not decode as target
        ApiResponseError: Non-2xx status (see module docstring for the subclass)
    """
    check_status(status_code, body, url=url)
    target_name = getattr(target, '__name__', repr(target))
    try:
        return pydantic.TypeAdapter(target).validate_json(body)
    except pydantic.ValidationError as e:
        logger.error(f'Response {status_code} from {url} did not decode as {target_name}')
        raise DecodeError(target_name, str(e)) from e


def check_status(status_code: int, body: bytes, *, url: str) -> None:
    """
    Raise the taxonomy exception for a non-2xx response, do nothing for 2xx.

    Used directly for payloads that are not JSON documents (artifact downloads)
    or that need their own decoding (the untagged results union).
    """
    if 200 <= status_code < 300:
        logger.debug(f'Response {status_code} from {url}')
        return

    error = error_for_status(status_code, body.decode('utf-8', errors='replace'))
    logger.error(f'API error {status_code} from {url}: {redact_sensitive_info(error.message)}')
    raise error


def error_for_status(status_code: int, message: str) -> ApiResponseError:
    """Build the taxonomy exception for a non-2xx status code."""
    if status_code in (401, 403):
        return AuthenticationError(status_code, message)
    if status_code == 404:
        return NotFoundError(status_code, message)
    if status_code == 408:
        return RequestTimeoutError(status_code, message)
    if 500 <= status_code < 600:
        return ServerError(status_code, message)
    return ApiError(status_code, message)
