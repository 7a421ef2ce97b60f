"""API Gateway (Lambda proxy) responses shared by the HTTP handlers

Every error response carries a JSON body of the form:

    {"message": "<human-readable reason>", "error_code": "<machine-readable code>"}

Functions:
    json_response(status_code, body, headers) -> dict
    response_302(location) -> dict
    response_400(message, error_code) -> dict
    error_response(error) -> dict
        Map a domain or data store error to its HTTP status.
    short_url_payload(record, short_url, now) -> dict
        JSON representation of a record, including its live metrics.
"""

import json
from datetime import datetime
from typing import Any

from shortlinks.constants import BAD_REQUEST, STORAGE_UNAVAILABLE
from shortlinks.dao.exceptions import DataStoreError
from shortlinks.exceptions import (
    ShortLinksError,
    ValidationError,
    QuotaExceededError,
    ShortcodeInUseError,
    CodeSpaceExhaustedError,
    LinkNotFoundError,
    LinkExpiredError,
)
from shortlinks.models import ShortURLModel
from shortlinks.stats import record_metrics
from shortlinks.types import LambdaResponse


# Checked in order, first match wins
ERROR_STATUS_CODES: tuple[tuple[type[Exception], int], ...] = (
    (ValidationError, 400),
    (QuotaExceededError, 429),
    (ShortcodeInUseError, 409),
    (CodeSpaceExhaustedError, 503),
    (LinkNotFoundError, 404),
    (LinkExpiredError, 410),
    (DataStoreError, 503),
)


def json_response(status_code: int, body: Any = None, headers: dict[str, str] | None = None) -> LambdaResponse:
    return {
        'statusCode': status_code,
        'headers': {'Content-Type': 'application/json', **(headers or {})},
        'body': json.dumps(body if body is not None else {}),
    }


def response_302(*, location: str) -> LambdaResponse:
    return {
        'statusCode': 302,
        'headers': {'Location': location},
        'body': json.dumps({}),  # no body needed for redirects
    }


def response_400(message: str, error_code: str = BAD_REQUEST) -> LambdaResponse:
    return json_response(400, {'message': f'Bad Request ({message})', 'error_code': error_code})


def error_response(error: ShortLinksError | DataStoreError) -> LambdaResponse:
    """Translate a domain or data store error into its HTTP response

    Raises:
        TypeError: If the error has no HTTP mapping (left to guarantee_500_response).
    """
    for error_class, status_code in ERROR_STATUS_CODES:
        if isinstance(error, error_class):
            break
    else:
        raise TypeError(f'No HTTP status mapped for {error.__class__.__name__}.') from error

    error_code = STORAGE_UNAVAILABLE if isinstance(error, DataStoreError) else error.error_code
    message = 'Storage unavailable, try again later' if isinstance(error, DataStoreError) else str(error)
    return json_response(status_code, {'message': message, 'error_code': error_code})


def short_url_payload(record: ShortURLModel, short_url: str, now: datetime) -> dict[str, Any]:
    return {
        'id': record.id,
        'target_url': record.target,
        'shortcode': record.shortcode,
        'short_url': short_url,
        'validity_minutes': record.validity_minutes,
        'created_at': record.created_at.isoformat(),
        'expires_at': record.expires_at.isoformat(),
        'hits': record.hits,
        **record_metrics(record, now).to_dict(),
    }
