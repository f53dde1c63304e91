"""API Gateway (Lambda proxy) response builders

Every error body carries a human readable `message` and, where known, a
machine readable `error_code`.
"""

import json

from shortlinks.exceptions import CollisionExhaustedError, NotFoundError, ShortLinksError, StorageError, ValidationError
from shortlinks.types import HttpHeaders, LambdaResponse


JSON_HEADERS: HttpHeaders = {'Content-Type': 'application/json'}


def _response(status_code: int, body: dict, headers: HttpHeaders | None = None) -> LambdaResponse:
    return {
        'statusCode': status_code,
        'headers': {**JSON_HEADERS, **(headers or {})},
        'body': json.dumps(body),
    }


def _error_body(base: str, message: str | None, error_code: str | None) -> dict:
    body = {'message': base if not message else f'{base} ({message})'}
    if error_code:
        body['error_code'] = error_code
    return body


def response_200(body: dict) -> LambdaResponse:
    return _response(200, body)


def response_201(body: dict) -> LambdaResponse:
    return _response(201, body)


def response_302(*, location: str) -> LambdaResponse:
    return {
        'statusCode': 302,
        'headers': {'Location': location},
        'body': json.dumps({}),  # no body needed for redirects
    }


def response_400(message: str | None = None, error_code: str | None = None) -> LambdaResponse:
    return _response(400, _error_body('Bad Request', message, error_code))


def response_404(message: str | None = None, error_code: str | None = None) -> LambdaResponse:
    return _response(404, _error_body('Not Found', message, error_code))


def response_500(message: str | None = None, error_code: str | None = None) -> LambdaResponse:
    return _response(500, _error_body('Internal Server Error', message, error_code))


def response_for_error(error: ShortLinksError) -> LambdaResponse:
    """Map the closed set of link errors onto HTTP responses

    ValidationError -> 400, NotFoundError -> 404, anything else -> 500.
    Server-side failures never echo the underlying error message.
    """
    match error:
        case ValidationError():
            return response_400(message=str(error), error_code=error.error_code)
        case NotFoundError():
            return response_404(message=str(error), error_code=error.error_code)
        case CollisionExhaustedError() | StorageError():
            return response_500(error_code=error.error_code)
        case _:
            return response_500(error_code=getattr(error, 'error_code', None))
