import json
import logging

from shortlinks.types import LambdaEvent, LambdaContext, LambdaResponse
from shortlinks.core import ShortLinkAllocator
from shortlinks.dao.redis import ShortURLRedisDAO
from shortlinks.exceptions import ConfigurationError, ShortLinksError, ValidationError
from shortlinks.models import ShortLinkRequest
from shortlinks.utils import load_config, redis_dao_kwargs, app_prefix, get_short_url, LinkSettings, Deadline
from shortlinks.utils.helpers import guarantee_500_response
from shortlinks.utils.responses import response_201, response_400, response_500, response_for_error
from shortlinks.lambdas.shorten_url.constants import (
    INVALID_JSON_BODY,
    CONFIGURATION_ERROR,
    SHORTEN_FAILED,
    SHORTEN_REJECTED,
    SHORTEN_SUCCESS,
)


logger = logging.getLogger(__name__)

SUCCESS_MESSAGE = 'Shorten URL generated successfully!'


@guarantee_500_response
def lambda_handler(event: LambdaEvent, context: LambdaContext) -> LambdaResponse:
    """Handle incoming API Gateway requests to shorten URLs

    This Lambda handler follows this procedure to shorten URLs:
    - Step 1: Load configuration
    - Step 2: Extract and validate target URL and TTL from request body
    - Step 3: Allocate a free short code and store the mapping (via allocator)
    - Step 4: Respond to user with 201 created

    HTTP responses:
        201: Successful URL shortening
            code: newly generated short code
            message: success message
            short_url: public redirect URL for the code
            target_url: original url (provided in request)
            ttl_seconds: lifetime of the short link
        400: Bad client request
            message: cause of bad request (invalid JSON, missing/invalid url or TTL)
        500: Internal server error
            message: the server experienced an internal error
                     (configuration, store outage or exhausted retry budget)

    Args:
        event (LambdaEvent):
            API Gateway event payload in Lambda Proxy format.
        context (LambdaContext):
            AWS Lambda context object; its remaining time bounds the allocation.

    Returns:
        LambdaResponse:
            API Gateway-compatible response including statusCode, headers, and body.

    Example:
        >>> event = {'body': '{"url": "https://example.com", "exp": 600}'}
        >>> response = lambda_handler(event, None)
        >>> response['statusCode']
        201
        >>> json.loads(response['body'])['code']
        'q7FemOj2'
    """
    deadline = Deadline.from_context(context)

    # 1- Get application's config
    try:
        app_config = load_config('shorten_url')
        settings = LinkSettings.from_config(app_config)
        redis_config = redis_dao_kwargs(app_config, deadline=deadline)
    except ConfigurationError as error:
        logger.exception('Failed to load configuration for shorten URL function. Responding with 500.', extra={'event': CONFIGURATION_ERROR})
        return response_500(error_code=error.error_code)

    # 2- Extract target URL and TTL from request body
    try:
        body = json.loads(event.get('body') or '{}')
    except json.JSONDecodeError:
        logger.info('Invalid JSON body. Responding with 400.', extra={'event': INVALID_JSON_BODY})
        return response_400(message='invalid JSON body', error_code=INVALID_JSON_BODY)

    try:
        request = ShortLinkRequest.from_body(body, default_ttl=settings.default_ttl_seconds)
    except ValidationError as error:
        logger.info('Rejected shorten request. Responding with 400.', extra={'event': SHORTEN_REJECTED, 'reason': str(error)})
        return response_400(message=str(error), error_code=error.error_code)

    # 3- Allocate a short code and store the mapping
    short_url_dao = ShortURLRedisDAO(**redis_config, prefix=app_prefix(), healthcheck=False)
    allocator = ShortLinkAllocator(short_url_dao, code_length=settings.code_length, retry_budget=settings.retry_budget)
    try:
        shortcode = allocator.shorten(request.target_url, request.ttl_seconds, deadline=deadline)
    except ShortLinksError as error:
        logger.log(
            logging.INFO if isinstance(error, ValidationError) else logging.ERROR,
            'Failed to shorten URL (%s).',
            error.__class__.__name__,
            extra={'event': SHORTEN_FAILED, 'error': error.error_code},
        )
        return response_for_error(error)

    # 4- Return successful response to user
    short_url = get_short_url(shortcode, event)
    logger.info(
        'Shortened target URL. Responding with 201.',
        extra={'shortcode': shortcode, 'event': SHORTEN_SUCCESS, 'ttl_seconds': request.ttl_seconds},
    )
    return response_201(
        {
            'code': shortcode,
            'message': SUCCESS_MESSAGE,
            'short_url': short_url,
            'target_url': request.target_url,
            'ttl_seconds': request.ttl_seconds,
        }
    )
