import logging

from shortlinks.types import LambdaEvent, LambdaContext, LambdaResponse
from shortlinks.core import RedirectResolver
from shortlinks.core.resolver import normalize_shortcode
from shortlinks.dao.redis import ShortURLRedisDAO
from shortlinks.exceptions import ConfigurationError, NotFoundError, ShortLinksError, ValidationError
from shortlinks.utils import load_config, redis_dao_kwargs, app_prefix, Deadline
from shortlinks.utils.helpers import guarantee_500_response
from shortlinks.utils.responses import response_302, response_400, response_500, response_for_error
from shortlinks.lambdas.redirect_url.constants import (
    MISSING_SHORTCODE,
    SHORT_URL_NOT_FOUND,
    CONFIGURATION_ERROR,
    REDIRECT_FAILED,
    REDIRECT_SUCCESS,
)


logger = logging.getLogger(__name__)


@guarantee_500_response
def lambda_handler(event: LambdaEvent, context: LambdaContext) -> LambdaResponse:
    """Handle incoming API Gateway requests to redirect URLs

    This Lambda handler follows this procedure to redirect URLs:
    - Step 1: Extract short code from request path
    - Step 2: Load configuration
    - Step 3: Resolve the short code via the data store
    - Step 4: Redirect client to target URL

    HTTP responses:
        302: Successful redirect
            headers:
                Location: target URL destination
        400: Bad client request
            message: missing or empty short code in path parameters
        404: Not found
            message: short code never existed or already expired
        500: Internal server error
            message: server experienced an internal error

    Args:
        event (LambdaEvent):
            API Gateway event payload containing the `code` path parameter.
        context (LambdaContext):
            AWS Lambda runtime context object.

    Returns:
        LambdaResponse:
            API Gateway-compatible response including statusCode, headers, and body.

    Example:
        >>> event = {'pathParameters': {'code': 'q7FemOj2'}}
        >>> response = lambda_handler(event, None)
        >>> response['statusCode']
        302
        >>> response['headers']['Location']
        'https://example.com/my-page'
    """
    deadline = Deadline.from_context(context)

    # 1- Extract short code from request's path
    shortcode = normalize_shortcode((event.get('pathParameters') or {}).get('code'))
    if not shortcode:
        logger.info('Missing short code in path. Responding with 400.', extra={'event': MISSING_SHORTCODE})
        return response_400(message="missing 'code' in path", error_code=MISSING_SHORTCODE)

    # 2- Get application's config
    try:
        app_config = load_config('redirect_url')
        redis_config = redis_dao_kwargs(app_config, deadline=deadline)
    except ConfigurationError as error:
        logger.exception('Failed to load configuration for redirect URL function. Responding with 500.', extra={'event': CONFIGURATION_ERROR})
        return response_500(error_code=error.error_code)

    # 3- Resolve the short code
    resolver = RedirectResolver(ShortURLRedisDAO(**redis_config, prefix=app_prefix(), healthcheck=False))
    try:
        target_url = resolver.resolve(shortcode, deadline=deadline)
    except NotFoundError as error:
        logger.info('Short URL record not found in database. Responding with 404.', extra={'shortcode': shortcode, 'event': SHORT_URL_NOT_FOUND})
        return response_for_error(error)
    except ShortLinksError as error:
        logger.log(
            logging.INFO if isinstance(error, ValidationError) else logging.ERROR,
            'Failed to resolve short URL (%s).',
            error.__class__.__name__,
            extra={'shortcode': shortcode, 'event': REDIRECT_FAILED, 'error': error.error_code},
        )
        return response_for_error(error)

    # 4- Redirect client to target URL
    logger.info('Redirecting client to target URL. Responding with 302.', extra={'shortcode': shortcode, 'event': REDIRECT_SUCCESS})
    return response_302(location=target_url)
