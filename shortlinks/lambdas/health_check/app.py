import os
import uuid
import logging

from shortlinks.types import LambdaEvent, LambdaContext, LambdaResponse
from shortlinks.constants import ENV
from shortlinks.dao.redis import ShortURLRedisDAO
from shortlinks.dao.exceptions import DataStoreError
from shortlinks.exceptions import ConfigurationError
from shortlinks.utils import load_config, redis_dao_kwargs, app_prefix, service_name, Deadline
from shortlinks.utils.helpers import guarantee_500_response
from shortlinks.utils.responses import response_200, response_500
from shortlinks.lambdas.health_check.constants import HEALTHY, UNHEALTHY


logger = logging.getLogger(__name__)

# Identifies this container across warm invocations unless INSTANCE_ID is set
_GENERATED_INSTANCE_ID = str(uuid.uuid4())


def instance_id() -> str:
    return os.environ.get(ENV.App.INSTANCE_ID) or _GENERATED_INSTANCE_ID


@guarantee_500_response
def lambda_handler(event: LambdaEvent, context: LambdaContext) -> LambdaResponse:
    """Report service identity and Redis reachability

    HTTP responses:
        200: Redis answered PING
            message: OK
            service_name: SERVICE_NAME (default: shortlinks)
            instance_id: INSTANCE_ID, or a UUID generated once per container
        500: Configuration could not be loaded or Redis is unreachable
    """
    deadline = Deadline.from_context(context)

    try:
        app_config = load_config('health_check')
        dao = ShortURLRedisDAO(**redis_dao_kwargs(app_config, deadline=deadline), prefix=app_prefix(), healthcheck=False)
        dao.ping()
    except (ConfigurationError, DataStoreError) as error:
        logger.exception('Health check failed. Responding with 500.', extra={'event': UNHEALTHY, 'error': error.error_code})
        return response_500(error_code=error.error_code)

    logger.debug('Health check passed.', extra={'event': HEALTHY})
    return response_200(
        {
            'message': 'OK',
            'service_name': service_name(),
            'instance_id': instance_id(),
        }
    )
