from shortlinks.utils.config import app_env, app_name, app_prefix, service_name, load_config, redis_dao_kwargs, LinkSettings
from shortlinks.utils.helpers import base_url, get_short_url, require_environment, guarantee_500_response
from shortlinks.utils.runtime import running_locally, Deadline
from shortlinks.utils.shortener import generate_shortcode
from shortlinks.utils.logging import initialize_logging


__all__ = [
    'generate_shortcode',
    'app_env',
    'app_name',
    'app_prefix',
    'service_name',
    'load_config',
    'redis_dao_kwargs',
    'LinkSettings',
    'base_url',
    'get_short_url',
    'require_environment',
    'guarantee_500_response',
    'running_locally',
    'Deadline',
    'initialize_logging',
]
