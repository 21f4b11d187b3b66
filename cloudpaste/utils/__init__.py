from cloudpaste.utils.config import app_env, app_name, app_prefix, load_config
from cloudpaste.utils.helpers import base_url, get_short_url, require_environment, guarantee_500_response
from cloudpaste.utils.shortener import generate_shortcode
from cloudpaste.utils.logging import initialize_logging
from cloudpaste.utils.workers import BoundedExecutor


__all__ = [
    'generate_shortcode',
    'app_env',
    'app_name',
    'app_prefix',
    'load_config',
    'base_url',
    'get_short_url',
    'require_environment',
    'guarantee_500_response',
    'initialize_logging',
    'BoundedExecutor',
]
