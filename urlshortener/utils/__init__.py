from urlshortener.utils.config import app_env, app_name, app_prefix, load_config
from urlshortener.utils.helpers import base_url, get_short_url, client_ip, is_valid_url, require_environment
from urlshortener.utils.logging import initialize_logging


__all__ = [
    'app_env',
    'app_name',
    'app_prefix',
    'load_config',
    'base_url',
    'get_short_url',
    'client_ip',
    'is_valid_url',
    'require_environment',
    'initialize_logging',
]
