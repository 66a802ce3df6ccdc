from urlshortener.utils.config import AppConfig, app_env, app_name, app_prefix, load_config
from urlshortener.utils.helpers import get_short_url
from urlshortener.utils.logging import initialize_logging


__all__ = [
    'AppConfig',
    'app_env',
    'app_name',
    'app_prefix',
    'load_config',
    'get_short_url',
    'initialize_logging',
]
