"""Utility functions for application configuration management.

Configuration is read once, at startup, from environment variables and
returned as an immutable AppConfig. The storage core never reads the
environment itself: whoever assembles the service passes the relevant
values on.

Backend selection (see urlshortener.dao.factory):

    DATABASE_DSN set        -> SQL database
    REDIS_HOST set          -> Redis
    FILE_STORAGE_PATH set   -> snapshot file
    otherwise               -> in-process memory

Functions:
    app_env() -> str
        Return the current application environment (`APP_ENV`) value,
        defaulting to `'local'`.

    app_name() -> str | None
        Return the application name (`APP_NAME`), or None if not set.

    app_prefix() -> str | None
        Return application prefix for DAOs, or None if `APP_NAME` is not set.

    load_config() -> AppConfig
        Read and validate every setting.

Example:
    >>> os.environ['DATABASE_DSN'] = 'postgresql+psycopg2://shortener@localhost/shortener'
    >>> config = load_config()
    >>> config.database_timeout
    1.0
"""

import os
from dataclasses import dataclass, field

from urlshortener.constants import ENV, Timeout, DeletionDefaults, DEFAULT_BASE_URL
from urlshortener.exceptions import BadConfigurationError


@dataclass(frozen=True)
class AppConfig:
    """Validated application settings (see load_config())"""

    app_prefix: str | None = None
    log_level: str = 'INFO'
    log_file: str | None = None
    base_url: str = DEFAULT_BASE_URL

    # Secrets never show up in repr() (and therefore in logs)
    database_dsn: str | None = field(default=None, repr=False)
    database_timeout: float = Timeout.QUERY
    database_connect_timeout: float = Timeout.CONNECT

    redis_host: str | None = None
    redis_port: int = 6379
    redis_db: int = 0
    redis_username: str | None = None
    redis_password: str | None = field(default=None, repr=False)
    redis_timeout: float = Timeout.QUERY

    file_storage_path: str | None = None

    delete_batch_size: int = DeletionDefaults.BATCH_SIZE
    delete_batch_window: float = DeletionDefaults.WINDOW
    delete_queue_size: int = DeletionDefaults.QUEUE_SIZE


def app_env() -> str:
    """Return the current application environment by reading 'APP_ENV'

    Example:
        >>> os.environ['APP_ENV'] = 'dev'
        >>> app_env()
        'dev'
    """
    return os.environ.get(ENV.App.APP_ENV, 'local').lower()


def app_name() -> str | None:
    """Return the current application name by reading 'APP_NAME' (None if not set)"""
    return os.environ.get(ENV.App.APP_NAME)


def app_prefix() -> str | None:
    """Return application prefix for DAOs

    Returns:
        str: app prefix as <app name>:<app env>.
             None if APP_NAME is not set.

    Example:
        >>> os.environ['APP_NAME'] = 'urlshortener'
        >>> os.environ['APP_ENV'] = 'local'
        >>> app_prefix()
        'urlshortener:local'
    """
    return None if app_name() is None else f'{app_name()}:{app_env()}'


def load_config() -> AppConfig:
    """Load application configuration from environment variables

    Empty variables count as unset.

    Returns:
        AppConfig: validated settings with defaults applied.

    Raises:
        BadConfigurationError:
            If a numeric variable is malformed or out of range.
    """
    return AppConfig(
        app_prefix=app_prefix(),
        log_level=_getenv(ENV.App.LOG_LEVEL, 'INFO').upper(),
        log_file=_getenv(ENV.App.LOG_FILE),
        base_url=_getenv(ENV.App.BASE_URL, DEFAULT_BASE_URL),
        database_dsn=_getenv(ENV.Database.DSN),
        database_timeout=_positive_float(ENV.Database.TIMEOUT, Timeout.QUERY),
        database_connect_timeout=_positive_float(ENV.Database.CONNECT_TIMEOUT, Timeout.CONNECT),
        redis_host=_getenv(ENV.Redis.HOST),
        redis_port=_int(ENV.Redis.PORT, 6379, minimum=1),
        redis_db=_int(ENV.Redis.DB, 0, minimum=0),
        redis_username=_getenv(ENV.Redis.USERNAME),
        redis_password=_getenv(ENV.Redis.PASSWORD),
        redis_timeout=_positive_float(ENV.Redis.TIMEOUT, Timeout.QUERY),
        file_storage_path=_getenv(ENV.File.STORAGE_PATH),
        delete_batch_size=_int(ENV.Deletion.BATCH_SIZE, DeletionDefaults.BATCH_SIZE, minimum=1),
        delete_batch_window=_positive_float(ENV.Deletion.WINDOW, DeletionDefaults.WINDOW),
        delete_queue_size=_int(ENV.Deletion.QUEUE_SIZE, DeletionDefaults.QUEUE_SIZE, minimum=1),
    )


def _getenv(name: str, default: str | None = None) -> str | None:
    return os.environ.get(name) or default


def _int(name: str, default: int, minimum: int) -> int:
    raw = _getenv(name)
    if raw is None:
        return default

    try:
        value = int(raw)
    except ValueError:
        raise BadConfigurationError(f"'{name}' must be an integer (given: '{raw}').") from None
    if value < minimum:
        raise BadConfigurationError(f"'{name}' must be at least {minimum} (given: {value}).")
    return value


def _positive_float(name: str, default: float) -> float:
    raw = _getenv(name)
    if raw is None:
        return default

    try:
        value = float(raw)
    except ValueError:
        raise BadConfigurationError(f"'{name}' must be a number of seconds (given: '{raw}').") from None
    # NaN fails this comparison too
    if not value > 0:
        raise BadConfigurationError(f"'{name}' must be positive (given: {value}).")
    return value
