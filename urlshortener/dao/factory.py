"""Pick and open the short URL data store for an AppConfig

Precedence: database DSN, then Redis host, then snapshot file path, else memory.

Example:
    >>> from urlshortener.utils import load_config
    >>> dao = open_short_url_dao(load_config())
    >>> type(dao).__name__
    'ShortURLMemoryDAO'
"""

import logging

from urlshortener.dao.base import ShortURLBaseDAO
from urlshortener.utils.config import AppConfig


logger = logging.getLogger(__name__)


def open_short_url_dao(config: AppConfig) -> ShortURLBaseDAO:
    """Open the configured backend

    Backend modules are imported lazily so that an unused backend's driver
    does not have to be importable.

    Raises:
        DataStoreError:
            If the selected backend can't be reached or loaded.
        StorageConsistencyError:
            If the file backend finds an interrupted snapshot.
    """
    if config.database_dsn:
        from urlshortener.dao.sql import ShortURLSQLDAO

        logger.info('Using database backend.')
        return ShortURLSQLDAO(
            dsn=config.database_dsn,
            timeout=config.database_timeout,
            connect_timeout=config.database_connect_timeout,
        )

    if config.redis_host:
        from urlshortener.dao.redis import ShortURLRedisDAO

        logger.info('Using Redis backend.', extra={'redisHost': config.redis_host})
        return ShortURLRedisDAO(
            redis_host=config.redis_host,
            redis_port=config.redis_port,
            redis_db=config.redis_db,
            redis_username=config.redis_username,
            redis_password=config.redis_password,
            redis_timeout=config.redis_timeout,
            prefix=config.app_prefix,
        )

    if config.file_storage_path:
        from urlshortener.dao.file import ShortURLFileDAO

        logger.info('Using file backend.', extra={'snapshotPath': config.file_storage_path})
        return ShortURLFileDAO(config.file_storage_path)

    from urlshortener.dao.memory import ShortURLMemoryDAO

    logger.info('Using memory backend. Nothing will be persisted.')
    return ShortURLMemoryDAO()
