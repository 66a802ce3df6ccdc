"""Client plumbing shared by Redis-backed DAOs

RedisClientMixin owns the connection: it builds (or adopts) a client whose
sockets are bounded by timeouts, verifies the server answers PING before the
DAO is handed out, and releases the pool on shutdown.

Example:
    >>> class ShortURLRedisDAO(RedisClientMixin, ShortURLBaseDAO):
    ...     pass
    ...
    >>> dao = ShortURLRedisDAO(redis_host='localhost', prefix='urlshortener:local')
    >>> dao.keys.counter_key()
    'urlshortener:local:urls:counter'
"""

import logging
from typing import Optional

import redis

from urlshortener.dao.redis.redis_key_schema import RedisKeySchema
from urlshortener.dao.redis.helpers import redis_address
from urlshortener.dao.exceptions import DataStoreError
from urlshortener.constants import Timeout


logger = logging.getLogger(__name__)


class RedisClientMixin:
    """Connect a DAO to Redis and namespace its keys

    Pass either `redis_client` (adopted as is, e.g. a shared client or a mock)
    or the connection parameters of a new client.

    Args:
        redis_host, redis_port, redis_db:
            Server address. Ignored when redis_client is given.
        redis_decode_responses (bool):
            Return str instead of bytes. The DAOs rely on this. Defaults to True.
        redis_username, redis_password:
            ACL credentials, if the server requires them.
        redis_timeout (float):
            Seconds any single command may block on the socket.
        redis_connect_timeout (float):
            Seconds to wait for a TCP connection.
        redis_client (redis.Redis | None):
            Ready-made client.
        prefix (str | None):
            Key namespace, e.g. 'urlshortener:prod'.

    Attributes:
        redis (redis.Redis): the client in use.
        keys (RedisKeySchema): key builder bound to `prefix`.

    Raises:
        DataStoreError:
            If the server doesn't answer PING.
    """

    def __init__(
        self,
        redis_host: Optional[str] = 'localhost',
        redis_port: Optional[int] = 6379,
        redis_db: Optional[int] = 0,
        redis_decode_responses: Optional[bool] = True,
        redis_username: Optional[str] = None,
        redis_password: Optional[str] = None,
        redis_timeout: Optional[float] = Timeout.QUERY,
        redis_connect_timeout: Optional[float] = Timeout.CONNECT,
        redis_client: Optional[redis.Redis] = None,
        prefix: Optional[str] = None,
    ):
        if redis_client is None:
            redis_client = self._connect(
                host=redis_host,
                port=int(redis_port),
                db=int(redis_db),
                decode_responses=redis_decode_responses,
                username=redis_username,
                password=redis_password,
                socket_timeout=redis_timeout,
                socket_connect_timeout=redis_connect_timeout,
            )

        self.keys = RedisKeySchema(prefix=prefix)
        self.redis = redis_client
        self._healthcheck()

    @staticmethod
    def _connect(**connection) -> redis.Redis:
        # Connections are opened lazily, on the first command
        return redis.Redis(**connection)

    def _healthcheck(self, raise_error: bool = True) -> bool:
        """PING the server

        Returns:
            bool: True on PONG. False on failure when raise_error is False.

        Raises:
            DataStoreError:
                On connection failures or timeouts, when raise_error is True.
        """
        try:
            self.redis.ping()
        except (redis.exceptions.ConnectionError, redis.exceptions.TimeoutError) as e:
            address = redis_address(self.redis)
            if raise_error:
                raise DataStoreError(f"Can't connect to Redis at {address}. Check the provided configuration parameters.") from e
            logger.warning('Redis healthcheck failed.', extra={'redisAddress': address})
            return False
        return True

    def _close_client(self) -> None:
        self.redis.close()
        logger.debug('Closed Redis client.', extra={'redisAddress': redis_address(self.redis)})
