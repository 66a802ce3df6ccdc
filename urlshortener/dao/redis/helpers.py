import functools
import redis

from urlshortener.dao.exceptions import DataStoreError, DataStoreTimeoutError


__all__ = []


def redis_address(client: redis.Redis) -> str:
    """Render '<host>:<port>/<db>' of a Redis client for error messages"""
    info = client.connection_pool.connection_kwargs
    return f"{info.get('host')}:{info.get('port')}/{info.get('db')}"


def handle_redis_errors[F](method: F) -> F:
    """Wrap Redis-interacting DAO methods to translate Redis errors

    Args:
        method (Callable[..., Any]):
            DAO method performing Redis operations which may raise redis.exceptions.RedisError.

    Returns:
        Callable[..., Any]:
            Wrapped method which raises DataStoreTimeoutError on socket timeouts and
            DataStoreError on connectivity issues or any other Redis failure.

    Example:
        >>> @handle_redis_errors
        ... def get_count(self):
        ...     return self.redis.get('count')
    """

    @functools.wraps(method)
    def wrapper(self, *args, **kwargs):
        try:
            return method(self, *args, **kwargs)
        except redis.exceptions.TimeoutError as e:
            raise DataStoreTimeoutError(f'Redis at {redis_address(self.redis)} timed out.') from e
        except redis.exceptions.ConnectionError as e:
            raise DataStoreError(f"Can't connect to Redis at {redis_address(self.redis)}.") from e
        except redis.exceptions.RedisError as e:
            raise DataStoreError(f'Redis at {redis_address(self.redis)} failed: {e}') from e

    return wrapper
