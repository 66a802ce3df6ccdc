import functools
from collections.abc import Callable


__all__ = ['RedisKeySchema']


def namespaced(key_builder: Callable[..., str]) -> Callable[..., str]:
    """Prepend the schema's prefix (if any) to the key a method builds"""

    @functools.wraps(key_builder)
    def wrapper(schema: 'RedisKeySchema', *args) -> str:
        return ':'.join(filter(None, (schema.prefix, key_builder(schema, *args))))

    return wrapper


class RedisKeySchema:
    """Key names of the short URL data in Redis

    Layout (relative to the optional prefix, e.g. 'urlshortener:prod'):
        urls:counter                 -> INCR-assigned id sequence
        urls:<id>                    -> hash {original_url, added_by, is_deleted}
        urls:index:<original_url>    -> id of the non-deleted record of that URL
        users:<added_by>:urls        -> set of ids owned by the user

    Share one Redis database between apps or environments only with distinct prefixes.
    """

    def __init__(self, prefix: str | None = None):
        if not isinstance(prefix, str | None):
            raise TypeError(f'Prefix must be of type string (given type: {type(prefix)}).')
        self.prefix = prefix

    @namespaced
    def counter_key(self) -> str:
        return 'urls:counter'

    @namespaced
    def url_key(self, short_url_id: int) -> str:
        return f'urls:{short_url_id}'

    @namespaced
    def url_index_key(self, original_url: str) -> str:
        return f'urls:index:{original_url}'

    @namespaced
    def user_urls_key(self, added_by: str) -> str:
        return f'users:{added_by}:urls'
