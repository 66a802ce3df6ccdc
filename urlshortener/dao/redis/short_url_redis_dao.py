"""Data Access Object (DAO) implementation for managing shortened URLs in Redis

This module provides a Redis-based implementation of ShortURLBaseDAO for
short URL records with soft deletion.

Responsibilities:
    - Assign ids from a global INCR counter;
    - Keep the URL uniqueness index and per-user id sets in step with records;
    - Soft-delete records and free their URLs for re-shortening;
    - Translate Redis errors into DAO exceptions.

Classes:
    ShortURLRedisDAO:
        DAO for storing and retrieving ShortURLModel in a Redis datastore.

Example:
    >>> from urlshortener.dao.redis import ShortURLRedisDAO

    >>> dao = ShortURLRedisDAO(prefix="urlshortener:dev")
    >>> dao.store('https://ya.ru', 'u1')
    1
    >>> dao.get_by_id(1)
    ShortURLModel(id=1, original_url='https://ya.ru', added_by='u1', is_deleted=False)
    >>> dao.delete_by_id(1)
    >>> dao.get_by_url('https://ya.ru')
    Traceback (most recent call last):
        ...
    urlshortener.dao.exceptions.ShortURLNotFoundError: Short URL for 'https://ya.ru' not found.
"""

import logging
from collections.abc import Iterable

import redis
from beartype import beartype

from urlshortener.models import ShortURLModel, BatchRequestRecord, BatchResponseRecord
from urlshortener.dao.base import ShortURLBaseDAO
from urlshortener.dao.redis.mixins import RedisClientMixin
from urlshortener.dao.redis.helpers import handle_redis_errors
from urlshortener.dao.exceptions import DataStoreError, ShortURLAlreadyExistsError, ShortURLNotFoundError
from urlshortener.types import NonEmptyStr


logger = logging.getLogger(__name__)

# Optimistic transactions give up after this many lost WATCH races
MAX_WATCH_RETRIES = 5


class ShortURLRedisDAO(RedisClientMixin, ShortURLBaseDAO):
    """Redis-based Data Access Object (DAO) for managing short URL records

    This class implements the ShortURLBaseDAO interface using Redis as a data store.
    Every command is bounded by the client's socket timeout; the per-call
    `timeout` keyword argument is accepted and ignored.

    Attributes (see RedisClientMixin):
        redis (redis.Redis):
            Redis client used to communicate with the Redis datastore.
        keys (RedisKeySchema):
            Key schema helper for generating namespaced Redis keys.

    Example:
        >>> dao = ShortURLRedisDAO(redis_host="localhost", prefix="urlshortener:test")
        >>> dao.store_batch([BatchRequestRecord('a', 'https://ya.ru'), BatchRequestRecord('b', 'https://ya.ru')], 'u1')
        [BatchResponseRecord(correlation_id='a', id=1), BatchResponseRecord(correlation_id='b', id=1)]
    """

    @handle_redis_errors
    @beartype
    def store(self, original_url: NonEmptyStr, added_by: NonEmptyStr, **kwargs) -> int:
        """Insert a short URL record into Redis

        Raises:
            ShortURLAlreadyExistsError:
                If the URL index key exists, or another client created it
                while this transaction was in flight.
            DataStoreError:
                If a Redis connection issue occurs during the transaction.
        """
        index_key = self.keys.url_index_key(original_url)

        # NOTE: WATCH makes the MULTI/EXEC fail if a concurrent store() claims the
        #       same URL between the EXISTS check and EXEC. Without it two clients
        #       could both pass the check and create two live records for one URL:
        #
        #       (client 1): EXISTS <app>:urls:index:<url>  => 0
        #       (client 2): EXISTS <app>:urls:index:<url>  => 0
        #       (client 2): MULTI ... SET <app>:urls:index:<url> 7 ... EXEC
        #       (client 1): MULTI ... SET <app>:urls:index:<url> 8 ... EXEC  => overwrites the index
        #
        #       The id INCR'ed by the losing client is never used.
        with self.redis.pipeline(transaction=True) as pipe:
            try:
                pipe.watch(index_key)
                if pipe.exists(index_key):
                    logger.warning('Rejected duplicate URL.', extra={'originalUrl': original_url})
                    raise ShortURLAlreadyExistsError(original_url)

                short_url_id = int(pipe.incr(self.keys.counter_key()))
                pipe.multi()
                pipe.set(index_key, short_url_id)
                pipe.hset(
                    self.keys.url_key(short_url_id),
                    mapping={'original_url': original_url, 'added_by': added_by, 'is_deleted': '0'},
                )
                pipe.sadd(self.keys.user_urls_key(added_by), short_url_id)
                pipe.execute()
            except redis.exceptions.WatchError:
                raise ShortURLAlreadyExistsError(original_url) from None

        return short_url_id

    @handle_redis_errors
    @beartype
    def store_batch(self, records: list[BatchRequestRecord], added_by: NonEmptyStr, **kwargs) -> list[BatchResponseRecord]:
        """Insert records one URL at a time, resolving duplicates to existing ids

        Each distinct URL is its own transaction: a failure midway leaves the
        URLs stored so far in place, and retrying the batch resolves them.
        """
        self._validate_batch(records)
        ids_by_url = {url: self._store_or_resolve(url, added_by) for url in dict.fromkeys(record.original_url for record in records)}
        return [BatchResponseRecord(correlation_id=record.correlation_id, id=ids_by_url[record.original_url]) for record in records]

    @handle_redis_errors
    @beartype
    def get_by_id(self, short_url_id: int, **kwargs) -> ShortURLModel:
        data = self.redis.hgetall(self.keys.url_key(short_url_id))
        if not data:
            raise ShortURLNotFoundError(f"Short URL with id '{short_url_id}' not found.")
        return self._to_model(short_url_id, data)

    @handle_redis_errors
    @beartype
    def get_by_id_multi(self, ids: Iterable[int], **kwargs) -> list[ShortURLModel]:
        ids = sorted(set(ids))
        if not ids:
            return []

        with self.redis.pipeline(transaction=False) as pipe:
            for short_url_id in ids:
                pipe.hgetall(self.keys.url_key(short_url_id))
            results = pipe.execute()

        return [self._to_model(short_url_id, data) for short_url_id, data in zip(ids, results) if data]

    @handle_redis_errors
    @beartype
    def get_by_url(self, original_url: str, **kwargs) -> ShortURLModel:
        short_url_id = self.redis.get(self.keys.url_index_key(original_url))
        if short_url_id is not None:
            data = self.redis.hgetall(self.keys.url_key(int(short_url_id)))
            # The index may point to a record deleted since the GET
            if data and data.get('is_deleted') != '1':
                return self._to_model(int(short_url_id), data)

        raise ShortURLNotFoundError(f"Short URL for '{original_url}' not found.")

    @handle_redis_errors
    @beartype
    def get_all_user_urls(self, added_by: str, **kwargs) -> list[ShortURLModel]:
        ids = [int(short_url_id) for short_url_id in self.redis.smembers(self.keys.user_urls_key(added_by))]
        rows = [row for row in self.get_by_id_multi(ids) if not row.is_deleted]
        if not rows:
            raise ShortURLNotFoundError(f"User '{added_by}' has no short URLs.")
        return rows

    @handle_redis_errors
    @beartype
    def delete_by_id_multi(self, ids: Iterable[int], **kwargs) -> None:
        for short_url_id in sorted(set(ids)):
            self._delete(short_url_id)

    @handle_redis_errors
    def ping(self, **kwargs) -> bool:
        return self._healthcheck()

    def close(self) -> None:
        self._close_client()

    def _store_or_resolve(self, original_url: str, added_by: str) -> int:
        for _ in range(MAX_WATCH_RETRIES):
            try:
                return self.store(original_url, added_by)
            except ShortURLAlreadyExistsError:
                existing_id = self.redis.get(self.keys.url_index_key(original_url))
                if existing_id is not None:
                    return int(existing_id)
                # The conflicting record was deleted meanwhile: try inserting again

        raise DataStoreError(f"Could not store or resolve '{original_url}' after {MAX_WATCH_RETRIES} attempts.")

    def _delete(self, short_url_id: int) -> None:
        url_key = self.keys.url_key(short_url_id)

        # NOTE: the index key is dropped only if it still points to this id. A URL
        #       freed by an earlier deletion may already belong to a newer record,
        #       which must stay resolvable.
        with self.redis.pipeline(transaction=True) as pipe:
            for _ in range(MAX_WATCH_RETRIES):
                try:
                    pipe.watch(url_key)
                    original_url, is_deleted = pipe.hmget(url_key, ['original_url', 'is_deleted'])
                    if original_url is None or is_deleted == '1':
                        return

                    index_key = self.keys.url_index_key(original_url)
                    pipe.watch(index_key)
                    owner_id = pipe.get(index_key)

                    pipe.multi()
                    pipe.hset(url_key, 'is_deleted', '1')
                    if owner_id is not None and int(owner_id) == short_url_id:
                        pipe.delete(index_key)
                    pipe.execute()
                    return
                except redis.exceptions.WatchError:
                    logger.debug('Retrying contended deletion.', extra={'shortUrlId': short_url_id})

        raise DataStoreError(f"Could not delete short URL '{short_url_id}' after {MAX_WATCH_RETRIES} attempts.")

    @staticmethod
    def _to_model(short_url_id: int, data: dict) -> ShortURLModel:
        return ShortURLModel(
            id=short_url_id,
            original_url=data['original_url'],
            added_by=data['added_by'],
            is_deleted=data.get('is_deleted') == '1',
        )
