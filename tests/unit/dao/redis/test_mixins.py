"""Unit tests for RedisClientMixin.

Test coverage includes:

1. Client setup
   - Ensures a new client gets the connection parameters and socket timeouts.
   - Confirms a given client is adopted untouched and keys are namespaced.

2. Healthcheck
   - Ensures construction fails with DataStoreError when Redis doesn't answer.
   - Confirms connection errors and timeouts are both treated as unreachable.
   - Ensures raise_error=False reports False and logs a warning.

3. Shutdown
   - Ensures _close_client() closes the client.
"""

import logging
from unittest.mock import MagicMock, patch

import pytest
import redis

from urlshortener.dao.exceptions import DataStoreError
from urlshortener.dao.redis.mixins import RedisClientMixin


# -------------------------------
# Fixtures
# -------------------------------


@pytest.fixture
def redis_client(redis_client):
    """Plain (non-pipeline) Redis client mock answering PING."""
    redis_client.ping.return_value = True
    return redis_client


@pytest.fixture
def redis_class():
    with patch('urlshortener.dao.redis.mixins.redis.Redis', autospec=True) as _redis_class:
        _redis_class.return_value.connection_pool = MagicMock(connection_kwargs={'host': '203.0.113.1', 'port': 18000, 'db': 5})
        yield _redis_class


# -------------------------------
# 1. Client setup
# -------------------------------


def test_new_client_has_bounded_timeouts(redis_class):
    mixin = RedisClientMixin(
        redis_host='203.0.113.1',
        redis_port='18000',
        redis_db='5',
        redis_username='default',
        redis_password='hunter2',
        redis_timeout=0.5,
        redis_connect_timeout=2.0,
    )

    redis_class.assert_called_once_with(
        host='203.0.113.1',
        port=18000,
        db=5,
        decode_responses=True,
        username='default',
        password='hunter2',
        socket_timeout=0.5,
        socket_connect_timeout=2.0,
    )
    assert mixin.redis is redis_class.return_value
    mixin.redis.ping.assert_called_once()


def test_given_client_is_adopted(redis_client, app_prefix):
    mixin = RedisClientMixin(redis_client=redis_client, prefix=app_prefix)

    assert mixin.redis is redis_client
    assert mixin.keys.counter_key() == f'{app_prefix}:urls:counter'


# -------------------------------
# 2. Healthcheck
# -------------------------------


def test_unreachable_redis_fails_construction(redis_class):
    redis_class.return_value.ping.side_effect = redis.exceptions.ConnectionError('Connection refused')

    with pytest.raises(DataStoreError, match="Can't connect to Redis at 203.0.113.1:18000/5."):
        RedisClientMixin(redis_host='203.0.113.1', redis_port=18000, redis_db=5)


@pytest.mark.parametrize('error', [redis.exceptions.ConnectionError('Connection reset'), redis.exceptions.TimeoutError('Timeout reading')])
def test_healthcheck_raises(redis_client, error):
    mixin = RedisClientMixin(redis_client=redis_client)
    redis_client.ping.side_effect = error

    with pytest.raises(DataStoreError) as exc_info:
        mixin._healthcheck()

    assert exc_info.value.__cause__ is error


def test_healthcheck_without_raising(redis_client, caplog):
    mixin = RedisClientMixin(redis_client=redis_client)
    redis_client.ping.side_effect = redis.exceptions.TimeoutError('Timeout reading')

    with caplog.at_level(logging.WARNING):
        assert mixin._healthcheck(raise_error=False) is False

    assert caplog.records[-1].redisAddress == 'redis.test:6379/0'


def test_healthcheck_passes(redis_client):
    mixin = RedisClientMixin(redis_client=redis_client)

    assert mixin._healthcheck() is True
    assert redis_client.ping.call_count == 2  # construction pings too


# -------------------------------
# 3. Shutdown
# -------------------------------


def test_close_client(redis_client):
    RedisClientMixin(redis_client=redis_client)._close_client()
    redis_client.close.assert_called_once_with()
