"""Unit tests for open_short_url_dao().

Test coverage includes:

1. Backend precedence
   - Ensures database DSN beats Redis, Redis beats file, file beats memory.
   - Confirms configuration values are passed on to the selected backend.
"""

from unittest.mock import MagicMock, patch

from urlshortener.utils.config import AppConfig
from urlshortener.dao.factory import open_short_url_dao
from urlshortener.dao.memory import ShortURLMemoryDAO
from urlshortener.dao.file import ShortURLFileDAO
from urlshortener.dao.sql import ShortURLSQLDAO


# -------------------------------
# 1. Backend precedence
# -------------------------------


def test_memory_backend_by_default():
    assert isinstance(open_short_url_dao(AppConfig()), ShortURLMemoryDAO)


def test_file_backend(tmp_path):
    dao = open_short_url_dao(AppConfig(file_storage_path=str(tmp_path / 'urls.json')))

    assert isinstance(dao, ShortURLFileDAO)
    assert dao.path == tmp_path / 'urls.json'


def test_redis_backend_beats_file(tmp_path):
    config = AppConfig(
        app_prefix='urlshortener:test',
        redis_host='redis.test',
        redis_port=6380,
        redis_db=2,
        redis_username='default',
        redis_password='secret',
        redis_timeout=0.5,
        file_storage_path=str(tmp_path / 'urls.json'),
    )

    with patch('urlshortener.dao.redis.ShortURLRedisDAO') as redis_dao:
        dao = open_short_url_dao(config)

    assert dao is redis_dao.return_value
    redis_dao.assert_called_once_with(
        redis_host='redis.test',
        redis_port=6380,
        redis_db=2,
        redis_username='default',
        redis_password='secret',
        redis_timeout=0.5,
        prefix='urlshortener:test',
    )


def test_database_backend_beats_everything(tmp_path):
    config = AppConfig(
        database_dsn=f'sqlite:///{tmp_path / "urls.db"}',
        database_timeout=2.0,
        redis_host='redis.test',
        file_storage_path=str(tmp_path / 'urls.json'),
    )

    dao = open_short_url_dao(config)

    assert isinstance(dao, ShortURLSQLDAO)
    assert dao.timeout == 2.0
    dao.close()


def test_database_backend_receives_timeouts():
    config = AppConfig(database_dsn='postgresql+psycopg2://shortener@db/urls', database_timeout=1.5, database_connect_timeout=3.0)

    with patch('urlshortener.dao.sql.ShortURLSQLDAO', MagicMock()) as sql_dao:
        open_short_url_dao(config)

    sql_dao.assert_called_once_with(dsn='postgresql+psycopg2://shortener@db/urls', timeout=1.5, connect_timeout=3.0)
