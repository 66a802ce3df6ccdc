"""Unit tests for ShortenerService

The service runs against a real in-memory store; the deletion pipeline is mocked
unless stated otherwise.

Test coverage includes:

1. Shortening
   - Ensures new URLs are created and rendered under the base URL.
   - Confirms duplicates resolve to the existing short URL with created=False.
   - Ensures a duplicate whose record vanished raises DuplicateURLUnresolvedError.
   - Ensures batches render (correlation_id, short_url) pairs in request order.

2. Resolving
   - Ensures live short URLs resolve to their original URL.
   - Confirms deleted short URLs raise ShortURLGoneError and unknown ones ShortURLNotFoundError.

3. Listing
   - Ensures an owner without live URLs gets an empty list.

4. Deleting
   - Ensures only the caller's own live URLs are queued.
   - Confirms a saturated pipeline propagates DeletionQueueFullError.
   - Ensures queued ids are eventually tombstoned by a real pipeline.
"""

from unittest.mock import MagicMock

import pytest

from urlshortener.service import ShortenerService, ShortenResult
from urlshortener.models import BatchRequestRecord
from urlshortener.dao.memory import ShortURLMemoryDAO
from urlshortener.dao.exceptions import ShortURLAlreadyExistsError, ShortURLNotFoundError
from urlshortener.deletion import DeletionQueue
from urlshortener.exceptions import ShortURLGoneError, DuplicateURLUnresolvedError, DeletionQueueFullError


BASE_URL = 'https://sho.rt/'


# -------------------------------
# Fixtures
# -------------------------------


@pytest.fixture
def dao():
    return ShortURLMemoryDAO()


@pytest.fixture
def deletion_queue():
    _deletion_queue = MagicMock(spec=DeletionQueue)
    _deletion_queue.enqueue.side_effect = len
    return _deletion_queue


@pytest.fixture
def service(dao, deletion_queue):
    return ShortenerService(dao, deletion_queue, BASE_URL)


# -------------------------------
# 1. Shortening
# -------------------------------


def test_shorten_new_url(service):
    assert service.shorten('https://ya.ru', 'u1') == ShortenResult(short_url_id=1, short_url='https://sho.rt/1', created=True)


def test_shorten_duplicate_url(service):
    service.shorten('https://ya.ru', 'u1')

    result = service.shorten('https://ya.ru', 'u2')

    assert result == ShortenResult(short_url_id=1, short_url='https://sho.rt/1', created=False)


def test_shorten_duplicate_that_vanished(deletion_queue):
    dao = MagicMock(spec=ShortURLMemoryDAO)
    dao.store.side_effect = ShortURLAlreadyExistsError('https://ya.ru')
    dao.get_by_url.side_effect = ShortURLNotFoundError("Short URL for 'https://ya.ru' doesn't exist.")
    service = ShortenerService(dao, deletion_queue, BASE_URL)

    with pytest.raises(DuplicateURLUnresolvedError):
        service.shorten('https://ya.ru', 'u1')


def test_shorten_batch(service):
    service.shorten('https://ya.ru', 'u0')
    records = [BatchRequestRecord('x', 'https://google.com'), BatchRequestRecord('y', 'https://ya.ru')]

    assert service.shorten_batch(records, 'u1') == [('x', 'https://sho.rt/2'), ('y', 'https://sho.rt/1')]


# -------------------------------
# 2. Resolving
# -------------------------------


def test_resolve(service):
    short_url_id = service.shorten('https://ya.ru', 'u1').short_url_id
    assert service.resolve(short_url_id) == 'https://ya.ru'


def test_resolve_deleted(service, dao):
    short_url_id = service.shorten('https://ya.ru', 'u1').short_url_id
    dao.delete_by_id(short_url_id)

    with pytest.raises(ShortURLGoneError, match="Short URL '1' was deleted."):
        service.resolve(short_url_id)


def test_resolve_unknown(service):
    with pytest.raises(ShortURLNotFoundError):
        service.resolve(42)


# -------------------------------
# 3. Listing
# -------------------------------


def test_user_urls(service, dao):
    service.shorten('https://ya.ru', 'u1')
    service.shorten('https://google.com', 'u1')
    dao.delete_by_id(1)

    assert [row.original_url for row in service.user_urls('u1')] == ['https://google.com']
    assert service.user_urls('u2') == []


# -------------------------------
# 4. Deleting
# -------------------------------


def test_delete_only_own_live_urls(service, dao, deletion_queue):
    mine = service.shorten('https://a.com', 'u1').short_url_id
    theirs = service.shorten('https://b.com', 'u2').short_url_id
    gone = service.shorten('https://c.com', 'u1').short_url_id
    dao.delete_by_id(gone)

    queued = service.delete_urls([theirs, 404, gone, mine], 'u1')

    assert queued == [mine]
    deletion_queue.enqueue.assert_called_once_with([mine])


def test_delete_with_saturated_queue(service, deletion_queue):
    service.shorten('https://a.com', 'u1')
    deletion_queue.enqueue.side_effect = DeletionQueueFullError('Deletion queue is full, 1 ids were not queued.')

    with pytest.raises(DeletionQueueFullError):
        service.delete_urls([1], 'u1')


def test_delete_through_real_pipeline(dao):
    with DeletionQueue(dao, batch_size=10, window=60) as deletion_queue:
        service = ShortenerService(dao, deletion_queue, BASE_URL)
        ids = [service.shorten(f'https://example.com/{i}', 'u1').short_url_id for i in range(3)]
        service.delete_urls(ids[:2], 'u1')

    assert [dao.get_by_id(short_url_id).is_deleted for short_url_id in ids] == [True, True, False]
