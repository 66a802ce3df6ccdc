"""Application facade over a short URL data store and the deletion pipeline

HTTP handlers call ShortenerService and translate its results and exceptions
into responses:

    shorten()        -> 201 Created, or 409 Conflict when created=False
    shorten_batch()  -> 201 Created
    resolve()        -> 307 redirect; ShortURLNotFoundError 404, ShortURLGoneError 410
    user_urls()      -> 200, or 204 No Content for an empty list
    delete_urls()    -> 202 Accepted

Example:
    >>> service = ShortenerService(ShortURLMemoryDAO(), deletion_queue, 'http://localhost:8080/')
    >>> service.shorten('https://ya.ru', 'u1')
    ShortenResult(short_url_id=1, short_url='http://localhost:8080/1', created=True)
    >>> service.shorten('https://ya.ru', 'u2')
    ShortenResult(short_url_id=1, short_url='http://localhost:8080/1', created=False)
"""

import logging
from dataclasses import dataclass
from collections.abc import Iterable

from urlshortener.models import ShortURLModel, BatchRequestRecord
from urlshortener.dao.base import ShortURLBaseDAO
from urlshortener.dao.exceptions import ShortURLAlreadyExistsError, ShortURLNotFoundError
from urlshortener.deletion import DeletionQueue
from urlshortener.exceptions import ShortURLGoneError, DuplicateURLUnresolvedError
from urlshortener.utils.helpers import get_short_url


logger = logging.getLogger(__name__)


@dataclass(frozen=True)
class ShortenResult:
    short_url_id: int
    short_url: str
    # False when the URL was already shortened (possibly by someone else)
    created: bool


class ShortenerService:
    """Use cases of the URL shortener

    Args:
        dao (ShortURLBaseDAO):
            Data store of short URL records.
        deletion_queue (DeletionQueue):
            Started deletion pipeline in front of the same data store.
        base_url (str):
            Public base URL the short links are rendered under.
    """

    def __init__(self, dao: ShortURLBaseDAO, deletion_queue: DeletionQueue, base_url: str):
        self.dao = dao
        self.deletion_queue = deletion_queue
        self.base_url = base_url

    def short_url(self, short_url_id: int) -> str:
        return get_short_url(self.base_url, short_url_id)

    def shorten(self, original_url: str, added_by: str) -> ShortenResult:
        """Shorten a URL, resolving an existing short URL for a duplicate

        Raises:
            DuplicateURLUnresolvedError:
                If the URL was rejected as duplicate but its record vanished
                (deleted) before it could be looked up.
        """
        try:
            short_url_id = self.dao.store(original_url, added_by)
        except ShortURLAlreadyExistsError:
            try:
                short_url_id = self.dao.get_by_url(original_url).id
            except ShortURLNotFoundError as e:
                raise DuplicateURLUnresolvedError(f"'{original_url}' was reported as duplicate but can't be found.") from e
            logger.info('URL already shortened.', extra={'shortUrlId': short_url_id, 'addedBy': added_by})
            return ShortenResult(short_url_id=short_url_id, short_url=self.short_url(short_url_id), created=False)

        logger.info('Shortened URL.', extra={'shortUrlId': short_url_id, 'addedBy': added_by})
        return ShortenResult(short_url_id=short_url_id, short_url=self.short_url(short_url_id), created=True)

    def shorten_batch(self, records: list[BatchRequestRecord], added_by: str) -> list[tuple[str, str]]:
        """Shorten many URLs, returning (correlation_id, short_url) pairs in request order"""
        response = self.dao.store_batch(records, added_by)
        logger.info('Shortened URL batch.', extra={'batchSize': len(records), 'addedBy': added_by})
        return [(record.correlation_id, self.short_url(record.id)) for record in response]

    def resolve(self, short_url_id: int) -> str:
        """Return the original URL behind a short URL id

        Raises:
            ShortURLNotFoundError:
                If the id was never assigned.
            ShortURLGoneError:
                If the short URL was deleted by its owner.
        """
        short_url = self.dao.get_by_id(short_url_id)
        if short_url.is_deleted:
            raise ShortURLGoneError(f"Short URL '{short_url_id}' was deleted.")
        return short_url.original_url

    def user_urls(self, added_by: str) -> list[ShortURLModel]:
        try:
            return self.dao.get_all_user_urls(added_by)
        except ShortURLNotFoundError:
            return []

    def delete_urls(self, ids: Iterable[int], added_by: str) -> list[int]:
        """Schedule deletion of the caller's own live short URLs

        Ids that are unknown, already deleted or owned by somebody else are
        silently skipped.

        Returns:
            list[int]: ids actually queued, ordered by id.

        Raises:
            DeletionQueueFullError:
                If the deletion pipeline is saturated. Nothing was queued.
        """
        owned = [row.id for row in self.dao.get_by_id_multi(ids) if row.added_by == added_by and not row.is_deleted]
        self.deletion_queue.enqueue(owned)
        logger.info('Accepted deletion request.', extra={'shortUrlIds': owned, 'addedBy': added_by})
        return owned
