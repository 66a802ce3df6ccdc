"""In-process implementation of ShortURLBaseDAO

Holds every record in Python dictionaries. Nothing is persisted: this is the
fallback backend for development and tests, and the working copy wrapped by
the file backend.

Indexes:
    - id -> ShortURLModel (all records, deleted ones included)
    - added_by -> [id, ...] (insertion order)
    - original_url -> id (non-deleted records only, enforces URL uniqueness)

Thread safety:
    Request handlers run concurrently, so every public method holds a single
    re-entrant lock for its whole duration. Id assignment, both index updates
    and uniqueness checks happen under that same lock.

Example:
    >>> dao = ShortURLMemoryDAO()
    >>> dao.store('https://ya.ru', 'u1')
    1
    >>> dao.get_all_user_urls('u1')
    [ShortURLModel(id=1, original_url='https://ya.ru', added_by='u1', is_deleted=False)]
"""

import logging
import threading
from collections.abc import Iterable

from beartype import beartype

from urlshortener.models import ShortURLModel, BatchRequestRecord, BatchResponseRecord
from urlshortener.dao.base import ShortURLBaseDAO
from urlshortener.dao.exceptions import DataStoreError, ShortURLAlreadyExistsError, ShortURLNotFoundError
from urlshortener.types import NonEmptyStr


logger = logging.getLogger(__name__)


class ShortURLMemoryDAO(ShortURLBaseDAO):
    """Dictionary-backed Data Access Object (DAO) for short URL records

    Args:
        rows (Iterable[ShortURLModel]):
            Records to rehydrate the indexes from (e.g. a decoded snapshot).
            The id counter resumes from the highest id seen.

    Raises:
        DataStoreError:
            If rows contain repeated ids, or two non-deleted rows share a URL.
    """

    def __init__(self, rows: Iterable[ShortURLModel] = ()):
        self._lock = threading.RLock()
        self._counter = 0
        self._rows: dict[int, ShortURLModel] = {}
        self._user_ids: dict[str, list[int]] = {}
        self._url_ids: dict[str, int] = {}

        for row in rows:
            self._load(row)

    @property
    def counter(self) -> int:
        """Highest id assigned so far (0 when empty)."""
        with self._lock:
            return self._counter

    def snapshot(self) -> list[ShortURLModel]:
        """Return a consistent copy of every record, ordered by id."""
        with self._lock:
            return [self._rows[short_url_id] for short_url_id in sorted(self._rows)]

    @beartype
    def store(self, original_url: NonEmptyStr, added_by: NonEmptyStr, **kwargs) -> int:
        with self._lock:
            if original_url in self._url_ids:
                logger.warning('Rejected duplicate URL.', extra={'originalUrl': original_url})
                raise ShortURLAlreadyExistsError(original_url)
            return self._insert(original_url, added_by)

    @beartype
    def store_batch(self, records: list[BatchRequestRecord], added_by: NonEmptyStr, **kwargs) -> list[BatchResponseRecord]:
        self._validate_batch(records)
        with self._lock:
            response = []
            for record in records:
                short_url_id = self._url_ids.get(record.original_url)
                if short_url_id is None:
                    short_url_id = self._insert(record.original_url, added_by)
                response.append(BatchResponseRecord(correlation_id=record.correlation_id, id=short_url_id))
            return response

    @beartype
    def get_by_id(self, short_url_id: int, **kwargs) -> ShortURLModel:
        with self._lock:
            try:
                return self._rows[short_url_id]
            except KeyError:
                raise ShortURLNotFoundError(f"Short URL with id '{short_url_id}' not found.") from None

    @beartype
    def get_by_id_multi(self, ids: Iterable[int], **kwargs) -> list[ShortURLModel]:
        with self._lock:
            return [self._rows[short_url_id] for short_url_id in sorted(set(ids)) if short_url_id in self._rows]

    @beartype
    def get_by_url(self, original_url: str, **kwargs) -> ShortURLModel:
        with self._lock:
            short_url_id = self._url_ids.get(original_url)
            if short_url_id is None:
                raise ShortURLNotFoundError(f"Short URL for '{original_url}' not found.")
            return self._rows[short_url_id]

    @beartype
    def get_all_user_urls(self, added_by: str, **kwargs) -> list[ShortURLModel]:
        with self._lock:
            rows = [self._rows[short_url_id] for short_url_id in sorted(self._user_ids.get(added_by, []))]
            rows = [row for row in rows if not row.is_deleted]
        if not rows:
            raise ShortURLNotFoundError(f"User '{added_by}' has no short URLs.")
        return rows

    @beartype
    def delete_by_id_multi(self, ids: Iterable[int], **kwargs) -> None:
        with self._lock:
            for short_url_id in ids:
                row = self._rows.get(short_url_id)
                if row is None or row.is_deleted:
                    continue
                self._rows[short_url_id] = row.tombstoned()
                # Free the URL for re-shortening
                if self._url_ids.get(row.original_url) == short_url_id:
                    del self._url_ids[row.original_url]

    def close(self) -> None:
        pass

    def _insert(self, original_url: str, added_by: str) -> int:
        # NOTE: caller must hold self._lock
        self._counter += 1
        short_url_id = self._counter
        self._rows[short_url_id] = ShortURLModel(id=short_url_id, original_url=original_url, added_by=added_by)
        self._user_ids.setdefault(added_by, []).append(short_url_id)
        self._url_ids[original_url] = short_url_id
        return short_url_id

    @beartype
    def _load(self, row: ShortURLModel) -> None:
        if row.id in self._rows:
            raise DataStoreError(f"Repeated short URL id '{row.id}' in loaded rows.")
        if not row.is_deleted:
            if row.original_url in self._url_ids:
                raise DataStoreError(f"URL '{row.original_url}' is stored twice (ids {self._url_ids[row.original_url]} and {row.id}).")
            self._url_ids[row.original_url] = row.id

        self._rows[row.id] = row
        self._user_ids.setdefault(row.added_by, []).append(row.id)
        self._counter = max(self._counter, row.id)
