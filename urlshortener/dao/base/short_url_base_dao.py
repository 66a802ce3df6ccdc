"""Abstract base class for ShortURL data access objects (DAOs).

This class establishes a consistent contract for all ShortURL DAO implementations,
regardless of the underlying storage mechanism (memory, snapshot file, Redis, SQL).

Responsibilities:
    - Provide an interface for storing, retrieving and soft-deleting ShortURLModel records.
    - Standardize error handling across multiple data store implementations.
    - Give every backend identical uniqueness, not-found and tombstone semantics.

Example:
    Typical usage with a datastore-specific implementation:

        >>> from urlshortener.dao.memory import ShortURLMemoryDAO

        >>> dao = ShortURLMemoryDAO()
        >>> dao.store('https://ya.ru', 'u1')
        1
        >>> dao.store('https://ya.ru', 'u1')
        Traceback (most recent call last):
            ...
        urlshortener.dao.exceptions.ShortURLAlreadyExistsError: Short URL for 'https://ya.ru' already exists.

        >>> dao.get_by_url('https://ya.ru').id
        1
        >>> dao.delete_by_id(1)
        >>> dao.get_by_id(1).is_deleted
        True
"""

from abc import ABC, abstractmethod
from collections.abc import Iterable

from urlshortener.models import ShortURLModel, BatchRequestRecord, BatchResponseRecord


class ShortURLBaseDAO(ABC):
    """Interface for ShortURL data access objects (DAOs).

    Every method accepts a `timeout` keyword argument (seconds) bounding the call.
    Backends without external I/O accept and ignore it.

    Methods:
        store(original_url: str, added_by: str, **kwargs) -> int:
            Insert a new record and return its id.
            Raises ShortURLAlreadyExistsError if a non-deleted record has the same URL.

        store_batch(records: list[BatchRequestRecord], added_by: str, **kwargs) -> list[BatchResponseRecord]:
            Insert many records at once. Duplicates resolve to the existing id.

        get_by_id(short_url_id: int, **kwargs) -> ShortURLModel:
            Retrieve a record by id, deleted or not.
            Raises ShortURLNotFoundError if no record has that id.

        get_by_id_multi(ids: Iterable[int], **kwargs) -> list[ShortURLModel]:
            Retrieve the records that exist among ids, ordered by id.

        get_by_url(original_url: str, **kwargs) -> ShortURLModel:
            Retrieve the non-deleted record for a URL.
            Raises ShortURLNotFoundError if there is none.

        get_all_user_urls(added_by: str, **kwargs) -> list[ShortURLModel]:
            Retrieve all non-deleted records of an owner, ordered by id.
            Raises ShortURLNotFoundError if the owner has none.

        delete_by_id(short_url_id: int, **kwargs) -> None
        delete_by_id_multi(ids: Iterable[int], **kwargs) -> None:
            Tombstone records. Unknown or already deleted ids are ignored.

        ping(**kwargs) -> bool:
            Healthcheck the data store.

        close() -> None:
            Release backend resources (the file backend writes its snapshot here).

    All methods raise DataStoreError (or DataStoreTimeoutError) on data store failures.

    Subclassing:
        Datastore-specific implementations must extend this class and implement all
        abstract methods.
    """

    @abstractmethod
    def store(self, original_url: str, added_by: str, **kwargs) -> int:
        """Insert a new short URL record.

        Args:
            original_url (str):
                Non-empty URL to shorten.
            added_by (str):
                Non-empty owner identity.
            **kwargs:
                Additional keyword arguments (e.g. timeout), used by data store.

        Returns:
            int: The id assigned to the new record.

        Raises:
            ShortURLAlreadyExistsError:
                If a non-deleted record with the same URL already exists.
                Call get_by_url() to discover its id.

            DataStoreError:
                If there is an error in the data store.
        """
        pass

    @abstractmethod
    def store_batch(self, records: list[BatchRequestRecord], added_by: str, **kwargs) -> list[BatchResponseRecord]:
        """Insert several short URL records in one logical operation.

        A URL that already has a non-deleted record, or appears more than once in
        the batch, resolves to the id of that existing record instead of failing.

        Args:
            records (list[BatchRequestRecord]):
                URLs to shorten with caller-chosen correlation ids.
            added_by (str):
                Non-empty owner identity.
            **kwargs:
                Additional keyword arguments (e.g. timeout), used by data store.

        Returns:
            list[BatchResponseRecord]:
                Exactly one response per request record, in request order,
                each echoing the request's correlation id.

        Raises:
            DataStoreError:
                If there is an error in the data store.
        """
        pass

    @abstractmethod
    def get_by_id(self, short_url_id: int, **kwargs) -> ShortURLModel:
        """Retrieve a record by id, including tombstoned ones.

        Raises:
            ShortURLNotFoundError:
                If no record has the given id.

            DataStoreError:
                If there is an error in the data store.
        """
        pass

    @abstractmethod
    def get_by_id_multi(self, ids: Iterable[int], **kwargs) -> list[ShortURLModel]:
        """Retrieve records by id (best-effort).

        Unknown ids are omitted from the result rather than failing the call.

        Returns:
            list[ShortURLModel]: Found records ordered by id (possibly empty).
        """
        pass

    @abstractmethod
    def get_by_url(self, original_url: str, **kwargs) -> ShortURLModel:
        """Retrieve the non-deleted record of a URL.

        Raises:
            ShortURLNotFoundError:
                If no non-deleted record has the given URL.
        """
        pass

    @abstractmethod
    def get_all_user_urls(self, added_by: str, **kwargs) -> list[ShortURLModel]:
        """Retrieve all non-deleted records of an owner.

        Raises:
            ShortURLNotFoundError:
                If the owner has no non-deleted records. Callers should treat
                this as an empty result.
        """
        pass

    def delete_by_id(self, short_url_id: int, **kwargs) -> None:
        """Tombstone a single record. See delete_by_id_multi()."""
        self.delete_by_id_multi([short_url_id], **kwargs)

    @abstractmethod
    def delete_by_id_multi(self, ids: Iterable[int], **kwargs) -> None:
        """Tombstone records by id.

        The deletion flag only ever goes from False to True. Unknown and already
        deleted ids are ignored, so repeating a deletion is always safe.

        Raises:
            DataStoreError:
                If there is an error in the data store.
        """
        pass

    def ping(self, **kwargs) -> bool:
        """Healthcheck the data store. In-process stores are always reachable."""
        return True

    @abstractmethod
    def close(self) -> None:
        """Release data store resources.

        Must be called once, at shutdown, after callers stopped issuing requests.
        """
        pass

    @staticmethod
    def _validate_batch(records: list[BatchRequestRecord]) -> None:
        """Reject batch records with an empty URL before touching the data store

        Raises:
            ValueError:
                If any record has an empty original_url.
        """
        empty = [record.correlation_id for record in records if not record.original_url]
        if empty:
            raise ValueError(f'Batch records have an empty URL (correlation ids: {empty}).')

    def __enter__(self) -> 'ShortURLBaseDAO':
        return self

    def __exit__(self, exc_type, exc_value, traceback) -> None:
        self.close()
