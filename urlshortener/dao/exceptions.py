"""Exceptions related to Data Access Objects (DAO) operations.

Every exception carries a class-level `kind` so callers can branch on the
failure category without inspecting messages:

    >>> try:
    ...     dao.store('https://ya.ru', 'u1')
    ... except DAOError as e:
    ...     if e.kind is ErrorKind.DUPLICATE:
    ...         existing = dao.get_by_url('https://ya.ru')

Classes:
    ErrorKind:
        Failure categories shared by all data store backends.

    DAOError:
        Generic base class for DAO-related exceptions.

    ShortURLNotFoundError:
        Raised when no matching short URL exists in the data store.

    ShortURLAlreadyExistsError:
        Raised when inserting a URL that already has a non-deleted row.

    DataStoreError:
        Raised on data store I/O failures (connection issues, disk errors, malformed data).

    DataStoreTimeoutError:
        Raised when a data store call exceeds its deadline.

    StorageConsistencyError:
        Raised when a previous shutdown left the file store in an unknown state.
"""

from enum import StrEnum


class ErrorKind(StrEnum):
    NOT_FOUND = 'not_found'
    DUPLICATE = 'duplicate'
    TIMEOUT = 'timeout'
    IO = 'io'
    CONSISTENCY = 'consistency'


class DAOError(Exception):
    """Generic base class for DAO-related exceptions."""

    kind = ErrorKind.IO


class ShortURLNotFoundError(DAOError):
    """Exception raised when a short URL is not found in the data store."""

    kind = ErrorKind.NOT_FOUND


class ShortURLAlreadyExistsError(DAOError):
    """Exception raised when inserting a URL which already exists in the data store."""

    kind = ErrorKind.DUPLICATE

    def __init__(self, original_url: str, message: str | None = None):
        self.original_url = original_url
        super().__init__(message or f"Short URL for '{original_url}' already exists.")


class DataStoreError(DAOError):
    """Exception raised when there is an error in the data store.

    e.g. connection issues, disk failures, malformed snapshots, etc.
    """

    kind = ErrorKind.IO


class DataStoreTimeoutError(DataStoreError):
    """Exception raised when a data store operation exceeds its deadline."""

    kind = ErrorKind.TIMEOUT


class StorageConsistencyError(DAOError):
    """Exception raised when the store detects an interrupted previous shutdown.

    Requires operator intervention, never resolved automatically.
    """

    kind = ErrorKind.CONSISTENCY
