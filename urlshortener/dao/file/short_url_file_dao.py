"""Snapshot-file implementation of ShortURLBaseDAO

The file store keeps a ShortURLMemoryDAO as its working copy and forwards
every call to it. The file on disk only matters at two moments:

    - startup: the snapshot is decoded and rehydrates the memory indexes;
    - close(): the full memory state is written to `<path>.new`, fsync'ed,
      and atomically renamed over `<path>`.

Crash detection:
    `<path>.new` is created with exclusive-create semantics, so it can only
    exist if a previous shutdown died mid-write. In that case the store refuses
    to start (StorageConsistencyError) instead of guessing which of the two
    files is right. The operator has to move the file away and investigate.

Quiescence:
    All forwarded calls and close() share one lock, and calls after close()
    raise DataStoreError. A snapshot therefore never races an in-flight write.

Example:
    >>> dao = ShortURLFileDAO('/var/lib/shortener/urls.json')
    >>> dao.store('https://ya.ru', 'u1')
    1
    >>> dao.close()  # writes /var/lib/shortener/urls.json
"""

import os
import logging
import functools
import threading
from pathlib import Path
from typing import Any
from collections.abc import Callable, Iterable

from urlshortener.models import ShortURLModel, BatchRequestRecord, BatchResponseRecord
from urlshortener.dao.base import ShortURLBaseDAO
from urlshortener.dao.memory import ShortURLMemoryDAO
from urlshortener.dao.file.snapshot import encode_snapshot, decode_snapshot
from urlshortener.dao.exceptions import DataStoreError, StorageConsistencyError
from urlshortener.constants import SNAPSHOT_TMP_SUFFIX


logger = logging.getLogger(__name__)


def requires_open[F: Callable[..., Any]](method: F) -> F:
    """Serialize a forwarded call with close() and reject it once the store is closed"""

    @functools.wraps(method)
    def wrapper(self, *args, **kwargs):
        with self._lock:
            if self._closed:
                raise DataStoreError(f"File store '{self.path}' is closed.")
            return method(self, *args, **kwargs)

    return wrapper


class ShortURLFileDAO(ShortURLBaseDAO):
    """File-backed Data Access Object (DAO) for short URL records

    Args:
        path (str | os.PathLike):
            Snapshot file. A missing file is an empty store; it is created on close().

    Raises:
        StorageConsistencyError:
            If `<path>.new` exists (a previous shutdown was interrupted).
        DataStoreError:
            If the snapshot can't be read or is malformed.
    """

    def __init__(self, path: str | os.PathLike):
        self.path = Path(path)
        self.tmp_path = self.path.with_name(self.path.name + SNAPSHOT_TMP_SUFFIX)
        self._lock = threading.RLock()
        self._closed = False

        self._check_consistency()
        self._memory = ShortURLMemoryDAO(self._read_snapshot())

        logger.info('Opened file store.', extra={'snapshotPath': str(self.path), 'counter': self._memory.counter})

    @property
    def counter(self) -> int:
        return self._memory.counter

    @requires_open
    def store(self, original_url: str, added_by: str, **kwargs) -> int:
        return self._memory.store(original_url, added_by, **kwargs)

    @requires_open
    def store_batch(self, records: list[BatchRequestRecord], added_by: str, **kwargs) -> list[BatchResponseRecord]:
        return self._memory.store_batch(records, added_by, **kwargs)

    @requires_open
    def get_by_id(self, short_url_id: int, **kwargs) -> ShortURLModel:
        return self._memory.get_by_id(short_url_id, **kwargs)

    @requires_open
    def get_by_id_multi(self, ids: Iterable[int], **kwargs) -> list[ShortURLModel]:
        return self._memory.get_by_id_multi(ids, **kwargs)

    @requires_open
    def get_by_url(self, original_url: str, **kwargs) -> ShortURLModel:
        return self._memory.get_by_url(original_url, **kwargs)

    @requires_open
    def get_all_user_urls(self, added_by: str, **kwargs) -> list[ShortURLModel]:
        return self._memory.get_all_user_urls(added_by, **kwargs)

    @requires_open
    def delete_by_id_multi(self, ids: Iterable[int], **kwargs) -> None:
        self._memory.delete_by_id_multi(ids, **kwargs)

    def ping(self, **kwargs) -> bool:
        return not self._closed

    def close(self) -> None:
        """Write the snapshot and stop serving calls

        The snapshot has no deadline: it either completes or fails loudly.
        A failed snapshot discards its partial `<path>.new`, keeps the previous
        snapshot intact and leaves the store open, so close() can be retried.

        Raises:
            StorageConsistencyError:
                If `<path>.new` appeared since startup.
            DataStoreError:
                On any I/O failure while writing or renaming the snapshot.
        """
        with self._lock:
            if self._closed:
                logger.warning('File store is already closed.', extra={'snapshotPath': str(self.path)})
                return
            self._write_snapshot()
            self._closed = True

    def _check_consistency(self) -> None:
        if self.tmp_path.exists():
            raise StorageConsistencyError(
                f"Temporary snapshot '{self.tmp_path}' still exists. The last shutdown was "
                'unsuccessful and some short URLs are probably lost. Move that file somewhere '
                'else (and look at it later for clues) to start the service.'
            )

    def _read_snapshot(self) -> list[ShortURLModel]:
        try:
            text = self.path.read_text(encoding='utf-8')
        except FileNotFoundError:
            logger.info('No snapshot found, starting empty.', extra={'snapshotPath': str(self.path)})
            return []
        except OSError as e:
            raise DataStoreError(f"Can't read snapshot '{self.path}'.") from e
        return decode_snapshot(text)

    def _write_snapshot(self) -> None:
        rows = self._memory.snapshot()
        payload = encode_snapshot(rows)

        # NOTE: mode 'x' fails if the file exists. Only a concurrent writer (another
        #       process on the same path) can have created it since startup, so never
        #       overwrite or remove it.
        try:
            file = open(self.tmp_path, 'x', encoding='utf-8')
        except FileExistsError as e:
            logger.critical('Temporary snapshot already exists.', extra={'snapshotPath': str(self.tmp_path)})
            raise StorageConsistencyError(
                f"Temporary snapshot '{self.tmp_path}' appeared after startup. Another process "
                'is probably writing snapshots to the same path. Do investigate.'
            ) from e
        except OSError as e:
            logger.critical('Failed to write snapshot.', extra={'snapshotPath': str(self.tmp_path), 'rows': len(rows)})
            raise DataStoreError(f"Failed to write snapshot '{self.tmp_path}'. Short URLs may be lost.") from e

        # From here on the temporary file is ours: on failure discard it, so close() can be retried
        try:
            with file:
                file.write(payload)
                file.flush()
                os.fsync(file.fileno())
            os.replace(self.tmp_path, self.path)
        except OSError as e:
            logger.critical('Failed to write snapshot.', extra={'snapshotPath': str(self.path), 'rows': len(rows)})
            self._discard_tmp()
            raise DataStoreError(f"Failed to write snapshot '{self.path}'. Short URLs may be lost.") from e

        logger.info('Snapshot written.', extra={'snapshotPath': str(self.path), 'rows': len(rows)})

    def _discard_tmp(self) -> None:
        try:
            self.tmp_path.unlink(missing_ok=True)
        except OSError:
            # Left for the operator: the next startup refuses to run while it exists
            logger.critical('Failed to remove temporary snapshot.', extra={'snapshotPath': str(self.tmp_path)}, exc_info=True)
