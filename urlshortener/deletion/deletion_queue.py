"""Asynchronous, batched soft-deletion of short URLs

Request handlers only validate ownership and enqueue ids; one background
worker thread owns the pending buffer and persists it through
`delete_by_id_multi()` in batches.

Flush triggers:
    - size:  the buffer holds at least `batch_size` ids;
    - timer: `window` seconds passed since the timer was last (re)started
             and the buffer is not empty.

The timer restarts every time it fires and after every successful size-triggered
flush. A failed flush keeps the buffer, so the next trigger retries the same ids.
Deleting an id twice is a no-op, which makes retries safe (at-least-once).

Example:
    >>> with DeletionQueue(dao, batch_size=10, window=10.0) as deletions:
    ...     deletions.enqueue([3, 5, 8])
    3
    >>> # leaving the block flushes the pending ids and stops the worker
"""

import time
import queue
import logging
import threading
from collections.abc import Iterable

from urlshortener.dao.base import ShortURLBaseDAO
from urlshortener.exceptions import DeletionQueueClosedError, DeletionQueueFullError
from urlshortener.constants import DeletionDefaults


logger = logging.getLogger(__name__)

# Wakes the worker up for shutdown
_STOP = object()


class DeletionQueue:
    """Bounded producer/consumer pipeline in front of delete_by_id_multi()

    Args:
        dao (ShortURLBaseDAO):
            Data store the batches are deleted from.
        batch_size (int):
            Flush as soon as this many ids are pending.
        window (float):
            Seconds between timer-triggered flushes.
        maxsize (int):
            Maximum number of pending enqueue() requests not yet picked up by the worker.

    Methods:
        start() -> DeletionQueue:
            Start the worker thread.
        enqueue(ids: Iterable[int]) -> int:
            Schedule ids for deletion without blocking.
        stop(flush: bool = True, timeout: float | None = None) -> None:
            Stop accepting ids, flush what is pending and join the worker.
    """

    def __init__(
        self,
        dao: ShortURLBaseDAO,
        batch_size: int = DeletionDefaults.BATCH_SIZE,
        window: float = DeletionDefaults.WINDOW,
        maxsize: int = DeletionDefaults.QUEUE_SIZE,
    ):
        if batch_size < 1:
            raise ValueError(f'Batch size must be at least 1 (given: {batch_size}).')
        if window <= 0:
            raise ValueError(f'Window must be positive (given: {window}).')

        self.dao = dao
        self.batch_size = batch_size
        self.window = window

        self._queue: queue.Queue = queue.Queue(maxsize=maxsize)
        # Owned by the worker thread only
        self._buffer: list[int] = []
        self._lock = threading.Lock()
        self._closed = False
        self._flush_on_stop = True
        self._worker: threading.Thread | None = None

    @property
    def running(self) -> bool:
        return self._worker is not None and self._worker.is_alive()

    def start(self) -> 'DeletionQueue':
        with self._lock:
            if self._closed:
                raise DeletionQueueClosedError('Deletion queue was stopped and cannot be restarted.')
            if self._worker is not None:
                raise RuntimeError('Deletion worker is already started.')

            self._worker = threading.Thread(target=self._run, name='deletion-worker', daemon=True)
            self._worker.start()

        logger.info('Started deletion worker.', extra={'batchSize': self.batch_size, 'window': self.window})
        return self

    def enqueue(self, ids: Iterable[int]) -> int:
        """Schedule ids for deletion

        The ids of one call are queued together or not at all.

        Returns:
            int: number of ids queued.

        Raises:
            DeletionQueueFullError:
                If the queue is at capacity. Nothing was queued.
            DeletionQueueClosedError:
                If stop() was called, or the worker thread died.
        """
        ids = list(ids)
        with self._lock:
            if self._closed:
                raise DeletionQueueClosedError('Deletion queue is stopped.')
            if self._worker is not None and not self._worker.is_alive():
                raise DeletionQueueClosedError('Deletion worker is dead, nothing would flush the ids.')
            if not ids:
                return 0
            try:
                self._queue.put_nowait(ids)
            except queue.Full:
                logger.warning('Deletion queue is full.', extra={'rejected': len(ids)})
                raise DeletionQueueFullError(f'Deletion queue is full, {len(ids)} ids were not queued.') from None

        logger.debug('Queued deletions.', extra={'shortUrlIds': ids})
        return len(ids)

    def stop(self, flush: bool = True, timeout: float | None = None) -> None:
        """Stop accepting ids and shut the worker down

        Every id queued before stop() reaches the buffer. With flush=True the
        buffer is deleted one last time; otherwise (or if that flush fails) the
        remaining ids are logged as dropped.

        Args:
            flush (bool):
                Perform a final flush. Defaults to True.
            timeout (float | None):
                Seconds to wait for the worker to finish. None waits forever.
        """
        with self._lock:
            if self._closed:
                logger.warning('Deletion queue is already stopped.')
                return
            self._closed = True
            self._flush_on_stop = flush

        if self._worker is not None and self._worker.is_alive():
            self._queue.put(_STOP)
            self._worker.join(timeout)
            if self._worker.is_alive():
                logger.error('Deletion worker did not stop in time.', extra={'timeout': timeout})
                return
            logger.info('Stopped deletion worker.')

        # Never started, or crashed: whatever is left is handled on the caller's thread
        self._drain()

    def _drain(self) -> None:
        while True:
            try:
                item = self._queue.get_nowait()
            except queue.Empty:
                break
            if item is not _STOP:
                self._buffer.extend(item)
        self._finish()

    def _run(self) -> None:
        try:
            self._loop()
        except Exception:
            # The buffer stays for stop() to flush or report
            logger.critical('Deletion worker crashed.', extra={'pending': len(self._buffer)}, exc_info=True)
            return
        self._finish()

    def _loop(self) -> None:
        deadline = time.monotonic() + self.window
        while True:
            # Checked before get() so a steady stream of ids can't starve the timer
            remaining = deadline - time.monotonic()
            if remaining <= 0:
                deadline = time.monotonic() + self.window
                if self._buffer:
                    self._flush()
                continue

            try:
                item = self._queue.get(timeout=remaining)
            except queue.Empty:
                continue

            if item is _STOP:
                break

            self._buffer.extend(item)
            if len(self._buffer) >= self.batch_size and self._flush():
                deadline = time.monotonic() + self.window

    def _flush(self) -> bool:
        ids = list(dict.fromkeys(self._buffer))
        # Any failure keeps the buffer: the worker must outlive a misbehaving data store
        try:
            self.dao.delete_by_id_multi(ids)
        except Exception:
            logger.error('Failed to flush deletion batch, will retry.', extra={'batchSize': len(ids)}, exc_info=True)
            return False

        self._buffer.clear()
        logger.info('Flushed deletion batch.', extra={'batchSize': len(ids)})
        return True

    def _finish(self) -> None:
        if not self._buffer:
            return
        if self._flush_on_stop and self._flush():
            return

        logger.warning('Dropped pending deletions.', extra={'shortUrlIds': list(dict.fromkeys(self._buffer))})
        self._buffer.clear()

    def __enter__(self) -> 'DeletionQueue':
        return self.start()

    def __exit__(self, exc_type, exc_value, traceback) -> None:
        self.stop()
