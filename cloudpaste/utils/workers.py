import logging
import threading
from concurrent.futures import ThreadPoolExecutor, Future
from collections.abc import Callable
from typing import Any


logger = logging.getLogger(__name__)


class BoundedExecutor:
    """Thread pool whose queued + running work is bounded

    `submit()` blocks the caller once `max_workers + queue_size` tasks are in
    flight, which pushes back on whoever produces the work (the event consumer)
    instead of growing an unbounded queue. Exceptions raised by a task are
    logged and never propagate.

    Example:
        >>> executor = BoundedExecutor(max_workers=4, queue_size=64, name='burn')
        >>> executor.submit(service.delete_paste, 'a1b2c3d4')
        >>> executor.shutdown()
    """

    def __init__(self, max_workers: int, queue_size: int = 0, name: str = 'worker'):
        if max_workers < 1:
            raise ValueError(f'max_workers must be a positive integer (given value: {max_workers}).')
        if queue_size < 0:
            raise ValueError(f'queue_size must be a non-negative integer (given value: {queue_size}).')

        self.name = name
        self._executor = ThreadPoolExecutor(max_workers=max_workers, thread_name_prefix=name)
        self._slots = threading.BoundedSemaphore(max_workers + queue_size)

    def submit(self, fn: Callable[..., Any], *args, **kwargs) -> Future:
        self._slots.acquire()
        try:
            future = self._executor.submit(fn, *args, **kwargs)
        except RuntimeError:
            # Executor already shut down
            self._slots.release()
            raise

        future.add_done_callback(self._on_done)
        return future

    def _on_done(self, future: Future) -> None:
        self._slots.release()
        if future.cancelled():
            return
        error = future.exception()
        if error is not None:
            logger.error(
                'Background task failed.',
                exc_info=(type(error), error, error.__traceback__),
                extra={'executor': self.name, 'error': error.__class__.__name__},
            )

    def shutdown(self, wait: bool = True) -> None:
        """Stop accepting work and (by default) wait for queued tasks to finish"""
        self._executor.shutdown(wait=wait)
