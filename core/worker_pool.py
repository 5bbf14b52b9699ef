# core/worker_pool.py

import logging
import queue
import threading
from enum import Enum
from typing import Any, Callable, List, Optional, Tuple, Type

from core.records import FileError
from utils.system_info import default_worker_count

logger = logging.getLogger(__name__)


class PoolState(Enum):
    RUNNING = "running"
    DRAINING = "draining"
    JOINED = "joined"


class _EndOfStream:
    def __repr__(self):
        return "END_OF_STREAM"


# Put on a pool's output queue once every worker has exited
END_OF_STREAM = _EndOfStream()

_STOP = object()


class WorkerPool:
    """
    Fixed-size fan-out/fan-in pool of worker threads.

    Workers pull records from a shared input queue, apply ``task`` and put
    the result on the output queue. A failing record is dropped and the
    pool carries on: exceptions listed in ``silent_errors`` are expected
    and only logged at debug level, anything else is logged as a warning
    and kept in ``errors``.

    Lifecycle: running -> draining (close) -> joined (join). After join
    the output queue ends with END_OF_STREAM.
    """

    def __init__(self,
                 name: str,
                 task: Callable[[Any], Any],
                 n_workers: Optional[int] = None,
                 silent_errors: Tuple[Type[BaseException], ...] = (),
                 on_result: Optional[Callable[[Any], None]] = None):
        self.name = name
        self.task = task
        self.n_workers = n_workers or default_worker_count()
        self.silent_errors = silent_errors
        self.on_result = on_result

        self.input_queue = queue.Queue()
        self.output_queue = queue.Queue()
        self.errors: List[FileError] = []

        self._errors_lock = threading.Lock()
        self._state_lock = threading.Lock()
        self._state = PoolState.RUNNING

        self._threads = [
            threading.Thread(target=self._worker_loop,
                             name=f"{name}-worker-{i}",
                             daemon=True)
            for i in range(self.n_workers)
        ]
        for thread in self._threads:
            thread.start()

        logger.debug("Started pool %s with %d workers", name, self.n_workers)

    @property
    def state(self) -> PoolState:
        return self._state

    def submit(self, record):
        """Queue a record for processing"""
        with self._state_lock:
            if self._state is not PoolState.RUNNING:
                raise RuntimeError(f"Pool {self.name} is {self._state.value}")
            self.input_queue.put(record)

    def close(self):
        """Stop accepting work; workers exit once the queue is drained"""
        with self._state_lock:
            if self._state is not PoolState.RUNNING:
                return
            self._state = PoolState.DRAINING
            for _ in self._threads:
                self.input_queue.put(_STOP)

    def join(self, timeout: Optional[float] = None) -> bool:
        """
        Close the pool and wait for every worker to exit.

        Returns False if some worker is still alive after ``timeout``; the
        pool then stays draining and join can be called again.
        """
        self.close()

        for thread in self._threads:
            thread.join(timeout)
            if thread.is_alive():
                return False

        with self._state_lock:
            if self._state is PoolState.DRAINING:
                self._state = PoolState.JOINED
                self.output_queue.put(END_OF_STREAM)
                logger.debug("Pool %s joined", self.name)

        return True

    def _worker_loop(self):
        while True:
            record = self.input_queue.get()
            if record is _STOP:
                return

            try:
                result = self.task(record)
            except self.silent_errors as e:
                logger.debug("%s skipped %s: %s", self.name, record.path, e)
                continue
            except Exception as e:
                self._report(record.path, e)
                continue

            self.output_queue.put(result)
            if self.on_result:
                try:
                    self.on_result(result)
                except Exception as e:
                    logger.warning("%s result callback failed for %s: %s",
                                   self.name, record.path, e)

    def _report(self, path: str, error: Exception):
        logger.warning("Error processing %s: %s", path, error)
        with self._errors_lock:
            self.errors.append(FileError(path, self.name, str(error)))
