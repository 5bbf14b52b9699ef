# core/aggregator.py

import logging
import queue
import threading
from typing import Dict, List, Optional, Tuple

from core.records import FileRecord, ImageRecord
from core.worker_pool import END_OF_STREAM

logger = logging.getLogger(__name__)


class Aggregator:
    """
    Single merge point for both hashing pipelines.

    Each attached output queue gets its own drain thread. All of them
    write the shared maps under one lock, held for a single insert only.
    Once every attached queue has delivered END_OF_STREAM the completion
    event is set and the maps may be read.
    """

    def __init__(self):
        self.duplicate_groups: Dict[str, List[str]] = {}
        self.hash_sizes: Dict[str, int] = {}
        self.images: List[ImageRecord] = []

        self._lock = threading.Lock()
        self._threads: List[threading.Thread] = []
        self._open_sources = 0
        self._started = False
        self._done = threading.Event()

    def attach(self, source: queue.Queue, name: str = "source"):
        """Drain ``source`` until END_OF_STREAM"""
        with self._lock:
            if self._done.is_set():
                raise RuntimeError("Aggregator already completed")
            self._open_sources += 1
            self._started = True

        thread = threading.Thread(target=self._drain,
                                  args=(source,),
                                  name=f"aggregator-{name}",
                                  daemon=True)
        self._threads.append(thread)
        thread.start()

    def _drain(self, source: queue.Queue):
        while True:
            item = source.get()
            if item is END_OF_STREAM:
                break
            self.add(item)

        with self._lock:
            self._open_sources -= 1
            finished = self._open_sources == 0

        if finished:
            logger.debug("Aggregator drained all sources")
            self._done.set()

    def add(self, item):
        """Merge one completed record"""
        if isinstance(item, FileRecord):
            with self._lock:
                self.duplicate_groups.setdefault(item.content_hash, []).append(item.path)
                self.hash_sizes[item.content_hash] = item.size
        elif isinstance(item, ImageRecord):
            with self._lock:
                self.images.append(item)
        else:
            raise TypeError(f"Cannot aggregate {type(item).__name__}")

    def wait(self, timeout: Optional[float] = None) -> bool:
        """Block until every source is drained"""
        if not self._started:
            self._done.set()
        return self._done.wait(timeout)

    @property
    def completed(self) -> bool:
        return self._done.is_set()

    def snapshot(self) -> Tuple[Dict[str, List[str]], Dict[str, int], List[ImageRecord]]:
        """Copies of the finished maps"""
        if not self._done.is_set():
            raise RuntimeError("Aggregator has not completed")

        with self._lock:
            groups = {h: list(paths) for h, paths in self.duplicate_groups.items()}
            sizes = dict(self.hash_sizes)
            images = list(self.images)

        return groups, sizes, images
