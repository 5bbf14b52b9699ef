# core/progress.py

import threading
from typing import Callable, Dict, List

COUNTERS = ('files_observed', 'bytes_hashed', 'files_hashed', 'images_hashed')


class ProgressCounters:
    """
    Monotonically increasing scan counters.

    Safe to update from any worker thread. Listeners are optional and are
    called with the counter name and its new value; with no listener an
    update is just an increment.
    """

    def __init__(self):
        self._lock = threading.Lock()
        self._values = {name: 0 for name in COUNTERS}
        self._listeners: List[Callable[[str, int], None]] = []

    def subscribe(self, listener: Callable[[str, int], None]):
        self._listeners.append(listener)

    def increment(self, name: str, amount: int = 1):
        if name not in self._values:
            raise KeyError(name)
        if amount < 0:
            raise ValueError("Counters only increase")

        with self._lock:
            self._values[name] += amount
            value = self._values[name]

        for listener in self._listeners:
            listener(name, value)

    def __getitem__(self, name: str) -> int:
        with self._lock:
            return self._values[name]

    def snapshot(self) -> Dict[str, int]:
        with self._lock:
            return dict(self._values)
