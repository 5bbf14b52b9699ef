# utils/progress_display.py

import threading

from tqdm import tqdm

from core.progress import ProgressCounters


class TqdmProgress:
    """
    Render scan counters as tqdm bars.

    Listener callbacks run on worker threads; bar updates share one lock.
    """

    def __init__(self, counters: ProgressCounters, disable: bool = False):
        self._lock = threading.Lock()
        self._bars = {
            'files_observed': tqdm(desc="Files found", unit="file",
                                   position=0, disable=disable),
            'files_hashed': tqdm(desc="Files hashed", unit="file",
                                 position=1, disable=disable),
            'images_hashed': tqdm(desc="Images hashed", unit="img",
                                  position=2, disable=disable),
        }
        counters.subscribe(self.update)

    def update(self, name: str, value: int):
        bar = self._bars.get(name)
        if bar is None:
            return
        with self._lock:
            # Callbacks can arrive out of order
            if value > bar.n:
                bar.update(value - bar.n)

    def close(self):
        with self._lock:
            for bar in self._bars.values():
                bar.close()

    def __enter__(self):
        return self

    def __exit__(self, *exc):
        self.close()
