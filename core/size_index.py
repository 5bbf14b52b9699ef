# core/size_index.py

"""
Size-based pre-filter.

A file can only have an exact duplicate if another file has the same size,
so nothing is hashed until a second file of a given size shows up.
"""

from dataclasses import dataclass
from typing import Dict, List, Union

from core.records import FileRecord


@dataclass(frozen=True)
class Pending:
    """Exactly one file of this size has been seen and not hashed"""
    path: str


class Dispatched:
    """Two or more files of this size have been sent for hashing"""

    def __repr__(self):
        return "DISPATCHED"


DISPATCHED = Dispatched()

SizeState = Union[Pending, Dispatched]


class SizeIndex:
    """
    Maps file size to its dispatch state.

    Not thread safe: it must be owned by the single driver that feeds the
    hashing pool. A missing key means no file of that size has been seen.
    """

    def __init__(self):
        self._states: Dict[int, SizeState] = {}

    def observe(self, path: str, size: int) -> List[FileRecord]:
        """
        Record a file and return the records that must be hashed now.

        First file of a size: nothing. Second: the new file and the pending
        one. Any later file: just the new one.
        """
        state = self._states.get(size)

        if state is None:
            self._states[size] = Pending(path)
            return []

        if isinstance(state, Pending):
            self._states[size] = DISPATCHED
            return [FileRecord(path, size), FileRecord(state.path, size)]

        return [FileRecord(path, size)]

    def state(self, size: int):
        """Current state for a size, or None if it was never seen"""
        return self._states.get(size)

    def pending_paths(self) -> List[str]:
        """Files whose size turned out to be unique"""
        return [s.path for s in self._states.values() if isinstance(s, Pending)]

    def __len__(self):
        return len(self._states)
