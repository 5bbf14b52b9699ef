"""
File operation utilities
"""

import logging
import os
import stat
from pathlib import Path
from typing import Iterable, Iterator, NamedTuple

logger = logging.getLogger(__name__)


class FileEntry(NamedTuple):
    path: str
    size: int
    is_dir: bool


def walk_paths(paths: Iterable[str], min_size: int = 0) -> Iterator[FileEntry]:
    """
    Lazily walk every root and yield its directories and files.

    Files smaller than ``min_size`` are left out. Symbolic links are not
    followed, and a file reached through overlapping roots is yielded only
    once. Unreadable directories and entries that vanish while walking are
    logged and skipped.
    """
    seen = set()

    def visit(path):
        entry = _file_entry(path)
        if entry is None or entry.size < min_size:
            return None
        real = os.path.realpath(path)
        if real in seen:
            logger.debug("Already seen %s", path)
            return None
        seen.add(real)
        return entry

    for root in paths:
        if os.path.isfile(root):
            entry = visit(root)
            if entry is not None:
                yield entry
            continue

        if not os.path.isdir(root):
            logger.warning("Path not found: %s", root)
            continue

        for dirpath, dirnames, filenames in os.walk(root, onerror=_log_walk_error):
            dirnames.sort()
            yield FileEntry(dirpath, 0, True)

            for name in sorted(filenames):
                entry = visit(os.path.join(dirpath, name))
                if entry is not None:
                    yield entry


def _file_entry(path: str):
    try:
        st = os.lstat(path)
    except OSError as e:
        logger.warning("Cannot stat %s: %s", path, e)
        return None
    # Links and special files are never hashed
    if not stat.S_ISREG(st.st_mode):
        return None
    return FileEntry(path, st.st_size, False)


def _log_walk_error(error: OSError):
    logger.warning("Cannot read directory %s: %s", error.filename, error)


def is_image_path(path: str, extensions: Iterable[str]) -> bool:
    """Check the extension against a list such as ['.jpg', '.png']"""
    return Path(path).suffix.lower() in {ext.lower() for ext in extensions}


def format_file_size(size_bytes: int) -> str:
    """Format file size in human readable format"""
    for unit in ['B', 'KB', 'MB', 'GB', 'TB']:
        if size_bytes < 1024.0:
            return f"{size_bytes:.2f} {unit}"
        size_bytes /= 1024.0
    return f"{size_bytes:.2f} PB"
