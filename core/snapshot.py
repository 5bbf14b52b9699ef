# core/snapshot.py

"""
Save and reload the aggregated hash map so results can be reviewed or
cleaned up later without rescanning.

Two JSON layouts are understood:

    flat:    {"<hash>": ["path", ...], ...}
    legacy:  {"<size>": {"<hash>": ["path", ...], ...}, ...}

In the legacy layout an empty hash key marks a file that was never hashed
because its size was unique; such entries are ignored on load.
"""

import json
import logging
from pathlib import Path
from typing import Dict, List, Optional, Tuple

logger = logging.getLogger(__name__)


class SnapshotError(Exception):
    """Snapshot file cannot be read or has an unexpected layout"""


def save_snapshot(path: str,
                  hash_map: Dict[str, List[str]],
                  hash_sizes: Optional[Dict[str, int]] = None,
                  legacy: bool = False):
    """Write the hash map as JSON, optionally in the legacy size layout"""
    if legacy:
        data = to_legacy_layout(hash_map, hash_sizes or {})
    else:
        data = {h: list(paths) for h, paths in hash_map.items()}

    with open(path, 'w') as f:
        json.dump(data, f, indent=2)

    logger.info("Saved %d hashes to %s", len(hash_map), path)


def to_legacy_layout(hash_map: Dict[str, List[str]],
                     hash_sizes: Dict[str, int]) -> Dict[str, Dict[str, List[str]]]:
    by_size = {}
    for content_hash, paths in hash_map.items():
        if content_hash not in hash_sizes:
            raise ValueError(f"No size recorded for hash {content_hash}")
        size_key = str(hash_sizes[content_hash])
        by_size.setdefault(size_key, {})[content_hash] = list(paths)
    return by_size


def load_snapshot(path: str) -> Tuple[Dict[str, List[str]], Dict[str, int]]:
    """
    Read a snapshot in either layout.

    Returns the hash map and the sizes known for each hash (empty for the
    flat layout). Raises SnapshotError on any failure.
    """
    if not Path(path).is_file():
        raise SnapshotError(f"Snapshot not found: {path}")

    try:
        with open(path, 'r') as f:
            data = json.load(f)
    except (OSError, ValueError) as e:
        raise SnapshotError(f"Cannot read snapshot {path}: {e}") from e

    if not isinstance(data, dict):
        raise SnapshotError(f"Snapshot {path} must contain a JSON object")

    if data and all(isinstance(v, dict) for v in data.values()):
        return _parse_legacy(data, path)

    hash_map = {}
    for content_hash, paths in data.items():
        hash_map[content_hash] = _check_paths(paths, path)
    return hash_map, {}


def _parse_legacy(data: dict, path: str) -> Tuple[Dict[str, List[str]], Dict[str, int]]:
    hash_map: Dict[str, List[str]] = {}
    hash_sizes: Dict[str, int] = {}

    for size_key, by_hash in data.items():
        try:
            size = int(size_key)
        except ValueError:
            raise SnapshotError(f"Invalid size key {size_key!r} in {path}")

        for content_hash, paths in by_hash.items():
            paths = _check_paths(paths, path)
            if content_hash == "":
                continue
            hash_map.setdefault(content_hash, []).extend(paths)
            hash_sizes[content_hash] = size

    return hash_map, hash_sizes


def _check_paths(paths, path: str) -> List[str]:
    if not isinstance(paths, list) or not all(isinstance(p, str) for p in paths):
        raise SnapshotError(f"Snapshot {path} has a malformed path list")
    return list(paths)
