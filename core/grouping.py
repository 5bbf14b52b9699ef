# core/grouping.py

from typing import Dict, List


def group_exact_duplicates(hash_map: Dict[str, List[str]]) -> Dict[str, List[str]]:
    """
    Keep only content hashes shared by more than one file.

    Pure function over the finished aggregated map; member order is
    preserved.
    """
    return {
        content_hash: list(paths)
        for content_hash, paths in hash_map.items()
        if len(paths) > 1
    }
