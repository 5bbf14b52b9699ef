# core/clustering.py

from typing import Callable, List

from core.hashing import hamming_distance
from core.records import ImageCluster, ImageRecord, SimilarImage


def cluster_similar_images(images: List[ImageRecord],
                           threshold: int = 5,
                           distance: Callable[[int, int], int] = hamming_distance
                           ) -> List[ImageCluster]:
    """
    Partition images into near-duplicate clusters around single seeds.

    The first remaining image becomes the seed and takes every remaining
    image within ``threshold`` of it, in list order. Taken images leave
    the working list for good, so this is a greedy partition and not a
    transitive closure: two images that are each close to a third can
    still end up apart if neither is its seed.

    Members follow the seed in working-list order. Only the order within a
    cluster depends on the scan direction, never which images it holds.
    Clusters with a single member are dropped.

    Time Complexity: O(n^2)
    """
    remaining = list(images)
    clusters = []

    while remaining:
        seed = remaining.pop(0)
        cluster = ImageCluster([SimilarImage(seed.path, 0)])

        still_remaining = []
        for other in remaining:
            d = distance(seed.perceptual_hash, other.perceptual_hash)
            if d <= threshold:
                cluster.images.append(SimilarImage(other.path, d))
            else:
                still_remaining.append(other)
        remaining = still_remaining

        if len(cluster) > 1:
            clusters.append(cluster)

    return clusters
