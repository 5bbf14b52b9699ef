# core/engine.py

import logging
from typing import Callable, Dict, Iterable, List, Optional, Tuple

from config import EngineConfig
from core.aggregator import Aggregator
from core.clustering import cluster_similar_images
from core.grouping import group_exact_duplicates
from core.hashing import ImageDecodeError, content_hash_task, perceptual_hash_task
from core.progress import ProgressCounters
from core.records import FileRecord, ImageRecord, ScanResult
from core.size_index import SizeIndex
from core.worker_pool import WorkerPool
from utils.file_utils import is_image_path
from utils.system_info import default_worker_count

logger = logging.getLogger(__name__)


class DuplicateFinder:
    """
    Exact and near-duplicate detection over a stream of walker entries.

    Pipeline:
        entries -> size index -> content hash pool --\\
                \\-> (images) -> perceptual hash pool ---> aggregator
        aggregator -> exact grouping + image clustering

    The size index runs on the calling thread so a size never gets
    dispatched twice; both pools run concurrently and feed a single
    aggregator.
    """

    def __init__(self,
                 config: Optional[EngineConfig] = None,
                 progress: Optional[ProgressCounters] = None,
                 content_task: Optional[Callable[[FileRecord], FileRecord]] = None,
                 image_task: Optional[Callable[[FileRecord], ImageRecord]] = None):
        self.config = config or EngineConfig()
        self.config.validate()
        self.progress = progress or ProgressCounters()

        self.content_task = content_task or content_hash_task(
            self.config.hash_algorithm, self.config.chunk_size
        )
        self.image_task = image_task or perceptual_hash_task(self.config.hash_size)

        self._image_extensions = {ext.lower() for ext in self.config.image_extensions}

    def is_image(self, path: str) -> bool:
        return is_image_path(path, self._image_extensions)

    def scan(self, entries: Iterable[Tuple[str, int, bool]]) -> ScanResult:
        """
        Run the whole pipeline over ``(path, size, is_dir)`` entries.

        Per-file failures end up in ``ScanResult.errors``; they never stop
        the scan.
        """
        n_workers = self.config.n_workers or default_worker_count()
        size_index = SizeIndex()

        hash_pool = WorkerPool("content-hash", self.content_task, n_workers,
                               on_result=self._count_hashed)
        image_pool = WorkerPool("image-hash", self.image_task, n_workers,
                                silent_errors=(ImageDecodeError,),
                                on_result=self._count_image)

        aggregator = Aggregator()
        aggregator.attach(hash_pool.output_queue, "content-hash")
        aggregator.attach(image_pool.output_queue, "image-hash")

        try:
            for path, size, is_dir in entries:
                if is_dir:
                    continue
                self.progress.increment('files_observed')

                if self.is_image(path):
                    image_pool.submit(FileRecord(path, size))

                for record in size_index.observe(path, size):
                    hash_pool.submit(record)
        finally:
            hash_pool.join()
            image_pool.join()

        aggregator.wait()
        hash_map, hash_sizes, images = aggregator.snapshot()

        logger.info("Hashed %d files into %d distinct hashes, %d images, "
                    "%d sizes seen only once",
                    sum(len(p) for p in hash_map.values()), len(hash_map),
                    len(images), len(size_index.pending_paths()))

        return ScanResult(
            duplicate_groups=group_exact_duplicates(hash_map),
            image_clusters=cluster_similar_images(images, self.config.hash_threshold),
            hash_map=hash_map,
            hash_sizes=hash_sizes,
            errors=hash_pool.errors + image_pool.errors
        )

    def _count_hashed(self, record: FileRecord):
        self.progress.increment('files_hashed')
        self.progress.increment('bytes_hashed', record.size)

    def _count_image(self, record: ImageRecord):
        self.progress.increment('images_hashed')


def result_from_snapshot(hash_map: Dict[str, List[str]],
                         hash_sizes: Optional[Dict[str, int]] = None) -> ScanResult:
    """Build a result from a reloaded hash map without rerunning the pipeline"""
    return ScanResult(
        duplicate_groups=group_exact_duplicates(hash_map),
        hash_map=hash_map,
        hash_sizes=dict(hash_sizes or {})
    )
